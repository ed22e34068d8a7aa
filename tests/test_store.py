"""EntityStore queries and the explicit delete cascades."""

from sqlalchemy import func, select

from iam.models import Permission
from iam.models.group import user_groups
from iam.models.role import group_roles, role_permissions
from iam.models.permission import PermissionAction
from iam.rbac.resolver import PermissionResolver
from iam.rbac.store import EntityStore
from iam.services import group_service, module_service, permission_service, role_service, user_service


async def _count(session_factory, table, **where) -> int:
    async with session_factory() as session:
        stmt = select(func.count()).select_from(table)
        for column, value in where.items():
            stmt = stmt.where(table.c[column] == value)
        return (await session.execute(stmt)).scalar_one()


async def test_store_walks_the_graph(db, graph):
    module_id = await graph.module("Reports")
    read = await graph.permission(module_id, "read", name="Reports.read")
    user_id = await graph.user()
    g1, g2 = await graph.group(), await graph.group()
    role_id = await graph.role()
    await graph.add_to_group(user_id, g2)
    await graph.add_to_group(user_id, g1)
    await graph.grant_role(g1, role_id)
    await graph.grant_role(g2, role_id)
    await graph.grant_permission(role_id, read)

    store = EntityStore(db)
    assert (await store.get_user(user_id)).is_active is True
    assert [g.id for g in await store.groups_for_user(user_id)] == [g1, g2]
    assert [r.id for r in await store.roles_for_groups([g1, g2])] == [role_id]
    [granted] = await store.permissions_for_roles([role_id])
    assert (granted.id, granted.module_name, granted.action) == (read, "Reports", PermissionAction.READ)
    assert (await store.get_module_by_name("Reports")).id == module_id
    assert await store.get_module(module_id + 1000) is None
    assert await store.get_user(424242) is None


async def test_store_empty_inputs(db):
    store = EntityStore(db)
    assert await store.roles_for_groups([]) == []
    assert await store.permissions_for_roles([]) == []


async def test_resolver_over_database(db, seeded, admin_id, graph):
    newcomer = await graph.user()

    resolver = PermissionResolver(EntityStore(db))
    assert len(await resolver.resolve_permissions(admin_id)) == 24
    assert await resolver.has_permission(admin_id, "Users", "delete") is True
    assert await resolver.has_permission(newcomer, "Users", "read") is False


# ── Cascades ─────────────────────────────────────────────────────────

async def test_delete_user_removes_memberships(session_factory, graph):
    user_id, group_id = await graph.user(), await graph.group()
    await graph.add_to_group(user_id, group_id)

    async with session_factory() as session:
        await user_service.delete_user(user_id, session)
        await session.commit()

    assert await _count(session_factory, user_groups, user_id=user_id) == 0
    assert await _count(session_factory, user_groups, group_id=group_id) == 0


async def test_delete_group_removes_members_and_roles(session_factory, graph):
    user_id, group_id, role_id = await graph.user(), await graph.group(), await graph.role()
    await graph.add_to_group(user_id, group_id)
    await graph.grant_role(group_id, role_id)

    async with session_factory() as session:
        await group_service.delete_group(group_id, session)
        await session.commit()

    assert await _count(session_factory, user_groups, group_id=group_id) == 0
    assert await _count(session_factory, group_roles, group_id=group_id) == 0
    async with session_factory() as session:
        assert await user_service.get_user_by_id(user_id, session)
        assert await role_service.get_role_by_id(role_id, session)


async def test_delete_role_removes_group_links_and_grants(session_factory, graph):
    group_id, role_id = await graph.group(), await graph.role()
    module_id = await graph.module()
    perm = await graph.permission(module_id, "create")
    await graph.grant_role(group_id, role_id)
    await graph.grant_permission(role_id, perm)

    async with session_factory() as session:
        await role_service.delete_role(role_id, session)
        await session.commit()

    assert await _count(session_factory, group_roles, role_id=role_id) == 0
    assert await _count(session_factory, role_permissions, role_id=role_id) == 0
    async with session_factory() as session:
        assert await permission_service.get_permission_by_id(perm, session)


async def test_delete_module_removes_permissions_and_grants(session_factory, graph):
    module_id, role_id = await graph.module(), await graph.role()
    perms = [await graph.permission(module_id, action) for action in ("create", "read")]
    other = await graph.permission(await graph.module(), "read")
    for perm in (*perms, other):
        await graph.grant_permission(role_id, perm)

    async with session_factory() as session:
        await module_service.delete_module(module_id, session)
        await session.commit()

    async with session_factory() as session:
        remaining = (await session.execute(select(Permission.id))).scalars().all()
    assert remaining == [other]
    assert await _count(session_factory, role_permissions, role_id=role_id) == 1


async def test_delete_permission_removes_grants(session_factory, graph):
    role_id, module_id = await graph.role(), await graph.module()
    perm = await graph.permission(module_id, "update")
    await graph.grant_permission(role_id, perm)

    async with session_factory() as session:
        await permission_service.delete_permission(perm, session)
        await session.commit()

    assert await _count(session_factory, role_permissions, permission_id=perm) == 0
