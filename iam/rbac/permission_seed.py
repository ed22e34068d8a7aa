"""
Module, permission & administrator seeding script.

Populates the modules that guard this API, one permission per
(module, action), a `Super Admin` role holding all of them, an
`Administrators` group holding that role, and the bootstrap admin
user (from settings) as its member.  It is IDEMPOTENT — safe to
re-run; missing rows and links are filled in, nothing is duplicated.

Usage:
    python -m iam.rbac.permission_seed
"""

import asyncio
import logging

from sqlalchemy import Table, insert, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from iam.core.config import settings
from iam.core.database import enable_sqlite_foreign_keys
from iam.core.security import hash_password
from iam.models.base import Base
from iam.models.group import Group, user_groups
from iam.models.module import Module
from iam.models.permission import Permission, PermissionAction
from iam.models.role import Role, group_roles, role_permissions
from iam.models.user import User

logger = logging.getLogger(__name__)

# ────────────────────────────────────────────────────────────────────
# 1.  CANONICAL MODULE LIST
#
#     These names are referenced by `require_permission(...)` in the
#     controllers; renaming one here without the other turns every
#     request on those routes into a 500.
# ────────────────────────────────────────────────────────────────────
MODULES: dict[str, str] = {
    "Users": "User accounts",
    "Groups": "User groups",
    "Roles": "Roles granted to groups",
    "Modules": "Protected resources",
    "Permissions": "Module / action grants",
    "Assignments": "User-group, group-role and role-permission links",
}

SUPER_ADMIN_ROLE = "Super Admin"
ADMIN_GROUP = "Administrators"


def permission_name(module: str, action: PermissionAction) -> str:
    return f"{module}.{action.value}"


async def _ensure_named(session: AsyncSession, model, name: str, description: str):
    result = await session.execute(select(model).where(model.name == name))
    obj = result.scalar_one_or_none()
    if obj is None:
        obj = model(name=name, description=description)
        session.add(obj)
        await session.flush()
        logger.info("Seeded %s '%s'", model.__name__.lower(), name)
    return obj


async def _ensure_links(session: AsyncSession, table: Table, owner: str, owner_id: int, target: str, ids: list[int]) -> int:
    existing = set(
        (await session.execute(select(table.c[target]).where(table.c[owner] == owner_id))).scalars().all()
    )
    missing = [i for i in ids if i not in existing]
    if missing:
        await session.execute(insert(table), [{owner: owner_id, target: i} for i in missing])
    return len(missing)


async def _create_admin(session: AsyncSession) -> User | None:
    clash = await session.execute(select(User.id).where(User.username == settings.ADMIN_USERNAME))
    if clash.first() is not None:
        # Another account owns the username; it is not promoted.
        logger.warning(
            "Username '%s' belongs to an account other than %s; admin user not seeded",
            settings.ADMIN_USERNAME, settings.ADMIN_EMAIL,
        )
        return None

    admin = User(
        username=settings.ADMIN_USERNAME,
        email=settings.ADMIN_EMAIL,
        password_hash=hash_password(settings.ADMIN_PASSWORD),
        first_name="System",
        last_name="Administrator",
    )
    session.add(admin)
    await session.flush()
    logger.info("Seeded admin user '%s'", admin.username)
    return admin


# ────────────────────────────────────────────────────────────────────
# 2.  SEED FUNCTION (idempotent)
# ────────────────────────────────────────────────────────────────────
async def seed(session: AsyncSession) -> None:
    """Create modules, permissions, the admin role/group/user if absent."""

    # ── Modules & permissions ────────────────────────────────────────
    permission_ids: list[int] = []
    for module_name, description in MODULES.items():
        module = await _ensure_named(session, Module, module_name, description)
        existing = {
            p.action: p
            for p in (
                await session.execute(select(Permission).where(Permission.module_id == module.id))
            ).scalars().all()
            if p.name == permission_name(module_name, p.action)
        }
        for action in PermissionAction:
            perm = existing.get(action)
            if perm is None:
                perm = Permission(
                    name=permission_name(module_name, action),
                    action=action,
                    module_id=module.id,
                    description=f"{action.value.capitalize()} {module_name.lower()}",
                )
                session.add(perm)
                await session.flush()
            permission_ids.append(perm.id)

    # ── Role & group ─────────────────────────────────────────────────
    role = await _ensure_named(session, Role, SUPER_ADMIN_ROLE, "Holds every permission")
    granted = await _ensure_links(session, role_permissions, "role_id", role.id, "permission_id", permission_ids)
    group = await _ensure_named(session, Group, ADMIN_GROUP, "System administrators")
    await _ensure_links(session, group_roles, "group_id", group.id, "role_id", [role.id])

    # ── Bootstrap admin ──────────────────────────────────────────────
    result = await session.execute(select(User).where(User.email == settings.ADMIN_EMAIL))
    admin = result.scalar_one_or_none()
    if admin is None:
        admin = await _create_admin(session)
    if admin is not None:
        await _ensure_links(session, user_groups, "group_id", group.id, "user_id", [admin.id])

    await session.commit()
    logger.info(
        "Seed complete: %d modules, %d permissions (%d newly granted to %s)",
        len(MODULES), len(permission_ids), granted, SUPER_ADMIN_ROLE,
    )


# ────────────────────────────────────────────────────────────────────
# 3.  CLI entrypoint:  python -m iam.rbac.permission_seed
# ────────────────────────────────────────────────────────────────────
async def main() -> None:
    engine = create_async_engine(settings.DATABASE_URL, echo=False)
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async_session = async_sessionmaker(engine, expire_on_commit=False)
    async with async_session() as session:
        await seed(session)
    await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
    asyncio.run(main())
