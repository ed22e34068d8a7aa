"""
Assignment service — the three edge sets of the access graph.

    user ──user_groups──► group ──group_roles──► role ──role_permissions──► permission

Assigning is idempotent: pairs that already exist are counted as
`skipped`, never duplicated.  Every referenced id must exist (404) and
the whole batch is validated before any row is written, so a bad id
leaves the graph untouched.  Users must also be active to join a group.
"""

import logging

from sqlalchemy import Table, delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from iam.core.errors import InvalidArgumentError, NotFoundError
from iam.models.group import Group, user_groups
from iam.models.permission import Permission
from iam.models.role import Role, group_roles, role_permissions
from iam.models.user import User
from iam.schemas import AssignmentResult, RemovalResult
from iam.services.group_service import get_group_by_id
from iam.services.role_service import get_role_by_id
from iam.services.user_service import get_user_by_id

logger = logging.getLogger(__name__)


# ── Helpers ──────────────────────────────────────────────────────────

async def _load_all(model, ids: list[int], db: AsyncSession, label: str) -> list:
    """Fetch every row in `ids` or raise NotFoundError naming the missing ones."""
    result = await db.execute(select(model).where(model.id.in_(ids)))
    found = {row.id: row for row in result.scalars().all()}
    missing = [i for i in ids if i not in found]
    if missing:
        raise NotFoundError(f"{label}(s) not found: {', '.join(map(str, missing))}")
    return [found[i] for i in ids]


async def _link(
    table: Table,
    owner_column: str,
    owner_id: int,
    target_column: str,
    target_ids: list[int],
    db: AsyncSession,
) -> AssignmentResult:
    existing_stmt = select(table.c[target_column]).where(
        table.c[owner_column] == owner_id,
        table.c[target_column].in_(target_ids),
    )
    existing = set((await db.execute(existing_stmt)).scalars().all())
    new_ids = [i for i in target_ids if i not in existing]
    if new_ids:
        await db.execute(
            insert(table),
            [{owner_column: owner_id, target_column: i} for i in new_ids],
        )
        await db.flush()
    return AssignmentResult(assigned=len(new_ids), skipped=len(existing))


async def _unlink(
    table: Table,
    owner_column: str,
    owner_id: int,
    target_column: str,
    target_id: int,
    db: AsyncSession,
) -> RemovalResult:
    result = await db.execute(
        delete(table).where(
            table.c[owner_column] == owner_id,
            table.c[target_column] == target_id,
        )
    )
    return RemovalResult(removed=result.rowcount)


# ── User ↔ Group ─────────────────────────────────────────────────────

async def assign_users_to_group(group_id: int, user_ids: list[int], db: AsyncSession) -> AssignmentResult:
    await get_group_by_id(group_id, db)
    ids = list(dict.fromkeys(user_ids))
    users = await _load_all(User, ids, db, "User")
    inactive = [u.id for u in users if not u.is_active]
    if inactive:
        raise InvalidArgumentError(
            f"Cannot assign inactive user(s) to a group: {', '.join(map(str, inactive))}"
        )

    outcome = await _link(user_groups, "group_id", group_id, "user_id", ids, db)
    logger.info(
        "Group %s: %d user(s) assigned, %d skipped", group_id, outcome.assigned, outcome.skipped
    )
    return outcome


async def remove_user_from_group(group_id: int, user_id: int, db: AsyncSession) -> RemovalResult:
    await get_group_by_id(group_id, db)
    outcome = await _unlink(user_groups, "group_id", group_id, "user_id", user_id, db)
    logger.info("Group %s: user %s removed (%d row)", group_id, user_id, outcome.removed)
    return outcome


async def list_group_users(group_id: int, db: AsyncSession) -> list[User]:
    await get_group_by_id(group_id, db)
    stmt = (
        select(User)
        .join(user_groups, user_groups.c.user_id == User.id)
        .where(user_groups.c.group_id == group_id)
        .order_by(User.id)
    )
    return list((await db.execute(stmt)).scalars().all())


async def list_user_groups(user_id: int, db: AsyncSession) -> list[Group]:
    await get_user_by_id(user_id, db)
    stmt = (
        select(Group)
        .join(user_groups, user_groups.c.group_id == Group.id)
        .where(user_groups.c.user_id == user_id)
        .order_by(Group.id)
    )
    return list((await db.execute(stmt)).scalars().all())


# ── Group ↔ Role ─────────────────────────────────────────────────────

async def assign_roles_to_group(group_id: int, role_ids: list[int], db: AsyncSession) -> AssignmentResult:
    await get_group_by_id(group_id, db)
    ids = list(dict.fromkeys(role_ids))
    await _load_all(Role, ids, db, "Role")

    outcome = await _link(group_roles, "group_id", group_id, "role_id", ids, db)
    logger.info(
        "Group %s: %d role(s) assigned, %d skipped", group_id, outcome.assigned, outcome.skipped
    )
    return outcome


async def remove_role_from_group(group_id: int, role_id: int, db: AsyncSession) -> RemovalResult:
    await get_group_by_id(group_id, db)
    outcome = await _unlink(group_roles, "group_id", group_id, "role_id", role_id, db)
    logger.info("Group %s: role %s removed (%d row)", group_id, role_id, outcome.removed)
    return outcome


async def list_group_roles(group_id: int, db: AsyncSession) -> list[Role]:
    await get_group_by_id(group_id, db)
    stmt = (
        select(Role)
        .join(group_roles, group_roles.c.role_id == Role.id)
        .where(group_roles.c.group_id == group_id)
        .order_by(Role.id)
    )
    return list((await db.execute(stmt)).scalars().all())


# ── Role ↔ Permission ────────────────────────────────────────────────

async def assign_permissions_to_role(
    role_id: int, permission_ids: list[int], db: AsyncSession
) -> AssignmentResult:
    await get_role_by_id(role_id, db)
    ids = list(dict.fromkeys(permission_ids))
    await _load_all(Permission, ids, db, "Permission")

    outcome = await _link(role_permissions, "role_id", role_id, "permission_id", ids, db)
    logger.info(
        "Role %s: %d permission(s) assigned, %d skipped", role_id, outcome.assigned, outcome.skipped
    )
    return outcome


async def remove_permission_from_role(role_id: int, permission_id: int, db: AsyncSession) -> RemovalResult:
    await get_role_by_id(role_id, db)
    outcome = await _unlink(role_permissions, "role_id", role_id, "permission_id", permission_id, db)
    logger.info("Role %s: permission %s removed (%d row)", role_id, permission_id, outcome.removed)
    return outcome


async def list_role_permissions(role_id: int, db: AsyncSession) -> list[Permission]:
    await get_role_by_id(role_id, db)
    stmt = (
        select(Permission)
        .join(role_permissions, role_permissions.c.permission_id == Permission.id)
        .where(role_permissions.c.role_id == role_id)
        .order_by(Permission.id)
    )
    return list((await db.execute(stmt)).scalars().all())
