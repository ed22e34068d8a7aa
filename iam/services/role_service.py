"""
Role service — CRUD for roles.

A role is a named bundle of permissions.  Deleting one detaches it
from every group and drops its permission grants.
"""

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from iam.models.role import Role, group_roles, role_permissions
from iam.schemas import RoleCreate, RoleUpdate
from iam.services.crud import apply_list_filters, ensure_unique, get_or_404

logger = logging.getLogger(__name__)


async def get_role_by_id(role_id: int, db: AsyncSession) -> Role:
    return await get_or_404(Role, role_id, db, "Role")


async def list_roles(
    db: AsyncSession,
    search: str | None = None,
    is_active: bool | None = None,
    skip: int = 0,
    limit: int = 50,
) -> list[Role]:
    stmt = apply_list_filters(
        select(Role),
        Role,
        search=search,
        search_columns=[Role.name, Role.description],
        is_active=is_active,
        skip=skip,
        limit=limit,
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def create_role(data: RoleCreate, db: AsyncSession) -> Role:
    await ensure_unique(Role, db, "Role with this name already exists", name=data.name)
    role = Role(**data.model_dump())
    db.add(role)
    await db.flush()
    logger.info("Role %s created (name=%s)", role.id, role.name)
    return role


async def update_role(role_id: int, data: RoleUpdate, db: AsyncSession) -> Role:
    role = await get_role_by_id(role_id, db)
    changes = data.model_dump(exclude_unset=True)
    if changes.get("name") and changes["name"] != role.name:
        await ensure_unique(
            Role, db, "Role with this name already exists", exclude_id=role.id, name=changes["name"]
        )
    for field, value in changes.items():
        if value is None and field in ("name", "is_active"):
            continue
        setattr(role, field, value)
    await db.flush()
    logger.info("Role %s updated (fields=%s)", role.id, sorted(changes))
    return role


async def delete_role(role_id: int, db: AsyncSession) -> None:
    await get_role_by_id(role_id, db)
    await db.execute(delete(group_roles).where(group_roles.c.role_id == role_id))
    await db.execute(delete(role_permissions).where(role_permissions.c.role_id == role_id))
    await db.execute(delete(Role).where(Role.id == role_id))
    await db.flush()
    logger.info("Role %s deleted", role_id)
