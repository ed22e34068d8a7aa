"""
Permission service — CRUD for permissions.

A permission always belongs to an existing module.  The triple
(name, module_id, action) is unique; the DB constraint backs this up
but the check here produces the 409 message.
"""

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from iam.models.permission import Permission, PermissionAction
from iam.models.role import role_permissions
from iam.schemas import PermissionCreate, PermissionUpdate
from iam.services import module_service
from iam.services.crud import apply_list_filters, ensure_unique, get_or_404

logger = logging.getLogger(__name__)

_DUPLICATE = "Permission with this name, module and action already exists"


async def get_permission_by_id(permission_id: int, db: AsyncSession) -> Permission:
    return await get_or_404(Permission, permission_id, db, "Permission")


async def list_permissions(
    db: AsyncSession,
    search: str | None = None,
    module_id: int | None = None,
    action: PermissionAction | None = None,
    is_active: bool | None = None,
    skip: int = 0,
    limit: int = 50,
) -> list[Permission]:
    stmt = select(Permission)
    if module_id is not None:
        stmt = stmt.where(Permission.module_id == module_id)
    if action is not None:
        stmt = stmt.where(Permission.action == action)
    stmt = apply_list_filters(
        stmt,
        Permission,
        search=search,
        search_columns=[Permission.name, Permission.description],
        is_active=is_active,
        skip=skip,
        limit=limit,
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def create_permission(data: PermissionCreate, db: AsyncSession) -> Permission:
    await module_service.get_module_by_id(data.module_id, db)
    await ensure_unique(
        Permission, db, _DUPLICATE, name=data.name, module_id=data.module_id, action=data.action
    )

    permission = Permission(**data.model_dump())
    db.add(permission)
    await db.flush()
    await db.refresh(permission, attribute_names=["module"])
    logger.info(
        "Permission %s created (%s, module=%s, action=%s)",
        permission.id, permission.name, permission.module_id, permission.action.value,
    )
    return permission


async def update_permission(permission_id: int, data: PermissionUpdate, db: AsyncSession) -> Permission:
    permission = await get_permission_by_id(permission_id, db)
    changes = {
        field: value
        for field, value in data.model_dump(exclude_unset=True).items()
        if value is not None or field == "description"
    }

    if "module_id" in changes and changes["module_id"] != permission.module_id:
        await module_service.get_module_by_id(changes["module_id"], db)

    name = changes.get("name", permission.name)
    module_id = changes.get("module_id", permission.module_id)
    action = changes.get("action", permission.action)
    if (name, module_id, action) != (permission.name, permission.module_id, permission.action):
        await ensure_unique(
            Permission, db, _DUPLICATE, exclude_id=permission.id,
            name=name, module_id=module_id, action=action,
        )

    for field, value in changes.items():
        setattr(permission, field, value)
    await db.flush()
    await db.refresh(permission, attribute_names=["module"])
    logger.info("Permission %s updated (fields=%s)", permission.id, sorted(changes))
    return permission


async def delete_permission(permission_id: int, db: AsyncSession) -> None:
    await get_permission_by_id(permission_id, db)
    await db.execute(delete(role_permissions).where(role_permissions.c.permission_id == permission_id))
    await db.execute(delete(Permission).where(Permission.id == permission_id))
    await db.flush()
    logger.info("Permission %s deleted", permission_id)
