"""
Module service — CRUD for modules (the resources permissions target).

Deleting a module deletes every permission defined on it, and with
them every role grant of those permissions.
"""

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from iam.models.module import Module
from iam.models.permission import Permission
from iam.models.role import role_permissions
from iam.schemas import ModuleCreate, ModuleUpdate
from iam.services.crud import apply_list_filters, ensure_unique, get_or_404

logger = logging.getLogger(__name__)


async def get_module_by_id(module_id: int, db: AsyncSession) -> Module:
    return await get_or_404(Module, module_id, db, "Module")


async def list_modules(
    db: AsyncSession,
    search: str | None = None,
    is_active: bool | None = None,
    skip: int = 0,
    limit: int = 50,
) -> list[Module]:
    stmt = apply_list_filters(
        select(Module),
        Module,
        search=search,
        search_columns=[Module.name, Module.description],
        is_active=is_active,
        skip=skip,
        limit=limit,
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def create_module(data: ModuleCreate, db: AsyncSession) -> Module:
    await ensure_unique(Module, db, "Module with this name already exists", name=data.name)
    module = Module(**data.model_dump())
    db.add(module)
    await db.flush()
    logger.info("Module %s created (name=%s)", module.id, module.name)
    return module


async def update_module(module_id: int, data: ModuleUpdate, db: AsyncSession) -> Module:
    module = await get_module_by_id(module_id, db)
    changes = data.model_dump(exclude_unset=True)
    if changes.get("name") and changes["name"] != module.name:
        await ensure_unique(
            Module, db, "Module with this name already exists", exclude_id=module.id, name=changes["name"]
        )
    for field, value in changes.items():
        if value is None and field in ("name", "is_active"):
            continue
        setattr(module, field, value)
    await db.flush()
    logger.info("Module %s updated (fields=%s)", module.id, sorted(changes))
    return module


async def delete_module(module_id: int, db: AsyncSession) -> None:
    await get_module_by_id(module_id, db)
    permission_ids = select(Permission.id).where(Permission.module_id == module_id)
    await db.execute(
        delete(role_permissions).where(role_permissions.c.permission_id.in_(permission_ids))
    )
    result = await db.execute(delete(Permission).where(Permission.module_id == module_id))
    await db.execute(delete(Module).where(Module.id == module_id))
    await db.flush()
    logger.info("Module %s deleted (%d permissions removed)", module_id, result.rowcount)
