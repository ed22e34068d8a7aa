"""
Group service — CRUD for groups.

Deleting a group detaches its members and roles; the users and roles
themselves survive.
"""

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from iam.models.group import Group, user_groups
from iam.models.role import group_roles
from iam.schemas import GroupCreate, GroupUpdate
from iam.services.crud import apply_list_filters, ensure_unique, get_or_404

logger = logging.getLogger(__name__)


async def get_group_by_id(group_id: int, db: AsyncSession) -> Group:
    return await get_or_404(Group, group_id, db, "Group")


async def list_groups(
    db: AsyncSession,
    search: str | None = None,
    is_active: bool | None = None,
    skip: int = 0,
    limit: int = 50,
) -> list[Group]:
    stmt = apply_list_filters(
        select(Group),
        Group,
        search=search,
        search_columns=[Group.name, Group.description],
        is_active=is_active,
        skip=skip,
        limit=limit,
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def create_group(data: GroupCreate, db: AsyncSession) -> Group:
    await ensure_unique(Group, db, "Group with this name already exists", name=data.name)
    group = Group(**data.model_dump())
    db.add(group)
    await db.flush()
    logger.info("Group %s created (name=%s)", group.id, group.name)
    return group


async def update_group(group_id: int, data: GroupUpdate, db: AsyncSession) -> Group:
    group = await get_group_by_id(group_id, db)
    changes = data.model_dump(exclude_unset=True)
    if changes.get("name") and changes["name"] != group.name:
        await ensure_unique(
            Group, db, "Group with this name already exists", exclude_id=group.id, name=changes["name"]
        )
    for field, value in changes.items():
        if value is None and field in ("name", "is_active"):
            continue
        setattr(group, field, value)
    await db.flush()
    logger.info("Group %s updated (fields=%s)", group.id, sorted(changes))
    return group


async def delete_group(group_id: int, db: AsyncSession) -> None:
    await get_group_by_id(group_id, db)
    await db.execute(delete(user_groups).where(user_groups.c.group_id == group_id))
    await db.execute(delete(group_roles).where(group_roles.c.group_id == group_id))
    await db.execute(delete(Group).where(Group.id == group_id))
    await db.flush()
    logger.info("Group %s deleted", group_id)
