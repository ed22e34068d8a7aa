"""
Group controller — CRUD for groups.

Gated on the `Groups` module; one action per HTTP verb.  Membership
and role attachment live in the assignment controller.
"""

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from iam.core.database import get_db
from iam.rbac.dependencies import require_permission
from iam.schemas import GroupCreate, GroupOut, GroupUpdate, IdPath
from iam.services import group_service

router = APIRouter(prefix="/api/groups", tags=["Groups"])


@router.get("", response_model=list[GroupOut], dependencies=[Depends(require_permission("Groups", "read"))])
async def list_groups(
    db: AsyncSession = Depends(get_db),
    search: str | None = Query(None),
    is_active: bool | None = Query(None, alias="isActive"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
):
    items = await group_service.list_groups(db, search, is_active, skip, limit)
    return [GroupOut.model_validate(item) for item in items]


@router.post(
    "", response_model=GroupOut, status_code=201,
    dependencies=[Depends(require_permission("Groups", "create"))],
)
async def create_group(body: GroupCreate, db: AsyncSession = Depends(get_db)):
    group = await group_service.create_group(body, db)
    return GroupOut.model_validate(group)


@router.get("/{group_id}", response_model=GroupOut, dependencies=[Depends(require_permission("Groups", "read"))])
async def get_group(group_id: IdPath, db: AsyncSession = Depends(get_db)):
    group = await group_service.get_group_by_id(group_id, db)
    return GroupOut.model_validate(group)


@router.put("/{group_id}", response_model=GroupOut, dependencies=[Depends(require_permission("Groups", "update"))])
async def update_group(group_id: IdPath, body: GroupUpdate, db: AsyncSession = Depends(get_db)):
    group = await group_service.update_group(group_id, body, db)
    return GroupOut.model_validate(group)


@router.delete("/{group_id}", status_code=204, dependencies=[Depends(require_permission("Groups", "delete"))])
async def delete_group(group_id: IdPath, db: AsyncSession = Depends(get_db)):
    await group_service.delete_group(group_id, db)
    return Response(status_code=204)
