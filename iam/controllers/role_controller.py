"""Role controller — CRUD for roles, gated on the `Roles` module."""

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from iam.core.database import get_db
from iam.rbac.dependencies import require_permission
from iam.schemas import IdPath, RoleCreate, RoleOut, RoleUpdate
from iam.services import role_service

router = APIRouter(prefix="/api/roles", tags=["Roles"])


@router.get("", response_model=list[RoleOut], dependencies=[Depends(require_permission("Roles", "read"))])
async def list_roles(
    db: AsyncSession = Depends(get_db),
    search: str | None = Query(None),
    is_active: bool | None = Query(None, alias="isActive"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
):
    items = await role_service.list_roles(db, search, is_active, skip, limit)
    return [RoleOut.model_validate(item) for item in items]


@router.post(
    "", response_model=RoleOut, status_code=201,
    dependencies=[Depends(require_permission("Roles", "create"))],
)
async def create_role(body: RoleCreate, db: AsyncSession = Depends(get_db)):
    role = await role_service.create_role(body, db)
    return RoleOut.model_validate(role)


@router.get("/{role_id}", response_model=RoleOut, dependencies=[Depends(require_permission("Roles", "read"))])
async def get_role(role_id: IdPath, db: AsyncSession = Depends(get_db)):
    role = await role_service.get_role_by_id(role_id, db)
    return RoleOut.model_validate(role)


@router.put("/{role_id}", response_model=RoleOut, dependencies=[Depends(require_permission("Roles", "update"))])
async def update_role(role_id: IdPath, body: RoleUpdate, db: AsyncSession = Depends(get_db)):
    role = await role_service.update_role(role_id, body, db)
    return RoleOut.model_validate(role)


@router.delete("/{role_id}", status_code=204, dependencies=[Depends(require_permission("Roles", "delete"))])
async def delete_role(role_id: IdPath, db: AsyncSession = Depends(get_db)):
    await role_service.delete_role(role_id, db)
    return Response(status_code=204)
