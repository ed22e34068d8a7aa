"""
Permission controller — CRUD for permissions.

Gated on the `Permissions` module.  Listing additionally filters by
owning module and by action.
"""

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from iam.core.database import get_db
from iam.models.permission import PermissionAction
from iam.rbac.dependencies import require_permission
from iam.schemas import MAX_ID, IdPath, PermissionCreate, PermissionOut, PermissionUpdate
from iam.services import permission_service

router = APIRouter(prefix="/api/permissions", tags=["Permissions"])


@router.get(
    "", response_model=list[PermissionOut],
    dependencies=[Depends(require_permission("Permissions", "read"))],
)
async def list_permissions(
    db: AsyncSession = Depends(get_db),
    search: str | None = Query(None),
    module_id: int | None = Query(None, alias="moduleId", ge=1, le=MAX_ID),
    action: PermissionAction | None = Query(None),
    is_active: bool | None = Query(None, alias="isActive"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
):
    permissions = await permission_service.list_permissions(
        db, search, module_id, action, is_active, skip, limit,
    )
    return [PermissionOut.model_validate(p) for p in permissions]


@router.post(
    "", response_model=PermissionOut, status_code=201,
    dependencies=[Depends(require_permission("Permissions", "create"))],
)
async def create_permission(body: PermissionCreate, db: AsyncSession = Depends(get_db)):
    """Create a permission on an existing module."""
    permission = await permission_service.create_permission(body, db)
    return PermissionOut.model_validate(permission)


@router.get(
    "/{permission_id}", response_model=PermissionOut,
    dependencies=[Depends(require_permission("Permissions", "read"))],
)
async def get_permission(permission_id: IdPath, db: AsyncSession = Depends(get_db)):
    permission = await permission_service.get_permission_by_id(permission_id, db)
    return PermissionOut.model_validate(permission)


@router.put(
    "/{permission_id}", response_model=PermissionOut,
    dependencies=[Depends(require_permission("Permissions", "update"))],
)
async def update_permission(permission_id: IdPath, body: PermissionUpdate, db: AsyncSession = Depends(get_db)):
    permission = await permission_service.update_permission(permission_id, body, db)
    return PermissionOut.model_validate(permission)


@router.delete(
    "/{permission_id}", status_code=204,
    dependencies=[Depends(require_permission("Permissions", "delete"))],
)
async def delete_permission(permission_id: IdPath, db: AsyncSession = Depends(get_db)):
    """Delete the permission and detach it from every role."""
    await permission_service.delete_permission(permission_id, db)
    return Response(status_code=204)
