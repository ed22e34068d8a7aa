"""
User controller — user management.

Every route uses `Depends(require_permission("Users", ...))`.
Controllers are THIN — they delegate to services and return schemas.
"""

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from iam.core.database import get_db
from iam.rbac.dependencies import require_permission
from iam.schemas import IdPath, UserCreate, UserOut, UserUpdate
from iam.services import user_service

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("", response_model=list[UserOut], dependencies=[Depends(require_permission("Users", "read"))])
async def list_users(
    db: AsyncSession = Depends(get_db),
    search: str | None = Query(None),
    is_active: bool | None = Query(None, alias="isActive"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
):
    users = await user_service.list_users(db, search, is_active, skip, limit)
    return [UserOut.model_validate(u) for u in users]


@router.post(
    "", response_model=UserOut, status_code=201,
    dependencies=[Depends(require_permission("Users", "create"))],
)
async def create_user(body: UserCreate, db: AsyncSession = Depends(get_db)):
    user = await user_service.create_user(body, db)
    return UserOut.model_validate(user)


@router.get("/{user_id}", response_model=UserOut, dependencies=[Depends(require_permission("Users", "read"))])
async def get_user(user_id: IdPath, db: AsyncSession = Depends(get_db)):
    user = await user_service.get_user_by_id(user_id, db)
    return UserOut.model_validate(user)


@router.put("/{user_id}", response_model=UserOut, dependencies=[Depends(require_permission("Users", "update"))])
async def update_user(user_id: IdPath, body: UserUpdate, db: AsyncSession = Depends(get_db)):
    user = await user_service.update_user(user_id, body, db)
    return UserOut.model_validate(user)


@router.delete("/{user_id}", status_code=204, dependencies=[Depends(require_permission("Users", "delete"))])
async def delete_user(user_id: IdPath, db: AsyncSession = Depends(get_db)):
    """Delete the user and its group memberships."""
    await user_service.delete_user(user_id, db)
    return Response(status_code=204)
