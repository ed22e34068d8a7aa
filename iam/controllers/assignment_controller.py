"""
Assignment controller — wiring users, groups, roles & permissions.

All routes are gated on the `Assignments` module, independent of the
module that owns either end of the edge.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from iam.core.database import get_db
from iam.rbac.dependencies import require_permission
from iam.schemas import (
    AssignmentResult,
    AssignPermissionsRequest,
    AssignRolesRequest,
    AssignUsersRequest,
    GroupOut,
    IdPath,
    PermissionOut,
    RemovalResult,
    RoleOut,
    UserOut,
)
from iam.services import assignment_service

router = APIRouter(prefix="/api", tags=["Assignments"])

can_read = Depends(require_permission("Assignments", "read"))
can_create = Depends(require_permission("Assignments", "create"))
can_delete = Depends(require_permission("Assignments", "delete"))


# ── User ↔ Group ─────────────────────────────────────────────────────
@router.post("/groups/{group_id}/users", response_model=AssignmentResult, dependencies=[can_create])
async def assign_users(group_id: IdPath, body: AssignUsersRequest, db: AsyncSession = Depends(get_db)):
    """Add users to a group; existing members are skipped."""
    return await assignment_service.assign_users_to_group(group_id, body.user_ids, db)


@router.delete("/groups/{group_id}/users/{user_id}", response_model=RemovalResult, dependencies=[can_delete])
async def remove_user(group_id: IdPath, user_id: IdPath, db: AsyncSession = Depends(get_db)):
    return await assignment_service.remove_user_from_group(group_id, user_id, db)


@router.get("/groups/{group_id}/users", response_model=list[UserOut], dependencies=[can_read])
async def list_group_users(group_id: IdPath, db: AsyncSession = Depends(get_db)):
    users = await assignment_service.list_group_users(group_id, db)
    return [UserOut.model_validate(u) for u in users]


@router.get("/users/{user_id}/groups", response_model=list[GroupOut], dependencies=[can_read])
async def list_user_groups(user_id: IdPath, db: AsyncSession = Depends(get_db)):
    groups = await assignment_service.list_user_groups(user_id, db)
    return [GroupOut.model_validate(g) for g in groups]


# ── Group ↔ Role ─────────────────────────────────────────────────────
@router.post("/groups/{group_id}/roles", response_model=AssignmentResult, dependencies=[can_create])
async def assign_roles(group_id: IdPath, body: AssignRolesRequest, db: AsyncSession = Depends(get_db)):
    return await assignment_service.assign_roles_to_group(group_id, body.role_ids, db)


@router.delete("/groups/{group_id}/roles/{role_id}", response_model=RemovalResult, dependencies=[can_delete])
async def remove_role(group_id: IdPath, role_id: IdPath, db: AsyncSession = Depends(get_db)):
    return await assignment_service.remove_role_from_group(group_id, role_id, db)


@router.get("/groups/{group_id}/roles", response_model=list[RoleOut], dependencies=[can_read])
async def list_group_roles(group_id: IdPath, db: AsyncSession = Depends(get_db)):
    roles = await assignment_service.list_group_roles(group_id, db)
    return [RoleOut.model_validate(r) for r in roles]


# ── Role ↔ Permission ────────────────────────────────────────────────
@router.post("/roles/{role_id}/permissions", response_model=AssignmentResult, dependencies=[can_create])
async def assign_permissions(role_id: IdPath, body: AssignPermissionsRequest, db: AsyncSession = Depends(get_db)):
    return await assignment_service.assign_permissions_to_role(role_id, body.permission_ids, db)


@router.delete(
    "/roles/{role_id}/permissions/{permission_id}", response_model=RemovalResult, dependencies=[can_delete],
)
async def remove_permission(role_id: IdPath, permission_id: IdPath, db: AsyncSession = Depends(get_db)):
    return await assignment_service.remove_permission_from_role(role_id, permission_id, db)


@router.get("/roles/{role_id}/permissions", response_model=list[PermissionOut], dependencies=[can_read])
async def list_role_permissions(role_id: IdPath, db: AsyncSession = Depends(get_db)):
    permissions = await assignment_service.list_role_permissions(role_id, db)
    return [PermissionOut.model_validate(p) for p in permissions]
