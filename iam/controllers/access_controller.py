"""
Access controller — effective-permission queries.

`/me/permissions` only needs an authenticated caller: anyone may see
what they themselves can do.  `/simulate-action` evaluates another
user's access and therefore requires `Permissions.read`.
"""

from fastapi import APIRouter, Depends

from iam.core.security import get_current_user_id
from iam.rbac.dependencies import get_resolver, require_permission
from iam.rbac.resolver import PermissionResolver
from iam.schemas import SimulateActionRequest, SimulateActionResponse, UserPermissionOut

router = APIRouter(prefix="/api", tags=["Access"])


@router.get("/me/permissions", response_model=list[UserPermissionOut])
async def my_permissions(
    user_id: int = Depends(get_current_user_id),
    resolver: PermissionResolver = Depends(get_resolver),
):
    """List the caller's effective permissions, ascending by id."""
    permissions = await resolver.resolve_permissions(user_id)
    return [UserPermissionOut.model_validate(p) for p in permissions]


@router.post(
    "/simulate-action",
    response_model=SimulateActionResponse,
    dependencies=[Depends(require_permission("Permissions", "read"))],
)
async def simulate_action(
    body: SimulateActionRequest,
    resolver: PermissionResolver = Depends(get_resolver),
):
    result = await resolver.simulate(body.user_id, body.module_id, body.action)
    return SimulateActionResponse.model_validate(result)
