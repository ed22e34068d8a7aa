"""
RBAC dependencies — the authorization gate.

`require_permission` is a *dependency factory*: call it once, at route
registration time, with a fixed (module name, action) pair and it
returns a FastAPI dependency that will, per request:

1. Establish the caller's identity (`get_current_user_id` → 401).
2. Ask the resolver whether that user holds (module, action).
3. 403 if not — with NO details about which permissions are missing.
4. 500 if the module name itself does not exist: a route wired to a
   module that was never created is a deployment bug, not a denial.

Usage in a route:
    @router.get("/users", dependencies=[Depends(require_permission("Users", "read"))])
    async def list_users(...): ...

Or inject the caller's id:
    async def me(user_id: int = Depends(require_permission("Users", "read"))): ...
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from iam.core.config import settings
from iam.core.database import get_db
from iam.core.errors import ForbiddenError, InternalError
from iam.core.security import get_current_user_id
from iam.models.permission import PermissionAction
from iam.rbac.resolver import PermissionResolver, UnknownModuleError
from iam.rbac.store import EntityStore

trace_logger = logging.getLogger("iam.rbac.trace")


def _log_trace(event: str, data: dict[str, Any]) -> None:
    trace_logger.debug("%s %s", event, data)


async def get_resolver(db: AsyncSession = Depends(get_db)) -> PermissionResolver:
    """Build a resolver over this request's session."""
    trace = _log_trace if settings.TRACE_RESOLUTION else None
    return PermissionResolver(EntityStore(db), trace=trace)


def require_permission(module_name: str, action: str) -> Callable[..., Awaitable[int]]:
    # Fail at import time, not on the first request, if a route is
    # wired with an action outside the closed set.
    required = PermissionAction(action)

    async def permission_gate(
        user_id: int = Depends(get_current_user_id),
        resolver: PermissionResolver = Depends(get_resolver),
    ) -> int:
        try:
            allowed = await resolver.has_permission(user_id, module_name, required)
        except UnknownModuleError as exc:
            raise InternalError(
                f"Permission check misconfigured: unknown module '{module_name}'"
            ) from exc
        if not allowed:
            raise ForbiddenError("Insufficient permissions")
        return user_id

    permission_gate.__name__ = f"require_{module_name.lower()}_{required.value}"
    return permission_gate
