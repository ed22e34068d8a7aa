"""
Permission resolver — the heart of access decisions.

A user's effective permissions are never stored.  Every call walks the
graph fresh through the entity store:

1. Load the user (missing → NotFoundError).
2. Load the user's groups (none → empty result, not an error).
3. Load the roles attached to those groups.
4. Load the permissions attached to those roles, each annotated with
   its owning module.
5. Union and deduplicate BY PERMISSION ID — two distinct rows that
   happen to share module + action are two grants; the same row
   reached through two group → role paths is one.
6. Return in ascending id order.

The model is a flat union of grants: no wildcards, no conditions, no
deny rules.  The resolver does no logging of its own; callers that
want a trace inject a `trace(event, data)` callable.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from iam.core.errors import InvalidArgumentError, NotFoundError
from iam.models.permission import PermissionAction
from iam.rbac.store import GrantedPermission, GroupRecord, ModuleRecord, RoleRecord, UserRecord

TraceHook = Callable[[str, dict[str, Any]], None]

VALID_ACTIONS = ", ".join(action.value for action in PermissionAction)


class AccessGraph(Protocol):
    """What the resolver needs from a store (see `EntityStore`)."""

    async def get_user(self, user_id: int) -> UserRecord | None: ...

    async def groups_for_user(self, user_id: int) -> list[GroupRecord]: ...

    async def roles_for_groups(self, group_ids: list[int]) -> list[RoleRecord]: ...

    async def permissions_for_roles(self, role_ids: list[int]) -> list[GrantedPermission]: ...

    async def get_module(self, module_id: int) -> ModuleRecord | None: ...

    async def get_module_by_name(self, name: str) -> ModuleRecord | None: ...


@dataclass(frozen=True)
class SimulationResult:
    user_id: int
    module_id: int
    module_name: str
    action: PermissionAction
    has_permission: bool


class UnknownModuleError(NotFoundError):
    """The referenced module does not exist (distinct from "no grant")."""


def parse_action(action: str | PermissionAction) -> PermissionAction:
    """Coerce `action` into the closed action set or raise InvalidArgumentError."""
    try:
        return PermissionAction(action)
    except ValueError:
        raise InvalidArgumentError(f"Action must be one of: {VALID_ACTIONS}")


class PermissionResolver:
    def __init__(self, store: AccessGraph, trace: TraceHook | None = None):
        self.store = store
        self.trace = trace

    def _emit(self, event: str, **data: Any) -> None:
        if self.trace is not None:
            self.trace(event, data)

    async def resolve_permissions(self, user_id: int) -> list[GrantedPermission]:
        """Return every permission reachable from `user_id`, deduplicated by id."""
        user = await self.store.get_user(user_id)
        if user is None:
            raise NotFoundError(f"User with ID {user_id} not found")

        groups = await self.store.groups_for_user(user.id)
        self._emit("groups_loaded", user_id=user.id, group_ids=[g.id for g in groups])
        if not groups:
            return []

        roles = await self.store.roles_for_groups([g.id for g in groups])
        self._emit("roles_loaded", user_id=user.id, role_ids=[r.id for r in roles])
        if not roles:
            return []

        granted: dict[int, GrantedPermission] = {}
        for permission in await self.store.permissions_for_roles([r.id for r in roles]):
            granted.setdefault(permission.id, permission)

        resolved = [granted[pid] for pid in sorted(granted)]
        self._emit("permissions_resolved", user_id=user.id, permission_ids=[p.id for p in resolved])
        return resolved

    async def _lookup_module(self, module: str | int) -> ModuleRecord:
        if isinstance(module, int):
            record = await self.store.get_module(module)
            if record is None:
                raise UnknownModuleError(f"Module with ID {module} not found")
        else:
            record = await self.store.get_module_by_name(module)
            if record is None:
                raise UnknownModuleError(f"Module '{module}' not found")
        return record

    async def has_permission(
        self,
        user_id: int,
        module: str | int,
        action: str | PermissionAction,
    ) -> bool:
        """
        Point check: can `user_id` perform `action` on `module`?

        `module` is a module name or a module id.  An unknown module is
        NotFoundError rather than False — callers must be able to tell
        "no such module" apart from "access denied".
        """
        wanted = parse_action(action)
        target = await self._lookup_module(module)
        permissions = await self.resolve_permissions(user_id)
        return any(p.module_id == target.id and p.action == wanted for p in permissions)

    async def simulate(
        self,
        user_id: int,
        module_id: int,
        action: str | PermissionAction,
    ) -> SimulationResult:
        """Dry-run check for an arbitrary subject, returning the full context."""
        wanted = parse_action(action)
        user = await self.store.get_user(user_id)
        if user is None:
            raise NotFoundError(f"User with ID {user_id} not found")
        target = await self._lookup_module(module_id)

        permissions = await self.resolve_permissions(user.id)
        granted = any(p.module_id == target.id and p.action == wanted for p in permissions)
        return SimulationResult(
            user_id=user.id,
            module_id=target.id,
            module_name=target.name,
            action=wanted,
            has_permission=granted,
        )
