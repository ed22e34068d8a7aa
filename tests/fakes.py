"""In-memory stand-in for `EntityStore`, for resolver tests without a DB."""

from dataclasses import dataclass, field

from iam.models.permission import PermissionAction
from iam.rbac.store import GrantedPermission, GroupRecord, ModuleRecord, RoleRecord, UserRecord


@dataclass
class InMemoryEntityStore:
    users: dict[int, UserRecord] = field(default_factory=dict)
    groups: dict[int, GroupRecord] = field(default_factory=dict)
    roles: dict[int, RoleRecord] = field(default_factory=dict)
    modules: dict[int, ModuleRecord] = field(default_factory=dict)
    permissions: dict[int, GrantedPermission] = field(default_factory=dict)
    user_groups: set[tuple[int, int]] = field(default_factory=set)
    group_roles: set[tuple[int, int]] = field(default_factory=set)
    role_permissions: set[tuple[int, int]] = field(default_factory=set)
    calls: list[str] = field(default_factory=list)

    # ── builders ─────────────────────────────────────────────────────
    def add_user(self, user_id: int, *, is_active: bool = True) -> int:
        self.users[user_id] = UserRecord(id=user_id, username=f"user{user_id}", is_active=is_active)
        return user_id

    def add_group(self, group_id: int) -> int:
        self.groups[group_id] = GroupRecord(id=group_id, name=f"group{group_id}")
        return group_id

    def add_role(self, role_id: int) -> int:
        self.roles[role_id] = RoleRecord(id=role_id, name=f"role{role_id}")
        return role_id

    def add_module(self, module_id: int, name: str) -> int:
        self.modules[module_id] = ModuleRecord(id=module_id, name=name)
        return module_id

    def add_permission(self, permission_id: int, module_id: int, action: str) -> int:
        module = self.modules[module_id]
        self.permissions[permission_id] = GrantedPermission(
            id=permission_id,
            name=f"{module.name}.{action}",
            action=PermissionAction(action),
            module_id=module_id,
            module_name=module.name,
        )
        return permission_id

    # ── AccessGraph ──────────────────────────────────────────────────
    async def get_user(self, user_id: int) -> UserRecord | None:
        self.calls.append("get_user")
        return self.users.get(user_id)

    async def groups_for_user(self, user_id: int) -> list[GroupRecord]:
        self.calls.append("groups_for_user")
        return [self.groups[g] for u, g in sorted(self.user_groups) if u == user_id]

    async def roles_for_groups(self, group_ids: list[int]) -> list[RoleRecord]:
        self.calls.append("roles_for_groups")
        ids = {r for g, r in self.group_roles if g in group_ids}
        return [self.roles[r] for r in sorted(ids)]

    async def permissions_for_roles(self, role_ids: list[int]) -> list[GrantedPermission]:
        self.calls.append("permissions_for_roles")
        # One entry per (role, permission) edge: duplicates are left for
        # the resolver to collapse.
        return [self.permissions[p] for r, p in sorted(self.role_permissions) if r in role_ids]

    async def get_module(self, module_id: int) -> ModuleRecord | None:
        return self.modules.get(module_id)

    async def get_module_by_name(self, name: str) -> ModuleRecord | None:
        return next((m for m in self.modules.values() if m.name == name), None)
