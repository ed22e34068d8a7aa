"""
Entity store — the read-only view of the access graph.

The resolver never touches ORM objects or sessions directly; it talks
to this store, which answers a handful of flat queries and hands back
frozen records:

    user ──user_groups──► groups ──group_roles──► roles
         ──role_permissions──► permissions (+ owning module id/name)

Every method is a single SELECT.  Nothing here writes.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from iam.models.group import Group, user_groups
from iam.models.module import Module
from iam.models.permission import Permission, PermissionAction
from iam.models.role import Role, group_roles, role_permissions
from iam.models.user import User


@dataclass(frozen=True)
class UserRecord:
    id: int
    username: str
    is_active: bool


@dataclass(frozen=True)
class GroupRecord:
    id: int
    name: str


@dataclass(frozen=True)
class RoleRecord:
    id: int
    name: str


@dataclass(frozen=True)
class ModuleRecord:
    id: int
    name: str


@dataclass(frozen=True)
class GrantedPermission:
    """A permission row annotated with its owning module."""

    id: int
    name: str
    action: PermissionAction
    module_id: int
    module_name: str
    description: str | None = None
    is_active: bool = True


class EntityStore:
    """SQLAlchemy-backed store bound to one request's session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, user_id: int) -> UserRecord | None:
        stmt = select(User.id, User.username, User.is_active).where(User.id == user_id)
        row = (await self.db.execute(stmt)).one_or_none()
        if row is None:
            return None
        return UserRecord(id=row.id, username=row.username, is_active=row.is_active)

    async def groups_for_user(self, user_id: int) -> list[GroupRecord]:
        stmt = (
            select(Group.id, Group.name)
            .join(user_groups, user_groups.c.group_id == Group.id)
            .where(user_groups.c.user_id == user_id)
            .order_by(Group.id)
        )
        rows = (await self.db.execute(stmt)).all()
        return [GroupRecord(id=row.id, name=row.name) for row in rows]

    async def roles_for_groups(self, group_ids: Iterable[int]) -> list[RoleRecord]:
        ids = list(group_ids)
        if not ids:
            return []
        stmt = (
            select(Role.id, Role.name)
            .join(group_roles, group_roles.c.role_id == Role.id)
            .where(group_roles.c.group_id.in_(ids))
            .distinct()
            .order_by(Role.id)
        )
        rows = (await self.db.execute(stmt)).all()
        return [RoleRecord(id=row.id, name=row.name) for row in rows]

    async def permissions_for_roles(self, role_ids: Iterable[int]) -> list[GrantedPermission]:
        ids = list(role_ids)
        if not ids:
            return []
        stmt = (
            select(
                Permission.id,
                Permission.name,
                Permission.action,
                Permission.module_id,
                Module.name.label("module_name"),
                Permission.description,
                Permission.is_active,
            )
            .join(role_permissions, role_permissions.c.permission_id == Permission.id)
            .join(Module, Module.id == Permission.module_id)
            .where(role_permissions.c.role_id.in_(ids))
            .distinct()
            .order_by(Permission.id)
        )
        rows = (await self.db.execute(stmt)).all()
        return [
            GrantedPermission(
                id=row.id,
                name=row.name,
                action=PermissionAction(row.action),
                module_id=row.module_id,
                module_name=row.module_name,
                description=row.description,
                is_active=row.is_active,
            )
            for row in rows
        ]

    async def get_module(self, module_id: int) -> ModuleRecord | None:
        stmt = select(Module.id, Module.name).where(Module.id == module_id)
        row = (await self.db.execute(stmt)).one_or_none()
        return ModuleRecord(id=row.id, name=row.name) if row else None

    async def get_module_by_name(self, name: str) -> ModuleRecord | None:
        stmt = select(Module.id, Module.name).where(Module.name == name)
        row = (await self.db.execute(stmt)).one_or_none()
        return ModuleRecord(id=row.id, name=row.name) if row else None
