"""
Models package — import every model so SQLAlchemy's Base.metadata
knows about all tables (critical for `create_all` / Alembic).
"""

from iam.models.base import Base, IntegerPrimaryKeyMixin, TimestampMixin
from iam.models.user import User
from iam.models.group import Group, user_groups
from iam.models.role import Role, group_roles, role_permissions
from iam.models.module import Module
from iam.models.permission import Permission, PermissionAction

__all__ = [
    "Base",
    "IntegerPrimaryKeyMixin",
    "TimestampMixin",
    "User",
    "Group",
    "user_groups",
    "Role",
    "group_roles",
    "role_permissions",
    "Module",
    "Permission",
    "PermissionAction",
]
