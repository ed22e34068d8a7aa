from __future__ import annotations

"""
Permission model.

A permission is a (name, module, action) grant.  The action space is
closed: exactly create / read / update / delete, enforced by a DB enum
as well as by `PermissionAction` everywhere in Python.  The triple
(name, module_id, action) is unique, so a module carries at most one
permission per action under a given name.
"""

import enum
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Enum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from iam.models.base import Base, IntegerPrimaryKeyMixin, TimestampMixin

if TYPE_CHECKING:
    from iam.models.module import Module


class PermissionAction(str, enum.Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


class Permission(Base, IntegerPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "permissions"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    action: Mapped[PermissionAction] = mapped_column(
        Enum(
            PermissionAction,
            name="permission_action",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
    )
    module_id: Mapped[int] = mapped_column(
        ForeignKey("modules.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # ── Relationships ────────────────────────────────────────────────
    module: Mapped["Module"] = relationship(  # noqa: F821
        lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint("name", "module_id", "action", name="uq_permissions_name_module_action"),
    )

    def __repr__(self) -> str:
        return f"<Permission {self.name} {self.action.value}>"
