"""
Module model.

A module is a protectable resource category ("Users", "Groups", ...).
Permissions are always scoped to exactly one module.
"""

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from iam.models.base import Base, IntegerPrimaryKeyMixin, TimestampMixin


class Module(Base, IntegerPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "modules"

    name: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Module {self.name}>"
