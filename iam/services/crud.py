"""
Shared query helpers for the CRUD services.

Each service owns its business rules (uniqueness, cascades); these
helpers only remove the repetition of "fetch or 404", "reject a
duplicate", and "apply list filters".
"""

from typing import Any, TypeVar

from sqlalchemy import Select, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from iam.core.errors import ConflictError, NotFoundError
from iam.models.base import Base

ModelT = TypeVar("ModelT", bound=Base)


async def get_or_404(model: type[ModelT], entity_id: int, db: AsyncSession, label: str) -> ModelT:
    entity = await db.get(model, entity_id)
    if entity is None:
        raise NotFoundError(f"{label} with ID {entity_id} not found")
    return entity


async def ensure_unique(
    model: type[ModelT],
    db: AsyncSession,
    message: str,
    exclude_id: int | None = None,
    **criteria: Any,
) -> None:
    """Raise ConflictError if a row (other than `exclude_id`) matches all criteria."""
    stmt = select(model.id).filter_by(**criteria)
    if exclude_id is not None:
        stmt = stmt.where(model.id != exclude_id)
    if (await db.execute(stmt.limit(1))).first() is not None:
        raise ConflictError(message)


def apply_list_filters(
    stmt: Select,
    model: type[ModelT],
    *,
    search: str | None,
    search_columns: list[InstrumentedAttribute],
    is_active: bool | None,
    skip: int,
    limit: int,
) -> Select:
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(or_(*(column.ilike(pattern) for column in search_columns)))
    if is_active is not None:
        stmt = stmt.where(model.is_active == is_active)
    return stmt.order_by(model.id).offset(skip).limit(limit)
