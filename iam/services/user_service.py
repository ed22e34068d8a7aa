"""
User service — CRUD & query helpers.

Passwords are hashed here, before a row is written; the plaintext
never reaches the model layer.  Deleting a user removes its group
memberships first, inside the same transaction.
"""

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from iam.core.security import hash_password
from iam.models.group import user_groups
from iam.models.user import User
from iam.schemas import UserCreate, UserUpdate
from iam.services.crud import apply_list_filters, ensure_unique, get_or_404

logger = logging.getLogger(__name__)


async def get_user_by_id(user_id: int, db: AsyncSession) -> User:
    return await get_or_404(User, user_id, db, "User")


async def get_user_by_email(email: str, db: AsyncSession) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def list_users(
    db: AsyncSession,
    search: str | None = None,
    is_active: bool | None = None,
    skip: int = 0,
    limit: int = 50,
) -> list[User]:
    stmt = apply_list_filters(
        select(User),
        User,
        search=search,
        search_columns=[User.username, User.email, User.first_name, User.last_name],
        is_active=is_active,
        skip=skip,
        limit=limit,
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def create_user(data: UserCreate, db: AsyncSession) -> User:
    """Create a user after checking username / email uniqueness."""
    await ensure_unique(User, db, "Email already registered", email=data.email)
    await ensure_unique(User, db, "Username already taken", username=data.username)

    user = User(
        username=data.username,
        email=data.email,
        password_hash=hash_password(data.password),
        first_name=data.first_name,
        last_name=data.last_name,
        is_active=data.is_active,
    )
    db.add(user)
    await db.flush()
    logger.info("User %s created (username=%s)", user.id, user.username)
    return user


async def update_user(user_id: int, data: UserUpdate, db: AsyncSession) -> User:
    user = await get_user_by_id(user_id, db)
    changes = data.model_dump(exclude_unset=True)

    if changes.get("email") and changes["email"] != user.email:
        await ensure_unique(User, db, "Email already registered", exclude_id=user.id, email=changes["email"])
    if changes.get("username") and changes["username"] != user.username:
        await ensure_unique(User, db, "Username already taken", exclude_id=user.id, username=changes["username"])

    password = changes.pop("password", None)
    if password:
        user.password_hash = hash_password(password)
    for field, value in changes.items():
        if value is None and field in ("username", "email", "is_active"):
            continue
        setattr(user, field, value)

    await db.flush()
    logger.info("User %s updated (fields=%s)", user.id, sorted(changes) + (["password"] if password else []))
    return user


async def delete_user(user_id: int, db: AsyncSession) -> None:
    """Remove the user and its group memberships."""
    await get_user_by_id(user_id, db)
    await db.execute(delete(user_groups).where(user_groups.c.user_id == user_id))
    await db.execute(delete(User).where(User.id == user_id))
    await db.flush()
    logger.info("User %s deleted", user_id)
