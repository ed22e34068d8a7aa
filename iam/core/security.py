"""
Password hashing & JWT helpers.

- Passwords are hashed with bcrypt directly (passlib is unmaintained
  and broken with bcrypt>=4.1).
- Access tokens are stateless HS256 JWTs carrying the user id in
  `sub` plus username / email for client convenience.
- `get_current_user_id` is the authentication dependency every
  protected route builds on; it only establishes WHO is calling.
  Authorization is the RBAC gate's job (`iam.rbac.dependencies`).
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from iam.core.config import settings
from iam.core.database import get_db
from iam.core.errors import UnauthenticatedError
from iam.rbac.store import EntityStore
from iam.schemas import MAX_ID

# ── Password hashing ────────────────────────────────────────────────


def hash_password(plain: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))


# ── JWT ──────────────────────────────────────────────────────────────
# auto_error=False so a missing header surfaces as our own 401 body.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def create_access_token(data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode & validate a JWT.  Raises UnauthenticatedError on failure."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise UnauthenticatedError("Invalid or expired token")


# ── Per-request identity ────────────────────────────────────────────


async def get_current_user_id(
    token: str | None = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> int:
    """
    FastAPI dependency — resolve the bearer token to a live user id.

    Fails with 401 when the token is missing, malformed, expired, or
    points at a user that was deleted or deactivated since issuance.
    """
    if not token:
        raise UnauthenticatedError("Authentication required. No token provided.")

    payload = decode_access_token(token)
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise UnauthenticatedError("Invalid token payload")
    if not 1 <= user_id <= MAX_ID:
        raise UnauthenticatedError("Invalid token payload")

    user = await EntityStore(db).get_user(user_id)
    if user is None:
        raise UnauthenticatedError("User not found")
    if not user.is_active:
        raise UnauthenticatedError("Account is deactivated")
    return user.id
