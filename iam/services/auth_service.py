"""
Authentication service.

Handles:
- Self-registration (creates an active user with no group memberships)
- Login by email + password
- Token payload construction (`sub` is the user id as a string)

Registration grants nothing: a new user resolves to an empty
permission set until an administrator adds them to a group.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from iam.core.errors import UnauthenticatedError
from iam.core.security import create_access_token, verify_password
from iam.models.user import User
from iam.schemas import AuthResponse, RegisterRequest, UserCreate, UserOut
from iam.services import user_service

logger = logging.getLogger(__name__)


# ── Helpers ──────────────────────────────────────────────────────────

def _build_access_payload(user: User) -> dict:
    return {
        "sub": str(user.id),
        "username": user.username,
        "email": user.email,
    }


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(
        user=UserOut.model_validate(user),
        token=create_access_token(_build_access_payload(user)),
    )


# ── Register ─────────────────────────────────────────────────────────

async def register_user(data: RegisterRequest, db: AsyncSession) -> AuthResponse:
    user = await user_service.create_user(UserCreate(**data.model_dump()), db)
    logger.info("User %s registered", user.id)
    return _auth_response(user)


# ── Login ────────────────────────────────────────────────────────────

async def authenticate_user(email: str, password: str, db: AsyncSession) -> AuthResponse:
    """
    Validate credentials and issue an access token.

    Unknown email and wrong password share one message so the response
    does not reveal which accounts exist.
    """
    user = await user_service.get_user_by_email(email, db)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Failed login for %s", email)
        raise UnauthenticatedError("Invalid email or password")
    if not user.is_active:
        raise UnauthenticatedError("Account is deactivated")

    logger.info("User %s logged in", user.id)
    return _auth_response(user)
