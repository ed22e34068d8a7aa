"""
Auth controller — registration & login.

Both routes are PUBLIC (no permission dependency).  A freshly
registered user holds no permissions until placed in a group.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from iam.core.database import get_db
from iam.schemas import AuthResponse, LoginRequest, RegisterRequest
from iam.services import auth_service

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Create an account and receive an access token."""
    return await auth_service.register_user(body, db)


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Authenticate with email + password → receive JWT."""
    return await auth_service.authenticate_user(body.email, body.password, db)
