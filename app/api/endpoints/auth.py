"""
Auth endpoints: registration and login.

Registration rejects existing usernames; it never overwrites an account.
Only an authenticated admin may register another admin.
"""

# No `from __future__ import annotations` here: slowapi wraps the login
# endpoint and FastAPI must be able to resolve its annotations.

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db, get_optional_identity
from app.core.config import settings
from app.core.exceptions import AuthorizationError, ValidationError
from app.core.rate_limit import limiter
from app.core.security import (
    Identity,
    create_access_token,
    get_password_hash,
    verify_password,
)
from app.models.user import Role, User
from app.schemas.user import (
    LoginResponse,
    RegisterResponse,
    UserLogin,
    UserPublic,
    UserRegister,
)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)

_BAD_CREDENTIALS = "Invalid credentials"


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: UserRegister,
    db: AsyncSession = Depends(get_db),
    caller: Optional[Identity] = Depends(get_optional_identity),
) -> RegisterResponse:
    """Create a user account. Role defaults to ``user``."""
    if body.role is Role.ADMIN and (caller is None or caller.role is not Role.ADMIN):
        raise AuthorizationError("Only administrators can create admin accounts")

    existing = await db.execute(select(User).where(User.username == body.username))
    if existing.scalar_one_or_none() is not None:
        raise ValidationError("Username already exists. Please choose another one.")

    user = User(
        username=body.username,
        hashed_password=get_password_hash(body.password),
        role=body.role.value,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration of the same name
        await db.rollback()
        raise ValidationError("Username already exists. Please choose another one.") from None
    await db.refresh(user)

    logger.info("Registered user %s (id=%d, role=%s)", user.username, user.id, user.role)
    return RegisterResponse(message="User registered", user=UserPublic.model_validate(user))


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    body: UserLogin,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """Verify username/password and issue a one-hour bearer token."""
    result = await db.execute(select(User).where(User.username == body.username))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(body.password, user.hashed_password):
        logger.info("Failed login for %r", body.username)
        raise ValidationError(_BAD_CREDENTIALS)

    role = Role(user.role)
    token = create_access_token(user.id, role)
    logger.info("User %s logged in", user.username)
    return LoginResponse(
        message="Logged in successfully",
        token=token,
        user=UserPublic(id=user.id, username=user.username, role=role),
    )
