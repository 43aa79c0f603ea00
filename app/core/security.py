"""
JWT token creation / verification and password hashing (bcrypt).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError as PydanticValidationError

from app.core.config import settings
from app.models.user import Role
from app.schemas.token import TokenPayload

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

_ALGORITHM = settings.ALGORITHM
_SECRET = settings.SECRET_KEY


class InvalidTokenError(Exception):
    """Token signature, expiry or claims failed verification."""


@dataclass(frozen=True)
class Identity:
    """Caller identity as carried by a verified access token."""

    user_id: int
    role: Role


# ── Passwords ───────────────────────────────────────────────────────
def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def get_password_hash(plain: str) -> str:
    return pwd_context.hash(plain)


# ── JWT tokens ──────────────────────────────────────────────────────
def create_access_token(
    user_id: int,
    role: Role,
    expires_delta: timedelta | None = None,
) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    return jwt.encode(
        {
            "sub": str(user_id),
            "role": Role(role).value,
            "type": "access",
            "iat": now,
            "exp": expire,
        },
        _SECRET,
        algorithm=_ALGORITHM,
    )


def decode_access_token(token: str) -> Identity:
    """Verify signature and expiry, then return the embedded identity.

    Raises :class:`InvalidTokenError` for any token that cannot be trusted:
    bad signature, expired, wrong type, or malformed claims.
    """
    try:
        raw = jwt.decode(token, _SECRET, algorithms=[_ALGORITHM])
    except JWTError as exc:
        raise InvalidTokenError("Token verification failed") from exc

    try:
        payload = TokenPayload.model_validate(raw)
    except PydanticValidationError as exc:
        raise InvalidTokenError("Malformed token claims") from exc

    if payload.type != "access":
        raise InvalidTokenError("Not an access token")
    return Identity(user_id=payload.sub, role=payload.role)
