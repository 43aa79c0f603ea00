"""Pydantic schemas for JWT tokens."""

from __future__ import annotations

from pydantic import BaseModel

from app.models.user import Role


class TokenPayload(BaseModel):
    """Claims of a verified access token.

    ``sub`` arrives as a string and is coerced to the integer user id;
    ``role`` must be one of the known roles.
    """

    sub: int
    role: Role
    type: str
    exp: int
    iat: int | None = None
