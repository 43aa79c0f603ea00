"""Pydantic schemas for registration, login and user listing."""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, field_validator

from app.models.user import Role

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_]{3,20}$")
_PASSWORD_RE = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&=])[A-Za-z\d@$!%*?&=]{8,}$"
)


class UserRegister(BaseModel):
    username: str
    password: str
    role: Role = Role.USER

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Password is required and cannot be empty.")
        if not _PASSWORD_RE.fullmatch(v):
            raise ValueError(
                "Password must be at least 8 characters long and include at least "
                "one uppercase letter, one lowercase letter, one number, and one "
                "special character (@$!%*?&=)."
            )
        return v

    @field_validator("username")
    @classmethod
    def _username(cls, v: str) -> str:
        if not _USERNAME_RE.fullmatch(v):
            raise ValueError(
                "Invalid username. It must be 3-20 characters long and contain "
                "only letters, numbers, and underscores."
            )
        return v

    @field_validator("role", mode="before")
    @classmethod
    def _role(cls, v: object) -> object:
        if v is None:
            return Role.USER
        if isinstance(v, str) and v not in {r.value for r in Role}:
            raise ValueError('Invalid role. Role must be "user" or "admin".')
        return v


class UserLogin(BaseModel):
    username: str
    password: str


class UserPublic(BaseModel):
    id: int
    username: str
    role: Role

    model_config = {"from_attributes": True}


class UserRead(UserPublic):
    created_at: datetime | None = None


class RegisterResponse(BaseModel):
    message: str
    user: UserPublic


class LoginResponse(BaseModel):
    message: str
    token: str
    token_type: str = "bearer"
    user: UserPublic
