"""
Informational and probe endpoints.

``/info`` reports only the project name and version; infrastructure
details such as database host or port are never exposed.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db, require_admin, require_user_or_admin
from app.core.config import settings
from app.core.security import Identity
from app.schemas.common import MessageResponse

router = APIRouter(tags=["info"])
logger = logging.getLogger(__name__)


class InfoResponse(BaseModel):
    name: str
    version: str


class HealthResponse(BaseModel):
    status: str
    db: bool


@router.get("/health", response_model=HealthResponse)
async def health(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """Public health check including DB connectivity."""
    try:
        await db.execute(select(1))
    except SQLAlchemyError as e:
        logger.error("Health check DB failure: %s", e)
        return HealthResponse(status="degraded", db=False)
    return HealthResponse(status="ok", db=True)


@router.get("/info", response_model=InfoResponse)
async def info(_user: Identity = Depends(require_user_or_admin)) -> InfoResponse:
    return InfoResponse(name=settings.PROJECT_NAME, version=settings.VERSION)


@router.get("/protected", response_model=MessageResponse)
async def protected(identity: Identity = Depends(require_user_or_admin)) -> MessageResponse:
    return MessageResponse(
        message=f"Welcome user {identity.user_id}, your role is {identity.role.value}. "
        "This is a protected route!"
    )


@router.get("/admin", response_model=MessageResponse)
async def admin_only(_admin: Identity = Depends(require_admin)) -> MessageResponse:
    return MessageResponse(message="Welcome Admin! This is an admin-only route.")
