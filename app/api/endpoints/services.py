"""
Service catalogue endpoints.

- GET operations (list, search, by id) are open to users and admins.
- POST / PUT / DELETE require admin role.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db, require_admin, require_user_or_admin
from app.core.exceptions import ConflictError, NotFoundError
from app.core.security import Identity
from app.db.utils import escape_like
from app.models.invoice import InvoiceItem
from app.models.service import Service
from app.schemas.common import DeleteResponse, update_changes
from app.schemas.service import ServiceCreate, ServiceRead, ServiceUpdate

router = APIRouter(prefix="/services", tags=["services"])
logger = logging.getLogger(__name__)

# Nullable columns a PUT may clear with an explicit null
_CLEARABLE = frozenset({"description"})

_NAME_TAKEN = "Service with this name already exists"


async def _get_service_or_404(db: AsyncSession, service_id: int) -> Service:
    result = await db.execute(select(Service).where(Service.id == service_id))
    service = result.scalar_one_or_none()
    if service is None:
        raise NotFoundError("Service not found")
    return service


async def _ensure_name_free(db: AsyncSession, name: str, exclude_id: int | None = None) -> None:
    query = select(Service.id).where(Service.name == name)
    if exclude_id is not None:
        query = query.where(Service.id != exclude_id)
    if (await db.execute(query)).first() is not None:
        raise ConflictError(_NAME_TAKEN)


@router.get("", response_model=list[ServiceRead])
async def list_services(
    db: AsyncSession = Depends(get_db),
    _user: Identity = Depends(require_user_or_admin),
) -> list[Service]:
    result = await db.execute(select(Service).order_by(Service.id))
    return list(result.scalars().all())


@router.get("/search", response_model=list[ServiceRead])
async def search_services(
    query: str | None = Query(default=None, max_length=100),
    db: AsyncSession = Depends(get_db),
    _user: Identity = Depends(require_user_or_admin),
) -> list[Service]:
    """Match *query* against name or description, case-insensitively."""
    stmt = select(Service).order_by(Service.name)
    if query:
        pattern = f"%{escape_like(query)}%"
        stmt = stmt.where(
            or_(
                Service.name.ilike(pattern, escape="\\"),
                Service.description.ilike(pattern, escape="\\"),
            )
        )
    result = await db.execute(stmt)
    return list(result.scalars().all())


@router.get("/{service_id}", response_model=ServiceRead)
async def get_service(
    service_id: int,
    db: AsyncSession = Depends(get_db),
    _user: Identity = Depends(require_user_or_admin),
) -> Service:
    return await _get_service_or_404(db, service_id)


@router.post("", response_model=ServiceRead, status_code=201)
async def create_service(
    body: ServiceCreate,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> Service:
    await _ensure_name_free(db, body.name)

    service = Service(**body.model_dump())
    db.add(service)
    await db.commit()
    await db.refresh(service)
    logger.info("Created service %d (%s) at %s", service.id, service.name, service.price)
    return service


@router.put("/{service_id}", response_model=ServiceRead)
async def update_service(
    service_id: int,
    body: ServiceUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> Service:
    """Update a service. Existing invoice items keep the price they were billed at."""
    service = await _get_service_or_404(db, service_id)
    changes = update_changes(body, _CLEARABLE)
    if "name" in changes:
        await _ensure_name_free(db, changes["name"], exclude_id=service_id)

    for field, value in changes.items():
        setattr(service, field, value)

    await db.commit()
    await db.refresh(service)
    logger.info("Updated service %d", service_id)
    return service


@router.delete("/{service_id}", response_model=DeleteResponse)
async def delete_service(
    service_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> DeleteResponse:
    service = await _get_service_or_404(db, service_id)
    billed = await db.execute(
        select(InvoiceItem.id).where(InvoiceItem.service_id == service_id).limit(1)
    )
    if billed.first() is not None:
        raise ConflictError("Service is referenced by existing invoices")

    await db.delete(service)
    await db.commit()
    logger.info("Deleted service %d", service_id)
    return DeleteResponse(message="Service deleted successfully", id=service_id)
