"""
Feedback endpoints.

Users may submit feedback and read back what they submitted; only admins
see everyone's feedback or change / delete it.  A user asking for a row
they do not own gets the same 404 as for a row that does not exist.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.deps import get_db, require_admin, require_user_or_admin
from app.core.exceptions import NotFoundError, ValidationError
from app.core.security import Identity
from app.models.customer import Customer, Vehicle
from app.models.feedback import Feedback
from app.models.user import Role
from app.schemas.common import DeleteResponse, update_changes
from app.schemas.feedback import FeedbackCreate, FeedbackRead, FeedbackUpdate

router = APIRouter(prefix="/feedback", tags=["feedback"])
logger = logging.getLogger(__name__)

# Nullable columns a PUT may clear with an explicit null
_CLEARABLE = frozenset({"comments"})


def _to_read(fb: Feedback) -> FeedbackRead:
    return FeedbackRead(
        id=fb.id,
        customer_id=fb.customer_id,
        vehicle_id=fb.vehicle_id,
        rating=fb.rating,
        comments=fb.comments,
        feedback_date=fb.feedback_date,
        created_by=fb.created_by,
        customer_first_name=fb.customer.first_name if fb.customer else None,
        customer_last_name=fb.customer.last_name if fb.customer else None,
        vehicle_license_plate=fb.vehicle.license_plate if fb.vehicle else None,
    )


def _visible_to(query: Select, identity: Identity) -> Select:
    """Restrict *query* to rows the identity may read."""
    if identity.role is Role.ADMIN:
        return query
    return query.where(Feedback.created_by == identity.user_id)


async def _load(db: AsyncSession, feedback_id: int, identity: Identity) -> Feedback:
    query = (
        select(Feedback)
        .options(selectinload(Feedback.customer), selectinload(Feedback.vehicle))
        .where(Feedback.id == feedback_id)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(_visible_to(query, identity))
    fb = result.scalar_one_or_none()
    if fb is None:
        raise NotFoundError("Feedback not found")
    return fb


async def _ensure_links(db: AsyncSession, customer_id: int, vehicle_id: int) -> None:
    if await db.get(Customer, customer_id) is None:
        raise ValidationError("Customer not found")
    vehicle = await db.get(Vehicle, vehicle_id)
    if vehicle is None:
        raise ValidationError("Vehicle not found")
    if vehicle.customer_id != customer_id:
        raise ValidationError("Vehicle does not belong to this customer")


@router.get("", response_model=list[FeedbackRead])
async def list_feedback(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_user_or_admin),
) -> list[FeedbackRead]:
    query = (
        select(Feedback)
        .options(selectinload(Feedback.customer), selectinload(Feedback.vehicle))
        .order_by(Feedback.id)
    )
    result = await db.execute(_visible_to(query, identity).offset(skip).limit(limit))
    return [_to_read(fb) for fb in result.scalars().all()]


@router.get("/{feedback_id}", response_model=FeedbackRead)
async def get_feedback(
    feedback_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_user_or_admin),
) -> FeedbackRead:
    return _to_read(await _load(db, feedback_id, identity))


@router.post("", response_model=FeedbackRead, status_code=201)
async def create_feedback(
    body: FeedbackCreate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_user_or_admin),
) -> FeedbackRead:
    await _ensure_links(db, body.customer_id, body.vehicle_id)

    fb = Feedback(**body.model_dump(), created_by=identity.user_id)
    db.add(fb)
    await db.commit()
    logger.info("Feedback %d submitted by user %d", fb.id, identity.user_id)
    return _to_read(await _load(db, fb.id, identity))


@router.put("/{feedback_id}", response_model=FeedbackRead)
async def update_feedback(
    feedback_id: int,
    body: FeedbackUpdate,
    db: AsyncSession = Depends(get_db),
    admin: Identity = Depends(require_admin),
) -> FeedbackRead:
    fb = await _load(db, feedback_id, admin)
    changes = update_changes(body, _CLEARABLE)
    if "customer_id" in changes or "vehicle_id" in changes:
        await _ensure_links(
            db,
            changes.get("customer_id", fb.customer_id),
            changes.get("vehicle_id", fb.vehicle_id),
        )

    for field, value in changes.items():
        setattr(fb, field, value)

    await db.commit()
    logger.info("Updated feedback %d", feedback_id)
    return _to_read(await _load(db, feedback_id, admin))


@router.delete("/{feedback_id}", response_model=DeleteResponse)
async def delete_feedback(
    feedback_id: int,
    db: AsyncSession = Depends(get_db),
    admin: Identity = Depends(require_admin),
) -> DeleteResponse:
    fb = await _load(db, feedback_id, admin)
    await db.delete(fb)
    await db.commit()
    logger.info("Deleted feedback %d", feedback_id)
    return DeleteResponse(message="Feedback deleted successfully", id=feedback_id)
