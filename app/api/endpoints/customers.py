"""
Customer CRUD endpoints: admin only.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db, require_admin
from app.core.exceptions import ConflictError, NotFoundError
from app.core.security import Identity
from app.db.utils import escape_like
from app.models.customer import Customer, Vehicle
from app.schemas.common import DeleteResponse, update_changes
from app.schemas.customer import CustomerCreate, CustomerRead, CustomerUpdate

router = APIRouter(prefix="/customers", tags=["customers"])
logger = logging.getLogger(__name__)

# Nullable columns a PUT may clear with an explicit null
_CLEARABLE = frozenset({"phone"})

_EMAIL_TAKEN = "Customer with this email already exists"


async def _get_customer_or_404(db: AsyncSession, customer_id: int) -> Customer:
    result = await db.execute(select(Customer).where(Customer.id == customer_id))
    customer = result.scalar_one_or_none()
    if customer is None:
        raise NotFoundError("Customer not found")
    return customer


async def _ensure_email_free(db: AsyncSession, email: str, exclude_id: int | None = None) -> None:
    query = select(Customer.id).where(Customer.email == email)
    if exclude_id is not None:
        query = query.where(Customer.id != exclude_id)
    if (await db.execute(query)).first() is not None:
        raise ConflictError(_EMAIL_TAKEN)


@router.get("", response_model=list[CustomerRead])
async def list_customers(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> list[Customer]:
    result = await db.execute(
        select(Customer).order_by(Customer.id).offset(skip).limit(limit)
    )
    return list(result.scalars().all())


@router.get("/search", response_model=list[CustomerRead])
async def search_customers(
    last_name: str = Query(min_length=1, max_length=100),
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> list[Customer]:
    """Case-insensitive substring search on last name."""
    pattern = f"%{escape_like(last_name)}%"
    result = await db.execute(
        select(Customer)
        .where(Customer.last_name.ilike(pattern, escape="\\"))
        .order_by(Customer.last_name, Customer.first_name)
    )
    return list(result.scalars().all())


@router.get("/{customer_id}", response_model=CustomerRead)
async def get_customer(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> Customer:
    return await _get_customer_or_404(db, customer_id)


@router.post("", response_model=CustomerRead, status_code=201)
async def create_customer(
    body: CustomerCreate,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> Customer:
    await _ensure_email_free(db, body.email)

    customer = Customer(**body.model_dump())
    db.add(customer)
    await db.commit()
    await db.refresh(customer)
    logger.info("Created customer %d", customer.id)
    return customer


@router.put("/{customer_id}", response_model=CustomerRead)
async def update_customer(
    customer_id: int,
    body: CustomerUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> Customer:
    customer = await _get_customer_or_404(db, customer_id)
    changes = update_changes(body, _CLEARABLE)
    if "email" in changes:
        await _ensure_email_free(db, changes["email"], exclude_id=customer_id)

    for field, value in changes.items():
        setattr(customer, field, value)

    await db.commit()
    await db.refresh(customer)
    logger.info("Updated customer %d", customer_id)
    return customer


@router.delete("/{customer_id}", response_model=DeleteResponse)
async def delete_customer(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> DeleteResponse:
    customer = await _get_customer_or_404(db, customer_id)
    owned = await db.execute(select(Vehicle.id).where(Vehicle.customer_id == customer_id).limit(1))
    if owned.first() is not None:
        raise ConflictError("Customer still has registered vehicles")

    await db.delete(customer)
    await db.commit()
    logger.info("Deleted customer %d", customer_id)
    return DeleteResponse(message="Customer deleted successfully", id=customer_id)
