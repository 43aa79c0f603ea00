"""
Vehicle CRUD endpoints: admin only.

Every vehicle belongs to exactly one existing customer; license plate and
VIN are unique across the garage.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.deps import get_db, require_admin
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.security import Identity
from app.models.customer import Customer, Vehicle
from app.models.feedback import Feedback
from app.models.invoice import Invoice
from app.schemas.common import DeleteResponse, update_changes
from app.schemas.customer import VehicleCreate, VehicleRead, VehicleUpdate

router = APIRouter(prefix="/vehicles", tags=["vehicles"])
logger = logging.getLogger(__name__)

# Nullable columns a PUT may clear with an explicit null
_CLEARABLE = frozenset({"vin"})

_DUPLICATE = "Vehicle with this license plate or VIN already exists"


def _to_read(vehicle: Vehicle) -> VehicleRead:
    return VehicleRead(
        id=vehicle.id,
        customer_id=vehicle.customer_id,
        make=vehicle.make,
        model=vehicle.model,
        year=vehicle.year,
        license_plate=vehicle.license_plate,
        vin=vehicle.vin,
        customer_first_name=vehicle.customer.first_name if vehicle.customer else None,
        customer_last_name=vehicle.customer.last_name if vehicle.customer else None,
    )


async def _load(db: AsyncSession, vehicle_id: int) -> Vehicle:
    result = await db.execute(
        select(Vehicle)
        .options(selectinload(Vehicle.customer))
        .where(Vehicle.id == vehicle_id)
        .execution_options(populate_existing=True)
    )
    vehicle = result.scalar_one_or_none()
    if vehicle is None:
        raise NotFoundError("Vehicle not found")
    return vehicle


async def _ensure_customer(db: AsyncSession, customer_id: int) -> None:
    result = await db.execute(select(Customer.id).where(Customer.id == customer_id))
    if result.first() is None:
        raise ValidationError("Customer not found")


async def _is_referenced(db: AsyncSession, vehicle_id: int) -> bool:
    for model in (Invoice, Feedback):
        used = await db.execute(select(model.id).where(model.vehicle_id == vehicle_id).limit(1))
        if used.first() is not None:
            return True
    return False


async def _ensure_unique(
    db: AsyncSession,
    license_plate: str | None,
    vin: str | None,
    exclude_id: int | None = None,
) -> None:
    clauses = []
    if license_plate is not None:
        clauses.append(Vehicle.license_plate == license_plate)
    if vin is not None:
        clauses.append(Vehicle.vin == vin)
    if not clauses:
        return
    query = select(Vehicle.id).where(or_(*clauses))
    if exclude_id is not None:
        query = query.where(Vehicle.id != exclude_id)
    if (await db.execute(query)).first() is not None:
        raise ConflictError(_DUPLICATE)


@router.get("", response_model=list[VehicleRead])
async def list_vehicles(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    customer_id: int | None = None,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> list[VehicleRead]:
    query = select(Vehicle).options(selectinload(Vehicle.customer)).order_by(Vehicle.id)
    if customer_id is not None:
        query = query.where(Vehicle.customer_id == customer_id)
    result = await db.execute(query.offset(skip).limit(limit))
    return [_to_read(v) for v in result.scalars().all()]


@router.get("/{vehicle_id}", response_model=VehicleRead)
async def get_vehicle(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> VehicleRead:
    return _to_read(await _load(db, vehicle_id))


@router.post("", response_model=VehicleRead, status_code=201)
async def create_vehicle(
    body: VehicleCreate,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> VehicleRead:
    await _ensure_customer(db, body.customer_id)
    await _ensure_unique(db, body.license_plate, body.vin)

    vehicle = Vehicle(**body.model_dump())
    db.add(vehicle)
    await db.commit()
    logger.info("Created vehicle %d (%s)", vehicle.id, vehicle.license_plate)
    return _to_read(await _load(db, vehicle.id))


@router.put("/{vehicle_id}", response_model=VehicleRead)
async def update_vehicle(
    vehicle_id: int,
    body: VehicleUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> VehicleRead:
    vehicle = await _load(db, vehicle_id)
    changes = update_changes(body, _CLEARABLE)
    if "customer_id" in changes and changes["customer_id"] != vehicle.customer_id:
        await _ensure_customer(db, changes["customer_id"])
        if await _is_referenced(db, vehicle_id):
            raise ConflictError("Vehicle with invoices or feedback cannot change owner")
    await _ensure_unique(
        db, changes.get("license_plate"), changes.get("vin"), exclude_id=vehicle_id
    )

    for field, value in changes.items():
        setattr(vehicle, field, value)

    await db.commit()
    logger.info("Updated vehicle %d", vehicle_id)
    return _to_read(await _load(db, vehicle_id))


@router.delete("/{vehicle_id}", response_model=DeleteResponse)
async def delete_vehicle(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> DeleteResponse:
    vehicle = await _load(db, vehicle_id)
    if await _is_referenced(db, vehicle_id):
        raise ConflictError("Vehicle is referenced by invoices or feedback")

    await db.delete(vehicle)
    await db.commit()
    logger.info("Deleted vehicle %d", vehicle_id)
    return DeleteResponse(message="Vehicle deleted successfully", id=vehicle_id)
