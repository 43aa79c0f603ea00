"""
Invoice endpoints: admin only.

Creation reads each service price, freezes it on the line item, computes
the total and writes invoice + items in one transaction.  If any item
fails (unknown service, say) nothing is persisted.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.deps import get_db, require_admin
from app.core.exceptions import AppError, NotFoundError, ValidationError
from app.core.security import Identity
from app.models.customer import Customer, Vehicle
from app.models.invoice import Invoice, InvoiceItem, InvoiceStatus
from app.models.service import Service
from app.schemas.common import DeleteResponse
from app.schemas.invoice import (
    InvoiceCreate,
    InvoiceCreated,
    InvoiceItemRead,
    InvoiceRead,
    InvoiceStatusRead,
    InvoiceStatusUpdate,
    InvoiceSummary,
)

router = APIRouter(prefix="/invoices", tags=["invoices"])
logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")
# Largest value a Numeric(10, 2) column holds
MAX_INVOICE_TOTAL = Decimal("99999999.99")


def _summary_fields(invoice: Invoice) -> dict:
    return {
        "id": invoice.id,
        "customer_id": invoice.customer_id,
        "vehicle_id": invoice.vehicle_id,
        "invoice_date": invoice.invoice_date,
        "total_amount": invoice.total_amount,
        "status": InvoiceStatus(invoice.status),
        "customer_first_name": invoice.customer.first_name if invoice.customer else None,
        "customer_last_name": invoice.customer.last_name if invoice.customer else None,
        "vehicle_license_plate": invoice.vehicle.license_plate if invoice.vehicle else None,
    }


def _to_read(invoice: Invoice) -> InvoiceRead:
    items = [
        InvoiceItemRead(
            item_id=item.id,
            service_id=item.service_id,
            service_name=item.service.name if item.service else None,
            quantity=item.quantity,
            unit_price=item.unit_price,
        )
        for item in sorted(invoice.items, key=lambda i: i.id)
    ]
    return InvoiceRead(**_summary_fields(invoice), items=items)


def compute_total(lines: list[tuple[Decimal, int]]) -> Decimal:
    """Sum ``unit_price * quantity`` over *lines*, rounded to cents."""
    total = sum((price * qty for price, qty in lines), Decimal("0"))
    return total.quantize(_CENT)


async def _create_invoice(db: AsyncSession, body: InvoiceCreate) -> Invoice:
    customer = await db.get(Customer, body.customer_id)
    if customer is None:
        raise ValidationError("Customer not found")
    vehicle = await db.get(Vehicle, body.vehicle_id)
    if vehicle is None:
        raise ValidationError("Vehicle not found")
    if vehicle.customer_id != customer.id:
        raise ValidationError("Vehicle does not belong to this customer")

    items: list[InvoiceItem] = []
    for line in body.items:
        price = (
            await db.execute(select(Service.price).where(Service.id == line.service_id))
        ).scalar_one_or_none()
        if price is None:
            raise ValidationError(f"Service with ID {line.service_id} not found")
        items.append(
            InvoiceItem(
                service_id=line.service_id,
                quantity=line.quantity,
                unit_price=Decimal(price).quantize(_CENT),
            )
        )

    total = compute_total([(i.unit_price, i.quantity) for i in items])
    if total > MAX_INVOICE_TOTAL:
        raise ValidationError(f"Invoice total must not exceed {MAX_INVOICE_TOTAL}")

    invoice = Invoice(
        customer_id=customer.id,
        vehicle_id=vehicle.id,
        total_amount=total,
        status=InvoiceStatus.PENDING.value,
        items=items,
    )
    db.add(invoice)
    await db.flush()
    return invoice


async def _load(db: AsyncSession, invoice_id: int) -> Invoice:
    result = await db.execute(
        select(Invoice)
        .options(
            selectinload(Invoice.customer),
            selectinload(Invoice.vehicle),
            selectinload(Invoice.items).selectinload(InvoiceItem.service),
        )
        .where(Invoice.id == invoice_id)
        .execution_options(populate_existing=True)
    )
    invoice = result.scalar_one_or_none()
    if invoice is None:
        raise NotFoundError("Invoice not found")
    return invoice


@router.get("", response_model=list[InvoiceSummary])
async def list_invoices(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    status: InvoiceStatus | None = None,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> list[InvoiceSummary]:
    query = (
        select(Invoice)
        .options(selectinload(Invoice.customer), selectinload(Invoice.vehicle))
        .order_by(Invoice.id)
    )
    if status is not None:
        query = query.where(Invoice.status == status.value)
    result = await db.execute(query.offset(skip).limit(limit))
    return [InvoiceSummary(**_summary_fields(inv)) for inv in result.scalars().all()]


@router.get("/{invoice_id}", response_model=InvoiceRead)
async def get_invoice(
    invoice_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> InvoiceRead:
    return _to_read(await _load(db, invoice_id))


@router.post("", response_model=InvoiceCreated, status_code=201)
async def create_invoice(
    body: InvoiceCreate,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> InvoiceCreated:
    try:
        invoice = await _create_invoice(db, body)
        await db.commit()
    except AppError as exc:
        await db.rollback()
        logger.info("Invoice creation rolled back: %s", exc.message)
        raise
    except Exception:
        await db.rollback()
        logger.exception("Invoice creation failed; rolled back")
        raise

    logger.info(
        "Created invoice %d for customer %d: %d item(s), total %s",
        invoice.id,
        invoice.customer_id,
        len(body.items),
        invoice.total_amount,
    )
    return InvoiceCreated(
        id=invoice.id,
        total_amount=invoice.total_amount,
        invoice_date=invoice.invoice_date,
        status=InvoiceStatus(invoice.status),
        message="Invoice created successfully",
    )


@router.patch("/{invoice_id}/status", response_model=InvoiceStatusRead)
async def update_invoice_status(
    invoice_id: int,
    body: InvoiceStatusUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> InvoiceStatusRead:
    invoice = await db.get(Invoice, invoice_id)
    if invoice is None:
        raise NotFoundError("Invoice not found")

    invoice.status = body.status.value
    await db.commit()
    logger.info("Invoice %d status -> %s", invoice_id, body.status.value)
    return InvoiceStatusRead(id=invoice_id, status=body.status)


@router.delete("/{invoice_id}", response_model=DeleteResponse)
async def delete_invoice(
    invoice_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> DeleteResponse:
    """Delete an invoice together with its line items."""
    invoice = await _load(db, invoice_id)
    await db.delete(invoice)
    await db.commit()
    logger.info("Deleted invoice %d", invoice_id)
    return DeleteResponse(message="Invoice deleted successfully", id=invoice_id)
