"""
Invoice & InvoiceItem models.

Item prices are copied from the service at creation time so that later
catalogue changes never rewrite an issued invoice.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from app.db.base import Base


class InvoiceStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"


class Invoice(Base):
    __tablename__ = "invoices"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    customer_id: int = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)  # type: ignore[assignment]
    vehicle_id: int = Column(Integer, ForeignKey("vehicles.id"), nullable=False)  # type: ignore[assignment]
    invoice_date: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    total_amount: Decimal = Column(Numeric(10, 2), nullable=False)  # type: ignore[assignment]
    status: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default=InvoiceStatus.PENDING.value,
        server_default=InvoiceStatus.PENDING.value,
    )  # pending | paid | cancelled

    customer = relationship("Customer")
    vehicle = relationship("Vehicle")
    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
    )


class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    invoice_id: int = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)  # type: ignore[assignment]
    service_id: int = Column(Integer, ForeignKey("services.id"), nullable=False)  # type: ignore[assignment]
    quantity: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    unit_price: Decimal = Column(Numeric(10, 2), nullable=False)  # type: ignore[assignment]

    invoice = relationship("Invoice", back_populates="items")
    service = relationship("Service")
