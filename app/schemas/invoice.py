"""Pydantic schemas for invoices and their line items."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from app.models.invoice import InvoiceStatus


class InvoiceItemCreate(BaseModel):
    service_id: int
    quantity: int = Field(ge=1, le=1000)


class InvoiceCreate(BaseModel):
    customer_id: int
    vehicle_id: int
    items: list[InvoiceItemCreate] = Field(min_length=1, max_length=100)


class InvoiceCreated(BaseModel):
    id: int
    total_amount: float
    invoice_date: datetime
    status: InvoiceStatus
    message: str


class InvoiceItemRead(BaseModel):
    item_id: int
    service_id: int
    service_name: str | None
    quantity: int
    unit_price: float


class InvoiceSummary(BaseModel):
    id: int
    customer_id: int
    vehicle_id: int
    invoice_date: datetime
    total_amount: float
    status: InvoiceStatus
    customer_first_name: str | None = None
    customer_last_name: str | None = None
    vehicle_license_plate: str | None = None


class InvoiceRead(InvoiceSummary):
    items: list[InvoiceItemRead] = []


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatus


class InvoiceStatusRead(BaseModel):
    id: int
    status: InvoiceStatus
