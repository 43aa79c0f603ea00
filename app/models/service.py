"""
Service model: priced catalogue entries billed on invoices.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Column, Integer, Numeric, String

from app.db.base import Base


class Service(Base):
    __tablename__ = "services"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(100), unique=True, nullable=False)  # type: ignore[assignment]
    description: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    price: Decimal = Column(Numeric(10, 2), nullable=False)  # type: ignore[assignment]
