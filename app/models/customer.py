"""
Customer & Vehicle models: a customer owns zero or more vehicles.
"""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.db.base import Base


class Customer(Base):
    __tablename__ = "customers"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    first_name: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    last_name: str = Column(String(100), nullable=False, index=True)  # type: ignore[assignment]
    email: str = Column(String(320), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    phone: str | None = Column(String(30), nullable=True)  # type: ignore[assignment]

    vehicles = relationship("Vehicle", back_populates="customer")


class Vehicle(Base):
    __tablename__ = "vehicles"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    customer_id: int = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)  # type: ignore[assignment]
    make: str = Column(String(50), nullable=False)  # type: ignore[assignment]
    model: str = Column(String(50), nullable=False)  # type: ignore[assignment]
    year: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    license_plate: str = Column(String(20), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    vin: str | None = Column(String(17), unique=True, nullable=True)  # type: ignore[assignment]

    customer = relationship("Customer", back_populates="vehicles")
