"""
Feedback model: customer ratings for work done on a vehicle.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.db.base import Base


class Feedback(Base):
    __tablename__ = "feedback"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    customer_id: int = Column(Integer, ForeignKey("customers.id"), nullable=False)  # type: ignore[assignment]
    vehicle_id: int = Column(Integer, ForeignKey("vehicles.id"), nullable=False)  # type: ignore[assignment]
    rating: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    comments: str | None = Column(String(1000), nullable=True)  # type: ignore[assignment]
    feedback_date: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    # Submitting user; non-admins only see their own rows
    created_by: int | None = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)  # type: ignore[assignment]

    customer = relationship("Customer")
    vehicle = relationship("Vehicle")
