"""Pydantic schemas for customer feedback."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class FeedbackCreate(BaseModel):
    customer_id: int
    vehicle_id: int
    rating: int = Field(ge=1, le=5)
    comments: str | None = Field(default=None, max_length=1000)


class FeedbackUpdate(BaseModel):
    customer_id: int | None = None
    vehicle_id: int | None = None
    rating: int | None = Field(default=None, ge=1, le=5)
    comments: str | None = Field(default=None, max_length=1000)


class FeedbackRead(BaseModel):
    id: int
    customer_id: int
    vehicle_id: int
    rating: int
    comments: str | None
    feedback_date: datetime | None
    created_by: int | None = None
    customer_first_name: str | None = None
    customer_last_name: str | None = None
    vehicle_license_plate: str | None = None
