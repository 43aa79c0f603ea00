"""Pydantic schemas for the service catalogue."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator


_CENT = Decimal("0.01")


def _positive(v: Decimal | None) -> Decimal | None:
    if v is None:
        return v
    v = v.quantize(_CENT)
    if v <= 0:
        raise ValueError("The price must be greater than 0")
    return v


class ServiceCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    price: Decimal = Field(lt=Decimal("100000000"))

    @field_validator("price")
    @classmethod
    def _price(cls, v: Decimal) -> Decimal:
        return _positive(v)  # type: ignore[return-value]


class ServiceUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    price: Decimal | None = Field(default=None, lt=Decimal("100000000"))

    @field_validator("price")
    @classmethod
    def _price(cls, v: Decimal | None) -> Decimal | None:
        return _positive(v)


class ServiceRead(BaseModel):
    id: int
    name: str
    description: str | None
    price: float

    model_config = {"from_attributes": True}
