"""Pydantic schemas for Customer / Vehicle CRUD."""

from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_PLATE_RE = re.compile(r"^[A-Za-z0-9 -]{2,20}$")
_VIN_RE = re.compile(r"^[A-HJ-NPR-Za-hj-npr-z0-9]{17}$")


def _clean_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Name must not be empty")
    return v


def _clean_email(v: str) -> str:
    v = v.strip().lower()
    if not _EMAIL_RE.fullmatch(v):
        raise ValueError("Invalid email address")
    return v


def _clean_plate(v: str) -> str:
    v = v.strip().upper()
    if not _PLATE_RE.fullmatch(v):
        raise ValueError("License plate must be 2-20 letters, digits, spaces or hyphens")
    return v


def _clean_vin(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip().upper()
    if not _VIN_RE.fullmatch(v):
        raise ValueError("VIN must be 17 characters (letters I, O and Q are not allowed)")
    return v


# ── Customer ────────────────────────────────────────────────────────
class CustomerCreate(BaseModel):
    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    email: str
    phone: str | None = Field(default=None, max_length=30)

    @field_validator("first_name", "last_name")
    @classmethod
    def _names(cls, v: str) -> str:
        return _clean_name(v)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _clean_email(v)


class CustomerUpdate(BaseModel):
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    email: str | None = None
    phone: str | None = Field(default=None, max_length=30)

    @field_validator("first_name", "last_name")
    @classmethod
    def _names(cls, v: str | None) -> str | None:
        return None if v is None else _clean_name(v)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str | None) -> str | None:
        return None if v is None else _clean_email(v)


class CustomerRead(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone: str | None

    model_config = {"from_attributes": True}


# ── Vehicle ─────────────────────────────────────────────────────────
class VehicleCreate(BaseModel):
    customer_id: int
    make: str = Field(min_length=1, max_length=50)
    model: str = Field(min_length=1, max_length=50)
    year: int = Field(ge=1886, le=2100)
    license_plate: str
    vin: str | None = None

    @field_validator("license_plate")
    @classmethod
    def _plate(cls, v: str) -> str:
        return _clean_plate(v)

    @field_validator("vin")
    @classmethod
    def _vin(cls, v: str | None) -> str | None:
        return _clean_vin(v)


class VehicleUpdate(BaseModel):
    customer_id: int | None = None
    make: str | None = Field(default=None, min_length=1, max_length=50)
    model: str | None = Field(default=None, min_length=1, max_length=50)
    year: int | None = Field(default=None, ge=1886, le=2100)
    license_plate: str | None = None
    vin: str | None = None

    @field_validator("license_plate")
    @classmethod
    def _plate(cls, v: str | None) -> str | None:
        return None if v is None else _clean_plate(v)

    @field_validator("vin")
    @classmethod
    def _vin(cls, v: str | None) -> str | None:
        return _clean_vin(v)


class VehicleRead(BaseModel):
    id: int
    customer_id: int
    make: str
    model: str
    year: int
    license_plate: str
    vin: str | None
    customer_first_name: str | None = None
    customer_last_name: str | None = None
