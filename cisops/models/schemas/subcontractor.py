"""Subcontractor schemas."""
from __future__ import annotations

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from cisops.services.cis import ALLOWED_DEDUCTION_RATES

from .invoice import InvoiceOut
from .utils import format_rate


class SubcontractorBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    company: str = Field(..., min_length=1, max_length=200)
    line1: str = Field(..., min_length=1, max_length=200)
    line2: str | None = None
    city: str = Field(..., min_length=1, max_length=100)
    county: str = Field(..., min_length=1, max_length=100)
    postal_code: str = Field(..., min_length=1, max_length=20)
    cis_number: str = Field(..., min_length=1, max_length=40)
    utr_number: str = Field(..., min_length=1, max_length=20)
    vat_number: str | None = None
    is_gross: bool = False
    deduction: Decimal = Decimal("0.2")

    @field_validator("name", "company", "line1", "city", "county", "postal_code", "cis_number", "utr_number")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("deduction")
    @classmethod
    def _known_rate(cls, value: Decimal) -> Decimal:
        if value not in ALLOWED_DEDUCTION_RATES:
            raise ValueError("deduction must be one of 0, 0.2 or 0.3")
        return value


class SubcontractorCreate(SubcontractorBase):
    pass


class SubcontractorUpdate(SubcontractorBase):
    pass


class SubcontractorOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    company: str
    line1: str
    line2: str | None = None
    city: str
    county: str
    postal_code: str
    cis_number: str
    utr_number: str
    vat_number: str | None = None
    is_gross: bool
    deduction: Decimal
    created_at: dt.datetime | None = None

    @field_serializer("deduction")
    def _serialize_rate(self, value: Decimal) -> str | None:
        return format_rate(value)


class SubcontractorDetailOut(SubcontractorOut):
    invoices: list[InvoiceOut] = []
