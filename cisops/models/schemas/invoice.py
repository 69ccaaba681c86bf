"""Invoice schemas.

Incoming invoice fields are deliberately loose: the CIS field validator checks
them all at once so a client gets every problem in a single response.
"""
from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, field_serializer
from pydantic.alias_generators import to_camel

from .utils import format_money, format_rate

RawValue = Union[str, int, float, None]


class InvoiceFields(BaseModel):
    """Raw invoice fields; accepts snake_case or camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    invoice_number: RawValue = None
    kashflow_number: RawValue = None
    invoice_date: RawValue = None
    remittance_date: RawValue = None
    labour_cost: RawValue = None
    material_cost: RawValue = None
    month: RawValue = None
    year: RawValue = None
    submission_date: RawValue = None

    def raw(self) -> dict[str, Any]:
        return self.model_dump()


class InvoiceCreate(InvoiceFields):
    subcontractor_id: int


class InvoiceUpdate(InvoiceFields):
    pass


class InvoiceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    subcontractor_id: int
    invoice_number: str
    kashflow_number: str
    invoice_date: dt.date
    remittance_date: dt.date | None = None
    labour_cost: Decimal
    material_cost: Decimal
    cis_rate: Decimal
    gross_amount: Decimal
    cis_amount: Decimal
    net_amount: Decimal
    reverse_charge: Decimal
    month: int
    year: int
    submission_date: dt.datetime | None = None
    created_at: dt.datetime | None = None

    @field_serializer("labour_cost", "material_cost", "gross_amount", "cis_amount", "net_amount", "reverse_charge")
    def _serialize_money(self, value: Decimal) -> str | None:
        return format_money(value)

    @field_serializer("cis_rate")
    def _serialize_rate(self, value: Decimal) -> str | None:
        return format_rate(value)


class PendingInvoiceOut(BaseModel):
    """Slim view used by the "awaiting submission" list."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    kashflow_number: str
