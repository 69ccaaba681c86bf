"""Submission schemas."""
from __future__ import annotations

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_serializer

from cisops.services.cis.periods import MAX_YEAR, MIN_YEAR
from cisops.utils.formatting import format_currency, slim_date_time

from .invoice import InvoiceOut
from .utils import format_money


class SubmissionCreate(BaseModel):
    year: int = Field(..., ge=MIN_YEAR, le=MAX_YEAR)
    month: int = Field(..., ge=1, le=12)


class SubmissionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    year: int
    month: int
    status: str
    submitted_at: dt.datetime
    submitted_by_user_id: int | None = None
    invoice_count: int
    total_gross: Decimal
    total_cis: Decimal
    total_net: Decimal

    @field_serializer("total_gross", "total_cis", "total_net")
    def _serialize_money(self, value: Decimal) -> str | None:
        return format_money(value)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def submitted_at_display(self) -> str:
        return slim_date_time(self.submitted_at, include_time=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_cis_display(self) -> str:
        """Deduction total with currency symbol, e.g. "£400.00"."""
        return format_currency(self.total_cis)


class SubmissionDetailOut(SubmissionOut):
    invoices: list[InvoiceOut] = []
