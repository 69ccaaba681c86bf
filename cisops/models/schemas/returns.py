"""Monthly / yearly return schemas."""
from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, field_serializer

from .invoice import InvoiceOut
from .utils import format_money


class TaxYearOut(BaseModel):
    year: int
    label: str
    start: str
    end: str
    start_date: str
    end_date: str


class MonthlyReturnPeriodOut(BaseModel):
    year: int
    month: int
    tax_year: int
    tax_month: int
    period_start: str
    period_end: str
    period_start_display: str
    period_end_display: str
    submission_deadline: str
    hmrc_update_date: str
    submission_deadline_in_days: int
    hmrc_update_date_in_days: int


class ReturnTotals(BaseModel):
    invoice_count: int = 0
    labour_cost: Decimal = Decimal("0")
    material_cost: Decimal = Decimal("0")
    gross_amount: Decimal = Decimal("0")
    cis_amount: Decimal = Decimal("0")
    net_amount: Decimal = Decimal("0")
    reverse_charge: Decimal = Decimal("0")

    @field_serializer("labour_cost", "material_cost", "gross_amount", "cis_amount", "net_amount", "reverse_charge")
    def _serialize_money(self, value: Decimal) -> str | None:
        return format_money(value)


class SubcontractorReturnLine(BaseModel):
    subcontractor_id: int
    name: str
    company: str
    utr_number: str
    totals: ReturnTotals


class MonthlyReturnOut(BaseModel):
    period: MonthlyReturnPeriodOut
    submitted: bool
    invoices: list[InvoiceOut]
    subcontractors: list[SubcontractorReturnLine]
    totals: ReturnTotals


class YearlyReturnOut(BaseModel):
    tax_year: TaxYearOut
    subcontractors: list[SubcontractorReturnLine]
    totals: ReturnTotals
