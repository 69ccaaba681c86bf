"""
CIS monthly and yearly returns.

Handles:
- Current tax year lookup
- Monthly return period, deadlines and invoice totals
- Yearly (tax year) totals per subcontractor

``now`` is always passed in by the caller.
"""
from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Iterable
from decimal import Decimal
from typing import Annotated

from fastapi import Depends
from sqlalchemy import and_
from sqlalchemy.orm import Session

from cisops.db.session import get_db
from cisops.models import models, schemas
from cisops.services.cis import (
    current_monthly_return,
    current_tax_year,
    monthly_return_for,
    return_months_for_tax_year,
    tax_year_bounds,
)

logger = logging.getLogger(__name__)

_MONEY_FIELDS = ("labour_cost", "material_cost", "gross_amount", "cis_amount", "net_amount", "reverse_charge")


class ReturnTotalsCalculator:
    """Sums stored invoice amounts (no database access)."""

    @staticmethod
    def totals(invoices: Iterable[models.Invoice]) -> schemas.ReturnTotals:
        sums = {field: Decimal("0") for field in _MONEY_FIELDS}
        count = 0
        for invoice in invoices:
            count += 1
            for field in _MONEY_FIELDS:
                sums[field] += Decimal(getattr(invoice, field) or 0)
        return schemas.ReturnTotals(invoice_count=count, **sums)

    @classmethod
    def by_subcontractor(cls, invoices: Iterable[models.Invoice]) -> list[schemas.SubcontractorReturnLine]:
        grouped: dict[int, list[models.Invoice]] = {}
        for invoice in invoices:
            grouped.setdefault(invoice.subcontractor_id, []).append(invoice)

        lines = []
        for group in grouped.values():
            subcontractor = group[0].subcontractor
            lines.append(
                schemas.SubcontractorReturnLine(
                    subcontractor_id=subcontractor.id,
                    name=subcontractor.name,
                    company=subcontractor.company,
                    utr_number=subcontractor.utr_number,
                    totals=cls.totals(group),
                )
            )
        return sorted(lines, key=lambda line: line.name.lower())


class ReturnsService:
    def __init__(self, db: Session):
        self.db = db
        self.calculator = ReturnTotalsCalculator()

    def tax_year(self, now: dt.datetime, year: int | None = None) -> schemas.TaxYearOut:
        bounds = tax_year_bounds(current_tax_year(now) if year is None else year)
        return schemas.TaxYearOut(**bounds.as_dict())

    def monthly_return(
        self,
        now: dt.datetime,
        year: int | None = None,
        month: int | None = None,
    ) -> schemas.MonthlyReturnOut:
        """
        Monthly return for (year, month), defaulting to the period open at ``now``.

        Invoices are matched on the month/year they were recorded against,
        which is the calendar month the period starts in.
        """
        if year is None and month is None:
            period = monthly_return_for(now)
        else:
            period = current_monthly_return(now, year, month)
        invoices = (
            self.db.query(models.Invoice)
            .filter(
                and_(
                    models.Invoice.year == period.year,
                    models.Invoice.month == period.month,
                )
            )
            .order_by(models.Invoice.kashflow_number, models.Invoice.id)
            .all()
        )
        submitted = (
            self.db.query(models.Submission)
            .filter(models.Submission.year == period.year, models.Submission.month == period.month)
            .first()
            is not None
        )
        if period.is_overdue and not submitted and invoices:
            logger.warning(
                "Monthly return %04d-%02d is overdue by %s days",
                period.year,
                period.month,
                -period.submission_deadline_in_days,
            )
        return schemas.MonthlyReturnOut(
            period=schemas.MonthlyReturnPeriodOut(**period.as_dict()),
            submitted=submitted,
            invoices=[schemas.InvoiceOut.model_validate(invoice) for invoice in invoices],
            subcontractors=self.calculator.by_subcontractor(invoices),
            totals=self.calculator.totals(invoices),
        )

    def yearly_return(self, year: int) -> schemas.YearlyReturnOut:
        """Totals for the twelve return periods of the tax year starting 6 April ``year``."""
        months = return_months_for_tax_year(year)
        first_year, first_month = months[0]
        last_year, last_month = months[-1]
        period_key = models.Invoice.year * 100 + models.Invoice.month
        invoices = (
            self.db.query(models.Invoice)
            .filter(
                period_key >= first_year * 100 + first_month,
                period_key <= last_year * 100 + last_month,
            )
            .order_by(models.Invoice.year, models.Invoice.month, models.Invoice.id)
            .all()
        )
        logger.info("Yearly return %s: %s invoices", year, len(invoices))
        return schemas.YearlyReturnOut(
            tax_year=schemas.TaxYearOut(**tax_year_bounds(year).as_dict()),
            subcontractors=self.calculator.by_subcontractor(invoices),
            totals=self.calculator.totals(invoices),
        )


def get_returns_service(db: Annotated[Session, Depends(get_db)]) -> ReturnsService:
    return ReturnsService(db)
