"""
Invoice recording.

Every write goes through the same two steps: field validation of the raw
payload, then CIS amount calculation against the owning subcontractor's
deduction status. Nothing is persisted unless both succeed.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from cisops import metrics
from cisops.core.exceptions import DuplicateInvoiceError, InvoiceNotFoundError, ValidationError
from cisops.db.session import get_db
from cisops.models import models, schemas
from cisops.services.cis import InvoiceAmounts, InvoiceInput, calculate_invoice_amounts, validate_invoice_data
from cisops.services.subcontractor_service import SubcontractorService

logger = logging.getLogger(__name__)


def deduction_for(subcontractor: models.Subcontractor) -> tuple[Decimal, bool]:
    """(deduction rate, has CIS number) for a subcontractor; gross status means no deduction."""
    rate = Decimal("0") if subcontractor.is_gross else Decimal(subcontractor.deduction)
    return rate, bool((subcontractor.cis_number or "").strip())


def amounts_for(subcontractor: models.Subcontractor, record: InvoiceInput) -> InvoiceAmounts:
    rate, has_cis_number = deduction_for(subcontractor)
    return calculate_invoice_amounts(record.labour_cost, record.material_cost, rate, has_cis_number)


class InvoiceService:
    def __init__(self, db: Session):
        self.db = db
        self.subcontractors = SubcontractorService(db)

    def list_invoices(
        self,
        subcontractor_id: int | None = None,
        year: int | None = None,
        month: int | None = None,
    ) -> list[models.Invoice]:
        query = self.db.query(models.Invoice)
        if subcontractor_id is not None:
            query = query.filter(models.Invoice.subcontractor_id == subcontractor_id)
        if year is not None:
            query = query.filter(models.Invoice.year == year)
        if month is not None:
            query = query.filter(models.Invoice.month == month)
        return query.order_by(models.Invoice.invoice_date, models.Invoice.id).all()

    def list_pending_submission(self) -> list[models.Invoice]:
        """Invoices not yet included in a submitted return."""
        return (
            self.db.query(models.Invoice)
            .filter(models.Invoice.submission_date.is_(None))
            .order_by(models.Invoice.kashflow_number)
            .all()
        )

    def get_invoice(self, invoice_id: int) -> models.Invoice:
        invoice = self.db.get(models.Invoice, invoice_id)
        if not invoice:
            raise InvoiceNotFoundError(invoice_id)
        return invoice

    def create_invoice(self, payload: schemas.InvoiceCreate) -> models.Invoice:
        subcontractor = self.subcontractors.get_subcontractor(payload.subcontractor_id)
        record = self._validate(payload)
        self._ensure_unique_number(subcontractor.id, record.invoice_number)
        amounts = amounts_for(subcontractor, record)

        invoice = models.Invoice(
            subcontractor_id=subcontractor.id,
            **record.as_record(),
            **amounts.as_dict(),
        )
        self.db.add(invoice)
        self.db.commit()
        self.db.refresh(invoice)
        metrics.invoice_created(amounts.cis_rate)
        logger.info(
            "Invoice created id=%s subcontractor=%s gross=%s cis=%s",
            invoice.id,
            subcontractor.id,
            amounts.gross_amount,
            amounts.cis_amount,
        )
        return invoice

    def update_invoice(self, invoice_id: int, payload: schemas.InvoiceUpdate) -> models.Invoice:
        invoice = self.get_invoice(invoice_id)
        record = self._validate(payload)
        if record.invoice_number != invoice.invoice_number:
            self._ensure_unique_number(invoice.subcontractor_id, record.invoice_number, exclude_id=invoice.id)
        amounts = amounts_for(invoice.subcontractor, record)

        values = record.as_record()
        if values["submission_date"] is None and invoice.submissions:
            # Invoices on a submitted return keep their submission stamp
            values["submission_date"] = invoice.submission_date
        for key, value in {**values, **amounts.as_dict()}.items():
            setattr(invoice, key, value)
        self.db.commit()
        self.db.refresh(invoice)
        logger.info("Invoice updated id=%s", invoice.id)
        return invoice

    def delete_invoice(self, invoice_id: int) -> None:
        invoice = self.get_invoice(invoice_id)
        self.db.delete(invoice)
        self.db.commit()
        logger.info("Invoice deleted id=%s", invoice_id)

    def _validate(self, payload: schemas.InvoiceFields) -> InvoiceInput:
        try:
            return validate_invoice_data(payload.raw())
        except ValidationError:
            metrics.invoice_validation_failed()
            raise

    def _ensure_unique_number(self, subcontractor_id: int, invoice_number: str, exclude_id: int | None = None) -> None:
        query = self.db.query(models.Invoice).filter(
            models.Invoice.subcontractor_id == subcontractor_id,
            models.Invoice.invoice_number == invoice_number,
        )
        if exclude_id is not None:
            query = query.filter(models.Invoice.id != exclude_id)
        if query.first():
            raise DuplicateInvoiceError(invoice_number, subcontractor_id)


def get_invoice_service(db: Annotated[Session, Depends(get_db)]) -> InvoiceService:
    return InvoiceService(db)
