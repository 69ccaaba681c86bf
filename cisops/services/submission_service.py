from __future__ import annotations

import datetime as dt
import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from cisops import metrics
from cisops.core.exceptions import EmptyReturnError, SubmissionNotFoundError
from cisops.db.session import get_db
from cisops.models import models, schemas
from cisops.services.returns_service import ReturnTotalsCalculator

logger = logging.getLogger(__name__)


class SubmissionService:
    """Tracks monthly returns submitted to HMRC."""

    def __init__(self, db: Session):
        self.db = db

    def list_submissions(self) -> list[models.Submission]:
        return (
            self.db.query(models.Submission)
            .order_by(models.Submission.submitted_at.desc(), models.Submission.id.desc())
            .all()
        )

    def get_submission(self, submission_id: int) -> models.Submission:
        submission = self.db.get(models.Submission, submission_id)
        if not submission:
            raise SubmissionNotFoundError(submission_id)
        return submission

    def submit_return(
        self,
        payload: schemas.SubmissionCreate,
        now: dt.datetime,
        user_id: int | None = None,
    ) -> models.Submission:
        """Record the (year, month) return as submitted and stamp its outstanding invoices."""
        invoices = (
            self.db.query(models.Invoice)
            .filter(
                models.Invoice.year == payload.year,
                models.Invoice.month == payload.month,
                models.Invoice.submission_date.is_(None),
            )
            .order_by(models.Invoice.kashflow_number)
            .all()
        )
        if not invoices:
            raise EmptyReturnError(payload.year, payload.month)

        totals = ReturnTotalsCalculator.totals(invoices)
        submission = models.Submission(
            year=payload.year,
            month=payload.month,
            status=models.SubmissionStatus.SUBMITTED.value,
            submitted_at=now,
            submitted_by_user_id=user_id,
            invoice_count=totals.invoice_count,
            total_gross=totals.gross_amount,
            total_cis=totals.cis_amount,
            total_net=totals.net_amount,
        )
        for invoice in invoices:
            invoice.submission_date = now
            submission.invoices.append(invoice)
        self.db.add(submission)
        self.db.commit()
        self.db.refresh(submission)
        metrics.return_submitted(totals.invoice_count)
        logger.info(
            "Submitted return %04d-%02d id=%s invoices=%s cis=%s",
            submission.year,
            submission.month,
            submission.id,
            submission.invoice_count,
            submission.total_cis,
        )
        return submission

    def delete_submission(self, submission_id: int) -> None:
        """Remove a submission; its invoices become pending again."""
        submission = self.get_submission(submission_id)
        for invoice in submission.invoices:
            if all(other.id == submission.id for other in invoice.submissions):
                invoice.submission_date = None
        self.db.delete(submission)
        self.db.commit()
        logger.info("Submission deleted id=%s", submission_id)


def get_submission_service(db: Annotated[Session, Depends(get_db)]) -> SubmissionService:
    return SubmissionService(db)
