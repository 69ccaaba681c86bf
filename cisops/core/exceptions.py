"""Custom exception hierarchy for CisOps.

Every application error carries a user-facing message, a stable code and the
HTTP status the API layer should answer with. The calculation core raises
these directly; request handlers never need to translate them by hand because
``cisops.core.errors`` registers a handler for the base class.

Error codes follow pattern: [CATEGORY][NUMBER]
- CIS: Invoice validation / amount calculation errors (001-099)
- SUB: Subcontractor errors (100-199)
- INV: Invoice record errors (200-299)
- SMB: Submission / return errors (300-399)
- USR: User/Auth errors (400-499)
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any


class CisOpsException(Exception):
    """Base exception for all CisOps application errors."""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        """Initialize exception with user-friendly message and metadata.

        Args:
            message: User-friendly error message
            code: Unique error code (e.g., "CIS001")
            status_code: HTTP status code (default: 400 Bad Request)
            details: Optional additional context
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response format."""
        return {
            "error": {
                "message": self.message,
                "code": self.code,
                "details": self.details,
            }
        }


# ============================================================================
# CALCULATION ERRORS (CIS001-099)
# ============================================================================

class CalculationError(CisOpsException):
    """Base class for invoice validation and CIS calculation errors."""
    pass


class ValidationError(CalculationError):
    """One or more invoice fields failed validation.

    ``fields`` lists the failing fields in rule order and ``data`` holds the
    normalized record so callers can redisplay it.
    """

    def __init__(self, fields: Sequence[str], data: Mapping[str, Any] | None = None):
        self.fields = list(fields)
        self.data = dict(data or {})
        message = ", ".join(f"Invalid or missing value for {field}" for field in self.fields)
        super().__init__(
            message=message,
            code="CIS001",
            status_code=422,
            details={"fields": self.fields},
        )


class InvalidAmountError(CalculationError):
    """A monetary input could not be read as a finite number."""

    def __init__(self, field: str, value: Any = None):
        super().__init__(
            message=f"Invalid amount for {field}. Amount must be a number.",
            code="CIS002",
            status_code=422,
            details={"field": field, "value": repr(value)},
        )


# ============================================================================
# SUBCONTRACTOR ERRORS (SUB100-199)
# ============================================================================

class SubcontractorError(CisOpsException):
    """Base class for subcontractor errors."""
    pass


class SubcontractorNotFoundError(SubcontractorError):
    def __init__(self, subcontractor_id: int | None = None):
        message = (
            "Subcontractor not found"
            if subcontractor_id is None
            else f"Subcontractor {subcontractor_id} not found"
        )
        super().__init__(
            message=message,
            code="SUB100",
            status_code=404,
            details={"subcontractor_id": subcontractor_id} if subcontractor_id is not None else {},
        )


class DuplicateSubcontractorError(SubcontractorError):
    """Name, company, UTR or CIS number already belongs to another subcontractor."""

    def __init__(self, conflicts: Sequence[str]):
        super().__init__(
            message="Subcontractor with the same " + ", ".join(conflicts) + " already exists.",
            code="SUB101",
            status_code=409,
            details={"conflicts": list(conflicts)},
        )


# ============================================================================
# INVOICE RECORD ERRORS (INV200-299)
# ============================================================================

class InvoiceNotFoundError(CisOpsException):
    def __init__(self, invoice_id: int | None = None):
        message = "Invoice not found" if invoice_id is None else f"Invoice {invoice_id} not found"
        super().__init__(
            message=message,
            code="INV200",
            status_code=404,
            details={"invoice_id": invoice_id} if invoice_id is not None else {},
        )


class DuplicateInvoiceError(CisOpsException):
    """Invoice number already recorded for this subcontractor."""

    def __init__(self, invoice_number: str, subcontractor_id: int):
        super().__init__(
            message=f"Invoice {invoice_number} already exists for subcontractor {subcontractor_id}",
            code="INV201",
            status_code=409,
            details={"invoice_number": invoice_number, "subcontractor_id": subcontractor_id},
        )


# ============================================================================
# SUBMISSION ERRORS (SMB300-399)
# ============================================================================

class SubmissionError(CisOpsException):
    """Base class for monthly return submission errors."""
    pass


class SubmissionNotFoundError(SubmissionError):
    def __init__(self, submission_id: int | None = None):
        message = (
            "Submission not found" if submission_id is None else f"Submission {submission_id} not found"
        )
        super().__init__(
            message=message,
            code="SMB300",
            status_code=404,
            details={"submission_id": submission_id} if submission_id is not None else {},
        )


class EmptyReturnError(SubmissionError):
    """No unsubmitted invoices exist for the requested return period."""

    def __init__(self, year: int, month: int):
        super().__init__(
            message=f"No unsubmitted invoices for the {year:04d}-{month:02d} return",
            code="SMB301",
            status_code=400,
            details={"year": year, "month": month},
        )


# ============================================================================
# USER/AUTH ERRORS (USR400-499)
# ============================================================================

class UserError(CisOpsException):
    """Base class for user/authentication errors."""
    pass


class UserNotFoundError(UserError):
    def __init__(self, identifier: str | int | None = None):
        message = "User not found" if identifier is None else f"User '{identifier}' not found"
        super().__init__(
            message=message,
            code="USR400",
            status_code=404,
            details={"identifier": identifier} if identifier is not None else {},
        )


class UserAlreadyExistsError(UserError):
    def __init__(self):
        super().__init__(
            message="User with the same username or email already exists.",
            code="USR401",
            status_code=409,
        )


class InvalidCredentialsError(UserError):
    def __init__(self):
        super().__init__(
            message="Invalid username or password",
            code="USR402",
            status_code=401,
        )
