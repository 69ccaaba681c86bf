"""Pydantic schemas for API requests and responses.

Sub-modules:
- auth: Authentication and user schemas
- subcontractor: Subcontractor schemas
- invoice: Invoice schemas
- returns: Monthly / yearly return schemas
- submission: Submission schemas
- utils: Common utility functions
"""
# Auth schemas
from .auth import (
    LoginRequest,
    TokenOut,
    UserOut,
    UserRegister,
    UserUpdate,
)

# Invoice schemas
from .invoice import (
    InvoiceCreate,
    InvoiceFields,
    InvoiceOut,
    InvoiceUpdate,
    PendingInvoiceOut,
)

# Subcontractor schemas
from .subcontractor import (
    SubcontractorCreate,
    SubcontractorDetailOut,
    SubcontractorOut,
    SubcontractorUpdate,
)

# Return schemas
from .returns import (
    MonthlyReturnOut,
    MonthlyReturnPeriodOut,
    ReturnTotals,
    SubcontractorReturnLine,
    TaxYearOut,
    YearlyReturnOut,
)

# Submission schemas
from .submission import (
    SubmissionCreate,
    SubmissionDetailOut,
    SubmissionOut,
)

__all__ = [
    # Auth
    "LoginRequest",
    "TokenOut",
    "UserOut",
    "UserRegister",
    "UserUpdate",
    # Invoice
    "InvoiceCreate",
    "InvoiceFields",
    "InvoiceOut",
    "InvoiceUpdate",
    "PendingInvoiceOut",
    # Subcontractor
    "SubcontractorCreate",
    "SubcontractorDetailOut",
    "SubcontractorOut",
    "SubcontractorUpdate",
    # Returns
    "MonthlyReturnOut",
    "MonthlyReturnPeriodOut",
    "ReturnTotals",
    "SubcontractorReturnLine",
    "TaxYearOut",
    "YearlyReturnOut",
    # Submission
    "SubmissionCreate",
    "SubmissionDetailOut",
    "SubmissionOut",
]
