"""CIS calculation core: invoice validation, deduction amounts and tax periods."""
from .amounts import (
    ALLOWED_DEDUCTION_RATES,
    InvoiceAmounts,
    calculate_invoice_amounts,
    resolve_cis_rate,
)
from .periods import (
    MonthlyReturnPeriod,
    TaxYear,
    current_monthly_return,
    current_tax_year,
    monthly_return_for,
    return_months_for_tax_year,
    tax_year_bounds,
)
from .validation import InvoiceInput, validate_invoice_data

__all__ = [
    "ALLOWED_DEDUCTION_RATES",
    "InvoiceAmounts",
    "InvoiceInput",
    "MonthlyReturnPeriod",
    "TaxYear",
    "calculate_invoice_amounts",
    "current_monthly_return",
    "current_tax_year",
    "monthly_return_for",
    "resolve_cis_rate",
    "return_months_for_tax_year",
    "tax_year_bounds",
    "validate_invoice_data",
]
