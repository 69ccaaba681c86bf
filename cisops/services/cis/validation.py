"""Invoice field validation.

Raw invoice data arrives from untrusted API input. Every rule is checked so a
single response can report all bad fields, in the order the rules are listed.
"""
from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any

from cisops.core.exceptions import InvalidAmountError, ValidationError
from cisops.services.cis.amounts import MAX_AMOUNT, to_decimal
from cisops.services.cis.periods import MAX_YEAR, MIN_YEAR
from cisops.utils.formatting import to_utc_datetime

logger = logging.getLogger(__name__)

# Placeholder written by legacy MySQL exports for "never submitted"
ZERO_TIMESTAMP = "0000-00-00 00:00:00"


@dataclass(frozen=True)
class InvoiceInput:
    invoice_number: str
    kashflow_number: str
    invoice_date: dt.date
    remittance_date: dt.date | None
    labour_cost: Decimal
    material_cost: Decimal
    month: int
    year: int
    submission_date: dt.datetime | None = None

    def as_record(self) -> dict[str, Any]:
        return asdict(self)


def _snake(name: str) -> str:
    return "".join("_" + ch.lower() if ch.isupper() else ch for ch in name)


def _lookup(data: Mapping[str, Any], field: str) -> tuple[str, Any]:
    if field in data:
        return field, data[field]
    snake = _snake(field)
    return snake, data.get(snake)


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def parse_date(value: Any) -> dt.date | None:
    """Calendar date from a date, datetime or ISO string; None when unparseable."""
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return dt.date.fromisoformat(value.strip())
    except ValueError:
        pass
    try:
        return to_utc_datetime(value).date()
    except ValueError:
        return None


def _number(value: Any) -> Decimal | None:
    try:
        return to_decimal(value, "value")
    except InvalidAmountError:
        return None


def _integral(value: Any, low: int, high: int) -> int | None:
    """Whole number within [low, high], compared as a Decimal before int() is taken."""
    number = _number(value)
    if number is None or not Decimal(low) <= number <= Decimal(high):
        return None
    if number != number.to_integral_value():
        return None
    return int(number)


def _present(value: Any) -> bool:
    return not _blank(value)


def _valid_date(value: Any) -> bool:
    return parse_date(value) is not None


def _optional_date(value: Any) -> bool:
    return _blank(value) or parse_date(value) is not None


def _amount(value: Any) -> bool:
    number = _number(value)
    return number is not None and 0 <= number <= MAX_AMOUNT


def _month(value: Any) -> bool:
    return _integral(value, 1, 12) is not None


def _year(value: Any) -> bool:
    return _integral(value, MIN_YEAR, MAX_YEAR) is not None


INVOICE_RULES: tuple[tuple[str, Callable[[Any], bool]], ...] = (
    ("invoiceNumber", _present),
    ("kashflowNumber", _present),
    ("invoiceDate", _valid_date),
    ("remittanceDate", _optional_date),
    ("labourCost", _amount),
    ("materialCost", _amount),
    ("month", _month),
    ("year", _year),
)


def normalize_submission_date(value: Any) -> dt.datetime | None:
    if _blank(value) or (isinstance(value, str) and value.strip() == ZERO_TIMESTAMP):
        return None
    if isinstance(value, dt.date):
        return to_utc_datetime(value)
    try:
        return to_utc_datetime(str(value))
    except ValueError:
        logger.warning("Discarding unreadable submission date %r", value)
        return None


def validate_invoice_data(data: Mapping[str, Any]) -> InvoiceInput:
    """
    Validate raw invoice data and return a typed, normalized record.

    Both camelCase (``invoiceNumber``) and snake_case (``invoice_number``)
    keys are accepted.

    Raises:
        ValidationError: listing every failed field in rule order
    """
    key, raw_submission = _lookup(data, "submissionDate")
    submission_date = normalize_submission_date(raw_submission)
    normalized = dict(data)
    normalized[key] = submission_date

    failed = [field for field, rule in INVOICE_RULES if not rule(_lookup(data, field)[1])]
    if failed:
        error = ValidationError(failed, normalized)
        logger.error("Validation errors: %s", error.message)
        raise error

    values = {field: _lookup(data, field)[1] for field, _ in INVOICE_RULES}
    return InvoiceInput(
        invoice_number=str(values["invoiceNumber"]).strip(),
        kashflow_number=str(values["kashflowNumber"]).strip(),
        invoice_date=parse_date(values["invoiceDate"]),
        remittance_date=parse_date(values["remittanceDate"]),
        labour_cost=to_decimal(values["labourCost"], "labourCost"),
        material_cost=to_decimal(values["materialCost"], "materialCost"),
        month=_integral(values["month"], 1, 12),
        year=_integral(values["year"], MIN_YEAR, MAX_YEAR),
        submission_date=submission_date,
    )
