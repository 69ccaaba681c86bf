"""Display helpers for dates and money.

Usage
-----
    from cisops.utils.formatting import format_currency, format_long_date, slim_date_time

    format_currency(Decimal("1500"))           # "£1500.00"
    format_long_date(date(2024, 4, 6))         # "6th April 2024"
    slim_date_time("2024-04-06T09:30:00Z")     # "06/04/2024"
"""

from __future__ import annotations

import datetime as dt
import logging
import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from cisops.core.config import settings
from cisops.core.exceptions import InvalidAmountError

logger = logging.getLogger(__name__)

_TWO_PLACES = Decimal("0.01")


def ordinal(day: int) -> str:
    """1 -> "1st", 2 -> "2nd", 11 -> "11th", 22 -> "22nd"."""
    if 10 <= day % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def format_long_date(value: dt.date) -> str:
    """Render a date as "6th April 2024"."""
    return f"{ordinal(value.day)} {value.strftime('%B')} {value.year:04d}"


def to_utc_datetime(value: dt.date | dt.datetime | str) -> dt.datetime:
    """Coerce a date, datetime or ISO string into an aware UTC datetime.

    Naive datetimes are taken to already be UTC; plain dates become midnight.
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        value = dt.datetime.fromisoformat(text)
    if not isinstance(value, dt.datetime):
        return dt.datetime(value.year, value.month, value.day, tzinfo=dt.timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


def slim_date_time(value: dt.date | dt.datetime | str, include_time: bool = False) -> str:
    """Short UK date ("06/04/2024"), optionally followed by the UTC time ("06/04/2024 09:30")."""
    moment = to_utc_datetime(value)
    formatted = moment.strftime("%d/%m/%Y")
    if include_time:
        return f"{formatted} {moment.strftime('%H:%M')}"
    return formatted


def format_currency(amount: Decimal | int | float) -> str:
    """Prefix the configured currency symbol and fix two decimal places."""
    if isinstance(amount, bool) or not isinstance(amount, (Decimal, int, float)):
        logger.error("Invalid input. Amount must be a number: %r", amount)
        raise InvalidAmountError("amount", amount)
    try:
        value = Decimal(str(amount)) if isinstance(amount, float) else Decimal(amount)
        if not value.is_finite():
            raise InvalidOperation
    except InvalidOperation as exc:
        logger.error("Invalid input. Amount must be a number: %r", amount)
        raise InvalidAmountError("amount", amount) from exc
    return f"{settings.CURRENCY_SYMBOL}{value.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)}"


def rounding(number: float | Decimal, up: bool) -> int:
    return math.ceil(number) if up else math.floor(number)
