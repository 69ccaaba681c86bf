"""UK tax year and CIS monthly return periods.

The tax year runs 6 April to 5 April; each CIS return period runs from the 6th
of one month to the 5th of the next. The return must be filed within 6 days of
the period end (the 11th) and HMRC updates its records 11 days after (the 16th).

Every function takes ``now`` explicitly; nothing here reads the clock.
Dates are compared at midnight UTC.
"""
from __future__ import annotations

import calendar
import datetime as dt
from dataclasses import dataclass
from typing import Any

from cisops.core.exceptions import ValidationError
from cisops.utils.formatting import format_long_date, to_utc_datetime

TAX_YEAR_START_MONTH = 4
PERIOD_START_DAY = 6
SUBMISSION_DEADLINE_OFFSET = dt.timedelta(days=6)
HMRC_UPDATE_OFFSET = dt.timedelta(days=11)

# Supported tax years; the last period of MAX_YEAR ends in MAX_YEAR + 1
MIN_YEAR = 2000
MAX_YEAR = 9998


def add_months(value: dt.date, months: int) -> dt.date:
    """Shift by whole calendar months, clamping the day to the target month's length."""
    index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return dt.date(year, month, day)


def _midnight(value: dt.date) -> dt.datetime:
    return dt.datetime(value.year, value.month, value.day, tzinfo=dt.timezone.utc)


def days_until(target: dt.date, now: dt.date | dt.datetime) -> int:
    """Whole days from *now* to midnight of *target*, truncated toward zero."""
    delta = _midnight(target) - to_utc_datetime(now)
    return int(delta / dt.timedelta(days=1))


@dataclass(frozen=True)
class TaxYear:
    year: int
    start_date: dt.date
    end_date: dt.date

    @property
    def start(self) -> str:
        return format_long_date(self.start_date)

    @property
    def end(self) -> str:
        return format_long_date(self.end_date)

    @property
    def label(self) -> str:
        return f"{self.year}/{str(self.year + 1)[-2:]}"

    def contains(self, value: dt.date) -> bool:
        return self.start_date <= value <= self.end_date

    def as_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "label": self.label,
            "start": self.start,
            "end": self.end,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
        }


@dataclass(frozen=True)
class MonthlyReturnPeriod:
    period_start_date: dt.date
    period_end_date: dt.date
    submission_deadline_date: dt.date
    hmrc_update_date_value: dt.date
    submission_deadline_in_days: int
    hmrc_update_date_in_days: int

    @property
    def year(self) -> int:
        return self.period_start_date.year

    @property
    def month(self) -> int:
        return self.period_start_date.month

    @property
    def tax_year(self) -> int:
        """Tax year (start year) the period falls in."""
        if self.month >= TAX_YEAR_START_MONTH:
            return self.year
        return self.year - 1

    @property
    def tax_month(self) -> int:
        """1 for the period starting 6 April, 12 for the one starting 6 March."""
        return (self.month - TAX_YEAR_START_MONTH) % 12 + 1

    @property
    def period_start(self) -> str:
        return self.period_start_date.isoformat()

    @property
    def period_end(self) -> str:
        return self.period_end_date.isoformat()

    @property
    def period_start_display(self) -> str:
        return format_long_date(self.period_start_date)

    @property
    def period_end_display(self) -> str:
        return format_long_date(self.period_end_date)

    @property
    def submission_deadline(self) -> str:
        return format_long_date(self.submission_deadline_date)

    @property
    def hmrc_update_date(self) -> str:
        return format_long_date(self.hmrc_update_date_value)

    @property
    def is_overdue(self) -> bool:
        return self.submission_deadline_in_days < 0

    def as_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "month": self.month,
            "tax_year": self.tax_year,
            "tax_month": self.tax_month,
            "period_start": self.period_start,
            "period_end": self.period_end,
            "period_start_display": self.period_start_display,
            "period_end_display": self.period_end_display,
            "submission_deadline": self.submission_deadline,
            "hmrc_update_date": self.hmrc_update_date,
            "submission_deadline_in_days": self.submission_deadline_in_days,
            "hmrc_update_date_in_days": self.hmrc_update_date_in_days,
        }


def current_tax_year(now: dt.date | dt.datetime) -> int:
    """Start year of the tax year containing *now*."""
    moment = to_utc_datetime(now)
    start = _midnight(dt.date(moment.year, TAX_YEAR_START_MONTH, PERIOD_START_DAY))
    if moment < start:
        return moment.year - 1
    return moment.year


def tax_year_bounds(year: int) -> TaxYear:
    if not 1 <= year <= MAX_YEAR:
        raise ValidationError(["year"], {"year": year})
    start = dt.date(year, TAX_YEAR_START_MONTH, PERIOD_START_DAY)
    end = add_months(start, 12) - dt.timedelta(days=1)
    return TaxYear(year=year, start_date=start, end_date=end)


def return_months_for_tax_year(year: int) -> list[tuple[int, int]]:
    """(year, month) of each period start in the tax year, April first."""
    start = dt.date(year, TAX_YEAR_START_MONTH, PERIOD_START_DAY)
    months = []
    for offset in range(12):
        period_start = add_months(start, offset)
        months.append((period_start.year, period_start.month))
    return months


def current_monthly_return(
    now: dt.date | dt.datetime,
    year: int | None = None,
    month: int | None = None,
) -> MonthlyReturnPeriod:
    """
    Return period for (year, month), stepping back a month if it has not opened yet.

    Args:
        now: Reference instant (naive values are read as UTC)
        year: Calendar year of the candidate period start (defaults to now's year)
        month: Calendar month 1-12 of the candidate period start (defaults to now's month)

    Returns:
        MonthlyReturnPeriod with deadlines and signed day-counts from now
    """
    moment = to_utc_datetime(now)
    year = moment.year if year is None else year
    month = moment.month if month is None else month
    if not 1 <= month <= 12:
        raise ValidationError(["month"], {"year": year, "month": month})
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise ValidationError(["year"], {"year": year, "month": month})

    period_start = dt.date(year, month, PERIOD_START_DAY)
    if moment < _midnight(period_start):
        period_start = add_months(period_start, -1)

    period_end = add_months(period_start, 1) - dt.timedelta(days=1)
    submission_deadline = period_end + SUBMISSION_DEADLINE_OFFSET
    hmrc_update_date = period_end + HMRC_UPDATE_OFFSET

    return MonthlyReturnPeriod(
        period_start_date=period_start,
        period_end_date=period_end,
        submission_deadline_date=submission_deadline,
        hmrc_update_date_value=hmrc_update_date,
        submission_deadline_in_days=days_until(submission_deadline, moment),
        hmrc_update_date_in_days=days_until(hmrc_update_date, moment),
    )


def monthly_return_for(now: dt.date | dt.datetime) -> MonthlyReturnPeriod:
    """The return period open at *now*."""
    return current_monthly_return(now)
