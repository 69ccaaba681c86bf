"""Tests for tax year and monthly return period calculations."""
import datetime as dt

import pytest

from cisops.core.exceptions import ValidationError
from cisops.services.cis import (
    current_monthly_return,
    current_tax_year,
    monthly_return_for,
    return_months_for_tax_year,
    tax_year_bounds,
)
from cisops.services.cis.periods import add_months, days_until

UTC = dt.timezone.utc


class TestTaxYear:
    def test_bounds_for_2024(self):
        bounds = tax_year_bounds(2024)
        assert bounds.start == "6th April 2024"
        assert bounds.end == "5th April 2025"
        assert bounds.start_date == dt.date(2024, 4, 6)
        assert bounds.end_date == dt.date(2025, 4, 5)
        assert bounds.label == "2024/25"

    def test_current_tax_year_switches_on_6th_april(self):
        assert current_tax_year(dt.datetime(2024, 4, 5, 23, 59, tzinfo=UTC)) == 2023
        assert current_tax_year(dt.datetime(2024, 4, 6, tzinfo=UTC)) == 2024
        assert current_tax_year(dt.date(2025, 1, 15)) == 2024

    def test_contains(self):
        bounds = tax_year_bounds(2023)
        assert bounds.contains(dt.date(2024, 4, 5))
        assert not bounds.contains(dt.date(2024, 4, 6))

    @pytest.mark.parametrize("year", [0, 9999])
    def test_bounds_reject_years_without_a_full_tax_year(self, year):
        with pytest.raises(ValidationError):
            tax_year_bounds(year)

    def test_bounds_for_last_supported_year(self):
        assert tax_year_bounds(9998).end_date == dt.date(9999, 4, 5)

    def test_return_months_run_april_to_march(self):
        months = return_months_for_tax_year(2024)
        assert len(months) == 12
        assert months[0] == (2024, 4)
        assert months[8] == (2024, 12)
        assert months[-1] == (2025, 3)


class TestMonthlyReturn:
    def test_steps_back_before_period_start(self):
        period = current_monthly_return(dt.datetime(2024, 4, 1, tzinfo=UTC), 2024, 4)
        assert period.period_start == "2024-03-06"
        assert period.period_end == "2024-04-05"
        assert period.submission_deadline == "11th April 2024"
        assert period.submission_deadline_in_days == 10
        assert period.hmrc_update_date_in_days == 15

    def test_period_after_start(self):
        period = current_monthly_return(dt.datetime(2024, 4, 10, tzinfo=UTC), 2024, 4)
        assert period.period_start == "2024-04-06"
        assert period.period_end == "2024-05-05"
        assert period.submission_deadline == "11th May 2024"
        assert period.hmrc_update_date == "16th May 2024"
        assert period.submission_deadline_in_days == 31
        assert period.hmrc_update_date_in_days == 36
        assert period.tax_year == 2024
        assert period.tax_month == 1

    def test_day_counts_truncate_toward_zero(self):
        period = current_monthly_return(dt.datetime(2024, 4, 10, 18, 0, tzinfo=UTC), 2024, 4)
        assert period.submission_deadline_in_days == 30

    def test_overdue_period_has_negative_days(self):
        period = current_monthly_return(dt.datetime(2024, 6, 1, tzinfo=UTC), 2024, 4)
        assert period.submission_deadline_in_days == -21
        assert period.is_overdue

    def test_december_rolls_into_january(self):
        period = current_monthly_return(dt.datetime(2024, 12, 20, tzinfo=UTC), 2024, 12)
        assert period.period_start == "2024-12-06"
        assert period.period_end == "2025-01-05"
        assert period.submission_deadline == "11th January 2025"

    def test_january_steps_back_to_previous_december(self):
        period = current_monthly_return(dt.datetime(2025, 1, 3, tzinfo=UTC), 2025, 1)
        assert period.period_start == "2024-12-06"
        assert period.period_end == "2025-01-05"
        assert period.year == 2024
        assert period.month == 12
        assert period.tax_month == 9

    def test_leap_year_february(self):
        period = current_monthly_return(dt.datetime(2024, 2, 10, tzinfo=UTC), 2024, 2)
        assert period.period_start == "2024-02-06"
        assert period.period_end == "2024-03-05"

    def test_defaults_to_now(self):
        now = dt.datetime(2024, 8, 7, 12, tzinfo=UTC)
        assert current_monthly_return(now) == current_monthly_return(now, 2024, 8)
        assert monthly_return_for(now).period_start == "2024-08-06"

    def test_same_inputs_same_result(self):
        now = dt.datetime(2024, 9, 1, tzinfo=UTC)
        assert current_monthly_return(now, 2024, 9) == current_monthly_return(now, 2024, 9)

    def test_naive_now_is_utc(self):
        naive = current_monthly_return(dt.datetime(2024, 4, 10), 2024, 4)
        aware = current_monthly_return(dt.datetime(2024, 4, 10, tzinfo=UTC), 2024, 4)
        assert naive == aware

    @pytest.mark.parametrize("month", [0, 13])
    def test_rejects_out_of_range_month(self, month):
        with pytest.raises(ValidationError) as exc_info:
            current_monthly_return(dt.datetime(2024, 4, 10, tzinfo=UTC), 2024, month)
        assert exc_info.value.fields == ["month"]
        assert exc_info.value.status_code == 422

    @pytest.mark.parametrize("year", [0, 1999, 9999, 10000])
    def test_rejects_unsupported_year(self, year):
        with pytest.raises(ValidationError) as exc_info:
            current_monthly_return(dt.datetime(2024, 4, 10, tzinfo=UTC), year, 1)
        assert exc_info.value.fields == ["year"]

    def test_last_supported_year(self):
        period = current_monthly_return(dt.datetime(9998, 12, 20, tzinfo=UTC), 9998, 12)
        assert period.period_end == "9999-01-05"

    def test_display_dates(self):
        data = current_monthly_return(dt.datetime(2024, 4, 10, tzinfo=UTC)).as_dict()
        assert data["period_start_display"] == "6th April 2024"
        assert data["period_end_display"] == "5th May 2024"


def test_add_months_clamps_day():
    assert add_months(dt.date(2024, 1, 31), 1) == dt.date(2024, 2, 29)
    assert add_months(dt.date(2023, 1, 31), 1) == dt.date(2023, 2, 28)
    assert add_months(dt.date(2024, 1, 6), -1) == dt.date(2023, 12, 6)


def test_days_until_accepts_dates():
    assert days_until(dt.date(2024, 4, 11), dt.date(2024, 4, 1)) == 10
    assert days_until(dt.date(2024, 4, 1), dt.date(2024, 4, 11)) == -10


def test_period_rejects_month_before_year():
    # Month is reported first when both are out of range
    with pytest.raises(ValidationError) as exc_info:
        current_monthly_return(dt.datetime(2024, 4, 10, tzinfo=UTC), 0, 0)
    assert exc_info.value.fields == ["month"]
