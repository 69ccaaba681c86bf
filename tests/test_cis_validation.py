"""Tests for invoice field validation."""
import datetime as dt
from decimal import Decimal

import pytest

from cisops.core.exceptions import ValidationError
from cisops.services.cis import validate_invoice_data
from cisops.services.cis.validation import ZERO_TIMESTAMP

VALID = {
    "invoiceNumber": "INV-001",
    "kashflowNumber": "KF-1001",
    "invoiceDate": "2024-04-08",
    "remittanceDate": "",
    "labourCost": "1000",
    "materialCost": 500,
    "month": "4",
    "year": 2024,
}


def test_valid_record_is_typed():
    record = validate_invoice_data(VALID)
    assert record.invoice_number == "INV-001"
    assert record.invoice_date == dt.date(2024, 4, 8)
    assert record.remittance_date is None
    assert record.labour_cost == Decimal("1000")
    assert record.material_cost == Decimal("500")
    assert record.month == 4
    assert record.year == 2024
    assert record.submission_date is None


def test_snake_case_keys_are_accepted():
    snake = {
        "invoice_number": "A1",
        "kashflow_number": "K1",
        "invoice_date": "2024-05-01",
        "labour_cost": 10,
        "material_cost": 0,
        "month": 5,
        "year": 2024,
    }
    record = validate_invoice_data(snake)
    assert record.kashflow_number == "K1"
    assert record.month == 5


def test_every_failing_field_is_reported_in_rule_order():
    with pytest.raises(ValidationError) as exc_info:
        validate_invoice_data({})
    error = exc_info.value
    assert error.fields == [
        "invoiceNumber",
        "kashflowNumber",
        "invoiceDate",
        "labourCost",
        "materialCost",
        "month",
        "year",
    ]
    assert error.message.startswith(
        "Invalid or missing value for invoiceNumber, Invalid or missing value for kashflowNumber"
    )
    assert error.status_code == 422
    assert error.code == "CIS001"


@pytest.mark.parametrize(
    "field, value",
    [
        ("invoiceDate", "not-a-date"),
        ("remittanceDate", "31/31/2024"),
        ("labourCost", -1),
        ("materialCost", "ten"),
        ("month", 13),
        ("month", 4.5),
        ("year", 1999),
        ("invoiceNumber", "   "),
    ],
)
def test_single_bad_field(field, value):
    with pytest.raises(ValidationError) as exc_info:
        validate_invoice_data({**VALID, field: value})
    assert exc_info.value.fields == [field]
    assert exc_info.value.message == f"Invalid or missing value for {field}"


@pytest.mark.parametrize("sentinel", [ZERO_TIMESTAMP, "", None])
def test_submission_date_sentinel_becomes_none(sentinel):
    record = validate_invoice_data({**VALID, "submissionDate": sentinel})
    assert record.submission_date is None


def test_submission_date_is_parsed_as_utc():
    record = validate_invoice_data({**VALID, "submissionDate": "2024-05-11T09:30:00Z"})
    assert record.submission_date == dt.datetime(2024, 5, 11, 9, 30, tzinfo=dt.timezone.utc)


def test_unreadable_submission_date_is_discarded(caplog):
    with caplog.at_level("WARNING"):
        record = validate_invoice_data({**VALID, "submissionDate": "sometime"})
    assert record.submission_date is None
    assert "Discarding unreadable submission date" in caplog.text


def test_normalized_data_is_attached_to_error():
    with pytest.raises(ValidationError) as exc_info:
        validate_invoice_data({**VALID, "month": 0, "submissionDate": ZERO_TIMESTAMP})
    assert exc_info.value.data["submissionDate"] is None
    assert exc_info.value.data["month"] == 0


def test_input_mapping_is_not_mutated():
    data = {**VALID, "submissionDate": ZERO_TIMESTAMP}
    validate_invoice_data(data)
    assert data["submissionDate"] == ZERO_TIMESTAMP


def test_same_inputs_same_result():
    data = {**VALID, "submissionDate": "2024-05-11T09:30:00Z"}
    assert validate_invoice_data(data) == validate_invoice_data(data)


@pytest.mark.parametrize("field", ["labourCost", "materialCost"])
@pytest.mark.parametrize("value", ["1e26", "10000000000", "9999999999.999"])
def test_amount_above_column_limit_rejected(field, value):
    with pytest.raises(ValidationError) as exc_info:
        validate_invoice_data({**VALID, field: value})
    assert exc_info.value.fields == [field]


def test_amount_at_column_limit_accepted():
    record = validate_invoice_data({**VALID, "labourCost": "9999999999.99"})
    assert record.labour_cost == Decimal("9999999999.99")


@pytest.mark.parametrize("field", ["month", "year"])
def test_huge_exponent_rejected_quickly(field):
    with pytest.raises(ValidationError) as exc_info:
        validate_invoice_data({**VALID, field: "1e20000000"})
    assert exc_info.value.fields == [field]


@pytest.mark.parametrize("year", [9999, "1e4", 10000])
def test_year_above_supported_range_rejected(year):
    with pytest.raises(ValidationError) as exc_info:
        validate_invoice_data({**VALID, "year": year})
    assert exc_info.value.fields == ["year"]


def test_exponent_notation_within_range_accepted():
    record = validate_invoice_data({**VALID, "month": "1.2e1", "year": "2.024e3"})
    assert record.month == 12
    assert record.year == 2024
