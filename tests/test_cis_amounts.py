"""Tests for CIS deduction and invoice amount calculation."""
from decimal import Decimal

import pytest

from cisops.core.exceptions import InvalidAmountError
from cisops.services.cis import calculate_invoice_amounts, resolve_cis_rate


def test_gross_status_has_no_deduction():
    amounts = calculate_invoice_amounts(1000, 500, 0, True)
    assert amounts.cis_rate == Decimal("0")
    assert amounts.gross_amount == Decimal("1500.00")
    assert amounts.cis_amount == Decimal("0.00")
    assert amounts.net_amount == Decimal("1500.00")
    assert amounts.reverse_charge == Decimal("300.00")


def test_registered_subcontractor_standard_rate():
    amounts = calculate_invoice_amounts(1000, 500, 0.2, True)
    assert amounts.cis_rate == Decimal("0.2")
    assert amounts.cis_amount == Decimal("200.00")
    assert amounts.net_amount == Decimal("1300.00")
    assert amounts.gross_amount == Decimal("1500.00")
    assert amounts.reverse_charge == Decimal("300.00")


def test_missing_cis_number_falls_back_to_higher_rate():
    amounts = calculate_invoice_amounts(1000, 500, 0.2, False)
    assert amounts.cis_rate == Decimal("0.3")
    assert amounts.cis_amount == Decimal("300.00")
    assert amounts.net_amount == Decimal("1200.00")


def test_gross_rate_wins_without_cis_number():
    assert resolve_cis_rate(0, False) == Decimal("0")


@pytest.mark.parametrize("rate", [0.25, "0.1", 1])
def test_unexpected_rate_for_registered_subcontractor_uses_higher_rate(rate, caplog):
    with caplog.at_level("WARNING"):
        assert resolve_cis_rate(rate, True) == Decimal("0.3")
    assert "falls back to the higher rate" in caplog.text


def test_deduction_applies_to_labour_only():
    amounts = calculate_invoice_amounts(0, 750, 0.3, False)
    assert amounts.cis_amount == Decimal("0.00")
    assert amounts.net_amount == Decimal("750.00")


def test_rounds_half_up_to_pennies():
    # 0.125 * 0.2 = 0.025 -> 0.03 (banker's rounding would give 0.02)
    amounts = calculate_invoice_amounts("0.125", 0, 0.2, True)
    assert amounts.cis_amount == Decimal("0.03")
    assert amounts.gross_amount == Decimal("0.13")


def test_net_plus_cis_equals_gross():
    for labour, material in [("123.45", "67.89"), ("999.99", "0.01"), ("10.10", "20.20")]:
        amounts = calculate_invoice_amounts(labour, material, 0.2, True)
        assert amounts.net_amount + amounts.cis_amount == amounts.gross_amount


def test_accepts_numeric_strings_and_floats():
    from_strings = calculate_invoice_amounts("1000.50", "200", "0.2", True)
    from_floats = calculate_invoice_amounts(1000.5, 200.0, 0.2, True)
    assert from_strings == from_floats
    assert from_strings.gross_amount == Decimal("1200.50")


@pytest.mark.parametrize("labour", ["abc", None, True, float("nan"), float("inf"), ""])
def test_invalid_amount_raises(labour):
    with pytest.raises(InvalidAmountError) as exc_info:
        calculate_invoice_amounts(labour, 100, 0.2, True)
    assert exc_info.value.code == "CIS002"
    assert exc_info.value.details["field"] == "labour_cost"


def test_as_dict_keys_match_invoice_columns():
    amounts = calculate_invoice_amounts(100, 50, 0.2, True)
    assert set(amounts.as_dict()) == {"cis_rate", "gross_amount", "cis_amount", "net_amount", "reverse_charge"}


def test_large_valid_amounts_keep_full_precision():
    amounts = calculate_invoice_amounts("1e26", 0, 0.2, True)
    assert amounts.gross_amount == Decimal("100000000000000000000000000.00")
    assert amounts.cis_amount == Decimal("20000000000000000000000000.00")


@pytest.mark.parametrize("labour", ["1e60", "1e20000000"])
def test_amount_beyond_working_precision_is_invalid(labour):
    with pytest.raises(InvalidAmountError) as exc_info:
        calculate_invoice_amounts(labour, 100, 0.2, True)
    assert exc_info.value.details["field"] == "labour_cost"


def test_oversized_material_cost_names_material():
    with pytest.raises(InvalidAmountError) as exc_info:
        calculate_invoice_amounts(100, "1e60", 0.2, True)
    assert exc_info.value.details["field"] == "material_cost"


def test_same_inputs_same_result():
    first = calculate_invoice_amounts("1234.56", "78.90", 0.2, True)
    second = calculate_invoice_amounts("1234.56", "78.90", 0.2, True)
    assert first == second
    assert first.as_dict() == second.as_dict()
