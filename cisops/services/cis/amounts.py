"""CIS deduction and invoice amount calculation.

Pure computation: no database access, no clock. The deduction applies to the
labour element only; materials are paid in full. Amounts keep full precision
through the chain and are rounded half away from zero to pennies at the end.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, DecimalException, InvalidOperation, localcontext
from typing import Any

from cisops.core.exceptions import InvalidAmountError

logger = logging.getLogger(__name__)

# CIS deduction rates
GROSS_RATE = Decimal("0.0")        # gross payment status, no deduction
STANDARD_RATE = Decimal("0.2")     # registered subcontractor
HIGHER_RATE = Decimal("0.3")       # unregistered / unverified subcontractor

ALLOWED_DEDUCTION_RATES = (Decimal("0"), STANDARD_RATE, HIGHER_RATE)

# Flat VAT estimate used for the domestic reverse charge
REVERSE_CHARGE_RATE = Decimal("0.2")

_PENNY = Decimal("0.01")

# Largest value the Numeric(12, 2) amount columns hold
MAX_AMOUNT = Decimal("9999999999.99")

# Enough digits for any product of two validated amounts
_MONEY_PRECISION = 50


@dataclass(frozen=True)
class InvoiceAmounts:
    cis_rate: Decimal
    gross_amount: Decimal
    cis_amount: Decimal
    net_amount: Decimal
    reverse_charge: Decimal

    def as_dict(self) -> dict[str, Decimal]:
        return {
            "cis_rate": self.cis_rate,
            "gross_amount": self.gross_amount,
            "cis_amount": self.cis_amount,
            "net_amount": self.net_amount,
            "reverse_charge": self.reverse_charge,
        }


def to_decimal(value: Any, field: str) -> Decimal:
    """Coerce *value* to a finite Decimal or raise InvalidAmountError."""
    if isinstance(value, bool) or value is None:
        raise InvalidAmountError(field, value)
    try:
        if isinstance(value, float):
            result = Decimal(str(value))
        elif isinstance(value, str):
            result = Decimal(value.strip())
        else:
            result = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidAmountError(field, value) from exc
    if not result.is_finite():
        raise InvalidAmountError(field, value)
    return result


def round_money(value: Decimal) -> Decimal:
    return value.quantize(_PENNY, rounding=ROUND_HALF_UP)


def resolve_cis_rate(deduction_rate: Any, has_cis_number: bool) -> Decimal:
    """Pick the effective deduction rate.

    Gross status wins regardless of registration. The standard rate needs both
    a CIS number and a 0.2 deduction; anything else falls back to the higher rate.
    """
    rate = to_decimal(deduction_rate, "deduction_rate")
    if rate == 0:
        return GROSS_RATE
    if has_cis_number and rate == STANDARD_RATE:
        return STANDARD_RATE
    if has_cis_number and rate != HIGHER_RATE:
        logger.warning(
            "Registered subcontractor with deduction rate %s falls back to the higher rate %s",
            rate,
            HIGHER_RATE,
        )
    return HIGHER_RATE


def calculate_invoice_amounts(
    labour_cost: Any,
    material_cost: Any,
    deduction_rate: Any,
    has_cis_number: bool,
) -> InvoiceAmounts:
    """
    Calculate gross, CIS, net and reverse-charge amounts for an invoice.

    Args:
        labour_cost: Labour element of the invoice
        material_cost: Materials element of the invoice
        deduction_rate: Subcontractor's deduction rate (0, 0.2 or 0.3)
        has_cis_number: Whether the subcontractor holds a CIS number

    Returns:
        InvoiceAmounts with monetary values rounded to 2 decimal places
    """
    labour = to_decimal(labour_cost, "labour_cost")
    material = to_decimal(material_cost, "material_cost")
    cis_rate = resolve_cis_rate(deduction_rate, bool(has_cis_number))

    with localcontext() as ctx:
        ctx.prec = _MONEY_PRECISION
        try:
            gross_amount = labour + material
            cis_amount = labour * cis_rate
            net_amount = gross_amount - cis_amount
            reverse_charge = gross_amount * REVERSE_CHARGE_RATE
            return InvoiceAmounts(
                cis_rate=cis_rate,
                gross_amount=round_money(gross_amount),
                cis_amount=round_money(cis_amount),
                net_amount=round_money(net_amount),
                reverse_charge=round_money(reverse_charge),
            )
        except DecimalException as exc:
            # Magnitude beyond the working precision or exponent range
            if labour.copy_abs() >= material.copy_abs():
                raise InvalidAmountError("labour_cost", labour_cost) from exc
            raise InvalidAmountError("material_cost", material_cost) from exc
