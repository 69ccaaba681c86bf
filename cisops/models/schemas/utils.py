"""Common utility functions for schemas."""
from decimal import ROUND_HALF_UP, Decimal


def format_money(value: Decimal | None) -> str | None:
    """Render monetary Decimals with exactly two places ("1500.00")."""
    if value is None:
        return None
    return str(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_rate(value: Decimal | None) -> str | None:
    """Render a deduction rate without trailing zeros ("0.2", "0")."""
    if value is None:
        return None
    normalized = Decimal(value).normalize()
    text = format(normalized, "f")
    return text or "0"
