"""Helpers for Decimal normalization."""

from decimal import Decimal, InvalidOperation


def coerce_decimal(value) -> Decimal:
    """Normalize numeric values to Decimal.

    Floats go through ``str`` so binary noise does not leak into amounts.
    Values that cannot be read as a number become ``Decimal("NaN")`` and are
    left for the caller to reject or ignore.

    Args:
        value: Raw numeric value from a document, the cache, or a caller.

    Returns:
        Decimal: Normalized numeric value.
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return Decimal("NaN")
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str):
        try:
            return Decimal(value.strip())
        except InvalidOperation:
            return Decimal("NaN")
    return Decimal("NaN")


def format_amount(value: Decimal) -> str:
    """Format an amount with thousands separators and two decimals."""
    return f"{value:,.2f}"


__all__ = ["coerce_decimal", "format_amount"]
