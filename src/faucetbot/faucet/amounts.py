"""Decimal <-> base unit conversions.

Works for any asset measured in base units of `decimals` places:
satoshis (8), wei (18), or token-specific precisions.
"""

from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Union

Number = Union[Decimal, int, str, float]

# Enough digits for uint256 values
_PRECISION = 80


def _as_decimal(amount: Number) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    if isinstance(amount, float):
        # str() keeps the shortest repr, avoiding binary float artifacts
        return Decimal(str(amount))
    return Decimal(amount)


def to_base_units(amount: Number, decimals: int) -> int:
    """Convert a decimal amount to integer base units.

    Amounts below the smallest representable unit (10^-decimals) become 0.

    Args:
        amount: Human-readable amount (e.g. Decimal("0.0005"))
        decimals: Asset precision

    Returns:
        Amount in base units, rounded half-up
    """
    value = _as_decimal(amount)

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        if value < Decimal(1).scaleb(-decimals):
            return 0
        scaled = value.scaleb(decimals)
        return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def to_decimal(base_units: int, decimals: int) -> Decimal:
    """Convert integer base units back to a non-negative decimal amount."""
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return abs(Decimal(int(base_units)).scaleb(-decimals))
