"""
Precision helpers.

Decimal conversion for prices/quantities and lot-size formatting for
Hyperliquid order sizes (szDecimals).
"""

import math
from decimal import ROUND_DOWN, Decimal
from typing import Optional, Union

Number = Union[Decimal, float, int, str]


def to_decimal(value: Number) -> Decimal:
    """
    Convert a number to Decimal without binary float artefacts.

    Floats go through their shortest repr, so 0.1 becomes Decimal("0.1")
    rather than 0.1000000000000000055511151231257827...
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"cannot convert non-finite value {value!r} to Decimal")
        return Decimal(repr(value))
    return Decimal(value)


def quantize_down(value: Decimal, decimals: Optional[int]) -> Decimal:
    """Round toward zero to a fixed number of decimals (None = unchanged)."""
    if decimals is None:
        return value
    return value.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_DOWN)


def format_size(sz: Decimal, sz_decimals: int) -> str:
    """
    Format size per lot precision.

    Args:
        sz: Size (absolute quantity)
        sz_decimals: Asset szDecimals

    Returns:
        Formatted size string
    """
    rounded = quantize_down(abs(to_decimal(sz)), sz_decimals)

    if sz_decimals > 0:
        return f"{rounded:.{sz_decimals}f}".rstrip("0").rstrip(".")
    else:
        return str(int(rounded))
