"""Utilities: Decimal and lot-size precision helpers."""

from momentum_rotation.utils.precision import to_decimal, quantize_down, format_size

__all__ = [
    "to_decimal",
    "quantize_down",
    "format_size",
]
