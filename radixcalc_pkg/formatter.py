"""Render numeric results in the output base at the configured precision."""

from __future__ import annotations

import sympy as sp

from . import config
from .radix import Base, digits_for_precision, render
from .values import Number


def round_half_away(value: sp.Rational, base: int, digits: int) -> sp.Rational:
    """Round ``value`` to ``digits`` fractional digits of ``base``, ties away from zero."""
    scale = base**digits
    numerator, denominator = abs(int(value.p)), int(value.q)
    scaled = (2 * numerator * scale + denominator) // (2 * denominator)
    rounded = sp.Rational(scaled, scale)
    return -rounded if value < 0 else rounded


def format_value(
    value: Number, base: int = Base.DECIMAL, precision: int | None = None
) -> str:
    """Format a number for display.

    Args:
        value: Exact or approximate number
        base: Output numeral base
        precision: Decimal digits after the point (defaults to config.OUTPUT_PRECISION)

    Returns:
        Digits of ``base`` with an optional '-' and radix point; trailing zeros
        and a trailing point are stripped and zero is never signed.
    """
    if precision is None:
        precision = config.OUTPUT_PRECISION
    digits = digits_for_precision(precision, base)
    rounded = round_half_away(value.to_rational(), base, digits)
    return render(rounded, base, digits)
