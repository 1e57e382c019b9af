"""Numeric values that stay exact for as long as the arithmetic allows.

A :class:`Number` is either exact (a SymPy ``Rational``, which SymPy keeps in
lowest terms with a positive denominator) or approximate (a finite Python
float). The exactness flag is tracked explicitly: SymPy would happily collapse
``0 * Float`` to an exact zero, while an approximate operand must taint the
result.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from fractions import Fraction

import sympy as sp

from .types import CalcOverflowError


class NumberKind(Enum):
    INTEGER = "integer"
    RATIONAL = "rational"
    APPROXIMATE = "approximate"


@dataclass(frozen=True)
class Number:
    """Tagged numeric value.

    ``value`` is a ``sp.Rational`` when ``exact`` is True and a finite
    ``float`` otherwise. Use :meth:`from_rational` and :meth:`from_float`
    rather than the constructor.
    """

    value: sp.Rational | float
    exact: bool = True

    @classmethod
    def from_rational(cls, value) -> Number:
        """Build an exact number from an int, Fraction or sympy Rational."""
        if isinstance(value, Fraction):
            value = sp.Rational(value.numerator, value.denominator)
        return cls(sp.Rational(value), True)

    @classmethod
    def from_float(cls, value: float) -> Number:
        """Build an approximate number; non-finite values are an overflow."""
        value = float(value)
        if not math.isfinite(value):
            raise CalcOverflowError("result is too large to represent")
        return cls(value, False)

    @property
    def kind(self) -> NumberKind:
        if not self.exact:
            return NumberKind.APPROXIMATE
        if self.value.q == 1:
            return NumberKind.INTEGER
        return NumberKind.RATIONAL

    @property
    def is_integer(self) -> bool:
        """True only for exact integers."""
        return self.exact and self.value.q == 1

    @property
    def is_zero(self) -> bool:
        return self.value == 0

    @property
    def is_negative(self) -> bool:
        return self.value < 0

    def is_whole(self) -> bool:
        """True for exact integers and for approximate values with no fraction."""
        if self.exact:
            return self.value.q == 1
        return float(self.value).is_integer()

    def as_int(self) -> int:
        return int(self.value)

    def to_float(self) -> float:
        """Convert to float, raising CalcOverflowError when out of range."""
        if not self.exact:
            return self.value
        try:
            result = float(self.value)
        except OverflowError:
            raise CalcOverflowError("value is too large to convert to floating point")
        if not math.isfinite(result):
            raise CalcOverflowError("value is too large to convert to floating point")
        return result

    def to_rational(self) -> sp.Rational:
        """Exact rational view; approximate values go through their shortest repr."""
        if self.exact:
            return self.value
        frac = Fraction(repr(self.value))
        return sp.Rational(frac.numerator, frac.denominator)

    def __str__(self) -> str:
        return str(self.value)


ZERO = Number.from_rational(0)
ONE = Number.from_rational(1)
