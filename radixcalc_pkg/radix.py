"""Numeral-base conversion: digit strings to exact rationals and back."""

from __future__ import annotations

import math
from enum import IntEnum

import sympy as sp

from .types import LexError

DIGITS = "0123456789ABCDEF"

# int <-> str conversion of very long numbers is capped by the interpreter
# for non power-of-two bases, so long values are converted in chunks.
_CHUNK_DIGITS = 1000
_FORMAT_SPECS = {2: "b", 8: "o", 10: "d", 16: "X"}


class Base(IntEnum):
    BINARY = 2
    OCTAL = 8
    DECIMAL = 10
    HEXADECIMAL = 16

    @property
    def alphabet(self) -> str:
        return DIGITS[: self.value]

    @property
    def short_name(self) -> str:
        return _SHORT_NAMES[self]

    @classmethod
    def from_name(cls, name: str | int) -> Base:
        """Resolve "hex", "16", "hexadecimal", 16 ... to a Base."""
        if isinstance(name, int):
            return cls(name)
        key = str(name).strip().lower()
        if key not in _BASE_NAMES:
            raise ValueError(f"unknown numeral base: {name!r}")
        return _BASE_NAMES[key]


_SHORT_NAMES = {
    Base.BINARY: "bin",
    Base.OCTAL: "oct",
    Base.DECIMAL: "dec",
    Base.HEXADECIMAL: "hex",
}

_BASE_NAMES = {}
for _base in Base:
    _BASE_NAMES[str(_base.value)] = _base
    _BASE_NAMES[_base.name.lower()] = _base
    _BASE_NAMES[_SHORT_NAMES[_base]] = _base

# Literal prefixes that select a base explicitly (0b101, 0o17, 0xFF)
RADIX_PREFIXES = {"b": Base.BINARY, "o": Base.OCTAL, "x": Base.HEXADECIMAL}


def digit_value(char: str, base: int) -> int | None:
    """Value of ``char`` as a digit of ``base`` or None when it is not one."""
    index = DIGITS.find(char.upper())
    if 0 <= index < base:
        return index
    return None


def _parse_int(digits: str, base: int) -> int:
    if len(digits) <= _CHUNK_DIGITS:
        return int(digits, base)
    value = 0
    for start in range(0, len(digits), _CHUNK_DIGITS):
        chunk = digits[start : start + _CHUNK_DIGITS]
        value = value * base ** len(chunk) + int(chunk, base)
    return value


def _render_int(value: int, base: int) -> str:
    spec = _FORMAT_SPECS[base]
    chunk = base**_CHUNK_DIGITS
    if value < chunk:
        return format(value, spec)
    parts = []
    while value:
        value, low = divmod(value, chunk)
        parts.append(low)
    head = format(parts.pop(), spec)
    return head + "".join(format(part, f"0{_CHUNK_DIGITS}{spec}") for part in reversed(parts))


def parse_digits(text: str, base: int, position: int = 0) -> sp.Rational:
    """Convert a digit string (optionally with one radix point) to an exact value.

    Args:
        text: Digits of ``base``, e.g. "1F.8" in hexadecimal
        base: Numeral base the digits are written in
        position: Offset of ``text`` in the source, used in error positions

    Raises:
        LexError: On a character outside the base's alphabet or a malformed literal
    """
    if text.count(".") > 1:
        raise LexError(
            f"malformed number {text!r}: more than one radix point",
            position=position + text.index(".", text.index(".") + 1),
            reason="MALFORMED_NUMBER",
        )
    whole, _, fraction = text.partition(".")
    if not whole and not fraction:
        raise LexError(
            "malformed number: radix point without digits",
            position=position,
            reason="MALFORMED_NUMBER",
        )
    for offset, char in enumerate(text):
        if char != "." and digit_value(char, base) is None:
            raise LexError(
                f"invalid digit {char!r} for base {int(base)}",
                position=position + offset,
                reason="INVALID_DIGIT",
            )
    numerator = _parse_int(whole + fraction, base)
    return sp.Rational(numerator, base ** len(fraction))


def render(value: sp.Rational, base: int, digits: int) -> str:
    """Render ``value`` in ``base`` with at most ``digits`` fractional digits.

    The fraction is truncated, not rounded; rounding is the formatter's job.
    Trailing zeros never appear because emission stops at a zero remainder.
    """
    value = sp.Rational(value)
    sign = "-" if value < 0 else ""
    numerator, denominator = abs(int(value.p)), int(value.q)
    whole, remainder = divmod(numerator, denominator)
    fraction = []
    while remainder and len(fraction) < digits:
        digit, remainder = divmod(remainder * base, denominator)
        fraction.append(DIGITS[digit])
    text = _render_int(whole, base)
    if fraction:
        text = f"{text}.{''.join(fraction)}"
    if sign and text.strip("0.") == "":
        return text
    return sign + text


def digits_for_precision(precision: int, base: int) -> int:
    """Number of fractional ``base`` digits that carry ``precision`` decimal digits."""
    if precision <= 0:
        return 0
    if base == 10:
        return precision
    return math.ceil(precision * math.log(10) / math.log(base))


def to_base_string(value: int, base: int) -> str:
    """Render an integer in ``base`` (negative values get a leading '-')."""
    if value < 0:
        return "-" + _render_int(-value, base)
    return _render_int(value, base)
