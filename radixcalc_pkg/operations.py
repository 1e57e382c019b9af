"""Operation catalogue: arithmetic operators and built-in functions.

Every operation takes and returns :class:`~radixcalc_pkg.values.Number`.
Exact inputs give exact outputs wherever the mathematics allows it; any
approximate operand makes the result approximate. Trigonometric and
logarithmic functions are always approximate.

Errors are raised without a position; the evaluator attaches the position of
the node being evaluated.
"""

from __future__ import annotations

import math
import random
from enum import Enum
from typing import Callable, Sequence

import sympy as sp

from . import config
from .types import (
    CalcOverflowError,
    DivisionByZeroError,
    DomainError,
    UnknownIdentifierError,
)
from .values import ONE, ZERO, Number


class AngleUnit(Enum):
    RADIAN = "rad"
    DEGREE = "deg"

    @classmethod
    def from_name(cls, name: str | AngleUnit) -> AngleUnit:
        """Resolve "rad", "radian(s)", "deg", "degree(s)" to an AngleUnit."""
        if isinstance(name, AngleUnit):
            return name
        key = str(name).strip().lower()
        if key in ("rad", "radian", "radians"):
            return cls.RADIAN
        if key in ("deg", "degree", "degrees"):
            return cls.DEGREE
        raise ValueError(f"unknown angle unit: {name!r}")


class OperationContext:
    """Request-scoped settings passed to every function."""

    def __init__(self, angle_unit: AngleUnit = AngleUnit.RADIAN, rng: random.Random | None = None):
        self.angle_unit = angle_unit
        self.rng = rng or random.Random()


# Signature of a catalogue function.
OperationFunction = Callable[[Sequence[Number], OperationContext], Number]


def _float_result(func: Callable[..., float], *args: float) -> Number:
    try:
        return Number.from_float(func(*args))
    except OverflowError:
        raise CalcOverflowError("result is too large to represent")


def _bit_size(value: sp.Rational) -> int:
    return max(int(value.p).bit_length(), int(value.q).bit_length())


def _exact_fits(a: Number, b: Number) -> bool:
    """True when an exact product or quotient of ``a`` and ``b`` stays within MAX_EXACT_BITS."""
    return _bit_size(a.value) + _bit_size(b.value) <= config.MAX_EXACT_BITS


def _rational_sum_fits(a: Number, b: Number) -> bool:
    # Integer sums grow by one bit at most; fractions cross-multiply
    if a.is_integer and b.is_integer:
        return True
    return _exact_fits(a, b)


# ============================================================
# Arithmetic operators
# ============================================================


def add(a: Number, b: Number) -> Number:
    if a.exact and b.exact and _rational_sum_fits(a, b):
        return Number.from_rational(a.value + b.value)
    return _float_result(lambda x, y: x + y, a.to_float(), b.to_float())


def subtract(a: Number, b: Number) -> Number:
    if a.exact and b.exact and _rational_sum_fits(a, b):
        return Number.from_rational(a.value - b.value)
    return _float_result(lambda x, y: x - y, a.to_float(), b.to_float())


def multiply(a: Number, b: Number) -> Number:
    if a.exact and b.exact and _exact_fits(a, b):
        return Number.from_rational(a.value * b.value)
    return _float_result(lambda x, y: x * y, a.to_float(), b.to_float())


def divide(a: Number, b: Number) -> Number:
    if b.is_zero:
        raise DivisionByZeroError("division by zero")
    if a.exact and b.exact and _exact_fits(a, b):
        return Number.from_rational(a.value / b.value)
    return _float_result(lambda x, y: x / y, a.to_float(), b.to_float())


def modulo(a: Number, b: Number) -> Number:
    """Floored modulo of exact integers: the result takes the divisor's sign."""
    if not (a.is_integer and b.is_integer):
        raise DomainError("mod requires exact integer operands")
    if b.is_zero:
        raise DivisionByZeroError("modulo by zero")
    return Number.from_rational(a.as_int() % b.as_int())


def negate(a: Number) -> Number:
    if a.exact:
        return Number.from_rational(-a.value)
    return Number.from_float(-a.value)


def identity(a: Number) -> Number:
    return a


def absolute(a: Number) -> Number:
    if a.exact:
        return Number.from_rational(abs(a.value))
    return Number.from_float(abs(a.value))


def factorial(a: Number) -> Number:
    """n! for exact non-negative integers, Gamma(x + 1) otherwise."""
    if a.is_integer:
        n = a.as_int()
        if n < 0:
            raise DomainError("factorial of a negative integer is undefined")
        if n > config.MAX_FACTORIAL_ARGUMENT:
            raise CalcOverflowError(
                f"factorial argument {n} exceeds the limit of {config.MAX_FACTORIAL_ARGUMENT}"
            )
        return Number.from_rational(sp.factorial(n))

    x = a.to_float()
    if x.is_integer() and x < 0:
        raise DomainError("factorial of a negative integer is undefined")
    return _float_result(math.gamma, x + 1)


def combination(n: Number, k: Number) -> Number:
    """Binomial coefficient C(n, k) for exact integers 0 <= k <= n."""
    if not (n.is_integer and k.is_integer):
        raise DomainError("combinations require exact integer arguments")
    n_int, k_int = n.as_int(), k.as_int()
    if n_int < 0 or k_int < 0 or k_int > n_int:
        raise DomainError(f"C({n_int}, {k_int}) is undefined: need 0 <= k <= n")
    if min(k_int, n_int - k_int) > config.MAX_FACTORIAL_ARGUMENT:
        raise CalcOverflowError("combination is too large to compute exactly")
    return Number.from_rational(sp.binomial(n_int, k_int))


# ============================================================
# Powers and roots
# ============================================================


def _exact_root(value: sp.Rational, degree: int) -> sp.Rational | None:
    """Exact ``degree``-th root of a non-negative rational, or None."""
    num_root, num_exact = sp.integer_nthroot(int(value.p), degree)
    den_root, den_exact = sp.integer_nthroot(int(value.q), degree)
    if num_exact and den_exact:
        return sp.Rational(num_root, den_root)
    return None


def _integer_power(base: Number, exponent: int) -> Number:
    if base.is_zero:
        if exponent < 0:
            raise DivisionByZeroError("zero cannot be raised to a negative power")
        return ONE if exponent == 0 else ZERO
    if abs(base.value) == 1:
        return Number.from_rational(base.value ** (exponent % 2))
    if abs(exponent) * _bit_size(base.value) > config.MAX_EXACT_BITS:
        return _float_result(lambda: math.pow(base.to_float(), float(exponent)))
    return Number.from_rational(base.value**exponent)


def _rational_power(base: Number, exponent: sp.Rational) -> Number:
    p, q = int(exponent.p), int(exponent.q)
    negative = base.is_negative
    if negative and q % 2 == 0:
        raise DomainError("even root of a negative number is not real")
    if base.is_zero:
        if p < 0:
            raise DivisionByZeroError("zero cannot be raised to a negative power")
        return ZERO

    magnitude = abs(base.value)
    exact_root = _exact_root(magnitude, q)
    sign = -1 if negative and p % 2 else 1
    if exact_root is not None:
        result = _integer_power(Number.from_rational(exact_root), p)
        return negate(result) if sign < 0 else result
    value = _float_result(lambda: math.pow(Number.from_rational(magnitude).to_float(), p / q))
    return negate(value) if sign < 0 else value


def power(a: Number, b: Number) -> Number:
    """a ^ b, exact when both are exact and the result is rational."""
    if a.exact and b.exact:
        if b.is_integer:
            return _integer_power(a, b.as_int())
        return _rational_power(a, b.value)

    x, y = a.to_float(), b.to_float()
    if x == 0 and y < 0:
        raise DivisionByZeroError("zero cannot be raised to a negative power")
    if x < 0 and not y.is_integer():
        # Odd roots of negative numbers stay real when the exponent is exact
        if b.exact and int(b.value.q) % 2 == 1:
            p, q = int(b.value.p), int(b.value.q)
            magnitude = _float_result(lambda: math.pow(-x, p / q))
            return negate(magnitude) if p % 2 else magnitude
        raise DomainError("negative base with a non-integer exponent is not real")
    return _float_result(math.pow, x, y)


def root(index: Number, x: Number) -> Number:
    """The ``index``-th root of ``x``; odd roots of negative numbers are real."""
    if not index.is_integer or index.as_int() < 1:
        raise DomainError("root index must be an exact positive integer")
    degree = index.as_int()
    if x.is_negative and degree % 2 == 0:
        raise DomainError("even root of a negative number is not real")
    return power(x, Number.from_rational(sp.Rational(1, degree)))


# ============================================================
# Trigonometry
# ============================================================


def _to_radians(x: Number, ctx: OperationContext) -> float:
    if ctx.angle_unit != AngleUnit.DEGREE:
        return x.to_float()
    if x.exact:
        # Reduce exactly first so large angles keep their precision
        return math.radians(float(x.value % 360))
    return math.radians(x.to_float())


def _from_radians(value: float, ctx: OperationContext) -> Number:
    if ctx.angle_unit == AngleUnit.DEGREE:
        value = math.degrees(value)
    return Number.from_float(value)


def sin(x: Number, ctx: OperationContext) -> Number:
    return Number.from_float(math.sin(_to_radians(x, ctx)))


def cos(x: Number, ctx: OperationContext) -> Number:
    return Number.from_float(math.cos(_to_radians(x, ctx)))


def tan(x: Number, ctx: OperationContext) -> Number:
    angle = _to_radians(x, ctx)
    if abs(math.cos(angle)) < config.ASYMPTOTE_TOLERANCE:
        raise DomainError("tan is undefined at this angle")
    return _float_result(math.tan, angle)


def cot(x: Number, ctx: OperationContext) -> Number:
    angle = _to_radians(x, ctx)
    sine = math.sin(angle)
    if abs(sine) < config.ASYMPTOTE_TOLERANCE:
        raise DomainError("cot is undefined at this angle")
    return _float_result(lambda c, s: c / s, math.cos(angle), sine)


def asin(x: Number, ctx: OperationContext) -> Number:
    value = x.to_float()
    if not -1 <= value <= 1:
        raise DomainError("asin is only defined on [-1, 1]")
    return _from_radians(math.asin(value), ctx)


def acos(x: Number, ctx: OperationContext) -> Number:
    value = x.to_float()
    if not -1 <= value <= 1:
        raise DomainError("acos is only defined on [-1, 1]")
    return _from_radians(math.acos(value), ctx)


def atan(x: Number, ctx: OperationContext) -> Number:
    return _from_radians(math.atan(x.to_float()), ctx)


def acot(x: Number, ctx: OperationContext) -> Number:
    """Inverse cotangent with range (0, pi)."""
    return _from_radians(math.pi / 2 - math.atan(x.to_float()), ctx)


# ============================================================
# Logarithms
# ============================================================


def _log_of(x: Number, log_func: Callable[[float], float], name: str) -> float:
    if x.is_zero or x.is_negative:
        raise DomainError(f"{name} is only defined for positive arguments")
    if x.exact:
        # math.log* accept arbitrarily large ints, floats would overflow
        return log_func(int(x.value.p)) - log_func(int(x.value.q))
    return log_func(x.value)


def ln(x: Number) -> Number:
    return Number.from_float(_log_of(x, math.log, "ln"))


def log10(x: Number) -> Number:
    return Number.from_float(_log_of(x, math.log10, "log10"))


def log2(x: Number) -> Number:
    return Number.from_float(_log_of(x, math.log2, "log2"))


def log(base: Number, x: Number) -> Number:
    """Logarithm of ``x`` in ``base``."""
    if base.is_zero or base.is_negative:
        raise DomainError("logarithm base must be positive")
    if base.value == 1:
        raise DomainError("logarithm base must not be 1")
    denominator = _log_of(base, math.log, "log")
    if denominator == 0:
        raise DomainError("logarithm base must not be 1")
    return Number.from_float(_log_of(x, math.log, "log") / denominator)


# ============================================================
# Registry
# ============================================================


def _random(a: Number, b: Number, ctx: OperationContext) -> Number:
    low, high = a.to_float(), b.to_float()
    if low > high:
        raise DomainError("random(a, b) requires a <= b")
    return Number.from_float(ctx.rng.uniform(low, high))


def _unary(func: Callable[[Number], Number]) -> OperationFunction:
    return lambda args, ctx: func(args[0])


def _binary(func: Callable[[Number, Number], Number]) -> OperationFunction:
    return lambda args, ctx: func(args[0], args[1])


def _angular(func: Callable[[Number, OperationContext], Number]) -> OperationFunction:
    return lambda args, ctx: func(args[0], ctx)


def _sqrt(args: Sequence[Number], ctx: OperationContext) -> Number:
    if args[0].is_negative:
        raise DomainError("square root of a negative number is not real")
    return root(Number.from_rational(2), args[0])


FUNCTIONS: dict[str, OperationFunction] = {
    "sqrt": _sqrt,
    "root": _binary(root),
    "pow": _binary(power),
    "abs": _unary(absolute),
    "ln": _unary(ln),
    "log2": _unary(log2),
    "log10": _unary(log10),
    "log": _binary(log),
    "sin": _angular(sin),
    "cos": _angular(cos),
    "tan": _angular(tan),
    "cot": _angular(cot),
    "asin": _angular(asin),
    "acos": _angular(acos),
    "atan": _angular(atan),
    "acot": _angular(acot),
    "comb": _binary(combination),
    "mod": _binary(modulo),
    "random": lambda args, ctx: _random(args[0], args[1], ctx),
}

BINARY_OPERATORS: dict[str, Callable[[Number, Number], Number]] = {
    "+": add,
    "-": subtract,
    "*": multiply,
    "/": divide,
    "mod": modulo,
    "^": power,
    "C": combination,
}

UNARY_OPERATORS: dict[str, Callable[[Number], Number]] = {
    "-": negate,
    "+": identity,
    "!": factorial,
}


def call_function(name: str, args: Sequence[Number], ctx: OperationContext) -> Number:
    """Calls a catalogue function by canonical name."""
    func = FUNCTIONS.get(name)
    if func is None:
        raise UnknownIdentifierError(f"unknown function '{name}'")
    return func(args, ctx)
