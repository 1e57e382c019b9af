"""Public API for RadixCalc - returns structured objects instead of raising.

The variable store is an explicit handle: callers that want variables and
``ans`` to persist between requests pass the same :class:`VariableStore`
(or use a :class:`Session`). Base, angle unit and precision are per request.

Example:
    >>> from radixcalc_pkg.api import evaluate
    >>> from radixcalc_pkg.store import VariableStore
    >>> store = VariableStore()
    >>> evaluate("x = 5", store=store).result
    '5'
    >>> evaluate("x * 2", store=store).result
    '10'
    >>> evaluate("FF + 1", base="hex").result
    '100'
"""

from __future__ import annotations

import random
from collections import deque

from . import config
from .config import VAR_NAME_RE
from .evaluator import EvaluationContext, evaluate_tree
from .formatter import format_value
from .logging_config import get_logger
from .operations import AngleUnit
from .parser import parse
from .radix import Base
from .store import VariableStore
from .tokenizer import TokenType, tokenize
from .types import CalcError, EvalResult, HistoryEntry, ParseError
from .values import Number

logger = get_logger("api")


def _resolve(base: Base | int | str, angle_unit: AngleUnit | str) -> tuple[Base, AngleUnit]:
    return Base.from_name(base), AngleUnit.from_name(angle_unit)


def calculate(
    expression: str,
    base: Base | int | str = Base.DECIMAL,
    angle_unit: AngleUnit | str = AngleUnit.RADIAN,
    store: VariableStore | None = None,
    rng: random.Random | None = None,
) -> Number:
    """Evaluate ``expression`` and return the raw Number.

    The store is locked for the whole request. An assignment and the ``ans``
    alias are written only once evaluation has fully succeeded.

    Raises:
        CalcError: Any error of the calculator's taxonomy
        ValueError: For an unknown base or angle unit name
    """
    value, _ = _calculate(expression, base, angle_unit, store, rng)
    return value


def _calculate(
    expression: str,
    base: Base | int | str,
    angle_unit: AngleUnit | str,
    store: VariableStore | None,
    rng: random.Random | None,
) -> tuple[Number, str | None]:
    """Evaluate and also report the variable an assignment bound, if any."""
    base, angle_unit = _resolve(base, angle_unit)
    if store is None:
        store = VariableStore()
    try:
        tree = parse(expression, base)
        with store.transaction():
            context = EvaluationContext(
                store=store,
                angle_unit=angle_unit,
                rng=rng or random.Random(),
                source=expression,
            )
            value = evaluate_tree(tree, context)
            store.set_last_result(value)
    except CalcError as exc:
        if exc.expression is None:
            exc.expression = expression
        raise
    logger.debug("evaluated %r in base %d -> %s", expression, base, value)
    name = VariableStore.normalize(tree.name) if tree.type == "Assignment" else None
    return value, name


def evaluate(
    expression: str,
    base: Base | int | str = Base.DECIMAL,
    angle_unit: AngleUnit | str = AngleUnit.RADIAN,
    store: VariableStore | None = None,
    precision: int | None = None,
    rng: random.Random | None = None,
) -> EvalResult:
    """Evaluate a mathematical expression.

    Args:
        expression: Expression text written in ``base`` (e.g. "2+2", "sin(pi/2)", "x = 3")
        base: Numeral base for input and output ("bin", "oct", "dec", "hex" or 2/8/10/16)
        angle_unit: "rad" or "deg" for trigonometric functions
        store: Variable store; a fresh one is used when omitted
        precision: Decimal digits after the point (defaults to config.OUTPUT_PRECISION)
        rng: Random source for random(a, b)

    Returns:
        EvalResult with the formatted result, or the error code and position
    """
    try:
        base, angle_unit = _resolve(base, angle_unit)
        value, name = _calculate(expression, base, angle_unit, store, rng)
    except CalcError as exc:
        logger.info("evaluation of %r failed: %s [%s]", expression, exc, exc.code)
        return EvalResult.from_error(exc)
    except ValueError as exc:
        return EvalResult(ok=False, error=str(exc), error_code="INVALID_ARGUMENT")

    return EvalResult(
        ok=True,
        result=format_value(value, base, precision),
        kind=value.kind.value,
        base=int(base),
        name=name,
    )


def define_variable(
    name: str,
    value: str | Number,
    base: Base | int | str = Base.DECIMAL,
    store: VariableStore | None = None,
    angle_unit: AngleUnit | str = AngleUnit.RADIAN,
    precision: int | None = None,
) -> EvalResult:
    """Bind ``name`` to ``value`` without touching ``ans``.

    ``value`` is an expression written in ``base`` (or an already computed
    Number). Nothing is written when the value fails to evaluate.
    A name that reads as a number in ``base`` (``ab`` or ``f`` in hex) is
    rejected.
    """
    if store is None:
        store = VariableStore()
    try:
        base, angle_unit = _resolve(base, angle_unit)
        key = name.strip()
        if VAR_NAME_RE.match(key) and tokenize(key, base)[0].type == TokenType.NUMBER:
            raise ParseError(
                f"'{name}' reads as a number in base {int(base)} and cannot be a variable name",
                reason="INVALID_NAME",
            )
        with store.transaction():
            if isinstance(value, Number):
                number = value
            else:
                tree = parse(value, base)
                if tree.type == "Assignment":
                    raise ParseError(
                        "a variable value cannot contain an assignment",
                        position=tree.position,
                        reason="INVALID_ASSIGNMENT",
                    )
                context = EvaluationContext(store=store, angle_unit=angle_unit, source=value)
                number = evaluate_tree(tree, context)
            store.define(name, number)
    except CalcError as exc:
        logger.info("defining %r failed: %s [%s]", name, exc, exc.code)
        return EvalResult.from_error(exc)
    except ValueError as exc:
        return EvalResult(ok=False, error=str(exc), error_code="INVALID_ARGUMENT")
    return EvalResult(
        ok=True,
        result=format_value(number, base, precision),
        kind=number.kind.value,
        base=int(base),
        name=VariableStore.normalize(name),
    )


def undefine_variable(name: str, store: VariableStore) -> EvalResult:
    """Remove a user variable; built-ins cannot be removed."""
    try:
        store.undefine(name)
    except CalcError as exc:
        return EvalResult.from_error(exc)
    return EvalResult(ok=True, name=VariableStore.normalize(name))


def list_variables(
    store: VariableStore,
    base: Base | int | str = Base.DECIMAL,
    precision: int | None = None,
) -> list[tuple[str, str]]:
    """All bindings as (name, value rendered in ``base``) pairs.

    Built-ins come first, then ``ans`` once set, then user variables in
    definition order.
    """
    base = Base.from_name(base)
    return [(name, format_value(value, base, precision)) for name, value in store.items()]


class Session:
    """A calculator session: one store, default settings and a bounded history."""

    def __init__(
        self,
        base: Base | int | str | None = None,
        angle_unit: AngleUnit | str | None = None,
        precision: int | None = None,
        store: VariableStore | None = None,
        rng: random.Random | None = None,
        history_limit: int | None = None,
    ):
        self.base = Base.from_name(base if base is not None else config.DEFAULT_BASE)
        self.angle_unit = AngleUnit.from_name(
            angle_unit if angle_unit is not None else config.DEFAULT_ANGLE_UNIT
        )
        self.precision = precision
        self.store = store or VariableStore()
        self.rng = rng or random.Random()
        limit = history_limit if history_limit is not None else config.HISTORY_LIMIT
        self._history: deque[HistoryEntry] = deque(maxlen=limit)

    def evaluate(
        self,
        expression: str,
        base: Base | int | str | None = None,
        angle_unit: AngleUnit | str | None = None,
    ) -> EvalResult:
        """Evaluate in this session; successful evaluations go to the history."""
        result = evaluate(
            expression,
            base=base if base is not None else self.base,
            angle_unit=angle_unit if angle_unit is not None else self.angle_unit,
            store=self.store,
            precision=self.precision,
            rng=self.rng,
        )
        if result.ok:
            self._history.append(HistoryEntry(expression, result.result, result.base))
        return result

    def define_variable(
        self, name: str, value: str | Number, base: Base | int | str | None = None
    ) -> EvalResult:
        return define_variable(
            name,
            value,
            base=base if base is not None else self.base,
            store=self.store,
            angle_unit=self.angle_unit,
            precision=self.precision,
        )

    def undefine_variable(self, name: str) -> EvalResult:
        return undefine_variable(name, self.store)

    def list_variables(self, base: Base | int | str | None = None) -> list[tuple[str, str]]:
        return list_variables(
            self.store, base if base is not None else self.base, self.precision
        )

    @property
    def history(self) -> list[HistoryEntry]:
        return list(self._history)

    def clear_history(self) -> None:
        self._history.clear()
