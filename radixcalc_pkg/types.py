"""Error taxonomy and result dataclasses for consistent API responses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class CalcError(Exception):
    """Base class for every failure raised while evaluating an expression.

    Attributes:
        message: Human-readable description
        code: Stable machine-readable error code
        position: Character offset into the expression, when known
        reason: Finer-grained reason (e.g. "INVALID_DIGIT"), when known
        expression: Source text, attached by the API for context rendering
    """

    default_code = "CALC_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        position: int | None = None,
        reason: str | None = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.position = position
        self.reason = reason
        self.expression: str | None = None
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.position is None:
            return self.message
        return f"{self.message} (at position {self.position})"

    def format_with_context(self) -> str:
        """Return the message followed by the expression and a caret under the error."""
        if self.expression is None or self.position is None:
            return self.message
        pointer = " " * self.position + "^"
        return f"{self.message}\n  {self.expression}\n  {pointer}"


class LexError(CalcError):
    """Unrecognized character, malformed number, or digit invalid in the active base."""

    default_code = "LEX_ERROR"


class ParseError(CalcError):
    """Token sequence does not form a valid expression."""

    default_code = "SYNTAX_ERROR"


class UnknownIdentifierError(CalcError):
    default_code = "UNKNOWN_IDENTIFIER"


class ProtectedIdentifierError(CalcError):
    default_code = "PROTECTED_IDENTIFIER"


class DivisionByZeroError(CalcError):
    default_code = "DIVISION_BY_ZERO"


class DomainError(CalcError):
    """Argument outside the mathematical domain of an operation."""

    default_code = "DOMAIN_ERROR"


class CalcOverflowError(CalcError):
    """Result magnitude exceeds representable range."""

    default_code = "OVERFLOW_ERROR"


@dataclass
class EvalResult:
    """Result of evaluating (or assigning) an expression."""

    ok: bool
    result: str | None = None
    kind: str | None = None  # "integer", "rational" or "approximate"
    base: int | None = None
    name: str | None = None  # bound variable for assignments
    error: str | None = None
    error_code: str | None = None
    position: int | None = None
    context: str | None = None  # message, expression and caret line

    @property
    def exact(self) -> bool:
        return self.kind in ("integer", "rational")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok}
        if self.result is not None:
            result_dict["result"] = self.result
        if self.kind is not None:
            result_dict["kind"] = self.kind
            result_dict["exact"] = self.exact
        if self.base is not None:
            result_dict["base"] = self.base
        if self.name is not None:
            result_dict["name"] = self.name
        if self.error is not None:
            result_dict["error"] = self.error
        if self.error_code is not None:
            result_dict["error_code"] = self.error_code
        if self.position is not None:
            result_dict["position"] = self.position
        if self.context is not None:
            result_dict["context"] = self.context
        return result_dict

    def __repr__(self) -> str:
        """Return string representation of the result."""
        if not self.ok:
            return f"EvalResult(ok=False, error_code={self.error_code!r}, error={self.error!r})"
        parts = [f"ok={self.ok}", f"result={self.result!r}"]
        if self.kind is not None:
            parts.append(f"kind={self.kind!r}")
        if self.name is not None:
            parts.append(f"name={self.name!r}")
        return f"EvalResult({', '.join(parts)})"

    @classmethod
    def from_error(cls, exc: CalcError) -> EvalResult:
        return cls(
            ok=False,
            error=exc.message,
            error_code=exc.code,
            position=exc.position,
            context=exc.format_with_context() if exc.expression is not None else None,
        )


@dataclass
class HistoryEntry:
    """One successful evaluation kept in a session's history."""

    expression: str
    result: str
    base: int

    def to_dict(self) -> dict[str, Any]:
        return {"expression": self.expression, "result": self.result, "base": self.base}
