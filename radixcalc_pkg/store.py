"""Session-scoped store of named values: pi, e, ans and user variables."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from .config import BUILTIN_CONSTANTS, LAST_RESULT_NAME, VAR_NAME_RE, reserved_names
from .logging_config import get_logger
from .types import ParseError, ProtectedIdentifierError, UnknownIdentifierError
from .values import Number

logger = get_logger("store")


class VariableStore:
    """Case-insensitive name -> Number mapping.

    Built-in constants are read-only and always approximate. The ``ans`` alias
    is written only through :meth:`set_last_result`. All access goes through a
    re-entrant lock; callers that need read-modify-write atomicity across
    several calls wrap them in :meth:`transaction`.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._builtins = {
            name: Number.from_float(value) for name, value in BUILTIN_CONSTANTS.items()
        }
        self._user: dict[str, Number] = {}
        self._last_result: Number | None = None

    @contextmanager
    def transaction(self) -> Iterator[VariableStore]:
        with self._lock:
            yield self

    @staticmethod
    def normalize(name: str) -> str:
        return name.strip().lower()

    def is_builtin(self, name: str) -> bool:
        key = self.normalize(name)
        return key in self._builtins or key == LAST_RESULT_NAME

    def lookup(self, name: str, position: int | None = None) -> Number:
        """Return the value bound to ``name``.

        Raises:
            UnknownIdentifierError: If nothing is bound to the name
        """
        key = self.normalize(name)
        with self._lock:
            if key in self._builtins:
                return self._builtins[key]
            if key == LAST_RESULT_NAME:
                if self._last_result is None:
                    raise UnknownIdentifierError(
                        "'ans' has no value yet", position=position
                    )
                return self._last_result
            if key in self._user:
                return self._user[key]
        raise UnknownIdentifierError(f"unknown identifier '{name}'", position=position)

    def define(self, name: str, value: Number, position: int | None = None) -> None:
        """Bind (or rebind) a user variable.

        Raises:
            ProtectedIdentifierError: For built-ins, ``ans`` and catalogue names
            ParseError: When ``name`` is not a valid identifier
        """
        key = self.normalize(name)
        if key in reserved_names():
            raise ProtectedIdentifierError(
                f"'{name}' is a protected name and cannot be assigned",
                position=position,
            )
        if not VAR_NAME_RE.match(key):
            raise ParseError(
                f"'{name}' is not a valid variable name",
                position=position,
                reason="INVALID_NAME",
            )
        with self._lock:
            self._user[key] = value
        logger.debug("defined %s = %s", key, value)

    def undefine(self, name: str) -> None:
        key = self.normalize(name)
        if key in reserved_names():
            raise ProtectedIdentifierError(f"'{name}' is a protected name and cannot be removed")
        with self._lock:
            if key not in self._user:
                raise UnknownIdentifierError(f"unknown identifier '{name}'")
            del self._user[key]
        logger.debug("removed %s", key)

    def set_last_result(self, value: Number) -> None:
        with self._lock:
            self._last_result = value

    @property
    def last_result(self) -> Number | None:
        return self._last_result

    def items(self) -> list[tuple[str, Number]]:
        """Built-ins first, then ``ans`` once set, then user names in definition order."""
        with self._lock:
            entries = list(self._builtins.items())
            if self._last_result is not None:
                entries.append((LAST_RESULT_NAME, self._last_result))
            entries.extend(self._user.items())
        return entries

    def clear(self) -> None:
        """Drop user variables and ``ans``; built-ins are untouched."""
        with self._lock:
            self._user.clear()
            self._last_result = None

    def __contains__(self, name: str) -> bool:
        key = self.normalize(name)
        with self._lock:
            if key == LAST_RESULT_NAME:
                return self._last_result is not None
            return key in self._builtins or key in self._user

    def __len__(self) -> int:
        return len(self.items())
