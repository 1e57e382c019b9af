"""Tokenizer (lexer) for calculator expressions.

Converts an expression string written in a given numeral base into a list of
tokens for the parser. Number tokens keep their raw digits together with the
base they are written in; conversion to a value happens in the parser so that
the tokenizer only has to validate digits.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from . import config
from .radix import RADIX_PREFIXES, Base, digit_value, parse_digits
from .types import LexError


class TokenType(Enum):
    """Token types produced by the tokenizer."""

    NUMBER = "NUMBER"
    IDENTIFIER = "IDENTIFIER"
    FUNCTION = "FUNCTION"
    OPERATOR = "OPERATOR"
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"
    COMMA = "COMMA"
    PIPE = "PIPE"
    ASSIGN = "ASSIGN"
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    """A token produced by the tokenizer."""

    type: TokenType
    value: str
    position: int
    base: Base | None = None  # only for NUMBER tokens


_PUNCTUATION = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    ",": TokenType.COMMA,
    "|": TokenType.PIPE,
    "=": TokenType.ASSIGN,
}


def _is_identifier_start(ch: str) -> bool:
    return ch.isascii() and (ch.isalpha() or ch == "_")


def _is_identifier_part(ch: str) -> bool:
    return ch.isascii() and (ch.isalnum() or ch == "_")


def _is_decimal_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _is_literal_char(ch: str, base: Base) -> bool:
    """Characters collected into a number literal; digits are validated afterwards."""
    if ch == ".":
        return True
    if base == Base.HEXADECIMAL:
        return ch.isascii() and digit_value(ch, base) is not None
    return _is_decimal_digit(ch)


class Tokenizer:
    """Tokenizer for expression strings in a fixed numeral base."""

    def __init__(self, source: str, base: Base = Base.DECIMAL):
        self._source = source
        self._base = Base(base)
        self._position = 0
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Tokenizes the source expression and returns all tokens."""
        if len(self._source) > config.MAX_INPUT_LENGTH:
            raise LexError(
                f"expression is too long ({len(self._source)} characters, "
                f"limit {config.MAX_INPUT_LENGTH})",
                position=config.MAX_INPUT_LENGTH,
                reason="TOO_LONG",
            )
        while not self._is_at_end():
            self._scan_token()
        self._tokens.append(Token(TokenType.EOF, "", self._position))
        return self._tokens

    def _is_at_end(self) -> bool:
        return self._position >= len(self._source)

    def _peek(self, offset: int = 0) -> str:
        index = self._position + offset
        if index >= len(self._source):
            return "\0"
        return self._source[index]

    def _advance(self) -> str:
        ch = self._source[self._position]
        self._position += 1
        return ch

    def _add_token(
        self, token_type: TokenType, value: str, position: int, base: Base | None = None
    ) -> None:
        self._tokens.append(Token(token_type, value, position, base))

    def _scan_token(self) -> None:
        ch = self._peek()
        start = self._position

        if ch.isspace():
            self._advance()
            return

        if ch == config.ROOT_SIGN:
            self._advance()
            self._add_token(TokenType.OPERATOR, ch, start)
            return

        alias = config.UNICODE_ALIASES.get(ch)
        if alias is not None:
            self._advance()
            if alias in config.OPERATOR_CHARS:
                self._add_token(TokenType.OPERATOR, alias, start)
            elif config.canonical_function(alias):
                self._add_token(TokenType.FUNCTION, alias, start)
            else:
                self._add_token(TokenType.IDENTIFIER, alias, start)
            return

        if ch in _PUNCTUATION:
            self._advance()
            self._add_token(_PUNCTUATION[ch], ch, start)
            return

        if ch in config.OPERATOR_CHARS:
            self._advance()
            if ch == "*" and self._peek() == "*":
                self._advance()
                ch = "^"
            elif ch == "%":
                ch = "mod"
            self._add_token(TokenType.OPERATOR, ch, start)
            return

        if _is_decimal_digit(ch) or ch == ".":
            self._scan_number()
            return

        if _is_identifier_start(ch):
            if self._base == Base.HEXADECIMAL and self._scan_hex_word():
                return
            self._scan_identifier()
            return

        raise LexError(
            f"unexpected character {ch!r}", position=start, reason="UNEXPECTED_CHARACTER"
        )

    def _scan_number(self) -> None:
        start = self._position
        base = self._base

        # 0b / 0o / 0x select the literal's base unless the letter is a digit here
        prefix = self._peek(1).lower()
        if self._peek() == "0" and prefix in RADIX_PREFIXES and digit_value(prefix, base) is None:
            base = RADIX_PREFIXES[prefix]
            self._position += 2
            if not _is_literal_char(self._peek(), base):
                raise LexError(
                    f"malformed number: '0{prefix}' prefix without digits",
                    position=start,
                    reason="MALFORMED_NUMBER",
                )

        digits_start = self._position
        while not self._is_at_end() and _is_literal_char(self._peek(), base):
            self._advance()
        text = self._source[digits_start : self._position]
        parse_digits(text, base, position=digits_start)
        self._check_number_boundary(base)
        self._add_token(TokenType.NUMBER, text, start, base)

    def _check_number_boundary(self, base: Base) -> None:
        """A number may be followed directly by an operator word but not by a name."""
        ch = self._peek()
        if not _is_identifier_part(ch):
            return
        if self._operator_length(self._read_word(self._position)):
            return
        if digit_value(ch, Base.HEXADECIMAL) is not None:
            raise LexError(
                f"invalid digit {ch!r} for base {int(base)}",
                position=self._position,
                reason="INVALID_DIGIT",
            )
        raise LexError(
            f"unexpected character {ch!r} after number",
            position=self._position,
            reason="MALFORMED_NUMBER",
        )

    def _operator_length(self, word: str) -> int:
        """Length of a leading operator word in ``word`` ("C2" -> 1, "mod3" -> 3)."""
        combination = config.COMBINATION_OPERATOR
        if (
            self._base != Base.HEXADECIMAL
            and word.startswith(combination)
            and (len(word) == 1 or _is_decimal_digit(word[1]))
        ):
            return len(combination)
        for operator in config.WORD_OPERATORS:
            head, rest = word[: len(operator)], word[len(operator) :]
            if head.lower() == operator and (not rest or rest.isdigit()):
                return len(operator)
        return 0

    def _read_word(self, start: int) -> str:
        end = start
        while end < len(self._source) and _is_identifier_part(self._source[end]):
            end += 1
        return self._source[start:end]

    def _scan_hex_word(self) -> bool:
        """In hexadecimal mode a word made only of hex digits is a number."""
        start = self._position
        word = self._read_word(start)
        end = start + len(word)
        # A radix point may continue the literal: "A.8"
        if end < len(self._source) and self._source[end] == ".":
            end = end + 1 + len(self._read_word(end + 1))
        candidate = self._source[start:end]
        if not all(_is_literal_char(ch, Base.HEXADECIMAL) for ch in candidate):
            return False
        self._scan_number()
        return True

    def _scan_identifier(self) -> None:
        start = self._position
        name = self._read_word(start)

        operator_length = self._operator_length(name)
        if operator_length:
            operator = name[:operator_length]
            if operator != config.COMBINATION_OPERATOR:
                operator = operator.lower()
            self._position += operator_length
            self._add_token(TokenType.OPERATOR, operator, start)
            return

        self._position += len(name)
        canonical = config.canonical_function(name)
        if canonical is not None:
            self._add_token(TokenType.FUNCTION, canonical, start)
            return
        self._add_token(TokenType.IDENTIFIER, name, start)


def tokenize(source: str, base: Base = Base.DECIMAL) -> list[Token]:
    """Tokenize ``source`` written in ``base``.

    Raises:
        LexError: On unrecognized characters, malformed numbers or invalid digits
    """
    return Tokenizer(source, base).tokenize()
