"""Parser for calculator expressions.

Parses a token stream into an expression tree by recursive descent.

Precedence (lowest to highest):
1. Assignment: name = expr (top level only)
2. Additive: +, -
3. Combination: n C k
4. Multiplicative: *, /, mod
5. Power: ^ (right-associative)
6. Postfix: ! (factorial)
7. Unary: -, +
8. Primary: numbers, names, function calls, ( ... ), | ... |

Unary minus binds tighter than ``^`` and ``!``, so ``-2^2`` is 4 and
``-3!`` is the factorial of -3. There is no implicit multiplication.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from . import config
from .ast import (
    AssignmentNode,
    AstNode,
    BinaryOpNode,
    FunctionCallNode,
    IdentifierNode,
    NumberLiteralNode,
    UnaryOpNode,
    calculate_ast_depth,
    count_ast_nodes,
)
from .radix import Base, parse_digits
from .tokenizer import Token, TokenType, tokenize
from .types import ParseError, ProtectedIdentifierError
from .values import Number

# Operators that also have a function form: C(n, k), mod(a, b)
_FUNCTION_FORM = {config.COMBINATION_OPERATOR: "comb", "mod": "mod"}


def find_unbalanced(tokens: list[Token]) -> int | None:
    """Position of the first unmatched parenthesis, or None when balanced."""
    stack: list[int] = []
    for token in tokens:
        if token.type == TokenType.LPAREN:
            stack.append(token.position)
        elif token.type == TokenType.RPAREN:
            if not stack:
                return token.position
            stack.pop()
    if stack:
        return stack[0]
    return None


class Parser:
    """Parser for calculator token streams."""

    def __init__(self, tokens: list[Token]):
        self._tokens = tokens
        self._current = 0
        self._nesting = 0

    def parse(self) -> AstNode:
        """Parses the token stream into an expression tree."""
        if self._check(TokenType.EOF):
            raise ParseError("empty expression", position=0, reason="EMPTY_INPUT")

        unbalanced = find_unbalanced(self._tokens)
        if unbalanced is not None:
            raise ParseError(
                "mismatched parentheses",
                position=unbalanced,
                reason="MISMATCHED_PARENTHESES",
            )

        node = self._parse_statement()

        if not self._is_at_end():
            token = self._peek()
            raise ParseError(
                f"unexpected token '{token.value}'",
                position=token.position,
                reason="UNEXPECTED_TOKEN",
            )

        depth = calculate_ast_depth(node)
        if depth > config.MAX_EXPRESSION_DEPTH:
            raise ParseError(
                f"expression is nested too deeply (depth {depth}, limit "
                f"{config.MAX_EXPRESSION_DEPTH})",
                position=0,
                reason="TOO_DEEP",
            )
        node_count = count_ast_nodes(node)
        if node_count > config.MAX_EXPRESSION_NODES:
            raise ParseError(
                f"expression is too complex ({node_count} nodes, limit "
                f"{config.MAX_EXPRESSION_NODES})",
                position=0,
                reason="TOO_COMPLEX",
            )
        return node

    # Token helpers

    def _is_at_end(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _peek(self, offset: int = 0) -> Token:
        index = min(self._current + offset, len(self._tokens) - 1)
        return self._tokens[index]

    def _previous(self) -> Token:
        return self._tokens[self._current - 1]

    def _advance(self) -> Token:
        if not self._is_at_end():
            self._current += 1
        return self._previous()

    def _check(self, token_type: TokenType) -> bool:
        return self._peek().type == token_type

    def _check_operator(self, *symbols: str) -> bool:
        token = self._peek()
        return token.type == TokenType.OPERATOR and token.value in symbols

    def _match_operator(self, *symbols: str) -> bool:
        if self._check_operator(*symbols):
            self._advance()
            return True
        return False

    def _consume(self, token_type: TokenType, message: str, reason: str) -> Token:
        if self._check(token_type):
            return self._advance()
        token = self._peek()
        raise ParseError(message, position=token.position, reason=reason)

    @contextmanager
    def _nested(self) -> Iterator[None]:
        self._nesting += 1
        if self._nesting > config.MAX_NESTING_DEPTH:
            raise ParseError(
                f"expression is nested too deeply (limit {config.MAX_NESTING_DEPTH})",
                position=self._peek().position,
                reason="TOO_DEEP",
            )
        try:
            yield
        finally:
            self._nesting -= 1

    # Expression parsing (by precedence, lowest to highest)

    def _parse_statement(self) -> AstNode:
        """Parses ``name = expr`` or a plain expression."""
        first, second = self._peek(), self._peek(1)
        if second.type == TokenType.ASSIGN:
            if first.type == TokenType.IDENTIFIER:
                self._advance()
                self._advance()
                value = self._parse_additive()
                return AssignmentNode(position=first.position, name=first.value, value=value)
            if first.type in (TokenType.FUNCTION, TokenType.OPERATOR) and first.value.isalpha():
                raise ProtectedIdentifierError(
                    f"'{first.value}' is a protected name and cannot be assigned",
                    position=first.position,
                )

        node = self._parse_additive()
        if self._check(TokenType.ASSIGN):
            raise ParseError(
                "only a variable name can be assigned to",
                position=self._peek().position,
                reason="INVALID_ASSIGNMENT",
            )
        return node

    def _parse_additive(self) -> AstNode:
        """Parses + and -"""
        node = self._parse_combination()

        while self._match_operator("+", "-"):
            operator = self._previous()
            right = self._parse_combination()
            node = BinaryOpNode(
                position=operator.position, operator=operator.value, left=node, right=right
            )

        return node

    def _parse_combination(self) -> AstNode:
        """Parses n C k"""
        node = self._parse_multiplicative()

        while self._match_operator(config.COMBINATION_OPERATOR):
            operator = self._previous()
            right = self._parse_multiplicative()
            node = BinaryOpNode(
                position=operator.position, operator="C", left=node, right=right
            )

        return node

    def _parse_multiplicative(self) -> AstNode:
        """Parses *, / and mod"""
        node = self._parse_power()

        while self._match_operator("*", "/", "mod"):
            operator = self._previous()
            right = self._parse_power()
            node = BinaryOpNode(
                position=operator.position, operator=operator.value, left=node, right=right
            )

        return node

    def _parse_power(self) -> AstNode:
        """Parses ^ (right-associative)"""
        node = self._parse_postfix()

        if self._match_operator("^"):
            operator = self._previous()
            with self._nested():
                exponent = self._parse_power()
            node = BinaryOpNode(
                position=operator.position, operator="^", left=node, right=exponent
            )

        return node

    def _parse_postfix(self) -> AstNode:
        """Parses factorial: x!"""
        node = self._parse_unary()

        while self._match_operator("!"):
            node = UnaryOpNode(position=self._previous().position, operator="!", operand=node)

        return node

    def _parse_unary(self) -> AstNode:
        """Parses prefix -, + and the square root sign"""
        if self._match_operator(config.ROOT_SIGN):
            operator = self._previous()
            with self._nested():
                operand = self._parse_unary()
            return FunctionCallNode(position=operator.position, name="sqrt", args=[operand])

        if self._match_operator("-", "+"):
            operator = self._previous()
            with self._nested():
                operand = self._parse_unary()
            return UnaryOpNode(position=operator.position, operator=operator.value, operand=operand)

        return self._parse_primary()

    def _parse_argument_list(self, name: str, position: int) -> list[AstNode]:
        self._consume(
            TokenType.LPAREN,
            f"expected '(' after function '{name}'",
            reason="MISSING_PARENTHESIS",
        )
        if self._check(TokenType.RPAREN):
            raise ParseError(
                f"function '{name}' called with an empty argument list",
                position=self._peek().position,
                reason="EMPTY_ARGUMENTS",
            )

        args = []
        with self._nested():
            args.append(self._parse_additive())
            while self._check(TokenType.COMMA):
                self._advance()
                args.append(self._parse_additive())
        self._consume(TokenType.RPAREN, "expected ')' or ','", reason="UNEXPECTED_TOKEN")

        expected = config.FUNCTION_ARITY[name]
        if len(args) != expected:
            plural = "argument" if expected == 1 else "arguments"
            raise ParseError(
                f"function '{name}' expects {expected} {plural}, got {len(args)}",
                position=position,
                reason="WRONG_ARITY",
            )
        return args

    def _parse_primary(self) -> AstNode:
        token = self._peek()

        if token.type == TokenType.NUMBER:
            self._advance()
            value = parse_digits(token.value, token.base or Base.DECIMAL, token.position)
            return NumberLiteralNode(position=token.position, value=Number.from_rational(value))

        if token.type == TokenType.IDENTIFIER:
            self._advance()
            if self._check(TokenType.LPAREN):
                raise ParseError(
                    f"'{token.value}' is not a function",
                    position=token.position,
                    reason="NOT_A_FUNCTION",
                )
            return IdentifierNode(position=token.position, name=token.value)

        if token.type == TokenType.FUNCTION:
            self._advance()
            args = self._parse_argument_list(token.value, token.position)
            return FunctionCallNode(position=token.position, name=token.value, args=args)

        if token.type == TokenType.OPERATOR and token.value in _FUNCTION_FORM:
            if self._peek(1).type == TokenType.LPAREN:
                self._advance()
                name = _FUNCTION_FORM[token.value]
                args = self._parse_argument_list(name, token.position)
                return FunctionCallNode(position=token.position, name=name, args=args)

        if token.type == TokenType.LPAREN:
            self._advance()
            with self._nested():
                node = self._parse_additive()
            self._consume(TokenType.RPAREN, "expected ')'", reason="MISMATCHED_PARENTHESES")
            return node

        if token.type == TokenType.PIPE:
            self._advance()
            with self._nested():
                node = self._parse_additive()
            self._consume(TokenType.PIPE, "expected closing '|'", reason="UNCLOSED_ABS")
            return FunctionCallNode(position=token.position, name="abs", args=[node])

        if token.type == TokenType.EOF:
            raise ParseError(
                "unexpected end of expression", position=token.position, reason="UNEXPECTED_END"
            )

        raise ParseError(
            f"unexpected token '{token.value}'",
            position=token.position,
            reason="UNEXPECTED_TOKEN",
        )


def parse_tokens(tokens: list[Token]) -> AstNode:
    return Parser(tokens).parse()


def parse(source: str, base: Base = Base.DECIMAL) -> AstNode:
    """Tokenize and parse ``source`` written in ``base``.

    Raises:
        LexError: From the tokenizer
        ParseError: On malformed expressions or exceeded limits
    """
    return Parser(tokenize(source, base)).parse()
