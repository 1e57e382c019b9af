"""Evaluator: walks an expression tree and computes its value."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import cast

from .ast import (
    AssignmentNode,
    AstNode,
    BinaryOpNode,
    FunctionCallNode,
    IdentifierNode,
    NumberLiteralNode,
    UnaryOpNode,
)
from .logging_config import get_logger
from .operations import (
    BINARY_OPERATORS,
    UNARY_OPERATORS,
    AngleUnit,
    OperationContext,
    call_function,
)
from .store import VariableStore
from .types import CalcError, ParseError
from .values import Number

logger = get_logger("evaluator")


@dataclass
class EvaluationContext:
    """Everything one evaluation may read or write."""

    store: VariableStore
    """Variable bindings; assignments are written here."""

    angle_unit: AngleUnit = AngleUnit.RADIAN

    rng: random.Random = field(default_factory=random.Random)
    """Random source for random(a, b); injectable for reproducibility."""

    source: str | None = None
    """Source expression for error reporting."""


class Evaluator:
    """Evaluates a tree node and returns the resulting Number."""

    def __init__(self, context: EvaluationContext):
        self._context = context
        self._operation_context = OperationContext(context.angle_unit, context.rng)

    def evaluate(self, node: AstNode) -> Number:
        """Evaluates a tree node.

        Any CalcError raised below gets the position of the innermost node
        that failed.
        """
        try:
            return self._dispatch(node)
        except CalcError as exc:
            if exc.position is None:
                exc.position = node.position
            if exc.expression is None:
                exc.expression = self._context.source
            raise

    def _dispatch(self, node: AstNode) -> Number:
        node_type = node.type

        if node_type == "NumberLiteral":
            return cast(NumberLiteralNode, node).value

        if node_type == "Identifier":
            n = cast(IdentifierNode, node)
            return self._context.store.lookup(n.name, n.position)

        if node_type == "UnaryOp":
            n = cast(UnaryOpNode, node)
            operand = self.evaluate(n.operand)
            return UNARY_OPERATORS[n.operator](operand)

        if node_type == "BinaryOp":
            n = cast(BinaryOpNode, node)
            left = self.evaluate(n.left)
            right = self.evaluate(n.right)
            return BINARY_OPERATORS[n.operator](left, right)

        if node_type == "FunctionCall":
            n = cast(FunctionCallNode, node)
            args = [self.evaluate(arg) for arg in n.args]
            return call_function(n.name, args, self._operation_context)

        if node_type == "Assignment":
            n = cast(AssignmentNode, node)
            value = self.evaluate(n.value)
            self._context.store.define(n.name, value, n.position)
            logger.debug("assigned %s", n.name)
            return value

        raise ParseError(f"unsupported node type {node_type!r}", position=node.position)


def evaluate_tree(node: AstNode, context: EvaluationContext) -> Number:
    return Evaluator(context).evaluate(node)
