"""Expression tree node types.

The tree is produced by the parser, walked once by the evaluator and then
discarded. Absolute-value bars ``|x|`` parse to an ``abs`` call and the
function forms ``C(n, k)`` / ``mod(a, b)`` to ``comb`` / ``mod`` calls, so the
evaluator only sees the node kinds below.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Sequence, Union

from .values import Number

UnaryOperator = Literal["-", "+", "!"]

BinaryOperator = Literal["+", "-", "*", "/", "mod", "^", "C"]


@dataclass(frozen=True)
class AstNodeBase:
    """Base class for all tree nodes."""

    position: int
    """Position in source expression (for error reporting)."""


@dataclass(frozen=True)
class NumberLiteralNode(AstNodeBase):
    value: Number

    @property
    def type(self) -> Literal["NumberLiteral"]:
        return "NumberLiteral"


@dataclass(frozen=True)
class IdentifierNode(AstNodeBase):
    """Variable or constant reference."""

    name: str

    @property
    def type(self) -> Literal["Identifier"]:
        return "Identifier"


@dataclass(frozen=True)
class UnaryOpNode(AstNodeBase):
    """Prefix sign or postfix factorial."""

    operator: UnaryOperator
    operand: "AstNode"

    @property
    def type(self) -> Literal["UnaryOp"]:
        return "UnaryOp"


@dataclass(frozen=True)
class BinaryOpNode(AstNodeBase):
    operator: BinaryOperator
    left: "AstNode"
    right: "AstNode"

    @property
    def type(self) -> Literal["BinaryOp"]:
        return "BinaryOp"


@dataclass(frozen=True)
class FunctionCallNode(AstNodeBase):
    """Call of a catalogue function by its canonical name."""

    name: str
    args: Sequence["AstNode"]

    @property
    def type(self) -> Literal["FunctionCall"]:
        return "FunctionCall"


@dataclass(frozen=True)
class AssignmentNode(AstNodeBase):
    """Top-level ``name = expression``."""

    name: str
    value: "AstNode"

    @property
    def type(self) -> Literal["Assignment"]:
        return "Assignment"


AstNode = Union[
    NumberLiteralNode,
    IdentifierNode,
    UnaryOpNode,
    BinaryOpNode,
    FunctionCallNode,
    AssignmentNode,
]


def _children(node: AstNode) -> Sequence[AstNode]:
    if node.type == "UnaryOp":
        return (node.operand,)
    if node.type == "BinaryOp":
        return (node.left, node.right)
    if node.type == "FunctionCall":
        return tuple(node.args)
    if node.type == "Assignment":
        return (node.value,)
    return ()


def count_ast_nodes(node: AstNode) -> int:
    """Counts the total number of nodes in a tree."""
    count = 0
    stack = [node]
    while stack:
        current = stack.pop()
        count += 1
        stack.extend(_children(current))
    return count


def calculate_ast_depth(node: AstNode) -> int:
    """Calculates the maximum depth of a tree.

    Iterative, since left-associative chains such as ``1+1+...+1`` nest
    deeper than the recursion limit long before the parser recurses.
    """
    deepest = 0
    stack = [(node, 1)]
    while stack:
        current, depth = stack.pop()
        deepest = max(deepest, depth)
        stack.extend((child, depth + 1) for child in _children(current))
    return deepest


def ast_to_string(node: AstNode, indent: int = 0) -> str:
    """Returns a human-readable representation of a tree for debugging."""
    prefix = "  " * indent

    if node.type == "NumberLiteral":
        return f"{prefix}Number: {node.value.value} ({node.value.kind.value})"

    if node.type == "Identifier":
        return f"{prefix}Identifier: {node.name}"

    if node.type == "UnaryOp":
        return f"{prefix}UnaryOp: {node.operator}\n{ast_to_string(node.operand, indent + 1)}"

    if node.type == "BinaryOp":
        return (
            f"{prefix}BinaryOp: {node.operator}\n"
            f"{ast_to_string(node.left, indent + 1)}\n"
            f"{ast_to_string(node.right, indent + 1)}"
        )

    if node.type == "FunctionCall":
        args_str = "\n".join(ast_to_string(a, indent + 1) for a in node.args)
        return f"{prefix}FunctionCall: {node.name}\n{args_str}"

    if node.type == "Assignment":
        return f"{prefix}Assignment: {node.name}\n{ast_to_string(node.value, indent + 1)}"

    return f"{prefix}Unknown: {node}"
