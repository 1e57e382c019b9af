"""Centralized configuration for RadixCalc.

This module defines:
- Output precision and the default numeral base / angle unit
- Input validation limits (length, depth, node count)
- Guards on exact arithmetic (factorial size, exact result size)
- The operator and function catalogue shared by the tokenizer and parser
- Regex patterns for identifiers

Configuration can be overridden via:
- CLI flags (see cli.py)
- Environment variables (prefixed with RADIXCALC_)
"""

import math
import os
import re

try:
    import importlib.metadata

    VERSION = importlib.metadata.version("radixcalc")
except Exception:
    # Fallback if package not installed
    VERSION = "1.0.0"

# Output configuration
OUTPUT_PRECISION = int(os.getenv("RADIXCALC_OUTPUT_PRECISION", "6"))  # decimal digits
DEFAULT_BASE = os.getenv("RADIXCALC_DEFAULT_BASE", "dec")  # bin, oct, dec, hex
DEFAULT_ANGLE_UNIT = os.getenv("RADIXCALC_DEFAULT_ANGLE_UNIT", "rad")  # rad, deg

# Input validation limits
MAX_INPUT_LENGTH = int(os.getenv("RADIXCALC_MAX_INPUT_LENGTH", "10000"))  # characters
MAX_EXPRESSION_DEPTH = int(
    os.getenv("RADIXCALC_MAX_EXPRESSION_DEPTH", "200")
)  # tree depth
MAX_EXPRESSION_NODES = int(
    os.getenv("RADIXCALC_MAX_EXPRESSION_NODES", "5000")
)  # total nodes
MAX_NESTING_DEPTH = int(
    os.getenv("RADIXCALC_MAX_NESTING_DEPTH", "64")
)  # parentheses, bars, calls, signs and exponents nested in one another

# Exact arithmetic guards
MAX_FACTORIAL_ARGUMENT = int(os.getenv("RADIXCALC_MAX_FACTORIAL_ARGUMENT", "5000"))
MAX_EXACT_BITS = int(
    os.getenv("RADIXCALC_MAX_EXACT_BITS", "200000")
)  # larger exact powers fall back to floats

# Numeric tolerance for tan/cot asymptotes
ASYMPTOTE_TOLERANCE = float(os.getenv("RADIXCALC_ASYMPTOTE_TOLERANCE", "1e-10"))

# Session history
HISTORY_LIMIT = int(os.getenv("RADIXCALC_HISTORY_LIMIT", "100"))

# Built-in read-only constants, always approximate
BUILTIN_CONSTANTS = {
    "pi": math.pi,
    "e": math.e,
}

# Alias for the last successful result
LAST_RESULT_NAME = "ans"

# Canonical function name -> number of arguments
FUNCTION_ARITY = {
    "sqrt": 1,
    "root": 2,
    "pow": 2,
    "abs": 1,
    "ln": 1,
    "log2": 1,
    "log10": 1,
    "log": 2,
    "sin": 1,
    "cos": 1,
    "tan": 1,
    "cot": 1,
    "asin": 1,
    "acos": 1,
    "atan": 1,
    "acot": 1,
    "comb": 2,
    "mod": 2,
    "random": 2,
}

FUNCTION_ALIASES = {
    "tg": "tan",
    "ctg": "cot",
    "cotg": "cot",
    "arcsin": "asin",
    "arccos": "acos",
    "arctg": "atan",
    "arctan": "atan",
    "arccot": "acot",
    "arccotg": "acot",
    "binom": "comb",
    "rand": "random",
}

# Word operators (matched case-insensitively); "C" is handled separately
# because only the upper-case letter is an operator.
WORD_OPERATORS = {"mod"}
COMBINATION_OPERATOR = "C"

# Single-character operators and punctuation, with their Unicode spellings
OPERATOR_CHARS = "+-*/^!%"
UNICODE_ALIASES = {
    "×": "*",
    "·": "*",
    "÷": "/",
    "−": "-",
    "π": "pi",
}
ROOT_SIGN = "√"  # prefix square root, binds like unary minus

VAR_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def canonical_function(name: str) -> str | None:
    """Return the canonical catalogue name for ``name`` or None."""
    lowered = name.lower()
    lowered = FUNCTION_ALIASES.get(lowered, lowered)
    return lowered if lowered in FUNCTION_ARITY else None


def reserved_names() -> set[str]:
    """Names that can never be bound by the user (lower-case)."""
    names = set(BUILTIN_CONSTANTS) | {LAST_RESULT_NAME}
    names |= set(FUNCTION_ARITY) | set(FUNCTION_ALIASES) | WORD_OPERATORS
    return names
