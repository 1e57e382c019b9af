"""RadixCalc package: exact multi-base expression evaluation."""

__all__ = [
    "config",
    "values",
    "radix",
    "store",
    "tokenizer",
    "ast",
    "parser",
    "evaluator",
    "operations",
    "formatter",
    "cli",
    "types",
    "api",
    "logging_config",
]

# Public API exports

__api_exports__ = [
    "evaluate",
    "calculate",
    "define_variable",
    "undefine_variable",
    "list_variables",
    "Session",
]
