from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from . import config
from .api import Session
from .config import VERSION
from .logging_config import get_logger, setup_logging
from .operations import AngleUnit
from .radix import Base

logger = get_logger("cli")

REPL_COMMANDS = {"help", "vars", "base", "angle", "history", "clear", "del", "quit", "exit"}


def _health_check() -> int:
    """Run health check to verify dependencies and basic operations.

    Returns:
        Exit code (0 for success, non-zero for failures)
    """
    checks_passed = 0
    checks_failed = 0

    print("Running RadixCalc health check...")
    print("-" * 50)

    try:
        import sympy as sp

        print(f"[OK] SymPy {sp.__version__} imported successfully")
        checks_passed += 1
    except ImportError as e:
        print(f"[FAIL] SymPy import failed: {e}")
        checks_failed += 1

    checks = [
        ("Exact arithmetic", "1/3 + 2/3", Base.DECIMAL, "1"),
        ("Hexadecimal input/output", "FF + 1", Base.HEXADECIMAL, "100"),
        ("Binary fractions", "1 / 10", Base.BINARY, "0.1"),
        ("Factorial", "10!", Base.DECIMAL, "3628800"),
        ("Trigonometry", "sin(pi / 2)", Base.DECIMAL, "1"),
    ]
    for label, expression, base, expected in checks:
        result = Session(base=base).evaluate(expression)
        if result.ok and result.result == expected:
            print(f"[OK] {label} works")
            checks_passed += 1
        else:
            print(f"[FAIL] {label}: expected {expected}, got {result.result or result.error}")
            checks_failed += 1

    division = Session().evaluate("1 / 0")
    if not division.ok and division.error_code == "DIVISION_BY_ZERO":
        print("[OK] Errors are reported")
        checks_passed += 1
    else:
        print(f"[FAIL] Division by zero was not reported: {division!r}")
        checks_failed += 1

    print("-" * 50)
    print(f"Health check complete: {checks_passed} passed, {checks_failed} failed")
    return 0 if checks_failed == 0 else 1


def print_result_pretty(res: dict[str, Any], output_format: str = "human") -> None:
    """Print result in specified format.

    Args:
        res: Result dictionary (EvalResult.to_dict())
        output_format: "json" for JSON output, "human" for human-readable
    """
    if output_format == "json":
        print(json.dumps(res, indent=2, ensure_ascii=False))
        return
    if not res.get("ok"):
        print(f"Error [{res.get('error_code')}]: {res.get('context') or res.get('error')}")
        return
    if res.get("result") is None:
        return
    if res.get("name"):
        print(f"{res['name']} = {res['result']}")
    else:
        print(res["result"])


def print_help_text() -> None:
    print(
        """RadixCalc - exact multi-base calculator

Expressions:
  + - * / ^        arithmetic (^ is right-associative, ** also works)
  a mod b, a % b   floored modulo of integers
  n!               factorial (Gamma function for non-integers)
  n C k            combinations, also C(n, k) and comb(n, k)
  |x|              absolute value
  0b101 0o17 0xFF  literals in an explicit base
  x = expr         assign a variable; 'ans' holds the last result

Functions:
  sqrt root(n, x) pow abs ln log10 log2 log(base, x)
  √x               square root prefix, e.g. √16 or √(a + b)
  sin cos tan cot asin acos atan acot (aliases tg cotg arcsin arccos arctg arccotg)
  random(a, b)

Constants: pi, e (always approximate)

Commands:
  base bin|oct|dec|hex   switch numeral base
  angle rad|deg          switch angle unit
  vars                   list variables
  del <name>             remove a variable
  history                show previous results
  clear                  clear history
  help, quit"""
    )


def _handle_command(session: Session, line: str, output_format: str) -> bool:
    """Run a REPL command. Returns False when ``line`` is not a command."""
    if "=" in line:
        return False
    parts = line.split()
    command = parts[0].lower()
    if command not in REPL_COMMANDS or len(parts) > 2:
        return False
    if command == "del" and len(parts) != 2:
        return False

    if command == "help":
        print_help_text()
    elif command == "vars":
        for name, value in session.list_variables():
            print(f"{name} = {value}")
    elif command == "history":
        for index, entry in enumerate(session.history, 1):
            print(f"{index}: {entry.expression} = {entry.result} (base {entry.base})")
    elif command == "clear":
        session.clear_history()
    elif command == "del":
        print_result_pretty(session.undefine_variable(parts[1]).to_dict(), output_format)
    elif command == "base":
        if len(parts) == 1:
            print(session.base.short_name)
        else:
            try:
                session.base = Base.from_name(parts[1])
            except ValueError as e:
                print(f"Error: {e}")
    elif command == "angle":
        if len(parts) == 1:
            print(session.angle_unit.value)
        else:
            try:
                session.angle_unit = AngleUnit.from_name(parts[1])
            except ValueError as e:
                print(f"Error: {e}")
    return True


def repl_loop(session: Session, output_format: str = "human") -> None:
    """Interactive REPL loop."""
    try:
        import readline  # noqa: F401
    except ImportError:
        # readline not available on Windows - that's fine
        pass

    print("RadixCalc - type 'help' for commands, 'quit' to exit.")
    while True:
        try:
            line = input(f"[{session.base.short_name}|{session.angle_unit.value}]> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break
        if not line:
            continue
        if line.lower() in ("quit", "exit"):
            break
        if _handle_command(session, line, output_format):
            continue
        result = session.evaluate(line)
        print_result_pretty(result.to_dict(), output_format)


def main_entry(argv: list[str] | None = None) -> int:
    """
    Main entry point for RadixCalc CLI.

    Args:
        argv: Optional command-line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = argparse.ArgumentParser(prog="radixcalc")
    parser.add_argument(
        "-e",
        "--eval",
        type=str,
        help="Evaluate one expression and exit (non-interactive)",
        dest="eval_expr",
    )
    parser.add_argument(
        "-b",
        "--base",
        type=str,
        choices=["bin", "oct", "dec", "hex", "2", "8", "10", "16"],
        default=config.DEFAULT_BASE,
        help="Numeral base for input and output (default: dec)",
    )
    parser.add_argument(
        "-a",
        "--angle",
        type=str,
        choices=["rad", "deg"],
        default=config.DEFAULT_ANGLE_UNIT,
        help="Angle unit for trigonometric functions (default: rad)",
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=["json", "human"],
        default="human",
        help="Output format: json (machine-readable) or human (human-readable)",
    )
    parser.add_argument(
        "-p", "--precision", type=int, help="Set output precision (decimal digits after the point)"
    )
    parser.add_argument(
        "-v", "--version", action="store_true", help="Show program version"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Set logging level",
    )
    parser.add_argument("--log-file", type=str, help="Write logs to file")
    parser.add_argument(
        "--health-check",
        action="store_true",
        help="Run health check and verify dependencies",
    )
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level, log_file=args.log_file)

    if args.version:
        print(VERSION)
        return 0
    if args.health_check:
        return _health_check()

    precision = args.precision if args.precision is not None and args.precision >= 0 else None
    session = Session(base=args.base, angle_unit=args.angle, precision=precision)
    logger.debug(
        "session base=%s angle=%s precision=%s",
        session.base.short_name,
        session.angle_unit.value,
        session.precision if session.precision is not None else config.OUTPUT_PRECISION,
    )
    if args.eval_expr is not None:
        expr = args.eval_expr.strip()
        if not expr:
            print("Error: Empty input. Please enter an expression.")
            return 1
        logger.debug("evaluating %r from the command line", expr)
        result = session.evaluate(expr)
        print_result_pretty(result.to_dict(), args.format)
        return 0 if result.ok else 1

    logger.debug("starting interactive session")
    repl_loop(session, args.format)
    return 0


if __name__ == "__main__":
    """Allow running the CLI module directly with python -m radixcalc_pkg.cli"""
    sys.exit(main_entry())
