"""Performance tests and benchmarks for RadixCalc.

These tests are marked as 'slow' and can be skipped with: pytest -m "not slow"
"""

import time

import pytest

from radixcalc_pkg.api import Session, evaluate
from radixcalc_pkg.parser import parse
from radixcalc_pkg.types import ParseError


@pytest.mark.slow
class TestParsingPerformance:
    """Test parsing performance."""

    def test_simple_expression_parsing_time(self):
        """Benchmark simple expression parsing."""
        start = time.time()
        for _ in range(1000):
            parse("x^2 + 2*x + 1")
        elapsed = time.time() - start
        assert elapsed < 2.0, f"Parsing too slow: {elapsed}s"

    def test_long_input_parsing_time(self):
        """An input near the length limit still parses quickly."""
        expr = "*".join(["1"] * 2000)
        start = time.time()
        with pytest.raises(ParseError):
            parse(expr)  # too deep, but must fail fast
        elapsed = time.time() - start
        assert elapsed < 2.0, f"Rejecting long input too slow: {elapsed}s"


@pytest.mark.slow
class TestEvaluationPerformance:
    """Test evaluation performance."""

    def test_arithmetic_throughput(self):
        session = Session()
        start = time.time()
        for i in range(500):
            result = session.evaluate(f"({i} + 1/3) * 3 - {i}")
            assert result.ok
        elapsed = time.time() - start
        assert elapsed < 5.0, f"Evaluation too slow: {elapsed}s"

    def test_large_factorial_time(self):
        start = time.time()
        result = evaluate("5000!")
        elapsed = time.time() - start
        assert result.ok
        assert len(result.result) > 16000
        assert elapsed < 5.0, f"Factorial too slow: {elapsed}s"

    def test_hex_rendering_of_large_value(self):
        start = time.time()
        result = evaluate("3^50000", base="hex")
        elapsed = time.time() - start
        assert result.ok
        assert elapsed < 5.0, f"Large hex rendering too slow: {elapsed}s"

    def test_long_exact_product_is_bounded(self):
        """A chain of huge exact factors stops at the exact size limit."""
        start = time.time()
        result = evaluate("*".join(["2^99999"] * 80))
        elapsed = time.time() - start
        assert result.error_code == "OVERFLOW_ERROR"
        assert elapsed < 5.0, f"Exact product chain too slow: {elapsed}s"
