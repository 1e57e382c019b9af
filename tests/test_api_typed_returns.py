"""Test that API functions return typed dataclasses and keep session state consistent."""

from radixcalc_pkg.api import (
    Session,
    calculate,
    define_variable,
    evaluate,
    list_variables,
    undefine_variable,
)
from radixcalc_pkg.store import VariableStore
from radixcalc_pkg.types import EvalResult, HistoryEntry
from radixcalc_pkg.values import Number, NumberKind


class TestAPITypedReturns:
    """Test that all API functions return typed dataclasses."""

    def test_evaluate_returns_eval_result(self):
        """Test that evaluate() returns EvalResult."""
        result = evaluate("2 + 2")
        assert isinstance(result, EvalResult)
        assert result.ok is True
        assert result.result == "4"
        assert result.kind == "integer"
        assert result.exact is True
        assert result.base == 10

    def test_evaluate_error_returns_eval_result(self):
        """Test that evaluate() errors return EvalResult."""
        result = evaluate("1 / 0")
        assert isinstance(result, EvalResult)
        assert result.ok is False
        assert result.error == "division by zero"
        assert result.error_code == "DIVISION_BY_ZERO"
        assert result.position == 2

    def test_unknown_base_is_reported(self):
        result = evaluate("1", base="ternary")
        assert result.ok is False
        assert result.error_code == "INVALID_ARGUMENT"

    def test_calculate_returns_number(self):
        value = calculate("1 / 4")
        assert isinstance(value, Number)
        assert value.kind is NumberKind.RATIONAL

    def test_to_dict(self):
        data = evaluate("1 / 3").to_dict()
        assert data == {
            "ok": True,
            "result": "0.333333",
            "kind": "rational",
            "exact": True,
            "base": 10,
        }
        error = evaluate("2 +").to_dict()
        assert error["ok"] is False
        assert error["error_code"] == "SYNTAX_ERROR"
        assert error["position"] == 3
        assert error["context"] == "unexpected end of expression\n  2 +\n     ^"

    def test_repr(self):
        assert "result='4'" in repr(evaluate("2 + 2"))
        assert "DIVISION_BY_ZERO" in repr(evaluate("1 / 0"))

    def test_precision_override(self):
        assert evaluate("2 / 3", precision=2).result == "0.67"


class TestVariableApi:
    def test_define_variable_in_hex(self):
        store = VariableStore()
        result = define_variable("y", "FF", base="hex", store=store)
        assert result.ok
        assert result.name == "y"
        assert result.result == "FF"
        assert list_variables(store, base="hex") == [
            ("pi", "3.243F7"),
            ("e", "2.B7E15"),
            ("y", "FF"),
        ]
        assert list_variables(store) == [("pi", "3.141593"), ("e", "2.718282"), ("y", "255")]

    def test_hex_digit_names_rejected_in_hex(self):
        store = VariableStore()
        for name in ("ab", "add", "f", "c"):
            result = define_variable(name, "5", base="hex", store=store)
            assert result.ok is False
            assert result.error_code == "SYNTAX_ERROR"
            assert name not in store
        assert evaluate("ab", base="hex", store=store).result == "AB"
        assert define_variable("ab", "5", store=store).ok
        assert evaluate("ab", store=store).result == "5"
        assert define_variable("ag", "5", base="hex", store=store).ok

    def test_define_variable_does_not_set_ans(self):
        store = VariableStore()
        define_variable("x", "2 + 3", store=store)
        assert store.last_result is None
        assert evaluate("x", store=store).result == "5"

    def test_define_variable_from_number(self):
        store = VariableStore()
        result = define_variable("half", Number.from_rational(0.5), store=store)
        assert result.result == "0.5"

    def test_define_variable_errors(self):
        store = VariableStore()
        assert define_variable("pi", "3", store=store).error_code == "PROTECTED_IDENTIFIER"
        assert define_variable("2x", "3", store=store).error_code == "SYNTAX_ERROR"
        assert define_variable("x y", "3", store=store).error_code == "SYNTAX_ERROR"
        assert define_variable("x", "y = 3", store=store).error_code == "SYNTAX_ERROR"
        assert define_variable("x", "1 / 0", store=store).error_code == "DIVISION_BY_ZERO"
        assert "x" not in store

    def test_undefine_variable(self):
        store = VariableStore()
        define_variable("x", "1", store=store)
        assert undefine_variable("x", store).ok
        assert undefine_variable("x", store).error_code == "UNKNOWN_IDENTIFIER"
        assert undefine_variable("e", store).error_code == "PROTECTED_IDENTIFIER"


class TestSession:
    def test_variables_and_ans_persist(self):
        session = Session()
        assert session.evaluate("x = 5").result == "5"
        assert session.evaluate("x * 2").result == "10"
        assert session.evaluate("x = 3").result == "3"
        assert session.evaluate("x * 2").result == "6"
        assert session.evaluate("ans + 1").result == "7"

    def test_failed_assignment_leaves_state_untouched(self):
        session = Session()
        session.evaluate("x = 5")
        result = session.evaluate("x = 1 / 0")
        assert result.error_code == "DIVISION_BY_ZERO"
        assert session.evaluate("x").result == "5"
        session.evaluate("7")
        session.evaluate("x = undefined_name")
        assert session.evaluate("ans").result == "7"

    def test_session_base(self):
        session = Session(base="hex")
        assert session.evaluate("A + 6").result == "10"
        decimal = session.evaluate("10", base="dec")
        assert decimal.result == "10"
        assert decimal.base == 10
        assert session.evaluate("ans + 1").result == "B"

    def test_session_angle_unit(self):
        session = Session(angle_unit="deg")
        assert session.evaluate("sin(90)").result == "1"

    def test_history(self):
        session = Session(history_limit=2)
        session.evaluate("1 + 1")
        session.evaluate("1 / 0")
        session.evaluate("2 + 2")
        session.evaluate("3 + 3")
        history = session.history
        assert [entry.expression for entry in history] == ["2 + 2", "3 + 3"]
        assert isinstance(history[0], HistoryEntry)
        assert history[1].to_dict() == {"expression": "3 + 3", "result": "6", "base": 10}
        session.clear_history()
        assert session.history == []

    def test_session_variable_helpers(self):
        session = Session(base="bin")
        assert session.define_variable("k", "101").result == "101"
        assert ("k", "101") in session.list_variables()
        assert session.list_variables(base="dec")[-1] == ("k", "5")
        assert session.undefine_variable("k").ok
