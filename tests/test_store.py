"""Tests for the variable store."""

import math
import threading

import pytest

from radixcalc_pkg.api import evaluate
from radixcalc_pkg.store import VariableStore
from radixcalc_pkg.types import ParseError, ProtectedIdentifierError, UnknownIdentifierError
from radixcalc_pkg.values import Number


@pytest.fixture
def store():
    return VariableStore()


def test_builtins_are_approximate(store):
    pi = store.lookup("pi")
    assert not pi.exact
    assert pi.value == math.pi
    assert store.lookup("E").value == math.e


def test_define_and_lookup_case_insensitive(store):
    store.define("Speed", Number.from_rational(12))
    assert store.lookup("SPEED").value == 12
    assert "speed" in store


def test_redefine_overwrites(store):
    store.define("x", Number.from_rational(1))
    store.define("X", Number.from_rational(2))
    assert store.lookup("x").value == 2
    assert [name for name, _ in store.items()] == ["pi", "e", "x"]


def test_protected_names(store):
    for name in ("pi", "E", "ans", "sin", "tg", "mod", "log10"):
        with pytest.raises(ProtectedIdentifierError):
            store.define(name, Number.from_rational(1))


def test_invalid_name(store):
    for name in ("2x", "x y", ""):
        with pytest.raises(ParseError) as exc_info:
            store.define(name, Number.from_rational(1))
        assert exc_info.value.reason == "INVALID_NAME"
        assert exc_info.value.code == "SYNTAX_ERROR"


def test_unknown_lookup_carries_position(store):
    with pytest.raises(UnknownIdentifierError) as exc_info:
        store.lookup("nope", position=7)
    assert exc_info.value.position == 7
    assert exc_info.value.code == "UNKNOWN_IDENTIFIER"


def test_ans_lifecycle(store):
    assert "ans" not in store
    with pytest.raises(UnknownIdentifierError):
        store.lookup("ans")
    store.set_last_result(Number.from_rational(5))
    assert store.lookup("ANS").value == 5
    assert store.last_result.value == 5


def test_items_order(store):
    store.define("b", Number.from_rational(2))
    store.define("a", Number.from_rational(1))
    store.set_last_result(Number.from_rational(9))
    assert [name for name, _ in store.items()] == ["pi", "e", "ans", "b", "a"]
    assert len(store) == 5


def test_undefine(store):
    store.define("tmp", Number.from_rational(1))
    store.undefine("TMP")
    assert "tmp" not in store
    with pytest.raises(UnknownIdentifierError):
        store.undefine("tmp")
    with pytest.raises(ProtectedIdentifierError):
        store.undefine("pi")


def test_clear_keeps_builtins(store):
    store.define("x", Number.from_rational(1))
    store.set_last_result(Number.from_rational(1))
    store.clear()
    assert [name for name, _ in store.items()] == ["pi", "e"]


def test_concurrent_increments_are_not_lost(store):
    evaluate("n = 0", store=store)

    def worker():
        for _ in range(100):
            res = evaluate("n = n + 1", store=store)
            assert res.ok

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert store.lookup("n").value == 800
