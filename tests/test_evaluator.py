"""
Tests for the Evaluator controller: text input, collapsing, saved state and
background evaluation.
"""

import io
import json
import math
from fractions import Fraction

import pytest

from calcexpr import Serializer
from calcexpr import error as E
from calcexpr.Evaluator import Evaluator, short_string
from calcexpr.Expression import Expression
from calcexpr.KeyMaps import Key
from calcexpr.LazyReal import LazyReal
from calcexpr.MathEngine import EvalResult
from calcexpr.Tokens import PreEvaluated


@pytest.fixture
def evaluator():
    return Evaluator(degree_mode=False)


class TestTextInput:
    def test_operators_and_precedence(self, evaluator):
        assert evaluator.add_chars("2+3×4") is None
        assert evaluator.evaluate().rational == 14

    def test_ascii_operators(self, evaluator):
        assert evaluator.add_chars("7 * 6 - 2 / 4") is None
        assert evaluator.evaluate().rational == Fraction(83, 2)

    def test_function_in_degrees(self):
        evaluator = Evaluator(degree_mode=True)
        assert evaluator.add_chars("sin(30)") is None
        assert evaluator.evaluate().rational == Fraction(1, 2)

    def test_sqrt_keeps_parenthesis(self, evaluator):
        assert evaluator.add_chars("sqrt(16)") is None
        assert evaluator.expr.display() == "√(16)"
        assert evaluator.evaluate(required=True).rational == 4

    def test_exp_is_not_euler_constant(self, evaluator):
        assert evaluator.add_chars("exp(0)") is None
        assert evaluator.evaluate().rational == 1

    def test_pi(self, evaluator):
        assert evaluator.add_chars("2pi") is None
        assert evaluator.expr.display() == "2π"

    def test_unrecognized_rest_returned(self, evaluator):
        assert evaluator.add_chars("2+#3") == "#3"
        assert evaluator.expr.display() == "2+"

    def test_rejected_rest_returned(self, evaluator):
        assert evaluator.add_chars("2+*3") == "*3"

    def test_comma_is_decimal_point(self, evaluator):
        assert evaluator.add_chars("1,5") is None
        assert evaluator.evaluate().rational == Fraction(3, 2)


class TestKeys:
    def test_append_delete_clear(self, evaluator):
        assert evaluator.append(4)
        assert evaluator.append(Key.OP_ADD)
        assert not evaluator.append(Key.OP_MUL)
        evaluator.delete()
        assert evaluator.expr.display() == "4"
        evaluator.clear()
        assert evaluator.expr.is_empty()

    def test_degree_mode_switch(self, evaluator):
        evaluator.add_chars("cos(180)")
        assert evaluator.evaluate().rational is None
        evaluator.set_degree_mode(True)
        assert evaluator.evaluate().rational == -1

    def test_degree_mode_is_remembered(self, evaluator, isolated_settings):
        evaluator.set_degree_mode(True)
        saved = json.loads(isolated_settings.read_text(encoding="utf-8"))
        assert saved["degree_mode"] is True
        assert saved["short_rep_digits"] == 12
        assert Evaluator().degree_mode is True
        evaluator.set_degree_mode(False)
        assert Evaluator().degree_mode is False


class TestCollapse:
    def test_collapse_then_continue(self, evaluator):
        evaluator.add_chars("2+3")
        assert evaluator.collapse() is True
        assert len(evaluator.expr) == 1
        token = evaluator.expr.tokens[0]
        assert isinstance(token, PreEvaluated)
        assert token.short_rep == "5"
        evaluator.append(Key.OP_MUL)
        evaluator.append(2)
        assert evaluator.evaluate().rational == 10

    def test_constant_not_collapsed(self, evaluator):
        evaluator.add_chars("42")
        assert evaluator.collapse() is False
        assert evaluator.expr.display() == "42"

    def test_empty_not_collapsed(self, evaluator):
        assert evaluator.collapse() is False

    def test_error_leaves_expression(self, evaluator):
        evaluator.add_chars("1÷0")
        assert evaluator.collapse() is False
        assert evaluator.expr.display() == "1÷0"

    def test_irrational_short_rep(self, evaluator):
        evaluator.add_chars("1÷3")
        assert evaluator.collapse() is True
        assert evaluator.expr.tokens[0].short_rep == "0.333333333333"


class TestPrecision:
    def test_cancellation(self, evaluator):
        assert evaluator.add_chars("(√2×10^50+3)−√2×10^50") is None
        result = evaluator.evaluate(required=True)
        assert result.rational is None
        assert result.value.to_string(20) == "3.0"
        assert evaluator.short_string(result) == "3.0"

    def test_factorial_after_cancellation(self, evaluator):
        assert evaluator.add_chars("((√2×10^50+3)−√2×10^50)!") is None
        assert evaluator.evaluate(required=True).rational == 6

    def test_long_sum_of_constants(self, evaluator):
        assert evaluator.add_chars("+".join(["π"] * 600)) is None
        result = evaluator.evaluate(required=True)
        assert float(result.value) == pytest.approx(600 * math.pi)
        assert result.value.to_string(10) == "1884.955592"

    def test_deep_nesting_is_calculation_error(self, evaluator):
        assert evaluator.add_chars("(" * 1000 + "1") is None
        with pytest.raises(E.CalculationError) as info:
            evaluator.evaluate(required=True)
        assert info.value.code == "3027"
        assert evaluator.collapse() is False
        assert len(evaluator.expr) == 1001


class TestShortString:
    def test_integer(self):
        assert short_string(EvalResult(LazyReal.from_int(720), Fraction(720)), 12) == "720"

    def test_fraction(self):
        third = LazyReal.from_int(1).divide(LazyReal.from_int(3))
        assert short_string(EvalResult(third, Fraction(1, 3)), 12) == "0.333333333333"

    def test_long_integer_is_abbreviated(self):
        big = 10 ** 20
        text = short_string(EvalResult(LazyReal.from_int(big), Fraction(big)), 5)
        assert text != str(big)
        assert "e" in text


class TestSavedState:
    def test_round_trip(self):
        evaluator = Evaluator(degree_mode=True)
        evaluator.add_chars("2×(3+4")
        evaluator.collapse()
        evaluator.add_chars("−1")
        data = evaluator.save_state()

        restored = Evaluator(degree_mode=False)
        restored.restore_state(data)
        assert restored.degree_mode is True
        assert restored.expr.display() == evaluator.expr.display()
        assert restored.evaluate().rational == 13

    def test_layout_starts_with_degree_mode(self, evaluator):
        evaluator.add_chars("5")
        data = evaluator.save_state()
        assert data[0] == 0
        assert data[1:] == Serializer.dumps(evaluator.expr)

    def test_invalid_data_changes_nothing(self, evaluator):
        evaluator.add_chars("8")
        buffer = io.BytesIO()
        out = Serializer.DataWriter(buffer)
        out.write_boolean(True)
        out.write_int(1)
        out.write_byte(9)
        with pytest.raises(E.FormatError):
            evaluator.restore_state(buffer.getvalue())
        assert evaluator.degree_mode is False
        assert evaluator.expr.display() == "8"


class TestAsync:
    def test_result_delivered(self, evaluator):
        evaluator.add_chars("6×7")
        outcome = []
        thread = evaluator.evaluate_async(lambda result, error: outcome.append((result, error)))
        thread.join(timeout=30)
        assert len(outcome) == 1
        result, error = outcome[0]
        assert error is None
        assert result.rational == 42

    def test_snapshot_is_independent(self, evaluator):
        evaluator.add_chars("6×7")
        outcome = []
        thread = evaluator.evaluate_async(lambda result, error: outcome.append(result))
        evaluator.add_chars("0")
        thread.join(timeout=30)
        assert outcome[0].rational == 42
        assert evaluator.expr.display() == "6×70"

    def test_error_delivered(self, evaluator):
        evaluator.add_chars("1÷0")
        outcome = []
        thread = evaluator.evaluate_async(lambda result, error: outcome.append((result, error)),
                                          required=True)
        thread.join(timeout=30)
        result, error = outcome[0]
        assert result is None
        assert isinstance(error, E.CalculationError)
        assert error.code == "3003"
        assert error.category == "Calculator Error"
        assert error.equation == "1÷0"

    def test_unexpected_crash_reported(self, evaluator, monkeypatch):
        evaluator.add_chars("1+1")

        def boom(*args):
            raise RuntimeError("boom")

        monkeypatch.setattr(Expression, "evaluate", boom)
        outcome = []
        thread = evaluator.evaluate_async(lambda result, error: outcome.append(error))
        thread.join(timeout=30)
        assert outcome[0].code == "9999"
        assert "boom" in outcome[0].message
