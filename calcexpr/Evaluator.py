# Evaluator.py
"""
Controller around a single Expression.

Responsibilities
----------------
- Forward key presses and typed/pasted text to the expression
- Keep the degree/radian setting
- Evaluate, and collapse an evaluated expression into one PreEvaluated token
- Save and restore the current state through the Serializer
- Run long evaluations in a Worker thread on a snapshot of the expression
"""

import io
import logging
import threading

from . import Serializer
from . import config_manager as config_manager
from . import error as E
from . import KeyMaps
from .Expression import Expression
from .KeyMaps import Key

logger = logging.getLogger(__name__)


def short_string(result, digits):
    """Short, non-localized text for an evaluation result."""
    rational = result.rational
    if rational is not None and rational.denominator == 1:
        text = str(rational.numerator)
        if len(text.lstrip("-")) <= digits:
            return text
    return result.value.to_string(digits)


class Worker:
    """
    Evaluates an expression snapshot in a separate thread and hands the
    outcome to on_finished(result, error); exactly one of them is None.
    """

    def __init__(self, expr, degree_mode, required, on_finished):
        self.expr = expr
        self.degree_mode = degree_mode
        self.required = required
        self.on_finished = on_finished

    def run_calc(self):
        try:
            result = self.expr.evaluate(self.degree_mode, self.required)

        except E.MathError as e:
            # Known, handled error (e.g. "Division by zero")
            e.equation = self.expr.display()
            self.on_finished(None, e)
            return

        except Exception as e:
            # Unexpected crash: report it instead of dying silently in the thread
            logger.exception("Evaluation of %r crashed", self.expr)
            critical_error = E.MathError(
                message=f"Unexpected crash: {e}",
                code="9999",
                equation=self.expr.display()
            )
            self.on_finished(None, critical_error)
            return

        self.on_finished(result, None)


class Evaluator:
    def __init__(self, degree_mode=None):
        if degree_mode is None:
            degree_mode = config_manager.load_setting_value("degree_mode")
        self.degree_mode = bool(degree_mode)
        self.short_rep_digits = config_manager.load_setting_value("short_rep_digits")
        self.expr = Expression()

    # -----------------------------
    # Input
    # -----------------------------

    def append(self, key):
        return self.expr.add(key)

    def add_chars(self, text):
        """Feed typed or pasted text as key presses.

        Returns the part of the text that could not be converted (starting at
        the first unrecognized or rejected character), or None.
        """
        current = 0
        while current < len(text):
            if text[current].isspace():
                current += 1
                continue
            match = KeyMaps.fun_for_string(text, current)
            if match is not None:
                key, length = match
                if not self.expr.add(key):
                    return text[current:]
                if key == Key.OP_SQRT:
                    # "sqrt(" as a function: keep the parenthesis
                    self.expr.add(Key.LPAREN)
                current += length
                continue
            key = KeyMaps.key_for_char(text[current])
            if key is None or not self.expr.add(key):
                return text[current:]
            current += 1
        return None

    def delete(self):
        self.expr.delete()

    def clear(self):
        self.expr.clear()

    def set_degree_mode(self, degree_mode):
        """Switch degree/radian mode and remember it as the new default."""
        self.degree_mode = bool(degree_mode)
        settings = config_manager.load_setting_value("all")
        settings["degree_mode"] = self.degree_mode
        config_manager.save_setting(settings)

    # -----------------------------
    # Evaluation
    # -----------------------------

    def evaluate(self, required=False):
        return self.expr.evaluate(self.degree_mode, required)

    def short_string(self, result):
        return short_string(result, self.short_rep_digits)

    def collapse(self):
        """Replace the expression by a single token holding its value.

        Returns False, leaving the expression alone, if there is nothing worth
        collapsing or it does not evaluate.
        """
        if self.expr.is_empty() or self.expr.is_constant():
            return False
        try:
            result = self.evaluate(required=True)
        except E.MathError as e:
            logger.debug("Not collapsing: %s", e.message)
            return False
        self.expr = self.expr.abbreviate(result.value, result.rational,
                                         self.degree_mode, self.short_string(result))
        return True

    def evaluate_async(self, on_finished, required=False):
        """Evaluate a snapshot in a background thread; returns the started thread."""
        worker_instance = Worker(self.expr.clone(), self.degree_mode, required, on_finished)
        my_thread = threading.Thread(target=worker_instance.run_calc, daemon=True)
        my_thread.start()
        return my_thread

    # -----------------------------
    # Saving
    # -----------------------------

    def save_state(self):
        buffer = io.BytesIO()
        out = Serializer.DataWriter(buffer)
        out.write_boolean(self.degree_mode)
        Serializer.write_expr(self.expr, out, Serializer.EncodeSession())
        return buffer.getvalue()

    def restore_state(self, data):
        """Restore from save_state() output. On failure nothing is changed."""
        inp = Serializer.DataReader(io.BytesIO(data))
        degree_mode = inp.read_boolean()
        expr = Serializer.read_expr(inp, Serializer.DecodeSession())
        self.degree_mode = degree_mode
        self.expr = expr
