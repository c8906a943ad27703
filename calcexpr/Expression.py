# Expression.py
"""
An editable calculator expression: a list of tokens in left-to-right order.

Edits come from key presses (add), deletions and concatenation with other
expressions. Evaluation is delegated to MathEngine; it reads the token list
without locking, so callers must not edit an expression while it is being
evaluated (evaluate a clone() instead).
"""

from . import KeyMaps
from . import MathEngine
from .KeyMaps import Key
from .Tokens import EvalContext, Literal, Operator, PreEvaluated, copy_token

# Operators that a number may not directly follow
NO_LITERAL_AFTER = (Key.CONST_E, Key.CONST_PI, Key.OP_FACT, Key.RPAREN)


class Expression:
    def __init__(self, tokens=None):
        self._tokens = list(tokens) if tokens is not None else []

    @property
    def tokens(self):
        return tuple(self._tokens)

    def __len__(self):
        return len(self._tokens)

    def __repr__(self):
        return f"Expression({self._tokens!r})"

    def _is_operator_unchecked(self, i, key):
        t = self._tokens[i]
        return isinstance(t, Operator) and t.key == key

    def _has_trailing_binary(self):
        if not self._tokens:
            return False
        last = self._tokens[-1]
        return isinstance(last, Operator) and KeyMaps.is_binary(last.key)

    # -----------------------------
    # Editing
    # -----------------------------

    def add(self, key):
        """Append a key press.

        Returns False and leaves the expression unchanged if the key would
        clearly produce a syntax error.
        """
        key = Key(key)
        s = len(self._tokens)
        binary = KeyMaps.is_binary(key)
        if s == 0 and binary and key != Key.OP_SUB:
            return False
        if binary and self._has_trailing_binary() and (
                key != Key.OP_SUB or self._is_operator_unchecked(s - 1, Key.OP_SUB)):
            return False

        if KeyMaps.dig_val(key) != KeyMaps.NOT_DIGIT or key == Key.DEC_POINT:
            if s > 0 and isinstance(self._tokens[-1], Literal):
                return self._tokens[-1].add(key)
            if s > 0:
                last = self._tokens[-1]
                if not isinstance(last, Operator) or last.key in NO_LITERAL_AFTER:
                    return False
            literal = Literal()
            literal.add(key)
            self._tokens.append(literal)
            return True

        self._tokens.append(Operator(key))
        return True

    def append(self, other):
        """Append the tokens of another expression.

        If both sides would touch with two non-operators (e.g. 3 and 7) an
        explicit × is inserted, since "37" is not what was meant.
        """
        if self._tokens and other._tokens:
            last = self._tokens[-1]
            first = other._tokens[0]
            if not isinstance(first, Operator) and not isinstance(last, Operator):
                self._tokens.append(Operator(Key.OP_MUL))
        # Literals are copied so later edits of `other` cannot leak in
        self._tokens.extend(copy_token(t) for t in other._tokens)

    def delete(self):
        """Undo the last key press, if any."""
        if not self._tokens:
            return
        last = self._tokens[-1]
        if isinstance(last, Literal):
            last.delete()
            if not last.is_empty():
                return
        self._tokens.pop()

    def clear(self):
        self._tokens.clear()

    def is_empty(self):
        return not self._tokens

    def clone(self):
        return Expression(copy_token(t) for t in self._tokens)

    def is_constant(self):
        """True if the expression is just a single number being typed."""
        return len(self._tokens) == 1 and isinstance(self._tokens[0], Literal)

    def abbreviate(self, value, rational, degree_mode, short_rep):
        """Return a new expression holding this one as a single PreEvaluated token.

        value/rational must be the result of evaluating this expression in
        degree_mode; nothing is recomputed here.
        """
        frozen = self.clone()
        token = PreEvaluated(value, rational, frozen,
                             EvalContext(degree_mode, len(self._tokens)), short_rep)
        return Expression([token])

    # -----------------------------
    # Structure queries
    # -----------------------------

    def trailing_operators_start(self):
        """Index where the trailing run of operators that cannot end an
        expression begins (len(self) if there is none)."""
        result = len(self._tokens)
        while result > 0:
            last = self._tokens[result - 1]
            if not isinstance(last, Operator):
                break
            if KeyMaps.is_suffix(last.key) or last.key in (Key.CONST_PI, Key.CONST_E):
                break
            result -= 1
        return result

    def has_trailing_operators(self):
        return self.trailing_operators_start() != len(self._tokens)

    def has_interesting_ops(self):
        """False if the expression is just a (signed) number."""
        last = self.trailing_operators_start()
        first = 0
        if last > first and self._is_operator_unchecked(first, Key.OP_SUB):
            first += 1
        for t in self._tokens[first:last]:
            # PreEvaluated counts: its value usually has more digits than shown
            if not isinstance(t, Literal):
                return True
        return False

    # -----------------------------
    # Evaluation / display
    # -----------------------------

    def evaluate(self, degree_mode, required):
        return MathEngine.evaluate(self, degree_mode, required)

    def display(self):
        return "".join(t.display() for t in self._tokens)

    def __str__(self):
        return self.display()
