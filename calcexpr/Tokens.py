# Tokens.py
"""
Tokens of an editable expression.

Literal     - a number being typed; the only mutable token.
Operator    - a key press that is not part of a number (operators, functions,
              parentheses, constants).
PreEvaluated - an already evaluated subexpression, kept together with the
              expression and context it came from.

Operator and PreEvaluated tokens never change after construction and may be
shared between expressions.
"""

from enum import IntEnum

from . import BoundedRational as BR
from . import KeyMaps
from .KeyMaps import Key
from .LazyReal import LazyReal


class TokenKind(IntEnum):
    LITERAL = 0
    OPERATOR = 1
    PRE_EVAL = 2


class Token:
    kind = None

    def display(self):
        raise NotImplementedError


class Literal(Token):
    """A (possibly incomplete) number, stored as typed."""
    kind = TokenKind.LITERAL

    def __init__(self, whole="", saw_decimal=False, fraction=""):
        self.whole = whole
        self.saw_decimal = saw_decimal
        self.fraction = fraction

    def add(self, key):
        """Append a digit or the decimal point.

        Returns False (and changes nothing) for a second decimal point.
        """
        if key == Key.DEC_POINT:
            if self.saw_decimal:
                return False
            self.saw_decimal = True
            return True
        digit = str(KeyMaps.dig_val(key))
        if self.saw_decimal:
            self.fraction += digit
        else:
            self.whole += digit
        return True

    def delete(self):
        """Undo the last add. The literal must not be empty."""
        if self.fraction:
            self.fraction = self.fraction[:-1]
        elif self.saw_decimal:
            self.saw_decimal = False
        else:
            self.whole = self.whole[:-1]

    def is_empty(self):
        return not self.saw_decimal and not self.whole

    def to_easy_string(self):
        # Machine readable: no localization, no leading decimal point
        result = self.whole or "0"
        if self.saw_decimal:
            result += "." + self.fraction
        return result

    def to_rational(self):
        return BR.from_decimal_digits(self.whole, self.fraction)

    def to_real(self):
        return LazyReal.from_string(self.to_easy_string())

    def copy(self):
        return Literal(self.whole, self.saw_decimal, self.fraction)

    def display(self):
        result = self.whole
        if self.saw_decimal:
            result += "." + self.fraction
        return KeyMaps.translate_result(result)

    def __repr__(self):
        return f"Literal({self.display()!r})"


class Operator(Token):
    kind = TokenKind.OPERATOR
    __slots__ = ("_key",)

    def __init__(self, key):
        self._key = Key(key)

    @property
    def key(self):
        return self._key

    def display(self):
        return KeyMaps.to_string(self._key)

    def __repr__(self):
        return f"Operator({self._key.name})"


class EvalContext:
    """How an expression is evaluated: angle unit and how many tokens count."""
    __slots__ = ("_degree_mode", "_prefix_length")

    def __init__(self, degree_mode, prefix_length):
        self._degree_mode = bool(degree_mode)
        self._prefix_length = prefix_length

    @property
    def degree_mode(self):
        return self._degree_mode

    @property
    def prefix_length(self):
        return self._prefix_length

    def __repr__(self):
        return f"EvalContext(degree_mode={self._degree_mode}, prefix_length={self._prefix_length})"


class PreEvaluated(Token):
    """A previously evaluated subexpression.

    `value` and `rational` are the cached result; `expr` and `context` are
    kept only so the token can be saved and recomputed later. `short_rep`
    is a short, non-localized rendering of the value.
    """
    kind = TokenKind.PRE_EVAL
    __slots__ = ("_value", "_rational", "_expr", "_context", "_short_rep")

    def __init__(self, value, rational, expr, context, short_rep):
        self._value = value
        self._rational = rational
        self._expr = expr
        self._context = context
        self._short_rep = short_rep

    @property
    def value(self):
        return self._value

    @property
    def rational(self):
        return self._rational

    @property
    def expr(self):
        return self._expr

    @property
    def context(self):
        return self._context

    @property
    def short_rep(self):
        return self._short_rep

    def display(self):
        return KeyMaps.translate_result(self._short_rep)

    def __repr__(self):
        return f"PreEvaluated({self._short_rep!r})"


def copy_token(token):
    """Copy for cloning an expression: literals are copied, the rest shared."""
    if isinstance(token, Literal):
        return token.copy()
    return token
