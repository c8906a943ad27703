# MathEngine.py
"""
Evaluation engine for token expressions.

Grammar (recursive descent, highest binding first)
--------------------------------------------------
Unary        := literal | preEvaluated | π | e
              | √ [-] Unary
              | ( Expr [)]
              | FUNC Expr [)]          FUNC already contains its "("
Suffix       := Unary { ! | ² | % }
Factor       := Suffix [ ^ SignedFactor ]
SignedFactor := [-] Factor
Term         := SignedFactor { (× | ÷) SignedFactor | SignedFactor }
Expr         := Term { (+ | -) Term }

Two deliberate leniencies: a missing ")" at the end of the evaluated range
is accepted, and two factors next to each other are multiplied.

Every rule returns EvalRet(pos, value, rational) or a SyntaxFailure.
Values are dual: a LazyReal that is always present and an exact Fraction
that is None when the result is irrational or too expensive. Each operation
tries the exact path first and derives the LazyReal from it when it works.
Arithmetic domain errors (division by zero, factorial of 2.5, ...) are raised
as error.CalculationError.
"""

import logging
from fractions import Fraction

from . import BoundedRational as BR
from . import KeyMaps
from . import ScientificEngine
from . import error as E
from .KeyMaps import Key
from .LazyReal import LazyReal, PI, E_CONST
from .Tokens import EvalContext, Literal, Operator, PreEvaluated

logger = logging.getLogger(__name__)

# Integer test for factorial: 100 bits past the binary point
TEST_PREC = 100

REAL_ONE_HUNDREDTH = LazyReal.from_int(100).inverse()


class EvalResult:
    """Public result of an evaluation: the dual value."""
    __slots__ = ("value", "rational")

    def __init__(self, value, rational):
        self.value = value
        self.rational = rational

    def __repr__(self):
        return f"EvalResult(value={self.value!r}, rational={self.rational!r})"


class EvalRet:
    __slots__ = ("pos", "value", "rational")

    def __init__(self, pos, value, rational):
        self.pos = pos
        self.value = value
        self.rational = rational


class SyntaxFailure:
    __slots__ = ("message", "code", "pos")

    def __init__(self, message, code, pos):
        self.message = message
        self.code = code
        self.pos = pos

    def __repr__(self):
        return f"SyntaxFailure({self.message!r}, pos={self.pos})"


def _failed(result):
    return isinstance(result, SyntaxFailure)


def _from_rational(pos, rational):
    return EvalRet(pos, BR.to_real(rational), rational)


# -----------------------------
# Small helpers
# -----------------------------

def int_pow(base, exp):
    """base**exp for an integer exp by repeated squaring.

    Unlike exp(exp * ln(base)) this works for a negative base.
    """
    if exp < 0:
        return int_pow(base, -exp).inverse()
    if exp == 0:
        return LazyReal.from_int(1)
    if exp == 1:
        return base
    if exp % 2 == 1:
        return int_pow(base, exp - 1).multiply(base)
    half = int_pow(base, exp // 2)
    return half.multiply(half)


class _Parser:
    """Evaluates one token sequence in one context."""

    def __init__(self, tokens, context):
        self.tokens = tokens
        self.context = context

    def token(self, i):
        """Token at i, or None past the evaluated prefix."""
        if i >= self.context.prefix_length or i >= len(self.tokens):
            return None
        return self.tokens[i]

    def is_operator(self, i, key):
        t = self.token(i)
        return isinstance(t, Operator) and t.key == key

    def can_start_factor(self, i):
        t = self.token(i)
        if t is None:
            return False
        if not isinstance(t, Operator):
            return True
        if KeyMaps.is_binary(t.key) or KeyMaps.is_suffix(t.key):
            return False
        return t.key != Key.RPAREN

    def skip_rparen(self, pos):
        # Missing ")" is tolerated
        if self.is_operator(pos, Key.RPAREN):
            return pos + 1
        return pos

    # ---- Parsing functions in precedence order ----

    def eval_unary(self, i):
        t = self.token(i)
        if t is None:
            return SyntaxFailure("Unexpected expression end", "3012", i)
        if isinstance(t, Literal):
            return EvalRet(i + 1, t.to_real(), t.to_rational())
        if isinstance(t, PreEvaluated):
            return EvalRet(i + 1, t.value, t.rational)

        key = t.key
        if key == Key.CONST_PI:
            return EvalRet(i + 1, PI, None)
        if key == Key.CONST_E:
            return EvalRet(i + 1, E_CONST, None)

        if key == Key.OP_SQRT:
            # Binds tighter than anything else; a leading minus is accepted
            negative = self.is_operator(i + 1, Key.OP_SUB)
            arg = self.eval_unary(i + 2 if negative else i + 1)
            if _failed(arg):
                return arg
            value, rational = arg.value, arg.rational
            if negative:
                value, rational = value.negate(), BR.negate(rational)
            value, rational = ScientificEngine.apply_sqrt(value, rational)
            return EvalRet(arg.pos, value, rational)

        if key == Key.LPAREN:
            arg = self.eval_expr(i + 1)
            if _failed(arg):
                return arg
            return EvalRet(self.skip_rparen(arg.pos), arg.value, arg.rational)

        if KeyMaps.is_function(key):
            arg = self.eval_expr(i + 1)
            if _failed(arg):
                return arg
            value, rational = ScientificEngine.apply_function(
                key, arg.value, arg.rational, self.context.degree_mode)
            return EvalRet(self.skip_rparen(arg.pos), value, rational)

        return SyntaxFailure("Unrecognized token in expression", "3011", i)

    def eval_suffix(self, i):
        tmp = self.eval_unary(i)
        if _failed(tmp):
            return tmp
        cpos, cval, ratval = tmp.pos, tmp.value, tmp.rational
        while True:
            if self.is_operator(cpos, Key.OP_FACT):
                if ratval is None:
                    # Possibly an integer we could not prove exactly
                    if not cval.is_approx_int(TEST_PREC):
                        raise E.CalculationError("Factorial of non-integer", code="3030")
                    ratval = Fraction(cval.to_integer())
                ratval = BR.fact(ratval)
                cval = BR.to_real(ratval)
            elif self.is_operator(cpos, Key.OP_SQR):
                ratval = BR.multiply(ratval, ratval)
                cval = cval.multiply(cval) if ratval is None else BR.to_real(ratval)
            elif self.is_operator(cpos, Key.OP_PCT):
                ratval = BR.multiply(ratval, BR.ONE_HUNDREDTH)
                cval = cval.multiply(REAL_ONE_HUNDREDTH) if ratval is None else BR.to_real(ratval)
            else:
                break
            cpos += 1
        return EvalRet(cpos, cval, ratval)

    def eval_factor(self, i):
        base = self.eval_suffix(i)
        if _failed(base) or not self.is_operator(base.pos, Key.OP_POW):
            return base
        exp = self.eval_signed_factor(base.pos + 1)
        if _failed(exp):
            return exp
        ratval = BR.pow(base.rational, exp.rational)
        if ratval is not None:
            return _from_rational(exp.pos, ratval)
        # Only an exactly known integer exponent works for a negative base
        int_exp = BR.as_integer(exp.rational)
        if int_exp is not None:
            cval = int_pow(base.value, int_exp)
        else:
            cval = base.value.ln().multiply(exp.value).exp()
        return EvalRet(exp.pos, cval, None)

    def eval_signed_factor(self, i):
        negative = self.is_operator(i, Key.OP_SUB)
        tmp = self.eval_factor(i + 1 if negative else i)
        if _failed(tmp) or not negative:
            return tmp
        return EvalRet(tmp.pos, tmp.value.negate(), BR.negate(tmp.rational))

    def eval_term(self, i):
        tmp = self.eval_signed_factor(i)
        if _failed(tmp):
            return tmp
        cpos, cval, ratval = tmp.pos, tmp.value, tmp.rational
        while True:
            is_mul = self.is_operator(cpos, Key.OP_MUL)
            is_div = self.is_operator(cpos, Key.OP_DIV)
            if not (is_mul or is_div or self.can_start_factor(cpos)):
                break
            if is_mul or is_div:
                cpos += 1
            tmp = self.eval_signed_factor(cpos)
            if _failed(tmp):
                return tmp
            if is_div:
                ratval = BR.divide(ratval, tmp.rational)
                cval = cval.divide(tmp.value) if ratval is None else BR.to_real(ratval)
            else:
                ratval = BR.multiply(ratval, tmp.rational)
                cval = cval.multiply(tmp.value) if ratval is None else BR.to_real(ratval)
            cpos = tmp.pos
        return EvalRet(cpos, cval, ratval)

    def eval_expr(self, i):
        tmp = self.eval_term(i)
        if _failed(tmp):
            return tmp
        cpos, cval, ratval = tmp.pos, tmp.value, tmp.rational
        while True:
            is_plus = self.is_operator(cpos, Key.OP_ADD)
            if not (is_plus or self.is_operator(cpos, Key.OP_SUB)):
                break
            tmp = self.eval_term(cpos + 1)
            if _failed(tmp):
                return tmp
            if is_plus:
                ratval = BR.add(ratval, tmp.rational)
                cval = cval.add(tmp.value) if ratval is None else BR.to_real(ratval)
            else:
                ratval = BR.subtract(ratval, tmp.rational)
                cval = cval.subtract(tmp.value) if ratval is None else BR.to_real(ratval)
            cpos = tmp.pos
        return EvalRet(cpos, cval, ratval)


# -----------------------------
# Public entry points
# -----------------------------

def evaluate_prefix(tokens, context):
    """Evaluate the first context.prefix_length tokens.

    Raises error.SyntaxError unless exactly that prefix is consumed, and
    error.CalculationError (3027) if the nesting is too deep to parse.
    """
    try:
        result = _Parser(tokens, context).eval_expr(0)
    except RecursionError as e:
        raise E.CalculationError(code="3027") from e
    if _failed(result):
        raise E.SyntaxError(result.message, code=result.code)
    if result.pos != context.prefix_length:
        raise E.SyntaxError("Failed to parse full expression", code="3013")
    return EvalResult(result.value, result.rational)


def evaluate(expr, degree_mode, required):
    """Evaluate an Expression.

    With `required` False, a trailing run of operators that cannot end an
    expression (e.g. the "+" in "2+") is ignored instead of being an error.
    Must not run concurrently with edits of `expr`.
    """
    prefix_length = len(expr) if required else expr.trailing_operators_start()
    logger.debug("Evaluating %d of %d tokens (degree_mode=%s)",
                 prefix_length, len(expr), degree_mode)
    return evaluate_prefix(expr.tokens, EvalContext(degree_mode, prefix_length))
