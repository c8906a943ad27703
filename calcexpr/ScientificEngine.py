# ScientificEngine.py
"""
Scientific functions for the expression engine.

Each function first looks for an exact answer in a small table of rational
special cases (sqrt(9/4), ln(1), log(1000), sin(30°), ...). Only if there is
none is the LazyReal primitive used, and then the exact part of the result
is None.

Degree mode only rescales on the LazyReal path; the exact tables have their
own degree versions.
"""

import logging
import math
from fractions import Fraction

from . import BoundedRational as BR
from . import error as E
from .KeyMaps import Key
from .LazyReal import LazyReal, PI

logger = logging.getLogger(__name__)

RADIANS_PER_DEGREE = PI.divide(LazyReal.from_int(180))
DEGREES_PER_RADIAN = LazyReal.from_int(180).divide(PI)

HALF = Fraction(1, 2)

LN_10 = LazyReal.from_int(10).ln()


def to_radians(x, degree_mode):
    if degree_mode:
        return x.multiply(RADIANS_PER_DEGREE)
    return x


def from_radians(x, degree_mode):
    if degree_mode:
        return x.multiply(DEGREES_PER_RADIAN)
    return x


# -----------------------------
# Rational special cases (radians)
# -----------------------------

def sqrt(r):
    if r is None:
        return None
    if r < 0:
        raise E.CalculationError("Square root of a negative number", code="2002")
    if BR.is_perfect_square(r.numerator) and BR.is_perfect_square(r.denominator):
        return Fraction(math.isqrt(r.numerator), math.isqrt(r.denominator))
    return None


def _power_of_ten(n):
    """Return k if n == 10**k for k >= 0, else None."""
    k = 0
    while n % 10 == 0:
        n //= 10
        k += 1
    return k if n == 1 else None


def ln(r):
    if r is None:
        return None
    if r <= 0:
        raise E.CalculationError("Logarithm of a non-positive number", code="2001")
    if r == 1:
        return Fraction(0)
    return None


def log(r):
    if r is None:
        return None
    if r <= 0:
        raise E.CalculationError("Logarithm of a non-positive number", code="2001")
    if r.denominator == 1:
        k = _power_of_ten(r.numerator)
        return None if k is None else Fraction(k)
    if r.numerator == 1:
        k = _power_of_ten(r.denominator)
        return None if k is None else Fraction(-k)
    return None


def exp(r):
    if r is not None and r == 0:
        return Fraction(1)
    return None


def sin(r):
    if r is not None and r == 0:
        return Fraction(0)
    return None


def cos(r):
    if r is not None and r == 0:
        return Fraction(1)
    return None


def tan(r):
    return sin(r)


def _check_unit_range(r):
    if r is not None and abs(r) > 1:
        raise E.CalculationError(code="2003")


def asin(r):
    _check_unit_range(r)
    return sin(r)


def acos(r):
    _check_unit_range(r)
    if r is not None and r == 1:
        return Fraction(0)
    return None


def atan(r):
    return sin(r)


# -----------------------------
# Rational special cases (degrees)
# -----------------------------

# sin(30° * k) for k = 0..11; None where the value is irrational
SIN_MULTIPLES_OF_30 = (Fraction(0), HALF, None, Fraction(1), None, HALF,
                       Fraction(0), -HALF, None, Fraction(-1), None, -HALF)

# tan(45° * k) for k = 0..3; "undefined" at odd multiples of 90°
TAN_MULTIPLES_OF_45 = (Fraction(0), Fraction(1), "undefined", Fraction(-1))

ASIN_DEGREES = {Fraction(-1): Fraction(-90), -HALF: Fraction(-30), Fraction(0): Fraction(0),
                HALF: Fraction(30), Fraction(1): Fraction(90)}

ATAN_DEGREES = {Fraction(-1): Fraction(-45), Fraction(0): Fraction(0), Fraction(1): Fraction(45)}


def degree_sin(r):
    if r is None:
        return None
    steps = r / 30
    if steps.denominator != 1:
        return None
    return SIN_MULTIPLES_OF_30[steps.numerator % 12]


def degree_cos(r):
    if r is None:
        return None
    return degree_sin(r + 90)


def degree_tan(r):
    if r is None:
        return None
    steps = r / 45
    if steps.denominator != 1:
        return None
    result = TAN_MULTIPLES_OF_45[steps.numerator % 4]
    if result == "undefined":
        raise E.CalculationError("Tangent undefined", code="2004")
    return result


def degree_asin(r):
    _check_unit_range(r)
    if r is None:
        return None
    return ASIN_DEGREES.get(r)


def degree_acos(r):
    angle = degree_asin(r)
    if angle is None:
        return None
    return 90 - angle


def degree_atan(r):
    if r is None:
        return None
    return ATAN_DEGREES.get(r)


# -----------------------------
# Dispatch
# -----------------------------

# key: (exact in radians, exact in degrees, LazyReal fallback, kind)
# kind "trig" rescales the argument, "inverse" rescales the result
FUNCTION_TABLE = {
    Key.FUN_SIN: (sin, degree_sin, LazyReal.sin, "trig"),
    Key.FUN_COS: (cos, degree_cos, LazyReal.cos, "trig"),
    Key.FUN_TAN: (tan, degree_tan, LazyReal.tan, "trig"),
    Key.FUN_ARCSIN: (asin, degree_asin, LazyReal.asin, "inverse"),
    Key.FUN_ARCCOS: (acos, degree_acos, LazyReal.acos, "inverse"),
    Key.FUN_ARCTAN: (atan, degree_atan, LazyReal.atan, "inverse"),
    Key.FUN_LN: (ln, ln, LazyReal.ln, "plain"),
    Key.FUN_LOG: (log, log, lambda x: x.ln().divide(LN_10), "plain"),
    Key.FUN_EXP: (exp, exp, LazyReal.exp, "plain"),
}


def apply_function(key, value, rational, degree_mode):
    """Apply a named function to a dual value.

    Returns (LazyReal, Fraction or None).
    """
    exact, exact_degrees, real, kind = FUNCTION_TABLE[key]
    result = exact_degrees(rational) if degree_mode else exact(rational)
    if result is not None:
        return BR.to_real(result), result
    logger.debug("No exact value for %s, using approximation", key.name)
    if kind == "trig":
        return real(to_radians(value, degree_mode)), None
    if kind == "inverse":
        return from_radians(real(value), degree_mode), None
    return real(value), None


def apply_sqrt(value, rational):
    result = sqrt(rational)
    if result is not None:
        return BR.to_real(result), result
    return value.sqrt(), None
