# BoundedRational.py
"""Exact rational arithmetic with a size bound.

Values are fractions.Fraction or None. None means "no exact value known":
it propagates through every operation, and results that grow beyond
rational_max_bits are turned into None so the caller falls back to the
approximate (LazyReal) value instead of carrying huge fractions around.
"""

import logging
import math
from fractions import Fraction

from . import config_manager as config_manager
from . import error as E
from .LazyReal import LazyReal

logger = logging.getLogger(__name__)

MAX_BITS = config_manager.load_setting_value("rational_max_bits")

# Largest argument for which factorial is computed exactly
FACTORIAL_LIMIT = 5000

ONE_HUNDREDTH = Fraction(1, 100)


def _size(r):
    return r.numerator.bit_length() + r.denominator.bit_length()


def _bounded(r):
    if r is not None and _size(r) > MAX_BITS:
        logger.debug("Dropping exact value of %d bits", _size(r))
        return None
    return r


def from_decimal_digits(whole, fraction):
    """Exact value of the digit strings on either side of a decimal point."""
    if not whole:
        whole = "0"
    return Fraction(int(whole + fraction), 10 ** len(fraction))


def add(a, b):
    if a is None or b is None:
        return None
    return _bounded(a + b)


def subtract(a, b):
    if a is None or b is None:
        return None
    return _bounded(a - b)


def multiply(a, b):
    if a is None or b is None:
        return None
    return _bounded(a * b)


def divide(a, b):
    if a is None or b is None:
        return None
    if b == 0:
        raise E.CalculationError("Division by zero", code="3003")
    return _bounded(a / b)


def negate(a):
    if a is None:
        return None
    return -a


def as_integer(r):
    """Return r as an int if it is an exact integer, else None."""
    if r is None or r.denominator != 1:
        return None
    return r.numerator


def pow(base, exp):
    """Exact base**exp for integer exponents, None otherwise."""
    n = as_integer(exp)
    if base is None or n is None:
        return None
    if base == 0 and n < 0:
        raise E.CalculationError("Division by zero", code="3003")
    if base in (0, 1) or n == 0:
        return base ** n
    if base == -1:
        return Fraction(1 if n % 2 == 0 else -1)
    # Estimate before computing; a huge power would take forever to build
    if abs(n) * max(base.numerator.bit_length(), base.denominator.bit_length()) > MAX_BITS:
        return None
    return _bounded(base ** n)


def fact(r):
    """Exact factorial. Raises for arguments that have no factorial."""
    if r is None:
        return None
    n = as_integer(r)
    if n is None:
        raise E.CalculationError("Factorial of non-integer", code="3030")
    if n < 0:
        raise E.CalculationError("Factorial of negative number", code="3031")
    if n > FACTORIAL_LIMIT:
        raise E.CalculationError("Factorial argument too large", code="3026")
    return Fraction(math.factorial(n))


def is_perfect_square(n):
    if n < 0:
        return False
    root = math.isqrt(n)
    return root * root == n


def to_real(r):
    return LazyReal.from_fraction(r)
