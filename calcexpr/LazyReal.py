# LazyReal.py
"""
Arbitrary precision real numbers that are only computed when asked for.

A LazyReal is a node in a graph of operations. Building the graph is cheap;
approx_to(p) returns an mpmath number within 2**-p of the true value. Every
operation asks its operands for the absolute precision it needs to meet that
bound, using magnitude estimates for products, quotients, logarithms and
exponentials, so cancellation such as (x + 3) - x still yields 3.
Domain errors (division by zero, sqrt of a negative number, ...) are raised
there, when a result is rendered, compared or tested for integrality.

A node's compute function either returns its approximation directly or is a
generator that yields (operand, precision) requests and receives the
operand's approximation back. _materialize() runs those generators from an
explicit stack, so long chains like π+π+...+π never recurse.

mpmath keeps its working precision in one global context, so every
materialization holds _MP_LOCK. Evaluations in different threads therefore
materialize one at a time.
"""

import threading
from fractions import Fraction
from types import GeneratorType

import mpmath

from . import error as E

# Extra bits requested once, at the top, when a relative precision is asked for
GUARD_BITS = 32

# A divisor or logarithm argument below 2**-ZERO_TEST_BITS counts as zero
ZERO_TEST_BITS = 4096

# Reentrant: rendering helpers materialize while already holding it
_MP_LOCK = threading.RLock()


class LazyReal:
    def __init__(self, compute):
        self._compute = compute
        self._cache = None   # (abs_prec, value)

    # -----------------------------
    # Construction
    # -----------------------------

    @classmethod
    def from_string(cls, text):
        """Build from a plain decimal string such as "3.14" or "12."."""
        exact = Fraction(text)
        return cls.from_fraction(exact)

    @classmethod
    def from_int(cls, n):
        n = int(n)

        def compute(prec):
            with mpmath.workprec(n.bit_length() + 2):
                return mpmath.mpf(n)
        return cls(compute)

    @classmethod
    def from_fraction(cls, value):
        num, den = value.numerator, value.denominator
        if den == 1:
            return cls.from_int(num)
        magnitude = num.bit_length() - den.bit_length() + 1

        def compute(prec):
            # num and den are rounded too, hence the two extra bits
            with mpmath.workprec(_bits(prec, magnitude) + 2):
                return mpmath.mpf(num) / mpmath.mpf(den)
        return cls(compute)

    # -----------------------------
    # Materialization
    # -----------------------------

    def _cached(self, prec):
        cached = self._cache
        if cached is not None and cached[0] >= prec:
            return cached[1]
        return None

    def approx_to(self, prec):
        """Return an mpf within 2**-prec of the true value."""
        value = self._cached(prec)
        if value is not None:
            return value
        with _MP_LOCK:
            return _materialize(self, prec)

    def approx(self, prec):
        """Return an mpf with about `prec` significant bits."""
        rough = self.approx_to(GUARD_BITS)
        if not rough:
            return self.approx_to(prec + GUARD_BITS)
        return self.approx_to(prec - _mag(rough) + GUARD_BITS)

    def compare_to(self, other, abs_prec):
        """-1, 0 or 1; 0 means the two agree to within 2**-abs_prec."""
        diff = mpmath.fsub(self.approx_to(abs_prec + 2), other.approx_to(abs_prec + 2),
                           exact=True)
        eps = mpmath.ldexp(1, -abs_prec)
        if -eps <= diff <= eps:
            return 0
        return 1 if diff > 0 else -1

    def signum(self, abs_prec=100):
        return self.compare_to(ZERO, abs_prec)

    def is_approx_int(self, test_prec):
        """True if the value is within 2**-test_prec of an integer."""
        value = self.approx_to(test_prec + 2)
        nearest = mpmath.nint(value, prec=max(_mag(value), 0) + 8)
        distance = mpmath.fsub(value, nearest, exact=True)
        eps = mpmath.ldexp(1, -test_prec)
        return -eps <= distance <= eps

    def to_integer(self):
        """Nearest integer."""
        value = self.approx_to(2)
        return int(mpmath.nint(value, prec=max(_mag(value), 0) + 8))

    def to_string(self, digits):
        """Non-localized decimal rendering with `digits` significant digits."""
        bits = int(digits * 3.33) + 8
        with _MP_LOCK:
            value = self.approx(bits)
            with mpmath.workprec(bits):
                return mpmath.nstr(value, digits)

    def __float__(self):
        return float(self.approx(53))

    def __repr__(self):
        return f"LazyReal({self.to_string(20)})"

    # -----------------------------
    # Arithmetic
    # -----------------------------

    def add(self, other):
        def compute(prec):
            x = yield self, prec + 2
            y = yield other, prec + 2
            return mpmath.fadd(x, y, prec=_bits(prec, max(_mag(x), _mag(y)) + 1))
        return LazyReal(compute)

    def subtract(self, other):
        def compute(prec):
            x = yield self, prec + 2
            y = yield other, prec + 2
            return mpmath.fsub(x, y, prec=_bits(prec, max(_mag(x), _mag(y)) + 1))
        return LazyReal(compute)

    def multiply(self, other):
        def compute(prec):
            # |ab - xy| <= |a| |b - y| + |y| |a - x|
            x0 = yield self, 0
            y0 = yield other, 0
            bound_a = max(_mag(x0), 0) + 1
            bound_b = max(_mag(y0), 0) + 2
            y = yield other, max(prec + bound_a + 2, 0)
            x = yield self, max(prec + bound_b + 2, 0)
            return mpmath.fmul(x, y, prec=_bits(prec, _mag(x) + _mag(y)))
        return LazyReal(compute)

    def divide(self, other):
        return self.multiply(other.inverse())

    def negate(self):
        def compute(prec):
            x = yield self, prec
            return mpmath.fneg(x, exact=True)
        return LazyReal(compute)

    def inverse(self):
        def compute(prec):
            found = yield from _lower_bound(self)
            if found is None:
                raise E.CalculationError("Division by zero", code="3003")
            low, _ = found
            # |1/b - 1/y| <= |b - y| / (2**low * 2**(low - 1))
            y = yield self, max(prec - 2 * low + 2, 1 - low)
            return mpmath.fdiv(1, y, prec=_bits(prec, 1 - low))
        return LazyReal(compute)

    def sqrt(self):
        def compute(prec):
            # |sqrt(a) - sqrt(x)| <= sqrt(|a - x|)
            arg_prec = 2 * prec + 4
            x = yield self, arg_prec
            if x < -mpmath.ldexp(1, -arg_prec):
                raise E.CalculationError("Square root of a negative number", code="2002")
            if x <= 0:
                return mpmath.mpf(0)
            with mpmath.workprec(_bits(prec, _mag(x) // 2 + 1)):
                return mpmath.sqrt(x)
        return LazyReal(compute)

    def ln(self):
        def compute(prec):
            found = yield from _lower_bound(self)
            if found is None or found[1] < 0:
                raise E.CalculationError("Logarithm of a non-positive number", code="2001")
            low, _ = found
            # |ln a - ln x| <= |a - x| / min(a, x)
            x = yield self, max(prec - low + 3, 1 - low)
            with mpmath.workprec(_bits(prec, (abs(_mag(x)) + 1).bit_length())):
                return mpmath.log(x)
        return LazyReal(compute)

    def exp(self):
        def compute(prec):
            x0 = yield self, 0
            # exp(a) <= 2**top since a <= x0 + 1
            top = max(int(mpmath.ceil((x0 + 1) * mpmath.mpf(1.4427))) + 1, 0)
            x = yield self, max(prec + top + 4, 0)
            with mpmath.workprec(_bits(prec, top + 2)):
                return mpmath.exp(x)
        return LazyReal(compute)

    def sin(self):
        def compute(prec):
            x = yield self, prec + 2
            with mpmath.workprec(_bits(prec, 1)):
                return mpmath.sin(x)
        return LazyReal(compute)

    def cos(self):
        def compute(prec):
            x = yield self, prec + 2
            with mpmath.workprec(_bits(prec, 1)):
                return mpmath.cos(x)
        return LazyReal(compute)

    def tan(self):
        return self.sin().divide(self.cos())

    def asin(self):
        def compute(prec):
            x = yield from _unit_range_arg(self, prec)
            with mpmath.workprec(_bits(prec, 1)):
                return mpmath.asin(x)
        return LazyReal(compute)

    def acos(self):
        def compute(prec):
            x = yield from _unit_range_arg(self, prec)
            with mpmath.workprec(_bits(prec, 2)):
                return mpmath.acos(x)
        return LazyReal(compute)

    def atan(self):
        def compute(prec):
            x = yield self, prec + 2
            with mpmath.workprec(_bits(prec, 1)):
                return mpmath.atan(x)
        return LazyReal(compute)


# -----------------------------
# Helpers
# -----------------------------

def _mag(value):
    """m with |value| < 2**m; 0 for zero."""
    if not value:
        return 0
    return int(mpmath.mag(value))


def _bits(prec, magnitude):
    """Relative bits that round a number below 2**magnitude to within 2**-(prec + 2)."""
    return max(prec + magnitude, 0) + 2


def _lower_bound(node):
    """Yield requests until |node| >= 2**low is proven.

    Returns (low, approximation), or None if the value cannot be told apart
    from zero at ZERO_TEST_BITS.
    """
    check_prec = 16
    while check_prec <= ZERO_TEST_BITS:
        x = yield node, check_prec
        # |x| >= 2 * 2**-check_prec, so |node| >= |x| / 2
        if x and _mag(x) >= 2 - check_prec:
            return _mag(x) - 2, x
        check_prec *= 2
    return None


def _unit_range_arg(node, prec):
    """Argument of asin/acos, clamped to [-1, 1].

    Both are 1/2-Hölder, so the argument is needed to about twice the bits.
    """
    arg_prec = 2 * prec + 6
    x = yield node, arg_prec
    limit = mpmath.fadd(1, mpmath.ldexp(1, -arg_prec), exact=True)
    if x > limit or x < mpmath.fneg(limit, exact=True):
        raise E.CalculationError(code="2003")
    return max(min(x, mpmath.mpf(1)), mpmath.mpf(-1))


def _materialize(root, prec):
    """Approximate root to prec bits, driving compute generators from a stack."""
    stack = []
    node, node_prec = root, prec
    value = None
    while True:
        if node is not None:
            result = node._compute(node_prec)
            if isinstance(result, GeneratorType):
                stack.append((node, node_prec, result))
                value = None
            else:
                node._cache = (node_prec, result)
                value = result
            node = None
        if not stack:
            return value
        current, current_prec, steps = stack[-1]
        try:
            child, child_prec = steps.send(value)
        except StopIteration as done:
            stack.pop()
            current._cache = (current_prec, done.value)
            value = done.value
            continue
        value = child._cached(child_prec)
        if value is None:
            node, node_prec = child, child_prec


def _constant(name):
    def compute(prec):
        with mpmath.workprec(_bits(prec, 2)):
            return +getattr(mpmath, name)
    return LazyReal(compute)


ZERO = LazyReal.from_int(0)
ONE = LazyReal.from_int(1)
PI = _constant("pi")
E_CONST = _constant("e")
