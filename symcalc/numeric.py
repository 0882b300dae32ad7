# numeric.py
"""
Dual-mode numeric value.

A Number is either *fast* (a native float) or *precise* (an mpmath ``mpf``
rounded to a fixed number of mantissa bits). The mode is carried by
``bits``: 0 means fast, any positive value means precise at that width.

Promotion rule: whenever a fast and a precise operand meet, the fast one is
converted to the precise width first and the result is precise. With two
precise operands the wider width wins.
"""

import functools
import math
import re
import sys

import mpmath
from mpmath import mpf, workprec

from . import error as E

MAX_PRECISION_BITS = 1 << 16

# Smallest positive *normal* float; anything smaller is flushed to zero.
FLOAT_MIN = sys.float_info.min
FLOAT_EPSILON = sys.float_info.epsilon
FLOAT_MAX = sys.float_info.max

_LITERAL = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?\Z")


def check_precision(bits):
    """Validate a precision_bits value and return it."""
    if isinstance(bits, bool) or not isinstance(bits, int):
        raise E.PrecisionUnavailableError(f"Precision must be an integer number of bits, got {bits!r}.")
    if bits < 0 or bits > MAX_PRECISION_BITS:
        raise E.PrecisionUnavailableError(f"Precision of {bits} bits is not available (0..{MAX_PRECISION_BITS}).")
    return bits


def decimal_digits(bits):
    """Number of significant decimal digits carried by a mantissa of `bits` bits."""
    if bits == 0:
        return 17
    return max(1, int(bits * math.log10(2)))


def round_trip_digits(bits):
    """Digits needed so that parsing the text at `bits` gives back the same value."""
    if bits == 0:
        return 17
    return mpmath.libmp.repr_dps(bits)


def _flush(value):
    if value != 0.0 and abs(value) < FLOAT_MIN:
        return 0.0
    return value


def _fast_div(a, b):
    try:
        return a / b
    except ZeroDivisionError:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)


def _fast_pow(a, b):
    try:
        return math.pow(a, b)
    except OverflowError:
        return math.inf
    except ValueError:
        # 0 ** negative is a pole, negative ** fraction is undefined
        if a == 0.0:
            return math.inf
        return math.nan


def _precise_div(a, b):
    try:
        return a / b
    except ZeroDivisionError:
        if a == 0 or mpmath.isnan(a):
            return mpmath.nan
        return mpmath.inf if (a > 0) == (b >= 0) else -mpmath.inf


def _precise_pow(a, b):
    try:
        result = a ** b
    except ZeroDivisionError:
        return mpmath.inf
    if isinstance(result, mpmath.mpc):
        return mpmath.nan
    return result


@functools.total_ordering
class Number:
    """A fast or precise real number with IEEE-style arithmetic."""

    __slots__ = ("value", "bits")

    def __init__(self, value=0, bits=0):
        check_precision(bits)
        if isinstance(value, Number):
            value = value.value
        if bits == 0:
            self.value = float(value)
        else:
            with workprec(bits):
                self.value = mpf(value)
        self.bits = bits

    @classmethod
    def _wrap(cls, value, bits):
        """Build a Number from an already-rounded raw value."""
        number = object.__new__(cls)
        number.value = _flush(value) if bits == 0 else value
        number.bits = bits
        return number

    @classmethod
    def parse(cls, raw, bits=0):
        """Parse a decimal literal; float() in fast mode, mpf() otherwise."""
        check_precision(bits)
        text = raw.strip() if isinstance(raw, str) else ""
        if not _LITERAL.match(text):
            raise E.NumberFormatError(f"Invalid number literal '{raw}'", raw=raw)
        if bits == 0:
            value = float(text)
            if math.isinf(value):
                raise E.NumberOverflowError(f"Number literal '{raw}' is too large.")
            return cls._wrap(value, 0)
        with workprec(bits):
            return cls._wrap(mpf(text), bits)

    # -----------------------------
    # Mode handling
    # -----------------------------

    @property
    def is_precise(self):
        return self.bits > 0

    def to_f64(self):
        try:
            return float(self.value)
        except OverflowError:
            return math.copysign(math.inf, 1 if self.value > 0 else -1)

    def to_fast(self):
        return Number._wrap(self.to_f64(), 0)

    def to_precise(self, bits):
        check_precision(bits)
        if bits == 0:
            return self.to_fast()
        return Number(self.value, bits)

    def _at(self, bits):
        if self.bits == bits:
            return self.value
        with workprec(bits):
            return mpf(self.value)

    def _coerce(self, other):
        if not isinstance(other, Number):
            if isinstance(other, bool) or not isinstance(other, (int, float)):
                return None
            other = Number(other)
        bits = max(self.bits, other.bits)
        if bits == 0:
            return self.value, other.value, 0
        return self._at(bits), other._at(bits), bits

    # -----------------------------
    # Predicates
    # -----------------------------

    def is_nan(self):
        if self.bits == 0:
            return math.isnan(self.value)
        return bool(mpmath.isnan(self.value))

    def is_infinite(self):
        if self.bits == 0:
            return math.isinf(self.value)
        return bool(mpmath.isinf(self.value))

    def is_finite(self):
        return not (self.is_nan() or self.is_infinite())

    def is_zero(self):
        return self.value == 0

    def is_integer(self):
        if not self.is_finite():
            return False
        if self.bits == 0:
            return self.value.is_integer()
        return bool(mpmath.isint(self.value))

    # -----------------------------
    # Arithmetic
    # -----------------------------

    def _binary(self, other, fast, precise, reflected=False):
        operands = self._coerce(other)
        if operands is None:
            return NotImplemented
        a, b, bits = operands
        if reflected:
            a, b = b, a
        if bits == 0:
            return Number._wrap(fast(a, b), 0)
        with workprec(bits):
            return Number._wrap(precise(a, b), bits)

    def __add__(self, other):
        return self._binary(other, lambda a, b: a + b, lambda a, b: a + b)

    def __radd__(self, other):
        return self._binary(other, lambda a, b: a + b, lambda a, b: a + b, reflected=True)

    def __sub__(self, other):
        return self._binary(other, lambda a, b: a - b, lambda a, b: a - b)

    def __rsub__(self, other):
        return self._binary(other, lambda a, b: a - b, lambda a, b: a - b, reflected=True)

    def __mul__(self, other):
        return self._binary(other, lambda a, b: a * b, lambda a, b: a * b)

    def __rmul__(self, other):
        return self._binary(other, lambda a, b: a * b, lambda a, b: a * b, reflected=True)

    def __truediv__(self, other):
        return self._binary(other, _fast_div, _precise_div)

    def __rtruediv__(self, other):
        return self._binary(other, _fast_div, _precise_div, reflected=True)

    def __pow__(self, other):
        return self._binary(other, _fast_pow, _precise_pow)

    def __rpow__(self, other):
        return self._binary(other, _fast_pow, _precise_pow, reflected=True)

    def __neg__(self):
        return Number._wrap(-self.value, self.bits)

    def __abs__(self):
        return Number._wrap(abs(self.value), self.bits)

    # -----------------------------
    # Ordering
    # -----------------------------

    def __eq__(self, other):
        operands = self._coerce(other)
        if operands is None:
            return NotImplemented
        a, b, _ = operands
        return bool(a == b)

    def __lt__(self, other):
        operands = self._coerce(other)
        if operands is None:
            return NotImplemented
        a, b, _ = operands
        return bool(a < b)

    def __hash__(self):
        return hash(self.to_f64())

    # -----------------------------
    # Rendering
    # -----------------------------

    def format(self, digits=None):
        """Integers render exactly; other values with `digits` significant digits.

        Without `digits` the text parses back to the same value: fast values use
        the shortest such text (repr), precise values round_trip_digits(bits).
        """
        if self.is_integer() and abs(self.to_f64()) < 1e16:
            return str(int(self.value))
        if self.bits == 0:
            if digits is None:
                return repr(self.value)
            return f"{self.value:.{digits}g}"
        if digits is None:
            digits = round_trip_digits(self.bits)
        return mpmath.nstr(self.value, digits)

    def __str__(self):
        return self.format()

    def __repr__(self):
        if self.bits == 0:
            return f"Number({self.format()})"
        return f"Number('{self.format()}', bits={self.bits})"


def ensure_finite(result, label, operands=()):
    """Raise NonFinite/Overflow errors for results that left the finite reals."""
    if result.is_finite():
        return result
    if label == "/" and len(operands) == 2 and operands[1].is_zero():
        raise E.NonFiniteError("Division by zero")
    if result.is_nan():
        raise E.NonFiniteError(f"'{label}' produced an undefined value (NaN)")
    raise E.NumberOverflowError(f"'{label}' overflowed to infinity")
