# ScientificEngine
import logging
import math

import mpmath
from mpmath import mpf, workprec

from . import error as E
from .numeric import Number, _flush

logger = logging.getLogger(__name__)


PHI = (1 + math.sqrt(5)) / 2

# name -> (fast value, mpmath constant)
CONSTANTS = {
    "pi": (math.pi, mpmath.pi),
    "π": (math.pi, mpmath.pi),
    "e": (math.e, mpmath.e),
    "phi": (PHI, mpmath.phi),
}


def isConstant(name):
    return name in CONSTANTS


def constant(name, bits=0):
    """Value of a named constant in the requested mode."""
    fast, precise = CONSTANTS[name]
    if bits == 0:
        return Number(fast)
    with workprec(bits):
        return Number._wrap(mpf(precise), bits)


def parse_literal(raw, bits=0):
    """Turn the raw text of a NUMBER token into a Number."""
    if isConstant(raw):
        return constant(raw, bits)
    return Number.parse(raw, bits)


def _fast_log(x, base=None):
    if base is None:
        return math.log(x)
    return math.log(x, base)


def _precise_log(x, base=None):
    if base is None:
        return mpmath.log(x)
    return mpmath.log(x, base)


# name -> (min arity, max arity, fast implementation, precise implementation)
FUNCTIONS = {
    "sin": (1, 1, math.sin, mpmath.sin),
    "cos": (1, 1, math.cos, mpmath.cos),
    "tan": (1, 1, math.tan, mpmath.tan),
    "asin": (1, 1, math.asin, mpmath.asin),
    "acos": (1, 1, math.acos, mpmath.acos),
    "atan": (1, 1, math.atan, mpmath.atan),
    "sinh": (1, 1, math.sinh, mpmath.sinh),
    "cosh": (1, 1, math.cosh, mpmath.cosh),
    "tanh": (1, 1, math.tanh, mpmath.tanh),
    "exp": (1, 1, math.exp, mpmath.exp),
    "log": (1, 2, _fast_log, _precise_log),
    "sqrt": (1, 1, math.sqrt, mpmath.sqrt),
    "abs": (1, 1, abs, mpmath.fabs),
}


def isFunction(name):
    return name in FUNCTIONS


def check_arity(name, got):
    if not isFunction(name):
        raise E.UnknownFunctionError(name)
    low, high, _, _ = FUNCTIONS[name]
    if not low <= got <= high:
        expected = str(low) if low == high else f"{low}-{high}"
        raise E.WrongArityError(name, expected, got)


def apply(name, args):
    """Apply a scientific function to Number arguments.

    Domain errors become NaN and overflows become infinity; the caller
    decides whether a non-finite result is an error.
    """
    check_arity(name, len(args))
    _, _, fast_fn, precise_fn = FUNCTIONS[name]
    bits = max(arg.bits for arg in args)

    if bits == 0:
        try:
            result = fast_fn(*(arg.value for arg in args))
        except ValueError:
            result = math.nan
        except ZeroDivisionError:
            # log(x, 1)
            result = math.inf
        except OverflowError:
            result = math.inf
        return Number._wrap(_flush(float(result)), 0)

    with workprec(bits):
        values = [arg.to_precise(bits).value for arg in args]
        try:
            result = precise_fn(*values)
        except ZeroDivisionError:
            result = mpmath.inf
        if isinstance(result, mpmath.mpc):
            logger.debug("%s%s left the real line", name, tuple(values))
            result = mpmath.nan
        return Number._wrap(mpf(result), bits)
