# Simplifier.py
"""
Normalizing rewrites for Symbol trees.

simplify() works bottom-up and repeats whole passes until the tree stops
changing, so simplify(simplify(s)) == simplify(s).

Normal form produced here:
- SUB is gone: a - b becomes a + (-b).
- ADD and MUL are flat; constants are folded into one number, which is the
  last term of a sum and the leading coefficient of a product.
- Negation sits on constants and coefficients, not on sums or products.
- Division by a constant is kept only at the top of a product: (c*x*y)/d.
"""

import logging

from .Cas import Constant, Function, Operation, ONE, ZERO, add, div, mul, neg, power
from .numeric import Number
from .tokenizer import Op

logger = logging.getLogger(__name__)

MAX_PASSES = 20


def simplify(symbol):
    for _ in range(MAX_PASSES):
        result = _simplify_once(symbol)
        if result == symbol:
            return result
        symbol = result
    logger.warning("simplify did not settle after %d passes", MAX_PASSES)
    return symbol


def _simplify_once(symbol):
    if isinstance(symbol, Function):
        return Function(symbol.name, tuple(_simplify_once(arg) for arg in symbol.args))
    if not isinstance(symbol, Operation):
        return symbol

    args = [_simplify_once(arg) for arg in symbol.args]
    op = symbol.op

    if op is Op.NEG:
        return negate(args[0])
    elif op is Op.SUB:
        return _simplify_add([args[0], negate(args[1])])
    elif op is Op.ADD:
        return _simplify_add(args)
    elif op is Op.MUL:
        return _simplify_mul(args)
    elif op is Op.DIV:
        return _simplify_div(*args)
    return _simplify_pow(*args)


def _folded(value):
    """A Constant for `value`, or None when folding would leave the finite reals."""
    if value.is_finite():
        return Constant(value)
    return None


# -----------------------------
# Negation
# -----------------------------

def negate(symbol):
    """-symbol, pushed as far down as it goes."""
    if isinstance(symbol, Constant):
        return Constant(-symbol.value)
    if isinstance(symbol, Operation):
        if symbol.op is Op.NEG:
            return symbol.args[0]
        if symbol.op is Op.MUL:
            return _simplify_mul([Constant(Number(-1)), *symbol.args])
        if symbol.op is Op.ADD:
            return _simplify_add([negate(term) for term in symbol.args])
        if symbol.op is Op.DIV:
            return div(negate(symbol.args[0]), symbol.args[1])
    return neg(symbol)


# -----------------------------
# Sums
# -----------------------------

def _split_coefficient(term):
    """Return (coefficient, core) with term == coefficient * core."""
    if isinstance(term, Operation):
        if term.op is Op.MUL and isinstance(term.args[0], Constant):
            rest = term.args[1:]
            return term.args[0].value, rest[0] if len(rest) == 1 else mul(*rest)
        if term.op is Op.NEG:
            coefficient, core = _split_coefficient(term.args[0])
            return -coefficient, core
    return Number(1), term


def _scale(coefficient, core):
    if coefficient == 1:
        return core
    return _simplify_mul([Constant(coefficient), core])


def _simplify_add(args):
    terms = []
    for arg in args:
        if isinstance(arg, Operation) and arg.op is Op.ADD:
            terms.extend(arg.args)
        else:
            terms.append(arg)

    constants = []
    # Insertion ordered: first occurrence decides the position of a group
    groups = {}
    for term in terms:
        if isinstance(term, Constant):
            constants.append(term.value)
            continue
        coefficient, core = _split_coefficient(term)
        if core in groups:
            groups[core] = groups[core] + coefficient
        else:
            groups[core] = coefficient

    result = [_scale(coefficient, core) for core, coefficient in groups.items() if not coefficient.is_zero()]

    if constants:
        total = constants[0]
        for value in constants[1:]:
            total = total + value
        if total.is_finite():
            if not total.is_zero():
                result.append(Constant(total))
        else:
            result.extend(Constant(value) for value in constants)

    if not result:
        return ZERO
    if len(result) == 1:
        return result[0]
    return add(*result)


# -----------------------------
# Products
# -----------------------------

def _simplify_mul(args):
    coefficient = Number(1)
    denominator = Number(1)
    factors = []

    pending = list(args)
    while pending:
        factor = pending.pop(0)
        if isinstance(factor, Constant):
            coefficient = coefficient * factor.value
        elif isinstance(factor, Operation) and factor.op is Op.MUL:
            pending[0:0] = factor.args
        elif isinstance(factor, Operation) and factor.op is Op.NEG:
            coefficient = -coefficient
            pending.insert(0, factor.args[0])
        elif (isinstance(factor, Operation) and factor.op is Op.DIV
              and isinstance(factor.args[1], Constant) and not factor.args[1].value.is_zero()):
            denominator = denominator * factor.args[1].value
            pending.insert(0, factor.args[0])
        else:
            factors.append(factor)

    if not (coefficient.is_finite() and denominator.is_finite()):
        return mul(*args) if len(args) > 1 else args[0]

    if coefficient.is_zero():
        return ZERO

    # Combine equal bases: x*x -> x^2, x^2*x -> x^3
    exponents = {}
    for factor in factors:
        if isinstance(factor, Operation) and factor.op is Op.POW and isinstance(factor.args[1], Constant):
            base, exponent = factor.args[0], factor.args[1].value
        else:
            base, exponent = factor, Number(1)
        if base in exponents:
            exponents[base] = exponents[base] + exponent
        else:
            exponents[base] = exponent

    factors = []
    for base, exponent in exponents.items():
        if exponent.is_zero():
            continue
        if exponent == 1:
            factors.append(base)
        else:
            factors.append(power(base, Constant(exponent)))

    if denominator != 1:
        ratio = coefficient / denominator
        inverse = denominator / coefficient
        if ratio.is_integer():
            coefficient, denominator = ratio, Number(1)
        elif inverse.is_integer():
            sign = Number(-1) if inverse < 0 else Number(1)
            coefficient, denominator = sign, abs(inverse)

    if not factors:
        return _folded(coefficient / denominator) or div(Constant(coefficient), Constant(denominator))

    body = factors[0] if len(factors) == 1 else mul(*factors)
    if coefficient == 1:
        product = body
    elif coefficient == -1:
        product = neg(body)
    else:
        product = mul(Constant(coefficient), *factors)

    if denominator != 1:
        return div(product, Constant(denominator))
    return product


# -----------------------------
# Quotients and powers
# -----------------------------

def _simplify_div(numerator, denominator):
    if isinstance(denominator, Constant):
        if isinstance(numerator, Constant):
            return _folded(numerator.value / denominator.value) or div(numerator, denominator)
        if denominator.value == 1:
            return numerator
        if denominator.value == -1:
            return negate(numerator)
        if not denominator.value.is_zero():
            # Normalized through the product rules: (c*x)/d
            return _simplify_mul([div(numerator, denominator)])
        return div(numerator, denominator)

    if isinstance(numerator, Constant) and numerator.value.is_zero():
        return ZERO
    return div(numerator, denominator)


def _simplify_pow(base, exponent):
    if isinstance(base, Constant) and isinstance(exponent, Constant):
        return _folded(base.value ** exponent.value) or power(base, exponent)
    if isinstance(exponent, Constant):
        if exponent.value.is_zero():
            return ONE
        if exponent.value == 1:
            return base
    if isinstance(base, Constant) and base.value == 1:
        return ONE
    return power(base, exponent)
