# Calculus.py
"""
Symbolic differentiation and integration.

differentiate() is total: every tree has a derivative, although functions
without a rule differentiate to 0 (logged as a warning).
integrate() is best-effort: outside its rule table it returns the
placeholder symbol*var and logs a warning. Use antiderivative() to find
out whether the result is exact.

resolve_symbolic() replaces the reserved calls deriv(), integrate() and
simplify() inside an expression tree by their results.
"""

import logging

from . import error as E
from .Cas import (Constant, Function, Operation, Variable, ONE, ZERO,
                  add, call, div, mul, neg, num, power, sub)
from .Simplifier import simplify
from .tokenizer import Op, TokenKind

logger = logging.getLogger(__name__)

SYMBOLIC_FUNCTIONS = ("deriv", "integrate", "simplify")
DEFAULT_VARIABLE = "x"


def _numeric_value(symbol):
    """The Number held by a constant (or a negated constant), else None."""
    if isinstance(symbol, Constant):
        return symbol.value
    if isinstance(symbol, Operation) and symbol.op is Op.NEG and isinstance(symbol.args[0], Constant):
        return -symbol.args[0].value
    return None


# -----------------------------
# Differentiation
# -----------------------------

def differentiate(symbol, var):
    if isinstance(symbol, Constant):
        return ZERO

    elif isinstance(symbol, Variable):
        return ONE if symbol.name == var else ZERO

    elif isinstance(symbol, Function):
        return _differentiate_function(symbol, var)

    op = symbol.op
    args = symbol.args

    if op in (Op.ADD, Op.SUB):
        return Operation(op, tuple(differentiate(arg, var) for arg in args))

    elif op is Op.NEG:
        return neg(differentiate(args[0], var))

    elif op is Op.MUL:
        # N-ary products are reduced to binary pairs: a*(b*c*...)
        a = args[0]
        b = args[1] if len(args) == 2 else mul(*args[1:])
        return add(mul(differentiate(a, var), b), mul(a, differentiate(b, var)))

    elif op is Op.DIV:
        a, b = args
        return div(sub(mul(differentiate(a, var), b), mul(a, differentiate(b, var))),
                   power(b, num(2)))

    # Op.POW
    a, b = args
    if _numeric_value(b) is not None:
        return mul(b, power(a, sub(b, ONE)), differentiate(a, var))
    if _numeric_value(a) is not None:
        return mul(power(a, b), call("log", a), differentiate(b, var))
    return mul(power(a, b),
               add(div(mul(b, differentiate(a, var)), a),
                   mul(call("log", a), differentiate(b, var))))


def _differentiate_function(symbol, var):
    name = symbol.name
    args = symbol.args

    if name == "log" and len(args) == 2:
        # log(u, base) = log(u) / log(base)
        u, base = args
        return differentiate(div(call("log", u), call("log", base)), var)

    if len(args) != 1:
        logger.warning("No derivative rule for %s with %d arguments; using 0", name, len(args))
        return ZERO

    u = args[0]
    du = differentiate(u, var)

    if name == "sin":
        return mul(call("cos", u), du)
    elif name == "cos":
        return mul(neg(call("sin", u)), du)
    elif name == "exp":
        return mul(call("exp", u), du)
    elif name == "log":
        return div(du, u)
    elif name == "sqrt":
        return div(du, mul(num(2), call("sqrt", u)))
    elif name == "tan":
        return div(du, power(call("cos", u), num(2)))

    logger.warning("No derivative rule for function '%s'; treating it as 0", name)
    return ZERO


# -----------------------------
# Integration
# -----------------------------

def antiderivative(symbol, var):
    """Return (antiderivative, exact). exact is False when the placeholder was used."""
    variable = Variable(var)

    if not symbol.depends_on(var):
        return mul(symbol, variable), True

    if isinstance(symbol, Variable):
        return div(power(variable, num(2)), num(2)), True

    if isinstance(symbol, Function):
        if len(symbol.args) == 1 and symbol.args[0] == variable:
            if symbol.name == "sin":
                return neg(call("cos", variable)), True
            elif symbol.name == "cos":
                return call("sin", variable), True
            elif symbol.name == "exp":
                return call("exp", variable), True
            elif symbol.name == "log":
                return sub(mul(variable, call("log", variable)), variable), True
        return _placeholder(symbol, var)

    op = symbol.op
    args = symbol.args

    if op in (Op.ADD, Op.SUB):
        parts = [antiderivative(arg, var) for arg in args]
        return Operation(op, tuple(part for part, _ in parts)), all(exact for _, exact in parts)

    elif op is Op.NEG:
        inner, exact = antiderivative(args[0], var)
        return neg(inner), exact

    elif op is Op.MUL:
        dependent = [arg for arg in args if arg.depends_on(var)]
        if len(dependent) == 1:
            factors = [arg for arg in args if arg is not dependent[0]]
            inner, exact = antiderivative(dependent[0], var)
            return mul(*factors, inner), exact

    elif op is Op.DIV:
        if not args[1].depends_on(var):
            inner, exact = antiderivative(args[0], var)
            return div(inner, args[1]), exact

    elif op is Op.POW:
        exponent = _numeric_value(args[1])
        if args[0] == variable and exponent is not None:
            if exponent == -1:
                return call("log", variable), True
            raised = num(exponent + 1)
            return div(power(variable, raised), raised), True

    return _placeholder(symbol, var)


def _placeholder(symbol, var):
    logger.warning("No integration rule applies; returning placeholder (expression)*%s", var)
    return mul(symbol, Variable(var)), False


def integrate(symbol, var):
    result, _ = antiderivative(symbol, var)
    return result


# -----------------------------
# deriv() / integrate() / simplify() calls
# -----------------------------

def is_symbolic(tokens):
    return any(token.kind is TokenKind.FUNCTION and token.text in SYMBOLIC_FUNCTIONS for token in tokens)


def _target(name, args):
    """Split the arguments of deriv/integrate into (expression, variable name)."""
    if not 1 <= len(args) <= 2:
        raise E.WrongArityError(name, "1-2", len(args))

    expression = args[0]
    if len(args) == 2:
        if not isinstance(args[1], Variable):
            raise E.SymbolicError(f"The second argument of {name}() must be a variable name.")
        return expression, args[1].name

    free = expression.free_variables()
    if len(free) == 1:
        return expression, next(iter(free))
    return expression, DEFAULT_VARIABLE


def resolve_symbolic(symbol):
    """Evaluate reserved calls bottom-up; other nodes are rebuilt unchanged.

    Each result is simplified before an enclosing call sees it, so
    deriv(deriv(x^3)) differentiates 3*x^2 rather than 3*x^(3-1)*1.
    """
    if isinstance(symbol, Operation):
        return Operation(symbol.op, tuple(resolve_symbolic(arg) for arg in symbol.args))
    if not isinstance(symbol, Function):
        return symbol

    args = tuple(resolve_symbolic(arg) for arg in symbol.args)

    if symbol.name == "deriv":
        expression, var = _target(symbol.name, args)
        logger.debug("d/d%s %s", var, expression)
        return simplify(differentiate(expression, var))

    elif symbol.name == "integrate":
        expression, var = _target(symbol.name, args)
        logger.debug("integral of %s d%s", expression, var)
        return simplify(integrate(expression, var))

    elif symbol.name == "simplify":
        if len(args) != 1:
            raise E.WrongArityError(symbol.name, "1", len(args))
        return simplify(args[0])

    return Function(symbol.name, args)
