# MathEngine.py
"""
Core calculation engine.

Pipeline
--------
1) Tokenizer: converts a raw input string into a flat list of tokens (tokenizer.py).
2) Parser: shunting-yard conversion of the tokens into postfix (RPN) order.
3) Evaluator: stack evaluation of the RPN in fast or precise mode.
4) Formatter: renders the result and its rounding-error estimate.

Expressions that call deriv(), integrate() or simplify() take the symbolic
path instead: Cas.build_symbol -> Calculus.resolve_symbolic ->
Simplifier.simplify -> Cas.render.
"""

import dataclasses
import logging

import mpmath
from mpmath import workprec

from . import config_manager as config_manager
from . import ScientificEngine
from . import Cas
from . import Calculus
from . import Simplifier
from . import error as E
from .numeric import FLOAT_EPSILON, FLOAT_MAX, Number, check_precision, decimal_digits, ensure_finite
from .tokenizer import Op, TokenKind, tokenize

logger = logging.getLogger(__name__)


# -----------------------------
# Parser (shunting-yard)
# -----------------------------

def shunting_yard(tokens):
    """Convert infix tokens into postfix order.

    Function tokens in the output carry the number of arguments they were
    called with in `arity`. Unary minus is emitted as Op.NEG.
    """
    if not tokens:
        raise E.MalformedExpressionError("Empty expression.")

    output = []
    stack = []
    # One entry per open parenthesis: [is_call, completed argument count]
    groups = []
    expect_operand = True
    previous = None

    for token in tokens:
        kind = token.kind

        if kind in (TokenKind.NUMBER, TokenKind.VARIABLE):
            if not expect_operand:
                raise E.SyntaxError(f"Unexpected '{token.text}' at position {token.position}",
                                    position=token.position, char=token.text)
            output.append(token)
            expect_operand = False

        elif kind is TokenKind.FUNCTION:
            if not expect_operand:
                raise E.SyntaxError(f"Unexpected function '{token.text}' at position {token.position}",
                                    position=token.position, char=token.text)
            stack.append(token)

        elif kind is TokenKind.LEFT_PAREN:
            if not expect_operand:
                raise E.SyntaxError(f"Unexpected '(' at position {token.position}",
                                    position=token.position, char=token.text)
            is_call = previous is not None and previous.kind is TokenKind.FUNCTION
            groups.append([is_call, 0])
            stack.append(token)

        elif kind is TokenKind.RIGHT_PAREN:
            if not groups:
                raise E.UnmatchedParenthesisError("unbalanced parentheses",
                                                  position=token.position, char=token.text)
            is_call, arguments = groups.pop()
            if expect_operand:
                if previous.kind is TokenKind.LEFT_PAREN and is_call:
                    arguments = 0
                elif previous.kind is TokenKind.LEFT_PAREN:
                    raise E.SyntaxError(f"Empty parentheses at position {previous.position}",
                                        position=token.position, char=token.text)
                else:
                    raise E.MissingOperandError(f"Missing operand before ')' at position {token.position}")
            else:
                arguments += 1

            while stack[-1].kind is not TokenKind.LEFT_PAREN:
                output.append(stack.pop())
            stack.pop()

            if is_call:
                function = stack.pop()
                output.append(dataclasses.replace(function, arity=arguments))
            expect_operand = False

        elif kind is TokenKind.COMMA:
            if not groups or not groups[-1][0]:
                raise E.SyntaxError(f"',' outside of a function call at position {token.position}",
                                    position=token.position, char=token.text)
            if expect_operand:
                raise E.SyntaxError(f"Missing argument before ',' at position {token.position}",
                                    position=token.position, char=token.text)
            while stack[-1].kind is not TokenKind.LEFT_PAREN:
                output.append(stack.pop())
            groups[-1][1] += 1
            expect_operand = True

        elif kind is TokenKind.OPERATOR:
            op = token.op
            if expect_operand:
                if op is Op.SUB:
                    # Prefix operators never pop
                    stack.append(dataclasses.replace(token, op=Op.NEG))
                elif op is not Op.ADD:
                    raise E.SyntaxError(f"Unexpected operator '{token.text}' at position {token.position}",
                                        position=token.position, char=token.text)
                previous = token
                continue

            while stack and stack[-1].kind is TokenKind.OPERATOR:
                top = stack[-1].op
                if top.precedence > op.precedence or (
                        top.precedence == op.precedence and not op.right_assoc):
                    output.append(stack.pop())
                else:
                    break
            stack.append(token)
            expect_operand = True

        previous = token

    if expect_operand:
        raise E.MissingOperandError("Missing operand at the end of the expression.")

    while stack:
        token = stack.pop()
        if token.kind is TokenKind.LEFT_PAREN:
            raise E.UnmatchedParenthesisError("unbalanced parentheses",
                                              position=token.position, char=token.text)
        output.append(token)

    return output


# -----------------------------
# Evaluator
# -----------------------------

def _variable_value(name, variables, precision_bits):
    if not variables or name not in variables:
        raise E.UnknownVariableError(name)
    value = variables[name]
    if not isinstance(value, Number):
        value = Number(value)
    if precision_bits and not value.is_precise:
        value = value.to_precise(precision_bits)
    return value


def eval_rpn(rpn, precision_bits=0, variables=None):
    """Evaluate postfix tokens; returns a finite Number."""
    check_precision(precision_bits)
    stack = []

    for token in rpn:
        kind = token.kind

        if kind is TokenKind.NUMBER:
            try:
                stack.append(ScientificEngine.parse_literal(token.text, precision_bits))
            except E.NumberFormatError as e:
                e.position = token.position
                raise

        elif kind is TokenKind.VARIABLE:
            stack.append(_variable_value(token.text, variables, precision_bits))

        elif kind is TokenKind.OPERATOR:
            op = token.op
            if len(stack) < op.arity:
                raise E.MissingOperandError(f"Operator '{op.symbol}' is missing an operand.")
            operands = stack[-op.arity:]
            del stack[-op.arity:]
            stack.append(ensure_finite(op.apply(*operands), op.symbol, operands))

        elif kind is TokenKind.FUNCTION:
            ScientificEngine.check_arity(token.text, token.arity)
            if len(stack) < token.arity:
                raise E.MissingOperandError(f"Function '{token.text}' is missing an argument.")
            arguments = stack[len(stack) - token.arity:]
            del stack[len(stack) - token.arity:]
            result = ScientificEngine.apply(token.text, arguments)
            stack.append(ensure_finite(result, token.text, arguments))

        else:
            raise E.MalformedExpressionError(f"Unexpected '{token.text}' in postfix input.")

    if len(stack) != 1:
        raise E.MalformedExpressionError(f"Expression left {len(stack)} values instead of one.")
    return stack[0]


def evaluate_expression(expression, precision_bits=0, variables=None):
    """Tokenize, parse and evaluate a purely numeric expression."""
    return eval_rpn(shunting_yard(tokenize(expression)), precision_bits, variables)


# -----------------------------
# Error estimate / formatting
# -----------------------------

def count_operations(rpn):
    return sum(1 for token in rpn if token.kind in (TokenKind.OPERATOR, TokenKind.FUNCTION))


def estimate_error(result, operations, precision_bits=0):
    """Worst-case absolute rounding error: |result| * eps * max(1, operations).

    Precise results are bounded at their own width, so a value beyond the
    float range still gets a finite bound; the float returned saturates at
    the largest float.
    """
    bits = max(precision_bits, result.bits)
    steps = max(1, operations)
    if bits == 0:
        bound = abs(result.to_f64()) * FLOAT_EPSILON * steps
    else:
        with workprec(bits):
            bound = abs(result.to_precise(bits).value) * mpmath.ldexp(1, 1 - bits) * steps
        bound = Number._wrap(bound, bits).to_f64()
    return min(bound, FLOAT_MAX)


def format_result(number, precision_bits=0):
    if precision_bits == 0:
        digits = config_manager.load_setting_value("significant_digits") or None
        return number.format(digits)
    return number.format(decimal_digits(precision_bits))


# -----------------------------
# Public entry point
# -----------------------------

def calculate(problem, precision_bits=0):
    """Main API: returns (result text, error estimate or None)."""
    try:
        check_precision(precision_bits)
        tokens = tokenize(problem)

        if Calculus.is_symbolic(tokens):
            symbol = Cas.build_symbol(tokens, precision_bits)
            symbol = Simplifier.simplify(Calculus.resolve_symbolic(symbol))
            result = Cas.render(symbol)
            logger.debug("symbolic %r -> %s", problem, result)
            return result, None

        rpn = shunting_yard(tokens)
        logger.debug("RPN for %r: %s", problem, rpn)
        value = eval_rpn(rpn, precision_bits)
        estimate = estimate_error(value, count_operations(rpn), precision_bits)
        result = format_result(value, precision_bits)
        logger.debug("%r = %s (error <= %g, %d bits)", problem, result, estimate, precision_bits)
        return result, estimate

    # Re-raise our domain errors after attaching the source equation
    except E.MathError as e:
        e.equation = problem
        raise e
    # Convert stray arithmetic failures to our unified error type
    except (ArithmeticError, ValueError) as e:
        raise E.MathError(message=str(e).strip(), code="9999", equation=problem) from e


def test_main():
    """Simple REPL-like runner for manual testing of the engine."""
    print("Enter the problem: ")
    problem = input()
    print(calculate(problem))


if __name__ == "__main__":
    test_main()
