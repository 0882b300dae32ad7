"""RPN evaluation and the calculate() entry point."""

import math
import sys

import pytest

from symcalc import MathEngine
from symcalc import error as E
from symcalc.Cas import build_symbol
from symcalc.MathEngine import calculate, estimate_error, eval_rpn, evaluate_expression, shunting_yard
from symcalc.Simplifier import simplify
from symcalc.numeric import Number
from symcalc.tokenizer import tokenize


def test_basic_arithmetic():
    rpn = shunting_yard(tokenize("2+3*4"))
    result = eval_rpn(rpn, precision_bits=0)
    assert result == 14.0
    assert not result.is_precise


@pytest.mark.parametrize("source, expected", [
    ("sin(pi/2) + 3^2", 10.0),
    ("2^3^2", 512.0),
    ("(2+3)*4", 20.0),
    ("3-(-2)", 5.0),
    ("-(2+3)", -5.0),
    ("log(8,2)", 3.0),
    ("log(e)", 1.0),
    ("sqrt(16)+abs(-3)", 7.0),
    ("exp(0)+cos(0)", 2.0),
    ("phi^2-phi", 1.0),
    ("10/4", 2.5),
])
def test_fast_values(source, expected):
    assert evaluate_expression(source).to_f64() == pytest.approx(expected, abs=1e-9)


def test_variables():
    assert evaluate_expression("x^2+1", variables={"x": 3}) == 10
    assert evaluate_expression("a*b", variables={"a": Number(2), "b": 2.5}) == 5
    with pytest.raises(E.UnknownVariableError) as excinfo:
        evaluate_expression("x+y", variables={"x": 1})
    assert excinfo.value.name == "y"


def test_unknown_function_and_arity():
    with pytest.raises(E.UnknownFunctionError):
        evaluate_expression("foo(1)")
    with pytest.raises(E.WrongArityError) as excinfo:
        evaluate_expression("sin(1,2)")
    assert excinfo.value.got == 2
    with pytest.raises(E.WrongArityError):
        evaluate_expression("log()")


def test_division_by_zero_is_non_finite():
    with pytest.raises(E.NonFiniteError, match="Division by zero"):
        evaluate_expression("1/0")
    with pytest.raises(E.NonFiniteError):
        evaluate_expression("0/0")


def test_domain_errors_are_non_finite():
    with pytest.raises(E.NonFiniteError):
        evaluate_expression("sqrt(-1)")
    with pytest.raises(E.NonFiniteError):
        evaluate_expression("log(-1)")


def test_overflow():
    with pytest.raises(E.NumberOverflowError):
        evaluate_expression("10^400")
    with pytest.raises(E.NumberOverflowError):
        evaluate_expression("exp(1000)")


def test_final_stack_must_hold_one_value():
    rpn = tokenize("2 3")
    with pytest.raises(E.MalformedExpressionError):
        eval_rpn(rpn)


def test_too_few_operands():
    rpn = tokenize("2 +")
    with pytest.raises(E.MissingOperandError):
        eval_rpn([rpn[0], rpn[1]])


def test_precise_mode():
    result = evaluate_expression("1/3", precision_bits=256)
    assert result.bits == 256
    assert result.format(50).startswith("0.333333333333333333333333333333333333333333333333")
    # Precise mode survives where fast mode overflows
    assert evaluate_expression("10^400", precision_bits=128).is_finite()


def test_precise_division_by_zero():
    with pytest.raises(E.NonFiniteError, match="Division by zero"):
        evaluate_expression("1/0", precision_bits=128)


@pytest.mark.parametrize("source", [
    "2+3*4",
    "1/3+1/7",
    "sin(pi/2)+3^2",
    "sqrt(2)*sqrt(3)",
    "exp(1.5)-log(10,3)",
    "(1.1-0.9)/0.07",
    "2^0.5^3",
    "atan(1)*4-pi",
    "tanh(0.3)+cosh(1)/sinh(2)",
    "-(3.7*2.1)^2",
])
def test_fast_and_precise_agree(source):
    fast = evaluate_expression(source).to_f64()
    precise = evaluate_expression(source, precision_bits=256).to_f64()
    assert fast == pytest.approx(precise, rel=1e-10, abs=1e-12)


def test_calculate_returns_text_and_estimate():
    result, estimate = calculate("2+3*4")
    assert result == "14"
    assert estimate == pytest.approx(14 * sys.float_info.epsilon * 2)


def test_calculate_uses_significant_digits_setting(isolated_config):
    assert calculate("1/3")[0] == "0.333333333333"
    isolated_config.write_text('{"significant_digits": 4}', encoding="utf-8")
    assert calculate("1/3")[0] == "0.3333"


def test_calculate_precise_estimate_is_tiny():
    result, estimate = calculate("1/3", precision_bits=128)
    assert result.startswith("0.3333333333333333333333")
    assert 0 < estimate < 1e-35


def test_calculate_attaches_equation_to_errors():
    with pytest.raises(E.NonFiniteError) as excinfo:
        calculate("1/0")
    assert excinfo.value.equation == "1/0"
    assert excinfo.value.describe().startswith("Error 3003")
    assert excinfo.value.category == "Calculator Error"


def test_calculate_rejects_unavailable_precision():
    with pytest.raises(E.PrecisionUnavailableError) as excinfo:
        calculate("1+1", precision_bits=-5)
    assert excinfo.value.equation == "1+1"


def test_calculate_wraps_unexpected_arithmetic_errors(monkeypatch):
    def broken(*args, **kwargs):
        raise ZeroDivisionError("boom")

    monkeypatch.setattr(MathEngine, "eval_rpn", broken)
    with pytest.raises(E.MathError) as excinfo:
        calculate("1+1")
    assert excinfo.value.code == "9999"
    assert excinfo.value.equation == "1+1"


def test_calculate_symbolic_path():
    assert calculate("deriv(x^3+2*x, x)") == ("3*x^2+2", None)
    assert calculate("integrate(2*x, x)") == ("x^2", None)
    assert calculate("simplify(x+x)") == ("2*x", None)


def test_named_constants_render_by_name():
    assert calculate("pi")[0] == MathEngine.format_result(Number(math.pi))
    assert calculate("simplify(pi)")[0] == "pi"


def test_precise_symbolic_result_reads_back():
    text, _ = calculate("simplify(2/3)", precision_bits=128)
    assert build_symbol(text, 128) == simplify(build_symbol("2/3", 128))
    # Display of plain results stays at the digits the width carries
    assert calculate("2/3", precision_bits=128)[0] == "0." + "6" * 37 + "7"


def test_estimate_is_computed_at_the_result_width():
    third = Number(1, 128) / Number(3, 128)
    assert estimate_error(third, 2, 128) == pytest.approx(2 / 3 * 2.0 ** -127)
    huge = Number.parse("1e400", 128)
    assert estimate_error(huge, 1, 128) == sys.float_info.max
    assert math.isfinite(estimate_error(Number.parse("1e300", 128), 1, 128))
