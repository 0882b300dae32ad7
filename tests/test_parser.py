"""Shunting-yard parser: postfix order, arity bookkeeping and error reporting."""

import pytest

from symcalc import error as E
from symcalc.MathEngine import shunting_yard
from symcalc.tokenizer import Op, TokenKind, tokenize


def _rpn(source):
    return shunting_yard(tokenize(source))


def _rpn_texts(source):
    return [token.text for token in _rpn(source)]


def test_precedence():
    assert _rpn_texts("2+3*4") == ["2", "3", "4", "*", "+"]
    assert _rpn_texts("(2+3)*4") == ["2", "3", "+", "4", "*"]


def test_left_associativity():
    assert _rpn_texts("8-3-2") == ["8", "3", "-", "2", "-"]
    assert _rpn_texts("8/4/2") == ["8", "4", "/", "2", "/"]


def test_power_is_right_associative():
    assert _rpn_texts("2^3^2") == ["2", "3", "2", "^", "^"]


def test_unary_minus_becomes_neg():
    rpn = _rpn("-x^2")
    assert [t.text for t in rpn] == ["x", "-", "2", "^"]
    assert rpn[1].op is Op.NEG
    assert rpn[3].op is Op.POW

    rpn = _rpn("2*-x")
    assert [t.op for t in rpn if t.kind is TokenKind.OPERATOR] == [Op.NEG, Op.MUL]


def test_double_negation_and_unary_plus():
    rpn = _rpn("--x")
    assert [t.op for t in rpn if t.kind is TokenKind.OPERATOR] == [Op.NEG, Op.NEG]
    assert _rpn_texts("+x") == ["x"]


def test_function_arity_is_recorded():
    rpn = _rpn("log(8,2)+sin(x)")
    functions = [t for t in rpn if t.kind is TokenKind.FUNCTION]
    assert [(f.text, f.arity) for f in functions] == [("log", 2), ("sin", 1)]
    assert _rpn_texts("log(8,2)") == ["8", "2", "log"]


def test_nested_calls():
    rpn = _rpn("max(sin(x), cos(1+y), z)")
    functions = [(t.text, t.arity) for t in rpn if t.kind is TokenKind.FUNCTION]
    assert functions == [("sin", 1), ("cos", 1), ("max", 3)]


def test_empty_call_has_zero_arity():
    rpn = _rpn("f()")
    assert rpn[0].kind is TokenKind.FUNCTION and rpn[0].arity == 0


def test_unmatched_parenthesis():
    with pytest.raises(E.UnmatchedParenthesisError):
        _rpn("(1+2")
    with pytest.raises(E.UnmatchedParenthesisError):
        _rpn("1+2)")
    with pytest.raises(E.UnmatchedParenthesisError):
        _rpn("sin(1")


def test_unmatched_parenthesis_is_a_syntax_error():
    with pytest.raises(E.SyntaxError, match="unbalanced parentheses"):
        _rpn("((1)")


def test_operator_in_operand_position():
    with pytest.raises(E.SyntaxError) as excinfo:
        _rpn("2 + * 3")
    assert excinfo.value.position == 4
    assert excinfo.value.char == "*"


@pytest.mark.parametrize("source", ["2 3", "x y", "2(3)", "2 sin(1)", "1,2", "()", "f(1,,2)", "f(,1)"])
def test_syntax_errors(source):
    with pytest.raises(E.SyntaxError):
        _rpn(source)


@pytest.mark.parametrize("source", ["2+", "-", "(2*)", "f(1,)"])
def test_missing_operand(source):
    with pytest.raises(E.MissingOperandError):
        _rpn(source)


def test_empty_input_is_malformed():
    with pytest.raises(E.MalformedExpressionError):
        shunting_yard([])
    with pytest.raises(E.MalformedExpressionError):
        _rpn("   ")
