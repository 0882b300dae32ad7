# Cas.py
"""
Symbolic expression trees.

- AST node types (Constant, Variable, Function, Operation), all immutable.
- build_symbol: recursive-descent parser from tokens to a tree.
- render: tree back to text that build_symbol reads again.
"""

import functools
from dataclasses import dataclass
from typing import Tuple

from . import ScientificEngine
from . import error as E
from .numeric import Number, ensure_finite
from .tokenizer import Op, TokenKind, tokenize

ATOM_PRECEDENCE = 5


# -----------------------------
# AST node types
# -----------------------------

class Symbol:
    """Base class of all tree nodes."""

    __slots__ = ()

    @property
    def precedence(self):
        return ATOM_PRECEDENCE

    def evaluate(self, variables=None, precision_bits=0):
        raise NotImplementedError

    def free_variables(self):
        return frozenset()

    def depends_on(self, var):
        return var in self.free_variables()

    def __str__(self):
        return render(self)


@dataclass(frozen=True)
class Constant(Symbol):
    value: Number

    def __post_init__(self):
        if not isinstance(self.value, Number):
            object.__setattr__(self, "value", Number(self.value))

    @property
    def precedence(self):
        # A leading minus binds like negation when the text is read back
        if self.value < 0:
            return Op.NEG.precedence
        return ATOM_PRECEDENCE

    def evaluate(self, variables=None, precision_bits=0):
        if precision_bits and not self.value.is_precise:
            return self.value.to_precise(precision_bits)
        return self.value

    def __repr__(self):
        return f"Constant({self.value.format()})"


@dataclass(frozen=True)
class Variable(Symbol):
    name: str

    def evaluate(self, variables=None, precision_bits=0):
        if not variables or self.name not in variables:
            raise E.UnknownVariableError(self.name)
        value = variables[self.name]
        if not isinstance(value, Number):
            value = Number(value)
        if precision_bits and not value.is_precise:
            value = value.to_precise(precision_bits)
        return value

    def free_variables(self):
        return frozenset((self.name,))

    def __repr__(self):
        return f"Variable('{self.name}')"


@dataclass(frozen=True)
class Function(Symbol):
    name: str
    args: Tuple[Symbol, ...]

    def __post_init__(self):
        object.__setattr__(self, "args", tuple(self.args))

    def evaluate(self, variables=None, precision_bits=0):
        arguments = [arg.evaluate(variables, precision_bits) for arg in self.args]
        return ensure_finite(ScientificEngine.apply(self.name, arguments), self.name, arguments)

    def free_variables(self):
        return frozenset().union(*(arg.free_variables() for arg in self.args))

    def __repr__(self):
        return f"Function('{self.name}', {list(self.args)})"


@dataclass(frozen=True)
class Operation(Symbol):
    """An operator node; ADD and MUL may hold any number (>= 2) of children."""

    op: Op
    args: Tuple[Symbol, ...]

    def __post_init__(self):
        object.__setattr__(self, "args", tuple(self.args))
        count = len(self.args)
        if self.op is Op.NEG:
            valid = count == 1
        elif self.op in (Op.ADD, Op.MUL):
            valid = count >= 2
        else:
            valid = count == 2
        if not valid:
            raise ValueError(f"{self.op.name} cannot take {count} operand(s)")

    @property
    def precedence(self):
        return self.op.precedence

    def evaluate(self, variables=None, precision_bits=0):
        values = [arg.evaluate(variables, precision_bits) for arg in self.args]
        if self.op is Op.NEG:
            return -values[0]
        result = functools.reduce(self.op.apply, values)
        return ensure_finite(result, self.op.symbol, values)

    def free_variables(self):
        return frozenset().union(*(arg.free_variables() for arg in self.args))

    def __repr__(self):
        return f"Operation({self.op.name}, {list(self.args)})"


# -----------------------------
# Constructors
# -----------------------------

def num(value, bits=0):
    if isinstance(value, Number):
        return Constant(value)
    return Constant(Number(value, bits))


ZERO = num(0)
ONE = num(1)


def add(*args):
    return Operation(Op.ADD, args)


def sub(a, b):
    return Operation(Op.SUB, (a, b))


def mul(*args):
    return Operation(Op.MUL, args)


def div(a, b):
    return Operation(Op.DIV, (a, b))


def power(a, b):
    return Operation(Op.POW, (a, b))


def neg(a):
    return Operation(Op.NEG, (a,))


def call(name, *args):
    return Function(name, args)


# -----------------------------
# Builder (recursive descent)
# -----------------------------

def _unexpected(token):
    return E.SyntaxError(f"Unexpected '{token.text}' at position {token.position}",
                         position=token.position, char=token.text)


def build_symbol(source_or_tokens, precision_bits=0):
    """Parse text (or tokens) into a Symbol tree.

    Implements precedence via nested functions: factor -> unary -> power -> term -> sum.
    Raises the same error kinds as MathEngine.shunting_yard for the same input.
    """
    if isinstance(source_or_tokens, str):
        tokens = tokenize(source_or_tokens)
    else:
        tokens = list(source_or_tokens)

    if not tokens:
        raise E.MalformedExpressionError("Empty expression.")

    def peek(*kinds):
        return tokens and tokens[0].kind in kinds

    def peek_op(*ops):
        return tokens and tokens[0].kind is TokenKind.OPERATOR and tokens[0].op in ops

    def parse_factor():
        """Numbers, variables, sub-expressions in '()', and function calls."""
        if not tokens:
            raise E.MissingOperandError("Missing operand at the end of the expression.")
        token = tokens.pop(0)

        if token.kind is TokenKind.NUMBER:
            try:
                return Constant(ScientificEngine.parse_literal(token.text, precision_bits))
            except E.NumberFormatError as e:
                e.position = token.position
                raise

        elif token.kind is TokenKind.VARIABLE:
            return Variable(token.text)

        elif token.kind is TokenKind.LEFT_PAREN:
            if peek(TokenKind.RIGHT_PAREN):
                raise E.SyntaxError(f"Empty parentheses at position {token.position}",
                                    position=tokens[0].position, char=tokens[0].text)
            inner = parse_sum()
            if not tokens:
                raise E.UnmatchedParenthesisError("unbalanced parentheses",
                                                  position=token.position, char=token.text)
            closing = tokens.pop(0)
            if closing.kind is not TokenKind.RIGHT_PAREN:
                raise _unexpected(closing)
            return inner

        elif token.kind is TokenKind.FUNCTION:
            opening = tokens.pop(0)
            arguments = []
            if peek(TokenKind.RIGHT_PAREN):
                tokens.pop(0)
                return Function(token.text, ())
            while True:
                arguments.append(parse_sum())
                if not tokens:
                    raise E.UnmatchedParenthesisError("unbalanced parentheses",
                                                      position=opening.position, char=opening.text)
                separator = tokens.pop(0)
                if separator.kind is TokenKind.RIGHT_PAREN:
                    return Function(token.text, tuple(arguments))
                if separator.kind is not TokenKind.COMMA:
                    raise _unexpected(separator)

        elif token.kind is TokenKind.RIGHT_PAREN:
            raise E.MissingOperandError(f"Missing operand before ')' at position {token.position}")

        raise _unexpected(token)

    def parse_unary():
        """Leading '-' becomes NEG, leading '+' is ignored."""
        if peek_op(Op.SUB):
            tokens.pop(0)
            return neg(parse_unary())
        if peek_op(Op.ADD):
            tokens.pop(0)
            return parse_unary()
        return parse_factor()

    def parse_power():
        """Exponentiation '^', right associative."""
        base = parse_unary()
        if peek_op(Op.POW):
            tokens.pop(0)
            return power(base, parse_power())
        return base

    def parse_term():
        """Multiplication and division."""
        tree = parse_power()
        while peek_op(Op.MUL, Op.DIV):
            op = tokens.pop(0).op
            tree = Operation(op, (tree, parse_power()))
        return tree

    def parse_sum():
        """Addition and subtraction."""
        tree = parse_term()
        while peek_op(Op.ADD, Op.SUB):
            op = tokens.pop(0).op
            tree = Operation(op, (tree, parse_term()))
        return tree

    tree = parse_sum()
    if tokens:
        token = tokens[0]
        if token.kind is TokenKind.RIGHT_PAREN:
            raise E.UnmatchedParenthesisError("unbalanced parentheses",
                                              position=token.position, char=token.text)
        raise _unexpected(token)
    return tree


# -----------------------------
# Renderer
# -----------------------------

NAMED_VALUES = ("pi", "e", "phi")


def _render_number(value, digits=None):
    # Compared at the value's own width so the name reads back to the same Number
    for name in NAMED_VALUES:
        named = ScientificEngine.constant(name, value.bits)
        if value == named:
            return name
        if value == -named:
            return "-" + name
    return value.format(digits)


def _split_sign(term):
    """Return (negative, magnitude) so that term == -magnitude when negative."""
    if isinstance(term, Constant) and term.value < 0:
        return True, Constant(-term.value)

    if isinstance(term, Operation):
        if term.op is Op.NEG:
            return True, term.args[0]

        if term.op is Op.MUL and isinstance(term.args[0], Constant) and term.args[0].value < 0:
            coefficient = -term.args[0].value
            rest = term.args[1:]
            if coefficient == 1:
                return True, rest[0] if len(rest) == 1 else mul(*rest)
            return True, mul(Constant(coefficient), *rest)

        if term.op is Op.DIV:
            negative, numerator = _split_sign(term.args[0])
            if negative:
                return True, div(numerator, term.args[1])

    return False, term


def render(symbol, digits=None):
    """Render a tree as compact text without spaces."""

    def child(node, minimum, strict=True):
        """Render `node`, parenthesized when it binds weaker than `minimum`."""
        text = render(node, digits)
        weaker = node.precedence < minimum if strict else node.precedence <= minimum
        return f"({text})" if weaker else text

    if isinstance(symbol, Constant):
        return _render_number(symbol.value, digits)

    elif isinstance(symbol, Variable):
        return symbol.name

    elif isinstance(symbol, Function):
        return f"{symbol.name}({','.join(render(arg, digits) for arg in symbol.args)})"

    op = symbol.op
    args = symbol.args

    if op is Op.NEG:
        return "-" + child(args[0], op.precedence)

    if op is Op.POW:
        return child(args[0], op.precedence, strict=False) + "^" + child(args[1], op.precedence)

    if op is Op.ADD:
        text = child(args[0], op.precedence)
        for term in args[1:]:
            negative, magnitude = _split_sign(term)
            if negative:
                text += "-" + child(magnitude, op.precedence, strict=False)
            else:
                text += "+" + child(term, op.precedence, strict=False)
        return text

    # SUB, MUL, DIV: left associative
    text = child(args[0], op.precedence)
    for operand in args[1:]:
        text += op.symbol + child(operand, op.precedence, strict=False)
    return text
