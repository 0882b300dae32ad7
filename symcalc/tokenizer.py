# tokenizer.py
"""
Tokenizer: converts a raw input string into a flat list of tokens.

Numeric literals are kept as raw text so the same token stream can be
evaluated in fast mode and in any precise mode.
"""

import enum
from dataclasses import dataclass
from typing import Optional

from . import error as E
from .ScientificEngine import isConstant


class Op(enum.Enum):
    """Operators with (symbol, precedence, right associative, arity)."""

    ADD = ("+", 1, False, 2)
    SUB = ("-", 1, False, 2)
    MUL = ("*", 2, False, 2)
    DIV = ("/", 2, False, 2)
    POW = ("^", 3, True, 2)
    NEG = ("-", 4, True, 1)

    def __init__(self, symbol, precedence, right_assoc, arity):
        self.symbol = symbol
        self.precedence = precedence
        self.right_assoc = right_assoc
        self.arity = arity

    def apply(self, *operands):
        """Apply the operator to Number operands (IEEE semantics, no checks)."""
        if self is Op.NEG:
            return -operands[0]
        a, b = operands
        if self is Op.ADD:
            return a + b
        elif self is Op.SUB:
            return a - b
        elif self is Op.MUL:
            return a * b
        elif self is Op.DIV:
            return a / b
        return a ** b


BINARY_OPERATORS = {op.symbol: op for op in (Op.ADD, Op.SUB, Op.MUL, Op.DIV, Op.POW)}


class TokenKind(enum.Enum):
    NUMBER = "number"
    VARIABLE = "variable"
    FUNCTION = "function"
    OPERATOR = "operator"
    LEFT_PAREN = "("
    RIGHT_PAREN = ")"
    COMMA = ","


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    position: int = -1
    op: Optional[Op] = None
    arity: int = 0

    def __repr__(self):
        if self.kind is TokenKind.FUNCTION and self.arity:
            return f"Token({self.kind.name}, {self.text!r}/{self.arity})"
        return f"Token({self.kind.name}, {self.text!r})"


def _scan_number(source, start):
    """Return the end index of the numeric literal starting at `start`."""
    b = start
    while b < len(source) and (source[b].isdigit() or source[b] == "."):
        b += 1

    # Exponent marker, only when a digit follows (with an optional sign)
    if b < len(source) and source[b] in "eE":
        after = b + 1
        if after < len(source) and source[after] in "+-":
            after += 1
        if after < len(source) and source[after].isdigit():
            b = after
            while b < len(source) and source[b].isdigit():
                b += 1
    return b


def _negative_literal_allowed(tokens):
    if not tokens:
        return True
    return tokens[-1].kind in (TokenKind.OPERATOR, TokenKind.LEFT_PAREN, TokenKind.COMMA)


def tokenize(source):
    """Split `source` into tokens; unknown characters raise SyntaxError."""
    tokens = []
    b = 0

    while b < len(source):
        current_char = source[b]

        # --- Whitespace (ignored) ---
        if current_char.isspace():
            b += 1

        # --- Numbers, with a folded leading '-' where it cannot be binary ---
        elif current_char.isdigit() or current_char == "." or (
                current_char == "-"
                and b + 1 < len(source)
                and (source[b + 1].isdigit() or source[b + 1] == ".")
                and _negative_literal_allowed(tokens)):
            end = _scan_number(source, b + 1 if current_char == "-" else b)
            tokens.append(Token(TokenKind.NUMBER, source[b:end], b))
            b = end

        # --- Identifiers: functions, constants, variables ---
        elif current_char.isalpha():
            end = b
            while end < len(source) and source[end].isalpha():
                end += 1
            name = source[b:end]
            if end < len(source) and source[end] == "(":
                tokens.append(Token(TokenKind.FUNCTION, name, b))
            elif isConstant(name):
                tokens.append(Token(TokenKind.NUMBER, name, b))
            else:
                tokens.append(Token(TokenKind.VARIABLE, name, b))
            b = end

        # --- Operators ---
        elif current_char in BINARY_OPERATORS:
            tokens.append(Token(TokenKind.OPERATOR, current_char, b, op=BINARY_OPERATORS[current_char]))
            b += 1

        # --- Parentheses and separators ---
        elif current_char == "(":
            tokens.append(Token(TokenKind.LEFT_PAREN, current_char, b))
            b += 1
        elif current_char == ")":
            tokens.append(Token(TokenKind.RIGHT_PAREN, current_char, b))
            b += 1
        elif current_char == ",":
            tokens.append(Token(TokenKind.COMMA, current_char, b))
            b += 1

        else:
            raise E.SyntaxError(f"Unexpected character '{current_char}' at position {b}",
                                position=b, char=current_char)

    return tokens
