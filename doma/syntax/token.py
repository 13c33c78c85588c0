"""Token definitions for the Doma language: token kinds, the keyword table, and the set of token kinds that can be
used as first-class builtin procedures.
"""

from dataclasses import dataclass
from enum import Enum


class TokenType(Enum):
    EOF = "EOF"
    ILLEGAL = "ILLEGAL"
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"
    STRING = "STRING"
    NUMBER = "NUMBER"
    IDENT = "IDENT"
    TRUE = "TRUE"
    FALSE = "FALSE"
    SYMBOL = "SYMBOL"
    TICK = "TICK"

    PLUS = "PLUS"
    MINUS = "MINUS"
    ASTERISK = "ASTERISK"
    SLASH = "SLASH"
    LT = "LT"
    LTE = "LTE"
    GT = "GT"
    GTE = "GTE"

    LAMBDA = "LAMBDA"
    IF = "IF"
    DEFINE = "DEFINE"
    DISPLAY = "DISPLAY"
    PRINTF = "PRINTF"
    LIST = "LIST"
    EQ = "EQ"
    FIRST = "FIRST"
    REST = "REST"
    CONS = "CONS"
    LENGTH = "LENGTH"
    LIST_REF = "LIST_REF"
    BEGIN = "BEGIN"


@dataclass(frozen=True)
class Token:
    kind: TokenType
    literal: str
    line: int = 1  # only used for error messages

    def __repr__(self):
        return f"Token({self.kind.value}, '{self.literal}')"


KEYWORDS = {
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
    "lambda": TokenType.LAMBDA,
    "if": TokenType.IF,
    "define": TokenType.DEFINE,
    "display": TokenType.DISPLAY,
    "printf": TokenType.PRINTF,
    "list": TokenType.LIST,
    "eq": TokenType.EQ,
    "first": TokenType.FIRST,
    "rest": TokenType.REST,
    "length": TokenType.LENGTH,
    "cons": TokenType.CONS,
    "list-ref": TokenType.LIST_REF,
    "begin": TokenType.BEGIN,
}

# token kinds that parse to a BuiltinIdentifier and evaluate to a Builtin object
BUILTINS = frozenset([
    TokenType.PLUS,
    TokenType.MINUS,
    TokenType.ASTERISK,
    TokenType.SLASH,
    TokenType.LAMBDA,
    TokenType.IF,
    TokenType.DEFINE,
    TokenType.DISPLAY,
    TokenType.PRINTF,
    TokenType.LIST,
    TokenType.EQ,
    TokenType.LT,
    TokenType.LTE,
    TokenType.GT,
    TokenType.GTE,
    TokenType.FIRST,
    TokenType.REST,
    TokenType.LENGTH,
    TokenType.CONS,
    TokenType.LIST_REF,
    TokenType.BEGIN,
])


def lookup_ident(ident):
    """Returns the keyword kind of ident, or IDENT if ident is not a keyword."""
    return KEYWORDS.get(ident, TokenType.IDENT)


def is_builtin(kind):
    return kind in BUILTINS
