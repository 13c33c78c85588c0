"""Expression tree for Doma. The set of node classes is closed: the evaluator dispatches on exactly these classes, so a
new kind of expression means a new class here and a new branch in doma/runtime/evaluator.py.

Informally, the grammar handled by the parser is

```
<program>     ::= <expr>*
<expr>        ::= <number> | <string> | <boolean> | <symbol> | <identifier> | <builtin>
                | "'(" <expr>* ")"                  ; quoted list
                | "(" ")"                           ; empty list, same as '()
                | "(" <expr> <expr>* ")"            ; form: application or special form
<boolean>     ::= "#t" | "#f" | "true" | "false"
<symbol>      ::= "'" <identifier>
<builtin>     ::= "+" | "-" | "*" | "/" | "<" | "<=" | ">" | ">=" | "=" | <keyword>
```

Nodes are immutable once built. str() of a node renders it back to source text.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Tuple

from doma.syntax.token import TokenType


class Expression(ABC):
    """Superclass of all expression tree nodes."""

    @abstractmethod
    def __str__(self):
        """Renders this node as Doma source text."""


@dataclass(frozen=True)
class Number(Expression):
    value: int

    def __str__(self):
        return str(self.value)


@dataclass(frozen=True)
class String(Expression):
    value: str

    def __str__(self):
        return f'"{self.value}"'


@dataclass(frozen=True)
class Boolean(Expression):
    value: bool
    literal: str

    def __str__(self):
        return self.literal


@dataclass(frozen=True)
class Symbol(Expression):
    value: str

    def __str__(self):
        return f"'{self.value}"


@dataclass(frozen=True)
class Identifier(Expression):
    value: str

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class BuiltinIdentifier(Expression):
    """A keyword or operator used on its own, e.g. the '+' in (+ 1 2) or in (define add +)."""
    kind: TokenType
    value: str

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class QuotedList(Expression):
    elements: Tuple[Expression, ...]

    def __str__(self):
        return "'(" + " ".join(str(element) for element in self.elements) + ")"


@dataclass(frozen=True)
class Form(Expression):
    """Parenthesized application or special form. Which one it is gets decided by the evaluator, once it knows what
    first evaluates to.
    """
    first: Expression
    rest: Tuple[Expression, ...]

    def __str__(self):
        return "(" + " ".join(str(expr) for expr in (self.first,) + self.rest) + ")"


@dataclass(frozen=True)
class Program(Expression):
    expressions: Tuple[Expression, ...]

    def __str__(self):
        return "".join(str(expr) + "\n" for expr in self.expressions)


def parameter_names(params):
    """Returns the parameter names of a lambda parameter list, or None if params is not a parenthesized sequence of
    identifiers. Both (x y) and '(x y) are accepted; () is the empty parameter list.
    """
    if isinstance(params, Form):
        elements = (params.first,) + params.rest
    elif isinstance(params, QuotedList):
        elements = params.elements
    else:
        return None

    if not all(isinstance(element, Identifier) for element in elements):
        return None
    return [element.value for element in elements]
