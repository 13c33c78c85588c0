"""Runtime values for Doma. Every value is an instance of one of the Object subclasses below and knows how to render
itself for humans with inspect().
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List as ListType, Tuple

from doma.runtime.environment import Environment
from doma.syntax.token import TokenType


class Object(ABC):
    """Superclass of every runtime value."""
    type_name = "OBJECT"

    @abstractmethod
    def inspect(self):
        """Human-readable rendering, as printed by display and by the REPL."""

    def represent(self):
        """Rendering used when this object is printed as an element of a list."""
        return self.inspect()

    def __str__(self):
        return self.inspect()


@dataclass(frozen=True)
class Number(Object):
    type_name = "NUMBER"
    value: int

    def inspect(self):
        return str(self.value)


@dataclass(frozen=True)
class String(Object):
    type_name = "STRING"
    value: str

    def inspect(self):
        return self.value

    def represent(self):
        return f'"{self.value}"'


@dataclass(frozen=True)
class Boolean(Object):
    type_name = "BOOLEAN"
    value: bool

    def inspect(self):
        return "#t" if self.value else "#f"


@dataclass(frozen=True)
class Symbol(Object):
    type_name = "SYMBOL"
    value: str

    def inspect(self):
        return f"'{self.value}"

    def represent(self):
        return self.value


@dataclass
class List(Object):
    type_name = "LIST"
    elements: ListType[Object] = field(default_factory=list)

    def inspect(self):
        return "'" + self.represent()

    def represent(self):
        return "(" + " ".join(element.represent() for element in self.elements) + ")"


@dataclass(eq=False)
class Lambda(Object):
    """Closure: parameter names, body expressions, and the environment the lambda was created in. The environment is
    shared with its creator, never copied.
    """
    type_name = "LAMBDA"
    params: ListType[str]
    body: Tuple
    env: Environment

    def inspect(self):
        return "#<procedure>"


@dataclass(eq=False)
class Procedure(Object):
    """Lambda bound to a name by define."""
    type_name = "PROCEDURE"
    name: str
    function: Lambda

    def inspect(self):
        return f"#<procedure:{self.name}>"


@dataclass(frozen=True)
class Builtin(Object):
    type_name = "BUILTIN"
    kind: TokenType
    name: str

    def inspect(self):
        return f"#<procedure:{self.name}>"


class Nil(Object):
    """The absent value: the result of display, and the value of a parameter that received no argument."""
    type_name = "NIL"

    def inspect(self):
        return "nil"

    def __repr__(self):
        return "NIL"


NIL = Nil()


@dataclass(frozen=True)
class Error(Object):
    type_name = "ERROR"
    message: str

    def inspect(self):
        return "ERROR: " + self.message


TRUE = Boolean(True)
FALSE = Boolean(False)


def is_error(obj):
    return isinstance(obj, Error)


def is_truthy(obj):
    """Only #f and nil are falsy."""
    if obj is NIL:
        return False
    if isinstance(obj, Boolean):
        return obj.value
    return True


def new_error(msg, *args):
    return Error(msg.format(*args))
