"""
Abstract Syntax Tree node definitions for Kaleidoscope.

The variant set is closed: every expression is one of the seven node
classes below. Nodes are frozen dataclasses, so a tree is immutable once
the parser returns it and compares structurally. The source location
carried by each node is informational only and is ignored by equality.

"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Optional, Tuple

from ..lexer.tokens import SourceLocation


# Name given to the synthetic function wrapping a bare top-level expression
ANONYMOUS_FUNCTION_NAME = "__anon_expr"


class ASTNodeType(Enum):
    """Enumeration of all AST node types."""
    NUMBER = "Number"
    VARIABLE = "Variable"
    BINARY = "Binary"
    CALL = "Call"
    PROTOTYPE = "Prototype"
    FUNCTION = "Function"
    IF = "If"


@dataclass(frozen=True)
class Expr:
    """Base class for all AST nodes."""
    node_type: ClassVar[ASTNodeType]

    location: Optional[SourceLocation] = field(
        default=None, compare=False, repr=False, kw_only=True
    )


@dataclass(frozen=True)
class Number(Expr):
    """Numeric literal; every value in the language is a double."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.NUMBER

    value: float

    def __str__(self) -> str:
        return f"{self.value:g}"


@dataclass(frozen=True)
class Variable(Expr):
    """Reference to a function parameter."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.VARIABLE

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Binary(Expr):
    """Binary operation ``lhs <operator> rhs``."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.BINARY

    operator: str
    lhs: Expr
    rhs: Expr

    def __str__(self) -> str:
        return f"({self.lhs} {self.operator} {self.rhs})"


@dataclass(frozen=True)
class Call(Expr):
    """Function call with positional arguments."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.CALL

    callee: str
    args: Tuple[Expr, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "args", tuple(self.args))

    def __str__(self) -> str:
        return f"{self.callee}({', '.join(str(arg) for arg in self.args)})"


@dataclass(frozen=True)
class Prototype(Expr):
    """
    Function signature: a name plus ordered parameter names.

    All parameters (and the result) are implicitly doubles.
    """
    node_type: ClassVar[ASTNodeType] = ASTNodeType.PROTOTYPE

    name: str
    args: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "args", tuple(self.args))

    @property
    def is_anonymous(self) -> bool:
        return self.name == ANONYMOUS_FUNCTION_NAME

    def __str__(self) -> str:
        return f"{self.name}({', '.join(self.args)})"


@dataclass(frozen=True)
class Function(Expr):
    """Function definition: a prototype and a body expression."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.FUNCTION

    prototype: Prototype
    body: Expr

    @property
    def is_anonymous(self) -> bool:
        return self.prototype.is_anonymous

    def __str__(self) -> str:
        if self.is_anonymous:
            return str(self.body)
        return f"def {self.prototype} {self.body}"


@dataclass(frozen=True)
class If(Expr):
    """Conditional expression; the condition is true when non-zero."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.IF

    condition: Expr
    then_branch: Expr
    else_branch: Expr

    def __str__(self) -> str:
        return f"(if {self.condition} then {self.then_branch} else {self.else_branch})"


def anonymous_function(body: Expr) -> Function:
    """Wrap a bare expression as a zero-argument function under the reserved name."""
    prototype = Prototype(ANONYMOUS_FUNCTION_NAME, (), location=body.location)
    return Function(prototype, body, location=body.location)
