"""
Kaleidoscope Parser Package

Implements an operator-precedence recursive descent parser producing an
immutable, structurally comparable AST.

Key Features:
- Precedence climbing driven by an explicit OperatorTable
- Frozen dataclass AST nodes with source locations
- Optional-returning parse functions; diagnostics instead of exceptions
"""

from .ast_nodes import (
    ANONYMOUS_FUNCTION_NAME, ASTNodeType, Expr, Number, Variable, Binary,
    Call, Prototype, Function, If, anonymous_function
)
from .operators import OperatorTable
from .parser import Parser, parse_string

__all__ = [
    # Core parser
    "Parser",
    "parse_string",
    "OperatorTable",

    # AST nodes
    "ANONYMOUS_FUNCTION_NAME", "ASTNodeType", "Expr",
    "Number", "Variable", "Binary", "Call", "Prototype", "Function", "If",
    "anonymous_function",
]
