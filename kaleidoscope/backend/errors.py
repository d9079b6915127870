"""
Diagnostics for the Kaleidoscope code generator.

All of these are local and non-fatal: the statement being generated is
abandoned, any partially built function is rolled back and the module
stays valid.

"""

from typing import Optional

from ..lexer.tokens import SourceLocation
from ..lexer.errors import Diagnostic


CODEGEN_ERROR_CODES = {
    "C001": "Unknown variable",
    "C002": "Unknown function",
    "C003": "Incorrect number of arguments",
    "C004": "Unsupported operator",
    "C005": "Type mismatch",
    "C006": "Function cannot be redefined",
    "C007": "No current function",
}


def _diagnostic(code: str, message: str, location: Optional[SourceLocation],
                help_text: Optional[str] = None) -> Diagnostic:
    return Diagnostic(
        message=message,
        location=location,
        severity="error",
        code=code,
        help_text=help_text,
    )


def create_unknown_variable_error(name: str, location: Optional[SourceLocation] = None) -> Diagnostic:
    return _diagnostic("C001", f"Unknown variable name '{name}'", location,
                       "Only the parameters of the enclosing function are in scope.")


def create_unknown_function_error(name: str, location: Optional[SourceLocation] = None) -> Diagnostic:
    return _diagnostic("C002", f"Unknown function referenced: '{name}'", location,
                       f"Define it with 'def' or declare it with 'extern {name}(...)'.")


def create_arity_mismatch_error(name: str, expected: int, found: int,
                                location: Optional[SourceLocation] = None) -> Diagnostic:
    return _diagnostic("C003",
                       f"Incorrect number of arguments for '{name}': expected {expected}, found {found}",
                       location)


def create_unsupported_operator_error(operator: str,
                                      location: Optional[SourceLocation] = None) -> Diagnostic:
    return _diagnostic("C004", f"Unexpected binary operator '{operator}'", location)


def create_type_mismatch_error(what: str, expected, found,
                               location: Optional[SourceLocation] = None) -> Diagnostic:
    return _diagnostic("C005", f"Type mismatch in {what}: expected {expected}, found {found}", location)


def create_redefinition_error(name: str, location: Optional[SourceLocation] = None) -> Diagnostic:
    return _diagnostic("C006", f"Function '{name}' cannot be redefined", location)


def create_no_current_function_error(construct: str,
                                     location: Optional[SourceLocation] = None) -> Diagnostic:
    return _diagnostic("C007", f"{construct} cannot appear outside a function body", location)
