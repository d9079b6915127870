"""
Diagnostics for the Kaleidoscope parser.

Parse functions never raise: they record one of these diagnostics and
return None, leaving resynchronisation to the driver.

"""

from typing import Optional

from ..lexer.tokens import Token
from ..lexer.errors import Diagnostic


# Common parser error codes for categorization
PARSER_ERROR_CODES = {
    "P001": "Unexpected token in expression position",
    "P002": "Expected token not found",
    "P003": "Malformed argument list",
    "P004": "Malformed function prototype",
    "P005": "Malformed if expression",
}


def _describe(token: Optional[Token]) -> str:
    if token is None:
        return "nothing"
    return str(token)


def create_unexpected_token_error(token: Optional[Token]) -> Diagnostic:
    """Create an error for a token that cannot start an expression."""
    return Diagnostic(
        message=f"Unexpected token when expecting an expression, found {_describe(token)}",
        location=token.location if token else None,
        severity="error",
        code="P001",
        help_text="An expression starts with a number, an identifier, '(' or 'if'.",
    )


def create_expected_token_error(expected: str, token: Optional[Token],
                                context: Optional[str] = None) -> Diagnostic:
    """Create an error for a missing delimiter or keyword."""
    message = f"Expected {expected}"
    if context:
        message += f" {context}"
    return Diagnostic(
        message=f"{message}, found {_describe(token)}",
        location=token.location if token else None,
        severity="error",
        code="P002",
    )


def create_argument_list_error(token: Optional[Token]) -> Diagnostic:
    """Create an error for a call argument not followed by ',' or ')'."""
    return Diagnostic(
        message=f"Expected ')' or ',' in argument list, found {_describe(token)}",
        location=token.location if token else None,
        severity="error",
        code="P003",
        suggestions=["Separate arguments with ','", "Close the call with ')'"],
    )


def create_prototype_error(reason: str, token: Optional[Token]) -> Diagnostic:
    """Create an error for a malformed function signature."""
    return Diagnostic(
        message=f"{reason} in prototype, found {_describe(token)}",
        location=token.location if token else None,
        severity="error",
        code="P004",
        help_text="Prototypes look like: name(arg1, arg2)",
    )


def create_if_expression_error(expected: str, token: Optional[Token]) -> Diagnostic:
    """Create an error for an if expression missing 'then' or 'else'."""
    return Diagnostic(
        message=f"Expected '{expected}' in if expression, found {_describe(token)}",
        location=token.location if token else None,
        severity="error",
        code="P005",
        help_text="Conditionals look like: if cond then a else b",
    )
