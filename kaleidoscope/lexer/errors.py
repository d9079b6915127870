"""
Error handling for the Kaleidoscope lexer.

Provides the shared Diagnostic record used by every stage of the
pipeline, plus the lexer's own fatal error type.

"""

from typing import Optional, List
from dataclasses import dataclass
from .tokens import SourceLocation


@dataclass
class Diagnostic:
    """A diagnostic (error, warning, info) produced by any compiler stage."""
    message: str
    location: Optional[SourceLocation]
    severity: str  # "error", "warning", "info", "hint"
    code: Optional[str] = None
    help_text: Optional[str] = None
    suggestions: Optional[List[str]] = None

    def __str__(self) -> str:
        severity_prefix = self.severity.upper()
        if self.code:
            severity_prefix = f"{severity_prefix}[{self.code}]"
        result = f"{severity_prefix}: {self.message}\n"
        if self.location is not None:
            result += f"  --> {self.location}\n"

        if self.help_text:
            result += f"  help: {self.help_text}\n"

        if self.suggestions:
            result += "  suggestions:\n"
            for suggestion in self.suggestions:
                result += f"    - {suggestion}\n"

        return result


class LexerError(Exception):
    """
    Exception raised when the lexer hits input it cannot continue from.

    Contains detailed diagnostic information for error reporting.
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation],
        code: Optional[str] = None,
        help_text: Optional[str] = None,
    ):
        super().__init__(message)
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="error",
            code=code,
            help_text=help_text,
        )

    def __str__(self) -> str:
        return str(self.diagnostic)


# Common error codes for categorization
ERROR_CODES = {
    "L001": "Invalid character",
    "L002": "Input stream failure",
    "L003": "Invalid numeric literal",
}


def create_invalid_character_error(char: str, location: SourceLocation) -> LexerError:
    """Create an error for a character outside the ASCII source alphabet."""
    return LexerError(
        message=f"Invalid character: {char!r}",
        location=location,
        code="L001",
        help_text=f"Non-ASCII character (Unicode: U+{ord(char):04X}) is not allowed.",
    )


def create_stream_error(reason: str, location: SourceLocation) -> LexerError:
    """Create an error for a failed read on the input stream."""
    return LexerError(
        message=f"Failed to read input: {reason}",
        location=location,
        code="L002",
    )


def create_invalid_number_diagnostic(lexeme: str, location: SourceLocation) -> Diagnostic:
    """Create a (non-fatal) diagnostic for a numeric literal that does not parse."""
    return Diagnostic(
        message=f"Invalid numeric literal: {lexeme!r}",
        location=location,
        severity="error",
        code="L003",
        help_text="Numbers are digits with at most one decimal point.",
    )
