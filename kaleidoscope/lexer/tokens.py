"""
Token definitions for the Kaleidoscope lexer.

The token set is deliberately small:
- Keywords (def, extern, if, then, else)
- Identifiers and number literals
- A catch-all for any other single character (operators, punctuation)
- End of input

"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any, Optional


class TokenType(Enum):
    """
    Enumeration of all token types in Kaleidoscope.
    """

    # ========================================================================
    # Special Tokens
    # ========================================================================
    EOF = auto()                    # End of input

    # ========================================================================
    # Keywords
    # ========================================================================
    DEF = auto()                    # def
    EXTERN = auto()                 # extern
    IF = auto()                     # if
    THEN = auto()                   # then
    ELSE = auto()                   # else

    # ========================================================================
    # Identifiers and Literals
    # ========================================================================
    IDENTIFIER = auto()             # fib, x, putchard
    NUMBER = auto()                 # 4, 1.5, .25

    # ========================================================================
    # Everything else
    # ========================================================================
    MISC = auto()                   # any other single character: + ( , ;

    # ========================================================================
    # Error and Recovery Tokens
    # ========================================================================
    INVALID = auto()                # Malformed numeric literal


@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in the source code.

    Used for error reporting and for tagging AST nodes.
    """
    filename: str
    line: int
    column: int
    offset: int  # Character offset from start of input

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"

    def __repr__(self) -> str:
        return f"SourceLocation({self.filename!r}, {self.line}, {self.column}, {self.offset})"


@dataclass(frozen=True)
class Token:
    """
    Represents a lexical token.

    Contains the token type, lexeme (raw text), semantic value
    and source location.
    """
    type: TokenType
    lexeme: str                     # Raw text from source
    value: Any                      # str for IDENTIFIER/MISC, float for NUMBER
    location: Optional[SourceLocation] = None

    def __str__(self) -> str:
        if self.type == TokenType.EOF:
            return "end of input"
        return f"{self.type.name}({self.lexeme!r})"

    def __repr__(self) -> str:
        return (f"Token({self.type.name}, {self.lexeme!r}, "
                f"{self.value!r}, {self.location!r})")

    @property
    def is_keyword(self) -> bool:
        """Check if this token is a keyword."""
        return self.type in KEYWORDS.values()

    @property
    def is_identifier(self) -> bool:
        return self.type == TokenType.IDENTIFIER

    def is_char(self, char: str) -> bool:
        """Check if this token is the miscellaneous character ``char``."""
        return self.type == TokenType.MISC and self.value == char


# Reserved words recognised by the lexer
KEYWORDS = {
    "def": TokenType.DEF,
    "extern": TokenType.EXTERN,
    "if": TokenType.IF,
    "then": TokenType.THEN,
    "else": TokenType.ELSE,
}

# Characters that start a comment running to the end of the line
COMMENT_CHAR = "#"

# Characters that end a comment
NEWLINE_CHARS = "\r\n"
