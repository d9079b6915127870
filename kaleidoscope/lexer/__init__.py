"""
Kaleidoscope Lexer Package

Implements a hand-rolled, streaming lexical analyzer. Tokens are produced
one at a time on request, so the lexer can read straight from an
interactive terminal.

Key Features:
- One token of lookahead (current token) and one character of scan state
- def / extern / if / then / else keywords
- Floating-point number literals
- '#' line comments
- Source location tracking for diagnostics
"""

from .tokens import Token, TokenType, SourceLocation
from .lexer import Lexer, tokenize_string
from .errors import Diagnostic, LexerError

__all__ = [
    "Lexer",
    "Token",
    "TokenType",
    "SourceLocation",
    "Diagnostic",
    "LexerError",
    "tokenize_string",
]
