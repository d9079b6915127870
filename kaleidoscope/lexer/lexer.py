"""
Kaleidoscope Lexer - turns a character stream into tokens on demand

The lexer never reads ahead further than one character, so it can sit
directly on top of an interactive stream: the REPL only blocks when the
parser actually asks for the next token.
"""

import io
from typing import List, Optional, TextIO

from .tokens import Token, TokenType, SourceLocation, KEYWORDS, COMMENT_CHAR, NEWLINE_CHARS
from .errors import (
    Diagnostic, create_invalid_character_error, create_stream_error,
    create_invalid_number_diagnostic
)


class Lexer:
    """
    Kaleidoscope lexical analyzer.

    Holds exactly one current token plus the scan state (the pending
    character and its position). ``next_token`` replaces the current
    token; ``current_token`` peeks at it.
    """

    def __init__(self, reader: TextIO, filename: str = "<stdin>"):
        """
        Initialize the lexer over a text stream.

        Args:
            reader: Stream to read characters from (one at a time)
            filename: Name of the source for error reporting
        """
        self.reader = reader
        self.filename = filename
        self.line = 1
        self.column = 0
        self.offset = 0
        self._after_newline = False
        # Pending character; "" once the stream is exhausted
        self._last_char = " "
        self._current: Optional[Token] = None
        self.errors: List[Diagnostic] = []

    @classmethod
    def from_string(cls, source: str, filename: str = "<string>") -> "Lexer":
        """Create a lexer reading from an in-memory string."""
        return cls(io.StringIO(source), filename)

    @property
    def current_token(self) -> Optional[Token]:
        """The most recently scanned token (None before the first advance)."""
        return self._current

    def next_token(self) -> Token:
        """Scan the next token, make it current and return it."""
        self._current = self._scan()
        return self._current

    def tokenize(self) -> List[Token]:
        """
        Drain the stream.

        Returns:
            List of tokens including the final EOF token
        """
        tokens = []
        while True:
            token = self.next_token()
            tokens.append(token)
            if token.type == TokenType.EOF:
                return tokens

    def _scan(self) -> Token:
        while True:
            while self._last_char and self._last_char.isspace():
                self._last_char = self._read_char()

            location = self._location()

            if not self._last_char:
                return Token(TokenType.EOF, "", None, location)

            # Keywords and identifiers: [A-Za-z][A-Za-z0-9]*
            if self._last_char.isalpha():
                return self._tokenize_identifier_or_keyword(location)

            # Numbers: [0-9.]+ with at most one decimal point
            if self._last_char.isdigit() or self._last_char == ".":
                return self._tokenize_number(location)

            if self._last_char == COMMENT_CHAR:
                while self._last_char and self._last_char not in NEWLINE_CHARS:
                    self._last_char = self._read_char()
                continue

            char = self._last_char
            self._last_char = self._read_char()
            return Token(TokenType.MISC, char, char, location)

    def _tokenize_identifier_or_keyword(self, location: SourceLocation) -> Token:
        chars = []
        while self._last_char and self._last_char.isalnum():
            chars.append(self._last_char)
            self._last_char = self._read_char()

        lexeme = "".join(chars)
        token_type = KEYWORDS.get(lexeme, TokenType.IDENTIFIER)
        value = lexeme if token_type == TokenType.IDENTIFIER else None
        return Token(token_type, lexeme, value, location)

    def _tokenize_number(self, location: SourceLocation) -> Token:
        chars = []
        saw_decimal = False
        while self._last_char and (self._last_char.isdigit() or self._last_char == "."):
            if self._last_char == ".":
                # A second decimal point starts the next token
                if saw_decimal:
                    break
                saw_decimal = True
            chars.append(self._last_char)
            self._last_char = self._read_char()

        lexeme = "".join(chars)
        try:
            value = float(lexeme)
        except ValueError:
            self.errors.append(create_invalid_number_diagnostic(lexeme, location))
            return Token(TokenType.INVALID, lexeme, None, location)

        return Token(TokenType.NUMBER, lexeme, value, location)

    def _read_char(self) -> str:
        """Read one character, updating line/column. Returns "" at end of input."""
        try:
            char = self.reader.read(1)
        except (OSError, UnicodeDecodeError) as e:
            raise create_stream_error(str(e), self._location())

        if not char:
            return ""

        self.offset += 1
        if self._after_newline:
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self._after_newline = char == "\n"

        if not char.isascii():
            raise create_invalid_character_error(char, self._location())

        return char

    def _location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.line, max(self.column, 1), self.offset)

    def has_errors(self) -> bool:
        """Check if lexer produced any diagnostics."""
        return len(self.errors) > 0


def tokenize_string(source: str, filename: str = "<string>") -> List[Token]:
    """
    Convenience function to tokenize a source string.

    Args:
        source: Source code string
        filename: Filename for error reporting

    Returns:
        List of tokens ending with EOF

    Raises:
        LexerError: If the source contains non-ASCII characters
    """
    return Lexer.from_string(source, filename).tokenize()
