"""
Kaleidoscope Operator-Precedence Parser

Recursive descent for primaries and top-level constructs, precedence
climbing for binary operators. The parser only ever looks at the
lexer's current token.

Every parse method returns the parsed node or None. On failure a
Diagnostic is recorded and printed to the error stream; the parser
does not try to recover, that is the driver's job.
"""

import sys
from typing import List, Optional, TextIO

from ..lexer.lexer import Lexer
from ..lexer.tokens import Token, TokenType
from ..lexer.errors import Diagnostic
from .ast_nodes import (
    Expr, Number, Variable, Binary, Call, Prototype, Function, If, anonymous_function
)
from .operators import OperatorTable, NO_PRECEDENCE
from .errors import (
    create_unexpected_token_error, create_expected_token_error,
    create_argument_list_error, create_prototype_error, create_if_expression_error
)


class Parser:
    """
    Kaleidoscope parser.

    Consumes tokens from a lexer and consults an operator table that is
    passed in explicitly.
    """

    def __init__(self, lexer: Lexer, operators: Optional[OperatorTable] = None,
                 error_stream: Optional[TextIO] = None):
        """
        Initialize parser over a token source.

        Args:
            lexer: Token source; the parser reads ``current_token`` and
                calls ``next_token`` to advance
            operators: Binary operator precedences (defaults to the
                reference ``<``, ``+``, ``-``, ``*`` table)
            error_stream: Where diagnostics are printed (stderr by default)
        """
        self.lexer = lexer
        self.operators = operators if operators is not None else OperatorTable.default()
        self.error_stream = error_stream
        self.errors: List[Diagnostic] = []

    @classmethod
    def from_string(cls, source: str, operators: Optional[OperatorTable] = None,
                    error_stream: Optional[TextIO] = None) -> "Parser":
        """Create a parser over ``source`` with the first token already read."""
        lexer = Lexer.from_string(source)
        lexer.next_token()
        return cls(lexer, operators, error_stream)

    # ------------------------------------------------------------------
    # Top-level constructs
    # ------------------------------------------------------------------

    def parse_statement(self) -> Optional[Expr]:
        """Parse whichever top-level construct starts at the current token."""
        if self._check(TokenType.DEF):
            return self.parse_function_definition()
        if self._check(TokenType.EXTERN):
            return self.parse_extern()
        return self.parse_top_level_expression()

    def parse_function_definition(self) -> Optional[Function]:
        """definition ::= 'def' prototype expression"""
        start = self._current
        if not self._check(TokenType.DEF):
            return self._error(create_expected_token_error("'def'", start))
        self._advance()

        prototype = self.parse_function_prototype()
        if prototype is None:
            return None

        body = self.parse_expression()
        if body is None:
            return None

        return Function(prototype, body, location=start.location)

    def parse_extern(self) -> Optional[Prototype]:
        """external ::= 'extern' prototype"""
        if not self._check(TokenType.EXTERN):
            return self._error(create_expected_token_error("'extern'", self._current))
        self._advance()
        return self.parse_function_prototype()

    def parse_top_level_expression(self) -> Optional[Function]:
        """toplevelexpr ::= expression, wrapped as an anonymous nullary function"""
        body = self.parse_expression()
        if body is None:
            return None
        return anonymous_function(body)

    def parse_function_prototype(self) -> Optional[Prototype]:
        """prototype ::= identifier '(' [identifier (',' identifier)* [',']] ')'"""
        name_token = self._current
        if not self._check(TokenType.IDENTIFIER):
            return self._error(create_prototype_error("Expected function name", name_token))
        self._advance()

        if not self._check_char("("):
            return self._error(create_prototype_error("Expected '('", self._current))
        self._advance()

        arg_names = []
        while self._check(TokenType.IDENTIFIER):
            arg_names.append(self._current.value)
            self._advance()
            if not self._check_char(","):
                break
            self._advance()

        if not self._check_char(")"):
            return self._error(create_prototype_error("Expected ')'", self._current))
        self._advance()

        return Prototype(name_token.value, tuple(arg_names), location=name_token.location)

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def parse_expression(self) -> Optional[Expr]:
        """expression ::= primary binoprhs"""
        lhs = self.parse_primary()
        if lhs is None:
            return None
        return self.parse_binary_rhs(0, lhs)

    def parse_binary_rhs(self, min_precedence: int, lhs: Expr) -> Optional[Expr]:
        """
        Fold ``(operator primary)*`` into ``lhs`` by precedence climbing.

        Only operators binding at least as tightly as ``min_precedence``
        are consumed here; tighter operators further right are absorbed
        into the right-hand side by recursion.
        """
        while True:
            precedence = self._current_precedence()
            if precedence < min_precedence:
                return lhs

            operator_token = self._advance_past()
            rhs = self.parse_primary()
            if rhs is None:
                return None

            if self._current_precedence() > precedence:
                rhs = self.parse_binary_rhs(precedence + 1, rhs)
                if rhs is None:
                    return None

            lhs = Binary(operator_token.value, lhs, rhs, location=operator_token.location)

    def parse_primary(self) -> Optional[Expr]:
        """
        primary
          ::= number
          ::= identifierexpr
          ::= '(' expression ')'
          ::= ifexpr
        """
        token = self._current
        if token is None:
            return self._error(create_unexpected_token_error(None))

        if token.type == TokenType.NUMBER:
            return self.parse_number()
        if token.type == TokenType.IDENTIFIER:
            return self.parse_identifier_prefixed(token.value)
        if token.type == TokenType.IF:
            return self.parse_if()
        if token.is_char("("):
            return self.parse_paren()

        return self._error(create_unexpected_token_error(token))

    def parse_number(self) -> Number:
        token = self._advance_past()
        return Number(token.value, location=token.location)

    def parse_paren(self) -> Optional[Expr]:
        """parenexpr ::= '(' expression ')'"""
        self._advance()  # Consume (

        expr = self.parse_expression()
        if expr is None:
            return None

        if not self._check_char(")"):
            return self._error(create_expected_token_error("')'", self._current, "after expression"))
        self._advance()

        return expr

    def parse_identifier_prefixed(self, name: str) -> Optional[Expr]:
        """
        identifierexpr
          ::= identifier
          ::= identifier '(' [expression (',' expression)*] ')'
        """
        location = self._advance_past().location

        if not self._check_char("("):
            return Variable(name, location=location)
        self._advance()  # Consume (

        args = []
        if not self._check_char(")"):
            while True:
                arg = self.parse_expression()
                if arg is None:
                    return None
                args.append(arg)

                if self._check_char(")"):
                    break
                if not self._check_char(","):
                    return self._error(create_argument_list_error(self._current))
                self._advance()

        self._advance()  # Consume )

        return Call(name, tuple(args), location=location)

    def parse_if(self) -> Optional[If]:
        """ifexpr ::= 'if' expression 'then' expression 'else' expression"""
        location = self._advance_past().location

        condition = self.parse_expression()
        if condition is None:
            return None

        if not self._check(TokenType.THEN):
            return self._error(create_if_expression_error("then", self._current))
        self._advance()

        then_branch = self.parse_expression()
        if then_branch is None:
            return None

        if not self._check(TokenType.ELSE):
            return self._error(create_if_expression_error("else", self._current))
        self._advance()

        else_branch = self.parse_expression()
        if else_branch is None:
            return None

        return If(condition, then_branch, else_branch, location=location)

    # ------------------------------------------------------------------
    # Utility methods
    # ------------------------------------------------------------------

    @property
    def _current(self) -> Optional[Token]:
        return self.lexer.current_token

    def _advance(self) -> Token:
        """Move to the next token and return it."""
        return self.lexer.next_token()

    def _advance_past(self) -> Token:
        """Consume the current token and return it."""
        token = self._current
        self.lexer.next_token()
        return token

    def _check(self, token_type: TokenType) -> bool:
        return self._current is not None and self._current.type == token_type

    def _check_char(self, char: str) -> bool:
        return self._current is not None and self._current.is_char(char)

    def _current_precedence(self) -> int:
        # Any single character may name an operator; unregistered ones
        # end the expression
        token = self._current
        if token is None or token.type != TokenType.MISC:
            return NO_PRECEDENCE
        return self.operators.precedence_of(token.value)

    def _error(self, diagnostic: Diagnostic) -> None:
        self.errors.append(diagnostic)
        print(diagnostic, end="", file=self.error_stream or sys.stderr)
        return None

    def has_errors(self) -> bool:
        return len(self.errors) > 0


def parse_string(source: str, operators: Optional[OperatorTable] = None,
                 error_stream: Optional[TextIO] = None) -> Optional[Expr]:
    """
    Convenience function to parse one top-level construct from a string.

    Args:
        source: Source code string
        operators: Operator table (reference table if omitted)
        error_stream: Where diagnostics are printed

    Returns:
        The parsed node, or None if parsing failed
    """
    return Parser.from_string(source, operators, error_stream).parse_statement()
