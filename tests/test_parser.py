"""
Tests for the Kaleidoscope parser.

Tests cover:
- Precedence climbing and associativity
- Calls, prototypes, definitions and externs
- if/then/else expressions
- Malformed input returning None with a diagnostic
"""

import io
import os
import sys
import unittest

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from kaleidoscope.lexer import TokenType
from kaleidoscope.parser import (
    Parser, OperatorTable, parse_string, ANONYMOUS_FUNCTION_NAME,
    Number, Variable, Binary, Call, Prototype, Function, If
)


class TestParser(unittest.TestCase):
    """Test cases for the parser."""

    def setUp(self):
        self.errors = io.StringIO()

    def _parser(self, source: str, operators=None) -> Parser:
        return Parser.from_string(source, operators, self.errors)

    def _expression(self, source: str):
        """Parse a bare expression and return its body."""
        function = parse_string(source, error_stream=self.errors)
        self.assertIsNotNone(function, f"Failed to parse {source!r}: {self.errors.getvalue()}")
        return function.body

    def test_precedence_grouping(self):
        expr = self._expression("3 + 2 - 4 * 7 < 3")
        self.assertEqual(str(expr), "((3 + (2 - (4 * 7))) < 3)")
        self.assertEqual(
            expr,
            Binary("<",
                   Binary("+", Number(3.0),
                          Binary("-", Number(2.0),
                                 Binary("*", Number(4.0), Number(7.0)))),
                   Number(3.0))
        )

    def test_left_associativity(self):
        self.assertEqual(str(self._expression("1+2+3+4")), "(((1 + 2) + 3) + 4)")

    def test_parentheses_override_precedence(self):
        self.assertEqual(str(self._expression("(1 + 2) * 3")), "((1 + 2) * 3)")

    def test_variable_and_call(self):
        self.assertEqual(self._expression("x"), Variable("x"))
        self.assertEqual(self._expression("foo()"), Call("foo", ()))
        self.assertEqual(
            self._expression("foo(1, x + 2)"),
            Call("foo", (Number(1.0), Binary("+", Variable("x"), Number(2.0))))
        )

    def test_if_expression(self):
        expr = self._expression("if x < 2 then 1 else f(x)")
        self.assertIsInstance(expr, If)
        self.assertEqual(expr.condition, Binary("<", Variable("x"), Number(2.0)))
        self.assertEqual(expr.then_branch, Number(1.0))
        self.assertEqual(expr.else_branch, Call("f", (Variable("x"),)))

    def test_if_binds_whole_else_expression(self):
        expr = self._expression("if a then b else c + d")
        self.assertEqual(expr.else_branch, Binary("+", Variable("c"), Variable("d")))

    def test_function_definition(self):
        function = self._parser("def add(x, y) x + y").parse_function_definition()
        self.assertEqual(
            function,
            Function(Prototype("add", ("x", "y")), Binary("+", Variable("x"), Variable("y")))
        )
        self.assertFalse(function.is_anonymous)

    def test_prototype_trailing_comma(self):
        function = self._parser("def f(a, b,) a").parse_function_definition()
        self.assertEqual(function.prototype.args, ("a", "b"))

    def test_extern(self):
        prototype = self._parser("extern sin(x)").parse_extern()
        self.assertEqual(prototype, Prototype("sin", ("x",)))

    def test_top_level_expression_is_anonymous(self):
        function = self._parser("1 + 2").parse_top_level_expression()
        self.assertTrue(function.is_anonymous)
        self.assertEqual(function.prototype, Prototype(ANONYMOUS_FUNCTION_NAME, ()))

    def test_parse_statement_dispatch(self):
        self.assertIsInstance(parse_string("def f(x) x", error_stream=self.errors), Function)
        self.assertIsInstance(parse_string("extern f(x)", error_stream=self.errors), Prototype)
        self.assertTrue(parse_string("f(1)", error_stream=self.errors).is_anonymous)

    def test_statement_stops_at_semicolon(self):
        parser = self._parser("1 + 2; 3")
        self.assertIsNotNone(parser.parse_statement())
        self.assertTrue(parser.lexer.current_token.is_char(";"))

    def test_locations_recorded(self):
        expr = self._expression("1 +\n  x")
        self.assertEqual(expr.rhs.location.line, 2)
        # Locations do not take part in equality
        self.assertEqual(expr, Binary("+", Number(1.0), Variable("x")))

    # ------------------------------------------------------------------
    # Operator table
    # ------------------------------------------------------------------

    def test_unregistered_operator_ends_expression(self):
        parser = self._parser("a % b")
        function = parser.parse_top_level_expression()
        self.assertEqual(function.body, Variable("a"))
        self.assertTrue(parser.lexer.current_token.is_char("%"))

    def test_registered_operator(self):
        operators = OperatorTable.default()
        operators.register("%", 35)
        function = self._parser("a + b % c", operators).parse_top_level_expression()
        self.assertEqual(str(function.body), "(a + (b % c))")

    def test_operator_table(self):
        operators = OperatorTable.default()
        self.assertEqual(len(operators), 4)
        self.assertEqual(operators.precedence_of("*"), 40)
        self.assertEqual(operators.precedence_of("#"), -1)
        self.assertIsNone(operators.lookup("#"))
        self.assertIn("<", operators)
        with self.assertRaises(ValueError):
            operators.register("==", 5)
        with self.assertRaises(ValueError):
            operators.register("=", -1)

    # ------------------------------------------------------------------
    # Malformed input
    # ------------------------------------------------------------------

    def test_unbalanced_parenthesis(self):
        parser = self._parser("(3 + 4")
        self.assertIsNone(parser.parse_top_level_expression())
        self.assertEqual(parser.errors[-1].code, "P002")

    def test_unclosed_prototype(self):
        parser = self._parser("def fn(three, four, five")
        self.assertIsNone(parser.parse_function_definition())
        self.assertEqual(parser.errors[-1].code, "P004")

    def test_missing_function_name(self):
        parser = self._parser("def (x) x")
        self.assertIsNone(parser.parse_function_definition())
        self.assertEqual(parser.errors[-1].code, "P004")

    def test_bad_argument_list(self):
        parser = self._parser("foo(1 2)")
        self.assertIsNone(parser.parse_top_level_expression())
        self.assertEqual(parser.errors[-1].code, "P003")

    def test_unexpected_leading_token(self):
        parser = self._parser(")")
        self.assertIsNone(parser.parse_top_level_expression())
        self.assertEqual(parser.errors[-1].code, "P001")
        # The offending token is left for the caller to skip
        self.assertTrue(parser.lexer.current_token.is_char(")"))

    def test_missing_operand(self):
        parser = self._parser("1 +")
        self.assertIsNone(parser.parse_top_level_expression())
        self.assertEqual(parser.lexer.current_token.type, TokenType.EOF)

    def test_if_missing_else(self):
        parser = self._parser("if x then 1")
        self.assertIsNone(parser.parse_top_level_expression())
        self.assertEqual(parser.errors[-1].code, "P005")

    def test_diagnostics_written_to_error_stream(self):
        parser = self._parser("(1")
        parser.parse_top_level_expression()
        self.assertTrue(parser.has_errors())
        self.assertIn("ERROR[P002]", self.errors.getvalue())


if __name__ == '__main__':
    unittest.main()
