"""
End-to-end tests: source text through code generation to native execution.

Tests cover:
- Evaluating definitions and calls through the JIT
- Recursion and nested control flow at runtime
- Optimization levels
- Host library functions and unresolved externs
"""

import contextlib
import io
import os
import sys
import unittest

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from kaleidoscope.parser import parse_string, ANONYMOUS_FUNCTION_NAME
from kaleidoscope.backend import LLVMCodeGenerator
from kaleidoscope.jit import JITCompiler, JITError, OptimizationLevel


class TestJITCompilation(unittest.TestCase):
    """Test compiling and running generated modules."""

    def setUp(self):
        self.errors = io.StringIO()
        self.codegen = LLVMCodeGenerator(error_stream=self.errors)
        self.jit = JITCompiler()

    def _define(self, *statements: str):
        for source in statements:
            node = parse_string(source, error_stream=self.errors)
            self.assertIsNotNone(node, f"Failed to parse {source!r}")
            self.assertIsNotNone(self.codegen.generate(node),
                                 f"Failed to generate {source!r}: {self.errors.getvalue()}")

    def _evaluate(self, expression: str, jit: JITCompiler = None) -> float:
        self._define(expression)
        return (jit or self.jit).run_function(self.codegen.module, ANONYMOUS_FUNCTION_NAME)

    def test_constant_expression(self):
        self.assertEqual(self._evaluate("4 + 5 * 2"), 14.0)

    def test_two_argument_function(self):
        self._define("def f(x, y) x + y")
        self.assertEqual(self._evaluate("f(67, 67)"), 134.0)

    def test_single_argument_function(self):
        self._define("def g(x) x * 2")
        self.assertEqual(self._evaluate("g(67)"), 134.0)

    def test_comparison_yields_zero_or_one(self):
        self.assertEqual(self._evaluate("1 < 2"), 1.0)
        self.assertEqual(self._evaluate("2 < 1"), 0.0)

    def test_recursive_fibonacci(self):
        self._define("def fib(x) if x < 3 then 1 else fib(x-1) + fib(x-2)")
        self.assertEqual(self._evaluate("fib(10)"), 55.0)

    def test_nested_if(self):
        self._define("def g(x) if x < 1 then (if x < 0 then 1 else 2) else 3")
        self.assertEqual(self._evaluate("g(0 - 1)"), 1.0)
        self.assertEqual(self._evaluate("g(0.5)"), 2.0)
        self.assertEqual(self._evaluate("g(5)"), 3.0)

    def test_forward_declaration(self):
        self._define("extern later(x)", "def early(x) later(x) + 1", "def later(x) x * 10")
        self.assertEqual(self._evaluate("early(4)"), 41.0)

    def test_first_definition_survives_redefinition(self):
        self._define("def f(x) x + 1")
        self.assertIsNone(self.codegen.generate(parse_string("def f(x) x * 100")))
        self.assertEqual(self._evaluate("f(1)"), 2.0)

    def test_module_valid_after_failed_definition(self):
        self._define("extern h(x)", "def user(x) h(x)")
        self.assertIsNone(self.codegen.generate(parse_string("def h(x) unknown")))
        # Still verifies: h is a plain declaration again
        self.jit.compile_module(self.codegen.module)

    def test_fib_lowering_verifies(self):
        self._define("def fib(x) if x < 2 then fib(x-1) else fib(x+1)")
        module = self.jit.compile_module(self.codegen.module)
        self.assertFalse(module.get_function("fib").is_declaration)

    def test_repeated_runs_on_one_compiler(self):
        self._define("def sq(x) x * x")
        for n in range(1, 6):
            self.assertEqual(self._evaluate(f"sq({n})"), float(n * n))
            self.codegen.remove_function(ANONYMOUS_FUNCTION_NAME)
        # The compiler's own target machine is still usable
        module = self.jit.compile_module(self.codegen.module)
        self.assertTrue(module.triple)

    def test_repeated_runs_with_optimization(self):
        jit = JITCompiler(opt_level=2)
        self._define("def fib(x) if x < 3 then 1 else fib(x-1) + fib(x-2)")
        self.assertEqual(self._evaluate("fib(10)", jit), 55.0)
        self.assertEqual(self._evaluate("fib(11)", jit), 89.0)
        self.assertEqual(self._evaluate("fib(12)", jit), 144.0)

    def test_optimization_levels(self):
        self._define("def fib(x) if x < 3 then 1 else fib(x-1) + fib(x-2)")
        for level in (1, 2, 3):
            jit = JITCompiler(opt_level=level)
            self.assertEqual(jit.opt_level, OptimizationLevel(level))
            self.assertEqual(self._evaluate("fib(12)", jit), 144.0)

    def test_invalid_optimization_level(self):
        with self.assertRaises(ValueError):
            JITCompiler(opt_level=7)

    def test_missing_function(self):
        self._define("def f(x) x")
        with self.assertRaises(JITError):
            self.jit.run_function(self.codegen.module, ANONYMOUS_FUNCTION_NAME)

    def test_unresolved_extern(self):
        self._define("extern definitelyNotAHostFunction(x)")
        with self.assertRaises(JITError) as context:
            self._evaluate("definitelyNotAHostFunction(1)")
        self.assertIn("definitelyNotAHostFunction", str(context.exception))

    def test_unused_extern_is_harmless(self):
        self._define("extern definitelyNotAHostFunction(x)")
        self.assertEqual(self._evaluate("2 * 21"), 42.0)


class TestHostLibrary(unittest.TestCase):
    """Test the putchard/printd host functions."""

    def setUp(self):
        self.codegen = LLVMCodeGenerator(error_stream=io.StringIO())
        self.jit = JITCompiler()

    def _run(self, *statements: str) -> float:
        for source in statements:
            self.assertIsNotNone(self.codegen.generate(parse_string(source)))
        return self.jit.run_function(self.codegen.module, ANONYMOUS_FUNCTION_NAME)

    def test_putchard(self):
        captured = io.StringIO()
        with contextlib.redirect_stderr(captured):
            result = self._run("extern putchard(c)", "putchard(65) + putchard(10)")
        self.assertEqual(result, 0.0)
        self.assertEqual(captured.getvalue(), "A\n")

    def test_printd(self):
        captured = io.StringIO()
        with contextlib.redirect_stderr(captured):
            result = self._run("extern printd(x)", "printd(2.5)")
        self.assertEqual(result, 0.0)
        self.assertEqual(captured.getvalue(), "2.5\n")


if __name__ == '__main__':
    unittest.main()
