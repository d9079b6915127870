#!/usr/bin/env python3
"""
Main test runner for the Kaleidoscope compiler tests.

Runs a quick smoke test of the whole pipeline and then the unit tests
under tests/.
"""

import io
import os
import sys
import unittest

# Add the project root to the Python path
project_root = os.path.abspath(os.path.dirname(__file__))
sys.path.insert(0, project_root)


def run_smoke_test():
    """Push one small program through lexer, parser, codegen and JIT."""

    print("Kaleidoscope Compiler Test Suite")
    print("=" * 60)

    try:
        from kaleidoscope.parser import Parser, ANONYMOUS_FUNCTION_NAME
        from kaleidoscope.backend import LLVMCodeGenerator
        from kaleidoscope.jit import JITCompiler
        print("All compiler modules imported successfully")
    except ImportError as e:
        print(f"Failed to import compiler modules: {e}")
        print("   Install the dependencies first: pip install -e .[dev]")
        return False

    source = """
    # Fibonacci, then a call through the JIT
    def fib(x)
      if x < 3 then 1 else fib(x-1) + fib(x-2);
    fib(20);
    """

    errors = io.StringIO()
    parser = Parser.from_string(source, error_stream=errors)
    codegen = LLVMCodeGenerator("smoke", error_stream=errors)
    jit = JITCompiler(opt_level=2)

    print("Testing simple compilation pipeline...")
    definition = parser.parse_statement()
    parser.lexer.next_token()  # Consume ;
    expression = parser.parse_statement()
    if definition is None or expression is None:
        print(f"  Parse failed:\n{errors.getvalue()}")
        return False
    print(f"  Parsed: {definition}")

    if codegen.generate(definition) is None or codegen.generate(expression) is None:
        print(f"  Code generation failed:\n{errors.getvalue()}")
        return False
    print("  LLVM IR generated")

    result = jit.run_function(codegen.module, ANONYMOUS_FUNCTION_NAME)
    print(f"  fib(20) evaluated to {result}")
    if result != 6765.0:
        print("Full compilation pipeline test FAILED")
        return False

    print("Full compilation pipeline test PASSED")
    print()
    return True


def run_all_tests():
    """Run the smoke test and every unittest module under tests/."""
    if not run_smoke_test():
        return False

    suite = unittest.defaultTestLoader.discover(os.path.join(project_root, "tests"))
    result = unittest.TextTestRunner(verbosity=2).run(suite)

    print("\n" + "=" * 60)
    if result.wasSuccessful():
        print("All tests passed!")
    else:
        print("Some tests failed.")
        print(f"Failures: {len(result.failures)}")
        print(f"Errors: {len(result.errors)}")
    print(f"\nTotal tests run: {result.testsRun}")

    return result.wasSuccessful()


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
