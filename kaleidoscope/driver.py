"""
Kaleidoscope REPL driver.

Reads one top-level statement at a time, generates code for it and, for
bare expressions, runs it through the JIT. A statement that fails to
parse is abandoned by skipping a single token; the next loop iteration
starts over from wherever that leaves the lexer.
"""

import sys
from typing import List, Optional, TextIO

from .config import CompilerOptions
from .lexer import Lexer, LexerError, TokenType
from .parser import Parser, OperatorTable, ANONYMOUS_FUNCTION_NAME
from .backend import LLVMCodeGenerator
from .jit import JITCompiler, JITError


PROMPT = "ready> "


class Driver:
    """
    Interactive read-eval-print loop over a character stream.

    Output (prompts, parse trees, IR, results) goes to ``output_stream``;
    diagnostics go to ``error_stream``.
    """

    def __init__(self, input_stream: Optional[TextIO] = None,
                 output_stream: Optional[TextIO] = None,
                 options: Optional[CompilerOptions] = None,
                 error_stream: Optional[TextIO] = None,
                 filename: str = "<stdin>"):
        self.options = options or CompilerOptions()
        self.input_stream = input_stream or sys.stdin
        self.output_stream = output_stream or sys.stdout
        self.error_stream = error_stream or sys.stderr

        self.lexer = Lexer(self.input_stream, filename)
        self.operators = OperatorTable.default()
        self.parser = Parser(self.lexer, self.operators, self.error_stream)
        self.codegen = LLVMCodeGenerator(self.options.module_name, self.error_stream)
        self.jit = JITCompiler(self.options.opt_level)

        self.results: List[float] = []
        self.fatal_error: Optional[LexerError] = None
        self._reported_lexer_errors = 0

    def run(self) -> List[float]:
        """
        Run until end of input or a fatal input error.

        Returns:
            The values of the top-level expressions evaluated so far
        """
        try:
            self._prompt()
            self.lexer.next_token()

            while True:
                token = self.lexer.current_token

                if token.type == TokenType.EOF:
                    break
                elif token.is_char(";"):
                    # The next read may block on the terminal
                    self._prompt()
                    self.lexer.next_token()
                elif token.type == TokenType.DEF:
                    self.handle_definition()
                elif token.type == TokenType.EXTERN:
                    self.handle_extern()
                else:
                    self.handle_top_level_expression()

                self._report_lexer_diagnostics()

        except LexerError as e:
            self.fatal_error = e
            print(e, end="", file=self.error_stream)

        if self.options.show_prompt:
            self._write("")
        return self.results

    def handle_definition(self):
        function_ast = self.parser.parse_function_definition()
        if function_ast is None:
            self._skip_token()
            return

        self._print_parse("Parsed a function definition", function_ast)
        function = self.codegen.generate(function_ast)
        if function is not None and self.options.print_ir:
            self._write(f"Read function definition:\n{function}")

    def handle_extern(self):
        prototype_ast = self.parser.parse_extern()
        if prototype_ast is None:
            self._skip_token()
            return

        self._print_parse("Parsed an extern", prototype_ast)
        function = self.codegen.generate(prototype_ast)
        if function is not None and self.options.print_ir:
            self._write(f"Read extern:\n{function}")

    def handle_top_level_expression(self):
        function_ast = self.parser.parse_top_level_expression()
        if function_ast is None:
            self._skip_token()
            return

        self._print_parse("Parsed a top-level expression", function_ast.body)
        function = self.codegen.generate(function_ast)
        if function is None:
            return
        if self.options.print_ir:
            self._write(f"Read top-level expression:\n{function}")

        try:
            value = self.jit.run_function(self.codegen.module, ANONYMOUS_FUNCTION_NAME)
        except JITError as e:
            print(f"ERROR: {e}", file=self.error_stream)
            return
        finally:
            self.codegen.remove_function(ANONYMOUS_FUNCTION_NAME)

        self.results.append(value)
        self._write(f"Evaluated to {value}")

    def _skip_token(self):
        # Resynchronise: drop the offending token and start a new statement
        self.lexer.next_token()

    def _report_lexer_diagnostics(self):
        for diagnostic in self.lexer.errors[self._reported_lexer_errors:]:
            print(diagnostic, end="", file=self.error_stream)
        self._reported_lexer_errors = len(self.lexer.errors)

    def _print_parse(self, what: str, node):
        if self.options.print_parse:
            self._write(f"{what}: {node}")

    def _prompt(self):
        if self.options.show_prompt:
            self.output_stream.write(PROMPT)
            self.output_stream.flush()

    def _write(self, text: str):
        print(text, file=self.output_stream, flush=True)
