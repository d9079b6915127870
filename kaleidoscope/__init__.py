"""
Kaleidoscope Compiler Package

A small expression language front end: a streaming lexer, an
operator-precedence parser, an LLVM IR code generator and an MCJIT-based
REPL.

Architecture:
    kaleidoscope/
    ├── lexer/           # Tokenization
    ├── parser/          # Operator table, AST and parser
    ├── backend/         # LLVM IR generation
    ├── jit/             # Native execution and host library
    ├── driver.py        # REPL loop
    └── cli.py           # Command-line entry point
"""

__version__ = "0.1.0"

from .config import CompilerOptions
from .driver import Driver

__all__ = ['CompilerOptions', 'Driver', '__version__']
