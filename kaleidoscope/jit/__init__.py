"""
Kaleidoscope JIT Package.

Executes generated modules in-process through llvmlite's MCJIT.
"""

from .jit_compiler import JITCompiler, JITError, OptimizationLevel
from .library import HOST_FUNCTIONS, register_host_functions

__all__ = ['JITCompiler', 'JITError', 'OptimizationLevel', 'HOST_FUNCTIONS', 'register_host_functions']
