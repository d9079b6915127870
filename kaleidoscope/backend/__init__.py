"""
Kaleidoscope Backend Package.

Contains the LLVM IR code generator and its diagnostics.
"""

from .llvm_backend import LLVMCodeGenerator, CodeGenContext
from .errors import CODEGEN_ERROR_CODES

__all__ = ['LLVMCodeGenerator', 'CodeGenContext', 'CODEGEN_ERROR_CODES']
