"""
Host library for JIT-compiled Kaleidoscope code.

Programs reach these through ``extern``, e.g. ``extern putchard(c);``.
Each is a ``double (double)`` C callback whose address is registered
with LLVM's global symbol table, so MCJIT resolves the call by name.
Both return 0.0 on success and 1.0 if writing to stderr failed.
"""

import ctypes
import math
import sys
from typing import Callable, Dict

import llvmlite.binding as llvm


HOST_FUNCTION_TYPE = ctypes.CFUNCTYPE(ctypes.c_double, ctypes.c_double)


def putchard(x: float) -> float:
    """Write the character whose code is ``x`` (saturated to a byte) to stderr."""
    code = 0 if math.isnan(x) else int(min(max(x, 0.0), 255.0))
    try:
        sys.stderr.write(chr(code))
        sys.stderr.flush()
    except OSError:
        return 1.0
    return 0.0


def printd(x: float) -> float:
    """Write ``x`` followed by a newline to stderr."""
    try:
        print(x, file=sys.stderr, flush=True)
    except OSError:
        return 1.0
    return 0.0


HOST_FUNCTIONS: Dict[str, Callable[[float], float]] = {
    "putchard": putchard,
    "printd": printd,
}

# ctypes callbacks must outlive every engine that may call them
_registered: Dict[str, object] = {}


def register_host_functions():
    """Make the host library visible to the JIT. Safe to call repeatedly."""
    for name, function in HOST_FUNCTIONS.items():
        if name in _registered:
            continue
        callback = HOST_FUNCTION_TYPE(function)
        _registered[name] = callback
        llvm.add_symbol(name, ctypes.cast(callback, ctypes.c_void_p).value)
