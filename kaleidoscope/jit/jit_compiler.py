"""
Kaleidoscope JIT Compiler
=========================

Compiles the code generator's llvmlite module to machine code and runs
anonymous top-level expressions.

Features:
- Verification of the textual IR before anything is executed
- Optional per-function optimization through LLVM's new pass manager
- One transient MCJIT engine per execution, released before returning
- Host library symbols (putchard, printd) registered on start-up
"""

import ctypes
from enum import Enum
from typing import List

import llvmlite.binding as llvm
import llvmlite.ir as ir

from .library import register_host_functions


class JITError(Exception):
    """Raised when a module fails to verify, compile or run."""


class OptimizationLevel(Enum):
    """JIT optimization levels"""
    O0 = 0  # No optimization (fast compilation)
    O1 = 1  # Basic optimization
    O2 = 2  # Standard optimization
    O3 = 3  # Aggressive optimization (slow compilation)


_native_target_ready = False


def _initialize_native_target():
    global _native_target_ready
    if _native_target_ready:
        return
    llvm.initialize_native_target()
    llvm.initialize_native_asmprinter()
    llvm.initialize_native_asmparser()
    _native_target_ready = True


class JITCompiler:
    """LLVM MCJIT-based execution backend"""

    def __init__(self, opt_level: int = 0):
        """
        Initialize the native target and the host library.

        Args:
            opt_level: 0 disables optimization; 1-3 select the speed level
                of the per-function pipeline

        Raises:
            ValueError: If ``opt_level`` is not between 0 and 3
        """
        self.opt_level = OptimizationLevel(opt_level)

        _initialize_native_target()
        register_host_functions()

        target = llvm.Target.from_default_triple()
        self.target_machine = target.create_target_machine()

    def compile_module(self, ir_module: ir.Module) -> llvm.ModuleRef:
        """
        Parse and verify an IR module, optimizing it if requested.

        Args:
            ir_module: Module built by the code generator

        Returns:
            The verified (and possibly optimized) binding module

        Raises:
            JITError: If LLVM rejects the module
        """
        try:
            module = llvm.parse_assembly(str(ir_module))
            module.verify()
        except RuntimeError as e:
            raise JITError(f"Invalid module '{ir_module.name}': {e}") from e

        module.triple = self.target_machine.triple
        module.data_layout = str(self.target_machine.target_data)

        if self.opt_level != OptimizationLevel.O0:
            self._optimize_module(module)

        return module

    def _optimize_module(self, module: llvm.ModuleRef):
        """Run the function-level pipeline over every defined function."""
        tuning = llvm.create_pipeline_tuning_options(speed_level=self.opt_level.value)
        pass_builder = llvm.create_pass_builder(self.target_machine, tuning)
        function_passes = pass_builder.getFunctionPassManager()

        for function in module.functions:
            if not function.is_declaration:
                function_passes.run(function, pass_builder)

    @staticmethod
    def unresolved_callees(module: llvm.ModuleRef) -> List[str]:
        """Names of declared functions that are called but have no symbol in the process."""
        declared = {f.name for f in module.functions if f.is_declaration}
        missing = set()

        for function in module.functions:
            if function.is_declaration:
                continue
            for block in function.blocks:
                for instruction in block.instructions:
                    if instruction.opcode != "call":
                        continue
                    for operand in instruction.operands:
                        name = operand.name
                        if name not in declared or name.startswith("llvm."):
                            continue
                        if llvm.address_of_symbol(name) is None:
                            missing.add(name)

        return sorted(missing)

    def run_function(self, ir_module: ir.Module, name: str) -> float:
        """
        Compile ``ir_module`` and call the nullary function ``name``.

        Args:
            ir_module: Module containing the function
            name: Name of a ``double ()`` function

        Returns:
            The function's result

        Raises:
            JITError: If the module is invalid or the function is missing
        """
        module = self.compile_module(ir_module)

        # MCJIT aborts the process on a call it cannot link, so check first
        missing = self.unresolved_callees(module)
        if missing:
            raise JITError(f"Unresolved external function(s): {', '.join(missing)}")

        # The engine owns the module and its target machine and frees both on close
        target_machine = llvm.Target.from_default_triple().create_target_machine()
        with llvm.create_mcjit_compiler(module, target_machine) as engine:
            engine.finalize_object()
            address = engine.get_function_address(name)
            if not address:
                raise JITError(f"Function '{name}' was not compiled")

            entry_point = ctypes.CFUNCTYPE(ctypes.c_double)(address)
            return float(entry_point())
