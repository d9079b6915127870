"""
LLVM Backend for Kaleidoscope.

Walks the AST and emits LLVM IR through llvmlite's IR builder. The
module's globals double as the function registry; the symbol table
holds the parameters of the function currently being generated.

"""

import sys
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, TextIO

import llvmlite.ir as ll

from ..lexer.errors import Diagnostic
from ..parser.ast_nodes import (
    ASTNodeType, Expr, Number, Variable, Binary, Call, Prototype, Function, If
)
from .errors import (
    create_unknown_variable_error, create_unknown_function_error,
    create_arity_mismatch_error, create_unsupported_operator_error,
    create_type_mismatch_error, create_redefinition_error,
    create_no_current_function_error
)


# Operators the backend knows how to lower
BINARY_OPERATORS = frozenset("+-*<")


@dataclass
class CodeGenContext:
    """Mutable state threaded through code generation."""
    module: Optional[ll.Module] = None
    builder: Optional[ll.IRBuilder] = None
    current_function: Optional[ll.Function] = None
    named_values: Dict[str, Any] = None  # Maps parameter names to LLVM values

    def __post_init__(self):
        if self.named_values is None:
            self.named_values = {}


class LLVMCodeGenerator:
    """
    LLVM code generator for Kaleidoscope.

    Converts AST nodes to LLVM IR and handles:
    - Arithmetic and comparison lowering
    - Function declaration and definition, including redefinition rules
    - if/then/else lowering to a three-block diamond with a phi
    - Rollback of partially built functions on failure
    """

    def __init__(self, module_name: str = "kaleidoscope", error_stream: Optional[TextIO] = None):
        """
        Initialize the code generator with an empty module.

        Args:
            module_name: Name of the LLVM module
            error_stream: Where diagnostics are printed (stderr by default)
        """
        self.double_type = ll.DoubleType()
        self.context = CodeGenContext(module=ll.Module(name=module_name), builder=ll.IRBuilder())
        self.error_stream = error_stream
        self.errors: List[Diagnostic] = []

        self._generators = {
            ASTNodeType.NUMBER: self._codegen_number,
            ASTNodeType.VARIABLE: self._codegen_variable,
            ASTNodeType.BINARY: self._codegen_binary,
            ASTNodeType.CALL: self._codegen_call,
            ASTNodeType.PROTOTYPE: self._codegen_prototype,
            ASTNodeType.FUNCTION: self._codegen_function,
            ASTNodeType.IF: self._codegen_if,
        }

    @property
    def module(self) -> ll.Module:
        return self.context.module

    @property
    def builder(self) -> ll.IRBuilder:
        return self.context.builder

    @property
    def named_values(self) -> Dict[str, Any]:
        return self.context.named_values

    def generate(self, node: Expr) -> Optional[Any]:
        """
        Generate IR for an AST node.

        Args:
            node: Any AST node

        Returns:
            An LLVM value for expressions, an ``ir.Function`` for
            prototypes and definitions, or None on failure
        """
        return self._generators[node.node_type](node)

    def get_function(self, name: str) -> Optional[ll.Function]:
        """Look up a function in the registry."""
        function = self.module.globals.get(name)
        if isinstance(function, ll.Function):
            return function
        return None

    def remove_function(self, name: str) -> bool:
        """
        Remove a function from the module.

        The driver uses this to discard an anonymous expression once it
        has been executed.

        Returns:
            True if a function with that name existed
        """
        function = self.get_function(name)
        if function is None:
            return False
        self._delete_function(function)
        return True

    def dump_ir(self) -> str:
        """Get the module's LLVM IR as a string."""
        return str(self.module)

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _codegen_number(self, node: Number) -> ll.Constant:
        return ll.Constant(self.double_type, node.value)

    def _codegen_variable(self, node: Variable) -> Optional[Any]:
        value = self.named_values.get(node.name)
        if value is None:
            return self._error(create_unknown_variable_error(node.name, node.location))
        return value

    def _codegen_binary(self, node: Binary) -> Optional[Any]:
        op = node.operator
        if op not in BINARY_OPERATORS:
            return self._error(create_unsupported_operator_error(op, node.location))
        if not self._require_function("Binary expression", node):
            return None

        lhs = self.generate(node.lhs)
        if lhs is None:
            return None
        rhs = self.generate(node.rhs)
        if rhs is None:
            return None

        if op == "+":
            return self.builder.fadd(lhs, rhs, "addtmp")
        elif op == "-":
            return self.builder.fsub(lhs, rhs, "subtmp")
        elif op == "*":
            return self.builder.fmul(lhs, rhs, "multmp")

        # '<': the language has no booleans, so widen the i1 back to 0.0/1.0
        cmp = self.builder.fcmp_unordered("<", lhs, rhs, "cmptmp")
        return self.builder.uitofp(cmp, self.double_type, "booltmp")

    def _codegen_call(self, node: Call) -> Optional[Any]:
        callee = self.get_function(node.callee)
        if callee is None:
            return self._error(create_unknown_function_error(node.callee, node.location))

        if len(callee.args) != len(node.args):
            return self._error(create_arity_mismatch_error(
                node.callee, len(callee.args), len(node.args), node.location
            ))

        if not self._require_function("Call", node):
            return None

        args = []
        for arg in node.args:
            value = self.generate(arg)
            if value is None:
                return None
            args.append(value)

        return self.builder.call(callee, args, "calltmp")

    def _codegen_if(self, node: If) -> Optional[Any]:
        if not self._require_function("If expression", node):
            return None
        function = self.context.current_function

        condition = self.generate(node.condition)
        if condition is None:
            return None
        if condition.type != self.double_type:
            return self._error(create_type_mismatch_error(
                "if condition", self.double_type, condition.type, node.location
            ))

        # Non-zero is true
        zero = ll.Constant(self.double_type, 0.0)
        cond_bool = self.builder.fcmp_ordered("!=", condition, zero, "ifcond")

        then_block = function.append_basic_block("then")
        else_block = function.append_basic_block("else")
        merge_block = function.append_basic_block("ifcont")
        self.builder.cbranch(cond_bool, then_block, else_block)

        self.builder.position_at_end(then_block)
        then_value = self._codegen_branch(node.then_branch, merge_block, "then branch")
        if then_value is None:
            return None
        # Nested control flow may have moved us; the phi needs the block we left from
        then_exit = self.builder.block

        self.builder.position_at_end(else_block)
        else_value = self._codegen_branch(node.else_branch, merge_block, "else branch")
        if else_value is None:
            return None
        else_exit = self.builder.block

        self.builder.position_at_end(merge_block)
        phi = self.builder.phi(self.double_type, "iftmp")
        phi.add_incoming(then_value, then_exit)
        phi.add_incoming(else_value, else_exit)
        return phi

    def _codegen_branch(self, branch: Expr, merge_block: ll.Block, what: str) -> Optional[Any]:
        value = self.generate(branch)
        if value is None:
            return None
        if value.type != self.double_type:
            return self._error(create_type_mismatch_error(
                what, self.double_type, value.type, branch.location
            ))
        self.builder.branch(merge_block)
        return value

    # ------------------------------------------------------------------
    # Functions
    # ------------------------------------------------------------------

    def _codegen_prototype(self, node: Prototype) -> Optional[ll.Function]:
        """Declare ``double name(double, ...)`` or reuse a matching declaration."""
        existing = self.module.globals.get(node.name)

        if existing is not None:
            if not isinstance(existing, ll.Function) or not existing.is_declaration:
                return self._error(create_redefinition_error(node.name, node.location))
            if len(existing.args) != len(node.args):
                return self._error(create_arity_mismatch_error(
                    node.name, len(existing.args), len(node.args), node.location
                ))
            function = existing
        else:
            function_type = ll.FunctionType(self.double_type, [self.double_type] * len(node.args))
            function = ll.Function(self.module, function_type, name=node.name)

        for arg, name in zip(function.args, node.args):
            if arg.name != name:
                arg.name = name

        return function

    def _codegen_function(self, node: Function) -> Optional[ll.Function]:
        prototype = node.prototype

        existing = self.get_function(prototype.name)
        if existing is not None and not existing.is_declaration:
            if not prototype.is_anonymous:
                return self._error(create_redefinition_error(prototype.name, node.location))
            # Each bare expression replaces the previous one
            self._delete_function(existing)
            existing = None

        function = self._codegen_prototype(prototype)
        if function is None:
            return None

        entry = function.append_basic_block("entry")
        self.context.builder = ll.IRBuilder(entry)
        self.context.current_function = function

        self.named_values.clear()
        for arg, name in zip(function.args, prototype.args):
            self.named_values[name] = arg

        try:
            body = self.generate(node.body)

            return_type = function.ftype.return_type
            if body is not None and body.type != return_type:
                body = self._error(create_type_mismatch_error(
                    f"return value of '{prototype.name}'", return_type, body.type, node.location
                ))

            if body is None:
                self._rollback(function, was_declared=existing is not None)
                return None

            self.builder.ret(body)
            return function
        finally:
            self.context.current_function = None
            self.context.builder = ll.IRBuilder()
            self.named_values.clear()

    def _rollback(self, function: ll.Function, was_declared: bool):
        """Undo a failed definition so the registry only holds valid functions."""
        if was_declared:
            # Calls elsewhere may already refer to it: keep the declaration
            function.blocks.clear()
        else:
            self._delete_function(function)

    def _delete_function(self, function: ll.Function):
        del self.module.globals[function.name]
        self._release_name(function.name)

    def _release_name(self, name: str):
        # llvmlite has no public way to release a global name
        self.module.scope._useset.discard(name)

    # ------------------------------------------------------------------
    # Utility methods
    # ------------------------------------------------------------------

    def _require_function(self, construct: str, node: Expr) -> bool:
        if self.context.current_function is None:
            self._error(create_no_current_function_error(construct, node.location))
            return False
        return True

    def _error(self, diagnostic: Diagnostic) -> None:
        self.errors.append(diagnostic)
        print(diagnostic, end="", file=self.error_stream or sys.stderr)
        return None

    def has_errors(self) -> bool:
        return len(self.errors) > 0
