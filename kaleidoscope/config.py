"""
Compiler configuration for Kaleidoscope.

"""

from dataclasses import dataclass


@dataclass
class CompilerOptions:
    """Options shared by the driver and the command-line entry point."""
    print_ir: bool = False        # Print IR for each definition, extern and expression
    print_parse: bool = False     # Print each parsed top-level construct
    opt_level: int = 0            # 0-3, passed to the JIT
    show_prompt: bool = True      # Write "ready> " before each statement
    module_name: str = "kaleidoscope"

    def __post_init__(self):
        if not 0 <= self.opt_level <= 3:
            raise ValueError(f"opt_level must be between 0 and 3, got {self.opt_level}")
