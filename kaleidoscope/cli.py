"""
Command-line entry point for the Kaleidoscope REPL.

    kaleidoscope                       # interactive session on stdin
    kaleidoscope program.ks --no-prompt
    kaleidoscope --print-ir --opt-level 2
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .config import CompilerOptions
from .driver import Driver


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kaleidoscope",
        description="Kaleidoscope REPL: parse, compile to LLVM IR and JIT-execute",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    kaleidoscope                              # Interactive session
    kaleidoscope fib.ks --no-prompt           # Run a source file
    echo "def f(x) x*2; f(67);" | kaleidoscope --print-ir
        """
    )

    parser.add_argument('source', nargs='?', type=argparse.FileType('r', encoding='utf-8'),
                        default=None, help='Source file to run (default: stdin)')

    # Output options
    parser.add_argument('--print-ir', action='store_true',
                        help='Print the LLVM IR of every definition and expression')
    parser.add_argument('--print-parse', action='store_true',
                        help='Print each parsed top-level construct')
    parser.add_argument('--dump-module', action='store_true',
                        help='Print the whole module when input ends')
    parser.add_argument('--no-prompt', action='store_true',
                        help="Do not print the 'ready> ' prompt")

    # Compilation options
    parser.add_argument('--opt-level', type=int, choices=[0, 1, 2, 3], default=0,
                        help='JIT optimization level (default: 0)')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the REPL and return a process exit code."""
    args = build_arg_parser().parse_args(argv)

    options = CompilerOptions(
        print_ir=args.print_ir,
        print_parse=args.print_parse,
        opt_level=args.opt_level,
        show_prompt=not args.no_prompt,
    )

    source = args.source or sys.stdin
    filename = getattr(source, 'name', '<stdin>')

    try:
        driver = Driver(source, sys.stdout, options, sys.stderr, filename=filename)
        driver.run()
    finally:
        if args.source is not None:
            args.source.close()

    if args.dump_module:
        print(driver.codegen.dump_ir())

    return 1 if driver.fatal_error is not None else 0


if __name__ == '__main__':
    sys.exit(main())
