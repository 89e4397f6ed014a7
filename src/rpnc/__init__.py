"""
rpnc - Postfix Compiler Front End
=================================

This package provides a single-pass front end for a minimal C-like
language and the `rpnc` command-line tool around it.

Main Components
---------------
- **compiler**: lexer, symbol table, parser/code generator, emitter
    Turns program text into postfix code plus a list of diagnostics

- **cli**: command-line interface (rpnc)
    Reads a source file and writes the postfix output

Quick Start
-----------
    >>> from rpnc import Compiler
    >>> result = Compiler().compile_source("int f() { int a; a = 1 + 2; return a; }")
    >>> print(result.output, end="")
    int a 2 DECL
    1 2 + a =
    >>> result.success
    True

Or use the command-line tool:
    $ rpnc prog.txt -o prog.rpn
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from rpnc.compiler import (
    Compiler,
    CompilerOptions,
    CompilerResult,
    compile_source,
    Associativity,
)
from rpnc.errors import (
    RpncError,
    SourceLocation,
    SourceReadError,
    CompilationFailedError,
)

__all__ = [
    "__version__",
    # Compiler
    "Compiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_source",
    "Associativity",
    # Exception hierarchy
    "RpncError",
    "SourceLocation",
    "SourceReadError",
    "CompilationFailedError",
]
