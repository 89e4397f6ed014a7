"""
rpnc Compiler Main Module
=========================

This module provides the main compiler interface. It wires the pieces
of one compilation together:

    Source → Lexer → Parser (+ SymbolTable) → Instructions → Emitter → Text

Usage
-----
Command line:
    $ rpnc prog.txt -o prog.rpn

Programmatic:
    >>> from rpnc.compiler import compile_source
    >>> print(compile_source('int f() { int a; a = 1 + 2; return a; }'), end="")
    int a 2 DECL
    1 2 + a =

Error Handling
--------------
Problems in the program text never raise. They are collected as
diagnostics on the CompilerResult and appended to the output after an
"Errors:" header. Only failing to read the source raises
(SourceReadError); callers wanting a hard failure on diagnostics use
CompilerResult.raise_if_errors().

Configuration
-------------
CompilerOptions holds the few knobs there are. CompilerOptions.from_env()
reads them from the environment:

    RPNC_ASSOCIATIVITY   "right" (default) or "left"
    RPNC_EMIT_RETURN     "1", "true", "yes" or "on" to emit 'return'
    RPNC_LABEL_PREFIX    label prefix (default "m")
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional
import logging
import os

from rpnc.errors import SourceLocation, SourceReadError, CompilationFailedError
from rpnc.compiler.lexer import Lexer
from rpnc.compiler.symbols import SymbolTable, Diagnostic
from rpnc.compiler.parser import Parser, Associativity
from rpnc.compiler.instructions import Instruction, LabelAllocator
from rpnc.compiler.emitter import render_program

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        associativity: How '+'/'-' chains group. RIGHT keeps the historical
                       output (a - b - c -> a b c - -); LEFT gives the
                       conventional reading (a b - c -).
        emit_return: Emit '<var> return' for the return statement. Off by
                     default; the return is type checked either way.
        label_prefix: Prefix for generated loop labels (m1, m2, ...).
    """
    associativity: Associativity = Associativity.RIGHT
    emit_return: bool = False
    label_prefix: str = "m"

    def __post_init__(self):
        if isinstance(self.associativity, str):
            self.associativity = Associativity(self.associativity.lower())
        if not self.label_prefix or any(c.isspace() for c in self.label_prefix):
            raise ValueError(
                f"label_prefix must be non-empty without whitespace, got {self.label_prefix!r}"
            )

    @classmethod
    def from_env(cls) -> "CompilerOptions":
        """
        Create CompilerOptions from environment variables.

        Unrecognized values are logged and the default is kept.
        """
        options = cls()

        if assoc := os.environ.get("RPNC_ASSOCIATIVITY"):
            try:
                options.associativity = Associativity(assoc.strip().lower())
            except ValueError:
                logger.warning(f"Ignoring RPNC_ASSOCIATIVITY={assoc!r} (expected 'left' or 'right')")

        if (emit := os.environ.get("RPNC_EMIT_RETURN")) is not None:
            value = emit.strip().lower()
            if value in _TRUE_VALUES:
                options.emit_return = True
            elif value in _FALSE_VALUES:
                options.emit_return = False
            else:
                logger.warning(f"Ignoring RPNC_EMIT_RETURN={emit!r} (expected a boolean)")

        if prefix := os.environ.get("RPNC_LABEL_PREFIX"):
            try:
                options = replace(options, label_prefix=prefix.strip())
            except ValueError:
                logger.warning(f"Ignoring RPNC_LABEL_PREFIX={prefix!r} (expected a label prefix)")

        return options


@dataclass
class CompilerResult:
    """
    Result of one compilation.

    Attributes:
        filename: Source filename
        instructions: Generated instructions, in program order
        diagnostics: Recorded diagnostics, in order
        declared_names: Declared variables in declaration order
        output: Complete rendered output, including any Errors block
    """
    filename: str
    instructions: list[Instruction] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    declared_names: list[str] = field(default_factory=list)
    output: str = ""

    @property
    def errors(self) -> list[str]:
        """Diagnostic messages in recording order."""
        return [d.message for d in self.diagnostics]

    @property
    def success(self) -> bool:
        """True when no diagnostics were recorded."""
        return not self.diagnostics

    def write_to(self, path: Path | str) -> None:
        """Write the rendered output to a file."""
        Path(path).write_text(self.output, encoding="utf-8")

    def raise_if_errors(self) -> None:
        """Raise CompilationFailedError if any diagnostics were recorded."""
        if self.diagnostics:
            raise CompilationFailedError(self.filename, self.errors)


class Compiler:
    """
    Front end driver.

    Each compile_* call builds a fresh lexer, symbol table, label
    allocator and parser, so one Compiler can be reused freely and
    separate compilations share no state.

    Example:
        compiler = Compiler()
        result = compiler.compile_file("prog.txt")
        print(result.output)

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

    def compile_source(self, source: str, filename: str = "<input>") -> CompilerResult:
        """
        Compile program text.

        Args:
            source: Program text
            filename: Source filename for locations and messages

        Returns:
            CompilerResult; check .success or .errors for diagnostics
        """
        symbols = SymbolTable()
        parser = Parser(
            Lexer(source, filename),
            symbols,
            labels=LabelAllocator(self.options.label_prefix),
            associativity=self.options.associativity,
            emit_return=self.options.emit_return,
        )
        instructions = parser.parse()

        result = CompilerResult(
            filename=filename,
            instructions=list(instructions),
            diagnostics=symbols.diagnostics(),
            declared_names=symbols.declared_names(),
        )
        result.output = render_program(result.instructions, result.errors)

        count = len(result.diagnostics)
        logger.info(
            f"Compiled {filename}: {len(result.instructions)} instructions, "
            f"{count} {'error' if count == 1 else 'errors'}"
        )
        for diagnostic in result.diagnostics:
            where = SourceLocation(filename, diagnostic.line) if diagnostic.line else filename
            logger.debug(f"{where}: {diagnostic.message}")

        return result

    def compile_file(self, filepath: Path | str) -> CompilerResult:
        """
        Compile a source file.

        Raises:
            SourceReadError: If the file cannot be opened
        """
        path = Path(filepath)
        try:
            # Undecodable bytes become U+FFFD and reach the parser as unknown tokens
            source = path.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            raise SourceReadError(path, "file not found")
        except OSError as e:
            raise SourceReadError(path, str(e)) from e

        return self.compile_source(source, str(path))


def compile_source(source: str, filename: str = "<input>", **options) -> str:
    """
    Compile program text and return the rendered output.

    Keyword arguments are passed to CompilerOptions.
    """
    compiler = Compiler(CompilerOptions(**options))
    return compiler.compile_source(source, filename).output
