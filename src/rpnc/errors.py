"""
rpnc Error Hierarchy
====================

This module defines the exception hierarchy for the rpnc toolchain.
All exceptions inherit from RpncError, allowing callers to catch every
toolchain error with a single except clause if desired.

Exception Hierarchy
-------------------
RpncError (base)
├── SourceReadError - the input program cannot be read
└── CompilationFailedError - diagnostics were recorded (strict mode only)

Design Philosophy
-----------------
The front end itself never raises for problems in the program text.
Lexical, syntactic and semantic problems are recorded as diagnostics and
the parse always runs to completion. Exceptions are reserved for the
surrounding collaborators: reading the source and, when the caller asks
for it, turning a non-empty diagnostics list into a failure.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence


# =============================================================================
# Base Exception Class
# =============================================================================

class RpncError(Exception):
    """
    Base exception for all rpnc errors.

        try:
            compiler.compile_file("program.txt")
        except RpncError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for diagnostics.

    Tokens only carry line numbers, so there is no column here.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
    """
    filename: str
    line: int

    def __str__(self) -> str:
        """Format as 'filename:line' for log messages."""
        return f"{self.filename}:{self.line}"


# =============================================================================
# Collaborator Errors
# =============================================================================

class SourceReadError(RpncError):
    """
    The program source could not be opened.

    Attributes:
        path: The path that was being read
        reason: Short description of the underlying failure
    """

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"cannot read '{self.path}': {reason}")


class CompilationFailedError(RpncError):
    """
    Raised on request when a compilation recorded diagnostics.

    Compilation itself never raises; CompilerResult.raise_if_errors()
    converts the diagnostics list into this exception for callers that
    want a hard failure (the CLI's --strict mode).

    Attributes:
        filename: Source the diagnostics belong to
        errors: Diagnostic messages, in recording order
    """

    def __init__(self, filename: str, errors: Sequence[str]):
        self.filename = filename
        self.errors = list(errors)
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        count = len(self.errors)
        word = "error" if count == 1 else "errors"
        parts = [f"{self.filename}: {count} {word}"]
        parts.extend(f"    {message}" for message in self.errors)
        return "\n".join(parts)
