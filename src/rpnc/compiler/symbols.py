"""
Symbol Table
============

Flat, single-namespace table of declared variables plus the diagnostics
list for one compilation.

The language has exactly one scope and one type, so the table is a plain
name -> VarType mapping. It also remembers first-declaration order, which
the parser needs for the declaration record, and collects every
diagnostic recorded during the pass.

Invariants
----------
- A name is declared at most once. A second declaration records
  "Variable <name> redeclared" and keeps the original binding.
- Looking up an undeclared name records "Variable <name> not declared
  before use" and returns VarType.UNDEFINED, a sentinel that later checks
  use to avoid piling further errors onto the same mistake.
- Diagnostics are append-only and never deduplicated.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class VarType(Enum):
    """Variable types. UNDEFINED marks a use whose type is unknown."""

    INT = auto()
    UNDEFINED = auto()


@dataclass(frozen=True)
class Diagnostic:
    """
    A recorded problem in the program text.

    Attributes:
        message: Human-readable description (the text printed under Errors:)
        line: Source line of the token being processed, when known
    """
    message: str
    line: Optional[int] = None

    def __str__(self) -> str:
        return self.message


class SymbolTable:
    """
    Variable bindings, declaration order and diagnostics for one pass.

    Example:
        symbols = SymbolTable()
        symbols.declare("a", VarType.INT)
        symbols.type_of("b")     # VarType.UNDEFINED, records a diagnostic
        symbols.errors()         # ['Variable b not declared before use']
    """

    def __init__(self) -> None:
        self._vars: dict[str, VarType] = {}
        self._declared: list[str] = []
        self._diagnostics: list[Diagnostic] = []

    def declare(self, name: str, var_type: VarType, line: Optional[int] = None) -> None:
        """Add a variable, or record a redeclaration and keep the old entry."""
        if name in self._vars:
            self.record_error(f"Variable {name} redeclared", line)
            return
        self._vars[name] = var_type
        self._declared.append(name)
        logger.debug(f"declared '{name}' as {var_type.name}")

    def type_of(self, name: str, line: Optional[int] = None) -> VarType:
        """Return the declared type of name, or UNDEFINED after recording an error."""
        if name not in self._vars:
            self.record_error(f"Variable {name} not declared before use", line)
            return VarType.UNDEFINED
        return self._vars[name]

    def record_error(self, message: str, line: Optional[int] = None) -> None:
        """Append a diagnostic."""
        self._diagnostics.append(Diagnostic(message, line))
        if line is not None:
            logger.debug(f"line {line}: {message}")
        else:
            logger.debug(message)

    def has_errors(self) -> bool:
        return len(self._diagnostics) > 0

    def errors(self) -> list[str]:
        """Diagnostic messages in recording order."""
        return [d.message for d in self._diagnostics]

    def diagnostics(self) -> list[Diagnostic]:
        """Diagnostics, with line numbers, in recording order."""
        return list(self._diagnostics)

    def declared_names(self) -> list[str]:
        """Declared names in first-declaration order."""
        return list(self._declared)

    def __contains__(self, name: str) -> bool:
        return name in self._vars

    def __len__(self) -> int:
        return len(self._vars)
