"""
Postfix Instruction Definitions
===============================

This module defines the structured intermediate form produced by the
parser. Expressions are small trees that flatten to postfix order, and
each emitted line of output is an instruction record. Turning records
into text is a separate step (render()), so the parser never builds
output strings itself.

Node Hierarchy
--------------
Expression (base)
├── Operand - identifier or number (empty text after a parse error)
└── BinaryOp - '+', '-' or a relational operator over two expressions

Instruction (base)
├── Declare - int <names...> <count+1> DECL
├── Assign - <expr> <target> =
├── DefineLabel - <label> DEFL
├── BranchIfFalse - <cond> <label> BRL
├── Branch - <label> BRL
├── Evaluate - <expr>
└── Return - <name> return

Design Notes
------------
- All nodes are frozen dataclasses
- Expressions carry their inferred VarType alongside the tree
- Empty operands render as nothing, so rendered lines never contain
  doubled spaces
"""

from dataclasses import dataclass
from typing import Union

from rpnc.compiler.symbols import VarType


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass(frozen=True)
class Expression:
    """
    Base class for expression nodes.

    Subclasses carry their inferred type in a var_type field.
    """

    def postfix(self) -> list[str]:
        """Return the expression's tokens in postfix order."""
        raise NotImplementedError

    def render(self) -> str:
        return " ".join(part for part in self.postfix() if part)


@dataclass(frozen=True)
class Operand(Expression):
    """
    A variable name or integer literal.

    Attributes:
        text: Lexeme as written in the source ("" when no operand could be parsed)
        var_type: INT for literals, the declared type for variables
    """
    text: str
    var_type: VarType = VarType.INT

    def postfix(self) -> list[str]:
        return [self.text]


@dataclass(frozen=True)
class BinaryOp(Expression):
    """
    Binary operator applied to two sub-expressions.

    Attributes:
        op: Operator text ('+', '-', '<', '==', ...)
        left: Left operand
        right: Right operand
        var_type: Result type (always INT once checked)
    """
    op: str
    left: Expression
    right: Expression
    var_type: VarType = VarType.INT

    def postfix(self) -> list[str]:
        # Explicit stack: long '+'/'-' chains nest thousands of levels deep
        parts: list[str] = []
        stack: list[Union[Expression, str]] = [self]
        while stack:
            item = stack.pop()
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, BinaryOp):
                stack.append(item.op)
                stack.append(item.right)
                stack.append(item.left)
            else:
                parts.extend(item.postfix())
        return parts


# =============================================================================
# Instructions
# =============================================================================

@dataclass(frozen=True)
class Instruction:
    """Base class for one line of emitted output."""

    def render(self) -> str:
        raise NotImplementedError


def _join(*parts: str) -> str:
    return " ".join(part for part in parts if part)


@dataclass(frozen=True)
class Declare(Instruction):
    """
    Declaration record: every declared name in first-declaration order,
    followed by the variable count plus one.
    """
    names: tuple[str, ...]

    def render(self) -> str:
        return _join("int", *self.names, str(len(self.names) + 1), "DECL")


@dataclass(frozen=True)
class Assign(Instruction):
    """Store the value of expr in target."""
    expr: Expression
    target: str

    def render(self) -> str:
        return _join(self.expr.render(), self.target, "=")


@dataclass(frozen=True)
class DefineLabel(Instruction):
    """Mark the position of label."""
    label: str

    def render(self) -> str:
        return f"{self.label} DEFL"


@dataclass(frozen=True)
class BranchIfFalse(Instruction):
    """Branch to label when condition is false."""
    condition: Expression
    label: str

    def render(self) -> str:
        return _join(self.condition.render(), self.label, "BRL")


@dataclass(frozen=True)
class Branch(Instruction):
    """Unconditional branch to label."""
    label: str

    def render(self) -> str:
        return f"{self.label} BRL"


@dataclass(frozen=True)
class Evaluate(Instruction):
    """An expression evaluated for its own sake (a bare loop step)."""
    expr: Expression

    def render(self) -> str:
        return self.expr.render()


@dataclass(frozen=True)
class Return(Instruction):
    """Return the value of a variable. Only emitted when enabled."""
    name: str

    def render(self) -> str:
        return _join(self.name, "return")


# =============================================================================
# Label Allocation
# =============================================================================

class LabelAllocator:
    """
    Hands out unique labels: <prefix>1, <prefix>2, ...

    One allocator serves a whole compilation and is never reset, so
    labels from nested and sequential loops never collide.
    """

    def __init__(self, prefix: str = "m"):
        self.prefix = prefix
        self._next = 1

    def allocate(self) -> str:
        label = f"{self.prefix}{self._next}"
        self._next += 1
        return label

    @property
    def count(self) -> int:
        """Number of labels handed out so far."""
        return self._next - 1
