"""
rpnc Front End
==============

Single-pass front end for a minimal C-like language: one int function,
declarations, assignments and for loops. It produces postfix
(reverse-Polish) code with explicit loop labels.

- A pull-based lexer
- A flat symbol table that also collects diagnostics
- A recursive descent parser that checks and generates code in one pass
- Structured instructions rendered to text by a separate emitter

Pipeline
--------
    Source → Lexer → Parser (+ SymbolTable) → Instructions → Emitter → Text

Usage
-----
>>> from rpnc.compiler import compile_source
>>> print(compile_source('''
... int main() {
...     int i, s;
...     s = 0;
...     for (i = 0; i < 3; i = i + 1) { s = s + i; }
...     return s;
... }
... '''), end="")
int i s 3 DECL
0 s =
0 i =
m1 DEFL
i 3 < m2 BRL
s i + s =
i 1 + i =
m1 BRL
m2 DEFL

Language Subset
---------------
Supported: int declarations, '=' assignment, '+' and '-', relational
operators in loop conditions, parentheses, nested for loops.

Not supported: other types, function calls, multiple functions, nested
scopes, arrays, '*' and '/', optimization.
"""

from rpnc.compiler.compiler import (
    Compiler,
    CompilerOptions,
    CompilerResult,
    compile_source,
)
from rpnc.compiler.lexer import Lexer, Token, TokenType
from rpnc.compiler.symbols import SymbolTable, VarType, Diagnostic
from rpnc.compiler.parser import Parser, Associativity
from rpnc.compiler.emitter import Emitter, render_program
from rpnc.compiler.instructions import (
    Expression,
    Operand,
    BinaryOp,
    Instruction,
    Declare,
    Assign,
    DefineLabel,
    BranchIfFalse,
    Branch,
    Evaluate,
    Return,
    LabelAllocator,
)

__all__ = [
    # Main API
    "Compiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_source",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    # Symbols
    "SymbolTable",
    "VarType",
    "Diagnostic",
    # Parser
    "Parser",
    "Associativity",
    # Emitter
    "Emitter",
    "render_program",
    # Instructions
    "Expression",
    "Operand",
    "BinaryOp",
    "Instruction",
    "Declare",
    "Assign",
    "DefineLabel",
    "BranchIfFalse",
    "Branch",
    "Evaluate",
    "Return",
    "LabelAllocator",
]
