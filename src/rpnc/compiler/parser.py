"""
Recursive Descent Parser and Code Generator
===========================================

This module implements the single-pass analyzer for the rpnc language.
Syntax checking, semantic checking and code generation happen together:
as each construct is recognized the parser consults the symbol table and
appends postfix instructions to its output list.

Grammar (EBNF)
--------------
program      ::= type IDENTIFIER '(' ')' '{' descriptions operators
                 'return' IDENTIFIER ';' '}'
type         ::= 'int'
descriptions ::= descr*
descr        ::= type id_list ';'
id_list      ::= IDENTIFIER (',' IDENTIFIER)*
operators    ::= op*                 (until 'return', '}' or EOF)
op           ::= assignment | for_loop
assignment   ::= IDENTIFIER '=' expr ';'
for_loop     ::= 'for' '(' IDENTIFIER '=' expr ';' condition ';' step ')'
                 '{' operators '}'
step         ::= IDENTIFIER '=' expr | expr
condition    ::= expr relop expr
expr         ::= simple_expr (('+' | '-') expr)?      right-associative
               | simple_expr (('+' | '-') simple_expr)*   left-associative
simple_expr  ::= IDENTIFIER | NUMBER | '(' expr ')'

Error Recovery
--------------
Nothing in here raises for bad input. Every problem is recorded in the
symbol table and parsing carries on:

- _expect() records "Expected token X got Y" and does not consume the
  offending token. Later expectations may fail on the same token again.
- A statement that starts with anything other than an identifier or 'for'
  records "Unexpected operator" and skips to the next ';' (consumed),
  '}' or EOF.
- Undeclared names yield VarType.UNDEFINED; assignment and return checks
  stay quiet when either side is UNDEFINED.

Example Usage
-------------
>>> from rpnc.compiler.lexer import Lexer
>>> from rpnc.compiler.parser import Parser
>>> parser = Parser(Lexer('int f() { int a; a = 1 + 2; return a; }'))
>>> [instr.render() for instr in parser.parse()]
['int a 2 DECL', '1 2 + a =']
"""

from dataclasses import replace
from enum import Enum
from typing import Optional
import logging

from rpnc.compiler.lexer import (
    Lexer,
    Token,
    TokenType,
    ADDITIVE_OPERATORS,
    RELATIONAL_OPERATORS,
)
from rpnc.compiler.symbols import SymbolTable, VarType
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

logger = logging.getLogger(__name__)


class Associativity(Enum):
    """How chains of '+' and '-' are grouped."""

    RIGHT = "right"   # a - b - c  ->  a b c - -
    LEFT = "left"     # a - b - c  ->  a b - c -


# Tokens that end a statement list
_OPERATORS_END = frozenset({TokenType.RETURN, TokenType.RBRACE, TokenType.EOF})

# Tokens panic-mode recovery stops at
_SYNC_TOKENS = frozenset({TokenType.SEMICOLON, TokenType.RBRACE, TokenType.EOF})


class Parser:
    """
    Recursive descent analyzer with one token of lookahead.

    The parser owns its symbol table, label allocator and instruction
    list for the duration of one parse() call. All state lives on the
    instance; independent parsers share nothing.

    Attributes:
        lexer: Token source
        symbols: Bindings and diagnostics
        labels: Label allocator shared by every loop in the program
        associativity: Grouping of '+'/'-' chains
        emit_return: Emit a 'return' instruction for the return statement
        instructions: Instructions generated so far, in program order
        function_name: Name of the parsed function ("" if missing)
        function_type: Declared return type of the function
    """

    def __init__(
        self,
        lexer: Lexer,
        symbols: Optional[SymbolTable] = None,
        labels: Optional[LabelAllocator] = None,
        associativity: Associativity = Associativity.RIGHT,
        emit_return: bool = False,
    ):
        self.lexer = lexer
        self.symbols = symbols if symbols is not None else SymbolTable()
        self.labels = labels if labels is not None else LabelAllocator()
        self.associativity = associativity
        self.emit_return = emit_return

        self.instructions: list[Instruction] = []
        self.function_name = ""
        self.function_type = VarType.UNDEFINED

        self.current: Token = lexer.current_token()

    def parse(self) -> list[Instruction]:
        """
        Parse the whole program.

        Returns:
            The generated instructions, in program order. Diagnostics are
            available from self.symbols.
        """
        self._parse_function()
        logger.debug(
            f"parsed '{self.function_name}': {len(self.instructions)} instructions, "
            f"{len(self.symbols.errors())} diagnostics"
        )
        return self.instructions

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _next(self) -> None:
        self.current = self.lexer.next_token()

    def _check(self, *types: TokenType) -> bool:
        return self.current.type in types

    def _expect(self, token_type: TokenType) -> bool:
        """
        Consume the current token if it has the expected type.

        On mismatch a diagnostic is recorded and the token is left in
        place for the caller's recovery.
        """
        if self.current.type == token_type:
            self._next()
            return True
        self._error(
            f"Expected token {token_type.display_name} got {self.current.type.display_name}"
        )
        return False

    def _error(self, message: str) -> None:
        logger.debug(f"{self.current.location}: {message} (at {self.current!r})")
        self.symbols.record_error(message, self.current.line)

    def _emit(self, instruction: Instruction) -> None:
        logger.debug(f"emit: {instruction.render()}")
        self.instructions.append(instruction)

    # =========================================================================
    # Program Structure
    # =========================================================================

    def _parse_type(self) -> VarType:
        """
        Parse a type keyword.

        'int' is the only type. Any other token is taken to mean int and
        is left unconsumed.
        """
        if self._check(TokenType.INT):
            self._next()
        return VarType.INT

    def _parse_id(self) -> str:
        """Consume an identifier and return its name, or "" after an error."""
        if self._check(TokenType.IDENTIFIER):
            name = self.current.text
            self._next()
            return name
        self._error("Expected identifier")
        return ""

    def _parse_function(self) -> None:
        self.function_type = self._parse_type()
        self.function_name = self._parse_id()
        self._expect(TokenType.LPAREN)
        self._expect(TokenType.RPAREN)
        self._expect(TokenType.LBRACE)

        self._parse_descriptions()
        self._emit(Declare(tuple(self.symbols.declared_names())))

        self._parse_operators()

        self._expect(TokenType.RETURN)
        line = self.current.line
        name = self._parse_id()
        self._expect(TokenType.SEMICOLON)
        self._expect(TokenType.RBRACE)

        if name:
            return_type = self.symbols.type_of(name, line)
            if (
                return_type != self.function_type
                and return_type != VarType.UNDEFINED
                and self.function_type != VarType.UNDEFINED
            ):
                self.symbols.record_error("Return type does not match function type", line)
            if self.emit_return:
                self._emit(Return(name))

    def _parse_descriptions(self) -> None:
        while self._check(TokenType.INT):
            self._parse_descr()

    def _parse_descr(self) -> None:
        var_type = self._parse_type()
        self._parse_var_list(var_type)
        self._expect(TokenType.SEMICOLON)

    def _parse_var_list(self, var_type: VarType) -> None:
        line = self.current.line
        name = self._parse_id()
        if name:
            self.symbols.declare(name, var_type, line)
        while self._check(TokenType.COMMA):
            self._next()
            line = self.current.line
            name = self._parse_id()
            if name:
                self.symbols.declare(name, var_type, line)

    # =========================================================================
    # Statements
    # =========================================================================

    def _parse_operators(self) -> None:
        while not self._check(*_OPERATORS_END):
            self._parse_op()

    def _parse_op(self) -> None:
        if self._check(TokenType.IDENTIFIER):
            self._parse_assignment()
        elif self._check(TokenType.FOR):
            self._parse_for()
        else:
            self._error("Unexpected operator")
            self._skip_statement()

    def _skip_statement(self) -> None:
        """Panic-mode recovery: discard tokens up to ';', '}' or EOF."""
        skipped = 0
        while not self._check(*_SYNC_TOKENS):
            self._next()
            skipped += 1
        if self._check(TokenType.SEMICOLON):
            self._next()
        logger.debug(f"{self.current.location}: skipped {skipped} tokens after bad statement")

    def _parse_assignment_tail(self, target: str, line: int) -> Assign:
        """
        Parse '= expr' for an already-consumed target and type check it.

        Shared by plain assignments, loop initializers and assignment-form
        loop steps.
        """
        self._expect(TokenType.ASSIGN)
        expr = self._parse_expr()
        if target:
            target_type = self.symbols.type_of(target, line)
            if (
                target_type != expr.var_type
                and target_type != VarType.UNDEFINED
                and expr.var_type != VarType.UNDEFINED
            ):
                self.symbols.record_error(f"Type mismatch in assignment to {target}", line)
        return Assign(expr, target)

    def _parse_assignment(self) -> None:
        line = self.current.line
        target = self._parse_id()
        assign = self._parse_assignment_tail(target, line)
        self._expect(TokenType.SEMICOLON)
        self._emit(assign)

    def _parse_for(self) -> None:
        """
        Parse a for loop and emit its control flow.

        Layout:
            <init> <var> =
            <start> DEFL
            <cond> <end> BRL
            <body...>
            <step>
            <start> BRL
            <end> DEFL
        """
        self._expect(TokenType.FOR)
        start_label = self.labels.allocate()
        end_label = self.labels.allocate()
        self._expect(TokenType.LPAREN)

        line = self.current.line
        loop_var = self._parse_id()
        self._emit(self._parse_assignment_tail(loop_var, line))
        self._expect(TokenType.SEMICOLON)

        self._emit(DefineLabel(start_label))
        condition = self._parse_condition()
        self._expect(TokenType.SEMICOLON)
        self._emit(BranchIfFalse(condition, end_label))

        step = self._parse_step()
        self._expect(TokenType.RPAREN)
        self._expect(TokenType.LBRACE)

        self._parse_operators()

        self._expect(TokenType.RBRACE)

        self._emit(step)
        self._emit(Branch(start_label))
        self._emit(DefineLabel(end_label))

    def _parse_step(self) -> Instruction:
        """
        Parse the loop step: 'i = i + 1' or a bare expression.

        An identifier followed by '=' is an assignment; otherwise the
        identifier is the first operand of a bare expression.
        """
        if not self._check(TokenType.IDENTIFIER):
            return Evaluate(self._parse_expr())

        line = self.current.line
        name = self._parse_id()
        if self._check(TokenType.ASSIGN):
            return self._parse_assignment_tail(name, line)

        first = Operand(name, self.symbols.type_of(name, line))
        return Evaluate(self._parse_additive_tail(first))

    # =========================================================================
    # Expressions
    # =========================================================================

    def _parse_condition(self) -> Expression:
        left = self._parse_expr()
        if not self._check(*RELATIONAL_OPERATORS):
            self._error("Expected relational operator in condition")
            return replace(left, var_type=VarType.UNDEFINED)

        op = self.current.text
        self._next()
        right = self._parse_expr()
        if left.var_type != VarType.INT or right.var_type != VarType.INT:
            self._error("Condition operands must be int")
        return BinaryOp(op, left, right, VarType.INT)

    def _parse_expr(self) -> Expression:
        return self._parse_additive_tail(self._parse_simple_expr())

    def _parse_additive_tail(self, left: Expression) -> Expression:
        """
        Continue an expression whose first operand is already parsed.

        Operands and operators are collected iteratively and then folded,
        so chain length is not bounded by the recursion limit. Right folds
        check the innermost pair first.
        """
        if self.associativity == Associativity.LEFT:
            while self._check(*ADDITIVE_OPERATORS):
                op = self.current.text
                self._next()
                right = self._parse_simple_expr()
                left = self._make_arithmetic(op, left, right)
            return left

        operands = [left]
        ops = []
        while self._check(*ADDITIVE_OPERATORS):
            ops.append(self.current.text)
            self._next()
            operands.append(self._parse_simple_expr())

        result = operands.pop()
        while ops:
            result = self._make_arithmetic(ops.pop(), operands.pop(), result)
        return result

    def _make_arithmetic(self, op: str, left: Expression, right: Expression) -> BinaryOp:
        if left.var_type != VarType.INT or right.var_type != VarType.INT:
            self._error("Arithmetic operands must be int")
        return BinaryOp(op, left, right, VarType.INT)

    def _parse_simple_expr(self) -> Expression:
        token = self.current

        if token.type == TokenType.IDENTIFIER:
            self._next()
            return Operand(token.text, self.symbols.type_of(token.text, token.line))

        if token.type == TokenType.NUMBER:
            self._next()
            return Operand(token.text, VarType.INT)

        if token.type == TokenType.LPAREN:
            self._next()
            inner = self._parse_expr()
            self._expect(TokenType.RPAREN)
            return inner

        self._error("Unexpected token in expression")
        self._next()
        return Operand("", VarType.INT)
