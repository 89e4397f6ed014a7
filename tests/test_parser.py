"""
Parser and Code Generation Tests
================================

Tests for the single-pass parser: grammar coverage, semantic checks,
instruction order and statement-level error recovery.

Test Organization
-----------------
- TestDeclarations: declaration record and redeclaration
- TestAssignments: postfix for assignments and expressions
- TestAssociativity: right (default) versus left grouping
- TestForLoops: loop layout, labels, nesting
- TestUndeclaredNames: use-before-declaration everywhere
- TestRecovery: syntax errors and panic-mode skipping
- TestReturn: return checking and optional emission
"""

import logging

import pytest
from rpnc.compiler.lexer import Lexer
from rpnc.compiler.parser import Parser, Associativity
from rpnc.compiler.symbols import SymbolTable
from rpnc.compiler.instructions import Assign, Declare, Evaluate


# =============================================================================
# Helper Functions
# =============================================================================

def parse(source: str, **kwargs):
    """Parse source and return (rendered lines, error messages)."""
    parser = Parser(Lexer(source, "<test>"), **kwargs)
    instructions = parser.parse()
    return [i.render() for i in instructions], parser.symbols.errors()


def program(body: str, decls: str = "int a, b, c, i, j;") -> str:
    """Wrap statements in a function with the usual declarations."""
    return f"int main() {{ {decls} {body} return a; }}"


def statements(body: str, **kwargs):
    """Lines emitted after the declaration record, plus errors."""
    lines, errors = parse(program(body), **kwargs)
    return lines[1:], errors


# =============================================================================
# Declaration Tests
# =============================================================================

class TestDeclarations:
    """Declaration record and symbol table population."""

    def test_single_declaration(self):
        lines, errors = parse("int main() { int a; return a; }")
        assert lines == ["int a 2 DECL"]
        assert errors == []

    def test_multiple_declarations_in_order(self):
        lines, errors = parse("int main() { int x, y; int z; return y; }")
        assert lines == ["int x y z 4 DECL"]
        assert errors == []

    def test_no_declarations(self):
        lines, errors = parse("int main() { return a; }")
        assert lines == ["int 1 DECL"]
        assert errors == ["Variable a not declared before use"]

    def test_redeclaration(self):
        lines, errors = parse("int main() { int a; int a; return a; }")
        assert lines == ["int a 2 DECL"]
        assert errors == ["Variable a redeclared"]

    def test_redeclaration_in_same_list(self):
        lines, errors = parse("int main() { int a, b, a; return a; }")
        assert lines == ["int a b 3 DECL"]
        assert errors == ["Variable a redeclared"]

    def test_exactly_one_decl_line(self):
        lines, _ = parse(program("a = 1; b = 2;"))
        assert sum(1 for line in lines if line.endswith("DECL")) == 1
        assert lines[0] == "int a b c i j 6 DECL"

    def test_declarations_fill_symbol_table(self):
        symbols = SymbolTable()
        Parser(Lexer("int f() { int p, q; return p; }"), symbols).parse()
        assert symbols.declared_names() == ["p", "q"]

    def test_missing_identifier_in_declaration(self):
        lines, errors = parse("int main() { int a, ; return a; }")
        assert lines == ["int a 2 DECL"]
        assert errors == ["Expected identifier"]

    def test_unrecognized_type_taken_as_int(self):
        """A missing type keyword is silently treated as int."""
        lines, errors = parse("main() { int a; return a; }")
        assert lines == ["int a 2 DECL"]
        assert errors == []

    def test_structured_instructions(self):
        parser = Parser(Lexer(program("a = 1;")))
        instructions = parser.parse()
        assert isinstance(instructions[0], Declare)
        assert instructions[0].names == ("a", "b", "c", "i", "j")
        assert isinstance(instructions[1], Assign)
        assert instructions[1].target == "a"
        assert parser.function_name == "main"


# =============================================================================
# Assignment Tests
# =============================================================================

class TestAssignments:
    """Assignments and expression postfix."""

    def test_simple_sum(self):
        lines, errors = statements("a = 1 + 2;")
        assert lines == ["1 2 + a ="]
        assert errors == []

    def test_copy(self):
        assert statements("a = b;")[0] == ["b a ="]

    def test_literal(self):
        assert statements("a = 42;")[0] == ["42 a ="]

    def test_difference(self):
        assert statements("a = b - 1;")[0] == ["b 1 - a ="]

    def test_parentheses(self):
        assert statements("a = (b + c);")[0] == ["b c + a ="]

    def test_parenthesized_left_operand(self):
        assert statements("a = (a - b) - c;")[0] == ["a b - c - a ="]

    def test_parenthesized_right_operand(self):
        assert statements("a = a - (b + c);")[0] == ["a b c + - a ="]

    def test_statements_in_source_order(self):
        lines, errors = statements("a = 1; b = a; c = b + a;")
        assert lines == ["1 a =", "a b =", "b a + c ="]
        assert errors == []

    def test_statements_across_lines(self):
        source = "int main()\n{\n  int a;\n  a = 1\n    + 2;\n  return a;\n}\n"
        lines, errors = parse(source)
        assert lines == ["int a 2 DECL", "1 2 + a ="]
        assert errors == []


# =============================================================================
# Associativity Tests
# =============================================================================

class TestAssociativity:
    """Grouping of '+'/'-' chains."""

    def test_right_is_default(self):
        assert statements("a = a - b - c;")[0] == ["a b c - - a ="]

    def test_right_long_chain(self):
        lines, _ = statements("a = a + b - c + 1;", associativity=Associativity.RIGHT)
        assert lines == ["a b c 1 + - + a ="]

    def test_left(self):
        lines, errors = statements("a = a - b - c;", associativity=Associativity.LEFT)
        assert lines == ["a b - c - a ="]
        assert errors == []

    def test_left_long_chain(self):
        lines, _ = statements("a = a + b - c + 1;", associativity=Associativity.LEFT)
        assert lines == ["a b + c - 1 + a ="]

    def test_single_operator_same_either_way(self):
        right, _ = statements("a = b + c;")
        left, _ = statements("a = b + c;", associativity=Associativity.LEFT)
        assert right == left == ["b c + a ="]

    def test_left_applies_inside_loops(self):
        lines, _ = statements(
            "for (i = 0; i < a - b - c; i = i + 1) { }",
            associativity=Associativity.LEFT,
        )
        assert lines[2] == "i a b - c - < m2 BRL"

    @pytest.mark.parametrize("associativity", [Associativity.RIGHT, Associativity.LEFT])
    def test_very_long_chain(self, associativity):
        """Thousands of terms parse and render without running out of stack."""
        n = 5000
        lines, errors = statements(
            "a = " + " + ".join(["1"] * n) + ";", associativity=associativity
        )
        if associativity == Associativity.RIGHT:
            expected = ["1"] * n + ["+"] * (n - 1)
        else:
            expected = ["1"] + ["1", "+"] * (n - 1)
        assert lines == [" ".join(expected + ["a", "="])]
        assert errors == []

    def test_right_fold_checks_innermost_first(self):
        lines, errors = statements("a = q + r - 1;")
        assert lines == ["q r 1 - + a ="]
        assert errors == [
            "Variable q not declared before use",
            "Variable r not declared before use",
            "Arithmetic operands must be int",
            "Arithmetic operands must be int",
        ]


# =============================================================================
# For Loop Tests
# =============================================================================

class TestForLoops:
    """Loop layout and label allocation."""

    def test_loop_layout(self):
        lines, errors = statements("for (i = 0; i < 10; i = i + 1) { a = a + i; }")
        assert lines == [
            "0 i =",
            "m1 DEFL",
            "i 10 < m2 BRL",
            "a i + a =",
            "i 1 + i =",
            "m1 BRL",
            "m2 DEFL",
        ]
        assert errors == []

    @pytest.mark.parametrize("op", ["==", "!=", "<", ">", "<=", ">="])
    def test_relational_operators(self, op):
        lines, errors = statements(f"for (i = 0; i {op} b; i = i + 1) {{ }}")
        assert lines[2] == f"i b {op} m2 BRL"
        assert errors == []

    def test_condition_with_arithmetic(self):
        lines, _ = statements("for (i = 1; i + 1 <= b - 1; i = i + 1) { }")
        assert lines[2] == "i 1 + b 1 - <= m2 BRL"

    def test_empty_body(self):
        lines, errors = statements("for (i = 0; i < 3; i = i + 1) { }")
        assert lines == ["0 i =", "m1 DEFL", "i 3 < m2 BRL", "i 1 + i =", "m1 BRL", "m2 DEFL"]
        assert errors == []

    def test_bare_expression_step(self):
        lines, errors = statements("for (i = 0; i < 3; i + 1) { }")
        assert lines[3] == "i 1 +"
        assert errors == []

    def test_literal_step(self):
        parser = Parser(Lexer(program("for (i = 0; i < 3; 1) { }")))
        instructions = parser.parse()
        assert isinstance(instructions[4], Evaluate)
        assert instructions[4].render() == "1"

    def test_sequential_loops_get_distinct_labels(self):
        lines, errors = statements(
            "for (i = 0; i < 2; i = i + 1) { } for (j = 0; j < 2; j = j + 1) { }"
        )
        labels = [line.split()[0] for line in lines if line.endswith("DEFL")]
        assert labels == ["m1", "m2", "m3", "m4"]
        assert errors == []

    def test_nested_loops(self):
        lines, errors = statements(
            "for (i = 0; i < 3; i = i + 1) {"
            "  for (j = 0; j < 3; j = j + 1) { a = a + j; }"
            "  b = b + i;"
            "}"
        )
        assert lines == [
            "0 i =",
            "m1 DEFL",
            "i 3 < m2 BRL",
            "0 j =",
            "m3 DEFL",
            "j 3 < m4 BRL",
            "a j + a =",
            "j 1 + j =",
            "m3 BRL",
            "m4 DEFL",
            "b i + b =",
            "i 1 + i =",
            "m1 BRL",
            "m2 DEFL",
        ]
        assert errors == []

    def test_labels_strictly_increasing(self):
        lines, _ = statements(
            "for (i = 0; i < 2; i = i + 1) { for (j = 0; j < 2; j = j + 1) { } }"
            "for (i = 0; i < 2; i = i + 1) { }"
        )
        numbers = sorted({int(line.split()[0][1:]) for line in lines if line.endswith("DEFL")})
        assert numbers == [1, 2, 3, 4, 5, 6]

    def test_custom_label_prefix(self):
        from rpnc.compiler.instructions import LabelAllocator

        lines, _ = statements("for (i = 0; i < 2; i = i + 1) { }", labels=LabelAllocator("L"))
        assert lines[1] == "L1 DEFL"
        assert lines[-1] == "L2 DEFL"

    def test_missing_relational_operator(self):
        lines, errors = statements("for (i = 0; i; i = i + 1) { }")
        assert lines[2] == "i m2 BRL"
        assert errors == ["Expected relational operator in condition"]


# =============================================================================
# Undeclared Name Tests
# =============================================================================

class TestUndeclaredNames:
    """Use before declaration is reported once per occurrence."""

    def test_assignment_target(self):
        lines, errors = statements("z = a;")
        assert lines == ["a z ="]
        assert errors == ["Variable z not declared before use"]

    def test_expression_operand(self):
        lines, errors = statements("a = z + 1;")
        assert lines == ["z 1 + a ="]
        assert errors == [
            "Variable z not declared before use",
            "Arithmetic operands must be int",
        ]

    def test_plain_copy_of_undeclared(self):
        """No type mismatch is reported against an undetermined type."""
        _, errors = statements("a = z;")
        assert errors == ["Variable z not declared before use"]

    def test_loop_variable(self):
        lines, errors = parse("int main() { int a; for (k = 0; k < 2; k = k + 1) { } return a; }")
        assert lines[1:4] == ["0 k =", "m1 DEFL", "k 2 < m2 BRL"]
        assert errors.count("Variable k not declared before use") == 4
        assert "Condition operands must be int" in errors

    def test_return_variable(self):
        lines, errors = parse("int main() { int a; a = 1; return r; }")
        assert lines == ["int a 2 DECL", "1 a ="]
        assert errors == ["Variable r not declared before use"]

    def test_parse_continues_after_undeclared(self):
        lines, errors = statements("z = 1; a = 2; y = a; b = 3;")
        assert lines == ["1 z =", "2 a =", "a y =", "3 b ="]
        assert errors == [
            "Variable z not declared before use",
            "Variable y not declared before use",
        ]

    def test_diagnostic_line_numbers(self):
        parser = Parser(Lexer("int main() {\n int a;\n a = q;\n return a;\n}"))
        parser.parse()
        diagnostic = parser.symbols.diagnostics()[0]
        assert diagnostic.message == "Variable q not declared before use"
        assert diagnostic.line == 3

    def test_diagnostics_logged_with_location(self, caplog):
        source = "int main() {\n int a;\n ;\n return a;\n}"
        with caplog.at_level(logging.DEBUG, logger="rpnc.compiler.parser"):
            Parser(Lexer(source, "prog.txt")).parse()
        assert "prog.txt:3: Unexpected operator" in caplog.text


# =============================================================================
# Recovery Tests
# =============================================================================

class TestRecovery:
    """Syntax errors and statement-level recovery."""

    def test_stray_semicolon(self):
        lines, errors = statements("; a = 1;")
        assert lines == ["1 a ="]
        assert errors == ["Unexpected operator"]

    def test_garbage_statement_skipped_to_semicolon(self):
        lines, errors = statements("@ b c; a = 2;")
        assert lines == ["2 a ="]
        assert errors == ["Unexpected operator"]

    def test_garbage_statement_stops_at_brace(self):
        lines, errors = statements("for (i = 0; i < 2; i = i + 1) { ( a } b = 1;")
        assert lines == [
            "0 i =",
            "m1 DEFL",
            "i 2 < m2 BRL",
            "i 1 + i =",
            "m1 BRL",
            "m2 DEFL",
            "1 b =",
        ]
        assert errors == ["Unexpected operator"]

    def test_declaration_among_statements(self):
        lines, errors = statements("a = 1; int d; b = 2;")
        assert lines == ["1 a =", "2 b ="]
        assert errors == ["Unexpected operator"]

    def test_missing_semicolon(self):
        lines, errors = parse("int main() { int a; a = 1 return a; }")
        assert lines == ["int a 2 DECL", "1 a ="]
        assert errors == ["Expected token ; got return"]

    def test_missing_assign(self):
        lines, errors = statements("a 1;")
        assert lines == ["1 a ="]
        assert errors == ["Expected token = got number"]

    def test_unexpected_token_in_expression(self):
        """The bad token is consumed; a failed expect then cascades."""
        lines, errors = statements("a = ;")
        assert lines == ["a ="]
        assert errors == [
            "Unexpected token in expression",
            "Expected token ; got return",
        ]

    def test_unclosed_parenthesis(self):
        lines, errors = statements("a = (b + c;")
        assert lines == ["b c + a ="]
        assert errors == ["Expected token ) got ;"]

    def test_empty_source(self):
        lines, errors = parse("")
        assert lines == ["int 1 DECL"]
        assert errors == [
            "Expected identifier",
            "Expected token ( got EOF",
            "Expected token ) got EOF",
            "Expected token { got EOF",
            "Expected token return got EOF",
            "Expected identifier",
            "Expected token ; got EOF",
            "Expected token } got EOF",
        ]

    def test_missing_closing_brace(self):
        lines, errors = parse("int main() { int a; a = 1; return a;")
        assert lines == ["int a 2 DECL", "1 a ="]
        assert errors == ["Expected token } got EOF"]

    def test_unclosed_loop_body_at_eof(self):
        lines, errors = parse("int main() { int i; for (i = 0; i < 1; i = i + 1) {")
        assert lines[-3:] == ["i 1 + i =", "m1 BRL", "m2 DEFL"]
        assert "Expected token } got EOF" in errors

    def test_multiple_independent_errors(self):
        lines, errors = statements("; z = 1; a = 2; int q;")
        assert lines == ["1 z =", "2 a ="]
        assert errors == [
            "Unexpected operator",
            "Variable z not declared before use",
            "Unexpected operator",
        ]


# =============================================================================
# Return Tests
# =============================================================================

class TestReturn:
    """Return statement checking and emission."""

    def test_return_not_emitted_by_default(self):
        lines, errors = parse("int main() { int a; a = 1; return a; }")
        assert lines == ["int a 2 DECL", "1 a ="]
        assert errors == []

    def test_return_emitted_when_enabled(self):
        lines, errors = parse("int main() { int a; a = 1; return a; }", emit_return=True)
        assert lines == ["int a 2 DECL", "1 a =", "a return"]
        assert errors == []

    def test_missing_return(self):
        lines, errors = parse("int main() { int a; a = 1; }")
        assert lines == ["int a 2 DECL", "1 a ="]
        assert errors == [
            "Expected token return got }",
            "Expected identifier",
            "Expected token ; got }",
        ]

    def test_missing_return_variable_not_looked_up(self):
        _, errors = parse("int main() { int a; return ; }")
        assert errors == ["Expected identifier"]
