"""
Symbol Table Tests
==================

Tests for declaration, lookup and diagnostic collection in the flat
symbol table.
"""

import pytest
from rpnc.compiler.symbols import SymbolTable, VarType, Diagnostic


@pytest.fixture
def symbols():
    return SymbolTable()


class TestDeclare:
    """Tests for declare()."""

    def test_declare_new_name(self, symbols):
        symbols.declare("a", VarType.INT)
        assert "a" in symbols
        assert symbols.declared_names() == ["a"]
        assert not symbols.has_errors()

    def test_declaration_order_kept(self, symbols):
        for name in ["z", "a", "m"]:
            symbols.declare(name, VarType.INT)
        assert symbols.declared_names() == ["z", "a", "m"]
        assert len(symbols) == 3

    def test_redeclaration_records_error(self, symbols):
        symbols.declare("a", VarType.INT)
        symbols.declare("a", VarType.INT)
        assert symbols.errors() == ["Variable a redeclared"]
        assert symbols.declared_names() == ["a"]

    def test_redeclaration_keeps_original_binding(self, symbols):
        symbols.declare("a", VarType.INT)
        symbols.declare("a", VarType.UNDEFINED)
        assert symbols.type_of("a") == VarType.INT

    def test_each_redeclaration_reported(self, symbols):
        for _ in range(3):
            symbols.declare("a", VarType.INT)
        assert symbols.errors() == ["Variable a redeclared"] * 2


class TestTypeOf:
    """Tests for type_of()."""

    def test_declared_name(self, symbols):
        symbols.declare("x", VarType.INT)
        assert symbols.type_of("x") == VarType.INT
        assert not symbols.has_errors()

    def test_undeclared_name_returns_sentinel(self, symbols):
        assert symbols.type_of("x") == VarType.UNDEFINED
        assert symbols.errors() == ["Variable x not declared before use"]

    def test_undeclared_name_not_added(self, symbols):
        symbols.type_of("x")
        symbols.type_of("x")
        assert "x" not in symbols
        assert symbols.errors() == ["Variable x not declared before use"] * 2


class TestDiagnostics:
    """Tests for error collection."""

    def test_record_error(self, symbols):
        symbols.record_error("first")
        symbols.record_error("second", line=4)
        assert symbols.has_errors()
        assert symbols.errors() == ["first", "second"]
        assert symbols.diagnostics() == [Diagnostic("first"), Diagnostic("second", 4)]

    def test_no_deduplication(self, symbols):
        symbols.record_error("same")
        symbols.record_error("same")
        assert symbols.errors() == ["same", "same"]

    def test_line_numbers_attached(self, symbols):
        symbols.type_of("q", line=7)
        diagnostic = symbols.diagnostics()[0]
        assert diagnostic.line == 7
        assert str(diagnostic) == "Variable q not declared before use"

    def test_returned_lists_are_copies(self, symbols):
        symbols.declare("a", VarType.INT)
        symbols.declared_names().append("b")
        symbols.errors().append("bogus")
        assert symbols.declared_names() == ["a"]
        assert not symbols.has_errors()
