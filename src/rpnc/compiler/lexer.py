"""
Lexer (Tokenizer)
=================

This module implements the lexer for the rpnc source language. It turns
source text into classified tokens on demand: the parser pulls one token
at a time and never looks further ahead than the current token.

Token Categories
----------------
- Keywords: int, for, return
- Identifiers: variable and function names
- Numbers: unsigned decimal integers
- Operators: =, ==, +, -, <, <=, >, >=, !=
- Delimiters: (, ), {, }, ;, ,
- EOF: end of input (stable; asking again returns EOF again)
- UNKNOWN: any other character, including a lone '!'

The lexer never raises. Characters it cannot classify become UNKNOWN
tokens and are reported later by the parser as ordinary unexpected-token
diagnostics.

Example Usage
-------------
>>> from rpnc.compiler.lexer import Lexer
>>> lexer = Lexer('int main() { return x; }')
>>> lexer.current_token()
Token(INT, 'int', line 1)
>>> lexer.next_token()
Token(IDENTIFIER, 'main', line 1)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, TextIO, Union
import logging
import string

from rpnc.errors import SourceLocation

logger = logging.getLogger(__name__)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """
    Token types for the rpnc language.

    The enum value is the display name used in diagnostics, e.g.
    "Expected token ; got identifier".
    """

    # === Keywords ===
    INT = "int"
    FOR = "for"
    RETURN = "return"

    # === Identifiers and Literals ===
    IDENTIFIER = "identifier"
    NUMBER = "number"

    # === Operators ===
    ASSIGN = "="
    PLUS = "+"
    MINUS = "-"
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="
    EQ = "=="
    NE = "!="

    # === Delimiters ===
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    SEMICOLON = ";"
    COMMA = ","

    # === Structural ===
    EOF = "EOF"
    UNKNOWN = "unknown"

    @property
    def display_name(self) -> str:
        """Name of this token type as it appears in diagnostics."""
        return self.value


# Map keyword strings to their token types
KEYWORDS: dict[str, TokenType] = {
    "int": TokenType.INT,
    "for": TokenType.FOR,
    "return": TokenType.RETURN,
}

# Single-character tokens that never need lookahead
SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    ";": TokenType.SEMICOLON,
    ",": TokenType.COMMA,
}

# First character -> (token without '=', token with '=' following)
# '!' has no single-character form; the lexer reports it as UNKNOWN.
EQUALS_PAIRS: dict[str, tuple[TokenType, TokenType]] = {
    "=": (TokenType.ASSIGN, TokenType.EQ),
    "<": (TokenType.LT, TokenType.LE),
    ">": (TokenType.GT, TokenType.GE),
    "!": (TokenType.UNKNOWN, TokenType.NE),
}

RELATIONAL_OPERATORS = frozenset({
    TokenType.EQ,
    TokenType.NE,
    TokenType.LT,
    TokenType.GT,
    TokenType.LE,
    TokenType.GE,
})

ADDITIVE_OPERATORS = frozenset({TokenType.PLUS, TokenType.MINUS})


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single classified lexeme.

    Attributes:
        type: The TokenType classification
        text: The literal lexeme ("" for EOF)
        line: Source line where the token starts (1-indexed)
        filename: Name of the source, for locations
    """
    type: TokenType
    text: str
    line: int
    filename: str = "<input>"

    def __repr__(self) -> str:
        """Format token for debugging output."""
        if self.type == TokenType.EOF:
            return f"Token(EOF, line {self.line})"
        return f"Token({self.type.name}, {self.text!r}, line {self.line})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for diagnostics and logging."""
        return SourceLocation(self.filename, self.line)


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Pull-based tokenizer.

    The constructor scans the first token, so current_token() is valid
    straight away. Each next_token() call scans exactly one more token.
    Once the end of input is reached every further call returns the same
    EOF token without touching the source again.

    Usage:
        lexer = Lexer(source_text, "prog.txt")
        while lexer.current_token().type != TokenType.EOF:
            ...
            lexer.next_token()

    Attributes:
        source: The full source text being tokenized
        filename: Name of the source (for locations)
    """

    IDENT_START = string.ascii_letters
    IDENT_CHARS = string.ascii_letters + string.digits + "_"
    WHITESPACE = " \t\n\r\v\f"

    def __init__(self, source: Union[str, TextIO], filename: str = "<input>"):
        """
        Initialize the lexer and scan the first token.

        Args:
            source: Program text, or a text stream to read it from
            filename: Name of the source (for locations)
        """
        if hasattr(source, "read"):
            source = source.read()
        self.source = source
        self.filename = filename

        self._pos = 0
        self._line = 1
        self._current = self._scan_token()

    def current_token(self) -> Token:
        """Return the most recently produced token without advancing."""
        return self._current

    def next_token(self) -> Token:
        """Advance one token, make it current and return it."""
        if self._current.type != TokenType.EOF:
            self._current = self._scan_token()
        return self._current

    def tokenize(self) -> Iterator[Token]:
        """
        Yield the current token and every following one, ending with EOF.

        Handy for tests and debugging; the parser drives the lexer through
        current_token()/next_token() instead.
        """
        token = self.current_token()
        while token.type != TokenType.EOF:
            yield token
            token = self.next_token()
        yield token

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self) -> str:
        """Current character, or "" past the end of source."""
        if self._at_end():
            return ""
        return self.source[self._pos]

    def _advance(self) -> str:
        """
        Consume and return the current character.

        This is the only place the line counter moves, so every consumed
        newline is counted exactly once.
        """
        if self._at_end():
            return ""
        char = self.source[self._pos]
        self._pos += 1
        if char == "\n":
            self._line += 1
        return char

    def _match(self, expected: str) -> bool:
        """Consume the current character if it matches expected."""
        if self._peek() == expected:
            self._advance()
            return True
        return False

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _make_token(self, token_type: TokenType, text: str, line: int) -> Token:
        token = Token(type=token_type, text=text, line=line, filename=self.filename)
        logger.debug(f"{self.filename}:{line}: {token!r}")
        return token

    def _skip_whitespace(self) -> None:
        while self._peek() and self._peek() in self.WHITESPACE:
            self._advance()

    def _scan_token(self) -> Token:
        """Scan the next token from source."""
        self._skip_whitespace()
        start_line = self._line

        if self._at_end():
            return self._make_token(TokenType.EOF, "", start_line)

        char = self._peek()

        if char in self.IDENT_START:
            return self._scan_identifier(start_line)

        if char in string.digits:
            return self._scan_number(start_line)

        return self._scan_operator(start_line)

    def _scan_identifier(self, start_line: int) -> Token:
        """
        Scan an identifier or keyword.

        Identifiers start with a letter and continue with letters, digits
        and underscores. Keywords are distinguished by the keyword table.
        """
        chars = []
        while self._peek() and self._peek() in self.IDENT_CHARS:
            chars.append(self._advance())

        name = "".join(chars)
        return self._make_token(KEYWORDS.get(name, TokenType.IDENTIFIER), name, start_line)

    def _scan_number(self, start_line: int) -> Token:
        """Scan a maximal run of decimal digits."""
        chars = []
        while self._peek() and self._peek() in string.digits:
            chars.append(self._advance())
        return self._make_token(TokenType.NUMBER, "".join(chars), start_line)

    def _scan_operator(self, start_line: int) -> Token:
        """Scan an operator, delimiter, or unrecognized character."""
        char = self._advance()

        if char in SINGLE_CHAR_TOKENS:
            return self._make_token(SINGLE_CHAR_TOKENS[char], char, start_line)

        if char in EQUALS_PAIRS:
            plain, with_equals = EQUALS_PAIRS[char]
            if self._match("="):
                return self._make_token(with_equals, char + "=", start_line)
            return self._make_token(plain, char, start_line)

        return self._make_token(TokenType.UNKNOWN, char, start_line)
