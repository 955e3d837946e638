"""
Iridium Assembly Language Lexer
===============================

This module implements a lexer (tokenizer) for Iridium assembly language.
It strips comments and whitespace and converts source text into a stream of
tokens that the parser can classify.

Token Types
-----------
- IDENTIFIER: Labels and mnemonics (start, ADDI, loop_1)
- DIRECTIVE: Dot-prefixed directive names (.fill, .space, .text, .syscall)
- REGISTER: Dollar-prefixed register names ($zero, $r0 .. $r6)
- NUMBER: Raw numeric literal text (42, -10, 0x1E4, 0b0101)
- CHAR: Single-quoted character literal ('a')
- STRING: Double-quoted string ("hello world!")
- LABEL_REF: Label reference (@end)
- Delimiters: , : [ ]
- NEWLINE: End of line
- EOF: End of file

Numbers are kept as their source text; decoding and range checking is done
by :mod:`iridium_sdk.assembler.literals` so that every literal error is
reported the same way, whatever stage finds it.

Comments
--------
A ``#`` starts a comment that runs to the end of the line. A ``#`` inside a
string or character literal is part of the literal.

Example
-------
>>> from iridium_sdk.assembler.lexer import Lexer
>>> lexer = Lexer("start: ADDI $r0, $zero, 5  # five", "example.asm")
>>> for token in lexer.tokenize():
...     print(token)
Token(IDENTIFIER, 'start', 1:1)
Token(COLON, ':', 1:6)
Token(IDENTIFIER, 'ADDI', 1:8)
Token(REGISTER, '$r0', 1:13)
Token(COMMA, ',', 1:16)
Token(REGISTER, '$zero', 1:18)
Token(COMMA, ',', 1:23)
Token(NUMBER, '5', 1:25)
Token(EOF, 1:34)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional
import string

from iridium_sdk.errors import AssemblySyntaxError, SourceLocation


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token types for the Iridium assembly language."""

    # Structural tokens
    NEWLINE = auto()
    EOF = auto()

    # Values
    IDENTIFIER = auto()  # Labels, mnemonics
    DIRECTIVE = auto()   # .fill, .space, .text, .syscall
    REGISTER = auto()    # $zero, $r0 .. $r6
    NUMBER = auto()      # Numeric literal, raw text
    CHAR = auto()        # Single-quoted character 'X'
    STRING = auto()      # Double-quoted string "..."
    LABEL_REF = auto()   # @name

    # Delimiters
    COMMA = auto()       # ,
    COLON = auto()       # :
    LBRACKET = auto()    # [
    RBRACKET = auto()    # ]


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    Represents a single token from the source code.

    Attributes:
        type: The TokenType classification
        value: The token text (decoded for CHAR and STRING, name only for LABEL_REF)
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    type: TokenType
    value: Optional[str]
    line: int
    column: int
    filename: str

    def __repr__(self) -> str:
        if self.value is not None:
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes Iridium assembly source code.

    Usage:
        lexer = Lexer(source_text, filename)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
    """

    IDENT_START = string.ascii_letters + "_"
    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    # Characters that may appear in the body of a numeric literal. Invalid
    # digits are kept so the literal parser can report the whole token.
    NUMBER_CHARS = string.ascii_letters + string.digits + "_"

    SINGLE_CHAR_TOKENS = {
        ",": TokenType.COMMA,
        ":": TokenType.COLON,
        "[": TokenType.LBRACKET,
        "]": TokenType.RBRACKET,
    }

    ESCAPE_SEQUENCES = {
        "n": "\n",
        "r": "\r",
        "t": "\t",
        "\\": "\\",
        '"': '"',
        "'": "'",
        "0": "\0",
    }

    COMMENT_CHAR = "#"

    def __init__(self, source: str, filename: str = "<input>", line_number: int = 1):
        """
        Initialize the lexer with source code.

        Args:
            source: The assembly source code to tokenize
            filename: Name of the source file (for error messages)
            line_number: Starting line number (default 1)
        """
        self.source = source
        self.filename = filename

        self._pos = 0
        self._line = line_number
        self._column = 1
        self._line_start_pos = 0

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source code.

        Yields:
            Token objects representing each lexical element

        Raises:
            AssemblySyntaxError: If invalid syntax is encountered
        """
        while not self._at_end():
            if self._skip_whitespace():
                continue

            if self._skip_comment():
                continue

            yield self._scan_token()

        yield self._make_token(TokenType.EOF, None)

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """Look at character at current position + offset; '' past the end."""
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        """Consume and return the current character, tracking line and column."""
        if self._at_end():
            return ""

        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1

        return char

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(
        self,
        token_type: TokenType,
        value: Optional[str],
        start_line: Optional[int] = None,
        start_column: Optional[int] = None,
    ) -> Token:
        return Token(
            type=token_type,
            value=value,
            line=start_line or self._line,
            column=start_column or self._column,
            filename=self.filename,
        )

    def _error(self, message: str, column: Optional[int] = None) -> AssemblySyntaxError:
        """Create a syntax error at the current (or given) column."""
        location = SourceLocation(self.filename, self._line, column or self._column)
        return AssemblySyntaxError(message, location, source_line=self.get_current_line())

    # =========================================================================
    # Whitespace and Comment Handling
    # =========================================================================

    def _skip_whitespace(self) -> bool:
        """Skip spaces, tabs and carriage returns, but not newlines."""
        skipped = False
        # '' in " \t\r" is True, so check for a character first
        while self._peek() and self._peek() in " \t\r":
            self._advance()
            skipped = True
        return skipped

    def _skip_comment(self) -> bool:
        if self._peek() != self.COMMENT_CHAR:
            return False
        while not self._at_end() and self._peek() != "\n":
            self._advance()
        return True

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> Token:
        start_line = self._line
        start_column = self._column

        char = self._peek()

        if char == "\n":
            self._advance()
            return self._make_token(TokenType.NEWLINE, None, start_line, start_column)

        if char in self.IDENT_START:
            name = self._scan_word(self.IDENT_CHARS)
            return self._make_token(TokenType.IDENTIFIER, name, start_line, start_column)

        if char.isdigit() or (char in "+-" and self._peek(1).isdigit()):
            return self._scan_number(start_line, start_column)

        if char == ".":
            return self._scan_prefixed(TokenType.DIRECTIVE, start_line, start_column)

        if char == "$":
            return self._scan_prefixed(TokenType.REGISTER, start_line, start_column)

        if char == "@":
            token = self._scan_prefixed(TokenType.LABEL_REF, start_line, start_column)
            # The reference carries the bare label name
            return self._make_token(TokenType.LABEL_REF, token.value[1:], start_line, start_column)

        if char == '"':
            return self._scan_string(start_line, start_column)

        if char == "'":
            return self._scan_char(start_line, start_column)

        if char in self.SINGLE_CHAR_TOKENS:
            self._advance()
            return self._make_token(self.SINGLE_CHAR_TOKENS[char], char, start_line, start_column)

        raise self._error(f"unexpected character '{char}'")

    def _scan_word(self, allowed: str) -> str:
        chars = []
        while self._peek() and self._peek() in allowed:
            chars.append(self._advance())
        return "".join(chars)

    def _scan_prefixed(self, token_type: TokenType, start_line: int, start_column: int) -> Token:
        """
        Scan a sigil followed by an identifier: .directive, $register, @label.
        """
        sigil = self._advance()
        if not (self._peek() and self._peek() in self.IDENT_START):
            raise self._error(f"expected identifier after '{sigil}'", start_column)
        name = sigil + self._scan_word(self.IDENT_CHARS)
        return self._make_token(token_type, name, start_line, start_column)

    def _scan_number(self, start_line: int, start_column: int) -> Token:
        """
        Scan a numeric literal, keeping its source text.

        Accepts an optional sign, then a run of letters and digits so that
        prefixes (0x, 0b) and malformed digits stay in one token. A decimal
        point is kept as well, so ``1.5`` is reported as a bad literal.
        """
        chars = []
        if self._peek() in "+-":
            chars.append(self._advance())
        chars.append(self._scan_word(self.NUMBER_CHARS))
        while self._peek() == ".":
            chars.append(self._advance())
            chars.append(self._scan_word(self.NUMBER_CHARS))
        return self._make_token(TokenType.NUMBER, "".join(chars), start_line, start_column)

    def _scan_string(self, start_line: int, start_column: int) -> Token:
        """
        Scan a double-quoted string literal.

        Supports escape sequences: \\n, \\r, \\t, \\\\, \\", \\', \\0
        """
        self._advance()  # consume opening "
        text = self._scan_quoted('"', "unterminated string literal", start_column)
        return self._make_token(TokenType.STRING, text, start_line, start_column)

    def _scan_char(self, start_line: int, start_column: int) -> Token:
        """
        Scan a single-quoted character literal.

        The decoded text is returned as-is; the literal parser rejects
        anything that is not exactly one ASCII character.
        """
        self._advance()  # consume opening '
        text = self._scan_quoted("'", "unterminated character literal", start_column)
        return self._make_token(TokenType.CHAR, text, start_line, start_column)

    def _scan_quoted(self, quote: str, unterminated: str, start_column: int) -> str:
        chars = []
        while not self._at_end():
            char = self._peek()

            if char == quote:
                self._advance()
                return "".join(chars)

            if char == "\n":
                break

            if char == "\\":
                self._advance()
                chars.append(self._scan_escape_sequence())
            else:
                chars.append(self._advance())

        raise self._error(unterminated, start_column)

    def _scan_escape_sequence(self) -> str:
        if self._at_end() or self._peek() == "\n":
            raise self._error("unexpected end of line in escape sequence")

        char = self._advance()
        if char in self.ESCAPE_SEQUENCES:
            return self.ESCAPE_SEQUENCES[char]

        raise self._error(f"unknown escape sequence '\\{char}'", self._column - 2)

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def get_current_line(self) -> str:
        """Get the current line of source text, for error reporting."""
        line_end = self.source.find("\n", self._line_start_pos)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[self._line_start_pos:line_end]


def normalize_line(line: str) -> str:
    """
    Strip a trailing ``#`` comment and surrounding whitespace from one line.

    Quote-aware: a ``#`` inside a string or character literal is kept.
    """
    quote = None
    escaped = False
    for index, char in enumerate(line):
        if escaped:
            escaped = False
        elif quote is not None:
            if char == "\\":
                escaped = True
            elif char == quote:
                quote = None
        elif char in "\"'":
            quote = char
        elif char == Lexer.COMMENT_CHAR:
            return line[:index].strip()
    return line.strip()
