# =============================================================================
# test_lexer.py - Lexer Unit Tests
# =============================================================================
# Tests for the Iridium assembler lexer/tokenizer.
#
# Test coverage includes:
#   - Identifiers, directives, registers and label references
#   - Number, character and string literals (with escape sequences)
#   - Comments, including '#' inside quoted literals
#   - Line and column tracking
#   - Error conditions
# =============================================================================

import pytest
from iridium_sdk.assembler.lexer import Lexer, TokenType, normalize_line
from iridium_sdk.errors import AssemblySyntaxError


# =============================================================================
# Helper Function
# =============================================================================

def tokenize(source: str, line_number: int = 1) -> list:
    """
    Helper to tokenize and drop the trailing EOF token.

    Args:
        source: The assembly source to tokenize
        line_number: Starting line number (for position tracking tests)
    """
    lexer = Lexer(source, "<test>", line_number=line_number)
    return [t for t in lexer.tokenize() if t.type != TokenType.EOF]


def types(source: str) -> list:
    return [t.type for t in tokenize(source)]


# =============================================================================
# Basic Token Recognition Tests
# =============================================================================

class TestBasicTokens:
    """Test basic token recognition for simple inputs."""

    def test_empty_line(self):
        """Empty lines should produce no meaningful tokens."""
        assert tokenize("") == []

    def test_whitespace_only(self):
        """Lines with only whitespace should produce no tokens."""
        assert tokenize("   \t   ") == []

    def test_identifier(self):
        tokens = tokenize("loop_1")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[0].value == "loop_1"

    def test_directive(self):
        """Directives keep their leading dot and original case."""
        tokens = tokenize(".Fill")
        assert tokens[0].type == TokenType.DIRECTIVE
        assert tokens[0].value == ".Fill"

    def test_register(self):
        tokens = tokenize("$zero $r6")
        assert [t.type for t in tokens] == [TokenType.REGISTER, TokenType.REGISTER]
        assert [t.value for t in tokens] == ["$zero", "$r6"]

    def test_label_reference_carries_bare_name(self):
        """The @ sigil is not part of the token value."""
        tokens = tokenize("@end")
        assert tokens[0].type == TokenType.LABEL_REF
        assert tokens[0].value == "end"

    def test_delimiters(self):
        assert types("label: , [ ]") == [
            TokenType.IDENTIFIER,
            TokenType.COLON,
            TokenType.COMMA,
            TokenType.LBRACKET,
            TokenType.RBRACKET,
        ]

    def test_full_instruction_line(self):
        assert types("start: ADDI $r0, $zero, 5") == [
            TokenType.IDENTIFIER,
            TokenType.COLON,
            TokenType.IDENTIFIER,
            TokenType.REGISTER,
            TokenType.COMMA,
            TokenType.REGISTER,
            TokenType.COMMA,
            TokenType.NUMBER,
        ]


# =============================================================================
# Literal Tests
# =============================================================================

class TestNumbers:
    """Numbers are kept as raw text for the literal parser."""

    @pytest.mark.parametrize("text", ["42", "0x1E4", "0b0111", "0XFF"])
    def test_number_text_preserved(self, text):
        tokens = tokenize(text)
        assert tokens[0].type == TokenType.NUMBER
        assert tokens[0].value == text

    def test_negative_number(self):
        tokens = tokenize("-10")
        assert len(tokens) == 1
        assert tokens[0].value == "-10"

    def test_malformed_digits_stay_in_one_token(self):
        """0xZZ is one NUMBER token so the error can quote all of it."""
        tokens = tokenize("0xZZ")
        assert len(tokens) == 1
        assert tokens[0].value == "0xZZ"

    def test_decimal_point_stays_in_token(self):
        tokens = tokenize("1.5")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.NUMBER
        assert tokens[0].value == "1.5"


class TestCharsAndStrings:
    """Test quoted literals."""

    def test_char_literal(self):
        tokens = tokenize("'a'")
        assert tokens[0].type == TokenType.CHAR
        assert tokens[0].value == "a"

    def test_string_literal(self):
        tokens = tokenize('"hello world!"')
        assert tokens[0].type == TokenType.STRING
        assert tokens[0].value == "hello world!"

    @pytest.mark.parametrize("escape,expected", [
        ("\\n", "\n"),
        ("\\r", "\r"),
        ("\\t", "\t"),
        ("\\\\", "\\"),
        ('\\"', '"'),
        ("\\'", "'"),
        ("\\0", "\0"),
    ])
    def test_escape_sequences(self, escape, expected):
        tokens = tokenize(f'"a{escape}b"')
        assert tokens[0].value == f"a{expected}b"

    def test_unknown_escape(self):
        with pytest.raises(AssemblySyntaxError, match="unknown escape"):
            tokenize('"a\\qb"')

    def test_unterminated_string(self):
        with pytest.raises(AssemblySyntaxError, match="unterminated string"):
            tokenize('.text "hello')

    def test_unterminated_char(self):
        with pytest.raises(AssemblySyntaxError, match="unterminated character"):
            tokenize("'a")

    def test_string_does_not_span_lines(self):
        with pytest.raises(AssemblySyntaxError):
            tokenize('"abc\ndef"')


# =============================================================================
# Comment Tests
# =============================================================================

class TestComments:
    """Test '#' comments."""

    def test_full_line_comment(self):
        assert tokenize("# just a comment") == []

    def test_trailing_comment(self):
        tokens = tokenize("NOP # do nothing")
        assert len(tokens) == 1
        assert tokens[0].value == "NOP"

    def test_hash_inside_string(self):
        tokens = tokenize('.text "a#b" # real comment')
        assert tokens[1].value == "a#b"
        assert len(tokens) == 2

    def test_hash_inside_char(self):
        tokens = tokenize(".fill '#'")
        assert tokens[1].type == TokenType.CHAR
        assert tokens[1].value == "#"


class TestNormalizeLine:
    """Test the single-line comment and whitespace stripper."""

    def test_strips_comment_and_whitespace(self):
        assert normalize_line("   ADD $r0, $r0, $r0   # sum  ") == "ADD $r0, $r0, $r0"

    def test_keeps_hash_in_string(self):
        assert normalize_line('.text "x # y" # note') == '.text "x # y"'

    def test_escaped_quote_in_string(self):
        assert normalize_line('.text "a\\"#b" # c') == '.text "a\\"#b"'

    def test_comment_only(self):
        assert normalize_line("# nothing") == ""


# =============================================================================
# Position Tracking and Errors
# =============================================================================

class TestPositions:
    """Test line and column tracking."""

    def test_columns(self):
        tokens = tokenize("ADD $r0")
        assert tokens[0].column == 1
        assert tokens[1].column == 5

    def test_newlines(self):
        tokens = tokenize("NOP\nNOP")
        assert [t.type for t in tokens] == [
            TokenType.IDENTIFIER, TokenType.NEWLINE, TokenType.IDENTIFIER,
        ]
        assert tokens[2].line == 2
        assert tokens[2].column == 1

    def test_starting_line_number(self):
        tokens = tokenize("NOP", line_number=10)
        assert tokens[0].line == 10

    def test_location(self):
        token = tokenize("  NOP")[0]
        assert str(token.location) == "<test>:1:3"


class TestLexerErrors:
    """Test lexer error reporting."""

    def test_unexpected_character(self):
        with pytest.raises(AssemblySyntaxError, match="unexpected character '%'"):
            tokenize("ADD %r0")

    def test_sigil_without_name(self):
        with pytest.raises(AssemblySyntaxError, match="expected identifier after '\\$'"):
            tokenize("ADD $1")

    def test_error_carries_source_line(self):
        with pytest.raises(AssemblySyntaxError) as exc_info:
            tokenize("NOP\nADD %r0\nNOP")
        assert exc_info.value.source_line == "ADD %r0"
        assert exc_info.value.location.line == 2
