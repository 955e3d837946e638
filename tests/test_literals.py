# =============================================================================
# test_literals.py - Literal Decoding and Range Check Tests
# =============================================================================
# Tests for numeric/character literal decoding and immediate field ranges.
#
# Test coverage includes:
#   - Decimal, hexadecimal (0x) and binary (0b) literals, with signs
#   - Character literals (7-bit ASCII only)
#   - Signed and unsigned field ranges, including two's complement .fill
#   - Token dispatch in parse_immediate
# =============================================================================

import pytest
from iridium_sdk.assembler.lexer import Lexer
from iridium_sdk.assembler.literals import (
    LabelRef,
    char_value,
    check_range,
    parse_immediate,
    parse_literal,
    text_values,
)
from iridium_sdk.cpu import IMMEDIATE_FIELDS, FieldSpec
from iridium_sdk.errors import AssemblySyntaxError, ImmediateRangeError, LiteralError


def token(source: str):
    """Return the first token of a one-token source."""
    return next(Lexer(source, "<test>").tokenize())


# =============================================================================
# Numeric Literals
# =============================================================================

class TestParseLiteral:
    """Test numeric literal decoding."""

    @pytest.mark.parametrize("text,expected", [
        ("0", 0),
        ("42", 42),
        ("-10", -10),
        ("+7", 7),
        ("0x1E4", 0x1E4),
        ("0X1e4", 0x1E4),
        ("0xFFFF", 0xFFFF),
        ("-0x40", -64),
        ("0b0111", 7),
        ("0B101", 5),
        ("0b00110100111", 0x1A7),
    ])
    def test_valid(self, text, expected):
        assert parse_literal(text) == expected

    @pytest.mark.parametrize("text", ["0xZZ", "0b102", "12a", "0x", "-", "1_000"])
    def test_invalid(self, text):
        with pytest.raises(LiteralError, match="invalid"):
            parse_literal(text)

    def test_error_names_base(self):
        with pytest.raises(LiteralError, match="hexadecimal"):
            parse_literal("0xG1")


class TestCharacterLiterals:
    """Test character and string literal values."""

    def test_char_value(self):
        assert char_value("a") == 0x61
        assert char_value("~") == 0x7E

    def test_char_must_be_single(self):
        with pytest.raises(LiteralError, match="exactly one character"):
            char_value("ab")
        with pytest.raises(LiteralError):
            char_value("")

    def test_char_must_be_ascii(self):
        with pytest.raises(LiteralError, match="ASCII"):
            char_value("é")

    def test_text_values(self):
        assert text_values("hi!") == [0x68, 0x69, 0x21]

    def test_text_values_rejects_non_ascii(self):
        with pytest.raises(LiteralError):
            text_values("naïve")


# =============================================================================
# Field Ranges
# =============================================================================

class TestFieldRanges:
    """Test signed, unsigned and two's complement fields."""

    def test_signed_seven_bit(self):
        field = IMMEDIATE_FIELDS["ADDI"]
        assert (field.minimum, field.maximum) == (-64, 63)

    def test_unsigned_ten_bit(self):
        field = IMMEDIATE_FIELDS["LUI"]
        assert (field.minimum, field.maximum) == (0, 1023)

    def test_lli_six_bit(self):
        field = IMMEDIATE_FIELDS["LLI"]
        assert (field.minimum, field.maximum) == (0, 63)

    def test_fill_accepts_both_signs(self):
        field = IMMEDIATE_FIELDS[".FILL"]
        assert (field.minimum, field.maximum) == (-0x8000, 0xFFFF)

    @pytest.mark.parametrize("value", [-64, 0, 63])
    def test_addi_in_range(self, value):
        assert check_range(value, IMMEDIATE_FIELDS["ADDI"]) == value

    @pytest.mark.parametrize("value", [64, 128, -65])
    def test_addi_out_of_range(self, value):
        with pytest.raises(ImmediateRangeError) as exc_info:
            check_range(value, IMMEDIATE_FIELDS["ADDI"])
        assert exc_info.value.hint == "valid range is -64 to 63"

    @pytest.mark.parametrize("value", [-1, 1024])
    def test_lui_out_of_range(self, value):
        with pytest.raises(ImmediateRangeError):
            check_range(value, IMMEDIATE_FIELDS["LUI"])

    def test_custom_field(self):
        field = FieldSpec(4, signed=True)
        assert field.contains(-8)
        assert not field.contains(8)
        assert field.mask == 0xF


# =============================================================================
# Immediate Token Dispatch
# =============================================================================

class TestParseImmediate:
    """Test decoding immediate operand tokens against a field."""

    def test_number(self):
        assert parse_immediate(token("-5"), IMMEDIATE_FIELDS["ADDI"]) == -5

    def test_char(self):
        assert parse_immediate(token("'a'"), IMMEDIATE_FIELDS[".FILL"]) == 0x61

    def test_label_reference(self):
        value = parse_immediate(token("@loop"), IMMEDIATE_FIELDS["MOVI"])
        assert isinstance(value, LabelRef)
        assert value.name == "loop"
        assert str(value) == "@loop"

    def test_label_not_allowed_for_lli(self):
        with pytest.raises(AssemblySyntaxError, match="not allowed"):
            parse_immediate(token("@loop"), IMMEDIATE_FIELDS["LLI"])

    def test_char_not_allowed(self):
        field = FieldSpec(8, signed=False, allow_char=False)
        with pytest.raises(AssemblySyntaxError, match="character literal"):
            parse_immediate(token("'a'"), field)

    def test_register_is_not_an_immediate(self):
        with pytest.raises(AssemblySyntaxError, match="expected immediate"):
            parse_immediate(token("$r0"), IMMEDIATE_FIELDS["ADDI"])

    def test_range_checked(self):
        with pytest.raises(ImmediateRangeError):
            parse_immediate(token("64"), IMMEDIATE_FIELDS["ADDI"])

    def test_error_location(self):
        with pytest.raises(ImmediateRangeError) as exc_info:
            parse_immediate(token("  99"), IMMEDIATE_FIELDS["ADDI"])
        assert exc_info.value.location.column == 3
