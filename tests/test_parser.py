# =============================================================================
# test_parser.py - Instruction Classifier Unit Tests
# =============================================================================
# Tests for classifying source lines into instruction and directive forms.
#
# Test coverage includes:
#   - Every real and pseudo instruction form
#   - Every directive form
#   - Labels, case rules, comments and blank lines
#   - Operand-count, unrecognized-line and literal errors
# =============================================================================

import pytest
from iridium_sdk.assembler.literals import LabelRef
from iridium_sdk.assembler.parser import (
    Directive,
    Instruction,
    InstructionForm,
    _DIRECTIVE_FORMS,
    parse_lines,
    parse_source,
)
from iridium_sdk.cpu import DIRECTIVES
from iridium_sdk.errors import (
    AssemblySyntaxError,
    DirectiveError,
    ImmediateRangeError,
    LiteralError,
    OperandCountError,
)


def parse_one(line: str):
    """Parse a single line and return its only statement."""
    statements = parse_source(line, "<test>")
    assert len(statements) == 1
    return statements[0]


# =============================================================================
# Real Instruction Forms
# =============================================================================

class TestInstructionForms:
    """Test classification of real instructions."""

    def test_three_register(self):
        stmt = parse_one("ADD $r0, $zero, $r1")
        assert isinstance(stmt, Instruction)
        assert stmt.mnemonic == "ADD"
        assert stmt.form == InstructionForm.THREE_REG
        assert stmt.registers == (1, 0, 2)
        assert stmt.immediate is None

    def test_two_register_immediate(self):
        stmt = parse_one("ADDI $r0, $r1, -20")
        assert stmt.form == InstructionForm.TWO_REG_IMM
        assert stmt.registers == (1, 2)
        assert stmt.immediate == -20

    def test_one_register_immediate(self):
        stmt = parse_one("LUI $r4, 0x1de")
        assert stmt.form == InstructionForm.ONE_REG_IMM
        assert stmt.registers == (5,)
        assert stmt.immediate == 0x1DE

    def test_two_register(self):
        stmt = parse_one("JAL $r6, $r5")
        assert stmt.form == InstructionForm.TWO_REG
        assert stmt.registers == (7, 6)

    def test_label_immediate(self):
        stmt = parse_one("LW $r0, $r5, @table")
        assert stmt.immediate == LabelRef("table", stmt.immediate.location)

    def test_case_insensitive_mnemonic_and_register(self):
        stmt = parse_one("nand $R5, $Zero, $r3")
        assert stmt.mnemonic == "NAND"
        assert stmt.registers == (6, 0, 4)


class TestPseudoForms:
    """Test classification of pseudo-instructions."""

    def test_nop(self):
        stmt = parse_one("NOP")
        assert stmt.form == InstructionForm.NO_OPERAND_PSEUDO
        assert stmt.form.is_pseudo

    def test_lli(self):
        stmt = parse_one("LLI $r0, 20")
        assert stmt.form == InstructionForm.REG_IMM_PSEUDO
        assert stmt.immediate == 20

    def test_movi_numeric(self):
        stmt = parse_one("MOVI $r1, 0xFFFF")
        assert stmt.form == InstructionForm.REG_IMM_PSEUDO
        assert stmt.immediate == 0xFFFF

    def test_movi_label(self):
        stmt = parse_one("MOVI $r1, @end")
        assert isinstance(stmt.immediate, LabelRef)
        assert stmt.immediate.name == "end"

    def test_lli_rejects_label(self):
        with pytest.raises(AssemblySyntaxError):
            parse_one("LLI $r0, @end")

    def test_lli_range(self):
        with pytest.raises(ImmediateRangeError):
            parse_one("LLI $r0, 64")


# =============================================================================
# Directive Forms
# =============================================================================

class TestDirectiveForms:
    """Test classification of data and system directives."""

    @pytest.mark.parametrize("line,value", [
        (".fill 8", 8),
        (".fill -10", -10),
        (".fill 0x1E4", 0x1E4),
        (".fill 'a'", 0x61),
        (".FILL 0xFFFF", 0xFFFF),
    ])
    def test_fill(self, line, value):
        stmt = parse_one(line)
        assert isinstance(stmt, Directive)
        assert stmt.name == ".FILL"
        assert stmt.form == InstructionForm.FILL
        assert stmt.arguments == [value]

    def test_fill_label(self):
        stmt = parse_one(".fill @start")
        assert isinstance(stmt.arguments[0], LabelRef)

    @pytest.mark.parametrize("line", [".fill 0x10000", ".fill -32769"])
    def test_fill_range(self, line):
        with pytest.raises(ImmediateRangeError):
            parse_one(line)

    def test_fill_fractional_literal(self):
        with pytest.raises(LiteralError, match="invalid decimal literal '1.5'"):
            parse_one(".fill 1.5")

    def test_fill_needs_one_value(self):
        with pytest.raises(DirectiveError):
            parse_one(".fill 1, 2")
        with pytest.raises(DirectiveError):
            parse_one(".fill")

    def test_space_count_only(self):
        stmt = parse_one(".space 4")
        assert stmt.form == InstructionForm.SPACE
        assert stmt.arguments == [4]

    def test_space_with_values(self):
        stmt = parse_one(".space 20 [100, 'a', 'b', 0xFF, 0b11101]")
        assert stmt.arguments == [20, 100, 0x61, 0x62, 0xFF, 0b11101]

    def test_space_empty_list(self):
        assert parse_one(".space 2 []").arguments == [2]

    @pytest.mark.parametrize("line", [".space 0", ".space 65537", ".space -1"])
    def test_space_count_range(self, line):
        with pytest.raises(DirectiveError, match="count"):
            parse_one(line)

    def test_space_value_range(self):
        with pytest.raises(DirectiveError, match="16-bit"):
            parse_one(".space 2 [0x10000]")

    def test_space_malformed_list(self):
        with pytest.raises(AssemblySyntaxError):
            parse_one(".space 2 [1 2]")
        with pytest.raises(AssemblySyntaxError):
            parse_one(".space 2 [1, 2")

    def test_text(self):
        stmt = parse_one('.text "hello world!"')
        assert stmt.form == InstructionForm.TEXT
        assert stmt.arguments == ["hello world!"]

    def test_text_requires_string(self):
        with pytest.raises(DirectiveError):
            parse_one(".text 'a'")

    @pytest.mark.parametrize("number", range(8))
    def test_syscall(self, number):
        stmt = parse_one(f".syscall {number}")
        assert stmt.form == InstructionForm.SYSCALL
        assert stmt.arguments == [number]

    @pytest.mark.parametrize("line", [".syscall 8", ".syscall 10", ".syscall 0x1", ".syscall"])
    def test_syscall_invalid(self, line):
        with pytest.raises(DirectiveError, match="single digit"):
            parse_one(line)

    @pytest.mark.parametrize("name", sorted(DIRECTIVES))
    def test_every_directive_has_a_form(self, name):
        assert _DIRECTIVE_FORMS[name].name == name.lstrip(".")

    def test_unknown_directive(self):
        with pytest.raises(AssemblySyntaxError, match="unrecognized instruction"):
            parse_one(".word 5")


# =============================================================================
# Labels, Comments and Line Structure
# =============================================================================

class TestLineStructure:
    """Test labels, comments and blank lines."""

    def test_label_on_instruction(self):
        stmt = parse_one("loop: BEQ $r6, $r0, $r1")
        assert stmt.label == "loop"

    def test_label_on_directive(self):
        stmt = parse_one("array: .space 3")
        assert stmt.label == "array"

    def test_indented_label(self):
        assert parse_one("    label: NOP # test NOP instr").label == "label"

    def test_blank_and_comment_lines_skipped(self):
        statements = parse_lines(["", "# comment", "   ", "NOP", "  # another"])
        assert len(statements) == 1

    def test_source_line_and_location(self):
        statements = parse_lines(["NOP", "  ADD $r0, $r0, $r0  # x"], "prog.asm")
        stmt = statements[1]
        assert stmt.source_line == "  ADD $r0, $r0, $r0  # x"
        assert stmt.location.filename == "prog.asm"
        assert stmt.location.line == 2
        assert stmt.location.column == 3

    def test_bare_label_rejected(self):
        with pytest.raises(AssemblySyntaxError) as exc_info:
            parse_one("start:")
        assert "unrecognized instruction 'start:'" in str(exc_info.value)
        assert "same line" in exc_info.value.hint


# =============================================================================
# Error Conditions
# =============================================================================

class TestParserErrors:
    """Test classification errors."""

    def test_unknown_mnemonic(self):
        with pytest.raises(AssemblySyntaxError) as exc_info:
            parse_one("MUL $r0, $r1, $r2  # nope")
        assert exc_info.value.message == "unrecognized instruction 'MUL $r0, $r1, $r2'"

    @pytest.mark.parametrize("line,expected,actual", [
        ("ADD $r0, $r1", 3, 2),
        ("ADD $r0, $r1, $r2, $r3", 3, 4),
        ("JAL $r0", 2, 1),
        ("ADDI $r0, 5", 2, 1),
        ("LUI 5", 1, 0),
    ])
    def test_register_count(self, line, expected, actual):
        with pytest.raises(OperandCountError) as exc_info:
            parse_one(line)
        error = exc_info.value
        assert (error.expected, error.actual) == (expected, actual)
        assert "register" in error.message

    def test_missing_immediate(self):
        with pytest.raises(OperandCountError, match="immediate"):
            parse_one("ADDI $r0, $r1")

    def test_unexpected_immediate(self):
        with pytest.raises(OperandCountError, match="immediate"):
            parse_one("ADD $r0, $r1, $r2, 5")

    def test_nop_takes_no_operands(self):
        with pytest.raises(OperandCountError):
            parse_one("NOP $r0")

    def test_immediate_before_registers(self):
        with pytest.raises(AssemblySyntaxError):
            parse_one("ADDI $r0, 5, $r1")

    def test_operands_need_commas(self):
        with pytest.raises(AssemblySyntaxError):
            parse_one("ADD $r0 $r1 $r2")

    def test_unknown_register(self):
        with pytest.raises(AssemblySyntaxError, match="unknown register '\\$r7'"):
            parse_one("ADD $r7, $r0, $r0")

    def test_addi_range(self):
        with pytest.raises(ImmediateRangeError):
            parse_one("ADDI $r0, $r0, 64")

    def test_bad_literal(self):
        with pytest.raises(LiteralError):
            parse_one("ADDI $r0, $r0, 0xZZ")

    def test_error_points_at_line(self):
        with pytest.raises(OperandCountError) as exc_info:
            parse_lines(["NOP", "NOP", "ADD $r0"], "prog.asm")
        assert str(exc_info.value).startswith("prog.asm:3:1: error:")
