"""
Iridium Code Generator
======================

This module packs resolved statements into 16-bit machine words and
serializes them for output.

Encoding
--------
::

    THREE_REG    op<<12 | a<<10 | b<<7 | c<<4
    TWO_REG_IMM  op<<12 | a<<10 | b<<7 | (imm & 0x7F)
    ONE_REG_IMM  op<<12 | a<<10 | (imm & 0x3FF)
    TWO_REG      op<<12 | a<<10 | b<<7
    SYSCALL      JAL opcode | ((0x40 | n) & 0x7F)
    FILL         value & 0xFFFF

Immediates are checked against their field once more before packing, so a
statement built by hand (not through the parser) cannot silently overflow
into a neighbouring field.

Output Formats
--------------
- Binary image: big-endian, two bytes per word, word *i* at byte offset 2*i
- Hex dump: one ``XXXX`` word per line
- Listing: address, word and source line for every word
- Symbol file: one ``name $XXXX`` entry per label
"""

from pathlib import Path
from typing import Optional
import logging
import struct

from iridium_sdk.errors import AssemblerError, OperandCountError
from iridium_sdk.assembler.literals import LabelRef, check_range
from iridium_sdk.assembler.parser import (
    Directive,
    Instruction,
    InstructionForm,
    Statement,
)
from iridium_sdk.cpu import (
    IMMEDIATE_FIELDS,
    IMM7_MASK,
    IMM10_MASK,
    OPCODE_SHIFT,
    OPCODE_TABLE,
    REG_A_SHIFT,
    REG_B_SHIFT,
    REG_C_SHIFT,
    SYSCALL_SUBOPCODE,
    WORD_MASK,
    get_register_name,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Code Generator
# =============================================================================

class CodeGenerator:
    """
    Encodes resolved statements into machine words.

    Usage:
        codegen = CodeGenerator()
        words = codegen.generate(statements)
        image = codegen.get_code()
        print(codegen.get_listing(symbols))
    """

    def __init__(self):
        self._words: list[int] = []
        self._listing_lines: list[str] = []

    def generate(self, statements: list[Statement]) -> list[int]:
        """
        Encode every statement, in order.

        Args:
            statements: Expanded and label-resolved statements

        Returns:
            One 16-bit word per statement

        Raises:
            OperandCountError: If a statement has the wrong register count
            ImmediateRangeError: If an immediate does not fit its field
            AssemblerError: If a pseudo form or unresolved label remains
        """
        self._words = []
        self._listing_lines = []

        previous_line = None
        for address, statement in enumerate(statements):
            word = self.encode(statement)
            self._words.append(word)

            # Expanded statements share a source line; show it once
            line = statement.location.line
            source = statement.source_line if line != previous_line else ""
            previous_line = line
            self._listing_lines.append(
                f"${address:04X}  ${word:04X}  {line:4d}  {source}".rstrip()
            )

        logger.debug(f"Encoded {len(self._words)} words")
        return list(self._words)

    def encode(self, statement: Statement) -> int:
        """Encode a single statement into one 16-bit word."""
        if isinstance(statement, Instruction):
            return self._encode_instruction(statement)
        if isinstance(statement, Directive):
            return self._encode_directive(statement)
        raise AssemblerError(
            f"cannot encode {type(statement).__name__}", statement.location
        )

    # =========================================================================
    # Instructions
    # =========================================================================

    def _encode_instruction(self, inst: Instruction) -> int:
        if inst.form.is_pseudo:
            raise AssemblerError(
                f"pseudo-instruction '{inst.mnemonic}' was not expanded",
                inst.location,
                source_line=inst.source_line,
            )

        info = OPCODE_TABLE[inst.mnemonic]
        shape = info.shape
        if len(inst.registers) != shape.register_count:
            raise OperandCountError(
                inst.mnemonic, shape.register_count, len(inst.registers),
                location=inst.location, source_line=inst.source_line,
            )
        for index in inst.registers:
            try:
                get_register_name(index)
            except ValueError as e:
                raise AssemblerError(
                    str(e), inst.location, source_line=inst.source_line
                ) from e

        word = info.opcode << OPCODE_SHIFT
        registers = inst.registers
        word |= registers[0] << REG_A_SHIFT

        if inst.form == InstructionForm.THREE_REG:
            word |= registers[1] << REG_B_SHIFT
            word |= registers[2] << REG_C_SHIFT
        elif inst.form == InstructionForm.TWO_REG_IMM:
            word |= registers[1] << REG_B_SHIFT
            word |= self._immediate(inst) & IMM7_MASK
        elif inst.form == InstructionForm.ONE_REG_IMM:
            word |= self._immediate(inst) & IMM10_MASK
        elif inst.form == InstructionForm.TWO_REG:
            word |= registers[1] << REG_B_SHIFT

        return word & WORD_MASK

    def _immediate(self, inst: Instruction) -> int:
        """Return the instruction's immediate after re-checking its range."""
        value = inst.immediate
        if value is None:
            raise AssemblerError(
                f"'{inst.mnemonic}' is missing its immediate",
                inst.location,
                source_line=inst.source_line,
            )
        if isinstance(value, LabelRef):
            raise AssemblerError(
                f"label reference '{value}' was not resolved",
                inst.location,
                source_line=inst.source_line,
            )
        return check_range(
            value, IMMEDIATE_FIELDS[inst.mnemonic], inst.location, inst.source_line
        )

    # =========================================================================
    # Directives
    # =========================================================================

    def _encode_directive(self, directive: Directive) -> int:
        if directive.form == InstructionForm.FILL:
            (value,) = directive.arguments
            if isinstance(value, LabelRef):
                raise AssemblerError(
                    f"label reference '{value}' was not resolved",
                    directive.location,
                    source_line=directive.source_line,
                )
            check_range(
                value, IMMEDIATE_FIELDS[".FILL"], directive.location, directive.source_line
            )
            return value & WORD_MASK

        if directive.form == InstructionForm.SYSCALL:
            (number,) = directive.arguments
            opcode = OPCODE_TABLE["JAL"].opcode << OPCODE_SHIFT
            return opcode | ((SYSCALL_SUBOPCODE | number) & IMM7_MASK)

        raise AssemblerError(
            f"directive '{directive.name.lower()}' was not expanded",
            directive.location,
            source_line=directive.source_line,
        )

    # =========================================================================
    # Output
    # =========================================================================

    def get_words(self) -> list[int]:
        return list(self._words)

    def get_code(self) -> bytes:
        """Return the image as big-endian bytes."""
        return words_to_bytes(self._words)

    def get_listing(self, symbols: Optional[dict[str, int]] = None) -> str:
        """
        Get the assembly listing as a string.

        Returns:
            The listing showing addresses, words and source lines, followed
            by the symbol table.
        """
        lines = []
        lines.append("Iridium Assembler Listing")
        lines.append("=" * 60)
        lines.append("")
        lines.append("Addr   Word   Line  Source")
        lines.append("-" * 60)
        lines.extend(self._listing_lines)
        if symbols:
            lines.append("")
            lines.append("Symbol Table")
            lines.append("-" * 30)
            lines.extend(format_symbols(symbols, width=20))
        return "\n".join(lines) + "\n"

    def write_listing(self, filepath: str | Path, symbols: Optional[dict[str, int]] = None) -> None:
        with open(filepath, "w") as f:
            f.write(self.get_listing(symbols))


# =============================================================================
# Serialization Helpers
# =============================================================================

def words_to_bytes(words: list[int]) -> bytes:
    """Serialize words big-endian, two bytes each."""
    return b"".join(struct.pack(">H", word & WORD_MASK) for word in words)


def words_to_hex(words: list[int]) -> str:
    """Render words as text, one upper-case ``XXXX`` per line."""
    return "".join(f"{word:04X}\n" for word in words)


def format_symbols(symbols: dict[str, int], width: int = 0) -> list[str]:
    """Format label entries sorted by address, then name."""
    entries = sorted(symbols.items(), key=lambda item: (item[1], item[0]))
    if width:
        return [f"{name:{width}s} = ${value:04X}" for name, value in entries]
    return [f"{name} ${value:04X}" for name, value in entries]
