"""
Iridium Instruction Set Definition
==================================

This module defines the Iridium instruction set: opcodes, operand shapes,
register names and immediate field layouts. Every table here is built once
at import time and never mutated.

Word Layout
-----------
Every instruction is one 16-bit word. The opcode occupies bits 12-15. All
eight Iridium opcodes are even, so bit 12 is always clear in the opcode and
doubles as the top bit of the first register field::

    15  13 12  10 9    7 6  4 3   0
    +-----+------+------+----+-----+
    | op  | regA | regB |regC| 0   |   THREE_REG    ADD, NAND, BEQ
    | op  | regA | regB |  imm7    |   TWO_REG_IMM  ADDI, SW, LW
    | op  | regA |      imm10      |   ONE_REG_IMM  LUI
    | op  | regA | regB |  0       |   TWO_REG      JAL
    +-----+------+------+----------+

The syscall directive is encoded as JAL with bit 6 set in the 7-bit
immediate field and the syscall number in bits 0-2.

Registers
---------
``$zero`` is hard-wired to zero and has index 0. The general-purpose
registers ``$r0``..``$r6`` have indices 1..7.

Pseudo-Instructions
-------------------
- NOP            -> ADD $zero, $zero, $zero
- LLI reg, imm6  -> ADDI reg, reg, imm6
- MOVI reg, imm  -> ADDI reg, $zero, low6(imm) ; LUI reg, high10(imm)
"""

from dataclasses import dataclass
from enum import Enum, auto
from types import MappingProxyType
from typing import Optional


# =============================================================================
# Operand Shapes
# =============================================================================

class OperandShape(Enum):
    """
    Operand shapes an Iridium mnemonic can take.

    The shape fixes how many registers and immediates appear after the
    mnemonic, and in which order (registers always come first).
    """
    THREE_REG = auto()      # reg, reg, reg
    TWO_REG_IMM = auto()    # reg, reg, imm
    ONE_REG_IMM = auto()    # reg, imm
    TWO_REG = auto()        # reg, reg
    NO_OPERAND = auto()     # (nothing)

    @property
    def register_count(self) -> int:
        return _SHAPE_OPERANDS[self][0]

    @property
    def has_immediate(self) -> bool:
        return _SHAPE_OPERANDS[self][1]

    def __str__(self) -> str:
        return self.name.lower().replace("_", "-")


# shape -> (registers, has immediate)
_SHAPE_OPERANDS = {
    OperandShape.THREE_REG: (3, False),
    OperandShape.TWO_REG_IMM: (2, True),
    OperandShape.ONE_REG_IMM: (1, True),
    OperandShape.TWO_REG: (2, False),
    OperandShape.NO_OPERAND: (0, False),
}


# =============================================================================
# Instruction Information
# =============================================================================

@dataclass(frozen=True)
class InstructionInfo:
    """
    Catalog entry for one mnemonic.

    Attributes:
        mnemonic: Upper-case mnemonic text
        opcode: 4-bit opcode placed in bits 12-15 (None for pseudo-instructions)
        shape: Operand shape the mnemonic accepts
        pseudo: True if the mnemonic expands to other instructions
    """
    mnemonic: str
    opcode: Optional[int]
    shape: OperandShape
    pseudo: bool = False

    def __repr__(self) -> str:
        if self.pseudo:
            return f"InstructionInfo({self.mnemonic}, pseudo, {self.shape})"
        return f"InstructionInfo({self.mnemonic}, ${self.opcode:X}, {self.shape})"


@dataclass(frozen=True)
class FieldSpec:
    """
    Layout and acceptance rules of an immediate field.

    Attributes:
        bits: Field width in bits
        signed: True for a two's complement field, False for unsigned
        allow_char: Accept a quoted ASCII character in place of a number
        allow_label: Accept an @label reference (resolved later)
        twos_complement: For unsigned fields, also accept negative values
                         down to -2**(bits-1), stored as two's complement
    """
    bits: int
    signed: bool
    allow_char: bool = True
    allow_label: bool = False
    twos_complement: bool = False

    @property
    def minimum(self) -> int:
        if self.signed or self.twos_complement:
            return -(1 << (self.bits - 1))
        return 0

    @property
    def maximum(self) -> int:
        if self.signed:
            return (1 << (self.bits - 1)) - 1
        return (1 << self.bits) - 1

    @property
    def mask(self) -> int:
        return (1 << self.bits) - 1

    def contains(self, value: int) -> bool:
        return self.minimum <= value <= self.maximum


# =============================================================================
# Opcode Catalog
# =============================================================================

OPCODE_TABLE = MappingProxyType({
    "ADD": InstructionInfo("ADD", 0x0, OperandShape.THREE_REG),
    "ADDI": InstructionInfo("ADDI", 0x2, OperandShape.TWO_REG_IMM),
    "NAND": InstructionInfo("NAND", 0x4, OperandShape.THREE_REG),
    "LUI": InstructionInfo("LUI", 0x6, OperandShape.ONE_REG_IMM),
    "SW": InstructionInfo("SW", 0x8, OperandShape.TWO_REG_IMM),
    "LW": InstructionInfo("LW", 0xA, OperandShape.TWO_REG_IMM),
    "BEQ": InstructionInfo("BEQ", 0xC, OperandShape.THREE_REG),
    "JAL": InstructionInfo("JAL", 0xE, OperandShape.TWO_REG),
})

PSEUDO_TABLE = MappingProxyType({
    "NOP": InstructionInfo("NOP", None, OperandShape.NO_OPERAND, pseudo=True),
    "LLI": InstructionInfo("LLI", None, OperandShape.ONE_REG_IMM, pseudo=True),
    "MOVI": InstructionInfo("MOVI", None, OperandShape.ONE_REG_IMM, pseudo=True),
})

# Immediate field rules by mnemonic (or directive name)
IMMEDIATE_FIELDS = MappingProxyType({
    "ADDI": FieldSpec(7, signed=True, allow_label=True),
    "SW": FieldSpec(7, signed=True, allow_label=True),
    "LW": FieldSpec(7, signed=True, allow_label=True),
    "LUI": FieldSpec(10, signed=False, allow_label=True),
    "LLI": FieldSpec(6, signed=False),
    "MOVI": FieldSpec(16, signed=False, allow_label=True),
    ".FILL": FieldSpec(16, signed=False, allow_label=True, twos_complement=True),
    ".SPACE": FieldSpec(16, signed=False),
})

# Mnemonics whose immediate is the low 6 bits of a label address
LOW_IMMEDIATE_INSTRUCTIONS = frozenset({"ADDI", "LW", "SW"})

# Mnemonics whose immediate is the high 10 bits of a label address
UPPER_IMMEDIATE_INSTRUCTIONS = frozenset({"LUI"})

DIRECTIVES = frozenset({".FILL", ".SPACE", ".TEXT", ".SYSCALL"})


# =============================================================================
# Register Table
# =============================================================================

REGISTERS = MappingProxyType({
    "$zero": 0,
    "$r0": 1,
    "$r1": 2,
    "$r2": 3,
    "$r3": 4,
    "$r4": 5,
    "$r5": 6,
    "$r6": 7,
})

ZERO_REGISTER = REGISTERS["$zero"]


# =============================================================================
# Bit Layout Constants
# =============================================================================

OPCODE_SHIFT = 12
REG_A_SHIFT = 10
REG_B_SHIFT = 7
REG_C_SHIFT = 4

IMM7_MASK = 0x007F
IMM10_MASK = 0x03FF
WORD_MASK = 0xFFFF

LOW_ADDRESS_MASK = 0x003F
HIGH_ADDRESS_MASK = 0xFFC0
HIGH_ADDRESS_SHIFT = 6

SYSCALL_SUBOPCODE = 0x0040
SYSCALL_MAX = 7

ADDRESS_SPACE_WORDS = 0x10000


# =============================================================================
# Lookup Functions
# =============================================================================

def get_instruction_info(mnemonic: str) -> Optional[InstructionInfo]:
    """Look up a real or pseudo mnemonic (case-insensitive)."""
    key = mnemonic.upper()
    return OPCODE_TABLE.get(key) or PSEUDO_TABLE.get(key)


def get_register_index(name: str) -> Optional[int]:
    """Return the 3-bit index of a register name, or None if unknown."""
    return REGISTERS.get(name.lower())


def get_register_name(index: int) -> str:
    """Return the name of a register index, raising ValueError if unknown."""
    for name, value in REGISTERS.items():
        if value == index:
            return name
    raise ValueError(f"no register with index {index}")


def split_address(value: int) -> tuple[int, int]:
    """
    Split a 16-bit value into the (low6, high10) pair used by MOVI.

    The low half is the value masked to its low 6 bits; the high half is
    bits 6-15 shifted down by 6, so ``(high << 6) | low == value``.
    """
    low = value & LOW_ADDRESS_MASK
    high = (value & HIGH_ADDRESS_MASK) >> HIGH_ADDRESS_SHIFT
    return low, high
