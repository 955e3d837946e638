"""
Iridium SDK CPU Package
=======================

This package contains the Iridium CPU architecture definitions used by the
assembler: opcode catalog, register table, immediate field layouts and the
bit positions of every instruction field.

Modules:
    iridium: Instruction set tables and lookup helpers.

Usage:
    from iridium_sdk.cpu import (
        OperandShape,
        InstructionInfo,
        OPCODE_TABLE,
        get_instruction_info,
    )
"""

from iridium_sdk.cpu.iridium import (
    # Core types
    OperandShape,
    InstructionInfo,
    FieldSpec,
    # Catalogs
    OPCODE_TABLE,
    PSEUDO_TABLE,
    DIRECTIVES,
    IMMEDIATE_FIELDS,
    LOW_IMMEDIATE_INSTRUCTIONS,
    UPPER_IMMEDIATE_INSTRUCTIONS,
    REGISTERS,
    ZERO_REGISTER,
    # Bit layout
    OPCODE_SHIFT,
    REG_A_SHIFT,
    REG_B_SHIFT,
    REG_C_SHIFT,
    IMM7_MASK,
    IMM10_MASK,
    WORD_MASK,
    LOW_ADDRESS_MASK,
    HIGH_ADDRESS_MASK,
    HIGH_ADDRESS_SHIFT,
    SYSCALL_SUBOPCODE,
    SYSCALL_MAX,
    ADDRESS_SPACE_WORDS,
    # Lookup functions
    get_instruction_info,
    get_register_index,
    get_register_name,
    split_address,
)

__all__ = [
    "OperandShape",
    "InstructionInfo",
    "FieldSpec",
    "OPCODE_TABLE",
    "PSEUDO_TABLE",
    "DIRECTIVES",
    "IMMEDIATE_FIELDS",
    "LOW_IMMEDIATE_INSTRUCTIONS",
    "UPPER_IMMEDIATE_INSTRUCTIONS",
    "REGISTERS",
    "ZERO_REGISTER",
    "OPCODE_SHIFT",
    "REG_A_SHIFT",
    "REG_B_SHIFT",
    "REG_C_SHIFT",
    "IMM7_MASK",
    "IMM10_MASK",
    "WORD_MASK",
    "LOW_ADDRESS_MASK",
    "HIGH_ADDRESS_MASK",
    "HIGH_ADDRESS_SHIFT",
    "SYSCALL_SUBOPCODE",
    "SYSCALL_MAX",
    "ADDRESS_SPACE_WORDS",
    "get_instruction_info",
    "get_register_index",
    "get_register_name",
    "split_address",
]
