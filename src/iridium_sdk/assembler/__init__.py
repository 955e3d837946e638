"""
Iridium Assembler
=================

This package provides an assembler for the Iridium CPU, a fixed-width 16-bit
instruction set with eight opcodes, seven general-purpose registers plus a
hard-wired zero register, and a flat 16-bit word address space.

Main Components
---------------
- **Assembler**: Main assembler class that orchestrates the assembly process
- **Lexer**: Tokenizes assembly source, stripping comments and whitespace
- **Parser**: Classifies each line into one of the recognized forms
- **PseudoExpander**: Rewrites NOP, LLI, MOVI, .space and .text
- **LabelResolver**: Builds the label table and substitutes references
- **CodeGenerator**: Packs statements into 16-bit words

Assembly Process
----------------
1. **Parsing (Lexer + Parser)**: tokens become typed statements; literals
   are decoded and range-checked against their fields
2. **Expansion**: every statement now occupies exactly one word
3. **Resolution** (two-pass): label addresses, then substitution
4. **Encoding**: one word per statement, written big-endian

Example Usage
-------------
>>> from iridium_sdk.assembler import Assembler
>>> asm = Assembler()
>>> asm.assemble_string('''
... start:  MOVI $r1, @message
...         .syscall 6
... message: .text "hi"
... ''')
>>> asm.write_binary("hello.bin")
"""

from iridium_sdk.assembler.assembler import Assembler, assemble, assemble_file
from iridium_sdk.assembler.lexer import Lexer, Token, TokenType
from iridium_sdk.assembler.literals import LabelRef
from iridium_sdk.assembler.parser import (
    Directive,
    Instruction,
    InstructionForm,
    Parser,
    Statement,
    parse_lines,
    parse_source,
)
from iridium_sdk.assembler.expander import (
    ExpansionStats,
    PseudoExpander,
    expand_statements,
)
from iridium_sdk.assembler.resolver import LabelResolver, resolve_labels
from iridium_sdk.assembler.codegen import CodeGenerator, words_to_bytes

__all__ = [
    "Assembler",
    "assemble",
    "assemble_file",
    "Lexer",
    "Token",
    "TokenType",
    "LabelRef",
    "Parser",
    "Statement",
    "Instruction",
    "Directive",
    "InstructionForm",
    "parse_source",
    "parse_lines",
    "PseudoExpander",
    "ExpansionStats",
    "expand_statements",
    "LabelResolver",
    "resolve_labels",
    "CodeGenerator",
    "words_to_bytes",
]
