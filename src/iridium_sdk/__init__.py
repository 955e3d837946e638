"""
Iridium SDK - Assembler Toolchain for the Iridium CPU
=====================================================

This package provides an assembler for the Iridium CPU, a small educational
processor with a fixed-width 16-bit instruction set.

Main Components
---------------
- **assembler**: Iridium assembler (iasm)
    Converts assembly source files (.asm) to big-endian binary images

- **cpu**: Instruction set definition
    Opcode catalog, register table and immediate field layouts

Quick Start
-----------
Assemble a program:
    >>> from iridium_sdk.assembler import Assembler
    >>> asm = Assembler()
    >>> code = asm.assemble_file("bios.asm")
    >>> asm.write_binary("bios.bin")

Or use the command-line tool:
    $ iasm bios.asm bios.bin -l bios.lst

Version History
---------------
1.0.0 - Initial release
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from iridium_sdk.assembler import Assembler
from iridium_sdk.errors import (
    IridiumError,
    SourceLocation,
    AssemblerError,
    AssemblySyntaxError,
    OperandCountError,
    ImmediateRangeError,
    LiteralError,
    UndefinedSymbolError,
    DuplicateSymbolError,
    DirectiveError,
)

__all__ = [
    # Version info
    "__version__",
    # Assembler
    "Assembler",
    # Exception hierarchy
    "IridiumError",
    "SourceLocation",
    "AssemblerError",
    "AssemblySyntaxError",
    "OperandCountError",
    "ImmediateRangeError",
    "LiteralError",
    "UndefinedSymbolError",
    "DuplicateSymbolError",
    "DirectiveError",
]
