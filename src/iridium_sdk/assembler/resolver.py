"""
Iridium Label Resolver
======================

Two-pass symbol resolution over the expanded statement list.

Pass 1 (Table Construction)
---------------------------
- Statement *i* sits at word address *i*
- A label on statement *i* defines ``name -> i``
- Defining a name twice is an error

Pass 2 (Substitution)
---------------------
Every ``@name`` reference is replaced by the label's address, transformed
for the field it lands in:

| Mnemonic        | Substituted value              |
|-----------------|--------------------------------|
| ADDI, LW, SW    | address & 0x003F               |
| LUI             | (address & 0xFFC0) >> 6        |
| .fill           | address                        |

This is the same split MOVI uses for numeric immediates, so
``MOVI $r1, @end`` loads the full 16-bit address of ``end``.
"""

from dataclasses import dataclass, replace
from typing import Optional
import difflib
import logging

from iridium_sdk.errors import (
    AssemblerError,
    DuplicateSymbolError,
    SourceLocation,
    UndefinedSymbolError,
)
from iridium_sdk.assembler.literals import LabelRef
from iridium_sdk.assembler.parser import Directive, Instruction, Statement
from iridium_sdk.cpu import (
    ADDRESS_SPACE_WORDS,
    HIGH_ADDRESS_MASK,
    HIGH_ADDRESS_SHIFT,
    LOW_ADDRESS_MASK,
    LOW_IMMEDIATE_INSTRUCTIONS,
    UPPER_IMMEDIATE_INSTRUCTIONS,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Symbol Table Entry
# =============================================================================

@dataclass
class Symbol:
    """
    Symbol table entry.

    Attributes:
        name: Label name (case-sensitive)
        value: Word address of the labelled statement
        location: Where the label was defined
    """
    name: str
    value: int
    location: SourceLocation


def transform_address(mnemonic: str, address: int) -> int:
    """Apply the field-specific split to a label address."""
    if mnemonic in LOW_IMMEDIATE_INSTRUCTIONS:
        return address & LOW_ADDRESS_MASK
    if mnemonic in UPPER_IMMEDIATE_INSTRUCTIONS:
        return (address & HIGH_ADDRESS_MASK) >> HIGH_ADDRESS_SHIFT
    return address


# =============================================================================
# Label Resolver
# =============================================================================

class LabelResolver:
    """
    Builds the label table and substitutes label references.

    Usage:
        resolver = LabelResolver()
        resolver.build_table(statements)
        resolved = resolver.resolve(statements)
        symbols = resolver.get_symbols()
    """

    def __init__(self):
        self._symbols: dict[str, Symbol] = {}

    def get_symbols(self) -> dict[str, int]:
        """Return a dictionary of label names to addresses."""
        return {name: sym.value for name, sym in self._symbols.items()}

    # =========================================================================
    # Pass 1: Table Construction
    # =========================================================================

    def build_table(self, statements: list[Statement]) -> dict[str, int]:
        """
        Record the address of every label.

        Args:
            statements: Fully expanded statements

        Returns:
            Mapping of label name to word address

        Raises:
            DuplicateSymbolError: If a label is defined more than once
            AssemblerError: If the program does not fit the address space
        """
        if len(statements) > ADDRESS_SPACE_WORDS:
            raise AssemblerError(
                f"program is {len(statements)} words long, "
                f"but the address space holds {ADDRESS_SPACE_WORDS}"
            )

        self._symbols.clear()
        for address, statement in enumerate(statements):
            name = statement.label
            if name is None:
                continue

            if name in self._symbols:
                raise DuplicateSymbolError(
                    name,
                    location=statement.location,
                    original_location=self._symbols[name].location,
                    source_line=statement.source_line,
                )
            self._symbols[name] = Symbol(name, address, statement.location)

        logger.debug(f"Label table holds {len(self._symbols)} labels")
        return self.get_symbols()

    # =========================================================================
    # Pass 2: Substitution
    # =========================================================================

    def resolve(self, statements: list[Statement]) -> list[Statement]:
        """
        Replace every label reference with its (transformed) address.

        Returns:
            A new list in which no LabelRef remains

        Raises:
            UndefinedSymbolError: If a referenced label was never defined
        """
        resolved: list[Statement] = []
        substitutions = 0

        for statement in statements:
            if isinstance(statement, Instruction) and isinstance(statement.immediate, LabelRef):
                value = self._lookup(statement.immediate, statement)
                statement = replace(
                    statement, immediate=transform_address(statement.mnemonic, value)
                )
                substitutions += 1
            elif isinstance(statement, Directive) and any(
                isinstance(arg, LabelRef) for arg in statement.arguments
            ):
                arguments = [
                    transform_address(statement.name, self._lookup(arg, statement))
                    if isinstance(arg, LabelRef) else arg
                    for arg in statement.arguments
                ]
                statement = replace(statement, arguments=arguments)
                substitutions += 1
            resolved.append(statement)

        logger.debug(f"Substituted {substitutions} label references")
        return resolved

    def _lookup(self, ref: LabelRef, statement: Statement) -> int:
        symbol = self._symbols.get(ref.name)
        if symbol is None:
            raise UndefinedSymbolError(
                ref.name,
                location=ref.location or statement.location,
                source_line=statement.source_line,
                similar_symbols=self._find_similar_symbols(ref.name),
            )
        return symbol.value

    def _find_similar_symbols(self, name: str) -> list[str]:
        """Find labels with similar names for error hints."""
        return difflib.get_close_matches(name, list(self._symbols), n=3, cutoff=0.6)


def resolve_labels(
    statements: list[Statement],
    resolver: Optional[LabelResolver] = None,
) -> list[Statement]:
    """Run both passes over ``statements`` and return the resolved list."""
    resolver = resolver or LabelResolver()
    resolver.build_table(statements)
    return resolver.resolve(statements)
