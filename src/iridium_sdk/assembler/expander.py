"""
Iridium Pseudo-Instruction Expander
===================================

This module rewrites pseudo-instructions and multi-word directives into
real instructions and ``.fill`` words, so that every statement leaving this
stage occupies exactly one word of the output image.

Expansion Rules
---------------
| Source                 | Expansion                                      |
|------------------------|------------------------------------------------|
| NOP                    | ADD $zero, $zero, $zero                        |
| LLI reg, imm6          | ADDI reg, reg, imm6                            |
| MOVI reg, imm16        | ADDI reg, $zero, low6 ; LUI reg, high10        |
| .space N [v0, v1, ...] | N x .fill (listed values, then zeros)          |
| .text "s"              | one .fill per character, then .fill 0          |

``low6`` is the value masked to its low 6 bits and ``high10`` is bits 6-15
shifted down by 6. A ``MOVI`` whose immediate is a label reference copies
the reference into both halves; the label resolver applies the same split
once the address is known.

A label on the source line is attached to the first emitted statement.
Every emitted statement keeps the location and source text of the line it
came from, so errors and listings still point at the user's code.

Architecture
------------
The output list is built by concatenating, for each input statement, the
list its rule produces. Nothing is inserted into or removed from the list
being iterated, so addresses need no manual correction: the position of a
statement in the returned list is its final word address.

Usage
-----
>>> from iridium_sdk.assembler.parser import parse_source
>>> from iridium_sdk.assembler.expander import PseudoExpander
>>> statements = parse_source("MOVI $r1, 0x10e")
>>> expander = PseudoExpander()
>>> expanded = expander.expand(statements)
>>> [s.mnemonic for s in expanded]
['ADDI', 'LUI']
"""

from dataclasses import dataclass
from typing import Optional
import logging

from iridium_sdk.errors import DirectiveError
from iridium_sdk.assembler.literals import Immediate, LabelRef, text_values
from iridium_sdk.assembler.parser import (
    Directive,
    Instruction,
    InstructionForm,
    REAL_FORMS,
    Statement,
)
from iridium_sdk.cpu import (
    OPCODE_TABLE,
    ZERO_REGISTER,
    split_address,
)


logger = logging.getLogger(__name__)


TEXT_TERMINATOR = 0x0000


# =============================================================================
# Expansion Statistics
# =============================================================================

@dataclass
class ExpansionStats:
    """
    Counts of expansions performed, for verbose reporting.

    Attributes:
        nop: NOP instructions expanded
        lli: LLI instructions expanded
        movi: MOVI instructions expanded (each becomes two words)
        space: .space directives expanded
        text: .text directives expanded
        space_words: Words generated by .space directives
        text_words: Words generated by .text directives (terminators included)
    """
    nop: int = 0
    lli: int = 0
    movi: int = 0
    space: int = 0
    text: int = 0
    space_words: int = 0
    text_words: int = 0

    @property
    def total_expansions(self) -> int:
        """Number of pseudo-instructions and directives rewritten."""
        return self.nop + self.lli + self.movi + self.space + self.text

    def __str__(self) -> str:
        lines = ["Expansion Statistics:"]
        if self.nop:
            lines.append(f"  NOP expanded: {self.nop}")
        if self.lli:
            lines.append(f"  LLI expanded: {self.lli}")
        if self.movi:
            lines.append(f"  MOVI expanded: {self.movi}")
        if self.space:
            lines.append(f"  .space expanded: {self.space} ({self.space_words} words)")
        if self.text:
            lines.append(f"  .text expanded: {self.text} ({self.text_words} words)")
        lines.append(f"  Total expansions: {self.total_expansions}")
        return "\n".join(lines)


# =============================================================================
# Expander
# =============================================================================

class PseudoExpander:
    """
    Rewrites pseudo forms into real instructions and fill words.

    Usage:
        expander = PseudoExpander()
        expanded = expander.expand(statements)
        print(expander.stats)
    """

    def __init__(self):
        self.stats = ExpansionStats()

    def expand(self, statements: list[Statement]) -> list[Statement]:
        """
        Expand all pseudo forms.

        Args:
            statements: Classified statements, in source order

        Returns:
            A new list containing only real instructions, .fill and
            .syscall directives

        Raises:
            DirectiveError: If a .space lists more values than its count
        """
        self.stats = ExpansionStats()
        expanded: list[Statement] = []

        for statement in statements:
            expanded.extend(self._expand_statement(statement))

        logger.debug(
            f"Expanded {len(statements)} statements into {len(expanded)} "
            f"({self.stats.total_expansions} rewritten)"
        )
        return expanded

    def _expand_statement(self, statement: Statement) -> list[Statement]:
        if isinstance(statement, Instruction):
            if statement.mnemonic == "NOP":
                return self._expand_nop(statement)
            if statement.mnemonic == "LLI":
                return self._expand_lli(statement)
            if statement.mnemonic == "MOVI":
                return self._expand_movi(statement)
        elif isinstance(statement, Directive):
            if statement.form == InstructionForm.SPACE:
                return self._expand_space(statement)
            if statement.form == InstructionForm.TEXT:
                return self._expand_text(statement)
        return [statement]

    # =========================================================================
    # Instruction Rules
    # =========================================================================

    def _expand_nop(self, nop: Instruction) -> list[Statement]:
        self.stats.nop += 1
        zero = ZERO_REGISTER
        return [_real(nop, "ADD", (zero, zero, zero), None, nop.label)]

    def _expand_lli(self, lli: Instruction) -> list[Statement]:
        self.stats.lli += 1
        (register,) = lli.registers
        return [_real(lli, "ADDI", (register, register), lli.immediate, lli.label)]

    def _expand_movi(self, movi: Instruction) -> list[Statement]:
        self.stats.movi += 1
        (register,) = movi.registers

        if isinstance(movi.immediate, LabelRef):
            low = high = movi.immediate
        else:
            low, high = split_address(movi.immediate)

        return [
            _real(movi, "ADDI", (register, ZERO_REGISTER), low, movi.label),
            _real(movi, "LUI", (register,), high, None),
        ]

    # =========================================================================
    # Directive Rules
    # =========================================================================

    def _expand_space(self, space: Directive) -> list[Statement]:
        count, *values = space.arguments
        if len(values) > count:
            raise DirectiveError(
                f".space reserves {count} words but lists {len(values)} values",
                space.location,
                source_line=space.source_line,
            )

        words = list(values) + [0] * (count - len(values))
        self.stats.space_words += len(words)
        self.stats.space += 1
        return _fills(space, words)

    def _expand_text(self, text: Directive) -> list[Statement]:
        (string,) = text.arguments
        words = text_values(string, text.location, text.source_line)
        words.append(TEXT_TERMINATOR)
        self.stats.text_words += len(words)
        self.stats.text += 1
        return _fills(text, words)


# =============================================================================
# Statement Builders
# =============================================================================

def _real(
    origin: Statement,
    mnemonic: str,
    registers: tuple[int, ...],
    immediate: Optional[Immediate],
    label: Optional[str],
) -> Instruction:
    """Build a real instruction standing in for (part of) ``origin``."""
    info = OPCODE_TABLE[mnemonic]
    return Instruction(
        location=origin.location,
        mnemonic=mnemonic,
        form=REAL_FORMS[info.shape],
        registers=registers,
        immediate=immediate,
        label=label,
        source_line=origin.source_line,
    )


def _fills(origin: Directive, words: list[int]) -> list[Statement]:
    """One .fill per word; only the first carries the original label."""
    return [
        Directive(
            location=origin.location,
            name=".FILL",
            form=InstructionForm.FILL,
            arguments=[word],
            label=origin.label if index == 0 else None,
            source_line=origin.source_line,
        )
        for index, word in enumerate(words)
    ]


def expand_statements(statements: list[Statement]) -> list[Statement]:
    """Convenience function: expand with a throwaway expander."""
    return PseudoExpander().expand(statements)
