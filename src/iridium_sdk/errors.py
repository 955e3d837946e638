"""
Iridium SDK Error Hierarchy
===========================

This module defines the exception hierarchy for the Iridium SDK.
All exceptions inherit from IridiumError, allowing callers to catch all
SDK-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
IridiumError (base)
└── AssemblerError (assembler-related)
    ├── AssemblySyntaxError - unrecognized line or malformed token
    ├── OperandCountError - wrong number of operands for a mnemonic
    ├── ImmediateRangeError - immediate does not fit its bit field
    ├── LiteralError - malformed numeric or character literal
    ├── UndefinedSymbolError - reference to an undefined label
    ├── DuplicateSymbolError - label defined multiple times
    └── DirectiveError - error in an assembler directive

Design Philosophy
-----------------
The assembler is fail-fast: the first error aborts the run. Each exception
captures source location information (filename, line, column) when it is
known, so the single reported error points straight at the offending line.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class IridiumError(Exception):
    """
    Base exception for all Iridium SDK errors.

        try:
            assembler.assemble_file("program.asm")
        except IridiumError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(IridiumError):
    """
    Base exception for all assembler-related errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            boot.asm:4:14: error: undefined label 'lop'
                BEQ $r6, $r0, @lop
                              ^
            hint: did you mean 'loop'?
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        # Source context with caret pointer
        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class AssemblySyntaxError(AssemblerError):
    """
    Syntax error in assembly source code.

    Raised when a line cannot be tokenized, or when it matches none of the
    recognized instruction and directive forms.

    Examples:
        - Unknown mnemonic or directive
        - Unterminated string literal
        - Unknown register name
        - Label with nothing after it
    """
    pass


class OperandCountError(AssemblerError):
    """
    Wrong number of operands for a known mnemonic.

    Example:
        ADD $r0, $r1      ; Error: ADD expects 3 register operands
    """

    def __init__(
        self,
        mnemonic: str,
        expected: int,
        actual: int,
        kind: str = "register",
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.mnemonic = mnemonic
        self.expected = expected
        self.actual = actual

        plural = "" if expected == 1 else "s"
        super().__init__(
            f"'{mnemonic}' expects {expected} {kind} operand{plural}, got {actual}",
            location=location,
            source_line=source_line,
        )


class ImmediateRangeError(AssemblerError):
    """
    Immediate value does not fit its instruction field.

    The hint always names the valid range so the user can see whether the
    field is signed or unsigned.
    """

    def __init__(
        self,
        value: int,
        minimum: int,
        maximum: int,
        bits: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.value = value
        self.minimum = minimum
        self.maximum = maximum
        self.bits = bits

        super().__init__(
            f"immediate {value} does not fit in a {bits}-bit field",
            location=location,
            hint=f"valid range is {minimum} to {maximum}",
            source_line=source_line,
        )


class LiteralError(AssemblerError):
    """
    Malformed numeric or character literal.

    Examples:
        - 0xZZ (bad hexadecimal digits)
        - 0b102 (bad binary digits)
        - 'é' (character outside 7-bit ASCII)
        - 'ab' (more than one character)
    """
    pass


class UndefinedSymbolError(AssemblerError):
    """
    Reference to an undefined label.

    Raised during label substitution when an @name reference cannot be
    resolved. Similarly-named labels are suggested to help catch typos.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
        similar_symbols: Optional[list[str]] = None,
    ):
        self.symbol = symbol
        self.similar_symbols = similar_symbols or []

        if not hint and self.similar_symbols:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_symbols[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"undefined label '{symbol}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class DuplicateSymbolError(AssemblerError):
    """
    Label defined multiple times.

    Includes the location of the first definition in the hint.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.symbol = symbol
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{symbol}' was first defined at {original_location}"

        super().__init__(
            f"duplicate label '{symbol}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class DirectiveError(AssemblerError):
    """
    Error in assembler directive.

    Examples:
        - .space with more initial values than reserved words
        - .space value outside the 16-bit unsigned range
        - .syscall with a number other than 0-7
    """
    pass
