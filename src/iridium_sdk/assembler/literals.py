"""
Literal Decoding and Immediate Range Checking
=============================================

This module turns literal operand tokens into integers and checks them
against the width and signedness of the field they will be encoded into.

Literal Formats
---------------
| Format      | Prefix | Example  | Value |
|-------------|--------|----------|-------|
| Decimal     | (none) | -10      | -10   |
| Hexadecimal | 0x     | 0x1E4    | 484   |
| Binary      | 0b     | 0b0111   | 7     |
| Character   | '      | 'a'      | 97    |
| Label       | @      | @loop    | (resolved later) |

Range Policy
------------
For an unsigned field of ``b`` bits the valid range is ``[0, 2^b - 1]``.
For a signed field it is ``[-2^(b-1), 2^(b-1) - 1]``. Fields flagged as
``twos_complement`` (the .fill word) accept both, so ``.fill -10`` and
``.fill 0xFFF6`` produce the same word.

Example
-------
>>> from iridium_sdk.assembler.literals import parse_literal, check_range
>>> from iridium_sdk.cpu import IMMEDIATE_FIELDS
>>> parse_literal("0x1E4")
484
>>> check_range(-64, IMMEDIATE_FIELDS["ADDI"])
-64
"""

from dataclasses import dataclass
from typing import Optional, Union

from iridium_sdk.errors import (
    AssemblySyntaxError,
    ImmediateRangeError,
    LiteralError,
    SourceLocation,
)
from iridium_sdk.assembler.lexer import Token, TokenType
from iridium_sdk.cpu import FieldSpec


ASCII_LIMIT = 0x80

_PREFIXES = {
    "0x": (16, "hexadecimal"),
    "0b": (2, "binary"),
}


@dataclass(frozen=True)
class LabelRef:
    """
    An unresolved ``@name`` operand.

    Carried through expansion untouched and replaced with an address by the
    label resolver.
    """
    name: str
    location: Optional[SourceLocation] = None

    def __str__(self) -> str:
        return f"@{self.name}"


Immediate = Union[int, LabelRef]


def parse_literal(
    text: str,
    location: Optional[SourceLocation] = None,
    source_line: Optional[str] = None,
) -> int:
    """
    Decode a numeric literal: decimal, 0x hexadecimal or 0b binary.

    A leading sign is accepted for every base.

    Raises:
        LiteralError: If the text is not a well-formed literal
    """
    body = text
    sign = 1
    if body[:1] in ("+", "-"):
        sign = -1 if body[0] == "-" else 1
        body = body[1:]

    base, kind = 10, "decimal"
    prefix = body[:2].lower()
    if prefix in _PREFIXES:
        base, kind = _PREFIXES[prefix]
        body = body[2:]

    # int() would also accept underscores and whitespace, which are not
    # part of the literal grammar
    if not body or not body.isalnum():
        raise LiteralError(f"invalid {kind} literal '{text}'", location, source_line=source_line)

    try:
        return sign * int(body, base)
    except ValueError:
        raise LiteralError(
            f"invalid {kind} literal '{text}'", location, source_line=source_line
        ) from None


def char_value(
    text: str,
    location: Optional[SourceLocation] = None,
    source_line: Optional[str] = None,
) -> int:
    """
    Return the ordinal of a one-character literal.

    Raises:
        LiteralError: If the literal is empty, longer than one character,
                      or outside 7-bit ASCII
    """
    if len(text) != 1:
        raise LiteralError(
            f"character literal must hold exactly one character, got {text!r}",
            location,
            source_line=source_line,
        )
    value = ord(text)
    if value >= ASCII_LIMIT:
        raise LiteralError(
            f"character {text!r} is not 7-bit ASCII",
            location,
            source_line=source_line,
        )
    return value


def text_values(
    text: str,
    location: Optional[SourceLocation] = None,
    source_line: Optional[str] = None,
) -> list[int]:
    """Return the ASCII ordinals of every character of a string literal."""
    values = []
    for char in text:
        if ord(char) >= ASCII_LIMIT:
            raise LiteralError(
                f"character {char!r} in string is not 7-bit ASCII",
                location,
                source_line=source_line,
            )
        values.append(ord(char))
    return values


def check_range(
    value: int,
    field: FieldSpec,
    location: Optional[SourceLocation] = None,
    source_line: Optional[str] = None,
) -> int:
    """
    Check that a value fits a field, returning it unchanged.

    Raises:
        ImmediateRangeError: If the value is outside the field's range
    """
    if not field.contains(value):
        raise ImmediateRangeError(
            value,
            field.minimum,
            field.maximum,
            field.bits,
            location=location,
            source_line=source_line,
        )
    return value


def parse_immediate(
    token: Token,
    field: FieldSpec,
    source_line: Optional[str] = None,
) -> Immediate:
    """
    Decode an immediate operand token and validate it against a field.

    Args:
        token: A NUMBER, CHAR or LABEL_REF token
        field: Width, signedness and accepted literal kinds of the field
        source_line: Source text for error context

    Returns:
        The integer value, or a LabelRef if the token is a label reference
        and the field permits one

    Raises:
        AssemblySyntaxError: If the token kind is not accepted by the field
        LiteralError: If the literal is malformed
        ImmediateRangeError: If the value does not fit the field
    """
    location = token.location

    if token.type == TokenType.LABEL_REF:
        if not field.allow_label:
            raise AssemblySyntaxError(
                f"label reference '@{token.value}' is not allowed here",
                location,
                source_line=source_line,
            )
        return LabelRef(token.value, location)

    if token.type == TokenType.CHAR:
        if not field.allow_char:
            raise AssemblySyntaxError(
                "character literal is not allowed here", location, source_line=source_line
            )
        value = char_value(token.value, location, source_line)
    elif token.type == TokenType.NUMBER:
        value = parse_literal(token.value, location, source_line)
    else:
        raise AssemblySyntaxError(
            f"expected immediate value, found {_describe(token)}",
            location,
            source_line=source_line,
        )

    return check_range(value, field, location, source_line)


def _describe(token: Token) -> str:
    if token.type in (TokenType.NEWLINE, TokenType.EOF):
        return "end of line"
    return f"'{token.value}'"
