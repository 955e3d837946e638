"""
Iridium Assembly Language Parser
================================

This module classifies each source line into one of the recognized
instruction or directive forms and produces typed statement records that
the later stages work on. No stage after this one looks at source text.

Statement Types
---------------
1. **Instruction**: a real or pseudo machine instruction
   ```asm
   loop: BEQ $r6, $r0, $r1
   ADDI $r2, $r2, 1
   MOVI $r1, @end
   NOP
   ```

2. **Directive**: a data or system directive
   ```asm
   .fill 0x1E4
   array: .space 20 [100, 'a', 'b']
   text: .text "hello world!"
   .syscall 6
   ```

Recognized Forms
----------------
| Form              | Syntax                    | Mnemonics        |
|-------------------|---------------------------|------------------|
| THREE_REG         | reg, reg, reg             | ADD, NAND, BEQ   |
| TWO_REG_IMM       | reg, reg, imm             | ADDI, SW, LW     |
| ONE_REG_IMM       | reg, imm                  | LUI              |
| TWO_REG           | reg, reg                  | JAL              |
| NO_OPERAND_PSEUDO | (none)                    | NOP              |
| REG_IMM_PSEUDO    | reg, imm                  | LLI, MOVI        |
| FILL              | literal                   | .fill            |
| SPACE             | count [literal, ...]      | .space           |
| TEXT              | "string"                  | .text            |
| SYSCALL           | digit 0-7                 | .syscall         |

Any form may be preceded by a ``name:`` label. The mnemonic selects the
form; the operand list is then checked against the form's declared shape,
so a known mnemonic with the wrong operands is reported as an operand-count
error rather than as an unknown line.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Union
import logging

from iridium_sdk.errors import (
    AssemblySyntaxError,
    DirectiveError,
    OperandCountError,
    SourceLocation,
)
from iridium_sdk.assembler.lexer import Lexer, Token, TokenType, normalize_line
from iridium_sdk.assembler.literals import (
    Immediate,
    char_value,
    parse_immediate,
    parse_literal,
    text_values,
)
from iridium_sdk.cpu import (
    ADDRESS_SPACE_WORDS,
    DIRECTIVES,
    IMMEDIATE_FIELDS,
    SYSCALL_MAX,
    OperandShape,
    get_instruction_info,
    get_register_index,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Instruction Forms
# =============================================================================

class InstructionForm(Enum):
    """The closed set of line forms the assembler recognizes."""
    THREE_REG = auto()
    TWO_REG_IMM = auto()
    ONE_REG_IMM = auto()
    TWO_REG = auto()
    NO_OPERAND_PSEUDO = auto()
    REG_IMM_PSEUDO = auto()
    FILL = auto()
    SPACE = auto()
    TEXT = auto()
    SYSCALL = auto()

    @property
    def is_pseudo(self) -> bool:
        """True for forms that must be expanded before encoding."""
        return self in _PSEUDO_FORMS


_PSEUDO_FORMS = frozenset({
    InstructionForm.NO_OPERAND_PSEUDO,
    InstructionForm.REG_IMM_PSEUDO,
    InstructionForm.SPACE,
    InstructionForm.TEXT,
})

# Operand shape of a real instruction -> the form it encodes as
REAL_FORMS = {
    OperandShape.THREE_REG: InstructionForm.THREE_REG,
    OperandShape.TWO_REG_IMM: InstructionForm.TWO_REG_IMM,
    OperandShape.ONE_REG_IMM: InstructionForm.ONE_REG_IMM,
    OperandShape.TWO_REG: InstructionForm.TWO_REG,
}

_PSEUDO_FORMS_BY_SHAPE = {
    OperandShape.NO_OPERAND: InstructionForm.NO_OPERAND_PSEUDO,
    OperandShape.ONE_REG_IMM: InstructionForm.REG_IMM_PSEUDO,
}

_DIRECTIVE_FORMS = {name: InstructionForm[name.lstrip(".")] for name in DIRECTIVES}

_OPERAND_TOKENS = (
    TokenType.REGISTER,
    TokenType.NUMBER,
    TokenType.CHAR,
    TokenType.LABEL_REF,
)


# =============================================================================
# Statement Data Classes
# =============================================================================

@dataclass
class Statement:
    """
    Base class for all parsed statements.

    Every statement has a source location for error reporting. Each
    statement occupies exactly one word once expansion is complete.
    """
    location: SourceLocation


@dataclass
class Instruction(Statement):
    """
    Machine instruction statement.

    Attributes:
        mnemonic: Upper-case mnemonic
        form: The recognized form
        registers: Register indices in operand order
        immediate: Integer, unresolved LabelRef, or None
        label: Label defined on this line, if any
        source_line: Source text of the originating line
    """
    mnemonic: str
    form: InstructionForm
    registers: tuple[int, ...] = ()
    immediate: Optional[Immediate] = None
    label: Optional[str] = None
    source_line: str = ""


@dataclass
class Directive(Statement):
    """
    Assembler directive statement.

    Attributes:
        name: Directive name, upper-case with leading dot (".FILL")
        form: The recognized form
        arguments: FILL: [value]; SPACE: [count, *values]; TEXT: [text];
                   SYSCALL: [number]
        label: Label defined on this line, if any
        source_line: Source text of the originating line
    """
    name: str
    form: InstructionForm
    arguments: list[Union[Immediate, str]] = field(default_factory=list)
    label: Optional[str] = None
    source_line: str = ""


# =============================================================================
# Parser Implementation
# =============================================================================

class Parser:
    """
    Classifies Iridium assembly tokens into statements.

    Usage:
        lexer = Lexer(source, filename)
        tokens = list(lexer.tokenize())
        parser = Parser(tokens, filename, source.splitlines())
        statements = parser.parse()
    """

    def __init__(
        self,
        tokens: list[Token],
        filename: str = "<input>",
        source_lines: Optional[list[str]] = None,
    ):
        """
        Initialize the parser.

        Args:
            tokens: List of tokens from lexer
            filename: Source filename for error reporting
            source_lines: Raw source lines, used for error context
        """
        self._tokens = tokens
        self._filename = filename
        self._source_lines = source_lines or []
        self._pos = 0

    def parse(self) -> list[Statement]:
        """
        Parse all tokens into statements.

        Raises:
            AssemblySyntaxError: If a line matches no recognized form
            OperandCountError: If a mnemonic has the wrong operand count
            LiteralError, ImmediateRangeError, DirectiveError: On bad operands
        """
        statements: list[Statement] = []

        while not self._at_end():
            if self._match(TokenType.NEWLINE):
                continue
            statements.append(self._parse_line())

        logger.debug(f"Parsed {len(statements)} statements from {self._filename}")
        return statements

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self._tokens) or self._current().type == TokenType.EOF

    def _current(self) -> Token:
        if self._pos >= len(self._tokens):
            last = self._tokens[-1] if self._tokens else None
            return Token(
                TokenType.EOF, None,
                last.line if last else 1,
                last.column if last else 1,
                last.filename if last else self._filename,
            )
        return self._tokens[self._pos]

    def _peek(self, offset: int = 0) -> Token:
        pos = self._pos + offset
        if pos >= len(self._tokens):
            return self._current()
        return self._tokens[pos]

    def _advance(self) -> Token:
        token = self._current()
        self._pos += 1
        return token

    def _check(self, *types: TokenType) -> bool:
        return self._current().type in types

    def _match(self, *types: TokenType) -> Optional[Token]:
        if self._check(*types):
            return self._advance()
        return None

    def _at_line_end(self) -> bool:
        return self._check(TokenType.NEWLINE, TokenType.EOF)

    # =========================================================================
    # Error Helpers
    # =========================================================================

    def _raw_line(self, token: Token) -> str:
        index = token.line - 1
        if 0 <= index < len(self._source_lines):
            return self._source_lines[index]
        return ""

    def _unrecognized(self, token: Token, hint: Optional[str] = None) -> AssemblySyntaxError:
        """Error for a line that matches none of the recognized forms."""
        raw = self._raw_line(token)
        return AssemblySyntaxError(
            f"unrecognized instruction '{normalize_line(raw)}'",
            token.location,
            hint=hint,
            source_line=raw,
        )

    # =========================================================================
    # Line Parsing
    # =========================================================================

    def _parse_line(self) -> Statement:
        """Parse one line: optional label, then an instruction or directive."""
        first = self._current()
        label = self._try_parse_label()

        if self._check(TokenType.IDENTIFIER):
            statement = self._parse_instruction(label)
        elif self._check(TokenType.DIRECTIVE):
            statement = self._parse_directive(label)
        elif label is not None and self._at_line_end():
            raise self._unrecognized(
                first, hint="a label must be followed by an instruction on the same line"
            )
        else:
            raise self._unrecognized(self._current())

        if not self._at_line_end():
            raise self._unrecognized(
                self._current(), hint=f"unexpected '{self._current().value}'"
            )
        self._match(TokenType.NEWLINE)
        return statement

    def _try_parse_label(self) -> Optional[str]:
        """Consume a ``name:`` prefix if present."""
        if self._check(TokenType.IDENTIFIER) and self._peek(1).type == TokenType.COLON:
            name = self._advance().value
            self._advance()  # consume colon
            return name
        return None

    def _collect_operands(self) -> list[Token]:
        """Collect a comma-separated operand list up to end of line."""
        operands: list[Token] = []
        if self._at_line_end():
            return operands

        while True:
            token = self._current()
            if token.type not in _OPERAND_TOKENS:
                raise self._unrecognized(token, hint=f"expected operand, found '{token.value}'")
            operands.append(self._advance())
            if self._match(TokenType.COMMA):
                continue
            if not self._at_line_end():
                raise self._unrecognized(
                    self._current(), hint="operands must be separated by commas"
                )
            return operands

    def _register(self, token: Token) -> int:
        index = get_register_index(token.value)
        if index is None:
            raise AssemblySyntaxError(
                f"unknown register '{token.value}'",
                token.location,
                hint="registers are $zero and $r0 to $r6",
                source_line=self._raw_line(token),
            )
        return index

    # =========================================================================
    # Instruction Parsing
    # =========================================================================

    def _parse_instruction(self, label: Optional[str]) -> Instruction:
        mnemonic_token = self._advance()
        info = get_instruction_info(mnemonic_token.value)
        if info is None:
            raise self._unrecognized(
                mnemonic_token, hint=f"unknown mnemonic '{mnemonic_token.value}'"
            )

        mnemonic = info.mnemonic
        shape = info.shape
        raw = self._raw_line(mnemonic_token)
        operands = self._collect_operands()

        register_tokens = [t for t in operands if t.type == TokenType.REGISTER]
        immediate_tokens = [t for t in operands if t.type != TokenType.REGISTER]

        if len(register_tokens) != shape.register_count:
            raise OperandCountError(
                mnemonic, shape.register_count, len(register_tokens),
                location=mnemonic_token.location, source_line=raw,
            )
        expected_immediates = 1 if shape.has_immediate else 0
        if len(immediate_tokens) != expected_immediates:
            raise OperandCountError(
                mnemonic, expected_immediates, len(immediate_tokens), kind="immediate",
                location=mnemonic_token.location, source_line=raw,
            )
        if any(t.type != TokenType.REGISTER for t in operands[:shape.register_count]):
            raise self._unrecognized(
                mnemonic_token, hint=f"'{mnemonic}' takes its registers before the immediate"
            )

        registers = tuple(self._register(t) for t in register_tokens)
        immediate = None
        if immediate_tokens:
            immediate = parse_immediate(immediate_tokens[0], IMMEDIATE_FIELDS[mnemonic], raw)

        if info.pseudo:
            form = _PSEUDO_FORMS_BY_SHAPE[shape]
        else:
            form = REAL_FORMS[shape]

        return Instruction(
            location=mnemonic_token.location,
            mnemonic=mnemonic,
            form=form,
            registers=registers,
            immediate=immediate,
            label=label,
            source_line=raw.rstrip(),
        )

    # =========================================================================
    # Directive Parsing
    # =========================================================================

    def _parse_directive(self, label: Optional[str]) -> Directive:
        name_token = self._advance()
        name = name_token.value.upper()
        form = _DIRECTIVE_FORMS.get(name)
        if form is None:
            raise self._unrecognized(name_token, hint=f"unknown directive '{name_token.value}'")

        raw = self._raw_line(name_token)
        if form == InstructionForm.FILL:
            arguments = self._parse_fill(name_token, raw)
        elif form == InstructionForm.SPACE:
            arguments = self._parse_space(name_token, raw)
        elif form == InstructionForm.TEXT:
            arguments = self._parse_text(name_token, raw)
        else:
            arguments = self._parse_syscall(name_token, raw)

        return Directive(
            location=name_token.location,
            name=name,
            form=form,
            arguments=arguments,
            label=label,
            source_line=raw.rstrip(),
        )

    def _parse_fill(self, name_token: Token, raw: str) -> list[Immediate]:
        operands = self._collect_operands()
        if len(operands) != 1 or operands[0].type == TokenType.REGISTER:
            raise DirectiveError(
                ".fill expects exactly one literal value",
                name_token.location,
                source_line=raw,
            )
        return [parse_immediate(operands[0], IMMEDIATE_FIELDS[".FILL"], raw)]

    def _parse_space(self, name_token: Token, raw: str) -> list[int]:
        count_token = self._match(TokenType.NUMBER)
        if count_token is None:
            raise DirectiveError(
                ".space expects a word count", name_token.location, source_line=raw
            )
        count = parse_literal(count_token.value, count_token.location, raw)
        if not 1 <= count <= ADDRESS_SPACE_WORDS:
            raise DirectiveError(
                f".space count must be between 1 and {ADDRESS_SPACE_WORDS}, got {count}",
                count_token.location,
                source_line=raw,
            )

        values: list[int] = []
        if self._match(TokenType.LBRACKET):
            values = self._parse_space_values(raw)
        return [count, *values]

    def _parse_space_values(self, raw: str) -> list[int]:
        field_spec = IMMEDIATE_FIELDS[".SPACE"]
        values: list[int] = []
        if self._match(TokenType.RBRACKET):
            return values

        while True:
            token = self._current()
            if token.type == TokenType.NUMBER:
                value = parse_literal(token.value, token.location, raw)
            elif token.type == TokenType.CHAR:
                value = char_value(token.value, token.location, raw)
            else:
                raise self._unrecognized(token, hint="expected a literal in the .space list")
            if not field_spec.contains(value):
                raise DirectiveError(
                    f".space value {value} is outside the 16-bit unsigned range",
                    token.location,
                    source_line=raw,
                )
            values.append(value)
            self._advance()

            if self._match(TokenType.RBRACKET):
                return values
            if not self._match(TokenType.COMMA):
                raise self._unrecognized(
                    self._current(), hint="expected ',' or ']' in the .space list"
                )

    def _parse_text(self, name_token: Token, raw: str) -> list[str]:
        token = self._match(TokenType.STRING)
        if token is None:
            raise DirectiveError(
                '.text expects a double-quoted string', name_token.location, source_line=raw
            )
        text_values(token.value, token.location, raw)
        return [token.value]

    def _parse_syscall(self, name_token: Token, raw: str) -> list[int]:
        token = self._match(TokenType.NUMBER)
        if (
            token is None
            or len(token.value) != 1
            or not token.value.isdigit()
            or int(token.value) > SYSCALL_MAX
        ):
            raise DirectiveError(
                f".syscall expects a single digit 0-{SYSCALL_MAX}",
                (token or name_token).location,
                source_line=raw,
            )
        return [int(token.value)]


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_source(source: str, filename: str = "<input>") -> list[Statement]:
    """
    Tokenize and classify a complete source text.

    Args:
        source: Assembly source text
        filename: Source filename for error messages

    Returns:
        List of parsed statements, one per non-blank line
    """
    lexer = Lexer(source, filename)
    tokens = list(lexer.tokenize())
    parser = Parser(tokens, filename, source.splitlines())
    return parser.parse()


def parse_lines(lines: list[str], filename: str = "<input>") -> list[Statement]:
    """Classify an ordered sequence of source lines."""
    return parse_source("\n".join(lines), filename)
