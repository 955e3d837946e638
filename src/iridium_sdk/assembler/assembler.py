"""
Iridium Assembler - Main Interface
==================================

This module provides the main Assembler class, which is the primary interface
for assembling Iridium source code. It coordinates the parser, expander,
label resolver and code generator to produce a binary image of 16-bit words.

Example Usage
-------------
>>> from iridium_sdk.assembler import Assembler
>>>
>>> asm = Assembler()
>>> words = asm.assemble_lines([
...     "start: ADDI $r0, $zero, 5",
...     "ADD $r0, $r0, $r0",
... ])
>>> [f"{w:04X}" for w in words]
['2405', '0490']
>>> asm.get_symbols()
{'start': 0}
>>>
>>> asm.write_binary("program.bin")
4

Command-Line Usage
------------------
The assembler can also be invoked from the command line:

    $ iasm program.asm program.bin -l program.lst -s program.sym

Options:
    -l, --listing FILE     Generate listing file
    -s, --symbols FILE     Generate symbol file
    -x, --hex              Write a hex text dump instead of binary
    -v, --verbose          Verbose output
"""

from pathlib import Path
from typing import Optional

from iridium_sdk.assembler.parser import Statement, parse_lines, parse_source
from iridium_sdk.assembler.expander import ExpansionStats, PseudoExpander
from iridium_sdk.assembler.resolver import LabelResolver
from iridium_sdk.assembler.codegen import (
    CodeGenerator,
    format_symbols,
    words_to_bytes,
    words_to_hex,
)


class Assembler:
    """
    Main Iridium assembler class.

    The pipeline is fail-fast: the first error raised by any stage aborts
    the run and leaves the previous results untouched.

    Attributes:
        verbose: If True, print progress messages
    """

    def __init__(self, verbose: bool = False):
        """
        Initialize the assembler.

        Args:
            verbose: Print progress messages to stdout
        """
        self._verbose = verbose
        self._expander = PseudoExpander()
        self._resolver = LabelResolver()
        self._codegen = CodeGenerator()
        self._words: list[int] = []
        self._symbols: dict[str, int] = {}
        self._source_file: Optional[Path] = None

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble_lines(self, lines: list[str], filename: str = "<input>") -> list[int]:
        """
        Assemble an ordered sequence of source lines.

        Args:
            lines: Source lines, without trailing newlines
            filename: Virtual filename for error messages

        Returns:
            The assembled words; word i belongs at address i

        Raises:
            AssemblerError: If assembly fails
        """
        return self._run(parse_lines(lines, filename))

    def assemble_string(self, source: str, filename: str = "<input>") -> bytes:
        """
        Assemble source code from a string.

        The assembly pipeline is:
        1. Parse source into statements (lexer -> parser)
        2. Expand pseudo-instructions and data directives
        3. Build the label table and substitute label references
        4. Encode every statement into one word

        Args:
            source: Assembly source code
            filename: Virtual filename for error messages

        Returns:
            The image as big-endian bytes

        Raises:
            AssemblerError: If assembly fails
        """
        self._run(parse_source(source, filename))
        return self.get_code()

    def assemble_file(self, filepath: str | Path) -> bytes:
        """
        Assemble source code from a file.

        Args:
            filepath: Path to assembly source file

        Returns:
            The image as big-endian bytes

        Raises:
            AssemblerError: If assembly fails
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)
        self._source_file = filepath

        if self._verbose:
            print(f"Assembling {filepath}...")

        source = filepath.read_text()
        return self.assemble_string(source, str(filepath))

    def _run(self, statements: list[Statement]) -> list[int]:
        if self._verbose:
            print(f"Parsed {len(statements)} statements")

        expanded = self._expander.expand(statements)
        if self._verbose and self._expander.stats.total_expansions > 0:
            print(self._expander.stats)

        symbols = self._resolver.build_table(expanded)
        resolved = self._resolver.resolve(expanded)
        words = self._codegen.generate(resolved)

        # Only publish results once every stage has succeeded
        self._symbols = symbols
        self._words = words

        if self._verbose:
            print(f"Defined {len(symbols)} labels")
            print(f"Generated {len(words)} words")

        return list(words)

    # =========================================================================
    # Output Methods
    # =========================================================================

    def get_words(self) -> list[int]:
        """Get the assembled words of the last successful run."""
        return list(self._words)

    def get_code(self) -> bytes:
        """
        Get the generated image.

        Returns:
            Words serialized big-endian, two bytes per word
        """
        return words_to_bytes(self._words)

    def get_symbols(self) -> dict[str, int]:
        """
        Get the label table.

        Returns:
            Dictionary mapping label names to word addresses
        """
        return dict(self._symbols)

    def get_listing(self) -> str:
        """
        Get the assembly listing as a string.

        Returns:
            Assembly listing with addresses, words, and source
        """
        return self._codegen.get_listing(self._symbols)

    def get_expansion_stats(self) -> ExpansionStats:
        """Get statistics from the last expansion pass."""
        return self._expander.stats

    def write_binary(self, filepath: str | Path) -> int:
        """
        Write the big-endian image.

        Args:
            filepath: Output file path

        Returns:
            Number of bytes written
        """
        code = self.get_code()
        Path(filepath).write_bytes(code)

        if self._verbose:
            print(f"Wrote {len(code)} bytes to {filepath}")

        return len(code)

    def write_hex(self, filepath: str | Path) -> int:
        """
        Write a hex text dump, one ``XXXX`` word per line.

        Returns:
            Number of image bytes the dump represents
        """
        Path(filepath).write_text(words_to_hex(self._words))

        if self._verbose:
            print(f"Wrote {len(self._words)} words to {filepath}")

        return len(self._words) * 2

    def write_listing(self, filepath: str | Path) -> None:
        """
        Write assembly listing file.

        The listing file shows:
        - Addresses
        - Generated words
        - Source lines
        - Label table

        Args:
            filepath: Output file path
        """
        self._codegen.write_listing(filepath, self._symbols)

        if self._verbose:
            print(f"Wrote listing to {filepath}")

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write symbol table file.

        Format: name address (one per line)
        """
        with open(filepath, "w") as f:
            f.write("# Symbol table\n")
            f.write("# Generated by iasm\n")
            for line in format_symbols(self._symbols):
                f.write(f"{line}\n")

        if self._verbose:
            print(f"Wrote symbols to {filepath}")


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, filename: str = "<input>") -> bytes:
    """
    Convenience function to assemble source code.

    Args:
        source: Assembly source code
        filename: Virtual filename for errors

    Returns:
        The image as big-endian bytes

    Raises:
        AssemblerError: If assembly fails
    """
    asm = Assembler()
    return asm.assemble_string(source, filename)


def assemble_file(filepath: str | Path) -> bytes:
    """
    Convenience function to assemble a file.

    Args:
        filepath: Path to source file

    Returns:
        The image as big-endian bytes

    Raises:
        AssemblerError: If assembly fails
    """
    asm = Assembler()
    return asm.assemble_file(filepath)
