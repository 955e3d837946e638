"""
iasm - Iridium Assembler Command-Line Interface
===============================================

This module implements the command-line interface for the Iridium
assembler.

Usage Examples
--------------
Basic assembly:
    $ iasm bios.asm bios.bin

Generate all output files:
    $ iasm bios.asm bios.bin -l bios.lst -s bios.sym

Hex dump instead of binary:
    $ iasm --hex bios.asm bios.hex

Verbose mode:
    $ iasm -v bios.asm bios.bin
"""

from pathlib import Path
from typing import Optional
import logging

import click

from iridium_sdk import __version__
from iridium_sdk.assembler import Assembler
from iridium_sdk.cli.errors import handle_cli_exception


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.argument(
    "output_file",
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate listing file",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "-x", "--hex", "hex_output",
    is_flag=True,
    help="Write a hex text dump (one word per line) instead of a binary image",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="iasm")
def main(
    input_file: Path,
    output_file: Path,
    listing: Optional[Path],
    symbols: Optional[Path],
    hex_output: bool,
    verbose: bool,
) -> None:
    """
    Assemble Iridium source code into a 16-bit word image.

    INPUT_FILE is the assembly source file (.asm) to assemble.
    OUTPUT_FILE receives the image, two big-endian bytes per word.

    \b
    Examples:
        iasm bios.asm bios.bin              # Binary image
        iasm bios.asm bios.bin -l bios.lst  # With listing
        iasm -x bios.asm bios.hex           # Hex text dump
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(message)s")

    asm = Assembler(verbose=verbose)

    try:
        asm.assemble_file(input_file)

        if hex_output:
            size = asm.write_hex(output_file)
        else:
            size = asm.write_binary(output_file)

        if listing:
            asm.write_listing(listing)

        if symbols:
            asm.write_symbols(symbols)

        click.echo(f"Assembled {size} bytes to {output_file}")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose)


if __name__ == "__main__":
    main()
