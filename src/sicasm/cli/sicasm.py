"""
sicasm - SIC Assembler Command-Line Interface
=============================================

Usage Examples
--------------
Basic assembly (standard SIC opcodes, writes copy.obj):
    $ sicasm copy.asm

With an opcode table file:
    $ sicasm copy.asm -t optab.txt

Generate all output files:
    $ sicasm copy.asm -t optab.txt -o copy.obj -l copy.lst -s copy.sym

Show listing, symbol table and object code on the terminal:
    $ sicasm --print copy.asm

Fail on undefined symbols and duplicate labels:
    $ sicasm --strict --no-duplicates copy.asm
"""

from pathlib import Path
from typing import Optional
import logging

import click

from sicasm import __version__
from sicasm.assembler import Assembler, AssemblyResult
from sicasm.cli.errors import handle_cli_exception
from sicasm.config import AssemblerConfig, DuplicatePolicy, SymbolPolicy


logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )


def echo_result(result: AssemblyResult) -> None:
    """Print the three artifacts, one titled section each."""
    sections = [
        ("Intermediate Code", result.listing()),
        ("Symbol Table", result.symbol_table()),
        ("Object Code", result.object_code()),
    ]
    for title, lines in sections:
        click.echo(title)
        click.echo("-" * len(title))
        for line in lines:
            click.echo(line)
        click.echo()


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-t", "--optab",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Opcode table file, one 'MNEMONIC CODE' per line "
         "(default: built-in SIC instruction set)",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output object file (default: input.obj)",
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write intermediate listing file",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write symbol table file",
)
@click.option(
    "--strict/--lenient",
    default=None,
    help="Fail on undefined operand symbols instead of assembling them as "
         "address 0000. Default: lenient, or SICASM_STRICT_SYMBOLS.",
)
@click.option(
    "--no-duplicates",
    is_flag=True,
    help="Fail when a label is defined twice instead of keeping the last address",
)
@click.option(
    "-p", "--print", "print_result",
    is_flag=True,
    help="Print listing, symbol table and object code",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="sicasm")
def main(
    input_file: Path,
    optab: Optional[Path],
    output: Optional[Path],
    listing: Optional[Path],
    symbols: Optional[Path],
    strict: Optional[bool],
    no_duplicates: bool,
    print_result: bool,
    verbose: bool,
) -> None:
    """
    Assemble a SIC source program.

    INPUT_FILE is the assembly source, one 'LABEL MNEMONIC OPERAND' line
    per statement ('-' for no label).

    \b
    Examples:
        sicasm copy.asm                # Outputs copy.obj
        sicasm copy.asm -t optab.txt   # Use an opcode table file
        sicasm copy.asm -l copy.lst    # Also write the listing
    """
    setup_logging(verbose)

    config = AssemblerConfig.from_env()
    if strict is not None:
        config.undefined_symbols = SymbolPolicy.STRICT if strict else SymbolPolicy.LENIENT
    if no_duplicates:
        config.duplicate_labels = DuplicatePolicy.ERROR

    output_file = output if output is not None else input_file.with_suffix(".obj")

    try:
        if verbose:
            click.echo(f"Assembling {input_file}...")

        asm = Assembler(config)
        result = asm.assemble_file(input_file, optab)

        result.write_object(output_file)
        if listing:
            result.write_listing(listing)
        if symbols:
            result.write_symbols(symbols)

        if print_result:
            echo_result(result)

        if verbose:
            program = result.program
            click.echo(
                f"Assembly complete: {program.length} bytes at {program.start:04X}, "
                f"{len(result.symbols)} symbols"
            )
            click.echo(f"Wrote {output_file}")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
