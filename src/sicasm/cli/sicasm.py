"""
sicasm - Two-Pass Assembler Command-Line Interface
==================================================

This module implements the command-line interface for the two-pass
assembler. It reads a source file and an opcode table, prints the
intermediate file, the symbol table and the machine code, and can write
each of them to a file.

Usage Examples
--------------
Basic assembly:
    $ sicasm copy.asm --optab optab.txt

With object file:
    $ sicasm copy.asm -t optab.txt -o copy.obj

Write every output:
    $ sicasm copy.asm -t optab.txt -o copy.obj -l copy.lst -s copy.sym -i copy.int

Treat unresolved symbols and duplicate labels as errors:
    $ sicasm --strict copy.asm -t optab.txt
"""

from pathlib import Path
from typing import Optional
import logging
import sys

import click

from sicasm import __version__
from sicasm.assembler import Assembler, AssemblyResult
from sicasm.cli.errors import ExitCode, handle_cli_exception
from sicasm.config import AssemblerConfig
from sicasm.errors import UnreadableInputError


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


def _write(path: Path, text: str, what: str, verbose: bool) -> None:
    path.write_text(text, encoding="utf-8")
    if verbose:
        click.echo(f"Wrote {what} to {path}")


def _exit_code(result: AssemblyResult) -> ExitCode:
    if result.succeeded:
        return ExitCode.SUCCESS
    if any(isinstance(e, UnreadableInputError) for e in result.errors.errors):
        return ExitCode.INVALID_ARGS
    return ExitCode.BUILD_ERROR


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
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Opcode table file (one 'MNEMONIC CODE' pair per line)",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the Header/Text/End records to this file",
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the listing with object code followed by the records",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the symbol table",
)
@click.option(
    "-i", "--intermediate",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the intermediate file produced by pass 1",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Report unresolved symbols and duplicate labels as errors",
)
@click.option(
    "-n", "--program-name",
    default=None,
    help="Program name written to the Header record (default: PROG)",
)
@click.option(
    "--name-from-label",
    is_flag=True,
    help="Name the program after the label on START when it has one",
)
@click.option(
    "-q", "--quiet",
    is_flag=True,
    help="Do not print the outputs to stdout",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="sicasm")
def main(
    input_file: Path,
    optab: Path,
    output: Optional[Path],
    listing: Optional[Path],
    symbols: Optional[Path],
    intermediate: Optional[Path],
    strict: bool,
    program_name: Optional[str],
    name_from_label: bool,
    quiet: bool,
    verbose: bool,
) -> None:
    """
    Assemble a program with a two-pass assembler.

    INPUT_FILE is the assembly source file. The opcode table given with
    --optab lists the instruction mnemonics and their one-byte codes.

    \b
    Examples:
        sicasm copy.asm -t optab.txt              # Print all outputs
        sicasm copy.asm -t optab.txt -o copy.obj  # Also write records
        sicasm -q copy.asm -t optab.txt -s s.txt  # Symbol table only

    Settings can also come from SICASM_PROGRAM_NAME,
    SICASM_NAME_FROM_START_LABEL, SICASM_TEXT_RECORD_CAPACITY,
    SICASM_STRICT and SICASM_MAX_ERRORS.
    """
    _setup_logging(verbose)

    try:
        config = AssemblerConfig.from_env().with_overrides(
            strict=True if strict else None,
            default_program_name=program_name,
            name_from_start_label=True if name_from_label else None,
        )

        if verbose:
            click.echo(f"Assembling {input_file} with {optab}...")

        result = Assembler(config).assemble_file(input_file, optab)
        rendered = result.output

        if result.pass1 is not None:
            if not quiet:
                click.echo("Intermediate File:")
                click.echo(rendered.intermediate, nl=False)
                click.echo("SYMTAB:")
                click.echo(rendered.symbols, nl=False)
            if intermediate:
                _write(intermediate, rendered.intermediate, "intermediate file", verbose)
            if symbols:
                _write(symbols, rendered.symbols, "symbol table", verbose)

        if result.pass2 is not None:
            if not quiet:
                click.echo("Machine Code:")
                click.echo(rendered.object_program, nl=False)
            if listing:
                _write(listing, rendered.object_program, "listing", verbose)

        if rendered.diagnostics:
            click.echo(rendered.diagnostics, err=True)

        code = _exit_code(result)
        if code != ExitCode.SUCCESS:
            sys.exit(code)

        if output:
            _write(output, rendered.records, "object program", verbose)

        if verbose:
            program = result.program
            click.echo(
                f"Assembly complete: {program.code_bytes()} bytes of object code "
                f"at {program.header.start_address:04X}"
            )
            click.echo(f"Defined {len(result.symbols)} symbols")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
