"""
Output Rendering
================

Turns the results of both passes into the texts shown to the user:

- the intermediate file (pass 1 records)
- the symbol table dump
- the object program: the pass 2 listing with object code, followed by
  the Header, Text and End records
- the bare records, for writing an object file
- the diagnostics report
"""

from dataclasses import dataclass
from typing import Optional

from sicasm.errors import ErrorCollector
from sicasm.assembler.codegen import Pass2Result
from sicasm.assembler.ir import render_intermediate
from sicasm.assembler.pass1 import Pass1Result


@dataclass(frozen=True)
class RenderedOutput:
    """
    The texts produced by one run.

    Attributes:
        intermediate: Intermediate file (one line per record)
        symbols: ``LABEL<tab>ADDR`` lines
        object_program: Listing with object code followed by the records
        records: Header, Text and End records only
        diagnostics: Error/warning report ("" when there is nothing to report)
    """
    intermediate: str = ""
    symbols: str = ""
    object_program: str = ""
    records: str = ""
    diagnostics: str = ""


def render_listing(pass2: Pass2Result) -> str:
    """Render the pass 2 listing (records with their object code)."""
    return "".join(line.to_line() + "\n" for line in pass2.listing)


def render_diagnostics(errors: ErrorCollector) -> str:
    if not errors.errors and not errors.warnings:
        return ""
    return errors.report()


def render(
    pass1: Pass1Result,
    pass2: Optional[Pass2Result],
    errors: Optional[ErrorCollector] = None,
) -> RenderedOutput:
    """
    Render the outputs of a run.

    Args:
        pass1: Pass 1 result
        pass2: Pass 2 result, or None if pass 2 did not run
        errors: Diagnostics for the whole run (defaults to pass 1's)

    Returns:
        RenderedOutput holding every text
    """
    errors = errors if errors is not None else pass1.errors

    if pass2 is None:
        return RenderedOutput(
            intermediate=render_intermediate(pass1.records),
            symbols=pass1.symbols.dump(),
            diagnostics=render_diagnostics(errors),
        )

    records = pass2.program.to_text()
    return RenderedOutput(
        intermediate=render_intermediate(pass1.records),
        symbols=pass1.symbols.dump(),
        object_program=render_listing(pass2) + records,
        records=records,
        diagnostics=render_diagnostics(errors),
    )
