"""
Two-Pass Assembler - Main Interface
===================================

This module provides the Assembler class, the entry point for assembling
a program. It runs the stages of one assembly in order:

    OPTAB load -> pass 1 -> pass 2 -> render

and returns everything in an ``AssemblyResult``. The Assembler itself
keeps only its configuration, so one instance can be used for any number
of runs (or from several threads) without sharing tables between them.

Example Usage
-------------
>>> from sicasm.assembler import Assembler
>>> asm = Assembler()
>>> result = asm.assemble_string('''
...         START   2000
...         LDA     FIVE
...         STA     ALPHA
... ALPHA   RESW    1
... FIVE    WORD    5
...         END
... ''', "LDA 00\\nSTA 0C\\n")
>>> result.symbols
{'ALPHA': 8198, 'FIVE': 8201}
>>> print(result.output.records, end="")
H^PROG  ^002000^00000C
T^002000^09^002009^0C2006^000005
E^002000
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional
import logging

from sicasm.config import AssemblerConfig
from sicasm.errors import AssemblerError, ErrorCollector, TooManyErrors, UnreadableInputError
from sicasm.assembler.codegen import Pass2Result, run_pass2
from sicasm.assembler.emitter import RenderedOutput, render
from sicasm.assembler.optab import OpcodeTable, load_optab, parse_optab
from sicasm.assembler.parser import parse_source, read_source
from sicasm.assembler.pass1 import Pass1Result, run_pass1
from sicasm.assembler.records import ObjectProgram

logger = logging.getLogger(__name__)


# =============================================================================
# Run State and Result
# =============================================================================

class RunState(Enum):
    """How far an assembly run got. Runs only ever move forward."""
    IDLE = "idle"
    OPTAB_LOADED = "optab loaded"
    PASS1_COMPLETE = "pass 1 complete"
    PASS2_COMPLETE = "pass 2 complete"
    RENDERED = "rendered"


@dataclass
class AssemblyResult:
    """
    Outcome of one assembly run.

    Attributes:
        output: Rendered texts (empty strings for stages that did not run)
        errors: All diagnostics of the run
        state: Last stage that completed
        optab: Opcode table used
        pass1: Pass 1 result, if pass 1 ran
        pass2: Pass 2 result, if pass 2 ran
    """
    output: RenderedOutput = field(default_factory=RenderedOutput)
    errors: ErrorCollector = field(default_factory=ErrorCollector)
    state: RunState = RunState.IDLE
    optab: OpcodeTable = field(default_factory=OpcodeTable)
    pass1: Optional[Pass1Result] = None
    pass2: Optional[Pass2Result] = None

    @property
    def succeeded(self) -> bool:
        """True if both passes ran and no errors were reported."""
        return self.pass2 is not None and not self.errors.has_errors()

    @property
    def symbols(self) -> dict[str, int]:
        return self.pass1.symbols.as_dict() if self.pass1 else {}

    @property
    def program(self) -> Optional[ObjectProgram]:
        return self.pass2.program if self.pass2 else None

    def object_codes(self) -> list[str]:
        return self.pass2.object_codes() if self.pass2 else []

    def report(self) -> str:
        """
        Format the run the way it is shown to the user.

        Sections for stages that did not run are left out; diagnostics
        are appended at the end.
        """
        parts = []
        if self.pass1 is not None:
            parts.append("Intermediate File:\n" + self.output.intermediate)
            parts.append("SYMTAB:\n" + self.output.symbols)
        if self.pass2 is not None:
            parts.append("Machine Code:\n" + self.output.object_program)
        if self.output.diagnostics:
            parts.append(self.output.diagnostics + "\n")
        return "\n".join(parts)


# =============================================================================
# Assembler
# =============================================================================

class Assembler:
    """
    Two-pass assembler.

    Attributes:
        config: Configuration applied to every run
    """

    def __init__(self, config: Optional[AssemblerConfig] = None):
        """
        Initialize the assembler.

        Args:
            config: Run configuration (defaults to AssemblerConfig())
        """
        self.config = config or AssemblerConfig()

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble_string(self, source: str, optab_text: str,
                        filename: str = "<input>") -> AssemblyResult:
        """
        Assemble source code held in a string.

        Args:
            source: Assembly source code
            optab_text: Opcode table text
            filename: Virtual filename for diagnostics

        Returns:
            AssemblyResult (check ``succeeded`` and ``errors``)
        """
        result = AssemblyResult(errors=ErrorCollector(self.config.max_errors))
        return self._run(result, source, parse_optab(optab_text), filename)

    def assemble_file(self, source_path: str | Path,
                      optab_path: str | Path) -> AssemblyResult:
        """
        Assemble a source file with an opcode table file.

        Files that cannot be read are reported in the result's errors
        rather than raised.

        Args:
            source_path: Path to the assembly source
            optab_path: Path to the opcode table

        Returns:
            AssemblyResult (check ``succeeded`` and ``errors``)
        """
        result = AssemblyResult(errors=ErrorCollector(self.config.max_errors))
        logger.info(f"Assembling {source_path} with opcode table {optab_path}")

        optab = load_optab(optab_path, result.errors)
        if result.errors.has_errors():
            return self._finish(result)
        if optab:
            result.optab = optab
            result.state = RunState.OPTAB_LOADED

        try:
            source = read_source(source_path)
        except UnreadableInputError as e:
            logger.debug(f"Failed to read source: {e}")
            result.errors.add(e)
            return self._finish(result)

        return self._run(result, source, optab, str(source_path))

    # =========================================================================
    # Stages
    # =========================================================================

    def _run(self, result: AssemblyResult, source: str, optab: OpcodeTable,
             filename: str) -> AssemblyResult:
        config = self.config
        errors = result.errors

        if not optab:
            errors.add(AssemblerError(
                "opcode table is empty",
                hint="load an opcode table with one 'MNEMONIC CODE' pair per line",
            ))
            return self._finish(result)

        result.optab = optab
        result.state = RunState.OPTAB_LOADED

        try:
            statements = parse_source(source, filename, config, optab)
            result.pass1 = run_pass1(statements, optab, config, errors)
            result.state = RunState.PASS1_COMPLETE
            if result.pass1.aborted:
                return self._finish(result)

            result.pass2 = run_pass2(
                result.pass1.records, result.pass1.symbols, optab, config, errors,
                filename, warn_unknown=False,
            )
            result.state = RunState.PASS2_COMPLETE
        except TooManyErrors as e:
            logger.debug(str(e))
            errors.errors.append(e)

        return self._finish(result)

    @staticmethod
    def _finish(result: AssemblyResult) -> AssemblyResult:
        if result.pass1 is not None:
            result.output = render(result.pass1, result.pass2, result.errors)
            result.state = RunState.RENDERED
        else:
            result.output = RenderedOutput(diagnostics=result.errors.report())

        logger.info(
            f"Assembly finished: {result.errors.error_count()} errors, "
            f"{result.errors.warning_count()} warnings"
        )
        return result


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, optab_text: str, filename: str = "<input>",
             config: Optional[AssemblerConfig] = None) -> AssemblyResult:
    """
    Convenience function to assemble source code held in strings.

    Args:
        source: Assembly source code
        optab_text: Opcode table text
        filename: Virtual filename for diagnostics
        config: Run configuration

    Returns:
        AssemblyResult
    """
    return Assembler(config).assemble_string(source, optab_text, filename)


def assemble_file(source_path: str | Path, optab_path: str | Path,
                  config: Optional[AssemblerConfig] = None) -> AssemblyResult:
    """
    Convenience function to assemble a file.

    Args:
        source_path: Path to the assembly source
        optab_path: Path to the opcode table
        config: Run configuration

    Returns:
        AssemblyResult
    """
    return Assembler(config).assemble_file(source_path, optab_path)
