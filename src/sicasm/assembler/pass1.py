"""
Pass 1 - Symbol and Address Resolution
======================================

Pass 1 walks the source statements once, keeping a location counter:

- START sets the location counter (hexadecimal operand) and records its
  label
- every other labelled statement (except END) enters its label into the
  symbol table at the current location counter
- every statement is appended to the intermediate representation, then
  the location counter advances by the statement's size

Statement Sizes
---------------
| Statement        | Size            |
|------------------|-----------------|
| instruction      | 3               |
| WORD             | 3               |
| RESW n           | 3 * n           |
| RESB n           | n               |
| BYTE C'text'     | len(text)       |
| BYTE X'hex'      | len(hex) / 2    |
| START, END       | 0               |
| unknown opcode   | 0 (warning)     |

A malformed operand, or a statement that would start past the last
address (FFFF), stops pass 1; what was resolved up to that point is kept
in the result, which is marked as aborted.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional
import logging

from sicasm.config import AssemblerConfig, WORD_SIZE
from sicasm.errors import (
    AssemblerError,
    DuplicateSymbolError,
    ErrorCollector,
    InvalidOperandError,
    TooManyErrors,
    UnknownOpcodeError,
)
from sicasm.assembler.ir import IRRecord, SymbolTable
from sicasm.assembler.optab import DIRECTIVES, OpcodeTable
from sicasm.assembler.operands import (
    MAX_ADDRESS,
    parse_byte_constant,
    parse_count,
    parse_start_address,
    parse_word,
)
from sicasm.assembler.parser import SourceLine

logger = logging.getLogger(__name__)


# =============================================================================
# Pass 1 Result
# =============================================================================

@dataclass
class Pass1Result:
    """
    Everything pass 1 produces for one run.

    Attributes:
        records: Intermediate records in source order
        symbols: Label addresses
        start_address: Address given by START (0 if there was none)
        program_name: Label of the START statement, if any
        location_counter: Location counter at END (or after the last
                          statement when END is missing)
        end_seen: True if an END directive was found
        aborted: True if an invalid operand stopped the pass early
        errors: Diagnostics collected during the pass
    """
    records: list[IRRecord] = field(default_factory=list)
    symbols: SymbolTable = field(default_factory=SymbolTable)
    start_address: int = 0
    program_name: Optional[str] = None
    location_counter: int = 0
    end_seen: bool = False
    aborted: bool = False
    errors: ErrorCollector = field(default_factory=ErrorCollector)


# =============================================================================
# Location Counter Advance
# =============================================================================

def statement_size(opcode: str, operand: Optional[str], optab: OpcodeTable) -> Optional[int]:
    """
    Return how far a statement advances the location counter.

    Args:
        opcode: Mnemonic or directive
        operand: Operand field, or None
        optab: Opcode table used to recognise instructions

    Returns:
        Size in bytes, or None if the opcode is unknown

    Raises:
        ValueError: If the operand of WORD, RESW, RESB or BYTE is invalid;
                    the message says what was expected
    """
    if opcode in ("START", "END"):
        return 0
    if opcode == "WORD":
        parse_word(operand)
        return WORD_SIZE
    if opcode == "RESW":
        return WORD_SIZE * parse_count(operand)
    if opcode == "RESB":
        return parse_count(operand)
    if opcode == "BYTE":
        return len(parse_byte_constant(operand)) // 2
    if optab.is_instruction(opcode):
        return WORD_SIZE
    return None


# =============================================================================
# Resolver
# =============================================================================

class Resolver:
    """
    Runs pass 1 over a list of statements.

    A Resolver is used for exactly one run; all tables it builds are
    returned in the Pass1Result.
    """

    def __init__(self, optab: OpcodeTable, config: Optional[AssemblerConfig] = None,
                 errors: Optional[ErrorCollector] = None):
        self._optab = optab
        self._config = config or AssemblerConfig()
        self._result = Pass1Result(
            errors=errors if errors is not None else ErrorCollector(self._config.max_errors)
        )
        self._lc = 0

    def run(self, statements: Iterable[SourceLine]) -> Pass1Result:
        """
        Resolve addresses for all statements.

        Returns:
            The pass 1 result (check ``aborted`` and ``errors``)
        """
        result = self._result

        for stmt in statements:
            try:
                self._process(stmt)
            except TooManyErrors:
                raise
            except AssemblerError as e:
                # Invalid operand or address space overflow
                logger.debug(f"Pass 1 stopped: {e.message}")
                result.aborted = True
                result.errors.add(e)
                break

        if not result.end_seen:
            result.location_counter = self._lc
            if not result.aborted:
                result.errors.add_warning("missing END directive")

        logger.debug(
            f"Pass 1: {len(result.records)} records, {len(result.symbols)} symbols, "
            f"location counter {result.location_counter:04X}"
        )
        return result

    def _process(self, stmt: SourceLine) -> None:
        result = self._result
        opcode = stmt.opcode

        if not result.records and opcode != "START":
            result.errors.add_warning(
                "program does not begin with START; assuming start address 0000",
                stmt.location,
            )

        if result.end_seen:
            result.errors.add_warning(f"statement after END: '{stmt.text.strip()}'",
                                      stmt.location)

        if opcode == "START":
            self._start(stmt)
            return

        if opcode != "END" and self._lc > MAX_ADDRESS:
            raise AssemblerError(
                f"statement at {self._lc:X} is beyond the end of memory "
                f"(last address {MAX_ADDRESS:04X})",
                location=stmt.location,
                source_line=stmt.text,
            )

        if stmt.label and opcode != "END":
            self._define(stmt)

        address = None if opcode == "END" else self._lc
        result.records.append(self._record(stmt, address))

        if opcode == "END":
            result.end_seen = True
            result.location_counter = self._lc
            return

        try:
            size = statement_size(opcode, stmt.operand, self._optab)
        except ValueError as e:
            raise InvalidOperandError(
                opcode, stmt.operand, str(e),
                location=stmt.operand_location if stmt.operand else stmt.location,
                source_line=stmt.text,
            ) from None

        if size is None:
            warning = UnknownOpcodeError(
                opcode,
                location=stmt.location,
                source_line=stmt.text,
                known=[*self._optab.mnemonics, *DIRECTIVES],
            )
            logger.debug(warning.message)
            result.errors.add(warning)
            return

        self._advance(size, stmt)

    def _start(self, stmt: SourceLine) -> None:
        result = self._result
        if result.records:
            result.errors.add_warning("START is not the first statement", stmt.location)

        try:
            self._lc = parse_start_address(stmt.operand)
        except ValueError as e:
            raise InvalidOperandError(
                "START", stmt.operand, str(e),
                location=stmt.operand_location if stmt.operand else stmt.location,
                source_line=stmt.text,
            ) from None

        result.start_address = self._lc
        if stmt.label:
            result.program_name = stmt.label
        result.records.append(self._record(stmt, self._lc))
        logger.debug(f"START at {self._lc:04X}")

    def _define(self, stmt: SourceLine) -> None:
        result = self._result
        previous = result.symbols.define(stmt.label, self._lc, stmt.location)
        if previous is not None:
            duplicate = DuplicateSymbolError(
                stmt.label,
                location=stmt.location,
                original_location=previous,
                source_line=stmt.text,
                severity="error" if self._config.strict else "warning",
            )
            logger.debug(duplicate.message)
            result.errors.add(duplicate)

    def _advance(self, size: int, stmt: SourceLine) -> None:
        self._lc += size
        if self._lc > MAX_ADDRESS + 1:
            raise AssemblerError(
                f"location counter {self._lc:X} is beyond the end of memory "
                f"({MAX_ADDRESS + 1:X})",
                location=stmt.location,
                source_line=stmt.text,
            )

    @staticmethod
    def _record(stmt: SourceLine, address: Optional[int]) -> IRRecord:
        return IRRecord(
            address=address,
            opcode=stmt.opcode,
            label=stmt.label,
            operand=stmt.operand,
            line_number=stmt.line_number,
            source_line=stmt.text,
        )


def run_pass1(
    statements: Iterable[SourceLine],
    optab: OpcodeTable,
    config: Optional[AssemblerConfig] = None,
    errors: Optional[ErrorCollector] = None,
) -> Pass1Result:
    """
    Convenience function to run pass 1.

    Args:
        statements: Parsed source statements
        optab: Opcode table
        config: Assembly configuration
        errors: Collector to report into (a new one is created if None)

    Returns:
        Pass1Result with IR, symbol table and diagnostics
    """
    return Resolver(optab, config, errors).run(statements)
