"""
Pass 2 - Object Code Generation
===============================

Pass 2 reads the intermediate records produced by pass 1 and generates
the object code of each statement:

| Statement             | Object code                               |
|-----------------------|-------------------------------------------|
| instruction [SYMBOL]  | opcode + 4-digit symbol address           |
| WORD n                | n as 6 hex digits                         |
| BYTE C'text'          | 2 hex digits per character                |
| BYTE X'hex'           | the hex digits, upper-cased               |
| START, END, RESW, RESB| none                                      |

An instruction whose operand is not in the symbol table is emitted with
its opcode only and an undefined-symbol warning (an error in strict mode).

Text Record Packing
-------------------
Object code is packed into Text records of at most 30 bytes. A record
starts at the address of its first fragment; a fragment that would not
fit closes the current record and opens a new one at its own address.
A single constant longer than a whole record is split across records.

At END the open record is flushed and the End record, which carries the
START address, is written. The Header record (program name, start
address, length) is built last.
"""

from dataclasses import dataclass, field
from typing import Optional
import logging

from sicasm.config import AssemblerConfig
from sicasm.errors import (
    AssemblerError,
    ErrorCollector,
    InvalidOperandError,
    SourceLocation,
    UnknownOpcodeError,
    UnresolvedSymbolError,
)
from sicasm.assembler.ir import IRRecord, SymbolTable
from sicasm.assembler.optab import DIRECTIVES, NO_CODE_DIRECTIVES, OpcodeTable
from sicasm.assembler.operands import (
    HEX_DIGITS,
    parse_byte_constant,
    parse_word,
    word_object_code,
)
from sicasm.assembler.records import EndRecord, HeaderRecord, ObjectProgram, TextRecord

logger = logging.getLogger(__name__)


# =============================================================================
# Pass 2 Result
# =============================================================================

@dataclass(frozen=True)
class ListingLine:
    """An intermediate record together with its generated object code."""
    record: IRRecord
    object_code: str = ""

    def to_line(self) -> str:
        columns = self.record.to_columns()
        if self.object_code:
            columns.append(self.object_code)
        return "\t".join(columns)


@dataclass
class Pass2Result:
    """
    Everything pass 2 produces for one run.

    Attributes:
        listing: Each processed record with its object code
        program: Header, Text and End records
        start_address: Address from the START record
        ending_address: Address just past the last byte of object code
        errors: Diagnostics collected during the pass
    """
    listing: list[ListingLine]
    program: ObjectProgram
    start_address: int
    ending_address: int
    errors: ErrorCollector = field(default_factory=ErrorCollector)

    @property
    def program_length(self) -> int:
        return self.program.header.program_length

    def object_codes(self) -> list[str]:
        """Object code of every listing line (empty strings included)."""
        return [line.object_code for line in self.listing]


# =============================================================================
# Code Generator
# =============================================================================

class CodeGenerator:
    """
    Runs pass 2 over intermediate records.

    Like the Resolver, a CodeGenerator is used for exactly one run.
    With ``warn_unknown=False`` lines with an unknown opcode get no code
    and no warning (pass 1 has already reported them).

    Usage:
        codegen = CodeGenerator(symbols, optab)
        result = codegen.generate(pass1.records)
        print(result.program.to_text())
    """

    def __init__(self, symbols: SymbolTable, optab: OpcodeTable,
                 config: Optional[AssemblerConfig] = None,
                 errors: Optional[ErrorCollector] = None,
                 filename: str = "<input>", warn_unknown: bool = True):
        self._symbols = symbols
        self._warn_unknown = warn_unknown
        self._filename = filename
        self._optab = optab
        self._config = config or AssemblerConfig()
        self._errors = errors if errors is not None else ErrorCollector(self._config.max_errors)

        self._listing: list[ListingLine] = []
        self._text_records: list[TextRecord] = []
        self._current: Optional[TextRecord] = None
        self._ending_address: Optional[int] = None

    # =========================================================================
    # Public Interface
    # =========================================================================

    def generate(self, records: list[IRRecord]) -> Pass2Result:
        """
        Generate object code and records.

        Args:
            records: Intermediate records from pass 1 (or read back with
                     parse_intermediate)

        Returns:
            Pass2Result with listing, object program and diagnostics
        """
        start_address = 0
        program_name = self._config.default_program_name
        start = next((r for r in records if r.opcode == "START"), None)
        if start is not None:
            start_address = start.address or 0
            if start.label and self._config.name_from_start_label:
                program_name = start.label

        for record in records:
            code = self._object_code(record)
            self._listing.append(ListingLine(record, code))

            if code:
                self._pack(record, code)

            if record.opcode == "END":
                break

        self._flush()
        end = EndRecord(start_address)

        ending_address = self._ending_address if self._ending_address is not None else start_address
        header = HeaderRecord(
            program_name=program_name,
            start_address=start_address,
            program_length=max(ending_address - start_address, 0),
        )

        logger.debug(
            f"Pass 2: {len(self._text_records)} text records, "
            f"length {header.program_length:06X}"
        )

        return Pass2Result(
            listing=self._listing,
            program=ObjectProgram(header, self._text_records, end),
            start_address=start_address,
            ending_address=ending_address,
            errors=self._errors,
        )

    # =========================================================================
    # Object Code
    # =========================================================================

    def _object_code(self, record: IRRecord) -> str:
        """Return the object code for one record ("" if it has none)."""
        opcode = record.opcode

        try:
            if opcode == "WORD":
                return word_object_code(parse_word(record.operand))
            if opcode == "BYTE":
                return parse_byte_constant(record.operand)
        except ValueError as e:
            self._errors.add(InvalidOperandError(
                opcode, record.operand, str(e),
                location=self._location(record),
                source_line=record.source_line,
            ))
            return ""

        if opcode in NO_CODE_DIRECTIVES:
            return ""

        if self._optab.is_instruction(opcode):
            return self._instruction_code(record)

        if not self._warn_unknown:
            return ""

        warning = UnknownOpcodeError(
            opcode,
            location=self._location(record),
            source_line=record.source_line,
            known=[*self._optab.mnemonics, *DIRECTIVES],
        )
        logger.debug(warning.message)
        self._errors.add(warning)
        return ""

    def _instruction_code(self, record: IRRecord) -> str:
        opcode_hex = self._optab.code_for(record.opcode)
        if len(opcode_hex) != 2 or not set(opcode_hex) <= HEX_DIGITS:
            self._errors.add(AssemblerError(
                f"opcode table entry for '{record.opcode}' is not a hex byte: '{opcode_hex}'",
                location=self._location(record),
                source_line=record.source_line,
            ))
            return ""

        code = opcode_hex.upper()
        if not record.operand:
            return code

        address = self._symbols.lookup(record.operand)
        if address is None:
            unresolved = UnresolvedSymbolError(
                record.operand,
                location=self._location(record),
                source_line=record.source_line,
                similar_symbols=self._symbols.similar(record.operand),
                severity="error" if self._config.strict else "warning",
            )
            logger.debug(unresolved.message)
            self._errors.add(unresolved)
            return code

        return code + f"{address:04X}"

    # =========================================================================
    # Text Record Packing
    # =========================================================================

    def _pack(self, record: IRRecord, code: str) -> None:
        """Append one statement's object code to the text records."""
        if record.address is None:
            self._errors.add(AssemblerError(
                f"object code for '{record.opcode}' has no address",
                location=self._location(record),
                source_line=record.source_line,
            ))
            return

        capacity = self._config.text_record_capacity
        address = record.address
        size = len(code) // 2

        end_of_code = address + size
        if self._ending_address is None or end_of_code > self._ending_address:
            self._ending_address = end_of_code

        if self._current is not None and self._current.byte_length + size > capacity:
            self._flush()

        # A constant longer than a whole record is split into full records
        while size > capacity:
            self._text_records.append(TextRecord(address, [code[:capacity * 2]]))
            logger.debug(f"Text record at {address:06X} ({capacity} bytes, split constant)")
            address += capacity
            code = code[capacity * 2:]
            size -= capacity

        if self._current is None:
            self._current = TextRecord(address)
        self._current.fragments.append(code)

    def _flush(self) -> None:
        """Close the open text record, if it holds any code."""
        if self._current is not None and self._current.fragments:
            logger.debug(
                f"Text record at {self._current.start_address:06X} "
                f"({self._current.byte_length} bytes)"
            )
            self._text_records.append(self._current)
        self._current = None

    def _location(self, record: IRRecord) -> Optional[SourceLocation]:
        if record.line_number:
            return SourceLocation(self._filename, record.line_number)
        return None


def run_pass2(
    records: list[IRRecord],
    symbols: SymbolTable,
    optab: OpcodeTable,
    config: Optional[AssemblerConfig] = None,
    errors: Optional[ErrorCollector] = None,
    filename: str = "<input>",
    warn_unknown: bool = True,
) -> Pass2Result:
    """
    Convenience function to run pass 2.

    Args:
        records: Intermediate records
        symbols: Symbol table from pass 1
        optab: Opcode table
        config: Assembly configuration
        errors: Collector to report into (a new one is created if None)
        filename: Source name for diagnostics
        warn_unknown: Report lines whose opcode is unknown

    Returns:
        Pass2Result with listing, object program and diagnostics
    """
    return CodeGenerator(
        symbols, optab, config, errors, filename, warn_unknown
    ).generate(records)
