"""
sicasm Error Hierarchy
======================

This module defines the exception hierarchy for the assembler. All
exceptions inherit from SicAsmError, allowing callers to catch every
assembler-related error with a single except clause if desired.

Exception Hierarchy
-------------------
SicAsmError (base)
└── AssemblerError (assembler-related)
    ├── AssemblySyntaxError - malformed intermediate/object text
    ├── UnreadableInputError - source or opcode table cannot be read
    ├── InvalidOperandError - operand is not a valid number/constant
    ├── UnknownOpcodeError - opcode is neither a mnemonic nor a directive
    ├── UnresolvedSymbolError - operand symbol missing from SYMTAB
    ├── DuplicateSymbolError - label defined more than once
    └── TooManyErrors - error limit reached

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

import difflib
from dataclasses import dataclass
from typing import Iterable, Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class SicAsmError(Exception):
    """
    Base exception for all sicasm errors.

        try:
            assembler.assemble_file("prog.asm", "optab.txt")
        except SicAsmError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A location in a source or table file, used for error reporting.

    Attributes:
        filename: Name of the file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed, 0 when unknown)
    """
    filename: str
    line: int
    column: int = 0

    def __str__(self) -> str:
        if self.column > 0:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.filename}:{self.line}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(SicAsmError):
    """
    Base exception for all assembler diagnostics.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The source text at the error location (optional)
        severity: "error" or "warning"
    """

    severity = "error"

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
        severity: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        if severity is not None:
            self.severity = severity
        super().__init__(self._format_message())

    @property
    def is_warning(self) -> bool:
        return self.severity == "warning"

    def _format_message(self) -> str:
        """
        Format the message with location, source context, and hint.

        Example output:
            prog.asm:3:5: error: undefined symbol 'ALPA'
                LDA ALPA
                    ^
            hint: did you mean 'ALPHA'?
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: {self.severity}: {self.message}")
        else:
            parts.append(f"{self.severity}: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class AssemblySyntaxError(AssemblerError):
    """
    Malformed intermediate or object program text.

    Raised when text read back with ``parse_intermediate`` or
    ``parse_object_program`` does not have the expected shape.
    """
    pass


class UnreadableInputError(AssemblerError):
    """
    An input (source program or opcode table) cannot be opened or read.

    The phase that needed the input is aborted; the run produces no
    output beyond diagnostics.
    """

    def __init__(self, filename: str, reason: str):
        self.filename = filename
        self.reason = reason
        super().__init__(f"cannot read '{filename}': {reason}")


class InvalidOperandError(AssemblerError):
    """
    An operand that must be a number or a byte constant is malformed.

    Raised for a non-hexadecimal START address, non-decimal WORD/RESW/RESB
    values, and BYTE constants that are not C'...' or X'...' with an even
    number of hex digits. Pass 1 stops at the first one.
    """

    def __init__(
        self,
        opcode: str,
        operand: Optional[str],
        expected: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.opcode = opcode
        self.operand = operand
        self.expected = expected

        shown = operand if operand else "<missing>"
        super().__init__(
            f"invalid operand '{shown}' for {opcode}",
            location=location,
            hint=f"{opcode} expects {expected}",
            source_line=source_line,
        )


class UnknownOpcodeError(AssemblerError):
    """
    Opcode is neither in the opcode table nor a directive.

    Reported as a warning: the line gets no location advance and no
    object code, and assembly continues.
    """

    severity = "warning"

    def __init__(
        self,
        opcode: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        known: Optional[Iterable[str]] = None,
    ):
        self.opcode = opcode

        hint = None
        matches = difflib.get_close_matches(opcode, list(known or ()), n=3)
        if matches:
            hint = "did you mean " + ", ".join(f"'{m}'" for m in matches) + "?"

        if opcode:
            message = f"unknown opcode or directive '{opcode}'"
        else:
            message = "missing opcode"

        super().__init__(
            message,
            location=location,
            hint=hint,
            source_line=source_line,
        )


class UnresolvedSymbolError(AssemblerError):
    """
    Operand symbol not found in the symbol table during pass 2.

    By default this is a warning and the instruction is emitted without
    its address suffix. In strict mode it is promoted to an error.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        similar_symbols: Optional[list[str]] = None,
        severity: str = "warning",
    ):
        self.symbol = symbol
        self.similar_symbols = similar_symbols or []

        hint = None
        if self.similar_symbols:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_symbols[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"undefined symbol '{symbol}'",
            location=location,
            hint=hint,
            source_line=source_line,
            severity=severity,
        )


class DuplicateSymbolError(AssemblerError):
    """
    Label defined more than once.

    The later definition wins. Reported as a warning unless strict mode
    is enabled.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        severity: str = "warning",
    ):
        self.symbol = symbol
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{symbol}' was first defined at {original_location}"

        super().__init__(
            f"duplicate symbol '{symbol}'",
            location=location,
            hint=hint,
            source_line=source_line,
            severity=severity,
        )


# =============================================================================
# Error Collection for Multiple Error Reporting
# =============================================================================

class ErrorCollector:
    """
    Collects errors and warnings for one assembly run.

    Diagnostics never escape as exceptions from the passes; they are
    gathered here and appended to the run's output.

    Example:
        collector = ErrorCollector(max_errors=100)
        collector.add(InvalidOperandError("RESW", "X", "a decimal count"))
        if collector.has_errors():
            print(collector.report())
    """

    def __init__(self, max_errors: int = 100):
        """
        Initialize the error collector.

        Args:
            max_errors: Maximum errors to collect before raising TooManyErrors
        """
        self.errors: list[AssemblerError] = []
        self.warnings: list[AssemblerError] = []
        self.max_errors = max_errors

    def add(self, error: AssemblerError) -> None:
        """
        Add a diagnostic, routed by its severity.

        Raises:
            TooManyErrors: If max_errors has been reached
        """
        if error.is_warning:
            self.warnings.append(error)
            return

        self.errors.append(error)
        if len(self.errors) >= self.max_errors:
            raise TooManyErrors(f"too many errors ({self.max_errors}), stopping")

    def add_warning(self, message: str, location: Optional[SourceLocation] = None) -> None:
        """Add a plain warning message."""
        self.warnings.append(
            AssemblerError(message, location=location, severity="warning")
        )

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def error_count(self) -> int:
        return len(self.errors)

    def warning_count(self) -> int:
        return len(self.warnings)

    def report(self) -> str:
        """
        Format all errors and warnings for display.

        Returns:
            Formatted string with all errors, warnings and a summary line
        """
        lines = []

        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        if self.warnings:
            lines.append("Warnings:")
            for warning in self.warnings:
                lines.extend(f"  {line}" for line in str(warning).splitlines())

        error_word = "error" if len(self.errors) == 1 else "errors"
        warning_word = "warning" if len(self.warnings) == 1 else "warnings"
        lines.append(
            f"\n{len(self.errors)} {error_word}, {len(self.warnings)} {warning_word}"
        )

        return "\n".join(lines)

    def clear(self) -> None:
        self.errors.clear()
        self.warnings.clear()


class TooManyErrors(AssemblerError):
    """Raised when the error limit for a run has been reached."""

    def __init__(self, message: str = "too many errors"):
        super().__init__(message)
