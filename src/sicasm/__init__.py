"""
sicasm - Two-Pass Assembler for a Simplified SIC Machine
========================================================

This package turns assembly source for a small fictitious machine into
an object program made of Header, Text and End records.

The machine has one instruction format: a one-byte opcode followed by an
optional two-byte address. The opcode values are not built in; they are
read from an opcode table file, so the same assembler serves any
instruction set of that shape.

Main Components
---------------
- **assembler**: OPTAB loader, pass 1, pass 2 and output rendering
- **config**: Run configuration (defaults, environment overrides)
- **errors**: Exception hierarchy and diagnostic collection
- **cli**: The ``sicasm`` command-line tool

Quick Start
-----------
    >>> from sicasm import Assembler
    >>> result = Assembler().assemble_file("copy.asm", "optab.txt")
    >>> print(result.report())

Or from the command line:
    $ sicasm copy.asm --optab optab.txt -o copy.obj
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from sicasm.assembler import (
    Assembler,
    AssemblyResult,
    OpcodeTable,
    assemble,
    assemble_file,
    load_optab,
    parse_optab,
    run_pass1,
    run_pass2,
    render,
)
from sicasm.config import AssemblerConfig
from sicasm.errors import (
    SicAsmError,
    AssemblerError,
    AssemblySyntaxError,
    UnreadableInputError,
    InvalidOperandError,
    UnknownOpcodeError,
    UnresolvedSymbolError,
    DuplicateSymbolError,
    ErrorCollector,
    SourceLocation,
)

__all__ = [
    "__version__",
    # Assembler
    "Assembler",
    "AssemblyResult",
    "AssemblerConfig",
    "OpcodeTable",
    "assemble",
    "assemble_file",
    "load_optab",
    "parse_optab",
    "run_pass1",
    "run_pass2",
    "render",
    # Exception hierarchy
    "SicAsmError",
    "AssemblerError",
    "AssemblySyntaxError",
    "UnreadableInputError",
    "InvalidOperandError",
    "UnknownOpcodeError",
    "UnresolvedSymbolError",
    "DuplicateSymbolError",
    "ErrorCollector",
    "SourceLocation",
]
