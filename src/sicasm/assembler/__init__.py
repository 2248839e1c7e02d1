"""
Two-Pass Assembler
==================

This package assembles programs for a small SIC-style machine: every
instruction is a one-byte opcode followed by an optional two-byte
address, and storage is declared with START, END, WORD, BYTE, RESW and
RESB.

Main Components
---------------
- **OpcodeTable**: Instruction set, loaded from a text table
- **parse_source**: Splits source text into statements
- **Resolver** (pass 1): Assigns addresses and builds the symbol table
- **CodeGenerator** (pass 2): Generates object code and packs records
- **render**: Produces the listing, symbol table and object program texts
- **Assembler**: Runs all of the above for one program

Assembly Process
----------------
1. **OPTAB load**: Read ``MNEMONIC CODE`` pairs
2. **Pass 1**: Location counter, symbol table, intermediate records
3. **Pass 2**: Object code, Header/Text/End records
4. **Render**: Text outputs and diagnostics

Example Usage
-------------
>>> from sicasm.assembler import Assembler
>>> result = Assembler().assemble_file("copy.asm", "optab.txt")
>>> if result.succeeded:
...     print(result.output.records)
"""

from sicasm.assembler.assembler import (
    Assembler,
    AssemblyResult,
    RunState,
    assemble,
    assemble_file,
)
from sicasm.assembler.codegen import CodeGenerator, ListingLine, Pass2Result, run_pass2
from sicasm.assembler.emitter import RenderedOutput, render
from sicasm.assembler.ir import IRRecord, SymbolTable, parse_intermediate, render_intermediate
from sicasm.assembler.optab import DIRECTIVES, OpcodeTable, load_optab, parse_optab
from sicasm.assembler.parser import SourceLine, parse_line, parse_source, read_source
from sicasm.assembler.pass1 import Pass1Result, Resolver, run_pass1, statement_size
from sicasm.assembler.records import (
    EndRecord,
    HeaderRecord,
    ObjectProgram,
    TextRecord,
    parse_object_program,
)

__all__ = [
    # Main class and functions
    "Assembler",
    "AssemblyResult",
    "RunState",
    "assemble",
    "assemble_file",
    # Opcode table
    "DIRECTIVES",
    "OpcodeTable",
    "load_optab",
    "parse_optab",
    # Source parsing
    "SourceLine",
    "parse_line",
    "parse_source",
    "read_source",
    # Pass 1
    "IRRecord",
    "SymbolTable",
    "Pass1Result",
    "Resolver",
    "run_pass1",
    "statement_size",
    "parse_intermediate",
    "render_intermediate",
    # Pass 2
    "CodeGenerator",
    "ListingLine",
    "Pass2Result",
    "run_pass2",
    # Records
    "HeaderRecord",
    "TextRecord",
    "EndRecord",
    "ObjectProgram",
    "parse_object_program",
    # Rendering
    "RenderedOutput",
    "render",
]
