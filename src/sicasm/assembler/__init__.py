"""
SIC Two-Pass Assembler
======================

This package translates a line-oriented SIC assembly program into three
artifacts: an address-annotated intermediate listing, a symbol table, and
an object program of Header, Text and End records.

Main Components
---------------
- **Assembler**: Orchestrates a run and returns an AssemblyResult
- **OpcodeTable**: Immutable mnemonic -> opcode mapping
- **pass_one**: Location counter, symbol table and intermediate listing
- **pass_two**: Object code generation and text record packing
- **HeaderRecord / TextRecord / EndRecord**: The object record types

Assembly Process
----------------
1. **Pass 1**: Assign an address to every line, build the symbol table,
   compute the program length.
2. **Pass 2**: Re-scan the intermediate listing, resolve operand labels
   through the finished symbol table, pack code into text records of at
   most 30 bytes.

Supported Directives
--------------------
START, END, WORD, BYTE (C'...' and X'...'), RESW, RESB
"""

from sicasm.assembler.assembler import (
    Assembler,
    AssemblyResult,
    assemble,
    assemble_file,
    read_lines,
)
from sicasm.assembler.opcodes import (
    OpcodeEntry,
    OpcodeTable,
    SIC_OPCODES,
    default_opcode_table,
    load_opcode_table,
    parse_opcode_line,
)
from sicasm.assembler.source import SourceLine, parse_source_line
from sicasm.assembler.pass_one import (
    IntermediateEntry,
    LocationCounter,
    Pass1Result,
    Program,
    SymbolTable,
    pass_one,
)
from sicasm.assembler.pass_two import TextRecordBuilder, pass_two
from sicasm.assembler.records import (
    MAX_TEXT_BYTES,
    EndRecord,
    HeaderRecord,
    ObjectRecord,
    RecordType,
    TextRecord,
)

__all__ = [
    # Main class and functions
    "Assembler",
    "AssemblyResult",
    "assemble",
    "assemble_file",
    "read_lines",
    # Opcodes
    "OpcodeEntry",
    "OpcodeTable",
    "SIC_OPCODES",
    "default_opcode_table",
    "load_opcode_table",
    "parse_opcode_line",
    # Source
    "SourceLine",
    "parse_source_line",
    # Pass one
    "IntermediateEntry",
    "LocationCounter",
    "Pass1Result",
    "Program",
    "SymbolTable",
    "pass_one",
    # Pass two
    "TextRecordBuilder",
    "pass_two",
    # Records
    "MAX_TEXT_BYTES",
    "EndRecord",
    "HeaderRecord",
    "ObjectRecord",
    "RecordType",
    "TextRecord",
]
