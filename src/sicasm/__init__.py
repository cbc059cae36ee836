"""
sicasm - Two-Pass Assembler for the SIC Machine
===============================================

This package assembles programs for SIC, the Simplified Instructional
Computer used to teach systems programming. A run produces:

- an intermediate listing (each source line with its address),
- a symbol table (each label with its address),
- an object program (Header, Text and End records).

Quick Start
-----------
    >>> from sicasm import Assembler
    >>> result = Assembler().assemble_file("copy.asm", "optab.txt")
    >>> for record in result.object_code():
    ...     print(record)

Or use the command-line tool:
    $ sicasm copy.asm -t optab.txt -o copy.obj -l copy.lst -s copy.sym

Version History
---------------
1.0.0 - Initial release
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
)
from sicasm.config import AssemblerConfig, DuplicatePolicy, SymbolPolicy
from sicasm.errors import (
    SicAsmError,
    AssemblerError,
    AssemblerIOError,
    MalformedOpcodeEntry,
    MalformedSourceLine,
    UndefinedSymbolError,
    DuplicateSymbolError,
    DirectiveError,
    SourceLocation,
)

__all__ = [
    "__version__",
    # Assembler
    "Assembler",
    "AssemblyResult",
    "OpcodeTable",
    "assemble",
    "assemble_file",
    # Configuration
    "AssemblerConfig",
    "DuplicatePolicy",
    "SymbolPolicy",
    # Exception hierarchy
    "SicAsmError",
    "AssemblerError",
    "AssemblerIOError",
    "MalformedOpcodeEntry",
    "MalformedSourceLine",
    "UndefinedSymbolError",
    "DuplicateSymbolError",
    "DirectiveError",
    "SourceLocation",
]
