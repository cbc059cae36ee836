"""
SIC Assembler Error Hierarchy
=============================

This module defines the exception hierarchy for the whole package.
All exceptions inherit from SicAsmError, allowing callers to catch every
assembler-related failure with a single except clause.

Exception Hierarchy
-------------------
SicAsmError (base)
├── AssemblerError (translation-related)
│   ├── MalformedOpcodeEntry - opcode table line is not "MNEMONIC CODE"
│   ├── MalformedSourceLine - source line is not "LABEL MNEMONIC OPERAND"
│   ├── UndefinedSymbolError - operand references a label never defined
│   ├── DuplicateSymbolError - label defined more than once
│   └── DirectiveError - unusable START/WORD/BYTE/RESW/RESB operand
└── AssemblerIOError - an input source cannot be read

Every failure aborts the run. There is no partial result: a failed run
produces no listing, no symbol table and no object records.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class SicAsmError(Exception):
    """
    Base exception for all assembler errors.

        try:
            Assembler().assemble_file("copy.asm", "optab.txt")
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
    A location in an input file, used for error reporting.

    Attributes:
        filename: Name of the input (or "<input>" for in-memory lines)
        line: Line number (1-indexed)
        column: Column number (1-indexed, 0 when the whole line is meant)
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
    Base exception for errors raised while loading or translating a program.

    Attributes:
        message: The error description
        location: Where in the input the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The raw input text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            copy.asm:3:8: error: undefined symbol 'FIVF'
                - ADD FIVF
                      ^
            hint: did you mean 'FIVE'?
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class MalformedOpcodeEntry(AssemblerError):
    """
    An opcode table line that is not exactly "MNEMONIC HEXCODE".

    Examples:
        LDA             ; missing code
        LDA 00 extra    ; too many tokens
        LDA 0G          ; code is not hexadecimal
    """
    pass


class MalformedSourceLine(AssemblerError):
    """
    A source line that does not split into exactly three tokens.

    Every assembly line carries a label (or "-"), a mnemonic and an operand.
    """

    def __init__(
        self,
        token_count: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.token_count = token_count
        super().__init__(
            f"expected 3 fields (label, mnemonic, operand), found {token_count}",
            location=location,
            hint="use '-' for an empty label or operand",
            source_line=source_line,
        )


class UndefinedSymbolError(AssemblerError):
    """
    Reference to a label that pass one never defined.

    Only raised under the strict undefined-symbol policy; the lenient
    policy resolves the operand to address 0 instead.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
        similar_symbols: Optional[list[str]] = None,
    ):
        self.symbol = symbol
        self.similar_symbols = similar_symbols or []

        if not hint and self.similar_symbols:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_symbols[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"undefined symbol '{symbol}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class DuplicateSymbolError(AssemblerError):
    """
    Label defined more than once.

    Only raised when the duplicate-label policy is ERROR; by default a
    redefinition overwrites the earlier address.
    """

    def __init__(
        self,
        symbol: str,
        address: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.symbol = symbol
        self.address = address
        super().__init__(
            f"duplicate symbol '{symbol}'",
            location=location,
            hint=f"'{symbol}' is already defined at {address:04X}",
            source_line=source_line,
        )


class DirectiveError(AssemblerError):
    """
    Error in an assembler directive operand.

    Examples:
        COPY START 10G0    ; start address is not hexadecimal
        - WORD FIVE        ; WORD takes a decimal constant
        - BYTE X'F'        ; odd number of hex digits
        - RESW -1          ; negative reservation
    """
    pass


# =============================================================================
# I/O Exceptions
# =============================================================================

class AssemblerIOError(SicAsmError):
    """
    An input source (opcode table or assembly program) cannot be read.

    Attributes:
        path: The path that failed
        reason: The underlying operating-system error text
    """

    def __init__(self, path: str | Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"cannot read '{path}': {reason}")
