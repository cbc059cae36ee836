"""
SIC Opcode Table
================

This module defines the opcode table (OPTAB): an immutable mapping from an
instruction mnemonic to its fixed-width hexadecimal operation code.

Every SIC instruction is 3 bytes long: a one-byte opcode followed by a
16-bit address field. The assembler therefore only needs the opcode string
itself; instruction size is the same for every mnemonic in the table.

Opcode File Format
------------------
One entry per line, two whitespace-separated tokens:

    LDA   00
    ADD   18
    RSUB  4C

Blank lines are ignored. Any other line that does not split into exactly
two tokens, or whose code is not hexadecimal, raises MalformedOpcodeEntry.
When a mnemonic appears twice the later line wins.

Reference
---------
- Leland L. Beck, "System Software: An Introduction to Systems Programming",
  Appendix A (SIC instruction set)
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
import logging
import string

from sicasm.errors import MalformedOpcodeEntry, SourceLocation


logger = logging.getLogger(__name__)

_HEX_DIGITS = frozenset(string.hexdigits)


# =============================================================================
# Opcode Entry
# =============================================================================

@dataclass(frozen=True)
class OpcodeEntry:
    """
    One line of the opcode table.

    Attributes:
        mnemonic: Instruction mnemonic (e.g. "LDA")
        code: Hexadecimal operation code, upper-case (e.g. "00")
    """
    mnemonic: str
    code: str

    def __str__(self) -> str:
        return f"{self.mnemonic} {self.code}"


def is_hex(text: str) -> bool:
    """Return True if text is a non-empty string of hexadecimal digits."""
    return bool(text) and all(ch in _HEX_DIGITS for ch in text)


def parse_opcode_line(line: str, line_number: int = 0,
                      filename: str = "<optab>") -> OpcodeEntry:
    """
    Parse one opcode table line into an OpcodeEntry.

    Raises:
        MalformedOpcodeEntry: If the line is not "MNEMONIC HEXCODE"
    """
    parts = line.split()
    location = SourceLocation(filename, line_number)

    if len(parts) != 2:
        raise MalformedOpcodeEntry(
            f"expected 2 fields (mnemonic, code), found {len(parts)}",
            location=location,
            source_line=line.rstrip("\r\n"),
        )

    mnemonic, code = parts
    if not is_hex(code):
        raise MalformedOpcodeEntry(
            f"opcode '{code}' for '{mnemonic}' is not hexadecimal",
            location=location,
            source_line=line.rstrip("\r\n"),
        )

    return OpcodeEntry(mnemonic, code.upper())


# =============================================================================
# Opcode Table
# =============================================================================

class OpcodeTable(Mapping):
    """
    Immutable mnemonic -> opcode mapping.

    The table is built once from an ordered sequence of OpcodeEntry values
    and cannot be modified afterwards. It behaves as a read-only dict:

        >>> optab = OpcodeTable([OpcodeEntry("LDA", "00")])
        >>> optab["LDA"]
        '00'
        >>> "ADD" in optab
        False
    """

    def __init__(self, entries: Iterable[OpcodeEntry] = ()):
        codes: dict[str, str] = {}
        for entry in entries:
            if entry.mnemonic in codes and codes[entry.mnemonic] != entry.code:
                logger.warning(
                    f"Opcode '{entry.mnemonic}' redefined: "
                    f"{codes[entry.mnemonic]} -> {entry.code}"
                )
            codes[entry.mnemonic] = entry.code
        self._codes = MappingProxyType(codes)

    def __getitem__(self, mnemonic: str) -> str:
        return self._codes[mnemonic]

    def __iter__(self) -> Iterator[str]:
        return iter(self._codes)

    def __len__(self) -> int:
        return len(self._codes)

    def __repr__(self) -> str:
        return f"OpcodeTable({len(self)} mnemonics)"

    def entries(self) -> list[OpcodeEntry]:
        """Return the table as OpcodeEntry values in load order."""
        return [OpcodeEntry(m, c) for m, c in self._codes.items()]


def load_opcode_table(lines: Iterable[str],
                      filename: str = "<optab>") -> OpcodeTable:
    """
    Build an OpcodeTable from opcode file lines.

    Args:
        lines: Raw lines, one "MNEMONIC CODE" entry each
        filename: Name used in error messages

    Returns:
        The immutable opcode table

    Raises:
        MalformedOpcodeEntry: On the first line that is not a valid entry
    """
    entries = []
    for line_number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        entries.append(parse_opcode_line(line, line_number, filename))

    optab = OpcodeTable(entries)
    logger.debug(f"Loaded {len(optab)} opcodes from {filename}")
    return optab


# =============================================================================
# Standard SIC Instruction Set
# =============================================================================
# Used when no opcode file is supplied. Only the basic SIC (not SIC/XE)
# instructions are listed; all of them are 3-byte format instructions.
# =============================================================================

SIC_OPCODES: tuple[OpcodeEntry, ...] = (
    OpcodeEntry("ADD", "18"),    # A <- A + (m..m+2)
    OpcodeEntry("AND", "40"),    # A <- A & (m..m+2)
    OpcodeEntry("COMP", "28"),   # compare A with (m..m+2)
    OpcodeEntry("DIV", "24"),    # A <- A / (m..m+2)
    OpcodeEntry("J", "3C"),      # PC <- m
    OpcodeEntry("JEQ", "30"),    # PC <- m if CC set to =
    OpcodeEntry("JGT", "34"),    # PC <- m if CC set to >
    OpcodeEntry("JLT", "38"),    # PC <- m if CC set to <
    OpcodeEntry("JSUB", "48"),   # L <- PC; PC <- m
    OpcodeEntry("LDA", "00"),    # A <- (m..m+2)
    OpcodeEntry("LDCH", "50"),   # A[rightmost byte] <- (m)
    OpcodeEntry("LDL", "08"),    # L <- (m..m+2)
    OpcodeEntry("LDX", "04"),    # X <- (m..m+2)
    OpcodeEntry("MUL", "20"),    # A <- A * (m..m+2)
    OpcodeEntry("OR", "44"),     # A <- A | (m..m+2)
    OpcodeEntry("RD", "D8"),     # A[rightmost byte] <- data from device (m)
    OpcodeEntry("RSUB", "4C"),   # PC <- L
    OpcodeEntry("STA", "0C"),    # m..m+2 <- (A)
    OpcodeEntry("STCH", "54"),   # m <- (A)[rightmost byte]
    OpcodeEntry("STL", "14"),    # m..m+2 <- (L)
    OpcodeEntry("STSW", "E8"),   # m..m+2 <- (SW)
    OpcodeEntry("STX", "10"),    # m..m+2 <- (X)
    OpcodeEntry("SUB", "1C"),    # A <- A - (m..m+2)
    OpcodeEntry("TD", "E0"),     # test device (m)
    OpcodeEntry("TIX", "2C"),    # X <- X + 1; compare X with (m..m+2)
    OpcodeEntry("WD", "DC"),     # device (m) <- (A)[rightmost byte]
)


def default_opcode_table() -> OpcodeTable:
    """Return an OpcodeTable holding the standard SIC instruction set."""
    return OpcodeTable(SIC_OPCODES)
