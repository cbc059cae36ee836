"""
SIC Assembler - Pass One
========================

Pass one assigns an address to every source line before any code is
generated. Because every label has an address once this pass finishes,
pass two can resolve forward references (a label used before the line
that defines it) without backpatching.

Algorithm
---------
1. If the first line is a START directive, its operand is the hexadecimal
   load address. The START line is kept apart from the listing as the
   "start entry" so pass two can read the program name from it.
   Otherwise the location counter starts at zero and the first line is
   an ordinary line.
2. Every following line up to END is recorded in the intermediate listing
   at the current location counter. Its label, if any, is entered in the
   symbol table at that address. The counter then advances:

       opcode in OPTAB   3
       WORD              3
       BYTE              len(operand) - 3
       RESW              3 * operand
       RESB              operand
       anything else     0

3. The END line is appended last, at the final location counter, as the
   end-of-program marker.
4. Program length = final location counter - start address.

The result of the pass is a single Pass1Result value that pass two
consumes; nothing is shared between runs.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from itertools import chain
from typing import Optional
import logging

from sicasm.config import AssemblerConfig, DuplicatePolicy
from sicasm.errors import AssemblerError, DirectiveError, DuplicateSymbolError
from sicasm.assembler.opcodes import OpcodeTable
from sicasm.assembler.source import (
    BYTE,
    END,
    RESB,
    RESW,
    START,
    WORD,
    SourceLine,
    iter_source_lines,
    split_byte_literal,
)


logger = logging.getLogger(__name__)

INSTRUCTION_SIZE = 3  # every SIC instruction and WORD is 3 bytes
MAX_ADDRESS = 0xFFFFFF  # widest value a 6-digit header field can hold


# =============================================================================
# Location Counter
# =============================================================================

class LocationCounter:
    """
    Running address pointer for pass one.

    The counter only moves forward; each line advances it by the number of
    bytes the line occupies in memory.
    """

    def __init__(self, start: int = 0):
        self.start = start
        self.value = start

    def __int__(self) -> int:
        return self.value

    def __repr__(self) -> str:
        return f"LocationCounter(start={self.start:04X}, value={self.value:04X})"

    def advance(self, size: int) -> int:
        """Move the counter forward by `size` bytes and return the new value."""
        self.value += size
        if self.value > MAX_ADDRESS:
            raise AssemblerError(
                f"location counter overflow: {self.value:X} exceeds {MAX_ADDRESS:X}"
            )
        return self.value

    @property
    def length(self) -> int:
        """Bytes spanned since the start address."""
        return self.value - self.start


def _parse_count(line: SourceLine) -> int:
    """Parse a decimal, non-negative RESW/RESB operand."""
    try:
        count = int(line.operand, 10)
    except ValueError:
        raise DirectiveError(
            f"{line.mnemonic} operand '{line.operand}' is not a decimal number",
            location=line.operand_location(),
            source_line=line.text,
        ) from None
    if count < 0:
        raise DirectiveError(
            f"{line.mnemonic} cannot reserve a negative amount ({count})",
            location=line.operand_location(),
            source_line=line.text,
        )
    return count


def line_size(line: SourceLine, optab: OpcodeTable) -> int:
    """
    Return the number of bytes a source line occupies.

    Raises:
        DirectiveError: If a BYTE/RESW/RESB operand is unusable
    """
    mnemonic = line.mnemonic
    if mnemonic in optab or mnemonic == WORD:
        return INSTRUCTION_SIZE
    if mnemonic == BYTE:
        split_byte_literal(line)
        # Prefix letter, opening quote and closing quote carry no data
        return len(line.operand) - 3
    if mnemonic == RESW:
        return INSTRUCTION_SIZE * _parse_count(line)
    if mnemonic == RESB:
        return _parse_count(line)
    return 0


# =============================================================================
# Symbol Table
# =============================================================================

class SymbolTable:
    """
    Ordered label -> address mapping.

    Labels are kept in definition order. A redefinition either replaces the
    earlier address (DuplicatePolicy.OVERWRITE, the default) or raises
    DuplicateSymbolError (DuplicatePolicy.ERROR).
    """

    def __init__(self, policy: DuplicatePolicy = DuplicatePolicy.OVERWRITE):
        self._policy = policy
        self._symbols: dict[str, int] = {}

    def define(self, label: str, address: int,
               line: Optional[SourceLine] = None) -> None:
        """
        Enter a label at an address.

        Raises:
            DuplicateSymbolError: Under DuplicatePolicy.ERROR, if already defined
        """
        if label in self._symbols:
            previous = self._symbols[label]
            if self._policy is DuplicatePolicy.ERROR:
                raise DuplicateSymbolError(
                    label,
                    previous,
                    location=line.location if line else None,
                    source_line=line.text if line else None,
                )
            logger.warning(
                f"Label '{label}' redefined: {previous:04X} -> {address:04X}"
            )
        self._symbols[label] = address
        logger.debug(f"Symbol {label} = {address:04X}")

    def lookup(self, label: str) -> Optional[int]:
        """Return the address of a label, or None if undefined."""
        return self._symbols.get(label)

    def __contains__(self, label: str) -> bool:
        return label in self._symbols

    def __getitem__(self, label: str) -> int:
        return self._symbols[label]

    def __iter__(self) -> Iterator[str]:
        return iter(self._symbols)

    def __len__(self) -> int:
        return len(self._symbols)

    def items(self):
        return self._symbols.items()

    def as_dict(self) -> dict[str, int]:
        """Return a copy of the table as a plain dict."""
        return dict(self._symbols)

    def render(self) -> list[str]:
        """Symbol table lines: LABEL<TAB>AAAA."""
        return [f"{label}\t{address:04X}" for label, address in self._symbols.items()]


# =============================================================================
# Pass One Result
# =============================================================================

@dataclass(frozen=True)
class IntermediateEntry:
    """
    One line of the intermediate listing.

    Attributes:
        address: Location counter value when the line was scanned
        line: The parsed source line
    """
    address: int
    line: SourceLine

    def render(self) -> str:
        """Listing line: AAAA<TAB>LABEL<TAB>MNEMONIC<TAB>OPERAND."""
        return f"{self.address:04X}{self.line.fields()}"


@dataclass(frozen=True)
class Program:
    """
    Program metadata for the header record.

    Attributes:
        name: Program name from the START label ("" without START)
        start: Load address
        length: Final location counter minus start
    """
    name: str
    start: int
    length: int


@dataclass
class Pass1Result:
    """
    Everything pass one produces, handed to pass two as one value.

    Attributes:
        program: Name, start address and length
        symbols: Completed symbol table
        entries: Intermediate listing in scan order; the END line, if any,
                 is the last entry
        start_entry: The START line, kept apart from `entries`
        end_address: Final location counter value
    """
    program: Program
    symbols: SymbolTable
    entries: list[IntermediateEntry] = field(default_factory=list)
    start_entry: Optional[IntermediateEntry] = None
    end_address: int = 0

    @property
    def end_entry(self) -> Optional[IntermediateEntry]:
        """The END marker entry, or None when the source had no END line."""
        if self.entries and self.entries[-1].line.mnemonic == END:
            return self.entries[-1]
        return None

    def listing(self) -> list[str]:
        """Intermediate listing lines, START line first."""
        lines = []
        if self.start_entry is not None:
            lines.append(self.start_entry.render())
        lines.extend(entry.render() for entry in self.entries)
        return lines


# =============================================================================
# Pass One
# =============================================================================

def _parse_start(line: SourceLine) -> int:
    """Parse the hexadecimal START operand."""
    try:
        start = int(line.operand, 16)
    except ValueError:
        raise DirectiveError(
            f"START address '{line.operand}' is not hexadecimal",
            location=line.operand_location(),
            source_line=line.text,
        ) from None
    if not 0 <= start <= MAX_ADDRESS:
        raise DirectiveError(
            f"START address {line.operand} is out of range",
            location=line.operand_location(),
            source_line=line.text,
        )
    return start


def pass_one(lines: Iterable[str], optab: OpcodeTable,
             config: Optional[AssemblerConfig] = None,
             filename: str = "<input>") -> Pass1Result:
    """
    Run pass one over raw source lines.

    Args:
        lines: Raw source lines in program order
        optab: Opcode table used to recognise instructions
        config: Run policies (defaults to AssemblerConfig())
        filename: Name used in error messages

    Returns:
        The intermediate listing, symbol table and program metadata

    Raises:
        MalformedSourceLine: If a line before END does not have 3 fields
        DirectiveError: If a directive operand is unusable
        DuplicateSymbolError: Under DuplicatePolicy.ERROR
        AssemblerError: If the source holds no assembly lines
    """
    config = config or AssemblerConfig()
    source = iter_source_lines(lines, filename)

    first = next(source, None)
    if first is None:
        raise AssemblerError(f"{filename}: source program is empty")

    start_entry = None
    if first.mnemonic == START:
        start = _parse_start(first)
        start_entry = IntermediateEntry(start, first)
        name = first.label if first.has_label else ""
        remaining = source
        logger.debug(f"Program '{name}' starts at {start:04X}")
    else:
        start = 0
        name = ""
        remaining = chain([first], source)
        logger.debug("No START directive, assembling from address 0000")

    locctr = LocationCounter(start)
    symbols = SymbolTable(config.duplicate_labels)
    entries: list[IntermediateEntry] = []
    end_line = None

    for line in remaining:
        if line.mnemonic == END:
            end_line = line
            break

        entries.append(IntermediateEntry(locctr.value, line))

        if line.has_label:
            symbols.define(line.label, locctr.value, line)

        size = line_size(line, optab)
        if size == 0 and line.mnemonic not in (RESW, RESB, BYTE):
            logger.warning(
                f"{line.location}: unknown mnemonic '{line.mnemonic}' "
                f"occupies no space"
            )
        locctr.advance(size)

    if end_line is not None:
        entries.append(IntermediateEntry(locctr.value, end_line))
    else:
        logger.warning(f"{filename}: no END directive, program ends at end of input")

    program = Program(name, start, locctr.length)
    logger.debug(
        f"Pass one complete: {len(entries)} lines, {len(symbols)} symbols, "
        f"length {program.length:06X}"
    )

    return Pass1Result(
        program=program,
        symbols=symbols,
        entries=entries,
        start_entry=start_entry,
        end_address=locctr.value,
    )
