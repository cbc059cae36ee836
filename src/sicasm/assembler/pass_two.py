"""
SIC Assembler - Pass Two
========================

Pass two walks the intermediate listing produced by pass one (the source
is not read again) and generates the object program: one Header record,
Text records carrying the generated code, and one End record.

Code Units
----------
    instruction   opcode + 4-digit operand address     e.g. 181006
    WORD          6-digit value (24-bit two's complement)  e.g. 000005
    BYTE          literal bytes: X'F1' -> F1, C'EOF' -> 454F46
    RESW / RESB   no code; ends the current text record

Text Record Assembly
--------------------
Code units are collected into a text record with a small state machine:

    NoOpenRecord --(code unit)--> Accumulating(start, bytes)
    Accumulating --(unit would pass 30 bytes)--> flush, reopen at unit
    Accumulating --(reaches 30 bytes)--> flush --> NoOpenRecord
    Accumulating --(RESW/RESB)--> flush --> NoOpenRecord
    Accumulating --(end of listing)--> flush --> NoOpenRecord

Reserved space always ends a record because a loader copies each text
record into consecutive memory and has no bytes to write for a gap.
"""

from typing import Optional
import logging

from sicasm.config import AssemblerConfig
from sicasm.errors import AssemblerError, DirectiveError, UndefinedSymbolError
from sicasm.assembler.opcodes import OpcodeTable
from sicasm.assembler.pass_one import IntermediateEntry, Pass1Result
from sicasm.assembler.records import (
    MAX_TEXT_BYTES,
    EndRecord,
    HeaderRecord,
    ObjectRecord,
    TextRecord,
    unit_size,
)
from sicasm.assembler.source import (
    BYTE,
    END,
    NO_OPERAND,
    RESB,
    RESW,
    WORD,
    SourceLine,
    encode_byte_literal,
    find_similar,
)


logger = logging.getLogger(__name__)

MAX_OPERAND_ADDRESS = 0xFFFF  # 4 hex digits in an instruction unit
WORD_MIN = -(1 << 23)
WORD_MAX = (1 << 24) - 1


# =============================================================================
# Text Record Builder
# =============================================================================

class TextRecordBuilder:
    """
    Accumulates code units into TextRecords of at most 30 bytes.

    The builder is either idle (no open record) or accumulating units for a
    record that starts at `start`. Finished records are appended to
    `records` in the order they are flushed.
    """

    def __init__(self, limit: int = MAX_TEXT_BYTES):
        self.limit = limit
        self.records: list[TextRecord] = []
        self.start: Optional[int] = None
        self.units: list[str] = []
        self.length = 0

    @property
    def is_open(self) -> bool:
        return self.start is not None

    def add(self, address: int, unit: str) -> None:
        """Append one code unit that will load at `address`."""
        size = unit_size(unit)
        if self.is_open and self.length + size > self.limit:
            self.flush()
        if not self.is_open:
            self.start = address
        self.units.append(unit)
        self.length += size
        if self.length >= self.limit:
            self.flush()

    def add_bytes(self, address: int, payload: str) -> None:
        """Append a hex payload of any size, splitting it at the record limit."""
        step = self.limit * 2
        for offset in range(0, len(payload), step):
            self.add(address + offset // 2, payload[offset:offset + step])

    def flush(self) -> None:
        """Close the open record, if any, and return to the idle state."""
        if not self.is_open:
            return
        record = TextRecord(self.start, tuple(self.units))
        logger.debug(f"Text record {record.start:06X}: {record.length} bytes")
        self.records.append(record)
        self.start = None
        self.units = []
        self.length = 0


# =============================================================================
# Operand Resolution
# =============================================================================

def resolve_operand(line: SourceLine, result: Pass1Result,
                    config: AssemblerConfig) -> int:
    """
    Return the address an instruction operand refers to.

    A "-" operand means no operand and resolves to 0. An undefined label
    resolves to 0 under the lenient policy and raises under the strict one.

    Raises:
        UndefinedSymbolError: Strict policy, label never defined
        AssemblerError: Address does not fit in the 16-bit address field
    """
    operand = line.operand
    if operand == NO_OPERAND:
        return 0

    address = result.symbols.lookup(operand)
    if address is None:
        if config.strict_symbols:
            raise UndefinedSymbolError(
                operand,
                location=line.operand_location(),
                source_line=line.text,
                similar_symbols=find_similar(operand, result.symbols),
            )
        logger.warning(f"{line.location}: undefined symbol '{operand}', using 0000")
        return 0

    if address > MAX_OPERAND_ADDRESS:
        raise AssemblerError(
            f"address {address:X} of '{operand}' does not fit in 4 hex digits",
            location=line.operand_location(),
            source_line=line.text,
        )
    return address


def encode_word(line: SourceLine) -> str:
    """
    Return the 6-digit code unit for a WORD constant.

    Raises:
        DirectiveError: If the operand is not a decimal integer in 24-bit range
    """
    try:
        value = int(line.operand, 10)
    except ValueError:
        raise DirectiveError(
            f"WORD operand '{line.operand}' is not a decimal number",
            location=line.operand_location(),
            source_line=line.text,
        ) from None
    if not WORD_MIN <= value <= WORD_MAX:
        raise DirectiveError(
            f"WORD value {value} does not fit in 24 bits",
            location=line.operand_location(),
            source_line=line.text,
        )
    return f"{value & 0xFFFFFF:06X}"


# =============================================================================
# Pass Two
# =============================================================================

def header_record(result: Pass1Result) -> HeaderRecord:
    """Build the Header record from the START entry and program length."""
    if result.start_entry is not None:
        return HeaderRecord(result.program.name, result.start_entry.address,
                            result.program.length)
    return HeaderRecord("", 0, result.program.length)


def _is_end(entry: IntermediateEntry) -> bool:
    line = entry.line
    return line.mnemonic == END or line.operand == END


def pass_two(result: Pass1Result, optab: OpcodeTable,
             config: Optional[AssemblerConfig] = None) -> list[ObjectRecord]:
    """
    Generate the object program from a completed pass one.

    Args:
        result: Output of pass_one(); its symbol table must be complete
        optab: The opcode table pass one used
        config: Run policies (defaults to AssemblerConfig())

    Returns:
        Header record, Text records in address order, End record

    Raises:
        UndefinedSymbolError: Strict policy and an operand label is undefined
        DirectiveError: If a WORD or BYTE operand is unusable
    """
    config = config or AssemblerConfig()
    records: list[ObjectRecord] = [header_record(result)]
    text = TextRecordBuilder()

    for entry in result.entries:
        if _is_end(entry):
            break

        line = entry.line
        mnemonic = line.mnemonic

        if mnemonic in optab:
            address = resolve_operand(line, result, config)
            text.add(entry.address, f"{optab[mnemonic]}{address:04X}")
        elif mnemonic == WORD:
            text.add(entry.address, encode_word(line))
        elif mnemonic == BYTE:
            payload = encode_byte_literal(line)
            if payload:
                text.add_bytes(entry.address, payload)
        elif mnemonic in (RESW, RESB):
            text.flush()

    text.flush()
    records.extend(text.records)
    records.append(EndRecord(result.program.start))

    logger.debug(f"Pass two complete: {len(text.records)} text records")
    return records
