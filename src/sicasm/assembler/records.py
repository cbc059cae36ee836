"""
Object Program Record Definitions
=================================

This module defines the records of the object program written by pass two.
An object program is a Header record, zero or more Text records in
ascending address order, and one End record.

Record Format
-------------
Fields are separated by a "^" delimiter followed by a space. Addresses and
lengths are six hexadecimal digits.

**Header**:
    H^ COPY^ 001000^ 000009
    name, start address, program length in bytes

**Text**:
    T^ 001000^ 001006^ 181006^ 000005^
    start address, then one hex code unit per instruction or data item;
    every unit is followed by the delimiter. At most 30 bytes (60 hex
    digits) of code per record.

**End**:
    E^ 001000
    address where execution begins

The record classes validate their own fields, so a record that violates the
format (a seven-digit address, 31 bytes of text) cannot be constructed.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union
import string


MAX_TEXT_BYTES = 30
MAX_FIELD_VALUE = 0xFFFFFF  # six hex digits
DELIMITER = "^ "


class RecordType(Enum):
    """Object record type tags."""
    HEADER = "H"
    TEXT = "T"
    END = "E"


def _check_field(name: str, value: int) -> None:
    if not 0 <= value <= MAX_FIELD_VALUE:
        raise ValueError(f"{name} {value:#x} does not fit in six hex digits")


def unit_size(unit: str) -> int:
    """Return the number of bytes a hex code unit encodes."""
    return len(unit) // 2


# =============================================================================
# Record Types
# =============================================================================

@dataclass(frozen=True)
class HeaderRecord:
    """
    Header record: program name, start address and length.

    Attributes:
        name: Program name ("" when the source has no START line)
        start: Load address
        length: Program length in bytes
    """
    name: str
    start: int
    length: int

    record_type: ClassVar[RecordType] = RecordType.HEADER

    def __post_init__(self):
        _check_field("start address", self.start)
        _check_field("program length", self.length)

    def render(self) -> str:
        return DELIMITER.join([
            self.record_type.value,
            self.name,
            f"{self.start:06X}",
            f"{self.length:06X}",
        ])


@dataclass(frozen=True)
class TextRecord:
    """
    Text record: a contiguous run of object code.

    Attributes:
        start: Address of the first byte in the record
        units: Hex code units in address order
    """
    start: int
    units: tuple[str, ...]

    record_type: ClassVar[RecordType] = RecordType.TEXT

    def __post_init__(self):
        _check_field("text start address", self.start)
        if not self.units:
            raise ValueError("text record must hold at least one code unit")
        for unit in self.units:
            if len(unit) % 2 or not all(ch in string.hexdigits for ch in unit):
                raise ValueError(f"code unit '{unit}' is not a whole number of hex bytes")
        if self.length > MAX_TEXT_BYTES:
            raise ValueError(
                f"text record at {self.start:06X} holds {self.length} bytes "
                f"(limit {MAX_TEXT_BYTES})"
            )

    @property
    def length(self) -> int:
        """Total bytes of object code in the record."""
        return sum(unit_size(unit) for unit in self.units)

    @property
    def end(self) -> int:
        """Address one past the last byte of the record."""
        return self.start + self.length

    def to_bytes(self) -> bytes:
        return bytes.fromhex("".join(self.units))

    def render(self) -> str:
        fields = [self.record_type.value, f"{self.start:06X}", *self.units]
        return "".join(f"{value}{DELIMITER}" for value in fields)


@dataclass(frozen=True)
class EndRecord:
    """
    End record: address of the first instruction to execute.

    Attributes:
        address: Execution start address
    """
    address: int

    record_type: ClassVar[RecordType] = RecordType.END

    def __post_init__(self):
        _check_field("execution address", self.address)

    def render(self) -> str:
        return DELIMITER.join([self.record_type.value, f"{self.address:06X}"])


ObjectRecord = Union[HeaderRecord, TextRecord, EndRecord]


def render_records(records: list[ObjectRecord]) -> list[str]:
    """Render an object program, one line per record."""
    return [record.render() for record in records]
