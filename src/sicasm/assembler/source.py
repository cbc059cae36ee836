"""
SIC Source Line Parsing
=======================

A SIC source program is line oriented. Each logical line carries exactly
three whitespace-separated fields:

    LABEL   MNEMONIC   OPERAND

    COPY    START      1000
    -       LDA        FIVE
    FIVE    WORD       5
    -       END        COPY

A "-" in the label column means the line defines no label. A "-" in the
operand column of an instruction means it takes no operand (RSUB).

Blank lines and lines whose first non-blank character is "." are comments
and carry no fields.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
import difflib
import string

from sicasm.errors import DirectiveError, MalformedSourceLine, SourceLocation


NO_LABEL = "-"
NO_OPERAND = "-"
COMMENT_PREFIX = "."

# Directive mnemonics
START = "START"
END = "END"
WORD = "WORD"
BYTE = "BYTE"
RESW = "RESW"
RESB = "RESB"

DIRECTIVES = frozenset({START, END, WORD, BYTE, RESW, RESB})


@dataclass(frozen=True)
class SourceLine:
    """
    One parsed assembly line.

    Attributes:
        label: Label field, or NO_LABEL
        mnemonic: Instruction mnemonic or directive name
        operand: Operand field
        line_number: 1-based line number in the input
        filename: Input name for error messages
        text: The raw line, without its line terminator
    """
    label: str
    mnemonic: str
    operand: str
    line_number: int = 0
    filename: str = "<input>"
    text: str = ""

    @property
    def has_label(self) -> bool:
        return self.label != NO_LABEL

    @property
    def location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.line_number)

    def operand_location(self) -> SourceLocation:
        """Location pointing at the operand column of the raw line."""
        column = self.text.rfind(self.operand) + 1 if self.text else 0
        return SourceLocation(self.filename, self.line_number, max(column, 0))

    def fields(self) -> str:
        """Tab-separated label, mnemonic and operand, as shown in listings."""
        return f"\t{self.label}\t{self.mnemonic}\t{self.operand}"


def is_comment(text: str) -> bool:
    """Return True for blank lines and '.' comment lines."""
    stripped = text.strip()
    return not stripped or stripped.startswith(COMMENT_PREFIX)


def parse_source_line(text: str, line_number: int = 0,
                      filename: str = "<input>") -> SourceLine:
    """
    Split a raw source line into its three fields.

    Raises:
        MalformedSourceLine: If the line does not have exactly three fields
    """
    raw = text.rstrip("\r\n")
    parts = raw.split()
    if len(parts) != 3:
        raise MalformedSourceLine(
            len(parts),
            location=SourceLocation(filename, line_number),
            source_line=raw,
        )

    label, mnemonic, operand = parts
    return SourceLine(label, mnemonic, operand, line_number, filename, raw)


def iter_source_lines(lines: Iterable[str],
                      filename: str = "<input>") -> Iterator[SourceLine]:
    """
    Yield a SourceLine for every non-comment line, keeping line numbers.

    Parsing is lazy, so a malformed line after END is never inspected.
    """
    for line_number, text in enumerate(lines, start=1):
        if is_comment(text):
            continue
        yield parse_source_line(text, line_number, filename)


def find_similar(name: str, candidates, limit: int = 3) -> list[str]:
    """Return up to `limit` candidate names that look like typos of `name`."""
    return difflib.get_close_matches(name, list(candidates), n=limit, cutoff=0.6)


# =============================================================================
# BYTE Literals
# =============================================================================
# A BYTE operand is a quoted literal with a one-letter type prefix:
#
#   C'EOF'    character constant, one byte per character
#   X'F1'     hexadecimal constant, two digits per byte
#
# The two-character prefix and the closing quote are not part of the value.
# =============================================================================

CHAR_LITERAL = "C"
HEX_LITERAL = "X"


def split_byte_literal(line: SourceLine) -> tuple[str, str]:
    """
    Return the (type, payload) of a BYTE operand.

    Raises:
        DirectiveError: If the operand is not a C'...' or X'...' literal
    """
    operand = line.operand
    if len(operand) < 3 or operand[1] != "'" or operand[-1] != "'":
        raise DirectiveError(
            f"malformed BYTE literal '{operand}'",
            location=line.operand_location(),
            hint="write C'text' or X'hexdigits'",
            source_line=line.text,
        )

    kind = operand[0].upper()
    payload = operand[2:-1]
    if kind == HEX_LITERAL:
        if len(payload) % 2 or not all(ch in string.hexdigits for ch in payload):
            raise DirectiveError(
                f"BYTE literal '{operand}' needs an even number of hex digits",
                location=line.operand_location(),
                source_line=line.text,
            )
    elif kind != CHAR_LITERAL:
        raise DirectiveError(
            f"unknown BYTE literal type '{operand[0]}'",
            location=line.operand_location(),
            hint="use C for characters or X for hexadecimal",
            source_line=line.text,
        )
    return kind, payload


def encode_byte_literal(line: SourceLine) -> str:
    """
    Return the object-code hex string for a BYTE operand.

    Character literals become the ASCII codes of their characters;
    hexadecimal literals are emitted as written.
    """
    kind, payload = split_byte_literal(line)
    if kind == CHAR_LITERAL:
        try:
            return payload.encode("latin-1").hex().upper()
        except UnicodeEncodeError:
            raise DirectiveError(
                f"BYTE literal '{line.operand}' has a character outside one byte",
                location=line.operand_location(),
                source_line=line.text,
            ) from None
    return payload.upper()


__all__ = [
    "NO_LABEL",
    "NO_OPERAND",
    "COMMENT_PREFIX",
    "START",
    "END",
    "WORD",
    "BYTE",
    "RESW",
    "RESB",
    "DIRECTIVES",
    "SourceLine",
    "is_comment",
    "parse_source_line",
    "iter_source_lines",
    "find_similar",
    "CHAR_LITERAL",
    "HEX_LITERAL",
    "split_byte_literal",
    "encode_byte_literal",
]
