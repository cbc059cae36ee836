"""
SIC Assembler - Main Interface
==============================

This module provides the Assembler class, the primary interface for
translating a SIC source program. It loads the opcode table, runs pass one
to completion, then runs pass two over pass one's result.

Example Usage
-------------
>>> from sicasm.assembler import Assembler
>>>
>>> asm = Assembler()
>>> result = asm.assemble_string('''
... COPY START 1000
... -    LDA   FIVE
... -    ADD   FIVE
... FIVE WORD  5
... -    END   COPY
... ''', optab="LDA 00\\nADD 18\\n")
>>>
>>> result.object_code()
['H^ COPY^ 001000^ 000009', 'T^ 001000^ 001006^ 181006^ 000005^ ', 'E^ 001000']
>>> result.symbol_table()
['FIVE\\t1006']

Command-Line Usage
------------------
    $ sicasm copy.asm -t optab.txt -o copy.obj -l copy.lst -s copy.sym
"""

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union
import logging

from sicasm.config import AssemblerConfig
from sicasm.errors import AssemblerIOError
from sicasm.assembler.opcodes import (
    OpcodeTable,
    default_opcode_table,
    load_opcode_table,
)
from sicasm.assembler.pass_one import Pass1Result, Program, SymbolTable, pass_one
from sicasm.assembler.pass_two import pass_two
from sicasm.assembler.records import ObjectRecord, render_records


logger = logging.getLogger(__name__)

OpcodeSource = Union[OpcodeTable, str, Iterable[str], None]


def read_lines(filepath: str | Path) -> list[str]:
    """
    Read a text file into a list of lines.

    Raises:
        AssemblerIOError: If the file cannot be opened or decoded
    """
    filepath = Path(filepath)
    try:
        return filepath.read_text().splitlines()
    except (OSError, UnicodeDecodeError) as e:
        raise AssemblerIOError(filepath, getattr(e, "strerror", None) or str(e)) from e


def _write_lines(filepath: str | Path, lines: list[str]) -> None:
    with open(filepath, "w") as f:
        for line in lines:
            f.write(f"{line}\n")


# =============================================================================
# Assembly Result
# =============================================================================

@dataclass
class AssemblyResult:
    """
    The three artifacts of a successful run.

    Attributes:
        pass1: Intermediate listing, symbol table and program metadata
        records: Object program (Header, Text..., End)
    """
    pass1: Pass1Result
    records: list[ObjectRecord]

    @property
    def program(self) -> Program:
        return self.pass1.program

    @property
    def symbols(self) -> SymbolTable:
        return self.pass1.symbols

    def listing(self) -> list[str]:
        """Intermediate listing lines: AAAA<TAB>LABEL<TAB>MNEMONIC<TAB>OPERAND."""
        return self.pass1.listing()

    def symbol_table(self) -> list[str]:
        """Symbol table lines: LABEL<TAB>AAAA, in definition order."""
        return self.pass1.symbols.render()

    def object_code(self) -> list[str]:
        """Object program lines, one record each."""
        return render_records(self.records)

    def write_listing(self, filepath: str | Path) -> None:
        _write_lines(filepath, self.listing())
        logger.info(f"Wrote listing to {filepath}")

    def write_symbols(self, filepath: str | Path) -> None:
        _write_lines(filepath, self.symbol_table())
        logger.info(f"Wrote symbols to {filepath}")

    def write_object(self, filepath: str | Path) -> None:
        _write_lines(filepath, self.object_code())
        logger.info(f"Wrote {len(self.records)} records to {filepath}")


# =============================================================================
# Assembler
# =============================================================================

class Assembler:
    """
    Two-pass SIC assembler.

    Each call to an assemble_* method is an independent run: it owns its
    own symbol table and intermediate listing, and either returns a
    complete AssemblyResult or raises. A failed run leaves no result
    behind.

    Attributes:
        config: Policies for undefined symbols and duplicate labels
    """

    def __init__(self, config: Optional[AssemblerConfig] = None):
        self.config = config or AssemblerConfig()
        self._result: Optional[AssemblyResult] = None

    # =========================================================================
    # Opcode Table
    # =========================================================================

    @staticmethod
    def load_opcodes(optab: OpcodeSource = None,
                     filename: str = "<optab>") -> OpcodeTable:
        """
        Build an OpcodeTable from any supported opcode source.

        Args:
            optab: An OpcodeTable, opcode file text, an iterable of opcode
                   lines, or None for the standard SIC instruction set
            filename: Name used in error messages
        """
        if optab is None:
            return default_opcode_table()
        if isinstance(optab, OpcodeTable):
            return optab
        if isinstance(optab, str):
            return load_opcode_table(optab.splitlines(), filename)
        return load_opcode_table(optab, filename)

    @classmethod
    def load_opcode_file(cls, filepath: str | Path) -> OpcodeTable:
        """
        Load an opcode table from a file.

        Raises:
            AssemblerIOError: If the file cannot be read
            MalformedOpcodeEntry: If a line is not "MNEMONIC CODE"
        """
        return cls.load_opcodes(read_lines(filepath), str(filepath))

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble_lines(self, lines: Iterable[str], optab: OpcodeSource = None,
                       filename: str = "<input>") -> AssemblyResult:
        """
        Assemble source lines.

        Pass one runs to completion before pass two starts: pass two's
        symbol resolution depends on the finished symbol table.

        Args:
            lines: Raw source lines in program order
            optab: Opcode source (see load_opcodes)
            filename: Name used in error messages

        Returns:
            Listing, symbol table and object records

        Raises:
            AssemblerError: If loading or either pass fails
        """
        self._result = None
        table = self.load_opcodes(optab)

        logger.debug(f"Assembling {filename} with {len(table)} opcodes")
        first = pass_one(lines, table, self.config, filename)
        records = pass_two(first, table, self.config)

        self._result = AssemblyResult(first, records)
        logger.info(
            f"Assembled '{first.program.name}': {first.program.length} bytes "
            f"at {first.program.start:04X}, {len(first.symbols)} symbols"
        )
        return self._result

    def assemble_string(self, source: str, optab: OpcodeSource = None,
                        filename: str = "<input>") -> AssemblyResult:
        """Assemble source code held in a string."""
        return self.assemble_lines(source.splitlines(), optab, filename)

    def assemble_file(self, source_path: str | Path,
                      optab_path: str | Path | None = None) -> AssemblyResult:
        """
        Assemble a source file.

        Args:
            source_path: Path to the assembly program
            optab_path: Path to the opcode table file, or None for the
                        standard SIC instruction set

        Raises:
            AssemblerIOError: If either file cannot be read
            AssemblerError: If assembly fails
        """
        self._result = None
        optab = self.load_opcode_file(optab_path) if optab_path is not None else None
        lines = read_lines(source_path)
        return self.assemble_lines(lines, optab, str(source_path))

    # =========================================================================
    # Output Methods
    # =========================================================================

    @property
    def result(self) -> Optional[AssemblyResult]:
        """The last successful result, or None after a failure."""
        return self._result


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, optab: OpcodeSource = None,
             config: Optional[AssemblerConfig] = None) -> AssemblyResult:
    """
    Convenience function to assemble source code.

    Raises:
        AssemblerError: If assembly fails
    """
    return Assembler(config).assemble_string(source, optab)


def assemble_file(source_path: str | Path, optab_path: str | Path | None = None,
                  config: Optional[AssemblerConfig] = None) -> AssemblyResult:
    """
    Convenience function to assemble a file.

    Raises:
        AssemblerIOError: If a file cannot be read
        AssemblerError: If assembly fails
    """
    return Assembler(config).assemble_file(source_path, optab_path)
