# =============================================================================
# test_assembler.py - Full Assembler Integration Tests
# =============================================================================
# End-to-end tests for the Assembler class: loading inputs, running both
# passes, and writing the three output artifacts.
#
# Test coverage includes:
#   - Assembly from strings, line lists and files
#   - Opcode sources (table, text, lines, built-in default)
#   - I/O failures and error reporting
#   - Runs leave no result behind after a failure
# =============================================================================

import pytest

from sicasm import (
    Assembler,
    AssemblerConfig,
    AssemblerError,
    AssemblerIOError,
    MalformedOpcodeEntry,
    MalformedSourceLine,
    SicAsmError,
    SymbolPolicy,
    UndefinedSymbolError,
    assemble,
    assemble_file,
)
from sicasm.assembler import load_opcode_table


COPY_OBJECT = [
    "H^ COPY^ 001000^ 000009",
    "T^ 001000^ 001006^ 181006^ 000005^ ",
    "E^ 001000",
]


# =============================================================================
# Full Pipeline Tests
# =============================================================================

class TestFullPipeline:
    """Test the complete assembly pipeline from source to object records."""

    def test_assemble_string(self, copy_text, copy_optab_text):
        result = Assembler().assemble_string(copy_text, copy_optab_text)
        assert result.object_code() == COPY_OBJECT
        assert result.symbol_table() == ["FIVE\t1006"]

    def test_assemble_lines_with_table(self, copy_source, copy_optab):
        result = Assembler().assemble_lines(copy_source, copy_optab)
        assert result.program.length == 9
        assert result.symbols["FIVE"] == 0x1006

    def test_opcode_lines(self, copy_text):
        result = Assembler().assemble_string(copy_text, ["LDA 00", "ADD 18"])
        assert result.object_code() == COPY_OBJECT

    def test_default_opcode_table(self, copy_text):
        """Without an opcode source the standard SIC set is used."""
        result = Assembler().assemble_string(copy_text)
        assert result.object_code() == COPY_OBJECT

    def test_listing(self, copy_text, copy_optab_text):
        result = assemble(copy_text, copy_optab_text)
        assert result.listing()[0] == "1000\tCOPY\tSTART\t1000"
        assert result.listing()[-1] == "1009\t-\tEND\tCOPY"

    def test_larger_program(self):
        """A program mixing instructions, data and reserved space."""
        source = """\
. read-print loop
PRINT START 2000
FIRST LDA  ZERO
-     STA  INDEX
LOOP  JSUB WRREC
-     J    LOOP
ZERO  WORD 0
INDEX RESW 1
EOF   BYTE C'EOF'
OUT   BYTE X'05'
BUF   RESB 100
WRREC TD   OUT
-     RSUB -
-     END  FIRST
"""
        result = assemble(source)
        assert result.symbols.as_dict() == {
            "FIRST": 0x2000, "LOOP": 0x2006, "ZERO": 0x200C, "INDEX": 0x200F,
            "EOF": 0x2012, "OUT": 0x2015, "BUF": 0x2017, "WRREC": 0x207B,
        }
        assert result.object_code() == [
            "H^ PRINT^ 002000^ 000081",
            "T^ 002000^ 00200C^ 0C200F^ 48207B^ 3C2006^ 000000^ ",
            "T^ 002012^ 454F46^ 05^ ",
            "T^ 00207B^ E02015^ 4C0000^ ",
            "E^ 002000",
        ]


# =============================================================================
# Configuration
# =============================================================================

class TestConfiguration:
    """Policies passed through AssemblerConfig."""

    SOURCE = "P START 0\n- LDA MISSING\n- END P"

    def test_lenient_by_default(self):
        result = Assembler().assemble_string(self.SOURCE)
        assert result.object_code()[1] == "T^ 000000^ 000000^ "

    def test_strict(self):
        asm = Assembler(AssemblerConfig(undefined_symbols=SymbolPolicy.STRICT))
        with pytest.raises(UndefinedSymbolError):
            asm.assemble_string(self.SOURCE)


# =============================================================================
# File I/O
# =============================================================================

class TestFiles:
    """Reading inputs from and writing outputs to disk."""

    def test_assemble_file(self, copy_files):
        source, optab = copy_files
        result = assemble_file(source, optab)
        assert result.object_code() == COPY_OBJECT

    def test_write_outputs(self, copy_files, tmp_path):
        source, optab = copy_files
        result = Assembler().assemble_file(source, optab)

        result.write_object(tmp_path / "copy.obj")
        result.write_listing(tmp_path / "copy.lst")
        result.write_symbols(tmp_path / "copy.sym")

        assert (tmp_path / "copy.obj").read_text().splitlines() == COPY_OBJECT
        assert (tmp_path / "copy.sym").read_text() == "FIVE\t1006\n"
        assert len((tmp_path / "copy.lst").read_text().splitlines()) == 5

    def test_missing_source(self, tmp_path):
        with pytest.raises(AssemblerIOError) as exc_info:
            assemble_file(tmp_path / "nope.asm")
        assert exc_info.value.path.name == "nope.asm"

    def test_missing_optab(self, copy_files, tmp_path):
        source, _ = copy_files
        with pytest.raises(AssemblerIOError, match="optab.missing"):
            assemble_file(source, tmp_path / "optab.missing")

    def test_io_error_is_sicasm_error(self, tmp_path):
        with pytest.raises(SicAsmError):
            assemble_file(tmp_path / "nope.asm")

    def test_error_names_file(self, tmp_path):
        source = tmp_path / "bad.asm"
        source.write_text("P START 0\n- LDA\n- END P\n")
        with pytest.raises(MalformedSourceLine, match="bad.asm:2"):
            assemble_file(source)


# =============================================================================
# Error Handling
# =============================================================================

class TestErrorHandling:
    """A failed run produces no artifacts."""

    def test_result_cleared_after_failure(self, copy_text, copy_optab_text):
        asm = Assembler()
        asm.assemble_string(copy_text, copy_optab_text)
        assert asm.result is not None

        with pytest.raises(AssemblerError):
            asm.assemble_string("P START 0\n- LDA\n- END P", copy_optab_text)
        assert asm.result is None

    def test_malformed_opcode_table(self, copy_text):
        with pytest.raises(MalformedOpcodeEntry):
            Assembler().assemble_string(copy_text, "LDA 00\nADD\n")

    def test_runs_are_independent(self, copy_text, copy_optab_text):
        """Symbols from one run never leak into the next."""
        asm = Assembler()
        asm.assemble_string(copy_text, copy_optab_text)
        result = asm.assemble_string("P START 0\n- RSUB -\n- END P")
        assert len(result.symbols) == 0

    def test_error_message_format(self):
        with pytest.raises(MalformedSourceLine) as exc_info:
            assemble("P START 0\n- LDA\n- END P")
        message = str(exc_info.value)
        assert message.startswith("<input>:2: error: expected 3 fields")
        assert "    - LDA" in message
        assert "hint:" in message


def test_load_opcodes_passthrough():
    """An existing OpcodeTable is used as is."""
    optab = load_opcode_table(["LDA 00"])
    assert Assembler.load_opcodes(optab) is optab
