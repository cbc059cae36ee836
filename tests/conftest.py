"""
Shared fixtures for the sicasm test suite.
"""

import pytest

from sicasm.assembler import OpcodeTable, load_opcode_table


COPY_OPTAB = """\
LDA 00
ADD 18
"""

COPY_SOURCE = """\
COPY START 1000
- LDA FIVE
- ADD FIVE
FIVE WORD 5
- END COPY
"""


@pytest.fixture
def copy_optab() -> OpcodeTable:
    """The two-instruction table used by the COPY example."""
    return load_opcode_table(COPY_OPTAB.splitlines())


@pytest.fixture
def copy_source() -> list[str]:
    """The COPY example program as source lines."""
    return COPY_SOURCE.splitlines()


@pytest.fixture
def copy_files(tmp_path):
    """COPY example written to disk: (source_path, optab_path)."""
    source = tmp_path / "copy.asm"
    optab = tmp_path / "optab.txt"
    source.write_text(COPY_SOURCE)
    optab.write_text(COPY_OPTAB)
    return source, optab


@pytest.fixture
def copy_text() -> str:
    """The COPY example program as one string."""
    return COPY_SOURCE


@pytest.fixture
def copy_optab_text() -> str:
    """The COPY opcode table as one string."""
    return COPY_OPTAB
