"""
sicasm Tests - Shared Fixtures
==============================

Source programs and opcode tables used across the test modules.
"""

import pytest
from pathlib import Path


# The smallest program that exercises every stage: two instructions,
# a reserved word, a constant word and END.
COPY_SOURCE = """\
        START   2000
        LDA     FIVE
        STA     ALPHA
ALPHA   RESW    1
FIVE    WORD    5
        END
"""

OPTAB_TEXT = """\
LDA     00
STA     0C
LDCH    50
STCH    54
J       3C
RSUB    4C
"""


@pytest.fixture
def copy_source() -> str:
    return COPY_SOURCE


@pytest.fixture
def optab_text() -> str:
    return OPTAB_TEXT


@pytest.fixture
def program_files(tmp_path: Path) -> tuple[Path, Path]:
    """
    Fixture: write the example program and opcode table to disk.

    Returns (source_path, optab_path).
    """
    source = tmp_path / "copy.asm"
    optab = tmp_path / "optab.txt"
    source.write_text(COPY_SOURCE)
    optab.write_text(OPTAB_TEXT)
    return source, optab
