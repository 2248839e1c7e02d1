"""
Opcode Table (OPTAB)
====================

The instruction set is not built into the assembler: it is loaded from a
plain text table, one instruction per line:

```
LDA     00
STA     0C
LDCH    50
```

Each line must split into exactly two whitespace-separated tokens,
``MNEMONIC CODE``. Anything else (blank lines, three-token lines, lone
words) is skipped without complaint. Classic tables also list the
directives (``START *``, ``END *``); those entries load like any other,
but the passes always treat directive names as directives.

Every instruction is three bytes wide: a one-byte opcode followed by an
optional two-byte address.
"""

from pathlib import Path
from typing import Iterable, Iterator, Optional
import logging

from sicasm.errors import ErrorCollector, UnreadableInputError

logger = logging.getLogger(__name__)


# =============================================================================
# Directives
# =============================================================================

DIRECTIVES = frozenset({"START", "END", "WORD", "BYTE", "RESW", "RESB"})

# Directives that reserve or describe storage but never produce object code
NO_CODE_DIRECTIVES = frozenset({"START", "END", "RESW", "RESB"})


# =============================================================================
# Opcode Table
# =============================================================================

class OpcodeTable:
    """
    Mapping of instruction mnemonics to machine-op hex codes.

    Mnemonics are case-sensitive and unique; a later line for the same
    mnemonic replaces the earlier one. Codes are kept exactly as written
    in the table so that the emitted object code matches it digit for digit.
    """

    def __init__(self, entries: Optional[dict[str, str]] = None):
        self._entries: dict[str, str] = dict(entries or {})

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "OpcodeTable":
        """Build a table from an iterable of text lines."""
        table = cls()
        for line_number, line in enumerate(lines, start=1):
            parts = line.split()
            if len(parts) != 2:
                if parts:
                    logger.debug(f"OPTAB line {line_number} ignored: {line.rstrip()!r}")
                continue
            mnemonic, code = parts
            table._entries[mnemonic] = code
        logger.debug(f"Loaded {len(table)} OPTAB entries")
        return table

    @classmethod
    def from_file(cls, path: str | Path) -> "OpcodeTable":
        """
        Load a table from a file.

        Raises:
            UnreadableInputError: If the file cannot be opened or decoded
        """
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return cls.from_lines(f)
        except (OSError, UnicodeDecodeError) as e:
            raise UnreadableInputError(str(path), _describe_os_error(e)) from e

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def is_instruction(self, mnemonic: str) -> bool:
        """True if mnemonic is a machine instruction (not a directive)."""
        return mnemonic in self._entries and mnemonic not in DIRECTIVES

    def code_for(self, mnemonic: str) -> str:
        """Return the hex opcode for a mnemonic (KeyError if absent)."""
        return self._entries[mnemonic]

    def get(self, mnemonic: str, default: Optional[str] = None) -> Optional[str]:
        return self._entries.get(mnemonic, default)

    @property
    def mnemonics(self) -> list[str]:
        return list(self._entries)

    def as_dict(self) -> dict[str, str]:
        return dict(self._entries)

    def __contains__(self, mnemonic: object) -> bool:
        return mnemonic in self._entries

    def __getitem__(self, mnemonic: str) -> str:
        return self._entries[mnemonic]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"OpcodeTable({len(self)} entries)"


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_optab(text: str) -> OpcodeTable:
    """
    Parse opcode table text.

    Args:
        text: Table contents, one ``MNEMONIC CODE`` pair per line

    Returns:
        The loaded table (malformed lines are skipped)
    """
    return OpcodeTable.from_lines(text.splitlines())


def load_optab(path: str | Path, errors: Optional[ErrorCollector] = None) -> OpcodeTable:
    """
    Load an opcode table from a file, failing soft.

    An unreadable file yields an empty table. The failure is recorded in
    ``errors`` (when given) so that the caller can report it.

    Args:
        path: Path to the opcode table file
        errors: Collector that receives an UnreadableInputError on failure

    Returns:
        The loaded table, or an empty table if the file could not be read
    """
    try:
        return OpcodeTable.from_file(path)
    except UnreadableInputError as e:
        logger.debug(f"Failed to load OPTAB: {e}")
        if errors is not None:
            errors.add(e)
        return OpcodeTable()


def _describe_os_error(error: Exception) -> str:
    """Short reason text for an I/O failure."""
    if isinstance(error, FileNotFoundError):
        return "file not found"
    if isinstance(error, PermissionError):
        return "permission denied"
    if isinstance(error, IsADirectoryError):
        return "is a directory"
    if isinstance(error, UnicodeDecodeError):
        return "not a text file"
    return error.strerror if getattr(error, "strerror", None) else str(error)
