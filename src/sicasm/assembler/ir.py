"""
Intermediate Representation and Symbol Table
=============================================

Pass 1 turns each source statement into an ``IRRecord`` holding the
address the location counter had when the statement was reached. The
records, in source order, are the intermediate file handed to pass 2.

Intermediate File Format
------------------------
One tab-separated line per record, every column always present:

```
ADDR    LABEL   OPCODE  OPERAND
2000            START   2000
2000            LDA     FIVE
2006    ALPHA   RESW    1
        END
```

The END record has a blank address: it marks the end of the program
rather than a location. Because empty columns are kept, the text can be
read back with ``parse_intermediate`` without guessing which field is
the label.
"""

from dataclasses import dataclass
from typing import Iterator, Optional
import difflib
import logging

from sicasm.errors import AssemblySyntaxError, SourceLocation

logger = logging.getLogger(__name__)


# =============================================================================
# Intermediate Record
# =============================================================================

@dataclass(frozen=True)
class IRRecord:
    """
    One statement after pass 1.

    Attributes:
        address: Location counter at the start of the statement
                 (None for the END sentinel)
        opcode: Mnemonic or directive name
        label: Label field, or None
        operand: Operand field, or None
        line_number: Originating source line (0 when read back from text)
        source_line: Originating source text, for diagnostics
    """
    address: Optional[int]
    opcode: str
    label: Optional[str] = None
    operand: Optional[str] = None
    line_number: int = 0
    source_line: Optional[str] = None

    def to_columns(self) -> list[str]:
        """Return the four listing columns as text."""
        return [
            f"{self.address:04X}" if self.address is not None else "",
            self.label or "",
            self.opcode,
            self.operand or "",
        ]

    def to_line(self) -> str:
        return "\t".join(self.to_columns())


def render_intermediate(records: list[IRRecord]) -> str:
    """Render IR records as intermediate file text."""
    return "".join(record.to_line() + "\n" for record in records)


def parse_intermediate(text: str, filename: str = "<intermediate>") -> list[IRRecord]:
    """
    Read intermediate file text back into IR records.

    Lines may carry a fifth column (object code from a pass 2 listing);
    it is ignored.

    Raises:
        AssemblySyntaxError: If a line has fewer than three columns or a
                             malformed address
    """
    records = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue

        columns = line.split("\t")
        if len(columns) < 3:
            raise AssemblySyntaxError(
                "intermediate line needs ADDRESS, LABEL and OPCODE columns",
                location=SourceLocation(filename, line_number),
                source_line=line,
            )
        while len(columns) < 4:
            columns.append("")

        address_text, label, opcode, operand = (c.strip() for c in columns[:4])
        try:
            address = int(address_text, 16) if address_text else None
        except ValueError:
            raise AssemblySyntaxError(
                f"invalid address '{address_text}' in intermediate file",
                location=SourceLocation(filename, line_number, 1),
                source_line=line,
            ) from None

        records.append(IRRecord(
            address=address,
            opcode=opcode,
            label=label or None,
            operand=operand or None,
            line_number=line_number,
            source_line=line,
        ))
    return records


# =============================================================================
# Symbol Table
# =============================================================================

class SymbolTable:
    """
    Label to address mapping built by pass 1.

    Symbols keep the order in which they were first defined. Redefining
    a label replaces its address (the last definition wins); the caller
    decides whether that deserves a diagnostic.
    """

    def __init__(self) -> None:
        self._addresses: dict[str, int] = {}
        self._locations: dict[str, SourceLocation] = {}

    def define(self, label: str, address: int,
               location: Optional[SourceLocation] = None) -> Optional[SourceLocation]:
        """
        Enter a label.

        Returns:
            The location of the previous definition if the label was
            already defined (or a placeholder location if that was not
            recorded), else None
        """
        previous = None
        if label in self._addresses:
            previous = self._locations.get(label, SourceLocation("<unknown>", 0))

        self._addresses[label] = address
        if location is not None:
            self._locations[label] = location

        logger.debug(f"Symbol {label} = {address:04X}")
        return previous

    def lookup(self, label: str) -> Optional[int]:
        return self._addresses.get(label)

    def location_of(self, label: str) -> Optional[SourceLocation]:
        return self._locations.get(label)

    def similar(self, name: str, limit: int = 3) -> list[str]:
        """Return defined labels that look like ``name`` (typo hints)."""
        return difflib.get_close_matches(name, list(self._addresses), n=limit)

    def as_dict(self) -> dict[str, int]:
        return dict(self._addresses)

    def dump(self) -> str:
        """Render as ``LABEL<tab>ADDR`` lines in definition order."""
        return "".join(f"{label}\t{address:04X}\n" for label, address in self._addresses.items())

    def __contains__(self, label: object) -> bool:
        return label in self._addresses

    def __getitem__(self, label: str) -> int:
        return self._addresses[label]

    def __iter__(self) -> Iterator[str]:
        return iter(self._addresses)

    def __len__(self) -> int:
        return len(self._addresses)

    def __repr__(self) -> str:
        return f"SymbolTable({self._addresses!r})"
