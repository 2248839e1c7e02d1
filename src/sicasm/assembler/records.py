"""
Object Program Record Definitions
=================================

An assembled program is written as three kinds of text records, one per
line, with ``^`` separating the fields:

```
H^PROG  ^002000^00000C               Header: name, start address, length
T^002000^09^002009^0C2006^000005     Text: start address, byte count, code...
E^002000                             End: first executable address
```

Record Formats
--------------
- **Header**: ``H^<name, 6 chars space-padded>^<start, 6 hex>^<length, 6 hex>``
- **Text**: ``T^<start, 6 hex>^<length, 2 hex>^<fragment>^<fragment>...``
  Each fragment is the object code of one statement. The byte count is
  half the number of hex digits across all fragments.
- **End**: ``E^<address, 6 hex>``
"""

from dataclasses import dataclass, field
from typing import Optional

from sicasm.errors import AssemblySyntaxError, SourceLocation


FIELD_SEPARATOR = "^"
PROGRAM_NAME_WIDTH = 6


# =============================================================================
# Record Types
# =============================================================================

@dataclass(frozen=True)
class HeaderRecord:
    """
    Header record.

    Attributes:
        program_name: Name of the program (padded/truncated to 6 chars)
        start_address: Load address from START
        program_length: Length of the program in bytes
    """
    program_name: str
    start_address: int
    program_length: int

    def to_text(self) -> str:
        name = self.program_name[:PROGRAM_NAME_WIDTH].ljust(PROGRAM_NAME_WIDTH)
        return f"H^{name}^{self.start_address:06X}^{self.program_length:06X}"


@dataclass
class TextRecord:
    """
    Text record holding object code for consecutive statements.

    Attributes:
        start_address: Address of the first fragment
        fragments: Object code of each statement, as hex strings
    """
    start_address: int
    fragments: list[str] = field(default_factory=list)

    @property
    def byte_length(self) -> int:
        return sum(len(fragment) // 2 for fragment in self.fragments)

    @property
    def code(self) -> str:
        """All fragments concatenated."""
        return "".join(self.fragments)

    def to_text(self) -> str:
        body = "".join(FIELD_SEPARATOR + fragment for fragment in self.fragments)
        return f"T^{self.start_address:06X}^{self.byte_length:02X}{body}"


@dataclass(frozen=True)
class EndRecord:
    """
    End record.

    Attributes:
        first_executable_address: Where execution begins
    """
    first_executable_address: int

    def to_text(self) -> str:
        return f"E^{self.first_executable_address:06X}"


@dataclass
class ObjectProgram:
    """A complete object program: header, text records and end record."""
    header: HeaderRecord
    text_records: list[TextRecord] = field(default_factory=list)
    end: Optional[EndRecord] = None

    def records(self) -> list:
        result: list = [self.header, *self.text_records]
        if self.end is not None:
            result.append(self.end)
        return result

    def to_text(self) -> str:
        return "".join(record.to_text() + "\n" for record in self.records())

    def code_bytes(self) -> int:
        """Total bytes of object code across all text records."""
        return sum(record.byte_length for record in self.text_records)


# =============================================================================
# Reading Object Programs
# =============================================================================

def parse_object_program(text: str, filename: str = "<object>") -> ObjectProgram:
    """
    Read object program text back into records.

    Lines that do not start with a record letter (such as listing lines
    that precede the records in assembler output) are skipped.

    Raises:
        AssemblySyntaxError: If a record is malformed, a Text record's
                             declared length disagrees with its code, or
                             there is no Header record
    """
    header: Optional[HeaderRecord] = None
    text_records: list[TextRecord] = []
    end: Optional[EndRecord] = None

    for line_number, line in enumerate(text.splitlines(), start=1):
        if len(line) < 2 or line[1] != FIELD_SEPARATOR or line[0] not in "HTE":
            continue

        location = SourceLocation(filename, line_number)
        fields = line.split(FIELD_SEPARATOR)
        kind = fields[0]

        try:
            if kind == "H":
                if len(fields) != 4:
                    raise ValueError("header needs name, start and length")
                header = HeaderRecord(
                    program_name=fields[1].rstrip(),
                    start_address=int(fields[2], 16),
                    program_length=int(fields[3], 16),
                )
            elif kind == "T":
                if len(fields) < 3:
                    raise ValueError("text record needs start and length")
                record = TextRecord(int(fields[1], 16), fields[3:])
                declared = int(fields[2], 16)
                if declared != record.byte_length:
                    raise ValueError(
                        f"declared length {declared:02X} but code is "
                        f"{record.byte_length:02X} bytes"
                    )
                text_records.append(record)
            else:
                if len(fields) != 2:
                    raise ValueError("end record needs one address")
                end = EndRecord(int(fields[1], 16))
        except ValueError as e:
            raise AssemblySyntaxError(
                f"malformed {kind} record: {e}",
                location=location,
                source_line=line,
            ) from None

    if header is None:
        raise AssemblySyntaxError(f"{filename}: no header record")

    return ObjectProgram(header=header, text_records=text_records, end=end)
