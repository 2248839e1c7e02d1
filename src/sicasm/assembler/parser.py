"""
Source Line Parser
==================

This module splits assembly source text into ``SourceLine`` statements.
Each non-blank, non-comment line holds up to three fields:

```
ALPHA   RESW    1       label, opcode, operand
        LDA     FIVE    opcode, operand
LATER   RSUB            label, opcode (RSUB is a keyword)
        END             opcode
-       START   1000    "-" is an explicit empty label
LOOP:   RSUB            "LABEL:" marks a label regardless of field count
```

Label Detection
---------------
An explicit marker always wins: a first token ending with ``:`` is a
label, and a first token ``-`` means "no label". Otherwise the line shape
decides, using which of the first two tokens are keywords:

| First token      | Second token     | Fields                           |
|------------------|------------------|----------------------------------|
| not a keyword    | keyword          | label, opcode, operand           |
| keyword          | not a keyword    | opcode, operand                  |
| keyword          | keyword          | label only with 3+ tokens        |
| not a keyword    | not a keyword    | label only with 3+ tokens        |

A keyword is an opcode table mnemonic or one of the directives. A label
that collides with a mnemonic is therefore recognised on a full
``LABEL OPCODE OPERAND`` line (``J  LDA  FIVE``), and can always be
written ``J:`` to remove any doubt.

Tokens after the operand are a trailing comment. A quoted byte constant
such as ``C'HELLO WORLD'`` is a single token even when it contains blanks.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import re

from sicasm.config import AssemblerConfig
from sicasm.assembler.optab import DIRECTIVES, OpcodeTable
from sicasm.errors import SourceLocation, UnreadableInputError


# A quoted C'...' / X'...' constant, or any run of non-blank characters
TOKEN_RE = re.compile(r"[CcXx]'[^']*'|\S+")


# =============================================================================
# Statement Data Class
# =============================================================================

@dataclass(frozen=True)
class SourceLine:
    """
    One assembly statement.

    Attributes:
        line_number: Line in the source file (1-indexed)
        text: The raw source line, without its line terminator
        opcode: Mnemonic or directive name ("" if the line has only a label)
        label: Label field, or None
        operand: Operand field, or None
        filename: Source name for diagnostics
        operand_column: Column where the operand starts (0 if no operand)
    """
    line_number: int
    text: str
    opcode: str
    label: Optional[str] = None
    operand: Optional[str] = None
    filename: str = "<input>"
    operand_column: int = 0

    @property
    def location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.line_number)

    @property
    def operand_location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.line_number, self.operand_column)


# =============================================================================
# Parsing
# =============================================================================

def tokenize(line: str) -> list[tuple[str, int]]:
    """
    Split a line into (token, column) pairs.

    Columns are 1-indexed so they can be used directly in diagnostics.
    """
    return [(m.group(0), m.start() + 1) for m in TOKEN_RE.finditer(line)]


def is_comment_or_blank(line: str, comment_marker: str = ".") -> bool:
    """True if the line is empty, whitespace-only, or a comment."""
    stripped = line.strip()
    return not stripped or stripped.startswith(comment_marker)


def is_keyword(token: str, optab: Optional[OpcodeTable] = None) -> bool:
    """True if token is a directive or an opcode table mnemonic."""
    return token in DIRECTIVES or (optab is not None and token in optab)


def _has_label(tokens: list[tuple[str, int]], optab: Optional[OpcodeTable]) -> bool:
    if len(tokens) < 2:
        return False
    first_is_keyword = is_keyword(tokens[0][0], optab)
    second_is_keyword = is_keyword(tokens[1][0], optab)
    if first_is_keyword != second_is_keyword:
        return second_is_keyword
    return len(tokens) >= 3


def parse_line(
    line: str,
    line_number: int = 1,
    filename: str = "<input>",
    config: Optional[AssemblerConfig] = None,
    optab: Optional[OpcodeTable] = None,
) -> Optional[SourceLine]:
    """
    Parse one line of source.

    Args:
        line: Raw source line
        line_number: Line number for diagnostics
        filename: Source name for diagnostics
        config: Supplies the comment marker and label placeholder
        optab: Opcode table used to tell labels from mnemonics
               (without it only directives are recognised)

    Returns:
        The parsed statement, or None for blank and comment lines
    """
    config = config or AssemblerConfig()
    line = line.rstrip("\r\n")

    if is_comment_or_blank(line, config.comment_marker):
        return None

    tokens = tokenize(line)
    first = tokens[0][0]

    label: Optional[str] = None
    if first == config.label_placeholder:
        rest = tokens[1:]
    elif first.endswith(":") and len(first) > 1:
        label = first[:-1]
        rest = tokens[1:]
    elif _has_label(tokens, optab):
        label = first
        rest = tokens[1:]
    else:
        rest = tokens

    if label == config.label_placeholder:
        label = None

    opcode = rest[0][0] if rest else ""
    operand, operand_column = (rest[1] if len(rest) > 1 else (None, 0))

    return SourceLine(
        line_number=line_number,
        text=line,
        opcode=opcode,
        label=label,
        operand=operand,
        filename=filename,
        operand_column=operand_column,
    )


def parse_source(
    source: str,
    filename: str = "<input>",
    config: Optional[AssemblerConfig] = None,
    optab: Optional[OpcodeTable] = None,
) -> list[SourceLine]:
    """
    Parse a whole program, skipping blank and comment lines.

    Args:
        source: Program text
        filename: Source name for diagnostics
        config: Parsing configuration
        optab: Opcode table used for label detection

    Returns:
        Statements in source order
    """
    statements = []
    for line_number, line in enumerate(source.splitlines(), start=1):
        stmt = parse_line(line, line_number, filename, config, optab)
        if stmt is not None:
            statements.append(stmt)
    return statements


def read_source(path: str | Path) -> str:
    """
    Read a source file.

    Raises:
        UnreadableInputError: If the file cannot be opened or decoded
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError as e:
        raise UnreadableInputError(str(path), "file not found") from e
    except UnicodeDecodeError as e:
        raise UnreadableInputError(str(path), "not a text file") from e
    except OSError as e:
        raise UnreadableInputError(str(path), e.strerror or str(e)) from e
