"""
Operand Parsing
===============

Numeric and constant operands of the storage directives. Both passes use
these functions so that the size pass 1 reserves for a statement always
matches the object code pass 2 emits for it.

Each function raises ``ValueError`` whose message describes what the
operand should have looked like; the passes wrap it in an
``InvalidOperandError`` carrying the source location.
"""

from typing import Optional
import string

# Addresses are 16 bits: the listing and instruction address field both
# use 4 hex digits
MAX_ADDRESS = 0xFFFF

WORD_MIN = -0x800000
WORD_MAX = 0xFFFFFF
WORD_MASK = 0xFFFFFF

HEX_DIGITS = frozenset(string.hexdigits)


def parse_start_address(operand: Optional[str]) -> int:
    """START operand: a hexadecimal address."""
    expected = "a hexadecimal start address (0000-FFFF)"
    if not operand or not set(operand) <= HEX_DIGITS:
        raise ValueError(expected)
    value = int(operand, 16)
    if value > MAX_ADDRESS:
        raise ValueError(expected)
    return value


def parse_count(operand: Optional[str]) -> int:
    """RESW/RESB operand: a non-negative decimal count."""
    expected = "a non-negative decimal count"
    if not operand or not operand.isdigit():
        raise ValueError(expected)
    return int(operand)


def parse_word(operand: Optional[str]) -> int:
    """WORD operand: a decimal integer that fits in 24 bits."""
    expected = f"a decimal integer between {WORD_MIN} and {WORD_MAX}"
    if not operand:
        raise ValueError(expected)
    try:
        value = int(operand, 10)
    except ValueError:
        raise ValueError(expected) from None
    if not WORD_MIN <= value <= WORD_MAX:
        raise ValueError(expected)
    return value


def word_object_code(value: int) -> str:
    """Render a WORD value as 6 hex digits (negative values as 24-bit two's complement)."""
    return f"{value & WORD_MASK:06X}"


def parse_byte_constant(operand: Optional[str]) -> str:
    """
    BYTE operand: ``C'<text>'`` or ``X'<hex digits>'``.

    Character constants may not contain tabs: the intermediate file is
    tab-separated and must read back to the same operand.

    Returns:
        The constant's object code as upper-case hex, two digits per byte
    """
    expected = "C'<characters, no tabs>' or X'<even number of hex digits>'"
    if (not operand or len(operand) < 4 or operand[1] != "'"
            or not operand.endswith("'")):
        raise ValueError(expected)

    kind = operand[0].upper()
    body = operand[2:-1]

    if kind == "C":
        if "'" in body or "\t" in body or any(ord(ch) > 0xFF for ch in body):
            raise ValueError(expected)
        return "".join(f"{ord(ch):02X}" for ch in body)

    if kind == "X":
        if len(body) % 2 != 0 or not set(body) <= HEX_DIGITS:
            raise ValueError(expected)
        return body.upper()

    raise ValueError(expected)
