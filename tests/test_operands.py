# =============================================================================
# test_operands.py - Directive Operand Tests
# =============================================================================
# Tests for the numeric and constant operands of START, WORD, RESW, RESB
# and BYTE.
# =============================================================================

import pytest

from sicasm.assembler.operands import (
    parse_byte_constant,
    parse_count,
    parse_start_address,
    parse_word,
    word_object_code,
)


class TestStartAddress:

    @pytest.mark.parametrize("operand,expected", [
        ("2000", 0x2000),
        ("0", 0),
        ("ffff", 0xFFFF),
        ("1A0", 0x1A0),
    ])
    def test_valid(self, operand, expected):
        assert parse_start_address(operand) == expected

    @pytest.mark.parametrize("operand", [None, "", "G000", "10000", "-1", "0x10"])
    def test_invalid(self, operand):
        with pytest.raises(ValueError, match="hexadecimal"):
            parse_start_address(operand)


class TestCounts:

    def test_valid(self):
        assert parse_count("0") == 0
        assert parse_count("12") == 12

    @pytest.mark.parametrize("operand", [None, "", "-1", "1A", "2.5"])
    def test_invalid(self, operand):
        with pytest.raises(ValueError, match="non-negative decimal"):
            parse_count(operand)


class TestWords:

    def test_positive(self):
        assert word_object_code(parse_word("5")) == "000005"

    def test_negative_is_twos_complement(self):
        assert word_object_code(parse_word("-1")) == "FFFFFF"
        assert word_object_code(parse_word("-8388608")) == "800000"

    def test_largest(self):
        assert word_object_code(parse_word("16777215")) == "FFFFFF"

    @pytest.mark.parametrize("operand", [None, "", "16777216", "-8388609", "FIVE", "0x5"])
    def test_invalid(self, operand):
        with pytest.raises(ValueError, match="decimal integer"):
            parse_word(operand)


class TestByteConstants:

    def test_characters(self):
        assert parse_byte_constant("C'EOF'") == "454F46"

    def test_characters_with_blank(self):
        assert parse_byte_constant("C'A B'") == "412042"

    def test_hex(self):
        assert parse_byte_constant("X'F1'") == "F1"
        assert parse_byte_constant("X'1F2A'") == "1F2A"

    def test_hex_upper_cased(self):
        assert parse_byte_constant("x'1f2a'") == "1F2A"

    @pytest.mark.parametrize("operand", [
        None,
        "",
        "C''",          # empty constant
        "X''",
        "X'F'",         # odd number of digits
        "X'GG'",        # not hex
        "C'EOF",        # unterminated
        "EOF",
        "Z'01'",        # unknown kind
        "C'€'",    # beyond one byte
        "C'A\tB'",      # tab inside a character constant
    ])
    def test_invalid(self, operand):
        with pytest.raises(ValueError):
            parse_byte_constant(operand)
