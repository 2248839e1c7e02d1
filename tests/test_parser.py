# =============================================================================
# test_parser.py - Source Line Parser Tests
# =============================================================================
# Tests for splitting source lines into label, opcode and operand.
#
# Test coverage includes:
#   - Label detection by line shape and opcode table
#   - Explicit labels (colon) and the "-" placeholder
#   - Quoted byte constants containing blanks
#   - Comments, blank lines and trailing comments
# =============================================================================

import pytest
from pathlib import Path

from sicasm.assembler.optab import parse_optab
from sicasm.assembler.parser import parse_line, parse_source, read_source, tokenize
from sicasm.config import AssemblerConfig
from sicasm.errors import UnreadableInputError


class TestLabelDetection:
    """Fields are assigned by the shape of the line."""

    def test_three_tokens(self):
        stmt = parse_line("ALPHA   RESW    1")
        assert (stmt.label, stmt.opcode, stmt.operand) == ("ALPHA", "RESW", "1")

    def test_two_tokens(self):
        stmt = parse_line("        LDA     FIVE")
        assert stmt.label is None
        assert (stmt.opcode, stmt.operand) == ("LDA", "FIVE")

    def test_one_token(self):
        stmt = parse_line("        END")
        assert stmt.label is None
        assert stmt.opcode == "END"
        assert stmt.operand is None

    def test_colon_label(self):
        """A trailing colon marks a label even on a short line."""
        stmt = parse_line("LOOP:   RSUB")
        assert stmt.label == "LOOP"
        assert stmt.opcode == "RSUB"
        assert stmt.operand is None

    def test_label_only(self):
        stmt = parse_line("HERE:")
        assert stmt.label == "HERE"
        assert stmt.opcode == ""

    def test_placeholder_label(self):
        stmt = parse_line("-       START   1000")
        assert stmt.label is None
        assert (stmt.opcode, stmt.operand) == ("START", "1000")

    def test_custom_placeholder(self):
        config = AssemblerConfig(label_placeholder="*")
        stmt = parse_line("*  LDA  FIVE", config=config)
        assert stmt.label is None
        assert stmt.opcode == "LDA"

    def test_trailing_comment_ignored(self):
        stmt = parse_line("FIRST   LDA     FIVE    load the constant")
        assert (stmt.label, stmt.opcode, stmt.operand) == ("FIRST", "LDA", "FIVE")

    def test_unknown_two_token_line(self):
        """Without a keyword in second place, two tokens are opcode + operand."""
        stmt = parse_line("FOO BAR")
        assert stmt.label is None
        assert (stmt.opcode, stmt.operand) == ("FOO", "BAR")


class TestLabelDetectionWithOpcodeTable:
    """The opcode table tells labels from mnemonics on short lines."""

    OPTAB = parse_optab("LDA 00\nJ 3C\nRSUB 4C\n")

    def test_label_on_instruction_without_operand(self):
        stmt = parse_line("LATER   RSUB", optab=self.OPTAB)
        assert stmt.label == "LATER"
        assert stmt.opcode == "RSUB"
        assert stmt.operand is None

    def test_label_on_directive_without_operand(self):
        stmt = parse_line("DONE END")
        assert stmt.label == "DONE"
        assert stmt.opcode == "END"

    def test_instruction_with_operand(self):
        stmt = parse_line("        LDA     FIVE", optab=self.OPTAB)
        assert stmt.label is None
        assert (stmt.opcode, stmt.operand) == ("LDA", "FIVE")

    def test_trailing_comment_without_label(self):
        """A mnemonic in first place is never taken as a label."""
        stmt = parse_line("        LDA     X       load x", optab=self.OPTAB)
        assert stmt.label is None
        assert (stmt.opcode, stmt.operand) == ("LDA", "X")

    def test_label_colliding_with_mnemonic(self):
        """On a full line a mnemonic-named label is still the label."""
        stmt = parse_line("J       LDA     FIVE", optab=self.OPTAB)
        assert (stmt.label, stmt.opcode, stmt.operand) == ("J", "LDA", "FIVE")

    def test_colliding_label_without_operand_needs_colon(self):
        short = parse_line("J       RSUB", optab=self.OPTAB)
        assert short.label is None
        assert (short.opcode, short.operand) == ("J", "RSUB")

        marked = parse_line("J:      RSUB", optab=self.OPTAB)
        assert marked.label == "J"
        assert marked.opcode == "RSUB"

    def test_parse_source_uses_table(self):
        statements = parse_source("LOOP RSUB\n J LOOP\n", optab=self.OPTAB)
        assert [(s.label, s.opcode) for s in statements] == [("LOOP", "RSUB"), (None, "J")]


class TestByteConstants:
    """Quoted constants are single tokens."""

    def test_character_constant_with_blanks(self):
        stmt = parse_line("MSG     BYTE    C'HELLO WORLD'")
        assert stmt.label == "MSG"
        assert stmt.operand == "C'HELLO WORLD'"

    def test_unlabelled_constant_with_blank(self):
        stmt = parse_line("        BYTE    C'A B'")
        assert stmt.label is None
        assert stmt.operand == "C'A B'"

    def test_hex_constant(self):
        stmt = parse_line("INPUT   BYTE    X'F1'")
        assert stmt.operand == "X'F1'"

    def test_tokenize_columns(self):
        assert tokenize("  LDA FIVE") == [("LDA", 3), ("FIVE", 7)]


class TestLocations:
    """Statements carry their source position."""

    def test_location(self):
        stmt = parse_line("        LDA     FIVE", line_number=7, filename="prog.asm")
        assert str(stmt.location) == "prog.asm:7"

    def test_operand_location(self):
        stmt = parse_line("        LDA     FIVE", line_number=7, filename="prog.asm")
        assert stmt.operand_column == 17
        assert str(stmt.operand_location) == "prog.asm:7:17"

    def test_line_terminator_stripped(self):
        stmt = parse_line("  LDA FIVE\r\n")
        assert stmt.text == "  LDA FIVE"


class TestParseSource:
    """Test parsing whole programs."""

    def test_comments_and_blank_lines_skipped(self):
        source = ". header comment\n\n   \n    . indented comment\n  LDA FIVE\n"
        statements = parse_source(source)
        assert len(statements) == 1
        assert statements[0].line_number == 5

    def test_parse_line_returns_none_for_comment(self):
        assert parse_line(". comment") is None
        assert parse_line("") is None

    def test_program(self, copy_source):
        statements = parse_source(copy_source, "copy.asm")
        assert [s.opcode for s in statements] == [
            "START", "LDA", "STA", "RESW", "WORD", "END",
        ]
        assert [s.label for s in statements if s.label] == ["ALPHA", "FIVE"]
        assert all(s.filename == "copy.asm" for s in statements)

    def test_custom_comment_marker(self):
        config = AssemblerConfig(comment_marker="*")
        statements = parse_source("* comment\n LDA FIVE\n", config=config)
        assert len(statements) == 1


class TestReadSource:

    def test_read(self, tmp_path: Path, copy_source):
        path = tmp_path / "copy.asm"
        path.write_text(copy_source)
        assert read_source(path) == copy_source

    def test_missing(self, tmp_path: Path):
        with pytest.raises(UnreadableInputError) as exc_info:
            read_source(tmp_path / "nope.asm")
        assert exc_info.value.reason == "file not found"

    def test_binary_file(self, tmp_path: Path):
        path = tmp_path / "binary.asm"
        path.write_bytes(b"\xff\xfe\x00\x81")
        with pytest.raises(UnreadableInputError) as exc_info:
            read_source(path)
        assert exc_info.value.reason == "not a text file"
