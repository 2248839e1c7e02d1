# =============================================================================
# test_cli.py - sicasm Command-Line Tests
# =============================================================================
# Tests for the sicasm command: printed sections, output files, exit
# codes and the exception handler.
# =============================================================================

from pathlib import Path

import pytest
from click.testing import CliRunner

from sicasm import __version__
from sicasm.cli.errors import ExitCode, handle_cli_exception
from sicasm.cli.sicasm import main
from sicasm.errors import UnreadableInputError


def write_inputs(source: str, optab: str) -> None:
    Path("prog.asm").write_text(source)
    Path("optab.txt").write_text(optab)


class TestSicasmCommand:

    def test_prints_sections(self, copy_source, optab_text):
        runner = CliRunner()
        with runner.isolated_filesystem():
            write_inputs(copy_source, optab_text)
            result = runner.invoke(main, ["prog.asm", "--optab", "optab.txt"])

            assert result.exit_code == ExitCode.SUCCESS, result.output
            assert "Intermediate File:" in result.output
            assert "SYMTAB:\nALPHA\t2006\nFIVE\t2009\n" in result.output
            assert "Machine Code:" in result.output
            assert "H^PROG  ^002000^00000C" in result.output

    def test_writes_output_files(self, copy_source, optab_text):
        runner = CliRunner()
        with runner.isolated_filesystem():
            write_inputs(copy_source, optab_text)
            result = runner.invoke(main, [
                "prog.asm", "-t", "optab.txt",
                "-o", "prog.obj", "-l", "prog.lst", "-s", "prog.sym", "-i", "prog.int",
            ])

            assert result.exit_code == 0, result.output
            assert Path("prog.obj").read_text() == (
                "H^PROG  ^002000^00000C\n"
                "T^002000^09^002009^0C2006^000005\n"
                "E^002000\n"
            )
            assert Path("prog.lst").read_text().startswith("2000\t\tSTART\t2000\n")
            assert Path("prog.sym").read_text() == "ALPHA\t2006\nFIVE\t2009\n"
            assert Path("prog.int").read_text().endswith("\t\tEND\t\n")

    def test_quiet(self, copy_source, optab_text):
        runner = CliRunner()
        with runner.isolated_filesystem():
            write_inputs(copy_source, optab_text)
            result = runner.invoke(main, ["-q", "prog.asm", "-t", "optab.txt"])

            assert result.exit_code == 0
            assert "Intermediate File:" not in result.output

    def test_program_name(self, copy_source, optab_text):
        runner = CliRunner()
        with runner.isolated_filesystem():
            write_inputs(copy_source, optab_text)
            result = runner.invoke(main, ["prog.asm", "-t", "optab.txt", "-n", "COPY"])

            assert "H^COPY  ^002000^00000C" in result.output

    def test_name_from_label(self, optab_text):
        runner = CliRunner()
        with runner.isolated_filesystem():
            write_inputs("COPY START 1000\n RSUB\n END\n", optab_text)
            plain = runner.invoke(main, ["prog.asm", "-t", "optab.txt"])
            named = runner.invoke(main, ["prog.asm", "-t", "optab.txt", "--name-from-label"])

            assert "H^PROG  ^001000^000001" in plain.output
            assert "H^COPY  ^001000^000001" in named.output

    def test_verbose(self, copy_source, optab_text):
        runner = CliRunner()
        with runner.isolated_filesystem():
            write_inputs(copy_source, optab_text)
            result = runner.invoke(main, ["-v", "prog.asm", "-t", "optab.txt"])

            assert result.exit_code == 0
            assert "Assembly complete: 9 bytes of object code at 2000" in result.output
            assert "Defined 2 symbols" in result.output

    def test_version(self):
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestExitCodes:

    def test_invalid_operand(self, optab_text):
        runner = CliRunner()
        with runner.isolated_filesystem():
            write_inputs(" START 0\nA RESW X\n END\n", optab_text)
            result = runner.invoke(main, ["prog.asm", "-t", "optab.txt", "-o", "prog.obj"])

            assert result.exit_code == ExitCode.BUILD_ERROR
            assert "invalid operand 'X' for RESW" in result.output
            assert not Path("prog.obj").exists()

    def test_warnings_only(self, optab_text):
        runner = CliRunner()
        with runner.isolated_filesystem():
            write_inputs(" START 0\n LDA NOPE\n END\n", optab_text)
            result = runner.invoke(main, ["prog.asm", "-t", "optab.txt"])

            assert result.exit_code == 0
            assert "undefined symbol 'NOPE'" in result.output

    def test_unknown_opcode_reported_once(self, optab_text):
        runner = CliRunner()
        with runner.isolated_filesystem():
            write_inputs(" START 0\n LDX A\nA WORD 1\n END\n", optab_text)
            result = runner.invoke(main, ["-q", "prog.asm", "-t", "optab.txt"])

            assert result.exit_code == 0
            assert result.output.count("unknown opcode or directive 'LDX'") == 1
            assert "0 errors, 1 warning" in result.output

    def test_strict(self, optab_text):
        runner = CliRunner()
        with runner.isolated_filesystem():
            write_inputs(" START 0\n LDA NOPE\n END\n", optab_text)
            result = runner.invoke(main, ["--strict", "prog.asm", "-t", "optab.txt"])

            assert result.exit_code == ExitCode.BUILD_ERROR

    def test_missing_source(self, optab_text):
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("optab.txt").write_text(optab_text)
            result = runner.invoke(main, ["missing.asm", "-t", "optab.txt"])

            assert result.exit_code == ExitCode.INVALID_ARGS

    def test_optab_required(self, copy_source):
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("prog.asm").write_text(copy_source)
            result = runner.invoke(main, ["prog.asm"])

            assert result.exit_code == ExitCode.INVALID_ARGS

    def test_unreadable_optab(self, copy_source):
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("prog.asm").write_text(copy_source)
            Path("optab.txt").write_bytes(b"\xff\xfe\x81")
            result = runner.invoke(main, ["prog.asm", "-t", "optab.txt"])

            assert result.exit_code == ExitCode.INVALID_ARGS
            assert "not a text file" in result.output


class TestHandleCliException:

    def test_sicasm_error_is_build_error(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            handle_cli_exception(UnreadableInputError("optab.txt", "not a text file"))
        assert excinfo.value.code == ExitCode.BUILD_ERROR
        assert "Error: " in capsys.readouterr().err

    def test_missing_file(self):
        with pytest.raises(SystemExit) as excinfo:
            handle_cli_exception(FileNotFoundError("prog.asm"))
        assert excinfo.value.code == ExitCode.INVALID_ARGS

    def test_internal_error(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            handle_cli_exception(RuntimeError("boom"), error_type="Assembly")
        assert excinfo.value.code == ExitCode.INTERNAL_ERROR
        assert "Internal error: boom" in capsys.readouterr().err
