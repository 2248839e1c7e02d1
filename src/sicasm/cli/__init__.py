"""
sicasm Command-Line Interface
=============================

- **sicasm**: assemble a source file with an opcode table

The tool is a Click application with help text and consistent exit
codes (see ``sicasm.cli.errors``).
"""

__all__ = ["sicasm"]
