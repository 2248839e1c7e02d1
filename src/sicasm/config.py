"""
sicasm - Assembler Configuration
================================

Run configuration for the assembler. Values come from:
- Default values (defined here)
- Environment variables (``AssemblerConfig.from_env()``)
- Command-line options (applied by the CLI on top of the above)

The configuration is the only thing an ``Assembler`` instance keeps
between runs; every table and listing is rebuilt for each run.
"""

from dataclasses import dataclass, replace
import os


# Width of every instruction and of a WORD, in bytes
WORD_SIZE = 3

# Text records hold at most this many bytes of object code
DEFAULT_TEXT_RECORD_CAPACITY = 30


@dataclass(frozen=True)
class AssemblerConfig:
    """
    Configuration for an assembly run.

    Attributes:
        default_program_name: Program name written to the Header record
        text_record_capacity: Maximum bytes of object code per Text record
        comment_marker: Lines whose first non-blank character is this are skipped
        label_placeholder: Label field value meaning "no label"
        name_from_start_label: Name the program after the START label
                               instead of default_program_name
        strict: Promote unresolved symbols and duplicate labels to errors
        max_errors: Stop collecting after this many errors
    """

    default_program_name: str = "PROG"
    text_record_capacity: int = DEFAULT_TEXT_RECORD_CAPACITY
    comment_marker: str = "."
    label_placeholder: str = "-"
    name_from_start_label: bool = False
    strict: bool = False
    max_errors: int = 100

    def __post_init__(self) -> None:
        if not 1 <= self.text_record_capacity <= 0xFF:
            raise ValueError(
                f"text record capacity must be between 1 and 255 bytes, "
                f"got {self.text_record_capacity}"
            )
        if self.max_errors < 1:
            raise ValueError(f"max_errors must be positive, got {self.max_errors}")

    # =========================================================================
    # Factory Methods
    # =========================================================================

    @classmethod
    def from_env(cls) -> "AssemblerConfig":
        """
        Create a configuration from environment variables.

        Environment variables (all optional):
            SICASM_PROGRAM_NAME: Default header program name
            SICASM_TEXT_RECORD_CAPACITY: Bytes per Text record (integer)
            SICASM_STRICT: "1", "true" or "yes" to enable strict mode
            SICASM_NAME_FROM_START_LABEL: "1", "true" or "yes" to name the
                program after its START label
            SICASM_MAX_ERRORS: Error limit (integer)

        Returns:
            AssemblerConfig with values from environment variables
        """
        config = cls()

        if name := os.environ.get("SICASM_PROGRAM_NAME"):
            config = replace(config, default_program_name=name)

        if capacity := os.environ.get("SICASM_TEXT_RECORD_CAPACITY"):
            try:
                config = replace(config, text_record_capacity=int(capacity))
            except ValueError:
                pass  # Ignore invalid values

        if strict := os.environ.get("SICASM_STRICT"):
            config = replace(config, strict=strict.strip().lower() in ("1", "true", "yes"))

        if from_label := os.environ.get("SICASM_NAME_FROM_START_LABEL"):
            config = replace(
                config,
                name_from_start_label=from_label.strip().lower() in ("1", "true", "yes"),
            )

        if max_errors := os.environ.get("SICASM_MAX_ERRORS"):
            try:
                config = replace(config, max_errors=int(max_errors))
            except ValueError:
                pass

        return config

    def with_overrides(self, **changes) -> "AssemblerConfig":
        """Return a copy with the given non-None fields replaced."""
        changes = {key: value for key, value in changes.items() if value is not None}
        return replace(self, **changes)
