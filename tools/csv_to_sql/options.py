"""Conversion options and configuration errors."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .reader import sanitize_name

AUTO_ID_COLUMN = "id"


class ConfigurationError(ValueError):
    """Raised when the requested combination of options cannot be run."""


def parse_name_list(value: Optional[str]) -> List[str]:
    """Split a comma-separated list of column names, dropping blanks."""
    if not value:
        return []
    return [name.strip() for name in value.split(",") if name.strip()]


@dataclass
class ConversionOptions:
    """
    Everything that controls one CSV to SQL conversion.

    Column names given here are sanitized the same way as the file header,
    so matching is case-insensitive.
    """

    delimiter: str = ","
    add_primary_key: bool = False
    primary_key: Optional[str] = None
    fk_file: Optional[Path] = None
    fk_column: Optional[str] = None
    blank_columns: List[str] = field(default_factory=list)
    text_columns: List[str] = field(default_factory=list)
    drop_table: bool = False
    lookup_column: Optional[str] = None
    batch_size: int = 1000
    sample_size: int = 200
    schema_only: bool = False

    def __post_init__(self):
        if self.primary_key:
            self.primary_key = sanitize_name(self.primary_key)
        if self.fk_column:
            self.fk_column = sanitize_name(self.fk_column)
        if self.lookup_column:
            self.lookup_column = sanitize_name(self.lookup_column)
        self.blank_columns = [sanitize_name(name) for name in self.blank_columns]
        self.text_columns = [sanitize_name(name) for name in self.text_columns]

    @property
    def foreign_key_enabled(self) -> bool:
        return bool(self.fk_file and self.fk_column)

    @property
    def foreign_key_column(self) -> Optional[str]:
        """Name of the appended foreign key column."""
        if not self.foreign_key_enabled:
            return None
        return f"{self.fk_column}_fk"

    def validate(self) -> None:
        """
        Check option combinations before any file is read.

        Raises:
            ConfigurationError: If the options cannot be run together
        """
        if self.fk_file and not self.fk_column:
            raise ConfigurationError("A foreign key file requires --fk-column")
        if self.fk_column and not self.fk_file:
            raise ConfigurationError("--fk-column requires a foreign key file (--fk-file)")
        if self.batch_size < 1:
            raise ConfigurationError(f"Batch size must be positive, got {self.batch_size}")
        if self.sample_size < 1:
            raise ConfigurationError(f"Sample size must be positive, got {self.sample_size}")
        if len(self.delimiter) != 1:
            raise ConfigurationError(f"Delimiter must be a single character, got {self.delimiter!r}")
