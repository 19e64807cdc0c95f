"""Surrogate id mappings: lookup tables and foreign key resolution."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from shared.logger import get_logger

from .options import ConfigurationError
from .reader import open_csv, sanitize_name

logger = get_logger(__name__)


def escape_quotes(value: str) -> str:
    """Double every single quote for use inside a SQL string literal."""
    return value.replace("'", "''")


def lookup_table_name(table_name: str, column: str) -> str:
    """Name of the lookup table built for a column."""
    return f"{table_name}_{column}_lookup"


class LookupTable:
    """
    Distinct values of one column, each mapped to a sequential id.

    Ids start at 1 and follow first-seen order. Values are stored trimmed
    and already escaped for SQL.
    """

    def __init__(self, table_name: str, column: str):
        self.column = column
        self.name = lookup_table_name(table_name, column)
        self._ids: Dict[str, int] = {}

    def assign(self, value: str) -> int:
        """
        Get the id for a value, assigning the next one on first sight.

        Args:
            value: Raw field value

        Returns:
            Surrogate id
        """
        key = escape_quotes(value.strip())
        if key not in self._ids:
            self._ids[key] = len(self._ids) + 1
        return self._ids[key]

    def items(self) -> Iterator[Tuple[int, str]]:
        """Yield (id, escaped value) pairs in id order."""
        for value, value_id in self._ids.items():
            yield value_id, value

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, value: str) -> bool:
        return escape_quotes(value.strip()) in self._ids


@dataclass
class ForeignKeyMap:
    """Join value to surrogate id mapping built from a second file."""

    source: Path
    column: str
    ids: Dict[str, int] = field(default_factory=dict)
    duplicates: List[str] = field(default_factory=list)

    def get(self, value: Optional[str]) -> Optional[int]:
        if value is None:
            return None
        return self.ids.get(value)

    def __len__(self) -> int:
        return len(self.ids)


def resolve_foreign_keys(filepath: Path, join_column: str, delimiter: str = ",") -> ForeignKeyMap:
    """
    Scan a second file and number its rows by join value.

    Every row takes the next id (1-based), duplicates included. A repeated
    join value is recorded as a duplicate and its id is overwritten by the
    later row.

    Args:
        filepath: Path to the second file
        join_column: Column whose values become the mapping keys
        delimiter: Field delimiter character

    Returns:
        ForeignKeyMap

    Raises:
        ConfigurationError: If the join column is not in the file header
    """
    filepath = Path(filepath)
    column = sanitize_name(join_column)
    fk_map = ForeignKeyMap(source=filepath, column=column)

    logger.info(f"Resolving foreign keys on '{column}' from {filepath}")

    with open_csv(filepath, delimiter) as source:
        if column not in source.header:
            raise ConfigurationError(f"Join column '{column}' not found in {filepath}")

        for row_id, row in enumerate(source.rows, start=1):
            key = row[column]
            if key in fk_map.ids:
                logger.warning(f"Duplicate foreign key value '{key}' in {filepath.name} (row {row_id})")
                fk_map.duplicates.append(key)
            fk_map.ids[key] = row_id

    logger.info(f"Resolved {len(fk_map)} foreign key value(s)")
    return fk_map
