"""Row to SQL value tuple encoding."""

from typing import List, Optional

from .inference import ColumnType, normalize_datetime
from .mappings import ForeignKeyMap, LookupTable, escape_quotes
from .options import ConversionOptions
from .reader import Row
from .schema import ColumnDefinition, TableSchema

NULL_LITERAL = "null"
MISSING_FOREIGN_KEY = "NULL"


def format_value(value: Optional[str], col_type: ColumnType) -> str:
    """
    Render one value as a SQL literal.

    Args:
        value: Field value (already substituted/reformatted)
        col_type: Column type

    Returns:
        SQL literal text
    """
    if not value:
        return NULL_LITERAL
    if col_type.quoted:
        return f"'{escape_quotes(value)}'"
    # Numbers go out bare, even when a value outside the sample does not parse
    return value


class RowEncoder:
    """
    Encode source rows as SQL value tuples for one table.

    Holds the auto-increment counter, so use one encoder per conversion.
    """

    def __init__(
        self,
        schema: TableSchema,
        options: ConversionOptions,
        lookup: Optional[LookupTable] = None,
        foreign_keys: Optional[ForeignKeyMap] = None,
    ):
        self.schema = schema
        self.options = options
        self.lookup = lookup
        self.foreign_keys = foreign_keys
        self._next_id = 1

        self._source_columns = schema.source_columns
        self._has_auto_id = schema.auto_id_column is not None

        fk_column = options.foreign_key_column
        self._has_foreign_key = bool(
            foreign_keys is not None
            and fk_column in schema
            and not schema[fk_column].from_source
        )

    @property
    def column_names(self) -> List[str]:
        """Column list for INSERT statements, matching encode() output."""
        names = [col.name for col in self._source_columns]
        if self._has_auto_id:
            names.append(self.schema.auto_id_column.name)
        if self._has_foreign_key:
            names.append(self.options.foreign_key_column)
        return names

    def _encode_field(self, column: ColumnDefinition, value: Optional[str]) -> str:
        if self.lookup is not None and column.name == self.lookup.column:
            if not value or not value.strip():
                return NULL_LITERAL
            return str(self.lookup.assign(value))

        if value and column.type == ColumnType.DATETIME:
            value = normalize_datetime(value)

        return format_value(value, column.type)

    def _foreign_key_value(self, row: Row) -> str:
        fk_id = self.foreign_keys.get(row.get(self.foreign_keys.column))
        if fk_id is None:
            return MISSING_FOREIGN_KEY
        return str(fk_id)

    def encode(self, row: Row) -> str:
        """
        Encode one row.

        Args:
            row: Row dict keyed by sanitized column name

        Returns:
            Parenthesised value tuple, e.g. "(1, 'abc', null)"
        """
        parts = [self._encode_field(col, row.get(col.name)) for col in self._source_columns]

        if self._has_auto_id:
            parts.append(str(self._next_id))
            self._next_id += 1

        if self._has_foreign_key:
            parts.append(self._foreign_key_value(row))

        return "(" + ", ".join(part for part in parts if part) + ")"
