"""Schema inference from a bounded sample of rows."""

from dataclasses import dataclass, field
from itertools import islice
from typing import Dict, Iterable, List, Optional

from shared.logger import get_logger

from .inference import ColumnType, infer_type, reconcile
from .options import AUTO_ID_COLUMN, ConversionOptions
from .reader import Row

logger = get_logger(__name__)


@dataclass
class ColumnDefinition:
    """Definition of a table column."""

    name: str
    type: ColumnType
    auto_increment: bool = False
    is_primary_key: bool = False
    from_source: bool = True


@dataclass
class TableSchema:
    """Ordered column definitions for one table."""

    columns: Dict[str, ColumnDefinition] = field(default_factory=dict)

    def __iter__(self):
        return iter(self.columns.values())

    def __len__(self) -> int:
        return len(self.columns)

    def __getitem__(self, name: str) -> ColumnDefinition:
        return self.columns[name]

    def __contains__(self, name: str) -> bool:
        return name in self.columns

    def add(self, column: ColumnDefinition) -> None:
        self.columns[column.name] = column

    @property
    def source_columns(self) -> List[ColumnDefinition]:
        """Columns whose values come from the file, in file order."""
        return [col for col in self if col.from_source]

    @property
    def auto_id_column(self) -> Optional[ColumnDefinition]:
        """The generated auto-increment column, if any."""
        return next((col for col in self if col.auto_increment), None)


class SchemaBuilder:
    """
    Infer a table schema from the first rows of a file.

    The builder only reads up to options.sample_size rows from the iterator
    it is given and then stops, so the caller can close the file straight
    after build() returns.
    """

    def __init__(self, options: ConversionOptions):
        self.options = options

    def _pinned_type(self, name: str) -> Optional[ColumnType]:
        # Lookup values are replaced by integer ids, so that pin wins
        if name == self.options.lookup_column:
            return ColumnType.INT
        if name in self.options.text_columns:
            return ColumnType.SHORT_TEXT
        return None

    def build(self, header: List[str], rows: Iterable[Row]) -> TableSchema:
        """
        Build the schema.

        Args:
            header: Sanitized column names in file order
            rows: Row dicts keyed by header name

        Returns:
            Finalized TableSchema
        """
        types: Dict[str, ColumnType] = {}
        pinned: Dict[str, ColumnType] = {}

        for name in header:
            pin = self._pinned_type(name)
            if pin is not None:
                pinned[name] = pin
            types.setdefault(name, pin if pin is not None else ColumnType.NULL)

        sampled = 0
        for row in islice(rows, self.options.sample_size):
            sampled += 1
            for name, value in row.items():
                if name in pinned or not value:
                    continue
                types[name] = reconcile(types[name], infer_type(value))

        logger.debug(f"Sampled {sampled} row(s) for type inference")
        self._log_unmatched(header)

        # A source column named like the auto id suppresses the generated one
        adds_auto_id = self.options.add_primary_key and AUTO_ID_COLUMN not in types

        schema = TableSchema()
        for name, col_type in types.items():
            if col_type == ColumnType.NULL:
                col_type = ColumnType.LONG_TEXT

            is_primary_key = self._is_explicit_primary_key(name, adds_auto_id)
            # TEXT cannot be a key column without a prefix length
            if is_primary_key and col_type == ColumnType.LONG_TEXT:
                col_type = ColumnType.SHORT_TEXT

            schema.add(ColumnDefinition(name=name, type=col_type, is_primary_key=is_primary_key))

        self._append_generated_columns(schema)

        logger.info(f"Inferred {len(schema)} columns")
        return schema

    def _is_explicit_primary_key(self, name: str, adds_auto_id: bool) -> bool:
        primary_key = self.options.primary_key
        if not primary_key:
            return False
        if adds_auto_id and primary_key == AUTO_ID_COLUMN:
            return False
        return name == primary_key

    def _append_generated_columns(self, schema: TableSchema) -> None:
        options = self.options
        generated = []

        if options.add_primary_key:
            has_explicit_key = any(col.is_primary_key for col in schema)
            generated.append(
                ColumnDefinition(
                    name=AUTO_ID_COLUMN,
                    type=ColumnType.INT,
                    auto_increment=True,
                    is_primary_key=not has_explicit_key,
                    from_source=False,
                )
            )

        if options.foreign_key_column:
            generated.append(
                ColumnDefinition(
                    name=options.foreign_key_column,
                    type=ColumnType.INT,
                    from_source=False,
                )
            )

        for name in options.blank_columns:
            generated.append(ColumnDefinition(name=name, type=ColumnType.SHORT_TEXT, from_source=False))

        for column in generated:
            if column.name in schema:
                logger.warning(f"Column '{column.name}' already exists; not adding it again")
                continue
            schema.add(column)

    def _log_unmatched(self, header: List[str]) -> None:
        names = list(self.options.text_columns)
        if self.options.lookup_column:
            names.append(self.options.lookup_column)
        if self.options.primary_key and self.options.primary_key != AUTO_ID_COLUMN:
            names.append(self.options.primary_key)

        for name in names:
            if name not in header:
                logger.debug(f"Column override '{name}' does not match any header; ignored")
