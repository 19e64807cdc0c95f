"""Core CSV to SQL conversion logic."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from shared.logger import get_logger

from .encoder import RowEncoder
from .inference import SHORT_TEXT_LENGTH
from .mappings import ForeignKeyMap, LookupTable, resolve_foreign_keys
from .options import ConversionOptions
from .reader import open_csv, sanitize_name
from .schema import ColumnDefinition, SchemaBuilder, TableSchema

logger = get_logger(__name__)


@dataclass
class ConversionRun:
    """State of one conversion, from foreign key scan to final SQL."""

    table_name: str
    options: ConversionOptions
    schema: TableSchema
    foreign_keys: Optional[ForeignKeyMap] = None
    lookup: Optional[LookupTable] = None
    rows: List[str] = field(default_factory=list)
    column_names: List[str] = field(default_factory=list)
    sql: str = ""


class CSVToSQL:
    """
    Convert CSV files to SQL statements.

    A conversion runs as separate stages, each fed the result of the one
    before: foreign key scan, schema inference on a sample, row encoding,
    then statement assembly.
    """

    def __init__(self):
        """Initialize CSV to SQL converter."""
        logger.debug("Initialized CSVToSQL")

    def resolve_foreign_keys(self, options: ConversionOptions) -> Optional[ForeignKeyMap]:
        """Scan the foreign key file if one is configured."""
        if not options.foreign_key_enabled:
            return None
        return resolve_foreign_keys(Path(options.fk_file), options.fk_column, options.delimiter)

    def infer_schema(self, filepath: Path, options: ConversionOptions) -> TableSchema:
        """
        Infer schema from the first options.sample_size rows of a file.

        The file is closed before this returns.

        Args:
            filepath: Path to CSV file
            options: Conversion options

        Returns:
            Finalized TableSchema
        """
        logger.info(f"Inferring schema from {filepath}")

        with open_csv(filepath, options.delimiter) as source:
            return SchemaBuilder(options).build(source.header, source.rows)

    def encode_rows(self, filepath: Path, encoder: RowEncoder, delimiter: str = ",") -> List[str]:
        """
        Encode every row of a file.

        Args:
            filepath: Path to CSV file
            encoder: RowEncoder for this run
            delimiter: Field delimiter character

        Returns:
            Encoded value tuples in file order
        """
        with open_csv(filepath, delimiter) as source:
            rows = [encoder.encode(row) for row in source.rows]

        logger.info(f"Encoded {len(rows)} row(s)")
        return rows

    def generate_drop_table(self, table_name: str) -> str:
        """Generate DROP TABLE statement."""
        return f"DROP TABLE IF EXISTS {table_name};"

    def _format_column(self, col: ColumnDefinition) -> str:
        col_def = f"    {col.name} {col.type.sql_type}"

        if col.auto_increment:
            col_def += " AUTO_INCREMENT"
            # MySQL needs the auto column to be a key even when it is not the primary one
            col_def += " PRIMARY KEY" if col.is_primary_key else " UNIQUE"
        elif col.is_primary_key:
            col_def += " PRIMARY KEY"

        return col_def

    def generate_create_table(self, table_name: str, schema: TableSchema) -> str:
        """
        Generate CREATE TABLE statement.

        Args:
            table_name: Table name
            schema: Table schema

        Returns:
            SQL CREATE TABLE statement
        """
        lines = [f"CREATE TABLE IF NOT EXISTS {table_name} ("]
        lines.append(",\n".join(self._format_column(col) for col in schema))
        lines.append(");")

        return "\n".join(lines)

    def generate_lookup_create_table(self, lookup: LookupTable) -> str:
        """Generate CREATE TABLE statement for a lookup table."""
        return "\n".join(
            [
                f"CREATE TABLE IF NOT EXISTS {lookup.name} (",
                "    id INT AUTO_INCREMENT PRIMARY KEY,",
                f"    value VARCHAR({SHORT_TEXT_LENGTH})",
                ");",
            ]
        )

    def generate_insert_statements(
        self,
        table_name: str,
        column_names: List[str],
        rows: Iterable[str],
        batch_size: int = 1000,
    ) -> List[str]:
        """
        Batch encoded rows into multi-row INSERT statements.

        Args:
            table_name: Table name
            column_names: Column list matching the row tuples
            rows: Encoded value tuples
            batch_size: Number of rows per INSERT

        Returns:
            List of INSERT statements
        """
        logger.info(f"Generating INSERT statements (batch size: {batch_size})")

        header = f"INSERT INTO {table_name} ({', '.join(column_names)}) VALUES\n"

        statements = []
        current_batch = []

        for row in rows:
            current_batch.append(row)

            # Flush batch
            if len(current_batch) >= batch_size:
                statements.append(header + ",\n".join(current_batch) + ";")
                current_batch = []

        # Final batch
        if current_batch:
            statements.append(header + ",\n".join(current_batch) + ";")

        logger.info(f"Generated {len(statements)} INSERT statement(s)")
        return statements

    def generate_lookup_inserts(self, lookup: LookupTable) -> List[str]:
        """Generate one INSERT per distinct lookup value."""
        return [
            f"INSERT INTO {lookup.name} (id, value) VALUES ({value_id}, '{value}');"
            for value_id, value in lookup.items()
        ]

    def assemble(self, run: ConversionRun) -> str:
        """
        Put together the final SQL text for a run.

        Order: lookup table DROP/CREATE, main table DROP/CREATE, main table
        INSERTs, lookup table INSERTs.

        Args:
            run: Run with schema and encoded rows

        Returns:
            Generated SQL
        """
        options = run.options
        sql_parts = []

        if run.lookup is not None:
            if options.drop_table:
                sql_parts.append(self.generate_drop_table(run.lookup.name))
            sql_parts.append(self.generate_lookup_create_table(run.lookup))

        if options.drop_table:
            sql_parts.append(self.generate_drop_table(run.table_name))
        sql_parts.append(self.generate_create_table(run.table_name, run.schema))

        if not options.schema_only:
            sql_parts.extend(
                self.generate_insert_statements(
                    run.table_name, run.column_names, run.rows, options.batch_size
                )
            )
            if run.lookup is not None:
                sql_parts.extend(self.generate_lookup_inserts(run.lookup))

        return "\n\n".join(sql_parts) + "\n"

    def run(
        self,
        csv_path: Path,
        table_name: Optional[str] = None,
        options: Optional[ConversionOptions] = None,
    ) -> ConversionRun:
        """
        Run every conversion stage and return the finished run.

        Args:
            csv_path: Path to CSV file
            table_name: Table name (defaults to the file name without extension)
            options: Conversion options

        Returns:
            ConversionRun with schema, mappings and generated SQL

        Raises:
            ConfigurationError: If the options cannot be run together
            ValueError: If the file has no header row
        """
        csv_path = Path(csv_path)
        options = options or ConversionOptions()
        options.validate()

        table_name = sanitize_name(table_name or csv_path.stem)

        foreign_keys = self.resolve_foreign_keys(options)
        schema = self.infer_schema(csv_path, options)
        if not schema.source_columns:
            raise ValueError(f"No header row found in {csv_path}")

        lookup = None
        if options.lookup_column and options.lookup_column in schema:
            lookup = LookupTable(table_name, options.lookup_column)

        run = ConversionRun(
            table_name=table_name,
            options=options,
            schema=schema,
            foreign_keys=foreign_keys,
            lookup=lookup,
        )

        if not options.schema_only:
            encoder = RowEncoder(schema, options, lookup=lookup, foreign_keys=foreign_keys)
            run.column_names = encoder.column_names
            run.rows = self.encode_rows(csv_path, encoder, options.delimiter)

        run.sql = self.assemble(run)
        return run

    def convert(
        self,
        csv_path: Path,
        table_name: Optional[str] = None,
        options: Optional[ConversionOptions] = None,
        output_path: Optional[Path] = None,
    ) -> str:
        """
        Convert CSV to SQL.

        Args:
            csv_path: Path to CSV file
            table_name: Table name
            options: Conversion options
            output_path: Output SQL file path (optional)

        Returns:
            Generated SQL
        """
        full_sql = self.run(csv_path, table_name, options).sql

        # Write to file if specified
        if output_path:
            self.write_sql(full_sql, output_path)

        return full_sql

    def write_sql(self, sql: str, output_path: Path) -> None:
        """Write generated SQL to a file."""
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(sql)
        logger.info(f"Wrote SQL to {output_path}")
