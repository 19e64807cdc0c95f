"""CLI interface for CSV to SQL Converter."""

import sys
from pathlib import Path
from typing import Optional

import click

from shared.cli import create_table, error, handle_errors, info, print_table, success, warning
from shared.logger import setup_logger

from .converter import ConversionRun, CSVToSQL
from .options import ConfigurationError, ConversionOptions, parse_name_list

EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2


def display_schema(run: ConversionRun) -> None:
    """Show the inferred schema as a table."""
    table = create_table(title=f"Schema: {run.table_name}")
    table.add_column("Column", style="cyan")
    table.add_column("Type", style="green")
    table.add_column("Flags", style="dim")

    for col in run.schema:
        flags = []
        if col.is_primary_key:
            flags.append("primary key")
        if col.auto_increment:
            flags.append("auto increment")
        if run.lookup is not None and col.name == run.lookup.column:
            flags.append(f"lookup → {run.lookup.name}")
        if not col.from_source:
            flags.append("generated")
        table.add_row(col.name, col.type.sql_type, ", ".join(flags))

    print_table(table)


@click.command()
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--table", "-t", help="Table name (defaults to the file name)")
@click.option(
    "--delimiter",
    "-d",
    default=",",
    show_default=True,
    help="Field delimiter ('\\t' for tab)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    help="Output SQL file (print to stdout if not specified)",
)
@click.option(
    "--add-primary-key/--no-add-primary-key",
    default=True,
    show_default=True,
    help="Add an auto-increment 'id' column",
)
@click.option(
    "--primary-key",
    "-p",
    help="Existing column to mark as PRIMARY KEY",
)
@click.option(
    "--fk-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Second CSV file to resolve a foreign key against",
)
@click.option("--fk-column", help="Join column shared by both files")
@click.option("--blank-columns", help="Comma-separated empty columns to append")
@click.option("--text-columns", help="Comma-separated columns forced to text")
@click.option("--drop-table", is_flag=True, help="Include DROP TABLE statements")
@click.option("--lookup-column", help="Move this column's values into a lookup table")
@click.option(
    "--batch-size",
    "-b",
    type=click.IntRange(min=1),
    default=1000,
    show_default=True,
    help="Rows per INSERT statement",
)
@click.option(
    "--sample-size",
    type=click.IntRange(min=1),
    default=200,
    show_default=True,
    help="Rows sampled for type inference",
)
@click.option(
    "--schema-only",
    "-s",
    is_flag=True,
    help="Generate only CREATE TABLE (no INSERTs)",
)
@click.option("--show-schema", is_flag=True, help="Print the inferred schema")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@handle_errors
def main(
    csv_file: Path,
    table: Optional[str],
    delimiter: str,
    output: Optional[Path],
    add_primary_key: bool,
    primary_key: Optional[str],
    fk_file: Optional[Path],
    fk_column: Optional[str],
    blank_columns: Optional[str],
    text_columns: Optional[str],
    drop_table: bool,
    lookup_column: Optional[str],
    batch_size: int,
    sample_size: int,
    schema_only: bool,
    show_schema: bool,
    verbose: bool,
):
    """
    CSV to SQL Converter - Generate SQL from CSV files.

    Infers column types from a sample of rows and generates CREATE TABLE +
    batched INSERT statements.

    Examples:

        \b
        # Generate SQL for a semicolon separated file
        csv2sql users.csv --delimiter ';'

        \b
        # Save to file, dropping the table first
        csv2sql data.csv --table products --drop-table --output products.sql

        \b
        # Move a repeated column into a lookup table
        csv2sql orders.csv --lookup-column status

        \b
        # Link rows to another file through a shared column
        csv2sql orders.csv --fk-file customers.csv --fk-column customer_code

        \b
        # Keep zip codes as text, add two empty columns
        csv2sql addresses.csv --text-columns zip --blank-columns notes,owner
    """
    # Setup logging
    log_level = "DEBUG" if verbose else "INFO"
    setup_logger(__name__, level=log_level)

    if delimiter == "\\t":
        delimiter = "\t"

    try:
        options = ConversionOptions(
            delimiter=delimiter,
            add_primary_key=add_primary_key,
            primary_key=primary_key,
            fk_file=fk_file,
            fk_column=fk_column,
            blank_columns=parse_name_list(blank_columns),
            text_columns=parse_name_list(text_columns),
            drop_table=drop_table,
            lookup_column=lookup_column,
            batch_size=batch_size,
            sample_size=sample_size,
            schema_only=schema_only,
        )
        options.validate()
    except ConfigurationError as e:
        error(f"Configuration error: {e}")
        sys.exit(EXIT_CONFIG_ERROR)

    converter = CSVToSQL()

    info(f"Converting {csv_file} to SQL")

    try:
        run = converter.run(csv_file, table_name=table, options=options)

    except ConfigurationError as e:
        error(f"Configuration error: {e}")
        sys.exit(EXIT_CONFIG_ERROR)

    except Exception as e:
        error(f"Conversion failed: {e}")
        if verbose:
            raise
        sys.exit(EXIT_FAILURE)

    if run.foreign_keys is not None and run.foreign_keys.duplicates:
        warning(
            f"{len(run.foreign_keys.duplicates)} duplicate foreign key value(s) in "
            f"{run.foreign_keys.source.name}; the last occurrence wins"
        )

    if show_schema:
        display_schema(run)

    if output:
        converter.write_sql(run.sql, output)
    else:
        click.echo(run.sql, nl=False)

    success(f"Conversion completed! ({len(run.rows)} rows, {len(run.schema)} columns)")

    if output:
        info(f"SQL written to: {output}")

    sys.exit(0)


if __name__ == "__main__":
    main()
