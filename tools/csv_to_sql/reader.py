"""Delimited file reading."""

import csv
import re
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List

from shared.logger import get_logger

logger = get_logger(__name__)

Row = Dict[str, str]


def sanitize_name(name: str) -> str:
    """Sanitize column/table name for SQL."""
    # Replace spaces and special chars with underscore
    sanitized = re.sub(r"[^\w]", "_", name.strip().lower())
    sanitized = re.sub(r"_+", "_", sanitized)
    sanitized = sanitized.strip("_")
    # Ensure doesn't start with number
    if sanitized and sanitized[0].isdigit():
        sanitized = f"col_{sanitized}"
    return sanitized or "column"


@dataclass
class CSVSource:
    """An open delimited file: normalized header plus a row iterator."""

    header: List[str]
    rows: Iterator[Row]


def _iter_rows(reader: Iterator[List[str]], header: List[str]) -> Iterator[Row]:
    for values in reader:
        if not values:
            continue
        # Short rows are padded with empty strings; extra fields are dropped
        padded = values + [""] * (len(header) - len(values))
        yield dict(zip(header, padded))


@contextmanager
def open_csv(filepath: Path, delimiter: str = ",") -> Iterator[CSVSource]:
    """
    Open a delimited file for a single sequential pass.

    The file handle is closed when the context exits, even if the caller
    stopped reading rows early.

    Args:
        filepath: Path to the file
        delimiter: Field delimiter character

    Yields:
        CSVSource with the sanitized header names
    """
    with open(filepath, "r", encoding="utf-8-sig", newline="") as f:
        reader = csv.reader(f, delimiter=delimiter)
        try:
            raw_header = next(reader)
        except StopIteration:
            raw_header = []

        header = [sanitize_name(name) for name in raw_header]
        logger.debug(f"Opened {filepath} with {len(header)} column(s)")

        yield CSVSource(header=header, rows=_iter_rows(reader, header))
