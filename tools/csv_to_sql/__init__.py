"""CSV to SQL Converter - Generate SQL from CSV files."""

from .converter import CSVToSQL, ConversionRun
from .inference import ColumnType
from .options import ConfigurationError, ConversionOptions

__all__ = ["CSVToSQL", "ColumnType", "ConfigurationError", "ConversionOptions", "ConversionRun"]
