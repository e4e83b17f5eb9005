"""
Ingestion of tabular time series input.
"""

from tsquality.ingestion.reader import (
    CsvFormatError,
    SeriesTable,
    convert_date_tokens,
    parse_series_table,
    read_series_table,
)

__all__ = [
    "CsvFormatError",
    "SeriesTable",
    "convert_date_tokens",
    "parse_series_table",
    "read_series_table",
]
