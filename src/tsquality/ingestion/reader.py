"""
Delimited text reader for time series tables.

The first column holds timestamps and every further column holds one value
series sharing those timestamps. Parsing is all or nothing: a malformed row
or token rejects the whole input.
"""

import csv
import io
import re
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional, Union

import numpy as np
import pandas as pd

from tsquality.logger import get_logger
from tsquality.series import Series


logger = get_logger(__name__)

DATE_PATTERN = re.compile(r"\b(\d{4})-(\d{2})-(\d{2})\b")
EPOCH_ORDINAL = date(1970, 1, 1).toordinal()
MS_PER_DAY = 86_400_000


class CsvFormatError(ValueError):
    """Raised when tabular input cannot be parsed into a series table."""


@dataclass
class SeriesTable:
    """
    Parsed table: one shared, ascending time channel and named value channels.
    """
    time: np.ndarray
    columns: Dict[str, np.ndarray] = field(default_factory=dict)
    source: str = "<memory>"

    @property
    def names(self) -> List[str]:
        return list(self.columns)

    def series(self, name: str) -> Series:
        """
        Get one value column as a series.

        Raises:
            KeyError: If the column does not exist
        """
        if name not in self.columns:
            raise KeyError(f"No value column named '{name}' in {self.source}")
        return Series(self.time, self.columns[name])

    def to_frame(self) -> pd.DataFrame:
        data = {"timestamp": self.time}
        data.update(self.columns)
        return pd.DataFrame(data)

    def __len__(self) -> int:
        return len(self.time)


def convert_date_tokens(text: str) -> str:
    """
    Replace every ``YYYY-MM-DD`` token with its UTC epoch in milliseconds.

    Any year from 0001 to 9999 is accepted; the conversion counts whole days
    from the epoch, so it is not bound to a nanosecond timestamp range.

    Raises:
        CsvFormatError: If a token is not a valid calendar date

    Example:
        >>> convert_date_tokens("1970-01-02,5")
        '86400000,5'
    """
    def _to_epoch_ms(match: "re.Match") -> str:
        year, month, day = (int(g) for g in match.groups())
        try:
            days = date(year, month, day).toordinal() - EPOCH_ORDINAL
        except (ValueError, OverflowError) as e:
            raise CsvFormatError(f"Invalid date token '{match.group(0)}': {e}") from e
        return str(days * MS_PER_DAY)

    return DATE_PATTERN.sub(_to_epoch_ms, text)


def _parse_column(tokens: pd.Series, column: str, allow_missing: bool) -> np.ndarray:
    """
    Convert a column of string tokens to float64.

    Empty cells become NaN when ``allow_missing`` is set; otherwise every
    cell must hold a finite number.
    """
    stripped = tokens.fillna("").astype(str).str.strip()
    parsed = np.empty(len(stripped), dtype=np.float64)
    bad_rows = []

    for i, token in enumerate(stripped):
        if token == "":
            parsed[i] = np.nan
            if not allow_missing:
                bad_rows.append(i + 1)
            continue

        try:
            parsed[i] = float(token)
        except ValueError:
            bad_rows.append(i + 1)
            continue

        if not allow_missing and not np.isfinite(parsed[i]):
            bad_rows.append(i + 1)

    if bad_rows:
        preview = ", ".join(str(r) for r in bad_rows[:5])
        more = f" (and {len(bad_rows) - 5} more)" if len(bad_rows) > 5 else ""
        raise CsvFormatError(
            f"Column '{column}' has {len(bad_rows)} invalid value(s) at data row(s) {preview}{more}"
        )

    return parsed


def _column_names(cells: List[str], source: str) -> List[str]:
    """
    Value column names from header cells; a blank cell becomes ``value_<i>``.

    Raises:
        CsvFormatError: If two columns share a name after trimming whitespace
    """
    names = []
    for i, cell in enumerate(cells, start=1):
        name = "" if pd.isna(cell) else str(cell).strip()
        names.append(name or f"value_{i}")

    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise CsvFormatError(
            f"Duplicate column name(s) in {source}: {', '.join(duplicates)}"
        )
    return names


def parse_series_table(
    text: str,
    header: bool = True,
    separator: str = ",",
    convert_dates: bool = True,
    source: str = "<memory>",
) -> SeriesTable:
    """
    Parse delimited text into a series table.

    Args:
        text: Raw table text
        header: Whether the first line holds column names (default: True)
        separator: Single-character field separator (default: ",")
        convert_dates: Replace ``YYYY-MM-DD`` tokens with epoch milliseconds
        source: Label used in log and error messages

    Returns:
        SeriesTable sorted by timestamp

    Raises:
        CsvFormatError: If the text is not a valid table

    Example:
        >>> table = parse_series_table("t,temp\\n0,1.5\\n1,\\n2,2.5\\n")
        >>> table.names
        ['temp']
        >>> len(table)
        3
    """
    if len(separator) != 1:
        raise CsvFormatError(f"Separator must be a single character, got {separator!r}")

    text = text.replace("\r", "")
    if convert_dates:
        text = convert_date_tokens(text)

    lines = [line for line in text.split("\n") if line.strip()]
    if not lines:
        raise CsvFormatError(f"No data in {source}")

    width = lines[0].count(separator) + 1
    for line_num, line in enumerate(lines[1:], start=2):
        if line.count(separator) + 1 > width:
            raise CsvFormatError(
                f"Line {line_num} of {source} has {line.count(separator) + 1} fields, "
                f"expected at most {width}"
            )

    try:
        frame = pd.read_csv(
            io.StringIO("\n".join(lines)),
            sep=separator,
            header=None,
            index_col=False,
            dtype=str,
            keep_default_na=False,
            quoting=csv.QUOTE_NONE,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise CsvFormatError(f"Malformed table in {source}: {e}") from e

    if frame.shape[1] < 2:
        raise CsvFormatError(
            f"Expected a time column and at least one value column in {source}, "
            f"found {frame.shape[1]} column(s)"
        )

    # The header row is read as data so that pandas does not rename duplicates
    if header:
        names = _column_names(frame.iloc[0, 1:].tolist(), source)
        frame = frame.iloc[1:].reset_index(drop=True)
    else:
        names = [f"value_{i}" for i in range(1, frame.shape[1])]

    time = _parse_column(frame.iloc[:, 0], "time", allow_missing=False)
    values = [
        _parse_column(frame.iloc[:, i], names[i - 1], allow_missing=True)
        for i in range(1, frame.shape[1])
    ]

    order = np.argsort(time, kind="stable")
    columns = {name: column[order] for name, column in zip(names, values)}

    logger.info(f"Parsed {len(time)} rows with {len(columns)} value column(s) from {source}")
    return SeriesTable(time=time[order], columns=columns, source=source)


def read_series_table(
    file_path: Union[str, Path],
    header: bool = True,
    separator: str = ",",
    convert_dates: bool = True,
    encoding: Optional[str] = "utf-8",
) -> SeriesTable:
    """
    Read a delimited file into a series table.

    Raises:
        FileNotFoundError: If the file does not exist
        CsvFormatError: If the file is not a valid table
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Input file not found: {file_path}")

    try:
        with open(file_path, "r", encoding=encoding) as f:
            text = f.read()
    except UnicodeDecodeError as e:
        raise CsvFormatError(f"Cannot decode {file_path} as {encoding}: {e}") from e

    return parse_series_table(
        text,
        header=header,
        separator=separator,
        convert_dates=convert_dates,
        source=str(file_path),
    )
