"""
Tests for the delimited series table reader.

Tests:
- Header and headerless tables
- Empty cells as missing values
- Sorting by timestamp
- Date token conversion
- Rejection of malformed input
"""

import numpy as np
import pytest

from tsquality.ingestion import CsvFormatError, SeriesTable, parse_series_table, read_series_table
from tsquality.ingestion.reader import convert_date_tokens

from tests.fixtures.series_test_data import create_csv_text, write_malformed_csv


class TestParseSeriesTable:
    """Test parsing of in-memory text."""

    def test_basic_table(self):
        table = parse_series_table("time,temp,hum\n0,1.5,40\n1,2.5,41\n")

        assert table.names == ["temp", "hum"]
        assert table.time.tolist() == [0.0, 1.0]
        assert table.columns["temp"].tolist() == [1.5, 2.5]
        assert table.columns["hum"].tolist() == [40.0, 41.0]

    def test_empty_cells_are_missing(self):
        text = create_csv_text([0, 1, 2], {"a": [1.0, None, 3.0]})

        table = parse_series_table(text)

        assert np.isnan(table.columns["a"][1])
        assert table.columns["a"][2] == 3.0

    def test_nan_token_is_missing(self):
        table = parse_series_table("t,a\n0,nan\n1,2\n")

        assert np.isnan(table.columns["a"][0])

    def test_short_row_pads_with_missing(self):
        table = parse_series_table("t,a,b\n0,1,2\n1,3\n")

        assert table.columns["a"][1] == 3.0
        assert np.isnan(table.columns["b"][1])

    def test_rows_sorted_by_time(self):
        table = parse_series_table("t,v\n2,20\n0,0\n1,10\n")

        assert table.time.tolist() == [0.0, 1.0, 2.0]
        assert table.columns["v"].tolist() == [0.0, 10.0, 20.0]

    def test_equal_timestamps_keep_input_order(self):
        table = parse_series_table("t,v\n1,5\n1,6\n0,7\n")

        assert table.time.tolist() == [0.0, 1.0, 1.0]
        assert table.columns["v"].tolist() == [7.0, 5.0, 6.0]

    def test_no_header(self):
        table = parse_series_table("0,1.0,2.0\n1,3.0,4.0\n", header=False)

        assert table.names == ["value_1", "value_2"]
        assert len(table) == 2

    def test_custom_separator(self):
        text = create_csv_text([0, 1], {"v": [1.0, 2.0]}, separator=";")

        table = parse_series_table(text, separator=";")

        assert table.columns["v"].tolist() == [1.0, 2.0]

    def test_separator_must_be_single_character(self):
        with pytest.raises(CsvFormatError, match="single character"):
            parse_series_table("0,1\n", separator=",,")

    def test_date_tokens_converted(self):
        table = parse_series_table("date,v\n2024-01-02,2\n2024-01-01,1\n")

        assert table.time.tolist() == [1704067200000.0, 1704153600000.0]
        assert table.columns["v"].tolist() == [1.0, 2.0]

    def test_date_conversion_disabled(self):
        with pytest.raises(CsvFormatError):
            parse_series_table("date,v\n2024-01-01,1\n", convert_dates=False)

    def test_carriage_returns_and_blank_lines(self):
        table = parse_series_table("t,v\r\n0,1\r\n\r\n   \n1,2\r\n")

        assert table.time.tolist() == [0.0, 1.0]
        assert table.columns["v"].tolist() == [1.0, 2.0]

    def test_scientific_notation(self):
        table = parse_series_table("t,v\n1e3,2.5E-1\n")

        assert table.time[0] == 1000.0
        assert table.columns["v"][0] == 0.25

    def test_to_frame(self):
        frame = parse_series_table("t,a\n0,1\n1,2\n").to_frame()

        assert list(frame.columns) == ["timestamp", "a"]
        assert len(frame) == 2

    def test_blank_header_cell_gets_positional_name(self):
        table = parse_series_table("t,,b\n0,1,2\n")

        assert table.names == ["value_1", "b"]

    def test_header_names_trimmed(self):
        table = parse_series_table("t, a , b\n0,1,2\n")

        assert table.names == ["a", "b"]

    def test_series_lookup(self):
        table = parse_series_table("t,a\n0,1\n1,2\n")

        series = table.series("a")

        assert series.values.tolist() == [1.0, 2.0]
        with pytest.raises(KeyError):
            table.series("missing")


class TestMalformedInput:
    """Parsing is all or nothing."""

    def test_non_numeric_value(self):
        with pytest.raises(CsvFormatError, match="row"):
            parse_series_table("t,v\n0,1\n1,abc\n")

    def test_missing_timestamp(self):
        with pytest.raises(CsvFormatError, match="time"):
            parse_series_table("t,v\n0,1\n,2\n")

    def test_non_finite_timestamp(self):
        with pytest.raises(CsvFormatError):
            parse_series_table("t,v\nnan,1\n1,2\n")

    def test_too_many_fields(self):
        with pytest.raises(CsvFormatError, match="fields"):
            parse_series_table("t,v\n0,1\n1,2,3\n")

    def test_single_column(self):
        with pytest.raises(CsvFormatError, match="value column"):
            parse_series_table("t\n0\n1\n")

    def test_empty_text(self):
        with pytest.raises(CsvFormatError, match="No data"):
            parse_series_table("  \n\n")

    def test_invalid_date(self):
        with pytest.raises(CsvFormatError, match="Invalid date"):
            parse_series_table("d,v\n2024-13-45,1\n")

    def test_year_zero_is_invalid(self):
        with pytest.raises(CsvFormatError, match="Invalid date"):
            parse_series_table("d,v\n0000-01-01,1\n")

    def test_duplicate_names_after_trimming(self):
        with pytest.raises(CsvFormatError, match="Duplicate column name"):
            parse_series_table("t, a,a \n0,1,5\n1,2,6\n")

    def test_exact_duplicate_names(self):
        with pytest.raises(CsvFormatError, match="Duplicate column name"):
            parse_series_table("t,a,a\n0,1,5\n")

    def test_format_error_is_value_error(self):
        assert issubclass(CsvFormatError, ValueError)


class TestConvertDateTokens:
    """Test date token rewriting."""

    def test_epoch_start(self):
        assert convert_date_tokens("1970-01-01") == "0"

    def test_only_date_tokens_change(self):
        assert convert_date_tokens("1970-01-02,5.5") == "86400000,5.5"

    def test_earliest_representable_date(self):
        assert convert_date_tokens("0001-01-01") == "-62135596800000"

    def test_latest_representable_date(self):
        assert convert_date_tokens("9999-12-31") == "253402214400000"

    def test_dates_beyond_nanosecond_range_parse(self):
        table = parse_series_table("t,v\n9999-01-02,2\n0001-01-01,1\n9999-01-01,3\n")

        assert table.time[0] == -62135596800000.0
        assert table.time[2] - table.time[1] == 86_400_000
        assert table.columns["v"].tolist() == [1.0, 3.0, 2.0]


class TestReadSeriesTable:
    """Test reading from disk."""

    def test_read_file(self, tmp_path):
        path = tmp_path / "data.csv"
        path.write_text(create_csv_text([0, 1, 2], {"v": [1.0, 2.0, 3.0]}))

        table = read_series_table(path)

        assert isinstance(table, SeriesTable)
        assert table.source == str(path)
        assert len(table) == 3

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_series_table(tmp_path / "absent.csv")

    def test_malformed_file(self, tmp_path):
        path = write_malformed_csv(tmp_path / "bad.csv")

        with pytest.raises(CsvFormatError):
            read_series_table(path)

    def test_undecodable_file(self, tmp_path):
        path = tmp_path / "binary.csv"
        path.write_bytes(b"t,v\n0,\xff\xfe\n")

        with pytest.raises(CsvFormatError, match="decode"):
            read_series_table(path)
