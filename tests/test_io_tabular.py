"""Unit tests for gffkit.io.tabular module.

Tests cover:
- Dialect validation
- Row decoding with and without column checks
- Row encoding and its refusal to quote
- Stream iteration (blank lines, headers, line numbers)
- Record splitting on a terminator character
"""

import io

import attrs
import pytest

from gffkit.io.tabular import (
    GFF_ATTRIBUTES,
    GFF_COLUMNS,
    TabularCodec,
    TabularDialect,
    TabularError,
)


class TestTabularDialect:
    """Tests for dialect configuration."""

    def test_defaults(self) -> None:
        dialect = TabularDialect()

        assert dialect.delimiter == "\t"
        assert dialect.has_header is False
        assert dialect.flexible is False
        assert dialect.columns is None
        assert dialect.record_terminator is None

    def test_presets(self) -> None:
        assert GFF_COLUMNS.columns == 9
        assert GFF_ATTRIBUTES.delimiter == "="
        assert GFF_ATTRIBUTES.record_terminator == ";"

    def test_multi_char_delimiter_rejected(self) -> None:
        with pytest.raises(ValueError):
            TabularDialect(delimiter="::")

    def test_frozen(self) -> None:
        with pytest.raises(attrs.exceptions.FrozenInstanceError):
            GFF_COLUMNS.delimiter = ","


class TestDecodeRow:
    """Tests for TabularCodec.decode_row."""

    def test_nine_columns(self) -> None:
        codec = TabularCodec(GFF_COLUMNS)
        row = codec.decode_row("a\tb\tc\t1\t2\t.\t+\t.\tID=x\n")

        assert row == ("a", "b", "c", "1", "2", ".", "+", ".", "ID=x")

    def test_trailing_empty_column(self) -> None:
        codec = TabularCodec(GFF_COLUMNS)
        row = codec.decode_row("a\tb\tc\t1\t2\t.\t+\t.\t")

        assert len(row) == 9
        assert row[8] == ""

    def test_quotes_are_literal(self) -> None:
        """Quote characters get no special treatment."""
        codec = TabularCodec(TabularDialect(delimiter="\t"))
        assert codec.decode_row('"a\tb"') == ('"a', 'b"')

    def test_wrong_column_count(self) -> None:
        codec = TabularCodec(GFF_COLUMNS)
        with pytest.raises(TabularError, match="expected 9 columns, found 3"):
            codec.decode_row("a\tb\tc")

    def test_flexible_accepts_any_count(self) -> None:
        codec = TabularCodec(attrs.evolve(GFF_COLUMNS, flexible=True))
        assert codec.decode_row("a\tb") == ("a", "b")


class TestEncodeRow:
    """Tests for TabularCodec.encode_row."""

    def test_join_and_terminate(self) -> None:
        codec = TabularCodec(TabularDialect(delimiter="\t"))
        assert codec.encode_row(["a", "b", ""]) == "a\tb\t\n"

    def test_non_string_fields(self) -> None:
        codec = TabularCodec(TabularDialect(delimiter="\t"))
        assert codec.encode_row(["a", 1, 2]) == "a\t1\t2\n"

    def test_custom_terminator(self) -> None:
        codec = TabularCodec(GFF_ATTRIBUTES)
        assert codec.encode_row(["ID", "x"]) == "ID=x"

    def test_quote_character_written_as_is(self) -> None:
        codec = TabularCodec(TabularDialect(delimiter="\t"))
        assert codec.encode_row(['say "hi"', "x"]) == 'say "hi"\tx\n'

    def test_delimiter_in_field_rejected(self) -> None:
        codec = TabularCodec(TabularDialect(delimiter="\t"))
        with pytest.raises(TabularError):
            codec.encode_row(["a\tb", "c"])

    def test_line_break_in_field_rejected(self) -> None:
        codec = TabularCodec(TabularDialect(delimiter="\t"))
        with pytest.raises(TabularError, match="line break"):
            codec.encode_row(["a\nb", "c"])

    def test_column_count_checked(self) -> None:
        codec = TabularCodec(GFF_COLUMNS)
        with pytest.raises(TabularError):
            codec.encode_row(["a", "b"])

    def test_write_row(self) -> None:
        codec = TabularCodec(TabularDialect(delimiter=","))
        handle = io.StringIO()
        codec.write_row(handle, ["x", "y"])

        assert handle.getvalue() == "x,y\n"


class TestIterRows:
    """Tests for TabularCodec.iter_rows."""

    def test_line_numbers(self) -> None:
        codec = TabularCodec(GFF_COLUMNS)
        handle = io.StringIO("a\tb\n\nc\td\n")
        rows = list(codec.iter_rows(handle))

        assert rows == [(1, ("a", "b")), (3, ("c", "d"))]

    def test_column_count_not_checked(self) -> None:
        """Short rows are yielded so the caller can report them."""
        codec = TabularCodec(GFF_COLUMNS)
        rows = list(codec.iter_rows(io.StringIO("a\n")))

        assert rows == [(1, ("a",))]

    def test_header_skipped(self) -> None:
        codec = TabularCodec(TabularDialect(delimiter=",", has_header=True))
        rows = list(codec.iter_rows(io.StringIO("name,value\nx,1\n")))

        assert rows == [(2, ("x", "1"))]

    def test_no_trailing_newline(self) -> None:
        codec = TabularCodec(GFF_COLUMNS)
        rows = list(codec.iter_rows(io.StringIO("a\tb\nc\td")))

        assert [row for _, row in rows] == [("a", "b"), ("c", "d")]

    def test_crlf_line_endings(self) -> None:
        codec = TabularCodec(GFF_COLUMNS)
        rows = list(codec.iter_rows(io.StringIO("a\tb\r\nc\td\r\n")))

        assert [row for _, row in rows] == [("a", "b"), ("c", "d")]

    def test_lazy(self) -> None:
        """Rows are read on demand."""
        codec = TabularCodec(GFF_COLUMNS)
        handle = io.StringIO("a\nb\nc\n")
        rows = codec.iter_rows(handle)

        assert next(rows) == (1, ("a",))
        assert next(rows) == (2, ("b",))

    def test_long_field(self) -> None:
        """Fields beyond the csv module default size are read whole."""
        codec = TabularCodec(GFF_COLUMNS)
        note = "x" * 200_000
        rows = list(codec.iter_rows(io.StringIO(f"a\t{note}\nb\tc\n")))

        assert rows == [(1, ("a", note)), (2, ("b", "c"))]


class TestSplitRecords:
    """Tests for TabularCodec.split_records."""

    def test_pairs(self) -> None:
        codec = TabularCodec(GFF_ATTRIBUTES)
        assert codec.split_records("Note=Removed;ID=test") == [("Note", "Removed"), ("ID", "test")]

    def test_empty_string(self) -> None:
        codec = TabularCodec(GFF_ATTRIBUTES)
        assert codec.split_records("") == []

    def test_trailing_terminator(self) -> None:
        codec = TabularCodec(GFF_ATTRIBUTES)
        assert codec.split_records("ID=x;") == [("ID", "x")]

    def test_empty_value(self) -> None:
        codec = TabularCodec(GFF_ATTRIBUTES)
        assert codec.split_records("Note=") == [("Note", "")]

    def test_missing_delimiter(self) -> None:
        codec = TabularCodec(GFF_ATTRIBUTES)
        with pytest.raises(TabularError, match="'Note'"):
            codec.split_records("ID=x;Note")

    def test_too_many_delimiters(self) -> None:
        codec = TabularCodec(GFF_ATTRIBUTES)
        with pytest.raises(TabularError):
            codec.split_records("ID=x=y")

    def test_newline_terminated_without_record_terminator(self) -> None:
        codec = TabularCodec(TabularDialect(delimiter=","))
        assert codec.split_records("a,b\nc,d") == [("a", "b"), ("c", "d")]
