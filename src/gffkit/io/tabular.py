"""Delimiter-based row codec.

This module is the generic text-row layer that the GFF3 reader and
writer sit on. It is a thin, strict wrapper around :mod:`csv`:

- no quoting is ever applied or recognised (GFF3 has no quoting)
- rows are split on a single delimiter character
- an optional fixed column count is checked on decode
- a string can be split into several records on a terminator
  character, which is how the attribute column is decoded

Two preset dialects cover GFF3: :data:`GFF_COLUMNS` for the nine
tab-separated columns and :data:`GFF_ATTRIBUTES` for the ``key=value``
pairs of the ninth column.

Example:
    >>> from gffkit.io.tabular import GFF_ATTRIBUTES, TabularCodec
    >>> TabularCodec(GFF_ATTRIBUTES).split_records("ID=x;Note=y")
    [('ID', 'x'), ('Note', 'y')]
"""

from __future__ import annotations

import csv
import io
from typing import Any, Iterable, Iterator, TextIO

import attrs

# Largest field the csv parser accepts. The csv default (128 KiB) is too
# small for long Note, Dbxref or Target values. Kept within a 32-bit C long.
FIELD_SIZE_LIMIT = 2**31 - 1

if csv.field_size_limit() < FIELD_SIZE_LIMIT:
    csv.field_size_limit(FIELD_SIZE_LIMIT)

# =============================================================================
# Exceptions
# =============================================================================


class TabularError(ValueError):
    """Raised when a row cannot be decoded or encoded."""

    pass


# =============================================================================
# Dialects
# =============================================================================


def _single_char(instance: Any, attribute: attrs.Attribute, value: str | None) -> None:
    if value is not None and (not isinstance(value, str) or len(value) != 1):
        raise ValueError(f"{attribute.name} must be a single character, got {value!r}")


@attrs.frozen
class TabularDialect:
    """Configuration of a :class:`TabularCodec`.

    Attributes:
        delimiter: Field separator.
        has_header: Skip the first row when iterating a stream.
        flexible: Accept rows with any number of columns.
        columns: Expected column count, checked unless flexible.
        record_terminator: Character separating records inside one string
            (used by :meth:`TabularCodec.split_records`).
        line_terminator: Appended to every encoded row.
    """

    delimiter: str = attrs.field(default="\t", validator=_single_char)
    has_header: bool = False
    flexible: bool = False
    columns: int | None = None
    record_terminator: str | None = attrs.field(default=None, validator=_single_char)
    line_terminator: str = "\n"


GFF_COLUMNS = TabularDialect(delimiter="\t", has_header=False, columns=9)

GFF_ATTRIBUTES = TabularDialect(
    delimiter="=",
    has_header=False,
    columns=2,
    record_terminator=";",
    line_terminator="",
)


# =============================================================================
# Codec
# =============================================================================


class TabularCodec:
    """Split text into rows of fields and join fields back into text.

    Attributes:
        dialect: Active dialect.

    Example:
        >>> codec = TabularCodec(GFF_COLUMNS)
        >>> codec.decode_row("a\\tb\\tc\\t1\\t2\\t.\\t+\\t.\\t")[3]
        '1'
    """

    def __init__(self, dialect: TabularDialect = GFF_COLUMNS) -> None:
        self.dialect = dialect
        self._csv_options: dict[str, Any] = {
            "delimiter": dialect.delimiter,
            "quoting": csv.QUOTE_NONE,
            "quotechar": None,
            "escapechar": None,
            "strict": True,
        }

    def check_columns(self, row: tuple[str, ...]) -> None:
        """Check a row against the expected column count.

        Raises:
            TabularError: If the dialect is not flexible and the count
                differs.
        """
        expected = self.dialect.columns
        if self.dialect.flexible or expected is None:
            return
        if len(row) != expected:
            raise TabularError(f"expected {expected} columns, found {len(row)}")

    def decode_row(self, text: str) -> tuple[str, ...]:
        """Split one row into fields.

        Args:
            text: Row text, with or without its line terminator.

        Returns:
            Tuple of field texts.

        Raises:
            TabularError: If the row is malformed or has the wrong
                number of columns.
        """
        try:
            rows = list(csv.reader([text], **self._csv_options))
        except csv.Error as e:
            raise TabularError(str(e)) from e

        row = tuple(rows[0]) if rows else ()
        self.check_columns(row)
        return row

    def encode_row(self, fields: Iterable[Any]) -> str:
        """Join fields into one terminated row.

        Args:
            fields: Field values; non-string values are converted with str().

        Returns:
            Encoded row including the line terminator.

        Raises:
            TabularError: If a field contains the delimiter or a line
                break, or the column count is wrong.
        """
        row = tuple(str(field) for field in fields)
        self.check_columns(row)

        for field in row:
            if "\n" in field or "\r" in field:
                raise TabularError(f"field contains a line break: {field!r}")

        buffer = io.StringIO()
        writer = csv.writer(
            buffer,
            lineterminator=self.dialect.line_terminator,
            **self._csv_options,
        )
        try:
            writer.writerow(row)
        except csv.Error as e:
            raise TabularError(f"cannot encode row {row!r}: {e}") from e
        return buffer.getvalue()

    def iter_rows(self, handle: TextIO) -> Iterator[tuple[int, tuple[str, ...]]]:
        """Lazily read rows from a text stream.

        Blank lines are skipped, as is the header when the dialect has
        one. Column counts are not checked here so that callers can
        report them per row with :meth:`check_columns`.

        Args:
            handle: Text stream, ideally opened with ``newline=""``.

        Yields:
            ``(line_number, fields)`` pairs, line numbers 1-based.

        Raises:
            TabularError: If the underlying parser rejects the input.
        """
        reader = csv.reader(handle, **self._csv_options)
        header_pending = self.dialect.has_header

        while True:
            try:
                row = next(reader)
            except StopIteration:
                return
            except csv.Error as e:
                raise TabularError(f"line {reader.line_num}: {e}") from e

            if not row:
                continue
            if header_pending:
                header_pending = False
                continue

            yield reader.line_num, tuple(row)

    def split_records(self, text: str) -> list[tuple[str, ...]]:
        """Split a string into records on the record terminator.

        Empty records (for example after a trailing terminator) are
        skipped.

        Args:
            text: Text holding zero or more records.

        Returns:
            List of decoded records.

        Raises:
            TabularError: If a record has the wrong number of columns.
        """
        terminator = self.dialect.record_terminator
        pieces = text.split(terminator) if terminator is not None else text.splitlines()

        records = []
        for piece in pieces:
            if not piece:
                continue
            try:
                record = self.decode_row(piece)
            except TabularError as e:
                raise TabularError(f"{piece!r}: {e}") from e
            records.append(record)
        return records

    def write_row(self, handle: TextIO, fields: Iterable[Any]) -> None:
        """Encode fields and write them to a text stream.

        The row is fully encoded before anything is written.
        """
        handle.write(self.encode_row(fields))
