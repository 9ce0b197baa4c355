"""GFF3 file reading and writing.

This module turns GFF3 text into :class:`~gffkit.io.record.Record`
objects and back. Each line goes through two passes of the tabular
codec: the nine tab-separated columns first, then the ``key=value``
pairs of the attributes column.

Features:
    - Lazy, single-pass reading from paths, binary or text streams
    - Per-line decode errors that do not stop the stream
    - Transparent gzip handling for ``.gz`` paths
    - Deterministic attribute order on output (sorted keys)
    - Optional GFF3 percent-escaping of attribute values

Example:
    >>> from gffkit.io.gff import Reader, Writer
    >>> with Reader("annotations.gff3") as reader, Writer("out.gff3") as writer:
    ...     for result in reader.results():
    ...         if result.ok:
    ...             writer.write(result.record)
    ...         else:
    ...             print(result.error)
"""

from __future__ import annotations

import gzip
import io
import logging
import os
import re
from enum import Enum
from pathlib import Path
from typing import IO, Any, Iterable, Iterator, TextIO, Union
from urllib.parse import unquote

import attrs

from gffkit.config import (
    ON_ERROR_MODES,
    ON_ERROR_RAISE,
    ON_ERROR_WARN,
    ReaderConfig,
    WriterConfig,
)
from gffkit.io.record import COL_ATTRIBUTES, Record
from gffkit.io.tabular import (
    GFF_ATTRIBUTES,
    GFF_COLUMNS,
    TabularCodec,
    TabularError,
)

logger = logging.getLogger(__name__)

Source = Union[str, os.PathLike, IO[Any]]

# Characters percent-encoded in attribute values when escaping is enabled.
# "%" must come first. "," is left alone since it separates multiple values.
ESCAPED_CHARACTERS = {
    "%": "%25",
    ";": "%3B",
    "=": "%3D",
    "&": "%26",
    "\t": "%09",
    "\n": "%0A",
    "\r": "%0D",
}

_ATTRIBUTE_CODEC = TabularCodec(GFF_ATTRIBUTES)

# Bytes that failed to decode, as left in the text by "surrogateescape"
_UNDECODABLE = re.compile(r"[\udc80-\udcff]")


# =============================================================================
# Exceptions
# =============================================================================


class GFFError(ValueError):
    """Base class for GFF3 decode and encode errors."""

    pass


class DecodeErrorKind(Enum):
    """Why a line could not be decoded."""

    MISSING_COLUMNS = "missing columns"
    BAD_COORDINATE = "bad coordinate"
    BAD_ATTRIBUTE_PAIR = "bad attribute pair"
    BAD_ENCODING = "bad encoding"


class RecordDecodeError(GFFError):
    """Raised (or reported) when a line cannot be decoded into a Record.

    Attributes:
        kind: Category of the failure.
        message: Description without location.
        line_number: 1-based input line, when known.
        line: Raw line text, when known.
    """

    def __init__(
        self,
        kind: DecodeErrorKind,
        message: str,
        line_number: int | None = None,
        line: str | None = None,
    ) -> None:
        self.kind = kind
        self.message = message
        self.line_number = line_number
        self.line = line
        location = f"line {line_number}: " if line_number is not None else ""
        super().__init__(f"{location}{kind.value}: {message}")


class RecordWriteError(GFFError):
    """Raised when a Record cannot be encoded as a GFF3 line."""

    pass


# =============================================================================
# Attribute Parsing
# =============================================================================


def escape_value(value: str) -> str:
    """Percent-encode reserved characters in an attribute value."""
    return "".join(ESCAPED_CHARACTERS.get(char, char) for char in value)


def parse_attributes(attr_string: str, unescape: bool = False) -> dict[str, str]:
    """Parse a GFF3 attribute column into a dictionary.

    Args:
        attr_string: Semicolon-separated key=value pairs. An empty
            string or "." means no attributes.
        unescape: Decode percent-escapes in values.

    Returns:
        Dictionary of attribute key-value pairs. A repeated key keeps
        its last value.

    Raises:
        RecordDecodeError: If a segment is not exactly one key=value pair.
    """
    attributes: dict[str, str] = {}
    if not attr_string or attr_string == ".":
        return attributes

    try:
        pairs = _ATTRIBUTE_CODEC.split_records(attr_string)
    except TabularError as e:
        raise RecordDecodeError(DecodeErrorKind.BAD_ATTRIBUTE_PAIR, str(e)) from e

    for key, value in pairs:
        attributes[key] = unquote(value) if unescape else value

    return attributes


def format_attributes(
    attributes: dict[str, str],
    sort_keys: bool = True,
    escape: bool = False,
) -> str:
    """Format an attribute dictionary as a GFF3 attribute column.

    Args:
        attributes: Dictionary of attributes.
        sort_keys: Order pairs by key rather than insertion order.
        escape: Percent-encode reserved characters in values.

    Returns:
        Semicolon-separated key=value string, empty for no attributes.

    Raises:
        RecordWriteError: If a key, or an unescaped value, contains a
            character that would break the column.
    """
    if not attributes:
        return ""

    keys = sorted(attributes) if sort_keys else list(attributes)
    terminator = GFF_ATTRIBUTES.record_terminator

    parts = []
    for key in keys:
        value = str(attributes[key])
        if escape:
            value = escape_value(value)

        if terminator in key or terminator in value:
            raise RecordWriteError(f"attribute {key!r} contains {terminator!r}")

        try:
            parts.append(_ATTRIBUTE_CODEC.encode_row((key, value)))
        except TabularError as e:
            raise RecordWriteError(f"attribute {key!r}: {e}") from e

    return terminator.join(parts)


# =============================================================================
# Stream Handling
# =============================================================================


def _open_text(
    target: Source,
    mode: str,
    encoding: str,
    errors: str = "strict",
) -> tuple[TextIO, bool]:
    """Return a text stream for a path or stream.

    Returns:
        ``(handle, owned)``. Owned handles were opened here and are
        closed by the caller; others are wrapped or used as-is.
    """
    if isinstance(target, (str, os.PathLike)):
        path = Path(target)
        if path.suffix == ".gz":
            return gzip.open(path, f"{mode}t", encoding=encoding, errors=errors, newline=""), True
        return open(path, mode, encoding=encoding, errors=errors, newline=""), True

    if isinstance(target, io.TextIOBase):
        return target, False

    # Binary stream: decode/encode through a wrapper that is detached on close
    wrapper = io.TextIOWrapper(
        target,
        encoding=encoding,
        errors=errors,
        newline="",
        write_through=(mode == "w"),
    )
    return wrapper, False


def _release(handle: TextIO, owned: bool, wrapped: bool) -> None:
    if owned:
        handle.close()
    elif wrapped and not handle.closed:
        handle.detach()


# =============================================================================
# GFF3 Reader
# =============================================================================


@attrs.frozen
class ReadResult:
    """Outcome of decoding one input line.

    Exactly one of ``record`` and ``error`` is set.

    Attributes:
        line_number: 1-based input line.
        record: Decoded record.
        error: Decode failure.
    """

    line_number: int
    record: Record | None = None
    error: RecordDecodeError | None = None

    @property
    def ok(self) -> bool:
        """Whether the line decoded successfully."""
        return self.error is None

    def unwrap(self) -> Record:
        """Return the record or raise the decode error."""
        if self.error is not None:
            raise self.error
        assert self.record is not None
        return self.record


class Reader:
    """Read GFF3 records lazily from a file or stream.

    The reader is single-pass: :meth:`results` and :meth:`records` both
    advance the same underlying stream and cannot be restarted.

    Attributes:
        config: Reader configuration.
        records_read: Number of lines decoded successfully so far.
        errors: Number of lines that failed to decode so far.

    Example:
        >>> with Reader("annotations.gff3") as reader:
        ...     for record in reader.records(on_error="skip"):
        ...         print(record.seqname, record.start, record.end)
    """

    def __init__(self, source: Source, config: ReaderConfig | None = None) -> None:
        """Initialize the reader.

        Args:
            source: Path (``.gz`` is decompressed), binary stream or
                text stream.
            config: Reader configuration; defaults if None.

        Raises:
            OSError: If a path cannot be opened.
        """
        self.config = config or ReaderConfig()
        self._wrapped = not isinstance(source, (str, os.PathLike, io.TextIOBase))
        # Undecodable bytes are kept in the text and reported per line
        self._handle, self._owned = _open_text(
            source, "r", self.config.encoding, errors="surrogateescape"
        )
        self._columns = TabularCodec(GFF_COLUMNS)
        self._rows = self._columns.iter_rows(self._handle)
        self._closed = False
        self.records_read = 0
        self.errors = 0

    @classmethod
    def from_file(cls, path: Path | str, config: ReaderConfig | None = None) -> Reader:
        """Open a reader on a file path."""
        return cls(Path(path), config=config)

    def __enter__(self) -> Reader:
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()

    def __iter__(self) -> Iterator[Record]:
        return self.records(on_error=ON_ERROR_RAISE)

    def close(self) -> None:
        """Release the input. Streams passed in by the caller stay open."""
        if self._closed:
            return
        _release(self._handle, self._owned, self._wrapped)
        self._closed = True

    def __del__(self) -> None:
        # A dropped wrapper would otherwise close the caller's stream
        if not getattr(self, "_closed", True):
            self.close()

    def _decode(self, line_number: int, row: tuple[str, ...]) -> ReadResult:
        """Decode one row of column texts."""
        line = "\t".join(row)

        def failure(kind: DecodeErrorKind, message: str) -> ReadResult:
            error = RecordDecodeError(kind, message, line_number=line_number, line=line)
            return ReadResult(line_number=line_number, error=error)

        match = _UNDECODABLE.search(line)
        if match:
            byte = ord(match.group()) - 0xDC00
            return failure(
                DecodeErrorKind.BAD_ENCODING,
                f"byte 0x{byte:02x} at position {match.start() + 1} "
                f"is not valid {self.config.encoding}",
            )

        try:
            self._columns.check_columns(row)
        except TabularError as e:
            return failure(DecodeErrorKind.MISSING_COLUMNS, str(e))

        try:
            record = Record.from_fields(row)
        except ValueError as e:
            return failure(DecodeErrorKind.BAD_COORDINATE, str(e))

        try:
            record.attributes = parse_attributes(
                row[COL_ATTRIBUTES],
                unescape=self.config.unescape_attributes,
            )
        except RecordDecodeError as e:
            return failure(e.kind, e.message)

        return ReadResult(line_number=line_number, record=record)

    def results(self) -> Iterator[ReadResult]:
        """Iterate over the decode outcome of every remaining line.

        Yields:
            ReadResult objects, one per non-blank input line.
        """
        for line_number, row in self._rows:
            result = self._decode(line_number, row)
            if result.ok:
                self.records_read += 1
            else:
                self.errors += 1
            yield result

        logger.debug(f"Decoded {self.records_read} records, {self.errors} bad lines")

    def records(self, on_error: str | None = None) -> Iterator[Record]:
        """Iterate over successfully decoded records.

        Args:
            on_error: "raise" to raise the first RecordDecodeError,
                "skip" to drop bad lines, "warn" to log and drop them.
                Defaults to the configured mode.

        Returns:
            Iterator of Record objects.

        Raises:
            ValueError: If on_error is not a known mode.
        """
        mode = on_error or self.config.on_error
        if mode not in ON_ERROR_MODES:
            raise ValueError(f"on_error must be one of {ON_ERROR_MODES}, got {mode!r}")
        return self._filter_records(mode)

    def _filter_records(self, mode: str) -> Iterator[Record]:
        for result in self.results():
            if result.ok:
                yield result.unwrap()
            elif mode == ON_ERROR_RAISE:
                raise result.error
            elif mode == ON_ERROR_WARN:
                logger.warning(f"Skipping malformed GFF3 {result.error}")


# =============================================================================
# GFF3 Writer
# =============================================================================


class Writer:
    """Write Records as GFF3 lines.

    Score and strand are written from their typed values ("." when
    absent). Attributes are sorted by key unless configured otherwise.

    Attributes:
        config: Writer configuration.
        records_written: Number of records written so far.

    Example:
        >>> with Writer("output.gff3") as writer:
        ...     writer.write(record)
    """

    def __init__(self, sink: Source, config: WriterConfig | None = None) -> None:
        """Initialize the writer.

        Args:
            sink: Path (created or truncated; ``.gz`` is compressed),
                binary stream or text stream.
            config: Writer configuration; defaults if None.

        Raises:
            OSError: If a path cannot be created.
        """
        self.config = config or WriterConfig()
        self._wrapped = not isinstance(sink, (str, os.PathLike, io.TextIOBase))
        self._handle, self._owned = _open_text(sink, "w", self.config.encoding)
        self._columns = TabularCodec(
            attrs.evolve(
                GFF_COLUMNS,
                flexible=True,
                line_terminator=self.config.line_terminator,
            )
        )
        self._closed = False
        self.records_written = 0

    @classmethod
    def to_file(cls, path: Path | str, config: WriterConfig | None = None) -> Writer:
        """Open a writer on a file path."""
        return cls(Path(path), config=config)

    def __enter__(self) -> Writer:
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()

    def close(self) -> None:
        """Flush output. Files opened by the writer are also closed."""
        if self._closed:
            return
        if not self._owned and not self._handle.closed:
            self._handle.flush()
        _release(self._handle, self._owned, self._wrapped)
        self._closed = True

    def __del__(self) -> None:
        if not getattr(self, "_closed", True):
            self.close()

    def flush(self) -> None:
        """Flush buffered output to the sink."""
        self._handle.flush()

    def format_line(self, record: Record) -> str:
        """Encode a record as one terminated GFF3 line.

        Raises:
            RecordWriteError: If the record cannot be encoded.
        """
        attributes = format_attributes(
            record.attributes,
            sort_keys=self.config.sort_attributes,
            escape=self.config.escape_attributes,
        )
        try:
            return self._columns.encode_row(record.to_fields(attributes))
        except TabularError as e:
            raise RecordWriteError(str(e)) from e

    def write(self, record: Record) -> None:
        """Write a single record.

        Args:
            record: Record to write.

        Raises:
            RecordWriteError: If the record cannot be encoded.
            OSError: If the sink rejects the write.
        """
        self._handle.write(self.format_line(record))
        self.records_written += 1

    def write_records(self, records: Iterable[Record]) -> int:
        """Write multiple records.

        Returns:
            Number of records written by this call.
        """
        count = 0
        for record in records:
            self.write(record)
            count += 1
        return count


# =============================================================================
# Convenience Functions
# =============================================================================


def read_gff(path: Path | str, config: ReaderConfig | None = None) -> list[Record]:
    """Read all records from a GFF3 file.

    Raises:
        RecordDecodeError: On the first malformed line.
    """
    with Reader(path, config=config) as reader:
        return list(reader.records(on_error=ON_ERROR_RAISE))


def iter_gff(path: Path | str, config: ReaderConfig | None = None) -> Iterator[Record]:
    """Iterate over records from a GFF3 file.

    Yields:
        Record objects, using the configured on_error mode.
    """
    with Reader(path, config=config) as reader:
        yield from reader.records()


def write_gff(
    records: Iterable[Record],
    path: Path | str,
    config: WriterConfig | None = None,
) -> int:
    """Write records to a GFF3 file.

    Returns:
        Number of records written.
    """
    with Writer(path, config=config) as writer:
        return writer.write_records(records)


def format_gff_line(record: Record, sort_keys: bool = True, escape: bool = False) -> str:
    """Format a single record as a GFF3 line without line terminator."""
    codec = TabularCodec(attrs.evolve(GFF_COLUMNS, flexible=True, line_terminator=""))
    attributes = format_attributes(record.attributes, sort_keys=sort_keys, escape=escape)
    try:
        return codec.encode_row(record.to_fields(attributes))
    except TabularError as e:
        raise RecordWriteError(str(e)) from e
