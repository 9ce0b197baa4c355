"""Input/output handlers for gffkit.

- record: the typed Record model and per-column conversions
- tabular: the delimiter-based row codec (csv module)
- gff: GFF3 Reader and Writer built on the two above

Example:
    >>> from gffkit.io import read_gff, write_gff
    >>> records = read_gff("annotations.gff3")
    >>> write_gff(records, "copy.gff3")
"""

from gffkit.io.gff import (
    DecodeErrorKind,
    GFFError,
    Reader,
    ReadResult,
    RecordDecodeError,
    RecordWriteError,
    Writer,
    format_attributes,
    format_gff_line,
    iter_gff,
    parse_attributes,
    read_gff,
    write_gff,
)
from gffkit.io.record import (
    Record,
    Strand,
    parse_coordinate,
    parse_score,
    parse_strand,
)
from gffkit.io.tabular import TabularCodec, TabularDialect, TabularError

__all__ = [
    "DecodeErrorKind",
    "GFFError",
    "Reader",
    "ReadResult",
    "Record",
    "RecordDecodeError",
    "RecordWriteError",
    "Strand",
    "TabularCodec",
    "TabularDialect",
    "TabularError",
    "Writer",
    "format_attributes",
    "format_gff_line",
    "iter_gff",
    "parse_attributes",
    "parse_coordinate",
    "parse_score",
    "parse_strand",
    "read_gff",
    "write_gff",
]
