"""gffkit: reading and writing GFF3 feature annotations.

gffkit parses GFF3 lines into typed records (integer coordinates,
optional score, optional strand, attribute mapping) and writes records
back out in the exact nine-column tab-separated form.

Example:
    >>> import gffkit
    >>> with gffkit.Reader("annotations.gff3") as reader:
    ...     for record in reader:
    ...         print(record.seqname, record.start, record.end, record.strand)

Modules:
    io: Record model, tabular codec, GFF3 reader and writer
    config: Reader and writer settings
    cli: Command-line interface
    utils: Logging helpers
"""

__version__ = "0.1.0"

from gffkit.io.gff import (
    DecodeErrorKind,
    GFFError,
    Reader,
    ReadResult,
    RecordDecodeError,
    RecordWriteError,
    Writer,
    read_gff,
    write_gff,
)
from gffkit.io.record import Record, Strand

__all__ = [
    "__version__",
    "DecodeErrorKind",
    "GFFError",
    "Reader",
    "ReadResult",
    "Record",
    "RecordDecodeError",
    "RecordWriteError",
    "Strand",
    "Writer",
    "read_gff",
    "write_gff",
]
