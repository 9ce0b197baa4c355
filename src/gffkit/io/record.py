"""In-memory model of a single GFF3 line.

A :class:`Record` holds the nine columns of one feature line as typed
values. The helpers in this module convert between the on-disk text of
each column and those typed values:

    seqname, source, feature_type, frame  -> str (passed through)
    start, end                            -> int (unsigned, 1-based)
    score                                 -> int | None
    strand                                -> Strand | None
    attributes                            -> dict[str, str]

Score and strand decoding is lossy on purpose: a placeholder (".") and
an unparseable value both decode to ``None``, and both are written back
as ".".

Example:
    >>> from gffkit.io.record import Record, Strand
    >>> record = Record(seqname="chr1", start=10, end=20, strand=Strand.FORWARD)
    >>> record.strand_text
    '+'
    >>> record.score_text
    '.'
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Sequence

import attrs

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

# GFF3 column indices
COL_SEQNAME = 0
COL_SOURCE = 1
COL_TYPE = 2
COL_START = 3
COL_END = 4
COL_SCORE = 5
COL_STRAND = 6
COL_FRAME = 7
COL_ATTRIBUTES = 8

# Text used for an absent score or strand
PLACEHOLDER = "."

# Largest value accepted for coordinates and scores (unsigned 64-bit)
MAX_UNSIGNED = 2**64 - 1

_UNSIGNED_PATTERN = re.compile(r"\+?[0-9]+")


# =============================================================================
# Enums
# =============================================================================


class Strand(Enum):
    """Orientation of a feature on a double-stranded sequence."""

    FORWARD = "+"
    REVERSE = "-"

    def __str__(self) -> str:
        return self.value


# =============================================================================
# Field Conversion
# =============================================================================


def parse_coordinate(text: str) -> int:
    """Parse an unsigned base-10 integer column.

    Args:
        text: Raw column text.

    Returns:
        Parsed integer.

    Raises:
        ValueError: If the text is not an unsigned integer that fits in
            64 bits.
    """
    if not _UNSIGNED_PATTERN.fullmatch(text):
        raise ValueError(f"not an unsigned integer: {text!r}")

    value = int(text)
    if value > MAX_UNSIGNED:
        raise ValueError(f"integer out of range: {text!r}")
    return value


def parse_score(text: str) -> int | None:
    """Decode the score column (lossy).

    The placeholder "." and any text that is not an unsigned integer both
    give ``None``; the two cases cannot be told apart afterwards.

    Args:
        text: Raw score column.

    Returns:
        Score as an integer, or None.
    """
    if text == PLACEHOLDER:
        return None

    try:
        return parse_coordinate(text)
    except ValueError:
        logger.debug(f"Unparseable score {text!r} treated as absent")
        return None


def parse_strand(text: str) -> Strand | None:
    """Decode the strand column.

    Only "+" and "-" are recognised; "." "?" and everything else give None.
    """
    if text == Strand.FORWARD.value:
        return Strand.FORWARD
    if text == Strand.REVERSE.value:
        return Strand.REVERSE
    return None


def format_score(score: int | None) -> str:
    """Canonical text for a score value."""
    return PLACEHOLDER if score is None else str(score)


def format_strand(strand: Strand | None) -> str:
    """Canonical text for a strand value."""
    return PLACEHOLDER if strand is None else strand.value


# =============================================================================
# Data Model
# =============================================================================


@attrs.define(slots=True)
class Record:
    """One GFF3 feature line.

    A record built with no arguments is a placeholder: empty text
    fields, zero coordinates, no score, no strand and no attributes.
    Fields are plain attributes and are not validated.

    Attributes:
        seqname: Sequence/chromosome identifier.
        source: Program or database that produced the feature.
        feature_type: Feature kind (ontology term or free text).
        start: Start position (1-based, inclusive).
        end: End position (1-based, inclusive).
        score: Score, or None when absent or unparseable.
        strand: Strand, or None when unknown.
        frame: Reading frame text, not interpreted.
        attributes: Attribute key/value pairs.
    """

    seqname: str = ""
    source: str = ""
    feature_type: str = ""
    start: int = 0
    end: int = 0
    score: int | None = None
    strand: Strand | None = None
    frame: str = ""
    attributes: dict[str, str] = attrs.Factory(dict)

    @property
    def score_text(self) -> str:
        """Score as written to disk ("." when absent)."""
        return format_score(self.score)

    @score_text.setter
    def score_text(self, text: str) -> None:
        self.score = parse_score(text)

    @property
    def strand_text(self) -> str:
        """Strand as written to disk ("." when unknown)."""
        return format_strand(self.strand)

    @strand_text.setter
    def strand_text(self, text: str) -> None:
        self.strand = parse_strand(text)

    @classmethod
    def from_fields(
        cls,
        fields: Sequence[str],
        attributes: dict[str, str] | None = None,
    ) -> Record:
        """Build a record from the nine raw column texts.

        Args:
            fields: Nine column texts in file order. The attributes
                column is not decoded here.
            attributes: Already-decoded attribute mapping; empty if None.

        Returns:
            Decoded record.

        Raises:
            ValueError: If start or end is not an unsigned integer.
        """
        return cls(
            seqname=fields[COL_SEQNAME],
            source=fields[COL_SOURCE],
            feature_type=fields[COL_TYPE],
            start=parse_coordinate(fields[COL_START]),
            end=parse_coordinate(fields[COL_END]),
            score=parse_score(fields[COL_SCORE]),
            strand=parse_strand(fields[COL_STRAND]),
            frame=fields[COL_FRAME],
            attributes=attributes if attributes is not None else {},
        )

    def to_fields(self, attributes_text: str) -> tuple[str, ...]:
        """Return the nine column texts in file order.

        Args:
            attributes_text: Already-encoded attributes column.
        """
        return (
            self.seqname,
            self.source,
            self.feature_type,
            str(self.start),
            str(self.end),
            self.score_text,
            self.strand_text,
            self.frame,
            attributes_text,
        )
