"""Pytest configuration and shared fixtures for gffkit tests.

Fixtures are organized by category:

- Text fixtures: GFF3 content as strings/bytes
- Path fixtures: GFF3 content written to temporary files
- Record fixtures: Records built in memory
"""

import gzip
from pathlib import Path

import pytest

from gffkit.io.record import Record, Strand

# Two UniProt features, the first without score or strand
GFF_TEXT = (
    "P0A7B8\tUniProtKB\tInitiator methionine\t1\t1\t.\t.\t.\tNote=Removed;ID=test\n"
    "P0A7B8\tUniProtKB\tChain\t2\t176\t50\t+\t.\t"
    "Note=ATP-dependent protease subunit HslV;ID=PRO_0000148105\n"
)

# Same features without attributes, so output order cannot vary
GFF_TEXT_NO_ATTRIB = (
    "P0A7B8\tUniProtKB\tInitiator methionine\t1\t1\t.\t.\t.\t\n"
    "P0A7B8\tUniProtKB\tChain\t2\t176\t50\t+\t.\t\n"
)

# Good, short, good, bad start, good, bad attribute
GFF_TEXT_MIXED = (
    "chr1\tsrc\tgene\t10\t20\t.\t+\t.\tID=g1\n"
    "chr1\tsrc\tgene\t10\n"
    "chr1\tsrc\tmRNA\t10\t20\t.\t+\t.\tID=t1;Parent=g1\n"
    "chr1\tsrc\texon\tten\t20\t.\t+\t.\tID=e1\n"
    "chr1\tsrc\texon\t10\t20\t.\t+\t.\tID=e2\n"
    "chr1\tsrc\tCDS\t10\t20\t.\t+\t0\tID;Parent=t1\n"
)


# =============================================================================
# Text Fixtures
# =============================================================================


@pytest.fixture
def gff_text() -> str:
    """Two well-formed GFF3 lines with attributes."""
    return GFF_TEXT


@pytest.fixture
def gff_bytes() -> bytes:
    """Two well-formed GFF3 lines as bytes."""
    return GFF_TEXT.encode("utf-8")


@pytest.fixture
def gff_text_no_attrib() -> str:
    """Two well-formed GFF3 lines with empty attribute columns."""
    return GFF_TEXT_NO_ATTRIB


@pytest.fixture
def gff_text_mixed() -> str:
    """Six lines, three of them malformed (lines 2, 4 and 6)."""
    return GFF_TEXT_MIXED


# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture
def gff_file(tmp_path: Path) -> Path:
    """Write the two-feature GFF3 to a file."""
    path = tmp_path / "features.gff3"
    path.write_text(GFF_TEXT, encoding="utf-8")
    return path


@pytest.fixture
def gff_gz_file(tmp_path: Path) -> Path:
    """Write the two-feature GFF3 to a gzip-compressed file."""
    path = tmp_path / "features.gff3.gz"
    with gzip.open(path, "wt", encoding="utf-8") as f:
        f.write(GFF_TEXT)
    return path


@pytest.fixture
def mixed_gff_file(tmp_path: Path) -> Path:
    """Write the GFF3 with malformed lines to a file."""
    path = tmp_path / "mixed.gff3"
    path.write_text(GFF_TEXT_MIXED, encoding="utf-8")
    return path


# =============================================================================
# Record Fixtures
# =============================================================================


@pytest.fixture
def chain_record() -> Record:
    """The second UniProt feature, built in memory."""
    return Record(
        seqname="P0A7B8",
        source="UniProtKB",
        feature_type="Chain",
        start=2,
        end=176,
        score=50,
        strand=Strand.FORWARD,
        frame=".",
        attributes={
            "Note": "ATP-dependent protease subunit HslV",
            "ID": "PRO_0000148105",
        },
    )
