"""Pytest configuration and shared fixtures for codonmap tests.

Fixtures are organized by category:

- Sequence fixtures: In-memory chromosomes with known coding sequences
- Exon fixtures: Transcripts laid out on those chromosomes
- File fixtures: FASTA files and exon tables written to tmp_path
"""

from pathlib import Path

import pytest

from codonmap.core.models import ExonRecord
from codonmap.io.fasta import InMemorySequenceSource
from codonmap.utils.sequences import reverse_complement

# =============================================================================
# Synthetic Chromosomes
# =============================================================================

# chr1: single-exon ORF ATGCAATAA at 100..108
CHR1 = "A" * 99 + "ATGCAATAA" + "A" * 20

# chr2: minus-strand transcript ATG TGG CAG AAA TAA split over two exons.
# Exon 1 (CDS 1..7, "ATGTGGC") sits at 201..207, exon 2 (CDS 8..15,
# "AGAAATAA") at 101..108.
CHR2 = (
    "C" * 100
    + reverse_complement("AGAAATAA")
    + "C" * 92
    + reverse_complement("ATGTGGC")
    + "C" * 10
)

# chr3: the chr2 transcript on the plus strand, exon 1 at 101..107 and
# exon 2 at 201..208
CHR3 = "C" * 100 + "ATGTGGC" + "C" * 93 + "AGAAATAA" + "C" * 10

# chr4: two-exon ORF with a 66 bp first exon so the NMD boundary is 11.
# Exon 1 at 11..76, exon 2 ("CGATAA") at 97..102.
CHR4_EXON1 = "ATG" + "CAA" + "GCC" * 19 + "CAG"
CHR4 = "T" * 10 + CHR4_EXON1 + "T" * 20 + "CGATAA" + "T" * 10

# chr5: one ORF per line, each 9 bp, starting at 1, 21, 41, ...
CHR5_ORFS = {
    "no_start": "CTGCAATAA",
    "no_stop": "ATGCAACAA",
    "internal_stop": "ATGTAATAA",
    "no_match": "ATGAAATAA",
    "double_tgg": "ATGTGGTAA",
}
CHR5 = "".join(seq + "G" * 11 for seq in CHR5_ORFS.values())


def chr5_exon(name: str) -> ExonRecord:
    """Single-exon transcript for one of the chr5 test ORFs."""
    start = list(CHR5_ORFS).index(name) * 20 + 1
    return ExonRecord(name, f"{name}_gene", 1, "chr5", "+", start, start + 8)


# =============================================================================
# Sequence Fixtures
# =============================================================================


@pytest.fixture
def chromosomes() -> dict[str, str]:
    """All synthetic chromosomes."""
    return {
        "chr1": CHR1,
        "chr2": CHR2,
        "chr3": CHR3,
        "chr4": CHR4,
        "chr5": CHR5,
    }


@pytest.fixture
def source(chromosomes: dict[str, str]) -> InMemorySequenceSource:
    """In-memory sequence source over the synthetic chromosomes."""
    return InMemorySequenceSource(chromosomes)


# =============================================================================
# Exon Fixtures
# =============================================================================


@pytest.fixture
def single_exon_plus() -> list[ExonRecord]:
    """T1: one plus-strand exon reading ATGCAATAA."""
    return [ExonRecord("T1", "G1", 1, "chr1", "+", 100, 108)]


@pytest.fixture
def two_exon_minus() -> list[ExonRecord]:
    """T2: two minus-strand exons reading ATGTGGCAGAAATAA."""
    return [
        ExonRecord("T2", "G2", 1, "chr2", "-", 201, 207),
        ExonRecord("T2", "G2", 2, "chr2", "-", 101, 108),
    ]


@pytest.fixture
def two_exon_plus() -> list[ExonRecord]:
    """T3: two plus-strand exons reading ATGTGGCAGAAATAA."""
    return [
        ExonRecord("T3", "G3", 1, "chr3", "+", 101, 107),
        ExonRecord("T3", "G3", 2, "chr3", "+", 201, 208),
    ]


@pytest.fixture
def nmd_transcript() -> list[ExonRecord]:
    """T4: two plus-strand exons with a 66 bp first exon."""
    return [
        ExonRecord("T4", "G4", 1, "chr4", "+", 11, 76),
        ExonRecord("T4", "G4", 2, "chr4", "+", 97, 102),
    ]


@pytest.fixture
def all_exons(
    single_exon_plus: list[ExonRecord],
    two_exon_minus: list[ExonRecord],
    two_exon_plus: list[ExonRecord],
    nmd_transcript: list[ExonRecord],
) -> list[ExonRecord]:
    """Every valid multi-hit transcript plus the chr5 edge cases."""
    return (
        single_exon_plus
        + two_exon_minus
        + two_exon_plus
        + nmd_transcript
        + [chr5_exon(name) for name in CHR5_ORFS]
    )


# =============================================================================
# File Fixtures
# =============================================================================


@pytest.fixture
def synthetic_fasta(tmp_path: Path, chromosomes: dict[str, str]) -> Path:
    """Write the synthetic chromosomes to a FASTA file."""
    fasta_path = tmp_path / "test_genome.fa"

    with open(fasta_path, "w") as f:
        for seqid, seq in chromosomes.items():
            f.write(f">{seqid}\n")
            # Write in 60-character lines
            for i in range(0, len(seq), 60):
                f.write(seq[i : i + 60] + "\n")

    return fasta_path


@pytest.fixture
def exon_table(tmp_path: Path, all_exons: list[ExonRecord]) -> Path:
    """Write the test transcripts as a short-name exon table."""
    table_path = tmp_path / "cds.tsv"

    with open(table_path, "w") as f:
        f.write("tx\tgene\texon\tchr\tstrand\tstart\tend\n")
        for exon in all_exons:
            f.write(
                f"{exon.transcript_id}\t{exon.gene_id}\t{exon.exon_rank}\t"
                f"{exon.chromosome}\t{exon.strand.value}\t{exon.start}\t{exon.end}\n"
            )

    return table_path
