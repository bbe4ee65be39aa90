"""Coding sequence assembly and open reading frame validation.

A transcript's CDS is the concatenation of its exon sequences in rank
order, each read 5' to 3' on the coding strand. It is only used further
if it is a well formed ORF:

1. Begins with ATG
2. Ends with TAA, TAG or TGA
3. Has a length that is a multiple of 3
4. Has no internal in-frame stop codon
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

import attrs

from codonmap.utils.sequences import START_CODONS, STOP_CODONS

if TYPE_CHECKING:
    from codonmap.core.models import ExonRecord
    from codonmap.io.fasta import SequenceSource

logger = logging.getLogger(__name__)

ORF_CRITERIA = (
    "Begin with ATG",
    "End with TAA|TAG|TGA",
    "Sequence length that is a multiple of 3",
    "No internal in-frame TAA|TAG|TGA",
)


def assemble_cds(exons: Sequence[ExonRecord], source: SequenceSource) -> str:
    """Fetch and concatenate exon sequences in rank order.

    Args:
        exons: Exons sorted by ascending exon rank.
        source: Sequence source returning strand-corrected bases.

    Returns:
        Upper-case coding sequence.
    """
    return "".join(
        source.fetch(exon.chromosome, exon.strand, exon.start, exon.end)
        for exon in exons
    ).upper()


def split_codons(sequence: str) -> list[tuple[int, str]]:
    """Partition a sequence into consecutive codons.

    A trailing chunk shorter than three bases is kept.

    Returns:
        List of (1-based CDS position of the first base, codon) pairs.
    """
    return [(i + 1, sequence[i : i + 3]) for i in range(0, len(sequence), 3)]


@attrs.frozen(slots=True)
class OrfCheck:
    """Outcome of the four ORF criteria for one coding sequence."""

    starts_with_start: bool
    ends_with_stop: bool
    in_frame: bool
    single_stop: bool

    @property
    def is_valid(self) -> bool:
        """True if all criteria hold."""
        return (
            self.starts_with_start
            and self.ends_with_stop
            and self.in_frame
            and self.single_stop
        )

    @property
    def failed_criteria(self) -> list[str]:
        """Descriptions of the criteria that do not hold."""
        flags = (self.starts_with_start, self.ends_with_stop, self.in_frame, self.single_stop)
        return [text for text, ok in zip(ORF_CRITERIA, flags) if not ok]


def check_orf(sequence: str) -> OrfCheck:
    """Check a coding sequence against the ORF criteria.

    Args:
        sequence: Upper-case coding sequence.

    Returns:
        OrfCheck with one flag per criterion.
    """
    codons = [codon for _, codon in split_codons(sequence)]
    n_stops = sum(1 for codon in codons if codon in STOP_CODONS)

    return OrfCheck(
        starts_with_start=bool(codons) and codons[0] in START_CODONS,
        ends_with_stop=bool(codons) and codons[-1] in STOP_CODONS,
        in_frame=len(sequence) % 3 == 0,
        single_stop=n_stops == 1,
    )
