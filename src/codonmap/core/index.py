"""Per-base exon index for a transcript's coding sequence.

The index maps every 1-based CDS coordinate to the genome coordinate,
chromosome, strand and exon rank of the base it came from. Exons are
walked in rank order; on the minus strand each exon is walked from its
upper to its lower genomic coordinate so that the index follows the
5' to 3' direction of the transcript.

Example:
    >>> index = ExonIndex.build(exons)
    >>> index.genome_coordinate(4)
    103
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from codonmap.core.models import ExonRecord, Strand

# Edits further than this many bases upstream of the last exon-exon
# junction are predicted to trigger nonsense-mediated decay
NMD_JUNCTION_DISTANCE = 56


def genomic_positions(strand: Strand, start: int, end: int) -> np.ndarray:
    """Genome coordinates of one exon in transcript (5' to 3') order.

    Args:
        strand: Coding strand of the exon.
        start: Lower genomic coordinate.
        end: Upper genomic coordinate.

    Returns:
        int64 array of length ``abs(end - start) + 1``.
    """
    low, high = min(start, end), max(start, end)
    if strand.step > 0:
        return np.arange(low, high + 1, dtype=np.int64)
    return np.arange(high, low - 1, -1, dtype=np.int64)


class ExonIndex:
    """Fixed-size lookup arrays addressed by CDS coordinate.

    Attributes:
        genome: Genome coordinate at each CDS position.
        strand: +1/-1 strand at each CDS position.
        exon: Exon rank at each CDS position.
        chromosome: Chromosome name at each CDS position.
    """

    __slots__ = ("genome", "strand", "exon", "chromosome")

    def __init__(
        self,
        genome: np.ndarray,
        strand: np.ndarray,
        exon: np.ndarray,
        chromosome: np.ndarray,
    ) -> None:
        self.genome = genome
        self.strand = strand
        self.exon = exon
        self.chromosome = chromosome

    @classmethod
    def build(cls, exons: Sequence[ExonRecord]) -> ExonIndex:
        """Build the index from a transcript's exons.

        Args:
            exons: Exons sorted by ascending exon rank.

        Returns:
            ExonIndex covering the concatenated exons.
        """
        total = sum(exon.length for exon in exons)

        genome = np.empty(total, dtype=np.int64)
        strand = np.empty(total, dtype=np.int8)
        exon_rank = np.empty(total, dtype=np.int64)
        chromosome = np.empty(total, dtype=object)

        offset = 0
        for exon in exons:
            span = exon.length
            window = slice(offset, offset + span)
            genome[window] = genomic_positions(exon.strand, exon.start, exon.end)
            strand[window] = exon.strand.step
            exon_rank[window] = exon.exon_rank
            chromosome[window] = exon.chromosome
            offset += span

        return cls(genome, strand, exon_rank, chromosome)

    def __len__(self) -> int:
        return int(self.genome.shape[0])

    @property
    def cds_length(self) -> int:
        """Number of bases in the indexed coding sequence."""
        return len(self)

    def _position(self, cds_coordinate: int) -> int:
        if not 1 <= cds_coordinate <= len(self):
            raise IndexError(
                f"CDS coordinate {cds_coordinate} outside 1..{len(self)}"
            )
        return cds_coordinate - 1

    def genome_coordinate(self, cds_coordinate: int) -> int:
        """Genome coordinate of a CDS position."""
        return int(self.genome[self._position(cds_coordinate)])

    def chromosome_at(self, cds_coordinate: int) -> str:
        """Chromosome of a CDS position."""
        return str(self.chromosome[self._position(cds_coordinate)])

    def strand_at(self, cds_coordinate: int) -> Strand:
        """Coding strand of a CDS position."""
        step = self.strand[self._position(cds_coordinate)]
        return Strand.PLUS if step > 0 else Strand.MINUS

    def exon_rank(self, cds_coordinate: int) -> int:
        """Exon rank of a CDS position."""
        return int(self.exon[self._position(cds_coordinate)])

    def first_position_of_exon(self, rank: int) -> int | None:
        """1-based CDS coordinate of the first base of an exon, if present."""
        hits = np.flatnonzero(self.exon == rank)
        if hits.size == 0:
            return None
        return int(hits[0]) + 1

    @property
    def nmd_boundary(self) -> int:
        """CDS coordinate below which a premature stop is predicted to cause NMD.

        Measured from the first base of the highest-ranked exon; with a
        single exon this is negative and nothing is predicted.
        """
        if len(self) == 0:
            return -NMD_JUNCTION_DISTANCE
        last_exon_start = self.first_position_of_exon(int(self.exon.max()))
        return last_exon_start - NMD_JUNCTION_DISTANCE
