"""Data models for codon location.

This module defines the records that flow through the per-transcript
pipeline:

- Strand: two-variant strand enumeration
- ExonRecord: one CDS exon of a transcript (input)
- CodonSpec: a codon, the targeted base within it, and the guide strand rule
- LocatedCodon: one annotated hit (output row)

All coordinates are 1-based and inclusive.

Example:
    >>> from codonmap.core.models import ExonRecord, Strand
    >>> exon = ExonRecord("T1", "G1", 1, "chr1", Strand.PLUS, 100, 108)
    >>> exon.length
    9
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Sequence

import attrs

from codonmap.utils.sequences import is_valid_codon


class InputValidationError(ValueError):
    """Raised when exon tables or codon specifications are malformed."""


# =============================================================================
# Strand
# =============================================================================


class Strand(Enum):
    """Coding strand of an exon."""

    PLUS = "+"
    MINUS = "-"

    @classmethod
    def parse(cls, value: str | Strand) -> Strand:
        """Convert "+" or "-" to a Strand.

        Raises:
            InputValidationError: If the value is not a recognised strand.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InputValidationError(
                f"Invalid strand: {value!r} (expected '+' or '-')"
            ) from None

    @property
    def opposite(self) -> Strand:
        """The complementary strand."""
        return Strand.MINUS if self is Strand.PLUS else Strand.PLUS

    @property
    def step(self) -> int:
        """Direction genome coordinates move when walking 5' to 3'."""
        return 1 if self is Strand.PLUS else -1

    def __str__(self) -> str:
        return self.value


# =============================================================================
# Input Records
# =============================================================================


@attrs.frozen(slots=True)
class ExonRecord:
    """A single CDS exon.

    Attributes:
        transcript_id: Transcript identifier.
        gene_id: Gene identifier.
        exon_rank: 1-based rank of the exon in CDS order.
        chromosome: Chromosome / scaffold name.
        strand: Coding strand.
        start: Lower genomic coordinate (1-based, inclusive).
        end: Upper genomic coordinate (1-based, inclusive).
    """

    transcript_id: str
    gene_id: str
    exon_rank: int
    chromosome: str
    strand: Strand = attrs.field(converter=Strand.parse)
    start: int
    end: int

    @property
    def length(self) -> int:
        """Number of bases spanned by the exon."""
        return abs(self.end - self.start) + 1


@attrs.frozen(slots=True)
class CodonSpec:
    """A codon to search for and the base within it to report.

    Attributes:
        codon: Three-letter codon (upper case).
        offset: Position of the targeted base within the codon (1-3).
        switch_strand: True if the guide targets the strand opposite the
            coding strand.
    """

    codon: str = attrs.field(converter=str.upper)
    offset: int = attrs.field(default=1)
    switch_strand: bool = attrs.field(default=False)

    @codon.validator
    def _check_codon(self, attribute: Any, value: str) -> None:
        if not is_valid_codon(value):
            raise InputValidationError(f"Invalid codon: {value!r}")

    @offset.validator
    def _check_offset(self, attribute: Any, value: int) -> None:
        if isinstance(value, bool) or value not in (1, 2, 3):
            raise InputValidationError(f"Codon offset must be 1, 2 or 3, got {value!r}")

    @switch_strand.validator
    def _check_switch(self, attribute: Any, value: bool) -> None:
        if not isinstance(value, bool):
            raise InputValidationError(f"switch_strand must be a bool, got {value!r}")


def codon_specs(
    codons: Sequence[str],
    positions: Sequence[int],
    switch_strand: Sequence[bool],
) -> tuple[CodonSpec, ...]:
    """Build codon specifications from three parallel lists.

    Args:
        codons: Codon strings.
        positions: Targeted base within each codon (1-3).
        switch_strand: Whether each codon is targeted on the opposite strand.

    Returns:
        Tuple of CodonSpec in input order.

    Raises:
        InputValidationError: If the lists differ in length or any entry
            is invalid.
    """
    if not (len(codons) == len(positions) == len(switch_strand)):
        raise InputValidationError(
            "codons, positions and switch_strand must have the same length "
            f"(got {len(codons)}, {len(positions)}, {len(switch_strand)})"
        )
    return tuple(
        CodonSpec(codon, position, switch)
        for codon, position, switch in zip(codons, positions, switch_strand)
    )


# Codon/base combinations whose single C->T (or G->A on the opposite
# strand) edit produces a stop codon
DEFAULT_CODONS = ("CAA", "CAG", "CGA", "TGG", "TGG")
DEFAULT_POSITIONS = (1, 1, 1, 2, 3)
DEFAULT_SWITCH_STRAND = (False, False, False, True, True)

DEFAULT_CODON_SPECS = codon_specs(DEFAULT_CODONS, DEFAULT_POSITIONS, DEFAULT_SWITCH_STRAND)


# =============================================================================
# Output Records
# =============================================================================

RESULT_COLUMNS = (
    "transcript_id",
    "gene_id",
    "exon_rank",
    "peptide_length",
    "cds_length",
    "chromosome",
    "coding_strand",
    "guide_strand",
    "target_residue",
    "codon",
    "peptide_coordinate",
    "cds_coordinate",
    "genome_coordinate",
    "nmd_predicted",
    "relative_position",
)


@attrs.frozen(slots=True)
class LocatedCodon:
    """One targetable base in a transcript's coding sequence.

    A transcript with a valid ORF but no matching codon is represented by
    a single LocatedCodon whose coordinate and codon fields are None.
    """

    transcript_id: str
    gene_id: str
    exon_rank: int | None
    peptide_length: int
    cds_length: int
    chromosome: str | None
    coding_strand: Strand | None
    guide_strand: Strand | None
    target_residue: str | None
    codon: str | None
    peptide_coordinate: int | None
    cds_coordinate: int | None
    genome_coordinate: int | None
    nmd_predicted: bool | None
    relative_position: float | None

    @classmethod
    def no_match(
        cls,
        transcript_id: str,
        gene_id: str,
        cds_length: int,
    ) -> LocatedCodon:
        """Row for a validated transcript in which nothing was found."""
        return cls(
            transcript_id=transcript_id,
            gene_id=gene_id,
            exon_rank=None,
            peptide_length=cds_length // 3,
            cds_length=cds_length,
            chromosome=None,
            coding_strand=None,
            guide_strand=None,
            target_residue=None,
            codon=None,
            peptide_coordinate=None,
            cds_coordinate=None,
            genome_coordinate=None,
            nmd_predicted=None,
            relative_position=None,
        )

    @property
    def is_match(self) -> bool:
        """True unless this is a no-match placeholder row."""
        return self.cds_coordinate is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary in output column order."""
        row = {column: getattr(self, column) for column in RESULT_COLUMNS}
        for key in ("coding_strand", "guide_strand"):
            if row[key] is not None:
                row[key] = row[key].value
        return row


def group_by_transcript(exons: Iterable[ExonRecord]) -> dict[str, list[ExonRecord]]:
    """Group exons by transcript, each group sorted by exon rank.

    Args:
        exons: Exon records in any order.

    Returns:
        Mapping of transcript id to its exons, keys in sorted order.
    """
    groups: dict[str, list[ExonRecord]] = {}
    for exon in exons:
        groups.setdefault(exon.transcript_id, []).append(exon)
    return {
        tx: sorted(groups[tx], key=lambda e: e.exon_rank) for tx in sorted(groups)
    }
