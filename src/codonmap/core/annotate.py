"""Annotation of codon hits with transcript, peptide and genome context."""

from __future__ import annotations

import math
from typing import Iterable

from codonmap.core.index import ExonIndex
from codonmap.core.models import LocatedCodon
from codonmap.core.scan import CodonHit
from codonmap.utils.sequences import translate_codon


def annotate_hit(
    hit: CodonHit,
    index: ExonIndex,
    transcript_id: str,
    gene_id: str,
    nmd_boundary: int,
) -> LocatedCodon:
    """Map one hit through the exon index.

    Args:
        hit: Codon hit from the scanner.
        index: Exon index of the transcript.
        transcript_id: Transcript identifier.
        gene_id: Gene identifier.
        nmd_boundary: Precomputed ``index.nmd_boundary``.

    Returns:
        Fully populated LocatedCodon.
    """
    cds_length = index.cds_length
    coordinate = hit.cds_coordinate
    coding_strand = index.strand_at(coordinate)

    return LocatedCodon(
        transcript_id=transcript_id,
        gene_id=gene_id,
        exon_rank=index.exon_rank(coordinate),
        peptide_length=cds_length // 3,
        cds_length=cds_length,
        chromosome=index.chromosome_at(coordinate),
        coding_strand=coding_strand,
        guide_strand=coding_strand.opposite if hit.switch_strand else coding_strand,
        target_residue=translate_codon(hit.codon),
        codon=hit.codon,
        peptide_coordinate=math.ceil(coordinate / 3),
        cds_coordinate=coordinate,
        genome_coordinate=index.genome_coordinate(coordinate),
        nmd_predicted=coordinate < nmd_boundary,
        relative_position=coordinate / cds_length,
    )


def annotate_hits(
    hits: Iterable[CodonHit],
    index: ExonIndex,
    transcript_id: str,
    gene_id: str,
) -> list[LocatedCodon]:
    """Annotate hits and order them by CDS coordinate.

    Ties keep the order in which the hits were given, i.e. specification
    order.
    """
    boundary = index.nmd_boundary
    ordered = sorted(hits, key=lambda hit: hit.cds_coordinate)
    return [annotate_hit(hit, index, transcript_id, gene_id, boundary) for hit in ordered]
