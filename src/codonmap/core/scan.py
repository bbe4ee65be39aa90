"""Codon scanning over a validated coding sequence.

Each codon specification is matched independently against the codon
partition of the sequence. Specifications that share a codon but target
different bases each produce their own hit for every occurrence.
"""

from __future__ import annotations

from typing import Iterable, NamedTuple, Sequence

from codonmap.core.models import CodonSpec


class CodonHit(NamedTuple):
    """A targeted base inside a matched codon.

    Attributes:
        cds_coordinate: 1-based CDS position of the targeted base.
        codon: The matched codon.
        offset: Targeted base within the codon (1-3).
        switch_strand: Whether the guide is on the opposite strand.
    """

    cds_coordinate: int
    codon: str
    offset: int
    switch_strand: bool


def scan_codons(
    codons: Sequence[tuple[int, str]],
    specs: Iterable[CodonSpec],
) -> list[CodonHit]:
    """Find every occurrence of each specified codon.

    Args:
        codons: (CDS position of first base, codon) pairs from split_codons.
        specs: Codon specifications to search for.

    Returns:
        Hits grouped by specification, in codon order within each group.
    """
    positions_by_codon: dict[str, list[int]] = {}
    for start, codon in codons:
        positions_by_codon.setdefault(codon, []).append(start)

    hits = []
    for spec in specs:
        for start in positions_by_codon.get(spec.codon, ()):
            hits.append(
                CodonHit(
                    cds_coordinate=start + spec.offset - 1,
                    codon=spec.codon,
                    offset=spec.offset,
                    switch_strand=spec.switch_strand,
                )
            )
    return hits
