"""Genome sequence sources.

A sequence source returns the bases of an inclusive 1-based genomic
interval, already reverse-complemented when the interval is on the minus
strand. Two implementations are provided:

- GenomeAccessor: indexed FASTA access through pyfaidx
- InMemorySequenceSource: a mapping of chromosome name to sequence

Example:
    >>> from codonmap.io.fasta import GenomeAccessor
    >>> with GenomeAccessor("genome.fa") as genome:
    ...     genome.fetch("chr1", "-", 1000, 1008)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Protocol, runtime_checkable

import pyfaidx

from codonmap.core.models import Strand
from codonmap.utils.sequences import reverse_complement

logger = logging.getLogger(__name__)

# Handles opened by unpickled accessors, one per FASTA path per process
_SHARED_HANDLES: dict[Path, tuple[pyfaidx.Fasta, dict[str, int]]] = {}


@runtime_checkable
class SequenceSource(Protocol):
    """Read-only provider of strand-corrected genomic sequence."""

    def fetch(self, chromosome: str, strand: Strand | str, start: int, end: int) -> str:
        """Return bases of ``[min(start, end), max(start, end)]`` (1-based)."""
        ...

    def __contains__(self, chromosome: object) -> bool:
        ...


def _interval(start: int, end: int) -> tuple[int, int]:
    """Normalise a 1-based inclusive interval to (low, high)."""
    low, high = min(start, end), max(start, end)
    if low < 1:
        raise ValueError(f"Start position must be >= 1, got {low}")
    return low, high


# =============================================================================
# FASTA-backed Source
# =============================================================================


class GenomeAccessor:
    """Indexed FASTA access using pyfaidx.

    Instances can be pickled. The receiving process opens the FASTA from
    its path once and every accessor unpickled there reuses that handle,
    so process workers do not reopen the file per task.

    Attributes:
        path: Path to the FASTA file.
    """

    def __init__(self, fasta_path: Path | str) -> None:
        """Initialize the genome accessor.

        Args:
            fasta_path: Path to FASTA file. Will create .fai index if needed.

        Raises:
            FileNotFoundError: If FASTA file doesn't exist.
        """
        self.path = Path(fasta_path)
        if not self.path.exists():
            raise FileNotFoundError(f"FASTA file not found: {self.path}")

        self._fasta: pyfaidx.Fasta | None = None
        self._scaffold_lengths: dict[str, int] = {}
        self._shared = False

        self._open()

    def _open(self) -> None:
        """Open the FASTA file with pyfaidx."""
        self._fasta = pyfaidx.Fasta(
            str(self.path),
            sequence_always_upper=True,
            rebuild=False,
        )
        self._scaffold_lengths = {
            seqid: len(self._fasta[seqid]) for seqid in self._fasta.keys()
        }

        logger.info(
            f"Opened FASTA: {self.path.name}, "
            f"{len(self._scaffold_lengths)} scaffolds"
        )

    def __getstate__(self) -> dict[str, Any]:
        return {"path": self.path}

    def __setstate__(self, state: dict[str, Any]) -> None:
        self.path = state["path"]
        self._shared = True

        key = self.path.resolve()
        if key not in _SHARED_HANDLES:
            self._open()
            _SHARED_HANDLES[key] = (self._fasta, self._scaffold_lengths)
        self._fasta, self._scaffold_lengths = _SHARED_HANDLES[key]

    def __enter__(self) -> GenomeAccessor:
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()

    def close(self) -> None:
        """Close the FASTA file.

        Unpickled accessors only detach; the shared handle stays open for
        later tasks in the same process.
        """
        if self._fasta is not None and not self._shared:
            self._fasta.close()
        self._fasta = None

    @property
    def scaffold_lengths(self) -> dict[str, int]:
        """Return {seqid: length} mapping."""
        return self._scaffold_lengths.copy()

    def __contains__(self, chromosome: object) -> bool:
        """Check if scaffold exists in FASTA."""
        return chromosome in self._scaffold_lengths

    def __len__(self) -> int:
        """Return number of scaffolds."""
        return len(self._scaffold_lengths)

    def fetch(self, chromosome: str, strand: Strand | str, start: int, end: int) -> str:
        """Get the sequence of a 1-based inclusive interval.

        Args:
            chromosome: Scaffold/chromosome name.
            strand: Strand; minus-strand intervals are reverse complemented.
            start: One end of the interval (1-based).
            end: Other end of the interval (1-based, inclusive).

        Returns:
            Sequence string, 5' to 3' on the requested strand.

        Raises:
            KeyError: If chromosome not in FASTA.
            ValueError: If coordinates are out of bounds.
        """
        if self._fasta is None:
            raise RuntimeError("FASTA file not opened")
        if chromosome not in self._scaffold_lengths:
            raise KeyError(f"Unknown scaffold: {chromosome}")

        low, high = _interval(start, end)
        scaffold_length = self._scaffold_lengths[chromosome]
        if high > scaffold_length:
            raise ValueError(
                f"End position {high} exceeds scaffold length {scaffold_length}"
            )

        # pyfaidx slicing is 0-based half-open
        sequence = str(self._fasta[chromosome][low - 1 : high])

        if Strand.parse(strand) is Strand.MINUS:
            sequence = reverse_complement(sequence)
        return sequence


# =============================================================================
# In-memory Source
# =============================================================================


class InMemorySequenceSource:
    """Sequence source backed by a dictionary of chromosome sequences.

    Example:
        >>> source = InMemorySequenceSource({"chr1": "NNATGCAATAA"})
        >>> source.fetch("chr1", "+", 3, 11)
        'ATGCAATAA'
    """

    def __init__(self, sequences: Mapping[str, str]) -> None:
        self._sequences = {name: seq.upper() for name, seq in sequences.items()}

    def __contains__(self, chromosome: object) -> bool:
        return chromosome in self._sequences

    def __len__(self) -> int:
        return len(self._sequences)

    def fetch(self, chromosome: str, strand: Strand | str, start: int, end: int) -> str:
        """Get the sequence of a 1-based inclusive interval."""
        try:
            chrom_seq = self._sequences[chromosome]
        except KeyError:
            raise KeyError(f"Unknown scaffold: {chromosome}") from None

        low, high = _interval(start, end)
        if high > len(chrom_seq):
            raise ValueError(
                f"End position {high} exceeds scaffold length {len(chrom_seq)}"
            )

        sequence = chrom_seq[low - 1 : high]
        if Strand.parse(strand) is Strand.MINUS:
            sequence = reverse_complement(sequence)
        return sequence
