"""Locate codons in transcripts.

For every transcript in an exon table this module assembles the coding
sequence, validates it as an ORF, scans it for the requested codons and
maps every hit to CDS, peptide and genome coordinates.

Processing is independent per transcript. Transcripts are submitted in
sorted transcript-id order and their rows are returned in that order,
whatever order workers finish in. Within a transcript rows are sorted by
CDS coordinate.

Outcomes per transcript:

- valid ORF with hits: one row per hit
- valid ORF without hits: a single row with empty coordinate fields
- invalid ORF: no rows
- fetch or other failure: no rows, counted in the summary

Example:
    >>> from codonmap.core.locate import locate_codons
    >>> from codonmap.io.fasta import GenomeAccessor
    >>> with GenomeAccessor("genome.fa") as genome:
    ...     result = locate_codons(exons, genome, n_workers=4)
    >>> result.summary.n_valid
    1843
"""

from __future__ import annotations

import functools
import logging
from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterable, Sequence

import attrs

from codonmap.core.annotate import annotate_hits
from codonmap.core.index import ExonIndex
from codonmap.core.models import (
    DEFAULT_CODON_SPECS,
    CodonSpec,
    ExonRecord,
    InputValidationError,
    LocatedCodon,
    group_by_transcript,
)
from codonmap.core.orf import ORF_CRITERIA, assemble_cds, check_orf, split_codons
from codonmap.core.scan import scan_codons
from codonmap.parallel.executor import ExecutionStats, ExecutorBackend, ParallelExecutor

if TYPE_CHECKING:
    from codonmap.io.fasta import SequenceSource

logger = logging.getLogger(__name__)


# =============================================================================
# Result Structures
# =============================================================================


class TranscriptStatus(Enum):
    """Outcome of processing one transcript."""

    VALID = "valid"
    NO_MATCH = "no_match"
    INVALID_ORF = "invalid_orf"


@attrs.frozen(slots=True)
class TranscriptResult:
    """Rows and status for one transcript."""

    transcript_id: str
    status: TranscriptStatus
    rows: tuple[LocatedCodon, ...] = ()
    failed_criteria: tuple[str, ...] = ()


@attrs.define(slots=True)
class LocateSummary:
    """Counts describing a batch run.

    Attributes:
        n_transcripts: Transcripts in the input.
        n_valid: Transcripts that passed ORF validation.
        n_invalid_orf: Transcripts excluded by ORF validation.
        n_no_match: Valid transcripts without any matching codon.
        n_failed: Transcripts lost to fetch or other errors.
        n_rows: Rows in the output.
        failed: Error message per failed transcript.
        execution: Executor timing for the run.
    """

    n_transcripts: int = 0
    n_valid: int = 0
    n_invalid_orf: int = 0
    n_no_match: int = 0
    n_failed: int = 0
    n_rows: int = 0
    failed: dict[str, str] = attrs.Factory(dict)
    execution: ExecutionStats | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "n_transcripts": self.n_transcripts,
            "n_valid": self.n_valid,
            "n_invalid_orf": self.n_invalid_orf,
            "n_no_match": self.n_no_match,
            "n_failed": self.n_failed,
            "n_rows": self.n_rows,
        }


@attrs.define(slots=True)
class LocateResult:
    """Located codons for a batch of transcripts."""

    rows: list[LocatedCodon]
    summary: LocateSummary

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self):
        return iter(self.rows)


# =============================================================================
# Per-transcript Pipeline
# =============================================================================


def locate_transcript(
    exons: Sequence[ExonRecord],
    source: SequenceSource,
    specs: Sequence[CodonSpec] = DEFAULT_CODON_SPECS,
) -> TranscriptResult:
    """Locate codons in a single transcript.

    Args:
        exons: All exons of one transcript, in any order.
        source: Sequence source for the exon intervals.
        specs: Codon specifications to search for.

    Returns:
        TranscriptResult; rows are sorted by CDS coordinate.
    """
    exons = sorted(exons, key=lambda e: e.exon_rank)
    transcript_id = exons[0].transcript_id
    gene_id = exons[0].gene_id

    sequence = assemble_cds(exons, source)
    orf = check_orf(sequence)
    if not orf.is_valid:
        logger.debug(
            f"{transcript_id}: excluded ({'; '.join(orf.failed_criteria)})"
        )
        return TranscriptResult(
            transcript_id=transcript_id,
            status=TranscriptStatus.INVALID_ORF,
            failed_criteria=tuple(orf.failed_criteria),
        )

    hits = scan_codons(split_codons(sequence), specs)
    if not hits:
        return TranscriptResult(
            transcript_id=transcript_id,
            status=TranscriptStatus.NO_MATCH,
            rows=(LocatedCodon.no_match(transcript_id, gene_id, len(sequence)),),
        )

    index = ExonIndex.build(exons)
    if index.cds_length != len(sequence):
        raise ValueError(
            f"{transcript_id}: sequence length {len(sequence)} does not match "
            f"exon span {index.cds_length}"
        )

    return TranscriptResult(
        transcript_id=transcript_id,
        status=TranscriptStatus.VALID,
        rows=tuple(annotate_hits(hits, index, transcript_id, gene_id)),
    )


# =============================================================================
# Input Validation
# =============================================================================


def validate_inputs(
    groups: dict[str, list[ExonRecord]],
    source: SequenceSource,
    specs: Sequence[CodonSpec],
) -> None:
    """Fail fast on inputs that cannot be processed.

    Raises:
        InputValidationError: On unknown chromosomes, transcripts spanning
            several genes, or non-CodonSpec specifications.
    """
    for spec in specs:
        if not isinstance(spec, CodonSpec):
            raise InputValidationError(f"Expected CodonSpec, got {spec!r}")

    chromosomes = {exon.chromosome for exons in groups.values() for exon in exons}
    missing = sorted(chrom for chrom in chromosomes if chrom not in source)
    if missing:
        raise InputValidationError(
            f"Chromosomes not found in sequence source: {', '.join(missing)}"
        )

    for transcript_id, exons in groups.items():
        genes = {exon.gene_id for exon in exons}
        if len(genes) > 1:
            raise InputValidationError(
                f"Transcript {transcript_id} is assigned to several genes: "
                f"{', '.join(sorted(genes))}"
            )


# =============================================================================
# Batch Orchestration
# =============================================================================


def locate_codons(
    exons: Iterable[ExonRecord],
    source: SequenceSource,
    specs: Sequence[CodonSpec] = DEFAULT_CODON_SPECS,
    n_workers: int = 1,
    backend: ExecutorBackend | str = ExecutorBackend.THREADS,
    progress_callback: Callable[[int, int, str], None] | None = None,
) -> LocateResult:
    """Locate codons across all transcripts of an exon table.

    Args:
        exons: Exon records of any number of transcripts.
        source: Sequence source shared read-only by all workers.
        specs: Codon specifications to search for.
        n_workers: Number of parallel workers (1 = sequential).
        backend: Executor backend used when n_workers > 1.
        progress_callback: Called with (completed, total, transcript_id).

    Returns:
        LocateResult with rows and a summary of excluded transcripts.

    Raises:
        InputValidationError: If inputs fail validation; nothing is processed.
    """
    groups = group_by_transcript(exons)
    specs = tuple(specs)
    validate_inputs(groups, source, specs)

    logger.info(f"Locating codon coordinates in {len(groups)} transcripts...")

    executor = ParallelExecutor(
        n_workers=n_workers,
        backend=backend,
        progress_callback=progress_callback,
    )
    task = functools.partial(locate_transcript, source=source, specs=specs)
    task_results, stats = executor.map_items(task, list(groups.values()), list(groups))
    logger.debug(f"Executor stats: {stats.to_dict()}")

    summary = LocateSummary(n_transcripts=len(groups), execution=stats)
    rows: list[LocatedCodon] = []
    for task_result in task_results:
        if not task_result.success:
            summary.n_failed += 1
            summary.failed[task_result.item_id] = task_result.error or ""
            continue

        outcome: TranscriptResult = task_result.result
        if outcome.status is TranscriptStatus.INVALID_ORF:
            summary.n_invalid_orf += 1
            continue

        summary.n_valid += 1
        if outcome.status is TranscriptStatus.NO_MATCH:
            summary.n_no_match += 1
        rows.extend(outcome.rows)

    summary.n_rows = len(rows)

    if not rows:
        criteria = "\n".join(
            f"    {i}. {text}" for i, text in enumerate(ORF_CRITERIA, start=1)
        )
        logger.warning(
            f"None of the searched CDS sequences met the criteria of:\n{criteria}"
        )

    if summary.n_failed:
        logger.warning(f"{summary.n_failed} transcripts failed and were skipped")

    logger.info(
        f"Located {summary.n_rows} codon coordinates: "
        f"{summary.n_valid} valid, {summary.n_invalid_orf} excluded, "
        f"{summary.n_no_match} without matches"
    )

    return LocateResult(rows=rows, summary=summary)
