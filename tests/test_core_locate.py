"""Tests for codonmap.core.locate.

Tests cover:
- The per-transcript pipeline on both strands
- ORF exclusion and no-match rows
- Coordinate consistency and strand symmetry
- Batch orchestration, fault isolation and input validation
"""

import logging
import math

import pytest

from codonmap.core.locate import (
    LocateResult,
    TranscriptStatus,
    locate_codons,
    locate_transcript,
)
from codonmap.core.models import (
    DEFAULT_CODON_SPECS,
    CodonSpec,
    ExonRecord,
    InputValidationError,
    Strand,
)
from codonmap.io.fasta import InMemorySequenceSource
from codonmap.utils.sequences import reverse_complement

from conftest import CHR5_ORFS, chr5_exon


# =============================================================================
# Per-transcript Pipeline
# =============================================================================


class TestLocateTranscript:
    """Tests for locate_transcript."""

    def test_single_exon_scenario(self, single_exon_plus, source) -> None:
        """ATGCAATAA at chr1:100-108 yields one CAA hit at genome 103."""
        result = locate_transcript(single_exon_plus, source)

        assert result.status is TranscriptStatus.VALID
        assert len(result.rows) == 1
        row = result.rows[0]
        assert row.cds_coordinate == 4
        assert row.genome_coordinate == 103
        assert row.peptide_coordinate == 2
        assert row.codon == "CAA"
        assert row.target_residue == "Q"
        assert row.relative_position == 4 / 9
        assert row.nmd_predicted is False

    def test_multi_exon_minus(self, two_exon_minus, source) -> None:
        """Minus strand hits map to descending genome coordinates of exon 1."""
        result = locate_transcript(two_exon_minus, source)

        assert [r.cds_coordinate for r in result.rows] == [5, 6, 7]
        assert [r.codon for r in result.rows] == ["TGG", "TGG", "CAG"]
        assert [r.genome_coordinate for r in result.rows] == [203, 202, 201]
        assert [r.guide_strand for r in result.rows] == [Strand.PLUS, Strand.PLUS, Strand.MINUS]
        assert all(r.coding_strand is Strand.MINUS for r in result.rows)
        assert all(r.cds_length == 15 and r.peptide_length == 5 for r in result.rows)

    def test_exon_order_from_rank(self, two_exon_minus, source) -> None:
        """Input order does not matter, exon rank does."""
        forward = locate_transcript(two_exon_minus, source)
        backward = locate_transcript(list(reversed(two_exon_minus)), source)
        assert forward == backward

    @pytest.mark.parametrize("name", ["no_start", "no_stop", "internal_stop"])
    def test_invalid_orf_no_rows(self, source, name: str) -> None:
        """Malformed ORFs produce no rows."""
        result = locate_transcript([chr5_exon(name)], source)
        assert result.status is TranscriptStatus.INVALID_ORF
        assert result.rows == ()
        assert result.failed_criteria

    def test_not_multiple_of_three(self, source) -> None:
        """A CDS whose length is not a multiple of 3 is excluded."""
        exon = ExonRecord("T1", "G1", 1, "chr1", "+", 100, 109)
        result = locate_transcript([exon], source)
        assert result.status is TranscriptStatus.INVALID_ORF
        assert "Sequence length that is a multiple of 3" in result.failed_criteria

    def test_no_match_row(self, source) -> None:
        """A valid ORF without target codons gives one empty row."""
        result = locate_transcript([chr5_exon("no_match")], source)

        assert result.status is TranscriptStatus.NO_MATCH
        assert len(result.rows) == 1
        row = result.rows[0]
        assert row.transcript_id == "no_match"
        assert row.gene_id == "no_match_gene"
        assert row.cds_length == 9
        assert row.peptide_length == 3
        assert row.cds_coordinate is None
        assert row.genome_coordinate is None
        assert row.codon is None

    def test_duplicate_codon_specs(self, source) -> None:
        """Both default TGG specs fire on one TGG occurrence."""
        result = locate_transcript([chr5_exon("double_tgg")], source)

        assert [r.cds_coordinate for r in result.rows] == [5, 6]
        assert [r.genome_coordinate for r in result.rows] == [85, 86]
        assert all(r.codon == "TGG" for r in result.rows)

    def test_custom_specs(self, single_exon_plus, source) -> None:
        """Custom specs replace the defaults."""
        result = locate_transcript(single_exon_plus, source, [CodonSpec("ATG", 3, True)])
        assert [(r.cds_coordinate, r.target_residue) for r in result.rows] == [(3, "M")]
        assert result.rows[0].guide_strand is Strand.MINUS

    def test_fetch_error_propagates(self) -> None:
        """A failing fetch raises from the per-transcript pipeline."""
        source = InMemorySequenceSource({"chr1": "ATGCAATAA"})
        exon = ExonRecord("T1", "G1", 1, "chr1", "+", 1, 12)
        with pytest.raises(ValueError, match="exceeds"):
            locate_transcript([exon], source)


# =============================================================================
# Coordinate Properties
# =============================================================================


class TestCoordinateProperties:
    """Properties that must hold for every located codon."""

    def test_targeted_base_matches_genome(self, all_exons, source) -> None:
        """The coding-strand base at genome_coordinate is the targeted codon base."""
        targeted_bases = {
            spec.codon: spec.codon[spec.offset - 1] for spec in DEFAULT_CODON_SPECS
        }
        result = locate_codons(all_exons, source)

        for row in result.rows:
            if not row.is_match:
                continue
            base = source.fetch(
                row.chromosome, row.coding_strand, row.genome_coordinate, row.genome_coordinate
            )
            assert base == targeted_bases[row.codon]

    def test_derived_coordinates(self, all_exons, source) -> None:
        """Peptide and relative positions derive exactly from the CDS coordinate."""
        for row in locate_codons(all_exons, source).rows:
            if not row.is_match:
                continue
            assert row.peptide_coordinate == math.ceil(row.cds_coordinate / 3)
            assert row.relative_position == row.cds_coordinate / row.cds_length
            assert 0 < row.relative_position <= 1

    def test_strand_symmetry(self, two_exon_plus, chromosomes) -> None:
        """Mirroring a transcript onto the minus strand mirrors genome coordinates."""
        chrom = chromosomes["chr3"]
        length = len(chrom)
        source = InMemorySequenceSource(
            {"chr3": chrom, "chr3_rc": reverse_complement(chrom)}
        )
        mirrored = [
            ExonRecord(
                "T3", "G3", exon.exon_rank, "chr3_rc", "-",
                length + 1 - exon.end, length + 1 - exon.start,
            )
            for exon in two_exon_plus
        ]

        plus_rows = locate_transcript(two_exon_plus, source).rows
        minus_rows = locate_transcript(mirrored, source).rows

        assert [r.cds_coordinate for r in plus_rows] == [r.cds_coordinate for r in minus_rows]
        assert [length + 1 - r.genome_coordinate for r in plus_rows] == [
            r.genome_coordinate for r in minus_rows
        ]

    def test_idempotent(self, all_exons, source) -> None:
        """Identical inputs give identical rows."""
        assert locate_codons(all_exons, source).rows == locate_codons(all_exons, source).rows


# =============================================================================
# Batch Orchestration
# =============================================================================


class TestLocateCodons:
    """Tests for locate_codons."""

    def test_summary_counts(self, all_exons, source) -> None:
        """Summary accounts for every transcript."""
        result = locate_codons(all_exons, source)
        summary = result.summary

        assert isinstance(result, LocateResult)
        assert summary.n_transcripts == 4 + len(CHR5_ORFS)
        assert summary.n_invalid_orf == 3
        assert summary.n_valid == 6
        assert summary.n_no_match == 1
        assert summary.n_failed == 0
        assert summary.n_rows == len(result.rows)

    def test_execution_stats(self, all_exons, source, caplog) -> None:
        """Executor timing is kept on the summary and logged at debug."""
        with caplog.at_level(logging.DEBUG, logger="codonmap"):
            summary = locate_codons(all_exons, source).summary

        assert summary.execution is not None
        assert summary.execution.total_tasks == summary.n_transcripts
        assert summary.execution.failed == 0
        assert "execution" not in summary.to_dict()
        assert "Executor stats" in caplog.text

    def test_rows_grouped_by_sorted_transcript(self, all_exons, source) -> None:
        """Rows are contiguous per transcript and in sorted transcript order."""
        rows = locate_codons(all_exons, source).rows
        ids = [r.transcript_id for r in rows]

        order = list(dict.fromkeys(ids))
        assert order == sorted(order)
        for tx in order:
            block = [r for r in rows if r.transcript_id == tx]
            first = ids.index(tx)
            assert rows[first : first + len(block)] == block
            coords = [r.cds_coordinate for r in block if r.is_match]
            assert coords == sorted(coords)

    def test_excluded_transcripts_absent(self, all_exons, source) -> None:
        """Invalid ORFs contribute nothing."""
        ids = {r.transcript_id for r in locate_codons(all_exons, source).rows}
        assert not ids & {"no_start", "no_stop", "internal_stop"}
        assert "no_match" in ids

    @pytest.mark.parametrize("backend", ["threads", "processes"])
    def test_parallel_matches_serial(self, all_exons, source, backend: str) -> None:
        """Worker count does not change the result."""
        serial = locate_codons(all_exons, source, n_workers=1)
        parallel = locate_codons(all_exons, source, n_workers=3, backend=backend)
        assert parallel.rows == serial.rows
        assert parallel.summary.to_dict() == serial.summary.to_dict()

    def test_processes_with_fasta(self, all_exons, source, synthetic_fasta) -> None:
        """Process workers read the indexed FASTA and match the in-memory run."""
        from codonmap.io.fasta import GenomeAccessor

        expected = locate_codons(all_exons, source).rows
        with GenomeAccessor(synthetic_fasta) as genome:
            result = locate_codons(all_exons, genome, n_workers=2, backend="processes")

        assert result.rows == expected
        assert result.summary.n_failed == 0

    def test_fetch_failure_isolated(self, single_exon_plus, source) -> None:
        """A failing transcript is counted and does not stop the others."""
        broken = ExonRecord("BROKEN", "G9", 1, "chr1", "+", 100, 10_000)
        result = locate_codons(single_exon_plus + [broken], source, n_workers=2)

        assert result.summary.n_failed == 1
        assert "BROKEN" in result.summary.failed
        assert [r.transcript_id for r in result.rows] == ["T1"]

    def test_progress_callback(self, all_exons, source) -> None:
        """Progress is reported once per transcript."""
        calls = []
        locate_codons(
            all_exons,
            source,
            progress_callback=lambda done, total, tx: calls.append((done, total)),
        )
        total = 4 + len(CHR5_ORFS)
        assert calls == [(i, total) for i in range(1, total + 1)]

    def test_empty_result_warns(self, source, caplog) -> None:
        """An empty result logs the ORF criteria."""
        exons = [chr5_exon("no_start"), chr5_exon("internal_stop")]
        with caplog.at_level(logging.WARNING, logger="codonmap"):
            result = locate_codons(exons, source)

        assert result.rows == []
        assert "None of the searched CDS sequences" in caplog.text
        assert "Begin with ATG" in caplog.text
        assert "No internal in-frame" in caplog.text

    def test_empty_input(self, source, caplog) -> None:
        """No exons, no rows, a warning."""
        with caplog.at_level(logging.WARNING, logger="codonmap"):
            result = locate_codons([], source)
        assert len(result) == 0
        assert "None of the searched CDS sequences" in caplog.text


class TestInputValidation:
    """Fatal input errors are raised before processing."""

    def test_unknown_chromosome(self, single_exon_plus, source) -> None:
        """Chromosomes missing from the source are rejected."""
        exons = single_exon_plus + [ExonRecord("T9", "G9", 1, "chrUn", "+", 1, 9)]
        with pytest.raises(InputValidationError, match="chrUn"):
            locate_codons(exons, source)

    def test_transcript_in_two_genes(self, source) -> None:
        """A transcript must belong to one gene."""
        exons = [
            ExonRecord("T1", "G1", 1, "chr1", "+", 100, 102),
            ExonRecord("T1", "G2", 2, "chr1", "+", 103, 108),
        ]
        with pytest.raises(InputValidationError, match="several genes"):
            locate_codons(exons, source)

    def test_specs_must_be_codon_specs(self, single_exon_plus, source) -> None:
        """Raw tuples are not accepted as specs."""
        with pytest.raises(InputValidationError, match="CodonSpec"):
            locate_codons(single_exon_plus, source, specs=[("CAA", 1, False)])

    def test_no_work_on_invalid_input(self, single_exon_plus) -> None:
        """Validation runs before any sequence is fetched."""

        class CountingSource(InMemorySequenceSource):
            fetched = 0

            def fetch(self, *args):
                CountingSource.fetched += 1
                return super().fetch(*args)

        source = CountingSource({"chr1": "A" * 200})
        exons = single_exon_plus + [ExonRecord("T9", "G9", 1, "chrX", "+", 1, 9)]
        with pytest.raises(InputValidationError):
            locate_codons(exons, source)
        assert CountingSource.fetched == 0
