"""Tab-separated exon tables and result tables.

Exon tables have one row per CDS exon. Both the short column names
(``tx, gene, exon, chr, strand, start, end``) and the long names
(``transcript_id, gene_id, exon_rank, chromosome, strand, start, end``)
are accepted.

Example:
    >>> from codonmap.io.tables import read_exon_table, write_results
    >>> exons = read_exon_table("cds.tsv")
    >>> write_results(result.rows, "codons.tsv")
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Iterable

from codonmap.core.models import (
    RESULT_COLUMNS,
    ExonRecord,
    InputValidationError,
    LocatedCodon,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

# Long field name -> accepted column names
EXON_COLUMNS = {
    "transcript_id": ("transcript_id", "tx"),
    "gene_id": ("gene_id", "gene"),
    "exon_rank": ("exon_rank", "exon"),
    "chromosome": ("chromosome", "chr"),
    "strand": ("strand",),
    "start": ("start",),
    "end": ("end",),
}

MISSING_VALUE = "NA"


# =============================================================================
# Reading
# =============================================================================


def _resolve_columns(header: list[str]) -> dict[str, str]:
    """Map each required field to the header column that provides it."""
    resolved = {}
    missing = []
    for field, aliases in EXON_COLUMNS.items():
        column = next((alias for alias in aliases if alias in header), None)
        if column is None:
            missing.append(field)
        else:
            resolved[field] = column
    if missing:
        raise InputValidationError(
            f"Exon table is missing required columns: {', '.join(missing)}"
        )
    return resolved


def _parse_int(value: str, field: str, line_number: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InputValidationError(
            f"Line {line_number}: {field} must be an integer, got {value!r}"
        ) from None


def read_exon_table(path: Path | str) -> list[ExonRecord]:
    """Read a tab-separated exon table.

    Args:
        path: Path to the table. Lines starting with '#' are ignored.

    Returns:
        List of ExonRecord in file order.

    Raises:
        InputValidationError: If columns are missing or values are invalid.
    """
    path = Path(path)
    records = []

    with open(path, newline="") as handle:
        rows = (line for line in handle if not line.startswith("#"))
        reader = csv.DictReader(rows, delimiter="\t")
        if reader.fieldnames is None:
            raise InputValidationError(f"Exon table is empty: {path}")
        columns = _resolve_columns(list(reader.fieldnames))

        for line_number, row in enumerate(reader, start=2):
            try:
                record = ExonRecord(
                    transcript_id=row[columns["transcript_id"]],
                    gene_id=row[columns["gene_id"]],
                    exon_rank=_parse_int(row[columns["exon_rank"]], "exon_rank", line_number),
                    chromosome=row[columns["chromosome"]],
                    strand=row[columns["strand"]],
                    start=_parse_int(row[columns["start"]], "start", line_number),
                    end=_parse_int(row[columns["end"]], "end", line_number),
                )
            except InputValidationError:
                raise
            except ValueError as e:
                raise InputValidationError(f"Line {line_number}: {e}") from None
            records.append(record)

    logger.info(f"Read {len(records)} exons from {path.name}")
    return records


# =============================================================================
# Writing
# =============================================================================


def _format_value(value: object) -> str:
    if value is None:
        return MISSING_VALUE
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    return str(value)


def write_results(rows: Iterable[LocatedCodon], path: Path | str) -> int:
    """Write located codons as a tab-separated table.

    Args:
        rows: Result rows.
        path: Output path.

    Returns:
        Number of rows written.
    """
    n_rows = 0
    with open(path, "w", newline="") as handle:
        writer = csv.writer(handle, delimiter="\t", lineterminator="\n")
        writer.writerow(RESULT_COLUMNS)
        for row in rows:
            record = row.to_dict()
            writer.writerow([_format_value(record[column]) for column in RESULT_COLUMNS])
            n_rows += 1

    logger.info(f"Wrote {n_rows} rows to {path}")
    return n_rows
