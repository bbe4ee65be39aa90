"""Input/output handlers for codonmap.

- fasta: Genome sequence sources (pyfaidx FASTA, in-memory)
- tables: Exon table reading and result table writing
"""

from codonmap.io.fasta import GenomeAccessor, InMemorySequenceSource, SequenceSource
from codonmap.io.tables import read_exon_table, write_results

__all__ = [
    "GenomeAccessor",
    "InMemorySequenceSource",
    "SequenceSource",
    "read_exon_table",
    "write_results",
]
