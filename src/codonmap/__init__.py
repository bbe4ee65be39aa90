"""codonmap: locate targetable codons in transcript coding sequences.

Given CDS exon coordinates and a genome, codonmap finds every occurrence
of a chosen set of codons and reports the targeted base in CDS, peptide
and genome coordinates, for use in base-editing mutagenesis design.

Example:
    >>> import codonmap
    >>> codonmap.__version__
    '0.1.0'

Modules:
    core: ORF validation, codon scanning and coordinate mapping
    io: FASTA sequence sources and tab-separated tables
    parallel: Parallel execution across transcripts
    utils: Sequence helpers and logging
"""

__version__ = "0.1.0"

from codonmap.core import (
    DEFAULT_CODON_SPECS,
    CodonSpec,
    ExonRecord,
    InputValidationError,
    LocatedCodon,
    Strand,
    codon_specs,
    locate_codons,
)

__all__ = [
    "__version__",
    "DEFAULT_CODON_SPECS",
    "CodonSpec",
    "ExonRecord",
    "InputValidationError",
    "LocatedCodon",
    "Strand",
    "codon_specs",
    "locate_codons",
]
