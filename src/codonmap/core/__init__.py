"""Core codon location logic.

- models: Strand, ExonRecord, CodonSpec, LocatedCodon
- index: Per-base CDS to genome index
- orf: Coding sequence assembly and ORF validation
- scan: Codon scanning
- annotate: Hit annotation
- locate: Per-transcript pipeline and batch orchestration
"""

from codonmap.core.index import ExonIndex
from codonmap.core.locate import (
    LocateResult,
    LocateSummary,
    TranscriptResult,
    TranscriptStatus,
    locate_codons,
    locate_transcript,
)
from codonmap.core.models import (
    DEFAULT_CODON_SPECS,
    CodonSpec,
    ExonRecord,
    InputValidationError,
    LocatedCodon,
    Strand,
    codon_specs,
)
from codonmap.core.orf import OrfCheck, check_orf

__all__ = [
    "DEFAULT_CODON_SPECS",
    "CodonSpec",
    "ExonIndex",
    "ExonRecord",
    "InputValidationError",
    "LocateResult",
    "LocateSummary",
    "LocatedCodon",
    "OrfCheck",
    "Strand",
    "TranscriptResult",
    "TranscriptStatus",
    "check_orf",
    "codon_specs",
    "locate_codons",
    "locate_transcript",
]
