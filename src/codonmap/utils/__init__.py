"""Utility functions for codonmap.

- Sequence manipulation (complement, translation, codon sets)
- Logging configuration and scoped progress reporting

Example:
    >>> from codonmap.utils import reverse_complement, translate_codon
    >>> translate_codon("TGG")
    'W'
"""

from codonmap.utils.sequences import (
    CODON_TABLE_STANDARD,
    START_CODONS,
    STOP_CODONS,
    complement,
    is_valid_codon,
    reverse_complement,
    translate_codon,
)

__all__ = [
    "CODON_TABLE_STANDARD",
    "START_CODONS",
    "STOP_CODONS",
    "complement",
    "is_valid_codon",
    "reverse_complement",
    "translate_codon",
]
