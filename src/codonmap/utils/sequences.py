"""Nucleotide sequence utilities.

Complement tables, the standard genetic code and the start/stop codon
sets used to validate open reading frames.

Example:
    >>> from codonmap.utils.sequences import reverse_complement, translate_codon
    >>> reverse_complement("ATGCAA")
    'TTGCAT'
    >>> translate_codon("CAA")
    'Q'
"""

# =============================================================================
# Constants
# =============================================================================

COMPLEMENT_TABLE = str.maketrans(
    "ACGTNacgtn",
    "TGCANtgcan",
)

# Standard genetic code (NCBI Table 1)
CODON_TABLE_STANDARD = {
    "TTT": "F", "TTC": "F", "TTA": "L", "TTG": "L",
    "CTT": "L", "CTC": "L", "CTA": "L", "CTG": "L",
    "ATT": "I", "ATC": "I", "ATA": "I", "ATG": "M",
    "GTT": "V", "GTC": "V", "GTA": "V", "GTG": "V",
    "TCT": "S", "TCC": "S", "TCA": "S", "TCG": "S",
    "CCT": "P", "CCC": "P", "CCA": "P", "CCG": "P",
    "ACT": "T", "ACC": "T", "ACA": "T", "ACG": "T",
    "GCT": "A", "GCC": "A", "GCA": "A", "GCG": "A",
    "TAT": "Y", "TAC": "Y", "TAA": "*", "TAG": "*",
    "CAT": "H", "CAC": "H", "CAA": "Q", "CAG": "Q",
    "AAT": "N", "AAC": "N", "AAA": "K", "AAG": "K",
    "GAT": "D", "GAC": "D", "GAA": "E", "GAG": "E",
    "TGT": "C", "TGC": "C", "TGA": "*", "TGG": "W",
    "CGT": "R", "CGC": "R", "CGA": "R", "CGG": "R",
    "AGT": "S", "AGC": "S", "AGA": "R", "AGG": "R",
    "GGT": "G", "GGC": "G", "GGA": "G", "GGG": "G",
}

# Only the canonical start is accepted for a valid ORF
START_CODONS = frozenset({"ATG"})

STOP_CODONS = frozenset({"TAA", "TAG", "TGA"})

CODON_ALPHABET = frozenset("ACGT")


# =============================================================================
# Complement and Reverse Complement
# =============================================================================


def complement(sequence: str) -> str:
    """Get the complement of a DNA sequence.

    Args:
        sequence: DNA sequence string.

    Returns:
        Complement sequence, case preserved.
    """
    return sequence.translate(COMPLEMENT_TABLE)


def reverse_complement(sequence: str) -> str:
    """Get the reverse complement of a DNA sequence.

    Args:
        sequence: DNA sequence string.

    Returns:
        Reverse complement sequence.
    """
    return complement(sequence)[::-1]


# =============================================================================
# Translation
# =============================================================================


def translate_codon(codon: str) -> str:
    """Translate a single codon with the standard genetic code.

    Args:
        codon: Three-letter codon.

    Returns:
        Single-letter amino acid, "*" for stops, "X" for anything that
        is not a recognised codon (e.g. contains N).
    """
    return CODON_TABLE_STANDARD.get(codon.upper(), "X")


def is_valid_codon(codon: str) -> bool:
    """Check that a string is exactly three unambiguous bases."""
    return len(codon) == 3 and all(base in CODON_ALPHABET for base in codon.upper())
