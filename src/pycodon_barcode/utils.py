# src/pycodon_barcode/utils.py
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Gabriel Falque
# Distributed under the terms of the MIT License.
# (See accompanying file LICENSE or copy at https://opensource.org/license/mit/)

"""
Utility functions and constants for the pycodon_barcode package.

Holds the genetic code lookup (NCBI translation tables shipped with Biopython)
and the codon index that fixes barcode column order and synonymous groups.
"""
import itertools
import logging
from typing import Dict, List, NamedTuple, Optional, Set, Tuple

from Bio.Data import CodonTable

# --- Configure logging for this module ---
logger = logging.getLogger(__name__)


# --- Constants ---
# Letter order used to enumerate the 64 codons. Changing it changes the column
# order of every barcode file ever written.
NUCLEOTIDE_ORDER: str = 'ACGT'
VALID_CODON_CHARS: Set[str] = set(NUCLEOTIDE_ORDER)
CODON_LENGTH: int = 3
STOP_SYMBOL: str = '*'

DEFAULT_GENETIC_CODE_ID: int = 11 # Bacterial, Archaeal and Plant Plastid
DEFAULT_MIN_LENGTH: int = 102     # 34 codons
BARCODE_DECIMALS: int = 4
PROGRESS_LOG_INTERVAL: int = 1000

ID_COLUMN_NAME: str = 'SequenceID'
DELIMITERS: Dict[str, str] = {'comma': ',', 'tab': '\t'}
DEFAULT_DELIMITER_NAME: str = 'comma'


class UnknownCodeTableError(ValueError):
    """Raised when a genetic code ID matches no known NCBI translation table."""


# --- Functions ---

def get_all_codons() -> List[str]:
    """
    Returns the 64 codons in canonical barcode order (AAA, AAC, ..., TTT).
    """
    return [''.join(letters) for letters in itertools.product(NUCLEOTIDE_ORDER, repeat=CODON_LENGTH)]


def get_available_genetic_codes() -> Dict[int, str]:
    """
    Lists the NCBI genetic code tables available for barcoding.

    Returns:
        Dict[int, str]: Table ID -> human readable name, sorted by ID.
    """
    return {
        code_id: ', '.join(name for name in table.names if name)
        for code_id, table in sorted(CodonTable.unambiguous_dna_by_id.items())
    }


def get_genetic_code(code_id: int = DEFAULT_GENETIC_CODE_ID) -> Dict[str, str]:
    """
    Returns a dictionary representing a genetic code.

    Every one of the 64 codons is present. Stop codons map to '*'. When a
    table lists a codon both as a sense codon and as a stop (tables 27, 28
    and 31), the amino acid wins.

    Args:
        code_id (int): The NCBI genetic code ID (default: 11).

    Returns:
        Dict[str, str]: A new dictionary mapping codons to amino acids or '*'.

    Raises:
        UnknownCodeTableError: If no table exists for code_id.
    """
    try:
        table = CodonTable.unambiguous_dna_by_id[code_id]
    except (KeyError, TypeError):
        logger.error(f"Genetic code ID {code_id!r} is not a known NCBI translation table.")
        raise UnknownCodeTableError(f"Unknown genetic code ID: {code_id!r}") from None

    genetic_code: Dict[str, str] = {}
    for codon in get_all_codons():
        genetic_code[codon] = table.forward_table.get(codon, STOP_SYMBOL)
    return genetic_code


def get_synonymous_codons(genetic_code: Dict[str, str]) -> Dict[str, List[str]]:
    """
    Groups codons by the amino acid they encode.

    Args:
        genetic_code (Dict[str, str]): A dictionary mapping codons to amino acids.

    Returns:
        Dict[str, List[str]]: A dictionary where keys are amino acids (or '*') and
                              values are lists of codons encoding that amino acid.
    """
    syn_codons: Dict[str, List[str]] = {}
    if not genetic_code:
        logger.warning("get_synonymous_codons called with an empty genetic code dictionary.")
        return syn_codons

    for codon, aa in genetic_code.items():
        syn_codons.setdefault(aa, []).append(codon)
    return syn_codons


class CodonIndex(NamedTuple):
    """
    Column layout of a barcode for one genetic code.

    Attributes:
        genetic_code_id: NCBI table the groups were derived from.
        codons: The 64 codons in canonical column order.
        columns: Codon -> column index.
        groups: Amino acid (or '*') -> column indices of its synonymous codons.
    """
    genetic_code_id: Optional[int]
    codons: Tuple[str, ...]
    columns: Dict[str, int]
    groups: Dict[str, Tuple[int, ...]]


def build_codon_index_from_code(genetic_code: Dict[str, str],
                                genetic_code_id: Optional[int] = None) -> CodonIndex:
    """
    Builds a CodonIndex from an already resolved genetic code mapping.

    Args:
        genetic_code (Dict[str, str]): Codon -> amino acid, must cover all 64 codons.
        genetic_code_id (Optional[int]): ID recorded on the index, if known.

    Returns:
        CodonIndex: The column order and synonymous groups.

    Raises:
        ValueError: If a codon is missing from genetic_code.
    """
    codons: List[str] = get_all_codons()
    group_lists: Dict[str, List[int]] = {}

    for column, codon in enumerate(codons):
        aa: Optional[str] = genetic_code.get(codon)
        if aa is None:
            logger.error(f"Codon {codon} is missing from the genetic code (ID: {genetic_code_id}).")
            raise ValueError(f"Genetic code does not translate codon {codon}.")
        # Each column is appended exactly once, so groups partition range(64)
        group_lists.setdefault(aa, []).append(column)

    logger.debug(f"Built codon index for genetic code {genetic_code_id}: {len(group_lists)} synonymous groups.")
    return CodonIndex(
        genetic_code_id=genetic_code_id,
        codons=tuple(codons),
        columns={codon: column for column, codon in enumerate(codons)},
        groups={aa: tuple(members) for aa, members in group_lists.items()},
    )


def build_codon_index(code_id: int = DEFAULT_GENETIC_CODE_ID) -> CodonIndex:
    """
    Builds the CodonIndex for an NCBI genetic code ID.

    Raises:
        UnknownCodeTableError: If no table exists for code_id.
    """
    return build_codon_index_from_code(get_genetic_code(code_id), code_id)
