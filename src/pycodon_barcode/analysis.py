# src/pycodon_barcode/analysis.py
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Gabriel Falque
# Distributed under the terms of the MIT License.
# (See accompanying file LICENSE or copy at https://opensource.org/license/mit/)

"""
Core analysis functions: codon counting and synonymous-group normalization.

A barcode is the 64-value vector of codon frequencies of one sequence, each
codon expressed relative to the other codons of its amino acid.
"""
import logging
from collections import Counter
from typing import Iterable, Iterator, Tuple

import numpy as np
from Bio.SeqRecord import SeqRecord

from .utils import (CodonIndex, BARCODE_DECIMALS, CODON_LENGTH,
                    DEFAULT_MIN_LENGTH, PROGRESS_LOG_INTERVAL)

# --- Configure logging for this module ---
logger = logging.getLogger(__name__)

# Type alias for one scanner result
BarcodeResultType = Tuple[str, np.ndarray] # (sequence ID, barcode)


# === Codon Counting ===

def count_codons(sequence_str: str, codon_index: CodonIndex) -> np.ndarray:
    """
    Counts codons in non-overlapping, in-frame windows of a sequence.

    Windows are read left to right with a step of 3. Trailing bases that do not
    form a full codon are ignored, and windows that are not one of the 64
    codons (e.g. containing 'N' or a gap) are skipped without being counted.

    Args:
        sequence_str (str): The DNA sequence (case-insensitive).
        codon_index (CodonIndex): Column layout of the barcode.

    Returns:
        np.ndarray: Integer counts, one per codon, in codon_index order.
    """
    raw_counts: np.ndarray = np.zeros(len(codon_index.codons), dtype=np.int64)
    seq_str: str = sequence_str.upper()
    seq_len: int = len(seq_str)
    last_full_codon_start: int = seq_len - (seq_len % CODON_LENGTH)

    windows: Counter[str] = Counter(
        seq_str[i:i + CODON_LENGTH] for i in range(0, last_full_codon_start, CODON_LENGTH)
    )
    skipped_windows: int = 0
    for window, count in windows.items():
        column = codon_index.columns.get(window)
        if column is None:
            skipped_windows += count
            continue
        raw_counts[column] = count

    if skipped_windows or seq_len % CODON_LENGTH:
        logger.debug(f"Skipped {skipped_windows} unrecognized windows and "
                     f"{seq_len % CODON_LENGTH} trailing bases (sequence length {seq_len}).")
    return raw_counts


# === Normalization ===

def normalize_codon_counts(raw_counts: np.ndarray,
                           codon_index: CodonIndex,
                           decimals: int = BARCODE_DECIMALS) -> np.ndarray:
    """
    Converts raw codon counts into frequencies within each synonymous group.

    For every amino acid, each codon's count is divided by the summed count of
    the amino acid's codons and rounded. Groups whose total is zero keep their
    raw values (all zero).

    Args:
        raw_counts (np.ndarray): Counts aligned to codon_index.codons. Not modified.
        codon_index (CodonIndex): Column layout and synonymous groups.
        decimals (int): Rounding precision. Default 4.

    Returns:
        np.ndarray: Float barcode in the same column order as raw_counts.
    """
    if len(raw_counts) != len(codon_index.codons):
        raise ValueError(f"Expected {len(codon_index.codons)} counts, got {len(raw_counts)}.")

    barcode: np.ndarray = np.asarray(raw_counts, dtype=float).copy()
    for aa, columns in codon_index.groups.items():
        total = sum(int(raw_counts[column]) for column in columns)
        if total == 0:
            continue
        for column in columns:
            barcode[column] = round(int(raw_counts[column]) / total, decimals)
    return barcode


def calculate_barcode(sequence_str: str, codon_index: CodonIndex) -> np.ndarray:
    """
    Computes the normalized codon usage barcode of one sequence.

    An empty sequence, or one shorter than a codon, yields all zeros.
    """
    return normalize_codon_counts(count_codons(sequence_str, codon_index), codon_index)


# === Sequence Scanning ===

class SequenceScanner:
    """
    Streams sequence records into barcodes, one record at a time.

    Records shorter than min_length are rejected. Running counters are kept on
    the instance so the caller can report them once the stream is consumed:

        seen      -- records read from the source
        rejected  -- records dropped by the length filter
        emitted   -- barcodes yielded

    Usage::

        scanner = SequenceScanner(build_codon_index(11), min_length=102)
        for seq_id, barcode in scanner.process(records):
            ...
    """

    def __init__(self, codon_index: CodonIndex, min_length: int = DEFAULT_MIN_LENGTH):
        if isinstance(min_length, bool) or not isinstance(min_length, int) or min_length < 0:
            raise ValueError(f"min_length must be a non-negative integer, got {min_length!r}.")
        self.codon_index: CodonIndex = codon_index
        self.min_length: int = min_length
        self.seen: int = 0
        self.rejected: int = 0
        self.emitted: int = 0

    def accepts(self, sequence_str: str) -> bool:
        """True if a sequence is long enough to be barcoded."""
        return len(sequence_str) >= self.min_length

    def process(self, records: Iterable[SeqRecord]) -> Iterator[BarcodeResultType]:
        """
        Yields (sequence ID, barcode) for every accepted record, in input order.

        Args:
            records (Iterable[SeqRecord]): Sequence source, read lazily.

        Yields:
            BarcodeResultType: The record ID and its barcode.
        """
        for record in records:
            self.seen += 1
            if self.seen % PROGRESS_LOG_INTERVAL == 0:
                logger.debug(f"Scanned {self.seen} sequences ({self.emitted} barcoded, {self.rejected} rejected).")

            seq_str: str = str(record.seq)
            if not self.accepts(seq_str):
                self.rejected += 1
                logger.debug(f"Seq {record.id} rejected (length {len(seq_str)} < {self.min_length}).")
                continue

            barcode: np.ndarray = calculate_barcode(seq_str, self.codon_index)
            self.emitted += 1
            yield record.id, barcode
