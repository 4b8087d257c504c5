# src/pycodon_barcode/io.py
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Gabriel Falque
# Distributed under the terms of the MIT License.
# (See accompanying file LICENSE or copy at https://opensource.org/license/mit/)

"""
Input/Output operations: streaming FASTA records in, barcode tables out.
"""
import csv
import os
import logging
from typing import IO, Iterator, List, Optional, Sequence, Set, Union

import numpy as np
import pandas as pd
from Bio import SeqIO
from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord

from .utils import (VALID_CODON_CHARS, BARCODE_DECIMALS, ID_COLUMN_NAME,
                    DELIMITERS, DEFAULT_DELIMITER_NAME)

# --- Configure logging for this module ---
logger = logging.getLogger(__name__)

PathType = Union[str, os.PathLike]


class UnreadableInputError(OSError):
    """Raised when the input sequence file cannot be opened, decoded or parsed."""


class UnwritableOutputError(OSError):
    """Raised when the barcode table cannot be created or written."""


# === FASTA Input ===

def open_fasta(filepath: PathType) -> IO[str]:
    """
    Opens a FASTA file for reading.

    Raises:
        UnreadableInputError: If the file is missing, a directory, or not readable.
    """
    logger.debug(f"Opening FASTA file: {filepath}")
    try:
        return open(filepath, 'r')
    except OSError as e:
        logger.error(f"Input FASTA file cannot be opened: '{filepath}' ({e.strerror or e})")
        raise UnreadableInputError(f"Cannot read input FASTA file '{filepath}': {e.strerror or e}") from e


def iter_fasta_records(handle: IO[str], source_name: str = "<stream>") -> Iterator[SeqRecord]:
    """
    Lazily yields records from an open FASTA handle, one at a time.

    Sequences are converted to uppercase. Empty records are yielded as well,
    so that length filtering downstream sees every record of the file.

    Args:
        handle (IO[str]): Open text handle positioned at the start of the FASTA data.
        source_name (str): Name used in log messages.

    Yields:
        SeqRecord: The next record, with an uppercase sequence.

    Raises:
        UnreadableInputError: If the content cannot be decoded or parsed as FASTA.
    """
    records_read: int = 0
    try:
        for record in SeqIO.parse(handle, "fasta"):
            seq_str: str = str(record.seq).upper()
            record.seq = Seq(seq_str)

            if not seq_str:
                logger.debug(f"Sequence '{record.id}' in {source_name} is empty.")
            else:
                invalid_chars: Set[str] = set(seq_str) - VALID_CODON_CHARS
                if invalid_chars:
                    logger.debug(f"Sequence '{record.id}' in {source_name} contains non-ACGT characters "
                                 f"{sorted(invalid_chars)}; affected codons will not be counted.")

            records_read += 1
            yield record
    except ValueError as parse_err:
        # SeqIO raises ValueError on malformed FASTA, UnicodeDecodeError is one as well
        logger.error(f"Error parsing FASTA file '{source_name}' after {records_read} records. "
                     f"Check file format. Details: {parse_err}")
        raise UnreadableInputError(f"Failed to parse FASTA file '{source_name}'.") from parse_err

    logger.debug(f"Read {records_read} sequences from {source_name}")


def read_fasta_stream(filepath: PathType) -> Iterator[SeqRecord]:
    """
    Yields the records of a FASTA file, keeping only the current one in memory.

    The file is opened on first iteration and closed when the stream ends.
    """
    with open_fasta(filepath) as handle:
        yield from iter_fasta_records(handle, os.path.basename(filepath))


# === Barcode Output ===

def format_barcode_values(barcode: Sequence[float], decimals: int = BARCODE_DECIMALS) -> List[str]:
    """Formats barcode values with a fixed number of decimals ('0.5000')."""
    return [f"{float(value):.{decimals}f}" for value in barcode]


def resolve_delimiter(delimiter: str) -> str:
    """Accepts a delimiter name ('comma', 'tab') or the character itself."""
    if delimiter in DELIMITERS:
        return DELIMITERS[delimiter]
    if delimiter in DELIMITERS.values():
        return delimiter
    raise ValueError(f"Unsupported delimiter {delimiter!r}. Use one of: {', '.join(DELIMITERS)}.")


class BarcodeWriter:
    """
    Writes barcodes to a delimited text table, one row at a time.

    The header row holds the quoted column names ("SequenceID", then the 64
    codons). Each row holds the sequence ID followed by the barcode values.
    With include_ids=False both the ID column and the "SequenceID" header are
    left out.

    The output file is created when the writer is opened, and the header is
    written right away. Use as a context manager::

        with BarcodeWriter("barcodes.csv", codon_index.codons) as writer:
            writer.write_row("contig_1", barcode)
    """

    def __init__(self,
                 filepath: PathType,
                 codons: Sequence[str],
                 delimiter: str = DEFAULT_DELIMITER_NAME,
                 include_ids: bool = True,
                 decimals: int = BARCODE_DECIMALS):
        self.filepath: PathType = filepath
        self.codons: List[str] = list(codons)
        self.delimiter: str = resolve_delimiter(delimiter)
        self.include_ids: bool = include_ids
        self.decimals: int = decimals
        self.rows_written: int = 0
        self._handle: Optional[IO[str]] = None
        self._writer = None

    @property
    def header(self) -> List[str]:
        return ([ID_COLUMN_NAME] if self.include_ids else []) + self.codons

    def open(self) -> "BarcodeWriter":
        try:
            self._handle = open(self.filepath, 'w', newline='')
            header_writer = csv.writer(self._handle, delimiter=self.delimiter,
                                       quoting=csv.QUOTE_ALL, lineterminator='\n')
            header_writer.writerow(self.header)
        except OSError as e:
            self.close()
            logger.error(f"Cannot write barcode table '{self.filepath}': {e.strerror or e}")
            raise UnwritableOutputError(f"Cannot write output file '{self.filepath}': {e.strerror or e}") from e

        self._writer = csv.writer(self._handle, delimiter=self.delimiter,
                                  quoting=csv.QUOTE_MINIMAL, lineterminator='\n')
        logger.debug(f"Opened barcode table '{self.filepath}' ({len(self.header)} columns).")
        return self

    def write_row(self, seq_id: str, barcode: np.ndarray) -> None:
        """Appends the row of one sequence."""
        if self._writer is None:
            raise RuntimeError("BarcodeWriter is not open.")
        if len(barcode) != len(self.codons):
            raise ValueError(f"Barcode of '{seq_id}' has {len(barcode)} values, expected {len(self.codons)}.")

        row: List[str] = ([seq_id] if self.include_ids else []) + format_barcode_values(barcode, self.decimals)
        try:
            self._writer.writerow(row)
        except OSError as e:
            logger.error(f"Failed writing row for '{seq_id}' to '{self.filepath}': {e.strerror or e}")
            raise UnwritableOutputError(f"Cannot write output file '{self.filepath}': {e.strerror or e}") from e
        self.rows_written += 1

    def close(self) -> None:
        if self._handle is not None:
            try:
                self._handle.close()
            finally:
                self._handle = None
                self._writer = None

    def __enter__(self) -> "BarcodeWriter":
        return self.open()

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()


# === Barcode Table Loading ===

def read_barcode_table(filepath: PathType, delimiter: Optional[str] = None) -> pd.DataFrame:
    """
    Loads a barcode table written by BarcodeWriter.

    Args:
        filepath (PathType): Path of the barcode table.
        delimiter (Optional[str]): Delimiter name or character. Sniffed from the
                                   header line if None.

    Returns:
        pd.DataFrame: One row per sequence, one float column per codon. Indexed
                      by sequence ID when the table has a SequenceID column.

    Raises:
        UnreadableInputError: If the file cannot be read.
    """
    try:
        with open(filepath, 'r', newline='') as handle:
            header_line: str = handle.readline()
    except OSError as e:
        logger.error(f"Barcode table cannot be opened: '{filepath}' ({e.strerror or e})")
        raise UnreadableInputError(f"Cannot read barcode table '{filepath}': {e.strerror or e}") from e

    if not header_line.strip():
        raise UnreadableInputError(f"Barcode table '{filepath}' has no header row.")

    if delimiter is not None:
        used_delimiter: str = resolve_delimiter(delimiter)
    else:
        try:
            used_delimiter = csv.Sniffer().sniff(header_line, delimiters=''.join(DELIMITERS.values())).delimiter
        except csv.Error:
            logger.warning(f"Could not sniff delimiter of '{os.path.basename(filepath)}'. Assuming comma.")
            used_delimiter = DELIMITERS['comma']
        logger.debug(f"Delimiter sniffed for '{os.path.basename(filepath)}': {used_delimiter!r}")

    df: pd.DataFrame = pd.read_csv(filepath, sep=used_delimiter, dtype={ID_COLUMN_NAME: str})
    if ID_COLUMN_NAME in df.columns:
        df = df.set_index(ID_COLUMN_NAME)
    return df
