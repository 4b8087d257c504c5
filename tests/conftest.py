# tests/conftest.py
import pytest
from pathlib import Path
from typing import Dict

from pycodon_barcode import utils

# --- Reset Logging Configuration Fixture ---
@pytest.fixture(autouse=True)
def reset_logging_config(monkeypatch):
    """Reset logging configuration before each test to ensure proper log capture.

    cli.main() installs a RichHandler on the package logger and changes its
    level; this puts every logger back to a propagating, NOTSET state so that
    caplog sees records of the next test.
    """
    import logging

    logging.root.handlers.clear()
    monkeypatch.setattr(logging, 'basicConfig', lambda **kwargs: None)

    for name in logging.root.manager.loggerDict:
        logger = logging.getLogger(name)
        logger.handlers = []
        logger.propagate = True
        logger.disabled = False
        logger.setLevel(logging.NOTSET)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.NOTSET)
    root_logger.handlers = []
    root_logger.addHandler(logging.NullHandler())

    yield


# --- Fixtures for Genetic Code Data ---

@pytest.fixture
def standard_genetic_code_dict() -> Dict[str, str]:
    """Provides the standard genetic code dictionary (NCBI table 1)."""
    return {
        'TTT': 'F', 'TTC': 'F', 'TTA': 'L', 'TTG': 'L',
        'TCT': 'S', 'TCC': 'S', 'TCA': 'S', 'TCG': 'S',
        'TAT': 'Y', 'TAC': 'Y', 'TAA': '*', 'TAG': '*',
        'TGT': 'C', 'TGC': 'C', 'TGA': '*', 'TGG': 'W',
        'CTT': 'L', 'CTC': 'L', 'CTA': 'L', 'CTG': 'L',
        'CCT': 'P', 'CCC': 'P', 'CCA': 'P', 'CCG': 'P',
        'CAT': 'H', 'CAC': 'H', 'CAA': 'Q', 'CAG': 'Q',
        'CGT': 'R', 'CGC': 'R', 'CGA': 'R', 'CGG': 'R',
        'ATT': 'I', 'ATC': 'I', 'ATA': 'I', 'ATG': 'M',
        'ACT': 'T', 'ACC': 'T', 'ACA': 'T', 'ACG': 'T',
        'AAT': 'N', 'AAC': 'N', 'AAA': 'K', 'AAG': 'K',
        'AGT': 'S', 'AGC': 'S', 'AGA': 'R', 'AGG': 'R',
        'GTT': 'V', 'GTC': 'V', 'GTA': 'V', 'GTG': 'V',
        'GCT': 'A', 'GCC': 'A', 'GCA': 'A', 'GCG': 'A',
        'GAT': 'D', 'GAC': 'D', 'GAA': 'E', 'GAG': 'E',
        'GGT': 'G', 'GGC': 'G', 'GGA': 'G', 'GGG': 'G',
    }

@pytest.fixture
def bacterial_codon_index() -> utils.CodonIndex:
    """Codon index of the default table (11, Bacterial)."""
    return utils.build_codon_index(11)

@pytest.fixture
def vertebrate_mito_codon_index() -> utils.CodonIndex:
    """Codon index of table 2 (Vertebrate Mitochondrial): ATA is Met, TGA is Trp."""
    return utils.build_codon_index(2)


# --- Fixtures for I/O and CLI Tests ---

def write_fasta(filepath: Path, records: Dict[str, str], width: int = 0) -> Path:
    """Writes records to a FASTA file, wrapping bodies at width (0: no wrapping)."""
    with open(filepath, "w") as f:
        for seq_id, seq_str in records.items():
            f.write(f">{seq_id}\n")
            if width and seq_str:
                for start in range(0, len(seq_str), width):
                    f.write(seq_str[start:start + width] + "\n")
            else:
                f.write(f"{seq_str}\n")
    return filepath

@pytest.fixture
def contigs_fasta_file(tmp_path: Path) -> Path:
    """A small squished contig file: two long contigs, one short one."""
    return write_fasta(tmp_path / "contigs.squished.fasta", {
        "contig_1": "ATG" * 40,                      # 120 nt, only ATG
        "contig_2_short": "TTTTTC" * 5,              # 30 nt, rejected at cutoff 102
        "contig_3": "ttttttttc" + "CTGCTGCTA" * 11,  # 108 nt, lowercase start
    }, width=60)

@pytest.fixture
def empty_fasta_file(tmp_path: Path) -> Path:
    filepath = tmp_path / "empty.fasta"
    filepath.write_text("")
    return filepath
