# src/pycodon_barcode/__init__.py

# Copyright (c) 2025 Gabriel Falque
# Distributed under the terms of the MIT License.
# (See accompanying file LICENSE or copy at https://opensource.org/license/mit/)

# This file makes Python treat the directory as a package.

__version__ = "0.1.0"

# Key entry points, for library use:
# from pycodon_barcode.utils import build_codon_index
# from pycodon_barcode.analysis import calculate_barcode, SequenceScanner
# from pycodon_barcode.io import read_fasta_stream, BarcodeWriter, read_barcode_table
