# src/pycodon_barcode/cli.py
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Gabriel Falque
# Distributed under the terms of the MIT License.
# (See accompanying file LICENSE or copy at https://opensource.org/license/mit/)

"""
Command-Line Interface for the codon usage barcoder.

Reads a FASTA file of coding sequences (non-coding regions already removed and
every sequence in coding orientation), computes the synonymous-group normalized
codon usage barcode of each sequence, and writes one row per sequence to a
delimited table.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from . import __version__
from . import analysis
from . import io
from . import utils


# --- Configure logging ---
# Get a logger specific to this application
logger = logging.getLogger("pycodon_barcode")

# Called after each written row with the scanner holding the running counters
ProgressCallbackType = Callable[[analysis.SequenceScanner], None]


def run_barcoding(
    input_path: io.PathType,
    output_path: io.PathType,
    genetic_code_id: int = utils.DEFAULT_GENETIC_CODE_ID,
    min_length: int = utils.DEFAULT_MIN_LENGTH,
    delimiter: str = utils.DEFAULT_DELIMITER_NAME,
    include_ids: bool = True,
    on_row: Optional[ProgressCallbackType] = None
) -> analysis.SequenceScanner:
    """
    Barcodes every sequence of a FASTA file and writes the barcode table.

    The genetic code is resolved and the input opened before the output file
    is created, so neither an unknown code nor a missing input leaves an
    output file behind. Rows are written as soon as each barcode is computed.

    Args:
        input_path: FASTA file of coding sequences.
        output_path: Barcode table to create (overwritten if present).
        genetic_code_id (int): NCBI genetic code ID. Default 11.
        min_length (int): Sequences shorter than this are rejected. Default 102.
        delimiter (str): 'comma' or 'tab'.
        include_ids (bool): Write the SequenceID column.
        on_row (Optional[ProgressCallbackType]): Called after each written row.

    Returns:
        analysis.SequenceScanner: The scanner, holding the seen/rejected/emitted counters.

    Raises:
        utils.UnknownCodeTableError: Unknown genetic code ID.
        io.UnreadableInputError: Input missing, unreadable or malformed.
        io.UnwritableOutputError: Output cannot be written.
    """
    codon_index: utils.CodonIndex = utils.build_codon_index(genetic_code_id)
    scanner = analysis.SequenceScanner(codon_index, min_length=min_length)

    with io.open_fasta(input_path) as handle:
        records = io.iter_fasta_records(handle, Path(input_path).name)
        with io.BarcodeWriter(output_path, codon_index.codons,
                              delimiter=delimiter, include_ids=include_ids) as writer:
            for seq_id, barcode in scanner.process(records):
                writer.write_row(seq_id, barcode)
                if on_row is not None:
                    on_row(scanner)

    return scanner


def _log_run_summary(scanner: analysis.SequenceScanner, output_path: Path) -> None:
    logger.info(f"Processed: {scanner.emitted} sequences")
    logger.info(f"Rejected: {scanner.rejected} sequences (shorter than {scanner.min_length} bp)")
    logger.debug(f"Total sequences read: {scanner.seen}")
    logger.info(f"Barcodes written to '{output_path}'.")


def handle_barcode_command(args: argparse.Namespace) -> None:
    """Runs the 'barcode' subcommand."""
    logger.info(f"Barcoding '{args.input}' with genetic code {args.genetic_code} "
                f"(cutoff: {args.cutoff} bp).")

    try:
        if args.silent:
            scanner = run_barcoding(args.input, args.output,
                                    genetic_code_id=args.genetic_code,
                                    min_length=args.cutoff,
                                    delimiter=args.delimiter,
                                    include_ids=not args.no_ids)
        else:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                TextColumn("{task.fields[emitted]} barcoded, {task.fields[rejected]} rejected"),
                TimeElapsedColumn(),
                transient=True
            ) as progress:
                task_id = progress.add_task("Barcoding sequences", total=None, emitted=0, rejected=0)

                def _advance(scanner: analysis.SequenceScanner) -> None:
                    progress.update(task_id, emitted=scanner.emitted, rejected=scanner.rejected)

                scanner = run_barcoding(args.input, args.output,
                                        genetic_code_id=args.genetic_code,
                                        min_length=args.cutoff,
                                        delimiter=args.delimiter,
                                        include_ids=not args.no_ids,
                                        on_row=_advance)
    except utils.UnknownCodeTableError as e:
        logger.error(f"{e}. Run 'pycodon_barcode tables' to list valid IDs. Exiting.")
        sys.exit(1)
    except io.UnreadableInputError as e:
        logger.error(f"Input error: {e}. Exiting.")
        sys.exit(1)
    except io.UnwritableOutputError as e:
        logger.error(f"Output error: {e}. Partial output, if any, is not valid. Exiting.")
        sys.exit(1)

    if not args.silent:
        _log_run_summary(scanner, args.output)


def handle_tables_command(args: argparse.Namespace) -> None:
    """Runs the 'tables' subcommand: prints the supported genetic codes."""
    table = Table(title="NCBI genetic codes")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    for code_id, name in utils.get_available_genetic_codes().items():
        marker = " (default)" if code_id == utils.DEFAULT_GENETIC_CODE_ID else ""
        table.add_row(str(code_id), f"{name}{marker}")
    Console().print(table)


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}")
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def main() -> None:
    """Main function to parse arguments and run the barcoding workflow."""
    parser = argparse.ArgumentParser(
        description="Codon usage barcodes: synonymous-group normalized codon frequencies per sequence.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Increase output verbosity to DEBUG level."
    )
    parser.add_argument('--version',
                        action='version',
                        version=f'%(prog)s {__version__}')

    subparsers = parser.add_subparsers(dest="command", title="Available commands")
    subparsers.required = True

    # --- Sub-parser for 'barcode' command ---
    barcode_parser = subparsers.add_parser(
        "barcode",
        help="Compute codon usage barcodes for every sequence of a FASTA file.",
        description="Input is a 'squished' FASTA file: non-coding regions removed and both strands "
                    "oriented in the coding direction. Sequence lengths should be multiples of 3; "
                    "trailing partial codons are ignored.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    barcode_parser.add_argument("-i", "--input",
                                type=Path,
                                required=True,
                                help="FASTA file of coding sequences to barcode.")
    barcode_parser.add_argument("-o", "--output",
                                type=Path,
                                required=True,
                                help="File to write the barcode table to.")
    barcode_parser.add_argument("-c", "--cutoff",
                                type=_non_negative_int,
                                default=utils.DEFAULT_MIN_LENGTH,
                                help="Reject all sequences shorter than this many nucleotides.")
    barcode_parser.add_argument("-p", "--genetic_code",
                                type=int,
                                default=utils.DEFAULT_GENETIC_CODE_ID,
                                help="NCBI genetic code ID (see the 'tables' command).")
    barcode_parser.add_argument("--delimiter",
                                choices=sorted(utils.DELIMITERS),
                                default=utils.DEFAULT_DELIMITER_NAME,
                                help="Field delimiter of the barcode table.")
    barcode_parser.add_argument("--no_ids",
                                action="store_true",
                                help="Leave the SequenceID column out of the barcode table.")
    barcode_parser.add_argument("--silent",
                                action="store_true",
                                help="Output nothing extra to the screen (no progress, no summary).")
    barcode_parser.set_defaults(func=handle_barcode_command)

    # --- Sub-parser for 'tables' command ---
    tables_parser = subparsers.add_parser(
        "tables",
        help="List the supported NCBI genetic code IDs.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    tables_parser.set_defaults(func=handle_tables_command)

    # --- Parse Arguments ---
    args = parser.parse_args()

    # --- Configure Logging ---
    if args.verbose:
        log_level = logging.DEBUG
    elif getattr(args, 'silent', False):
        log_level = logging.WARNING
    else:
        log_level = logging.INFO
    handler_to_use: logging.Handler = RichHandler(
        rich_tracebacks=True, show_path=False, markup=False, show_level=True, log_time_format="[%X]"
    )
    handler_to_use.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    # Configure the application's specific logger
    app_logger = logging.getLogger("pycodon_barcode")
    if app_logger.hasHandlers(): # pragma: no cover
        app_logger.handlers.clear()
    app_logger.addHandler(handler_to_use)
    app_logger.setLevel(log_level)

    logger.debug(f"PyCodon Barcode {__version__} - Command: {args.command}")
    logger.debug(f"Full arguments: {args}")

    # --- Execute the function associated with the subcommand ---
    args.func(args)


if __name__ == '__main__': # pragma: no cover
    main()
