"""
Command Line Entry Point

Usage: payments-engine <input_file>

Reads transactions from the CSV file, writes client records as CSV to
stdout. Exit status 1 on unreadable or malformed input, 2 on usage errors.
"""

import argparse
import csv
import sys
from typing import List, Optional

from .config import get_config
from .fixed_point import FixedPointOverflowError
from .input_output import TransactionConversionError, write_client_records
from .logging_config import setup_logging
from .processor import TransactionProcessor, process_transactions_into_accounts


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="payments-engine",
        description="Apply a CSV stream of client transactions and print the resulting balances."
    )
    parser.add_argument("input_file", help="Path to the transactions CSV file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = get_config()
    logger = setup_logging(config.log_level, "payments_engine", config.log_format, config.log_file)

    try:
        with open(args.input_file, newline="", encoding=config.input_encoding) as input_file:
            processor: TransactionProcessor = process_transactions_into_accounts(input_file, {})
        # Totals are summed here, so snapshotting can overflow too
        snapshots = processor.snapshots(sort_by_client=config.sort_output)
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Cannot read input file {args.input_file}: {e}")
        print(f"error: cannot read {args.input_file}: {e}", file=sys.stderr)
        return 1
    except (TransactionConversionError, csv.Error) as e:
        logger.error(f"Parsing {args.input_file} failed: {e}")
        print(f"error: {e}", file=sys.stderr)
        return 1
    except FixedPointOverflowError as e:
        logger.error(f"Arithmetic overflow while processing {args.input_file}: {e}")
        print(f"error: arithmetic overflow: {e}", file=sys.stderr)
        return 1

    write_client_records(sys.stdout, snapshots)
    return 0
