#!/usr/bin/env python3

import argparse
import sys
from pathlib import Path

from errors import ExpenseTrackerError
from logger import get_logger

logger = get_logger()


def cmd_ingest(args, services):
    """Load transactions from a CSV file and validate them against the taxonomy.

    Args:
        args: Parsed command-line arguments with csv_file, auto_create,
            output and show_rejections
        services: Services container with the tracker
    """
    csv_path = Path(args.csv_file)
    if not csv_path.exists():
        logger.error(f"File not found: {args.csv_file}")
        sys.exit(1)

    auto_create = args.auto_create
    if auto_create is None:
        auto_create = services.config.auto_create_taxonomy

    logger.info(f"CSV file: {args.csv_file}")
    logger.info(f"Auto-create categories: {'yes' if auto_create else 'no'}")
    logger.info("-" * 80)

    tracker = services.tracker
    try:
        result = tracker.load_transactions_from_file(csv_path, auto_create)
    except ExpenseTrackerError as e:
        logger.error(f"Error loading transactions: {e}")
        sys.exit(1)

    logger.info(f"\n{result.summary()}")

    if args.show_rejections and result.rejections:
        logger.info("\nIgnored rows:")
        for rejection in result.rejections:
            logger.info(f"  Line {rejection.line_number}: {rejection.error}")

    if auto_create:
        try:
            services.save_taxonomy()
        except ExpenseTrackerError as e:
            logger.error(f"Error saving categories: {e}")
            sys.exit(1)
        logger.info(f"✓ Categories saved to {services.config.taxonomy_path}")

    if args.output:
        try:
            count = tracker.write_transactions_to_file(Path(args.output))
        except ExpenseTrackerError as e:
            logger.error(f"Error writing transactions: {e}")
            sys.exit(1)
        logger.info(f"✓ Wrote {count} transactions to {args.output}")


def setup_parser(subparsers):
    """Setup transactions subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "transactions",
        help="Load and validate transactions",
        description="Load transactions from CSV and validate them against the categories",
    )

    transactions_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available transaction commands",
        dest="subcommand",
        required=True,
    )

    # transactions ingest
    ingest_parser = transactions_subparsers.add_parser(
        "ingest", help="Load transactions from a CSV file"
    )
    ingest_parser.add_argument(
        "csv_file",
        help="Path to the CSV file (date,amount_out,amount_in,category,subcategory,tag,note)",
    )
    ingest_parser.add_argument(
        "--auto-create",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Create missing categories and sub-categories from the rows "
        "(default: taxonomy.auto_create from the config file)",
    )
    ingest_parser.add_argument(
        "--output",
        "-o",
        default=None,
        help="Write the accepted transactions to this CSV file",
    )
    ingest_parser.add_argument(
        "--show-rejections",
        action="store_true",
        help="List every ignored row with the reason",
    )
    ingest_parser.set_defaults(func=cmd_ingest)
