#!/usr/bin/env python3
"""
Expense tracker CLI - command-line interface for categories and transactions.

Usage:
    python -m cli <command> <subcommand> [options]

Commands:
    categories   Manage categories and sub-categories
    transactions Load and validate transactions

Examples:
    python -m cli categories list
    python -m cli categories add Food
    python -m cli categories add-sub Food Groceries
    python -m cli transactions ingest transactions.csv --output cleaned.csv
    python -m cli transactions ingest transactions.csv --no-auto-create --show-rejections
"""

import sys
import argparse
from cli import categories, transactions
from config import load_config
from services.base import Services
from logger import setup_logging


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands registered."""
    parser = argparse.ArgumentParser(
        prog="cli",
        description="Expense tracker - Personal transaction categorization",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
    )

    categories.setup_parser(subparsers)
    transactions.setup_parser(subparsers)

    return parser


def main():
    """Main CLI entry point with subcommands."""
    parser = build_parser()
    args = parser.parse_args()

    if hasattr(args, "func"):
        try:
            config = load_config()
            setup_logging(config)

            # Create services container for dependency injection
            services = Services(config)

            args.func(args, services)
        except Exception as e:
            print(f"Error: {e}")
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
