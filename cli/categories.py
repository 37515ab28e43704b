#!/usr/bin/env python3

import argparse
import sys
from datetime import datetime
from pathlib import Path

from errors import DuplicateSubcategoryError, ExpenseTrackerError, TaxonomyError
from ingestion.transactions_csv import DATE_FORMAT
from models.category import normalize_name
from services.tracker import ExpenseTracker
from logger import get_logger

logger = get_logger()


def _parse_date_arg(value):
    """argparse type for dd.mm.yyyy dates."""
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid date '{value}', expected dd.mm.yyyy"
        )


def cmd_list(args, services):
    """List all categories and their sub-categories."""
    categories = services.taxonomy.find_all()

    if not categories:
        logger.info("No categories found.")
        return

    logger.info("\nCategories:")
    logger.info("=" * 80)
    for category in categories:
        logger.info(f"{category.name} (added {category.created_on.isoformat()})")
        for subcategory in category.subcategories:
            logger.info(
                f"  - {subcategory.name} (added {subcategory.created_on.isoformat()})"
            )

    logger.info("-" * 80)
    logger.info(f"\nTotal categories: {len(categories)}")


def cmd_add(args, services):
    """Add a category."""
    if not services.taxonomy.add_category(args.name, created_on=args.date):
        logger.error(f"Category '{args.name}' already exists.")
        sys.exit(1)

    services.save_taxonomy()
    logger.info(f"✓ Category '{normalize_name(args.name)}' added")


def cmd_add_sub(args, services):
    """Add a sub-category to an existing category."""
    try:
        services.taxonomy.add_subcategory(
            args.category, args.name, created_on=args.date
        )
    except (TaxonomyError, ValueError) as e:
        logger.error(f"Error adding sub-category: {e}")
        sys.exit(1)

    services.save_taxonomy()
    logger.info(
        f"✓ Sub-category '{normalize_name(args.name)}' added to "
        f"'{normalize_name(args.category)}'"
    )


def cmd_import(args, services):
    """Merge categories from another taxonomy file into the current one."""
    try:
        imported = ExpenseTracker.load_taxonomy(Path(args.taxonomy_file))
    except ExpenseTrackerError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info(f"\nImporting categories from {args.taxonomy_file}")
    logger.info("=" * 80)

    created_count = 0
    skipped_count = 0
    taxonomy = services.taxonomy

    for category in imported.find_all():
        if taxonomy.add_category(category.name, category.created_on):
            logger.info(f"✓ Created '{category.name}'")
            created_count += 1
        else:
            logger.info(f"⊘ Skipped '{category.name}' (already exists)")
            skipped_count += 1

        for subcategory in category.subcategories:
            label = f"{category.name}/{subcategory.name}"
            try:
                taxonomy.add_subcategory(
                    category.name, subcategory.name, subcategory.created_on
                )
                logger.info(f"  ✓ Created '{label}'")
                created_count += 1
            except DuplicateSubcategoryError:
                logger.info(f"  ⊘ Skipped '{label}' (already exists)")
                skipped_count += 1

    services.save_taxonomy()

    logger.info("=" * 80)
    logger.info("\nImport complete!")
    logger.info(f"Created: {created_count}")
    logger.info(f"Skipped: {skipped_count}")


def cmd_export(args, services):
    """Write the current taxonomy to another file."""
    try:
        services.tracker.save_taxonomy(Path(args.taxonomy_file))
    except ExpenseTrackerError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info(f"✓ Exported {len(services.taxonomy)} categories to {args.taxonomy_file}")


def setup_parser(subparsers):
    """Setup categories subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "categories",
        help="Manage categories",
        description="List, add, import and export categories and sub-categories",
    )

    categories_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available category commands",
        dest="subcommand",
        required=True,
    )

    # categories list
    list_parser = categories_subparsers.add_parser(
        "list", help="List all categories"
    )
    list_parser.set_defaults(func=cmd_list)

    # categories add
    add_parser = categories_subparsers.add_parser("add", help="Add a category")
    add_parser.add_argument("name", help="Category name (case-insensitive)")
    add_parser.add_argument(
        "--date",
        type=_parse_date_arg,
        default=None,
        help="Creation date as dd.mm.yyyy (default: today)",
    )
    add_parser.set_defaults(func=cmd_add)

    # categories add-sub
    add_sub_parser = categories_subparsers.add_parser(
        "add-sub", help="Add a sub-category to a category"
    )
    add_sub_parser.add_argument("category", help="Existing category name")
    add_sub_parser.add_argument("name", help="Sub-category name (case-insensitive)")
    add_sub_parser.add_argument(
        "--date",
        type=_parse_date_arg,
        default=None,
        help="Creation date as dd.mm.yyyy (default: today)",
    )
    add_sub_parser.set_defaults(func=cmd_add_sub)

    # categories import
    import_parser = categories_subparsers.add_parser(
        "import", help="Merge categories from a taxonomy JSON file"
    )
    import_parser.add_argument("taxonomy_file", help="Path to the taxonomy JSON file")
    import_parser.set_defaults(func=cmd_import)

    # categories export
    export_parser = categories_subparsers.add_parser(
        "export", help="Write the taxonomy to a JSON file"
    )
    export_parser.add_argument("taxonomy_file", help="Destination path")
    export_parser.set_defaults(func=cmd_export)
