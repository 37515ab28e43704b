"""Helper utilities for tests."""

from datetime import date
from pathlib import Path
from typing import List, Optional

from models.transaction import ParsedTransaction

HEADER = "date,amount_out,amount_in,category,subcategory,tag,note"


def csv_text(lines: List[str]) -> str:
    """Build CSV content with the standard header and one line per row."""
    return "\n".join([HEADER] + lines) + "\n"


def write_csv(path: Path, lines: List[str]) -> Path:
    """Write CSV content with the standard header to path.

    Returns:
        The path that was written.
    """
    path.write_text(csv_text(lines), encoding="utf-8")
    return path


def parsed(
    category: str,
    subcategory: Optional[str] = None,
    amount: float = -10.0,
    on: date = date(2024, 1, 15),
    tag: Optional[str] = None,
    note: Optional[str] = None,
) -> ParsedTransaction:
    """Shorthand for building a ParsedTransaction in tests."""
    return ParsedTransaction(
        date=on,
        amount=amount,
        category=category,
        subcategory=subcategory,
        tag=tag,
        note=note,
    )
