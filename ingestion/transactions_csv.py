import csv
import re
from datetime import datetime
from typing import Iterable, Iterator, List, Optional, Sequence, TextIO, Tuple

from errors import (
    InvalidAmountError,
    InvalidDateError,
    MissingFieldError,
    TabularFormatError,
)
from models.transaction import ParsedTransaction, Transaction
from logger import get_logger

logger = get_logger("ingestion")

CSV_HEADERS = [
    "date",
    "amount_out",
    "amount_in",
    "category",
    "subcategory",
    "tag",
    "note",
]
_REQUIRED_FIELDS = CSV_HEADERS[:4]

DATE_FORMAT = "%d.%m.%Y"

# The ' character delimits thousands in CHF amounts, e.g. 1'234.50
_THOUSANDS_SEPARATOR = "'"
_AMOUNT_PATTERN = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)")


def parse_amount(text: str) -> float:
    """Parse an amount column into a float.

    Args:
        text: Raw amount, optionally using ' as thousands separator.

    Returns:
        The parsed amount, 0.0 for an empty column.

    Raises:
        InvalidAmountError: If the text is not a decimal number.
    """
    stripped = text.strip()
    if not stripped:
        return 0.0

    cleaned = stripped.replace(_THOUSANDS_SEPARATOR, "")
    if not _AMOUNT_PATTERN.fullmatch(cleaned):
        raise InvalidAmountError(text)
    return float(cleaned)


def _optional_field(row: Sequence[str], index: int, strip: bool = False) -> Optional[str]:
    if len(row) <= index:
        return None
    value = row[index].strip() if strip else row[index]
    # Empty and missing are the same thing downstream
    return value or None


def row_to_parsed_transaction(row: Sequence[str]) -> ParsedTransaction:
    """Convert a CSV row to a ParsedTransaction.

    Args:
        row: CSV row matching CSV_HEADERS positionally. Trailing optional
            columns may be omitted.

    Returns:
        ParsedTransaction object

    Raises:
        MissingFieldError: If date, amount_out, amount_in or category is absent.
        InvalidDateError: If the date is not in dd.mm.yyyy format.
        InvalidAmountError: If an amount is not numeric.
    """
    for index, field in enumerate(_REQUIRED_FIELDS):
        if len(row) <= index:
            raise MissingFieldError(field)

    date_str = row[0].strip()
    category = row[3].strip()

    if not date_str:
        raise MissingFieldError("date")
    if not category:
        raise MissingFieldError("category")

    try:
        transaction_date = datetime.strptime(date_str, DATE_FORMAT).date()
    except ValueError as e:
        raise InvalidDateError(date_str) from e

    amount_out = parse_amount(row[1])
    amount_in = parse_amount(row[2])

    return ParsedTransaction(
        date=transaction_date,
        amount=amount_in - amount_out,
        category=category,
        subcategory=_optional_field(row, 4, strip=True),
        tag=_optional_field(row, 5),
        note=_optional_field(row, 6),
    )


def read_numbered_rows(source: TextIO) -> Iterator[Tuple[int, List[str]]]:
    """Read the transaction rows of a CSV source with their line numbers.

    Expected format:
    - Header row (line 1): date,amount_out,amount_in,category,subcategory,tag,note
    - Transaction rows (line 2+). Blank lines are yielded as empty lists.

    Each row is paired with the line it starts on. A quoted value may
    contain line breaks, so one row can span several lines of the file.

    Raises:
        TabularFormatError: If the header does not match or the CSV cannot
            be tokenized.
    """
    reader = csv.reader(source, strict=True)

    try:
        header = next(reader, None)
        if header is None:
            logger.info("CSV source is empty")
            return

        normalized = [column.strip().lower() for column in header]
        if normalized:
            normalized[0] = normalized[0].lstrip("\ufeff")
        if normalized[: len(CSV_HEADERS)] != CSV_HEADERS:
            raise TabularFormatError(
                f"Unexpected header row {header}.\nExpected: {CSV_HEADERS}",
                line_number=1,
            )

        last_line = reader.line_num
        for row in reader:
            yield last_line + 1, row
            last_line = reader.line_num
    except csv.Error as e:
        raise TabularFormatError(
            f"Could not read CSV: {e}", line_number=reader.line_num
        ) from e


def read_rows(source: TextIO) -> Iterator[List[str]]:
    """Read the transaction rows of a CSV source.

    Same as read_numbered_rows without the line numbers.
    """
    for _, row in read_numbered_rows(source):
        yield row


def transaction_to_row(transaction: Transaction) -> List[str]:
    """Convert a Transaction to a CSV row.

    The signed amount is split back into amount_out and amount_in; exactly
    one of the two is filled, the other is an empty string.
    """
    if transaction.amount < 0:
        amount_out = f"{transaction.amount_out:.2f}"
        amount_in = ""
    else:
        amount_out = ""
        amount_in = f"{transaction.amount_in:.2f}"

    return [
        transaction.date.strftime(DATE_FORMAT),
        amount_out,
        amount_in,
        transaction.category,
        transaction.subcategory or "",
        transaction.tag or "",
        transaction.note or "",
    ]


def write_rows(destination: TextIO, transactions: Iterable[Transaction]) -> int:
    """Write the header and one row per transaction.

    Returns:
        Number of transaction rows written.
    """
    writer = csv.writer(destination, lineterminator="\n")
    writer.writerow(CSV_HEADERS)

    count = 0
    for transaction in transactions:
        writer.writerow(transaction_to_row(transaction))
        count += 1
    return count
