"""Expense tracker: batch loading, validation and persistence."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, TextIO, Tuple, Union

from pydantic import ValidationError

from errors import (
    DuplicateSubcategoryError,
    ExpenseTrackerError,
    ParseError,
    RejectionReason,
    StorageError,
    TaxonomyError,
    TransactionRejectedError,
)
from ingestion.transactions_csv import (
    read_numbered_rows,
    row_to_parsed_transaction,
    write_rows,
)
from models.transaction import ParsedTransaction, Transaction
from services.resolver import resolve
from services.taxonomy import TaxonomyDocument, TaxonomyStore
from logger import get_logger

logger = get_logger()

PathLike = Union[str, Path]


@dataclass
class RowRejection:
    """A row that was skipped during a batch load.

    Attributes:
        line_number: Line of the row in the source.
        error: ParseError if the row could not be parsed,
            TransactionRejectedError if it did not match the taxonomy.
    """

    line_number: int
    error: ExpenseTrackerError

    @property
    def reason(self) -> Optional[RejectionReason]:
        if isinstance(self.error, TransactionRejectedError):
            return self.error.reason
        return None


@dataclass
class BatchResult:
    """Outcome of loading a batch of rows."""

    total_rows: int = 0
    accepted: int = 0
    rejections: List[RowRejection] = field(default_factory=list)

    @property
    def rejected(self) -> int:
        return len(self.rejections)

    @property
    def parse_errors(self) -> List[RowRejection]:
        return [r for r in self.rejections if isinstance(r.error, ParseError)]

    def summary(self) -> str:
        return (
            f"Read: {self.total_rows} | Accepted: {self.accepted} | "
            f"Ignored: {self.rejected} ({len(self.parse_errors)} unparsable)"
        )


class ExpenseTracker:
    """Holds a taxonomy and the transactions validated against it.

    Args:
        taxonomy: Optional existing taxonomy. A new empty one is created if
            omitted.
    """

    def __init__(self, taxonomy: Optional[TaxonomyStore] = None):
        self.taxonomy = taxonomy if taxonomy is not None else TaxonomyStore()
        self._transactions: List[Transaction] = []

    @classmethod
    def from_taxonomy_file(cls, path: PathLike) -> "ExpenseTracker":
        """Create a tracker with the taxonomy stored at path."""
        return cls(taxonomy=cls.load_taxonomy(path))

    @property
    def transactions(self) -> Tuple[Transaction, ...]:
        """Retained transactions in load order."""
        return tuple(self._transactions)

    def add_transaction(self, parsed: ParsedTransaction) -> Transaction:
        """Validate a parsed transaction and retain it.

        Raises:
            TransactionRejectedError: If the transaction does not match the taxonomy.
        """
        transaction = resolve(parsed, self.taxonomy)
        self._transactions.append(transaction)
        return transaction

    def replace_transaction(self, index: int, parsed: ParsedTransaction) -> Transaction:
        """Replace a retained transaction with a new, validated one.

        The existing transaction is left in place if the replacement is rejected.

        Raises:
            IndexError: If there is no transaction at index.
            TransactionRejectedError: If the replacement does not match the taxonomy.
        """
        if not -len(self._transactions) <= index < len(self._transactions):
            raise IndexError(f"No transaction at index {index}")

        transaction = resolve(parsed, self.taxonomy)
        self._transactions[index] = transaction
        return transaction

    def _register_taxonomy(self, parsed: ParsedTransaction) -> None:
        self.taxonomy.add_category(parsed.category, created_on=parsed.date)

        if parsed.subcategory is not None:
            try:
                self.taxonomy.add_subcategory(
                    parsed.category, parsed.subcategory, created_on=parsed.date
                )
            except DuplicateSubcategoryError as e:
                logger.debug(str(e))

    def load_transactions(
        self,
        rows: Iterable[Sequence[str]],
        auto_create_taxonomy: bool = True,
        first_line_number: int = 1,
    ) -> BatchResult:
        """Parse, validate and retain a batch of CSV rows.

        Rows are processed in order. A row that cannot be parsed or does not
        match the taxonomy is recorded in the result and skipped; the rest of
        the batch is still loaded. Errors raised by the row source itself
        (e.g. TabularFormatError) abort the batch and no transaction of it is
        retained.

        Args:
            rows: CSV rows without the header. Empty rows are skipped.
            auto_create_taxonomy: Add each row's category and sub-category
                to the taxonomy before validating it.
            first_line_number: Line number of the first row, for diagnostics.

        Returns:
            BatchResult with counts and per-row rejections.
        """
        return self._load_numbered_rows(
            enumerate(rows, start=first_line_number), auto_create_taxonomy
        )

    def _load_numbered_rows(
        self,
        numbered_rows: Iterable[Tuple[int, Sequence[str]]],
        auto_create_taxonomy: bool,
    ) -> BatchResult:
        result = BatchResult()
        accepted: List[Transaction] = []

        for line_number, row in numbered_rows:
            if not row:
                continue
            result.total_rows += 1

            try:
                parsed = row_to_parsed_transaction(row)
            except ParseError as e:
                logger.debug(f"Ignoring unparsable line {line_number}: {row} - {e}")
                result.rejections.append(RowRejection(line_number, e))
                continue

            if auto_create_taxonomy:
                self._register_taxonomy(parsed)

            try:
                accepted.append(resolve(parsed, self.taxonomy))
            except TransactionRejectedError as e:
                logger.debug(f"Ignoring line {line_number}: {e}")
                result.rejections.append(RowRejection(line_number, e))

        self._transactions.extend(accepted)
        result.accepted = len(accepted)

        logger.info(f"Number of valid transactions extracted: {result.accepted}")
        logger.info(f"Number of transactions ignored: {result.rejected}")
        return result

    def load_transactions_from_file(
        self, path: PathLike, auto_create_taxonomy: bool = True
    ) -> BatchResult:
        """Load transactions from a CSV file.

        Raises:
            StorageError: If the file cannot be opened or read.
            TabularFormatError: If the file is not a valid transactions CSV.
        """
        logger.info(f"Loading transactions from {path}")
        try:
            with open(path, "r", newline="", encoding="utf-8") as f:
                return self._load_numbered_rows(
                    read_numbered_rows(f), auto_create_taxonomy
                )
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to load the CSV of transactions ({e})", path) from e

    def write_transactions(self, destination: TextIO) -> int:
        """Write the retained transactions as CSV.

        Returns:
            Number of transactions written.
        """
        return write_rows(destination, self._transactions)

    def write_transactions_to_file(self, path: PathLike) -> int:
        """Write the retained transactions to a CSV file.

        Raises:
            StorageError: If the file cannot be written.
        """
        try:
            with open(path, "w", newline="", encoding="utf-8") as f:
                count = self.write_transactions(f)
        except OSError as e:
            raise StorageError(f"Failed to write output CSV file ({e})", path) from e

        logger.info(f"Wrote {count} transactions to {path}")
        return count

    def rebuild_taxonomy_from_transactions(self) -> int:
        """Register the category and sub-category of every retained transaction.

        Returns:
            Number of categories and sub-categories added.
        """
        added = 0
        for transaction in self._transactions:
            if self.taxonomy.add_category(transaction.category, created_on=transaction.date):
                added += 1
            if transaction.subcategory is None:
                continue
            try:
                self.taxonomy.add_subcategory(
                    transaction.category, transaction.subcategory, created_on=transaction.date
                )
                added += 1
            except DuplicateSubcategoryError:
                pass
        return added

    def save_taxonomy(self, path: PathLike) -> None:
        """Save categories and sub-categories (not transactions) as JSON.

        Raises:
            StorageError: If the file cannot be written.
        """
        document = self.taxonomy.to_document()
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(document.model_dump_json(indent=2))
                f.write("\n")
        except OSError as e:
            raise StorageError(f"Failed to write categories ({e})", path) from e

        logger.info(f"Saved {len(document.categories)} categories to {path}")

    @staticmethod
    def load_taxonomy(path: PathLike) -> TaxonomyStore:
        """Load categories and sub-categories from a JSON file.

        Raises:
            StorageError: If the file cannot be read or is malformed.
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read categories ({e})", path) from e

        try:
            document = TaxonomyDocument.model_validate_json(raw)
            store = TaxonomyStore.from_document(document)
        except (ValidationError, ValueError, TaxonomyError) as e:
            raise StorageError(f"Malformed taxonomy file ({e})", path) from e

        logger.info(f"Loaded {len(store)} categories from {path}")
        return store
