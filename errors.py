"""Exception types for the expense tracker.

Parse errors are raised per CSV row, taxonomy errors by explicit taxonomy
edits, and rejections by the reference resolver. Storage and tabular format
errors are fatal to the operation that raised them.
"""

from enum import Enum
from pathlib import Path
from typing import Optional, Union


class ExpenseTrackerError(Exception):
    """Base class for all expense tracker errors."""


class ParseError(ExpenseTrackerError, ValueError):
    """A row could not be turned into a ParsedTransaction."""


class MissingFieldError(ParseError):
    """A required positional field is absent from the row."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Missing required field: {field}")


class InvalidDateError(ParseError):
    """The date field does not match the dd.mm.yyyy format."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid date '{value}', expected dd.mm.yyyy")


class InvalidAmountError(ParseError):
    """An amount field is not a decimal number."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid amount '{value}'")


class TaxonomyError(ExpenseTrackerError):
    """An explicit taxonomy edit could not be applied."""


class UnknownCategoryError(TaxonomyError):
    def __init__(self, category_name: str):
        self.category_name = category_name
        super().__init__(
            f"Sub-category cannot be added because category '{category_name}' does not exist"
        )


class DuplicateSubcategoryError(TaxonomyError):
    def __init__(self, category_name: str, subcategory_name: str):
        self.category_name = category_name
        self.subcategory_name = subcategory_name
        super().__init__(
            f"Sub-category '{subcategory_name}' already exists in category '{category_name}'"
        )


class RejectionReason(Enum):
    """Why a parsed transaction did not resolve against the taxonomy."""

    INVALID_CATEGORY = "Invalid category in transaction"
    UNEXPECTED_SUBCATEGORY = "Sub-category set although category has none"
    MISSING_OR_INVALID_SUBCATEGORY = (
        "Sub-category missing or not part of the category"
    )


class TransactionRejectedError(ExpenseTrackerError):
    """A parsed transaction is not valid for the current taxonomy."""

    def __init__(self, reason: RejectionReason, category: str, subcategory: Optional[str]):
        self.reason = reason
        self.category = category
        self.subcategory = subcategory
        detail = f"category='{category}'"
        if subcategory is not None:
            detail += f", subcategory='{subcategory}'"
        super().__init__(f"{reason.value} ({detail})")


class TabularFormatError(ExpenseTrackerError):
    """The CSV source is structurally unreadable."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"Line {line_number}: {message}"
        super().__init__(message)


class StorageError(ExpenseTrackerError):
    """Reading or writing a file failed, or its contents are malformed."""

    def __init__(self, message: str, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(f"{message}: {self.path}")
