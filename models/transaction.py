from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class ParsedTransaction:
    """A transaction read from a CSV row, not yet checked against the taxonomy.

    Optional fields are None when the column is missing or empty.
    """

    date: date
    amount: float  # amount_in - amount_out, negative for outgoing money
    category: str  # raw name as written in the row
    subcategory: Optional[str] = None
    tag: Optional[str] = None
    note: Optional[str] = None


@dataclass(frozen=True)
class Transaction:
    """A transaction whose category and sub-category existed in the taxonomy
    when it was accepted.

    Category and sub-category are stored by their normalized names.
    """

    date: date
    amount: float
    category: str
    subcategory: Optional[str] = None
    tag: Optional[str] = None
    note: Optional[str] = None

    @property
    def amount_out(self) -> float:
        """Outgoing part of the amount (always >= 0)."""
        return -self.amount if self.amount < 0 else 0.0

    @property
    def amount_in(self) -> float:
        """Incoming part of the amount (always >= 0)."""
        return abs(self.amount) if self.amount >= 0 else 0.0
