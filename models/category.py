"""Category and sub-category models for the transaction taxonomy."""

from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple


def normalize_name(name: str) -> str:
    """Normalize a category or sub-category name to its identity key.

    Names are compared case-insensitively, so the key is the trimmed,
    lowercase form of the name.
    """
    return name.strip().lower()


@dataclass(frozen=True)
class SubCategory:
    """A sub-category, unique by name within its parent category.

    Attributes:
        name: Normalized (lowercase) sub-category name.
        created_on: Date the sub-category was added to the taxonomy.
    """

    name: str
    created_on: date


@dataclass(frozen=True)
class Category:
    """Snapshot of a category and its sub-categories.

    Attributes:
        name: Normalized (lowercase) category name, unique in the taxonomy.
        created_on: Date the category was added to the taxonomy.
        subcategories: Sub-categories ordered by name.
    """

    name: str
    created_on: date
    subcategories: Tuple[SubCategory, ...] = ()

    @property
    def has_subcategories(self) -> bool:
        return len(self.subcategories) > 0

    def find_subcategory(self, name: str) -> Optional[SubCategory]:
        key = normalize_name(name)
        for subcategory in self.subcategories:
            if subcategory.name == key:
                return subcategory
        return None
