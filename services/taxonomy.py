"""Taxonomy store for categories and their sub-categories."""

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from errors import DuplicateSubcategoryError, UnknownCategoryError
from models.category import Category, SubCategory, normalize_name
from logger import get_logger

logger = get_logger()


# Pydantic models for the persisted taxonomy document
class SubCategoryRecord(BaseModel):
    """Single sub-category entry of the taxonomy file."""

    name: str = Field(min_length=1)
    created_on: date


class CategoryRecord(BaseModel):
    """Category entry with its sub-categories."""

    name: str = Field(min_length=1)
    created_on: date
    subcategories: List[SubCategoryRecord] = Field(default_factory=list)


class TaxonomyDocument(BaseModel):
    """Full taxonomy file. Transactions are never part of it."""

    categories: List[CategoryRecord] = Field(default_factory=list)


class TaxonomyStore:
    """Owns the set of valid categories and their sub-categories.

    Categories and sub-categories are identified by their normalized
    (lowercase) names. Lookups return immutable Category snapshots; the
    store's own mappings are never handed out.
    """

    def __init__(self):
        self._categories: Dict[str, date] = {}
        self._subcategories: Dict[str, Dict[str, SubCategory]] = {}

    def __len__(self) -> int:
        return len(self._categories)

    def __contains__(self, category_name: str) -> bool:
        return normalize_name(category_name) in self._categories

    def _snapshot(self, key: str) -> Category:
        subcategories = self._subcategories[key]
        return Category(
            name=key,
            created_on=self._categories[key],
            subcategories=tuple(subcategories[name] for name in sorted(subcategories)),
        )

    def find_all(self) -> List[Category]:
        """Get all categories.

        Returns:
            List of Category objects, ordered by name.
        """
        return [self._snapshot(key) for key in sorted(self._categories)]

    def find_category(self, name: str) -> Optional[Category]:
        """Get a single category by name, case-insensitively.

        Args:
            name: The category name to find.

        Returns:
            Category object if found, None otherwise.
        """
        key = normalize_name(name)
        if key not in self._categories:
            return None
        return self._snapshot(key)

    def find_subcategory(
        self, category_name: str, subcategory_name: str
    ) -> Optional[SubCategory]:
        """Get a sub-category of a category by name, case-insensitively.

        Returns:
            SubCategory object if both the category and the sub-category
            exist, None otherwise.
        """
        subcategories = self._subcategories.get(normalize_name(category_name))
        if subcategories is None:
            return None
        return subcategories.get(normalize_name(subcategory_name))

    def add_category(self, name: str, created_on: Optional[date] = None) -> bool:
        """Add a category if no category with the same normalized name exists.

        Args:
            name: Category name; stored in lowercase.
            created_on: Creation date, today if omitted.

        Returns:
            True if the category was added, False if it already existed
            (or the name is empty).
        """
        key = normalize_name(name)
        if not key:
            logger.warning("Cannot add a category with an empty name")
            return False

        if key in self._categories:
            logger.debug(
                f"Cannot add category '{name}' as one with the same name already exists"
            )
            return False

        self._categories[key] = created_on or date.today()
        self._subcategories[key] = {}
        logger.debug(f"Added category '{key}'")
        return True

    def add_subcategory(
        self,
        category_name: str,
        subcategory_name: str,
        created_on: Optional[date] = None,
    ) -> None:
        """Add a sub-category to an existing category.

        Args:
            category_name: Name of the owning category.
            subcategory_name: Sub-category name; stored in lowercase.
            created_on: Creation date, today if omitted.

        Raises:
            UnknownCategoryError: If the category does not exist.
            DuplicateSubcategoryError: If the category already has a
                sub-category with this name.
        """
        category_key = normalize_name(category_name)
        subcategories = self._subcategories.get(category_key)
        if subcategories is None:
            raise UnknownCategoryError(category_name)

        key = normalize_name(subcategory_name)
        if not key:
            raise ValueError("Sub-category name cannot be empty")
        if key in subcategories:
            raise DuplicateSubcategoryError(category_key, key)

        subcategories[key] = SubCategory(name=key, created_on=created_on or date.today())
        logger.debug(f"Added sub-category '{key}' to category '{category_key}'")

    def to_document(self) -> TaxonomyDocument:
        """Convert the store to its persisted representation."""
        return TaxonomyDocument(
            categories=[
                CategoryRecord(
                    name=category.name,
                    created_on=category.created_on,
                    subcategories=[
                        SubCategoryRecord(name=sub.name, created_on=sub.created_on)
                        for sub in category.subcategories
                    ],
                )
                for category in self.find_all()
            ]
        )

    @classmethod
    def from_document(cls, document: TaxonomyDocument) -> "TaxonomyStore":
        """Build a store from its persisted representation.

        Raises:
            ValueError: If the document names a category twice or a name is blank.
            DuplicateSubcategoryError: If a category lists a sub-category twice.
        """
        store = cls()
        for record in document.categories:
            if not store.add_category(record.name, record.created_on):
                raise ValueError(f"Duplicate or empty category '{record.name}' in taxonomy")
            for sub_record in record.subcategories:
                store.add_subcategory(record.name, sub_record.name, sub_record.created_on)
        return store
