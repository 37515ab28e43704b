"""Shared pytest fixtures for all tests."""

import pytest
from datetime import date

from config import Config
from services.base import Services
from services.taxonomy import TaxonomyStore
from services.tracker import ExpenseTracker


@pytest.fixture
def test_config(tmp_path):
    """Create a test configuration pointing to a temporary directory.

    Args:
        tmp_path: pytest tmp_path fixture for temporary directory.

    Returns:
        Config: Test configuration object.
    """
    return Config(
        base_dir=tmp_path / "expense-tracker",
        data_dir=tmp_path / "expense-tracker" / "data",
        taxonomy_filename="taxonomy.json",
        auto_create_taxonomy=True,
        log_level="DEBUG",
        log_dir=tmp_path / "expense-tracker" / "logs",
    )


@pytest.fixture
def taxonomy():
    """Create a taxonomy with one category with sub-categories and one without.

    - food: groceries, restaurant
    - transport: (no sub-categories)

    Returns:
        TaxonomyStore: Populated taxonomy.
    """
    store = TaxonomyStore()
    store.add_category("Food", date(2024, 1, 1))
    store.add_subcategory("Food", "Groceries", date(2024, 1, 1))
    store.add_subcategory("Food", "Restaurant", date(2024, 1, 2))
    store.add_category("Transport", date(2024, 1, 3))
    return store


@pytest.fixture
def tracker(taxonomy):
    """Create an ExpenseTracker using the populated taxonomy."""
    return ExpenseTracker(taxonomy)


@pytest.fixture
def services(test_config):
    """Create a Services container with an empty taxonomy.

    Args:
        test_config: Test configuration fixture.

    Returns:
        Services: Services container for testing.
    """
    return Services(test_config, taxonomy=TaxonomyStore())
