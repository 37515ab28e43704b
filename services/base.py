"""Base services container for dependency injection."""

from typing import Optional

from config import Config
from services.taxonomy import TaxonomyStore
from services.tracker import ExpenseTracker
from logger import get_logger

logger = get_logger()


class Services:
    """Container for all application services.

    This class provides a centralized way to access the tracker and makes
    it easy to inject a prepared taxonomy for testing.

    Args:
        config: Application configuration object.
        taxonomy: Optional taxonomy store. If None, the taxonomy is loaded
            from config.taxonomy_path, or starts empty if that file does
            not exist yet.
    """

    def __init__(self, config: Config, taxonomy: Optional[TaxonomyStore] = None):
        self.config = config

        if taxonomy is None:
            if config.taxonomy_path.exists():
                taxonomy = ExpenseTracker.load_taxonomy(config.taxonomy_path)
            else:
                logger.info(
                    f"No taxonomy file at {config.taxonomy_path}, starting empty"
                )
                taxonomy = TaxonomyStore()

        self.tracker = ExpenseTracker(taxonomy)

    @property
    def taxonomy(self) -> TaxonomyStore:
        return self.tracker.taxonomy

    def save_taxonomy(self) -> None:
        """Persist the taxonomy to the configured path."""
        self.tracker.save_taxonomy(self.config.taxonomy_path)
