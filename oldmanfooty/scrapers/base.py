"""Base interface that all carnival scrapers must implement."""

from typing import Any, Dict, List
from abc import ABC, abstractmethod

from ..config.data_sources import get_source_display_name
from ..config.settings import AppConfig


class BaseScraper(ABC):
    """
    Base interface for all carnival scrapers.

    Each scraper is responsible for:
    1. Fetching carnivals from a specific source (e.g., MySideline)
    2. Converting the source's format into external carnival records
    3. Reading its own settings (URLs, timeouts) from the application config
    """

    def __init__(self, source_id: str, config: AppConfig):
        """
        Initialize the scraper with its source ID.

        Args:
            source_id: The source identifier (e.g., 'mysideline')
            config: Application configuration
        """
        self.source_id = source_id
        self.config = config

    def name(self) -> str:
        """
        Return the display name of this scraper from the configuration.

        Returns:
            str: The scraper's display name (e.g., 'MySideline')

        Raises:
            ValueError: If no display name is found for this source ID
        """
        display_name = get_source_display_name(self.source_id)
        if not display_name:
            raise ValueError(f"No display name found for source ID: {self.source_id}")
        return display_name


class SyncScraper(BaseScraper):
    """
    Base class for scrapers that fetch and return records directly.

    Required Methods:
        get_events(): Fetches and returns a list of external carnival records
    """

    @abstractmethod
    def get_events(self) -> List[Dict[str, Any]]:
        """
        Fetch and return external carnival records from this source.

        Each record is a dict keyed by Carnival field names, ready for
        ``sync_handler.upsert_external_record``.

        Raises:
            ExternalSourceError: If the source cannot be fetched
        """
        pass
