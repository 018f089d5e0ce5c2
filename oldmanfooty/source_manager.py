"""
Central manager for external carnival sources and their scrapers.

This module provides the SourceManager class which coordinates all carnival sources.
It serves as the top-level coordinator for:
1. Loading and managing sources from configuration
2. Initializing scrapers for enabled sources
3. Fetching external carnival records from a source

The manager uses the registry in data_sources.py to determine what scrapers exist
and which ones are enabled, then dynamically loads them. Scrapers can be added
or removed by updating the registry, without modifying the manager itself.
"""

import importlib
import logging
from typing import Any, Dict, List, Type

from .config.data_sources import ScraperRegistration, get_enabled_sources
from .config.settings import AppConfig
from .exceptions import ExternalSourceError
from .scrapers.base import BaseScraper, SyncScraper

logger = logging.getLogger(__name__)


class SourceManager:
    """
    Central manager for all carnival scrapers.

    Each scraper is loaded dynamically from its registration in data_sources.py
    and constructed with the application config.
    """

    def __init__(self, config: AppConfig):
        self.config = config

    @staticmethod
    def get_scraper_class(registration: ScraperRegistration) -> Type[BaseScraper]:
        """
        Dynamically import and return a scraper class from its registration.

        Args:
            registration: Registration info for the scraper, including its class path
                        Example path: 'oldmanfooty.scrapers.mysideline.MySidelineScraper'

        Returns:
            Type[BaseScraper]: The scraper class (not instance)

        Raises:
            ImportError: If the module cannot be imported
            AttributeError: If the class doesn't exist in the module
            TypeError: If the class is not a synchronous scraper
        """
        try:
            module_path, class_name = registration.scraper_class.rsplit('.', 1)
            module = importlib.import_module(module_path)
            scraper_class = getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            logger.error(f"Failed to load scraper class {registration.scraper_class}: {e}")
            raise

        if not issubclass(scraper_class, SyncScraper):
            raise TypeError(f"Scraper class {class_name} must implement the SyncScraper interface")
        return scraper_class

    def get_scraper(self, source_id: str) -> SyncScraper:
        """
        Build the scraper for an enabled source.

        Raises:
            ExternalSourceError: If the source is unknown or disabled
        """
        registration = get_enabled_sources().get(source_id)
        if not registration:
            raise ExternalSourceError(f"Source '{source_id}' is not enabled")
        scraper_class = self.get_scraper_class(registration)
        return scraper_class(config=self.config, source_id=source_id)

    def fetch_source(self, source_id: str) -> List[Dict[str, Any]]:
        """
        Fetch external carnival records from a single source.

        Failures propagate as ExternalSourceError so the caller can record
        the failed run instead of treating it as an empty result.
        """
        scraper = self.get_scraper(source_id)
        logger.info(f"Fetching carnivals from {scraper.name()}")
        records = scraper.get_events()
        logger.info(f"Found {len(records)} carnivals from {scraper.name()}")
        return records
