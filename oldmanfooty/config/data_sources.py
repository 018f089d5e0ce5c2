"""Configuration for external carnival sources and their scrapers."""

from dataclasses import dataclass
from typing import Dict


@dataclass
class ScraperRegistration:
    """
    Registration of a scraper with the source manager.

    Fields:
        enabled: Whether this scraper is enabled
        scraper_class: Full path to scraper class (e.g., 'oldmanfooty.scrapers.mysideline.MySidelineScraper')
        name: Display name of the source (e.g., 'MySideline')
    """
    enabled: bool
    scraper_class: str
    name: str


# Registry of available scrapers for fetching carnival data
SOURCES = {
    'mysideline': ScraperRegistration(
        enabled=True,
        scraper_class='oldmanfooty.scrapers.mysideline.MySidelineScraper',
        name='MySideline'
    ),
}


def get_enabled_sources() -> Dict[str, ScraperRegistration]:
    """
    Get all enabled scrapers.

    Returns:
        Dict[str, ScraperRegistration]: Dictionary of source_id -> registration for all enabled scrapers
    """
    return {k: v for k, v in SOURCES.items() if v.enabled}


def get_source_display_name(source_id: str) -> str:
    """
    Get the display name for a given source ID.

    Raises:
        ValueError: If no source is found with the given ID
    """
    registration = SOURCES.get(source_id)
    if not registration:
        raise ValueError(f"No source found with ID: {source_id}")
    return registration.name
