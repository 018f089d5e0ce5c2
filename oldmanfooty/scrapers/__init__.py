"""Scrapers for external carnival sources."""

from .base import BaseScraper, SyncScraper

__all__ = ['BaseScraper', 'SyncScraper']
