#!/usr/bin/env python3
"""Script to fetch MySideline carnivals and store them.

Meant for a scheduler: by default the sync only runs when the last
successful one is older than MYSIDELINE_SYNC_INTERVAL_HOURS.

Usage:
    python scripts/sync_mysideline.py            # respect the sync interval
    python scripts/sync_mysideline.py --force    # run regardless
    python scripts/sync_mysideline.py --dry-run  # fetch and print, store nothing
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to Python path when running directly
sys.path.append(str(Path(__file__).parent.parent))

from oldmanfooty.config.environment import IS_PRODUCTION_ENVIRONMENT  # Loads .env first
from oldmanfooty.config.settings import AppConfig
from oldmanfooty.db import get_database
from oldmanfooty.exceptions import ExternalSourceError
from oldmanfooty.source_manager import SourceManager
from oldmanfooty.sync_handler import MYSIDELINE_SOURCE_ID, run_sync
from oldmanfooty.utils.logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)


def print_records(records):
    """Print fetched records without storing them."""
    print(f"\nFound {len(records)} carnivals:")
    for record in records:
        print(f"\nTitle: {record['title']}")
        print(f"Date: {record['date']}")
        print(f"State: {record.get('state')}")
        print(f"Address: {record.get('location_address')}")
        print(f"Registration: {record.get('registration_link')}")
        print("-" * 40)


def main():
    """Fetch and store carnivals from MySideline."""
    parser = argparse.ArgumentParser(description="Sync carnivals from MySideline")
    parser.add_argument('--force', action='store_true', help="Run even if a recent sync succeeded")
    parser.add_argument('--dry-run', action='store_true', help="Fetch and print records without storing them")
    args = parser.parse_args()

    config = AppConfig.from_environment()
    source_manager = SourceManager(config)
    logger.info(f"Running MySideline sync ({'production' if IS_PRODUCTION_ENVIRONMENT else 'development'})")

    if args.dry_run:
        try:
            print_records(source_manager.fetch_source(MYSIDELINE_SOURCE_ID))
        except ExternalSourceError as e:
            logger.error(f"Fetch failed: {e}")
            return 1
        return 0

    result = run_sync(
        get_database(),
        config,
        source_manager,
        force=args.force,
        trigger='scheduled'
    )
    logger.info(f"Sync finished: {result}")
    return 1 if result['status'] == 'failed' else 0


if __name__ == "__main__":
    sys.exit(main())
