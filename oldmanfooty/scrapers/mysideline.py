"""Scraper for MySideline Masters rugby league carnivals"""

import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
from bs4 import BeautifulSoup

from .base import SyncScraper
from ..config.constants import AUSTRALIAN_STATES
from ..config.settings import AppConfig
from ..exceptions import ExternalSourceError
from ..utils.title_dates import extract_and_strip_date_from_title

logger = logging.getLogger(__name__)

DEFAULT_TITLE = 'Masters Rugby League Event'
EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
GOOGLE_MAPS_SEARCH_URL = 'https://www.google.com/maps/search/?api=1&query='

STATE_NAMES = {
    'australian capital territory': 'ACT',
    'new south wales': 'NSW',
    'northern territory': 'NT',
    'queensland': 'QLD',
    'south australia': 'SA',
    'tasmania': 'TAS',
    'victoria': 'VIC',
    'western australia': 'WA',
}

# String fields trimmed (and blanked to None) by validate_and_clean
STRING_FIELDS = (
    'title', 'venue_name', 'location_address', 'location_address_line1',
    'location_address_line2', 'location_suburb', 'location_postcode',
    'organiser_contact_name', 'organiser_contact_phone', 'schedule_details',
    'social_media_website', 'social_media_facebook',
)


class MySidelineScraper(SyncScraper):
    """
    Scraper for the MySideline registration search.

    MySideline lists every rugby league registration, so the results are
    narrowed to Masters events before conversion. Each kept item becomes an
    external carnival record keyed by Carnival field names.
    """

    SOURCE_ID = 'mysideline'
    SEARCH_PARAMS = {
        'criteria': 'Masters',
        'source': 'rugby-league',
    }
    HEADERS = {
        'User-Agent': 'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36',
        'Accept': 'application/json',
        'Accept-Language': 'en-AU,en;q=0.5',
    }

    def __init__(self, config: AppConfig, source_id: str = SOURCE_ID):
        super().__init__(source_id, config)
        self.search_url = config.mysideline_search_url
        self.event_url = config.mysideline_event_url
        self.timeout = config.mysideline_timeout
        self.headers = self.HEADERS.copy()

    def _fetch_json(self) -> Dict[str, Any]:
        """Fetch the search results"""
        try:
            response = requests.get(
                self.search_url,
                params=self.SEARCH_PARAMS,
                headers=self.headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            raise ExternalSourceError(f"Failed to fetch MySideline events: {e}") from e
        except ValueError as e:
            raise ExternalSourceError(f"MySideline returned invalid JSON: {e}") from e

    def get_events(self) -> List[Dict[str, Any]]:
        """Get Masters carnival records from MySideline"""
        api_response = self._fetch_json()
        items = api_response.get('data') if isinstance(api_response, dict) else None
        if not isinstance(items, list):
            raise ExternalSourceError("MySideline response has no 'data' list")

        logger.info(f"Found {len(items)} registrations from {self.name()}")

        records = []
        for item in items:
            if not isinstance(item, dict):
                logger.warning(f"Skipping invalid MySideline item: {item!r}")
                continue
            try:
                if not self.is_relevant_masters_event(item):
                    continue
                record = self.validate_and_clean(self.convert_api_item(item))
                records.append(record)
                logger.info(f"Parsed carnival: {record['title']} ({record['date']})")
            except Exception as e:
                logger.error(f"Error processing MySideline item {item.get('_id', 'unknown')}: {e}")
                continue

        logger.info(f"Kept {len(records)} Masters carnivals from {self.name()}")
        return records

    @staticmethod
    def is_relevant_masters_event(item: Dict[str, Any]) -> bool:
        """True for Masters registrations that are not Touch or all-ages events."""
        if not item.get('name'):
            return False

        def _text(value: Any) -> str:
            return value.lower() if isinstance(value, str) else ''

        def _name(value: Any) -> str:
            return _text(value.get('name')) if isinstance(value, dict) else ''

        orgtree = item.get('orgtree')
        age_level = _text(item.get('ageLvl'))
        region = _name(orgtree.get('region')) if isinstance(orgtree, dict) else ''
        association = _name(item.get('association'))
        competition = _name(item.get('competition'))
        club = _name(item.get('club'))

        if 'touch' in association or 'touch' in competition or 'all ages' in age_level:
            return False

        return (
            'masters' in age_level
            or 'nrl masters' in region
            or 'nrl masters' in association
            or 'masters' in competition
            or 'masters' in club
        )

    def convert_api_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """
        Convert a MySideline search item into an external carnival record.

        Raises:
            ValueError: If the item has no name or no _id
        """
        if not item.get('name'):
            raise ValueError("Item missing required name property")
        if not item.get('_id'):
            raise ValueError("Item missing required _id property")

        venue = item.get('venue') or {}
        contact = item.get('contact') or {}
        meta = item.get('meta') or {}
        address = venue.get('address') or contact.get('address') or {}

        location_address = address.get('formatted') or None
        latitude = address.get('lat') or None
        longitude = address.get('lng') or None

        google_maps_url = None
        if latitude and longitude:
            google_maps_url = f"{GOOGLE_MAPS_SEARCH_URL}{latitude},{longitude}"
        elif location_address:
            google_maps_url = f"{GOOGLE_MAPS_SEARCH_URL}{quote(location_address)}"

        title, carnival_date = extract_and_strip_date_from_title(item['name'])
        if not title:
            title = item['name']

        return {
            'title': title,
            'date': carnival_date,
            'is_active': bool(item.get('regoOpen')),

            'external_id': item['_id'],
            'external_title': item['name'],
            'external_address': location_address,
            'external_date': carnival_date,

            'state': normalize_state(address.get('state')),
            'venue_name': venue.get('name') or ((item.get('orgtree') or {}).get('venue') or {}).get('name'),
            'location_address': location_address or 'TBC',
            'location_address_line1': address.get('addressLine1'),
            'location_address_line2': address.get('addressLine2'),
            'location_suburb': address.get('suburb'),
            'location_postcode': address.get('postcode'),
            'location_country': address.get('country') or 'Australia',
            'location_latitude': latitude,
            'location_longitude': longitude,
            'google_maps_url': google_maps_url,

            'organiser_contact_name': contact.get('name'),
            'organiser_contact_phone': contact.get('number'),
            'organiser_contact_email': contact.get('email'),

            'registration_link': f"{self.event_url}{item['_id']}",
            'social_media_website': meta.get('website'),
            'social_media_facebook': meta.get('facebook'),
            'schedule_details': html_to_text((item.get('finderDetails') or {}).get('description')),
        }

    @staticmethod
    def validate_and_clean(record: Dict[str, Any]) -> Dict[str, Any]:
        """Trim strings, turn blanks into None and drop malformed contact emails."""
        cleaned = dict(record)

        for field in STRING_FIELDS:
            value = cleaned.get(field)
            if isinstance(value, str):
                cleaned[field] = value.strip() or None

        if not cleaned.get('title'):
            logger.warning("No title provided, using default")
            cleaned['title'] = DEFAULT_TITLE

        email = cleaned.get('organiser_contact_email')
        if email:
            email = str(email).strip()
            if EMAIL_PATTERN.match(email):
                cleaned['organiser_contact_email'] = email.lower()
            else:
                logger.warning(f"Invalid email format: {email}")
                cleaned['organiser_contact_email'] = None

        return cleaned


def normalize_state(value: Optional[str]) -> Optional[str]:
    """'New South Wales' or 'nsw' -> 'NSW'. Unknown values become None."""
    if not value:
        return None
    value = value.strip()
    if value.upper() in AUSTRALIAN_STATES:
        return value.upper()
    return STATE_NAMES.get(value.lower())


def html_to_text(value: Optional[str]) -> Optional[str]:
    """MySideline descriptions are HTML fragments; keep the text only."""
    if not value:
        return None
    text = BeautifulSoup(value, 'html.parser').get_text('\n', strip=True)
    return text or None
