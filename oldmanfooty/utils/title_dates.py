"""Parsing of dates embedded in external carnival titles.

MySideline listings often carry the carnival date in the title itself,
e.g. "Sydney Masters Cup (15/08/2025)" or "Central Coast Carnival - 21st June 2025".
"""

import logging
import re
from datetime import date, datetime
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

MONTHS = {
    'jan': 1, 'feb': 2, 'mar': 3, 'apr': 4, 'may': 5, 'jun': 6,
    'jul': 7, 'aug': 8, 'sep': 9, 'oct': 10, 'nov': 11, 'dec': 12,
}

ORDINAL_SUFFIX = re.compile(r'(\d+)(st|nd|rd|th)', re.IGNORECASE)
NUMERIC_DATE = re.compile(r'^(\d{1,2})[\s/\-](\d{1,2})[\s/\-](\d{4})$')
DAY_MONTH_YEAR = re.compile(r'^(\d{1,2})\s+([a-zA-Z]{3,})\s+(\d{4})$')
MONTH_DAY_YEAR = re.compile(r'^([a-zA-Z]{3,})\s+(\d{1,2}),?\s+(\d{4})$')

_DATE_BODY = (
    r'(?:\d{1,2}[\s/\-]\d{1,2}[\s/\-]\d{4})'
    r'|(?:\d{1,2}(?:st|nd|rd|th)?\s+[a-zA-Z]{3,}\s+\d{4})'
    r'|(?:[a-zA-Z]{3,}\s+\d{1,2},?\s+\d{4})'
)

# Tried in order: bracketed, after a dash or pipe, trailing
TITLE_DATE_PATTERNS = (
    re.compile(r'\s*\((' + _DATE_BODY + r')\)\s*', re.IGNORECASE),
    re.compile(r'\s*[\-|]\s*(' + _DATE_BODY + r')\s*', re.IGNORECASE),
    re.compile(r'\s+(' + _DATE_BODY + r')\s*$', re.IGNORECASE),
)


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _month_number(name: str) -> Optional[int]:
    return MONTHS.get(name[:3].lower())


def parse_date(date_string: Optional[str]) -> Optional[date]:
    """
    Parse the date formats found in MySideline titles.

    Handles "19/07/2025", "21-06-2025", "27th July 2024", "Sep 20, 2024"
    and ISO dates. Returns None when nothing matches or the date is invalid.
    """
    if not date_string:
        return None

    clean = ORDINAL_SUFFIX.sub(r'\1', date_string.strip(), count=1)

    match = NUMERIC_DATE.match(clean)
    if match:
        day, month, year = (int(g) for g in match.groups())
        return _safe_date(year, month, day)

    match = DAY_MONTH_YEAR.match(clean)
    if match:
        month = _month_number(match.group(2))
        if month:
            return _safe_date(int(match.group(3)), month, int(match.group(1)))

    match = MONTH_DAY_YEAR.match(clean)
    if match:
        month = _month_number(match.group(1))
        if month:
            return _safe_date(int(match.group(3)), month, int(match.group(2)))

    try:
        return datetime.fromisoformat(clean.replace('Z', '+00:00')).date()
    except ValueError:
        return None


def extract_and_strip_date_from_title(title: Optional[str]) -> Tuple[Optional[str], Optional[date]]:
    """
    Pull a date out of a carnival title.

    Returns:
        Tuple of (clean title, extracted date or None)
    """
    if not title or not isinstance(title, str):
        return title, None

    clean_title = title.strip()
    extracted_date = None

    for pattern in TITLE_DATE_PATTERNS:
        match = pattern.search(clean_title)
        if not match:
            continue
        parsed = parse_date(match.group(1))
        if parsed:
            extracted_date = parsed
            clean_title = pattern.sub(' ', clean_title).strip()
            clean_title = re.sub(r'\s+', ' ', clean_title)
            logger.debug(f"Extracted date '{match.group(1)}' from title. Clean title: '{clean_title}'")
            break
        logger.warning(f"Failed to parse date from string: '{match.group(1)}'")

    clean_title = re.sub(r'\s*[\-|]\s*$', '', clean_title)
    clean_title = re.sub(r'^\s*[\-|]\s*', '', clean_title)
    clean_title = re.sub(r'\(.*\)', '', clean_title)
    clean_title = re.sub(r'\s+', ' ', clean_title).strip()

    # A title that was only a bracketed name, e.g. "(Masters Cup) 12/03/2025"
    if not clean_title:
        bracketed = re.search(r'\(([^\d]+)\)', title)
        if bracketed:
            clean_title = bracketed.group(1).strip()

    return clean_title, extracted_date
