"""Duplicate detection for carnival submissions.

A submission matches an existing carnival when both fall on the same date
and the submitted title equals either the stored title or the title
MySideline published (``external_title``). Only unclaimed carnivals are
candidates. Titles are compared exactly after trimming surrounding
whitespace; near-duplicates such as differing case or punctuation are not
caught.
"""

from datetime import date, datetime
import logging
from typing import Any, Optional, Union

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..exceptions import MissingIdentityFieldsError
from ..models.carnival import Carnival

logger = logging.getLogger(__name__)


def normalize_title(title: Optional[str]) -> Optional[str]:
    """Trim a title the same way the Carnival model does on assignment."""
    if title is None:
        return None
    if not isinstance(title, str):
        raise ValueError(f"Title must be text, got {type(title).__name__}")
    return title.strip() or None


def parse_identity_date(value: Any) -> Optional[date]:
    """
    Turn a submitted or imported date into a date.

    Accepts a date, a datetime or an ISO string (anything after the first ten
    characters is ignored). Blank values become None.

    Raises:
        ValueError: If the value is not a date or cannot be parsed as one
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip()[:10]) if value.strip() else None
    raise ValueError(f"Invalid date {value!r}, expected YYYY-MM-DD")


def find_match(
    session: Session,
    title: Optional[str],
    carnival_date: Optional[Union[date, str]],
    lock: bool = False
) -> Optional[Carnival]:
    """
    Find an unclaimed carnival with the same date and a matching title or alias.

    Args:
        session: Open database session
        title: Candidate title
        carnival_date: Candidate date (date or ISO string)
        lock: Take a row lock on the match so a following write in the same
              transaction cannot race another submission

    Returns:
        The earliest-created matching carnival, or None

    Raises:
        MissingIdentityFieldsError: If title or date is absent
        ValueError: If the date cannot be parsed
    """
    title = normalize_title(title)
    carnival_date = parse_identity_date(carnival_date)
    if not title or not carnival_date:
        raise MissingIdentityFieldsError()

    query = (
        session.query(Carnival)
        .filter(
            Carnival.date == carnival_date,
            or_(Carnival.title == title, Carnival.external_title == title),
            Carnival.claimed_at.is_(None),
        )
        .order_by(Carnival.created_at.asc(), Carnival.id.asc())
    )
    if lock:
        query = query.with_for_update()

    match = query.first()
    if match:
        logger.info(f"Found matching carnival {match.id}: '{match.title}' on {match.date}")
    return match
