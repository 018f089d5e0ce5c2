"""Timezone helpers. Carnival dates are Australian calendar dates."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

SYDNEY_TZ = ZoneInfo("Australia/Sydney")


def now_sydney() -> datetime:
    """Current time in Sydney, timezone-aware."""
    return datetime.now(SYDNEY_TZ)


def today_sydney() -> date:
    """Current calendar date in Sydney."""
    return now_sydney().date()


def ensure_sydney_timezone(dt: datetime) -> datetime:
    """Attach the Sydney timezone to naive datetimes, convert aware ones."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=SYDNEY_TZ)
    return dt.astimezone(SYDNEY_TZ)
