"""Handler for storing carnival records fetched from external sources.

The sync never overwrites data a user has entered: an existing carnival only
has its empty fields filled. Carnivals that have already happened are left
alone entirely.
"""

from dataclasses import dataclass, field
from datetime import datetime
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy.orm import Session

from .config.constants import EXTERNAL_CREATE_FIELDS, SYNCABLE_FIELDS
from .config.settings import AppConfig
from .db import Database, with_retry
from .exceptions import CarnivalError, ExternalSourceError, MissingIdentityFieldsError
from .models.carnival import Carnival
from .models.sync_log import SyncLog
from .source_manager import SourceManager
from .utils.deduplication import normalize_title, parse_identity_date
from .utils.timezone import now_sydney, today_sydney

logger = logging.getLogger(__name__)

MYSIDELINE_SOURCE_ID = 'mysideline'

CREATED = 'created'
UPDATED = 'updated'
SKIPPED = 'skipped'

DATE_FIELDS = ('date', 'end_date', 'external_date')


@dataclass
class SyncBatchResult:
    """
    Outcome of storing one batch of external records.

    Fields:
        carnivals: Created and updated carnivals, in input order
        created_count: Records that became new carnivals
        updated_count: Existing carnivals that were refreshed
        skipped_count: Records left alone (past carnivals, unusable data)
    """
    carnivals: List[Carnival] = field(default_factory=list)
    created_count: int = 0
    updated_count: int = 0
    skipped_count: int = 0


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _prepare(external_data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Normalise a record before anything touches the session.

    Raises:
        MissingIdentityFieldsError: If title or date is absent
        ValueError: If a date field cannot be parsed
    """
    data = {key: value for key, value in external_data.items() if key in EXTERNAL_CREATE_FIELDS}
    ignored = set(external_data) - set(data)
    if ignored:
        logger.debug(f"Ignoring unknown external fields: {sorted(ignored)}")

    for key in DATE_FIELDS:
        if key in data:
            data[key] = parse_identity_date(data[key])

    data['title'] = normalize_title(data.get('title'))
    if not data['title'] or not data.get('date'):
        raise MissingIdentityFieldsError()
    return data


def _upsert(session: Session, data: Dict[str, Any], synced_at: datetime) -> Tuple[Carnival, str]:
    existing = (
        session.query(Carnival)
        .filter(Carnival.title == data['title'], Carnival.date == data['date'])
        .order_by(Carnival.created_at.asc(), Carnival.id.asc())
        .with_for_update()
        .first()
    )

    if not existing:
        carnival = Carnival(**data)
        carnival.is_manually_entered = False
        if carnival.is_active is None:
            carnival.is_active = True
        carnival.last_external_sync = synced_at
        session.add(carnival)
        session.flush()
        logger.info(f"Created external carnival {carnival.id}: '{carnival.title}' on {carnival.date}")
        return carnival, CREATED

    if existing.date < today_sydney():
        logger.debug(f"Skipping past carnival {existing.id}: '{existing.title}' on {existing.date}")
        return existing, SKIPPED

    filled = []
    for key in SYNCABLE_FIELDS:
        incoming = data.get(key)
        if _is_empty(incoming) or not _is_empty(getattr(existing, key)):
            continue
        setattr(existing, key, incoming)
        filled.append(key)

    existing.last_external_sync = synced_at
    session.flush()

    if filled:
        logger.info(f"Filled {len(filled)} empty fields on carnival {existing.id}: {', '.join(filled)}")
    return existing, UPDATED


def upsert_external_record(
    session: Session,
    external_data: Mapping[str, Any],
    synced_at: Optional[datetime] = None
) -> Carnival:
    """
    Create or refresh the carnival for one external record.

    The record is matched on its exact stored title and date. A new carnival
    is created unowned and marked as imported. An existing one only has
    empty syncable fields filled and its sync time refreshed; if it has
    already happened it is returned untouched.

    Args:
        session: Open database session
        external_data: Record keyed by Carnival field names
        synced_at: Sync timestamp to record (defaults to now)

    Raises:
        MissingIdentityFieldsError: If title or date is absent
    """
    carnival, _ = _upsert(session, _prepare(external_data), synced_at or now_sydney())
    return carnival


def process_external_records(
    session: Session,
    records: List[Mapping[str, Any]],
    synced_at: Optional[datetime] = None
) -> SyncBatchResult:
    """
    Upsert a batch of external records with a shared sync timestamp.

    Records that cannot be used (missing title or date, bad dates) are
    logged and skipped; database errors abort the whole batch.
    """
    synced_at = synced_at or now_sydney()
    result = SyncBatchResult()
    logger.info(f"Processing {len(records)} external carnival records")

    for record in records:
        try:
            data = _prepare(record)
        except (CarnivalError, ValueError) as e:
            logger.warning(f"Skipping external record '{record.get('title')}': {e}")
            result.skipped_count += 1
            continue

        carnival, outcome = _upsert(session, data, synced_at)
        if outcome == SKIPPED:
            result.skipped_count += 1
            continue

        result.carnivals.append(carnival)
        if outcome == CREATED:
            result.created_count += 1
        else:
            result.updated_count += 1

    logger.info(
        f"Processed {len(records)} records: {result.created_count} new, "
        f"{result.updated_count} updated, {result.skipped_count} skipped"
    )
    return result


def deactivate_past_carnivals(session: Session) -> int:
    """Mark active carnivals dated before today as inactive. Returns the count."""
    today = today_sydney()
    past_carnivals = (
        session.query(Carnival)
        .filter(Carnival.is_active.is_(True), Carnival.date < today)
        .all()
    )
    for carnival in past_carnivals:
        carnival.is_active = False
        logger.debug(f"Deactivated past carnival {carnival.id}: '{carnival.title}' ({(today - carnival.date).days} days past)")

    session.flush()
    if past_carnivals:
        logger.info(f"Deactivated {len(past_carnivals)} past carnivals")
    return len(past_carnivals)


def _mark_sync_failed(database: Database, sync_log_id: int, error_message: str) -> None:
    with database.session() as session:
        sync_log = session.get(SyncLog, sync_log_id)
        if sync_log:
            sync_log.mark_failed(error_message)


@with_retry()
def _store_records(database: Database, sync_log_id: int, records: List[Mapping[str, Any]]) -> Dict[str, int]:
    with database.session() as session:
        batch = process_external_records(session, records)
        deactivated = deactivate_past_carnivals(session)
        sync_log = session.get(SyncLog, sync_log_id)
        sync_log.mark_completed(
            processed=batch.created_count + batch.updated_count,
            created=batch.created_count,
            updated=batch.updated_count,
        )
        return {
            'newCarnivals': batch.created_count,
            'updatedCarnivals': batch.updated_count,
            'skippedCarnivals': batch.skipped_count,
            'deactivatedCarnivals': deactivated,
        }


def run_sync(
    database: Database,
    config: AppConfig,
    source_manager: Optional[SourceManager] = None,
    source_id: str = MYSIDELINE_SOURCE_ID,
    force: bool = True,
    trigger: str = 'manual'
) -> Dict[str, Any]:
    """
    Fetch one external source and store its carnivals.

    Every attempt that gets past the enabled and interval checks is recorded
    in a SyncLog row. A source failure marks the run failed and leaves stored
    carnivals untouched.

    Args:
        database: Database to write to
        config: Application configuration
        source_manager: Source manager to fetch with (built from config if omitted)
        source_id: Source to fetch
        force: Run even if a successful sync finished within the sync interval
        trigger: What started the run, recorded in the sync log

    Returns:
        Dict with 'status' and 'newCarnivals', plus update/skip/deactivate counts
        for completed runs or 'error' for failed ones
    """
    if not config.mysideline_sync_enabled:
        logger.info("MySideline sync is disabled, skipping")
        return {'status': 'disabled', 'newCarnivals': 0}

    if not force:
        with database.session() as session:
            due = SyncLog.should_run_sync(session, source_id, config.sync_interval_hours)
        if not due:
            logger.info(f"Skipping {source_id} sync, last successful sync is recent")
            return {'status': 'skipped', 'newCarnivals': 0}

    with database.session() as session:
        sync_log_id = SyncLog.start_sync(session, source_id, {
            'trigger': trigger,
            'environment': 'production' if config.is_production else 'development',
        }).id

    source_manager = source_manager or SourceManager(config)
    try:
        records = source_manager.fetch_source(source_id)
    except Exception as e:
        if isinstance(e, ExternalSourceError):
            logger.error(f"Sync of {source_id} failed: {e}")
        else:
            logger.exception(f"Unexpected error fetching {source_id}: {e}")
        _mark_sync_failed(database, sync_log_id, str(e))
        return {'status': 'failed', 'newCarnivals': 0, 'error': str(e)}

    try:
        counts = _store_records(database, sync_log_id, records)
    except Exception as e:
        logger.error(f"Storing {source_id} records failed: {e}")
        _mark_sync_failed(database, sync_log_id, str(e))
        raise

    logger.info(f"Sync of {source_id} completed: {counts}")
    return {'status': 'completed', **counts}
