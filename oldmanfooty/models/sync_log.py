"""Model for recording external source sync runs."""

from datetime import timedelta
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import Session

from .base import Base
from ..utils.timezone import ensure_sydney_timezone, now_sydney

STATUS_STARTED = 'started'
STATUS_COMPLETED = 'completed'
STATUS_FAILED = 'failed'


class SyncLog(Base):
    """
    One row per sync attempt against an external source.

    Fields:
        id: Unique identifier
        sync_type: Source identifier (e.g., 'mysideline')
        status: 'started', 'completed' or 'failed'
        started_at: When the run began
        completed_at: When the run finished (success or failure)
        carnivals_processed: Records created or updated by the run
        carnivals_created: Newly created records
        carnivals_updated: Existing records touched
        error_message: Failure reason for failed runs
        sync_metadata: Free-form context (trigger, environment)
    """
    __tablename__ = 'sync_logs'

    id = Column(Integer, primary_key=True, autoincrement=True)
    sync_type = Column(String(50), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=STATUS_STARTED)
    started_at = Column(DateTime(timezone=True), nullable=False, default=now_sydney)
    completed_at = Column(DateTime(timezone=True))
    carnivals_processed = Column(Integer, nullable=False, default=0)
    carnivals_created = Column(Integer, nullable=False, default=0)
    carnivals_updated = Column(Integer, nullable=False, default=0)
    error_message = Column(Text)
    sync_metadata = Column(JSON)

    @classmethod
    def start_sync(cls, session: Session, sync_type: str, metadata: Optional[Dict[str, Any]] = None) -> 'SyncLog':
        log = cls(
            sync_type=sync_type,
            status=STATUS_STARTED,
            started_at=now_sydney(),
            sync_metadata=metadata or {},
        )
        session.add(log)
        session.flush()
        return log

    def mark_completed(self, processed: int = 0, created: int = 0, updated: int = 0) -> None:
        self.status = STATUS_COMPLETED
        self.completed_at = now_sydney()
        self.carnivals_processed = processed
        self.carnivals_created = created
        self.carnivals_updated = updated

    def mark_failed(self, error_message: str) -> None:
        self.status = STATUS_FAILED
        self.completed_at = now_sydney()
        self.error_message = error_message

    @classmethod
    def get_last_successful_sync(cls, session: Session, sync_type: str) -> Optional['SyncLog']:
        return (
            session.query(cls)
            .filter(cls.sync_type == sync_type, cls.status == STATUS_COMPLETED)
            .order_by(cls.completed_at.desc(), cls.id.desc())
            .first()
        )

    @classmethod
    def should_run_sync(cls, session: Session, sync_type: str, interval_hours: int = 24) -> bool:
        """True when no successful sync finished within the last ``interval_hours``."""
        last = cls.get_last_successful_sync(session, sync_type)
        if not last or not last.completed_at:
            return True
        completed_at = ensure_sydney_timezone(last.completed_at)
        return now_sydney() - completed_at >= timedelta(hours=interval_hours)

    def __repr__(self) -> str:
        return f"<SyncLog {self.sync_type} {self.status} @ {self.started_at}>"
