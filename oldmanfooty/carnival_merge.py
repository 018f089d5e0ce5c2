"""Merging a duplicate carnival into another one.

Used when a MySideline import and a delegate's own entry describe the same
carnival but were not matched on creation (different title or date). The
target keeps everything it already has; the source only fills the gaps and
is then archived rather than deleted.
"""

import logging
from typing import Any, List

from sqlalchemy.orm import Session

from .config.constants import BOOLEAN, DATE, MERGEABLE_FIELDS, NUMERIC, TEXT
from .exceptions import CarnivalNotFoundError, MergeNotAllowedError
from .models.carnival import Carnival
from .models.user import User
from .utils.timezone import now_sydney

logger = logging.getLogger(__name__)


def _should_fill(category: str, target_value: Any, source_value: Any) -> bool:
    if category == TEXT:
        return (not target_value or not str(target_value).strip()) and bool(source_value and str(source_value).strip())
    if category == DATE:
        return target_value is None and source_value is not None
    if category == NUMERIC:
        return (target_value is None or target_value == 0) and source_value not in (None, 0)
    if category == BOOLEAN:
        return not target_value and bool(source_value)
    raise ValueError(f"Unknown merge category: {category}")


def check_merge_allowed(source: Carnival, target: Carnival, acting_user: User) -> None:
    """
    Raise MergeNotAllowedError unless ``acting_user`` may merge ``source`` into ``target``.

    Carnivals of two different clubs are never merged. Administrators may
    merge anything else; other users must own both carnivals, and the source
    must be a MySideline import.
    """
    if source.id == target.id:
        raise MergeNotAllowedError('Cannot merge a carnival into itself.')

    if source.club_id and target.club_id and source.club_id != target.club_id:
        raise MergeNotAllowedError(
            'Cannot merge carnivals from different clubs. Both carnivals must belong to the same club.'
        )

    if acting_user.is_admin:
        return

    if source.created_by_user_id != acting_user.id or target.created_by_user_id != acting_user.id:
        raise MergeNotAllowedError('You can only merge carnivals that you created.')
    if not source.is_external:
        raise MergeNotAllowedError('Only MySideline carnivals can be merged.')


def _lock(session: Session, carnival_id: int, role: str) -> Carnival:
    carnival = (
        session.query(Carnival)
        .filter(Carnival.id == carnival_id)
        .with_for_update()
        .first()
    )
    if not carnival:
        raise CarnivalNotFoundError(f"{role} carnival not found.")
    return carnival


def merge_carnivals(session: Session, source_id: int, target_id: int, acting_user: User) -> Carnival:
    """
    Merge the source carnival into the target and archive the source.

    Each mergeable field on the target is filled from the source only when
    the target has nothing there. MySideline identity fields are copied only
    when the target lacks them.

    Returns:
        The updated target carnival

    Raises:
        CarnivalNotFoundError: If either carnival does not exist
        MergeNotAllowedError: If the user may not merge these carnivals
    """
    # Lock in id order so two merges of the same pair cannot deadlock
    if source_id <= target_id:
        source = _lock(session, source_id, 'Source')
        target = _lock(session, target_id, 'Target')
    else:
        target = _lock(session, target_id, 'Target')
        source = _lock(session, source_id, 'Source')

    check_merge_allowed(source, target, acting_user)

    filled: List[str] = []
    for field_name, category in MERGEABLE_FIELDS.items():
        source_value = getattr(source, field_name)
        if _should_fill(category, getattr(target, field_name), source_value):
            setattr(target, field_name, source_value)
            filled.append(field_name)

    if source.is_external:
        if not target.external_id:
            target.external_id = source.external_id
        if not target.external_title:
            target.external_title = source.external_title or source.title
        if not target.external_address:
            target.external_address = source.external_address or source.location_address
        if not target.external_date:
            target.external_date = source.external_date or source.date
        target.last_external_sync = now_sydney()

    merged_at = now_sydney()
    source.is_disabled = True
    source.is_active = False
    source.disabled_at = merged_at
    source.disabled_by_user_id = acting_user.id
    note = f'[MERGED] This carnival was merged into "{target.title}" on {merged_at.isoformat()}'
    source.admin_notes = f"{source.admin_notes}\n\n{note}" if source.admin_notes else note

    session.flush()
    logger.info(
        f"Merged carnival {source.id} '{source.title}' into {target.id} '{target.title}' "
        f"by user {acting_user.id}; filled {len(filled)} fields"
    )
    return target
