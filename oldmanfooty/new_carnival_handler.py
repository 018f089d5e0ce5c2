"""Handler for carnival submissions from club delegates.

A submission either creates a new carnival, is merged into an unclaimed
MySideline import of the same carnival, or is rejected because the same
club already entered it.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from sqlalchemy.orm import Session

from .config.constants import USER_EDITABLE_FIELDS
from .exceptions import DuplicateConflictError, MissingIdentityFieldsError
from .models.carnival import Carnival
from .utils.deduplication import find_match, normalize_title, parse_identity_date
from .utils.timezone import now_sydney

logger = logging.getLogger(__name__)

# Keys callers may pass alongside the fields without triggering a warning
IGNORED_KEYS = {'force_create'}


def _editable_fields(candidate_data: Mapping[str, Any]) -> Dict[str, Any]:
    fields = {}
    for key, value in candidate_data.items():
        if key in USER_EDITABLE_FIELDS:
            fields[key] = value
        elif key not in IGNORED_KEYS:
            logger.warning(f"Ignoring field '{key}' in carnival submission")
    return fields


def create_or_merge(
    session: Session,
    candidate_data: Mapping[str, Any],
    acting_user_id: int,
    acting_club_id: Optional[int] = None,
    force_create: bool = False
) -> Carnival:
    """
    Create a carnival from a submission, or merge it into a matching MySideline import.

    Runs inside the caller's transaction: the match is row-locked and the
    write happens in the same session, so two concurrent submissions for the
    same title and date cannot both claim one import.

    Args:
        session: Open database session
        candidate_data: Submitted fields; at least 'title' and 'date'
        acting_user_id: User submitting the carnival
        acting_club_id: Club of the acting user, looked up by the caller. A club
                        id in candidate_data is never used. Without a club the
                        submission cannot take over an import and is created
                        as its own carnival.
        force_create: Skip duplicate detection and always create

    Returns:
        The created or merged carnival (flushed, so it has an id)

    Raises:
        MissingIdentityFieldsError: If title or date is absent
        DuplicateConflictError: If the same club already entered this carnival
        ValueError: If a field value has the wrong type or format
    """
    fields = _editable_fields(candidate_data)
    title = normalize_title(fields.get('title'))
    carnival_date = parse_identity_date(fields.get('date'))
    if not title or not carnival_date:
        raise MissingIdentityFieldsError()
    fields['title'] = title
    fields['date'] = carnival_date

    if not force_create:
        match = find_match(session, title, carnival_date, lock=True)

        # Taking over an import needs a club to own it, as a claim does
        if match and not match.is_manually_entered and acting_club_id is not None:
            return _merge_into_import(session, match, fields, acting_user_id, acting_club_id)

        if match and match.club_id is not None and match.club_id == acting_club_id:
            logger.info(
                f"Rejected duplicate submission '{title}' on {match.date} "
                f"from club {acting_club_id}: matches carnival {match.id}"
            )
            raise DuplicateConflictError()

        # A manually entered match from another club, with no club on either
        # side, or an import seen by a clubless user does not block creation

    carnival = Carnival(**fields)
    carnival.created_by_user_id = acting_user_id
    carnival.club_id = acting_club_id
    carnival.is_manually_entered = True
    session.add(carnival)
    session.flush()

    logger.info(f"Created carnival {carnival.id}: '{carnival.title}' on {carnival.date} by user {acting_user_id}")
    return carnival


def _merge_into_import(
    session: Session,
    carnival: Carnival,
    fields: Dict[str, Any],
    acting_user_id: int,
    club_id: int
) -> Carnival:
    # Submitted values win for every field present; external identity fields
    # are not submittable so they survive untouched
    for key, value in fields.items():
        setattr(carnival, key, value)

    carnival.is_manually_entered = True
    carnival.created_by_user_id = acting_user_id
    carnival.club_id = club_id
    carnival.claimed_at = now_sydney()
    session.flush()

    logger.info(
        f"Merged submission from user {acting_user_id} into MySideline carnival "
        f"{carnival.id}: '{carnival.title}' on {carnival.date}"
    )
    return carnival


def was_merged(carnival: Carnival) -> bool:
    """True when the carnival came from MySideline and has been taken over by a user."""
    return carnival.is_external and carnival.claimed_at is not None
