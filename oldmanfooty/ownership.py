"""Claiming and releasing ownership of MySideline carnivals.

Imported carnivals have no owner. A club delegate can claim one for their
club, after which they manage it like a carnival they entered themselves.
Unmet conditions are reported through ``ClaimResult`` rather than raised, so
the HTTP layer can show the message as it is.
"""

from dataclasses import dataclass
import logging
from typing import Optional

from sqlalchemy.orm import Session

from .models.carnival import Carnival
from .models.club import Club
from .models.user import User
from .utils.timezone import now_sydney

logger = logging.getLogger(__name__)


@dataclass
class ClaimResult:
    """
    Outcome of a claim or release.

    Fields:
        success: Whether ownership changed
        message: User-facing explanation
        carnival: The carnival, when it was found
        claimant_name: Name now shown as the carnival contact
        club_name: Club that now owns (or released) the carnival
        original_contact_email: MySideline contact to notify about the claim
    """
    success: bool
    message: str
    carnival: Optional[Carnival] = None
    claimant_name: Optional[str] = None
    club_name: Optional[str] = None
    original_contact_email: Optional[str] = None


def _get_carnival_for_update(session: Session, carnival_id: int) -> Optional[Carnival]:
    return (
        session.query(Carnival)
        .filter(Carnival.id == carnival_id)
        .with_for_update()
        .first()
    )


def _failure(message: str, carnival_id: int, user_id: Optional[int]) -> ClaimResult:
    logger.warning(f"Ownership change refused for carnival {carnival_id} (user {user_id}): {message}")
    return ClaimResult(success=False, message=message)


def _claimable_problem(carnival: Optional[Carnival]) -> Optional[str]:
    if not carnival:
        return 'Carnival not found'
    if not carnival.is_active:
        return 'This carnival is no longer active'
    if not carnival.is_external:
        return 'This carnival was not imported from MySideline'
    if carnival.created_by_user_id:
        return 'This carnival already has an owner'
    return None


def _assign_owner(carnival: Carnival, owner: User, club: Club) -> Optional[str]:
    """Set the owner, club and claim time together and make the owner the contact."""
    original_contact_email = carnival.organiser_contact_email
    if original_contact_email and not carnival.original_external_contact_email:
        carnival.original_external_contact_email = original_contact_email

    carnival.created_by_user_id = owner.id
    carnival.club_id = club.id
    carnival.claimed_at = now_sydney()
    carnival.organiser_contact_name = owner.full_name
    carnival.organiser_contact_email = owner.email
    carnival.organiser_contact_phone = owner.phone_number or None
    return original_contact_email


def take_ownership(session: Session, carnival_id: int, user_id: int) -> ClaimResult:
    """
    Claim an unowned MySideline carnival for the user's club.

    The user must belong to an active club, and the carnival must either have
    no state or be in the club's state.
    """
    if not carnival_id or not user_id:
        return _failure('Carnival ID and User ID are required', carnival_id, user_id)

    carnival = _get_carnival_for_update(session, carnival_id)
    problem = _claimable_problem(carnival)
    if problem:
        return _failure(problem, carnival_id, user_id)

    user = session.get(User, user_id)
    if not user:
        return _failure('User not found', carnival_id, user_id)
    if not user.club_id:
        return _failure('You must be associated with a club to claim carnival ownership', carnival_id, user_id)

    club = user.club
    if not club or not club.is_active:
        return _failure('Your club must be active to claim carnival ownership', carnival_id, user_id)

    if carnival.state and carnival.state != club.state:
        return _failure(
            f"You can only claim events in your club's state ({club.state or 'none'}) or events "
            f"with no specific state. This carnival is in {carnival.state}.",
            carnival_id, user_id
        )

    original_contact_email = _assign_owner(carnival, user, club)
    session.flush()

    logger.info(f"Carnival {carnival.id} '{carnival.title}' claimed by user {user.id} ({club.club_name})")
    return ClaimResult(
        success=True,
        message=(
            f'You have successfully claimed ownership of "{carnival.title}". '
            'You can now manage this carnival and its attendees.'
        ),
        carnival=carnival,
        claimant_name=user.full_name,
        club_name=club.club_name,
        original_contact_email=original_contact_email,
    )


def release_ownership(session: Session, carnival_id: int, user_id: int) -> ClaimResult:
    """
    Give up ownership of a claimed MySideline carnival.

    Only the owner or an administrator may release. The carnival goes back to
    the unclaimed state and its contact details are cleared.
    """
    if not carnival_id or not user_id:
        return _failure('Carnival ID and User ID are required', carnival_id, user_id)

    carnival = _get_carnival_for_update(session, carnival_id)
    if not carnival:
        return _failure('Carnival not found', carnival_id, user_id)

    user = session.get(User, user_id)
    if not user:
        return _failure('User not found', carnival_id, user_id)

    if not carnival.created_by_user_id:
        return _failure('This carnival is not currently owned by anyone', carnival_id, user_id)
    if carnival.created_by_user_id != user.id and not user.is_admin:
        return _failure('You can only release ownership of carnivals you own', carnival_id, user_id)
    if not carnival.is_external:
        return _failure('Can only release ownership of MySideline imported events', carnival_id, user_id)

    club_name = user.club.club_name if user.club else None

    carnival.created_by_user_id = None
    carnival.club_id = None
    carnival.claimed_at = None
    carnival.organiser_contact_name = None
    carnival.organiser_contact_email = None
    carnival.organiser_contact_phone = None
    session.flush()

    logger.info(f"Carnival {carnival.id} '{carnival.title}' released by user {user.id}")
    return ClaimResult(
        success=True,
        message=(
            f'You have successfully released ownership of "{carnival.title}". '
            'The carnival is now available for the correct organiser to claim.'
        ),
        carnival=carnival,
        club_name=club_name,
    )


def admin_claim_on_behalf(
    session: Session,
    carnival_id: int,
    admin_user_id: int,
    target_club_id: int
) -> ClaimResult:
    """
    Claim an unowned MySideline carnival for another club.

    The club's active primary delegate becomes the owner and contact. A state
    mismatch is allowed and only noted in the message.
    """
    if not carnival_id or not admin_user_id or not target_club_id:
        return _failure(
            'Carnival ID, Admin User ID, and Target Club ID are required', carnival_id, admin_user_id
        )

    carnival = _get_carnival_for_update(session, carnival_id)
    problem = _claimable_problem(carnival)
    if problem:
        return _failure(problem, carnival_id, admin_user_id)

    admin_user = session.get(User, admin_user_id)
    if not admin_user:
        return _failure('Admin user not found', carnival_id, admin_user_id)
    if not admin_user.is_admin:
        return _failure(
            'Only administrators can claim carnivals on behalf of other clubs', carnival_id, admin_user_id
        )

    club = session.get(Club, target_club_id)
    if not club:
        return _failure('Target club not found', carnival_id, admin_user_id)
    if not club.is_active:
        return _failure('Cannot claim carnival for an inactive club', carnival_id, admin_user_id)

    delegate = (
        session.query(User)
        .filter(
            User.club_id == club.id,
            User.is_primary_delegate.is_(True),
            User.is_active.is_(True),
        )
        .order_by(User.id)
        .first()
    )
    if not delegate:
        return _failure(
            'Target club must have an active primary delegate to claim carnival', carnival_id, admin_user_id
        )

    state_warning = ''
    if carnival.state and club.state and carnival.state != club.state:
        state_warning = (
            f' Note: This carnival is in {carnival.state} but the club is based in {club.state}.'
        )

    original_contact_email = _assign_owner(carnival, delegate, club)
    session.flush()

    logger.info(
        f"Carnival {carnival.id} '{carnival.title}' claimed for {club.club_name} "
        f"by admin {admin_user.id}"
    )
    return ClaimResult(
        success=True,
        message=f'Successfully claimed "{carnival.title}" on behalf of {club.club_name}.{state_warning}',
        carnival=carnival,
        claimant_name=delegate.full_name,
        club_name=club.club_name,
        original_contact_email=original_contact_email,
    )
