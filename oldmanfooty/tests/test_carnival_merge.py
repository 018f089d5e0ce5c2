"""Tests for merging one carnival into another."""

from datetime import timedelta

import pytest

from oldmanfooty.carnival_merge import merge_carnivals
from oldmanfooty.exceptions import CarnivalNotFoundError, MergeNotAllowedError


@pytest.fixture
def admin(make_user):
    return make_user(is_admin=True)


def test_fills_only_empty_target_fields(session, admin, make_carnival, future_date):
    source = make_carnival(
        title='Sydney Masters Cup (MySideline)',
        external=True,
        external_id='ms-1',
        venue_name='Source Venue',
        schedule_details='Kick off 9am',
        max_teams=12,
        location_latitude=-33.86,
        end_date=future_date + timedelta(days=1),
        is_registration_open=True,
    )
    target = make_carnival(
        title='Sydney Masters Cup',
        venue_name='Target Venue',
        schedule_details='   ',
        max_teams=0,
        is_registration_open=False,
    )

    merged = merge_carnivals(session, source.id, target.id, admin)

    assert merged is target
    assert target.title == 'Sydney Masters Cup'
    assert target.venue_name == 'Target Venue'
    assert target.schedule_details == 'Kick off 9am'
    assert target.max_teams == 12
    assert target.location_latitude == -33.86
    assert target.end_date == future_date + timedelta(days=1)
    assert target.is_registration_open is True


def test_copies_external_identity_when_target_lacks_it(session, admin, make_carnival):
    source = make_carnival(
        title='Sydney Masters Cup (MySideline)',
        external=True,
        external_id='ms-1',
        external_title='Sydney Masters Cup (15/08/2025)',
    )
    target = make_carnival(title='Sydney Masters Cup')

    merge_carnivals(session, source.id, target.id, admin)

    assert target.external_id == 'ms-1'
    assert target.external_title == 'Sydney Masters Cup (15/08/2025)'
    assert target.external_date == source.date
    assert target.last_external_sync is not None


def test_keeps_target_external_identity(session, admin, make_carnival):
    source = make_carnival(title='Source', external=True, external_id='ms-1')
    target = make_carnival(title='Target', external=True, external_id='ms-2')

    merge_carnivals(session, source.id, target.id, admin)

    assert target.external_id == 'ms-2'


def test_source_is_archived(session, admin, make_carnival):
    source = make_carnival(title='Source', external=True, admin_notes='Imported')
    target = make_carnival(title='Target')

    merge_carnivals(session, source.id, target.id, admin)

    assert source.is_disabled is True
    assert source.is_active is False
    assert source.disabled_at is not None
    assert source.disabled_by_user_id == admin.id
    assert source.admin_notes.startswith('Imported\n\n[MERGED]')
    assert '"Target"' in source.admin_notes


def test_cannot_merge_into_itself(session, admin, make_carnival):
    carnival = make_carnival(external=True)

    with pytest.raises(MergeNotAllowedError):
        merge_carnivals(session, carnival.id, carnival.id, admin)


def test_cannot_merge_across_clubs(session, admin, make_club, make_carnival):
    source = make_carnival(title='Source', external=True, club_id=make_club().id)
    target = make_carnival(title='Target', club_id=make_club().id)

    with pytest.raises(MergeNotAllowedError) as excinfo:
        merge_carnivals(session, source.id, target.id, admin)

    assert 'different clubs' in str(excinfo.value)
    assert source.is_disabled is False


def test_owner_can_merge_own_import(session, make_club, make_user, make_carnival):
    club = make_club()
    owner = make_user(club=club)
    source = make_carnival(title='Source', external=True, created_by_user_id=owner.id, club_id=club.id)
    target = make_carnival(title='Target', created_by_user_id=owner.id, club_id=club.id)

    merge_carnivals(session, source.id, target.id, owner)

    assert source.is_disabled is True


def test_non_admin_must_own_both(session, make_club, make_user, make_carnival):
    club = make_club()
    owner = make_user(club=club)
    source = make_carnival(title='Source', external=True)
    target = make_carnival(title='Target', created_by_user_id=owner.id, club_id=club.id)

    with pytest.raises(MergeNotAllowedError):
        merge_carnivals(session, source.id, target.id, owner)


def test_non_admin_source_must_be_import(session, make_club, make_user, make_carnival):
    club = make_club()
    owner = make_user(club=club)
    source = make_carnival(title='Source', created_by_user_id=owner.id, club_id=club.id)
    target = make_carnival(title='Target', created_by_user_id=owner.id, club_id=club.id)

    with pytest.raises(MergeNotAllowedError) as excinfo:
        merge_carnivals(session, source.id, target.id, owner)

    assert 'Only MySideline carnivals' in str(excinfo.value)


def test_missing_carnival_raises(session, admin, make_carnival):
    target = make_carnival()

    with pytest.raises(CarnivalNotFoundError):
        merge_carnivals(session, 9999, target.id, admin)
