"""Shared fixtures: an in-memory database and factories for clubs, users and carnivals."""

from datetime import timedelta
from itertools import count

import pytest

from oldmanfooty.config.settings import AppConfig
from oldmanfooty.db import Database, DatabaseConfig
from oldmanfooty.models import Carnival, Club, User
from oldmanfooty.utils.timezone import now_sydney, today_sydney

_sequence = count(1)


@pytest.fixture
def database():
    """Fresh in-memory SQLite database per test."""
    database = Database(DatabaseConfig(url="sqlite://"))
    database.init_db()
    yield database
    database.dispose()


@pytest.fixture
def session(database):
    with database.session() as session:
        yield session


@pytest.fixture
def config():
    return AppConfig(
        mysideline_sync_enabled=True,
        admin_api_key="test-admin-key",
        mysideline_search_url="https://mysideline.test/search",
        mysideline_event_url="https://mysideline.test/register/",
        mysideline_timeout=5,
    )


@pytest.fixture
def future_date():
    return today_sydney() + timedelta(days=30)


@pytest.fixture
def make_club(session):
    def _make_club(club_name=None, state='NSW', is_active=True):
        club = Club(
            club_name=club_name or f"Masters Club {next(_sequence)}",
            state=state,
            is_active=is_active,
        )
        session.add(club)
        session.flush()
        return club
    return _make_club


@pytest.fixture
def make_user(session):
    def _make_user(club=None, is_admin=False, is_primary_delegate=False, **kwargs):
        number = next(_sequence)
        user = User(
            email=kwargs.pop('email', f"delegate{number}@example.com"),
            first_name=kwargs.pop('first_name', 'Test'),
            last_name=kwargs.pop('last_name', f"Delegate{number}"),
            phone_number=kwargs.pop('phone_number', '0400 000 000'),
            club_id=club.id if club else None,
            is_admin=is_admin,
            is_primary_delegate=is_primary_delegate,
            **kwargs,
        )
        session.add(user)
        session.flush()
        return user
    return _make_user


@pytest.fixture
def make_carnival(session, future_date):
    """Manually entered carnival by default; pass external=True for a MySideline import."""
    def _make_carnival(title='Sydney Masters Cup', date=None, external=False, **kwargs):
        carnival = Carnival(title=title, date=date or future_date, **kwargs)
        if external:
            carnival.is_manually_entered = False
            carnival.external_id = kwargs.get('external_id') or f"ms-{next(_sequence)}"
            carnival.external_title = kwargs.get('external_title', title)
            carnival.last_external_sync = now_sydney()
        elif 'is_manually_entered' not in kwargs:
            carnival.is_manually_entered = True
        session.add(carnival)
        session.flush()
        return carnival
    return _make_carnival
