"""Tests for the HTTP API, run against an in-memory database."""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from oldmanfooty.api.app import create_application
from oldmanfooty.config.cors import cors_config
from oldmanfooty.exceptions import ExternalSourceError
from oldmanfooty.models import Carnival, Club, User
from oldmanfooty.utils.timezone import now_sydney, today_sydney

ADMIN_KEY = {'Authorization': 'test-admin-key'}


class StubSourceManager:

    def __init__(self):
        self.records = []
        self.error = None

    def fetch_source(self, source_id):
        if self.error:
            raise self.error
        return self.records


@pytest.fixture
def source_manager():
    return StubSourceManager()


@pytest.fixture
def client(config, database, source_manager):
    with TestClient(create_application(config, database, source_manager)) as client:
        yield client


@pytest.fixture
def seeded(database, future_date):
    """Two NSW clubs, a delegate of each, an admin, a user without a club and a few carnivals."""
    with database.session() as session:
        newcastle = Club(club_name='Newcastle Old Boys', state='NSW')
        wollongong = Club(club_name='Wollongong Masters', state='NSW')
        session.add_all([newcastle, wollongong])
        session.flush()

        delegate = User(email='jane@example.com', first_name='Jane', last_name='Citizen', club_id=newcastle.id)
        other = User(email='sam@example.com', first_name='Sam', last_name='Other', club_id=wollongong.id)
        admin = User(email='admin@example.com', first_name='Ada', last_name='Admin', is_admin=True)
        clubless = User(email='pat@example.com', first_name='Pat', last_name='Clubless')
        session.add_all([delegate, other, admin, clubless])
        session.flush()

        imported = Carnival(
            title='Sydney Masters Cup',
            external_title='Sydney Masters Cup (MySideline)',
            date=future_date,
            state='NSW',
            is_manually_entered=False,
            external_id='ms-1',
            last_external_sync=now_sydney(),
            organiser_contact_email='contact@mysideline.test',
        )
        queensland = Carnival(title='Gold Coast Masters', date=future_date + timedelta(days=1), state='QLD')
        archived = Carnival(title='Old Carnival', date=future_date, is_disabled=True)
        past = Carnival(title='Last Year', date=today_sydney() - timedelta(days=365))
        session.add_all([imported, queensland, archived, past])
        session.flush()

        return {
            'newcastle': newcastle.id,
            'wollongong': wollongong.id,
            'delegate': delegate.id,
            'other': other.id,
            'admin': admin.id,
            'clubless': clubless.id,
            'imported': imported.id,
            'queensland': queensland.id,
            'archived': archived.id,
        }


def as_user(user_id):
    return {'X-User-Id': str(user_id)}


def test_health_check(client):
    response = client.get('/')

    assert response.status_code == 200
    assert response.json()['status'] == 'healthy'


class TestListing:

    def test_lists_upcoming_visible_carnivals(self, client, seeded):
        response = client.get('/api/carnivals')

        assert response.status_code == 200
        assert [c['title'] for c in response.json()] == ['Sydney Masters Cup', 'Gold Coast Masters']

    def test_filters_by_state(self, client, seeded):
        response = client.get('/api/carnivals', params={'state': 'qld'})

        assert [c['title'] for c in response.json()] == ['Gold Coast Masters']

    def test_unknown_state_is_rejected(self, client):
        assert client.get('/api/carnivals', params={'state': 'XX'}).status_code == 400

    def test_get_single_carnival(self, client, seeded):
        response = client.get(f"/api/carnivals/{seeded['imported']}")

        assert response.status_code == 200
        assert response.json()['is_external'] is True

    def test_archived_carnival_is_not_found(self, client, seeded):
        assert client.get(f"/api/carnivals/{seeded['archived']}").status_code == 404


class TestSubmission:

    def test_creates_new_carnival(self, client, seeded, future_date):
        response = client.post(
            '/api/carnivals',
            json={'title': 'Newcastle Knockout', 'date': future_date.isoformat(), 'state': 'NSW'},
            headers=as_user(seeded['delegate']),
        )

        assert response.status_code == 201
        body = response.json()
        assert body['merged'] is False
        assert body['carnival']['club_id'] == seeded['newcastle']
        assert body['carnival']['is_manually_entered'] is True

    def test_merges_into_unclaimed_import(self, client, seeded, future_date):
        response = client.post(
            '/api/carnivals',
            json={'title': 'Sydney Masters Cup (MySideline)', 'date': future_date.isoformat(), 'venue_name': 'Henson Park'},
            headers=as_user(seeded['delegate']),
        )

        assert response.status_code == 201
        body = response.json()
        assert body['merged'] is True
        assert body['carnival']['id'] == seeded['imported']
        assert body['carnival']['external_id'] == 'ms-1'
        assert body['carnival']['venue_name'] == 'Henson Park'

    def test_same_club_duplicate_conflicts(self, client, seeded, future_date):
        payload = {'title': 'Newcastle Knockout', 'date': future_date.isoformat()}
        client.post('/api/carnivals', json=payload, headers=as_user(seeded['delegate']))

        response = client.post('/api/carnivals', json=payload, headers=as_user(seeded['delegate']))

        assert response.status_code == 409

    def test_other_club_may_enter_same_carnival(self, client, seeded, future_date):
        payload = {'title': 'Newcastle Knockout', 'date': future_date.isoformat()}
        client.post('/api/carnivals', json=payload, headers=as_user(seeded['delegate']))

        response = client.post('/api/carnivals', json=payload, headers=as_user(seeded['other']))

        assert response.status_code == 201

    def test_missing_date_is_rejected(self, client, seeded):
        response = client.post('/api/carnivals', json={'title': 'No Date'}, headers=as_user(seeded['delegate']))

        assert response.status_code == 400

    def test_bad_date_is_rejected(self, client, seeded):
        response = client.post(
            '/api/carnivals',
            json={'title': 'Bad Date', 'date': 'next saturday'},
            headers=as_user(seeded['delegate']),
        )

        assert response.status_code == 400

    def test_numeric_date_is_rejected(self, client, seeded):
        response = client.post(
            '/api/carnivals',
            json={'title': 'Numeric Date', 'date': 20990101, 'force_create': True},
            headers=as_user(seeded['delegate']),
        )

        assert response.status_code == 400

    def test_clubless_user_cannot_take_over_import(self, client, seeded, future_date):
        response = client.post(
            '/api/carnivals',
            json={'title': 'Sydney Masters Cup', 'date': future_date.isoformat(), 'club_id': seeded['wollongong']},
            headers=as_user(seeded['clubless']),
        )

        assert response.status_code == 201
        body = response.json()
        assert body['merged'] is False
        assert body['carnival']['id'] != seeded['imported']
        assert body['carnival']['club_id'] is None

        imported = client.get(f"/api/carnivals/{seeded['imported']}").json()
        assert imported['club_id'] is None
        assert imported['created_by_user_id'] is None
        assert imported['claimed_at'] is None

    def test_requires_user(self, client, future_date):
        response = client.post('/api/carnivals', json={'title': 'Anon', 'date': future_date.isoformat()})

        assert response.status_code == 401


class TestClaims:

    def test_claim_and_release(self, client, seeded):
        claim = client.post(f"/api/carnivals/{seeded['imported']}/claim", headers=as_user(seeded['delegate']))

        assert claim.status_code == 200
        assert claim.json()['success'] is True

        detail = client.get(f"/api/carnivals/{seeded['imported']}").json()
        assert detail['club_id'] == seeded['newcastle']
        assert detail['original_external_contact_email'] == 'contact@mysideline.test'

        release = client.post(f"/api/carnivals/{seeded['imported']}/release", headers=as_user(seeded['delegate']))

        assert release.status_code == 200
        assert client.get(f"/api/carnivals/{seeded['imported']}").json()['club_id'] is None

    def test_claim_notifies_original_contact(self, client, seeded, monkeypatch):
        sent = []
        monkeypatch.setattr(
            'oldmanfooty.api.routes.carnivals.send_claim_notification',
            lambda config, carnival, claimant, club, email: sent.append((carnival.id, club, email)),
        )

        response = client.post(f"/api/carnivals/{seeded['imported']}/claim", headers=as_user(seeded['delegate']))

        assert response.status_code == 200
        assert sent == [(seeded['imported'], 'Newcastle Old Boys', 'contact@mysideline.test')]

    def test_second_claim_fails(self, client, seeded):
        client.post(f"/api/carnivals/{seeded['imported']}/claim", headers=as_user(seeded['delegate']))

        response = client.post(f"/api/carnivals/{seeded['imported']}/claim", headers=as_user(seeded['other']))

        assert response.status_code == 400
        assert response.json() == {'success': False, 'message': 'This carnival already has an owner'}

    def test_only_owner_may_release(self, client, seeded):
        client.post(f"/api/carnivals/{seeded['imported']}/claim", headers=as_user(seeded['delegate']))

        response = client.post(f"/api/carnivals/{seeded['imported']}/release", headers=as_user(seeded['other']))

        assert response.status_code == 400

    def test_claim_requires_user(self, client, seeded):
        assert client.post(f"/api/carnivals/{seeded['imported']}/claim").status_code == 401


class TestAdmin:

    def test_sync_requires_key(self, client):
        assert client.post('/api/admin/sync').status_code == 401
        assert client.post('/api/admin/sync', headers={'Authorization': 'wrong'}).status_code == 401

    def test_sync_stores_records(self, client, source_manager, future_date):
        source_manager.records = [{'title': 'Imported Carnival', 'date': future_date, 'state': 'VIC'}]

        response = client.post('/api/admin/sync', headers=ADMIN_KEY)

        assert response.status_code == 200
        assert response.json()['status'] == 'completed'
        assert response.json()['newCarnivals'] == 1
        assert [c['title'] for c in client.get('/api/carnivals', params={'state': 'VIC'}).json()] == ['Imported Carnival']

    def test_failed_sync_returns_bad_gateway(self, client, source_manager):
        source_manager.error = ExternalSourceError('MySideline is down')

        response = client.post('/api/admin/sync', headers=ADMIN_KEY)

        assert response.status_code == 502
        assert response.json()['status'] == 'failed'

    def test_unexpected_sync_error_returns_bad_gateway(self, client, source_manager):
        source_manager.error = AttributeError("'list' object has no attribute 'get'")

        response = client.post('/api/admin/sync', headers=ADMIN_KEY)

        assert response.status_code == 502
        assert response.json()['status'] == 'failed'

    def test_stats_require_admin(self, client, seeded):
        assert client.get('/api/admin/stats', headers=as_user(seeded['delegate'])).status_code == 403

        response = client.get('/api/admin/stats', headers=as_user(seeded['admin']))

        assert response.status_code == 200
        assert response.json()['imported_carnivals'] == 1
        assert response.json()['last_sync'] is None

    def test_admin_merge_archives_source(self, client, seeded, future_date):
        created = client.post(
            '/api/carnivals',
            json={'title': 'Sydney Masters Cup Official', 'date': future_date.isoformat()},
            headers=as_user(seeded['delegate']),
        ).json()['carnival']

        response = client.post(
            f"/api/admin/carnivals/{seeded['imported']}/merge",
            json={'target_carnival_id': created['id']},
            headers=as_user(seeded['admin']),
        )

        assert response.status_code == 200
        assert response.json()['carnival']['external_id'] == 'ms-1'
        assert client.get(f"/api/carnivals/{seeded['imported']}").status_code == 404

    def test_merge_by_non_owner_is_forbidden(self, client, seeded):
        response = client.post(
            f"/api/admin/carnivals/{seeded['imported']}/merge",
            json={'target_carnival_id': seeded['queensland']},
            headers=as_user(seeded['other']),
        )

        assert response.status_code == 403

    def test_merge_of_missing_carnival_is_not_found(self, client, seeded):
        response = client.post(
            '/api/admin/carnivals/9999/merge',
            json={'target_carnival_id': seeded['queensland']},
            headers=as_user(seeded['admin']),
        )

        assert response.status_code == 404

    def test_claim_on_behalf(self, client, database, seeded):
        with database.session() as session:
            session.get(User, seeded['delegate']).is_primary_delegate = True

        response = client.post(
            f"/api/admin/carnivals/{seeded['imported']}/claim-on-behalf",
            json={'target_club_id': seeded['newcastle']},
            headers=as_user(seeded['admin']),
        )

        assert response.status_code == 200
        assert response.json()['success'] is True
        assert client.get(f"/api/carnivals/{seeded['imported']}").json()['created_by_user_id'] == seeded['delegate']

    def test_claim_on_behalf_notifies_original_contact(self, client, database, seeded, monkeypatch):
        sent = []
        monkeypatch.setattr(
            'oldmanfooty.api.routes.admin.send_claim_notification',
            lambda config, carnival, claimant, club, email: sent.append((carnival.id, club, email)),
        )
        with database.session() as session:
            session.get(User, seeded['delegate']).is_primary_delegate = True

        response = client.post(
            f"/api/admin/carnivals/{seeded['imported']}/claim-on-behalf",
            json={'target_club_id': seeded['newcastle']},
            headers=as_user(seeded['admin']),
        )

        assert response.status_code == 200
        assert sent == [(seeded['imported'], 'Newcastle Old Boys', 'contact@mysideline.test')]


class TestSiteModes:

    def test_maintenance_blocks_public_routes(self, client, config):
        config.maintenance_mode = True

        response = client.get('/api/carnivals')

        assert response.status_code == 503
        assert client.get('/').status_code == 200
        assert client.post('/api/admin/sync').status_code == 401

    def test_coming_soon_blocks_public_routes(self, client, config):
        config.coming_soon_mode = True

        assert client.get('/api/carnivals').status_code == 503


class TestEnvironment:

    def test_docs_served_outside_production(self, client):
        assert client.get('/api/docs').status_code == 200

    def test_docs_hidden_in_production(self, config, database, source_manager):
        config.is_production = True

        with TestClient(create_application(config, database, source_manager)) as client:
            assert client.get('/api/docs').status_code == 404
            assert client.get('/api/redoc').status_code == 404

    def test_production_cors_does_not_allow_any_origin(self, monkeypatch):
        monkeypatch.delenv('CORS_EXTRA_ORIGINS', raising=False)

        assert '*' not in cors_config(True)['allow_origins']
        assert cors_config(False)['allow_origins'] == ['*']
