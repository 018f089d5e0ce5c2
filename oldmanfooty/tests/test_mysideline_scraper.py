"""Tests for the MySideline scraper, with the HTTP call stubbed out."""

from datetime import date

import pytest
import requests

from oldmanfooty.exceptions import ExternalSourceError
from oldmanfooty.scrapers import mysideline
from oldmanfooty.scrapers.mysideline import MySidelineScraper, html_to_text, normalize_state
from oldmanfooty.source_manager import SourceManager


def masters_item(**overrides):
    item = {
        '_id': 'abc123',
        'name': 'Sydney Masters Cup (15/08/2025)',
        'ageLvl': 'Masters',
        'regoOpen': True,
        'association': {'name': 'NSWRL'},
        'competition': {'name': 'Masters Carnival'},
        'club': {'name': 'Sydney Masters'},
        'venue': {
            'name': 'Henson Park',
            'address': {
                'formatted': 'Centennial St, Marrickville NSW 2204',
                'addressLine1': 'Centennial St',
                'suburb': 'Marrickville',
                'postcode': '2204',
                'state': 'New South Wales',
                'country': 'Australia',
                'lat': -33.91,
                'lng': 151.16,
            },
        },
        'contact': {'name': ' Pat Organiser ', 'number': '0400 123 456', 'email': 'Pat@Example.com'},
        'meta': {'website': 'https://sydneymasters.example', 'facebook': ''},
        'finderDetails': {'description': '<p>Kick off <b>9am</b></p><p>BBQ after</p>'},
    }
    item.update(overrides)
    return item


class FakeResponse:

    def __init__(self, payload=None, status_code=200, json_error=False):
        self.payload = payload
        self.status_code = status_code
        self.json_error = json_error

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self.json_error:
            raise ValueError("Expecting value")
        return self.payload


@pytest.fixture
def scraper(config):
    return MySidelineScraper(config)


@pytest.fixture
def stub_get(monkeypatch):
    calls = []

    def _stub(response=None, error=None):
        def fake_get(url, **kwargs):
            calls.append((url, kwargs))
            if error:
                raise error
            return response
        monkeypatch.setattr(mysideline.requests, 'get', fake_get)
        return calls
    return _stub


def test_get_events_converts_masters_items(scraper, stub_get):
    calls = stub_get(FakeResponse({'data': [masters_item()]}))

    records = scraper.get_events()

    assert len(records) == 1
    record = records[0]
    assert record['title'] == 'Sydney Masters Cup'
    assert record['date'] == date(2025, 8, 15)
    assert record['external_id'] == 'abc123'
    assert record['external_title'] == 'Sydney Masters Cup (15/08/2025)'
    assert record['external_date'] == date(2025, 8, 15)
    assert record['state'] == 'NSW'
    assert record['venue_name'] == 'Henson Park'
    assert record['location_suburb'] == 'Marrickville'
    assert record['organiser_contact_name'] == 'Pat Organiser'
    assert record['organiser_contact_email'] == 'pat@example.com'
    assert record['registration_link'] == 'https://mysideline.test/register/abc123'
    assert record['google_maps_url'] == 'https://www.google.com/maps/search/?api=1&query=-33.91,151.16'
    assert record['social_media_facebook'] is None
    assert record['schedule_details'] == 'Kick off\n9am\nBBQ after'
    assert record['is_active'] is True

    url, kwargs = calls[0]
    assert url == 'https://mysideline.test/search'
    assert kwargs['timeout'] == 5


def test_non_masters_and_touch_items_are_dropped(scraper, stub_get):
    stub_get(FakeResponse({'data': [
        masters_item(),
        masters_item(_id='u12', ageLvl='Under 12s', competition={'name': 'Juniors'}, club={'name': 'Juniors'}),
        masters_item(_id='touch', association={'name': 'Touch Football'}),
        masters_item(_id='all', ageLvl='All Ages Masters'),
        'not an item',
    ]}))

    records = scraper.get_events()

    assert [r['external_id'] for r in records] == ['abc123']


def test_bad_item_is_skipped(scraper, stub_get):
    stub_get(FakeResponse({'data': [masters_item(_id=None), masters_item(_id='good')]}))

    records = scraper.get_events()

    assert [r['external_id'] for r in records] == ['good']


def test_oddly_shaped_items_do_not_abort_the_fetch(scraper, stub_get):
    stub_get(FakeResponse({'data': [
        {'orgtree': ['x']},
        masters_item(_id='tree', orgtree=['x'], venue=None),
        masters_item(_id='types', ageLvl=7, association='NSWRL', club=['Sydney Masters']),
        masters_item(_id='good'),
    ]}))

    records = scraper.get_events()

    assert [r['external_id'] for r in records] == ['types', 'good']


@pytest.mark.parametrize('item', [
    {'name': 'Masters Cup', 'orgtree': ['x']},
    {'name': 'Masters Cup', 'ageLvl': 35, 'orgtree': {'region': 'NRL Masters'}},
    {'name': 'Masters Cup', 'association': 'Touch', 'competition': None, 'club': 12},
])
def test_relevance_check_ignores_unexpected_types(item):
    assert MySidelineScraper.is_relevant_masters_event(item) is False


def test_address_without_coordinates_uses_formatted_address(scraper):
    item = masters_item()
    del item['venue']['address']['lat']

    record = scraper.convert_api_item(item)

    assert record['google_maps_url'] == (
        'https://www.google.com/maps/search/?api=1&query=Centennial%20St%2C%20Marrickville%20NSW%202204'
    )


def test_validate_and_clean_drops_bad_email():
    cleaned = MySidelineScraper.validate_and_clean({'title': '  ', 'organiser_contact_email': 'not-an-email'})

    assert cleaned['title'] == 'Masters Rugby League Event'
    assert cleaned['organiser_contact_email'] is None


def test_http_error_raises_external_source_error(scraper, stub_get):
    stub_get(FakeResponse(status_code=503))

    with pytest.raises(ExternalSourceError):
        scraper.get_events()


def test_connection_error_raises_external_source_error(scraper, stub_get):
    stub_get(error=requests.ConnectionError("unreachable"))

    with pytest.raises(ExternalSourceError):
        scraper.get_events()


def test_invalid_json_raises_external_source_error(scraper, stub_get):
    stub_get(FakeResponse(json_error=True))

    with pytest.raises(ExternalSourceError):
        scraper.get_events()


def test_missing_data_list_raises_external_source_error(scraper, stub_get):
    stub_get(FakeResponse({'results': []}))

    with pytest.raises(ExternalSourceError):
        scraper.get_events()


def test_source_manager_loads_mysideline(config, stub_get):
    stub_get(FakeResponse({'data': [masters_item()]}))
    manager = SourceManager(config)

    assert isinstance(manager.get_scraper('mysideline'), MySidelineScraper)
    assert len(manager.fetch_source('mysideline')) == 1


def test_source_manager_rejects_unknown_source(config):
    with pytest.raises(ExternalSourceError):
        SourceManager(config).get_scraper('facebook')


@pytest.mark.parametrize('value, expected', [
    ('nsw', 'NSW'),
    ('Queensland', 'QLD'),
    ('Western Australia', 'WA'),
    ('Auckland', None),
    (None, None),
])
def test_normalize_state(value, expected):
    assert normalize_state(value) == expected


def test_html_to_text():
    assert html_to_text('<p>Gates open <i>8am</i></p>') == 'Gates open\n8am'
    assert html_to_text('') is None
