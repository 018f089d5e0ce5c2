"""Tests for pulling dates out of MySideline titles."""

from datetime import date

import pytest

from oldmanfooty.utils.title_dates import extract_and_strip_date_from_title, parse_date


@pytest.mark.parametrize('value, expected', [
    ('19/07/2025', date(2025, 7, 19)),
    ('21-06-2025', date(2025, 6, 21)),
    ('27th July 2024', date(2024, 7, 27)),
    ('1st Mar 2025', date(2025, 3, 1)),
    ('Sep 20, 2024', date(2024, 9, 20)),
    ('September 20 2024', date(2024, 9, 20)),
    ('2025-08-15', date(2025, 8, 15)),
])
def test_parse_date(value, expected):
    assert parse_date(value) == expected


@pytest.mark.parametrize('value', [None, '', 'not a date', '31/02/2025', '12 Smarch 2025'])
def test_parse_date_returns_none(value):
    assert parse_date(value) is None


@pytest.mark.parametrize('title, clean_title, extracted', [
    ('Sydney Masters Cup (15/08/2025)', 'Sydney Masters Cup', date(2025, 8, 15)),
    ('Central Coast Carnival - 21st June 2025', 'Central Coast Carnival', date(2025, 6, 21)),
    ('Northern Rivers Masters | 05/10/2025', 'Northern Rivers Masters', date(2025, 10, 5)),
    ('Masters Carnival Sep 20, 2025', 'Masters Carnival', date(2025, 9, 20)),
    ('(Masters Cup) 12/03/2025', 'Masters Cup', date(2025, 3, 12)),
])
def test_extracts_and_strips_date(title, clean_title, extracted):
    assert extract_and_strip_date_from_title(title) == (clean_title, extracted)


def test_title_without_date_is_unchanged():
    assert extract_and_strip_date_from_title('Wollongong Masters Carnival') == ('Wollongong Masters Carnival', None)


def test_invalid_bracketed_date_is_dropped_without_a_date():
    assert extract_and_strip_date_from_title('Carnival (31/02/2025)') == ('Carnival', None)


def test_empty_title():
    assert extract_and_strip_date_from_title('') == ('', None)
    assert extract_and_strip_date_from_title(None) == (None, None)
