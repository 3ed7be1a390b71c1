"""Unit tests for CalendarApiClient."""
from datetime import datetime, timezone

import pytest
import requests
import responses
from responses import matchers

from fetcher.calendar_api import CalendarApiClient
from processor.exceptions import SourceEventError
from processor.models import FetchWindow

API_URL = 'https://events.example.org/calendar/feed'

WINDOW = FetchWindow(
    start=datetime(2024, 12, 1, 5, 0, tzinfo=timezone.utc),
    end=datetime(2029, 1, 1, 4, 59, 59, tzinfo=timezone.utc)
)


class TestCalendarApiClient:
    """Test cases for CalendarApiClient class."""

    def test_namespace_is_host(self):
        client = CalendarApiClient(API_URL)

        assert client.namespace == 'events.example.org'

    @responses.activate
    def test_fetch_events_success(self):
        """Test successful fetch and decoding."""
        responses.add(
            responses.POST,
            API_URL,
            json=[
                {
                    'id': 101,
                    'title': 'Farmers Market',
                    'start_formatted': '2025-06-21 08:00:00',
                    'end_formatted': '2025-06-21 12:30:00',
                    'allDay': False,
                    'location': 'Main Street',
                    'details': 'Local produce'
                },
                {
                    'id': '102',
                    'title': 'Library Closed',
                    'start_formatted': '2025-07-04 00:00:00',
                    'end_formatted': None,
                    'allDay': True,
                    'location': None,
                    'details': ''
                }
            ],
            match=[matchers.urlencoded_params_matcher(WINDOW.as_params())],
            status=200
        )

        client = CalendarApiClient(API_URL, timeout=10)
        events = client.fetch_events(WINDOW)

        assert len(events) == 2

        assert events[0].id == '101'
        assert events[0].title == 'Farmers Market'
        assert events[0].start == datetime(2025, 6, 21, 8, 0)
        assert events[0].start.tzinfo is None
        assert events[0].end == datetime(2025, 6, 21, 12, 30)
        assert events[0].is_all_day is False
        assert events[0].location == 'Main Street'
        assert events[0].details == 'Local produce'

        assert events[1].id == '102'
        assert events[1].end is None
        assert events[1].is_all_day is True
        assert events[1].location is None
        assert events[1].details == ''

    @responses.activate
    def test_fetch_events_missing_optional_fields(self):
        responses.add(
            responses.POST,
            API_URL,
            json=[{'id': 'x', 'start_formatted': '2025-06-21 08:00:00', 'allDay': False}],
            status=200
        )

        events = CalendarApiClient(API_URL).fetch_events(WINDOW)

        assert events[0].title is None
        assert events[0].end is None

    @responses.activate
    def test_fetch_events_http_error(self):
        """Test that an error status is raised without retrying."""
        responses.add(responses.POST, API_URL, body='Server Error', status=500)

        client = CalendarApiClient(API_URL)

        with pytest.raises(requests.HTTPError):
            client.fetch_events(WINDOW)

        assert len(responses.calls) == 1

    @responses.activate
    def test_fetch_events_invalid_json(self):
        responses.add(responses.POST, API_URL, body='<html>oops</html>', status=200)

        with pytest.raises(SourceEventError):
            CalendarApiClient(API_URL).fetch_events(WINDOW)

    @responses.activate
    def test_fetch_events_payload_not_list(self):
        responses.add(responses.POST, API_URL, json={'events': []}, status=200)

        with pytest.raises(SourceEventError, match='Expected a list'):
            CalendarApiClient(API_URL).fetch_events(WINDOW)

    @responses.activate
    def test_fetch_events_missing_required_field_fails_whole_payload(self):
        responses.add(
            responses.POST,
            API_URL,
            json=[
                {'id': '1', 'start_formatted': '2025-06-21 08:00:00', 'allDay': False},
                {'id': '2', 'allDay': False}
            ],
            status=200
        )

        with pytest.raises(SourceEventError, match='start_formatted'):
            CalendarApiClient(API_URL).fetch_events(WINDOW)

    @responses.activate
    def test_fetch_events_rejects_offset_timestamps(self):
        responses.add(
            responses.POST,
            API_URL,
            json=[{'id': '1', 'start_formatted': '2025-06-21T08:00:00Z', 'allDay': False}],
            status=200
        )

        with pytest.raises(SourceEventError, match='invalid date-time'):
            CalendarApiClient(API_URL).fetch_events(WINDOW)

    @responses.activate
    def test_fetch_events_rejects_non_boolean_all_day(self):
        responses.add(
            responses.POST,
            API_URL,
            json=[{'id': '1', 'start_formatted': '2025-06-21 08:00:00', 'allDay': 'yes'}],
            status=200
        )

        with pytest.raises(SourceEventError, match='allDay'):
            CalendarApiClient(API_URL).fetch_events(WINDOW)
