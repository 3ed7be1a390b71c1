"""Client for the scheduling API that serves the source events."""
import logging
from datetime import datetime
from typing import List, Optional
from urllib.parse import urlparse

import requests

from processor.exceptions import SourceEventError
from processor.models import FetchWindow, SourceEvent

logger = logging.getLogger(__name__)

DATETIME_FORMAT = '%Y-%m-%d %H:%M:%S'


class CalendarApiClient:
    """Client fetching event records for a time window."""

    def __init__(self, url: str, timeout: int = 30):
        """
        Initialize the API client.

        Args:
            url: Event feed endpoint of the scheduling API
            timeout: HTTP request timeout in seconds (default: 30)
        """
        self.url = url
        self.timeout = timeout

    @property
    def namespace(self) -> str:
        """Host name of the API, used to keep event UIDs unique."""
        return urlparse(self.url).hostname

    def fetch_events(self, window: FetchWindow) -> List[SourceEvent]:
        """
        Fetch all events inside the window.

        Args:
            window: Range of events to request

        Returns:
            List of SourceEvent objects in API order

        Raises:
            requests.RequestException: If the request fails or returns an
                error status
            SourceEventError: If the payload cannot be decoded
        """
        logger.info(
            f"Fetching events from {self.url} between "
            f"{window.start.isoformat()} and {window.end.isoformat()}"
        )
        response = requests.post(
            self.url,
            data=window.as_params(),
            timeout=self.timeout
        )
        response.raise_for_status()

        try:
            payload = response.json()
        except ValueError as e:
            raise SourceEventError(f"Response is not valid JSON: {e}") from e

        events = self._parse_events(payload)
        logger.info(f"Successfully fetched {len(events)} events")
        return events

    def _parse_events(self, payload) -> List[SourceEvent]:
        """
        Decode the JSON payload into source events.

        Any malformed record fails the whole payload.
        """
        if not isinstance(payload, list):
            raise SourceEventError(
                f"Expected a list of events, got {type(payload).__name__}"
            )
        return [self._parse_event(index, record) for index, record in enumerate(payload)]

    def _parse_event(self, index: int, record) -> SourceEvent:
        if not isinstance(record, dict):
            raise SourceEventError(f"Event #{index} is not an object")

        # Validate required fields
        for field in ('id', 'start_formatted', 'allDay'):
            if record.get(field) is None:
                raise SourceEventError(f"Event #{index} missing required field: {field}")

        is_all_day = record['allDay']
        if not isinstance(is_all_day, bool):
            raise SourceEventError(f"Event #{index} has non-boolean allDay: {is_all_day!r}")

        return SourceEvent(
            id=str(record['id']),
            title=record.get('title'),
            start=self._parse_datetime(index, record['start_formatted']),
            end=self._parse_optional_datetime(index, record.get('end_formatted')),
            is_all_day=is_all_day,
            location=record.get('location'),
            details=record.get('details')
        )

    def _parse_optional_datetime(self, index: int, value) -> Optional[datetime]:
        if value is None:
            return None
        return self._parse_datetime(index, value)

    def _parse_datetime(self, index: int, value) -> datetime:
        """
        Parse a naive local date-time.

        Values carry no offset and are wall-clock time in the source's
        own zone, never UTC.
        """
        try:
            return datetime.strptime(value, DATETIME_FORMAT)
        except (TypeError, ValueError) as e:
            raise SourceEventError(f"Event #{index} has invalid date-time {value!r}") from e
