"""Assembly and iCalendar serialization of the published feed."""
import logging
from datetime import datetime
from typing import Iterable

from icalendar import Calendar, Event, vDuration

from processor.models import CalendarDocument, CalendarEvent

logger = logging.getLogger(__name__)

PRODID = '-//calendar-feed-publisher//EN'


def assemble_calendar(name: str, events: Iterable[CalendarEvent]) -> CalendarDocument:
    """
    Build the calendar document for one run.

    Events keep their order and are never deduplicated; repeated UIDs are
    passed through as-is.

    Args:
        name: Display name of the feed
        events: Mapped calendar events

    Returns:
        CalendarDocument with fixed refresh metadata
    """
    return CalendarDocument(name=name, events=tuple(events))


def _build_event(event: CalendarEvent, generated_at: datetime) -> Event:
    component = Event()
    component.add('uid', event.uid)
    component.add('dtstamp', generated_at)
    # DateOnly carries a date (VALUE=DATE), Instant a UTC datetime
    component.add('dtstart', event.start.value)
    component.add('dtend', event.end.value)
    for name, value in (
        ('summary', event.summary),
        ('description', event.description),
        ('location', event.location)
    ):
        if value is not None:
            component.add(name, value)
    return component


def serialize_calendar(document: CalendarDocument, generated_at: datetime) -> str:
    """
    Render a calendar document as iCalendar text.

    Args:
        document: Assembled calendar document
        generated_at: Aware timestamp written as DTSTAMP of every event

    Returns:
        RFC 5545 text
    """
    calendar = Calendar()
    calendar.add('prodid', PRODID)
    calendar.add('version', '2.0')
    calendar.add('x-wr-calname', document.name)
    calendar.add('x-published-ttl', vDuration(document.published_ttl))
    calendar.add(
        'refresh-interval',
        vDuration(document.refresh_interval),
        parameters={'VALUE': 'DURATION'}
    )

    for event in document.events:
        calendar.add_component(_build_event(event, generated_at))

    logger.info(f"Serialized {len(document.events)} events into '{document.name}'")
    return calendar.to_ical().decode('utf-8')
