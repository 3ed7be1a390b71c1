"""Event processor for normalizing source events into calendar events."""
import dataclasses
import logging
from datetime import datetime, time, timedelta, tzinfo
from typing import Iterable, List, Optional

from processor.models import CalendarEvent, SourceEvent
from processor.timezones import resolve_event_time

logger = logging.getLogger(__name__)


def resolved_end(start: datetime, end: Optional[datetime]) -> datetime:
    """End of an event, falling back to its start when none was given."""
    return end if end is not None else start


def normalize_all_day(events: Iterable[SourceEvent]) -> List[SourceEvent]:
    """
    Align all-day events to local midnight boundaries.

    The start becomes midnight of its date and the end becomes midnight of
    the day after the last date, so an all-day range always covers at least
    one full day with an exclusive end. Timed events are returned as-is.

    Args:
        events: Source events as decoded from the API

    Returns:
        New list with all-day events replaced by normalized copies
    """
    normalized = []
    for event in events:
        if event.is_all_day:
            last_day = resolved_end(event.start, event.end).date()
            event = dataclasses.replace(
                event,
                start=datetime.combine(event.start.date(), time.min),
                end=datetime.combine(last_day + timedelta(days=1), time.min)
            )
        normalized.append(event)
    return normalized


def make_uid(source_id: str, namespace: str) -> str:
    """Stable UID for an event; namespace is the source API host."""
    return f"{source_id}@{namespace}"


def map_event(event: SourceEvent, zone: tzinfo, namespace: str) -> CalendarEvent:
    """
    Convert one normalized source event into a calendar event.

    Args:
        event: Source event after all-day normalization
        zone: Configured local timezone
        namespace: Host name of the source API, used in the UID

    Returns:
        CalendarEvent with resolved start and end
    """
    return CalendarEvent(
        uid=make_uid(event.id, namespace),
        start=resolve_event_time(event.start, zone, event.is_all_day),
        end=resolve_event_time(
            resolved_end(event.start, event.end), zone, event.is_all_day
        ),
        summary=event.title,
        description=event.details,
        location=event.location,
        is_all_day=event.is_all_day
    )


class EventProcessor:
    """Processor turning decoded source events into calendar events."""

    def __init__(self, zone: tzinfo, namespace: str):
        """
        Initialize the processor.

        Args:
            zone: Configured local timezone
            namespace: Host name of the source API
        """
        self.zone = zone
        self.namespace = namespace

    def process_events(self, raw_events: List[SourceEvent]) -> List[CalendarEvent]:
        """
        Normalize and map every source event.

        Args:
            raw_events: Source events from the API client

        Returns:
            Calendar events in source order
        """
        # Align all-day events to midnight boundaries
        normalized = normalize_all_day(raw_events)
        # Resolve times and build UIDs
        calendar_events = [
            map_event(event, self.zone, self.namespace) for event in normalized
        ]

        all_day_count = sum(1 for event in calendar_events if event.is_all_day)
        logger.info(
            f"Mapped {len(calendar_events)} events "
            f"({all_day_count} all-day) for {self.namespace}"
        )
        return calendar_events
