"""Data models for calendar feed processing."""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class SourceEvent:
    """Event record as delivered by the scheduling API.

    ``start`` and ``end`` are naive local wall-clock values.
    """
    id: str
    title: Optional[str]
    start: datetime
    end: Optional[datetime]
    is_all_day: bool
    location: Optional[str] = None
    details: Optional[str] = None


@dataclass(frozen=True)
class DateOnly:
    """Calendar date not tied to any timezone (all-day events)."""
    value: date


@dataclass(frozen=True)
class Instant:
    """Absolute point in time, always expressed in UTC."""
    value: datetime


EventTime = Union[DateOnly, Instant]


@dataclass(frozen=True)
class CalendarEvent:
    """Event ready to be written to the calendar feed."""
    uid: str
    start: EventTime
    end: EventTime
    summary: Optional[str]
    description: Optional[str]
    location: Optional[str]
    is_all_day: bool


@dataclass(frozen=True)
class FetchWindow:
    """Time range of events requested from the scheduling API."""
    start: datetime
    end: datetime

    def as_params(self) -> dict:
        """Request parameters as Unix seconds."""
        return {
            'start': str(int(self.start.timestamp())),
            'end': str(int(self.end.timestamp()))
        }


@dataclass(frozen=True)
class CalendarDocument:
    """Assembled calendar feed."""
    name: str
    events: Tuple[CalendarEvent, ...]
    published_ttl: timedelta = timedelta(days=1)
    refresh_interval: timedelta = timedelta(days=1)
