"""Conversion of naive local date-times to calendar times.

All-day events are emitted as bare dates so every viewer sees the same
calendar day. Timed events are interpreted as wall-clock time in the
configured zone and converted to UTC.
"""
import bisect
from datetime import datetime, tzinfo

import pytz

from processor.exceptions import AmbiguousTimeError, SkippedTimeError
from processor.models import DateOnly, EventTime, Instant

UNIQUE = 'unique'
SKIPPED = 'skipped'
AMBIGUOUS = 'ambiguous'


def classify_local_time(local: datetime, zone: tzinfo) -> str:
    """
    Tell whether a wall-clock time maps to one, zero or two instants.

    Args:
        local: Naive local date-time
        zone: pytz timezone the wall-clock value belongs to

    Returns:
        One of UNIQUE, SKIPPED or AMBIGUOUS
    """
    try:
        zone.localize(local, is_dst=None)
    except pytz.NonExistentTimeError:
        return SKIPPED
    except pytz.AmbiguousTimeError:
        return AMBIGUOUS
    return UNIQUE


def resolve_strictly(local: datetime, zone: tzinfo) -> datetime:
    """
    Convert a local time to UTC, refusing gaps and overlaps.

    Raises:
        SkippedTimeError: If the local time does not exist in the zone
        AmbiguousTimeError: If the local time occurs twice in the zone
    """
    try:
        localized = zone.localize(local, is_dst=None)
    except pytz.NonExistentTimeError as e:
        raise SkippedTimeError(local, str(zone)) from e
    except pytz.AmbiguousTimeError as e:
        raise AmbiguousTimeError(local, str(zone)) from e
    return localized.astimezone(pytz.utc)


def _candidates(local: datetime, zone: tzinfo):
    # Both readings of the wall clock, in UTC, earliest first
    return sorted(
        zone.localize(local, is_dst=is_dst).astimezone(pytz.utc)
        for is_dst in (True, False)
    )


def resolve_leniently(local: datetime, zone: tzinfo) -> datetime:
    """
    Convert a local time to UTC, never failing.

    A time inside a spring-forward gap moves to the first instant after
    the gap. A time inside a fall-back overlap takes the earlier of its
    two instants.
    """
    kind = classify_local_time(local, zone)
    if kind == SKIPPED:
        return _end_of_gap(local, zone)
    if kind == AMBIGUOUS:
        return _candidates(local, zone)[0]
    return zone.localize(local).astimezone(pytz.utc)


def _end_of_gap(local: datetime, zone: tzinfo) -> datetime:
    # Read with the pre-gap offset the wall clock lands after the
    # transition; the zone's last transition up to that point ends the gap.
    after = _candidates(local, zone)[-1].replace(tzinfo=None)
    transitions = zone._utc_transition_times
    index = bisect.bisect_right(transitions, after) - 1
    return pytz.utc.localize(transitions[index])


def resolve_event_time(local: datetime, zone: tzinfo, date_only: bool) -> EventTime:
    """
    Resolve a naive local value into the representation used in the feed.

    Args:
        local: Naive local date-time from the source event
        zone: Configured local timezone
        date_only: True for all-day events

    Returns:
        DateOnly for all-day events, otherwise a UTC Instant
    """
    if date_only:
        return DateOnly(local.date())
    return Instant(resolve_leniently(local, zone))
