"""Fetch window calculation for the scheduling API request."""
import logging
from datetime import date, datetime, tzinfo

from processor.models import FetchWindow
from processor.timezones import resolve_strictly

logger = logging.getLogger(__name__)

MONTHS_INTO_PAST = 6
YEARS_INTO_FUTURE = 3


def local_today(now: datetime, zone: tzinfo) -> date:
    """Current calendar date as observed in the given zone."""
    return now.astimezone(zone).date()


def calculate_fetch_window(
    today: date,
    zone: tzinfo,
    months_into_past: int = MONTHS_INTO_PAST,
    years_into_future: int = YEARS_INTO_FUTURE
) -> FetchWindow:
    """
    Calculate the range of events to request.

    The window opens at local midnight on the first day of the month
    ``months_into_past`` months before ``today`` and closes at 23:59:59 on
    December 31, ``years_into_future`` years after ``today``.

    Args:
        today: Current local date
        zone: Configured local timezone
        months_into_past: Whole months of history to include
        years_into_future: Whole calendar years ahead to include

    Returns:
        FetchWindow with both bounds in UTC

    Raises:
        TimeResolutionError: If a boundary falls on a daylight saving
            transition in the zone
    """
    # Step back whole months across year boundaries
    month_index = today.year * 12 + (today.month - 1) - months_into_past
    past_year, past_month = divmod(month_index, 12)

    start = resolve_strictly(datetime(past_year, past_month + 1, 1), zone)
    end = resolve_strictly(
        datetime(today.year + years_into_future, 12, 31, 23, 59, 59),
        zone
    )

    logger.debug(f"Fetch window for {today}: {start.isoformat()} - {end.isoformat()}")
    return FetchWindow(start=start, end=end)
