"""Exceptions raised while building the calendar feed."""
from datetime import datetime


class CalendarSyncError(Exception):
    """Base class for calendar feed errors."""


class ConfigurationError(CalendarSyncError):
    """Missing or invalid runtime setting."""


class SourceEventError(CalendarSyncError, ValueError):
    """Scheduling API returned a payload that cannot be decoded."""


class TimeResolutionError(CalendarSyncError):
    """Local time cannot be mapped to a single instant."""

    def __init__(self, local: datetime, zone_name: str, reason: str):
        self.local = local
        self.zone_name = zone_name
        super().__init__(f"{local.isoformat()} is {reason} in {zone_name}")


class SkippedTimeError(TimeResolutionError):
    """Local time falls in a daylight saving gap."""

    def __init__(self, local: datetime, zone_name: str):
        super().__init__(local, zone_name, 'skipped')


class AmbiguousTimeError(TimeResolutionError):
    """Local time occurs twice because of a daylight saving overlap."""

    def __init__(self, local: datetime, zone_name: str):
        super().__init__(local, zone_name, 'ambiguous')
