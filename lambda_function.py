"""AWS Lambda handler for publishing the scheduling API calendar as iCalendar."""
import json
import logging
import os
import time
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlparse

import pytz

from fetcher.calendar_api import CalendarApiClient
from processor.calendar_builder import assemble_calendar, serialize_calendar
from processor.event_processor import EventProcessor
from processor.exceptions import ConfigurationError
from processor.fetch_window import calculate_fetch_window, local_today
from storage.s3_publisher import S3CalendarPublisher

# Attributes every LogRecord carries; anything else came in via ``extra``
_RESERVED_ATTRS = set(
    logging.LogRecord('', 0, '', 0, '', (), None).__dict__
) | {'message', 'asctime'}


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON, including ``extra`` fields."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Create new handler with JSON formatter
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    # Set log level
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


@dataclass(frozen=True)
class Settings:
    """Runtime configuration read from the environment."""
    zone: tzinfo
    source_url: str
    calendar_name: str
    bucket: str
    key: str = 'calendar.ics'
    timeout_seconds: int = 30


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Read and validate settings from environment variables.

    Args:
        environ: Mapping to read from (default: os.environ)

    Returns:
        Validated Settings

    Raises:
        ConfigurationError: If a required setting is missing or invalid
    """
    if environ is None:
        environ = os.environ

    # Validate required settings
    missing = [
        name for name in (
            'LOCAL_TIMEZONE', 'SOURCE_URL', 'OUTPUT_CALENDAR_NAME', 'OUTPUT_BUCKET'
        )
        if not environ.get(name, '').strip()
    ]
    if missing:
        raise ConfigurationError(f"Missing required settings: {', '.join(missing)}")

    timezone_name = environ['LOCAL_TIMEZONE'].strip()
    try:
        zone = pytz.timezone(timezone_name)
    except pytz.UnknownTimeZoneError as e:
        raise ConfigurationError(f"Unknown timezone: {timezone_name}") from e

    source_url = environ['SOURCE_URL'].strip()
    if not urlparse(source_url).hostname:
        raise ConfigurationError(f"SOURCE_URL has no host: {source_url}")

    try:
        timeout_seconds = int(environ.get('TIMEOUT_SECONDS', '30'))
    except ValueError as e:
        raise ConfigurationError(
            f"TIMEOUT_SECONDS must be an integer: {environ['TIMEOUT_SECONDS']}"
        ) from e

    return Settings(
        zone=zone,
        source_url=source_url,
        calendar_name=environ['OUTPUT_CALENDAR_NAME'].strip(),
        bucket=environ['OUTPUT_BUCKET'].strip(),
        key=environ.get('OUTPUT_KEY', '').strip() or 'calendar.ics',
        timeout_seconds=timeout_seconds
    )


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _error_response(message: str, error: Exception, start_time: float, **details) -> Dict[str, Any]:
    body = {
        'message': message,
        'error': str(error),
        'error_type': type(error).__name__,
        'duration_seconds': round(time.time() - start_time, 2)
    }
    body.update(details)
    return {'statusCode': 500, 'body': json.dumps(body)}


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler function for the calendar feed.

    Every failure aborts the run before anything is written, so the
    previously published feed stays in place.

    Args:
        event: EventBridge event payload
        context: Lambda context object

    Returns:
        Response dict with statusCode and summary statistics
    """
    # Initialize logging
    setup_logging(os.environ.get('LOG_LEVEL', 'INFO'))
    logger = logging.getLogger(__name__)

    # Log Lambda execution start
    start_time = time.time()

    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}", exc_info=True)
        return _error_response('Invalid configuration', e, start_time)

    logger.info(
        "Lambda execution started",
        extra={
            'timezone': settings.zone.zone,
            'source_url': settings.source_url,
            'output': f"s3://{settings.bucket}/{settings.key}"
        }
    )

    try:
        # Instantiate components
        client = CalendarApiClient(settings.source_url, timeout=settings.timeout_seconds)
        processor = EventProcessor(zone=settings.zone, namespace=client.namespace)
        publisher = S3CalendarPublisher(bucket=settings.bucket, key=settings.key)

        # Calculate fetch window in the configured zone
        now = utc_now()
        window = calculate_fetch_window(local_today(now, settings.zone), settings.zone)

        try:
            raw_events = client.fetch_events(window)
        except Exception as e:
            logger.error(
                f"Failed to fetch events from calendar: {e}",
                extra={'error_type': type(e).__name__},
                exc_info=True
            )
            return _error_response('Failed to fetch calendar events', e, start_time)

        # Normalize, map and render events
        calendar_events = processor.process_events(raw_events)
        document = assemble_calendar(settings.calendar_name, calendar_events)
        body = serialize_calendar(document, generated_at=now)

        try:
            published_bytes = publisher.publish(body)
        except Exception as e:
            logger.error(
                f"Failed to publish calendar feed: {e}",
                extra={'error_type': type(e).__name__},
                exc_info=True
            )
            return _error_response(
                'Failed to publish calendar feed', e, start_time,
                note='Previous feed remains published'
            )

        # Calculate execution duration
        duration = time.time() - start_time
        logger.info(
            "Lambda execution completed successfully",
            extra={
                'duration_seconds': round(duration, 2),
                'events_fetched': len(raw_events),
                'events_published': len(document.events),
                'published_bytes': published_bytes
            }
        )

        return {
            'statusCode': 200,
            'body': json.dumps({
                'message': 'Calendar published successfully',
                'statistics': {
                    'window_start': window.start.isoformat(),
                    'window_end': window.end.isoformat(),
                    'events_fetched': len(raw_events),
                    'events_published': len(document.events),
                    'published_bytes': published_bytes,
                    'duration_seconds': round(duration, 2)
                }
            })
        }

    except Exception as e:
        logger.error(
            f"Lambda execution failed: {e}",
            extra={
                'duration_seconds': round(time.time() - start_time, 2),
                'error_type': type(e).__name__
            },
            exc_info=True
        )
        return _error_response('Calendar publish failed', e, start_time)
