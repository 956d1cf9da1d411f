"""
Timezone and instant utilities for ezcal.

Provides unified conversion functions for the whole package.
Event instants are stored timezone-aware; calendar dates are interpreted
in the configured local timezone (midnight local for a query date).
"""

from datetime import datetime, date, time as dt_time, timedelta
import time as _time
from typing import Union

import pytz
from dateutil import parser as date_parser


# Default timezone - can be overridden by config
_local_timezone_name: str = "UTC"

# Instants stay a day inside the datetime range so that every timezone
# can represent them
EARLIEST = datetime.min.replace(tzinfo=pytz.UTC) + timedelta(days=1)
LATEST = datetime.max.replace(tzinfo=pytz.UTC) - timedelta(days=1)


class InvalidInstant:
    """
    Sentinel for a date string that could not be parsed.

    Decoding never fails on a malformed date; the field holds this value
    instead. It renders as ``Invalid Date`` and never matches any date.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def isoformat(self) -> str:
        return "Invalid Date"

    def __str__(self):
        return "Invalid Date"

    def __repr__(self):
        return "INVALID_INSTANT"

    def __bool__(self):
        return False


INVALID_INSTANT = InvalidInstant()

Instant = Union[datetime, InvalidInstant]


def set_timezone(timezone_name: str):
    """Set the local timezone for the package."""
    global _local_timezone_name
    _local_timezone_name = timezone_name


def get_timezone_name() -> str:
    return _local_timezone_name


def get_local_timezone():
    """
    Get the local timezone as a pytz timezone object.

    Returns:
        pytz timezone object for the configured local timezone.
    """
    try:
        return pytz.timezone(_local_timezone_name)
    except pytz.UnknownTimeZoneError:
        # Fallback: try system timezone name
        try:
            return pytz.timezone(_time.tzname[0])
        except pytz.UnknownTimeZoneError:
            # Last resort: calculate offset and use fixed offset timezone
            is_dst = _time.localtime().tm_isdst
            if is_dst:
                offset_seconds = -_time.altzone
            else:
                offset_seconds = -_time.timezone
            return pytz.FixedOffset(offset_seconds // 60)


def now() -> datetime:
    """Current instant, timezone-aware (UTC), in whole milliseconds."""
    return to_instant(datetime.now(pytz.UTC))


def to_local_datetime(dt: datetime) -> datetime:
    """
    Convert an aware datetime to the local timezone.

    Args:
        dt: A datetime object, typically in UTC with tzinfo set.

    Returns:
        A timezone-aware datetime in the local timezone.
        If input has no tzinfo, returns it unchanged.
    """
    if dt.tzinfo is not None:
        local_tz = get_local_timezone()
        return dt.astimezone(local_tz)
    return dt


def to_instant(value) -> Instant:
    """
    Normalize a caller-supplied point in time.

    Naive datetimes are taken as local time and plain dates as local
    midnight. The result is in UTC, cut to whole milliseconds, which is
    what ``format_instant`` writes. Values outside ``EARLIEST``..``LATEST``
    become INVALID_INSTANT, and the sentinel itself passes through.

    Args:
        value: datetime, date or INVALID_INSTANT.

    Returns:
        A timezone-aware UTC datetime, or INVALID_INSTANT.
    """
    if isinstance(value, InvalidInstant):
        return value
    if not isinstance(value, date):
        raise TypeError(f"Expected datetime or date, got {type(value).__name__}")
    try:
        if not isinstance(value, datetime):
            value = local_midnight(value)
        elif value.tzinfo is None:
            value = get_local_timezone().localize(value)
        utc = value.astimezone(pytz.UTC)
    except OverflowError:
        return INVALID_INSTANT
    if not EARLIEST <= utc <= LATEST:
        return INVALID_INSTANT
    return utc.replace(microsecond=utc.microsecond // 1000 * 1000)


def local_midnight(day: date) -> datetime:
    """Midnight of ``day`` in the local timezone, timezone-aware."""
    if isinstance(day, datetime):
        day = to_local_datetime(day).date()
    return get_local_timezone().localize(datetime.combine(day, dt_time.min))


def parse_instant(text: str) -> Instant:
    """
    Parse a date string leniently.

    Accepts anything dateutil's generic parser accepts (ISO-8601 basic and
    extended forms, RFC 2822 dates, ...). Values without an offset are
    taken as local time.

    Args:
        text: The raw property value.

    Returns:
        A timezone-aware UTC datetime, or INVALID_INSTANT if the string
        cannot be parsed or lies outside the supported range.
    """
    text = text.strip()
    if not text or text == "Invalid Date":
        return INVALID_INSTANT
    try:
        parsed = date_parser.parse(text)
    except (ValueError, OverflowError):
        return INVALID_INSTANT
    return to_instant(parsed)


def format_instant(value: Instant) -> str:
    """
    Render an instant as an ISO-8601 UTC string with milliseconds.

    Example: ``2024-05-01T00:00:00.000Z``. Years are always four digits.
    The invalid sentinel renders as ``Invalid Date``.
    """
    utc = to_instant(value)
    if isinstance(utc, InvalidInstant):
        return utc.isoformat()
    return (
        f"{utc.year:04d}-{utc.month:02d}-{utc.day:02d}"
        f"T{utc.hour:02d}:{utc.minute:02d}:{utc.second:02d}"
        f".{utc.microsecond // 1000:03d}Z"
    )
