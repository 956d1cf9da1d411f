"""
Calendar event value type and the date-membership predicate.

An event is either a single instance spanning [start_time, end_time] or,
when it carries an RRule with a supported frequency, a repeating pattern
anchored on start_time:

- yearly: same month and day as start_time, any year
- monthly: same day of month as start_time, or the BYMONTHDAY offset
  counted from the end of the month

count, until and interval are carried but never bound the recurrence.
"""

from dataclasses import dataclass, field, InitVar
from datetime import date, datetime
from typing import Callable, Optional, Union
import uuid

from .line_codec import split_lines, split_property, format_property, warn, ParseWarning
from .rrule import RRule, FREQ_YEARLY, FREQ_MONTHLY, parse_int_prefix
from .timezone_utils import (
    Instant, InvalidInstant,
    now, to_instant, to_local_datetime,
    parse_instant, format_instant,
)


DAYS_IN_MONTH = [31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]

_TEXT = "text"
_INSTANT = "instant"
_CATEGORIES = "categories"
_RRULE = "rrule"

# Recognized property prefix -> (attribute, kind)
EVENT_PROPERTIES = {
    "UID:": ("uid", _TEXT),
    "DTSTAMP:": ("timestamp", _INSTANT),
    "CREATED:": ("created", _INSTANT),
    "LAST-MODIFIED:": ("last_modified", _INSTANT),
    "DTSTART:": ("start_time", _INSTANT),
    "DTEND:": ("end_time", _INSTANT),
    "RRULE:": ("rrule", _RRULE),
    "SUMMARY:": ("summary", _TEXT),
    "DESCRIPTION:": ("description", _TEXT),
    "CATEGORIES:": ("categories", _CATEGORIES),
    "CLASS:": ("cls", _TEXT),
    "TRANSP:": ("transp", _TEXT),
    "ORGANIZER:": ("organizer", _TEXT),
    "GEO:": ("geo", _TEXT),
    "STATUS:": ("status", _TEXT),
    "LOCATION:": ("location", _TEXT),
    "SEQUENCE:": ("sequence", _TEXT),
    "URL:": ("url", _TEXT),
    "X-EZOFFICE-ICON:": ("ezoffice_icon", _TEXT),
}

# Always emitted, in this order
_INSTANT_PROPERTIES = [
    ("DTSTAMP", "timestamp"),
    ("CREATED", "created"),
    ("LAST-MODIFIED", "last_modified"),
    ("DTSTART", "start_time"),
    ("DTEND", "end_time"),
]

# Emitted only when set, after RRULE/SUMMARY/DESCRIPTION/CATEGORIES
_OPTIONAL_TEXT_PROPERTIES = [
    ("CLASS", "cls"),
    ("TRANSP", "transp"),
    ("ORGANIZER", "organizer"),
    ("GEO", "geo"),
    ("STATUS", "status"),
    ("LOCATION", "location"),
    ("SEQUENCE", "sequence"),
    ("URL", "url"),
    ("X-EZOFFICE-ICON", "ezoffice_icon"),
]


def generate_uid() -> str:
    """Default identifier factory."""
    return str(uuid.uuid4())


def is_leap_year(year: int) -> bool:
    return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0


def month_length(year: int, month_index: int) -> int:
    """
    Number of days in a month.

    Args:
        year: Full year, e.g. 2024.
        month_index: Zero-based month (0 = January, 1 = February).
    """
    if month_index == 1 and is_leap_year(year):
        return 29
    return DAYS_IN_MONTH[month_index]


@dataclass
class CalendarEvent:
    """
    One calendar event, single or recurring.

    Every field is optional at construction. The four timestamp fields and
    start/end default to the construction instant, categories to an empty
    list and uid to a fresh identifier from ``uid_factory``. Naive datetimes
    are read as local time, dates as local midnight.

    start_time <= end_time is not enforced.
    """
    uid: Optional[str] = None
    timestamp: Optional[Instant] = None
    created: Optional[Instant] = None
    last_modified: Optional[Instant] = None
    start_time: Optional[Instant] = None
    end_time: Optional[Instant] = None
    rrule: Optional[RRule] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    categories: list[str] = field(default_factory=list)
    cls: Optional[str] = None
    transp: Optional[str] = None
    organizer: Optional[str] = None
    geo: Optional[str] = None
    status: Optional[str] = None
    location: Optional[str] = None
    sequence: Optional[str] = None
    url: Optional[str] = None
    ezoffice_icon: Optional[str] = None

    # Warnings from the decode that produced this event
    warnings: list[ParseWarning] = field(default_factory=list, repr=False, compare=False)

    uid_factory: InitVar[Optional[Callable[[], str]]] = None

    def __post_init__(self, uid_factory):
        current = now()
        for _, name in _INSTANT_PROPERTIES:
            value = getattr(self, name)
            setattr(self, name, current if value is None else to_instant(value))

        if self.uid is None:
            self.uid = (uid_factory or generate_uid)()

        if self.categories is None:
            self.categories = []
        else:
            self.categories = list(self.categories)

        if isinstance(self.rrule, str):
            self.rrule = RRule.from_ical(self.rrule, self.warnings)

    # ==================== Decode / Encode ====================

    @classmethod
    def from_ical(
        cls,
        data: Optional[str],
        uid_factory: Optional[Callable[[], str]] = None,
    ) -> 'CalendarEvent':
        """
        Decode an event from a block of property lines.

        BEGIN:/END: markers may be present or not. Properties may come in
        any order; the last occurrence of a key wins. Unrecognized lines are
        skipped. Dates that do not parse become INVALID_INSTANT and are
        recorded in the event's ``warnings``.

        Args:
            data: The property block.
            uid_factory: Identifier factory used if the block has no UID.

        Returns:
            The decoded event.
        """
        warnings: list[ParseWarning] = []
        values = {}

        for number, line in enumerate(split_lines(data), 1):
            match = split_property(line, EVENT_PROPERTIES)
            if match is None:
                continue
            prefix, value = match
            name, kind = EVENT_PROPERTIES[prefix]

            if kind == _INSTANT:
                instant = parse_instant(value)
                if isinstance(instant, InvalidInstant):
                    warn(warnings, number, line, f"{prefix[:-1]} is not a valid date")
                values[name] = instant
            elif kind == _CATEGORIES:
                values[name] = [category.strip() for category in value.split(",")]
            elif kind == _RRULE:
                values[name] = RRule.from_ical(value, warnings)
            else:
                values[name] = value

        event = cls(uid_factory=uid_factory, **values)
        event.warnings = warnings
        return event

    def to_ical(self) -> str:
        """Encode as a ``BEGIN:VEVENT`` ... ``END:VEVENT`` block."""
        lines = ["BEGIN:VEVENT\n", format_property("UID", self.uid)]

        for key, name in _INSTANT_PROPERTIES:
            lines.append(format_property(key, format_instant(getattr(self, name))))

        if self.rrule is not None:
            lines.append(self.rrule.to_ical() + "\n")

        if self.summary:
            lines.append(format_property("SUMMARY", self.summary))

        if self.description:
            lines.append(format_property("DESCRIPTION", self.description))

        if self.categories:
            categories = ",".join(self.categories)
            if categories:
                lines.append(format_property("CATEGORIES", categories))

        for key, name in _OPTIONAL_TEXT_PROPERTIES:
            value = getattr(self, name)
            if value:
                lines.append(format_property(key, value))

        lines.append("END:VEVENT\n")
        return "".join(lines)

    # ==================== Queries ====================

    @property
    def is_recurring(self) -> bool:
        return self.rrule is not None and self.rrule.is_recurring

    def occurs_on(self, day: Union[date, datetime]) -> bool:
        return occurs_on(day, self)

    def __repr__(self):
        return f"CalendarEvent(uid={self.uid!r}, summary={self.summary!r}, start_time={self.start_time})"


def occurs_on(day: Union[date, datetime], event: CalendarEvent) -> bool:
    """
    Decide whether ``event`` occurs on the calendar date ``day``.

    Recurring rules are checked first; if none of them matches, the event
    occurs when the query instant lies within [start_time, end_time],
    both ends inclusive. A plain date is queried at local midnight, a
    datetime at its own instant.

    Args:
        day: The query date.
        event: The event to test.

    Returns:
        True if the event occurs on that date.
    """
    query = to_instant(day)
    if isinstance(query, InvalidInstant):
        return False
    if isinstance(day, datetime):
        local_day = to_local_datetime(query).date()
    else:
        local_day = day

    year = local_day.year
    month_index = local_day.month - 1
    day_of_month = local_day.day

    start = event.start_time
    end = event.end_time
    start_valid = not isinstance(start, InvalidInstant)

    rrule = event.rrule
    if rrule is not None and rrule.freq:
        local_start = to_local_datetime(start) if start_valid else None

        if rrule.freq == FREQ_YEARLY and local_start is not None:
            if local_start.month - 1 == month_index and local_start.day == day_of_month:
                return True

        if rrule.freq == FREQ_MONTHLY:
            offset = parse_int_prefix(rrule.bymonthday)
            if rrule.bymonthday and offset is not None and offset > 0:
                use_day = month_length(year, month_index) + offset + 1
                if use_day == day_of_month:
                    return True

            if local_start is not None and local_start.day == day_of_month:
                return True

    if not start_valid or isinstance(end, InvalidInstant):
        return False

    return start <= query <= end
