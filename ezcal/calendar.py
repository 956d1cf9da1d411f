"""
Calendar aggregate: an ordered sequence of CalendarEvent objects.

Decodes a VCALENDAR document by collecting the lines between
BEGIN:VEVENT and END:VEVENT, encodes the reverse, and answers which
events occur on a given date.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, Optional, Union

from .event import CalendarEvent, occurs_on
from .line_codec import split_lines, warn, ParseWarning


CALENDAR_HEADER = (
    "BEGIN:VCALENDAR\n"
    "VERSION:2.0\n"
    "PRODID:-//EZ Office//NONSGML v1.0//EN\n"
    "CALSCALE:GREGORIAN\n"
)
CALENDAR_FOOTER = "END:VCALENDAR\n"


def parse_calendar_data(
    data: Optional[str],
    warnings: Optional[list] = None,
    uid_factory: Optional[Callable[[], str]] = None,
) -> list[CalendarEvent]:
    """
    Split a calendar document into events.

    Lines outside a VEVENT block are discarded, including calendar-level
    properties. A BEGIN:VEVENT inside an open block restarts the block.

    Args:
        data: The calendar text.
        warnings: Optional list collecting ParseWarning objects.
        uid_factory: Identifier factory for events without a UID.

    Returns:
        Events in order of appearance.
    """
    events: list[CalendarEvent] = []
    current: Optional[list[str]] = None

    for number, line in enumerate(split_lines(data), 1):
        if line.startswith("BEGIN:VEVENT"):
            current = []
            continue

        if line.startswith("END:VEVENT"):
            if current is None:
                warn(warnings, number, line, "END:VEVENT without BEGIN:VEVENT")
                continue
            event = CalendarEvent.from_ical("\n".join(current), uid_factory=uid_factory)
            if warnings is not None:
                warnings.extend(event.warnings)
            events.append(event)
            current = None
            continue

        if current is not None:
            current.append(line)

    return events


@dataclass
class Calendar:
    """
    An ordered collection of events.

    If ``data`` is given the events are decoded from it and the ``events``
    argument is ignored; ``data`` is then kept only as a record of where
    the events came from. Otherwise ``events`` is used as given.
    """
    data: Optional[str] = field(default=None, repr=False, compare=False)
    events: list[CalendarEvent] = field(default_factory=list)
    warnings: list[ParseWarning] = field(default_factory=list, repr=False, compare=False)

    def __post_init__(self):
        if self.data:
            self.warnings = []
            self.events = parse_calendar_data(self.data, self.warnings)
        elif self.events is None:
            self.events = []
        else:
            self.events = list(self.events)

    @classmethod
    def from_ical(cls, text: str) -> 'Calendar':
        return cls(data=text)

    def to_ical(self) -> str:
        """Encode as a VCALENDAR document with a fixed header."""
        parts = [CALENDAR_HEADER]
        for event in self.events:
            parts.append(event.to_ical())
        parts.append(CALENDAR_FOOTER)
        return "".join(parts)

    # ==================== Queries ====================

    def events_for_day(
        self,
        day: Union[date, datetime],
        events: Optional[Iterable[CalendarEvent]] = None,
    ) -> list[CalendarEvent]:
        """
        Get the events occurring on a date.

        Args:
            day: The query date.
            events: Events to filter instead of this calendar's own.

        Returns:
            Matching events in sequence order; empty if there are none.
        """
        if events is None:
            events = self.events
        if not events:
            return []
        return [event for event in events if occurs_on(day, event)]

    def events_between(self, start: date, end: date) -> dict[date, list[CalendarEvent]]:
        """
        Get the events for each date of an inclusive range.

        Returns:
            Ordered mapping of date -> events occurring on it. Dates with no
            events map to an empty list.
        """
        result: dict[date, list[CalendarEvent]] = {}
        current = start
        while current <= end:
            result[current] = self.events_for_day(current)
            current += timedelta(days=1)
        return result

    def get_event(self, uid: str) -> Optional[CalendarEvent]:
        for event in self.events:
            if event.uid == uid:
                return event
        return None

    # ==================== Editing ====================

    def add_event(self, event: CalendarEvent):
        """Append an event; insertion order is the sequence order."""
        self.events.append(event)

    def remove_event(self, uid: str) -> bool:
        """
        Remove every event with the given uid.

        Returns:
            True if anything was removed.
        """
        remaining = [event for event in self.events if event.uid != uid]
        removed = len(remaining) != len(self.events)
        self.events = remaining
        return removed

    def __len__(self):
        return len(self.events)

    def __iter__(self):
        return iter(self.events)
