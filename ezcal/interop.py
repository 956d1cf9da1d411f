"""
Exchange with standard RFC 5545 documents.

The native dialect (``FREQ:yearly;``) is not readable by other calendar
tools. These helpers convert between the ezcal model and
icalendar.Calendar objects so that events can be imported from, and
exported to, ordinary .ics files. Only the properties the ezcal model
knows about survive the conversion.
"""

from datetime import date, datetime, timedelta
from typing import Optional
import sys

from icalendar import Calendar as ICalCalendar, Event as ICalEvent
import pytz

from .calendar import Calendar
from .event import CalendarEvent
from .rrule import RRule, RRULE_KEYS, parse_int_prefix
from .timezone_utils import (
    InvalidInstant, to_instant, local_midnight, parse_instant, format_instant
)


PRODID = "-//EZ Office//NONSGML v1.0//EN"

_RFC_FREQUENCIES = {"SECONDLY", "MINUTELY", "HOURLY", "DAILY", "WEEKLY", "MONTHLY", "YEARLY"}

_INTEGER_PARTS = ("interval", "count", "bymonthday", "bymonth")

# iCalendar property -> CalendarEvent attribute, copied as text
_TEXT_PROPERTIES = [
    ("SUMMARY", "summary"),
    ("DESCRIPTION", "description"),
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

_INSTANT_PROPERTIES = [
    ("DTSTAMP", "timestamp"),
    ("CREATED", "created"),
    ("LAST-MODIFIED", "last_modified"),
]


def _debug_print(msg: str) -> None:
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] INTEROP: {msg}", file=sys.stderr)


# ==================== Export ====================

def _build_recur(rrule: RRule) -> Optional[dict]:
    """Build an icalendar RRULE dict from a native rule."""
    if not rrule.freq:
        return None

    freq = rrule.freq.upper()
    if freq not in _RFC_FREQUENCIES:
        _debug_print(f"Dropping RRULE with unsupported FREQ {rrule.freq!r}")
        return None

    recur = {'freq': freq}

    for name in _INTEGER_PARTS:
        value = getattr(rrule, name)
        if not value:
            continue
        numbers = [parse_int_prefix(part) for part in value.split(',')]
        if None in numbers:
            _debug_print(f"Dropping RRULE {name} {value!r}: not an integer")
            continue
        recur[name] = numbers if len(numbers) > 1 else numbers[0]

    if rrule.until:
        until = parse_instant(rrule.until)
        if isinstance(until, InvalidInstant):
            _debug_print(f"Dropping RRULE until {rrule.until!r}: not a date")
        else:
            recur['until'] = until

    if rrule.wkst:
        recur['wkst'] = rrule.wkst.strip().upper()

    if rrule.byday:
        recur['byday'] = [day.strip().upper() for day in rrule.byday.split(',') if day.strip()]

    return recur


def event_to_icalendar(event: CalendarEvent) -> ICalEvent:
    """Convert one event; invalid instants are left out."""
    ical_event = ICalEvent()
    ical_event.add('uid', event.uid)

    for key, name in _INSTANT_PROPERTIES + [("DTSTART", "start_time"), ("DTEND", "end_time")]:
        value = getattr(event, name)
        if not isinstance(value, InvalidInstant):
            ical_event.add(key.lower(), value.astimezone(pytz.UTC))

    if event.rrule is not None:
        recur = _build_recur(event.rrule)
        if recur:
            ical_event.add('rrule', recur)

    if event.categories:
        ical_event.add('categories', list(event.categories))

    for key, name in _TEXT_PROPERTIES:
        value = getattr(event, name)
        if not value:
            continue
        if key == "GEO":
            value = _geo_tuple(value)
        elif key == "SEQUENCE":
            value = parse_int_prefix(value)
        if value is None:
            _debug_print(f"Dropping {key} {getattr(event, name)!r} of event {event.uid}")
            continue
        ical_event.add(key.lower(), value)

    return ical_event


def _geo_tuple(value: str) -> Optional[tuple[float, float]]:
    """``"lat;lon"`` -> (lat, lon), None if malformed."""
    parts = value.split(';')
    if len(parts) != 2:
        return None
    try:
        return float(parts[0]), float(parts[1])
    except ValueError:
        return None


def to_icalendar(calendar: Calendar) -> ICalCalendar:
    """
    Convert a Calendar into a standard icalendar.Calendar.

    Returns:
        A VCALENDAR component; call ``to_ical()`` on it for the .ics bytes.
    """
    vcal = ICalCalendar()
    vcal.add('prodid', PRODID)
    vcal.add('version', '2.0')
    vcal.add('calscale', 'GREGORIAN')
    for event in calendar.events:
        vcal.add_component(event_to_icalendar(event))
    return vcal


# ==================== Import ====================

def _text(value) -> str:
    if isinstance(value, str):
        return str(value)
    if hasattr(value, 'to_ical'):
        raw = value.to_ical()
        return raw.decode('utf-8') if isinstance(raw, bytes) else str(raw)
    return str(value)


def _recur_part(value) -> str:
    if isinstance(value, (datetime, date)):
        return format_instant(to_instant(value))
    return str(value)


def rrule_from_recur(recur) -> RRule:
    """Map an icalendar vRecur onto a native rule (values as strings)."""
    values = {}
    for key, name in RRULE_KEYS:
        parts = recur.get(key)
        if parts is None:
            continue
        if not isinstance(parts, list):
            parts = [parts]
        values[name] = ",".join(_recur_part(part) for part in parts)
    if values.get('freq'):
        values['freq'] = values['freq'].lower()
    return RRule(**values)


def _categories(component) -> list[str]:
    value = component.get('CATEGORIES')
    if value is None:
        return []
    if not isinstance(value, list):
        value = [value]
    categories = []
    for item in value:
        cats = getattr(item, 'cats', None)
        if cats is None:
            categories.append(_text(item))
        else:
            categories.extend(str(cat) for cat in cats)
    return categories


def _start_end(component) -> tuple[Optional[datetime], Optional[datetime]]:
    """DTSTART/DTEND as instants; all-day end dates are made inclusive."""
    start_prop = component.get('DTSTART')
    end_prop = component.get('DTEND')
    start = to_instant(start_prop.dt) if start_prop is not None else None

    end = None
    if end_prop is not None:
        end_value = end_prop.dt
        if isinstance(end_value, date) and not isinstance(end_value, datetime):
            start_value = start_prop.dt if start_prop is not None else None
            if isinstance(start_value, date) and end_value > start_value:
                end_value = end_value - timedelta(days=1)
            end = local_midnight(end_value)
        else:
            end = to_instant(end_value)
    elif component.get('DURATION') is not None and start:
        end = start + component.get('DURATION').dt
    elif start is not None:
        end = start

    return start, end


def event_from_icalendar(component: ICalEvent) -> CalendarEvent:
    """Convert one VEVENT component into a CalendarEvent."""
    values = {}

    uid = component.get('UID')
    if uid is not None:
        values['uid'] = str(uid)

    for key, name in _INSTANT_PROPERTIES:
        prop = component.get(key)
        if prop is not None:
            values[name] = to_instant(prop.dt)

    values['start_time'], values['end_time'] = _start_end(component)

    recur = component.get('RRULE')
    if recur is not None:
        values['rrule'] = rrule_from_recur(recur)

    values['categories'] = _categories(component)

    for key, name in _TEXT_PROPERTIES:
        value = component.get(key)
        if value is not None:
            values[name] = _text(value)

    return CalendarEvent(**values)


def from_icalendar(text) -> Calendar:
    """
    Import a standard iCalendar document.

    Args:
        text: .ics content as str or bytes.

    Returns:
        A Calendar with one event per VEVENT, in document order.
    """
    vcal = ICalCalendar.from_ical(text)
    events = [event_from_icalendar(component) for component in vcal.walk('VEVENT')]
    return Calendar(events=events)
