"""
ezcal - calendar events in a restricted iCalendar dialect.

This package provides:
- Line codec shared by event and calendar serialization (line_codec.py)
- Recurrence rules (rrule.py)
- Calendar events and the date-membership predicate (event.py)
- The calendar aggregate and day queries (calendar.py)
- Month grid data model for presentation layers (month_grid.py)
- Conversion to and from standard iCalendar documents (interop.py)
- Configuration (config.py)
"""

from .line_codec import ParseWarning
from .rrule import RRule, FREQ_YEARLY, FREQ_MONTHLY
from .event import CalendarEvent, occurs_on, month_length
from .calendar import Calendar
from .config import Config, DisplayOptions
from .month_grid import MonthGrid, DayCell, build_month_grid
from .interop import to_icalendar, from_icalendar
from .timezone_utils import INVALID_INSTANT, set_timezone

__all__ = [
    'ParseWarning',
    'RRule',
    'FREQ_YEARLY',
    'FREQ_MONTHLY',
    'CalendarEvent',
    'occurs_on',
    'month_length',
    'Calendar',
    'Config',
    'DisplayOptions',
    'MonthGrid',
    'DayCell',
    'build_month_grid',
    'to_icalendar',
    'from_icalendar',
    'INVALID_INSTANT',
    'set_timezone',
]
