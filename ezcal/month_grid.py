"""
Month grid data model for presentation layers.

Builds a renderer-neutral description of one month: title, weekday
header and week rows of day cells with the events of each day. A GUI or
HTML renderer only has to walk the rows; it never queries the calendar
itself.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from .calendar import Calendar
from .config import DisplayOptions
from .event import month_length


@dataclass
class EventLabel:
    """What a day cell shows for one event."""
    summary: Optional[str]
    icon: Optional[str] = None
    uid: Optional[str] = None


@dataclass
class DayLabel:
    text: str
    is_weekend: bool = False

    @property
    def css_classes(self) -> list[str]:
        classes = ["calendar-day-label"]
        if self.is_weekend:
            classes.append("calendar-day-label-weekend")
        return classes


@dataclass
class DayCell:
    """
    One cell of the grid.

    Padding cells before the first and after the last day of the month
    have day=None and no events.
    """
    day: Optional[int]
    even_week: bool
    is_weekend: bool
    is_today: bool = False
    label: Optional[str] = None
    events: list[EventLabel] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.day is None

    @property
    def css_classes(self) -> list[str]:
        classes = ["calendar-date-empty" if self.is_empty else "calendar-date"]
        classes.append("calendar-week-even" if self.even_week else "calendar-week-odd")
        classes.append("calendar-day-weekend" if self.is_weekend else "calendar-day-weekday")
        if self.is_today:
            classes.append("calendar-date-today")
        return classes


@dataclass
class MonthGrid:
    year: int
    month: int  # zero-based
    title: Optional[str] = None
    day_labels: list[DayLabel] = field(default_factory=list)
    weeks: list[list[DayCell]] = field(default_factory=list)
    styles: Optional[dict[str, str]] = None

    def cells(self) -> list[DayCell]:
        return [cell for week in self.weeks for cell in week]

    def cell_for_day(self, day: int) -> Optional[DayCell]:
        for cell in self.cells():
            if cell.day == day:
                return cell
        return None


def _column_weekdays(start_week_on_monday: bool) -> list[int]:
    """Weekday (0=Sunday) shown in each of the 7 columns."""
    if start_week_on_monday:
        return [1, 2, 3, 4, 5, 6, 0]
    return [0, 1, 2, 3, 4, 5, 6]


def build_month_grid(
    calendar: Calendar,
    options: Optional[DisplayOptions] = None,
    today: Optional[date] = None,
) -> MonthGrid:
    """
    Build the grid for one month.

    Args:
        calendar: Source of events for each day.
        options: Display options; defaults show everything for the
            current month.
        today: Date to highlight; defaults to date.today().

    Returns:
        The populated MonthGrid.
    """
    if options is None:
        options = DisplayOptions()
    if today is None:
        today = date.today()

    year = options.year if options.year is not None else today.year
    month = options.month if options.month is not None else today.month - 1

    grid = MonthGrid(year=year, month=month)
    row_heights = []

    if not options.skip_title:
        grid.title = f"{options.get_month_label(month)} {year}"
        row_heights.append("auto")

    columns = _column_weekdays(options.start_week_on_monday)

    if not options.skip_day_labels:
        grid.day_labels = [
            DayLabel(options.get_day_label(weekday), is_weekend=weekday in (0, 6))
            for weekday in columns
        ]
        row_heights.append("auto")

    first_day = date(year, month + 1, 1)
    # date.weekday() is 0=Monday; shift to 0=Sunday
    first_weekday = (first_day.weekday() + 1) % 7
    starting_column = columns.index(first_weekday)
    length = month_length(year, month)

    day = 1
    even_week = True
    # No trailing all-empty row when the month ends on the last column
    while day <= length:
        week = []
        for column, weekday in enumerate(columns):
            is_weekend = weekday in (0, 6)
            if (not grid.weeks and column < starting_column) or day > length:
                week.append(DayCell(day=None, even_week=even_week, is_weekend=is_weekend))
                continue

            cell_date = date(year, month + 1, day)
            cell = DayCell(
                day=day,
                even_week=even_week,
                is_weekend=is_weekend,
                is_today=cell_date == today,
            )
            if not options.skip_date_labels:
                cell.label = str(day)
            if not options.skip_events:
                cell.events = [
                    EventLabel(summary=event.summary, icon=event.ezoffice_icon, uid=event.uid)
                    for event in calendar.events_for_day(cell_date)
                ]
            week.append(cell)
            day += 1

        grid.weeks.append(week)
        even_week = not even_week

    if not options.skip_styling:
        grid.styles = {
            "display": "grid",
            "grid-template-columns": "repeat(7, 1fr)",
            "grid-template-rows": " ".join(row_heights),
        }

    return grid
