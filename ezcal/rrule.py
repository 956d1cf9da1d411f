"""
Recurrence rule value type.

The rule uses the dialect's own sub-format: ``KEY:value`` segments joined
by semicolons, e.g. ``FREQ:monthly;BYMONTHDAY:-1;``. Values are kept as
the strings found in the source; nothing is validated at decode or
encode time.
"""

from dataclasses import dataclass, fields
from typing import Optional
import re

from .line_codec import warn


FREQ_YEARLY = "yearly"
FREQ_MONTHLY = "monthly"

# Encode order; the decode table is derived from it.
RRULE_KEYS = [
    ("FREQ", "freq"),
    ("INTERVAL", "interval"),
    ("COUNT", "count"),
    ("UNTIL", "until"),
    ("WKST", "wkst"),
    ("BYDAY", "byday"),
    ("BYMONTHDAY", "bymonthday"),
    ("BYMONTH", "bymonth"),
]

_PREFIX_TO_FIELD = {f"{key}:": name for key, name in RRULE_KEYS}

_INTEGER_FIELDS = {"interval", "count", "bymonthday"}

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")


def parse_int_prefix(value: Optional[str]) -> Optional[int]:
    """
    Parse the leading integer of a string, ignoring anything after it.

    ``"-2"`` -> -2, ``"3rd"`` -> 3, ``"abc"`` -> None.
    """
    if value is None:
        return None
    match = _INT_PREFIX.match(str(value))
    return int(match.group(1)) if match else None


@dataclass(frozen=True)
class RRule:
    """
    A recurrence pattern owned by a single CalendarEvent.

    Only ``freq`` decides whether the rule recurs; without it every other
    field is carried along but ignored.
    """
    freq: Optional[str] = None
    interval: Optional[str] = None
    count: Optional[str] = None
    until: Optional[str] = None
    wkst: Optional[str] = None
    byday: Optional[str] = None
    bymonthday: Optional[str] = None
    bymonth: Optional[str] = None

    @property
    def is_recurring(self) -> bool:
        return bool(self.freq)

    @classmethod
    def from_ical(cls, data: Optional[str], warnings: Optional[list] = None) -> 'RRule':
        """
        Decode a rule fragment.

        Args:
            data: Text after ``RRULE:`` on an event line. A leading
                ``RRULE:`` marker is tolerated.
            warnings: Optional list collecting ParseWarning objects.

        Returns:
            The decoded rule; unmatched segments are ignored.
        """
        if not data:
            return cls()
        if data.startswith("RRULE:"):
            data = data[len("RRULE:"):]

        values = {}
        for segment in data.split(";"):
            colon = segment.find(":")
            if colon <= 0:
                continue
            name = _PREFIX_TO_FIELD.get(segment[:colon + 1])
            if name is None:
                continue
            value = segment[colon + 1:]
            if name in _INTEGER_FIELDS and parse_int_prefix(value) is None:
                warn(warnings, 0, segment, f"RRULE {name} is not an integer")
            values[name] = value
        return cls(**values)

    def to_ical(self) -> str:
        """Encode as ``RRULE:KEY:value;...`` with set fields in fixed order."""
        parts = ["RRULE:"]
        for key, name in RRULE_KEYS:
            value = getattr(self, name)
            if value:
                parts.append(f"{key}:{value};")
        return "".join(parts)

    def as_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name)}
