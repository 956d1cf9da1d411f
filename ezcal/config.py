"""
Configuration for ezcal.

Handles TOML file parsing for the local timezone, month grid display
options and localized labels.
"""

import tomllib
import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional

from .timezone_utils import set_timezone


DEFAULT_DAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
DEFAULT_MONTH_LABELS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December"
]


@dataclass
class DisplayOptions:
    """
    Options for building a month grid.

    month is zero-based (0 = January); year and month default to today.
    day_labels always start on Sunday; the grid rotates them when
    start_week_on_monday is set.
    """
    skip_styling: bool = False     # No grid layout hints
    skip_title: bool = False       # No "Month Year" title
    skip_day_labels: bool = False  # No weekday header row
    skip_date_labels: bool = False # No day-of-month number in cells
    skip_events: bool = False      # Do not query events per day
    start_week_on_monday: bool = False
    year: Optional[int] = None
    month: Optional[int] = None
    month_labels: Optional[list[str]] = None
    day_labels: Optional[list[str]] = None

    def __post_init__(self):
        if self.month_labels is None:
            self.month_labels = list(DEFAULT_MONTH_LABELS)
        if self.day_labels is None:
            self.day_labels = list(DEFAULT_DAY_LABELS)
        if self.month is not None and not 0 <= self.month <= 11:
            raise ValueError(f"month must be between 0 and 11, got {self.month}")

    def get_month_label(self, month: int) -> str:
        """Get month label for a zero-based month."""
        return self.month_labels[month] if 0 <= month < len(self.month_labels) else ""

    def get_day_label(self, weekday: int) -> str:
        """Get day label for weekday (0=Sunday, 6=Saturday)."""
        return self.day_labels[weekday] if 0 <= weekday < len(self.day_labels) else ""


@dataclass
class Config:
    """Main configuration container for ezcal."""

    timezone: str = "UTC"
    display: DisplayOptions = field(default_factory=DisplayOptions)

    @classmethod
    def get_default_config_path(cls) -> Path:
        """Get the default configuration file path."""
        xdg_config = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
        return Path(xdg_config) / 'ezcal' / 'ezcal.toml'

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> 'Config':
        """Load configuration from TOML file."""
        if config_path is None:
            config_path = cls.get_default_config_path()
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'rb') as f:
            data = tomllib.load(f)

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        """Build a Config from already-parsed TOML tables."""
        # Parse General section
        general = data.get('General', {})
        timezone = general.get('timezone', 'UTC')

        # Parse Localization section (space-separated names)
        localization_data = data.get('Localization', {})
        day_names_str = localization_data.get('day_names', '')
        month_names_str = localization_data.get('month_names', '')
        day_labels = day_names_str.split() if day_names_str else None
        month_labels = month_names_str.split() if month_names_str else None

        if day_labels is not None and len(day_labels) != 7:
            raise ValueError(f"Localization.day_names needs 7 names, got {len(day_labels)}")
        if month_labels is not None and len(month_labels) != 12:
            raise ValueError(f"Localization.month_names needs 12 names, got {len(month_labels)}")

        # Parse Display section
        display_data = data.get('Display', {})
        display = DisplayOptions(
            skip_styling=display_data.get('skip_styling', DisplayOptions.skip_styling),
            skip_title=display_data.get('skip_title', DisplayOptions.skip_title),
            skip_day_labels=display_data.get('skip_day_labels', DisplayOptions.skip_day_labels),
            skip_date_labels=display_data.get('skip_date_labels', DisplayOptions.skip_date_labels),
            skip_events=display_data.get('skip_events', DisplayOptions.skip_events),
            start_week_on_monday=display_data.get('start_week_on_monday', DisplayOptions.start_week_on_monday),
            year=display_data.get('year'),
            month=display_data.get('month'),
            month_labels=month_labels,
            day_labels=day_labels,
        )

        return cls(timezone=timezone, display=display)

    def apply(self):
        """Install process-wide settings (the local timezone)."""
        set_timezone(self.timezone)
