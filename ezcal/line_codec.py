"""
Low-level line handling shared by event and calendar serialization.

A property block is a sequence of ``NAME:VALUE`` lines separated by line
feeds. Decoding is permissive: lines that are not recognized are skipped,
never reported as errors. Conditions worth knowing about (a date that
does not parse, a number that is not a number) are collected as
ParseWarning objects for the caller to inspect.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional
import sys


def _debug_print(msg: str) -> None:
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] PARSE: {msg}", file=sys.stderr)


@dataclass(frozen=True)
class ParseWarning:
    """A recoverable problem found while decoding one line."""
    line_number: int  # 1-based within the decoded block, 0 if unknown
    line: str
    message: str

    def __str__(self):
        return f"line {self.line_number}: {self.message} ({self.line!r})"


def warn(warnings: Optional[list], line_number: int, line: str, message: str) -> ParseWarning:
    """Record a ParseWarning in ``warnings`` (if given) and report it."""
    warning = ParseWarning(line_number, line, message)
    if warnings is not None:
        warnings.append(warning)
    _debug_print(str(warning))
    return warning


def split_lines(text: Optional[str]) -> list[str]:
    """
    Split a block of text into property lines.

    Lines are split on line feeds; a trailing carriage return is dropped
    so CRLF input reads the same as LF input.
    """
    if not text:
        return []
    return [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]


def split_property(line: str, prefixes: Iterable[str]) -> Optional[tuple[str, str]]:
    """
    Match a line against a set of recognized ``NAME:`` prefixes.

    The lookup is keyed on the exact literal up to and including the first
    colon, so ``DTSTART:`` never collides with ``DTSTAMP:``. The value is
    the remainder of the line after the prefix's own length.

    Args:
        line: One property line.
        prefixes: Recognized prefixes, each ending in ``:``.

    Returns:
        ``(prefix, value)`` or None if the line is not recognized.
    """
    colon = line.find(":")
    if colon <= 0:
        return None
    prefix = line[:colon + 1]
    if prefix not in prefixes:
        return None
    return prefix, line[len(prefix):]


def format_property(name: str, value: str) -> str:
    """Render one ``NAME:value`` line, terminated by a line feed."""
    return f"{name}:{value}\n"
