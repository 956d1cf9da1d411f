"""Shared fixtures for the ezcal test suite."""

import sys
from pathlib import Path

import pytest

# Make the flat-layout package importable without installation
root_path = Path(__file__).parent.parent
if str(root_path) not in sys.path:
    sys.path.insert(0, str(root_path))

from ezcal import timezone_utils  # noqa: E402


@pytest.fixture(autouse=True)
def utc_local_timezone():
    """Run every test with UTC as the local timezone."""
    previous = timezone_utils.get_timezone_name()
    timezone_utils.set_timezone("UTC")
    yield
    timezone_utils.set_timezone(previous)


@pytest.fixture
def fixed_uid():
    return lambda: "generated-uid"
