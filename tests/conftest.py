"""pytest fixtures for tzshift tests.

Provides:
- utc_timezone: Autouse fixture pinning the process default timezone to UTC
- reference_timestamp: 2007-06-01 13:00:00 UTC, a Friday
- frozen_now: Pins the "current time" used by TimezoneContext
- clean_environment: Removes settings-related environment variables
"""

import os
import time
from datetime import datetime, timezone

import pytest
import structlog

REFERENCE_TIMESTAMP = int(datetime(2007, 6, 1, 13, 0, 0, tzinfo=timezone.utc).timestamp())


def _restore_tz(value: str | None) -> None:
    if value is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = value
    if hasattr(time, "tzset"):
        time.tzset()


@pytest.fixture(autouse=True)
def utc_timezone():
    """Enforce UTC as process default timezone for every test.

    Restores whatever TZ was set before the test so the suite leaves the
    interpreter as it found it.
    """
    prior = os.environ.get("TZ")
    _restore_tz("UTC")
    yield
    _restore_tz(prior)


@pytest.fixture
def reference_timestamp() -> int:
    """2007-06-01 13:00:00 UTC (08:00 in Etc/GMT+5, 09:00 EDT)."""
    return REFERENCE_TIMESTAMP


@pytest.fixture
def frozen_now(monkeypatch, reference_timestamp):
    """Make TimezoneContext treat the reference timestamp as the current time."""
    monkeypatch.setattr(
        "tzshift.services.timezone_context._current_timestamp", lambda: reference_timestamp
    )
    return reference_timestamp


@pytest.fixture
def clean_environment(monkeypatch):
    """Remove environment variables read by Settings."""
    for name in ("APP_ENV", "LOG_LEVEL", "REQUEST_TIME"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def reset_structlog():
    """Restore structlog defaults after a test configures logging."""
    yield
    structlog.reset_defaults()
