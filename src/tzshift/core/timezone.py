"""Process default timezone handling.

The process default timezone is the TZ environment variable, applied to the
C library with time.tzset(). Every read-modify-restore of it goes through
``timezone_lock`` so that two overrides never interleave.

Code that reads TZ (or calls time.localtime()) without taking the lock can
still observe a temporary override. Prefer passing a ZoneInfo explicitly.
"""

import math
import os
import threading
import time
from numbers import Real
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog

from tzshift.services.exceptions import InvalidTimezone

logger = structlog.get_logger()

# Re-entrant so a callable running under an override can open another one
timezone_lock = threading.RLock()


def resolve_timezone(name: str) -> ZoneInfo:
    """Look up an IANA timezone by name.

    Args:
        name: Zone identifier (e.g., 'America/New_York', 'Etc/GMT+5', 'UTC')

    Returns:
        ZoneInfo for the zone (instances are cached by zoneinfo itself)

    Raises:
        InvalidTimezone: If the name is unknown or not a valid zone key
    """
    if not isinstance(name, str) or not name:
        raise InvalidTimezone(name)
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidTimezone(name) from e


def offset_to_zone_name(offset: Real | str) -> str:
    """Convert a UTC offset in hours to a fixed-offset zone name.

    Etc/GMT zones invert the sign (POSIX convention): -5 hours is
    "Etc/GMT+5" and +3 hours is "Etc/GMT-3". Zero is "Etc/GMT".

    Args:
        offset: Offset in hours, as a number or a numeric string

    Returns:
        Zone name. Non-integral offsets render as given and are rejected
        later by resolve_timezone().

    Raises:
        ValueError: If a string offset is not numeric
    """
    hours = float(offset) if isinstance(offset, str) else offset
    if hours == 0:
        return "Etc/GMT"
    magnitude = abs(hours)
    if math.isfinite(magnitude) and magnitude == int(magnitude):
        magnitude = int(magnitude)
    return f"Etc/GMT{'-' if hours > 0 else '+'}{magnitude}"


def is_numeric_offset(value: object) -> bool:
    """Return True for numbers and numeric strings (bools excluded)."""
    if isinstance(value, bool):
        return False
    if isinstance(value, Real):
        return True
    if isinstance(value, str):
        try:
            float(value)
        except ValueError:
            return False
        return True
    return False


def get_default_timezone() -> str | None:
    """Return the current process default timezone (None means platform local time)."""
    return os.environ.get("TZ")


def _apply_default_timezone(name: str | None) -> None:
    """Write TZ without validation and push it to the C library."""
    if name is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = name
    if hasattr(time, "tzset"):
        time.tzset()


def set_default_timezone(name: str | None) -> None:
    """Set the process default timezone.

    Args:
        name: Zone identifier, or None to fall back to platform local time

    Raises:
        InvalidTimezone: If the name is not a known zone. TZ is left unchanged.
    """
    if name is not None:
        resolve_timezone(name)
    with timezone_lock:
        _apply_default_timezone(name)
    logger.debug("timezone.default_set", timezone=name)


class DefaultTimezoneOverride:
    """Temporarily replace the process default timezone.

    Use as a context manager. Entering takes the process-wide lock, records
    the current default and installs the target zone. Exiting restores the
    recorded default and releases the lock, whether or not the block raised.

    Example:
        with DefaultTimezoneOverride("America/New_York"):
            time.strftime("%H:%M")  # New York wall clock
    """

    def __init__(self, name: str):
        """Initialize the override.

        Args:
            name: Zone identifier to install while the block runs
        """
        self.name = name
        self._prior: str | None = None

    def __enter__(self):
        """Install the target zone.

        Returns:
            self

        Raises:
            InvalidTimezone: If the target zone is unknown. Nothing is changed
                and the lock is not held.
        """
        resolve_timezone(self.name)
        timezone_lock.acquire()
        self._prior = get_default_timezone()
        _apply_default_timezone(self.name)
        logger.debug("timezone.override_entered", timezone=self.name, prior=self._prior)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Restore the recorded default and release the lock.

        Returns:
            False: Always re-raise exceptions after restoring
        """
        try:
            _apply_default_timezone(self._prior)
        finally:
            timezone_lock.release()

        if exc_type is None:
            logger.debug("timezone.override_restored", timezone=self._prior)
        else:
            logger.debug(
                "timezone.override_restored",
                timezone=self._prior,
                exc_type=exc_type.__name__,
            )
        return False


def default_timezone(name: str) -> DefaultTimezoneOverride:
    """Create a context manager that overrides the process default timezone.

    Example:
        with default_timezone("Etc/GMT+5"):
            time.localtime()
    """
    return DefaultTimezoneOverride(name)
