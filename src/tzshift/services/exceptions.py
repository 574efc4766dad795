"""Error hierarchy for timezone operations.

This module defines the exceptions raised by tzshift:
- TimezoneError: Base for all tzshift errors
- InvalidTimezone: Zone name not known to the IANA timezone database

Free-text parsing never raises; an uninterpretable string yields None.
Errors from the calendar routines themselves (out-of-range dates, etc.)
propagate untouched.
"""


class TimezoneError(Exception):
    """Base exception for all tzshift errors."""

    pass


class InvalidTimezone(TimezoneError, KeyError):
    """Timezone name not recognized by the timezone database.

    Subclasses KeyError so callers already handling
    zoneinfo.ZoneInfoNotFoundError keep working.
    """

    def __init__(self, name: object):
        self.name = name
        super().__init__(f"Unknown timezone: {name!r}")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])
