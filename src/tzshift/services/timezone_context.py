"""Timezone context for formatting and parsing dates as if in another zone.

Useful when, e.g., date strings were produced in a different timezone than
the one this process runs in:

    # parse a date string from Eastern Standard Time (no DST)
    eastern = TimezoneContext(-5)
    stamp = eastern.parse_text("2007-06-01 08:00:00")

    # display in New York time
    new_york = TimezoneContext("America/New_York")
    new_york.format_date("G", stamp)  # '9'

Formatting, parsing and breakdown pass the zone to the calendar routines
explicitly and never touch the process default timezone. Only
run_in_context() and activated() change it, under the process-wide lock in
tzshift.core.timezone, and always restore it.
"""

import time
from datetime import datetime, timedelta
from numbers import Real
from time import struct_time
from typing import Callable, TypeVar
from zoneinfo import ZoneInfo

import structlog

from tzshift.core.config import Settings
from tzshift.core.timezone import (
    DefaultTimezoneOverride,
    default_timezone,
    is_numeric_offset,
    offset_to_zone_name,
    resolve_timezone,
)
from tzshift.models.date_parts import DateParts
from tzshift.services.date_format import format_php_date
from tzshift.services.text_parser import add_months, parse_datetime_text

logger = structlog.get_logger()

T = TypeVar("T")


def expand_two_digit_year(year: int) -> int:
    """Map 0-69 to 2000-2069 and 70-100 to 1970-2000; other years pass through."""
    if 0 <= year < 70:
        return year + 2000
    if 70 <= year <= 100:
        return year + 1900
    return year


class TimezoneContext:
    """Date/time operations evaluated in a fixed target timezone."""

    def __init__(
        self,
        tz: str | Real,
        time: int | None = None,
        settings: Settings | None = None,
    ):
        """
        Create a timezone context.

        The zone name is not validated here; an unknown name raises
        InvalidTimezone from the first operation that needs it.

        Args:
            tz: IANA zone name (e.g., 'America/New_York') or a UTC offset in
                hours (e.g., -5, converted to 'Etc/GMT+5')
            time: Reference Unix timestamp used when an operation is given no
                timestamp. Defaults to the configured request start time
                (REQUEST_TIME) or, failing that, the current time.
            settings: Settings to read REQUEST_TIME from (default: environment)
        """
        self._timezone = offset_to_zone_name(tz) if is_numeric_offset(tz) else tz

        if time is None:
            request_time = (settings or Settings()).request_time
            time = request_time if request_time is not None else _current_timestamp()
        self._time = int(time)

        logger.debug("timezone_context.created", timezone=self._timezone, time=self._time)

    def __repr__(self) -> str:
        return f"TimezoneContext({self._timezone!r}, time={self._time})"

    @property
    def timezone(self) -> str:
        """Target zone identifier."""
        return self._timezone

    @property
    def time(self) -> int:
        """Reference Unix timestamp."""
        return self._time

    @property
    def tzinfo(self) -> ZoneInfo:
        """Resolved target zone.

        Raises:
            InvalidTimezone: If the zone name is unknown
        """
        return resolve_timezone(self._timezone)

    def _moment(self, timestamp: float | None) -> datetime:
        if timestamp is None:
            timestamp = self._time
        return datetime.fromtimestamp(timestamp, tz=self.tzinfo)

    def activated(self) -> DefaultTimezoneOverride:
        """Context manager making the target zone the process default for a block.

        Example:
            with TimezoneContext("Asia/Tokyo").activated():
                time.strftime("%H:%M")  # Tokyo wall clock

        Raises:
            InvalidTimezone: On entry, if the zone name is unknown
        """
        return default_timezone(self._timezone)

    def run_in_context(self, func: Callable[[], T]) -> T:
        """Return the result of func() run with the target zone as process default.

        The previous default timezone is restored when func returns or raises.

        Args:
            func: Zero-argument callable

        Returns:
            Whatever func returns

        Raises:
            InvalidTimezone: If the zone name is unknown. func is not called.
        """
        with self.activated():
            return func()

    def format_date(self, fmt: str, timestamp: float | None = None) -> str:
        """Format a timestamp with PHP date() format characters in the target zone.

        Args:
            fmt: Format string (e.g., "Y-m-d H:i:s", "G")
            timestamp: Unix timestamp (default: the reference time)

        Raises:
            InvalidTimezone: If the zone name is unknown
        """
        return format_php_date(fmt, self._moment(timestamp))

    def parse_text(self, text: str, now: float | None = None) -> int | None:
        """Parse a textual date/time description as local to the target zone.

        Args:
            text: Description such as "2007-06-01 08:00:00" or "next monday"
            now: Unix timestamp relative phrases are resolved against
                (default: the current time)

        Returns:
            Unix timestamp, or None if the text cannot be interpreted

        Raises:
            InvalidTimezone: If the zone name is unknown
        """
        if now is None:
            now = _current_timestamp()
        parsed = parse_datetime_text(text, datetime.fromtimestamp(now, tz=self.tzinfo))
        if parsed is None:
            return None
        return int(parsed.timestamp())

    def make_timestamp(
        self,
        hour: int | None = None,
        minute: int | None = None,
        second: int | None = None,
        month: int | None = None,
        day: int | None = None,
        year: int | None = None,
    ) -> int:
        """Get the Unix timestamp for calendar fields given in the target zone.

        Unset fields take their value from the current time in the target
        zone. Out-of-range values roll over into the neighbouring unit, so
        month=13 is January of the next year and day=0 is the last day of
        the previous month.

        Raises:
            InvalidTimezone: If the zone name is unknown
            ValueError, OverflowError: If the result is outside the supported date range
        """
        zone = self.tzinfo
        now = datetime.fromtimestamp(_current_timestamp(), tz=zone)

        year = now.year if year is None else expand_two_digit_year(year)
        month = now.month if month is None else month
        day = now.day if day is None else day

        first_of_month = add_months(datetime(year, 1, 1), month - 1)
        wall = first_of_month + timedelta(
            days=day - 1,
            hours=now.hour if hour is None else hour,
            minutes=now.minute if minute is None else minute,
            seconds=now.second if second is None else second,
        )
        return int(wall.replace(tzinfo=zone).timestamp())

    def get_date_parts(self, timestamp: float | None = None) -> DateParts:
        """Get the calendar breakdown of a timestamp in the target zone.

        Raises:
            InvalidTimezone: If the zone name is unknown
        """
        return DateParts.from_datetime(self._moment(timestamp))

    def local_time(self, timestamp: float | None = None) -> struct_time:
        """Get the localtime() breakdown of a timestamp in the target zone.

        tm_isdst, tm_zone and tm_gmtoff describe the target zone.

        Raises:
            InvalidTimezone: If the zone name is unknown
        """
        moment = self._moment(timestamp)
        offset = moment.utcoffset()
        return struct_time(
            moment.timetuple()[:9],
            {"tm_zone": moment.tzname(), "tm_gmtoff": int(offset.total_seconds())},
        )

    def format_locale_date(self, fmt: str, timestamp: float | None = None) -> str:
        """Format a timestamp with strftime() directives in the target zone.

        Month and day names follow the current LC_TIME locale.

        Raises:
            InvalidTimezone: If the zone name is unknown
        """
        return self._moment(timestamp).strftime(fmt)


def _current_timestamp() -> int:
    return int(time.time())
