"""PHP date()-style formatting for timezone-aware datetimes.

Each format character expands to one field of the moment being formatted;
a backslash makes the next character literal and anything unrecognized is
copied through unchanged.

    >>> moment = datetime(2007, 6, 1, 8, 0, tzinfo=ZoneInfo("Etc/GMT+5"))
    >>> format_php_date("D, d M Y G:i T", moment)
    'Fri, 01 Jun 2007 8:00 -05'
"""

import calendar
from datetime import datetime, timedelta
from typing import Callable

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def _utc_offset(moment: datetime) -> timedelta:
    offset = moment.utcoffset()
    return offset if offset is not None else timedelta(0)


def _format_offset(moment: datetime, separator: str) -> str:
    total = int(_utc_offset(moment).total_seconds())
    sign = "-" if total < 0 else "+"
    hours, remainder = divmod(abs(total), 3600)
    return f"{sign}{hours:02d}{separator}{remainder // 60:02d}"


def _ordinal_suffix(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def _swatch_beat(moment: datetime) -> str:
    # Biel Mean Time is UTC+1
    seconds = (int(moment.timestamp()) + 3600) % 86400
    return f"{seconds * 10 // 864 % 1000:03d}"


def _zone_identifier(moment: datetime) -> str:
    key = getattr(moment.tzinfo, "key", None)
    if key:
        return key
    return moment.tzname() or "UTC"


def _is_dst(moment: datetime) -> bool:
    dst = moment.dst()
    return bool(dst)


def _year(moment: datetime) -> str:
    return f"{moment.year:04d}"


def _hour12(moment: datetime) -> int:
    return moment.hour % 12 or 12


_FORMATTERS: dict[str, Callable[[datetime], str]] = {
    # Day
    "d": lambda m: f"{m.day:02d}",
    "D": lambda m: DAY_NAMES[m.weekday()][:3],
    "j": lambda m: str(m.day),
    "l": lambda m: DAY_NAMES[m.weekday()],
    "N": lambda m: str(m.isoweekday()),
    "S": lambda m: _ordinal_suffix(m.day),
    "w": lambda m: str(m.isoweekday() % 7),
    "z": lambda m: str(m.timetuple().tm_yday - 1),
    # Week
    "W": lambda m: f"{m.isocalendar()[1]:02d}",
    # Month
    "F": lambda m: MONTH_NAMES[m.month - 1],
    "m": lambda m: f"{m.month:02d}",
    "M": lambda m: MONTH_NAMES[m.month - 1][:3],
    "n": lambda m: str(m.month),
    "t": lambda m: str(calendar.monthrange(m.year, m.month)[1]),
    # Year
    "L": lambda m: "1" if calendar.isleap(m.year) else "0",
    "o": lambda m: str(m.isocalendar()[0]),
    "Y": _year,
    "y": lambda m: f"{m.year % 100:02d}",
    # Time
    "a": lambda m: "am" if m.hour < 12 else "pm",
    "A": lambda m: "AM" if m.hour < 12 else "PM",
    "B": _swatch_beat,
    "g": lambda m: str(_hour12(m)),
    "G": lambda m: str(m.hour),
    "h": lambda m: f"{_hour12(m):02d}",
    "H": lambda m: f"{m.hour:02d}",
    "i": lambda m: f"{m.minute:02d}",
    "s": lambda m: f"{m.second:02d}",
    "u": lambda m: f"{m.microsecond:06d}",
    "v": lambda m: f"{m.microsecond // 1000:03d}",
    # Timezone
    "e": _zone_identifier,
    "I": lambda m: "1" if _is_dst(m) else "0",
    "O": lambda m: _format_offset(m, ""),
    "P": lambda m: _format_offset(m, ":"),
    "p": lambda m: "Z" if _utc_offset(m) == timedelta(0) else _format_offset(m, ":"),
    "T": lambda m: m.tzname() or _format_offset(m, ":"),
    "Z": lambda m: str(int(_utc_offset(m).total_seconds())),
    # Full date/time
    "c": lambda m: format_php_date("Y-m-d\\TH:i:sP", m),
    "r": lambda m: format_php_date("D, d M Y H:i:s O", m),
    "U": lambda m: str(int(m.timestamp())),
}


def format_php_date(fmt: str, moment: datetime) -> str:
    """Format a timezone-aware datetime with PHP date() format characters.

    Args:
        fmt: Format string (e.g., "Y-m-d H:i:s", "G", "c")
        moment: Aware datetime, already converted to the zone to display

    Returns:
        Formatted string

    Raises:
        ValueError: If moment is naive
    """
    if moment.tzinfo is None:
        raise ValueError("format_php_date() requires a timezone-aware datetime")

    parts: list[str] = []
    chars = iter(fmt)
    for char in chars:
        if char == "\\":
            # Escaped character is emitted as-is; a trailing backslash is kept
            parts.append(next(chars, "\\"))
            continue
        formatter = _FORMATTERS.get(char)
        parts.append(formatter(moment) if formatter else char)
    return "".join(parts)
