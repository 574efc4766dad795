"""Free-text date/time parsing relative to a reference moment.

Understands the relative phrases people actually type ("tomorrow noon",
"+1 week 2 days", "3 hours ago", "next friday", "first day of next month")
on top of an optional absolute date/time, which is handed to dateutil.

Phrases are recognized and removed from the text first; whatever remains is
the absolute part. The result is then built in this order:

1. absolute date and time (date-only means midnight)
2. weekday moves ("friday", "next friday", "last friday")
3. month/year offsets, which overflow ("2007-01-31 +1 month" is March 3rd)
4. day/week and clock offsets
5. "first day of" / "last day of"

Anything that cannot be interpreted makes the whole parse return None.
"""

import calendar
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo

import structlog
from dateutil import parser as dateutil_parser

logger = structlog.get_logger()

WEEKDAYS = {
    "monday": 0,
    "mon": 0,
    "tuesday": 1,
    "tues": 1,
    "tue": 1,
    "wednesday": 2,
    "wed": 2,
    "thursday": 3,
    "thurs": 3,
    "thur": 3,
    "thu": 3,
    "friday": 4,
    "fri": 4,
    "saturday": 5,
    "sat": 5,
    "sunday": 6,
    "sun": 6,
}

# unit -> (accumulator, multiplier)
UNITS = {
    "sec": ("seconds", 1),
    "secs": ("seconds", 1),
    "second": ("seconds", 1),
    "seconds": ("seconds", 1),
    "min": ("seconds", 60),
    "mins": ("seconds", 60),
    "minute": ("seconds", 60),
    "minutes": ("seconds", 60),
    "hour": ("seconds", 3600),
    "hours": ("seconds", 3600),
    "day": ("days", 1),
    "days": ("days", 1),
    "week": ("days", 7),
    "weeks": ("days", 7),
    "fortnight": ("days", 14),
    "fortnights": ("days", 14),
    "month": ("months", 1),
    "months": ("months", 1),
    "year": ("months", 12),
    "years": ("months", 12),
}


def _alternation(words) -> str:
    return "|".join(sorted(words, key=len, reverse=True))


_UNIT_RE = _alternation(UNITS)
_WEEKDAY_RE = _alternation(WEEKDAYS)

_TIMESTAMP = re.compile(r"@(?P<seconds>-?\d+)")
_DAY_OF = re.compile(r"\b(?P<which>first|last)\s+day\s+of\b", re.IGNORECASE)
_RELATIVE_WORD = re.compile(
    rf"\b(?P<word>next|last|previous|this)\s+"
    rf"(?:(?P<unit>{_UNIT_RE})|(?P<weekday>{_WEEKDAY_RE}))\b",
    re.IGNORECASE,
)
_NUMERIC = re.compile(
    rf"(?<![\w:.\-])(?P<sign>[+-])?\s*(?P<number>\d+)\s*(?P<unit>{_UNIT_RE})\b", re.IGNORECASE
)
_AGO = re.compile(r"\bago\b", re.IGNORECASE)
_KEYWORD = re.compile(r"\b(?P<word>now|today|midnight|noon|tomorrow|yesterday)\b", re.IGNORECASE)
_BARE_WEEKDAY = re.compile(rf"\b(?P<weekday>{_WEEKDAY_RE})\b\.?", re.IGNORECASE)

_WORD_STEP = {"next": 1, "last": -1, "previous": -1, "this": 0}

# Two defaults that differ in every field: a field that comes back equal
# under both was present in the text.
_PROBE_A = datetime(2000, 1, 1, 0, 0, 0)
_PROBE_B = datetime(2004, 3, 3, 1, 1, 1)


@dataclass
class _Relative:
    """Relative adjustments collected from the text."""

    months: int = 0
    days: int = 0
    seconds: int = 0
    day_shift: int = 0
    weekday: int | None = None
    weekday_step: int = 0
    reset_time: bool = False
    clock: tuple[int, int, int] | None = None
    day_of: str | None = None

    def consume(self, phrase: str) -> str:
        """Collect the relative phrases of ``phrase`` and return what is left."""
        phrase = _DAY_OF.sub(self._on_day_of, phrase)
        phrase = _RELATIVE_WORD.sub(self._on_relative_word, phrase)
        phrase = _NUMERIC.sub(self._on_numeric, phrase)
        if _AGO.search(phrase):
            phrase = _AGO.sub(" ", phrase)
            self.months, self.days, self.seconds = -self.months, -self.days, -self.seconds
        phrase = _KEYWORD.sub(self._on_keyword, phrase)
        phrase = _BARE_WEEKDAY.sub(self._on_weekday, phrase)
        return " ".join(phrase.split()).strip(" ,")

    def _add(self, unit: str, amount: int) -> None:
        accumulator, multiplier = UNITS[unit]
        setattr(self, accumulator, getattr(self, accumulator) + amount * multiplier)

    def _on_day_of(self, match: re.Match) -> str:
        self.day_of = match["which"].lower()
        return " "

    def _on_relative_word(self, match: re.Match) -> str:
        step = _WORD_STEP[match["word"].lower()]
        if match["unit"]:
            self._add(match["unit"].lower(), step)
        else:
            self.weekday = WEEKDAYS[match["weekday"].lower()]
            self.weekday_step = step
            self.reset_time = True
        return " "

    def _on_numeric(self, match: re.Match) -> str:
        amount = int(match["number"])
        if match["sign"] == "-":
            amount = -amount
        self._add(match["unit"].lower(), amount)
        return " "

    def _on_keyword(self, match: re.Match) -> str:
        word = match["word"].lower()
        if word == "noon":
            self.clock = (12, 0, 0)
        elif word == "tomorrow":
            self.day_shift += 1
            self.reset_time = True
        elif word == "yesterday":
            self.day_shift -= 1
            self.reset_time = True
        elif word in ("today", "midnight"):
            self.reset_time = True
        return " "

    def _on_weekday(self, match: re.Match) -> str:
        self.weekday = WEEKDAYS[match["weekday"].lower()]
        self.weekday_step = 0
        self.reset_time = True
        return " "


@dataclass
class _Absolute:
    """Fields an absolute date/time string actually specified."""

    year: int | None
    month: int | None
    day: int | None
    time: tuple[int, int, int, int] | None
    tzinfo: tzinfo | None

    @property
    def has_date(self) -> bool:
        return self.year is not None or self.month is not None or self.day is not None


def _parse_absolute(text: str) -> _Absolute:
    """Parse the absolute part of a phrase.

    Raises:
        ValueError: If dateutil cannot interpret the text
        OverflowError: If a parsed value is out of range
    """
    first = dateutil_parser.parse(text, default=_PROBE_A)
    second = dateutil_parser.parse(text, default=_PROBE_B)

    def given(attr: str) -> int | None:
        value = getattr(first, attr)
        return value if value == getattr(second, attr) else None

    time_fields = None
    if first.hour == second.hour:
        time_fields = (
            first.hour,
            first.minute if first.minute == second.minute else 0,
            first.second if first.second == second.second else 0,
            first.microsecond,
        )

    return _Absolute(
        year=given("year"),
        month=given("month"),
        day=given("day"),
        time=time_fields,
        tzinfo=first.tzinfo,
    )


def add_months(wall: datetime, months: int) -> datetime:
    """Shift by whole months, letting day overflow roll into the next month."""
    if not months:
        return wall
    year, month_index = divmod(wall.year * 12 + wall.month - 1 + months, 12)
    return wall.replace(year=year, month=month_index + 1, day=1) + timedelta(days=wall.day - 1)


def _build(wall: datetime, absolute: _Absolute | None, relative: _Relative) -> datetime:
    if absolute is not None and absolute.has_date:
        month = absolute.month if absolute.month is not None else wall.month
        if absolute.day is not None:
            day = absolute.day
        elif absolute.month is not None:
            day = 1
        else:
            day = wall.day
        wall = wall.replace(
            year=absolute.year if absolute.year is not None else wall.year,
            month=month,
            day=day,
        )

    if absolute is not None and absolute.time is not None:
        hour, minute, second, microsecond = absolute.time
        wall = wall.replace(hour=hour, minute=minute, second=second, microsecond=microsecond)
    elif relative.clock is not None:
        hour, minute, second = relative.clock
        wall = wall.replace(hour=hour, minute=minute, second=second, microsecond=0)
    elif relative.reset_time or (absolute is not None and absolute.has_date):
        wall = wall.replace(hour=0, minute=0, second=0, microsecond=0)

    if relative.weekday is not None:
        delta = (relative.weekday - wall.weekday()) % 7
        if relative.weekday_step > 0 and delta == 0:
            delta = 7
        elif relative.weekday_step < 0:
            delta = delta - 7 if delta else -7
        wall += timedelta(days=delta)

    wall = add_months(wall, relative.months)
    wall += timedelta(days=relative.days + relative.day_shift, seconds=relative.seconds)

    if relative.day_of == "first":
        wall = wall.replace(day=1)
    elif relative.day_of == "last":
        wall = wall.replace(day=calendar.monthrange(wall.year, wall.month)[1])

    return wall


def parse_datetime_text(text: str, now: datetime) -> datetime | None:
    """Parse a free-text date/time description.

    Args:
        text: Description such as "2007-06-01 08:00:00", "next monday",
            "+2 days 4 hours", "@1180702800"
        now: Aware datetime the description is relative to. Its timezone is
            the zone the text is interpreted in unless the text names an
            offset of its own.

    Returns:
        Aware datetime, or None if the text cannot be interpreted

    Example:
        >>> now = datetime(2007, 6, 1, 13, 0, tzinfo=ZoneInfo("UTC"))
        >>> parse_datetime_text("tomorrow noon", now)
        datetime.datetime(2007, 6, 2, 12, 0, tzinfo=zoneinfo.ZoneInfo(key='UTC'))
    """
    if now.tzinfo is None:
        raise ValueError("parse_datetime_text() requires a timezone-aware reference time")

    phrase = " ".join(text.split())
    if not phrase:
        return None

    stamp = _TIMESTAMP.fullmatch(phrase)
    if stamp:
        try:
            return datetime.fromtimestamp(int(stamp["seconds"]), tz=now.tzinfo)
        except (OverflowError, OSError, ValueError):
            logger.debug("text_parser.timestamp_out_of_range", text=text)
            return None

    relative = _Relative()
    remainder = relative.consume(phrase)

    try:
        absolute = _parse_absolute(remainder) if remainder else None
        zone = absolute.tzinfo if absolute is not None and absolute.tzinfo else now.tzinfo
        wall = now.astimezone(zone).replace(tzinfo=None)
        result = _build(wall, absolute, relative)
    except (ValueError, OverflowError) as e:
        logger.debug("text_parser.unparseable", text=text, error=str(e))
        return None

    return result.replace(tzinfo=zone)
