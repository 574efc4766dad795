"""Unit tests for free-text date/time parsing.

All relative phrases resolve against Friday 2007-06-01 13:00:00 UTC.
"""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from tzshift.services.text_parser import add_months, parse_datetime_text

UTC = ZoneInfo("UTC")
NOW = datetime(2007, 6, 1, 13, 0, 0, tzinfo=UTC)


def at(*fields: int) -> datetime:
    return datetime(*fields, tzinfo=UTC)


class TestRelativePhrases:
    """Keywords, offsets and weekday moves."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("now", at(2007, 6, 1, 13, 0)),
            ("today", at(2007, 6, 1, 0, 0)),
            ("midnight", at(2007, 6, 1, 0, 0)),
            ("noon", at(2007, 6, 1, 12, 0)),
            ("tomorrow", at(2007, 6, 2, 0, 0)),
            ("yesterday", at(2007, 5, 31, 0, 0)),
            ("yesterday noon", at(2007, 5, 31, 12, 0)),
            ("noon tomorrow", at(2007, 6, 2, 12, 0)),
            ("TOMORROW", at(2007, 6, 2, 0, 0)),
        ],
    )
    def test_keywords(self, text, expected):
        """Test day keywords and clock keywords in either order."""
        assert parse_datetime_text(text, NOW) == expected

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("+1 day", at(2007, 6, 2, 13, 0)),
            ("+1 week 2 days", at(2007, 6, 10, 13, 0)),
            ("-90 minutes", at(2007, 6, 1, 11, 30)),
            ("3 hours ago", at(2007, 6, 1, 10, 0)),
            ("2 weeks ago", at(2007, 5, 18, 13, 0)),
            ("+30 secs", at(2007, 6, 1, 13, 0, 30)),
            ("1 fortnight", at(2007, 6, 15, 13, 0)),
            ("next month", at(2007, 7, 1, 13, 0)),
            ("last year", at(2006, 6, 1, 13, 0)),
            ("this week", at(2007, 6, 1, 13, 0)),
        ],
    )
    def test_offsets(self, text, expected):
        """Test numeric and worded offsets."""
        assert parse_datetime_text(text, NOW) == expected

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("friday", at(2007, 6, 1, 0, 0)),
            ("Sunday", at(2007, 6, 3, 0, 0)),
            ("mon", at(2007, 6, 4, 0, 0)),
            ("next monday", at(2007, 6, 4, 0, 0)),
            ("next friday", at(2007, 6, 8, 0, 0)),
            ("last friday", at(2007, 5, 25, 0, 0)),
            ("last saturday", at(2007, 5, 26, 0, 0)),
            ("this friday", at(2007, 6, 1, 0, 0)),
            ("monday noon", at(2007, 6, 4, 12, 0)),
        ],
    )
    def test_weekdays(self, text, expected):
        """Test bare, next, last and this weekday moves."""
        assert parse_datetime_text(text, NOW) == expected

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("first day of next month", at(2007, 7, 1, 13, 0)),
            ("last day of this month", at(2007, 6, 30, 13, 0)),
            ("last day of next month", at(2007, 7, 31, 13, 0)),
            ("first day of last month midnight", at(2007, 5, 1, 0, 0)),
        ],
    )
    def test_day_of_month(self, text, expected):
        """Test first/last day of a month."""
        assert parse_datetime_text(text, NOW) == expected


class TestAbsoluteDates:
    """Absolute dates and times, with and without modifiers."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("2007-06-01 08:00:00", at(2007, 6, 1, 8, 0)),
            ("2007-06-15", at(2007, 6, 15, 0, 0)),
            ("June 15 2007", at(2007, 6, 15, 0, 0)),
            ("June 15", at(2007, 6, 15, 0, 0)),
            ("14:30", at(2007, 6, 1, 14, 30)),
            ("tomorrow 14:30", at(2007, 6, 2, 14, 30)),
            ("2007-06-01 noon", at(2007, 6, 1, 12, 0)),
            ("2007-01-31 +1 month", at(2007, 3, 3, 0, 0)),
            ("2007-06-01 08:00:00 +1 day", at(2007, 6, 2, 8, 0)),
        ],
    )
    def test_wall_time_in_reference_zone(self, text, expected):
        """Test that zone-less text is read in the reference zone."""
        assert parse_datetime_text(text, NOW) == expected

    def test_zone_less_text_uses_reference_zone(self):
        """Test that wall time is interpreted in the zone of now."""
        now = NOW.astimezone(ZoneInfo("Etc/GMT+5"))

        result = parse_datetime_text("2007-06-01 08:00:00", now)

        assert result.timestamp() == NOW.timestamp()

    def test_explicit_utc_designator(self):
        """Test that a trailing Z overrides the reference zone."""
        now = NOW.astimezone(ZoneInfo("Etc/GMT+5"))

        result = parse_datetime_text("2007-06-01T08:00:00Z", now)

        assert result.timestamp() == at(2007, 6, 1, 8, 0).timestamp()

    def test_rfc_2822_with_offset(self):
        """Test an RFC 2822 date carrying its own offset and weekday."""
        result = parse_datetime_text("Fri, 01 Jun 2007 08:00:00 -0500", NOW)

        assert result.timestamp() == NOW.timestamp()

    def test_unix_timestamp(self):
        """Test the @seconds form."""
        assert parse_datetime_text("@1180702800", NOW) == NOW
        assert parse_datetime_text("@0", NOW) == datetime(1970, 1, 1, tzinfo=timezone.utc)


class TestUnparseable:
    """Inputs that yield None."""

    @pytest.mark.parametrize("text", ["not a date", "", "   ", "2007-02-30", "tomorrow banana"])
    def test_returns_none(self, text):
        """Test that uninterpretable text returns None instead of raising."""
        assert parse_datetime_text(text, NOW) is None

    def test_naive_reference_rejected(self):
        """Test that a naive reference time raises ValueError."""
        with pytest.raises(ValueError, match="timezone-aware"):
            parse_datetime_text("now", datetime(2007, 6, 1, 13, 0))


class TestAddMonths:
    """Month arithmetic with day overflow."""

    @pytest.mark.parametrize(
        "start,months,expected",
        [
            (datetime(2007, 1, 31), 1, datetime(2007, 3, 3)),
            (datetime(2008, 1, 31), 1, datetime(2008, 3, 2)),
            (datetime(2007, 3, 31), -1, datetime(2007, 3, 3)),
            (datetime(2007, 6, 15), 12, datetime(2008, 6, 15)),
            (datetime(2007, 1, 15), -1, datetime(2006, 12, 15)),
            (datetime(2007, 6, 15, 8, 30), 0, datetime(2007, 6, 15, 8, 30)),
        ],
    )
    def test_overflow(self, start, months, expected):
        """Test that overflowing days roll into the following month."""
        assert add_months(start, months) == expected
