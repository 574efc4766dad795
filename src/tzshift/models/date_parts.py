"""DateParts - calendar breakdown of a timestamp in a given zone."""

from dataclasses import asdict, dataclass
from datetime import datetime

from tzshift.services.date_format import DAY_NAMES, MONTH_NAMES


@dataclass(frozen=True)
class DateParts:
    """Calendar fields of one instant as observed in one timezone."""

    seconds: int
    minutes: int
    hours: int
    mday: int  # Day of month, 1-31
    wday: int  # Day of week, 0 (Sunday) - 6 (Saturday)
    mon: int  # Month, 1-12
    year: int
    yday: int  # Day of year, 0-365
    weekday: str  # "Sunday" - "Saturday"
    month: str  # "January" - "December"
    timestamp: int  # Unix timestamp the fields describe
    is_dst: bool

    @classmethod
    def from_datetime(cls, moment: datetime) -> "DateParts":
        """Build from an aware datetime already converted to the target zone."""
        return cls(
            seconds=moment.second,
            minutes=moment.minute,
            hours=moment.hour,
            mday=moment.day,
            wday=moment.isoweekday() % 7,
            mon=moment.month,
            year=moment.year,
            yday=moment.timetuple().tm_yday - 1,
            weekday=DAY_NAMES[moment.weekday()],
            month=MONTH_NAMES[moment.month - 1],
            timestamp=int(moment.timestamp()),
            is_dst=bool(moment.dst()),
        )

    def to_dict(self) -> dict:
        return asdict(self)
