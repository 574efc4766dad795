"""tzshift - date/time operations evaluated in another timezone.

Public API is re-exported here:

    from tzshift import TimezoneContext

    TimezoneContext(-5).format_date("G", 1180702800)  # '8'
"""

from tzshift.core.timezone import default_timezone, get_default_timezone, set_default_timezone
from tzshift.models.date_parts import DateParts
from tzshift.services.exceptions import InvalidTimezone, TimezoneError
from tzshift.services.timezone_context import TimezoneContext

__all__ = [
    "TimezoneContext",
    "DateParts",
    "TimezoneError",
    "InvalidTimezone",
    "default_timezone",
    "get_default_timezone",
    "set_default_timezone",
]
