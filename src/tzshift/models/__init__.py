"""Value objects returned by timezone operations."""

from tzshift.models.date_parts import DateParts

__all__ = [
    "DateParts",
]
