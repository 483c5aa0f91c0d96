"""Date helpers shared by the services.

MongoDB has no pure date type, so calendar dates are stored as naive UTC
datetimes at midnight and converted back when documents are read.
"""
from datetime import date, datetime, timezone
from typing import Callable, Optional, Union

Clock = Callable[[], date]


def utc_now() -> datetime:
    """Current time as a naive UTC datetime (what Motor returns by default)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def utc_today() -> date:
    """
    Current calendar date on the server's UTC clock.

    This is the default clock injected into services that need "today".
    """
    return utc_now().date()


def to_mongo_date(value: Optional[date]) -> Optional[datetime]:
    """
    Convert a calendar date to its stored midnight datetime.

    Examples:
        >>> to_mongo_date(date(2025, 1, 13))
        datetime.datetime(2025, 1, 13, 0, 0)
        >>> to_mongo_date(None) is None
        True
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        value = value.date()
    return datetime.combine(value, datetime.min.time())


def from_mongo_date(value: Union[date, datetime, None]) -> Optional[date]:
    """Convert a stored datetime back to a calendar date."""
    if isinstance(value, datetime):
        return value.date()
    return value
