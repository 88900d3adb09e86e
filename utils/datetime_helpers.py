"""
Datetime utilities shared by the shift lifecycle, analytics and serializers.

All timestamps are stored in UTC. Some databases (SQLite) hand them back
naive, so anything doing arithmetic on stored values goes through
ensure_utc first.
"""

import os
from datetime import date, datetime
from datetime import time as datetime_time
from datetime import timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

load_dotenv()

# Calendar days for analytics are counted in the facility's local time
FACILITY_TIMEZONE = os.getenv("FACILITY_TIMEZONE", "America/New_York")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC, convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_utc_datetime(dt: Optional[datetime]) -> Optional[str]:
    """
    Format a datetime object to an ISO 8601 string with 'Z' suffix.

    If the datetime is naive, it is assumed to be in UTC and is made aware.
    If it is timezone-aware, it is converted to UTC.

    Args:
        dt: A datetime object or None

    Returns:
        An ISO 8601 formatted string with 'Z' suffix, or None if the input is None.
    """
    if dt is None:
        return None

    iso_string = ensure_utc(dt).isoformat()

    if iso_string.endswith("+00:00"):
        return iso_string.replace("+00:00", "Z")

    return iso_string


def local_day_bounds(day: date, tz: str = FACILITY_TIMEZONE) -> Tuple[datetime, datetime]:
    """
    Get the first and last instant of a calendar day in the given timezone.

    Args:
        day: The local calendar date
        tz: IANA timezone string

    Returns:
        (start, end) as UTC datetimes, both inclusive
    """
    target_tz = ZoneInfo(tz)
    local_start = datetime.combine(day, datetime_time.min, tzinfo=target_tz)
    local_end = datetime.combine(day, datetime_time.max, tzinfo=target_tz)
    return local_start.astimezone(timezone.utc), local_end.astimezone(timezone.utc)


def local_today(tz: str = FACILITY_TIMEZONE) -> date:
    return utc_now().astimezone(ZoneInfo(tz)).date()
