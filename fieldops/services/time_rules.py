"""
Time rules service.
Parses loosely-typed stored timestamps and computes local day ranges.
"""
from datetime import date, datetime, time, timedelta
from typing import Any, Optional, Tuple
import pytz
from ..config import settings


def _timezone(timezone_str: Optional[str]):
    try:
        return pytz.timezone(timezone_str or settings.tz_default)
    except pytz.UnknownTimeZoneError:
        return pytz.UTC


def ensure_aware(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=pytz.UTC)
    return dt


def localize(dt: datetime, timezone_str: Optional[str] = None) -> datetime:
    """Read a naive datetime (e.g. a date-only request value) as local time."""
    if dt.tzinfo is None:
        return _timezone(timezone_str).localize(dt)
    return dt


def local_midnight(date_val: date, timezone_str: Optional[str] = None) -> datetime:
    """Start of the given local day as a timezone-aware datetime."""
    tz = _timezone(timezone_str)
    return tz.localize(datetime.combine(date_val, time(0, 0)))


def parse_date_string(value: str, timezone_str: Optional[str] = None) -> Optional[datetime]:
    """
    Parse a stored date string.

    Accepts "YYYY-MM-DD" (local midnight in the given timezone) and full
    ISO-8601 datetimes (naive values are UTC). Returns None when unparseable.
    """
    value = (value or "").strip()
    if not value:
        return None
    if len(value) == 10:
        try:
            return local_midnight(date.fromisoformat(value), timezone_str)
        except ValueError:
            return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return ensure_aware(parsed)


def parse_timestamp(value: Any, timezone_str: Optional[str] = None) -> Optional[datetime]:
    """Coerce a stored timestamp (datetime, date or string) to an aware datetime."""
    if isinstance(value, datetime):
        return ensure_aware(value)
    if isinstance(value, date):
        return local_midnight(value, timezone_str)
    if isinstance(value, str):
        return parse_date_string(value, timezone_str)
    return None


def local_day_bounds(now: datetime, timezone_str: Optional[str] = None) -> Tuple[datetime, datetime]:
    """
    [start, end) of the local day containing `now`.

    Args:
        now: Reference instant (naive values are UTC)
        timezone_str: Timezone used to decide where the day starts

    Returns:
        Tuple of timezone-aware datetimes
    """
    tz = _timezone(timezone_str)
    local_now = ensure_aware(now).astimezone(tz)
    start = local_midnight(local_now.date(), timezone_str)
    end = local_midnight(local_now.date() + timedelta(days=1), timezone_str)
    return start, end


def local_date_string(now: datetime, timezone_str: Optional[str] = None) -> str:
    """YYYY-MM-DD of `now` in the given timezone."""
    return ensure_aware(now).astimezone(_timezone(timezone_str)).strftime("%Y-%m-%d")


def format_short_time(dt: datetime, timezone_str: Optional[str] = None) -> str:
    """Short local time display, e.g. "9:00 AM"."""
    local = ensure_aware(dt).astimezone(_timezone(timezone_str))
    return local.strftime("%I:%M %p").lstrip("0")


def hours_between(start: datetime, end: datetime) -> float:
    return (ensure_aware(end) - ensure_aware(start)).total_seconds() / 3600
