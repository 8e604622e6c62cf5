"""
Timezone-aware datetime helpers.
- Store and compute instants in UTC.
- Work dates, required check-in/out times and monthly windows use the business time zone.
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from attendance_engine.core.config import settings

UTC = timezone.utc


def business_tz() -> ZoneInfo:
    """The configured office time zone (BUSINESS_TIMEZONE)."""
    return ZoneInfo(settings.BUSINESS_TIMEZONE)


def now_utc() -> datetime:
    """Current time in UTC (timezone-aware)."""
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """If dt is naive, treat as UTC and return timezone-aware UTC. If already aware, convert to UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    else:
        dt = dt.astimezone(UTC)
    return dt


def to_local(dt: Optional[datetime]) -> Optional[datetime]:
    """Convert to the business time zone. Naive datetimes are treated as UTC before converting."""
    if dt is None:
        return None
    return ensure_utc(dt).astimezone(business_tz())


def local_date(dt: datetime) -> date:
    """Calendar date of an instant in the business time zone."""
    return to_local(dt).date()


def parse_hhmm(value: str) -> time:
    """Parse a 24h "HH:MM" time of day. Raises ValueError on malformed input."""
    hours, sep, minutes = value.partition(":")
    if not sep or len(hours) != 2 or len(minutes) != 2 or not (hours + minutes).isdigit():
        raise ValueError(f"Time must be in HH:MM format, got {value!r}")
    return time(int(hours), int(minutes))


def local_instant(day: date, hhmm: str) -> datetime:
    """UTC instant of a local "HH:MM" wall-clock time on the given day."""
    return datetime.combine(day, parse_hhmm(hhmm), tzinfo=business_tz()).astimezone(UTC)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last calendar date of a month."""
    first = date(year, month, 1)
    next_first = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return first, next_first - timedelta(days=1)


def iso_local(dt: Optional[datetime]) -> Optional[str]:
    """Serialize as ISO-8601 with the business time zone offset. Use for API response datetime fields."""
    if dt is None:
        return None
    return to_local(dt).isoformat()
