"""
Timezone-aware datetime helpers.
- Store and compute instants in UTC in the DB.
- Attendance rules run on the campus wall clock (CAMPUS_TIMEZONE); there is
  exactly one campus timezone and no per-user normalization.
"""
from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

UTC = timezone.utc


def now_utc() -> datetime:
    """Current time in UTC (timezone-aware). Use for checked_in_at, created_at, etc."""
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """If dt is naive, treat as UTC and return timezone-aware UTC. If already aware, convert to UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def campus_tz() -> ZoneInfo:
    from portal.core.config import settings
    return ZoneInfo(settings.CAMPUS_TIMEZONE)


def to_campus_local(dt: Optional[datetime]) -> Optional[datetime]:
    """Convert to the campus wall clock. Naive datetimes are treated as UTC."""
    if dt is None:
        return None
    return ensure_utc(dt).astimezone(campus_tz())


def campus_today(utc_now: Optional[datetime] = None) -> date:
    """Calendar date on the campus wall clock for the given UTC instant (default now)."""
    return to_campus_local(utc_now or now_utc()).date()


def iso_campus(dt: Optional[datetime]) -> Optional[str]:
    """ISO-8601 on the campus wall clock with its UTC offset. Used for API response datetimes."""
    if dt is None:
        return None
    return to_campus_local(dt).isoformat()


def iso_8601_utc(dt: Optional[datetime]) -> Optional[str]:
    """ISO-8601 with Z for UTC."""
    if dt is None:
        return None
    s = ensure_utc(dt).isoformat()
    if s.endswith("+00:00"):
        s = s[:-6] + "Z"
    return s
