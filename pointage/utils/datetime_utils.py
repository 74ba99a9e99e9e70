"""
Timezone-aware datetime helpers.
- Store and compute in UTC in DB.
- Work dates and API responses use the configured local zone (settings.WORK_TZ).
"""
from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from pointage.core.config import settings

UTC = timezone.utc


def local_zone() -> ZoneInfo:
    return settings.zone


def now_utc() -> datetime:
    """Current time in UTC (timezone-aware). Use for entry_time, exit_time, validated_at."""
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """If dt is naive, treat as UTC and return timezone-aware UTC. If already aware, convert to UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_local(dt: Optional[datetime]) -> Optional[datetime]:
    """Convert to the local zone. Naive datetimes are treated as UTC (SQLite drops tzinfo)."""
    if dt is None:
        return None
    return ensure_utc(dt).astimezone(local_zone())


def iso_local(dt: Optional[datetime]) -> Optional[str]:
    """Serialize as ISO-8601 in the local zone for API responses."""
    if dt is None:
        return None
    return to_local(dt).isoformat()


def get_work_date(utc_now: Optional[datetime] = None) -> date:
    """Return the work date (calendar day in the local zone) for the given time (default now)."""
    now = utc_now or now_utc()
    return ensure_utc(now).astimezone(local_zone()).date()
