"""
Status derivation from a user's attendance history.

Pure functions: they read work_date, status, entry_time and exit_time from
the records they are given and never touch the store.
"""
from datetime import date, timedelta
from typing import Iterable, List, Optional

from pointage.models.attendance import AttendanceStatus
from pointage.utils.datetime_utils import ensure_utc

HISTORY_DAYS = 7


def today_record(records: Iterable, today: date):
    """Return the record whose work_date is today, or None."""
    return next((r for r in records if r.work_date == today), None)


def derive_today_status(records: Iterable, today: date) -> AttendanceStatus:
    """
    Today's status: NOT_SCANNED when there is no record for today,
    otherwise the stored status of today's record.
    """
    record = today_record(records, today)
    if record is None:
        return AttendanceStatus.NOT_SCANNED
    return AttendanceStatus(record.status)


def is_currently_checked_in(records: Iterable, today: date) -> bool:
    """True iff today's record exists and has no exit time."""
    record = today_record(records, today)
    return record is not None and record.exit_time is None


def work_duration(record) -> Optional[timedelta]:
    """Time between entry and exit, or None while the day is open."""
    if record.entry_time is None or record.exit_time is None:
        return None
    return ensure_utc(record.exit_time) - ensure_utc(record.entry_time)


def format_duration(delta: Optional[timedelta]) -> Optional[str]:
    """Format a duration as HH:MM (minutes truncated)."""
    if delta is None:
        return None
    total_minutes = int(delta.total_seconds()) // 60
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours:02d}:{minutes:02d}"


def week_start(today: date) -> date:
    """First day of the current week; weeks start on Sunday."""
    return today - timedelta(days=(today.weekday() + 1) % 7)


def days_present_this_week(records: Iterable, today: date) -> int:
    """Number of days since the start of the week with an entry recorded."""
    start = week_start(today)
    return sum(
        1 for r in records
        if start <= r.work_date <= today and r.entry_time is not None
    )


def recent_days(records: Iterable, limit: int = HISTORY_DAYS) -> List:
    """Most recent records first, at most `limit` days."""
    return sorted(records, key=lambda r: r.work_date, reverse=True)[:limit]
