"""Date manipulation utilities"""

from datetime import date, datetime, timedelta, timezone
from typing import List


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes (e.g. read back from SQLite) as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def generate_date_range(start: date, end: date) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days + 1
    return [start + timedelta(days=i) for i in range(days)]
