"""
Utility functions for date and time handling.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional


def get_utc_now() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


def ensure_aware(dt: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes coming back from the database as UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def expiry_from(start: datetime, seconds: int) -> datetime:
    return start + timedelta(seconds=seconds)
