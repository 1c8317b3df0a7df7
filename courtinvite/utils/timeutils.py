# courtinvite/utils/timeutils.py
from datetime import datetime, timezone


def as_utc(value: datetime) -> datetime:
    """Aware UTC datetime; naive values (SQLite reads) are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
