"""UTC datetime utilities."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime | str) -> datetime:
    """Normalize a timestamp read back from the driver to aware UTC.

    asyncpg returns aware datetimes; SQLite hands back naive datetimes or
    ISO strings, which are stored in UTC.
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
