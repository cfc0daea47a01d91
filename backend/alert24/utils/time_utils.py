"""Timestamp helpers.

SQLite returns naive datetimes even for timezone-aware columns, and schedule
configs carry ISO strings, so everything is normalized to aware UTC here.
"""
from datetime import datetime, timezone, tzinfo
from typing import Optional, Union


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime, assume: tzinfo = timezone.utc) -> datetime:
    """Attach `assume` to naive datetimes and convert to UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=assume)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Union[str, datetime, None], assume: tzinfo = timezone.utc) -> Optional[datetime]:
    """Parse an ISO-8601 string or datetime into aware UTC.

    Raises ValueError for strings that are not ISO-8601.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_utc(value, assume)
    if not isinstance(value, str):
        raise ValueError(f"Unsupported timestamp value: {value!r}")
    text = value.strip()
    # fromisoformat() only learned about "Z" in 3.11
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return as_utc(datetime.fromisoformat(text), assume)
