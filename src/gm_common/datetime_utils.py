"""Clock helpers. Every timestamp the service stores is timezone-aware UTC."""

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def days_from_now(days: int, now: datetime | None = None) -> datetime:
    """``now`` (or the current time) shifted forward by whole days."""
    base = now if now is not None else utc_now()
    return base + timedelta(days=days)
