"""UTC helpers. SQLite hands back naive datetimes, Postgres aware ones."""

from datetime import UTC, datetime


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def days_until(due: datetime, now: datetime | None = None) -> int:
    """Whole calendar days from today to ``due`` (negative when overdue)."""
    today = as_utc(now or utcnow()).date()
    return (as_utc(due).date() - today).days
