from datetime import datetime, timezone


def to_utc_naive(value: datetime | None) -> datetime | None:
    """Normalize to naive UTC, the form timestamps are stored in."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def utcnow() -> datetime:
    """Current UTC time.

    Wrapped so tests can patch it.
    """
    return datetime.utcnow()
