# disruption_engine/clock.py
"""Time helpers. The engine works in naive UTC datetimes."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current UTC time without tzinfo."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Normalize an aware datetime to naive UTC; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def minutes_between(later: datetime, earlier: datetime) -> int:
    """Whole minutes from `earlier` to `later`, truncated toward zero."""
    return int((later - earlier).total_seconds() / 60)
