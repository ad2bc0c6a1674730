"""
Timestamp helpers.

All persisted and returned timestamps are ISO-8601 UTC with millisecond
precision and a trailing "Z" (2024-01-01T12:00:00.000Z).
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_timestamp(moment: datetime | None = None) -> str:
    """Format a moment (default: now) as an ISO-8601 UTC string ending in Z."""
    moment = (moment or utc_now()).astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def utc_date(moment: datetime | None = None) -> str:
    """YYYY-MM-DD part of a UTC moment, used for blob key partitioning."""
    return (moment or utc_now()).astimezone(timezone.utc).strftime("%Y-%m-%d")
