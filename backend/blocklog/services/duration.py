"""Effective duration of a block at a given instant.

Resolved blocks report the duration frozen when they were resolved. Ongoing
blocks have no stored duration worth reading; their duration is the time
elapsed since ``started_at``. Callers take one ``now`` per request and pass it
to every call so rows aggregated together are measured against the same
instant.
"""
from datetime import datetime, timezone

from blocklog.models.block import BlockStatus


def as_utc(dt: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def elapsed_ms(start: datetime, end: datetime) -> int:
    delta = as_utc(end) - as_utc(start)
    return delta.days * 86_400_000 + delta.seconds * 1000 + delta.microseconds // 1000


def effective_duration(status: BlockStatus | str, started_at: datetime, duration: int | None, now: datetime) -> int:
    if BlockStatus(status) is BlockStatus.RESOLVED:
        return int(duration or 0)
    return max(0, elapsed_ms(started_at, now))


def mean_ms(total: int, count: int) -> int:
    """Arithmetic mean rounded half up to whole milliseconds."""
    if count <= 0:
        return 0
    return (2 * total + count) // (2 * count)
