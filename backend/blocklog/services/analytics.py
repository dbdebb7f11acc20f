"""Time-based rollups over a user's blocks.

Rows are fetched with a narrow column set, filtered in SQL by owner and time
window, then measured in process with :func:`effective_duration` against one
``now`` per call. Month and day buckets both come from :func:`_bucket_day`, so
the dashboard, monthly, daily and calendar views always agree on which bucket
a block falls in and how long it has lasted.
"""
import uuid
from collections import OrderedDict
from datetime import date, datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from blocklog.models.block import Block, BlockStatus, block_tags, utc_now
from blocklog.models.tag import Tag
from blocklog.services.duration import as_utc, effective_duration, mean_ms


def _bucket_day(started_at: datetime) -> date:
    return as_utc(started_at).date()


def _year_window(year: int) -> tuple[datetime, datetime]:
    return datetime(year, 1, 1, tzinfo=timezone.utc), datetime(year + 1, 1, 1, tzinfo=timezone.utc)


def _month_window(year: int, month: int) -> tuple[datetime, datetime]:
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    if month == 12:
        return start, datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    return start, datetime(year, month + 1, 1, tzinfo=timezone.utc)


def _measured_rows(db: Session, user_id: uuid.UUID, now: datetime, window: tuple[datetime, datetime] | None = None):
    stmt = select(Block.id, Block.title, Block.status, Block.started_at, Block.duration).where(Block.user_id == user_id)
    if window is not None:
        stmt = stmt.where(Block.started_at >= window[0], Block.started_at < window[1])
        stmt = stmt.order_by(Block.started_at.asc(), Block.created_at.asc())
    else:
        stmt = stmt.order_by(Block.created_at.asc())

    for row in db.execute(stmt):
        yield row, effective_duration(row.status, row.started_at, row.duration, now)


def _daily_rows(db: Session, user_id: uuid.UUID, window: tuple[datetime, datetime], now: datetime) -> list[dict]:
    days: "OrderedDict[date, dict]" = OrderedDict()
    for row, duration in _measured_rows(db, user_id, now, window):
        key = _bucket_day(row.started_at)
        bucket = days.setdefault(key, {"date": key.isoformat(), "total_blocks": 0, "block_titles": [], "total_duration": 0})
        bucket["total_blocks"] += 1
        bucket["block_titles"].append(row.title)
        bucket["total_duration"] += duration
    return list(days.values())


def dashboard(db: Session, user_id: uuid.UUID, now: datetime | None = None) -> dict:
    now = now or utc_now()

    total = ongoing = resolved = 0
    total_duration = 0
    longest = None
    for row, duration in _measured_rows(db, user_id, now):
        total += 1
        if BlockStatus(row.status) is BlockStatus.ONGOING:
            ongoing += 1
        else:
            resolved += 1
        total_duration += duration
        # strictly greater keeps the earliest row on ties
        if longest is None or duration > longest["duration"]:
            longest = {"id": str(row.id), "title": row.title, "duration": duration}

    return {
        "total_blocks": total,
        "ongoing_blocks": ongoing,
        "resolved_blocks": resolved,
        "total_time_blocked": total_duration,
        "average_block_time": mean_ms(total_duration, total),
        "longest_block": longest,
    }


def monthly(db: Session, user_id: uuid.UUID, year: int, now: datetime | None = None) -> list[dict]:
    now = now or utc_now()

    months: dict[int, dict] = {}
    for row, duration in _measured_rows(db, user_id, now, _year_window(year)):
        key = _bucket_day(row.started_at)
        bucket = months.setdefault(key.month, {"year": key.year, "month": key.month, "total_blocks": 0, "total_duration": 0})
        bucket["total_blocks"] += 1
        bucket["total_duration"] += duration

    result = []
    for month in sorted(months):
        bucket = months[month]
        bucket["average_duration"] = mean_ms(bucket["total_duration"], bucket["total_blocks"])
        result.append(bucket)
    return result


def daily(db: Session, user_id: uuid.UUID, year: int, month: int, now: datetime | None = None) -> list[dict]:
    return _daily_rows(db, user_id, _month_window(year, month), now or utc_now())


def calendar(db: Session, user_id: uuid.UUID, year: int, now: datetime | None = None) -> list[dict]:
    return _daily_rows(db, user_id, _year_window(year), now or utc_now())


def tag_stats(db: Session, user_id: uuid.UUID, now: datetime | None = None) -> list[dict]:
    now = now or utc_now()

    tags = db.execute(select(Tag).where(Tag.user_id == user_id)).scalars().all()
    stats = {
        tag.id: {
            "tag_id": str(tag.id),
            "tag_name": tag.name,
            "tag_color": tag.color,
            "total_blocks": 0,
            "total_duration": 0,
        }
        for tag in tags
    }

    stmt = (
        select(block_tags.c.tag_id, Block.status, Block.started_at, Block.duration)
        .join(Block, Block.id == block_tags.c.block_id)
        .where(Block.user_id == user_id)
    )
    for row in db.execute(stmt):
        bucket = stats.get(row.tag_id)
        if bucket is None:
            continue
        bucket["total_blocks"] += 1
        bucket["total_duration"] += effective_duration(row.status, row.started_at, row.duration, now)

    for bucket in stats.values():
        bucket["average_duration"] = mean_ms(bucket["total_duration"], bucket["total_blocks"])
    return sorted(stats.values(), key=lambda s: (-s["total_duration"], s["tag_name"]))


def export(db: Session, user_id: uuid.UUID, now: datetime | None = None) -> dict:
    """Full snapshot of the user's blocks.

    ``duration`` is the stored column, so ongoing blocks export 0 rather than
    their elapsed time.
    """
    now = now or utc_now()
    stmt = (
        select(Block)
        .options(selectinload(Block.tags))
        .where(Block.user_id == user_id)
        .order_by(Block.created_at.desc(), Block.started_at.desc())
    )
    rows = db.execute(stmt).scalars().all()

    return {
        "export_date": now.isoformat(),
        "total_blocks": len(rows),
        "blocks": [
            {
                "id": str(row.id),
                "title": row.title,
                "reason": row.reason,
                "status": row.status,
                "started_at": as_utc(row.started_at),
                "resolved_at": as_utc(row.resolved_at),
                "duration": row.duration,
                "created_at": as_utc(row.created_at),
                "updated_at": as_utc(row.updated_at),
                "tags": [{"id": str(tag.id), "name": tag.name, "color": tag.color} for tag in row.tags],
            }
            for row in rows
        ],
    }
