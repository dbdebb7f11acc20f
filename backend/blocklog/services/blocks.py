"""Block lifecycle: create, read, update, resolve and delete a user's blocks.

A block starts ``ongoing`` and may be resolved once through :func:`resolve_block`;
resolving freezes ``resolved_at`` and ``duration``. A generic update can move a
resolved block back to ``ongoing``, which clears both again. Every read path
projects ongoing blocks through :func:`effective_duration` with a single
``now`` so stored zeros never leak to callers.
"""
import logging
import math
import uuid
from datetime import datetime

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from blocklog.core.errors import InvalidStateError, NotFoundError, ValidationFailedError
from blocklog.db.session import commit
from blocklog.models.block import Block, BlockStatus, block_tags, utc_now
from blocklog.schemas.block import BlockCreate, BlockFilters, BlockUpdate
from blocklog.services.duration import as_utc, effective_duration, elapsed_ms
from blocklog.services.tags import resolve_user_tags, serialize_tag

logger = logging.getLogger(__name__)


def serialize_block(row: Block, now: datetime) -> dict:
    return {
        "id": str(row.id),
        "title": row.title,
        "reason": row.reason,
        "status": row.status,
        "started_at": as_utc(row.started_at),
        "resolved_at": as_utc(row.resolved_at),
        "duration": effective_duration(row.status, row.started_at, row.duration, now),
        "created_at": as_utc(row.created_at),
        "updated_at": as_utc(row.updated_at),
        "tags": [serialize_tag(tag) for tag in row.tags],
    }


def _get_owned(db: Session, block_id: uuid.UUID, user_id: uuid.UUID) -> Block:
    stmt = (
        select(Block)
        .options(selectinload(Block.tags))
        .where(Block.id == block_id, Block.user_id == user_id)
    )
    block = db.execute(stmt).scalar_one_or_none()
    if not block:
        raise NotFoundError("Block not found")
    return block


def _resolution_time(block: Block, resolved_at: datetime | None, now: datetime) -> datetime:
    moment = as_utc(resolved_at) if resolved_at is not None else now
    if moment < as_utc(block.started_at):
        raise ValidationFailedError("resolved_at must not be before started_at")
    return moment


def create_block(db: Session, user_id: uuid.UUID, payload: BlockCreate, now: datetime | None = None) -> dict:
    now = now or utc_now()
    block = Block(
        user_id=user_id,
        title=payload.title,
        reason=payload.reason,
        status=BlockStatus.ONGOING,
        started_at=now,
        duration=0,
        created_at=now,
        updated_at=now,
    )
    block.tags = resolve_user_tags(db, user_id, payload.tag_ids or [])
    db.add(block)
    commit(db)
    db.refresh(block)
    logger.info("block created id=%s user=%s tags=%d", block.id, user_id, len(block.tags))
    return serialize_block(block, now)


def get_block(db: Session, block_id: uuid.UUID, user_id: uuid.UUID, now: datetime | None = None) -> dict:
    return serialize_block(_get_owned(db, block_id, user_id), now or utc_now())


def list_blocks(db: Session, user_id: uuid.UUID, filters: BlockFilters, now: datetime | None = None) -> dict:
    now = now or utc_now()

    conditions = [Block.user_id == user_id]
    if filters.status is not None:
        conditions.append(Block.status == filters.status)
    if filters.search:
        pattern = f"%{filters.search}%"
        conditions.append(or_(Block.title.ilike(pattern), Block.reason.ilike(pattern)))
    if filters.tag_ids:
        tagged = select(block_tags.c.block_id).where(block_tags.c.tag_id.in_(filters.tag_ids))
        conditions.append(Block.id.in_(tagged))
    if filters.start_date is not None:
        conditions.append(Block.started_at >= as_utc(filters.start_date))
    if filters.end_date is not None:
        conditions.append(Block.started_at <= as_utc(filters.end_date))

    total = db.execute(select(func.count()).select_from(Block).where(*conditions)).scalar_one()

    stmt = (
        select(Block)
        .options(selectinload(Block.tags))
        .where(*conditions)
        .order_by(Block.created_at.desc(), Block.started_at.desc())
        .offset((filters.page - 1) * filters.limit)
        .limit(filters.limit)
    )
    rows = db.execute(stmt).scalars().all()

    return {
        "data": [serialize_block(row, now) for row in rows],
        "total": total,
        "page": filters.page,
        "limit": filters.limit,
        "total_pages": math.ceil(total / filters.limit),
    }


def update_block(
    db: Session,
    block_id: uuid.UUID,
    user_id: uuid.UUID,
    payload: BlockUpdate,
    now: datetime | None = None,
) -> dict:
    now = now or utc_now()
    block = _get_owned(db, block_id, user_id)
    updates = payload.model_dump(exclude_unset=True)

    # work everything out before touching the row so a rejected patch changes nothing
    status = updates.get("status")
    freeze_at = None
    if status is BlockStatus.RESOLVED and block.status is not BlockStatus.RESOLVED:
        freeze_at = _resolution_time(block, updates.get("resolved_at"), now)

    tags = None
    if "tag_ids" in updates:
        tags = resolve_user_tags(db, user_id, updates["tag_ids"] or [])

    if updates.get("title") is not None:
        block.title = updates["title"]
    if updates.get("reason") is not None:
        block.reason = updates["reason"]

    if freeze_at is not None:
        block.status = BlockStatus.RESOLVED
        block.resolved_at = freeze_at
        block.duration = elapsed_ms(block.started_at, freeze_at)
        logger.info("block resolved id=%s duration_ms=%d", block.id, block.duration)
    elif status is BlockStatus.ONGOING:
        if block.status is BlockStatus.RESOLVED:
            logger.info("block reopened id=%s", block.id)
        block.status = BlockStatus.ONGOING
        block.resolved_at = None
        block.duration = 0

    if tags is not None:
        block.tags = tags

    block.updated_at = now
    commit(db)
    db.refresh(block)
    return serialize_block(block, now)


def resolve_block(
    db: Session,
    block_id: uuid.UUID,
    user_id: uuid.UUID,
    resolved_at: datetime | None = None,
    now: datetime | None = None,
) -> dict:
    now = now or utc_now()
    block = _get_owned(db, block_id, user_id)
    if block.status is BlockStatus.RESOLVED:
        raise InvalidStateError("Block is already resolved")

    moment = _resolution_time(block, resolved_at, now)
    block.status = BlockStatus.RESOLVED
    block.resolved_at = moment
    block.duration = elapsed_ms(block.started_at, moment)
    block.updated_at = now
    commit(db)
    db.refresh(block)
    logger.info("block resolved id=%s duration_ms=%d", block.id, block.duration)
    return serialize_block(block, now)


def delete_block(db: Session, block_id: uuid.UUID, user_id: uuid.UUID) -> None:
    block = _get_owned(db, block_id, user_id)
    db.delete(block)
    commit(db)
    logger.info("block deleted id=%s user=%s", block_id, user_id)


def list_ongoing_blocks(db: Session, user_id: uuid.UUID, now: datetime | None = None) -> list[dict]:
    now = now or utc_now()
    stmt = (
        select(Block)
        .options(selectinload(Block.tags))
        .where(Block.user_id == user_id, Block.status == BlockStatus.ONGOING)
        .order_by(Block.created_at.desc(), Block.started_at.desc())
    )
    rows = db.execute(stmt).scalars().all()
    return [serialize_block(row, now) for row in rows]
