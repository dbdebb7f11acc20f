import logging
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from blocklog.core.errors import ConflictError, NotFoundError
from blocklog.db.session import commit
from blocklog.models.tag import DEFAULT_TAG_COLOR, Tag
from blocklog.schemas.tag import TagCreate, TagUpdate
from blocklog.services.duration import as_utc

logger = logging.getLogger(__name__)

NAME_TAKEN = "Tag with this name already exists"


def serialize_tag(row: Tag) -> dict:
    return {
        "id": str(row.id),
        "name": row.name,
        "description": row.description,
        "color": row.color,
        "created_at": as_utc(row.created_at),
        "updated_at": as_utc(row.updated_at),
    }


def resolve_user_tags(db: Session, user_id: uuid.UUID, tag_ids: list[uuid.UUID]) -> list[Tag]:
    """Load the caller's tags among ``tag_ids``; unknown or foreign ids are dropped."""
    if not tag_ids:
        return []
    stmt = select(Tag).where(Tag.id.in_(set(tag_ids)), Tag.user_id == user_id)
    return list(db.execute(stmt).scalars().all())


def _get_owned(db: Session, tag_id: uuid.UUID, user_id: uuid.UUID) -> Tag:
    stmt = select(Tag).where(Tag.id == tag_id, Tag.user_id == user_id)
    tag = db.execute(stmt).scalar_one_or_none()
    if not tag:
        raise NotFoundError("Tag not found")
    return tag


def _name_taken(db: Session, user_id: uuid.UUID, name: str, exclude_id: uuid.UUID | None = None) -> bool:
    stmt = select(Tag.id).where(Tag.user_id == user_id, Tag.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Tag.id != exclude_id)
    return db.execute(stmt).first() is not None


def create_tag(db: Session, user_id: uuid.UUID, payload: TagCreate) -> dict:
    if _name_taken(db, user_id, payload.name):
        raise ConflictError(NAME_TAKEN)

    tag = Tag(
        user_id=user_id,
        name=payload.name,
        description=payload.description,
        color=payload.color or DEFAULT_TAG_COLOR,
    )
    db.add(tag)
    commit(db, NAME_TAKEN)
    db.refresh(tag)
    return serialize_tag(tag)


def list_tags(db: Session, user_id: uuid.UUID) -> list[dict]:
    stmt = select(Tag).where(Tag.user_id == user_id).order_by(Tag.name.asc())
    rows = db.execute(stmt).scalars().all()
    return [serialize_tag(row) for row in rows]


def get_tag(db: Session, tag_id: uuid.UUID, user_id: uuid.UUID) -> dict:
    return serialize_tag(_get_owned(db, tag_id, user_id))


def update_tag(db: Session, tag_id: uuid.UUID, user_id: uuid.UUID, payload: TagUpdate) -> dict:
    tag = _get_owned(db, tag_id, user_id)

    updates = payload.model_dump(exclude_unset=True)
    name = updates.get("name")
    if name and name != tag.name and _name_taken(db, user_id, name, exclude_id=tag.id):
        raise ConflictError(NAME_TAKEN)

    for key, value in updates.items():
        if key in ("name", "color") and value is None:
            continue
        setattr(tag, key, value)
    commit(db, NAME_TAKEN)
    db.refresh(tag)
    return serialize_tag(tag)


def delete_tag(db: Session, tag_id: uuid.UUID, user_id: uuid.UUID) -> None:
    tag = _get_owned(db, tag_id, user_id)
    # the association rows go with the tag; the blocks stay
    db.delete(tag)
    commit(db)
    logger.info("tag deleted id=%s user=%s", tag_id, user_id)
