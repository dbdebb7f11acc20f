import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from blocklog.api.deps import get_current_user
from blocklog.db.session import get_db
from blocklog.models.user import User
from blocklog.schemas.tag import TagCreate, TagOut, TagStatsOut, TagUpdate
from blocklog.services import analytics
from blocklog.services import tags as tag_service

router = APIRouter(prefix="/tags", tags=["tags"])


@router.post("", response_model=TagOut)
def create_tag(
    payload: TagCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return tag_service.create_tag(db, user.id, payload)


@router.get("", response_model=list[TagOut])
def list_tags(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return tag_service.list_tags(db, user.id)


@router.get("/stats", response_model=list[TagStatsOut])
def get_tag_stats(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return analytics.tag_stats(db, user.id)


@router.get("/{tag_id}", response_model=TagOut)
def get_tag(
    tag_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return tag_service.get_tag(db, tag_id, user.id)


@router.put("/{tag_id}", response_model=TagOut)
def update_tag(
    tag_id: uuid.UUID,
    payload: TagUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return tag_service.update_tag(db, tag_id, user.id, payload)


@router.delete("/{tag_id}")
def delete_tag(
    tag_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    tag_service.delete_tag(db, tag_id, user.id)
    return {"ok": True}
