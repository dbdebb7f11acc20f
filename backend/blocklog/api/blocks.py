import uuid
from datetime import datetime

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from blocklog.api.deps import get_current_user
from blocklog.db.session import get_db
from blocklog.models.block import BlockStatus
from blocklog.models.user import User
from blocklog.schemas.block import BlockCreate, BlockFilters, BlockOut, BlockPage, BlockResolve, BlockUpdate
from blocklog.services import blocks as block_service

router = APIRouter(prefix="/blocks", tags=["blocks"])


@router.post("", response_model=BlockOut)
def create_block(
    payload: BlockCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return block_service.create_block(db, user.id, payload)


@router.get("", response_model=BlockPage)
def list_blocks(
    status: BlockStatus | None = None,
    search: str | None = None,
    tag_ids: list[uuid.UUID] | None = Query(default=None),
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    filters = BlockFilters(
        status=status,
        search=search,
        tag_ids=tag_ids,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )
    return block_service.list_blocks(db, user.id, filters)


@router.get("/ongoing", response_model=list[BlockOut])
def list_ongoing_blocks(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return block_service.list_ongoing_blocks(db, user.id)


@router.get("/{block_id}", response_model=BlockOut)
def get_block(
    block_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return block_service.get_block(db, block_id, user.id)


@router.put("/{block_id}", response_model=BlockOut)
def update_block(
    block_id: uuid.UUID,
    payload: BlockUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return block_service.update_block(db, block_id, user.id, payload)


@router.patch("/{block_id}/resolve", response_model=BlockOut)
def resolve_block(
    block_id: uuid.UUID,
    payload: BlockResolve | None = Body(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    resolved_at = payload.resolved_at if payload else None
    return block_service.resolve_block(db, block_id, user.id, resolved_at)


@router.delete("/{block_id}")
def delete_block(
    block_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    block_service.delete_block(db, block_id, user.id)
    return {"ok": True}
