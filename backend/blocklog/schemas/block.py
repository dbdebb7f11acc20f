import uuid
from datetime import datetime
from pydantic import BaseModel, Field

from blocklog.models.block import BlockStatus
from blocklog.schemas.tag import TagOut


class BlockCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    reason: str = Field(min_length=1)
    tag_ids: list[uuid.UUID] | None = None


class BlockUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    reason: str | None = Field(default=None, min_length=1)
    status: BlockStatus | None = None
    resolved_at: datetime | None = None
    tag_ids: list[uuid.UUID] | None = None


class BlockResolve(BaseModel):
    resolved_at: datetime | None = None


class BlockFilters(BaseModel):
    status: BlockStatus | None = None
    search: str | None = None
    tag_ids: list[uuid.UUID] | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)


class BlockOut(BaseModel):
    id: str
    title: str
    reason: str
    status: BlockStatus
    started_at: datetime
    resolved_at: datetime | None
    duration: int
    created_at: datetime
    updated_at: datetime
    tags: list[TagOut]


class BlockPage(BaseModel):
    data: list[BlockOut]
    total: int
    page: int
    limit: int
    total_pages: int
