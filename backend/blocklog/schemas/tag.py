from datetime import datetime
from pydantic import BaseModel, Field

HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


class TagCreate(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    description: str | None = None
    color: str | None = Field(default=None, pattern=HEX_COLOR)


class TagUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=50)
    description: str | None = None
    color: str | None = Field(default=None, pattern=HEX_COLOR)


class TagOut(BaseModel):
    id: str
    name: str
    description: str | None
    color: str
    created_at: datetime
    updated_at: datetime


class TagStatsOut(BaseModel):
    tag_id: str
    tag_name: str
    tag_color: str
    total_blocks: int
    total_duration: int
    average_duration: int
