from datetime import datetime
from pydantic import BaseModel

from blocklog.models.block import BlockStatus


class LongestBlock(BaseModel):
    id: str
    title: str
    duration: int


class DashboardOut(BaseModel):
    total_blocks: int
    ongoing_blocks: int
    resolved_blocks: int
    total_time_blocked: int
    average_block_time: int
    longest_block: LongestBlock | None


class MonthlyStatsOut(BaseModel):
    year: int
    month: int
    total_blocks: int
    total_duration: int
    average_duration: int


class DailyStatsOut(BaseModel):
    date: str
    total_blocks: int
    block_titles: list[str]
    total_duration: int


class ExportTag(BaseModel):
    id: str
    name: str
    color: str


class ExportBlock(BaseModel):
    id: str
    title: str
    reason: str
    status: BlockStatus
    started_at: datetime
    resolved_at: datetime | None
    duration: int
    created_at: datetime
    updated_at: datetime
    tags: list[ExportTag]


class ExportOut(BaseModel):
    export_date: str
    total_blocks: int
    blocks: list[ExportBlock]
