from typing import Literal
from pydantic import BaseModel, Field


class AnalyzeRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    reason: str = Field(min_length=1, max_length=4000)
    context: str | None = Field(default=None, max_length=4000)


class BlockTextRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    reason: str = Field(min_length=1, max_length=4000)


class AiStatusOut(BaseModel):
    available: bool
    message: str


class AnalysisOut(BaseModel):
    suggestions: list[str]
    category: str
    severity: Literal["low", "medium", "high"]
    estimated_duration: str | None = None
    resources: list[str] = []
    next_steps: list[str] = []


class SimilarOut(BaseModel):
    similar_blocks: list[str]
    suggestions: list[str]


class ResolutionOut(BaseModel):
    resolution_steps: list[str]
    prevention_tips: list[str]
