from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from blocklog.api.deps import get_current_user
from blocklog.db.session import get_db
from blocklog.models.block import Block
from blocklog.models.user import User
from blocklog.schemas.ai import AiStatusOut, AnalysisOut, AnalyzeRequest, BlockTextRequest, ResolutionOut, SimilarOut
from blocklog.services import ai as ai_service

router = APIRouter(prefix="/ai", tags=["ai"])

SIMILAR_HISTORY_LIMIT = 20


@router.get("/status", response_model=AiStatusOut)
def ai_status(user: User = Depends(get_current_user)):
    return ai_service.status()


@router.post("/analyze", response_model=AnalysisOut)
def analyze_block(
    payload: AnalyzeRequest,
    user: User = Depends(get_current_user),
):
    return ai_service.analyze_block(payload.title, payload.reason, payload.context)


@router.post("/similar", response_model=SimilarOut)
def similar_blocks(
    payload: BlockTextRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    stmt = (
        select(Block.title, Block.reason)
        .where(Block.user_id == user.id)
        .order_by(Block.created_at.desc())
        .limit(SIMILAR_HISTORY_LIMIT)
    )
    past = [{"title": row.title, "reason": row.reason} for row in db.execute(stmt)]
    return ai_service.similar_blocks(payload.title, payload.reason, past)


@router.post("/resolve", response_model=ResolutionOut)
def generate_resolution(
    payload: BlockTextRequest,
    user: User = Depends(get_current_user),
):
    return ai_service.resolution(payload.title, payload.reason)
