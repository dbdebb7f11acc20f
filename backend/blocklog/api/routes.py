from fastapi import APIRouter

from blocklog.api import ai, analytics, auth, blocks, tags

router = APIRouter()


@router.get("/health")
def health():
    return {"ok": True}


router.include_router(auth.router)
router.include_router(blocks.router)
router.include_router(tags.router)
router.include_router(analytics.router)
router.include_router(ai.router)
