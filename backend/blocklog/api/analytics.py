from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from blocklog.api.deps import get_current_user
from blocklog.db.session import get_db
from blocklog.models.block import utc_now
from blocklog.models.user import User
from blocklog.schemas.analytics import DailyStatsOut, DashboardOut, ExportOut, MonthlyStatsOut
from blocklog.services import analytics

router = APIRouter(prefix="/analytics", tags=["analytics"])

EXPORT_FILENAME = "blocklog-export.json"


@router.get("/dashboard", response_model=DashboardOut)
def get_dashboard(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return analytics.dashboard(db, user.id)


@router.get("/monthly", response_model=list[MonthlyStatsOut])
def get_monthly(
    year: int | None = Query(default=None, ge=1970, le=9998),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    now = utc_now()
    return analytics.monthly(db, user.id, year or now.year, now)


@router.get("/daily", response_model=list[DailyStatsOut])
def get_daily(
    year: int | None = Query(default=None, ge=1970, le=9998),
    month: int | None = Query(default=None, ge=1, le=12),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    now = utc_now()
    return analytics.daily(db, user.id, year or now.year, month or now.month, now)


@router.get("/calendar", response_model=list[DailyStatsOut])
def get_calendar(
    year: int | None = Query(default=None, ge=1970, le=9998),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    now = utc_now()
    return analytics.calendar(db, user.id, year or now.year, now)


@router.get("/export", response_model=ExportOut)
def export_data(
    response: Response,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    response.headers["Content-Disposition"] = f'attachment; filename="{EXPORT_FILENAME}"'
    return analytics.export(db, user.id)
