from typing import Optional
from fastapi import APIRouter, Depends, Query
from database import get_db
from schemas import CalendarResponse, PKStats, ProgressOverview, UserId
from services import progress
from services.document_store import DocumentStore
from routers.common import require_date

router = APIRouter(
    prefix="/stats",
    tags=["stats"],
)

@router.get("/pk", response_model=PKStats)
def get_pk_stats(date: Optional[str] = None, db: DocumentStore = Depends(get_db)):
    date = require_date(date, default_today=True)
    return progress.get_pk_stats(db, date)

@router.get("/calendar", response_model=CalendarResponse)
def get_calendar(
    year: int = Query(..., ge=1970, le=9999),
    month: int = Query(..., ge=1, le=12),
    userId: UserId = UserId.USER1,
    db: DocumentStore = Depends(get_db),
):
    return {"days": progress.get_calendar_month(db, year, month, userId.value)}

@router.get("/progress", response_model=ProgressOverview)
def get_progress(userId: UserId = UserId.USER1, date: Optional[str] = None, db: DocumentStore = Depends(get_db)):
    date = require_date(date, default_today=True)
    return progress.get_progress_overview(db, userId.value, date)
