from fastapi import APIRouter, Depends
from database import get_db
from schemas import (
    CheckInAmountRequest,
    CheckInDayResponse,
    CheckInUpdateRequest,
    DailyCheckInData,
    ToggleCheckInRequest,
)
from services import ledger, store
from services.document_store import DocumentStore
from services.streaks import get_streaks
from routers.common import require_date
import time
import json

router = APIRouter(
    prefix="/checkins",
    tags=["checkins"],
)

def _perf(operation: str, start_time: float, detail: str):
    print(json.dumps({
        "type": "perf_metric",
        "operation": operation,
        "duration_ms": (time.time() - start_time) * 1000,
        "detail": detail,
    }))

@router.get("/{date}", response_model=CheckInDayResponse, response_model_exclude_none=True)
def get_day_checkins(date: str, db: DocumentStore = Depends(get_db)):
    start_time = time.time()
    date = require_date(date)

    data = ledger.get_day(db, date)
    tasks = store.get_daily_tasks(db)["tasks"]
    streaks = get_streaks(db, date)

    _perf("get_day_checkins", start_time, f"date={date}")
    return {**data, "streaks": streaks, "tasks": tasks}

@router.put("/{date}")
def put_day_checkins(date: str, request: CheckInUpdateRequest, db: DocumentStore = Depends(get_db)):
    """
    Whole-day replace, as sent by older clients. The progress log is kept
    when the body leaves it out.
    """
    date = require_date(date)
    with db.lock:
        if request.homeworkProgress is not None:
            progress = request.homeworkProgress.dict(exclude_none=True)
        else:
            progress = ledger.get_day(db, date)["homeworkProgress"]

        store.save_day_checkins(db, {
            "date": date,
            "checkIns": request.checkIns.dict(exclude_none=True),
            "homeworkProgress": progress,
        })
    return {"success": True}

@router.post("/{date}/toggle", response_model=DailyCheckInData, response_model_exclude_none=True)
def toggle_check_in(date: str, request: ToggleCheckInRequest, db: DocumentStore = Depends(get_db)):
    start_time = time.time()
    date = require_date(date)
    day = ledger.toggle_check_in(db, date, request.userId.value, request.taskId, request.amount)
    _perf("toggle_check_in", start_time, f"date={date} user={request.userId.value} task={request.taskId}")
    return day

@router.post("/{date}/amount", response_model=DailyCheckInData, response_model_exclude_none=True)
def set_check_in_amount(date: str, request: CheckInAmountRequest, db: DocumentStore = Depends(get_db)):
    start_time = time.time()
    date = require_date(date)
    day = ledger.set_check_in_amount(db, date, request.userId.value, request.taskId, request.amount)
    _perf("set_check_in_amount", start_time, f"date={date} user={request.userId.value} task={request.taskId}")
    return day
