from fastapi import APIRouter, HTTPException, Depends
from database import get_db
from schemas import (
    AppSettings,
    HomeworkHistoryResponse,
    ManualProgressRequest,
    SettingsResponse,
)
from services import ledger, store
from services.document_store import DocumentStore
from routers.common import require_date

router = APIRouter(
    prefix="/settings",
    tags=["settings"],
)

@router.get("", response_model=SettingsResponse, response_model_exclude_none=True)
def get_settings(db: DocumentStore = Depends(get_db)):
    return {"settings": store.get_settings(db)}

@router.put("")
def put_settings(settings: AppSettings, db: DocumentStore = Depends(get_db)):
    data = settings.dict(exclude_none=True)
    # Clamp counters so the document never stores an impossible state
    for subject in data["subjects"]:
        for hw in subject["homework"]:
            total = max(0, hw["totalPages"])
            for uid in store.USER_IDS:
                hw["completedPages"][uid] = ledger.clamp(hw["completedPages"][uid], 0, total)
    with db.lock:
        store.save_settings(db, data)
    return {"success": True}

@router.put("/homework/{subject_id}/{homework_id}/progress", response_model=SettingsResponse, response_model_exclude_none=True)
def set_homework_progress(subject_id: str, homework_id: str, request: ManualProgressRequest, db: DocumentStore = Depends(get_db)):
    date = require_date(request.date, default_today=True)
    try:
        settings = ledger.set_homework_progress(
            db,
            request.userId.value,
            subject_id,
            homework_id,
            request.completedPages,
            date_str=date,
            note=request.note,
        )
    except LookupError:
        raise HTTPException(status_code=404, detail="Homework not found")
    return {"settings": settings}

@router.get("/homework/{subject_id}/{homework_id}/history", response_model=HomeworkHistoryResponse)
def get_homework_history(subject_id: str, homework_id: str, db: DocumentStore = Depends(get_db)):
    return {"history": ledger.get_homework_history(db, subject_id, homework_id)}
