from fastapi import APIRouter, Depends
from database import get_db
from schemas import DailyTaskList
from services import store
from services.document_store import DocumentStore

router = APIRouter(
    prefix="/daily-tasks",
    tags=["daily-tasks"],
)

@router.get("", response_model=DailyTaskList, response_model_exclude_none=True)
def get_daily_tasks(db: DocumentStore = Depends(get_db)):
    return store.get_daily_tasks(db)

@router.put("")
def put_daily_tasks(request: DailyTaskList, db: DocumentStore = Depends(get_db)):
    # Links are advisory; a dangling subjectId/homeworkId just disables sync.
    with db.lock:
        store.save_daily_tasks(db, request.dict(exclude_none=True))
    return {"success": True}
