from fastapi import APIRouter, HTTPException, Depends
from database import get_db
from schemas import UsersResponse, UserUpdateRequest
from services import store
from services.document_store import DocumentStore

router = APIRouter(
    prefix="/users",
    tags=["users"],
)

@router.get("", response_model=UsersResponse, response_model_exclude_none=True)
def get_users(db: DocumentStore = Depends(get_db)):
    return {"users": store.get_users(db)}

@router.put("", response_model=UsersResponse, response_model_exclude_none=True)
def update_user(request: UserUpdateRequest, db: DocumentStore = Depends(get_db)):
    if not request.id or not request.name:
        raise HTTPException(status_code=400, detail="Missing id or name")

    users = store.update_user(
        db,
        request.id.value,
        request.name,
        avatar=request.avatar,
        progress_color=request.progressColor,
    )
    return {"users": users}
