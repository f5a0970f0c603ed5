from fastapi import APIRouter, HTTPException, Depends
from database import get_db
from schemas import GlobalTodoList, TodoCreateRequest, TodoListResponse, UserId
from services import store, todos
from services.document_store import DocumentStore

router = APIRouter(
    prefix="/todos",
    tags=["todos"],
)

@router.get("", response_model=TodoListResponse, response_model_exclude_none=True)
def get_todos(db: DocumentStore = Depends(get_db)):
    return {"todos": store.get_todos(db)}

@router.put("")
def put_todos(request: GlobalTodoList, db: DocumentStore = Depends(get_db)):
    with db.lock:
        store.save_todos(db, request.dict(exclude_none=True))
    return {"success": True}

@router.post("/{user_id}", response_model=TodoListResponse, response_model_exclude_none=True)
def add_todo(user_id: UserId, request: TodoCreateRequest, db: DocumentStore = Depends(get_db)):
    title = request.title.strip()
    if not title:
        raise HTTPException(status_code=400, detail="Title is required")
    result = todos.add_todo(
        db,
        user_id.value,
        title,
        deadline=request.deadline,
        created_by=request.createdBy.value if request.createdBy else None,
        linked_subject_id=request.linkedSubjectId,
    )
    return {"todos": result}

@router.patch("/{user_id}/{todo_id}/cycle", response_model=TodoListResponse, response_model_exclude_none=True)
def cycle_todo(user_id: UserId, todo_id: str, db: DocumentStore = Depends(get_db)):
    try:
        result = todos.cycle_todo_status(db, user_id.value, todo_id)
    except LookupError:
        raise HTTPException(status_code=404, detail="Todo not found")
    return {"todos": result}

@router.delete("/{user_id}/{todo_id}", response_model=TodoListResponse, response_model_exclude_none=True)
def delete_todo(user_id: UserId, todo_id: str, db: DocumentStore = Depends(get_db)):
    try:
        result = todos.delete_todo(db, user_id.value, todo_id)
    except LookupError:
        raise HTTPException(status_code=404, detail="Todo not found")
    return {"todos": result}
