import uuid
from typing import Optional

from services import store
from services.dates import now_iso

NEXT_STATUS = {
    "pending": "in_progress",
    "in_progress": "completed",
    "completed": "pending",
}


def add_todo(db, user_id: str, title: str, deadline: Optional[str] = None,
             created_by: Optional[str] = None, linked_subject_id: Optional[str] = None) -> dict:
    with db.lock:
        todos = store.get_todos(db)
        item = {
            "id": uuid.uuid4().hex[:12],
            "title": title,
            "status": "pending",
            "createdAt": now_iso(),
        }
        if deadline:
            item["deadline"] = deadline
        # Only recorded when the other user added it
        if created_by and created_by != user_id:
            item["createdBy"] = created_by
        if linked_subject_id:
            item["linkedSubjectId"] = linked_subject_id
        todos[user_id].append(item)
        store.save_todos(db, todos)
        return todos


def cycle_todo_status(db, user_id: str, todo_id: str) -> dict:
    with db.lock:
        todos = store.get_todos(db)
        for item in todos[user_id]:
            if item.get("id") == todo_id:
                item["status"] = NEXT_STATUS.get(item.get("status"), "pending")
                store.save_todos(db, todos)
                return todos
        raise LookupError(f"Todo {todo_id} not found")


def delete_todo(db, user_id: str, todo_id: str) -> dict:
    with db.lock:
        todos = store.get_todos(db)
        remaining = [t for t in todos[user_id] if t.get("id") != todo_id]
        if len(remaining) == len(todos[user_id]):
            raise LookupError(f"Todo {todo_id} not found")
        todos[user_id] = remaining
        store.save_todos(db, todos)
        return todos
