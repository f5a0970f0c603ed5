"""
Entity accessors over the document store.

Each getter returns an independent copy of its document and seeds defaults
on first access; each saver replaces the whole document.
"""
import json
from services.document_store import CorruptDocumentError

USER_IDS = ("user1", "user2")

USERS_DOC = "users"
SETTINGS_DOC = "settings"
DAILY_TASKS_DOC = "daily-tasks"
TODOS_DOC = "todos"
CHECKINS_COLLECTION = "checkins"

# --- Defaults ---

DEFAULT_USERS = [
    {"id": "user1", "name": "用户 1"},
    {"id": "user2", "name": "用户 2"},
]


def _homework(hw_id, title, total, unit):
    return {
        "id": hw_id,
        "title": title,
        "totalPages": total,
        "completedPages": {"user1": 0, "user2": 0},
        "unit": unit,
    }


DEFAULT_SETTINGS = {
    "vacation": {"name": "寒假", "startDate": "2026-01-15", "endDate": "2026-02-15"},
    "exams": [{"id": "exam-1", "name": "开学考", "date": "2026-02-17"}],
    "subjects": [
        {"id": "math", "name": "数学", "color": "#3b82f6", "assignedTo": "both",
         "homework": [_homework("math-1", "寒假作业本", 60, "页")]},
        {"id": "chinese", "name": "语文", "color": "#ef4444", "assignedTo": "both",
         "homework": [_homework("chinese-1", "阅读理解", 30, "篇")]},
        {"id": "english", "name": "英语", "color": "#22c55e", "assignedTo": "both",
         "homework": [_homework("english-1", "单词本", 500, "词")]},
        {"id": "physics", "name": "物理", "color": "#f59e0b", "assignedTo": "both",
         "homework": [_homework("physics-1", "练习册", 40, "页")]},
        {"id": "chemistry", "name": "化学", "color": "#8b5cf6", "assignedTo": "both",
         "homework": [_homework("chemistry-1", "实验报告", 15, "篇")]},
        {"id": "biology", "name": "生物", "color": "#06b6d4", "assignedTo": "both",
         "homework": [_homework("biology-1", "知识梳理", 25, "页")]},
    ],
}

DEFAULT_DAILY_TASKS = {
    "tasks": [
        {"id": "dt-1", "title": "背单词", "target": 50, "unit": "词", "subjectId": "english", "homeworkId": "english-1"},
        {"id": "dt-2", "title": "数学练习", "target": 2, "unit": "页", "subjectId": "math", "homeworkId": "math-1"},
        {"id": "dt-3", "title": "语文阅读", "target": 1, "unit": "篇", "subjectId": "chinese", "homeworkId": "chinese-1"},
        {"id": "dt-4", "title": "物理刷题", "target": 2, "unit": "页", "subjectId": "physics", "homeworkId": "physics-1"},
        {"id": "dt-5", "title": "化学练习", "target": 1, "unit": "篇", "subjectId": "chemistry", "homeworkId": "chemistry-1"},
        {"id": "dt-6", "title": "课外阅读", "target": 30, "unit": "分钟"},
    ]
}


def empty_per_user():
    return {uid: [] for uid in USER_IDS}


def _get_or_seed(db, name, default):
    doc_ref = db.document(name)
    snap = doc_ref.get()
    if snap.exists:
        return snap.to_dict()
    data = json.loads(json.dumps(default))
    doc_ref.set(data)
    return data


# --- Users ---

def get_users(db):
    return _get_or_seed(db, USERS_DOC, DEFAULT_USERS)


def update_user(db, user_id: str, name: str, avatar=None, progress_color=None):
    with db.lock:
        users = get_users(db)
        for user in users:
            if user.get("id") != user_id:
                continue
            user["name"] = name
            if avatar is not None:
                user["avatar"] = avatar
            if progress_color is not None:
                user["progressColor"] = progress_color
            db.document(USERS_DOC).set(users)
            break
        return users


# --- Settings ---

def migrate_settings(settings: dict):
    """
    Bring an older settings document up to the per-user completedPages shape.
    Returns (settings, changed).
    """
    changed = False
    for subject in settings.get("subjects") or []:
        for hw in subject.get("homework") or []:
            pages = hw.get("completedPages")
            if isinstance(pages, (int, float)) and not isinstance(pages, bool):
                hw["completedPages"] = {"user1": int(pages), "user2": 0}
                changed = True
            elif not isinstance(pages, dict):
                hw["completedPages"] = {"user1": 0, "user2": 0}
                changed = True
            else:
                for uid in USER_IDS:
                    if not isinstance(pages.get(uid), (int, float)):
                        pages[uid] = 0
                        changed = True
    return settings, changed


def get_settings(db):
    with db.lock:
        doc_ref = db.document(SETTINGS_DOC)
        snap = doc_ref.get()
        if not snap.exists:
            settings = json.loads(json.dumps(DEFAULT_SETTINGS))
            doc_ref.set(settings)
            return settings

        settings, changed = migrate_settings(snap.to_dict())
        if changed:
            print(json.dumps({"type": "settings_migration", "detail": "completedPages -> per-user"}))
            doc_ref.set(settings)
        return settings


def save_settings(db, settings: dict) -> None:
    db.document(SETTINGS_DOC).set(settings)


# --- Daily task catalog ---

def get_daily_tasks(db):
    data = _get_or_seed(db, DAILY_TASKS_DOC, DEFAULT_DAILY_TASKS)
    if "tasks" not in data or data["tasks"] is None:
        data["tasks"] = []
    return data


def save_daily_tasks(db, data: dict) -> None:
    db.document(DAILY_TASKS_DOC).set({"tasks": data.get("tasks") or []})


# --- Daily check-ins ---

# Entries lacking these keys are dropped on read
DAY_ENTRY_KEYS = {
    "checkIns": ("taskId",),
    "homeworkProgress": ("subjectId", "homeworkId"),
}

def empty_day(date_str: str):
    return {
        "date": date_str,
        "checkIns": empty_per_user(),
        "homeworkProgress": empty_per_user(),
    }


def get_day_checkins(db, date_str: str):
    """Missing or unreadable day documents read as an empty day."""
    try:
        snap = db.collection(CHECKINS_COLLECTION).document(date_str).get()
    except CorruptDocumentError as e:
        print(f"Check-in Read Warning: {e}")
        return empty_day(date_str)

    if not snap.exists:
        return empty_day(date_str)

    data = snap.to_dict()
    if not isinstance(data, dict):
        return empty_day(date_str)
    data["date"] = date_str
    for key, required in DAY_ENTRY_KEYS.items():
        section = data.get(key)
        if not isinstance(section, dict):
            section = {}
        for uid in USER_IDS:
            entries = section.get(uid)
            if not isinstance(entries, list):
                entries = []
            section[uid] = [e for e in entries if isinstance(e, dict) and all(e.get(k) for k in required)]
        data[key] = section
    return data


def save_day_checkins(db, data: dict) -> None:
    db.collection(CHECKINS_COLLECTION).document(data["date"]).set(data)


def list_checkin_dates(db):
    return db.collection(CHECKINS_COLLECTION).list_document_ids()


# --- Todos ---

def get_todos(db):
    todos = _get_or_seed(db, TODOS_DOC, empty_per_user())
    for uid in USER_IDS:
        todos.setdefault(uid, [])
    return todos


def save_todos(db, todos: dict) -> None:
    db.document(TODOS_DOC).set(todos)
