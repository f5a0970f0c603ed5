"""
Check-in ledger.

Keeps each user's daily check-in records consistent with the cumulative
`completedPages` counter of the homework item a task is linked to.

`syncedAmount` on a check-in is the amount currently reflected in the
homework counter for that (date, user, task). Every operation computes its
delta against that field, so repeating an operation never applies progress
twice, and un-completing a check-in takes back exactly what was pushed.

Write order is settings first, day document second. The two writes are not
transactional: if the second one fails the error propagates, and the caller
re-fetches and re-issues the (idempotent) operation.
"""
import enum
import json
from dataclasses import dataclass
from typing import Optional

from services import store
from services.dates import now_iso, today_str

CHECKIN_SOURCE = "checkin"
MANUAL_SOURCE = "manual"


class LinkState(str, enum.Enum):
    NONE = "NONE"
    DANGLING = "DANGLING"
    VALID = "VALID"


@dataclass
class HomeworkLink:
    state: LinkState
    subject_id: Optional[str] = None
    homework_id: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.state == LinkState.VALID


def find_homework(settings: dict, subject_id: str, homework_id: str):
    for subject in settings.get("subjects") or []:
        if subject.get("id") != subject_id:
            continue
        for hw in subject.get("homework") or []:
            if hw.get("id") == homework_id:
                return subject, hw
    return None, None


def resolve_link(task: Optional[dict], settings: dict) -> HomeworkLink:
    if not task or not task.get("subjectId") or not task.get("homeworkId"):
        return HomeworkLink(LinkState.NONE)
    subject_id, homework_id = task["subjectId"], task["homeworkId"]
    _, hw = find_homework(settings, subject_id, homework_id)
    if hw is None:
        return HomeworkLink(LinkState.DANGLING, subject_id, homework_id)
    return HomeworkLink(LinkState.VALID, subject_id, homework_id)


def clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(upper, value))


def clamp_amount(amount, target) -> int:
    amount = int(amount or 0)
    if target is None:
        return max(0, amount)
    return clamp(amount, 0, max(0, int(target)))


# --- Homework counter ---

def adjust_homework_progress(db, subject_id: str, homework_id: str, delta: int, user_id: str) -> int:
    """
    Add `delta` to completedPages[user_id], clamped to [0, totalPages].
    Returns the change actually applied (0 when the homework does not exist).
    """
    if delta == 0:
        return 0

    with db.lock:
        settings = store.get_settings(db)
        _, hw = find_homework(settings, subject_id, homework_id)
        if hw is None:
            return 0

        total = max(0, int(hw.get("totalPages") or 0))
        current = int(hw["completedPages"].get(user_id, 0))
        new_value = clamp(current + delta, 0, total)
        applied = new_value - current
        if applied == 0:
            return 0

        hw["completedPages"][user_id] = new_value
        store.save_settings(db, settings)

    print(json.dumps({
        "type": "ledger_sync",
        "subjectId": subject_id,
        "homeworkId": homework_id,
        "userId": user_id,
        "delta": delta,
        "applied": applied,
        "completedPages": new_value,
    }, ensure_ascii=False))
    return applied


# --- Progress log ---

def remove_progress_entry(entries: list, task_id: str) -> list:
    return [e for e in entries if e.get("taskId") != task_id]


def replace_progress_entry(entries: list, link: HomeworkLink, task_id: str, amount: int) -> list:
    entries = remove_progress_entry(entries, task_id)
    entries.append({
        "subjectId": link.subject_id,
        "homeworkId": link.homework_id,
        "amount": amount,
        "source": CHECKIN_SOURCE,
        "taskId": task_id,
        "timestamp": now_iso(),
    })
    return entries


def _sync_progress_entry(entries: list, link: HomeworkLink, task_id: str, amount: int, synced: int) -> list:
    # A check-in that moved nothing (counter already full) has no log entry
    if synced > 0:
        return replace_progress_entry(entries, link, task_id, amount)
    return remove_progress_entry(entries, task_id)


# --- Ledger operations ---

def get_day(db, date_str: str) -> dict:
    return store.get_day_checkins(db, date_str)


def _load(db, date_str: str, user_id: str, task_id: str):
    tasks = store.get_daily_tasks(db)["tasks"]
    task = next((t for t in tasks if t.get("id") == task_id), None)
    day = store.get_day_checkins(db, date_str)
    link = resolve_link(task, store.get_settings(db))

    check_ins = day["checkIns"][user_id]
    idx = next((i for i, c in enumerate(check_ins) if c.get("taskId") == task_id), -1)
    existing = check_ins[idx] if idx >= 0 else None
    return task, day, link, idx, existing


def _store_record(day: dict, user_id: str, idx: int, record: dict) -> None:
    if idx >= 0:
        day["checkIns"][user_id][idx] = record
    else:
        day["checkIns"][user_id].append(record)


def toggle_check_in(db, date_str: str, user_id: str, task_id: str, amount: Optional[int] = None) -> dict:
    """Flip a task between completed and not completed for one user and date."""
    with db.lock:
        task, day, link, idx, existing = _load(db, date_str, user_id, task_id)
        progress = day["homeworkProgress"][user_id]

        if existing and existing.get("completed"):
            synced = int(existing.get("syncedAmount") or 0)
            if synced > 0 and link.is_valid:
                adjust_homework_progress(db, link.subject_id, link.homework_id, -synced, user_id)
            progress = remove_progress_entry(progress, task_id)

            record = {**existing, "completed": False, "amount": 0, "syncedAmount": 0}
            record.pop("completedAt", None)
        else:
            target = task.get("target") if task else None
            target_amount = clamp_amount(amount if amount is not None else target, target)
            previous_synced = int(existing.get("syncedAmount") or 0) if existing else 0

            synced = previous_synced if link.is_valid else 0
            delta = target_amount - previous_synced
            if delta > 0 and link.is_valid:
                applied = adjust_homework_progress(db, link.subject_id, link.homework_id, delta, user_id)
                synced = previous_synced + applied
                progress = _sync_progress_entry(progress, link, task_id, target_amount, synced)

            record = {
                **(existing or {}),
                "taskId": task_id,
                "completed": True,
                "amount": target_amount,
                "syncedAmount": synced,
                "completedAt": now_iso(),
            }

        _store_record(day, user_id, idx, record)
        day["homeworkProgress"][user_id] = progress
        store.save_day_checkins(db, day)
        return day


def set_check_in_amount(db, date_str: str, user_id: str, task_id: str, amount: int) -> dict:
    """Slider-style update: completion follows from amount >= target."""
    with db.lock:
        task, day, link, idx, existing = _load(db, date_str, user_id, task_id)
        progress = day["homeworkProgress"][user_id]

        target = task.get("target") if task else None
        amount = clamp_amount(amount, target)
        is_now_completed = amount >= clamp_amount(target, None)
        previous_synced = int(existing.get("syncedAmount") or 0) if existing else 0
        synced = previous_synced

        if not link.is_valid:
            synced = 0
        elif is_now_completed:
            delta = amount - previous_synced
            if delta != 0:
                applied = adjust_homework_progress(db, link.subject_id, link.homework_id, delta, user_id)
                synced = previous_synced + applied
                progress = _sync_progress_entry(progress, link, task_id, amount, synced)
        else:
            if previous_synced > 0:
                adjust_homework_progress(db, link.subject_id, link.homework_id, -previous_synced, user_id)
            synced = 0
            progress = remove_progress_entry(progress, task_id)

        record = {
            **(existing or {}),
            "taskId": task_id,
            "completed": is_now_completed,
            "amount": amount,
            "syncedAmount": synced,
        }
        if is_now_completed:
            record["completedAt"] = now_iso()
        else:
            record.pop("completedAt", None)

        _store_record(day, user_id, idx, record)
        day["homeworkProgress"][user_id] = progress
        store.save_day_checkins(db, day)
        return day


# --- Manual homework edits ---

def set_homework_progress(db, user_id: str, subject_id: str, homework_id: str, value: int,
                          date_str: Optional[str] = None, note: Optional[str] = None) -> dict:
    """
    Set completedPages[user_id] directly and log the change as a manual entry
    on `date_str` (today by default). Raises LookupError for unknown homework.
    """
    date_str = date_str or today_str()
    with db.lock:
        settings = store.get_settings(db)
        _, hw = find_homework(settings, subject_id, homework_id)
        if hw is None:
            raise LookupError(f"Homework {subject_id}/{homework_id} not found")

        current = int(hw["completedPages"].get(user_id, 0))
        target_value = clamp(int(value), 0, max(0, int(hw.get("totalPages") or 0)))
        applied = adjust_homework_progress(db, subject_id, homework_id, target_value - current, user_id)
        if applied == 0:
            return settings

        day = store.get_day_checkins(db, date_str)
        entry = {
            "subjectId": subject_id,
            "homeworkId": homework_id,
            "amount": applied,
            "source": MANUAL_SOURCE,
            "timestamp": now_iso(),
        }
        if note:
            entry["note"] = note
        day["homeworkProgress"][user_id].append(entry)
        store.save_day_checkins(db, day)
        return store.get_settings(db)


def get_homework_history(db, subject_id: str, homework_id: str) -> list:
    """Every logged contribution to one homework item, newest first."""
    history = []
    for date_str in store.list_checkin_dates(db):
        day = store.get_day_checkins(db, date_str)
        for uid in store.USER_IDS:
            for entry in day["homeworkProgress"][uid]:
                if entry.get("subjectId") == subject_id and entry.get("homeworkId") == homework_id:
                    history.append({
                        "date": date_str,
                        "userId": uid,
                        "amount": entry.get("amount", 0),
                        "source": entry.get("source", CHECKIN_SOURCE),
                        "timestamp": entry.get("timestamp", ""),
                    })
    history.sort(key=lambda h: h["timestamp"], reverse=True)
    return history
