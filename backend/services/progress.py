"""
Read-only aggregations for the dashboard, PK and calendar views.
Nothing here is persisted.
"""
from services import store
from services.dates import days_between, is_valid_date, month_dates
from services.streaks import get_streaks

BOTH = "both"


def _percentage(part, whole) -> float:
    if whole <= 0:
        return 0
    return part / whole * 100


def is_subject_visible(subject: dict, user_id: str) -> bool:
    assigned_to = subject.get("assignedTo") or BOTH
    return assigned_to == BOTH or assigned_to == user_id


def get_subject_progress(subject: dict, user_id: str) -> dict:
    completed = 0
    total = 0
    for hw in subject.get("homework") or []:
        completed += int((hw.get("completedPages") or {}).get(user_id, 0))
        total += int(hw.get("totalPages") or 0)
    return {
        "subjectId": subject.get("id"),
        "name": subject.get("name", ""),
        "completed": completed,
        "total": total,
        "percentage": _percentage(completed, total),
    }


def get_overall_progress(subjects: list, user_id: str) -> dict:
    """Homework progress over the subjects this user can see."""
    per_subject = [get_subject_progress(s, user_id) for s in subjects if is_subject_visible(s, user_id)]
    completed = sum(s["completed"] for s in per_subject)
    total = sum(s["total"] for s in per_subject)
    return {
        "completed": completed,
        "total": total,
        "percentage": _percentage(completed, total),
        "subjects": per_subject,
    }


def get_vacation_progress(start_date: str, end_date: str, today: str) -> dict:
    total_days = days_between(start_date, end_date) + 1
    if total_days <= 0:
        return {"totalDays": 0, "daysPassed": 0, "daysRemaining": 0, "percentage": 0}

    days_passed = max(0, min(total_days, days_between(start_date, today) + 1))
    return {
        "totalDays": total_days,
        "daysPassed": days_passed,
        "daysRemaining": total_days - days_passed,
        "percentage": _percentage(days_passed, total_days),
    }


def get_day_status(completed: int, total: int) -> str:
    if total <= 0:
        return "unplanned"
    if completed <= 0:
        return "incomplete"
    if completed >= total:
        return "complete"
    return "partial"


def get_upcoming_exams(exams: list, today: str) -> list:
    upcoming = [e for e in exams if is_valid_date(e.get("date")) and e["date"] >= today]
    upcoming.sort(key=lambda e: e["date"])
    return [{**e, "daysLeft": days_between(today, e["date"])} for e in upcoming]


def filter_daily_tasks_for_user(tasks: list, subjects: list, user_id: str) -> list:
    """Hide tasks linked to a subject the user is not assigned to."""
    by_id = {s.get("id"): s for s in subjects}
    visible = []
    for task in tasks:
        subject = by_id.get(task.get("subjectId"))
        if subject is not None and not is_subject_visible(subject, user_id):
            continue
        visible.append(task)
    return visible


def _completed_visible(day: dict, user_id: str, visible_tasks: list) -> int:
    done = {c.get("taskId") for c in day["checkIns"][user_id] if c.get("completed")}
    return sum(1 for t in visible_tasks if t.get("id") in done)


def get_pk_stats(db, date_str: str) -> dict:
    tasks = store.get_daily_tasks(db)["tasks"]
    subjects = store.get_settings(db).get("subjects") or []
    day = store.get_day_checkins(db, date_str)
    streaks = get_streaks(db, date_str)

    stats = {"date": date_str}
    for uid in store.USER_IDS:
        visible = filter_daily_tasks_for_user(tasks, subjects, uid)
        stats[uid] = {
            "completed": _completed_visible(day, uid, visible),
            "total": len(visible),
            "streak": streaks[uid],
        }
    return stats


def get_calendar_month(db, year: int, month: int, user_id: str) -> list:
    """Status of every day of a month for one user, from the check-in ledger."""
    known = set(store.list_checkin_dates(db))
    tasks = store.get_daily_tasks(db)["tasks"]
    subjects = store.get_settings(db).get("subjects") or []
    visible = filter_daily_tasks_for_user(tasks, subjects, user_id)

    days = []
    for date_str in month_dates(year, month):
        if date_str in known:
            day = store.get_day_checkins(db, date_str)
            completed = _completed_visible(day, user_id, visible)
            total = len(visible)
        else:
            completed, total = 0, 0
        days.append({
            "date": date_str,
            "status": get_day_status(completed, total),
            "completed": completed,
            "total": total,
        })
    return days


def get_progress_overview(db, user_id: str, today: str) -> dict:
    settings = store.get_settings(db)
    vacation = settings.get("vacation")
    vacation_info = None
    if vacation and is_valid_date(vacation.get("startDate")) and is_valid_date(vacation.get("endDate")):
        vacation_info = {
            "name": vacation.get("name", ""),
            **get_vacation_progress(vacation["startDate"], vacation["endDate"], today),
        }
    return {
        "vacation": vacation_info,
        "homework": get_overall_progress(settings.get("subjects") or [], user_id),
        "exams": get_upcoming_exams(settings.get("exams") or [], today),
    }
