from datetime import timedelta

from services import store
from services.dates import parse_date

STREAK_LOOKBACK_DAYS = 365


def count_completed(day: dict, user_id: str) -> int:
    return sum(1 for c in day["checkIns"][user_id] if c.get("completed"))


def get_streak(db, user_id: str, reference_date: str) -> int:
    """
    Consecutive fully completed days ending at reference_date.

    The reference day itself is still in progress: if it is not complete yet
    it is skipped rather than breaking the streak. Any earlier incomplete day
    ends the walk. Every day is measured against the current catalog size.
    """
    total = len(store.get_daily_tasks(db)["tasks"])
    if total == 0:
        return 0

    ref = parse_date(reference_date)
    streak = 0
    for i in range(STREAK_LOOKBACK_DAYS):
        check_date = (ref - timedelta(days=i)).isoformat()
        day = store.get_day_checkins(db, check_date)
        if count_completed(day, user_id) >= total:
            streak += 1
        elif i == 0:
            continue
        else:
            break
    return streak


def get_streaks(db, reference_date: str) -> dict:
    return {uid: get_streak(db, uid, reference_date) for uid in store.USER_IDS}
