import calendar
import os
import re
from datetime import date, datetime, timedelta, timezone

# Household runs on China Standard Time unless told otherwise
CST = timezone(timedelta(hours=float(os.getenv("APP_UTC_OFFSET_HOURS", "8"))))

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def now_iso() -> str:
    return datetime.now(CST).isoformat(timespec="microseconds")


def today_str() -> str:
    return datetime.now(CST).date().isoformat()


def is_valid_date(date_str: str) -> bool:
    if not isinstance(date_str, str) or not DATE_RE.match(date_str):
        return False
    try:
        date.fromisoformat(date_str)
    except ValueError:
        return False
    return True


def parse_date(date_str: str) -> date:
    """Parse a YYYY-MM-DD string. Raises ValueError on anything else."""
    if not is_valid_date(date_str):
        raise ValueError(f"Invalid date: {date_str!r}")
    return date.fromisoformat(date_str)


def add_days(date_str: str, days: int) -> str:
    return (parse_date(date_str) + timedelta(days=days)).isoformat()


def days_between(start: str, end: str) -> int:
    return (parse_date(end) - parse_date(start)).days


def month_dates(year: int, month: int):
    """All dates of a month (month is 1-12) as YYYY-MM-DD strings."""
    _, last_day = calendar.monthrange(year, month)
    return [date(year, month, d).isoformat() for d in range(1, last_day + 1)]
