from typing import Optional
from fastapi import HTTPException
from services.dates import is_valid_date, today_str

def require_date(date_str: Optional[str], default_today: bool = False) -> str:
    if date_str is None and default_today:
        return today_str()
    if not is_valid_date(date_str):
        raise HTTPException(status_code=400, detail="Invalid date format, use YYYY-MM-DD")
    return date_str
