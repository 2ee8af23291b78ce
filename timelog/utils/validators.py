import re
from typing import Optional

from fastapi import HTTPException

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_RE = re.compile(r"^\d{2}:\d{2}$")


def is_valid_date(value: Optional[str]) -> bool:
    # 형식만 확인 (2024-13-40 도 통과)
    return bool(value) and DATE_RE.match(value) is not None


def is_valid_time(value: Optional[str]) -> bool:
    return bool(value) and TIME_RE.match(value) is not None


def require_date(value: Optional[str], label: str = "date") -> str:
    if not value:
        raise HTTPException(
            status_code=400,
            detail=f"{label} query parameter is required (format: YYYY-MM-DD)",
        )
    if not is_valid_date(value):
        prefix = "Invalid date format" if label == "date" else f"Invalid {label} date format"
        raise HTTPException(status_code=400, detail=f"{prefix}. Use YYYY-MM-DD")
    return value


def require_time(value: Optional[str]) -> str:
    if not is_valid_time(value):
        raise HTTPException(status_code=400, detail="Invalid time format. Use HH:MM")
    return value
