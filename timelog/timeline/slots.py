# timelog/timeline/slots.py

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, List, Optional, Tuple

SLOT_MINUTES = 30
SLOTS_PER_DAY = 24 * 60 // SLOT_MINUTES  # 48

STATUS_RECORDED = "recorded"
STATUS_CURRENT = "current"
STATUS_FUTURE = "future"


@dataclass
class TimeSlot:
    start_time: str
    end_time: str
    status: str = STATUS_FUTURE
    entry: Optional[Any] = None
    is_current: bool = False
    display_activity: Optional[str] = None


def _fmt(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def generate_time_slots() -> List[Tuple[str, str]]:
    # 00:00 ~ 23:30, 30분 단위 48개 (마지막 슬롯은 24:00 에 끝남)
    return [
        (_fmt(i * SLOT_MINUTES), _fmt((i + 1) * SLOT_MINUTES))
        for i in range(SLOTS_PER_DAY)
    ]


def slot_index(start_time: str) -> int:
    h, m = map(int, start_time.split(":"))
    return (h * 60 + m) // SLOT_MINUTES


def current_slot_start(now: datetime) -> str:
    minute = 0 if now.minute < 30 else 30
    return f"{now.hour:02d}:{minute:02d}"


def format_date_key(d: date) -> str:
    return d.strftime("%Y-%m-%d")


def previous_slot(date_str: str, start_time: str) -> Tuple[str, str]:
    """Return (date, start_time) of the slot exactly 30 minutes earlier.

    00:00 rolls back to 23:30 of the previous day.
    """
    h, m = map(int, start_time.split(":"))
    current = datetime.strptime(date_str, "%Y-%m-%d") + timedelta(hours=h, minutes=m)
    prev = current - timedelta(minutes=SLOT_MINUTES)
    return prev.strftime("%Y-%m-%d"), prev.strftime("%H:%M")
