# timelog/services/entry_service.py

from typing import Dict, List, Optional, Tuple
from sqlalchemy.orm import Session

from timelog.models.time_entry import TimeEntry
from timelog.schemas.entries import EntryCreateRequest
from timelog.timeline.chain import resolve_activity
from timelog.timeline.slots import previous_slot


def _blank(value: Optional[str]) -> bool:
    return not (value or "").strip()


def list_entries(db: Session, date_str: str) -> List[TimeEntry]:
    return (
        db.query(TimeEntry)
        .filter(TimeEntry.date == date_str)
        .order_by(TimeEntry.start_time.asc())
        .all()
    )


def get_entry(db: Session, entry_id: str) -> Optional[TimeEntry]:
    return db.query(TimeEntry).filter(TimeEntry.id == entry_id).first()


def find_slot_entry(db: Session, date_str: str, start_time: str) -> Optional[TimeEntry]:
    return db.query(TimeEntry).filter(
        TimeEntry.date == date_str,
        TimeEntry.start_time == start_time,
    ).first()


def is_empty_save(payload: EntryCreateRequest) -> bool:
    # 내용도 생각도 없고 마커도 아니면 저장하지 않음
    return (
        _blank(payload.activity)
        and _blank(payload.thought)
        and not payload.is_same_as_previous
    )


def save_entry(db: Session, payload: EntryCreateRequest) -> Tuple[TimeEntry, bool]:
    """Create the slot's entry, or update it in place when the slot is taken.

    Returns (entry, created).
    """
    entry = find_slot_entry(db, payload.date, payload.start_time)
    created = entry is None

    if created:
        entry = TimeEntry(date=payload.date, start_time=payload.start_time)
        db.add(entry)

    entry.end_time = payload.end_time
    entry.activity = payload.activity or ""
    entry.thought = payload.thought or None
    entry.is_same_as_previous = bool(payload.is_same_as_previous)

    db.commit()
    db.refresh(entry)
    return entry, created


def update_entry(db: Session, entry: TimeEntry, fields: Dict) -> TimeEntry:
    if "activity" in fields and fields["activity"] is not None:
        entry.activity = fields["activity"]
    if "thought" in fields:
        entry.thought = fields["thought"] or None
    if "is_same_as_previous" in fields and fields["is_same_as_previous"] is not None:
        entry.is_same_as_previous = fields["is_same_as_previous"]

    db.commit()
    db.refresh(entry)
    return entry


def delete_entry(db: Session, entry: TimeEntry) -> None:
    db.delete(entry)
    db.commit()


def find_previous_entry(db: Session, date_str: str, start_time: str) -> Optional[TimeEntry]:
    # 정확히 30분 전 슬롯만 조회 (가장 가까운 내용 찾기는 클라이언트 몫)
    prev_date, prev_start = previous_slot(date_str, start_time)
    return find_slot_entry(db, prev_date, prev_start)


def resolve_chain_for_analysis(entries: List[TimeEntry]) -> List[Dict]:
    """Entries as plain dicts with marker activities replaced by their anchor's."""
    by_start = {e.start_time: e for e in entries}
    rows = []
    for e in entries:
        activity = e.activity
        if e.is_same_as_previous and _blank(activity):
            activity = resolve_activity(by_start, e.start_time) or ""
        rows.append({
            "start_time": e.start_time,
            "end_time": e.end_time,
            "activity": activity,
            "thought": e.thought,
        })
    return rows
