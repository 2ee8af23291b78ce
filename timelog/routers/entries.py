import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from timelog.database import get_db
from timelog.schemas.entries import EntryCreateRequest, EntryUpdateRequest, EntryResponse
from timelog.services import entry_service
from timelog.utils.responses import envelope
from timelog.utils.security import require_token
from timelog.utils.validators import require_date, require_time

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_token)])


def _dump(entry):
    return EntryResponse.model_validate(entry).model_dump(by_alias=True)


# GET /api/entries?date=YYYY-MM-DD
@router.get("")
def list_entries(
    date: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    require_date(date)

    try:
        entries = entry_service.list_entries(db, date)
    except SQLAlchemyError:
        logger.exception("Error fetching time entries")
        raise HTTPException(status_code=500, detail="Failed to fetch time entries")

    return envelope([_dump(e) for e in entries])


# POST /api/entries
# 같은 슬롯에 이미 기록이 있으면 새로 만들지 않고 수정
@router.post("")
def create_entry(payload: EntryCreateRequest, db: Session = Depends(get_db)):
    if not payload.date or not payload.start_time or not payload.end_time:
        raise HTTPException(
            status_code=400,
            detail="Missing required fields: date, startTime, endTime",
        )

    if entry_service.is_empty_save(payload):
        return envelope(None)

    require_date(payload.date)
    require_time(payload.start_time)
    require_time(payload.end_time)

    try:
        entry, created = entry_service.save_entry(db, payload)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error creating time entry")
        raise HTTPException(status_code=500, detail="Failed to create time entry")

    return envelope(_dump(entry), status_code=201 if created else 200)


# GET /api/entries/previous?date=YYYY-MM-DD&startTime=HH:MM
@router.get("/previous")
def previous_entry(
    date: Optional[str] = Query(None),
    start_time: Optional[str] = Query(None, alias="startTime"),
    db: Session = Depends(get_db),
):
    if not date or not start_time:
        raise HTTPException(
            status_code=400,
            detail="Date and startTime query parameters are required",
        )
    require_date(date)
    require_time(start_time)

    try:
        entry = entry_service.find_previous_entry(db, date, start_time)
    except SQLAlchemyError:
        logger.exception("Error fetching previous time entry")
        raise HTTPException(status_code=500, detail="Failed to fetch previous time entry")

    return envelope(_dump(entry) if entry else None)


@router.get("/{entry_id}")
def get_entry(entry_id: str, db: Session = Depends(get_db)):
    entry = entry_service.get_entry(db, entry_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Time entry not found")
    return envelope(_dump(entry))


@router.put("/{entry_id}")
def update_entry(
    entry_id: str,
    payload: EntryUpdateRequest,
    db: Session = Depends(get_db),
):
    entry = entry_service.get_entry(db, entry_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Time entry not found")

    try:
        entry = entry_service.update_entry(db, entry, payload.model_dump(exclude_unset=True))
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error updating time entry")
        raise HTTPException(status_code=500, detail="Failed to update time entry")

    return envelope(_dump(entry))


@router.delete("/{entry_id}")
def delete_entry(entry_id: str, db: Session = Depends(get_db)):
    entry = entry_service.get_entry(db, entry_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Time entry not found")

    try:
        entry_service.delete_entry(db, entry)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error deleting time entry")
        raise HTTPException(status_code=500, detail="Failed to delete time entry")

    return envelope({"message": "Time entry deleted successfully"})
