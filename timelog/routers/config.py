import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from timelog.database import get_db
from timelog.schemas.config import ConfigUpdateRequest
from timelog.services.config_service import read_public_config, update_config
from timelog.utils.responses import envelope
from timelog.utils.security import require_token

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_token)])


@router.get("")
def get_config(db: Session = Depends(get_db)):
    try:
        config = read_public_config(db)
    except SQLAlchemyError:
        logger.exception("Error fetching config")
        raise HTTPException(status_code=500, detail="Failed to fetch configuration")

    return envelope(config.model_dump(by_alias=True))


@router.post("")
def save_config(payload: ConfigUpdateRequest, db: Session = Depends(get_db)):
    try:
        update_config(db, payload)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error saving config")
        raise HTTPException(status_code=500, detail="Failed to save configuration")

    return envelope(None)
