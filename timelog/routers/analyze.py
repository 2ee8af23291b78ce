import logging

import requests
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from timelog.database import get_db
from timelog.schemas.analysis import AnalyzeRequest
from timelog.services import analysis_service, entry_service
from timelog.services.config_service import ProviderNotConfigured, get_provider_settings
from timelog.services.llm_provider import ProviderError
from timelog.utils.responses import envelope
from timelog.utils.security import require_token
from timelog.utils.validators import is_valid_date

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_token)])


# POST /api/analyze - 하루 기록 AI 분석
@router.post("")
def analyze(payload: AnalyzeRequest, db: Session = Depends(get_db)):
    if not is_valid_date(payload.date):
        raise HTTPException(status_code=400, detail="Date is required (format: YYYY-MM-DD)")

    try:
        entries = entry_service.list_entries(db, payload.date)
        if not entries:
            raise HTTPException(status_code=404, detail="No entries found for this date")

        api_key, model = get_provider_settings(db)
        rows = entry_service.resolve_chain_for_analysis(entries)
        result = analysis_service.analyze_day(rows, api_key, model)

    except ProviderNotConfigured as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (ProviderError, requests.RequestException, SQLAlchemyError):
        logger.exception("Error analyzing entries")
        raise HTTPException(status_code=500, detail="Failed to analyze entries")

    return envelope(result.model_dump(by_alias=True))
