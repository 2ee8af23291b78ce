import logging
from typing import Optional

import requests
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from timelog.database import get_db
from timelog.schemas.analysis import (
    DocumentCreateRequest,
    DocumentResponse,
    DocumentsMeta,
    RangeSummaryRequest,
)
from timelog.services import analysis_service
from timelog.services.config_service import ProviderNotConfigured, get_provider_settings
from timelog.services.llm_provider import ProviderError
from timelog.utils.constants import DOCUMENTS_DEFAULT_PAGE_SIZE, DOCUMENTS_MAX_PAGE_SIZE
from timelog.utils.responses import envelope
from timelog.utils.security import require_token
from timelog.utils.validators import is_valid_date, require_date

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_token)])


def _dump(doc):
    return DocumentResponse.model_validate(doc).model_dump(by_alias=True)


def _as_int(value: Optional[str], default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


# GET /api/analysis-documents?date=&from=&to=&q=&page=&pageSize=
@router.get("")
def list_documents(
    date: Optional[str] = Query(None),
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    q: Optional[str] = Query(None),
    page: Optional[str] = Query(None),
    page_size: Optional[str] = Query(None, alias="pageSize"),
    db: Session = Depends(get_db),
):
    if date:
        require_date(date)
    if date_from:
        require_date(date_from, "from")
    if date_to:
        require_date(date_to, "to")

    page_num = max(1, _as_int(page, 1))
    size = min(DOCUMENTS_MAX_PAGE_SIZE, max(1, _as_int(page_size, DOCUMENTS_DEFAULT_PAGE_SIZE)))

    try:
        total, docs = analysis_service.list_documents(
            db, date, date_from, date_to, q, page_num, size
        )
    except SQLAlchemyError:
        logger.exception("Error fetching analysis documents")
        raise HTTPException(status_code=500, detail="Failed to fetch analysis documents")

    meta = DocumentsMeta(total=total, page=page_num, page_size=size)
    return envelope([_dump(d) for d in docs], meta=meta.model_dump(by_alias=True))


# POST /api/analysis-documents - AI 분석 결과 저장
@router.post("")
def create_document(payload: DocumentCreateRequest, db: Session = Depends(get_db)):
    if not is_valid_date(payload.date):
        raise HTTPException(status_code=400, detail="Date is required (format: YYYY-MM-DD)")
    if not payload.content or not payload.content.strip():
        raise HTTPException(status_code=400, detail="Content is required")

    try:
        doc = analysis_service.save_document(db, payload.date, payload.content)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error saving analysis document")
        raise HTTPException(status_code=500, detail="Failed to save analysis document")

    return envelope(_dump(doc), status_code=201)


# POST /api/analysis-documents/summary - 30일/365일 기간 요약
@router.post("/summary")
def summarize_range(payload: RangeSummaryRequest, db: Session = Depends(get_db)):
    range_key, start, end = analysis_service.resolve_range(payload.range)

    try:
        docs = analysis_service.documents_in_range(db, start, end)
        if not docs:
            raise HTTPException(status_code=404, detail="No saved documents in range")

        api_key, model = get_provider_settings(db)
        content = analysis_service.summarize_documents(
            [{"date": d.source_date or "", "content": d.content} for d in docs],
            range_key,
            api_key,
            model,
        )

    except ProviderNotConfigured as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (ProviderError, requests.RequestException, SQLAlchemyError):
        logger.exception("Error analyzing documents")
        raise HTTPException(status_code=500, detail="Failed to analyze documents")

    return envelope({
        "content": content,
        "sections": analysis_service.parse_markdown_sections(content),
        "range": range_key,
        "from": start,
        "to": end,
    })


@router.delete("/{doc_id}")
def delete_document(doc_id: str, db: Session = Depends(get_db)):
    doc = analysis_service.get_document(db, doc_id)
    if not doc:
        raise HTTPException(status_code=404, detail="Document not found")

    try:
        analysis_service.delete_document(db, doc)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error deleting analysis document")
        raise HTTPException(status_code=500, detail="Failed to delete analysis document")

    return envelope(None)
