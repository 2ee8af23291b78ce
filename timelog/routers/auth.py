from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from timelog.database import get_db
from timelog.schemas.auth import VerifyRequest
from timelog.services.config_service import get_access_token
from timelog.utils.responses import envelope
from timelog.utils.security import extract_token, security

router = APIRouter()


# POST /api/auth/verify
# 헤더 토큰 또는 body 의 token 으로 확인
@router.post("/verify")
def verify(
    request: Request,
    payload: Optional[VerifyRequest] = Body(None),
    creds: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
):
    stored = get_access_token(db)
    if not stored:
        return envelope(None)

    token = extract_token(request, creds) or (payload.token if payload else None)
    if not token or token != stored:
        raise HTTPException(status_code=401, detail="Unauthorized")

    return envelope(None)
