from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from timelog.database import get_db
from timelog.services.config_service import get_access_token

security = HTTPBearer(auto_error=False)


def extract_token(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = None,
) -> Optional[str]:
    if creds and creds.credentials:
        return creds.credentials.strip()
    token = request.headers.get("x-app-token", "").strip()
    return token or None


def require_token(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
):
    # 저장된 토큰이 없으면 모두 통과
    stored = get_access_token(db)
    if not stored:
        return None

    token = extract_token(request, creds)
    if not token or token != stored:
        raise HTTPException(status_code=401, detail="Unauthorized")

    return token
