from pydantic import BaseModel
from typing import Optional


class VerifyRequest(BaseModel):
    token: Optional[str] = None
