from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime


class CamelModel(BaseModel):
    # 요청/응답 모두 camelCase (startTime, isSameAsPrevious ...)
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class EntryCreateRequest(CamelModel):
    date: Optional[str] = None        # "YYYY-MM-DD"
    start_time: Optional[str] = None  # "HH:MM"
    end_time: Optional[str] = None
    activity: Optional[str] = ""
    thought: Optional[str] = None
    is_same_as_previous: Optional[bool] = False


class EntryUpdateRequest(CamelModel):
    # 전달된 필드만 수정
    activity: Optional[str] = None
    thought: Optional[str] = None
    is_same_as_previous: Optional[bool] = None


class EntryResponse(CamelModel):
    id: str
    date: str
    start_time: str
    end_time: str
    activity: str
    thought: Optional[str] = None
    is_same_as_previous: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
