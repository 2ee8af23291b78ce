from pydantic import Field
from typing import Any, Dict, List, Optional
from datetime import datetime

from timelog.schemas.entries import CamelModel


class AnalyzeRequest(CamelModel):
    date: Optional[str] = None


class DailyAnalysisResult(CamelModel):
    summary: str = ""
    daily_narrative: Optional[str] = None
    time_distribution: Dict[str, float] = Field(default_factory=dict)
    energy_mood_curve: Optional[Dict[str, str]] = None
    patterns: List[str] = Field(default_factory=list)
    insights: List[str] = Field(default_factory=list)
    focus_score: float = 50
    highlights: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)


class DocumentCreateRequest(CamelModel):
    date: Optional[str] = None
    content: Optional[str] = None


class DocumentResponse(CamelModel):
    id: str
    content: str
    source_date: Optional[str] = None
    created_at: Optional[datetime] = None


class DocumentsMeta(CamelModel):
    total: int
    page: int
    page_size: int


class RangeSummaryRequest(CamelModel):
    range: Any = None  # "30d" | "365d", 그 외는 30d 로 처리
