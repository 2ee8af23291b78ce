# timelog/services/analysis_service.py

import json
import logging
import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError
from sqlalchemy import or_
from sqlalchemy.orm import Session

from timelog.models.saved_note import SavedNote, ANALYSIS_TYPE
from timelog.schemas.analysis import DailyAnalysisResult
from timelog.services.llm_provider import ZhipuProvider
from timelog.utils.constants import (
    RANGE_30D,
    RANGE_DAYS,
    RANGE_LABELS,
    SUMMARY_SECTIONS,
    TIME_DISTRIBUTION_FIELDS,
)

logger = logging.getLogger(__name__)

EMPTY_SUMMARY = "暂无足够的数据进行分析"
NO_DOCUMENTS_TEXT = "暂无可用文档进行分析。"

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")


# 1. 프롬프트
def build_daily_prompt(entries: List[Dict]) -> str:
    lines = []
    for e in entries:
        line = f"- {e['start_time']}-{e['end_time']}: {e['activity']}"
        if e.get("thought"):
            line += f" (想法: {e['thought']})"
        lines.append(line)
    entries_text = "\n".join(lines)

    distribution = ",\n    ".join(f'"{name}": 1.0' for name in TIME_DISTRIBUTION_FIELDS)
    categories = "/".join(TIME_DISTRIBUTION_FIELDS)

    return f"""你是一个时间管理与正念教练。请基于当天记录，输出清晰、简洁、条目化的分析。
当天记录：
{entries_text}

只返回 JSON（不要任何其它文字）。JSON 结构如下：
{{
  "summary": "总结：\\n- 早上（06-12）：...\\n- 中午（12-14）：...\\n- 下午（14-18）：...\\n- 晚上（18-24）：...\\n- 关键事件：...",
  "dailyNarrative": "用第一人称写一小段当天的叙事",
  "timeDistribution": {{
    {distribution}
  }},
  "energyMoodCurve": {{
    "早上": "精力/情绪描述",
    "中午": "...",
    "下午": "...",
    "晚上": "..."
  }},
  "patterns": ["重复出现的模式或习惯（可为空）"],
  "insights": [
    "洞察：效率结构（{categories}）占比与特点",
    "洞察：如有情绪表达，给出当天情绪结论；没有则写“未明显出现情绪词”"
  ],
  "focusScore": 75,
  "highlights": ["做得好的点（条目化）"],
  "improvements": ["改进建议（面向明天，条目化、具体可执行）"]
}}

要求：
1) summary 必须按早上/中午/下午/晚上总结，并包含关键事件。
2) timeDistribution 用“小时数（数字）”，总和约等于当天记录时长。
3) insights = 洞察（效率与情绪分析）。
4) highlights = 做得好的点。
5) improvements = 改进建议。
6) 语言：中文，简洁，条目化。"""


def build_range_prompt(documents: List[Dict], range_label: str) -> str:
    docs_text = "\n\n".join(f"【{d['date']}】\n{d['content']}" for d in documents)
    sections = "\n\n".join(f"## {title}\n- ..." for title in SUMMARY_SECTIONS)

    return f"""你是一个时间管理与正念教练。请基于以下已保存的分析文档，总结{range_label}的整体表现。
要求：中文、简洁、条目化；只输出 Markdown，不要输出 JSON 或其它说明。

文档内容：
{docs_text}

输出格式（Markdown）：
{sections}"""


# 2. 응답 파싱
def empty_result() -> DailyAnalysisResult:
    return DailyAnalysisResult(summary=EMPTY_SUMMARY)


def parse_daily_analysis(raw: str) -> DailyAnalysisResult:
    """Parse the model's text into a DailyAnalysisResult.

    Takes everything from the first "{" to the last "}" and fills missing
    fields with defaults. Any failure yields the empty result instead of
    raising.
    """
    match = _JSON_BLOCK.search(raw or "")
    if not match:
        logger.warning("No JSON found in AI response")
        return empty_result()

    try:
        parsed = json.loads(match.group(0))
        if not isinstance(parsed, dict):
            raise ValueError("AI response JSON is not an object")

        return DailyAnalysisResult(
            summary=parsed.get("summary") or "",
            daily_narrative=parsed.get("dailyNarrative") or None,
            time_distribution=parsed.get("timeDistribution") or {},
            energy_mood_curve=parsed.get("energyMoodCurve") or None,
            patterns=parsed.get("patterns") or [],
            insights=parsed.get("insights") or [],
            focus_score=parsed.get("focusScore") or 50,
            highlights=parsed.get("highlights") or [],
            improvements=parsed.get("improvements") or [],
        )
    except (ValueError, TypeError, ValidationError) as e:
        logger.warning(f"Failed to parse AI response: {e}")
        return empty_result()


def parse_markdown_sections(content: str) -> Dict[str, str]:
    # "## " 헤더 기준으로 나눔. 헤더 앞 내용은 "" 키로 보관
    sections: Dict[str, List[str]] = {}
    title = ""
    for line in (content or "").splitlines():
        if line.startswith("## "):
            title = line[3:].strip()
            sections.setdefault(title, [])
            continue
        sections.setdefault(title, []).append(line)

    result = {}
    for key, lines in sections.items():
        body = "\n".join(lines).strip()
        if key or body:
            result[key] = body
    return result


# 3. 기간 계산
def resolve_range(range_value: Any, today: Optional[date] = None) -> Tuple[str, str, str]:
    """Return (range_key, start, end); unknown values fall back to "30d"."""
    key = range_value if isinstance(range_value, str) and range_value in RANGE_DAYS else RANGE_30D
    end = today or datetime.now(timezone.utc).date()
    start = end - timedelta(days=RANGE_DAYS[key])
    return key, start.isoformat(), end.isoformat()


# 4. LLM 호출
def analyze_day(entries: List[Dict], api_key: str, model: str) -> DailyAnalysisResult:
    if not entries:
        return empty_result()

    provider = ZhipuProvider(api_key=api_key, model=model)
    raw = provider.complete(build_daily_prompt(entries))
    return parse_daily_analysis(raw)


def summarize_documents(documents: List[Dict], range_key: str, api_key: str, model: str) -> str:
    if not documents:
        return NO_DOCUMENTS_TEXT

    provider = ZhipuProvider(api_key=api_key, model=model)
    return provider.complete(build_range_prompt(documents, RANGE_LABELS[range_key]))


# 5. 저장 문서
def list_documents(
    db: Session,
    date_str: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    q: Optional[str] = None,
    page: int = 1,
    page_size: int = 20,
) -> Tuple[int, List[SavedNote]]:
    query = db.query(SavedNote).filter(SavedNote.type == ANALYSIS_TYPE)

    if date_str:
        query = query.filter(SavedNote.source_date == date_str)
    else:
        if date_from:
            query = query.filter(SavedNote.source_date >= date_from)
        if date_to:
            query = query.filter(SavedNote.source_date <= date_to)

    if q:
        query = query.filter(or_(
            SavedNote.content.ilike(f"%{q}%"),
            SavedNote.source_date.contains(q),
        ))

    total = query.count()
    docs = (
        query.order_by(SavedNote.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return total, docs


def documents_in_range(db: Session, start: str, end: str) -> List[SavedNote]:
    return (
        db.query(SavedNote)
        .filter(
            SavedNote.type == ANALYSIS_TYPE,
            SavedNote.source_date >= start,
            SavedNote.source_date <= end,
        )
        .order_by(SavedNote.source_date.asc())
        .all()
    )


def save_document(db: Session, date_str: str, content: str) -> SavedNote:
    doc = SavedNote(content=content, source_date=date_str, type=ANALYSIS_TYPE)
    db.add(doc)
    db.commit()
    db.refresh(doc)
    return doc


def get_document(db: Session, doc_id: str) -> Optional[SavedNote]:
    return db.query(SavedNote).filter(SavedNote.id == doc_id).first()


def delete_document(db: Session, doc: SavedNote) -> None:
    db.delete(doc)
    db.commit()
