# timelog/client/insights.py

import logging
from typing import Dict, List, Optional

import requests

from timelog.client.api import ApiClient, ApiError
from timelog.client.cache import AnalysisCache

logger = logging.getLogger(__name__)

# 사용자에게 보여줄 메시지
MSG_NO_ENTRIES = "今天还没有记录，先记几条再分析。"
MSG_ANALYSIS_FAILED = "分析失败"
MSG_NO_DOCUMENTS = "该时间段还没有保存的分析文档。"


def _bullets(items: List[str]) -> List[str]:
    return [f"- {item}" for item in items] if items else ["- 暂无"]


def analysis_to_markdown(date_key: str, analysis: Dict) -> str:
    lines = [f"# {date_key} AI 分析", "", "## 总结", analysis.get("summary") or ""]

    if analysis.get("dailyNarrative"):
        lines += ["", "## 日记式总结", analysis["dailyNarrative"]]

    curve = analysis.get("energyMoodCurve") or {}
    if curve:
        lines += ["", "## 情绪与能量曲线"]
        lines += [f"- {key}: {value}" for key, value in curve.items()]

    lines += ["", "## 洞察"] + _bullets(analysis.get("insights") or [])
    lines += ["", "## 做得好的点"] + _bullets(analysis.get("highlights") or [])
    lines += ["", "## 改进建议"] + _bullets(analysis.get("improvements") or [])

    lines += ["", "## 时间分布（小时）"]
    for key, value in (analysis.get("timeDistribution") or {}).items():
        shown = f"{value:.1f}" if isinstance(value, (int, float)) else value
        lines.append(f"- {key}: {shown}")

    return "\n".join(lines)


class Insights:
    """Day analysis with a local cache, saved documents and range summaries."""

    def __init__(self, api: ApiClient, cache: Optional[AnalysisCache] = None):
        self.api = api
        self.cache = cache or AnalysisCache()
        self.error: Optional[str] = None

    def cached_analysis(self, date_key: str) -> Optional[Dict]:
        return self.cache.read(date_key)

    def analyze(self, date_key: str, refresh: bool = False) -> Optional[Dict]:
        self.error = None
        if not refresh:
            cached = self.cached_analysis(date_key)
            if cached:
                return cached

        try:
            analysis = self.api.analyze_day(date_key)
        except ApiError as e:
            logger.warning(f"Analysis failed for {date_key}: {e}")
            self.error = MSG_NO_ENTRIES if e.status_code == 404 else MSG_ANALYSIS_FAILED
            return self.cached_analysis(date_key)
        except requests.RequestException as e:
            logger.warning(f"Analysis failed for {date_key}: {e}")
            self.error = MSG_ANALYSIS_FAILED
            return self.cached_analysis(date_key)

        self.cache.write(date_key, analysis)
        return analysis

    def save_as_document(self, date_key: str, analysis: Dict) -> Optional[Dict]:
        try:
            return self.api.save_document(date_key, analysis_to_markdown(date_key, analysis))
        except (ApiError, requests.RequestException) as e:
            logger.warning(f"Failed to save analysis document for {date_key}: {e}")
            self.error = str(e)
            return None

    def documents(self, date_key: str) -> List[Dict]:
        try:
            return self.api.fetch_documents(date=date_key)["data"]
        except (ApiError, requests.RequestException) as e:
            logger.warning(f"Failed to fetch documents for {date_key}: {e}")
            return []

    def delete_document(self, doc_id: str) -> bool:
        try:
            self.api.delete_document(doc_id)
            return True
        except (ApiError, requests.RequestException) as e:
            logger.warning(f"Failed to delete document {doc_id}: {e}")
            self.error = str(e)
            return False

    def summarize(self, range_key: str) -> Optional[Dict]:
        self.error = None
        try:
            return self.api.analyze_range(range_key)
        except ApiError as e:
            logger.warning(f"Range summary failed ({range_key}): {e}")
            self.error = MSG_NO_DOCUMENTS if e.status_code == 404 else MSG_ANALYSIS_FAILED
        except requests.RequestException as e:
            logger.warning(f"Range summary failed ({range_key}): {e}")
            self.error = MSG_ANALYSIS_FAILED
        return None
