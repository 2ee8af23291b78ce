from datetime import datetime

import pytest

from timelog.client.api import ApiError
from timelog.client.cache import AnalysisCache, EntriesCache
from timelog.client.editor import MAX_SAVE_ATTEMPTS, EntryForm, FormData
from timelog.client.insights import (
    MSG_ANALYSIS_FAILED,
    MSG_NO_DOCUMENTS,
    MSG_NO_ENTRIES,
    Insights,
    analysis_to_markdown,
)
from timelog.client.timeline import Timeline
from tests.fakes import FakeApi, InlineExecutor


@pytest.fixture
def saved():
    return []


@pytest.fixture
def form(saved):
    # 테스트 중에는 타이머가 발화하지 않도록 긴 디바운스
    f = EntryForm(saved.append, debounce_ms=60_000)
    f.open_editor("2024-01-01", "09:00", "09:30")
    yield f
    f.close_editor()


def test_debounced_saves_are_coalesced(form, saved):
    form.update_field("activity", "写")
    form.update_field("activity", "写代")
    form.update_field("activity", "写代码")
    assert saved == []

    assert form.flush() is True
    assert saved == [FormData("写代码", "")]
    assert form.last_saved_at is not None
    assert form.flush() is False


def test_empty_activity_does_not_autosave(form, saved):
    form.update_field("thought", "只有想法")
    assert form.flush() is False
    assert saved == []


def test_save_gives_up_after_max_attempts(form, saved):
    assert form._save(FormData("写代码"), attempt=MAX_SAVE_ATTEMPTS) is False
    assert saved == []


def test_save_while_saving_is_rearmed(form, saved):
    form.is_saving = True
    assert form._save(FormData("写代码")) is False
    assert form._pending == FormData("写代码")
    assert saved == []

    form.is_saving = False
    assert form.flush() is True
    assert saved == [FormData("写代码")]


def test_save_errors_are_logged_not_raised():
    def boom(data):
        raise ApiError("Failed to create time entry", 500)

    f = EntryForm(boom)
    f.form_data = FormData("写代码")
    assert f.immediate_save() is False
    assert f.is_saving is False


def test_fill_from_previous():
    api = FakeApi()
    api.create_entry({"date": "2024-01-01", "startTime": "08:30", "endTime": "09:00",
                      "activity": "读书", "thought": "安静"})

    f = EntryForm(lambda data: None, debounce_ms=60_000)
    f.open_editor("2024-01-01", "09:00", "09:30")
    assert f.fill_from_previous(api) is True
    assert f.form_data == FormData("读书", "安静")

    f.open_editor("2024-01-01", "12:00", "12:30")
    assert f.fill_from_previous(api) is False
    f.close_editor()


def test_form_drives_timeline(tmp_path):
    api = FakeApi()
    timeline = Timeline(api, cache=EntriesCache(tmp_path), executor=InlineExecutor(),
                        clock=lambda: datetime(2024, 1, 1, 10, 10))
    form = EntryForm.for_timeline(timeline, debounce_ms=60_000)

    form.open_editor("2024-01-01", "09:00", "09:30")
    form.update_field("activity", "写代码")
    form.flush()
    assert timeline.entry_at("09:00").activity == "写代码"

    # 직접 저장으로 비우면 삭제
    form.update_field("activity", "")
    assert form.immediate_save() is True
    assert timeline.entry_at("09:00") is None
    assert api.rows == {}
    form.close_editor()


def test_analysis_markdown():
    md = analysis_to_markdown("2024-01-01", {
        "summary": "专注的一天",
        "dailyNarrative": "我写了很多代码",
        "timeDistribution": {"输出": 3, "休息": 0.5},
        "insights": ["上午效率高"],
        "highlights": [],
        "improvements": ["早点睡"],
    })
    lines = md.splitlines()
    assert lines[0] == "# 2024-01-01 AI 分析"
    assert "## 日记式总结" in lines
    assert "- 上午效率高" in lines
    assert "- 暂无" in lines
    assert "- 输出: 3.0" in lines
    assert "- 休息: 0.5" in lines
    assert "## 情绪与能量曲线" not in lines


def test_insights_analyze_uses_cache(tmp_path):
    api = FakeApi()
    api.analysis["2024-01-01"] = {"summary": "s"}
    insights = Insights(api, AnalysisCache(tmp_path))

    assert insights.analyze("2024-01-01") == {"summary": "s"}
    api.analysis["2024-01-01"] = {"summary": "new"}
    assert insights.analyze("2024-01-01") == {"summary": "s"}
    assert insights.analyze("2024-01-01", refresh=True) == {"summary": "new"}
    assert insights.cached_analysis("2024-01-01") == {"summary": "new"}
    assert insights.cached_analysis("2024-01-03") is None


def test_insights_no_entries_message(tmp_path):
    insights = Insights(FakeApi(), AnalysisCache(tmp_path))
    assert insights.analyze("2024-01-02") is None
    assert insights.error == MSG_NO_ENTRIES


def test_insights_failure_falls_back_to_cached_analysis(tmp_path):
    cache = AnalysisCache(tmp_path)
    cache.write("2024-01-01", {"summary": "旧的"})
    insights = Insights(FakeApi(fail=True), cache)

    assert insights.analyze("2024-01-01", refresh=True) == {"summary": "旧的"}
    assert insights.error == MSG_ANALYSIS_FAILED


def test_insights_documents_and_summary(tmp_path):
    api = FakeApi()
    insights = Insights(api, AnalysisCache(tmp_path))

    assert insights.summarize("30d") is None
    assert insights.error == MSG_NO_DOCUMENTS

    doc = insights.save_as_document("2024-01-01", {"summary": "s"})
    assert doc["content"].startswith("# 2024-01-01 AI 分析")
    assert [d["id"] for d in insights.documents("2024-01-01")] == [doc["id"]]

    assert insights.summarize("30d")["range"] == "30d"
    assert insights.error is None

    assert insights.delete_document(doc["id"]) is True
    assert insights.documents("2024-01-01") == []
