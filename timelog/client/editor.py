# timelog/client/editor.py

import logging
import threading
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Optional

import requests

from timelog.client.api import ApiClient, ApiError

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 500

# 저장 재시도(재귀) 상한
MAX_SAVE_ATTEMPTS = 50


@dataclass
class FormData:
    activity: str = ""
    thought: str = ""


class EntryForm:
    """Editor state for one slot with debounced auto-save.

    Keystrokes update the form and (re)arm a timer; only the last state
    inside the debounce window is saved. A save that fires while another
    one is running is re-armed, at most MAX_SAVE_ATTEMPTS times.
    """

    def __init__(self, on_save: Callable[[FormData], None], debounce_ms: int = DEFAULT_DEBOUNCE_MS):
        self.on_save = on_save
        self.debounce_ms = debounce_ms

        self.is_open = False
        self.entry_id: Optional[str] = None
        self.date = ""
        self.start_time = ""
        self.end_time = ""
        self.form_data = FormData()

        self.is_saving = False
        self.last_saved_at: Optional[datetime] = None

        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[FormData] = None
        self._lock = threading.Lock()

    @classmethod
    def for_timeline(cls, timeline, debounce_ms: int = DEFAULT_DEBOUNCE_MS) -> "EntryForm":
        form = cls(lambda data: None, debounce_ms)
        form.on_save = lambda data: timeline.save(form.start_time, data.activity, data.thought or None)
        return form

    def open_editor(self, date_str: str, start_time: str, end_time: str,
                    entry_id: Optional[str] = None, activity: str = "", thought: Optional[str] = None):
        self.entry_id = entry_id
        self.date = date_str
        self.start_time = start_time
        self.end_time = end_time
        self.form_data = FormData(activity or "", thought or "")
        self.is_open = True

    def close_editor(self):
        self._cancel_timer()
        self.reset()

    def reset(self):
        self.is_open = False
        self.entry_id = None
        self.date = ""
        self.start_time = ""
        self.end_time = ""
        self.form_data = FormData()
        self._pending = None

    def update_field(self, name: str, value: str):
        self.form_data = replace(self.form_data, **{name: value})

        # activity 가 있을 때만 자동 저장
        if self.form_data.activity.strip():
            self._trigger_save(self.form_data)

    def fill_from_previous(self, api: ApiClient) -> bool:
        # 바로 이전(30분 전) 슬롯 내용을 폼에 채움
        try:
            previous = api.fetch_previous(self.date, self.start_time)
        except (ApiError, requests.RequestException) as e:
            logger.error(f"Failed to fetch previous entry: {e}")
            return False

        if not previous:
            return False

        self.update_field("activity", previous.get("activity") or "")
        if previous.get("thought"):
            self.update_field("thought", previous["thought"])
        return True

    def flush(self) -> bool:
        """Run a pending debounced save right away."""
        self._cancel_timer()
        data, self._pending = self._pending, None
        if data is None:
            return False
        return self._save(data)

    def immediate_save(self) -> bool:
        self._cancel_timer()
        self._pending = None
        return self._save(self.form_data, allow_empty=True)

    def _cancel_timer(self):
        if self._timer:
            self._timer.cancel()
            self._timer = None

    def _trigger_save(self, data: FormData, attempt: int = 0):
        self._cancel_timer()
        self._pending = data
        self._timer = threading.Timer(self.debounce_ms / 1000, self._fire, args=(attempt,))
        self._timer.daemon = True
        self._timer.start()

    def _fire(self, attempt: int):
        data, self._pending = self._pending, None
        if data is not None:
            self._save(data, attempt)

    def _save(self, data: FormData, attempt: int = 0, allow_empty: bool = False) -> bool:
        if attempt >= MAX_SAVE_ATTEMPTS:
            logger.error("Save failed: maximum retries exceeded")
            return False

        # 자동 저장은 activity 가 있을 때만, 직접 저장은 비우기(삭제)도 허용
        if not allow_empty and not data.activity.strip():
            return False

        with self._lock:
            if self.is_saving:
                self._trigger_save(data, attempt + 1)
                return False
            self.is_saving = True

        try:
            self.on_save(data)
            self.last_saved_at = datetime.now()
            return True
        except (ApiError, requests.RequestException) as e:
            logger.error(f"Failed to save entry: {e}")
            return False
        finally:
            self.is_saving = False
