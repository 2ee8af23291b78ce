# timelog/client/timeline.py

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import date, datetime, timedelta
from threading import RLock
from typing import Callable, Dict, List, Optional, Set

import requests
from apscheduler.schedulers.background import BackgroundScheduler

from timelog.client.api import ApiClient, ApiError
from timelog.client.cache import EntriesCache
from timelog.client.entry import LocalEntry, Pending, Persisted, pending_key
from timelog.timeline.chain import (
    chain_followers,
    find_copy_source,
    has_content,
    resolve_activity,
    slot_range,
    slots_between,
)
from timelog.timeline.slots import (
    STATUS_CURRENT,
    STATUS_FUTURE,
    STATUS_RECORDED,
    TimeSlot,
    current_slot_start,
    format_date_key,
    generate_time_slots,
    slot_index,
)

logger = logging.getLogger(__name__)

CLOCK_INTERVAL_SECONDS = 60

# 슬롯 상태 (클라이언트 화면 기준)
SLOT_EMPTY = "empty"
SLOT_SAVED = "saved"
SLOT_SAME_AS_PREVIOUS = "same_as_previous"

_END_TIMES = dict(generate_time_slots())


def _blank(value: Optional[str]) -> bool:
    return not (value or "").strip()


class Timeline:
    """One day of 48 slots joined with the entries recorded for it.

    Mutations are applied locally first and then synced on the executor;
    the server's answer replaces the local entry of the same slot whenever
    it arrives. Failed syncs are logged and the local value is kept.
    """

    def __init__(
        self,
        api: ApiClient,
        cache: Optional[EntriesCache] = None,
        executor=None,
        clock: Callable[[], datetime] = datetime.now,
        selected_date: Optional[date] = None,
    ):
        self.api = api
        self.cache = cache or EntriesCache()
        self.executor = executor or ThreadPoolExecutor(max_workers=4)
        self.clock = clock

        self.current_time = clock()
        self.selected_date = selected_date or self.current_time.date()
        self.is_loading = False

        self._entries: Dict[str, LocalEntry] = {}
        # 슬롯별 삭제 횟수 / 동기화 전에 지워진 Pending 슬롯 ("<date>:<startTime>")
        self._removals: Dict[str, int] = {}
        self._tombstones: Set[str] = set()
        self._lock = RLock()
        self._scheduler: Optional[BackgroundScheduler] = None

    @property
    def date_key(self) -> str:
        return format_date_key(self.selected_date)

    @property
    def entries(self) -> List[LocalEntry]:
        with self._lock:
            return sorted(self._entries.values(), key=lambda e: e.start_time)

    def entry_at(self, start_time: str) -> Optional[LocalEntry]:
        return self._entries.get(start_time)

    # 1) 로딩 (캐시 먼저, 그 다음 서버)
    def load(self) -> List[LocalEntry]:
        date_key = self.date_key
        self.is_loading = True
        try:
            cached = self.cache.read_entries(date_key)
            if cached:
                self._replace(cached)

            try:
                fresh = [LocalEntry.from_wire(item) for item in self.api.fetch_entries(date_key)]
            except (ApiError, requests.RequestException) as e:
                logger.warning(f"Failed to fetch entries for {date_key}: {e}")
                self._replace(cached or [])
                return self.entries

            self._replace(fresh)
            self.cache.write_entries(date_key, fresh)
            return self.entries
        finally:
            self.is_loading = False

    def _replace(self, entries: List[LocalEntry]):
        with self._lock:
            self._entries = {e.start_time: e for e in entries}

    # 2) 현재 시각 / 슬롯 상태
    def tick(self):
        self.current_time = self.clock()

    def start_clock(self, interval_seconds: int = CLOCK_INTERVAL_SECONDS):
        if self._scheduler and self._scheduler.running:
            return

        self._scheduler = BackgroundScheduler()
        self._scheduler.add_job(self.tick, "interval", seconds=interval_seconds, id="timeline_clock")
        self._scheduler.start()
        logger.info(f"Timeline clock started ({interval_seconds}s)")

    def stop_clock(self):
        if self._scheduler and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None

    def close(self):
        self.stop_clock()
        self.executor.shutdown(wait=True)

    @property
    def is_today(self) -> bool:
        return format_date_key(self.current_time.date()) == self.date_key

    def current_slot(self) -> Optional[str]:
        return current_slot_start(self.current_time) if self.is_today else None

    def slots(self) -> List[TimeSlot]:
        with self._lock:
            entries = dict(self._entries)

        current = self.current_slot()
        result = []
        for start, end in generate_time_slots():
            entry = entries.get(start)
            is_current = start == current

            if is_current:
                status = STATUS_CURRENT
            elif entry:
                status = STATUS_RECORDED
            else:
                status = STATUS_FUTURE

            result.append(TimeSlot(
                start_time=start,
                end_time=end,
                status=status,
                entry=entry,
                is_current=is_current,
                display_activity=resolve_activity(entries, start),
            ))
        return result

    def slot_state(self, start_time: str) -> str:
        entry = self._entries.get(start_time)
        if entry is None:
            return SLOT_EMPTY
        if entry.is_same_as_previous and _blank(entry.activity):
            return SLOT_SAME_AS_PREVIOUS
        return SLOT_SAVED

    # 3) 날짜 이동
    def go_to_date(self, target: date) -> List[LocalEntry]:
        self.selected_date = target
        return self.load()

    def go_to_previous_day(self) -> List[LocalEntry]:
        return self.go_to_date(self.selected_date - timedelta(days=1))

    def go_to_next_day(self) -> List[LocalEntry]:
        return self.go_to_date(self.selected_date + timedelta(days=1))

    def go_to_today(self) -> List[LocalEntry]:
        self.tick()
        return self.go_to_date(self.current_time.date())

    # 4) 저장 / 삭제
    def save(self, start_time: str, activity: str, thought: Optional[str] = None,
             is_same_as_previous: Optional[bool] = None) -> bool:
        """Save one slot. Returns False when nothing had to change.

        Empty activity and thought on a non-marker deletes the slot's entry.
        Real activity always clears the marker flag unless one is passed.
        """
        activity = activity or ""
        thought = thought or None

        with self._lock:
            existing = self._entries.get(start_time)

            if is_same_as_previous is None:
                if not _blank(activity):
                    same = False
                else:
                    same = existing.is_same_as_previous if existing else False
            else:
                same = is_same_as_previous

            if _blank(activity) and _blank(thought) and not same:
                if existing is None:
                    return False
                return self.delete(start_time)

            before = resolve_activity(self._entries, start_time)
            self._write(start_time, activity, thought, same)
            after = resolve_activity(self._entries, start_time)

            if existing is not None and before != after:
                self._break_chain(start_time)
            return True

    def delete(self, start_time: str) -> bool:
        with self._lock:
            if start_time not in self._entries:
                return False
            followers = chain_followers(self._entries, start_time)
            self._remove(start_time)
            for follower in followers:
                self._remove(follower)
            if followers:
                logger.info(f"Removed {len(followers)} chained slot(s) after {start_time}")
            return True

    # 5) "이전과 동일"
    def copy_previous(self, start_time: str, confirm: Optional[Callable[[], bool]] = None) -> bool:
        """Mark the slot as inheriting the nearest earlier content.

        Empty slots between the source and this slot are backfilled with
        markers so the chain stays contiguous. Overwriting a slot that has
        its own content requires `confirm()` to return True.
        """
        with self._lock:
            source = find_copy_source(self._entries, start_time)
            if source is None:
                return False

            existing = self._entries.get(start_time)
            has_own = existing is not None and not existing.is_same_as_previous and (
                has_content(existing) or not _blank(existing.thought)
            )
            if has_own and (confirm is None or not confirm()):
                return False

            for between in slots_between(source, start_time):
                gap = self._entries.get(between)
                if gap is None or not (has_content(gap) or gap.is_same_as_previous):
                    self._write(between, "", gap.thought if gap else None, True)

            return self.save(start_time, "", None, is_same_as_previous=True)

    # 6) 범위 선택 일괄 입력
    def select_range(self, anchor: str, current: str) -> List[str]:
        return slot_range(anchor, current)

    def apply_batch(self, start_times: List[str], activity: str) -> int:
        """Write the same activity to a contiguous run of slots, one call each."""
        content = (activity or "").strip()
        if not content or not start_times:
            return 0

        ordered = sorted(set(start_times), key=slot_index)
        last = ordered[-1]

        with self._lock:
            last_existing = self._entries.get(last)
            before = resolve_activity(self._entries, last)

            for start in ordered:
                self._write(start, content, None, False)

            if last_existing is not None and before != content:
                self._break_chain(last)
        return len(ordered)

    # 내부 동작
    def _apply(self, entry: LocalEntry):
        with self._lock:
            self._entries[entry.start_time] = entry
            snapshot = self.entries
        self.cache.write_entries(entry.date, snapshot)

    def _write(self, start_time: str, activity: str, thought: Optional[str], same: bool) -> Future:
        existing = self._entries.get(start_time)
        self._tombstones.discard(pending_key(self.date_key, start_time))
        fields = {"activity": activity, "thought": thought, "isSameAsPrevious": same}

        if existing is not None:
            self._apply(existing.with_changes(
                activity=activity, thought=thought, is_same_as_previous=same,
            ))
            if existing.persisted_id:
                entry_id = existing.persisted_id
                return self._sync(start_time, lambda: self.api.update_entry(entry_id, fields))

        local = LocalEntry(
            ref=existing.ref if existing else Pending(pending_key(self.date_key, start_time)),
            date=self.date_key,
            start_time=start_time,
            end_time=_END_TIMES[start_time],
            activity=activity,
            thought=thought,
            is_same_as_previous=same,
        )
        if existing is None:
            self._apply(local)

        # 서버는 같은 슬롯의 POST 를 수정으로 처리함
        payload = dict(fields, date=local.date, startTime=start_time, endTime=local.end_time)
        return self._sync(start_time, lambda: self.api.create_entry(payload))

    def _remove(self, start_time: str) -> Optional[Future]:
        entry = self._entries.pop(start_time)
        key = pending_key(entry.date, start_time)
        self._removals[key] = self._removals.get(key, 0) + 1
        self.cache.write_entries(entry.date, self.entries)

        if isinstance(entry.ref, Persisted):
            entry_id = entry.ref.id
            return self._sync(start_time, lambda: self.api.delete_entry(entry_id), delete=True)

        # 아직 생성 요청이 진행 중 → 응답이 오면 서버 쪽 row 를 지움
        self._tombstones.add(key)
        logger.debug(f"Dropped pending entry {entry.ref.temp_key} before it was synced")
        return None

    def _break_chain(self, start_time: str):
        followers = chain_followers(self._entries, start_time)
        for follower in followers:
            self._remove(follower)
        if followers:
            logger.info(f"Chain after {start_time} broken, removed {len(followers)} slot(s)")

    def _sync(self, start_time: str, call: Callable, delete: bool = False) -> Future:
        date_key = self.date_key
        key = pending_key(date_key, start_time)
        removals = self._removals.get(key, 0)

        def run():
            try:
                data = call()
            except (ApiError, requests.RequestException) as e:
                action = "delete" if delete else "save"
                logger.warning(f"Failed to sync entry {action} {date_key} {start_time}: {e}")
                return None

            if not data or delete:
                return data

            with self._lock:
                removed = self._removals.get(key, 0) != removals
                orphaned = removed and key in self._tombstones and start_time not in self._entries

            if orphaned:
                self._delete_orphan(key, data["id"])
                return data
            if removed:
                logger.debug(f"Ignoring save response for removed slot {key}")
                return data

            # 응답이 늦게 와도 도착한 순서대로 반영 (같은 슬롯은 마지막 응답 우선)
            if data.get("date") == self.date_key:
                self._apply(LocalEntry.from_wire(data))
            return data

        return self.executor.submit(run)

    def _delete_orphan(self, key: str, entry_id: str):
        # 로컬에서 지운 Pending 슬롯이 서버에 생성된 경우
        try:
            self.api.delete_entry(entry_id)
            logger.info(f"Deleted server entry for removed slot {key}")
        except (ApiError, requests.RequestException) as e:
            logger.warning(f"Failed to delete server entry for removed slot {key}: {e}")
