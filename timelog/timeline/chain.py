# timelog/timeline/chain.py
#
# "Same as previous" chain rules over a {start_time: entry} mapping.
# An entry only needs `activity` and `is_same_as_previous` attributes, so the
# same helpers work on ORM rows and on the client's local entries.
# Start times off the 30-minute grid never belong to a chain.

from typing import Any, List, Mapping, Optional

from timelog.timeline.slots import generate_time_slots

_START_TIMES = [start for start, _ in generate_time_slots()]
_INDEX = {start: i for i, start in enumerate(_START_TIMES)}


def has_content(entry: Optional[Any]) -> bool:
    return bool(entry is not None and (entry.activity or "").strip())


def resolve_activity(entries: Mapping[str, Any], start_time: str) -> Optional[str]:
    """Walk backward from `start_time` until a slot with real activity is found.

    A missing slot, or a slot that is neither real content nor a marker,
    ends the walk with None.
    """
    idx = _INDEX.get(start_time)
    if idx is None:
        entry = entries.get(start_time)
        return entry.activity if has_content(entry) else None

    while idx >= 0:
        entry = entries.get(_START_TIMES[idx])
        if entry is None:
            return None
        if has_content(entry):
            return entry.activity
        if not entry.is_same_as_previous:
            return None
        idx -= 1
    return None


def find_copy_source(entries: Mapping[str, Any], start_time: str) -> Optional[str]:
    # 바로 위가 비어 있으면 건너뛰고 가장 가까운 내용/마커 슬롯을 찾는다
    idx = _INDEX.get(start_time)
    if idx is None:
        return None

    idx -= 1
    while idx >= 0:
        entry = entries.get(_START_TIMES[idx])
        if entry is not None and (has_content(entry) or entry.is_same_as_previous):
            return _START_TIMES[idx]
        idx -= 1
    return None


def slots_between(start_after: str, end_before: str) -> List[str]:
    return _START_TIMES[_INDEX[start_after] + 1:_INDEX[end_before]]


def slot_range(first: str, second: str) -> List[str]:
    lo, hi = sorted((_INDEX[first], _INDEX[second]))
    return _START_TIMES[lo:hi + 1]


def chain_followers(entries: Mapping[str, Any], start_time: str) -> List[str]:
    """Start times of the contiguous marker run right after `start_time`."""
    idx = _INDEX.get(start_time)
    if idx is None:
        return []

    followers = []
    for start in _START_TIMES[idx + 1:]:
        entry = entries.get(start)
        if entry is None or not entry.is_same_as_previous:
            break
        followers.append(start)
    return followers
