# timelog/client/entry.py

from dataclasses import dataclass, replace
from typing import Dict, Optional, Union


@dataclass(frozen=True)
class Persisted:
    id: str


@dataclass(frozen=True)
class Pending:
    # 서버 id 가 오기 전 로컬에서만 쓰는 키 ("<date>:<startTime>")
    temp_key: str


EntryRef = Union[Persisted, Pending]


def pending_key(date_str: str, start_time: str) -> str:
    return f"{date_str}:{start_time}"


@dataclass
class LocalEntry:
    ref: EntryRef
    date: str
    start_time: str
    end_time: str
    activity: str = ""
    thought: Optional[str] = None
    is_same_as_previous: bool = False

    @property
    def persisted_id(self) -> Optional[str]:
        return self.ref.id if isinstance(self.ref, Persisted) else None

    @property
    def is_pending(self) -> bool:
        return isinstance(self.ref, Pending)

    def with_changes(self, **changes) -> "LocalEntry":
        return replace(self, **changes)

    @classmethod
    def from_wire(cls, data: Dict) -> "LocalEntry":
        if data.get("id"):
            ref = Persisted(data["id"])
        else:
            ref = Pending(data.get("tempKey") or pending_key(data["date"], data["startTime"]))
        return cls(
            ref=ref,
            date=data["date"],
            start_time=data["startTime"],
            end_time=data["endTime"],
            activity=data.get("activity") or "",
            thought=data.get("thought"),
            is_same_as_previous=bool(data.get("isSameAsPrevious")),
        )

    def to_wire(self) -> Dict:
        data = {
            "date": self.date,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "activity": self.activity,
            "thought": self.thought,
            "isSameAsPrevious": self.is_same_as_previous,
        }
        if isinstance(self.ref, Persisted):
            data["id"] = self.ref.id
        else:
            data["tempKey"] = self.ref.temp_key
        return data
