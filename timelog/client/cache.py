# timelog/client/cache.py
#
# Local-first JSON cache: one file per date for entries, one per date for the
# last AI analysis. Read/write failures are logged and never raised.

import os
import json
import logging
from pathlib import Path
from typing import Any, List, Optional

from timelog.client.entry import LocalEntry

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = Path(os.getenv("TIMELOG_CACHE_DIR", Path.home() / ".timelog" / "cache"))


class JsonCache:
    def __init__(self, root: Optional[Path] = None, namespace: str = "entries"):
        self.root = Path(root or DEFAULT_CACHE_DIR) / namespace

    def _path(self, date_key: str) -> Path:
        return self.root / f"{date_key}.json"

    def read(self, date_key: str) -> Optional[Any]:
        path = self._path(date_key)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to read cache {path}: {e}")
            return None

    def write(self, date_key: str, value: Any) -> None:
        path = self._path(date_key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(value, ensure_ascii=False), encoding="utf-8")
        except (OSError, TypeError) as e:
            logger.warning(f"Failed to write cache {path}: {e}")


class EntriesCache(JsonCache):
    def __init__(self, root: Optional[Path] = None):
        super().__init__(root, "entries")

    def read_entries(self, date_key: str) -> Optional[List[LocalEntry]]:
        raw = self.read(date_key)
        if not isinstance(raw, list):
            return None
        try:
            return [LocalEntry.from_wire(item) for item in raw]
        except (KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Ignoring malformed entries cache for {date_key}: {e}")
            return None

    def write_entries(self, date_key: str, entries: List[LocalEntry]) -> None:
        self.write(date_key, [e.to_wire() for e in entries])


class AnalysisCache(JsonCache):
    def __init__(self, root: Optional[Path] = None):
        super().__init__(root, "analysis")
