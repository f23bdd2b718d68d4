"""
Record Store

The durable-store collaborator as seen by the mediation core: lookup by id,
filtered queries and append-only writes. ``InMemoryStore`` is the
process-local implementation used by the CLI, the API and tests.

Validation records look like::

    {
        "id": "val-1",
        "kind": "validation",
        "status": "failed",            # passed | failed | partial
        "score": 65,
        "created_at": "2026-03-01T10:00:00Z",
        "details": [
            {"status": "failed", "message": "...", "score": 40,
             "semantic_insights": "...", "improvement": "..."}
        ],
        "improvements": ["..."]
    }
"""

import copy
import json
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional


logger = logging.getLogger(__name__)


class Store(ABC):
    """Contract for the record store."""

    @abstractmethod
    def get_by_id(self, record_id: str) -> Optional[Dict[str, Any]]:
        """Return the record, or None if it does not exist."""
        pass

    @abstractmethod
    def query(self, filter: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Return records matching the filter."""
        pass

    @abstractmethod
    def append(self, record: Dict[str, Any]) -> str:
        """Append a record and return its id."""
        pass


def _contains_text(value: Any, needle: str) -> bool:
    if isinstance(value, str):
        return needle in value.lower()
    if isinstance(value, dict):
        return any(_contains_text(v, needle) for v in value.values())
    if isinstance(value, (list, tuple)):
        return any(_contains_text(v, needle) for v in value)
    return needle in str(value).lower() if value is not None else False


class InMemoryStore(Store):
    """Thread-safe in-memory store.

    Query filters:
        - ``text``: case-insensitive substring search over all values
          (any whitespace-separated term may match)
        - ``limit``: maximum number of results
        - any other key: equality on the record field
    Records are copied on the way in and out, so callers only ever see
    snapshots.
    """

    def __init__(self, records: Optional[List[Dict[str, Any]]] = None):
        self._records: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()
        for record in records or []:
            self.append(record)

    @classmethod
    def from_json_file(cls, path: str) -> "InMemoryStore":
        """Load records from a JSON file holding a list or ``{"records": [...]}``."""
        with open(Path(path), "r", encoding="utf-8") as f:
            data = json.load(f)
        records = data.get("records", []) if isinstance(data, dict) else data
        if not isinstance(records, list):
            raise ValueError(f"Store file {path} must contain a list of records")
        logger.info(f"Loaded {len(records)} records from {path}")
        return cls(records)

    def __len__(self) -> int:
        return len(self._records)

    def get_by_id(self, record_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            record = self._records.get(record_id)
            return copy.deepcopy(record) if record is not None else None

    def query(self, filter: Dict[str, Any]) -> List[Dict[str, Any]]:
        criteria = dict(filter or {})
        text = str(criteria.pop("text", "") or "").lower()
        limit = criteria.pop("limit", None)
        terms = text.split()

        with self._lock:
            records = list(self._records.values())

        results = []
        for record in records:
            if any(record.get(k) != v for k, v in criteria.items()):
                continue
            if terms and not any(_contains_text(record, term) for term in terms):
                continue
            results.append(copy.deepcopy(record))
            if limit is not None and len(results) >= int(limit):
                break
        return results

    def append(self, record: Dict[str, Any]) -> str:
        if not isinstance(record, dict):
            raise TypeError(f"Records must be dicts, got {type(record).__name__}")

        stored = copy.deepcopy(record)
        record_id = str(stored.get("id") or uuid.uuid4().hex)
        stored["id"] = record_id
        with self._lock:
            self._records[record_id] = stored
        return record_id
