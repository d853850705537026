"""In-memory store for analyses and comparison reports."""

import logging
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Any, Dict, List, Optional
from uuid import uuid4

logger = logging.getLogger(__name__)


class ReportStore:
    """Thread-safe store that keeps payloads for a limited time.

    Every entry carries a ``kind`` ("analysis" or "comparison") so the history
    endpoint can list one family without the other. Reading an entry refreshes
    its timestamp.
    """

    def __init__(self, ttl_seconds: int = 6 * 3600) -> None:
        self._ttl = timedelta(seconds=ttl_seconds)
        self._lock = Lock()
        self._store: Dict[str, Dict[str, Any]] = {}

    def _purge_expired(self) -> None:
        now = datetime.now(timezone.utc)
        expired: List[str] = []
        for entry_id, entry in self._store.items():
            if now - entry["timestamp"] > self._ttl:
                expired.append(entry_id)
        for entry_id in expired:
            self._store.pop(entry_id, None)
        if expired:
            logger.debug("Purged %d expired entries", len(expired))

    def save(self, kind: str, payload: Dict[str, Any]) -> str:
        entry_id = uuid4().hex
        now = datetime.now(timezone.utc)
        with self._lock:
            self._purge_expired()
            self._store[entry_id] = {
                "kind": kind,
                "payload": payload,
                "created_at": now,
                "timestamp": now,
            }
        return entry_id

    def get(self, entry_id: str, kind: Optional[str] = None) -> Optional[Dict[str, Any]]:
        with self._lock:
            self._purge_expired()
            entry = self._store.get(entry_id)
            if not entry or (kind is not None and entry["kind"] != kind):
                return None
            entry["timestamp"] = datetime.now(timezone.utc)
            return entry["payload"]

    def list_recent(self, kind: str) -> List[Dict[str, Any]]:
        """Return ``{"id", "created_at", "payload"}`` items of ``kind``, newest first."""
        with self._lock:
            self._purge_expired()
            entries = [
                (entry_id, entry)
                for entry_id, entry in self._store.items()
                if entry["kind"] == kind
            ]
        entries.sort(key=lambda item: item[1]["created_at"], reverse=True)
        return [
            {
                "id": entry_id,
                "created_at": entry["created_at"].isoformat().replace("+00:00", "Z"),
                "payload": entry["payload"],
            }
            for entry_id, entry in entries
        ]

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
