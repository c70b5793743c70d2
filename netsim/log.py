from __future__ import annotations

from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import json
import threading


@dataclass
class SessionEvent:
    ts: str
    kind: str
    data: Dict[str, Any]


class SessionLogger:
    """Bounded in-memory event log for CLI sessions and tool calls.

    Pass ``logger.add`` as a ``CLIEngine`` ``log_cb``. Advisory workers log
    from their own threads, so every access to ``events`` holds the lock.
    """

    SCHEMA = "netsim-session-log/v1"

    def __init__(self, max_events: int = 5000):
        self.max_events = max_events
        self._events: List[SessionEvent] = []
        self._lock = threading.Lock()

    @property
    def events(self) -> List[SessionEvent]:
        with self._lock:
            return list(self._events)

    def add(self, kind: str, **data: Any) -> None:
        ev = SessionEvent(
            ts=datetime.now(timezone.utc).isoformat(),
            kind=str(kind),
            data=dict(data),
        )
        with self._lock:
            self._events.append(ev)
            overflow = len(self._events) - self.max_events
            if overflow > 0:
                del self._events[:overflow]

    def of_kind(self, kind: str, uid: Optional[str] = None) -> List[SessionEvent]:
        return [
            e for e in self.events
            if e.kind == kind and (uid is None or e.data.get("uid") == uid)
        ]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()

    def to_dict(self) -> Dict[str, Any]:
        events = self.events
        return {
            "schema": self.SCHEMA,
            "eventCount": len(events),
            "events": [asdict(e) for e in events],
        }

    def save_json(self, path: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
