from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import structlog

from config.logging_config import resolve_level
from config.settings import settings


class ActivityLogger:
    """
    Per-component event log. Each event is appended as one JSON line to the
    activity log and forwarded to structlog (stderr). Events below LOG_LEVEL
    are dropped from both. File writes share a class-level lock.

    Each log record schema:
    {
        "timestamp":  "2025-01-01T00:00:00+00:00",
        "level":      "INFO",
        "event":      "slot_accepted",
        "component":  "conversation_engine",
        "session_id": "uuid",    (optional)
        "message":    "...",
        ...extra_fields
    }
    """

    _lock = threading.Lock()

    def __init__(self, component: str, log_path: Optional[str] = None) -> None:
        self.component = component
        self.log_path = Path(log_path or settings.activity_log_path)
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self._struct = structlog.get_logger(component)

    def _emit(
        self,
        level: int,
        event: str,
        session_id: Optional[str] = None,
        message: Optional[str] = None,
        **fields: Any,
    ) -> None:
        if level < resolve_level():
            return

        level_name = logging.getLevelName(level)
        context: dict[str, Any] = {"component": self.component}
        if session_id:
            context["session_id"] = session_id
        context["message"] = message or event
        context.update(fields)

        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level_name,
            "event": event,
            **context,
        }
        with self._lock:
            with open(self.log_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(record, default=str) + "\n")

        self._struct.log(level, event, **context)

    # ── Public interface ──────────────────────────────────────────────────────

    def debug(self, event: str, **kwargs: Any) -> None:
        self._emit(logging.DEBUG, event, **kwargs)

    def info(self, event: str, **kwargs: Any) -> None:
        self._emit(logging.INFO, event, **kwargs)

    def warning(self, event: str, **kwargs: Any) -> None:
        self._emit(logging.WARNING, event, **kwargs)

    def error(
        self,
        event: str,
        exc: Optional[Exception] = None,
        **kwargs: Any,
    ) -> None:
        if exc:
            kwargs.setdefault("error_type", type(exc).__name__)
            kwargs.setdefault("error_message", str(exc))
        self._emit(logging.ERROR, event, **kwargs)
