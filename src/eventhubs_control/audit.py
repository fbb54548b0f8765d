from __future__ import annotations

import json
import logging
import sys
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Deque, Dict, List, Optional, TextIO


@dataclass
class AuditEvent:
    timestamp: str
    level: str
    message: str
    command: Optional[str] = None
    correlation_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "level": self.level,
            "message": self.message,
            "command": self.command,
            "correlation_id": self.correlation_id,
            "extra": self.extra,
        }


class InMemoryAuditStore:
    """Thread-safe audit event buffer, newest first."""

    def __init__(self, max_events: int = 1000):
        self._events: Deque[AuditEvent] = deque(maxlen=max_events)
        self._lock = Lock()

    def append(self, event: AuditEvent) -> None:
        with self._lock:
            self._events.appendleft(event)

    def list(self, limit: int = 100) -> List[AuditEvent]:
        with self._lock:
            return list(self._events)[:limit]

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)


class JsonAuditLogger:
    """Structured logger for command and transport events.

    Each event is written as one JSON object to ``stream`` (stdout unless told
    otherwise) and optionally mirrored into an in-memory store for the HTTP
    surface.
    """

    def __init__(
        self,
        name: str = "eventhubs_control",
        level: int | str = logging.INFO,
        store: Optional[InMemoryAuditStore] = None,
        stream: Optional[TextIO] = None,
    ):
        self.logger = logging.getLogger(name)
        handler = next(
            (h for h in self.logger.handlers if isinstance(h.formatter, _JsonFormatter)), None
        )
        if handler is None:
            handler = logging.StreamHandler(stream or sys.stdout)
            handler.setFormatter(_JsonFormatter())
            self.logger.addHandler(handler)
        elif stream is not None and isinstance(handler, logging.StreamHandler):
            handler.setStream(stream)
        # Loggers are process-wide: the last instance built for a name sets its level.
        self.logger.setLevel(level)
        self.logger.propagate = False
        self.store = store

    def _log(self, level: int, message: str, **kwargs: Any) -> None:
        event = self._build_event(level, message, **kwargs)
        if self.store is not None and self.logger.isEnabledFor(level):
            self.store.append(event)
        self.logger.log(level, message, extra={"extra": _jsonable(kwargs)})

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, **kwargs)

    def _build_event(self, level: int, message: str, **kwargs: Any) -> AuditEvent:
        return AuditEvent(
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=logging.getLevelName(level),
            message=message,
            command=kwargs.get("command"),
            correlation_id=kwargs.get("correlation_id"),
            extra=_jsonable({k: v for k, v in kwargs.items() if k not in {"command", "correlation_id"}}),
        )


def _jsonable(values: Dict[str, Any]) -> Dict[str, Any]:
    # Option records and SDK objects end up in log fields; keep the payload serializable.
    return {key: value if isinstance(value, (str, int, float, bool, type(None), list, dict)) else str(value)
            for key, value in values.items()}


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
        }

        extra: Optional[Dict[str, Any]] = getattr(record, "extra", None)  # type: ignore[attr-defined]
        if extra:
            payload.update(extra)

        return json.dumps(payload, default=str)
