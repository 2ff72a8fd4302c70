from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

_LEVELS = {"info": 20, "warning": 30, "error": 40}


class StructuredLogger:
    """Emits one JSON object per line; events below ``min_level`` are dropped."""

    def __init__(
        self,
        component: str = "quote-poster",
        *,
        min_level: str = "info",
        stream: TextIO | None = None,
    ) -> None:
        self._component = component
        self._threshold = _LEVELS.get(min_level.lower(), _LEVELS["info"])
        self._stream = stream

    def info(self, message: str, **fields: Any) -> None:
        self._emit("info", message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._emit("warning", message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._emit("error", message, fields)

    def _emit(self, level: str, message: str, fields: dict[str, Any]) -> None:
        if _LEVELS[level] < self._threshold:
            return
        payload = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "component": self._component,
            "message": message,
            "fields": fields,
        }
        print(json.dumps(payload, sort_keys=True, default=str), file=self._stream or sys.stdout, flush=True)
