from __future__ import annotations

from datetime import datetime, timezone


class SystemClock:
    """UTC wall clock for health checks and timestamps."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
