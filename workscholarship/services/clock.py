from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        ...


class SystemClock:
    """
    Текущее время в наивном UTC, как и даты в БД.
    """

    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(tzinfo=None)
