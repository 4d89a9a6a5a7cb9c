from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def time(self) -> float: ...


class SystemClock:
    def time(self) -> float:
        return time.time()


def iso_from_epoch(ts: float) -> str:
    """UTC instant with millisecond precision, e.g. 2024-01-02T03:04:05.678Z."""
    dt = datetime.fromtimestamp(float(ts), tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def iso_now(clock: Clock) -> str:
    return iso_from_epoch(clock.time())
