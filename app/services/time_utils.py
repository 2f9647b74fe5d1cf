"""Epoch-millisecond helpers. All calendar math is UTC."""

import time
from datetime import datetime, timezone

DAY_MS = 24 * 60 * 60 * 1000


def now_ms() -> int:
    return int(time.time() * 1000)


def to_datetime(timestamp_ms: int) -> datetime:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)


def to_ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


def month_key(timestamp_ms: int) -> str:
    """``"YYYY-MM"`` of the UTC calendar month containing the timestamp."""
    return to_datetime(timestamp_ms).strftime("%Y-%m")


def month_start_ms(timestamp_ms: int) -> int:
    dt = to_datetime(timestamp_ms)
    return to_ms(datetime(dt.year, dt.month, 1, tzinfo=timezone.utc))
