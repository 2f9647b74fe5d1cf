"""Fixed catalog of exposure -> outcome lag windows."""

from dataclasses import dataclass
from typing import Optional

HOUR_MS = 60 * 60 * 1000


@dataclass(frozen=True)
class WindowDefinition:
    """Lag bucket covering ``start_ms <= lag < end_ms`` after an exposure."""

    label: str
    start_ms: int
    end_ms: int

    @property
    def duration_ms(self) -> int:
        return self.end_ms - self.start_ms

    def contains(self, lag_ms: int) -> bool:
        return self.start_ms <= lag_ms < self.end_ms


# Non-overlapping, ordered by start_ms ascending
WINDOW_SET: tuple[WindowDefinition, ...] = (
    WindowDefinition("0-2h", 0, 2 * HOUR_MS),
    WindowDefinition("2-6h", 2 * HOUR_MS, 6 * HOUR_MS),
    WindowDefinition("6-12h", 6 * HOUR_MS, 12 * HOUR_MS),
    WindowDefinition("12-24h", 12 * HOUR_MS, 24 * HOUR_MS),
    WindowDefinition("24-48h", 24 * HOUR_MS, 48 * HOUR_MS),
)


def get_window(label: str) -> WindowDefinition:
    """Look up a catalog window by label. Raises KeyError for unknown labels."""
    for window in WINDOW_SET:
        if window.label == label:
            return window
    raise KeyError(f"Unknown window label: {label}")


def window_for_lag(lag_ms: int) -> Optional[WindowDefinition]:
    """Return the catalog window containing ``lag_ms``, or None if outside 0-48h."""
    for window in WINDOW_SET:
        if window.contains(lag_ms):
            return window
    return None
