"""Frame-rate measurement with a rolling history of frame times."""

from __future__ import annotations


class FPSCounter:
    """Tracks frames per second, refreshed once a second, and recent frame times."""

    def __init__(self, history_size: int = 100) -> None:
        if history_size < 1:
            raise ValueError("history size must be greater than 0")
        self._history = [0.0] * history_size
        self._index = 0
        self._time = 0.0
        self._fps = 0.0

    @property
    def fps(self) -> float:
        return self._fps

    @property
    def frame_time_ms(self) -> float:
        """Frame time in milliseconds matching the reported rate."""
        return 1000.0 / self._fps if self._fps > 0.0 else 0.0

    @property
    def history(self) -> list[float]:
        """Frame times in milliseconds, oldest first."""
        return self._history[self._index:] + self._history[: self._index]

    def update(self, delta_time: float) -> None:
        """Record one frame that took ``delta_time`` seconds."""
        self._time += delta_time
        if self._time >= 1.0:
            self._fps = 1.0 / delta_time if delta_time > 0.0 else 0.0
            self._time = 0.0
        self._history[self._index] = delta_time * 1000.0
        self._index = (self._index + 1) % len(self._history)