"""In-process timers keyed by job id."""

from __future__ import annotations

import time


class Stopwatch:
    def __init__(self) -> None:
        self._timers: dict[str, float] = {}

    def start(self, key: str) -> None:
        self._timers[key] = time.perf_counter()

    def check(self, key: str) -> float | None:
        """Milliseconds since ``start(key)``, or None if never started."""
        started = self._timers.get(key)
        if started is None:
            return None
        return round((time.perf_counter() - started) * 1000, 2)

    def forget(self, key: str) -> None:
        self._timers.pop(key, None)
