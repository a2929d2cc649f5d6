"""In-process counters and timers for the admin stats endpoint."""

import time
from collections import Counter
from contextlib import contextmanager
from typing import Any

import structlog

logger = structlog.get_logger().bind(source="observability")


class Metrics:
    """Counters plus duration samples, keyed by dotted names."""

    def __init__(self):
        self._counters: Counter[str] = Counter()
        self._durations: dict[str, list[float]] = {}

    def counter(self, name: str, value: int = 1):
        self._counters[name] += value

    def record_duration(self, name: str, seconds: float):
        self._durations.setdefault(name, []).append(seconds)

    @contextmanager
    def timer(self, name: str):
        """Time the wrapped block, recording even when it raises."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.record_duration(name, time.perf_counter() - start)

    def summary(self) -> dict[str, Any]:
        timers = {}
        for name, samples in self._durations.items():
            timers[name] = {
                "count": len(samples),
                "avg_ms": round(sum(samples) / len(samples) * 1000, 2),
                "max_ms": round(max(samples) * 1000, 2),
            }
        return {"counters": dict(self._counters), "timers": timers}

    def reset(self):
        self._counters.clear()
        self._durations.clear()


metrics = Metrics()


def log_summary():
    logger.info("metrics.summary", **metrics.summary())
