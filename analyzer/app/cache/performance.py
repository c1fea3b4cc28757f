"""
Timing registry for analysis stages.

Durations are recorded per label (e.g. one label per rule family or per
file) and summarized on demand. Only the most recent ``window`` durations
of each label are kept, so summaries describe recent behavior. Like the
analysis cache, a registry is an explicit object injected by the caller.
"""

from __future__ import annotations

import time
from collections import deque
from contextlib import contextmanager
from typing import Callable, Deque, Dict, Iterator, List, Optional

from pydantic import BaseModel, ConfigDict

DEFAULT_BOTTLENECK_COUNT = 5
DEFAULT_WINDOW = 1000


class TimingMetrics(BaseModel):
    """Summary of recorded durations for one label, in milliseconds."""

    label: str
    call_count: int
    min: float
    max: float
    avg: float
    median: float
    total: float

    model_config = ConfigDict(frozen=True)


class PerformanceRegistry:
    def __init__(
        self,
        clock: Optional[Callable[[], float]] = None,
        window: int = DEFAULT_WINDOW,
    ) -> None:
        if window <= 0:
            raise ValueError("window must be positive")

        self._clock = clock or time.perf_counter
        self._window = window
        self._durations: Dict[str, Deque[float]] = {}

    @contextmanager
    def measure(self, label: str) -> Iterator[None]:
        """
        Record the wall-clock duration of the enclosed block under ``label``.

        The duration is recorded even when the block raises.
        """
        start = self._clock()
        try:
            yield
        finally:
            self.record(label, (self._clock() - start) * 1000.0)

    def record(self, label: str, duration_ms: float) -> None:
        durations = self._durations.get(label)
        if durations is None:
            durations = self._durations[label] = deque(maxlen=self._window)
        durations.append(duration_ms)

    def metrics(self, label: str) -> Optional[TimingMetrics]:
        durations = self._durations.get(label)
        if not durations:
            return None

        ordered = sorted(durations)
        total = sum(durations)

        return TimingMetrics(
            label=label,
            call_count=len(durations),
            min=round(ordered[0], 2),
            max=round(ordered[-1], 2),
            avg=round(total / len(durations), 2),
            # Upper median for even counts
            median=round(ordered[len(ordered) // 2], 2),
            total=round(total, 2),
        )

    def all_metrics(self) -> List[TimingMetrics]:
        return [
            m for m in (self.metrics(label) for label in self._durations)
            if m is not None
        ]

    def bottlenecks(self, limit: int = DEFAULT_BOTTLENECK_COUNT) -> List[TimingMetrics]:
        """Labels with the largest total time, descending."""
        return sorted(self.all_metrics(), key=lambda m: m.total, reverse=True)[:limit]

    def clear(self) -> None:
        self._durations.clear()
