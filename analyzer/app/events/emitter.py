from __future__ import annotations

from typing import Protocol

from analyzer.app.events.models import AnalysisEvent


class AnalysisEventEmitter(Protocol):
    """
    Interface for broadcasting analysis progress.

    Implementations must be:
    - non-blocking (or minimally blocking)
    - fail-safe (emission failures must not crash the analysis)
    - observational only
    """

    async def emit(self, event: AnalysisEvent) -> None:
        ...


class NullEventEmitter:
    """
    A safe no-op emitter.

    Used when:
    - streaming is disabled
    - tests that do not care about events
    """

    async def emit(self, event: AnalysisEvent) -> None:
        return
