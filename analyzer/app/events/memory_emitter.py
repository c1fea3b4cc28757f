from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, List

from analyzer.app.events.models import (
    AnalysisEvent,
    TERMINAL_EVENT_TYPES,
)
from analyzer.app.events.emitter import AnalysisEventEmitter

logger = logging.getLogger(__name__)


class MemoryQueueEventEmitter(AnalysisEventEmitter):
    """
    In-memory async event emitter suitable for SSE streaming.

    Properties:
    - single-consumer
    - non-blocking for the analysis execution path
    - deterministic ordering
    - terminates cleanly on analysis completion or failure
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[AnalysisEvent | None] = asyncio.Queue()
        self._closed = False

    async def emit(self, event: AnalysisEvent) -> None:
        if self._closed:
            return

        try:
            await self._queue.put(event)
        except Exception:
            # Observability never breaks the analysis
            logger.warning(
                "Dropped %s event for analysis %s",
                event.event_type.value,
                event.analysis_id,
                exc_info=True,
            )
            return

        if event.event_type in TERMINAL_EVENT_TYPES:
            await self.close()

    async def close(self) -> None:
        if not self._closed:
            self._closed = True
            await self._queue.put(None)

    async def stream(self) -> AsyncIterator[AnalysisEvent]:
        """
        Async generator yielding emitted events in order.
        """
        while True:
            event = await self._queue.get()
            if event is None:
                break
            yield event

    async def drain(self) -> List[AnalysisEvent]:
        """Collect every event up to the terminal one."""
        return [event async for event in self.stream()]
