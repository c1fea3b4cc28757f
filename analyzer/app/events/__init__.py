from .models import AnalysisEvent, AnalysisEventType
from .emitter import AnalysisEventEmitter, NullEventEmitter
from .memory_emitter import MemoryQueueEventEmitter

__all__ = [
    "AnalysisEvent",
    "AnalysisEventType",
    "AnalysisEventEmitter",
    "NullEventEmitter",
    "MemoryQueueEventEmitter",
]
