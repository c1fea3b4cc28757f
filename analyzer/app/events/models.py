from __future__ import annotations

import json
from typing import Any, Dict, Optional
from enum import Enum
from datetime import datetime, timezone
from uuid import uuid4, UUID

from pydantic import BaseModel, Field, ConfigDict


# ----------------------------------------------------------------------
# Event Types (Finite)
# ----------------------------------------------------------------------
class AnalysisEventType(str, Enum):
    """
    Progression events emitted during one analysis run.

    NOTE:
    This enum is finite. New entries must preserve observational
    semantics.
    """

    # ------------------------------------------------------------------
    # Global Lifecycle
    # ------------------------------------------------------------------
    ANALYSIS_STARTED = "analysis_started"
    ANALYSIS_COMPLETED = "analysis_completed"
    ANALYSIS_FAILED = "analysis_failed"

    # ------------------------------------------------------------------
    # Per-file
    # ------------------------------------------------------------------
    FILE_STARTED = "file_started"
    FILE_COMPLETED = "file_completed"
    FILE_FAILED = "file_failed"

    # ------------------------------------------------------------------
    # Progress (Non-terminal)
    # ------------------------------------------------------------------
    PROGRESS = "progress"


TERMINAL_EVENT_TYPES = frozenset(
    {
        AnalysisEventType.ANALYSIS_COMPLETED,
        AnalysisEventType.ANALYSIS_FAILED,
    }
)


# ----------------------------------------------------------------------
# Event Model
# ----------------------------------------------------------------------
class AnalysisEvent(BaseModel):
    """
    An immutable observation of a phase transition within one analysis.

    Events are:
    - strictly observational
    - transport-agnostic
    - not authoritative
    """

    event_id: UUID = Field(default_factory=uuid4)
    analysis_id: str = Field(..., description="The analysis run identifier")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    event_type: AnalysisEventType

    # Optional contextual metadata (file, progress, counts, report, ...)
    details: Optional[Dict[str, Any]] = None

    def to_sse_payload(self) -> str:
        """
        Render as one Server-Sent Events frame.
        """
        data = json.dumps(
            self.model_dump(mode="json"),
            ensure_ascii=False,
            separators=(",", ":"),
        )
        return f"event: {self.event_type.value}\ndata: {data}\n\n"

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )
