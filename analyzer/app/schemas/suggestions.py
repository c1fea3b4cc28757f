"""
Suggestion schemas.

Suggestions are derived 1:1 (positionally) from findings and are never
persisted independently: they are recomputed whenever findings change.
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, Field, ConfigDict


class Suggestion(BaseModel):
    """
    Before/after remediation preview for one finding.
    """

    id: int = Field(..., ge=0, description="Position of the source finding")

    issue_id: Union[str, int] = Field(
        ...,
        description="Validated finding id, or the position when unvalidated",
    )

    original: str = Field(..., description="Code as detected")
    suggested: str = Field(..., description="Proposed replacement code")

    rationale: str = Field(..., description="Why applying the fix matters")
    explanation: str = Field(..., description="Category-level fix explanation")

    category: str
    severity: str

    confidence: float = Field(
        ...,
        ge=0.0,
        le=1.0,
        description="Confidence derived solely from severity",
    )

    copyable_code: bool = True

    # Pass-through display fields
    file: str = ""
    line: Optional[int] = None
    title: str = ""
    description: str = ""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )


class FixTimeEstimate(BaseModel):
    """Human time-to-fix range in minutes."""

    min: int = Field(..., ge=0)
    max: int = Field(..., ge=0)

    @property
    def mean(self) -> float:
        return (self.min + self.max) / 2

    model_config = ConfigDict(frozen=True)


class BatchImpact(BaseModel):
    """
    Aggregate impact of applying a set of suggestions.
    """

    total_impact: int = Field(
        ...,
        ge=0,
        description="Average per-suggestion impact score",
    )

    estimated_time: int = Field(
        ...,
        ge=0,
        description="Sum of per-suggestion mean fix time, in minutes",
    )

    suggestion_count: int = Field(..., ge=0)

    model_config = ConfigDict(frozen=True)
