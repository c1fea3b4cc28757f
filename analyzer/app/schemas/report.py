"""
Quality report schemas.

Derived, read-only views over a finding set: category groups, aggregate
statistics, quality-check outcomes, trends, and the before/after
improvement estimate. QualityReport bundles them for presentation.
"""

from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, Field, ConfigDict

from analyzer.app.schemas.analysis import FileAnalysisError
from analyzer.app.schemas.findings import Finding, ValidatedFinding
from analyzer.app.schemas.suggestions import BatchImpact, Suggestion


class CategoryGroup(BaseModel):
    """
    Findings of one category with per-severity tallies.

    Unrecognized severities are tallied under ``other``.
    """

    name: str = Field(..., description="Title-cased category display name")
    count: int = 0
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    other: int = 0
    issues: List[Finding] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class IssueStats(BaseModel):
    """
    Aggregate statistics over a finding set.
    """

    total: int = 0

    by_severity: Dict[str, int] = Field(
        default_factory=lambda: {
            "critical": 0,
            "high": 0,
            "medium": 0,
            "low": 0,
        },
    )

    by_category: Dict[str, int] = Field(default_factory=dict)

    estimated_fix_time: int = Field(
        0,
        ge=0,
        description="Summed per-severity fix time in minutes",
    )

    risk_score: float = Field(
        0.0,
        ge=0.0,
        le=100.0,
        description="Weighted-average severity metric (distinct from quality score)",
    )

    model_config = ConfigDict(frozen=True)


class QualityCheck(BaseModel):
    """Outcome of validate_issue_quality for one finding."""

    valid: bool
    errors: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class IssueTrend(BaseModel):
    category: str
    count: int
    trend: str = Field(..., description="increasing | decreasing | stable")

    model_config = ConfigDict(frozen=True)


class ImprovementEstimate(BaseModel):
    """
    Projected score improvement if a probabilistic subset of findings
    were remediated.
    """

    total_issues: int = 0
    resolved_issues: int = 0
    remaining_issues: int = 0
    before_score: int = Field(100, ge=0, le=100)
    after_score: int = Field(100, ge=0, le=100)
    score_increase: int = Field(0, ge=0)
    issues_reduced_percent: int = Field(0, ge=0, le=100)

    model_config = ConfigDict(frozen=True)


class QualityReport(BaseModel):
    """
    Presentation bundle derived from one AnalysisResult.
    """

    analysis_id: str
    score: int = Field(..., ge=0, le=100)

    issues: List[ValidatedFinding] = Field(
        default_factory=list,
        description="Validated, deduplicated and prioritized findings",
    )

    groups: Dict[str, CategoryGroup] = Field(default_factory=dict)
    stats: IssueStats
    suggestions: List[Suggestion] = Field(default_factory=list)
    batch_impact: BatchImpact
    improvement: ImprovementEstimate
    failed_files: List[FileAnalysisError] = Field(default_factory=list)

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )
