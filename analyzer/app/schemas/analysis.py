"""
Analysis input/output schemas.

Defines the option set accepted by the coordinator, the result of one
analysis run, and the externally-owned scan record shape that this core
reads (issues, score) when computing trends and estimates.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict

from analyzer.app.schemas.findings import Finding


class ScanOptions(BaseModel):
    """
    Category toggles for one analysis run.

    Script typo and brace/parenthesis rules are not governed by these
    flags: they always run for script files.
    """

    check_accessibility: bool = Field(True, description="Run accessibility rules")
    check_security: bool = Field(True, description="Run security rules")
    check_performance: bool = Field(True, description="Run performance rules")
    check_seo: bool = Field(True, description="Run SEO rules (.html only)")
    check_structure: bool = Field(True, description="Run nesting and duplicate-id rules")
    check_i18n: bool = Field(True, description="Internationalization checks")

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )


class FileAnalysisError(BaseModel):
    """
    Input error scoped to one file of a batch.

    Recorded instead of findings when the file content could not be read.
    """

    file: str = Field(..., description="Name of the file that failed")
    error_type: str = Field(..., description="Exception class name")
    message: str = Field(..., description="Human-readable error message")

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )


class AnalysisResult(BaseModel):
    """
    Result of AnalysisCoordinator.analyze.

    issues preserves file input order and rule order within each file.
    """

    analysis_id: str = Field(..., description="Identifier of the analysis run")

    issues: List[Finding] = Field(
        default_factory=list,
        description="Flat list of findings across all analyzed files",
    )

    score: int = Field(
        ...,
        ge=0,
        le=100,
        description="Quality score derived from issues",
    )

    files_analyzed: int = Field(
        0,
        ge=0,
        description="Number of files whose content was analyzed",
    )

    failed_files: List[FileAnalysisError] = Field(
        default_factory=list,
        description="Files skipped because their content could not be read",
    )

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )


class ScanStatus(str, Enum):
    SCANNING = "scanning"
    COMPLETED = "completed"
    FAILED = "failed"


class Scan(BaseModel):
    """
    Persisted scan record.

    Lifecycle and storage belong to the project/history collaborator.
    This core only reads issues, score and timestamp.
    """

    id: str
    project_name: str = "New Project"
    files_count: int = Field(0, ge=0)
    file_names: List[str] = Field(default_factory=list)
    status: ScanStatus = ScanStatus.COMPLETED
    issues: List[Finding] = Field(default_factory=list)
    score: Optional[int] = Field(None, ge=0, le=100)
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

    model_config = ConfigDict(frozen=True)
