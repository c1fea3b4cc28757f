"""
Shared construction helper for language-specific heuristics.

Findings produced here are categorized LINT; the coordinator remaps the
category before findings leave an analysis run.
"""

from __future__ import annotations

from typing import Optional

from analyzer.app.checks.locate import SourceText
from analyzer.app.schemas.findings import (
    Finding,
    FindingCategory,
    Severity,
)


def lint_finding(
    source: SourceText,
    *,
    index: int,
    title: str,
    description: str,
    code: str,
    suggestion: Optional[str] = None,
    rationale: Optional[str] = None,
    severity: Severity = Severity.MEDIUM,
) -> Finding:
    line = source.line_number(index)
    return Finding(
        title=title,
        description=description,
        category=FindingCategory.LINT,
        severity=severity,
        file=source.filename,
        line=line,
        code=code,
        code_context=source.context(line),
        suggestion=suggestion,
        rationale=rationale,
    )
