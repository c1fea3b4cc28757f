"""
Quality report composition.

Turns one AnalysisResult into the presentation bundle:

    issues       validated, deduplicated, prioritized
    groups       per-category tallies over those issues
    stats        totals, fix time, risk score
    suggestions  one per issue, same order
    batch_impact aggregate over the suggestions
    improvement  before/after estimate, anchored on the run's score

The run's score is computed over all raw findings and is reported
unchanged; it is the "before" score of the estimate.
"""

from __future__ import annotations

from analyzer.app.schemas.analysis import AnalysisResult
from analyzer.app.schemas.report import QualityReport
from analyzer.app.scoring.before_after import estimate_improvement
from analyzer.app.suggestions.generator import (
    calculate_batch_impact,
    generate_suggestions,
)
from analyzer.app.validation.issue_validation import (
    calculate_issue_stats,
    group_by_category,
    prioritize_issues,
    validate_and_deduplicate,
)


def build_quality_report(result: AnalysisResult) -> QualityReport:
    issues = prioritize_issues(validate_and_deduplicate(result.issues))
    suggestions = generate_suggestions(issues)

    return QualityReport(
        analysis_id=result.analysis_id,
        score=result.score,
        issues=issues,
        groups=group_by_category(issues),
        stats=calculate_issue_stats(issues),
        suggestions=suggestions,
        batch_impact=calculate_batch_impact(suggestions),
        improvement=estimate_improvement(issues, before_score=result.score),
        failed_files=result.failed_files,
    )
