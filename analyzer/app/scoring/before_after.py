"""
Before/after improvement estimate.

Projects the score reached if a probabilistic subset of findings were
remediated:

- 80% of critical+high findings are assumed fixed, each worth +8
- 50% of medium+low (and unrecognized) findings are assumed fixed,
  each worth +3
- the after score is capped at 100

The before score is the caller-supplied prior score when given,
otherwise the canonical quality score of the same findings. Zero
findings means both scores are 100.
"""

from __future__ import annotations

from typing import Optional, Sequence

from analyzer.app.schemas.findings import Finding, Severity
from analyzer.app.schemas.report import ImprovementEstimate
from analyzer.app.scoring.quality import (
    MAX_SCORE,
    calculate_quality_score,
    round_half_up,
)

URGENT_FIX_RATE = 0.8
ROUTINE_FIX_RATE = 0.5

URGENT_FIX_GAIN = 8
ROUTINE_FIX_GAIN = 3

_URGENT = frozenset({Severity.CRITICAL.value, Severity.HIGH.value})


def estimate_improvement(
    findings: Sequence[Finding],
    before_score: Optional[int] = None,
) -> ImprovementEstimate:
    total = len(findings)
    if total == 0:
        return ImprovementEstimate()

    before = before_score if before_score is not None else calculate_quality_score(findings)

    urgent = sum(1 for f in findings if f.severity in _URGENT)
    routine = total - urgent

    fixed = round_half_up(urgent * URGENT_FIX_RATE + routine * ROUTINE_FIX_RATE)

    improvement = (
        round_half_up(urgent * URGENT_FIX_RATE) * URGENT_FIX_GAIN
        + round_half_up(routine * ROUTINE_FIX_RATE) * ROUTINE_FIX_GAIN
    )
    after = min(MAX_SCORE, before + improvement)

    return ImprovementEstimate(
        total_issues=total,
        resolved_issues=fixed,
        remaining_issues=max(0, total - fixed),
        before_score=before,
        after_score=after,
        score_increase=max(0, after - before),
        issues_reduced_percent=round_half_up(fixed / total * 100),
    )
