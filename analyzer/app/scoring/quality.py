"""
Canonical quality score.

Single scoring formula used after analysis and by the before/after
estimator:

    100 - sum(penalty per finding), clamped to [0, 100]

Penalties by severity: critical 10, high 5, medium 2, low 1. Any other
severity string costs 1. An empty finding list scores 100.
"""

from __future__ import annotations

import math
from typing import Dict, Iterable

from analyzer.app.schemas.findings import Finding, Severity

MAX_SCORE = 100
MIN_SCORE = 0

SEVERITY_PENALTIES: Dict[str, int] = {
    Severity.CRITICAL.value: 10,
    Severity.HIGH.value: 5,
    Severity.MEDIUM.value: 2,
    Severity.LOW.value: 1,
}

UNKNOWN_SEVERITY_PENALTY = 1


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def severity_penalty(severity: str) -> int:
    return SEVERITY_PENALTIES.get(severity, UNKNOWN_SEVERITY_PENALTY)


def calculate_quality_score(findings: Iterable[Finding]) -> int:
    penalty = sum(severity_penalty(f.severity) for f in findings)
    return max(MIN_SCORE, min(MAX_SCORE, MAX_SCORE - penalty))
