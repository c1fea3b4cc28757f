"""
Issue validation, deduplication and prioritization.

Operates on findings produced by an analysis run:

- validate_and_deduplicate: structure check, first-seen-wins dedup by
  ``category:title:file``, id/timestamp stamping
- filter_by_severity: keep findings at or above a severity floor
- group_by_category: per-category counts, severity tallies and members
- calculate_issue_stats: totals, fix-time estimate and risk score
- validate_issue_quality: specific violation messages for one finding
- prioritize_issues: stable sort by severity, then category priority
- find_similar_issues: duplicate candidates by weighted similarity
- calculate_issue_trends: per-category direction across scan history

A single malformed record is rejected and logged; it never aborts the
rest of the batch. Unrecognized severities and categories are bucketed
under ``other`` wherever a key is required.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import (
    Any,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Union,
)
from uuid import uuid4

from pydantic import ValidationError

from analyzer.app.schemas.analysis import Scan
from analyzer.app.schemas.findings import (
    CANONICAL_CATEGORIES,
    OTHER,
    SEVERITY_LEVELS,
    Finding,
    FindingCategory,
    Severity,
    ValidatedFinding,
    enum_value,
)
from analyzer.app.schemas.report import (
    CategoryGroup,
    IssueStats,
    IssueTrend,
    QualityCheck,
)
from analyzer.app.validation.similarity import string_similarity

logger = logging.getLogger(__name__)

IssueLike = Union[Finding, Mapping[str, Any]]


# ---------------------------------------------------------------------------
# Ordering and lookup tables
# ---------------------------------------------------------------------------

# Floor comparison: higher is more urgent
SEVERITY_RANK: Dict[str, int] = {
    Severity.CRITICAL.value: 4,
    Severity.HIGH.value: 3,
    Severity.MEDIUM.value: 2,
    Severity.LOW.value: 1,
}

# Sort order: lower sorts first
SEVERITY_PRIORITY: Dict[str, int] = {
    Severity.CRITICAL.value: 1,
    Severity.HIGH.value: 2,
    Severity.MEDIUM.value: 3,
    Severity.LOW.value: 4,
}
UNKNOWN_SEVERITY_PRIORITY = 5

CATEGORY_PRIORITY: Dict[str, int] = {
    FindingCategory.SECURITY.value: 1,
    FindingCategory.ACCESSIBILITY.value: 2,
    FindingCategory.PERFORMANCE.value: 3,
    FindingCategory.SEO.value: 4,
    FindingCategory.STRUCTURE.value: 5,
    FindingCategory.I18N.value: 6,
}
UNKNOWN_CATEGORY_PRIORITY = 7

# Minutes per finding
FIX_TIME_MINUTES: Dict[str, int] = {
    Severity.CRITICAL.value: 30,
    Severity.HIGH.value: 20,
    Severity.MEDIUM.value: 10,
    Severity.LOW.value: 5,
}
UNKNOWN_FIX_TIME_MINUTES = 5

RISK_WEIGHTS: Dict[str, int] = {
    Severity.CRITICAL.value: 25,
    Severity.HIGH.value: 15,
    Severity.MEDIUM.value: 5,
}

TREND_WINDOW = timedelta(days=7)
TREND_RATIO = 1.2

_STRUCTURE_FIELDS = ("title", "description", "category", "severity")


# ---------------------------------------------------------------------------
# Validation + deduplication
# ---------------------------------------------------------------------------


def validate_and_deduplicate(issues: Iterable[IssueLike]) -> List[ValidatedFinding]:
    """
    Keep the first structurally valid finding per ``category:title:file``.

    Accepts Finding objects or plain mappings. Already validated findings
    keep their id and timestamp, so the operation is idempotent.
    """
    seen = set()
    validated: List[ValidatedFinding] = []

    for position, issue in enumerate(issues):
        finding = _coerce_finding(issue, position)
        if finding is None:
            continue

        key = finding.identity_key
        if key in seen:
            logger.debug("Dropping duplicate finding %s", key)
            continue

        seen.add(key)
        validated.append(_stamp(finding))

    return validated


def _coerce_finding(issue: IssueLike, position: int) -> Optional[Finding]:
    if isinstance(issue, Finding):
        if not issue.title:
            logger.warning("Rejected finding #%d: empty title", position)
            return None
        return issue

    if not isinstance(issue, Mapping):
        logger.warning(
            "Rejected finding #%d: unsupported type %s",
            position,
            type(issue).__name__,
        )
        return None

    for name in _STRUCTURE_FIELDS:
        if not isinstance(enum_value(issue.get(name)), str):
            logger.warning(
                "Rejected finding #%d: field '%s' must be a string",
                position,
                name,
            )
            return None

    if not issue["title"]:
        logger.warning("Rejected finding #%d: empty title", position)
        return None

    model = ValidatedFinding if "id" in issue else Finding
    fields = {k: v for k, v in issue.items() if k in model.model_fields}

    try:
        return model.model_validate(fields)
    except ValidationError as exc:
        logger.warning(
            "Rejected finding #%d: %d validation error(s)",
            position,
            exc.error_count(),
        )
        return None


def _stamp(finding: Finding) -> ValidatedFinding:
    if isinstance(finding, ValidatedFinding):
        return finding

    return ValidatedFinding(
        **finding.model_dump(),
        id=f"issue_{uuid4().hex}",
    )


# ---------------------------------------------------------------------------
# Filtering, grouping, statistics
# ---------------------------------------------------------------------------


def filter_by_severity(
    issues: Iterable[Finding],
    severity_level: Union[Severity, str],
) -> List[Finding]:
    floor = SEVERITY_RANK.get(enum_value(severity_level))
    if floor is None:
        logger.warning("Unknown severity floor %r; nothing passes", severity_level)
        return []

    return [
        issue for issue in issues
        if SEVERITY_RANK.get(issue.severity, 0) >= floor
    ]


def group_by_category(issues: Iterable[Finding]) -> Dict[str, CategoryGroup]:
    groups: Dict[str, Dict[str, Any]] = {}

    for issue in issues:
        category = issue.category or OTHER
        group = groups.get(category)
        if group is None:
            group = groups[category] = {
                "name": category[:1].upper() + category[1:],
                "count": 0,
                "issues": [],
            }

        group["issues"].append(issue)
        group["count"] += 1

        bucket = issue.severity if issue.severity in SEVERITY_LEVELS else OTHER
        group[bucket] = group.get(bucket, 0) + 1

    return {key: CategoryGroup(**group) for key, group in groups.items()}


def calculate_issue_stats(issues: Sequence[Finding]) -> IssueStats:
    by_severity: Dict[str, int] = {level: 0 for level in SEVERITY_RANK}
    by_category: Dict[str, int] = {}
    fix_time = 0

    for issue in issues:
        bucket = issue.severity if issue.severity in SEVERITY_LEVELS else OTHER
        by_severity[bucket] = by_severity.get(bucket, 0) + 1

        category = issue.category or OTHER
        by_category[category] = by_category.get(category, 0) + 1

        fix_time += FIX_TIME_MINUTES.get(issue.severity, UNKNOWN_FIX_TIME_MINUTES)

    weighted = sum(
        by_severity[level] * weight for level, weight in RISK_WEIGHTS.items()
    )

    return IssueStats(
        total=len(issues),
        by_severity=by_severity,
        by_category=by_category,
        estimated_fix_time=fix_time,
        risk_score=min(100.0, weighted / max(1, len(issues))),
    )


# ---------------------------------------------------------------------------
# Quality check
# ---------------------------------------------------------------------------


def validate_issue_quality(issue: IssueLike) -> QualityCheck:
    """
    Report every quality violation of one finding.

    Unlike deduplication, which only rejects unusable records, this
    check also rejects non-canonical categories (including ``lint``).
    """
    get = issue.get if isinstance(issue, Mapping) else (
        lambda name, default=None: getattr(issue, name, default)
    )
    errors: List[str] = []

    title = get("title")
    if not isinstance(title, str) or not title:
        errors.append("Issue title is required")

    if enum_value(get("category")) not in CANONICAL_CATEGORIES:
        errors.append("Issue category is invalid")

    if enum_value(get("severity")) not in SEVERITY_LEVELS:
        errors.append("Issue severity is invalid")

    description = get("description")
    if not isinstance(description, str) or not description:
        errors.append("Issue description is required")

    if not get("file"):
        errors.append("Issue file reference is required")

    return QualityCheck(valid=not errors, errors=errors)


# ---------------------------------------------------------------------------
# Ordering and similarity
# ---------------------------------------------------------------------------


def priority_key(issue: Finding) -> tuple:
    return (
        SEVERITY_PRIORITY.get(issue.severity, UNKNOWN_SEVERITY_PRIORITY),
        CATEGORY_PRIORITY.get(issue.category, UNKNOWN_CATEGORY_PRIORITY),
    )


def prioritize_issues(issues: Iterable[Finding]) -> List[Finding]:
    """Stable sort: severity first, then security > accessibility > ... > other."""
    return sorted(issues, key=priority_key)


def find_similar_issues(
    issue: Finding,
    all_issues: Iterable[Finding],
    threshold: float = 0.8,
) -> List[Finding]:
    similar: List[Finding] = []

    for other in all_issues:
        if other is issue:
            continue

        score = (
            (1.0 if issue.category == other.category else 0.0)
            + (1.0 if issue.severity == other.severity else 0.0)
            + string_similarity(issue.title, other.title)
        ) / 3

        if score >= threshold:
            similar.append(other)

    return similar


# ---------------------------------------------------------------------------
# Trends
# ---------------------------------------------------------------------------


def calculate_issue_trends(
    scans: Sequence[Scan],
    now: Optional[datetime] = None,
) -> Optional[List[IssueTrend]]:
    """
    Per-category occurrence count and direction across a scan history.

    Occurrences from the last 7 days are compared with older ones; a
    side wins when it exceeds the other by more than 20%. Returns None
    when fewer than two scans are available.
    """
    if len(scans) < 2:
        return None

    now = now or datetime.now(timezone.utc)
    occurrences: Dict[str, List[datetime]] = {}

    for scan in scans:
        for issue in scan.issues:
            occurrences.setdefault(issue.category, []).append(scan.timestamp)

    return [
        IssueTrend(
            category=category,
            count=len(timestamps),
            trend=_trend_direction(timestamps, now),
        )
        for category, timestamps in occurrences.items()
    ]


def _trend_direction(timestamps: Sequence[datetime], now: datetime) -> str:
    if len(timestamps) < 2:
        return "stable"

    recent = sum(1 for t in timestamps if now - _aware(t) < TREND_WINDOW)
    older = len(timestamps) - recent

    if recent > older * TREND_RATIO:
        return "increasing"
    if older > recent * TREND_RATIO:
        return "decreasing"
    return "stable"


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
