from datetime import datetime, timedelta, timezone

from analyzer.app.schemas.analysis import Scan
from analyzer.app.schemas.findings import FindingCategory, Severity, ValidatedFinding
from analyzer.app.validation.issue_validation import (
    calculate_issue_stats,
    calculate_issue_trends,
    filter_by_severity,
    find_similar_issues,
    group_by_category,
    prioritize_issues,
    validate_and_deduplicate,
    validate_issue_quality,
)
from analyzer.tests.fixtures.source_factory import make_finding


NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Validation + deduplication
# ---------------------------------------------------------------------------

def test_duplicates_by_category_title_file_keep_first_seen():
    first = make_finding("Missing alt attribute", line=1)
    duplicate = make_finding("Missing alt attribute", line=9)
    other_file = make_finding("Missing alt attribute", file="about.html")

    validated = validate_and_deduplicate([first, duplicate, other_file])

    assert [(v.file, v.line) for v in validated] == [
        ("index.html", 1),
        ("about.html", None),
    ]
    assert all(isinstance(v, ValidatedFinding) for v in validated)
    assert all(v.validated is True for v in validated)


def test_validated_ids_are_unique_and_prefixed():
    validated = validate_and_deduplicate(
        [make_finding(f"Finding {i}") for i in range(5)]
    )

    ids = [v.id for v in validated]
    assert len(set(ids)) == 5
    assert all(i.startswith("issue_") for i in ids)


def test_validation_is_idempotent():
    once = validate_and_deduplicate([make_finding("A"), make_finding("B")])
    twice = validate_and_deduplicate(once)

    assert [v.id for v in twice] == [v.id for v in once]
    assert [v.timestamp for v in twice] == [v.timestamp for v in once]


def test_malformed_records_are_rejected_without_aborting_batch():
    good = {
        "title": "Missing page title",
        "description": "No title",
        "category": "seo",
        "severity": "high",
        "file": "index.html",
        "unknown_key": "ignored",
    }
    records = [
        {"title": "", "description": "d", "category": "seo", "severity": "high"},
        {"title": 5, "description": "d", "category": "seo", "severity": "high"},
        {"title": "t", "description": "d", "category": "seo"},
        {**good, "title": "Bad line", "line": 0},
        "not a finding",
        good,
    ]

    validated = validate_and_deduplicate(records)

    assert [v.title for v in validated] == ["Missing page title"]


def test_empty_title_finding_is_rejected():
    assert validate_and_deduplicate([make_finding("")]) == []


# ---------------------------------------------------------------------------
# Filtering, grouping, statistics
# ---------------------------------------------------------------------------

def test_filter_keeps_floor_and_above():
    issues = [
        make_finding("c", severity=Severity.CRITICAL),
        make_finding("h", severity=Severity.HIGH),
        make_finding("m", severity=Severity.MEDIUM),
        make_finding("u", severity="urgent"),
    ]

    assert [i.title for i in filter_by_severity(issues, Severity.HIGH)] == ["c", "h"]
    assert [i.title for i in filter_by_severity(issues, "low")] == ["c", "h", "m"]


def test_filter_with_unknown_floor_returns_nothing():
    assert filter_by_severity([make_finding(severity=Severity.CRITICAL)], "urgent") == []


def test_group_by_category_tallies_severities():
    issues = [
        make_finding("a", category=FindingCategory.SEO, severity=Severity.HIGH),
        make_finding("b", category=FindingCategory.SEO, severity=Severity.LOW),
        make_finding("c", category=FindingCategory.SECURITY, severity="urgent"),
    ]

    groups = group_by_category(issues)

    assert list(groups) == ["seo", "security"]
    assert groups["seo"].name == "Seo"
    assert (groups["seo"].count, groups["seo"].high, groups["seo"].low) == (2, 1, 1)
    assert groups["security"].other == 1
    assert [i.title for i in groups["seo"].issues] == ["a", "b"]


def test_stats_fix_time_and_risk_score():
    issues = [
        make_finding("c", severity=Severity.CRITICAL),
        make_finding("h", severity=Severity.HIGH),
        make_finding("m", severity=Severity.MEDIUM),
        make_finding("l", severity=Severity.LOW, category=FindingCategory.SEO),
    ]

    stats = calculate_issue_stats(issues)

    assert stats.total == 4
    assert stats.by_severity == {"critical": 1, "high": 1, "medium": 1, "low": 1}
    assert stats.by_category == {"structure": 3, "seo": 1}
    assert stats.estimated_fix_time == 65
    assert stats.risk_score == 11.25


def test_stats_for_empty_and_unknown_severity():
    assert calculate_issue_stats([]).risk_score == 0.0

    stats = calculate_issue_stats([make_finding(severity="urgent")])
    assert stats.by_severity["other"] == 1
    assert stats.estimated_fix_time == 5


# ---------------------------------------------------------------------------
# Quality check
# ---------------------------------------------------------------------------

def test_quality_check_accepts_complete_finding():
    check = validate_issue_quality(make_finding("Missing h1 heading"))

    assert check.valid is True
    assert check.errors == []


def test_quality_check_rejects_lint_category():
    check = validate_issue_quality(make_finding(category=FindingCategory.LINT))

    assert check.valid is False
    assert check.errors == ["Issue category is invalid"]


def test_quality_check_lists_every_violation():
    check = validate_issue_quality({"title": "", "category": "misc", "severity": "urgent"})

    assert check.errors == [
        "Issue title is required",
        "Issue category is invalid",
        "Issue severity is invalid",
        "Issue description is required",
        "Issue file reference is required",
    ]


# ---------------------------------------------------------------------------
# Ordering and similarity
# ---------------------------------------------------------------------------

def test_prioritize_by_severity_then_category():
    issues = [
        make_finding("low seo", category=FindingCategory.SEO, severity=Severity.LOW),
        make_finding("high structure", severity=Severity.HIGH),
        make_finding("high security", category=FindingCategory.SECURITY, severity=Severity.HIGH),
        make_finding("critical i18n", category=FindingCategory.I18N, severity=Severity.CRITICAL),
        make_finding("unknown", severity="urgent"),
    ]

    assert [i.title for i in prioritize_issues(issues)] == [
        "critical i18n",
        "high security",
        "high structure",
        "low seo",
        "unknown",
    ]


def test_prioritize_is_stable_for_ties():
    issues = [make_finding(f"t{i}") for i in range(4)]

    assert [i.title for i in prioritize_issues(issues)] == ["t0", "t1", "t2", "t3"]


def test_find_similar_excludes_the_issue_itself():
    issue = make_finding("Missing alt attribute", category=FindingCategory.ACCESSIBILITY)
    near = make_finding("Missing alt attributes", category=FindingCategory.ACCESSIBILITY)
    other_category = make_finding("Missing alt attribute", category=FindingCategory.SEO)

    similar = find_similar_issues(issue, [issue, near, other_category])

    assert similar == [near]
    assert find_similar_issues(issue, [other_category], threshold=0.6) == [other_category]


# ---------------------------------------------------------------------------
# Trends
# ---------------------------------------------------------------------------

def test_trends_need_two_scans():
    assert calculate_issue_trends([]) is None
    assert calculate_issue_trends([Scan(id="s1")]) is None


def test_trend_direction_compares_last_week_with_older_history():
    recent = Scan(
        id="recent",
        timestamp=NOW - timedelta(days=1),
        issues=[
            make_finding("a", category=FindingCategory.SECURITY),
            make_finding("b", category=FindingCategory.SECURITY),
            make_finding("c", category=FindingCategory.SEO),
            make_finding("d", category=FindingCategory.ACCESSIBILITY),
        ],
    )
    older = Scan(
        id="older",
        timestamp=NOW - timedelta(days=30),
        issues=[
            make_finding("a", category=FindingCategory.SECURITY),
            make_finding("c", category=FindingCategory.SEO),
            make_finding("e", category=FindingCategory.SEO),
        ],
    )

    trends = calculate_issue_trends([recent, older], now=NOW)

    assert [(t.category, t.count, t.trend) for t in trends] == [
        ("security", 3, "increasing"),
        ("seo", 3, "decreasing"),
        ("accessibility", 1, "stable"),
    ]


def test_naive_timestamps_are_treated_as_utc():
    naive = Scan(
        id="naive",
        timestamp=(NOW - timedelta(days=2)).replace(tzinfo=None),
        issues=[make_finding(category=FindingCategory.SEO)],
    )
    aware = Scan(
        id="aware",
        timestamp=NOW - timedelta(days=3),
        issues=[make_finding(category=FindingCategory.SEO)],
    )

    trends = calculate_issue_trends([naive, aware], now=NOW)

    assert [(t.category, t.trend) for t in trends] == [("seo", "increasing")]
