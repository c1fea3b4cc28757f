"""
Suggestion generation.

Derives a before/after remediation preview for each finding (positional
1:1 mapping), plus severity-keyed estimates used for planning:

- a fix strategy is selected by category, with a generic fallback
- within a strategy, keywords in the (lowercased) title pick the literal
  replacement applied to the finding's code
- when no replacement applies, the finding's own suggestion is used,
  then a generic "Apply recommended fix"

Confidence, fix time and impact are derived from severity alone.
"""

from __future__ import annotations

import re
from typing import Callable, Dict, Iterable, List, Sequence, Union

from analyzer.app.checks.web.accessibility import ALT_PLACEHOLDER, insert_attribute
from analyzer.app.schemas.findings import OTHER, Finding, FindingCategory, Severity
from analyzer.app.schemas.suggestions import BatchImpact, FixTimeEstimate, Suggestion
from analyzer.app.scoring.quality import round_half_up
from analyzer.app.validation.issue_validation import (
    SEVERITY_PRIORITY,
    UNKNOWN_SEVERITY_PRIORITY,
)

SeverityCarrier = Union[Finding, Suggestion]
FixStrategy = Callable[[Finding], str]

GENERIC_FIX = "Apply recommended fix"
MISSING_CODE = "Code snippet not available"

_CONSOLE_TYPO = re.compile(r"\b(consoole|consol|consloe)\b", re.IGNORECASE)
_USERNAME_LOOKUP = re.compile(
    r"getelementbyusername\s*\(\s*['\"]([^'\"]+)['\"]\s*\)", re.IGNORECASE
)
_EMPTY_BUTTON = re.compile(r"<button\b([^<>]*)>\s*</button>", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Severity-keyed tables
# ---------------------------------------------------------------------------

BASE_CONFIDENCE: Dict[str, float] = {
    Severity.CRITICAL.value: 0.95,
    Severity.HIGH.value: 0.85,
    Severity.MEDIUM.value: 0.75,
    Severity.LOW.value: 0.65,
}
UNKNOWN_BASE_CONFIDENCE = 0.7
CONFIDENCE_BONUS = 0.1

FIX_TIME: Dict[str, FixTimeEstimate] = {
    Severity.CRITICAL.value: FixTimeEstimate(min=15, max=45),
    Severity.HIGH.value: FixTimeEstimate(min=10, max=30),
    Severity.MEDIUM.value: FixTimeEstimate(min=5, max=15),
    Severity.LOW.value: FixTimeEstimate(min=2, max=8),
}
UNKNOWN_FIX_TIME = FixTimeEstimate(min=5, max=15)

FIX_IMPACT: Dict[str, int] = {
    Severity.CRITICAL.value: 95,
    Severity.HIGH.value: 80,
    Severity.MEDIUM.value: 60,
    Severity.LOW.value: 30,
}
UNKNOWN_FIX_IMPACT = 50


# ---------------------------------------------------------------------------
# Category-keyed text
# ---------------------------------------------------------------------------

EXPLANATIONS: Dict[str, str] = {
    FindingCategory.ACCESSIBILITY.value: (
        "This fix improves accessibility by ensuring screen readers and "
        "assistive technologies can properly interpret your code. It follows "
        "WCAG 2.1 guidelines to make your application more inclusive."
    ),
    FindingCategory.SECURITY.value: (
        "This fix addresses a security vulnerability that could expose your "
        "application to attacks. Implementing this change helps protect user "
        "data and prevents potential exploits."
    ),
    FindingCategory.PERFORMANCE.value: (
        "This fix optimizes your code's performance by reducing render cycles "
        "and improving load times. It follows best practices for modern web "
        "applications."
    ),
    FindingCategory.SEO.value: (
        "This fix improves your page's search engine optimization, making it "
        "more discoverable and improving rankings in search results."
    ),
    FindingCategory.STRUCTURE.value: (
        "This fix improves code structure and maintainability, making your "
        "codebase easier to understand and modify in the future."
    ),
    FindingCategory.I18N.value: (
        "This fix enables internationalization support, allowing your "
        "application to serve users in different languages and regions."
    ),
}
DEFAULT_EXPLANATION = "This fix improves code quality and best practices."

RATIONALES: Dict[str, str] = {
    FindingCategory.ACCESSIBILITY.value: "Improves accessibility and user experience for all users",
    FindingCategory.SECURITY.value: "Prevents security vulnerabilities and protects user data",
    FindingCategory.PERFORMANCE.value: "Enhances application speed and responsiveness",
    FindingCategory.SEO.value: "Improves search engine visibility and rankings",
    FindingCategory.STRUCTURE.value: "Enhances code maintainability and readability",
    FindingCategory.I18N.value: "Enables multi-language support for global audiences",
}
DEFAULT_RATIONALE = "Improves code quality and best practices"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def generate_suggestions(findings: Sequence[Finding]) -> List[Suggestion]:
    suggestions: List[Suggestion] = []

    for position, finding in enumerate(findings):
        suggestions.append(
            Suggestion(
                id=position,
                issue_id=getattr(finding, "id", None) or position,
                original=finding.code or finding.code_context or MISSING_CODE,
                suggested=generate_fix(finding),
                rationale=finding.rationale or default_rationale(finding.category),
                explanation=generate_fix_explanation(finding),
                category=finding.category,
                severity=finding.severity,
                confidence=calculate_confidence(finding),
                file=finding.file,
                line=finding.line,
                title=finding.title,
                description=finding.description,
            )
        )

    return suggestions


def generate_fix(finding: Finding) -> str:
    strategy = FIX_STRATEGIES.get(finding.category, _generic_fix)
    return strategy(finding)


def generate_fix_explanation(finding: SeverityCarrier) -> str:
    return EXPLANATIONS.get(finding.category, DEFAULT_EXPLANATION)


def default_rationale(category: str) -> str:
    return RATIONALES.get(category, DEFAULT_RATIONALE)


def calculate_confidence(finding: SeverityCarrier) -> float:
    base = BASE_CONFIDENCE.get(finding.severity, UNKNOWN_BASE_CONFIDENCE)
    return round(min(1.0, base + CONFIDENCE_BONUS), 2)


def estimate_fix_time(item: SeverityCarrier) -> FixTimeEstimate:
    return FIX_TIME.get(item.severity, UNKNOWN_FIX_TIME)


def calculate_fix_impact(item: SeverityCarrier) -> int:
    return FIX_IMPACT.get(item.severity, UNKNOWN_FIX_IMPACT)


def calculate_batch_impact(suggestions: Sequence[Suggestion]) -> BatchImpact:
    """
    Average impact and summed mean fix time over a suggestion set.
    """
    if not suggestions:
        return BatchImpact(total_impact=0, estimated_time=0, suggestion_count=0)

    impact = sum(calculate_fix_impact(s) for s in suggestions)
    minutes = sum(estimate_fix_time(s).mean for s in suggestions)

    return BatchImpact(
        total_impact=round_half_up(impact / len(suggestions)),
        estimated_time=round_half_up(minutes),
        suggestion_count=len(suggestions),
    )


def group_suggestions_by_category(
    suggestions: Iterable[Suggestion],
) -> Dict[str, List[Suggestion]]:
    groups: Dict[str, List[Suggestion]] = {}
    for suggestion in suggestions:
        groups.setdefault(suggestion.category or OTHER, []).append(suggestion)
    return groups


def prioritize_suggestions(suggestions: Iterable[Suggestion]) -> List[Suggestion]:
    """Most severe first; within a severity, highest confidence first."""
    return sorted(
        suggestions,
        key=lambda s: (
            SEVERITY_PRIORITY.get(s.severity, UNKNOWN_SEVERITY_PRIORITY),
            -s.confidence,
        ),
    )


def generate_implementation_guide(suggestion: Suggestion) -> str:
    understand = suggestion.explanation or (
        "Review the issue description and understand why this change is needed."
    )
    return "\n".join(
        [
            "Step 1: Understand the Issue",
            understand,
            "",
            "Step 2: Review the Fix",
            "Compare the original code with the suggested fix to understand the changes.",
            "",
            "Step 3: Apply the Fix",
            "Copy the suggested code and replace the original implementation.",
            "",
            "Step 4: Test",
            "Verify that the fix works correctly and doesn't break existing functionality.",
            "",
            "Step 5: Commit",
            "Save your changes and commit to your version control system.",
        ]
    )


# ---------------------------------------------------------------------------
# Fix strategies
# ---------------------------------------------------------------------------


def _accessibility_fix(finding: Finding) -> str:
    title = finding.title.lower()
    code = finding.code

    if "alt" in title:
        if code:
            return insert_attribute(code, ALT_PLACEHOLDER, self_closing=True)
        return finding.suggestion or f'<img src="..." {ALT_PLACEHOLDER} />'

    if "button" in title:
        match = _EMPTY_BUTTON.search(code)
        if match:
            return (
                f'<button{match.group(1).rstrip()} aria-label="Action description">'
                "Button Label</button>"
            )
        return finding.suggestion or (
            '<button aria-label="Action description">Button Label</button>'
        )

    if "lang" in title:
        if code:
            return insert_attribute(code, 'lang="en"')
        return finding.suggestion or '<html lang="en">'

    return finding.suggestion or code or "Apply accessibility improvements"


def _security_fix(finding: Finding) -> str:
    title = finding.title.lower()

    if "target" in title:
        if finding.code:
            return insert_attribute(finding.code, 'rel="noopener noreferrer"')
        return finding.suggestion or (
            '<a href="..." target="_blank" rel="noopener noreferrer">Link</a>'
        )

    if "inline script" in title:
        return finding.suggestion or (
            "// Move script to external file\n"
            "// <script src='external.js'></script>"
        )

    return finding.suggestion or finding.code or "Apply security improvements"


def _performance_fix(finding: Finding) -> str:
    title = finding.title.lower()

    if "lazy loading" in title:
        if "/>" in finding.code:
            return finding.code.replace("/>", 'loading="lazy" />', 1)
        return 'loading="lazy"'

    if "image" in title:
        return "<!-- Optimize image: compress, use modern format like WebP -->"

    return finding.suggestion or "Apply performance optimizations"


def _seo_fix(finding: Finding) -> str:
    title = finding.title.lower()

    if "title" in title:
        return "<title>Page Title - Website Name</title>"
    if "description" in title:
        return '<meta name="description" content="Clear page description" />'
    if "h1" in title:
        return "<h1>Main Page Heading</h1>"

    return finding.suggestion or "Apply SEO improvements"


def _structure_fix(finding: Finding) -> str:
    title = finding.title.lower()
    code = finding.code

    if "nest" in title:
        return "<!-- Refactor to reduce nesting depth -->"

    if "duplicate" in title:
        return "<!-- Use unique IDs or replace with classes -->"

    if "console" in title or _CONSOLE_TYPO.search(code):
        if code:
            return _CONSOLE_TYPO.sub("console", code)
        return finding.suggestion or "console.log('hello');"

    if "getelementbyusername" in title:
        if code:
            match = _USERNAME_LOOKUP.search(code)
            if match:
                return f"document.getElementById('{match.group(1)}')"
            return re.sub("getelementbyusername", "getElementById", code, flags=re.IGNORECASE)
        return finding.suggestion or "document.getElementById('elementId')"

    if "getelementbyid" in title:
        if code:
            return re.sub("getelementbyid", "getElementById", code, flags=re.IGNORECASE)
        return finding.suggestion or "document.getElementById('elementId')"

    if "unclosed" in title:
        return finding.suggestion or "Check for matching brackets/parentheses"

    return finding.suggestion or code or "Improve code structure"


def _generic_fix(finding: Finding) -> str:
    return finding.suggestion or GENERIC_FIX


FIX_STRATEGIES: Dict[str, FixStrategy] = {
    FindingCategory.ACCESSIBILITY.value: _accessibility_fix,
    FindingCategory.SECURITY.value: _security_fix,
    FindingCategory.PERFORMANCE.value: _performance_fix,
    FindingCategory.SEO.value: _seo_fix,
    FindingCategory.STRUCTURE.value: _structure_fix,
}
