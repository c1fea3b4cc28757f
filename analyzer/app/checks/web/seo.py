"""
SEO checks (HTML documents only).

Rules:
- no <meta name="description">   → MEDIUM
- no <title>                     → HIGH
- no <h1>                        → HIGH
"""

from __future__ import annotations

import re
from typing import List, Optional

from analyzer.app.config import AnalyzerConfig
from analyzer.app.schemas.findings import (
    Finding,
    FindingCategory,
    Severity,
)

_META_DESCRIPTION = re.compile(
    r"""<meta\b[^<>]*name\s*=\s*["']description["']""",
    re.IGNORECASE,
)
_TITLE = re.compile(r"<title[\s>]", re.IGNORECASE)
_H1 = re.compile(r"<h1[\s>]", re.IGNORECASE)


def run_seo_checks(
    content: str,
    filename: str,
    config: Optional[AnalyzerConfig] = None,
) -> List[Finding]:
    findings: List[Finding] = []

    if not _META_DESCRIPTION.search(content):
        findings.append(
            Finding(
                title="Missing meta description",
                description="Add a meta description for better SEO",
                category=FindingCategory.SEO,
                severity=Severity.MEDIUM,
                file=filename,
                code="<head>...",
                suggestion='<meta name="description" content="Page description" />',
                rationale="Improves search engine rankings and click-through rate",
            )
        )

    if not _TITLE.search(content):
        findings.append(
            Finding(
                title="Missing page title",
                description="Every page should have a unique title",
                category=FindingCategory.SEO,
                severity=Severity.HIGH,
                file=filename,
                code="<head>...</head>",
                suggestion="<title>Page Title - Website</title>",
                rationale="Essential for SEO and user experience",
            )
        )

    if not _H1.search(content):
        findings.append(
            Finding(
                title="Missing h1 heading",
                description="Page should have exactly one h1 element",
                category=FindingCategory.SEO,
                severity=Severity.HIGH,
                file=filename,
                code="No h1 found",
                suggestion="<h1>Page Main Heading</h1>",
                rationale="Critical for page structure and SEO",
            )
        )

    return findings
