"""
Performance checks.

Rules:
- content longer than LARGE_FILE_THRESHOLD_CHARS that contains <img> → MEDIUM
- more than LAZY_LOADING_IMAGE_THRESHOLD <img> tags and none lazy    → LOW

Both are file-level findings (no line number).
"""

from __future__ import annotations

from typing import List, Optional

from analyzer.app.config import AnalyzerConfig
from analyzer.app.schemas.findings import (
    Finding,
    FindingCategory,
    Severity,
)


def run_performance_checks(
    content: str,
    filename: str,
    config: Optional[AnalyzerConfig] = None,
) -> List[Finding]:
    config = config or AnalyzerConfig()
    findings: List[Finding] = []

    image_count = content.count("<img")

    if image_count and len(content) > config.LARGE_FILE_THRESHOLD_CHARS:
        findings.append(
            Finding(
                title="Large file size",
                description="Consider optimizing images and minifying code",
                category=FindingCategory.PERFORMANCE,
                severity=Severity.MEDIUM,
                file=filename,
                code="Large file detected",
                suggestion="Optimize images, use lazy loading, minify code",
                rationale="Improves page load time and Core Web Vitals",
            )
        )

    if (
        image_count > config.LAZY_LOADING_IMAGE_THRESHOLD
        and 'loading="lazy"' not in content
    ):
        findings.append(
            Finding(
                title="Missing lazy loading",
                description="Images should use lazy loading for performance",
                category=FindingCategory.PERFORMANCE,
                severity=Severity.LOW,
                file=filename,
                code='<img src="..." />',
                suggestion='<img src="..." loading="lazy" />',
                rationale="Reduces initial page load time",
            )
        )

    return findings
