"""
Security checks.

Rules:
- <a target="_blank"> without rel="noopener ..."      → HIGH (per anchor)
- inline <script>...</script> block                   → MEDIUM (single
  aggregate finding per file, not one per occurrence)
"""

from __future__ import annotations

import re
from typing import List, Optional

from analyzer.app.config import AnalyzerConfig
from analyzer.app.checks.locate import SourceText
from analyzer.app.checks.web.accessibility import insert_attribute
from analyzer.app.schemas.findings import (
    Finding,
    FindingCategory,
    Severity,
)

_ANCHOR_TAG = re.compile(r"<a\b[^<>]*>", re.IGNORECASE)
_BLANK_TARGET = re.compile(r"""target\s*=\s*["']_blank["']""", re.IGNORECASE)
_REL_NOOPENER = re.compile(r"""rel\s*=\s*["'][^"']*noopener""", re.IGNORECASE)

# Script blocks without a src attribute
_INLINE_SCRIPT = re.compile(
    r"<script\b(?![^<>]*\bsrc\s*=)[^<>]*>[^<]*</script>",
    re.IGNORECASE,
)


def run_security_checks(
    content: str,
    filename: str,
    config: Optional[AnalyzerConfig] = None,
) -> List[Finding]:
    source = SourceText(content, filename)
    findings: List[Finding] = []

    findings.extend(_unsafe_blank_targets(source))
    findings.extend(_inline_scripts(source))

    return findings


def _unsafe_blank_targets(source: SourceText) -> List[Finding]:
    findings: List[Finding] = []

    for match in _ANCHOR_TAG.finditer(source.content):
        tag = match.group(0)
        if not _BLANK_TARGET.search(tag) or _REL_NOOPENER.search(tag):
            continue

        line = source.line_number(match.start())
        findings.append(
            Finding(
                title='Unsafe target="_blank" usage',
                description=(
                    'Links with target="_blank" should have '
                    'rel="noopener noreferrer"'
                ),
                category=FindingCategory.SECURITY,
                severity=Severity.HIGH,
                file=source.filename,
                line=line,
                code=tag,
                code_context=source.context(line),
                suggestion=insert_attribute(tag, 'rel="noopener noreferrer"'),
                rationale="Prevents malicious websites from accessing window object",
            )
        )

    return findings


def _inline_scripts(source: SourceText) -> List[Finding]:
    match = _INLINE_SCRIPT.search(source.content)
    if match is None:
        return []

    line = source.line_number(match.start())
    return [
        Finding(
            title="Inline script usage",
            description="Avoid inline scripts for better security",
            category=FindingCategory.SECURITY,
            severity=Severity.MEDIUM,
            file=source.filename,
            line=line,
            code=match.group(0),
            code_context=source.context(line),
            suggestion="Move to external file",
            rationale="Content Security Policy (CSP) compliance",
        )
    ]
