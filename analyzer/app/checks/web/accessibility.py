"""
Accessibility checks for markup and component files.

Rules:
- <img> without an alt attribute                 → HIGH
- <button> with no content                       → HIGH
- <html> without a lang attribute                → MEDIUM

Every finding carries a literal auto-generated suggestion and a context
window around the matched line.
"""

from __future__ import annotations

import re
from typing import List, Optional

from analyzer.app.config import AnalyzerConfig
from analyzer.app.checks.locate import SourceText
from analyzer.app.schemas.findings import (
    Finding,
    FindingCategory,
    Severity,
)

_IMG_TAG = re.compile(r"<img\b[^<>]*>", re.IGNORECASE)
_EMPTY_BUTTON = re.compile(r"<button\b([^<>]*)>\s*</button>", re.IGNORECASE)
_HTML_TAG = re.compile(r"<html\b[^<>]*>", re.IGNORECASE)

ALT_PLACEHOLDER = 'alt="Descriptive text for image"'


def insert_attribute(tag: str, attribute: str, *, self_closing: bool = False) -> str:
    """
    Insert an attribute before the end of an opening tag.

    ``<img src="a.png">`` + ``alt="x"`` → ``<img src="a.png" alt="x" />``
    when self_closing, otherwise ``<img src="a.png" alt="x">``.
    """
    body = tag.rstrip()
    if body.endswith("/>"):
        body = body[:-2]
    elif body.endswith(">"):
        body = body[:-1]
    body = body.rstrip()
    return f"{body} {attribute}{' />' if self_closing else '>'}"


def run_accessibility_checks(
    content: str,
    filename: str,
    config: Optional[AnalyzerConfig] = None,
) -> List[Finding]:
    source = SourceText(content, filename)
    findings: List[Finding] = []

    findings.extend(_missing_alt_text(source))
    findings.extend(_empty_buttons(source))
    findings.extend(_missing_lang(source))

    return findings


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


def _missing_alt_text(source: SourceText) -> List[Finding]:
    findings: List[Finding] = []

    for match in _IMG_TAG.finditer(source.content):
        tag = match.group(0)
        if "alt=" in tag.lower():
            continue

        line = source.line_number(match.start())
        findings.append(
            Finding(
                title="Missing alt attribute",
                description="Images should have alt text for accessibility",
                category=FindingCategory.ACCESSIBILITY,
                severity=Severity.HIGH,
                file=source.filename,
                line=line,
                code=tag,
                code_context=source.context(line),
                suggestion=insert_attribute(tag, ALT_PLACEHOLDER, self_closing=True),
                rationale="Improves screen reader support and SEO",
            )
        )

    return findings


def _empty_buttons(source: SourceText) -> List[Finding]:
    findings: List[Finding] = []

    for match in _EMPTY_BUTTON.finditer(source.content):
        attributes = match.group(1).rstrip()
        line = source.line_number(match.start())
        findings.append(
            Finding(
                title="Empty button element",
                description="Buttons should have descriptive text or aria-label",
                category=FindingCategory.ACCESSIBILITY,
                severity=Severity.HIGH,
                file=source.filename,
                line=line,
                code=match.group(0),
                code_context=source.context(line),
                suggestion=(
                    f'<button{attributes} aria-label="Action description">'
                    "Button Label</button>"
                ),
                rationale="Ensures button purpose is clear to screen readers",
            )
        )

    return findings


def _missing_lang(source: SourceText) -> List[Finding]:
    match = _HTML_TAG.search(source.content)
    if match is None or "lang=" in source.content:
        return []

    tag = match.group(0)
    line = source.line_number(match.start())
    return [
        Finding(
            title="Missing lang attribute",
            description="HTML element should have a lang attribute",
            category=FindingCategory.ACCESSIBILITY,
            severity=Severity.MEDIUM,
            file=source.filename,
            line=line,
            code=tag,
            code_context=source.context(line),
            suggestion=insert_attribute(tag, 'lang="en"'),
            rationale=(
                "Helps screen readers and search engines understand "
                "document language"
            ),
        )
    ]
