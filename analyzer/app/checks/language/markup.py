"""
Language-specific heuristics for .html documents.

- document does not begin with <!DOCTYPE html>          → MEDIUM
- attribute value without quotes                        → LOW (per match)
- img/script/link/a with an empty src or href           → HIGH (per tag)
- open/close tag counts out of tolerance                → MEDIUM

The tag-count rule tolerates up to 5 more opening than closing tags so
that void elements (img, br, meta, ...) do not trip it.
"""

from __future__ import annotations

import re
from typing import List, Optional

from analyzer.app.config import AnalyzerConfig
from analyzer.app.checks.locate import SourceText
from analyzer.app.checks.language.common import lint_finding
from analyzer.app.schemas.findings import Finding, Severity

OPEN_TAG_SURPLUS_TOLERANCE = 5

_DOCTYPE = re.compile(r"^\s*<!DOCTYPE\s+html>", re.IGNORECASE)
_UNQUOTED_ATTRIBUTE = re.compile(r"<[^<>]+?\s[\w:-]+=[^\s\"'>][^<>\s]*")
_UNQUOTED_VALUE = re.compile(r"([\w:-]+=)([^\"'\s>]+)")
_EMPTY_RESOURCE = re.compile(
    r"<(?:img|script|link|a)\b[^<>]*?\b(?:src|href)\s*=\s*(?:\"\s*\"|'\s*'|(?=[\s>]))[^<>]*>",
    re.IGNORECASE,
)
_OPEN_TAG = re.compile(r"<[a-zA-Z][a-zA-Z0-9-]*(?:\s|>)")
_CLOSE_TAG = re.compile(r"</[a-zA-Z][a-zA-Z0-9-]*>")


def run_html_checks(
    content: str,
    filename: str,
    config: Optional[AnalyzerConfig] = None,
) -> List[Finding]:
    source = SourceText(content, filename)
    findings: List[Finding] = []

    if not _DOCTYPE.match(content):
        findings.append(
            lint_finding(
                source,
                index=0,
                title="MalformedDoctypeError",
                description="Document does not start with <!DOCTYPE html>.",
                code="<!DOCTYPE html>",
                suggestion="Add <!DOCTYPE html> at the top of the document.",
                rationale="Ensures standards mode and consistent rendering.",
            )
        )

    for match in _UNQUOTED_ATTRIBUTE.finditer(content):
        snippet = match.group(0)
        findings.append(
            lint_finding(
                source,
                index=match.start(),
                title="UnquotedAttributeError",
                description="Attribute value should be quoted.",
                severity=Severity.LOW,
                code=snippet,
                suggestion=_UNQUOTED_VALUE.sub(r'\1"\2"', snippet, count=1),
                rationale="Unquoted attributes can break HTML parsing.",
            )
        )

    for match in _EMPTY_RESOURCE.finditer(content):
        findings.append(
            lint_finding(
                source,
                index=match.start(),
                title="BrokenResourceLinkError",
                description="Resource tag with empty src/href.",
                severity=Severity.HIGH,
                code=match.group(0),
                suggestion="Provide a valid src/href value or remove the tag.",
                rationale="Empty resource links break functionality and lead to 404s.",
            )
        )

    open_tags = len(_OPEN_TAG.findall(content))
    close_tags = len(_CLOSE_TAG.findall(content))
    if open_tags < close_tags or open_tags > close_tags + OPEN_TAG_SURPLUS_TOLERANCE:
        findings.append(
            lint_finding(
                source,
                index=0,
                title="TagMismatchError / InvalidNestingError",
                description=(
                    "Possible mismatched or invalidly nested HTML tags "
                    f"({open_tags} opening vs {close_tags} closing)."
                ),
                code="Mismatched tags",
                suggestion="Validate HTML structure and nesting (use an HTML validator).",
                rationale=(
                    "Invalid nesting leads to rendering issues and "
                    "accessibility problems."
                ),
            )
        )

    return findings
