"""
Markup structure checks.

Rules:
- NESTING_DEPTH_THRESHOLD or more consecutive open tags with no closing
  tag in between                                     → LOW (once per file)
- id="..." values used more than once in the file    → HIGH (single
  finding listing every duplicated value)

Tags are recognized lexically, not parsed.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional

from analyzer.app.config import AnalyzerConfig
from analyzer.app.checks.locate import SourceText
from analyzer.app.schemas.findings import (
    Finding,
    FindingCategory,
    Severity,
)

logger = logging.getLogger(__name__)

_TAG = re.compile(r"<(/)?([A-Za-z][\w:-]*)\b[^<>]*?(/)?>")
_ID_ATTRIBUTE = re.compile(r'(?<![\w-])id="([^"]+)"')

# Elements that never take a closing tag
VOID_ELEMENTS = frozenset(
    {
        "area", "base", "br", "col", "embed", "hr", "img", "input",
        "link", "meta", "source", "track", "wbr",
    }
)


def run_structure_checks(
    content: str,
    filename: str,
    config: Optional[AnalyzerConfig] = None,
) -> List[Finding]:
    config = config or AnalyzerConfig()
    source = SourceText(content, filename)
    findings: List[Finding] = []

    findings.extend(_deep_nesting(source, config.NESTING_DEPTH_THRESHOLD))
    findings.extend(_duplicate_ids(source))

    return findings


def _deep_nesting(source: SourceText, threshold: int) -> List[Finding]:
    run = 0

    for match in _TAG.finditer(source.content):
        closing, name, self_closing = match.groups()

        if closing:
            run = 0
            continue

        if self_closing or name.lower() in VOID_ELEMENTS:
            continue

        run += 1
        if run < threshold:
            continue

        line = source.line_number(match.start())
        logger.debug(
            "Nesting threshold %d reached in %s at line %d",
            threshold,
            source.filename,
            line,
        )
        return [
            Finding(
                title="Deeply nested elements",
                description="Consider flattening your DOM structure",
                category=FindingCategory.STRUCTURE,
                severity=Severity.LOW,
                file=source.filename,
                line=line,
                code="Deeply nested HTML detected",
                code_context=source.context(line),
                suggestion="Refactor to reduce nesting depth",
                rationale="Improves DOM performance and maintainability",
            )
        ]

    return []


def _duplicate_ids(source: SourceText) -> List[Finding]:
    seen: Dict[str, int] = {}
    duplicates: Dict[str, int] = {}

    for match in _ID_ATTRIBUTE.finditer(source.content):
        value = match.group(1)
        if value in seen:
            duplicates.setdefault(value, match.start())
        else:
            seen[value] = match.start()

    if not duplicates:
        return []

    first_value, first_offset = next(iter(duplicates.items()))
    line = source.line_number(first_offset)

    return [
        Finding(
            title="Duplicate ID attributes",
            description=f"Found duplicate IDs: {', '.join(duplicates)}",
            category=FindingCategory.STRUCTURE,
            severity=Severity.HIGH,
            file=source.filename,
            line=line,
            code=f'id="{first_value}"',
            code_context=source.context(line),
            suggestion="Make IDs unique or use classes instead",
            rationale="IDs must be unique for CSS and JavaScript selectors",
        )
    ]
