"""
Delimiter balance checks for script files.

Counts raw ``{``/``}`` and ``(``/``)`` occurrences in the whole text.
Any inequality is one CRITICAL finding per delimiter pair: the file will
not parse. Delimiters inside strings and comments are counted too; this
is a lexical heuristic, not a tokenizer.
"""

from __future__ import annotations

from typing import List, Optional

from analyzer.app.config import AnalyzerConfig
from analyzer.app.schemas.findings import (
    Finding,
    FindingCategory,
    Severity,
)


def run_balance_checks(
    content: str,
    filename: str,
    config: Optional[AnalyzerConfig] = None,
) -> List[Finding]:
    findings: List[Finding] = []

    open_braces = content.count("{")
    close_braces = content.count("}")
    if open_braces != close_braces:
        findings.append(
            Finding(
                title="Unclosed braces",
                description=(
                    f"Found {open_braces} opening braces but "
                    f"{close_braces} closing braces"
                ),
                category=FindingCategory.STRUCTURE,
                severity=Severity.CRITICAL,
                file=filename,
                code="Check for missing { or }",
                suggestion="Ensure all opening braces have matching closing braces",
                rationale="This will cause a syntax error.",
            )
        )

    open_parens = content.count("(")
    close_parens = content.count(")")
    if open_parens != close_parens:
        findings.append(
            Finding(
                title="Unclosed parentheses",
                description=(
                    f"Found {open_parens} opening parentheses but "
                    f"{close_parens} closing parentheses"
                ),
                category=FindingCategory.STRUCTURE,
                severity=Severity.CRITICAL,
                file=filename,
                code="Check for missing ( or )",
                suggestion=(
                    "Ensure all opening parentheses have matching "
                    "closing parentheses"
                ),
                rationale="This will cause a syntax error.",
            )
        )

    return findings
