"""
Case-sensitive API typo detection for script files (.js .jsx .ts .tsx).

A fixed dictionary of known misspellings of DOM/console/global APIs is
matched case-insensitively, as whole words or as method calls. Every
match is a CRITICAL finding: the misspelled name does not exist at
runtime and the script fails when the line executes.

The suggestion attached to each finding is the offending line with the
misspelled identifier replaced by the correct spelling.

A case-insensitive match whose text already equals the correct spelling
(e.g. ``document.getElementById(``) is not a typo and is skipped.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Pattern

from analyzer.app.config import AnalyzerConfig
from analyzer.app.checks.locate import SourceText
from analyzer.app.schemas.findings import (
    Finding,
    FindingCategory,
    Severity,
)


class TypoKind(str, Enum):
    CONSOLE = "console"
    GLOBAL = "global"
    DOCUMENT_METHOD = "document_method"
    MEMBER = "member"


@dataclass(frozen=True)
class TypoRule:
    typo: str
    correct: str
    kind: TypoKind
    pattern: Pattern[str]
    title: Optional[str] = None


def _word(typo: str) -> Pattern[str]:
    return re.compile(rf"\b(?P<name>{typo})\b", re.IGNORECASE)


def _document_call(typo: str) -> Pattern[str]:
    return re.compile(rf"\bdocument\.(?P<name>{typo})\s*\(", re.IGNORECASE)


def _member(typo: str, follower: str = r"\(") -> Pattern[str]:
    return re.compile(rf"\.(?P<name>{typo})\s*{follower}", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Typo dictionary (FROZEN)
# ---------------------------------------------------------------------------

TYPO_RULES: List[TypoRule] = [
    # console
    TypoRule("consoole", "console", TypoKind.CONSOLE, _word("consoole")),
    TypoRule("consol", "console", TypoKind.CONSOLE, _word("consol")),
    TypoRule("consloe", "console", TypoKind.CONSOLE, _word("consloe")),
    # globals
    TypoRule("documet", "document", TypoKind.GLOBAL, _word("documet")),
    TypoRule("windw", "window", TypoKind.GLOBAL, _word("windw")),
    TypoRule("localstorag", "localStorage", TypoKind.GLOBAL, _word("localstorag")),
    TypoRule("sessionstorag", "sessionStorage", TypoKind.GLOBAL, _word("sessionstorag")),
    TypoRule("navigatr", "navigator", TypoKind.GLOBAL, _word("navigatr")),
    # document methods
    TypoRule(
        "getelementbyusername",
        "getElementById",
        TypoKind.DOCUMENT_METHOD,
        _document_call("getelementbyusername"),
        title="Invalid method getelementByUserName",
    ),
    TypoRule(
        "getelementbyid",
        "getElementById",
        TypoKind.DOCUMENT_METHOD,
        _document_call("getelementbyid"),
        title="Case-sensitive: should be getElementById",
    ),
    TypoRule(
        "getelementbyclassname",
        "getElementsByClassName",
        TypoKind.DOCUMENT_METHOD,
        _document_call("getelementbyclassname"),
        title="Case-sensitive: should be getElementsByClassName",
    ),
    TypoRule(
        "getelementbytagname",
        "getElementsByTagName",
        TypoKind.DOCUMENT_METHOD,
        _document_call("getelementbytagname"),
        title="Case-sensitive: should be getElementsByTagName",
    ),
    TypoRule(
        "queryseletor",
        "querySelector",
        TypoKind.DOCUMENT_METHOD,
        _document_call("queryseletor"),
        title="Typo: should be querySelector",
    ),
    TypoRule(
        "queryseletorall",
        "querySelectorAll",
        TypoKind.DOCUMENT_METHOD,
        _document_call("queryseletorall"),
        title="Typo: should be querySelectorAll",
    ),
    # member access
    TypoRule("addeventlistner", "addEventListener", TypoKind.MEMBER, _member("addeventlistner")),
    TypoRule("removeeventlistner", "removeEventListener", TypoKind.MEMBER, _member("removeeventlistner")),
    TypoRule("getattribut", "getAttribute", TypoKind.MEMBER, _member("getattribut")),
    TypoRule("setattribut", "setAttribute", TypoKind.MEMBER, _member("setattribut")),
    TypoRule("innerhtml", "innerHTML", TypoKind.MEMBER, _member("innerhtml", "=")),
    TypoRule("textcontent", "textContent", TypoKind.MEMBER, _member("textcontent", "=")),
    TypoRule("classlist", "classList", TypoKind.MEMBER, _member("classlist", r"\.")),
    TypoRule("appendchild", "appendChild", TypoKind.MEMBER, _member("appendchild")),
    TypoRule("removechild", "removeChild", TypoKind.MEMBER, _member("removechild")),
    TypoRule("createelement", "createElement", TypoKind.MEMBER, _member("createelement")),
]


def run_typo_checks(
    content: str,
    filename: str,
    config: Optional[AnalyzerConfig] = None,
) -> List[Finding]:
    source = SourceText(content, filename)
    findings: List[Finding] = []

    for rule in TYPO_RULES:
        for match in rule.pattern.finditer(content):
            misspelled = match.group("name")
            if misspelled == rule.correct:
                continue

            line_number = source.line_number(match.start("name"))
            line = source.line_at(line_number)

            findings.append(
                Finding(
                    title=_title(rule, misspelled),
                    description=_description(rule, misspelled),
                    category=FindingCategory.STRUCTURE,
                    severity=Severity.CRITICAL,
                    file=filename,
                    line=line_number,
                    code=line.strip(),
                    code_context=source.context(line_number),
                    suggestion=correct_line(line, rule),
                    rationale=_rationale(rule),
                )
            )

    return findings


def correct_line(line: str, rule: TypoRule) -> str:
    """
    Return ``line`` with every misspelling matched by ``rule`` corrected.
    """

    def _replace(match: "re.Match[str]") -> str:
        text = match.group(0)
        if match.group("name") == rule.correct:
            return text
        start = match.start("name") - match.start()
        end = match.end("name") - match.start()
        return text[:start] + rule.correct + text[end:]

    return rule.pattern.sub(_replace, line)


# ---------------------------------------------------------------------------
# Presentation per kind
# ---------------------------------------------------------------------------


def _title(rule: TypoRule, misspelled: str) -> str:
    if rule.title is not None:
        return rule.title
    if rule.kind is TypoKind.CONSOLE:
        return f'Typo in console: "{rule.typo}"'
    if rule.kind is TypoKind.GLOBAL:
        return f'Typo in variable name: "{misspelled}"'
    return f'Typo in method name: "{rule.correct}"'


def _description(rule: TypoRule, misspelled: str) -> str:
    if rule.kind is TypoKind.CONSOLE:
        return f'Found "{misspelled}" - did you mean "{rule.correct}"?'
    if rule.kind is TypoKind.GLOBAL:
        return f'Did you mean "{rule.correct}"?'
    if rule.kind is TypoKind.DOCUMENT_METHOD:
        return "Found invalid method call. JavaScript is case-sensitive."
    return "JavaScript is case-sensitive. Found incorrect casing."


def _rationale(rule: TypoRule) -> str:
    if rule.kind is TypoKind.CONSOLE:
        return "This will cause a runtime error. 'console' is the correct spelling."
    if rule.kind is TypoKind.GLOBAL:
        return "This will cause a ReferenceError at runtime."
    if rule.kind is TypoKind.DOCUMENT_METHOD:
        return (
            "This will cause a runtime error. "
            "JavaScript method names are case-sensitive."
        )
    return (
        f'This will cause a runtime error. "{rule.correct}" '
        "is the correct method name."
    )
