"""
Language-specific heuristics for stylesheets.

.css   declarations missing a trailing semicolon (LOW, capped per file),
       '/*' without '*/' (HIGH), well-known property misspellings (MEDIUM)
.scss  $variables used but never defined (HIGH), @include of a mixin
       with no @mixin definition (HIGH)
.less  @variables used but never defined (HIGH), .mixin() calls with no
       definition (HIGH)

Definitions are looked up in the same file only; imports are not
followed. Each distinct undefined name is reported once.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Set

from analyzer.app.config import AnalyzerConfig
from analyzer.app.checks.locate import SourceText
from analyzer.app.checks.language.common import lint_finding
from analyzer.app.schemas.findings import Finding, Severity

CSS_PROPERTY_TYPOS: Dict[str, str] = {
    "bakcground": "background",
    "widht": "width",
    "heigth": "height",
    "margn": "margin",
    "paddng": "padding",
}

# CSS at-rules share the @name syntax with LESS variables
_CSS_AT_RULES = (
    "media", "import", "keyframes", "font-face", "charset",
    "supports", "page", "plugin", "namespace", "document",
    "layer", "container", "font-feature-values", "font-palette-values",
    "counter-style", "property", "viewport", "scope", "starting-style",
    "color-profile",
    # Feature blocks nested in @font-feature-values
    "swash", "stylistic", "styleset", "character-variant", "ornaments",
    "annotation",
)
_VENDOR_PREFIXES = ("webkit", "moz", "ms", "o")

LESS_AT_RULES = frozenset(
    list(_CSS_AT_RULES)
    + [f"-{vendor}-{rule}" for vendor in _VENDOR_PREFIXES for rule in _CSS_AT_RULES]
    # Built-in variable holding all mixin arguments
    + ["arguments"]
)

_DECLARATION_WITHOUT_SEMICOLON = re.compile(r":\s*[^;{}]+$")

_SCSS_VARIABLE = re.compile(r"\$([A-Za-z0-9_-]+)")
_SCSS_DEFINITION = re.compile(r"\$([A-Za-z0-9_-]+)\s*:")
_SCSS_INCLUDE = re.compile(r"@include\s+([A-Za-z0-9_-]+)")
_SCSS_MIXIN = re.compile(r"@mixin\s+([A-Za-z0-9_-]+)")

_LESS_VARIABLE = re.compile(r"@([A-Za-z0-9_-]+)")
_LESS_DEFINITION = re.compile(r"@([A-Za-z0-9_-]+)\s*:")
_LESS_MIXIN_CALL = re.compile(r"\.([A-Za-z_-][A-Za-z0-9_-]*)\s*\([^)]*\)\s*;")
_LESS_MIXIN_DEFINITION = re.compile(r"\.([A-Za-z_-][A-Za-z0-9_-]*)\s*\([^)]*\)\s*(?:when\b[^{]*)?\{")


# ---------------------------------------------------------------------------
# .css
# ---------------------------------------------------------------------------


def run_css_checks(
    content: str,
    filename: str,
    config: Optional[AnalyzerConfig] = None,
) -> List[Finding]:
    config = config or AnalyzerConfig()
    source = SourceText(content, filename)
    findings: List[Finding] = []

    offset = 0
    reported = 0
    for raw_line in source.lines:
        line = raw_line.strip()
        if (
            reported < config.CSS_SEMICOLON_REPORT_LIMIT
            and _DECLARATION_WITHOUT_SEMICOLON.search(line)
        ):
            findings.append(
                lint_finding(
                    source,
                    index=offset,
                    title="MissingSemicolonError",
                    description=(
                        "CSS property declaration appears to be missing a "
                        "trailing semicolon."
                    ),
                    severity=Severity.LOW,
                    code=line,
                    suggestion=f"{line};",
                    rationale="Missing semicolons can break subsequent declarations.",
                )
            )
            reported += 1
        offset += len(raw_line) + 1

    comment_start = content.find("/*")
    if comment_start != -1 and "*/" not in content:
        findings.append(
            lint_finding(
                source,
                index=comment_start,
                title="UnclosedCommentError",
                description="Found '/*' without a matching '*/'.",
                severity=Severity.HIGH,
                code="/* ...",
                suggestion="Add '*/' to close the comment.",
                rationale=(
                    "Unclosed comments can comment out large parts of "
                    "the stylesheet."
                ),
            )
        )

    for typo, correct in CSS_PROPERTY_TYPOS.items():
        index = content.find(typo)
        if index == -1:
            continue
        findings.append(
            lint_finding(
                source,
                index=index,
                title="InvalidPropertyError",
                description=f'Found suspicious property name "{typo}".',
                code=typo,
                suggestion=f'Replace "{typo}" with "{correct}".',
                rationale="Misspelled properties are ignored by browsers.",
            )
        )

    return findings


# ---------------------------------------------------------------------------
# .scss
# ---------------------------------------------------------------------------


def run_scss_checks(
    content: str,
    filename: str,
    config: Optional[AnalyzerConfig] = None,
) -> List[Finding]:
    source = SourceText(content, filename)
    findings: List[Finding] = []

    defined = set(_SCSS_DEFINITION.findall(content))
    for name, index in _first_uses(_SCSS_VARIABLE, content, defined).items():
        findings.append(
            _undefined_variable(source, index, f"${name}", "SCSS")
        )

    mixins = set(_SCSS_MIXIN.findall(content))
    for name, index in _first_uses(_SCSS_INCLUDE, content, mixins).items():
        findings.append(
            lint_finding(
                source,
                index=index,
                title=f"MixinNotFoundError: {name}",
                description=(
                    f'@include references mixin "{name}" that is not '
                    "defined in this file."
                ),
                severity=Severity.HIGH,
                code=f"@include {name}",
                suggestion=f"Define @mixin {name} or import the file that contains it.",
                rationale="Missing mixins cause build failures.",
            )
        )

    return findings


# ---------------------------------------------------------------------------
# .less
# ---------------------------------------------------------------------------


def run_less_checks(
    content: str,
    filename: str,
    config: Optional[AnalyzerConfig] = None,
) -> List[Finding]:
    source = SourceText(content, filename)
    findings: List[Finding] = []

    defined = set(_LESS_DEFINITION.findall(content)) | LESS_AT_RULES
    for name, index in _first_uses(_LESS_VARIABLE, content, defined).items():
        findings.append(
            _undefined_variable(source, index, f"@{name}", "LESS")
        )

    mixins = set(_LESS_MIXIN_DEFINITION.findall(content))
    for name, index in _first_uses(_LESS_MIXIN_CALL, content, mixins).items():
        findings.append(
            lint_finding(
                source,
                index=index,
                title=f"MixinNotFoundError: .{name}()",
                description=(
                    f'Mixin ".{name}()" is referenced but not defined in '
                    "this file."
                ),
                severity=Severity.HIGH,
                code=f".{name}()",
                suggestion=f"Define .{name}() or import the file that contains it.",
                rationale="Missing mixins cause build failures.",
            )
        )

    return findings


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _first_uses(pattern: "re.Pattern[str]", content: str, known: Set[str]) -> Dict[str, int]:
    """Map each name matched by ``pattern`` but absent from ``known`` to its first offset."""
    uses: Dict[str, int] = {}
    for match in pattern.finditer(content):
        name = match.group(1)
        if name not in known:
            uses.setdefault(name, match.start())
    return uses


def _undefined_variable(source: SourceText, index: int, variable: str, dialect: str) -> Finding:
    return lint_finding(
        source,
        index=index,
        title=f"UndefinedVariableError: {variable}",
        description=(
            f'{dialect} variable "{variable}" is used but not defined in '
            "this file (or missing import)."
        ),
        severity=Severity.HIGH,
        code=variable,
        suggestion=f'Define "{variable}: value;" or import the file that defines it.',
        rationale="Undefined variables will cause compilation errors.",
    )
