"""
Language-specific heuristics for script files.

.js   eval() usage (HIGH), explicit throws of built-in errors (HIGH)
.ts   'any' usage (MEDIUM), exported functions without a return type
      annotation (MEDIUM), decorators without compiler opt-in (LOW),
      assignment to members of a local enum (HIGH)
.jsx  per-tag open/close imbalance (HIGH), hook calls without an
      enclosing function nearby (HIGH)
.tsx  ': any' usage (MEDIUM), angle-bracket count mismatch (HIGH)

The hook and angle-bracket rules are proximity/count heuristics and are
best-effort by nature.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional

from analyzer.app.config import AnalyzerConfig
from analyzer.app.checks.locate import SourceText
from analyzer.app.checks.language.common import lint_finding
from analyzer.app.schemas.findings import Finding, Severity

BUILTIN_ERRORS = (
    "SyntaxError",
    "ReferenceError",
    "TypeError",
    "RangeError",
    "EvalError",
    "URIError",
    "ImportError",
)

_EVAL_CALL = re.compile(r"(?<![\w$])eval\s*\(")
_ANY = re.compile(r"\bany\b")
_TYPED_ANY = re.compile(r":\s*any\b")
_UNANNOTATED_EXPORT = re.compile(
    r"export\s+(?:default\s+)?(?:async\s+)?function\s*\*?\s*[\w$]*\s*\([^)]*\)\s*\{"
    r"|export\s+const\s+[\w$]+\s*=\s*(?:async\s*)?\([^)]*\)\s*=>"
)
_DECORATOR = re.compile(r"^\s*@[A-Za-z_$][\w$]*", re.MULTILINE)
_ENUM_DECLARATION = re.compile(r"\benum\s+([A-Za-z_$][\w$]*)\s*\{")

_JSX_OPEN_TAG = re.compile(r"<([A-Za-z][\w.-]*)(?:\s[^<>]*?)?(/?)>")
_JSX_CLOSE_TAG = re.compile(r"</([A-Za-z][\w.-]*)\s*>")
_HOOK_CALL = re.compile(r"\buse[A-Z][\w$]*\s*\(")
_FUNCTION_SIGNATURE = re.compile(r"function\s+[\w$]+\s*\(|=>")
_FUNCTION_KEYWORD_BEFORE = re.compile(r"function\s*$")


# ---------------------------------------------------------------------------
# .js
# ---------------------------------------------------------------------------


def run_javascript_checks(
    content: str,
    filename: str,
    config: Optional[AnalyzerConfig] = None,
) -> List[Finding]:
    source = SourceText(content, filename)
    findings: List[Finding] = []

    match = _EVAL_CALL.search(content)
    if match:
        findings.append(
            lint_finding(
                source,
                index=match.start(),
                title="Eval usage (possible EvalError/risk)",
                description="Using eval() can cause security issues and runtime errors.",
                severity=Severity.HIGH,
                code="eval(...)",
                suggestion=(
                    "Avoid eval(); use JSON.parse, Function constructors "
                    "carefully, or safer parsing."
                ),
                rationale="Eval executes arbitrary code and is often unnecessary.",
            )
        )

    for name in BUILTIN_ERRORS:
        for match in re.finditer(rf"throw\s+new\s+{name}\b", content):
            findings.append(
                lint_finding(
                    source,
                    index=match.start(),
                    title=f"{name} thrown",
                    description=(
                        f"The code explicitly throws {name}. "
                        "Ensure this is intended and handled."
                    ),
                    severity=Severity.HIGH,
                    code=match.group(0),
                    suggestion=(
                        "Consider creating/applying a clear error-handling "
                        "strategy or use custom Error subclass if needed."
                    ),
                    rationale="Explicit throws should be intentional and caught by callers.",
                )
            )

    return findings


# ---------------------------------------------------------------------------
# .ts
# ---------------------------------------------------------------------------


def run_typescript_checks(
    content: str,
    filename: str,
    config: Optional[AnalyzerConfig] = None,
) -> List[Finding]:
    source = SourceText(content, filename)
    findings: List[Finding] = []

    match = _ANY.search(content)
    if match:
        findings.append(
            lint_finding(
                source,
                index=match.start(),
                title="Implicit/explicit 'any' usage",
                description=(
                    "Using 'any' defeats TypeScript's safety guarantees. "
                    "Consider providing a precise type."
                ),
                code="any",
                suggestion="Replace 'any' with a specific type or a generic type parameter.",
                rationale="Provides better type safety and tool support.",
            )
        )

    match = _UNANNOTATED_EXPORT.search(content)
    if match:
        findings.append(
            lint_finding(
                source,
                index=match.start(),
                title="Missing type annotation",
                description=(
                    "Exported functions or variables may lack explicit "
                    "type annotations."
                ),
                code=match.group(0),
                suggestion="Add explicit parameter and return type annotations.",
                rationale="Improves readability and reduces accidental type mismatches.",
            )
        )

    match = _DECORATOR.search(content)
    if (
        match
        and "experimentalDecorators" not in content
        and "@ts-ignore" not in content
    ):
        findings.append(
            lint_finding(
                source,
                index=match.start(),
                title="Decorator usage (DecoratorError)",
                description=(
                    "Decorators require TS compiler support "
                    "(experimentalDecorators)."
                ),
                severity=Severity.LOW,
                code=match.group(0).strip(),
                suggestion=(
                    'Enable "experimentalDecorators" in tsconfig.json or '
                    "remove unsupported decorators."
                ),
                rationale="Decorators are an opt-in compiler feature.",
            )
        )

    for enum_name in _ENUM_DECLARATION.findall(content):
        assignment = re.search(
            rf"\b{re.escape(enum_name)}\.[\w$]+\s*=(?![=>])",
            content,
        )
        if assignment is None:
            continue
        findings.append(
            lint_finding(
                source,
                index=assignment.start(),
                title="Enum assignment or misuse (EnumAssignmentError)",
                description="Assigning to enum members is likely a mistake.",
                severity=Severity.HIGH,
                code=assignment.group(0),
                suggestion="Use enum members as readonly values; don't assign to them.",
                rationale="Enums are meant to represent constant values.",
            )
        )

    return findings


# ---------------------------------------------------------------------------
# .jsx
# ---------------------------------------------------------------------------


def run_jsx_checks(
    content: str,
    filename: str,
    config: Optional[AnalyzerConfig] = None,
) -> List[Finding]:
    config = config or AnalyzerConfig()
    source = SourceText(content, filename)
    findings: List[Finding] = []

    findings.extend(_unclosed_jsx_tags(source))

    hook_finding = _hook_outside_component(source, config.HOOK_LOOKBEHIND_CHARS)
    if hook_finding is not None:
        findings.append(hook_finding)

    return findings


def _unclosed_jsx_tags(source: SourceText) -> List[Finding]:
    balance: Dict[str, int] = {}
    first_seen: Dict[str, int] = {}

    for match in _JSX_OPEN_TAG.finditer(source.content):
        tag, self_closing = match.groups()
        if self_closing:
            continue
        balance[tag] = balance.get(tag, 0) + 1
        first_seen.setdefault(tag, match.start())

    for match in _JSX_CLOSE_TAG.finditer(source.content):
        tag = match.group(1)
        balance[tag] = balance.get(tag, 0) - 1

    findings: List[Finding] = []
    for tag, surplus in balance.items():
        if surplus <= 0:
            continue
        findings.append(
            lint_finding(
                source,
                index=first_seen[tag],
                title=f"UnclosedTagError <{tag}>",
                description=f"Found {surplus} more opening <{tag}> than closing tags.",
                severity=Severity.HIGH,
                code=f"<{tag}> ...",
                suggestion=(
                    f"Ensure each <{tag}> has a matching </{tag}> or convert "
                    "to self-closing if appropriate."
                ),
                rationale="Unclosed tags break rendering and cause syntax errors in JSX.",
            )
        )

    return findings


def _hook_outside_component(source: SourceText, lookbehind: int) -> Optional[Finding]:
    for match in _HOOK_CALL.finditer(source.content):
        before = source.content[max(0, match.start() - lookbehind):match.start()]

        # Custom hook definitions are not calls
        if _FUNCTION_KEYWORD_BEFORE.search(before):
            continue

        if _FUNCTION_SIGNATURE.search(before):
            return None

        return lint_finding(
            source,
            index=match.start(),
            title="HookUsageError",
            description=(
                "Hook usage may be outside of a React function component "
                "(rules of hooks violation)."
            ),
            severity=Severity.HIGH,
            code="useXxx(...)",
            suggestion="Use hooks only inside React function components or custom hooks.",
            rationale="Hooks must follow the rules of hooks to avoid runtime errors.",
        )

    return None


# ---------------------------------------------------------------------------
# .tsx
# ---------------------------------------------------------------------------


def run_tsx_checks(
    content: str,
    filename: str,
    config: Optional[AnalyzerConfig] = None,
) -> List[Finding]:
    source = SourceText(content, filename)
    findings: List[Finding] = []

    match = _TYPED_ANY.search(content)
    if match:
        findings.append(
            lint_finding(
                source,
                index=match.start(),
                title="PropTypeMismatch / Implicit any (TSX)",
                description=(
                    "Found 'any' type usage in TSX. This can hide prop "
                    "type mismatches."
                ),
                code=": any",
                suggestion="Define explicit prop interfaces and use them for component props.",
                rationale="Stronger typing prevents runtime prop errors.",
            )
        )

    without_arrows = content.replace("=>", "")
    open_angles = without_arrows.count("<")
    close_angles = without_arrows.count(">")
    if open_angles != close_angles:
        findings.append(
            lint_finding(
                source,
                index=0,
                title="JSXTypeError / GenericTypeError",
                description=(
                    f"Angle bracket mismatch in TSX (found {open_angles} '<' "
                    f"vs {close_angles} '>')."
                ),
                severity=Severity.HIGH,
                code="Mismatched angle brackets",
                suggestion=(
                    "Check JSX and generic type syntax for unclosed tags "
                    "or generic brackets."
                ),
                rationale="Unmatched angle brackets will cause parsing/type errors.",
            )
        )

    return findings
