"""
Per-file rule dispatch.

Selects the rule families that apply to one file from its extension and
the option set, runs them in a fixed order, and concatenates their
findings:

    1. script typos, brace/parenthesis balance   (scripts, unconditional)
    2. accessibility                             (html jsx tsx, option)
    3. security                                  (all files, option)
    4. performance                               (all files, option)
    5. seo                                       (html, option)
    6. structure                                 (all files, option)
    7. language heuristics                       (per extension, unconditional)

Rules are pure and never raise for any input string. An exception
escaping a rule is a bug and propagates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, FrozenSet, List, Optional

from analyzer.app.cache.performance import PerformanceRegistry
from analyzer.app.config import AnalyzerConfig
from analyzer.app.checks.locate import file_extension
from analyzer.app.checks.language.markup import run_html_checks
from analyzer.app.checks.language.scripts import (
    run_javascript_checks,
    run_jsx_checks,
    run_tsx_checks,
    run_typescript_checks,
)
from analyzer.app.checks.language.stylesheets import (
    run_css_checks,
    run_less_checks,
    run_scss_checks,
)
from analyzer.app.checks.script.balance import run_balance_checks
from analyzer.app.checks.script.typos import run_typo_checks
from analyzer.app.checks.web.accessibility import run_accessibility_checks
from analyzer.app.checks.web.performance import run_performance_checks
from analyzer.app.checks.web.security import run_security_checks
from analyzer.app.checks.web.seo import run_seo_checks
from analyzer.app.checks.web.structure import run_structure_checks
from analyzer.app.schemas.analysis import ScanOptions
from analyzer.app.schemas.findings import Finding

logger = logging.getLogger(__name__)


# Rule family contract
RuleCheck = Callable[[str, str, Optional[AnalyzerConfig]], List[Finding]]

SCRIPT_EXTENSIONS: FrozenSet[str] = frozenset({"js", "jsx", "ts", "tsx"})
COMPONENT_EXTENSIONS: FrozenSet[str] = frozenset({"html", "jsx", "tsx"})
HTML_EXTENSIONS: FrozenSet[str] = frozenset({"html"})


@dataclass(frozen=True)
class RuleBinding:
    """
    One rule family and the conditions under which it runs.

    extensions=None means every file. option=None means the family is
    not governed by the option set.
    """

    name: str
    check: RuleCheck
    extensions: Optional[FrozenSet[str]] = None
    option: Optional[str] = None

    def applies(self, extension: str, options: ScanOptions) -> bool:
        if self.extensions is not None and extension not in self.extensions:
            return False
        if self.option is not None and not getattr(options, self.option):
            return False
        return True


RULES: List[RuleBinding] = [
    RuleBinding("typos", run_typo_checks, SCRIPT_EXTENSIONS),
    RuleBinding("balance", run_balance_checks, SCRIPT_EXTENSIONS),
    RuleBinding("accessibility", run_accessibility_checks, COMPONENT_EXTENSIONS, "check_accessibility"),
    RuleBinding("security", run_security_checks, None, "check_security"),
    RuleBinding("performance", run_performance_checks, None, "check_performance"),
    RuleBinding("seo", run_seo_checks, HTML_EXTENSIONS, "check_seo"),
    RuleBinding("structure", run_structure_checks, None, "check_structure"),
    RuleBinding("lang.js", run_javascript_checks, frozenset({"js"})),
    RuleBinding("lang.ts", run_typescript_checks, frozenset({"ts"})),
    RuleBinding("lang.jsx", run_jsx_checks, frozenset({"jsx"})),
    RuleBinding("lang.tsx", run_tsx_checks, frozenset({"tsx"})),
    RuleBinding("lang.html", run_html_checks, HTML_EXTENSIONS),
    RuleBinding("lang.css", run_css_checks, frozenset({"css"})),
    RuleBinding("lang.scss", run_scss_checks, frozenset({"scss"})),
    RuleBinding("lang.less", run_less_checks, frozenset({"less"})),
]


class FileAnalysis:
    """
    Runs the applicable rule families over one file's content.

    Stateless apart from the optional timing registry.
    """

    def __init__(
        self,
        config: AnalyzerConfig,
        metrics: Optional[PerformanceRegistry] = None,
        rules: Optional[List[RuleBinding]] = None,
    ) -> None:
        self._config = config
        self._metrics = metrics
        self._rules = rules if rules is not None else RULES

    def run(self, content: str, filename: str, options: ScanOptions) -> List[Finding]:
        extension = file_extension(filename)
        findings: List[Finding] = []

        for rule in self._rules:
            if not rule.applies(extension, options):
                continue

            if self._metrics is None:
                produced = rule.check(content, filename, self._config)
            else:
                with self._metrics.measure(f"rule:{rule.name}"):
                    produced = rule.check(content, filename, self._config)

            if produced:
                logger.debug(
                    "Rule %s produced %d finding(s) for %s",
                    rule.name,
                    len(produced),
                    filename,
                )
            findings.extend(produced)

        return findings
