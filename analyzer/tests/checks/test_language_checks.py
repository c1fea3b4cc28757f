import time

import pytest

from analyzer.app.config import AnalyzerConfig
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
from analyzer.app.schemas.findings import FindingCategory, Severity
from analyzer.tests.fixtures.source_factory import CLEAN_HTML


def _titles(findings):
    return [f.title for f in findings]


# ---------------------------------------------------------------------------
# JavaScript
# ---------------------------------------------------------------------------

def test_eval_call_is_high_lint_finding():
    findings = run_javascript_checks("const r = eval('1+1');", "app.js")

    assert _titles(findings) == ["Eval usage (possible EvalError/risk)"]
    assert findings[0].severity == Severity.HIGH.value
    assert findings[0].category == FindingCategory.LINT.value


def test_identifiers_containing_eval_are_not_calls():
    assert run_javascript_checks("obj.evaluate(x); retrieval(y);", "app.js") == []


def test_each_builtin_throw_is_reported():
    content = "throw new TypeError('a');\nthrow new TypeError('b');"
    findings = run_javascript_checks(content, "app.js")

    assert _titles(findings) == ["TypeError thrown", "TypeError thrown"]
    assert [f.line for f in findings] == [1, 2]


# ---------------------------------------------------------------------------
# TypeScript
# ---------------------------------------------------------------------------

def test_any_type_is_reported_once():
    findings = run_typescript_checks("let x: any = 1;\nlet y: any = 2;", "app.ts")

    assert _titles(findings) == ["Implicit/explicit 'any' usage"]


def test_words_containing_any_are_ignored():
    assert run_typescript_checks("const many = company;", "app.ts") == []


def test_exported_function_without_return_type():
    content = "export function add(a: number, b: number) {\n  return a + b;\n}"
    findings = run_typescript_checks(content, "app.ts")

    assert _titles(findings) == ["Missing type annotation"]


def test_exported_function_with_return_type_passes():
    content = "export function add(a: number, b: number): number {\n  return a + b;\n}"
    assert run_typescript_checks(content, "app.ts") == []


def test_decorator_without_compiler_opt_in():
    findings = run_typescript_checks("@Component({})\nclass A {}", "app.ts")

    assert _titles(findings) == ["Decorator usage (DecoratorError)"]
    assert findings[0].severity == Severity.LOW.value


def test_decorator_with_ts_ignore_passes():
    assert run_typescript_checks("// @ts-ignore\n@Component({})\nclass A {}", "app.ts") == []


def test_assignment_to_enum_member():
    findings = run_typescript_checks("enum Color { Red, Green }\nColor.Red = 2;", "app.ts")

    assert _titles(findings) == ["Enum assignment or misuse (EnumAssignmentError)"]
    assert findings[0].line == 2


def test_enum_comparison_is_not_assignment():
    content = "enum Color { Red, Green }\nif (Color.Red === c) {}"
    assert run_typescript_checks(content, "app.ts") == []


# ---------------------------------------------------------------------------
# JSX / TSX
# ---------------------------------------------------------------------------

def test_unclosed_jsx_tag_names_the_tag():
    findings = run_jsx_checks("const A = () => <div><span>x</span>;", "App.jsx")

    assert _titles(findings) == ["UnclosedTagError <div>"]
    assert findings[0].severity == Severity.HIGH.value


def test_self_closing_components_are_balanced():
    assert run_jsx_checks("const A = () => <div><Foo /></div>;", "App.jsx") == []


def test_hook_call_without_enclosing_function():
    findings = run_jsx_checks("const [a, setA] = useState(0);", "App.jsx")

    assert _titles(findings) == ["HookUsageError"]


def test_hook_call_inside_component_passes():
    content = (
        "function App() {\n"
        "  const [a] = useState(0);\n"
        "  return <div>{a}</div>;\n"
        "}"
    )
    assert run_jsx_checks(content, "App.jsx") == []


def test_custom_hook_definition_is_not_a_call():
    content = "function useCounter() {\n  return useState(0);\n}"
    assert run_jsx_checks(content, "App.jsx") == []


def test_hook_lookbehind_is_configurable():
    content = "function App() {" + " " * 50 + "useState(0); }"
    config = AnalyzerConfig(HOOK_LOOKBEHIND_CHARS=10)

    assert _titles(run_jsx_checks(content, "App.jsx", config)) == ["HookUsageError"]
    assert run_jsx_checks(content, "App.jsx") == []


def test_tsx_typed_any():
    findings = run_tsx_checks("const f = (p: any) => p;", "App.tsx")

    assert _titles(findings) == ["PropTypeMismatch / Implicit any (TSX)"]


def test_tsx_angle_bracket_mismatch_ignores_arrows():
    findings = run_tsx_checks("const x: Array<string = [];", "App.tsx")

    assert _titles(findings) == ["JSXTypeError / GenericTypeError"]
    assert run_tsx_checks("const f = (x: Array<string>) => x;", "App.tsx") == []


# ---------------------------------------------------------------------------
# HTML
# ---------------------------------------------------------------------------

def test_clean_document_has_no_markup_findings():
    assert run_html_checks(CLEAN_HTML, "index.html") == []


def test_missing_doctype_and_unquoted_attribute():
    findings = run_html_checks("<html><body><img src=a.png></body></html>", "index.html")

    assert _titles(findings) == ["MalformedDoctypeError", "UnquotedAttributeError"]
    unquoted = findings[1]
    assert unquoted.severity == Severity.LOW.value
    assert unquoted.code == "<img src=a.png"
    assert unquoted.suggestion == '<img src="a.png"'


def test_empty_href_is_broken_resource():
    findings = run_html_checks('<!DOCTYPE html>\n<a href="">x</a>', "index.html")

    assert _titles(findings) == ["BrokenResourceLinkError"]
    assert findings[0].line == 2
    assert findings[0].severity == Severity.HIGH.value


def test_more_closing_than_opening_tags():
    findings = run_html_checks("<!DOCTYPE html>\n</div></div>", "index.html")

    assert _titles(findings) == ["TagMismatchError / InvalidNestingError"]


@pytest.mark.parametrize("fragment", ["<a x ", "<img ", "<script src ", "< "])
def test_unterminated_tags_are_scanned_in_linear_time(fragment):
    content = fragment * 20000

    started = time.perf_counter()
    run_html_checks(content, "index.html")
    elapsed = time.perf_counter() - started

    assert elapsed < 2.0


def test_unterminated_anchors_only_report_document_level_problems():
    findings = run_html_checks("<a x " * 20000, "index.html")

    assert _titles(findings) == [
        "MalformedDoctypeError",
        "TagMismatchError / InvalidNestingError",
    ]


def test_unquoted_attribute_stops_at_next_tag():
    findings = run_html_checks(
        "<!DOCTYPE html>\n<p class\n<img src=a.png></p>", "index.html"
    )

    assert _titles(findings) == ["UnquotedAttributeError"]
    assert findings[0].code == "<img src=a.png"
    assert findings[0].line == 3


# ---------------------------------------------------------------------------
# CSS
# ---------------------------------------------------------------------------

def test_declaration_without_semicolon():
    findings = run_css_checks("a {\n  color: red\n}\n", "site.css")

    assert _titles(findings) == ["MissingSemicolonError"]
    assert findings[0].line == 2
    assert findings[0].code == "color: red"
    assert findings[0].suggestion == "color: red;"


def test_missing_semicolon_findings_are_capped():
    content = "\n".join(f"p{i}: x" for i in range(7))

    assert len(run_css_checks(content, "site.css")) == 5
    config = AnalyzerConfig(CSS_SEMICOLON_REPORT_LIMIT=2)
    assert len(run_css_checks(content, "site.css", config)) == 2


def test_unclosed_comment():
    findings = run_css_checks("/* note\na { color: red; }", "site.css")

    assert _titles(findings) == ["UnclosedCommentError"]


def test_misspelled_property():
    findings = run_css_checks("div { widht: 10px; }", "site.css")

    assert _titles(findings) == ["InvalidPropertyError"]
    assert findings[0].suggestion == 'Replace "widht" with "width".'


# ---------------------------------------------------------------------------
# SCSS / LESS
# ---------------------------------------------------------------------------

def test_scss_undefined_variable():
    content = "$primary: #333;\n.a { color: $primary; background: $accent; }"
    findings = run_scss_checks(content, "site.scss")

    assert _titles(findings) == ["UndefinedVariableError: $accent"]
    assert findings[0].line == 2


def test_scss_reports_each_undefined_name_once():
    findings = run_scss_checks(".a { margin: $a; padding: $a; color: $b; }", "site.scss")

    assert _titles(findings) == [
        "UndefinedVariableError: $a",
        "UndefinedVariableError: $b",
    ]


def test_scss_missing_mixin():
    assert _titles(run_scss_checks(".a { @include rounded; }", "site.scss")) == [
        "MixinNotFoundError: rounded"
    ]

    content = "@mixin rounded { border-radius: 4px; }\n.a { @include rounded; }"
    assert run_scss_checks(content, "site.scss") == []


def test_less_undefined_variable_ignores_at_rules():
    content = "@base: #f04;\n@media screen { .a { color: @base; border-color: @missing; } }"
    findings = run_less_checks(content, "site.less")

    assert _titles(findings) == ["UndefinedVariableError: @missing"]


@pytest.mark.parametrize(
    "content",
    [
        "@layer base, components;\n@layer base { .a { color: red; } }",
        "@container sidebar (min-width: 400px) { .a { width: 50%; } }",
        "@-webkit-keyframes spin { from { opacity: 0; } to { opacity: 1; } }",
        "@-moz-document url-prefix() { .a { color: red; } }",
        "@font-feature-values Font One { @styleset { nice-style: 12; } }",
        "@property --angle { syntax: '<angle>'; inherits: false; }",
        ".m(@a: 1px) { margin: @arguments; }",
    ],
)
def test_less_css_at_rules_are_not_variables(content):
    assert run_less_checks(content, "site.less") == []


def test_less_mixin_call_without_definition():
    assert _titles(run_less_checks(".a { .bordered(); }", "site.less")) == [
        "MixinNotFoundError: .bordered()"
    ]

    content = ".bordered() { border: 1px; }\n.a { .bordered(); }"
    assert run_less_checks(content, "site.less") == []
