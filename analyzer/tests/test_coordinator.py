import pytest

from analyzer.app.cache.analysis_cache import AnalysisCache
from analyzer.app.cache.performance import PerformanceRegistry
from analyzer.app.config import AnalyzerConfig
from analyzer.app.coordinator.coordinator import AnalysisCoordinator, AnalysisError
from analyzer.app.coordinator.file_analysis import FileAnalysis, RuleBinding
from analyzer.app.coordinator.sources import (
    InMemorySourceFile,
    PathSourceFile,
    UploadSourceFile,
)
from analyzer.app.events import (
    AnalysisEvent,
    AnalysisEventType,
    MemoryQueueEventEmitter,
)
from analyzer.app.schemas.analysis import ScanOptions
from analyzer.app.schemas.findings import Finding, FindingCategory, Severity
from analyzer.tests.fixtures.source_factory import (
    CLEAN_HTML,
    CONSOLE_TYPO_JS,
    MISSING_ALT_HTML,
    UNCLOSED_BRACE_JS,
    FailingSourceFile,
)

pytestmark = pytest.mark.anyio


class TestListEmitter:
    def __init__(self):
        self.events = []

    async def emit(self, event) -> None:
        self.events.append(event)

    @property
    def types(self):
        return [e.event_type for e in self.events]


class CountingCheck:
    def __init__(self):
        self.calls = 0

    def __call__(self, content, filename, config=None):
        self.calls += 1
        return [
            Finding(
                title="Counted",
                description="Produced by the counting rule",
                category=FindingCategory.STRUCTURE,
                severity=Severity.LOW,
                file=filename,
            )
        ]


def _coordinator(**config_overrides):
    return AnalysisCoordinator(AnalyzerConfig(**config_overrides))


# ---------------------------------------------------------------------------
# Basic runs
# ---------------------------------------------------------------------------

async def test_empty_batch_scores_100_without_progress():
    progress = []

    result = await _coordinator().analyze([], on_progress=progress.append)

    assert result.issues == []
    assert result.score == 100
    assert result.files_analyzed == 0
    assert progress == []


async def test_console_typo_scenario():
    progress = []

    result = await _coordinator().analyze(
        [InMemorySourceFile("app.js", CONSOLE_TYPO_JS)],
        on_progress=progress.append,
    )

    assert len(result.issues) == 1
    issue = result.issues[0]
    assert issue.severity == Severity.CRITICAL.value
    assert "consoole" in issue.title
    assert issue.suggestion == "console.log('x')"
    assert result.score == 90
    assert progress == [100]


async def test_unclosed_brace_scenario():
    result = await _coordinator().analyze(
        [InMemorySourceFile("app.js", UNCLOSED_BRACE_JS)]
    )

    assert [i.title for i in result.issues] == ["Unclosed braces"]
    assert result.score == 90


async def test_missing_alt_scenario():
    result = await _coordinator().analyze(
        [InMemorySourceFile("index.html", MISSING_ALT_HTML)],
        ScanOptions(check_accessibility=True),
    )

    accessibility = [
        i for i in result.issues
        if i.category == FindingCategory.ACCESSIBILITY.value
    ]
    assert [i.title for i in accessibility] == ["Missing alt attribute"]
    assert accessibility[0].severity == Severity.HIGH.value
    assert 'alt="Descriptive text for image"' in accessibility[0].suggestion


async def test_clean_document_scores_100():
    result = await _coordinator().analyze([InMemorySourceFile("index.html", CLEAN_HTML)])

    assert result.issues == []
    assert result.score == 100


async def test_findings_keep_file_input_order():
    result = await _coordinator().analyze(
        [
            InMemorySourceFile("b.js", UNCLOSED_BRACE_JS),
            InMemorySourceFile("a.js", CONSOLE_TYPO_JS),
        ]
    )

    assert [i.file for i in result.issues] == ["b.js", "a.js"]


async def test_disabled_options_skip_rule_families():
    result = await _coordinator().analyze(
        [InMemorySourceFile("index.html", "<html></html>")],
        ScanOptions(check_seo=False, check_accessibility=False),
    )

    categories = {i.category for i in result.issues}
    assert FindingCategory.SEO.value not in categories
    assert FindingCategory.ACCESSIBILITY.value not in categories


async def test_language_findings_are_reported_as_structure():
    result = await _coordinator().analyze([InMemorySourceFile("app.js", "eval('x')")])

    assert [(i.title, i.category) for i in result.issues] == [
        ("Eval usage (possible EvalError/risk)", FindingCategory.STRUCTURE.value)
    ]


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------

async def test_progress_is_rounded_and_ends_at_100():
    progress = []
    files = [InMemorySourceFile(f"f{i}.css", "a { color: red; }") for i in range(3)]

    await _coordinator().analyze(files, on_progress=progress.append)

    assert progress == [33, 67, 100]


async def test_async_progress_callback_is_awaited():
    progress = []

    async def on_progress(percent):
        progress.append(percent)

    files = [InMemorySourceFile(f"f{i}.css", "") for i in range(2)]
    await _coordinator().analyze(files, on_progress=on_progress)

    assert progress == [50, 100]


# ---------------------------------------------------------------------------
# File error policy
# ---------------------------------------------------------------------------

async def test_skip_policy_records_failure_and_continues():
    emitter = TestListEmitter()
    progress = []
    files = [
        InMemorySourceFile("a.js", CONSOLE_TYPO_JS),
        FailingSourceFile("broken.js", OSError("disk gone")),
        UploadSourceFile("latin1.js", b"\xff\xfe"),
        InMemorySourceFile("c.js", UNCLOSED_BRACE_JS),
    ]

    result = await _coordinator().analyze(
        files,
        on_progress=progress.append,
        emitter=emitter,
    )

    assert [(f.file, f.error_type) for f in result.failed_files] == [
        ("broken.js", "OSError"),
        ("latin1.js", "UnicodeDecodeError"),
    ]
    assert result.files_analyzed == 2
    assert [i.file for i in result.issues] == ["a.js", "c.js"]
    assert progress == [25, 50, 75, 100]
    assert emitter.types.count(AnalysisEventType.FILE_FAILED) == 2
    assert emitter.types[-1] == AnalysisEventType.ANALYSIS_COMPLETED


async def test_abort_policy_fails_the_run():
    emitter = TestListEmitter()
    coordinator = _coordinator(FILE_ERROR_POLICY="abort")

    with pytest.raises(AnalysisError) as exc_info:
        await coordinator.analyze(
            [
                InMemorySourceFile("a.js", CONSOLE_TYPO_JS),
                FailingSourceFile("broken.js", OSError("disk gone")),
            ],
            emitter=emitter,
        )

    assert exc_info.value.file == "broken.js"
    assert isinstance(exc_info.value.cause, OSError)

    failed = emitter.events[-1]
    assert failed.event_type == AnalysisEventType.ANALYSIS_FAILED
    assert failed.details["file"] == "broken.js"
    assert failed.details["exception_type"] == "AnalysisError"


async def test_unexpected_errors_propagate_under_skip_policy():
    emitter = TestListEmitter()

    with pytest.raises(RuntimeError):
        await _coordinator().analyze(
            [FailingSourceFile("bug.js", RuntimeError("bug"))],
            emitter=emitter,
        )

    assert emitter.types[-1] == AnalysisEventType.ANALYSIS_FAILED


# ---------------------------------------------------------------------------
# Files on disk
# ---------------------------------------------------------------------------

async def test_path_source_is_read_through_the_coordinator(tmp_path):
    path = tmp_path / "app.js"
    path.write_text(CONSOLE_TYPO_JS, encoding="utf-8")
    source = PathSourceFile(path)

    result = await _coordinator().analyze([source])

    assert source.name == "app.js"
    assert result.score == 90
    assert [i.file for i in result.issues] == ["app.js"]


async def test_undecodable_file_on_disk_is_skipped(tmp_path):
    latin1 = tmp_path / "latin1.js"
    latin1.write_bytes(b"\xff\xfeconsoole.log(1)")
    good = tmp_path / "app.js"
    good.write_text(CONSOLE_TYPO_JS, encoding="utf-8")

    result = await _coordinator().analyze(
        [PathSourceFile(latin1), PathSourceFile(str(good))]
    )

    assert [(f.file, f.error_type) for f in result.failed_files] == [
        ("latin1.js", "UnicodeDecodeError"),
    ]
    assert result.files_analyzed == 1
    assert [i.file for i in result.issues] == ["app.js"]


async def test_missing_file_on_disk_is_skipped(tmp_path):
    result = await _coordinator().analyze([PathSourceFile(tmp_path / "gone.css")])

    assert [(f.file, f.error_type) for f in result.failed_files] == [
        ("gone.css", "FileNotFoundError"),
    ]
    assert result.score == 100


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

async def test_event_sequence_for_one_file():
    emitter = TestListEmitter()

    await _coordinator().analyze(
        [InMemorySourceFile("app.js", CONSOLE_TYPO_JS)],
        analysis_id="analysis-001",
        emitter=emitter,
    )

    assert emitter.types == [
        AnalysisEventType.ANALYSIS_STARTED,
        AnalysisEventType.FILE_STARTED,
        AnalysisEventType.FILE_COMPLETED,
        AnalysisEventType.PROGRESS,
        AnalysisEventType.ANALYSIS_COMPLETED,
    ]
    assert all(e.analysis_id == "analysis-001" for e in emitter.events)
    assert emitter.events[2].details == {"file": "app.js", "findings_count": 1}
    assert emitter.events[-1].details == {
        "score": 90,
        "issues_count": 1,
        "failed_files": 0,
    }


async def test_memory_emitter_closes_on_completion():
    emitter = MemoryQueueEventEmitter()

    await _coordinator().analyze(
        [InMemorySourceFile("app.js", CONSOLE_TYPO_JS)],
        emitter=emitter,
    )

    await emitter.emit(
        AnalysisEvent(analysis_id="late", event_type=AnalysisEventType.PROGRESS)
    )
    events = await emitter.drain()
    assert events[-1].event_type == AnalysisEventType.ANALYSIS_COMPLETED


# ---------------------------------------------------------------------------
# Cache and timing
# ---------------------------------------------------------------------------

async def test_cache_reuses_findings_for_identical_input():
    config = AnalyzerConfig()
    check = CountingCheck()
    cache = AnalysisCache()
    coordinator = AnalysisCoordinator(
        config,
        cache=cache,
        file_analysis=FileAnalysis(config, rules=[RuleBinding("counting", check)]),
    )
    files = [InMemorySourceFile("app.js", "x")]

    first = await coordinator.analyze(files)
    second = await coordinator.analyze(files)

    assert check.calls == 1
    assert second.issues == first.issues
    assert cache.stats().hits == 1

    await coordinator.analyze(files, ScanOptions(check_seo=False))
    assert check.calls == 2


async def test_long_lived_coordinator_does_not_accumulate_expired_entries():
    now = [0.0]
    cache = AnalysisCache(ttl_seconds=1, clock=lambda: now[0])
    coordinator = AnalysisCoordinator(AnalyzerConfig(), cache=cache)

    for index in range(50):
        await coordinator.analyze([InMemorySourceFile("app.js", f"var a{index};")])
        now[0] += 10

    assert len(cache._entries) == 1


async def test_from_config_bounds_cache_size():
    coordinator = AnalysisCoordinator.from_config(
        AnalyzerConfig(ANALYSIS_CACHE_MAX_ENTRIES=3)
    )

    for index in range(10):
        await coordinator.analyze([InMemorySourceFile("app.js", f"var a{index};")])

    assert coordinator.cache.stats().size == 3


async def test_from_config_wires_cache_and_timing():
    coordinator = AnalysisCoordinator.from_config(AnalyzerConfig())

    await coordinator.analyze([InMemorySourceFile("app.js", CONSOLE_TYPO_JS)])

    assert coordinator.cache is not None
    assert coordinator.metrics.metrics("rule:typos").call_count == 1

    without_cache = AnalysisCoordinator.from_config(
        AnalyzerConfig(ENABLE_ANALYSIS_CACHE=False)
    )
    assert without_cache.cache is None


async def test_rule_timings_are_recorded_per_family():
    config = AnalyzerConfig()
    metrics = PerformanceRegistry()
    coordinator = AnalysisCoordinator(config, metrics=metrics)

    await coordinator.analyze([InMemorySourceFile("site.css", "a { color: red; }")])

    labels = {m.label for m in metrics.all_metrics()}
    assert "rule:lang.css" in labels
    assert "rule:seo" not in labels


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------

async def test_run_report_composes_and_emits_report():
    emitter = TestListEmitter()
    coordinator = _coordinator()
    files = [
        InMemorySourceFile("app.js", CONSOLE_TYPO_JS),
        InMemorySourceFile("index.html", MISSING_ALT_HTML),
    ]

    result = await coordinator.analyze(files)
    report = await coordinator.run_report(files, emitter=emitter)

    assert report.score == result.score
    assert len(report.suggestions) == len(report.issues)
    assert [s.issue_id for s in report.suggestions] == [i.id for i in report.issues]
    assert report.issues[0].severity == Severity.CRITICAL.value
    assert report.improvement.before_score == report.score
    assert report.stats.total == len(report.issues)

    completed = emitter.events[-1]
    assert completed.event_type == AnalysisEventType.ANALYSIS_COMPLETED
    assert completed.details["report"]["analysis_id"] == report.analysis_id
