"""
Analysis coordinator.

IMPORTANT:
The coordinator does not inspect file content itself. Rule selection
belongs to FileAnalysis; scoring belongs to the scoring module.

Its sole responsibilities are:
- reading each file, in input order
- enforcing the per-file error policy
- reporting progress and emitting observational events
- consulting the injected analysis cache
- normalizing transitional categories
- constructing the final AnalysisResult (and, on request, the QualityReport)
"""

from __future__ import annotations

import inspect
import logging
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Optional,
    Sequence,
    Tuple,
    Union,
)
from uuid import uuid4

from analyzer.app.cache.analysis_cache import AnalysisCache
from analyzer.app.cache.performance import PerformanceRegistry
from analyzer.app.config import AnalyzerConfig
from analyzer.app.coordinator.file_analysis import FileAnalysis
from analyzer.app.coordinator.report import build_quality_report
from analyzer.app.coordinator.sources import SourceFile
from analyzer.app.schemas.analysis import (
    AnalysisResult,
    FileAnalysisError,
    ScanOptions,
)
from analyzer.app.schemas.findings import Finding, FindingCategory
from analyzer.app.schemas.report import QualityReport
from analyzer.app.scoring.quality import calculate_quality_score, round_half_up

# Events (observational only)
from analyzer.app.events import (
    AnalysisEvent,
    AnalysisEventType,
    AnalysisEventEmitter,
    NullEventEmitter,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], Union[None, Awaitable[None]]]

# Errors raised while reading a file; anything else is a bug
INPUT_ERRORS = (OSError, UnicodeDecodeError)


class AnalysisError(Exception):
    """
    A run could not complete.

    Raised under the 'abort' file error policy, carrying the name of the
    file that failed and the underlying cause.
    """

    def __init__(self, file: str, cause: BaseException) -> None:
        super().__init__(f"Failed to analyze {file}: {cause}")
        self.file = file
        self.cause = cause


class AnalysisCoordinator:
    """
    Batch analysis coordinator.

    For each file, in input order:
        1. read content (the only suspension point)
        2. look up / run the applicable rule families
        3. report progress

    Then score the combined findings.
    """

    def __init__(
        self,
        config: AnalyzerConfig,
        cache: Optional[AnalysisCache] = None,
        metrics: Optional[PerformanceRegistry] = None,
        file_analysis: Optional[FileAnalysis] = None,
    ) -> None:
        self._config = config
        self._cache = cache
        self._metrics = metrics
        self._file_analysis = (
            file_analysis
            if file_analysis is not None
            else FileAnalysis(config=config, metrics=metrics)
        )

    # ------------------------------------------------------------------
    # Integration constructor (composition root)
    # ------------------------------------------------------------------

    @classmethod
    def from_config(cls, config: AnalyzerConfig) -> "AnalysisCoordinator":
        cache = (
            AnalysisCache(
                ttl_seconds=config.ANALYSIS_CACHE_TTL_SECONDS,
                max_entries=config.ANALYSIS_CACHE_MAX_ENTRIES,
            )
            if config.ENABLE_ANALYSIS_CACHE
            else None
        )
        return cls(
            config=config,
            cache=cache,
            metrics=PerformanceRegistry(),
        )

    @property
    def cache(self) -> Optional[AnalysisCache]:
        return self._cache

    @property
    def metrics(self) -> Optional[PerformanceRegistry]:
        return self._metrics

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def analyze(
        self,
        files: Sequence[SourceFile],
        options: Optional[ScanOptions] = None,
        on_progress: Optional[ProgressCallback] = None,
        *,
        analysis_id: Optional[str] = None,
        emitter: Optional[AnalysisEventEmitter] = None,
    ) -> AnalysisResult:
        """
        Analyze a batch of files and score the combined findings.

        Progress is reported after every file as
        round(processed / total * 100) and ends at exactly 100. An empty
        batch reports no progress and scores 100.
        """
        result, _ = await self._run(
            files,
            options,
            on_progress,
            analysis_id=analysis_id,
            emitter=emitter,
            with_report=False,
        )
        return result

    async def run_report(
        self,
        files: Sequence[SourceFile],
        options: Optional[ScanOptions] = None,
        on_progress: Optional[ProgressCallback] = None,
        *,
        analysis_id: Optional[str] = None,
        emitter: Optional[AnalysisEventEmitter] = None,
    ) -> QualityReport:
        """
        Analyze a batch and compose the full quality report.

        The terminal ANALYSIS_COMPLETED event carries the same report.
        """
        _, report = await self._run(
            files,
            options,
            on_progress,
            analysis_id=analysis_id,
            emitter=emitter,
            with_report=True,
        )
        if report is None:
            raise RuntimeError("Invariant violation: report requested but not built")
        return report

    async def _run(
        self,
        files: Sequence[SourceFile],
        options: Optional[ScanOptions],
        on_progress: Optional[ProgressCallback],
        *,
        analysis_id: Optional[str],
        emitter: Optional[AnalysisEventEmitter],
        with_report: bool,
    ) -> Tuple[AnalysisResult, Optional[QualityReport]]:
        options = options or ScanOptions()
        analysis_id = analysis_id or str(uuid4())
        emitter = emitter or NullEventEmitter()

        await emitter.emit(
            AnalysisEvent(
                analysis_id=analysis_id,
                event_type=AnalysisEventType.ANALYSIS_STARTED,
                details={
                    "files_count": len(files),
                    "options": options.model_dump(),
                },
            )
        )

        try:
            issues: List[Finding] = []
            failed: List[FileAnalysisError] = []
            total = len(files)

            for position, source in enumerate(files, start=1):
                await emitter.emit(
                    AnalysisEvent(
                        analysis_id=analysis_id,
                        event_type=AnalysisEventType.FILE_STARTED,
                        details={"file": source.name},
                    )
                )

                try:
                    content = await source.read_text()
                except INPUT_ERRORS as exc:
                    if self._config.FILE_ERROR_POLICY == "abort":
                        raise AnalysisError(source.name, exc) from exc

                    logger.warning(
                        "Skipping unreadable file %s: %s",
                        source.name,
                        exc,
                    )
                    failure = FileAnalysisError(
                        file=source.name,
                        error_type=type(exc).__name__,
                        message=str(exc),
                    )
                    failed.append(failure)

                    await emitter.emit(
                        AnalysisEvent(
                            analysis_id=analysis_id,
                            event_type=AnalysisEventType.FILE_FAILED,
                            details=failure.model_dump(),
                        )
                    )
                else:
                    file_findings = self._analyze_file(content, source.name, options)
                    issues.extend(file_findings)

                    await emitter.emit(
                        AnalysisEvent(
                            analysis_id=analysis_id,
                            event_type=AnalysisEventType.FILE_COMPLETED,
                            details={
                                "file": source.name,
                                "findings_count": len(file_findings),
                            },
                        )
                    )

                percent = round_half_up(position / total * 100)
                await self._report_progress(on_progress, percent)
                await emitter.emit(
                    AnalysisEvent(
                        analysis_id=analysis_id,
                        event_type=AnalysisEventType.PROGRESS,
                        details={"percent": percent},
                    )
                )

            result = AnalysisResult(
                analysis_id=analysis_id,
                issues=issues,
                score=calculate_quality_score(issues),
                files_analyzed=total - len(failed),
                failed_files=failed,
            )

            logger.info(
                "Analysis %s completed: %d file(s), %d finding(s), score %d",
                analysis_id,
                result.files_analyzed,
                len(result.issues),
                result.score,
            )

            details: Dict[str, Any] = {
                "score": result.score,
                "issues_count": len(result.issues),
                "failed_files": len(result.failed_files),
            }

            report = None
            if with_report:
                report = build_quality_report(result)
                details["report"] = report.model_dump(mode="json")

            await emitter.emit(
                AnalysisEvent(
                    analysis_id=analysis_id,
                    event_type=AnalysisEventType.ANALYSIS_COMPLETED,
                    details=details,
                )
            )

            return result, report

        except Exception as exc:
            await emitter.emit(
                AnalysisEvent(
                    analysis_id=analysis_id,
                    event_type=AnalysisEventType.ANALYSIS_FAILED,
                    details={
                        "error": str(exc),
                        "exception_type": type(exc).__name__,
                        "file": getattr(exc, "file", None),
                    },
                )
            )
            raise

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _analyze_file(self, content: str, filename: str, options: ScanOptions) -> List[Finding]:
        key = None
        if self._cache is not None:
            key = AnalysisCache.key_for(content, filename, options)
            cached = self._cache.get(key)
            if cached is not None:
                return cached

        findings = [
            self._normalize_category(f)
            for f in self._file_analysis.run(content, filename, options)
        ]

        if key is not None:
            self._cache.set(key, findings)

        return findings

    @staticmethod
    def _normalize_category(finding: Finding) -> Finding:
        """
        Map the transitional LINT category onto STRUCTURE.

        model_copy(update=...) is used because Finding is frozen.
        """
        if finding.category == FindingCategory.LINT.value:
            return finding.model_copy(
                update={"category": FindingCategory.STRUCTURE.value}
            )
        return finding

    @staticmethod
    async def _report_progress(callback: Optional[ProgressCallback], percent: int) -> None:
        if callback is None:
            return
        outcome = callback(percent)
        if inspect.isawaitable(outcome):
            await outcome
