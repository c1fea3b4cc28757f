"""
Runtime configuration for the Analyzer service.

This module centralizes environment-driven configuration: cache behavior,
the per-file error policy, upload limits, and the thresholds used by
the heuristic rule families.

Configuration is read-only at runtime. Rule thresholds are part of the
detection contract: changing them changes which findings are produced.
"""

from __future__ import annotations

import os

from pydantic import BaseModel, Field, field_validator


class AnalyzerConfig(BaseModel):
    """
    Runtime configuration for the Analyzer service.

    Configuration is environment-driven and immutable once loaded.
    """

    # ------------------------------------------------------------------
    # Caching
    # ------------------------------------------------------------------

    ENABLE_ANALYSIS_CACHE: bool = Field(
        True,
        description="Cache per-file findings keyed by content digest",
    )

    ANALYSIS_CACHE_TTL_SECONDS: float = Field(
        30 * 60,
        description="Lifetime of a cached per-file analysis",
    )

    ANALYSIS_CACHE_MAX_ENTRIES: int = Field(
        1024,
        description="Maximum number of live cache entries; the oldest is evicted first",
    )

    # ------------------------------------------------------------------
    # Error policy
    # ------------------------------------------------------------------

    FILE_ERROR_POLICY: str = Field(
        "skip",
        description=(
            "Behavior when a file cannot be read: 'skip' records the error "
            "and continues with the batch, 'abort' fails the whole run."
        ),
    )

    # ------------------------------------------------------------------
    # Safety and resource limits (HTTP surface)
    # ------------------------------------------------------------------

    MAX_FILE_SIZE_MB: int = Field(
        5,
        description="Maximum allowed size of one uploaded file in megabytes",
    )

    MAX_FILES_PER_SCAN: int = Field(
        200,
        description="Maximum number of files accepted in one request",
    )

    # ------------------------------------------------------------------
    # Rule thresholds
    # ------------------------------------------------------------------

    LARGE_FILE_THRESHOLD_CHARS: int = Field(
        100_000,
        description="Content length above which image-bearing files are flagged",
    )

    LAZY_LOADING_IMAGE_THRESHOLD: int = Field(
        3,
        description="Number of <img> tags tolerated without lazy loading",
    )

    NESTING_DEPTH_THRESHOLD: int = Field(
        5,
        description="Consecutive unterminated open tags flagged as deep nesting",
    )

    CSS_SEMICOLON_REPORT_LIMIT: int = Field(
        5,
        description="Maximum number of missing-semicolon findings per file",
    )

    HOOK_LOOKBEHIND_CHARS: int = Field(
        200,
        description="Window searched for an enclosing function before a hook call",
    )

    # ------------------------------------------------------------------
    # Validators (Pydantic v2)
    # ------------------------------------------------------------------

    @field_validator("FILE_ERROR_POLICY")
    @classmethod
    def validate_file_error_policy(cls, v: str) -> str:
        allowed = {"skip", "abort"}
        if v not in allowed:
            raise ValueError(
                f"Unsupported FILE_ERROR_POLICY '{v}'. "
                f"Allowed values: {sorted(allowed)}"
            )
        return v

    @field_validator(
        "ANALYSIS_CACHE_TTL_SECONDS",
        "ANALYSIS_CACHE_MAX_ENTRIES",
        "MAX_FILE_SIZE_MB",
        "MAX_FILES_PER_SCAN",
        "LARGE_FILE_THRESHOLD_CHARS",
        "NESTING_DEPTH_THRESHOLD",
        "CSS_SEMICOLON_REPORT_LIMIT",
        "HOOK_LOOKBEHIND_CHARS",
    )
    @classmethod
    def must_be_positive(cls, v):
        if v <= 0:
            raise ValueError("Value must be positive")
        return v

    @field_validator("LAZY_LOADING_IMAGE_THRESHOLD")
    @classmethod
    def must_not_be_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Value must not be negative")
        return v

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> "AnalyzerConfig":
        """
        Load configuration from environment variables.

        All values are parsed once at startup and must remain immutable.
        """

        def env_bool(name: str, default: bool) -> bool:
            raw = os.getenv(name)
            if raw is None:
                return default
            return raw.lower() in {"1", "true", "yes", "on"}

        return cls(
            ENABLE_ANALYSIS_CACHE=env_bool(
                "ANALYZER_ENABLE_ANALYSIS_CACHE", True
            ),
            ANALYSIS_CACHE_TTL_SECONDS=float(
                os.getenv("ANALYZER_ANALYSIS_CACHE_TTL_SECONDS", "1800")
            ),
            ANALYSIS_CACHE_MAX_ENTRIES=int(
                os.getenv("ANALYZER_ANALYSIS_CACHE_MAX_ENTRIES", "1024")
            ),
            FILE_ERROR_POLICY=os.getenv(
                "ANALYZER_FILE_ERROR_POLICY", "skip"
            ),
            MAX_FILE_SIZE_MB=int(
                os.getenv("ANALYZER_MAX_FILE_SIZE_MB", "5")
            ),
            MAX_FILES_PER_SCAN=int(
                os.getenv("ANALYZER_MAX_FILES_PER_SCAN", "200")
            ),
            LARGE_FILE_THRESHOLD_CHARS=int(
                os.getenv("ANALYZER_LARGE_FILE_THRESHOLD_CHARS", "100000")
            ),
            LAZY_LOADING_IMAGE_THRESHOLD=int(
                os.getenv("ANALYZER_LAZY_LOADING_IMAGE_THRESHOLD", "3")
            ),
            NESTING_DEPTH_THRESHOLD=int(
                os.getenv("ANALYZER_NESTING_DEPTH_THRESHOLD", "5")
            ),
            CSS_SEMICOLON_REPORT_LIMIT=int(
                os.getenv("ANALYZER_CSS_SEMICOLON_REPORT_LIMIT", "5")
            ),
            HOOK_LOOKBEHIND_CHARS=int(
                os.getenv("ANALYZER_HOOK_LOOKBEHIND_CHARS", "200")
            ),
        )

    model_config = {
        "frozen": True,
    }
