"""
Standardized finding schema.

Defines the canonical structure used to report issues detected by the
pattern-matching rule families (accessibility, security, performance,
SEO, structure and language-specific heuristics).

This schema is:
- immutable once created by its rule
- severity-graded
- file- and line-traceable
- explainable (literal code snippet, context window, suggestion)

Downstream stages (validation, suggestions, estimation) only ADD fields
or derive views. They never change category, severity or file.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, ConfigDict, field_validator


# ---------------------------------------------------------------------------
# Enumerations (FROZEN CONTRACTS)
# ---------------------------------------------------------------------------


class Severity(str, Enum):
    """
    Severity level of a finding.

    Ordering is intentional (descending urgency) and MUST remain stable.
    """

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class FindingCategory(str, Enum):
    """
    Concern area a finding belongs to.

    LINT is transitional: language-specific heuristics emit it and the
    coordinator remaps it to STRUCTURE before findings leave an analysis.
    """

    ACCESSIBILITY = "accessibility"
    SECURITY = "security"
    PERFORMANCE = "performance"
    SEO = "seo"
    STRUCTURE = "structure"
    I18N = "i18n"

    LINT = "lint"


# Categories accepted by the quality check (LINT excluded)
CANONICAL_CATEGORIES = frozenset(
    c.value for c in FindingCategory if c is not FindingCategory.LINT
)

SEVERITY_LEVELS = frozenset(s.value for s in Severity)

# Bucket used wherever an unrecognized severity/category needs a key
OTHER = "other"


def enum_value(value: Any) -> Any:
    """Return the raw value of an enum member, or the input unchanged."""
    return value.value if isinstance(value, Enum) else value


# ---------------------------------------------------------------------------
# Canonical Finding Object (PUBLIC, FROZEN)
# ---------------------------------------------------------------------------


class Finding(BaseModel):
    """
    Canonical analysis finding.

    Produced by exactly one rule invocation.

    category and severity are stored as plain strings. Rules always use
    the enum members; unrecognized strings are representable so that the
    quality check can report them instead of failing on construction.
    """

    title: str = Field(
        ...,
        description=(
            "Short human label. Also used as a coarse type discriminator "
            "by the suggestion generator."
        ),
    )

    description: str = Field(
        ...,
        description="One-sentence explanation of what is wrong",
    )

    category: str = Field(
        ...,
        description="Concern area (see FindingCategory)",
    )

    severity: str = Field(
        ...,
        description="Urgency level (see Severity)",
    )

    file: str = Field(
        "",
        description="Name of the file the finding was detected in",
    )

    line: Optional[int] = Field(
        None,
        ge=1,
        description="1-based line number of the match",
    )

    code: str = Field(
        "",
        description="Literal matched snippet",
    )

    code_context: Optional[str] = Field(
        None,
        description="Surrounding lines (2 before / 2 after the match)",
    )

    suggestion: Optional[str] = Field(
        None,
        description="Literal replacement snippet proposed at detection time",
    )

    rationale: Optional[str] = Field(
        None,
        description="Why the issue matters",
    )

    @field_validator("category", "severity", mode="before")
    @classmethod
    def coerce_enum_members(cls, v: Any) -> Any:
        return enum_value(v)

    @property
    def identity_key(self) -> str:
        """Deduplication key: ``category:title:file``."""
        return f"{self.category}:{self.title}:{self.file}"

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )


class ValidatedFinding(Finding):
    """
    Finding accepted by the validation service.

    Created only by validate_and_deduplicate, once per accepted Finding.
    """

    id: str = Field(
        ...,
        description="Globally unique identifier (independent of generation order)",
    )

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation time (UTC)",
    )

    validated: Literal[True] = True
