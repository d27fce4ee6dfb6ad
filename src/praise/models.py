"""Data models for PRAISE pull request ratings."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Component(StrEnum):
    """The six weighted components of a PR rating."""
    PRIORITY = "priority"
    CODE_AMOUNT = "code_amount"
    TIME_FACTOR = "time_factor"
    RELEVANCE = "relevance"
    QUALITY = "quality"
    IMPACT = "impact"


class Priority(StrEnum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    TRIVIAL = "trivial"


class Complexity(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very-high"


class RatingLevel(StrEnum):
    """Qualitative classification of a 0-100 score, best first."""
    EXCELLENT = "excellent"
    VERY_GOOD = "very-good"
    GOOD = "good"
    SATISFACTORY = "satisfactory"
    AVERAGE = "average"
    BELOW_AVERAGE = "below-average"
    POOR = "poor"
    NO_DATA = "no-data"


class Trend(StrEnum):
    IMPROVING = "improving"
    SLIGHTLY_IMPROVING = "slightly-improving"
    STABLE = "stable"
    SLIGHTLY_DECLINING = "slightly-declining"
    DECLINING = "declining"
    INSUFFICIENT_DATA = "insufficient-data"


def _enum_or_default(enum_cls: type[StrEnum], value: Any, default: StrEnum) -> Any:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            return default
    return default


def _non_negative_int(value: Any, default: int = 0) -> int:
    if value is None:
        return default
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return default


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to a naive datetime; aware values pass through."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class QualityIndicators(BaseModel):
    """Code quality signals attached to a pull request."""
    has_tests: bool = False
    has_documentation: bool = False
    review_comments: int = 0
    ci_passed: bool = True
    code_coverage: float = 0.0
    complexity: Complexity = Complexity.MEDIUM

    @field_validator("review_comments", mode="before")
    @classmethod
    def _coerce_count(cls, value: Any) -> int:
        return _non_negative_int(value)

    @field_validator("code_coverage", mode="before")
    @classmethod
    def _coerce_coverage(cls, value: Any) -> Any:
        return 0.0 if value is None else value

    @field_validator("complexity", mode="before")
    @classmethod
    def _coerce_complexity(cls, value: Any) -> Any:
        return _enum_or_default(Complexity, value, Complexity.MEDIUM)


class PRRatingInput(BaseModel):
    """Everything the rating engine needs to score one pull request.

    This is the single place where defaults are applied: unknown enum
    values fall back to their documented default and missing or negative
    counts become zero, so the engine can assume fully populated input.
    """
    priority: Priority = Priority.MEDIUM
    lines_added: int = 0
    lines_deleted: int = 0
    files_changed: int = 0
    commits: int = 1
    time_to_complete: float | None = None
    deadline: datetime | None = None
    relevance_score: float = 50.0
    quality_indicators: QualityIndicators = Field(default_factory=QualityIndicators)
    impact_score: float = 50.0
    created_at: datetime | None = None
    merged_at: datetime | None = None
    author: str | None = None
    repository: str | None = None
    title: str = ""
    description: str = ""

    @field_validator("priority", mode="before")
    @classmethod
    def _coerce_priority(cls, value: Any) -> Any:
        return _enum_or_default(Priority, value, Priority.MEDIUM)

    @field_validator("lines_added", "lines_deleted", "files_changed", mode="before")
    @classmethod
    def _coerce_counts(cls, value: Any) -> int:
        return _non_negative_int(value)

    @field_validator("commits", mode="before")
    @classmethod
    def _coerce_commits(cls, value: Any) -> int:
        return _non_negative_int(value, default=1)

    @field_validator("relevance_score", "impact_score", mode="before")
    @classmethod
    def _coerce_seed(cls, value: Any) -> Any:
        return 50.0 if value is None else value

    @field_validator("quality_indicators", mode="before")
    @classmethod
    def _coerce_indicators(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("title", "description", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("deadline", "created_at", "merged_at", mode="after")
    @classmethod
    def _coerce_timezone(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)


class ComponentScore(BaseModel):
    """One row of a rating breakdown."""
    model_config = ConfigDict(frozen=True)

    score: float
    weight: float
    weighted_score: int


class PRRatingMetadata(BaseModel):
    """Snapshot of the input facts a rating was computed from."""
    model_config = ConfigDict(frozen=True)

    lines_added: int = 0
    lines_deleted: int = 0
    files_changed: int = 0
    commits: int = 1
    time_to_complete: float | None = None
    priority: Priority = Priority.MEDIUM
    author: str | None = None
    repository: str | None = None
    created_at: datetime | None = None
    merged_at: datetime | None = None

    @field_validator("created_at", "merged_at", mode="after")
    @classmethod
    def _coerce_timezone(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)


class PRRating(BaseModel):
    """Immutable rating of a single pull request."""
    model_config = ConfigDict(frozen=True)

    total_score: int
    rating_level: RatingLevel
    breakdown: dict[Component, ComponentScore]
    metadata: PRRatingMetadata = Field(default_factory=PRRatingMetadata)


class PRIdentity(BaseModel):
    """Identifiers linking a rated pull request back to GitHub."""
    pr_id: str
    contributor_id: str
    organization_id: str
    author: str
    repository: str | None = None
    pr_number: int | None = None
    pr_url: str | None = None
    avatar_url: str | None = None


class RatingRecord(BaseModel):
    """A stored rating: the rating itself plus who and what it was for."""
    model_config = ConfigDict(frozen=True)

    id: str
    pr_id: str
    contributor_id: str
    organization_id: str
    rating: PRRating
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    rating_input: PRRatingInput | None = None
    github: PRIdentity | None = None


class ContributorRating(BaseModel):
    """Aggregate rating for one contributor across their rated PRs."""
    contributor_id: str | None = None
    username: str | None = None
    average_score: int = 0
    total_prs: int = 0
    rating_level: RatingLevel = RatingLevel.NO_DATA
    breakdown: dict[Component, int] = {}
    recent_trend: Trend = Trend.INSUFFICIENT_DATA


class ImprovementArea(BaseModel):
    component: Component
    average_score: int
    description: str


class OrganizationRatingStats(BaseModel):
    """Organization-wide statistics derived from contributor ratings."""
    average_rating: int = 0
    total_contributors: int = 0
    rating_distribution: dict[RatingLevel, int] = {}
    top_performers: list[ContributorRating] = []
    improvement_areas: list[ImprovementArea] = []
    component_averages: dict[Component, int] = {}


class LeaderboardEntry(BaseModel):
    rank: int
    rating: ContributorRating


class RatingInsight(BaseModel):
    """A human-readable observation about an organization's ratings."""
    type: str
    title: str
    message: str
    priority: str


class OrganizationAnalytics(BaseModel):
    """Statistics computed directly over an organization's rating records."""
    total_ratings: int = 0
    average_rating: int = 0
    rating_distribution: dict[RatingLevel, int] = {}
    component_analysis: dict[Component, int] = {}
    insights: list[RatingInsight] = []


class RatingFailure(BaseModel):
    pr_id: str | None = None
    error: str


class BatchRatingResult(BaseModel):
    """Outcome of rating a batch of raw pull requests."""
    records: list[RatingRecord] = []
    failures: list[RatingFailure] = []
