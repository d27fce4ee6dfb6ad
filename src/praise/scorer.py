"""Weighted multi-factor rating engine for pull requests."""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from praise.config import PraiseConfig, RatingWeights
from praise.models import (
    Complexity,
    Component,
    ComponentScore,
    Priority,
    PRRating,
    PRRatingInput,
    PRRatingMetadata,
    QualityIndicators,
    RatingLevel,
    as_utc,
)

PRIORITY_SCORES: dict[Priority, int] = {
    Priority.CRITICAL: 100,
    Priority.HIGH: 80,
    Priority.MEDIUM: 60,
    Priority.LOW: 40,
    Priority.TRIVIAL: 20,
}

# (upper bound of total lines changed, base score); the last bracket is open-ended
CODE_AMOUNT_BRACKETS: list[tuple[float, int]] = [
    (50, 30),
    (200, 60),
    (500, 80),
    (math.inf, 100),
]

TIME_ON_TIME = 100
TIME_EARLY = 120
TIME_SLIGHTLY_LATE = 80
TIME_MODERATELY_LATE = 60
TIME_VERY_LATE = 40
TIME_NO_DEADLINE = 50

RELEVANCE_POSITIVE_KEYWORDS = (
    "bug fix", "security", "performance", "optimization",
    "feature", "enhancement", "improvement", "refactor",
    "critical", "important", "urgent", "hotfix",
)
RELEVANCE_NEGATIVE_KEYWORDS = (
    "typo", "formatting", "whitespace", "comment",
    "documentation", "readme", "chore", "style",
)

COMPLEXITY_ADJUSTMENTS: dict[Complexity, int] = {
    Complexity.LOW: 10,
    Complexity.MEDIUM: 0,
    Complexity.HIGH: -5,
    Complexity.VERY_HIGH: -10,
}

# Minimum score for each level, best first
RATING_THRESHOLDS: list[tuple[int, RatingLevel]] = [
    (90, RatingLevel.EXCELLENT),
    (80, RatingLevel.VERY_GOOD),
    (70, RatingLevel.GOOD),
    (60, RatingLevel.SATISFACTORY),
    (50, RatingLevel.AVERAGE),
    (40, RatingLevel.BELOW_AVERAGE),
]

_SECONDS_PER_DAY = 24 * 60 * 60


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (72.5 -> 73)."""
    return math.floor(value + 0.5)


def clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


def _days_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / _SECONDS_PER_DAY


def _late_score(days_late: float) -> int:
    if days_late <= 3:
        return TIME_SLIGHTLY_LATE
    if days_late <= 7:
        return TIME_MODERATELY_LATE
    return TIME_VERY_LATE


def rating_level_for(score: float) -> RatingLevel:
    """Map a 0-100 score to its rating level."""
    for minimum, level in RATING_THRESHOLDS:
        if score >= minimum:
            return level
    return RatingLevel.POOR


def calculate_priority_score(priority: Priority | str | None) -> int:
    if isinstance(priority, str):
        try:
            priority = Priority(priority)
        except ValueError:
            priority = Priority.MEDIUM
    return PRIORITY_SCORES.get(priority, PRIORITY_SCORES[Priority.MEDIUM])  # type: ignore[arg-type]


def calculate_code_amount_score(
    lines_added: int, lines_deleted: int, files_changed: int
) -> int:
    """Score the volume of a change from its line and file counts."""
    total_lines = lines_added + lines_deleted

    base_score = 0
    for upper_bound, bracket_score in CODE_AMOUNT_BRACKETS:
        if total_lines <= upper_bound:
            base_score = bracket_score
            break

    file_bonus = min(files_changed * 2, 20)
    significant_change_bonus = 10 if total_lines > 100 else 0

    return min(base_score + file_bonus + significant_change_bonus, 100)


def calculate_time_score(
    time_to_complete: float | None,
    deadline: datetime | None,
    created_at: datetime | None,
    merged_at: datetime | None,
    now: datetime | None = None,
) -> int:
    """Score how a PR's completion time compares to its deadline or estimate.

    Early completion earns 120, above the nominal 100 ceiling, and is not
    clamped.

    Open PRs are measured against *now* (defaults to the current time).
    A zero-length allotment counts as on time, and a PR with no creation
    time cannot be measured and gets the no-deadline score.
    """
    # naive datetimes are read as UTC
    created_at, deadline, merged_at, now = (
        as_utc(created_at), as_utc(deadline), as_utc(merged_at), as_utc(now)
    )

    if not time_to_complete and deadline is None:
        return TIME_NO_DEADLINE
    if created_at is None:
        return TIME_NO_DEADLINE

    if merged_at is None:
        if deadline is None:
            return TIME_NO_DEADLINE
        current = now if now is not None else datetime.now(UTC)
        elapsed = _days_between(created_at, current)
        allotted = _days_between(created_at, deadline)
        if elapsed <= allotted:
            return TIME_ON_TIME
        return _late_score(elapsed - allotted)

    actual = _days_between(created_at, merged_at)

    if deadline is not None:
        allotted = _days_between(created_at, deadline)
        if actual <= allotted:
            if allotted <= 0:
                return TIME_ON_TIME
            return TIME_EARLY if actual / allotted <= 0.8 else TIME_ON_TIME
        return _late_score(actual - allotted)

    if time_to_complete:
        ratio = actual / time_to_complete
        if ratio <= 0.8:
            return TIME_EARLY
        if ratio <= 1.2:
            return TIME_ON_TIME
        if ratio <= 1.5:
            return TIME_SLIGHTLY_LATE
        return TIME_MODERATELY_LATE

    return TIME_NO_DEADLINE


def calculate_relevance_score(
    base_relevance: float, title: str | None, description: str | None
) -> float:
    """Adjust a relevance seed by keyword presence in the title and description."""
    text = f"{title or ''} {description or ''}".lower()
    positive = sum(1 for keyword in RELEVANCE_POSITIVE_KEYWORDS if keyword in text)
    negative = sum(1 for keyword in RELEVANCE_NEGATIVE_KEYWORDS if keyword in text)
    return clamp(base_relevance + positive * 5 - negative * 3)


def calculate_quality_score(indicators: QualityIndicators) -> float:
    score: float = 50

    if indicators.has_tests:
        score += 15
    if indicators.code_coverage > 80:
        score += 10
    elif indicators.code_coverage > 60:
        score += 5

    if indicators.has_documentation:
        score += 10

    if indicators.review_comments > 0:
        score += 5
    if indicators.review_comments > 3:
        score += 5

    if not indicators.ci_passed:
        score -= 20

    score += COMPLEXITY_ADJUSTMENTS.get(indicators.complexity, 0)
    return clamp(score)


def calculate_impact_score(
    base_impact: float, lines_added: int, files_changed: int
) -> float:
    """Apply stacking scope bonuses to an impact seed."""
    score = base_impact
    if lines_added > 500:
        score += 10
    if files_changed > 10:
        score += 5
    if lines_added > 1000:
        score += 15
    return clamp(score)


class RatingEngine:
    """Compose the six component scores into a weighted PR rating.

    The engine holds an immutable :class:`RatingWeights`. Changing weights
    goes through :meth:`with_weights`, which returns a new engine and
    leaves this one untouched.
    """

    def __init__(self, weights: RatingWeights | None = None) -> None:
        self._weights = weights if weights is not None else RatingWeights()

    @classmethod
    def from_config(cls, config: PraiseConfig) -> RatingEngine:
        return cls(config.weights)

    @property
    def weights(self) -> RatingWeights:
        return self._weights

    def with_weights(self, **weights: float) -> RatingEngine:
        """Return an engine using *weights* merged over the current ones.

        Raises:
            ConfigError: If the merged weights do not sum to 1.0.
        """
        return RatingEngine(self._weights.updated(**weights))

    def score_components(
        self, rating_input: PRRatingInput, now: datetime | None = None
    ) -> dict[Component, float]:
        """Compute the raw (unweighted) score of every component."""
        return {
            Component.PRIORITY: calculate_priority_score(rating_input.priority),
            Component.CODE_AMOUNT: calculate_code_amount_score(
                rating_input.lines_added,
                rating_input.lines_deleted,
                rating_input.files_changed,
            ),
            Component.TIME_FACTOR: calculate_time_score(
                rating_input.time_to_complete,
                rating_input.deadline,
                rating_input.created_at,
                rating_input.merged_at,
                now=now,
            ),
            Component.RELEVANCE: calculate_relevance_score(
                rating_input.relevance_score,
                rating_input.title,
                rating_input.description,
            ),
            Component.QUALITY: calculate_quality_score(rating_input.quality_indicators),
            Component.IMPACT: calculate_impact_score(
                rating_input.impact_score,
                rating_input.lines_added,
                rating_input.files_changed,
            ),
        }

    def rate(
        self,
        rating_input: PRRatingInput | Mapping[str, Any],
        now: datetime | None = None,
    ) -> PRRating:
        """Rate a single pull request.

        The total is rounded once from the sum of unrounded weighted
        scores; the per-component ``weighted_score`` values are rounded
        individually for display and may not add up to the total.
        """
        if not isinstance(rating_input, PRRatingInput):
            rating_input = PRRatingInput.model_validate(rating_input)

        scores = self.score_components(rating_input, now=now)
        weights = self._weights.as_dict()

        breakdown: dict[Component, ComponentScore] = {}
        weighted_total = 0.0
        for component, score in scores.items():
            weight = weights[component]
            weighted = score * weight
            weighted_total += weighted
            breakdown[component] = ComponentScore(
                score=score,
                weight=weight,
                weighted_score=round_half_up(weighted),
            )

        total_score = round_half_up(weighted_total)

        return PRRating(
            total_score=total_score,
            rating_level=rating_level_for(total_score),
            breakdown=breakdown,
            metadata=PRRatingMetadata(
                lines_added=rating_input.lines_added,
                lines_deleted=rating_input.lines_deleted,
                files_changed=rating_input.files_changed,
                commits=rating_input.commits,
                time_to_complete=rating_input.time_to_complete,
                priority=rating_input.priority,
                author=rating_input.author,
                repository=rating_input.repository,
                created_at=rating_input.created_at,
                merged_at=rating_input.merged_at,
            ),
        )
