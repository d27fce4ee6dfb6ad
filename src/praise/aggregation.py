"""Roll individual PR ratings up into contributor and organization statistics.

Every function here is pure: it depends only on its arguments and gives
the same answer for the same ratings in any order.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime

from praise.models import (
    Component,
    ContributorRating,
    ImprovementArea,
    LeaderboardEntry,
    OrganizationAnalytics,
    OrganizationRatingStats,
    PRRating,
    RatingInsight,
    RatingLevel,
    RatingRecord,
    Trend,
)
from praise.scorer import rating_level_for, round_half_up

IMPROVEMENT_THRESHOLD = 60
TOP_PERFORMER_SHARE = 0.2
RECENT_WINDOW = 3

IMPROVEMENT_DESCRIPTIONS: dict[Component, str] = {
    Component.PRIORITY: "Focus on higher priority tasks and better task prioritization",
    Component.CODE_AMOUNT: "Encourage more substantial contributions and meaningful changes",
    Component.TIME_FACTOR: "Improve time management and deadline adherence",
    Component.RELEVANCE: "Better alignment with project goals and objectives",
    Component.QUALITY: "Enhance code quality, testing, and documentation",
    Component.IMPACT: "Increase the impact and scope of contributions",
}

_GRADED_LEVELS = [level for level in RatingLevel if level != RatingLevel.NO_DATA]
_EPOCH = datetime.min.replace(tzinfo=UTC)


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def _chronological(ratings: Iterable[PRRating]) -> list[PRRating]:
    # Undated ratings sort first; equal timestamps fall back to score so the
    # order never depends on the caller's list order.
    return sorted(
        ratings,
        key=lambda r: (r.metadata.created_at or _EPOCH, r.total_score),
    )


def _empty_distribution() -> dict[RatingLevel, int]:
    return {level: 0 for level in _GRADED_LEVELS}


def calculate_trend(ratings: Sequence[PRRating]) -> Trend:
    """Compare the last three ratings against everything before them."""
    if len(ratings) < 2:
        return Trend.INSUFFICIENT_DATA

    ordered = _chronological(ratings)
    recent = ordered[-RECENT_WINDOW:]
    older = ordered[:-RECENT_WINDOW]
    if not older:
        return Trend.INSUFFICIENT_DATA

    improvement = (
        _mean([r.total_score for r in recent]) - _mean([r.total_score for r in older])
    )
    if improvement > 10:
        return Trend.IMPROVING
    if improvement > 5:
        return Trend.SLIGHTLY_IMPROVING
    if improvement < -10:
        return Trend.DECLINING
    if improvement < -5:
        return Trend.SLIGHTLY_DECLINING
    return Trend.STABLE


def aggregate_contributor(
    ratings: Sequence[PRRating],
    contributor_id: str | None = None,
    username: str | None = None,
) -> ContributorRating:
    """Combine a contributor's PR ratings into one :class:`ContributorRating`.

    An empty history yields the ``no-data`` sentinel rather than an error.
    """
    if not ratings:
        return ContributorRating(contributor_id=contributor_id, username=username)

    average_score = round_half_up(_mean([r.total_score for r in ratings]))
    breakdown = {
        component: round_half_up(_mean([r.breakdown[component].score for r in ratings]))
        for component in Component
    }

    return ContributorRating(
        contributor_id=contributor_id,
        username=username,
        average_score=average_score,
        total_prs=len(ratings),
        rating_level=rating_level_for(average_score),
        breakdown=breakdown,
        recent_trend=calculate_trend(ratings),
    )


def aggregate_organization(
    contributor_ratings: Sequence[ContributorRating],
) -> OrganizationRatingStats:
    """Summarize an organization from its contributors' ratings.

    Contributors without a breakdown (no rated PRs) still count toward the
    average and distribution but are left out of the component averages.
    """
    if not contributor_ratings:
        return OrganizationRatingStats()

    average_rating = round_half_up(_mean([cr.average_score for cr in contributor_ratings]))

    distribution = _empty_distribution()
    for cr in contributor_ratings:
        distribution[cr.rating_level] = distribution.get(cr.rating_level, 0) + 1

    top_count = math.ceil(len(contributor_ratings) * TOP_PERFORMER_SHARE)
    top_performers = sorted(
        contributor_ratings, key=lambda cr: cr.average_score, reverse=True
    )[:top_count]

    component_averages: dict[Component, int] = {}
    improvement_areas: list[ImprovementArea] = []
    for component in Component:
        scores = [
            cr.breakdown[component]
            for cr in contributor_ratings
            if component in cr.breakdown
        ]
        if not scores:
            continue
        average = _mean(scores)
        component_averages[component] = round_half_up(average)
        if average < IMPROVEMENT_THRESHOLD:
            improvement_areas.append(
                ImprovementArea(
                    component=component,
                    average_score=round_half_up(average),
                    description=IMPROVEMENT_DESCRIPTIONS[component],
                )
            )

    return OrganizationRatingStats(
        average_rating=average_rating,
        total_contributors=len(contributor_ratings),
        rating_distribution=distribution,
        top_performers=top_performers,
        improvement_areas=improvement_areas,
        component_averages=component_averages,
    )


def build_leaderboard(
    contributor_ratings: Iterable[ContributorRating], limit: int = 10
) -> list[LeaderboardEntry]:
    """Rank contributors with at least one rated PR by average score."""
    ranked = sorted(
        (cr for cr in contributor_ratings if cr.total_prs > 0),
        key=lambda cr: cr.average_score,
        reverse=True,
    )[:limit]
    return [LeaderboardEntry(rank=i, rating=cr) for i, cr in enumerate(ranked, start=1)]


def generate_insights(analytics: OrganizationAnalytics) -> list[RatingInsight]:
    """Turn organization analytics into a short list of observations."""
    insights: list[RatingInsight] = []

    if analytics.component_analysis:
        component, score = min(analytics.component_analysis.items(), key=lambda kv: kv[1])
        if score < IMPROVEMENT_THRESHOLD:
            insights.append(RatingInsight(
                type="improvement",
                title="Focus Area Identified",
                message=(
                    f"{component} scores are below average ({score}/100). "
                    "Consider providing training or resources in this area."
                ),
                priority="high",
            ))

    if analytics.total_ratings:
        excellent = analytics.rating_distribution.get(RatingLevel.EXCELLENT, 0)
        excellent_pct = excellent / analytics.total_ratings * 100
        if excellent_pct > 30:
            insights.append(RatingInsight(
                type="positive",
                title="High Quality Contributions",
                message=f"{excellent_pct:.1f}% of contributions are rated as excellent. Great job!",
                priority="low",
            ))
        elif excellent_pct < 10:
            insights.append(RatingInsight(
                type="improvement",
                title="Quality Improvement Needed",
                message=(
                    f"Only {excellent_pct:.1f}% of contributions are rated as excellent. "
                    "Consider reviewing processes and providing feedback."
                ),
                priority="high",
            ))

    if analytics.average_rating >= 80:
        insights.append(RatingInsight(
            type="positive",
            title="Strong Performance",
            message=f"Organization average rating is {analytics.average_rating}/100. Excellent work!",
            priority="low",
        ))
    elif analytics.average_rating < 60:
        insights.append(RatingInsight(
            type="improvement",
            title="Performance Improvement Needed",
            message=(
                f"Organization average rating is {analytics.average_rating}/100. "
                "Consider implementing improvement strategies."
            ),
            priority="high",
        ))

    return insights


def organization_analytics(records: Sequence[RatingRecord]) -> OrganizationAnalytics:
    """Compute analytics over every rating record in an organization."""
    if not records:
        return OrganizationAnalytics()

    ratings = [record.rating for record in records]
    distribution: dict[RatingLevel, int] = {}
    for rating in ratings:
        distribution[rating.rating_level] = distribution.get(rating.rating_level, 0) + 1

    analytics = OrganizationAnalytics(
        total_ratings=len(ratings),
        average_rating=round_half_up(_mean([r.total_score for r in ratings])),
        rating_distribution=distribution,
        component_analysis={
            component: round_half_up(_mean([r.breakdown[component].score for r in ratings]))
            for component in Component
        },
    )
    analytics.insights = generate_insights(analytics)
    return analytics
