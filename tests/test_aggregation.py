"""Tests for contributor and organization aggregation."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from conftest import make_rating

from praise.aggregation import (
    IMPROVEMENT_DESCRIPTIONS,
    aggregate_contributor,
    aggregate_organization,
    build_leaderboard,
    calculate_trend,
    generate_insights,
    organization_analytics,
)
from praise.models import (
    Component,
    ContributorRating,
    OrganizationAnalytics,
    PRRating,
    RatingLevel,
    RatingRecord,
    Trend,
)

START = datetime(2024, 1, 1, tzinfo=UTC)


def _history(*scores: int) -> list[PRRating]:
    """Ratings created one day apart, in the given order."""
    return [make_rating(score, created_at=START + timedelta(days=i)) for i, score in enumerate(scores)]


def _contributor(
    name: str, average: int, total_prs: int = 3, **breakdown: int
) -> ContributorRating:
    from praise.scorer import rating_level_for

    return ContributorRating(
        contributor_id=name,
        username=name,
        average_score=average,
        total_prs=total_prs,
        rating_level=rating_level_for(average) if total_prs else RatingLevel.NO_DATA,
        breakdown=(
            {c: breakdown.get(c.value, average) for c in Component} if total_prs else {}
        ),
        recent_trend=Trend.STABLE,
    )


class TestAggregateContributor:
    def test_empty_history(self) -> None:
        result = aggregate_contributor([])
        assert result.average_score == 0
        assert result.total_prs == 0
        assert result.rating_level == RatingLevel.NO_DATA
        assert result.breakdown == {}

    def test_two_ratings(self) -> None:
        result = aggregate_contributor(_history(40, 90))
        assert result.average_score == 65
        assert result.total_prs == 2
        assert result.rating_level == RatingLevel.SATISFACTORY
        assert result.recent_trend == Trend.INSUFFICIENT_DATA

    def test_average_rounds_half_up(self) -> None:
        assert aggregate_contributor(_history(60, 71)).average_score == 66

    def test_breakdown_averages_raw_scores(self) -> None:
        ratings = [
            make_rating(70, created_at=START, quality=40, time_factor=120),
            make_rating(80, created_at=START + timedelta(days=1), quality=61, time_factor=50),
        ]
        result = aggregate_contributor(ratings)
        assert set(result.breakdown) == set(Component)
        assert result.breakdown[Component.QUALITY] == 51
        assert result.breakdown[Component.TIME_FACTOR] == 85

    def test_identity_is_carried(self) -> None:
        result = aggregate_contributor(_history(50), contributor_id="42", username="octocat")
        assert result.contributor_id == "42"
        assert result.username == "octocat"

    def test_order_independent(self) -> None:
        ratings = _history(30, 45, 80, 85, 90, 60)
        forward = aggregate_contributor(ratings)
        backward = aggregate_contributor(list(reversed(ratings)))
        assert forward == backward

    def test_does_not_reorder_input(self) -> None:
        ratings = list(reversed(_history(30, 45, 80, 85)))
        snapshot = list(ratings)
        aggregate_contributor(ratings)
        assert ratings == snapshot


class TestCalculateTrend:
    @pytest.mark.parametrize(
        ("scores", "expected"),
        [
            ((50, 50, 70, 70, 70), Trend.IMPROVING),
            ((60, 60, 66, 66, 66), Trend.SLIGHTLY_IMPROVING),
            ((60, 62, 61, 60, 64), Trend.STABLE),
            ((70, 70, 64, 64, 64), Trend.SLIGHTLY_DECLINING),
            ((70, 70, 50, 50, 50), Trend.DECLINING),
        ],
    )
    def test_classification(self, scores: tuple[int, ...], expected: Trend) -> None:
        assert calculate_trend(_history(*scores)) == expected

    def test_needs_older_ratings(self) -> None:
        assert calculate_trend(_history(50)) == Trend.INSUFFICIENT_DATA
        assert calculate_trend(_history(40, 90)) == Trend.INSUFFICIENT_DATA
        assert calculate_trend(_history(40, 60, 90)) == Trend.INSUFFICIENT_DATA

    def test_four_ratings_compares_against_first(self) -> None:
        assert calculate_trend(_history(40, 60, 60, 60)) == Trend.IMPROVING

    def test_uses_creation_order_not_list_order(self) -> None:
        ratings = _history(40, 40, 80, 80, 80)
        assert calculate_trend(list(reversed(ratings))) == Trend.IMPROVING

    def test_boundaries_are_exclusive(self) -> None:
        # improvement of exactly 10 is only slightly improving
        assert calculate_trend(_history(50, 60, 60, 60)) == Trend.SLIGHTLY_IMPROVING
        # improvement of exactly 5 is stable
        assert calculate_trend(_history(50, 55, 55, 55)) == Trend.STABLE

    def test_same_timestamp_is_order_independent(self) -> None:
        ratings = [make_rating(score, created_at=START) for score in (90, 20, 50, 70)]
        assert calculate_trend(ratings) == calculate_trend(list(reversed(ratings)))


class TestAggregateOrganization:
    def test_empty(self) -> None:
        stats = aggregate_organization([])
        assert stats.total_contributors == 0
        assert stats.average_rating == 0
        assert stats.rating_distribution == {}
        assert stats.top_performers == []
        assert stats.improvement_areas == []

    def test_average_and_distribution(self) -> None:
        stats = aggregate_organization([
            _contributor("a", 92),
            _contributor("b", 75),
            _contributor("c", 71),
        ])
        assert stats.total_contributors == 3
        assert stats.average_rating == 79
        assert stats.rating_distribution[RatingLevel.EXCELLENT] == 1
        assert stats.rating_distribution[RatingLevel.GOOD] == 2
        assert stats.rating_distribution[RatingLevel.POOR] == 0
        assert len(stats.rating_distribution) == 7

    def test_top_performers_is_top_fifth_rounded_up(self) -> None:
        contributors = [_contributor(str(i), score) for i, score in enumerate([55, 91, 70, 82, 64, 77])]
        stats = aggregate_organization(contributors)
        assert [cr.average_score for cr in stats.top_performers] == [91, 82]

        single = aggregate_organization(contributors[:3])
        assert [cr.average_score for cr in single.top_performers] == [91]

    def test_input_not_reordered(self) -> None:
        contributors = [_contributor("a", 50), _contributor("b", 90)]
        aggregate_organization(contributors)
        assert [c.username for c in contributors] == ["a", "b"]

    def test_improvement_areas(self) -> None:
        stats = aggregate_organization([
            _contributor("a", 70, quality=50, impact=59),
            _contributor("b", 80, quality=60, impact=60),
        ])
        assert stats.component_averages[Component.QUALITY] == 55
        # 59.5 rounds to 60 for display but is still below the threshold
        assert stats.component_averages[Component.IMPACT] == 60
        areas = {area.component: area for area in stats.improvement_areas}
        assert set(areas) == {Component.QUALITY, Component.IMPACT}
        assert areas[Component.QUALITY].description == IMPROVEMENT_DESCRIPTIONS[Component.QUALITY]
        assert areas[Component.QUALITY].average_score == 55

    def test_no_improvement_areas_when_all_strong(self) -> None:
        stats = aggregate_organization([_contributor("a", 80), _contributor("b", 90)])
        assert stats.improvement_areas == []

    def test_contributors_without_data(self) -> None:
        stats = aggregate_organization([
            _contributor("a", 80),
            _contributor("ghost", 0, total_prs=0),
        ])
        assert stats.average_rating == 40
        assert stats.rating_distribution[RatingLevel.NO_DATA] == 1
        assert stats.component_averages[Component.PRIORITY] == 80

    def test_every_component_has_description(self) -> None:
        assert set(IMPROVEMENT_DESCRIPTIONS) == set(Component)


class TestLeaderboard:
    def test_ranks_and_filters(self) -> None:
        board = build_leaderboard([
            _contributor("a", 60),
            _contributor("ghost", 0, total_prs=0),
            _contributor("b", 85),
            _contributor("c", 72),
        ])
        assert [(e.rank, e.rating.username) for e in board] == [(1, "b"), (2, "c"), (3, "a")]

    def test_limit(self) -> None:
        board = build_leaderboard([_contributor(str(i), 50 + i) for i in range(20)], limit=5)
        assert len(board) == 5
        assert board[0].rating.average_score == 69


class TestOrganizationAnalytics:
    def _record(self, idx: int, score: int, **components: int) -> RatingRecord:
        return RatingRecord(
            id=f"rating_{idx}",
            pr_id=str(idx),
            contributor_id="1",
            organization_id="org_acme",
            rating=make_rating(score, created_at=START, **components),
        )

    def test_empty(self) -> None:
        analytics = organization_analytics([])
        assert analytics.total_ratings == 0
        assert analytics.insights == []

    def test_summary_and_insights(self) -> None:
        records = [
            self._record(1, 95, quality=40),
            self._record(2, 92, quality=50),
            self._record(3, 85, quality=45),
        ]
        analytics = organization_analytics(records)
        assert analytics.total_ratings == 3
        assert analytics.average_rating == 91
        assert analytics.rating_distribution == {
            RatingLevel.EXCELLENT: 2,
            RatingLevel.VERY_GOOD: 1,
        }
        assert analytics.component_analysis[Component.QUALITY] == 45

        titles = [insight.title for insight in analytics.insights]
        assert titles == [
            "Focus Area Identified",
            "High Quality Contributions",
            "Strong Performance",
        ]
        assert "quality" in analytics.insights[0].message

    def test_low_performance_insights(self) -> None:
        analytics = OrganizationAnalytics(
            total_ratings=10,
            average_rating=55,
            rating_distribution={RatingLevel.AVERAGE: 10},
            component_analysis={c: 70 for c in Component},
        )
        insights = generate_insights(analytics)
        assert [i.title for i in insights] == [
            "Quality Improvement Needed",
            "Performance Improvement Needed",
        ]
        assert all(i.priority == "high" for i in insights)
