"""Shared test fixtures for PRAISE tests."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import pytest

from praise.models import (
    Component,
    ComponentScore,
    PRRating,
    PRRatingInput,
    PRRatingMetadata,
    QualityIndicators,
)
from praise.scorer import RatingEngine, rating_level_for


def make_rating(
    total_score: int,
    created_at: datetime | None = None,
    component_score: float | None = None,
    **component_scores: float,
) -> PRRating:
    """Build a PRRating directly, bypassing the engine.

    Every component gets *component_score* (defaulting to *total_score*)
    unless overridden by keyword, e.g. ``quality=40``.
    """
    base = total_score if component_score is None else component_score
    breakdown = {
        component: ComponentScore(
            score=component_scores.get(component.value, base),
            weight=0.0,
            weighted_score=0,
        )
        for component in Component
    }
    return PRRating(
        total_score=total_score,
        rating_level=rating_level_for(total_score),
        breakdown=breakdown,
        metadata=PRRatingMetadata(created_at=created_at),
    )


@pytest.fixture
def engine() -> RatingEngine:
    return RatingEngine()


@pytest.fixture
def scenario_a_input() -> PRRatingInput:
    return PRRatingInput(
        priority="critical",
        lines_added=600,
        lines_deleted=0,
        files_changed=3,
        relevance_score=50,
        quality_indicators=QualityIndicators(),
        impact_score=50,
        title="Rework request pipeline",
        description="",
    )


@pytest.fixture
def sample_raw_pr() -> dict[str, Any]:
    return {
        "id": 1001,
        "number": 42,
        "html_url": "https://github.com/octo-org/widgets/pull/42",
        "title": "Fix race in cache invalidation",
        "body": "Fixes #40. Adds regression tests for the invalidation path.",
        "created_at": "2024-03-01T10:00:00Z",
        "merged_at": "2024-03-03T16:00:00Z",
        "closed_at": "2024-03-03T16:00:00Z",
        "additions": 120,
        "deletions": 30,
        "changed_files": 6,
        "commits": 3,
        "review_comments": 2,
        "mergeable": True,
        "labels": [{"name": "bug"}],
        "user": {
            "login": "octocat",
            "id": 583231,
            "avatar_url": "https://avatars.githubusercontent.com/u/583231",
        },
        "repository": "octo-org/widgets",
        "repository_data": {"stars": 240, "forks": 30},
    }


@pytest.fixture
def sample_raw_prs(sample_raw_pr: dict[str, Any]) -> list[dict[str, Any]]:
    docs_pr = {
        **sample_raw_pr,
        "id": 1002,
        "number": 43,
        "title": "Update README documentation",
        "body": "",
        "created_at": "2024-03-05T09:00:00Z",
        "merged_at": "2024-03-05T12:00:00Z",
        "closed_at": "2024-03-05T12:00:00Z",
        "additions": 12,
        "deletions": 4,
        "changed_files": 1,
        "labels": [{"name": "documentation"}],
    }
    open_pr = {
        **sample_raw_pr,
        "id": 1003,
        "number": 44,
        "title": "Add streaming API",
        "body": "New feature: streaming API integration.",
        "created_at": "2024-03-07T09:00:00Z",
        "merged_at": None,
        "closed_at": None,
        "additions": 640,
        "deletions": 20,
        "changed_files": 14,
        "labels": [],
    }
    return [sample_raw_pr, docs_pr, open_pr]


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 4, 1, tzinfo=UTC)
