"""Translate raw GitHub pull request payloads into rating engine input.

This module is the only place that knows GitHub's field names. The
heuristics mirror what reviewers look at when skimming a PR: trigger
words in the title and body, labels, diff size, and whether the
repository is popular.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from praise.exceptions import FeatureExtractionError
from praise.models import (
    Complexity,
    Priority,
    PRIdentity,
    PRRatingInput,
    QualityIndicators,
)
from praise.scorer import clamp

_CRITICAL_WORDS = ("critical", "urgent", "hotfix")
_CRITICAL_LABELS = ("critical", "urgent")
_HIGH_WORDS = ("security", "bug", "fix", "performance", "optimization")
_HIGH_LABELS = ("bug", "security")
_LOW_WORDS = ("chore", "style", "format", "typo", "documentation")
_LOW_LABELS = ("chore", "documentation")
_TRIVIAL_WORDS = ("whitespace", "comment")
_TRIVIAL_LABELS = ("trivial",)

RELEVANCE_POSITIVE_KEYWORDS = (
    "feature", "enhancement", "improvement", "optimization",
    "performance", "security", "bug fix", "refactor",
    "api", "integration", "authentication", "database",
)
RELEVANCE_NEGATIVE_KEYWORDS = (
    "typo", "formatting", "whitespace", "comment only",
    "readme", "changelog", "version bump",
)
ISSUE_REFERENCE_MARKERS = ("#", "issue", "fixes")

# (exclusive lower bound of total lines changed, bonus); first match wins
IMPACT_LINE_BRACKETS: list[tuple[int, int]] = [
    (500, 20),
    (200, 15),
    (100, 10),
    (50, 5),
]


def _text(title: str | None, body: str | None) -> str:
    return f"{title or ''} {body or ''}".lower()


def _label_names(labels: Any) -> list[str]:
    names: list[str] = []
    for label in labels or []:
        if isinstance(label, Mapping):
            name = label.get("name")
        else:
            name = label
        if name:
            names.append(str(name).lower())
    return names


def _matches(text: str, labels: list[str], words: tuple[str, ...], label_set: tuple[str, ...]) -> bool:
    return any(w in text for w in words) or any(name in label_set for name in labels)


def determine_priority(title: str | None, body: str | None, labels: Any = None) -> Priority:
    """Infer a priority from trigger words and labels; the first tier to match wins."""
    text = _text(title, body)
    names = _label_names(labels)

    if _matches(text, names, _CRITICAL_WORDS, _CRITICAL_LABELS):
        return Priority.CRITICAL
    if _matches(text, names, _HIGH_WORDS, _HIGH_LABELS):
        return Priority.HIGH
    if _matches(text, names, _LOW_WORDS, _LOW_LABELS):
        return Priority.LOW
    if _matches(text, names, _TRIVIAL_WORDS, _TRIVIAL_LABELS):
        return Priority.TRIVIAL
    return Priority.MEDIUM


def estimate_relevance(title: str | None, body: str | None) -> float:
    """Seed relevance score from PR text, before the engine's own keyword pass."""
    text = _text(title, body)
    score: float = 50

    score += 8 * sum(1 for keyword in RELEVANCE_POSITIVE_KEYWORDS if keyword in text)
    score -= 5 * sum(1 for keyword in RELEVANCE_NEGATIVE_KEYWORDS if keyword in text)

    if body and len(body) > 200:
        score += 10
    if any(marker in text for marker in ISSUE_REFERENCE_MARKERS):
        score += 5

    return clamp(score)


def estimate_complexity(additions: int, deletions: int) -> Complexity:
    total = additions + deletions
    if total < 50:
        return Complexity.LOW
    if total < 200:
        return Complexity.MEDIUM
    if total < 500:
        return Complexity.HIGH
    return Complexity.VERY_HIGH


def analyze_quality_indicators(raw_pr: Mapping[str, Any]) -> QualityIndicators:
    """Derive quality signals; coverage is not available from the GitHub PR payload."""
    body = (raw_pr.get("body") or "").lower()
    return QualityIndicators(
        has_tests="test" in body or "spec" in body,
        has_documentation="doc" in body or "readme" in body or "comment" in body,
        review_comments=raw_pr.get("review_comments") or 0,
        ci_passed=raw_pr.get("mergeable") is not False,
        code_coverage=0,
        complexity=estimate_complexity(
            raw_pr.get("additions") or 0, raw_pr.get("deletions") or 0
        ),
    )


def estimate_impact(
    additions: int,
    deletions: int,
    files_changed: int,
    repository_data: Mapping[str, Any] | None = None,
) -> float:
    """Seed impact score from change scope and repository popularity.

    Unlike the engine's impact scorer, the line-count bonus here is
    first-match only.
    """
    score: float = 50
    total_lines = additions + deletions

    for lower_bound, bonus in IMPACT_LINE_BRACKETS:
        if total_lines > lower_bound:
            score += bonus
            break

    if files_changed > 10:
        score += 10
    elif files_changed > 5:
        score += 5

    if repository_data:
        stars = repository_data.get("stars") or 0
        forks = repository_data.get("forks") or 0
        if stars > 100 or forks > 50:
            score += 10
        elif stars > 50 or forks > 20:
            score += 5

    return clamp(score)


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def calculate_time_to_complete(
    created_at: datetime | None,
    merged_at: datetime | None,
    closed_at: datetime | None,
) -> int | None:
    """Whole days (rounded up) from creation to merge or close; None while open."""
    completed = merged_at or closed_at
    if completed is None or created_at is None:
        return None
    return math.ceil((completed - created_at).total_seconds() / 86400)


def _repository_name(raw_pr: Mapping[str, Any]) -> str | None:
    repository = raw_pr.get("repository")
    if isinstance(repository, str):
        return repository
    if isinstance(repository, Mapping):
        full_name = repository.get("full_name")
        return full_name if isinstance(full_name, str) else None
    base = raw_pr.get("base")
    base_repo = base.get("repo") if isinstance(base, Mapping) else None
    if not isinstance(base_repo, Mapping):
        return None
    full_name = base_repo.get("full_name")
    return full_name if isinstance(full_name, str) else None


def _repository_data(raw_pr: Mapping[str, Any]) -> Mapping[str, Any] | None:
    return raw_pr.get("repository_data") or raw_pr.get("repositoryData")


def extract_features(raw_pr: Mapping[str, Any]) -> PRRatingInput:
    """Build a :class:`PRRatingInput` from a GitHub pull request payload.

    GitHub has no notion of a deadline, so ``deadline`` is always None and
    the time factor is driven by ``time_to_complete`` alone.

    Raises:
        FeatureExtractionError: If the payload cannot be interpreted.
    """
    if not isinstance(raw_pr, Mapping):
        raise FeatureExtractionError(
            f"Pull request payload must be an object, got {type(raw_pr).__name__}"
        )
    pr_id = str(raw_pr.get("id")) if raw_pr.get("id") is not None else None
    try:
        title = raw_pr.get("title") or ""
        body = raw_pr.get("body") or ""
        additions = raw_pr.get("additions") or 0
        deletions = raw_pr.get("deletions") or 0
        changed_files = raw_pr.get("changed_files") or 0
        created_at = _parse_timestamp(raw_pr.get("created_at"))
        merged_at = _parse_timestamp(raw_pr.get("merged_at"))
        closed_at = _parse_timestamp(raw_pr.get("closed_at"))
        user = raw_pr.get("user") or {}

        return PRRatingInput(
            priority=determine_priority(title, body, raw_pr.get("labels")),
            lines_added=additions,
            lines_deleted=deletions,
            files_changed=changed_files,
            commits=raw_pr.get("commits") or 1,
            time_to_complete=calculate_time_to_complete(created_at, merged_at, closed_at),
            deadline=None,
            relevance_score=estimate_relevance(title, body),
            quality_indicators=analyze_quality_indicators(raw_pr),
            impact_score=estimate_impact(
                additions, deletions, changed_files, _repository_data(raw_pr)
            ),
            created_at=created_at,
            merged_at=merged_at,
            author=user.get("login"),
            repository=_repository_name(raw_pr),
            title=title,
            description=body,
        )
    except (TypeError, ValueError, AttributeError, ValidationError) as exc:
        raise FeatureExtractionError(
            f"Cannot extract rating features from PR {pr_id}: {exc}", pr_id=pr_id
        ) from exc


def extract_identity(raw_pr: Mapping[str, Any]) -> PRIdentity:
    """Pull the identifiers needed to store a rating for *raw_pr*.

    Raises:
        FeatureExtractionError: If the payload is not an object or the PR
            id or author is missing.
    """
    if not isinstance(raw_pr, Mapping):
        raise FeatureExtractionError(
            f"Pull request payload must be an object, got {type(raw_pr).__name__}"
        )
    pr_id = raw_pr.get("id")
    user = raw_pr.get("user")
    if pr_id is None or not isinstance(user, Mapping) or user.get("id") is None:
        raise FeatureExtractionError(
            "Pull request payload is missing its id or author", pr_id=None if pr_id is None else str(pr_id)
        )

    repository = _repository_name(raw_pr)
    owner = repository.split("/")[0] if repository else str(user.get("login") or user["id"])

    try:
        return PRIdentity(
            pr_id=str(pr_id),
            contributor_id=str(user["id"]),
            organization_id=f"org_{owner}",
            author=str(user.get("login") or user["id"]),
            repository=repository,
            pr_number=raw_pr.get("number"),
            pr_url=raw_pr.get("html_url"),
            avatar_url=user.get("avatar_url"),
        )
    except ValidationError as exc:
        raise FeatureExtractionError(
            f"Cannot read identity of PR {pr_id}: {exc}", pr_id=str(pr_id)
        ) from exc
