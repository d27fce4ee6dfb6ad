"""Terminal and JSON output for PR and contributor ratings."""

from __future__ import annotations

import click
from pydantic import BaseModel

from praise.models import (
    Component,
    ContributorRating,
    OrganizationRatingStats,
    RatingLevel,
    RatingRecord,
)

_RATING_LEVEL_COLORS: dict[RatingLevel, str] = {
    RatingLevel.EXCELLENT: "green",
    RatingLevel.VERY_GOOD: "green",
    RatingLevel.GOOD: "cyan",
    RatingLevel.SATISFACTORY: "yellow",
    RatingLevel.AVERAGE: "yellow",
    RatingLevel.BELOW_AVERAGE: "red",
    RatingLevel.POOR: "red",
    RatingLevel.NO_DATA: "white",
}

_COMPONENT_LABELS: dict[Component, str] = {
    Component.PRIORITY: "Priority",
    Component.CODE_AMOUNT: "Code Amount",
    Component.TIME_FACTOR: "Time Factor",
    Component.RELEVANCE: "Relevance",
    Component.QUALITY: "Quality",
    Component.IMPACT: "Impact",
}


def _styled_level(level: RatingLevel) -> str:
    color = _RATING_LEVEL_COLORS.get(level, "white")
    return click.style(level.value.upper(), fg=color, bold=True)


def format_rating_record(record: RatingRecord, verbose: bool = False) -> str:
    """One-line summary of a rated PR, with the breakdown when *verbose*."""
    rating = record.rating
    github = record.github
    if github is not None and github.repository and github.pr_number is not None:
        label = f"{github.repository}#{github.pr_number}"
    else:
        label = record.pr_id
    title = record.rating_input.title if record.rating_input else ""

    lines = [f"{label}: {_styled_level(rating.rating_level)} ({rating.total_score}/100) {title}".rstrip()]

    if verbose:
        for component, entry in rating.breakdown.items():
            lines.append(
                f"  {_COMPONENT_LABELS[component]}: {entry.score:g} "
                f"x {entry.weight:g} = {entry.weighted_score}"
            )
    return "\n".join(lines)


def format_contributor_rating(summary: ContributorRating, verbose: bool = False) -> str:
    """Format a contributor's aggregate rating for terminal display."""
    score_styled = click.style(f"{summary.average_score}/100", bold=True)
    name = summary.username or summary.contributor_id or "contributor"

    lines: list[str] = [
        f"{name}: {_styled_level(summary.rating_level)} ({score_styled})",
        f"Rated PRs: {summary.total_prs} | Trend: {summary.recent_trend.value}",
    ]

    if verbose and summary.breakdown:
        lines.append("")
        lines.append("Component averages:")
        for component, score in summary.breakdown.items():
            lines.append(f"  {_COMPONENT_LABELS[component]}: {score}")

    return "\n".join(lines)


def format_organization_stats(stats: OrganizationRatingStats) -> str:
    lines = [
        f"Contributors: {stats.total_contributors} | Average rating: {stats.average_rating}",
    ]
    if stats.improvement_areas:
        lines.append("Improvement areas:")
        for area in stats.improvement_areas:
            lines.append(
                f"  - {_COMPONENT_LABELS[area.component]} ({area.average_score}): {area.description}"
            )
    return "\n".join(lines)


def format_json(model: BaseModel) -> str:
    """Format any rating model as JSON."""
    return model.model_dump_json(indent=2)
