"""PRAISE - weighted ratings for GitHub pull requests."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from praise.aggregation import aggregate_contributor, aggregate_organization
from praise.config import PraiseConfig, RatingWeights
from praise.exceptions import ConfigError, PraiseError
from praise.features import extract_features
from praise.models import (
    ContributorRating,
    OrganizationRatingStats,
    PRRating,
    PRRatingInput,
    RatingLevel,
)
from praise.scorer import RatingEngine
from praise.service import RatingService, rate_pull_requests, rate_user

try:
    __version__ = version("praise")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "ConfigError",
    "ContributorRating",
    "OrganizationRatingStats",
    "PRRating",
    "PRRatingInput",
    "PraiseConfig",
    "PraiseError",
    "RatingEngine",
    "RatingLevel",
    "RatingService",
    "RatingWeights",
    "__version__",
    "aggregate_contributor",
    "aggregate_organization",
    "extract_features",
    "rate_pull_requests",
    "rate_user",
]
