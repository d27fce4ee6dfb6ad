"""Custom exception hierarchy for PRAISE."""

from __future__ import annotations

from datetime import datetime


class PraiseError(Exception):
    """Base exception for PRAISE."""


class ConfigError(PraiseError):
    """Error with configuration, such as rating weights that do not sum to 1.0."""


class FeatureExtractionError(PraiseError):
    """A raw pull request record could not be turned into rating input."""

    def __init__(self, message: str, pr_id: str | None = None):
        super().__init__(message)
        self.pr_id = pr_id


class GitHubAPIError(PraiseError):
    """Error from the GitHub API."""

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        rate_limit_remaining: int | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.rate_limit_remaining = rate_limit_remaining


class RateLimitExhaustedError(GitHubAPIError):
    """GitHub API rate limit exhausted."""

    def __init__(self, reset_at: datetime, rate_limit_remaining: int = 0):
        self.reset_at = reset_at
        super().__init__(
            f"Rate limit exhausted. Resets at {reset_at.isoformat()}",
            status_code=403,
            rate_limit_remaining=rate_limit_remaining,
        )


class UserNotFoundError(GitHubAPIError):
    """GitHub user not found."""

    def __init__(self, login: str):
        self.login = login
        super().__init__(f"User not found: {login}", status_code=404)
