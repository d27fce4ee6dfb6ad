"""Async GitHub REST client for fetching a user's pull requests."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import Any

import httpx

from praise.config import FetchConfig, PraiseConfig, load_config
from praise.exceptions import GitHubAPIError, RateLimitExhaustedError, UserNotFoundError

logger = logging.getLogger(__name__)

_GITHUB_BASE_URL = "https://api.github.com"


class GitHubClient:
    """Async GitHub API client returning raw pull request payloads.

    Payloads are returned as GitHub sends them, enriched with the
    repository full name and a ``repository_data`` summary (stars, forks)
    so :func:`praise.features.extract_features` can consume them directly.
    """

    def __init__(
        self,
        token: str | None = None,
        config: PraiseConfig | None = None,
    ) -> None:
        self._config = config if config is not None else load_config()
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "praise",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=_GITHUB_BASE_URL,
            headers=headers,
            timeout=self.fetch_config.timeout_seconds,
        )

    @property
    def fetch_config(self) -> FetchConfig:
        return self._config.fetch

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: dict[str, object] | None = None) -> Any:
        """GET a REST resource with error and rate-limit handling.

        Raises:
            RateLimitExhaustedError: On 403 with a rate-limit message or on 429.
            GitHubAPIError: For any other non-200 response.
        """
        response = await self._client.get(path, params=params)

        if response.status_code in (403, 429):
            try:
                body = response.json() if response.content else {}
            except ValueError:
                body = {}
            message = body.get("message", "") if isinstance(body, dict) else ""
            if response.status_code == 429 or "rate limit" in message.lower():
                reset_header = response.headers.get("X-RateLimit-Reset")
                if reset_header:
                    reset_at = datetime.fromtimestamp(int(reset_header), tz=UTC)
                else:
                    reset_at = datetime.now(UTC)
                raise RateLimitExhaustedError(reset_at=reset_at)

        if response.status_code != 200:
            remaining = response.headers.get("X-RateLimit-Remaining")
            raise GitHubAPIError(
                message=f"GitHub API returned {response.status_code} for {path}",
                status_code=response.status_code,
                rate_limit_remaining=int(remaining) if remaining else None,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise GitHubAPIError(
                message=f"GitHub API returned a non-JSON body for {path}",
                status_code=response.status_code,
            ) from exc

    async def fetch_user_repos(self, username: str) -> list[dict[str, Any]]:
        """Fetch the user's most recently updated repositories.

        Raises:
            UserNotFoundError: If GitHub does not know *username*.
        """
        try:
            repos = await self._get(
                f"/users/{username}/repos",
                params={"sort": "updated", "per_page": 100},
            )
        except GitHubAPIError as exc:
            if exc.status_code == 404:
                raise UserNotFoundError(login=username) from exc
            raise
        return list(repos)[: self.fetch_config.max_repos]

    async def fetch_repo_pulls(self, full_name: str) -> list[dict[str, Any]]:
        """Fetch recently updated pull requests (open and closed) for a repository."""
        pulls = await self._get(
            f"/repos/{full_name}/pulls",
            params={
                "state": "all",
                "sort": "updated",
                "per_page": self.fetch_config.max_prs_per_repo,
            },
        )
        return list(pulls)

    async def fetch_pull_detail(self, full_name: str, number: int) -> dict[str, Any]:
        """Fetch a single pull request, which includes diff and review statistics."""
        detail = await self._get(f"/repos/{full_name}/pulls/{number}")
        return dict(detail)

    @staticmethod
    def _repository_summary(repo: dict[str, Any]) -> dict[str, Any]:
        return {
            "name": repo.get("name"),
            "full_name": repo.get("full_name"),
            "description": repo.get("description"),
            "language": repo.get("language"),
            "stars": repo.get("stargazers_count", 0),
            "forks": repo.get("forks_count", 0),
        }

    async def fetch_user_prs(self, username: str) -> list[dict[str, Any]]:
        """Fetch the user's own pull requests across their recent repositories.

        Failures for an individual repository are logged and that
        repository is skipped. Results are sorted newest first.
        """
        repos = await self.fetch_user_repos(username)
        all_prs: list[dict[str, Any]] = []

        for index, repo in enumerate(repos):
            full_name = repo["full_name"]
            if index > 0 and self.fetch_config.request_delay_seconds > 0:
                await asyncio.sleep(self.fetch_config.request_delay_seconds)

            try:
                pulls = await self.fetch_repo_pulls(full_name)
            except (GitHubAPIError, httpx.HTTPError) as exc:
                logger.warning("Skipping %s: failed to fetch pull requests (%s)", full_name, exc)
                continue

            own = [pr for pr in pulls if (pr.get("user") or {}).get("login") == username]
            summary = self._repository_summary(repo)
            for pr in own:
                all_prs.append({**pr, "repository": full_name, "repository_data": summary})
            logger.debug("Fetched %d PRs from %s", len(own), full_name)

        all_prs.sort(key=lambda pr: pr.get("created_at") or "", reverse=True)
        return all_prs

    async def enrich_with_details(self, prs: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Merge per-PR detail (additions, deletions, commits, ...) into list payloads.

        A PR whose detail cannot be fetched keeps its list payload.
        """
        enriched: list[dict[str, Any]] = []
        for pr in prs:
            full_name = pr.get("repository")
            number = pr.get("number")
            if not isinstance(full_name, str) or number is None:
                enriched.append(pr)
                continue
            try:
                detail = await self.fetch_pull_detail(full_name, number)
            except (GitHubAPIError, httpx.HTTPError) as exc:
                logger.warning("Using list data for %s#%s: %s", full_name, number, exc)
                enriched.append(pr)
                continue
            enriched.append({**pr, **detail, "repository": full_name,
                             "repository_data": pr.get("repository_data")})
        return enriched
