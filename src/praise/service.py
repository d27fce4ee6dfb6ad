"""Rating workflows: batch rating, storage, and on-demand aggregation."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from praise.aggregation import (
    aggregate_contributor,
    aggregate_organization,
    build_leaderboard,
    organization_analytics,
)
from praise.config import PraiseConfig, load_config
from praise.exceptions import FeatureExtractionError
from praise.features import extract_features, extract_identity
from praise.models import (
    BatchRatingResult,
    ContributorRating,
    LeaderboardEntry,
    OrganizationAnalytics,
    OrganizationRatingStats,
    PRIdentity,
    PRRatingInput,
    RatingFailure,
    RatingRecord,
)
from praise.scorer import RatingEngine
from praise.store import InMemoryRatingStore, RatingStore

logger = logging.getLogger(__name__)


def _record_for(
    engine: RatingEngine,
    rating_input: PRRatingInput,
    identity: PRIdentity,
    now: datetime | None,
) -> RatingRecord:
    rating = engine.rate(rating_input, now=now)
    return RatingRecord(
        id=f"rating_{identity.pr_id}",
        pr_id=identity.pr_id,
        contributor_id=identity.contributor_id,
        organization_id=identity.organization_id,
        rating=rating,
        created_at=now or datetime.now(UTC),
        rating_input=rating_input,
        github=identity,
    )


def rate_pull_requests(
    raw_prs: Iterable[Mapping[str, Any]],
    engine: RatingEngine | None = None,
    now: datetime | None = None,
) -> BatchRatingResult:
    """Rate each raw GitHub PR independently.

    A PR that cannot be interpreted is logged and reported in
    ``failures``; the rest of the batch is still rated.
    """
    engine = engine if engine is not None else RatingEngine()
    result = BatchRatingResult()

    for raw_pr in raw_prs:
        try:
            identity = extract_identity(raw_pr)
            rating_input = extract_features(raw_pr)
        except FeatureExtractionError as exc:
            logger.warning("Failed to generate rating for PR %s: %s", exc.pr_id, exc)
            result.failures.append(RatingFailure(pr_id=exc.pr_id, error=str(exc)))
            continue
        result.records.append(_record_for(engine, rating_input, identity, now))

    return result


class RatingService:
    """Rate pull requests and answer aggregate queries over a rating store."""

    def __init__(
        self,
        engine: RatingEngine | None = None,
        store: RatingStore | None = None,
    ) -> None:
        self.engine = engine if engine is not None else RatingEngine()
        self.store: RatingStore = store if store is not None else InMemoryRatingStore()

    def submit(self, record: RatingRecord) -> ContributorRating:
        """Store *record* and refresh its contributor's cached summary."""
        with self.store.contributor_lock(record.contributor_id):
            self.store.add(record)
            summary = self._aggregate(record.contributor_id)
            self.store.cache_summary(record.contributor_id, summary)
        return summary

    def rate(
        self,
        rating_input: PRRatingInput,
        identity: PRIdentity,
        now: datetime | None = None,
    ) -> RatingRecord:
        record = _record_for(self.engine, rating_input, identity, now)
        self.submit(record)
        return record

    def rate_batch(
        self, raw_prs: Iterable[Mapping[str, Any]], now: datetime | None = None
    ) -> BatchRatingResult:
        result = rate_pull_requests(raw_prs, self.engine, now=now)
        for record in result.records:
            self.submit(record)
        return result

    def _aggregate(self, contributor_id: str) -> ContributorRating:
        return aggregate_contributor(
            self.store.get_ratings_for(contributor_id),
            contributor_id=contributor_id,
            username=self.store.username_for(contributor_id),
        )

    def contributor_rating(self, contributor_id: str) -> ContributorRating:
        """Recompute a contributor's rating from their full history."""
        return self._aggregate(contributor_id)

    def organization_contributors(self, organization_id: str) -> list[ContributorRating]:
        return [self._aggregate(cid) for cid in self.store.contributors_in(organization_id)]

    def organization_stats(self, organization_id: str) -> OrganizationRatingStats:
        return aggregate_organization(self.organization_contributors(organization_id))

    def leaderboard(self, organization_id: str, limit: int = 10) -> list[LeaderboardEntry]:
        return build_leaderboard(self.organization_contributors(organization_id), limit=limit)

    def organization_analytics(self, organization_id: str) -> OrganizationAnalytics:
        return organization_analytics(self.store.get_records_for_organization(organization_id))


async def rate_user(
    username: str,
    token: str | None = None,
    config: PraiseConfig | None = None,
    service: RatingService | None = None,
) -> BatchRatingResult:
    """Convenience function: fetch a user's PRs from GitHub, rate and store them.

    Parameters
    ----------
    username:
        GitHub login whose pull requests are rated.
    token:
        GitHub token; falls back to the ``GITHUB_TOKEN`` env var.
    config:
        Optional configuration; defaults are used when *None*.
    service:
        Service holding the engine and store to rate into. A fresh
        in-memory service using *config*'s weights is created when *None*.
    """
    from praise.github_client import GitHubClient

    if config is None:
        config = load_config()
    if token is None:
        token = os.environ.get("GITHUB_TOKEN", "")
    if service is None:
        service = RatingService(engine=RatingEngine.from_config(config))

    async with GitHubClient(token=token, config=config) as client:
        prs = await client.fetch_user_prs(username)
        logger.info("Found %d PRs for %s", len(prs), username)
        prs = prs[: config.fetch.max_prs_to_rate]
        if config.fetch.fetch_pr_details:
            prs = await client.enrich_with_details(prs)

    result = service.rate_batch(prs)
    logger.info("Generated %d ratings for %s", len(result.records), username)
    return result
