"""Example: Rate a GitHub user's pull requests with PRAISE."""

from __future__ import annotations

import asyncio
import os

from praise import RatingService, rate_user


async def main() -> None:
    service = RatingService()
    result = await rate_user(
        "octocat",
        token=os.environ["GITHUB_TOKEN"],
        service=service,
    )

    for record in result.records:
        rating = record.rating
        print(f"PR {record.pr_id}: {rating.total_score}/100 ({rating.rating_level})")

    if result.failures:
        print(f"Skipped {len(result.failures)} PRs that could not be rated")

    for record in result.records[:1]:
        summary = service.contributor_rating(record.contributor_id)
        print(f"Contributor: {summary.username}")
        print(f"Average: {summary.average_score}/100 ({summary.rating_level})")
        print(f"Trend: {summary.recent_trend}")


if __name__ == "__main__":
    asyncio.run(main())
