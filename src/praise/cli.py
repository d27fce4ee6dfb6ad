"""Click-based CLI for PRAISE pull request ratings."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path

import click

from praise.config import load_config
from praise.exceptions import PraiseError
from praise.formatter import (
    format_contributor_rating,
    format_json,
    format_organization_stats,
    format_rating_record,
)
from praise.models import BatchRatingResult
from praise.scorer import RatingEngine
from praise.service import RatingService, rate_user


@click.group()
@click.version_option(package_name="praise")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """PRAISE - weighted ratings for GitHub pull requests."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _echo_results(
    result: BatchRatingResult,
    service: RatingService,
    verbose: bool,
    output_json: bool,
) -> None:
    contributor_ids = list(dict.fromkeys(r.contributor_id for r in result.records))
    summaries = [service.contributor_rating(cid) for cid in contributor_ids]

    if output_json:
        payload = {
            "ratings": [r.model_dump(mode="json") for r in result.records],
            "failures": [f.model_dump(mode="json") for f in result.failures],
            "contributors": [s.model_dump(mode="json") for s in summaries],
        }
        click.echo(json.dumps(payload, indent=2))
        return

    for record in result.records:
        click.echo(format_rating_record(record, verbose=verbose))
    if result.failures:
        click.echo(f"\nSkipped {len(result.failures)} PR(s) that could not be rated.")
    for summary in summaries:
        click.echo("")
        click.echo(format_contributor_rating(summary, verbose=verbose))

    organization_ids = list(dict.fromkeys(r.organization_id for r in result.records))
    if verbose:
        for org_id in organization_ids:
            click.echo(f"\n{org_id}")
            click.echo(format_organization_stats(service.organization_stats(org_id)))


@main.command("rate-user")
@click.argument("username")
@click.option("--token", envvar="GITHUB_TOKEN", help="GitHub token")
@click.option("--config", "config_path", default=None, help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Show component breakdowns")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def rate_user_command(
    username: str,
    token: str | None,
    config_path: str | None,
    verbose: bool,
    output_json: bool,
) -> None:
    """Fetch a GitHub user's pull requests and rate them."""
    if not token:
        click.echo("Error: GitHub token required. Set GITHUB_TOKEN or use --token.", err=True)
        sys.exit(1)

    try:
        config = load_config(config_path)
        service = RatingService(engine=RatingEngine.from_config(config))
        result = asyncio.run(
            rate_user(username, token=token, config=config, service=service)
        )
    except PraiseError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    if not result.records and not output_json:
        click.echo(f"No pull requests found for {username}.")
        return
    _echo_results(result, service, verbose, output_json)


@main.command("rate-file")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--config", "config_path", default=None, help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Show component breakdowns")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def rate_file(
    path: Path,
    config_path: str | None,
    verbose: bool,
    output_json: bool,
) -> None:
    """Rate pull requests from a JSON file of GitHub PR payloads."""
    try:
        payload = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        click.echo(f"Error: {path} is not valid JSON: {exc}", err=True)
        sys.exit(1)
    if isinstance(payload, dict):
        payload = [payload]
    if not isinstance(payload, list):
        click.echo("Error: expected a JSON array of pull requests.", err=True)
        sys.exit(1)

    try:
        config = load_config(config_path)
    except PraiseError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    service = RatingService(engine=RatingEngine.from_config(config))
    result = service.rate_batch(payload)
    _echo_results(result, service, verbose, output_json)


@main.command("show-config")
@click.option("--config", "config_path", default=None, help="Config file path")
def show_config(config_path: str | None) -> None:
    """Show the effective configuration, including rating weights."""
    try:
        config = load_config(config_path)
    except PraiseError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    click.echo(format_json(config))
