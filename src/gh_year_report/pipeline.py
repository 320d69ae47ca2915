"""End-to-end report generation.

Fetches the user's year from GitHub, derives statistics and rankings, asks for
an AI summary and assembles the report model and snapshot. Writing files is
left to the caller so dry runs share the same path.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime

from gh_year_report.config import Config
from gh_year_report.dates import resolve_report_year, resolve_time_zone
from gh_year_report.github.auth import GitHubAuth
from gh_year_report.github.contributions import fetch_issue_count, fetch_yearly_profile
from gh_year_report.github.graphql import GraphQLClient
from gh_year_report.github.http import GitHubClient
from gh_year_report.metrics.rankings import derive_top_languages, derive_top_repositories
from gh_year_report.metrics.statistics import derive_yearly_statistics
from gh_year_report.report.model import (
    ReportModel,
    ReportSnapshot,
    build_report_model,
    build_snapshot,
    with_language_placeholders,
    with_repo_placeholders,
)
from gh_year_report.summary import SummaryRequest, generate_ai_summary

logger = logging.getLogger(__name__)

SUPPORTED_YEAR_MODES = ("current",)


class ConfigurationError(ValueError):
    """Raised when the configuration cannot produce a report."""


@dataclass(frozen=True)
class GenerationResult:
    model: ReportModel
    snapshot: ReportSnapshot


async def generate_report(
    config: Config,
    *,
    auth: GitHubAuth | None = None,
    now: datetime | None = None,
) -> GenerationResult:
    """Build the report model and snapshot for the configured user and year.

    Args:
        config: Validated configuration, with CLI overrides already applied.
        auth: GitHub credentials; loaded from the configured sources if None.
        now: Clock override used to resolve the current year.

    Returns:
        GenerationResult with the report model and its snapshot.

    Raises:
        ConfigurationError: If no username is configured.
        AuthenticationError: If no valid GitHub token is available.
        UserNotFoundError: If the login does not exist.
        GraphQLError: If a GitHub query fails.
        MalformedCalendarError: If GitHub returns an inconsistent calendar.
    """
    report_config = config.report
    if report_config.year_mode not in SUPPORTED_YEAR_MODES:
        logger.warning(
            "Year mode '%s' is ignored. Only 'current' mode is supported.",
            report_config.year_mode,
        )

    username = config.github.username.strip()
    if not username:
        msg = "A GitHub username is required (set github.username, GH_USERNAME or --username)"
        raise ConfigurationError(msg)

    tz = resolve_time_zone(report_config.time_zone)
    year = resolve_report_year(report_config.year, tz, now)
    logger.info("Generating %d report for %s (%s)", year, username, report_config.time_zone)

    auth = auth or GitHubAuth(token_env=config.github.auth.token_env)
    async with GitHubClient(
        auth=auth,
        timeout=config.github.timeout_seconds,
        max_retries=config.github.max_retries,
    ) as http:
        graphql = GraphQLClient(http)
        yearly, issues_count = await asyncio.gather(
            fetch_yearly_profile(graphql, username, year),
            fetch_issue_count(graphql, username, year),
        )

    stats = derive_yearly_statistics(
        yearly.calendar,
        year=year,
        time_zone=tz,
        strict=report_config.strict_calendar,
    )
    top_repos = with_repo_placeholders(
        derive_top_repositories(yearly.repositories, report_config.top_repos),
        report_config.top_repos,
    )
    top_languages = with_language_placeholders(
        derive_top_languages(yearly.repositories, report_config.top_languages),
        report_config.top_languages,
    )

    ai_summary = await generate_ai_summary(
        SummaryRequest(
            username=yearly.profile.login,
            year=year,
            stats=stats,
            issues_count=issues_count,
            top_languages=top_languages,
            top_repos=top_repos,
        ),
        config.ai,
        config.ai.resolve_api_key(),
    )

    model = build_report_model(
        profile=yearly.profile,
        year=year,
        time_zone=report_config.time_zone,
        stats=stats,
        issues_count=issues_count,
        top_repos=top_repos,
        top_languages=top_languages,
        ai_summary=ai_summary,
    )
    snapshot = build_snapshot(model, rate_limit=yearly.rate_limit, generated_at=now)
    return GenerationResult(model=model, snapshot=snapshot)
