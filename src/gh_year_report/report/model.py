"""Report model and JSON snapshot.

The report model is what the renderers draw; the snapshot is the JSON record
written next to the SVG. Both are assembled from the derived statistics and
rankings, with short rankings padded by placeholder rows so the fixed layout
always has the same number of rows.

Snapshot schema (camelCase keys):
    generatedAt, year, timezone, username, aiMode, aiReason, rateLimit,
    stats, issuesCount, topRepos, topLanguages, aiSummary
"""

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from gh_year_report.models import (
    CamelModel,
    RateLimitSnapshot,
    TopLanguage,
    TopRepository,
    UserProfile,
    YearlyStatistics,
)
from gh_year_report.summary import AiSummary

logger = logging.getLogger(__name__)

REPO_ROWS = 3
LANGUAGE_ROWS = 5

REPO_PLACEHOLDER = TopRepository(
    name_with_owner="No repository data",
    url="",
    description="No repositories with commits to show this year.",
    stars=0,
    forks=0,
    commits=0,
)
LANGUAGE_PLACEHOLDER = TopLanguage(language="N/A", bytes=0, ratio=0.0)


def with_repo_placeholders(
    repos: Sequence[TopRepository], count: int = REPO_ROWS
) -> list[TopRepository]:
    """Truncate or pad a repository ranking to exactly ``count`` rows."""
    rows = list(repos[:count])
    rows.extend(REPO_PLACEHOLDER for _ in range(count - len(rows)))
    return rows


def with_language_placeholders(
    languages: Sequence[TopLanguage], count: int = LANGUAGE_ROWS
) -> list[TopLanguage]:
    """Truncate or pad a language ranking to exactly ``count`` rows."""
    rows = list(languages[:count])
    rows.extend(LANGUAGE_PLACEHOLDER for _ in range(count - len(rows)))
    return rows


class ReportModel(CamelModel):
    """Everything the renderers need to draw one report."""

    profile: UserProfile
    year: int
    time_zone: str
    stats: YearlyStatistics
    issues_count: int = 0
    top_repos: tuple[TopRepository, ...] = ()
    top_languages: tuple[TopLanguage, ...] = ()
    ai_summary: AiSummary


class ReportSnapshot(CamelModel):
    """JSON record of a generated report."""

    generated_at: str
    year: int
    timezone: str
    username: str
    ai_mode: str
    ai_reason: str | None = None
    rate_limit: RateLimitSnapshot | None = None
    stats: YearlyStatistics
    issues_count: int = 0
    top_repos: tuple[TopRepository, ...] = ()
    top_languages: tuple[TopLanguage, ...] = ()
    ai_summary: AiSummary


def iso_timestamp(moment: datetime | None = None) -> str:
    """UTC timestamp with millisecond precision and a "Z" suffix."""
    moment = moment or datetime.now(UTC)
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_report_model(
    *,
    profile: UserProfile,
    year: int,
    time_zone: str,
    stats: YearlyStatistics,
    issues_count: int,
    top_repos: Sequence[TopRepository],
    top_languages: Sequence[TopLanguage],
    ai_summary: AiSummary,
) -> ReportModel:
    """Assemble the report model from already padded rankings."""
    return ReportModel(
        profile=profile,
        year=year,
        time_zone=time_zone,
        stats=stats,
        issues_count=issues_count,
        top_repos=tuple(top_repos),
        top_languages=tuple(top_languages),
        ai_summary=ai_summary,
    )


def build_snapshot(
    model: ReportModel,
    rate_limit: RateLimitSnapshot | None = None,
    generated_at: datetime | None = None,
) -> ReportSnapshot:
    return ReportSnapshot(
        generated_at=iso_timestamp(generated_at),
        year=model.year,
        timezone=model.time_zone,
        username=model.profile.login,
        ai_mode=model.ai_summary.mode,
        ai_reason=model.ai_summary.reason,
        rate_limit=rate_limit,
        stats=model.stats,
        issues_count=model.issues_count,
        top_repos=model.top_repos,
        top_languages=model.top_languages,
        ai_summary=model.ai_summary,
    )


def model_from_snapshot(snapshot: ReportSnapshot) -> ReportModel:
    """Rebuild a report model from a snapshot.

    Snapshots do not carry the profile, so the header shows the login only.
    """
    return ReportModel(
        profile=UserProfile(login=snapshot.username),
        year=snapshot.year,
        time_zone=snapshot.timezone,
        stats=snapshot.stats,
        issues_count=snapshot.issues_count,
        top_repos=snapshot.top_repos,
        top_languages=snapshot.top_languages,
        ai_summary=snapshot.ai_summary,
    )


def build_dry_run_summary(snapshot: ReportSnapshot) -> dict[str, Any]:
    """Compact summary printed instead of writing files."""
    return {
        "generatedAt": snapshot.generated_at,
        "username": snapshot.username,
        "year": snapshot.year,
        "totalContributions": snapshot.stats.total_contributions,
        "averageContributionsPerDay": snapshot.stats.average_contributions_per_day,
        "maxContributionsMonth": snapshot.stats.max_contributions_month,
        "aiMode": snapshot.ai_mode,
        "issuesCount": snapshot.issues_count,
    }
