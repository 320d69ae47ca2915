"""Fetch and parse a user's yearly contribution data.

Turns the raw GraphQL payloads into the models consumed by the metrics
layer. Parsing is kept separate from fetching so snapshots and fixtures can
be parsed without network access.
"""

import logging
from dataclasses import dataclass
from typing import Any

from gh_year_report.dates import year_window
from gh_year_report.github.graphql import PROFILE_LANGUAGES_PAGE, GraphQLClient
from gh_year_report.models import (
    ContributionCalendar,
    ContributionDay,
    ContributionLevel,
    ContributionWeek,
    RateLimitSnapshot,
    RepositoryContribution,
    UserProfile,
)

logger = logging.getLogger(__name__)


class UserNotFoundError(LookupError):
    """Raised when GitHub reports no user for the requested login."""

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(f"GitHub user '{username}' not found")


@dataclass(frozen=True)
class YearlyProfile:
    """Everything the profile query returns for one user and year."""

    profile: UserProfile
    calendar: ContributionCalendar
    repositories: list[RepositoryContribution]
    rate_limit: RateLimitSnapshot | None = None


def _parse_level(raw: str | None) -> ContributionLevel:
    try:
        return ContributionLevel(raw or ContributionLevel.NONE.value)
    except ValueError:
        logger.debug("Unknown contribution level %r, using NONE", raw)
        return ContributionLevel.NONE


def parse_contribution_calendar(payload: dict[str, Any] | None) -> ContributionCalendar:
    """Parse a GraphQL ``contributionCalendar`` object.

    Args:
        payload: Object with ``totalContributions`` and ``weeks`` of
            ``contributionDays``. None yields an empty calendar.

    Returns:
        ContributionCalendar in the order GitHub returned it.
    """
    if not payload:
        return ContributionCalendar()

    weeks = []
    for raw_week in payload.get("weeks") or []:
        days = tuple(
            ContributionDay(
                date=raw_day["date"],
                count=raw_day.get("contributionCount") or 0,
                level=_parse_level(raw_day.get("contributionLevel")),
            )
            for raw_day in raw_week.get("contributionDays") or []
        )
        weeks.append(ContributionWeek(days=days))

    return ContributionCalendar(
        total_contributions=payload.get("totalContributions") or 0,
        weeks=tuple(weeks),
    )


def _language_sizes(edges: list[dict[str, Any]]) -> dict[str, int]:
    sizes: dict[str, int] = {}
    for edge in edges:
        node = edge.get("node") or {}
        name = node.get("name")
        if name:
            sizes[name] = sizes.get(name, 0) + int(edge.get("size") or 0)
    return sizes


def parse_repository_contributions(
    payload: list[dict[str, Any]] | None,
) -> list[RepositoryContribution]:
    """Parse ``commitContributionsByRepository`` entries.

    Entries without a repository (e.g. deleted repositories) are skipped.
    """
    repositories = []
    for entry in payload or []:
        repo = entry.get("repository")
        if not repo:
            continue
        languages = (repo.get("languages") or {}).get("edges") or []
        repositories.append(
            RepositoryContribution(
                name_with_owner=repo["nameWithOwner"],
                url=repo.get("url") or "",
                description=repo.get("description"),
                stars=repo.get("stargazerCount") or 0,
                forks=repo.get("forkCount") or 0,
                commits=(entry.get("contributions") or {}).get("totalCount") or 0,
                languages=_language_sizes(languages),
            )
        )
    return repositories


def parse_user_profile(payload: dict[str, Any]) -> UserProfile:
    return UserProfile(
        login=payload["login"],
        name=payload.get("name") or "",
        bio=payload.get("bio") or "",
        avatar_url=payload.get("avatarUrl") or "",
        followers=(payload.get("followers") or {}).get("totalCount") or 0,
        following=(payload.get("following") or {}).get("totalCount") or 0,
    )


def parse_rate_limit(payload: dict[str, Any] | None) -> RateLimitSnapshot | None:
    if not payload:
        return None
    return RateLimitSnapshot.model_validate(payload)


async def _complete_languages(
    graphql: GraphQLClient,
    raw_repositories: list[dict[str, Any]],
    repositories: list[RepositoryContribution],
) -> list[RepositoryContribution]:
    """Re-fetch the full language list of repositories with truncated languages."""
    by_name = {
        entry["repository"]["nameWithOwner"]: entry["repository"]
        for entry in raw_repositories
        if entry.get("repository")
    }

    completed = []
    for repo in repositories:
        raw = by_name.get(repo.name_with_owner) or {}
        page_info = (raw.get("languages") or {}).get("pageInfo") or {}
        if not page_info.get("hasNextPage"):
            completed.append(repo)
            continue

        edges = [edge async for edge in graphql.paginate_repository_languages(repo.name_with_owner)]
        logger.debug(
            "Completed %d languages for %s (first page held %d)",
            len(edges),
            repo.name_with_owner,
            PROFILE_LANGUAGES_PAGE,
        )
        completed.append(repo.model_copy(update={"languages": _language_sizes(edges)}))
    return completed


async def fetch_yearly_profile(graphql: GraphQLClient, username: str, year: int) -> YearlyProfile:
    """Fetch a user's profile, contribution calendar and repositories for ``year``.

    Raises:
        UserNotFoundError: If the login does not exist.
        GraphQLError: If the query fails.
    """
    since, until = year_window(year)
    data = await graphql.query_yearly_profile(username, since, until)

    user = data.get("user")
    if not user:
        raise UserNotFoundError(username)

    collection = user.get("contributionsCollection") or {}
    raw_repositories = collection.get("commitContributionsByRepository") or []

    repositories = parse_repository_contributions(raw_repositories)
    repositories = await _complete_languages(graphql, raw_repositories, repositories)

    profile = YearlyProfile(
        profile=parse_user_profile(user),
        calendar=parse_contribution_calendar(collection.get("contributionCalendar")),
        repositories=repositories,
        rate_limit=parse_rate_limit(data.get("rateLimit")),
    )
    logger.info(
        "Fetched %s for %d: %d contributions across %d repositories",
        profile.profile.login,
        year,
        profile.calendar.total_contributions,
        len(profile.repositories),
    )
    return profile


def issue_search_query(username: str, year: int) -> str:
    return f"author:{username} is:issue created:{year}-01-01..{year}-12-31"


async def fetch_issue_count(graphql: GraphQLClient, username: str, year: int) -> int:
    """Count issues the user opened during ``year``."""
    count = await graphql.query_issue_count(issue_search_query(username, year))
    logger.info("Found %d issues opened by %s in %d", count, username, year)
    return count
