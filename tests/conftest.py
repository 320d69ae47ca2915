"""Test fixtures for gh-year-report.

Provides fixtures for:
- Contribution calendars built from a start date and daily counts
- GraphQL payloads shaped like the GitHub profile query response
- A report model ready to render
"""

from collections.abc import Callable, Sequence
from datetime import date, timedelta
from typing import Any
from zoneinfo import ZoneInfo

import pytest

from gh_year_report.metrics.statistics import derive_yearly_statistics
from gh_year_report.models import (
    ContributionCalendar,
    ContributionDay,
    ContributionLevel,
    ContributionWeek,
    TopLanguage,
    TopRepository,
    UserProfile,
)
from gh_year_report.report.model import (
    ReportModel,
    build_report_model,
    with_language_placeholders,
    with_repo_placeholders,
)
from gh_year_report.summary import SummaryRequest, build_fallback_summary

CalendarFactory = Callable[[date, Sequence[int]], ContributionCalendar]


def _level(count: int) -> ContributionLevel:
    if count == 0:
        return ContributionLevel.NONE
    if count < 3:
        return ContributionLevel.FIRST_QUARTILE
    if count < 6:
        return ContributionLevel.SECOND_QUARTILE
    if count < 10:
        return ContributionLevel.THIRD_QUARTILE
    return ContributionLevel.FOURTH_QUARTILE


def build_calendar(start: date, counts: Sequence[int]) -> ContributionCalendar:
    """Build a contiguous calendar, breaking weeks on Sundays like GitHub does."""
    weeks: list[ContributionWeek] = []
    current: list[ContributionDay] = []
    for offset, count in enumerate(counts):
        day = start + timedelta(days=offset)
        if current and day.isoweekday() % 7 == 0:
            weeks.append(ContributionWeek(days=tuple(current)))
            current = []
        current.append(ContributionDay(date=day, count=count, level=_level(count)))
    if current:
        weeks.append(ContributionWeek(days=tuple(current)))
    return ContributionCalendar(total_contributions=sum(counts), weeks=tuple(weeks))


@pytest.fixture
def calendar_factory() -> CalendarFactory:
    """Factory building calendars from a start date and daily counts."""
    return build_calendar


@pytest.fixture
def utc() -> ZoneInfo:
    return ZoneInfo("UTC")


@pytest.fixture
def full_year_calendar() -> ContributionCalendar:
    """Every day of 2024 (a leap year), with activity on weekdays only.

    2024-01-01 is a Monday. Weekdays carry ``day_of_month % 5`` contributions,
    weekends carry none.
    """
    start = date(2024, 1, 1)
    counts = []
    for offset in range(366):
        day = start + timedelta(days=offset)
        counts.append(0 if day.isoweekday() >= 6 else day.day % 5)
    return build_calendar(start, counts)


@pytest.fixture
def yearly_profile_payload() -> dict[str, Any]:
    """``data`` of a profile query response for octocat in 2024."""
    return {
        "user": {
            "login": "octocat",
            "name": "The Octocat",
            "bio": "GitHub mascot",
            "avatarUrl": "https://avatars.githubusercontent.com/u/583231",
            "followers": {"totalCount": 1200},
            "following": {"totalCount": 9},
            "contributionsCollection": {
                "contributionCalendar": {
                    "totalContributions": 6,
                    "weeks": [
                        {
                            "contributionDays": [
                                {
                                    "date": "2024-01-01",
                                    "contributionCount": 1,
                                    "contributionLevel": "FIRST_QUARTILE",
                                },
                                {
                                    "date": "2024-01-02",
                                    "contributionCount": 0,
                                    "contributionLevel": "NONE",
                                },
                                {
                                    "date": "2024-01-03",
                                    "contributionCount": 5,
                                    "contributionLevel": "FOURTH_QUARTILE",
                                },
                            ]
                        }
                    ],
                },
                "commitContributionsByRepository": [
                    {
                        "contributions": {"totalCount": 12},
                        "repository": {
                            "nameWithOwner": "octocat/hello-world",
                            "url": "https://github.com/octocat/hello-world",
                            "description": "My first repository",
                            "stargazerCount": 42,
                            "forkCount": 7,
                            "languages": {
                                "pageInfo": {"hasNextPage": False, "endCursor": None},
                                "edges": [
                                    {"size": 3000, "node": {"name": "Python"}},
                                    {"size": 1000, "node": {"name": "Shell"}},
                                ],
                            },
                        },
                    },
                    {
                        "contributions": {"totalCount": 4},
                        "repository": {
                            "nameWithOwner": "octocat/spoon-knife",
                            "url": "https://github.com/octocat/spoon-knife",
                            "description": None,
                            "stargazerCount": 3,
                            "forkCount": 1,
                            "languages": {
                                "pageInfo": {"hasNextPage": False, "endCursor": None},
                                "edges": [{"size": 1000, "node": {"name": "HTML"}}],
                            },
                        },
                    },
                ],
            },
        },
        "rateLimit": {
            "limit": 5000,
            "cost": 1,
            "remaining": 4999,
            "resetAt": "2024-06-01T01:00:00Z",
        },
    }


@pytest.fixture
def report_model(full_year_calendar: ContributionCalendar) -> ReportModel:
    """Report model for octocat's 2024 with a fallback summary."""
    stats = derive_yearly_statistics(full_year_calendar, year=2024, time_zone=ZoneInfo("UTC"))
    top_repos = with_repo_placeholders(
        [
            TopRepository(
                name_with_owner="octocat/hello-world",
                url="https://github.com/octocat/hello-world",
                description="My first repository",
                stars=1500,
                forks=7,
                commits=120,
            ),
            TopRepository(name_with_owner="octocat/spoon-knife", commits=30),
        ]
    )
    top_languages = with_language_placeholders(
        [
            TopLanguage(language="Python", bytes=6000, ratio=0.6),
            TopLanguage(language="Shell", bytes=4000, ratio=0.4),
        ]
    )
    summary = build_fallback_summary(
        SummaryRequest(
            username="octocat",
            year=2024,
            stats=stats,
            issues_count=17,
            top_languages=top_languages,
            top_repos=top_repos,
        ),
        "AI is disabled or the API key is missing",
    )
    return build_report_model(
        profile=UserProfile(
            login="octocat",
            name="The Octocat",
            bio="GitHub mascot",
            followers=1200,
            following=9,
        ),
        year=2024,
        time_zone="UTC",
        stats=stats,
        issues_count=17,
        top_repos=top_repos,
        top_languages=top_languages,
        ai_summary=summary,
    )
