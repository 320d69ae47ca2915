"""Data models shared by the fetchers, metrics and report layers.

All models are immutable and serialize with the camelCase field names used by
the JSON snapshot (``model_dump(mode="json", by_alias=True)``). Python code
uses the snake_case attribute names.

Schema:
    ContributionCalendar
        - totalContributions (int)
        - weeks (list[ContributionWeek])
    ContributionWeek
        - days (list[ContributionDay])
    ContributionDay
        - date (ISO date), count (int), level (ContributionLevel)
    RepositoryContribution
        - nameWithOwner, url, description, stars, forks, commits
        - languages (dict[str, int]): bytes per language
    YearlyStatistics, TopRepository, TopLanguage: derived records
    UserProfile, RateLimitSnapshot: report header and snapshot metadata
"""

from collections.abc import Iterator
from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Frozen model that accepts and emits camelCase keys."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json_dict(self) -> dict[str, Any]:
        """Dump to a JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class ContributionLevel(str, Enum):
    """Quartile bucket GitHub assigns to a day's contribution count."""

    NONE = "NONE"
    FIRST_QUARTILE = "FIRST_QUARTILE"
    SECOND_QUARTILE = "SECOND_QUARTILE"
    THIRD_QUARTILE = "THIRD_QUARTILE"
    FOURTH_QUARTILE = "FOURTH_QUARTILE"


class ContributionDay(CamelModel):
    """A single calendar day."""

    date: date
    count: int = Field(ge=0)
    level: ContributionLevel = ContributionLevel.NONE


class ContributionWeek(CamelModel):
    """A calendar week, Sunday first."""

    days: tuple[ContributionDay, ...] = ()


class ContributionCalendar(CamelModel):
    """The contribution calendar for the queried range."""

    total_contributions: int = Field(default=0, ge=0)
    weeks: tuple[ContributionWeek, ...] = ()

    def iter_days(self) -> Iterator[ContributionDay]:
        """Yield days in calendar order."""
        for week in self.weeks:
            yield from week.days


class RepositoryContribution(CamelModel):
    """Commits a user made to one repository, with its language byte sizes."""

    name_with_owner: str
    url: str = ""
    description: str | None = None
    stars: int = 0
    forks: int = 0
    commits: int = 0
    languages: dict[str, int] = Field(default_factory=dict)


class TopRepository(CamelModel):
    """A ranked repository row."""

    name_with_owner: str
    url: str = ""
    description: str | None = None
    stars: int = 0
    forks: int = 0
    commits: int = 0


class TopLanguage(CamelModel):
    """A ranked language row."""

    language: str
    bytes: int = 0
    ratio: float = 0.0


class YearlyStatistics(CamelModel):
    """Derived statistics for one user and one year."""

    total_contributions: int = 0
    average_contributions_per_day: float = 0.0
    monthly_contributions: tuple[int, ...] = (0,) * 12
    weekday_contributions: tuple[int, ...] = (0,) * 7
    busiest_weekday: int = Field(default=0, ge=0, le=6)
    max_contributions_in_a_day: int = 0
    max_contributions_date: date | None = None
    max_contributions_month: str | None = None
    longest_streak: int = 0
    longest_streak_start_date: date | None = None
    longest_streak_end_date: date | None = None
    longest_gap: int = 0
    longest_gap_start_date: date | None = None
    longest_gap_end_date: date | None = None
    heatmap_weeks: tuple[ContributionWeek, ...] = ()


class UserProfile(CamelModel):
    """Public profile fields shown in the report header."""

    login: str
    name: str = ""
    bio: str = ""
    avatar_url: str = ""
    followers: int = 0
    following: int = 0

    @property
    def display_name(self) -> str:
        return self.name or self.login


class RateLimitSnapshot(CamelModel):
    """GraphQL rate limit reported alongside the profile query."""

    limit: int = 0
    cost: int = 0
    remaining: int = 0
    reset_at: str | None = None
