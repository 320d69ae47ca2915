"""Repository and language rankings.

Both rankings are computed from the per-repository commit contributions of
the report year, independent of the contribution calendar.

Ordering:
    - Repositories: commits descending, then nameWithOwner ascending.
    - Languages: aggregated bytes descending, then language name ascending.

Placeholder rows for short rankings are added by the report layer.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable

from gh_year_report.models import RepositoryContribution, TopLanguage, TopRepository

logger = logging.getLogger(__name__)


def derive_top_repositories(
    contributions: Iterable[RepositoryContribution],
    limit: int,
) -> list[TopRepository]:
    """Rank repositories by commits made during the year.

    Args:
        contributions: Per-repository contributions.
        limit: Maximum number of rows to return.

    Returns:
        Ranked repositories, at most ``limit`` long.
    """
    ranked = sorted(contributions, key=lambda repo: (-repo.commits, repo.name_with_owner))

    return [
        TopRepository(
            name_with_owner=repo.name_with_owner,
            url=repo.url,
            description=repo.description,
            stars=repo.stars,
            forks=repo.forks,
            commits=repo.commits,
        )
        for repo in ranked[: max(limit, 0)]
    ]


def aggregate_language_bytes(contributions: Iterable[RepositoryContribution]) -> dict[str, int]:
    """Sum language byte sizes across repositories."""
    totals: dict[str, int] = defaultdict(int)
    for repo in contributions:
        for language, size in repo.languages.items():
            totals[language] += size
    return dict(totals)


def derive_top_languages(
    contributions: Iterable[RepositoryContribution],
    limit: int,
) -> list[TopLanguage]:
    """Rank languages by their share of bytes across all repositories.

    Ratios are computed against the grand total before truncation, so the
    returned ratios need not sum to one.

    Args:
        contributions: Per-repository contributions.
        limit: Maximum number of rows to return.

    Returns:
        Ranked languages, at most ``limit`` long.
    """
    totals = aggregate_language_bytes(contributions)
    grand_total = sum(totals.values())

    ranked = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
    logger.debug("Ranked %d languages over %d bytes", len(ranked), grand_total)

    return [
        TopLanguage(
            language=language,
            bytes=size,
            ratio=size / grand_total if grand_total > 0 else 0.0,
        )
        for language, size in ranked[: max(limit, 0)]
    ]
