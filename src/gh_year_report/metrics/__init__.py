"""Statistics and ranking calculators for the yearly report."""

from gh_year_report.metrics.rankings import (
    aggregate_language_bytes,
    derive_top_languages,
    derive_top_repositories,
)
from gh_year_report.metrics.statistics import (
    MalformedCalendarError,
    derive_yearly_statistics,
    flatten_calendar,
)

__all__ = [
    "MalformedCalendarError",
    "aggregate_language_bytes",
    "derive_top_languages",
    "derive_top_repositories",
    "derive_yearly_statistics",
    "flatten_calendar",
]
