"""Yearly statistics derived from a contribution calendar.

Produces the ``YearlyStatistics`` record used by the report renderers, the AI
summary and the JSON snapshot.

Policies:
    - The calendar is validated once up front. Days must be strictly
      ascending and contiguous, and only the first and last week may hold
      fewer than seven days.
    - Days outside Jan 1 .. Dec 31 of the report year (padding from partial
      boundary weeks) are kept in ``heatmapWeeks`` but excluded from every
      aggregate, from the average's denominator and from the streak/gap scan.
      With ``strict=True`` they are rejected instead.
    - Month and weekday buckets use the day's UTC midnight converted into the
      report time zone.
    - Ties: earliest date, earliest month and lowest weekday index win. Runs
      of equal length keep the earlier run.
    - ``averageContributionsPerDay`` is rounded half-up to two decimals.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from zoneinfo import ZoneInfo

from gh_year_report.dates import month_index, weekday_index, year_bounds
from gh_year_report.models import ContributionCalendar, ContributionDay, YearlyStatistics

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7
AVERAGE_QUANTUM = Decimal("0.01")


class MalformedCalendarError(ValueError):
    """Raised when a calendar violates its structural invariants."""

    def __init__(self, index: int, reason: str) -> None:
        self.index = index
        self.reason = reason
        super().__init__(f"Malformed contribution calendar at day index {index}: {reason}")


@dataclass
class _Run:
    length: int = 0
    start: date | None = None
    end: date | None = None


@dataclass
class _RunTracker:
    """Tracks the current and longest run of consecutive matching days."""

    best: _Run = field(default_factory=_Run)
    length: int = 0
    start: date | None = None
    end: date | None = None

    def extend(self, day: date) -> None:
        if self.length == 0:
            self.start = day
        self.length += 1
        self.end = day

    def close(self) -> None:
        # Strictly greater: an equal-length later run never replaces the earlier one.
        if self.length > self.best.length:
            self.best = _Run(self.length, self.start, self.end)
        self.length = 0
        self.start = None
        self.end = None


def flatten_calendar(calendar: ContributionCalendar) -> list[ContributionDay]:
    """Flatten a calendar into a validated, chronologically ordered day list.

    Args:
        calendar: Calendar to flatten.

    Returns:
        Days in calendar order.

    Raises:
        MalformedCalendarError: If a week has the wrong size, or days are
            duplicated, out of order or missing.
    """
    days: list[ContributionDay] = []
    last_week = len(calendar.weeks) - 1

    for week_index, week in enumerate(calendar.weeks):
        size = len(week.days)
        is_boundary = week_index in (0, last_week)
        if size > DAYS_PER_WEEK or (size < DAYS_PER_WEEK and not is_boundary) or size == 0:
            raise MalformedCalendarError(
                len(days),
                f"week {week_index} has {size} days",
            )
        days.extend(week.days)

    for index in range(1, len(days)):
        previous = days[index - 1].date
        current = days[index].date
        delta = (current - previous).days
        if delta == 0:
            raise MalformedCalendarError(index, f"duplicate date {current.isoformat()}")
        if delta < 0:
            raise MalformedCalendarError(
                index,
                f"{current.isoformat()} follows {previous.isoformat()}",
            )
        if delta > 1:
            raise MalformedCalendarError(
                index,
                f"{delta - 1} missing day(s) before {current.isoformat()}",
            )

    return days


def round_half_up(value: Decimal, quantum: Decimal = AVERAGE_QUANTUM) -> float:
    """Round a decimal half-up to ``quantum`` and return it as a float."""
    return float(value.quantize(quantum, rounding=ROUND_HALF_UP))


def derive_yearly_statistics(
    calendar: ContributionCalendar,
    *,
    year: int,
    time_zone: ZoneInfo,
    strict: bool = False,
) -> YearlyStatistics:
    """Derive yearly statistics from a contribution calendar.

    Args:
        calendar: Contribution calendar for the report year. Not modified.
        year: Report year; days outside it are ignored (or rejected in
            strict mode).
        time_zone: Zone used to bucket days into months and weekdays.
        strict: Reject days outside the report year.

    Returns:
        Fully populated statistics. An empty calendar yields zeros and null
        dates.

    Raises:
        MalformedCalendarError: If the calendar is structurally invalid.
    """
    days = flatten_calendar(calendar)
    first_day, last_day = year_bounds(year)

    in_year: list[ContributionDay] = []
    for index, day in enumerate(days):
        if first_day <= day.date <= last_day:
            in_year.append(day)
        elif strict:
            raise MalformedCalendarError(
                index,
                f"{day.date.isoformat()} is outside {year}",
            )

    total = 0
    monthly = [0] * 12
    weekday = [0] * 7
    streaks = _RunTracker()
    gaps = _RunTracker()
    max_count = 0
    max_date: date | None = None

    for day in in_year:
        count = day.count
        total += count
        monthly[month_index(day.date, time_zone)] += count
        weekday[weekday_index(day.date, time_zone)] += count

        if count > 0:
            streaks.extend(day.date)
            gaps.close()
        else:
            gaps.extend(day.date)
            streaks.close()

        if count > max_count:
            max_count = count
            max_date = day.date

    streaks.close()
    gaps.close()

    max_month: str | None = None
    best_month_total = 0
    for idx, value in enumerate(monthly):
        if value > best_month_total:
            best_month_total = value
            max_month = f"{year}-{idx + 1:02d}"

    busiest = 0
    for idx in range(1, 7):
        if weekday[idx] > weekday[busiest]:
            busiest = idx

    day_count = len(in_year)
    average = round_half_up(Decimal(total) / Decimal(day_count)) if day_count else 0.0

    if calendar.total_contributions != total and in_year:
        logger.debug(
            "Calendar reports %d contributions, %d fall within %d",
            calendar.total_contributions,
            total,
            year,
        )

    stats = YearlyStatistics(
        total_contributions=total,
        average_contributions_per_day=average,
        monthly_contributions=tuple(monthly),
        weekday_contributions=tuple(weekday),
        busiest_weekday=busiest,
        max_contributions_in_a_day=max_count,
        max_contributions_date=max_date,
        max_contributions_month=max_month,
        longest_streak=streaks.best.length,
        longest_streak_start_date=streaks.best.start,
        longest_streak_end_date=streaks.best.end,
        longest_gap=gaps.best.length,
        longest_gap_start_date=gaps.best.start,
        longest_gap_end_date=gaps.best.end,
        heatmap_weeks=calendar.weeks,
    )

    logger.debug(
        "Derived statistics for %d: %d days, total=%d, streak=%d, gap=%d",
        year,
        day_count,
        total,
        stats.longest_streak,
        stats.longest_gap,
    )
    return stats
