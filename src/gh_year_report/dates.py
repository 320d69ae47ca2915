"""Timezone-aware date helpers.

GitHub reports contribution days as plain ISO dates. The report buckets each
day by the calendar date its UTC-midnight instant falls on in the configured
time zone, so the same calendar can bucket differently for zones west of UTC.
Every helper here takes the zone explicitly; none of them consult the host's
local time zone.
"""

from datetime import UTC, date, datetime, time
from typing import NamedTuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from gh_year_report.config import MAX_REPORT_YEAR, MIN_REPORT_YEAR


class DateParts(NamedTuple):
    """Calendar components of an instant in a given zone."""

    year: int
    month: int
    day: int
    iso_date: str


def resolve_time_zone(name: str) -> ZoneInfo:
    """Look up an IANA time zone.

    Raises:
        ValueError: If the zone name is unknown.
    """
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        msg = f"Unknown time zone '{name}'"
        raise ValueError(msg) from e


def date_parts_in_time_zone(moment: datetime, tz: ZoneInfo) -> DateParts:
    """Split an aware instant into calendar parts in ``tz``.

    Naive datetimes are treated as UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    local = moment.astimezone(tz)
    return DateParts(local.year, local.month, local.day, local.date().isoformat())


def local_calendar_date(day: date, tz: ZoneInfo) -> date:
    """Date that the UTC midnight of ``day`` falls on in ``tz``."""
    return datetime.combine(day, time(0, 0), tzinfo=UTC).astimezone(tz).date()


def month_index(day: date, tz: ZoneInfo) -> int:
    """Zero-based month (0 = January) of ``day`` in ``tz``."""
    return local_calendar_date(day, tz).month - 1


def weekday_index(day: date, tz: ZoneInfo) -> int:
    """Weekday of ``day`` in ``tz`` with 0 = Sunday .. 6 = Saturday."""
    return local_calendar_date(day, tz).isoweekday() % 7


def today_in_time_zone(tz: ZoneInfo, now: datetime | None = None) -> date:
    """Current calendar date in ``tz``."""
    if now is None:
        now = datetime.now(UTC)
    return date.fromisoformat(date_parts_in_time_zone(now, tz).iso_date)


def validate_year(year: int) -> int:
    """Check that a report year is within the supported range.

    Raises:
        ValueError: If the year is out of range.
    """
    if not MIN_REPORT_YEAR <= year <= MAX_REPORT_YEAR:
        msg = f"Invalid year: {year}"
        raise ValueError(msg)
    return year


def resolve_report_year(arg_year: int | None, tz: ZoneInfo, now: datetime | None = None) -> int:
    """Pick the report year.

    An explicit year wins; otherwise the current year in ``tz`` is used.
    """
    if arg_year is not None:
        return validate_year(arg_year)
    return validate_year(today_in_time_zone(tz, now).year)


def year_bounds(year: int) -> tuple[date, date]:
    """First and last day of ``year``."""
    return date(year, 1, 1), date(year, 12, 31)


def year_window(year: int) -> tuple[str, str]:
    """ISO-8601 ``from``/``to`` timestamps covering ``year`` in UTC."""
    since = datetime(year, 1, 1, 0, 0, 0, tzinfo=UTC)
    until = datetime(year, 12, 31, 23, 59, 59, tzinfo=UTC)
    return since.isoformat().replace("+00:00", "Z"), until.isoformat().replace("+00:00", "Z")
