"""Tests for timezone-aware date helpers."""

from datetime import UTC, date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from gh_year_report.dates import (
    date_parts_in_time_zone,
    local_calendar_date,
    month_index,
    resolve_report_year,
    resolve_time_zone,
    today_in_time_zone,
    validate_year,
    weekday_index,
    year_bounds,
    year_window,
)

SHANGHAI = ZoneInfo("Asia/Shanghai")
LOS_ANGELES = ZoneInfo("America/Los_Angeles")


class TestResolveTimeZone:
    """Tests for time zone lookup."""

    def test_known_zone(self) -> None:
        """Test that IANA names resolve."""
        assert resolve_time_zone("Asia/Shanghai") == SHANGHAI

    def test_unknown_zone(self) -> None:
        """Test that unknown names raise ValueError."""
        with pytest.raises(ValueError, match="Unknown time zone 'Mars/Olympus'"):
            resolve_time_zone("Mars/Olympus")


class TestDateParts:
    """Tests for splitting instants into calendar parts."""

    def test_aware_instant(self) -> None:
        """Test conversion of an aware instant into another zone."""
        parts = date_parts_in_time_zone(datetime(2024, 12, 31, 20, 0, tzinfo=UTC), SHANGHAI)

        assert parts == (2025, 1, 1, "2025-01-01")

    def test_naive_instant_is_utc(self) -> None:
        """Test that naive datetimes are interpreted as UTC."""
        parts = date_parts_in_time_zone(datetime(2024, 3, 10, 1, 0), LOS_ANGELES)

        assert parts.iso_date == "2024-03-09"

    def test_other_offset(self) -> None:
        """Test instants carrying a non-UTC offset."""
        moment = datetime(2024, 6, 1, 23, 0, tzinfo=timezone(timedelta(hours=-5)))

        assert date_parts_in_time_zone(moment, SHANGHAI).iso_date == "2024-06-02"


class TestBuckets:
    """Tests for month and weekday buckets of calendar days."""

    def test_local_calendar_date(self) -> None:
        """Test where a day's UTC midnight falls in each zone."""
        day = date(2024, 3, 1)

        assert local_calendar_date(day, SHANGHAI) == date(2024, 3, 1)
        assert local_calendar_date(day, LOS_ANGELES) == date(2024, 2, 29)

    def test_weekday_index_sunday_first(self) -> None:
        """Test that Sunday is 0 and Saturday is 6."""
        assert weekday_index(date(2024, 1, 7), SHANGHAI) == 0
        assert weekday_index(date(2024, 1, 6), SHANGHAI) == 6
        assert weekday_index(date(2024, 1, 1), SHANGHAI) == 1

    def test_weekday_index_west_of_utc(self) -> None:
        """Test that a Sunday becomes Saturday west of UTC."""
        assert weekday_index(date(2024, 1, 7), LOS_ANGELES) == 6

    def test_month_index(self) -> None:
        """Test zero-based months, shifted west of UTC on the first."""
        assert month_index(date(2024, 1, 15), SHANGHAI) == 0
        assert month_index(date(2024, 12, 31), SHANGHAI) == 11
        assert month_index(date(2024, 3, 1), LOS_ANGELES) == 1


class TestReportYear:
    """Tests for report year resolution."""

    def test_today_in_time_zone(self) -> None:
        """Test that today follows the zone, not UTC."""
        now = datetime(2024, 12, 31, 20, 0, tzinfo=UTC)

        assert today_in_time_zone(SHANGHAI, now) == date(2025, 1, 1)
        assert today_in_time_zone(LOS_ANGELES, now) == date(2024, 12, 31)

    def test_explicit_year_wins(self) -> None:
        """Test that an explicit year ignores the clock."""
        now = datetime(2030, 6, 1, tzinfo=UTC)

        assert resolve_report_year(2023, SHANGHAI, now) == 2023

    def test_current_year_in_zone(self) -> None:
        """Test that the default year is the current year in the zone."""
        now = datetime(2024, 12, 31, 20, 0, tzinfo=UTC)

        assert resolve_report_year(None, SHANGHAI, now) == 2025
        assert resolve_report_year(None, LOS_ANGELES, now) == 2024

    @pytest.mark.parametrize("year", [2007, 2101, 0, -1])
    def test_out_of_range_year(self, year: int) -> None:
        """Test that unsupported years are rejected."""
        with pytest.raises(ValueError, match=f"Invalid year: {year}"):
            validate_year(year)

    def test_range_limits(self) -> None:
        """Test that the range limits themselves are accepted."""
        assert validate_year(2008) == 2008
        assert validate_year(2100) == 2100


class TestYearWindow:
    """Tests for the year window sent to GitHub."""

    def test_year_bounds(self) -> None:
        assert year_bounds(2024) == (date(2024, 1, 1), date(2024, 12, 31))

    def test_year_window(self) -> None:
        """Test ISO timestamps covering the whole year in UTC."""
        assert year_window(2024) == ("2024-01-01T00:00:00Z", "2024-12-31T23:59:59Z")
