"""Tests for report formatting helpers."""

from datetime import date

import pytest

from gh_year_report.report.formatting import (
    clamp,
    estimate_text_width,
    format_date_label,
    format_date_range,
    format_month_key,
    format_number,
    month_label,
    to_percent,
    truncate,
    weekday_label,
    wrap_lines,
)


class TestNumbers:
    """Tests for number and percentage formatting."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (0, "0"),
            (1234, "1,234"),
            (1234567, "1,234,567"),
            (3.0, "3"),
            (2.5, "2.5"),
            (3.37, "3.37"),
            (1234.5, "1,234.5"),
            (None, "0"),
            (float("nan"), "0"),
            (float("inf"), "0"),
        ],
    )
    def test_format_number(self, value: float | None, expected: str) -> None:
        assert format_number(value) == expected

    def test_to_percent(self) -> None:
        """Test ratio to percentage conversion."""
        assert to_percent(0.4567) == "45.7%"
        assert to_percent(1.0, 0) == "100%"
        assert to_percent(None) == "0.0%"
        assert to_percent(-0.5) == "0.0%"

    def test_clamp(self) -> None:
        assert clamp(5, 0, 3) == 3
        assert clamp(-1, 0, 3) == 0
        assert clamp(2, 0, 3) == 2


class TestLabels:
    """Tests for month, weekday and date labels."""

    def test_month_and_weekday_labels(self) -> None:
        assert month_label(0) == "Jan"
        assert month_label(11) == "Dec"
        assert weekday_label(0) == "Sun"
        assert weekday_label(6) == "Sat"

    def test_format_date_label(self) -> None:
        """Test dates and ISO strings format the same way."""
        assert format_date_label(date(2024, 3, 5)) == "Mar 5"
        assert format_date_label("2024-12-31") == "Dec 31"
        assert format_date_label(None) == "--"
        assert format_date_label("not a date") == "--"

    def test_format_date_range(self) -> None:
        assert format_date_range(date(2024, 3, 5), date(2024, 3, 9)) == "Mar 5 - Mar 9"
        assert format_date_range(date(2024, 3, 5), None) == "--"

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("2024-03", "Mar 2024"),
            ("2024-12", "Dec 2024"),
            ("2024-13", "--"),
            ("2024-00", "--"),
            ("2024/03", "--"),
            ("abcd-ef", "--"),
            (None, "--"),
        ],
    )
    def test_format_month_key(self, value: str | None, expected: str) -> None:
        assert format_month_key(value) == expected


class TestText:
    """Tests for truncation and wrapping."""

    def test_truncate(self) -> None:
        assert truncate("hello", 10) == "hello"
        assert truncate("abcdef", 4) == "abc…"
        assert truncate(None, 4) == ""

    def test_wide_characters_are_wider(self) -> None:
        """Test that East Asian wide characters count as a full em."""
        assert estimate_text_width("中", 10) == 10
        assert estimate_text_width("a", 10) == pytest.approx(5.5)

    def test_wrap_short_text(self) -> None:
        assert wrap_lines("Short text", 200, 10, 2) == ["Short text"]

    def test_wrap_limits_lines_with_ellipsis(self) -> None:
        """Test that overflowing text is cut to max_lines and ends with an ellipsis."""
        lines = wrap_lines("word " * 100, 100, 10, 2)

        assert len(lines) == 2
        assert lines[0] == "word word word word"
        assert lines[1].endswith("…")
        assert all(estimate_text_width(line, 10) <= 100 for line in lines)

    def test_wrap_splits_long_tokens(self) -> None:
        """Test that a token wider than a line is split by character."""
        lines = wrap_lines("a" * 40, 55, 10, 10)

        assert "".join(lines) == "a" * 40
        assert all(len(line) == 10 for line in lines)

    def test_wrap_zero_lines(self) -> None:
        assert wrap_lines("anything", 100, 10, 0) == []
