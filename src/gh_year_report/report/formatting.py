"""Pure formatting helpers shared by the renderers and the AI summary.

Registered as Jinja2 filters by the renderers; none of them hold state.
"""

import math
import unicodedata
from datetime import date

MONTH_ABBREVIATIONS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)
WEEKDAY_ABBREVIATIONS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
MISSING = "--"
ELLIPSIS = "…"


def format_number(value: int | float | None) -> str:
    """Format a number with thousands separators.

    Non-finite and missing values format as "0".
    """
    if value is None:
        return "0"
    if isinstance(value, float):
        if not math.isfinite(value):
            return "0"
        if not value.is_integer():
            return f"{value:,.2f}".rstrip("0").rstrip(".")
    return f"{int(value):,}"


def to_percent(value: float | None, digits: int = 1) -> str:
    """Format a ratio in 0..1 as a percentage string."""
    if value is None or not math.isfinite(value) or value <= 0:
        return f"{0:.{digits}f}%"
    return f"{value * 100:.{digits}f}%"


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def month_label(month_index: int) -> str:
    """Short month name for a zero-based month index."""
    return MONTH_ABBREVIATIONS[month_index % 12]


def weekday_label(weekday_index: int) -> str:
    """Short weekday name for 0 = Sunday .. 6 = Saturday."""
    return WEEKDAY_ABBREVIATIONS[weekday_index % 7]


def _coerce_date(value: date | str | None) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def format_date_label(value: date | str | None) -> str:
    """Format a date as "Mar 5", or "--" if missing."""
    day = _coerce_date(value)
    if day is None:
        return MISSING
    return f"{month_label(day.month - 1)} {day.day}"


def format_date_range(start: date | str | None, end: date | str | None) -> str:
    """Format an inclusive date range as "Mar 5 - Mar 9"."""
    if _coerce_date(start) is None or _coerce_date(end) is None:
        return MISSING
    return f"{format_date_label(start)} - {format_date_label(end)}"


def format_month_key(value: str | None) -> str:
    """Format a "YYYY-MM" month key as "Mar 2024"."""
    if not value or len(value) != 7 or value[4] != "-":
        return MISSING
    try:
        year, month = int(value[:4]), int(value[5:])
    except ValueError:
        return MISSING
    if not 1 <= month <= 12:
        return MISSING
    return f"{month_label(month - 1)} {year}"


def truncate(value: object, max_length: int) -> str:
    """Shorten text to ``max_length`` characters, ending with an ellipsis."""
    text = "" if value is None else str(value)
    if len(text) <= max_length:
        return text
    if max_length <= 1:
        return ELLIPSIS[:max_length]
    return text[: max_length - 1] + ELLIPSIS


def _char_width(char: str, font_size: float) -> float:
    if unicodedata.east_asian_width(char) in ("W", "F"):
        return font_size
    if char == " ":
        return font_size * 0.3
    if char.isupper() or char.isdigit():
        return font_size * 0.62
    return font_size * 0.55


def estimate_text_width(text: str, font_size: float) -> float:
    """Approximate rendered width of ``text`` in a sans-serif font."""
    return sum(_char_width(char, font_size) for char in text)


def wrap_lines(text: str, max_width: float, font_size: float, max_lines: int) -> list[str]:
    """Greedy word wrap by estimated width.

    Words wider than a line are split by character. Text that does not fit in
    ``max_lines`` has its last line ended with an ellipsis.
    """
    if max_lines <= 0:
        return []

    lines: list[str] = []
    current = ""
    tokens = text.split()

    for token in tokens:
        candidate = f"{current} {token}" if current else token
        if estimate_text_width(candidate, font_size) <= max_width:
            current = candidate
            continue

        if current:
            lines.append(current)
            current = ""

        while estimate_text_width(token, font_size) > max_width and len(token) > 1:
            cut = len(token)
            while cut > 1 and estimate_text_width(token[:cut], font_size) > max_width:
                cut -= 1
            lines.append(token[:cut])
            token = token[cut:]
        current = token

    if current:
        lines.append(current)

    if len(lines) <= max_lines:
        return lines

    kept = lines[:max_lines]
    last = kept[-1]
    while last and estimate_text_width(last + ELLIPSIS, font_size) > max_width:
        last = last[:-1]
    kept[-1] = last.rstrip() + ELLIPSIS
    return kept
