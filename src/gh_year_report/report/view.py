"""Render-ready view of a report model.

Computes every text label, bar and heatmap cell once so the SVG and HTML
templates only place precomputed values. Chart coordinates are relative to
the plot area; heatmap coordinates are relative to the heatmap origin.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass

from gh_year_report.models import ContributionLevel, ContributionWeek, TopLanguage, TopRepository
from gh_year_report.report.formatting import (
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
from gh_year_report.report.layout import (
    ChartGeometry,
    Rect,
    ReportLayout,
    build_report_layout,
    chart_geometry,
)
from gh_year_report.report.model import ReportModel
from gh_year_report.summary import DEFAULT_HEADING, AiSummary

LEVEL_COLORS = {
    ContributionLevel.NONE: "#E6EDF3",
    ContributionLevel.FIRST_QUARTILE: "#9BE9A8",
    ContributionLevel.SECOND_QUARTILE: "#40C463",
    ContributionLevel.THIRD_QUARTILE: "#30A14E",
    ContributionLevel.FOURTH_QUARTILE: "#216E39",
}

HEATMAP_CELL = 10
HEATMAP_GAP = 3
HEATMAP_STEP = HEATMAP_CELL + HEATMAP_GAP
HEATMAP_MAX_WEEKS = 53

MONTHLY_BAR_WIDTH = 36
MONTHLY_MIN_HEIGHT = 6
WEEKDAY_BAR_WIDTH = 70
WEEKDAY_MIN_HEIGHT = 8
GRID_RATIOS = (0.25, 0.5, 0.75)

AI_LINE_HEIGHT = 28
AI_TEXT_WIDTH = 492
AI_MAX_LINES = 2
LANGUAGE_BAR_OFFSET = 190
KPI_FONT_SIZE = 44

DEFAULT_BIO = "Building useful software with stable cadence."
DEFAULT_REPO_DESCRIPTION = "No description provided."


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class Bar:
    x: float
    y: int
    width: int
    height: int
    label: str
    label_x: float
    is_max: bool


@dataclass(frozen=True)
class ChartView:
    card: Rect
    geometry: ChartGeometry
    bars: list[Bar]
    grid_offsets: list[int]
    summary: str


@dataclass(frozen=True)
class HeatCell:
    x: int
    y: int
    color: str
    title: str


@dataclass(frozen=True)
class MonthLabel:
    x: int
    label: str


@dataclass(frozen=True)
class TextLine:
    y: float
    text: str
    css_class: str


@dataclass(frozen=True)
class AiSectionView:
    heading: str
    lines: list[str]


@dataclass(frozen=True)
class RepoRow:
    name: str
    meta: str
    description: str


@dataclass(frozen=True)
class LanguageRow:
    label: str
    ratio: float
    percent: str
    bar_width: int
    fill_percent: int


@dataclass(frozen=True)
class KpiView:
    title: str
    value: str
    unit: str
    unit_offset: int
    caption: str


@dataclass(frozen=True)
class ReportView:
    model: ReportModel
    layout: ReportLayout
    display_name: str
    initial: str
    bio: str
    stat_rows: list[tuple[str, str]]
    kpis: list[KpiView]
    heatmap_cells: list[HeatCell]
    heatmap_months: list[MonthLabel]
    ai_mode_label: str
    ai_intro_lines: list[str]
    ai_sections: list[AiSectionView]
    ai_svg_lines: list[TextLine]
    repo_rows: list[RepoRow]
    language_rows: list[LanguageRow]
    monthly: ChartView
    weekly: ChartView


def bar_chart(
    values: Sequence[int],
    labels: Sequence[str],
    geometry: ChartGeometry,
    bar_width: int,
    min_height: int,
) -> list[Bar]:
    """Lay out evenly spaced bars scaled to the tallest value.

    Non-zero values get at least ``min_height``; zero values get no bar. Every
    bar equal to a positive maximum is flagged for the highlight fill.
    """
    count = len(values)
    max_value = max(max(values, default=0), 1)
    gap = (geometry.plot_w - bar_width * count) / (count - 1) if count > 1 else 0

    bars = []
    for idx, value in enumerate(values):
        height = (
            max(min_height, round_half_up(value / max_value * geometry.plot_h)) if value > 0 else 0
        )
        x = idx * (bar_width + gap)
        bars.append(
            Bar(
                x=round(x, 2),
                y=int(geometry.plot_h - height),
                width=bar_width,
                height=height,
                label=labels[idx],
                label_x=round(x + bar_width / 2, 2),
                is_max=value == max_value and value > 0,
            )
        )
    return bars


def grid_offsets(geometry: ChartGeometry) -> list[int]:
    """Offsets of the dashed guide lines from the top of the plot."""
    return [int(geometry.plot_h - round_half_up(geometry.plot_h * ratio)) for ratio in GRID_RATIOS]


def heatmap_cells(weeks: Sequence[ContributionWeek]) -> list[HeatCell]:
    cells = []
    for week_index, week in enumerate(weeks[:HEATMAP_MAX_WEEKS]):
        for day_index, day in enumerate(week.days[:7]):
            cells.append(
                HeatCell(
                    x=week_index * HEATMAP_STEP,
                    y=day_index * HEATMAP_STEP,
                    color=LEVEL_COLORS.get(day.level, LEVEL_COLORS[ContributionLevel.NONE]),
                    title=f"{day.date.isoformat()}: {day.count}",
                )
            )
    return cells


def heatmap_month_labels(weeks: Sequence[ContributionWeek], year: int) -> list[MonthLabel]:
    """Label each month at the first week holding one of its days in ``year``."""
    first_week: dict[int, int] = {}
    for week_index, week in enumerate(weeks[:HEATMAP_MAX_WEEKS]):
        for day in week.days:
            if day.date.year == year and day.date.month not in first_week:
                first_week[day.date.month] = week_index

    return [
        MonthLabel(x=first_week[month] * HEATMAP_STEP, label=month_label(month - 1))
        for month in range(1, 13)
        if month in first_week
    ]


def layout_ai_text(summary: AiSummary, card: Rect, mode_label: str) -> list[TextLine]:
    """Stack the summary into the AI card, dropping sections that do not fit."""
    max_y = card.bottom - 24
    lines = [TextLine(card.y + 62, "Year in review", "h2")]
    cursor = card.y + 100

    for line in wrap_lines(summary.intro, AI_TEXT_WIDTH, 16, AI_MAX_LINES):
        lines.append(TextLine(cursor, line, "p"))
        cursor += AI_LINE_HEIGHT

    lines.append(TextLine(cursor + 2, f"Mode: {mode_label}", "small"))
    cursor += 32

    for section in summary.sections[:3]:
        body = wrap_lines(section.content, AI_TEXT_WIDTH, 14, AI_MAX_LINES)
        required = AI_LINE_HEIGHT + len(body) * AI_LINE_HEIGHT + 14
        if cursor + required > max_y:
            break

        lines.append(TextLine(cursor + 12, section.heading or DEFAULT_HEADING, "h3"))
        cursor += AI_LINE_HEIGHT
        for line in body:
            lines.append(TextLine(cursor + 6, line, "small"))
            cursor += AI_LINE_HEIGHT
        cursor += 10

    return lines


def repo_rows(repos: Sequence[TopRepository]) -> list[RepoRow]:
    return [
        RepoRow(
            name=repo.name_with_owner,
            meta=(
                f"Stars {format_number(repo.stars)} · Forks {format_number(repo.forks)} "
                f"· Commits {format_number(repo.commits)}"
            ),
            description=truncate(repo.description or DEFAULT_REPO_DESCRIPTION, 48),
        )
        for repo in repos[:3]
    ]


def language_rows(languages: Sequence[TopLanguage], card: Rect) -> list[LanguageRow]:
    track_width = card.w - 230
    rows = []
    for idx, item in enumerate(languages[:5]):
        ratio = max(0.0, min(1.0, item.ratio))
        rows.append(
            LanguageRow(
                label=f"#{idx + 1} {item.language or 'N/A'}",
                ratio=ratio,
                percent=to_percent(ratio, 1),
                bar_width=max(8, round_half_up(track_width * ratio)),
                fill_percent=max(2, round_half_up(ratio * 100)),
            )
        )
    return rows


def _kpi(title: str, value: int, unit: str, caption: str) -> KpiView:
    number = format_number(value)
    return KpiView(
        title=title,
        value=number,
        unit=unit,
        unit_offset=round_half_up(estimate_text_width(number, KPI_FONT_SIZE) + 18),
        caption=caption,
    )


def build_report_view(model: ReportModel) -> ReportView:
    """Compute every label and shape the templates draw."""
    layout = build_report_layout()
    stats = model.stats
    year = model.year
    profile = model.profile

    if stats.max_contributions_month:
        max_month_text = format_month_key(stats.max_contributions_month)
    else:
        max_month_text = f"-- {year}"

    mode_label = "AI generated" if model.ai_summary.mode == "ai" else "Rule-based fallback"

    monthly_geometry = chart_geometry(layout.chart_left)
    weekday_geometry = chart_geometry(layout.chart_right)
    busiest = stats.busiest_weekday
    busiest_value = stats.weekday_contributions[busiest] if stats.weekday_contributions else 0

    return ReportView(
        model=model,
        layout=layout,
        display_name=profile.display_name,
        initial=(profile.login[:1] or "Y").upper(),
        bio=truncate(profile.bio or DEFAULT_BIO, 58),
        stat_rows=[
            ("Peak month", max_month_text),
            ("Daily average", format_number(stats.average_contributions_per_day)),
            (f"Issues opened in {year}", format_number(model.issues_count)),
        ],
        kpis=[
            _kpi(
                "Most active day",
                stats.max_contributions_in_a_day,
                "contributions",
                format_date_label(stats.max_contributions_date),
            ),
            _kpi(
                "Longest streak",
                stats.longest_streak,
                "days",
                format_date_range(stats.longest_streak_start_date, stats.longest_streak_end_date),
            ),
            _kpi(
                "Longest break",
                stats.longest_gap,
                "days",
                format_date_range(stats.longest_gap_start_date, stats.longest_gap_end_date),
            ),
        ],
        heatmap_cells=heatmap_cells(stats.heatmap_weeks),
        heatmap_months=heatmap_month_labels(stats.heatmap_weeks, year),
        ai_mode_label=mode_label,
        ai_intro_lines=wrap_lines(model.ai_summary.intro, AI_TEXT_WIDTH, 16, AI_MAX_LINES),
        ai_sections=[
            AiSectionView(
                heading=section.heading or DEFAULT_HEADING,
                lines=wrap_lines(section.content, AI_TEXT_WIDTH, 14, AI_MAX_LINES),
            )
            for section in model.ai_summary.sections[:3]
        ],
        ai_svg_lines=layout_ai_text(model.ai_summary, layout.top_right, mode_label),
        repo_rows=repo_rows(model.top_repos),
        language_rows=language_rows(model.top_languages, layout.mid_right),
        monthly=ChartView(
            card=layout.chart_left,
            geometry=monthly_geometry,
            bars=bar_chart(
                stats.monthly_contributions,
                [month_label(idx) for idx in range(12)],
                monthly_geometry,
                MONTHLY_BAR_WIDTH,
                MONTHLY_MIN_HEIGHT,
            ),
            grid_offsets=grid_offsets(monthly_geometry),
            summary=f"Total {format_number(stats.total_contributions)}",
        ),
        weekly=ChartView(
            card=layout.chart_right,
            geometry=weekday_geometry,
            bars=bar_chart(
                stats.weekday_contributions,
                [weekday_label(idx) for idx in range(7)],
                weekday_geometry,
                WEEKDAY_BAR_WIDTH,
                WEEKDAY_MIN_HEIGHT,
            ),
            grid_offsets=grid_offsets(weekday_geometry),
            summary=(
                f"Busiest: {weekday_label(busiest)} "
                f"({format_number(busiest_value)} contributions)"
            ),
        ),
    )
