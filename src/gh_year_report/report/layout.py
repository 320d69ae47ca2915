"""Fixed card layout of the report canvas.

All coordinates are in SVG user units. Rows stack top to bottom with a
constant gap; cards within a row never overlap.
"""

from dataclasses import dataclass

CANVAS_WIDTH = 1400
CANVAS_HEIGHT = 1220

MARGIN = 24
GAP = 16
RADIUS = 14

TOP_HEIGHT = 360
STAT_HEIGHT = 58
KPI_HEIGHT = 140
MID_HEIGHT = 300
CHART_HEIGHT = 250

CHART_HEADER_HEIGHT = 56
CHART_PLOT_HEIGHT = 140
CHART_AXIS_HEIGHT = 32

CARD_COLUMNS = (24, 480, 936)
CARD_WIDTH = 440


@dataclass(frozen=True)
class Rect:
    id: str
    x: float
    y: float
    w: float
    h: float

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h


@dataclass(frozen=True)
class ChartGeometry:
    """Plot area inside a chart card."""

    header_x: float
    header_y: float
    plot_x: float
    plot_y: float
    plot_w: float
    plot_h: float
    plot_bottom: float
    axis_y: float


@dataclass(frozen=True)
class ReportLayout:
    width: int
    height: int
    top_left: Rect
    top_right: Rect
    stat_cards: tuple[Rect, Rect, Rect]
    kpi_cards: tuple[Rect, Rect, Rect]
    mid_left: Rect
    mid_right: Rect
    chart_left: Rect
    chart_right: Rect

    def rects(self) -> list[Rect]:
        """Every card in paint order."""
        return [
            self.top_left,
            self.top_right,
            *self.stat_cards,
            *self.kpi_cards,
            self.mid_left,
            self.mid_right,
            self.chart_left,
            self.chart_right,
        ]


def _card_row(prefix: str, y: float, height: float) -> tuple[Rect, Rect, Rect]:
    first, second, third = (
        Rect(f"{prefix}-{idx}", x, y, CARD_WIDTH, height) for idx, x in enumerate(CARD_COLUMNS)
    )
    return first, second, third


def build_report_layout() -> ReportLayout:
    top_y = MARGIN
    stat_y = top_y + TOP_HEIGHT + GAP
    kpi_y = stat_y + STAT_HEIGHT + GAP
    mid_y = kpi_y + KPI_HEIGHT + GAP
    chart_y = mid_y + MID_HEIGHT + GAP

    return ReportLayout(
        width=CANVAS_WIDTH,
        height=CANVAS_HEIGHT,
        top_left=Rect("top-left", MARGIN, top_y, 804, TOP_HEIGHT),
        top_right=Rect("top-right", 844, top_y, 532, TOP_HEIGHT),
        stat_cards=_card_row("stat", stat_y, STAT_HEIGHT),
        kpi_cards=_card_row("kpi", kpi_y, KPI_HEIGHT),
        mid_left=Rect("mid-left", 24, mid_y, 580, MID_HEIGHT),
        mid_right=Rect("mid-right", 620, mid_y, 756, MID_HEIGHT),
        chart_left=Rect("chart-left", 24, chart_y, 668, CHART_HEIGHT),
        chart_right=Rect("chart-right", 708, chart_y, 668, CHART_HEIGHT),
    )


def chart_geometry(card: Rect) -> ChartGeometry:
    plot_x = card.x + 24
    plot_y = card.y + CHART_HEADER_HEIGHT + 12
    plot_h = CHART_PLOT_HEIGHT
    return ChartGeometry(
        header_x=card.x + 20,
        header_y=card.y + 36,
        plot_x=plot_x,
        plot_y=plot_y,
        plot_w=card.w - 48,
        plot_h=plot_h,
        plot_bottom=plot_y + plot_h,
        axis_y=plot_y + plot_h + CHART_AXIS_HEIGHT - 6,
    )


def rects_overlap(a: Rect, b: Rect, spacing: float = 0) -> bool:
    """Whether two rects intersect once each is grown by ``spacing``."""
    if a.right + spacing <= b.x or b.right + spacing <= a.x:
        return False
    return not (a.bottom + spacing <= b.y or b.bottom + spacing <= a.y)
