"""Render the report to SVG, HTML and README markdown with Jinja2."""

import logging

from jinja2 import Environment, PackageLoader, StrictUndefined

from gh_year_report.report.formatting import format_number
from gh_year_report.report.layout import RADIUS
from gh_year_report.report.model import ReportModel
from gh_year_report.report.view import (
    HEATMAP_CELL,
    HEATMAP_GAP,
    HEATMAP_MAX_WEEKS,
    HEATMAP_STEP,
    build_report_view,
)

logger = logging.getLogger(__name__)

SVG_TEMPLATE = "report.svg.j2"
HTML_TEMPLATE = "report.html.j2"
README_TEMPLATE = "README.md.j2"


def create_environment() -> Environment:
    """Build a Jinja2 environment over the packaged templates."""
    env = Environment(
        loader=PackageLoader("gh_year_report.report", "templates"),
        autoescape=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )
    env.filters["format_number"] = format_number
    return env


def _render_report(template_name: str, model: ReportModel) -> str:
    env = create_environment()
    view = build_report_view(model)
    rendered = env.get_template(template_name).render(
        view=view,
        radius=RADIUS,
        cell_size=HEATMAP_CELL,
        cell_gap=HEATMAP_GAP,
        cell_step=HEATMAP_STEP,
        max_weeks=HEATMAP_MAX_WEEKS,
    )
    logger.debug("Rendered %s (%d chars)", template_name, len(rendered))
    return rendered


def render_report_svg(model: ReportModel) -> str:
    return _render_report(SVG_TEMPLATE, model)


def render_report_html(model: ReportModel) -> str:
    return _render_report(HTML_TEMPLATE, model)


def render_readme(username: str, svg_path: str = "assets/github-annual-report.svg") -> str:
    """Render the profile README that embeds the report image."""
    template = create_environment().get_template(README_TEMPLATE)
    return template.render(username=username, svg_path=svg_path)
