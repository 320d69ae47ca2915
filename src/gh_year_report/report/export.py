"""Write the rendered report and its JSON snapshot to disk.

Output structure:
    <output_dir>/
        github-annual-report.svg - the report image
        github-annual-report.html - the same layout as a standalone page
        github-annual-report.json - snapshot of every derived value
    <readme_path> - profile README embedding the SVG (optional)
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from gh_year_report.report.model import ReportModel, ReportSnapshot, model_from_snapshot
from gh_year_report.report.render import render_readme, render_report_html, render_report_svg

logger = logging.getLogger(__name__)

REPORT_BASENAME = "github-annual-report"


@dataclass
class ExportResult:
    """Files written by one export."""

    files_written: list[Path] = field(default_factory=list)
    total_size_bytes: int = 0

    def record(self, path: Path) -> None:
        size = path.stat().st_size
        self.files_written.append(path)
        self.total_size_bytes += size
        logger.info("Wrote %s (%d bytes)", path, size)


def report_paths(output_dir: Path) -> dict[str, Path]:
    return {
        "svg": output_dir / f"{REPORT_BASENAME}.svg",
        "html": output_dir / f"{REPORT_BASENAME}.html",
        "json": output_dir / f"{REPORT_BASENAME}.json",
    }


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _write_json(data: dict[str, Any], path: Path) -> None:
    """Write JSON with two-space indentation and a trailing newline."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")


def write_report(
    model: ReportModel,
    snapshot: ReportSnapshot,
    output_dir: Path,
    readme_path: Path | None = None,
) -> ExportResult:
    """Render and write every report artifact.

    Args:
        model: Report model to render.
        snapshot: Snapshot written as JSON.
        output_dir: Directory for the SVG, HTML and JSON files.
        readme_path: Where to write the profile README; skipped if None.

    Returns:
        ExportResult listing the written files.
    """
    paths = report_paths(output_dir)
    result = ExportResult()

    _write_text(paths["svg"], render_report_svg(model))
    result.record(paths["svg"])

    _write_text(paths["html"], render_report_html(model))
    result.record(paths["html"])

    _write_json(snapshot.to_json_dict(), paths["json"])
    result.record(paths["json"])

    if readme_path is not None:
        svg_ref = Path(os.path.relpath(paths["svg"], readme_path.parent)).as_posix()
        _write_text(readme_path, render_readme(snapshot.username, svg_ref))
        result.record(readme_path)

    logger.info(
        "Export complete: %d files, %d bytes",
        len(result.files_written),
        result.total_size_bytes,
    )
    return result


def rerender_from_snapshot(snapshot: ReportSnapshot, output_dir: Path) -> ExportResult:
    """Rewrite the SVG and HTML from an existing snapshot, leaving the JSON untouched."""
    model = model_from_snapshot(snapshot)
    paths = report_paths(output_dir)
    result = ExportResult()

    _write_text(paths["svg"], render_report_svg(model))
    result.record(paths["svg"])
    _write_text(paths["html"], render_report_html(model))
    result.record(paths["html"])

    logger.info("Re-rendered report for %s (%d)", snapshot.username, snapshot.year)
    return result


def load_snapshot(path: Path) -> ReportSnapshot:
    """Read a snapshot written by ``write_report``.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValidationError: If the JSON does not match the snapshot schema.
    """
    if not path.exists():
        msg = f"Snapshot not found: {path}"
        raise FileNotFoundError(msg)

    with path.open(encoding="utf-8") as f:
        return ReportSnapshot.model_validate(json.load(f))
