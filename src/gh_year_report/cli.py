"""CLI entry point for gh-year-report.

Two commands:
- generate: Fetch a user's year from GitHub and write the report
- render: Re-render the SVG and HTML from an existing JSON snapshot
"""

import asyncio
import json
import traceback
from pathlib import Path
from typing import Any, NoReturn

import click
import httpx
from rich.console import Console
from rich.markup import escape

from gh_year_report import __version__
from gh_year_report.config import MAX_REPORT_YEAR, MIN_REPORT_YEAR, Config, load_config
from gh_year_report.github.auth import AuthenticationError
from gh_year_report.github.contributions import UserNotFoundError
from gh_year_report.github.graphql import GraphQLError
from gh_year_report.github.http import GitHubHTTPError
from gh_year_report.logging import SECRET_ENV_VARS, install_redaction, setup_logging
from gh_year_report.report.export import load_snapshot, rerender_from_snapshot, write_report
from gh_year_report.report.model import build_dry_run_summary

console = Console()

# ValueError covers configuration, validation and malformed calendar errors.
REPORT_ERRORS = (
    AuthenticationError,
    GitHubHTTPError,
    GraphQLError,
    UserNotFoundError,
    FileNotFoundError,
    ValueError,
    httpx.HTTPError,
)


def _fail(ctx: click.Context, label: str, error: Exception) -> NoReturn:
    console.print(f"\n[bold red]{label}:[/bold red] {escape(str(error))}")
    if ctx.obj.get("verbose"):
        console.print("\n[dim]Traceback:[/dim]")
        console.print(escape(traceback.format_exc()))
    raise click.Abort() from error


def apply_overrides(cfg: Config, **overrides: Any) -> Config:
    """Return a revalidated copy of ``cfg`` with CLI overrides applied.

    ``None`` values leave the configured value untouched.
    """
    raw = cfg.model_dump()
    sections = {
        "username": ("github", "username"),
        "year": ("report", "year"),
        "time_zone": ("report", "time_zone"),
        "output_dir": ("report", "output_dir"),
        "readme": ("report", "readme_path"),
    }
    for name, value in overrides.items():
        if value is None:
            continue
        if name == "no_ai":
            if value:
                raw["ai"]["enabled"] = False
            continue
        section, key = sections[name]
        raw[section][key] = value
    return Config.model_validate(raw)


@click.group()
@click.version_option(version=__version__, prog_name="gh-year-report")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable verbose output")
@click.option("--json-logs", is_flag=True, default=False, help="Write log records as JSON lines")
@click.pass_context
def main(ctx: click.Context, verbose: bool, json_logs: bool) -> None:
    """GitHub Year-in-Review Report Generator.

    Turn one user's contribution calendar into a yearly report: statistics,
    top repositories and languages, and a short narrative summary.

    \b
    Quick Start:
        1. export GH_STATS_TOKEN=ghp_...
        2. gh-year-report generate --username octocat
        3. Or preview without writing: gh-year-report generate --username octocat --dry-run
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(verbose=verbose, json_format=json_logs)


@main.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to config.yaml file (defaults and environment variables otherwise)",
)
@click.option("--username", "-u", default=None, help="GitHub login to report on")
@click.option(
    "--year",
    type=click.IntRange(MIN_REPORT_YEAR, MAX_REPORT_YEAR),
    default=None,
    help="Report year (defaults to the current year in the report time zone)",
)
@click.option("--time-zone", default=None, help="IANA time zone used to bucket days")
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for the SVG, HTML and JSON files",
)
@click.option(
    "--readme",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write a profile README embedding the report",
)
@click.option("--no-ai", is_flag=True, default=False, help="Skip the AI summary")
@click.option("--dry-run", is_flag=True, default=False, help="Print a summary instead of writing files")
@click.pass_context
def generate(
    ctx: click.Context,
    config: Path | None,
    username: str | None,
    year: int | None,
    time_zone: str | None,
    output_dir: Path | None,
    readme: Path | None,
    no_ai: bool,
    dry_run: bool,
) -> None:
    """Fetch a user's year from GitHub and write the report.

    Output files:
    - github-annual-report.svg: The report image
    - github-annual-report.html: The same layout as a web page
    - github-annual-report.json: Snapshot of every derived value
    """
    from gh_year_report.pipeline import generate_report

    try:
        cfg = load_config(config) if config else Config.default()
        cfg = apply_overrides(
            cfg,
            username=username,
            year=year,
            time_zone=time_zone,
            output_dir=output_dir,
            readme=readme,
            no_ai=no_ai,
        )
    except (FileNotFoundError, ValueError) as e:
        _fail(ctx, "Invalid configuration", e)

    install_redaction((*SECRET_ENV_VARS, cfg.github.auth.token_env, cfg.ai.api_key_env))

    try:
        result = asyncio.run(generate_report(cfg))
    except KeyboardInterrupt:
        console.print("\n[yellow]Generation interrupted by user[/yellow]")
        raise click.Abort() from None
    except REPORT_ERRORS as e:
        _fail(ctx, "Error", e)

    if dry_run:
        click.echo(json.dumps(build_dry_run_summary(result.snapshot), indent=2))
        return

    try:
        export = write_report(
            result.model,
            result.snapshot,
            cfg.report.output_dir,
            readme_path=cfg.report.readme_path,
        )
    except OSError as e:
        _fail(ctx, "Write failed", e)

    console.print()
    console.print("[bold green]Report generated![/bold green]")
    for path in export.files_written:
        console.print(f"  ✓ {path}")
    console.print(f"  AI summary: {result.snapshot.ai_mode}")
    if result.snapshot.ai_reason:
        console.print(f"  [yellow]Fallback reason:[/yellow] {result.snapshot.ai_reason}")


@main.command()
@click.option(
    "--snapshot",
    "-s",
    "snapshot_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Path to github-annual-report.json",
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for the SVG and HTML (defaults to the snapshot's directory)",
)
@click.pass_context
def render(ctx: click.Context, snapshot_path: Path, output_dir: Path | None) -> None:
    """Re-render the SVG and HTML from an existing snapshot.

    Needs no network access or credentials.
    """
    try:
        snapshot = load_snapshot(snapshot_path)
    except (FileNotFoundError, ValueError) as e:
        _fail(ctx, "Invalid snapshot", e)

    try:
        export = rerender_from_snapshot(snapshot, output_dir or snapshot_path.parent)
    except OSError as e:
        _fail(ctx, "Write failed", e)

    console.print(f"[bold green]Re-rendered {snapshot.username} ({snapshot.year})[/bold green]")
    for path in export.files_written:
        console.print(f"  ✓ {path}")


if __name__ == "__main__":
    main()
