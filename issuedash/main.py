"""issuedash CLI — renders the issue dashboard in one run."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated

import typer
from rich import print as rprint
from rich.logging import RichHandler
from rich.markup import escape

from issuedash.errors import DashboardError
from issuedash.pipeline import build_report
from issuedash.providers.github import GitHubClient
from issuedash.render import render_report, write_report
from issuedash.settings import get_settings

app = typer.Typer(help="Render a dashboard of open GitHub issues across your repositories and organizations.")

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


@app.command()
def main(
    user: Annotated[str | None, typer.Option("--user", "-u", help="GitHub account whose repositories are scanned")] = None,
    org: Annotated[
        list[str] | None,
        typer.Option("--org", "-o", help="Organization to scan (repeatable)"),
    ] = None,
    output: Annotated[Path | None, typer.Option("--output", help="HTML file to write")] = None,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="TOML config file (default ~/.config/issuedash/config.toml)"),
    ] = None,
    workers: Annotated[
        int | None,
        typer.Option("--workers", "-w", min=1, help="Repositories fetched in parallel"),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log every page fetched")] = False,
) -> None:
    """Fetch every open issue and write the dashboard page."""
    _configure_logging(verbose)
    settings = get_settings(config, user=user, orgs=org, output=output, max_workers=workers)
    dashboard = settings.dashboard_config()

    try:
        with GitHubClient(settings) as client:
            report = build_report(dashboard, client)
        page = render_report(report, dashboard, datetime.now(timezone.utc), title=settings.title)
        write_report(page, settings.output)
    except DashboardError as exc:
        logger.debug("run failed", exc_info=True)
        rprint(f"[red]error:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from exc

    rprint(
        f"[green]✓[/green] Wrote {settings.output} "
        f"({len(report.personal_other)} issues, {len(report.personal_bot)} dependency updates, "
        f"{len(report.organizational)} organization issues)"
    )
