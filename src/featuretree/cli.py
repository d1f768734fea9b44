"""Command-line interface for featuretree."""

import asyncio
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from featuretree import __version__
from featuretree.errors import FeatureTreeError
from featuretree.log import configure_logging
from featuretree.models import RawIssue, load_settings
from featuretree.report import write_csv, write_json
from featuretree.runner import FeatureReportRunner
from featuretree.tracker import JiraTracker
from featuretree.tree import natural_order

app = typer.Typer(
    name="featuretree",
    help="Reconcile tracker tickets with git history and build feature reports",
    add_completion=False,
)
console = Console()


@app.command()
def run(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="JSON config file"),
    profile: Optional[List[str]] = typer.Option(None, "--profile", "-p", help="Profile to run (repeatable)"),
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", "-o", help="Directory for exports"),
    json_output: bool = typer.Option(True, "--json/--no-json", help="Export the JSON tree"),
    csv_output: bool = typer.Option(True, "--csv/--no-csv", help="Export the tab-separated report"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Run report profiles and export their feature trees."""
    try:
        settings = load_settings(config)
        configure_logging("DEBUG" if verbose else settings.log_level)

        tracker = JiraTracker(
            settings.jira_server,
            username=settings.jira_username,
            password=settings.jira_password,
            epic_link_field=settings.epic_link_field,
        )
        runner = FeatureReportRunner(settings, tracker)

        console.print(f"[bold green]Indexing history of {len(settings.branches)} branch(es)[/bold green]")
        runner.load_history()
        console.print(f"[bold blue]Tokens indexed:[/bold blue] {len(runner.index)}")

        def show_ticket(issue: RawIssue, found: bool) -> None:
            console.print("*" if found else "·", end="")

        reports = asyncio.run(runner.run(profile or None, on_ticket=show_ticket))
        console.print()

        directory = output_dir or settings.output_dir
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Profile", style="cyan")
        table.add_column("Matched", justify="right", style="green")
        table.add_column("Placed", justify="right", style="green")
        table.add_column("Total", justify="right")
        table.add_column("Dropped", justify="right", style="yellow")

        for report in reports:
            table.add_row(
                report.name,
                str(report.matched),
                str(report.placed),
                str(report.total),
                str(len(report.diagnostics)),
            )
            if json_output:
                console.print(f"[bold green]✓[/bold green] Saved {write_json(report, directory)}")
            if csv_output:
                console.print(f"[bold green]✓[/bold green] Saved {write_csv(report, directory)}")
            for diagnostic in report.diagnostics:
                console.print(f"  [yellow]{diagnostic.key}[/yellow] {diagnostic.kind}: {diagnostic.message}")

        console.print(table)

        stats = runner.cache.get_stats()
        console.print(
            f"[bold blue]Issue cache:[/bold blue] {stats['issues']} issues, "
            f"{stats['hits']} hits, {stats['misses']} fetched ({stats['hit_rate']} hit rate)"
        )

    except (FeatureTreeError, KeyError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def history(
    keys: List[str] = typer.Argument(..., help="Ticket keys to look up"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="JSON config file"),
) -> None:
    """Check whether tickets are referenced by the configured branches' history."""
    try:
        settings = load_settings(config)
        configure_logging(settings.log_level)

        runner = FeatureReportRunner(settings, tracker=None)
        index = runner.load_history()

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Key", style="cyan")
        table.add_column("In history", justify="center")

        for key in natural_order(k.upper() for k in keys):
            found = index.is_in_history(key)
            table.add_row(key, "[green]yes[/green]" if found else "[red]no[/red]")

        console.print(table)

    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def order(
    keys: List[str] = typer.Argument(..., help="Ticket keys to sort"),
) -> None:
    """Print ticket keys in natural order (project, then number)."""
    for key in natural_order(keys):
        console.print(key)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"featuretree version {__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
