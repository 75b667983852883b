"""CLI entry point for pkgtrust."""

import asyncio
import json
import logging
from pathlib import Path

# Load .env file if it exists
from dotenv import load_dotenv
load_dotenv()

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pkgtrust.analyzers.pipeline import ScoringPipeline
from pkgtrust.batch import BatchRunner, InputSourceError
from pkgtrust.config import Settings
from pkgtrust.logs import configure_logging
from pkgtrust.models.schemas import BatchOutcome, Metric
from pkgtrust.monitoring import RunStats, ThroughputTracker

logger = logging.getLogger(__name__)

app = typer.Typer(help="Package trustworthiness scoring tool.")

# Stdout carries NDJSON records only
console = Console(stderr=True)


def _load_settings(overrides: dict | None = None, needs_token: bool = True) -> Settings:
    """Read settings from the environment and set up logging.

    Exits with code 1 if a variable has an invalid value.
    """
    try:
        settings = Settings.from_env()
    except ValidationError as e:
        console.print(f"[red]Invalid configuration: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if overrides:
        settings = settings.model_copy(update=overrides)

    configure_logging(settings)
    if needs_token and not settings.has_token:
        logger.warning("GITHUB_TOKEN is not set; only License can be scored")
    return settings


@app.command()
def score(
    url_file: Path = typer.Argument(..., help="File with one package URL per line"),
    concurrent: bool | None = typer.Option(
        None,
        "--concurrent/--sequential",
        help="Score the URLs of a chunk concurrently (default from PKGTRUST_CONCURRENT_URLS)",
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", "-t", min=0.1, help="Per-provider timeout in seconds"
    ),
    summary: bool = typer.Option(True, "--summary/--no-summary", help="Print a run summary to stderr"),
    snapshot: Path | None = typer.Option(
        None, "--snapshot", help="Write run statistics as JSON to this file"
    ),
) -> None:
    """Score every URL in a file, one NDJSON record per line on stdout."""
    overrides: dict = {}
    if concurrent is not None:
        overrides["concurrent_urls"] = concurrent
    if timeout is not None:
        overrides["provider_timeout"] = timeout

    settings = _load_settings(overrides)
    asyncio.run(_score(url_file, settings, summary, snapshot))


async def _score(
    url_file: Path,
    settings: Settings,
    show_summary: bool,
    snapshot: Path | None,
) -> None:
    """Async implementation of score."""
    tracker = ThroughputTracker(snapshot)

    async with ScoringPipeline(settings) as pipeline:
        runner = BatchRunner(pipeline, tracker=tracker, concurrent_urls=settings.concurrent_urls)
        try:
            outcomes = await runner.run(url_file)
        except InputSourceError as e:
            console.print(f"[red]{escape(str(e))}[/red]")
            raise typer.Exit(1)

    if show_summary:
        _print_summary(tracker.get_stats(), outcomes)


def _print_summary(stats: RunStats, outcomes: list[BatchOutcome]) -> None:
    """Render the run summary on stderr."""
    console.print()
    console.print(
        f"[bold green]Completed:[/bold green] {stats.processed_count}/{stats.total_urls} URLs "
        f"({stats.success_fraction:.0%}) "
        f"in {len(outcomes)} chunks ({stats.elapsed_seconds:.1f}s, {stats.throughput:.2f} URLs/s)"
    )
    if stats.skipped_count:
        console.print(f"  [yellow]{stats.skipped_count}[/yellow] skipped (unsupported URL)")
    if stats.failed_count:
        console.print(f"  [red]{stats.failed_count}[/red] failed")
        for entry in list(stats.recent_errors)[-5:]:
            if entry.error_type != "unresolved":
                console.print(f"  [red]x[/red] {escape(entry.url)}: {escape(entry.message)}")

    table = Table(title="Providers")
    table.add_column("Metric", style="cyan")
    table.add_column("Avg Latency (s)", justify="right")
    table.add_column("Failures", justify="right")

    for metric in Metric:
        average = stats.stage_timings.get(metric.value)
        failures = stats.provider_failures.get(metric.value, 0)
        table.add_row(
            metric.value,
            f"{average:.3f}" if average is not None else "-",
            f"[red]{failures}[/red]" if failures else "0",
        )

    console.print(table)

    if stats.github_rate_limit_remaining is not None:
        console.print(f"[dim]GitHub rate limit remaining: {stats.github_rate_limit_remaining}[/dim]")


@app.command()
def metrics(
    url: str = typer.Argument(..., help="GitHub or npm package URL"),
) -> None:
    """Score a single URL and print its metrics report as JSON."""
    settings = _load_settings()
    asyncio.run(_metrics(url, settings))


async def _metrics(url: str, settings: Settings) -> None:
    """Async implementation of metrics."""
    async with ScoringPipeline(settings) as pipeline:
        report = await pipeline.score_url(url)

    if report is None:
        console.print(f"[red]Could not score {escape(url)}[/red]")
        raise typer.Exit(1)

    typer.echo(json.dumps(report.to_dict(), indent=2))


@app.command()
def resolve(
    url: str = typer.Argument(..., help="GitHub or npm package URL"),
) -> None:
    """Print the GitHub repository a URL resolves to."""
    settings = _load_settings(needs_token=False)
    asyncio.run(_resolve(url, settings))


async def _resolve(url: str, settings: Settings) -> None:
    """Async implementation of resolve."""
    async with ScoringPipeline(settings) as pipeline:
        identity = await pipeline.resolve(url)

    if identity is None:
        console.print(f"[red]Not a GitHub or npm package URL: {escape(url)}[/red]")
        raise typer.Exit(1)

    typer.echo(identity.slug)


@app.command()
def version() -> None:
    """Show version information."""
    from pkgtrust import __version__

    typer.echo(f"pkgtrust v{__version__}")


if __name__ == "__main__":
    app()
