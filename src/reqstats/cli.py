"""
reqstats command line.

Commands:
- selftest: Exercise the collector with simulated requests
- analyze: Summarize latency samples read from a file
"""

from __future__ import annotations

import logging
import math
import random
import sys
import time
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ._version import get_version
from .chart import render_chart
from .collector import LatencyStatsCollector
from .config import CollectorConfig, load_config
from .errors import ConfigurationError, HistogramWriteError
from .handler import TimedRequestHandler

console = Console()

EXAMPLE_URI = "example-uri"
SIMULATED_REQUESTS = 6


def version_callback(value: bool) -> None:
    """Display version and exit."""
    if value:
        typer.echo(f"reqstats version {get_version()}")
        raise typer.Exit()


app = typer.Typer(
    help="Per-endpoint response latency statistics.",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """reqstats CLI main callback for global options."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# =============================================================================
# selftest
# =============================================================================


def _simulated_dispatch(uri: str) -> str:
    time.sleep(random.uniform(0.001, 0.005))
    return f"response for {uri}"


def _report(label: str, passed: bool) -> bool:
    status = "[green]Passed[/green]" if passed else "[red]Failed[/red]"
    console.print(f"Test {label}: {status}")
    return passed


def _handler(max_bins: int, histogram_path: Path) -> TimedRequestHandler[str]:
    config = CollectorConfig(max_bins=max_bins, histogram_path=histogram_path)
    return TimedRequestHandler(LatencyStatsCollector.from_config(config), _simulated_dispatch)


def _process_many(handler: TimedRequestHandler[str], count: int) -> None:
    for _ in range(count):
        handler.process(EXAMPLE_URI)


@app.command("selftest")
def selftest(
    graph: bool = typer.Option(False, "--graph/--no-graph", help="Write the histogram chart"),
    max_bins: int = typer.Option(5, "--max-bins", min=1, help="Maximum histogram bins"),
    output: Path = typer.Option(Path("histogram.txt"), "--output", "-o", help="Chart file"),
) -> None:
    """Run the collector against simulated requests and report each check."""
    results = []

    handler = _handler(max_bins, output)
    stats = handler.collector
    mean = stats.mean_response_time(EXAMPLE_URI)
    results.append(_report("Mean Response Time (Empty)", mean == 0.0))
    console.print(f"Mean Response Time: {mean}")
    _process_many(handler, SIMULATED_REQUESTS)
    mean = stats.mean_response_time(EXAMPLE_URI)
    results.append(_report("Mean Response Time (Not Empty)", mean > 0))
    console.print(f"Mean Response Time: {mean}")

    handler = _handler(max_bins, output)
    stats = handler.collector
    handler.process(EXAMPLE_URI)
    std_dev = stats.standard_deviation(EXAMPLE_URI)
    results.append(_report("Standard Deviation (Single Sample)", std_dev == 0.0))
    console.print(f"Standard Deviation: {std_dev}")
    _process_many(handler, SIMULATED_REQUESTS)
    std_dev = stats.standard_deviation(EXAMPLE_URI)
    results.append(_report("Standard Deviation (Not Empty)", std_dev > 0))
    console.print(f"Standard Deviation: {std_dev}")

    handler = _handler(max_bins, output)
    stats = handler.collector
    histogram = stats.normalized_histogram(EXAMPLE_URI)
    results.append(_report("Normalized Histogram (Empty)", histogram.is_empty))
    _process_many(handler, SIMULATED_REQUESTS)
    try:
        histogram = stats.normalized_histogram(EXAMPLE_URI, render_to_file=graph)
    except HistogramWriteError as e:
        console.print(f"[red]{escape(e.message)}[/red]")
        histogram = e.histogram
        graph = False
    results.append(
        _report(
            "Normalized Histogram (Not Empty)",
            not histogram.is_empty and histogram.bin_count <= max_bins,
        )
    )
    if graph:
        console.print(f"{output} created")

    if not all(results):
        raise typer.Exit(1)


# =============================================================================
# analyze
# =============================================================================


def read_samples(path: Path, default_uri: str) -> dict[str, list[float]]:
    """
    Read latency samples from a text file.

    Each line holds a millisecond value, or ``uri,value``. Blank lines and
    lines starting with ``#`` are skipped.

    Raises:
        ValueError: If a value is not a finite, non-negative number
    """
    samples: dict[str, list[float]] = {}
    with open(path, encoding="utf-8") as f:
        for lineno, raw in enumerate(f, start=1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            uri, sep, value = line.rpartition(",")
            uri = uri.strip() if sep else default_uri
            try:
                latency = float(value)
            except ValueError:
                raise ValueError(f"{path}:{lineno}: not a number: {value.strip()!r}") from None
            if not math.isfinite(latency) or latency < 0:
                raise ValueError(
                    f"{path}:{lineno}: not a finite non-negative latency: {value.strip()!r}"
                )
            samples.setdefault(uri or default_uri, []).append(latency)
    return samples


@app.command("analyze")
def analyze(
    samples_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Samples file"),
    uri: str | None = typer.Option(None, "--uri", "-u", help="Only chart this URI"),
    max_bins: int | None = typer.Option(None, "--max-bins", help="Maximum histogram bins"),
    config_path: Path = typer.Option(
        Path("reqstats.toml"), "--config", "-c", help="TOML file with a [reqstats] table"
    ),
    graph: bool = typer.Option(False, "--graph", help="Write the chart to the histogram file"),
) -> None:
    """Summarize latency samples and print their histograms."""
    try:
        config = load_config(config_path)
        if max_bins is not None:
            config = config.model_copy(update={"max_bins": max_bins})
        collector = LatencyStatsCollector.from_config(config)
    except ConfigurationError as e:
        console.print(f"[red]Error: {escape(e.message)}[/red]")
        raise typer.Exit(2)

    try:
        data = read_samples(samples_file, default_uri=uri or EXAMPLE_URI)
        for name, values in data.items():
            for value in values:
                collector.record(name, value)
    except ValueError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(2)

    if not data:
        console.print(f"[yellow]No samples in {samples_file}[/yellow]")
        raise typer.Exit(1)
    if uri is not None and uri not in data:
        console.print(f"[yellow]No samples for {escape(uri)}[/yellow]")
        raise typer.Exit(1)

    table = Table(title="Response times (ms)")
    table.add_column("URI")
    table.add_column("Count", justify="right")
    table.add_column("Mean", justify="right")
    table.add_column("Std dev", justify="right")
    table.add_column("Min", justify="right")
    table.add_column("Max", justify="right")
    for name in collector.uris():
        summary = collector.summary(name)
        table.add_row(
            name,
            str(summary.count),
            f"{summary.mean_ms:.3f}",
            f"{summary.stddev_ms:.3f}",
            f"{summary.min_ms:.3f}",
            f"{summary.max_ms:.3f}",
        )
    console.print(table)

    charted = [uri] if uri is not None else collector.uris()
    for name in charted:
        histogram = collector.normalized_histogram(name)
        console.print(f"\n[bold]{escape(name)}[/bold] ({histogram.bin_count} bins)")
        typer.echo(render_chart(histogram), nl=False)

    if graph:
        target = charted[0]
        try:
            collector.normalized_histogram(target, render_to_file=True)
        except HistogramWriteError as e:
            console.print(f"[red]Error: {escape(e.message)}[/red]")
            raise typer.Exit(1)
        console.print(f"Chart for {target} written to {config.histogram_path}")


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


if __name__ == "__main__":
    main(sys.argv[1:])
