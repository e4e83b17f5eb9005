"""
Assessment command for time series quality evaluation.

Reads one or more delimited files, assesses every value column with an
independent engine, prints a score table and writes JSON, CSV and markdown
outputs.
"""

import click
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tsquality.cli import cli, common_options
from tsquality.config import Config
from tsquality.logger import configure_logging, get_logger
from tsquality.pipeline import AssessmentPipeline, BatchResult
from tsquality.reporter import write_outputs
from tsquality.thresholds import RAGStatus


console = Console(legacy_windows=False)
logger = get_logger(__name__)

RAG_COLORS = {
    RAGStatus.GREEN: "green",
    RAGStatus.AMBER: "yellow",
    RAGStatus.RED: "red",
}


@cli.command()
@common_options
@click.argument(
    'inputs',
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    '--separator',
    default=None,
    help='Field separator (default: from config, ",")',
)
@click.option(
    '--no-header',
    is_flag=True,
    help='Treat the first line as data rather than column names',
)
@click.option(
    '--no-date-conversion',
    is_flag=True,
    help='Do not convert YYYY-MM-DD tokens to epoch milliseconds',
)
@click.option(
    '--output-dir',
    type=click.Path(path_type=Path),
    default=Path('output/quality'),
    help='Output directory for reports (default: output/quality)',
)
@click.option(
    '--no-timestamp',
    is_flag=True,
    help='Disable timestamped output directories',
)
@click.option(
    '--config',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to a tsquality YAML config file (overrides --config-dir)',
)
@click.option(
    '--window-size',
    type=int,
    help='Override the sliding window size for temporal classification',
)
@click.option(
    '--outlier-k',
    type=float,
    help='Override the outlier multiplier (robust sigmas)',
)
@click.option(
    '--workers',
    type=int,
    help='Number of series assessed in parallel',
)
def assess(
    config_dir,
    log_level,
    log_file,
    inputs,
    separator,
    no_header,
    no_date_conversion,
    output_dir,
    no_timestamp,
    config,
    window_size,
    outlier_k,
    workers,
):
    """
    Assess the quality of one or more time series tables.

    Each INPUT is a delimited file whose first column holds timestamps and
    whose further columns each hold one value series. Empty cells are
    missing values and are repaired by linear interpolation.

    Generates:
    - Quality metrics JSON
    - Original and cleaned points CSV per series
    - Markdown report with status per series

    Examples:
        # Assess a file with default settings
        tsquality assess sensors.csv

        # Semicolon-separated file without header
        tsquality assess --separator ';' --no-header raw.csv

        # Custom config and parallel series
        tsquality assess --config custom.yaml --workers 4 a.csv b.csv
    """
    configure_logging(log_level, log_file=log_file)

    console.print("\n[bold cyan]📈 Time Series Quality Assessment[/bold cyan]\n")

    try:
        overrides = _build_overrides(
            separator, no_header, no_date_conversion, window_size, outlier_k, workers
        )
        settings = Config(config_path=config or config_dir, overrides=overrides)

        _display_configuration(inputs, settings, output_dir, no_timestamp)

        pipeline = AssessmentPipeline(settings)
        results = [pipeline.assess_file(path) for path in inputs]

        paths = write_outputs(
            results,
            output_dir,
            thresholds=settings.thresholds,
            use_timestamp=not no_timestamp,
        )

        _display_summary(results, paths)

        overall = RAGStatus.worst([r.rag_status for r in results])
        if any(not r.success for r in results):
            console.print("\n[bold red]❌ Assessment FAILED - Input could not be parsed[/bold red]")
            sys.exit(1)
        elif overall == RAGStatus.RED:
            console.print("\n[bold red]❌ Assessment FAILED - Quality below thresholds[/bold red]")
            sys.exit(1)
        elif overall == RAGStatus.AMBER:
            console.print("\n[bold yellow]⚠️  Assessment completed with WARNINGS[/bold yellow]")
            sys.exit(0)
        else:
            console.print("\n[bold green]✅ Assessment PASSED - All checks passed[/bold green]")
            sys.exit(0)

    except FileNotFoundError as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        logger.error(f"File not found: {e}")
        sys.exit(1)

    except ValueError as e:
        console.print(f"\n[bold red]Invalid configuration:[/bold red] {e}")
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)


def _build_overrides(
    separator: Optional[str],
    no_header: bool,
    no_date_conversion: bool,
    window_size: Optional[int],
    outlier_k: Optional[float],
    workers: Optional[int],
) -> Dict[str, Dict[str, Any]]:
    """Build nested config overrides from CLI options."""
    overrides: Dict[str, Dict[str, Any]] = {"csv": {}, "detection": {}, "processing": {}}

    if separator is not None:
        overrides["csv"]["separator"] = separator
    if no_header:
        overrides["csv"]["header"] = False
    if no_date_conversion:
        overrides["csv"]["convert_dates"] = False

    if window_size is not None:
        overrides["detection"]["window_size"] = window_size
    if outlier_k is not None:
        overrides["detection"]["outlier_k"] = outlier_k

    if workers is not None:
        overrides["processing"]["max_workers"] = workers

    return {section: values for section, values in overrides.items() if values}


def _display_configuration(
    inputs: List[Path],
    settings: Config,
    output_dir: Path,
    no_timestamp: bool,
):
    """Display assessment configuration."""
    config_table = Table(show_header=False, box=None, padding=(0, 2))
    config_table.add_column("Setting", style="cyan")
    config_table.add_column("Value", style="white")

    detection = settings.detection
    csv_options = settings.csv

    config_table.add_row("Inputs", ", ".join(str(p) for p in inputs))
    config_table.add_row("Separator", repr(csv_options.get("separator", ",")))
    config_table.add_row("Header", "Yes" if csv_options.get("header", True) else "No")
    config_table.add_row("Window Size", str(detection.window_size))
    config_table.add_row("Outlier k", str(detection.outlier_k))
    config_table.add_row("Output Directory", str(output_dir))
    config_table.add_row("Timestamped Output", "No" if no_timestamp else "Yes")

    console.print(Panel(config_table, title="Configuration", border_style="cyan"))
    console.print()


def _display_summary(results: List[BatchResult], paths: Dict[str, Path]):
    """Display per-series scores with Rich formatting."""
    scores_table = Table(title="Quality Scores", show_header=True)
    scores_table.add_column("Input", style="cyan")
    scores_table.add_column("Series", style="cyan")
    scores_table.add_column("Samples", justify="right")
    scores_table.add_column("Completeness", justify="right")
    scores_table.add_column("Consistency", justify="right")
    scores_table.add_column("Timeliness", justify="right")
    scores_table.add_column("Validity", justify="right")
    scores_table.add_column("Status")

    for result in results:
        if not result.success:
            scores_table.add_row(
                result.source, "-", "-", "-", "-", "-", "-", "[red]FAILED[/red]"
            )
            continue

        for a in result.assessments:
            color = RAG_COLORS[a.rag_status]
            r = a.report
            scores_table.add_row(
                result.source,
                a.name,
                f"{a.counters.total:,}",
                f"{r.completeness:.4f}",
                f"{r.consistency:.4f}",
                f"{r.timeliness:.4f}",
                f"{r.validity:.4f}",
                f"[{color}]{a.rag_status}[/{color}]",
            )

    console.print(scores_table)
    console.print()

    for result in results:
        if result.error:
            console.print(f"  [red]•[/red] {result.source}: {result.error}")

    console.print("[bold]Output Files:[/bold]")
    console.print(f"  📊 Metrics: [cyan]{paths['metrics_json']}[/cyan]")
    console.print(f"  📋 Points: [cyan]{paths['points_dir']}[/cyan]")
    console.print(f"  📄 Quality Report: [cyan]{paths['report_md']}[/cyan]")
    console.print()
