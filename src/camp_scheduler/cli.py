"""CLI entry point for the camp class scheduler."""

import logging
from enum import Enum
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from .constants import PERIODS
from .exceptions import SchedulerError
from .exporters import get_exporter
from .loaders import load_inputs
from .scheduler import SearchConfig, TrialDriver, load_search_config
from .validators import CatalogValidator, RosterValidator

app = typer.Typer(
    name="camp-scheduler",
    help="Assign campers to class periods from ranked preferences",
    add_completion=False,
)
console = Console()


class OutputFormat(str, Enum):
    """Output format options."""

    json = "json"
    csv = "csv"
    excel = "excel"


ClassesArg = Annotated[
    Path,
    typer.Argument(help="Path to the class catalog JSON file"),
]
RosterArg = Annotated[
    Path,
    typer.Argument(help="Path to the camper roster (JSON, CSV or Excel)"),
]


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load(classes_file: Path, roster_file: Path):
    for path in (classes_file, roster_file):
        if not path.exists():
            console.print(f"[bold red]Error:[/bold red] File not found: {path}")
            raise typer.Exit(1)

    try:
        with console.status("[bold green]Loading classes and roster..."):
            return load_inputs(classes_file, roster_file)
    except SchedulerError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def schedule(
    classes_file: ClassesArg,
    roster_file: RosterArg,
    output: Annotated[
        Optional[Path],
        typer.Option("-o", "--output", help="Output file or directory path"),
    ] = None,
    format: Annotated[
        OutputFormat,
        typer.Option("-f", "--format", help="Output format"),
    ] = OutputFormat.json,
    attempts: Annotated[
        Optional[int],
        typer.Option("--attempts", help="Number of trials to run", min=1),
    ] = None,
    seed: Annotated[
        Optional[int],
        typer.Option("--seed", help="Base random seed for reproducible results"),
    ] = None,
    time_limit: Annotated[
        Optional[float],
        typer.Option("--time-limit", help="Stop starting new trials after this many seconds"),
    ] = None,
    workers: Annotated[
        Optional[int],
        typer.Option("--workers", help="Number of worker threads", min=1),
    ] = None,
    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", help="Path to a search config JSON file"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("-v", "--verbose", help="Show detailed output"),
    ] = False,
) -> None:
    """Search for the best schedule and export it."""
    _setup_logging(verbose)
    catalog, campers = _load(classes_file, roster_file)

    try:
        config = load_search_config(config_file) if config_file else SearchConfig()
        config = config.replace(
            max_attempts=attempts,
            seed=seed,
            time_limit=time_limit,
            workers=workers,
        )
    except SchedulerError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print(f"\n[bold]Schedule search for:[/bold] {roster_file.name}")
    console.print(f"  Classes: {len(catalog)}")
    console.print(f"  Campers: {len(campers)}")
    console.print(f"  Trials: {config.max_attempts}")

    progress = Progress(
        TextColumn("[bold green]Searching"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
    with progress:
        task = progress.add_task("search", total=100)
        driver = TrialDriver(
            catalog,
            campers,
            config,
            progress=lambda percent: progress.update(task, completed=percent),
        )
        try:
            result = driver.run()
        except SchedulerError as e:
            progress.stop()
            console.print(f"[bold red]Error:[/bold red] {e}")
            raise typer.Exit(1)

    best = result.best
    stats = result.statistics
    console.print("\n[bold]Search Results:[/bold]")
    console.print(f"  Best score: {best.score} (trial {best.trial_index})")
    console.print(f"  Trials completed: {stats.completed} of {stats.attempted}")
    console.print(f"  Trials failed: {stats.failed}")
    console.print(f"  Distinct scores: {stats.distinct_scores}")
    console.print(f"  Base seed: {stats.base_seed}")
    if stats.cancelled or stats.timed_out:
        console.print("  [yellow]Search stopped early[/yellow]")

    if best.eliminated:
        console.print(f"\n[bold yellow]Eliminated classes ({len(best.eliminated)}):[/bold yellow]")
        for title in sorted(best.eliminated):
            console.print(f"  [yellow]• {title}[/yellow]")

    overrides = best.override_enrollments()
    if overrides:
        console.print(f"\n[bold yellow]Over-capacity enrollments ({len(overrides)}):[/bold yellow]")
        for name, title, period in overrides:
            console.print(f"  [yellow]• {name}: {title} (period {period})[/yellow]")

    worst = best.worst_choice()
    if worst:
        console.print(f"\n  Worst choice: {worst[0]} in {worst[1]} (rank {worst[2]})")

    if verbose:
        _show_camper_table(best)

    if output:
        exporter = get_exporter(format.value)

        if format == OutputFormat.csv:
            # CSV exports to directory
            output_path = output if output.is_dir() else output.parent / output.stem
        else:
            if not output.suffix:
                suffix = "xlsx" if format == OutputFormat.excel else format.value
                output = output.with_suffix(f".{suffix}")
            output_path = output

        with console.status(f"[bold green]Exporting to {format.value}..."):
            exporter.export(result, output_path)

        console.print(f"\n[bold green]✓[/bold green] Exported to: {output_path}")


def _show_camper_table(best) -> None:
    """Print one row per camper with the class taken each period."""
    table = Table(title="Camper Schedules")
    table.add_column("Name", style="cyan")
    table.add_column("Age", justify="right")
    table.add_column("Swim", justify="right")
    for period in PERIODS:
        table.add_column(f"Period {period}", style="green")

    for row in best.camper_rows():
        table.add_row(
            row["name"],
            str(row["age"]),
            str(row["swim_level"]),
            *[row[f"period_{p}"] or "-" for p in PERIODS],
        )

    console.print(table)


@app.command()
def validate(
    classes_file: ClassesArg,
    roster_file: RosterArg,
) -> None:
    """Validate a class catalog and roster without scheduling."""
    catalog, campers = _load(classes_file, roster_file)

    catalog_valid, catalog_errors, catalog_warnings = CatalogValidator(catalog).validate_all()
    roster_valid, roster_errors, roster_warnings = RosterValidator(
        catalog, campers
    ).validate_all()

    errors = catalog_errors + roster_errors
    warnings = catalog_warnings + roster_warnings
    valid = catalog_valid and roster_valid

    console.print(f"\n[bold]Validation Results for:[/bold] {classes_file.name}, {roster_file.name}")

    if valid:
        console.print("[bold green]✓ Inputs are valid[/bold green]")
    else:
        console.print("[bold red]✗ Inputs have issues[/bold red]")

    console.print(f"\n  Classes: {len(catalog)}")
    console.print(f"  Campers: {len(campers)}")

    if errors:
        console.print(f"\n[bold red]Errors ({len(errors)}):[/bold red]")
        for error in errors:
            console.print(f"  [red]• {error}[/red]")

    if warnings:
        console.print(f"\n[bold yellow]Warnings ({len(warnings)}):[/bold yellow]")
        for warning in warnings:
            console.print(f"  [yellow]• {warning}[/yellow]")

    if not valid:
        raise typer.Exit(1)


@app.command()
def demand(
    classes_file: ClassesArg,
    roster_file: RosterArg,
    threshold: Annotated[
        Optional[int],
        typer.Option("--threshold", help="Minimum supporters for an optional class", min=0),
    ] = None,
) -> None:
    """Show how many campers choose each class and how many periods it gets."""
    catalog, campers = _load(classes_file, roster_file)

    config = SearchConfig().replace(elimination_threshold=threshold)
    try:
        with console.status("[bold green]Resolving choices..."):
            report = TrialDriver(catalog, campers, config).preview_demand()
    except SchedulerError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    table = Table(title="Class Demand")
    table.add_column("Class", style="cyan")
    table.add_column("Supporters", justify="right", style="green")
    table.add_column("Periods", justify="right", style="green")
    table.add_column("Status")

    for entry in catalog:
        if entry.title in report.eliminated:
            status = "[yellow]eliminated[/yellow]"
        elif entry.is_required:
            status = "required"
        else:
            status = ""
        table.add_row(
            entry.title,
            str(report.counts[entry.title]),
            str(report.period_counts[entry.title]),
            status,
        )

    console.print(table)
    console.print(f"\n  Total periods needed: {report.total_periods}")
    console.print(f"  Eliminated classes: {len(report.eliminated)}")


if __name__ == "__main__":
    app()
