"""
CLI module - Command line interface for organize-media

Entry point for the `organize-media` command using Typer.
"""

import logging
import os
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn
from rich.table import Table

from . import __version__
from .config import AppConfig, LoggingConfig, load_config, validate_config
from .constants import MISSING_DATES_CSV
from .exiftool import ExifToolError, find_exiftool
from .organizer import OrganizeCallbacks, OrganizeResult, find_undated, organize
from .planner import PlacementAction
from .report import write_missing_dates_csv

console = Console()
err_console = Console(stderr=True)
app = typer.Typer(
    name="organize-media",
    help="organize-media - Sort photos and videos into a dated library, keeping Live Photos together.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool):
    if value:
        console.print(f"organize-media version {__version__}")
        raise typer.Exit()


ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to config file", exists=True, dir_okay=False),
]


def setup_logging(cfg: LoggingConfig) -> None:
    """Route log records through Rich on stderr, plus an optional log file."""
    handlers: list[logging.Handler] = [RichHandler(console=err_console, show_path=False)]
    if cfg.file:
        cfg.file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(cfg.file, encoding="utf-8", errors="backslashreplace")
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        handlers.append(file_handler)

    logging.basicConfig(level=cfg.level.upper(), format="%(message)s", handlers=handlers, force=True)


def get_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration, exit on invalid values, then set up logging."""
    cfg = load_config(config_path)

    errors = validate_config(cfg)
    if errors:
        for error in errors:
            console.print(f"[red]Error:[/red] {error}")
        raise typer.Exit(1)

    setup_logging(cfg.logging)
    return cfg


def _shown(path: str | Path) -> str:
    """Printable form of a path whose name may hold undecodable bytes."""
    return os.fsencode(path).decode("utf-8", errors="replace")


def _progress() -> Progress:
    return Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        TextColumn("[dim]{task.fields[filename]}[/dim]"),
        console=console,
    )


def _progress_callbacks(progress: Progress) -> OrganizeCallbacks:
    tasks: dict[str, int] = {}

    def on_metadata_start(total: int):
        tasks["metadata"] = progress.add_task("Reading metadata", total=total, filename="")

    def on_metadata_progress(record):
        progress.update(tasks["metadata"], advance=1, filename=_shown(record.path.name))

    def on_place_start(total: int):
        tasks["place"] = progress.add_task("Copying files   ", total=total, filename="")

    def on_place_progress(decision, action):
        progress.update(tasks["place"], advance=1, filename=_shown(decision.source_path.name))

    return OrganizeCallbacks(
        on_metadata_start=on_metadata_start,
        on_metadata_progress=on_metadata_progress,
        on_place_start=on_place_start,
        on_place_progress=on_place_progress,
    )


def _print_summary(result: OrganizeResult) -> None:
    title = "Dry Run" if result.dry_run else "Summary"
    table = Table(title=title)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    copied_label = "Would copy" if result.dry_run else "Copied"
    table.add_row("Media files", str(result.files_found))
    table.add_row("Metadata records", str(result.records_read))
    table.add_row(copied_label, str(result.files_copied))
    table.add_row("Skipped (exists)", str(result.files_skipped))
    table.add_row("Without date", str(len(result.no_date_files)))
    console.print(table)

    if result.report_path:
        console.print(f"[yellow]No-date report:[/yellow] {result.report_path}")
    console.print(f"[green]Output files in:[/green] {result.target}")


@app.callback()
def main(
    version: Annotated[
        bool, typer.Option("--version", "-v", callback=version_callback, is_eager=True, help="Show version")
    ] = False,
):
    """organize-media - Sort photos and videos into a dated library, keeping Live Photos together."""
    pass


@app.command("organize")
def organize_cmd(
    source: Annotated[
        Path | None,
        typer.Argument(help="Folder to scan for media, defaults to paths.source", exists=True, file_okay=False),
    ] = None,
    target: Annotated[
        Path | None, typer.Argument(help="Library root to copy into, defaults to paths.target", file_okay=False)
    ] = None,
    recover_date: Annotated[
        bool, typer.Option("--recover-date", help="Fall back to container/modify dates (names get -approx)")
    ] = False,
    jobs: Annotated[int | None, typer.Option("--jobs", "-j", min=1, help="Parallel hashing/copy workers")] = None,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Show what would be done without copying")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", help="List every planned copy")] = False,
    config: ConfigOption = None,
):
    """
    Copy media into TARGET/YYYY/MM/DD with date- and hash-based names.

    Files without a capture date go to TARGET/no-photo-taken-date and are
    listed in TARGET/no-date-report.txt. Existing targets are skipped, so
    the command can be re-run safely.

    [bold]Examples:[/bold]

        organize-media organize ~/Pictures ~/Pictures/Organized

        organize-media organize ./DCIM ./library --recover-date --jobs 4
    """
    cfg = get_config(config)
    source = source or cfg.paths.source
    target = target or cfg.paths.target
    if source is None or target is None:
        console.print("[red]Error:[/red] SOURCE and TARGET are required (arguments or paths.source/paths.target)")
        raise typer.Exit(2)
    if not source.is_dir():
        console.print(f"[red]Error:[/red] source does not exist: {source}")
        raise typer.Exit(1)
    recover_date = recover_date or cfg.processing.recover_date
    if jobs is None:
        jobs = cfg.processing.parallel_jobs

    console.print(f"\n[bold]Organizing:[/bold] {source}")
    console.print(f"  Target:        {target}")
    console.print(f"  Recover dates: {'yes' if recover_date else 'no'}")
    console.print()

    try:
        with _progress() as progress:
            result = organize(
                source,
                target,
                recover_date=recover_date,
                jobs=jobs,
                dry_run=dry_run,
                exiftool=cfg.exiftool.path,
                batch_size=cfg.exiftool.batch_size,
                callbacks=_progress_callbacks(progress),
            )
    except (ExifToolError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None

    if dry_run or verbose:
        for decision in result.decisions:
            if decision.action == PlacementAction.COPY:
                console.print(f"  [blue]COPY:[/blue] {_shown(decision.source_path)} -> {decision.target_path}")
            else:
                console.print(f"  [dim]SKIP (exists):[/dim] {decision.target_path}")

    _print_summary(result)


@app.command("missing-dates")
def missing_dates(
    source: Annotated[Path, typer.Argument(help="Folder to scan for media", exists=True, file_okay=False)],
    output: Annotated[Path, typer.Argument(help="CSV file to write", dir_okay=False)] = Path(MISSING_DATES_CSV),
    config: ConfigOption = None,
):
    """List media files that have no usable date in any metadata field."""
    cfg = get_config(config)

    try:
        with console.status("Reading metadata..."):
            undated = find_undated(source, exiftool=cfg.exiftool.path, batch_size=cfg.exiftool.batch_size)
    except (ExifToolError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None

    count = write_missing_dates_csv(undated, output)
    console.print(f"Files without date: {count}")
    console.print(f"[green]CSV saved to:[/green] {output}")


@app.command()
def check(config: ConfigOption = None):
    """Check that ExifTool is available."""
    cfg = load_config(config)
    path = find_exiftool(cfg.exiftool.path)

    table = Table(title="System Dependencies")
    table.add_column("Tool", style="cyan")
    table.add_column("Status")
    table.add_column("Path", style="dim")

    if path:
        table.add_row("exiftool", "[green]Available[/green]", str(path))
    else:
        table.add_row("exiftool", "[red]Missing[/red]", "-")

    console.print(table)

    if path is None:
        console.print("\n[yellow]Warning:[/yellow] ExifTool is required to read capture dates.")
        console.print("Install it: sudo apt install libimage-exiftool-perl (or set ORGANIZE_MEDIA_EXIFTOOL)")
        raise typer.Exit(1)


@app.command("show-config")
def show_config(config: ConfigOption = None):
    """Print the effective configuration as YAML."""
    cfg = load_config(config)
    console.print(yaml.safe_dump(cfg.to_dict(), sort_keys=False), markup=False)
