"""Command-line interface for taskplan."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Annotated

import typer

from .config import SchedulerConfig, discover_config
from .exceptions import CircularDependencyError, ConfigError
from .logger import setup_logger
from .models import Reminder
from .scheduler import Monitor, SchedulerService, format_reminder

app = typer.Typer(
    name="taskplan",
    help="Dependency-aware task scheduling with deadline, overdue and blocked reminders",
    add_completion=False,
)


@dataclass
class CliState:
    """Options shared by every command, set by the global callback."""

    config_path: Path | None = None
    today: date | None = None


def _parse_date(value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise typer.BadParameter(f"Invalid date '{value}', expected YYYY-MM-DD") from e


def _service(ctx: typer.Context) -> SchedulerService:
    state: CliState = ctx.obj
    try:
        config: SchedulerConfig = discover_config(state.config_path)
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e
    return SchedulerService.from_config(config, today=state.today)


def _echo_reminders(reminders: list[Reminder]) -> None:
    if not reminders:
        typer.echo("No reminders to send.")
        return
    typer.echo("\nTASK REMINDERS:\n")
    for reminder in reminders:
        typer.echo(format_reminder(reminder))


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help=(
                "Verbosity level: 0=warnings (default), 1=show changes, "
                "2=show all checks, 3=debug"
            ),
            min=0,
            max=3,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: taskplan_config.yaml if present)",
        ),
    ] = None,
    today: Annotated[
        str | None,
        typer.Option("--today", help="Scheduling date (YYYY-MM-DD), defaults to the current date"),
    ] = None,
) -> None:
    """Global options for taskplan commands."""
    setup_logger(verbose)
    ctx.obj = CliState(config_path=config, today=_parse_date(today))


@app.command()
def generate(ctx: typer.Context) -> None:
    """Generate a schedule from the task source and save it."""
    service = _service(ctx)
    if not service.generate():
        raise typer.Exit(1)
    typer.echo(f"Schedule saved to {service.store.path}")


@app.command()
def remind(ctx: typer.Context) -> None:
    """Print deadline, overdue and blocked reminders."""
    service = _service(ctx)
    _echo_reminders(service.reminders())


@app.command()
def recalculate(ctx: typer.Context) -> None:
    """Resync the saved schedule with the task source."""
    service = _service(ctx)
    result = service.recalculate()
    if result is None:
        raise typer.Exit(1)
    if result.changed:
        typer.echo(
            f"Schedule recalculated: {len(result.added)} added, "
            f"{len(result.removed)} removed, {len(result.updated)} updated"
        )
    else:
        typer.echo("No changes needed to the schedule.")


@app.command("export")
def export_command(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="File to write the schedule to")],
) -> None:
    """Export the current schedule to a JSON file."""
    service = _service(ctx)
    if not service.export_schedule(path):
        raise typer.Exit(1)
    typer.echo(f"Schedule exported to {path}")


@app.command("import")
def import_command(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="Schedule JSON file to import")],
) -> None:
    """Replace the current schedule with one from a JSON file."""
    service = _service(ctx)
    if not service.import_schedule(path):
        raise typer.Exit(1)
    typer.echo(f"Schedule imported from {path}")


@app.command()
def monitor(
    ctx: typer.Context,
    interval: Annotated[
        int | None,
        typer.Option("--interval", "-i", help="Minutes between checks", min=1),
    ] = None,
) -> None:
    """Recalculate and remind now, then again every interval until interrupted."""
    service = _service(ctx)
    runner = Monitor(service, interval, on_reminders=_echo_reminders)
    typer.echo(f"Monitor running every {runner.interval_minutes} minutes. Press Ctrl+C to stop.")
    try:
        runner.start()
    except KeyboardInterrupt:
        typer.echo("Monitor stopped.")


@app.command()
def auto(ctx: typer.Context) -> None:
    """Recalculate the schedule, then print reminders."""
    service = _service(ctx)
    result = service.recalculate()
    if result is None:
        raise typer.Exit(1)
    _echo_reminders(service.reminders(result.schedule))


@app.command()
def cycles(ctx: typer.Context) -> None:
    """Report circular dependencies among tasks."""
    service = _service(ctx)
    try:
        service.check_dependencies()
    except CircularDependencyError as e:
        typer.echo(f"Circular dependencies detected: {len(e.cycles)}")
        for index, cycle in enumerate(e.cycles, start=1):
            typer.echo(f"{index}. {' -> '.join(cycle)}")
        raise typer.Exit(1) from e
    typer.echo("No circular dependencies detected.")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
