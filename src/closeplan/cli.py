"""Command-line interface for closeplan."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from pathlib import Path
from typing import Annotated

import typer

from .config import UnifiedConfig, discover_config
from .exceptions import CloseplanError
from .graph import DependencyGraphGenerator
from .loader import load_workspace
from .logger import setup_logger
from .models import TaskStatus, Workspace
from .scheduling import date_status, format_cycle_name
from .service import ClosingService
from .store import write_workspace

app = typer.Typer(
    name="closeplan",
    help="Dependency-aware scheduling for recurring monthly closing checklists",
    add_completion=False,
)

WorkspaceArg = Annotated[Path, typer.Argument(help="Path to the workspace YAML file")]
BoardOption = Annotated[str, typer.Option("--board", "-b", help="Board ID")]
TodayOption = Annotated[
    str | None,
    typer.Option("--today", help="As-of date (YYYY-MM-DD). Defaults to today"),
]


@dataclass
class GlobalOptions:
    """Options given before the command name."""

    config_path: Path | None = None


_options = GlobalOptions()


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show changes, 2=show all checks, 3=debug",
            min=0,
            max=3,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: closeplan_config.yaml)",
        ),
    ] = None,
) -> None:
    """Global options for closeplan commands."""
    setup_logger(verbose)
    _options.config_path = config


def _parse_date_option(date_str: str | None, option_name: str) -> date | None:
    """Parse a YYYY-MM-DD CLI option, exiting with an error on bad input."""
    if date_str is None:
        return None

    try:
        return date.fromisoformat(date_str)
    except ValueError:
        typer.echo(
            f"Error: Invalid {option_name} '{date_str}'. Use YYYY-MM-DD format.",
            err=True,
        )
        raise typer.Exit(1) from None


def _as_of(today: date | None) -> datetime | None:
    """Pin "now" to the start of an explicit as-of day."""
    return datetime.combine(today, time()) if today else None


def _load(file: Path) -> tuple[Workspace, UnifiedConfig]:
    """Load workspace and config, turning failures into CLI errors."""
    try:
        workspace = load_workspace(file)
        config = discover_config(file, _options.config_path)
    except (CloseplanError, FileNotFoundError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    return workspace, config


@app.command()
def validate(file: WorkspaceArg = Path("workspace.yaml")) -> None:
    """Check a workspace for broken references and circular dependencies."""
    workspace, _ = _load(file)
    typer.echo(
        f"OK: {len(workspace.definitions)} definition(s), {len(workspace.boards)} board(s), "
        f"{len(workspace.cycles)} cycle(s), {len(workspace.executions)} execution(s)"
    )


@app.command()
def schedule(  # noqa: PLR0913 - CLI command needs multiple options
    file: WorkspaceArg = Path("workspace.yaml"),
    *,
    board: BoardOption,
    cycle: Annotated[
        str | None, typer.Option("--cycle", help="Cycle ID (default: board's current cycle)")
    ] = None,
    today: TodayOption = None,
    write: Annotated[
        bool, typer.Option("--write", help="Save recalculated dates back to the workspace")
    ] = False,
) -> None:
    """Recalculate a board's schedule and display it."""
    parsed_today = _parse_date_option(today, "today")
    workspace, config = _load(file)
    service = ClosingService(workspace, config.scheduling)

    try:
        executions = service.recalculate_board_schedule(board, cycle, now=_as_of(parsed_today))
        target_cycle = service.require_cycle(cycle) if cycle else service.current_cycle(board)
    except CloseplanError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    if target_cycle is None:
        typer.echo(f"Board '{board}' has no current cycle", err=True)
        raise typer.Exit(1)

    as_of = parsed_today or date.today()  # noqa: DTZ011
    typer.echo(f"Schedule: {format_cycle_name(target_cycle, config.display.month_names)}")
    typer.echo("=" * 80)
    for execution in executions:
        definition = service.require_definition(execution.task_definition_id)
        state = date_status(
            execution.end_date,
            execution.status == TaskStatus.COMPLETED,
            as_of,
            config.display.warning_days,
        )
        typer.echo(
            f"{execution.order:>3}  {definition.name:<40} "
            f"{execution.start_date} -> {execution.end_date}  "
            f"{execution.status.value:<12} {state.value}"
        )

    if write:
        write_workspace(file, workspace)
        typer.echo(f"Schedule written to {file}")


@app.command()
def rollover(
    file: WorkspaceArg = Path("workspace.yaml"),
    *,
    today: TodayOption = None,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Report new cycles without saving them")
    ] = False,
) -> None:
    """Start a new monthly cycle for every recurring board whose cycle has ended."""
    parsed_today = _parse_date_option(today, "today")
    workspace, config = _load(file)
    service = ClosingService(workspace, config.scheduling)

    try:
        created = service.check_monthly_reset(parsed_today, now=_as_of(parsed_today))
    except CloseplanError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    if not created:
        typer.echo("All cycles are current")
        return

    for cycle in created:
        board = service.require_board(cycle.board_id)
        count = len(workspace.executions_for(board.id, cycle.id))
        typer.echo(
            f"{board.name}: {format_cycle_name(cycle, config.display.month_names)} "
            f"({count} task(s))"
        )

    if not dry_run:
        write_workspace(file, workspace)
        typer.echo(f"Workspace written to {file}")


@app.command()
def stats(
    file: WorkspaceArg = Path("workspace.yaml"),
    *,
    board: BoardOption,
    today: TodayOption = None,
) -> None:
    """Show progress statistics for a board's current cycle."""
    parsed_today = _parse_date_option(today, "today")
    workspace, config = _load(file)
    service = ClosingService(workspace, config.scheduling)

    try:
        result = service.board_stats(board, today=parsed_today)
    except CloseplanError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    typer.echo(f"Total:        {result.total}")
    typer.echo(f"Completed:    {result.completed}")
    typer.echo(f"In progress:  {result.in_progress}")
    typer.echo(f"Not started:  {result.not_started}")
    typer.echo(f"Overdue:      {result.overdue}")
    typer.echo(f"Avg progress: {result.average_progress}%")
    typer.echo(f"Completion:   {result.completion_rate}%")


@app.command()
def graph(
    file: WorkspaceArg = Path("workspace.yaml"),
    *,
    board: BoardOption,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
) -> None:
    """Generate a board's dependency graph in DOT format."""
    workspace, _ = _load(file)
    target = workspace.get_board(board)
    if target is None:
        typer.echo(f"Error: Unknown board: {board}", err=True)
        raise typer.Exit(1)

    dot_output = DependencyGraphGenerator(workspace).generate(target, target.current_cycle_id)

    if output:
        output.write_text(dot_output, encoding="utf-8")
        typer.echo(f"Graph written to {output}")
    else:
        typer.echo(dot_output)


@app.command()
def status(
    execution_id: Annotated[str, typer.Argument(help="Execution ID")],
    new_status: Annotated[TaskStatus, typer.Argument(help="New status", metavar="STATUS")],
    file: Annotated[
        Path, typer.Option("--file", "-f", help="Path to the workspace YAML file")
    ] = Path("workspace.yaml"),
    progress: Annotated[
        int | None, typer.Option("--progress", "-p", help="Progress percentage", min=0, max=100)
    ] = None,
) -> None:
    """Move a task execution to a new status."""
    workspace, config = _load(file)
    service = ClosingService(workspace, config.scheduling)

    try:
        execution = service.update_execution_status(execution_id, new_status, progress)
    except CloseplanError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    write_workspace(file, workspace)
    typer.echo(f"{execution.id}: {execution.status.value} ({execution.progress}%)")


def main() -> int:
    """Main entry point."""
    app()
    return 0


if __name__ == "__main__":
    main()
