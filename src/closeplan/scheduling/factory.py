"""Instantiation and recalculation of task executions for monthly cycles."""

from __future__ import annotations

import uuid
from collections.abc import Callable, Sequence
from dataclasses import replace
from datetime import date, datetime

from closeplan.exceptions import ValidationError
from closeplan.logger import get_logger
from closeplan.models import Board, MonthlyCycle, TaskDefinition, TaskExecution, TaskStatus

from .config import SchedulingConfig
from .dates import calculate_end_date, calculate_start_date, get_cycle_dates
from .graph import topological_sort, validate_dependencies

logger = get_logger()

DEFAULT_MONTH_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]


def generate_id() -> str:
    """Generate a unique record id."""
    return uuid.uuid4().hex


def _schedule_in_order(  # noqa: PLR0913
    sorted_definitions: list[TaskDefinition],
    working_set: Sequence[TaskDefinition],
    execution_map: dict[str, TaskExecution],
    cycle_start_date: date,
    config: SchedulingConfig,
    make_execution: Callable[[int, TaskDefinition, date, date], TaskExecution],
) -> list[TaskExecution]:
    """Walk sorted definitions once, computing dates against the accumulator.

    Each computed execution replaces its entry in ``execution_map`` so later
    tasks see their dependencies' new dates. ``working_set`` decides which
    missing dependencies the ERROR policy reports.
    """
    results: list[TaskExecution] = []
    for index, definition in enumerate(sorted_definitions):
        start_date = calculate_start_date(
            definition,
            working_set,
            execution_map,
            cycle_start_date,
            missing_dependencies=config.missing_dependencies,
        )
        end_date = calculate_end_date(start_date, definition.duration_days)
        logger.checks(
            f"  {definition.id}: {start_date} -> {end_date} "
            f"({definition.duration_days}d, after {definition.dependencies or 'cycle start'})"
        )

        execution = make_execution(index, definition, start_date, end_date)
        results.append(execution)
        execution_map[definition.id] = execution
    return results


def create_executions_for_cycle(  # noqa: PLR0913 - keyword-only knobs for determinism
    board: Board,
    cycle: MonthlyCycle,
    definitions: Sequence[TaskDefinition],
    *,
    now: datetime | None = None,
    config: SchedulingConfig | None = None,
    id_factory: Callable[[], str] = generate_id,
) -> list[TaskExecution]:
    """Create one not-started execution per board definition for a new cycle.

    Definitions outside ``board.task_definition_ids`` are ignored. Executions
    are ordered topologically and ``order`` records that position.

    Raises:
        CircularDependencyError: If the board's definitions form a cycle.
    """
    timestamp = now or datetime.now()  # noqa: DTZ005
    config = config or SchedulingConfig()

    board_ids = set(board.task_definition_ids)
    board_definitions = [d for d in definitions if d.id in board_ids]
    validate_dependencies(board_definitions)
    sorted_definitions = topological_sort(board_definitions)

    logger.checks(f"Scheduling {len(sorted_definitions)} task(s) for board '{board.id}'")

    def make_execution(
        index: int, definition: TaskDefinition, start_date: date, end_date: date
    ) -> TaskExecution:
        return TaskExecution(
            id=id_factory(),
            task_definition_id=definition.id,
            board_id=board.id,
            cycle_id=cycle.id,
            start_date=start_date,
            end_date=end_date,
            status=TaskStatus.NOT_STARTED,
            progress=0,
            order=index,
            created_at=timestamp,
            updated_at=timestamp,
        )

    return _schedule_in_order(
        sorted_definitions, board_definitions, {}, cycle.start_date, config, make_execution
    )


def recalculate_schedule(
    definitions: Sequence[TaskDefinition],
    executions: Sequence[TaskExecution],
    cycle_start_date: date,
    *,
    now: datetime | None = None,
    config: SchedulingConfig | None = None,
) -> list[TaskExecution]:
    """Recompute every execution's dates from scratch.

    Only ``start_date``, ``end_date`` and ``updated_at`` change; the returned
    executions are new objects in topological order. Executions whose
    definition is not in ``definitions`` are left out of the result.

    ``definitions`` is also the working set for
    ``DependencyPolicy.ERROR``: a dependency listed there without an
    execution raises UnresolvedDependencyError.

    Raises:
        ValidationError: If two executions belong to the same definition.
        CircularDependencyError: If the relevant definitions form a cycle.
        UnresolvedDependencyError: Under the ERROR policy, see above.
    """
    timestamp = now or datetime.now()  # noqa: DTZ005
    config = config or SchedulingConfig()

    execution_map: dict[str, TaskExecution] = {}
    for execution in executions:
        if execution.task_definition_id in execution_map:
            raise ValidationError(
                f"Task definition '{execution.task_definition_id}' has more than one "
                "execution in the same schedule"
            )
        execution_map[execution.task_definition_id] = execution

    relevant = [d for d in definitions if d.id in execution_map]
    orphaned = set(execution_map) - {d.id for d in relevant}
    for definition_id in sorted(orphaned):
        logger.warning(
            f"Execution '{execution_map[definition_id].id}' belongs to task definition "
            f"'{definition_id}', which is not being scheduled - left unchanged"
        )

    validate_dependencies(relevant)
    sorted_definitions = topological_sort(relevant)

    def make_execution(
        index: int, definition: TaskDefinition, start_date: date, end_date: date
    ) -> TaskExecution:
        previous = execution_map[definition.id]
        logger.rescheduled(
            definition.id, (previous.start_date, previous.end_date), (start_date, end_date)
        )
        return replace(
            previous,
            start_date=start_date,
            end_date=end_date,
            updated_at=timestamp,
        )

    return _schedule_in_order(
        sorted_definitions, definitions, execution_map, cycle_start_date, config, make_execution
    )


def should_create_new_cycle(cycle: MonthlyCycle | None, today: date | None = None) -> bool:
    """Check whether a board needs a new cycle.

    True when there is no cycle yet or today has reached the cycle's
    exclusive end date.
    """
    if cycle is None:
        return True
    today = today or date.today()  # noqa: DTZ011
    return not today < cycle.end_date


def create_cycle(
    board_id: str,
    year: int,
    month: int,
    *,
    now: datetime | None = None,
    id_factory: Callable[[], str] = generate_id,
) -> MonthlyCycle:
    """Create an active cycle spanning the given month."""
    start_date, end_date = get_cycle_dates(year, month)
    return MonthlyCycle(
        id=id_factory(),
        board_id=board_id,
        year=year,
        month=month,
        start_date=start_date,
        end_date=end_date,
        created_at=now or datetime.now(),  # noqa: DTZ005
    )


def current_year_month(today: date | None = None) -> tuple[int, int]:
    """Get (year, month) of today."""
    today = today or date.today()  # noqa: DTZ011
    return today.year, today.month


def format_cycle_name(cycle: MonthlyCycle, month_names: Sequence[str] | None = None) -> str:
    """Format a cycle as e.g. "March 2025"."""
    names = month_names or DEFAULT_MONTH_NAMES
    return f"{names[cycle.month - 1]} {cycle.year}"
