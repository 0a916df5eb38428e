"""Closing-process operations over a loaded workspace."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from datetime import date, datetime
from typing import Any

from .exceptions import MissingReferenceError, ValidationError
from .legacy import LegacyTask, execution_to_legacy_task
from .logger import get_logger
from .models import (
    Board,
    BoardType,
    CycleStatus,
    MonthlyCycle,
    Priority,
    TaskDefinition,
    TaskExecution,
    TaskStatus,
    Workspace,
)
from .scheduling import (
    CycleStats,
    SchedulingConfig,
    calculate_cycle_stats,
    calculate_end_date,
    create_cycle,
    create_executions_for_cycle,
    current_year_month,
    format_cycle_name,
    generate_id,
    recalculate_schedule,
    should_create_new_cycle,
    validate_dependencies,
)

logger = get_logger()

EDITABLE_DEFINITION_FIELDS = {
    "name",
    "description",
    "duration_days",
    "dependencies",
    "priority",
    "assignee",
    "is_recurring",
}


def _now(now: datetime | None) -> datetime:
    return now or datetime.now()  # noqa: DTZ005


class ClosingService:
    """Board, cycle and execution operations for the closing process.

    The service mutates only its own workspace; the scheduling functions it
    coordinates are pure. Every operation accepts an explicit ``now`` so
    results can be reproduced.
    """

    def __init__(
        self,
        workspace: Workspace,
        config: SchedulingConfig | None = None,
        id_factory: Callable[[], str] = generate_id,
    ):
        """Initialize the service.

        Args:
            workspace: Records to operate on
            config: Optional scheduling configuration
            id_factory: Generator for new record ids
        """
        self.workspace = workspace
        self.config = config or SchedulingConfig()
        self.id_factory = id_factory

    # ---------------------------------------------------------------- lookups

    def require_board(self, board_id: str) -> Board:
        """Get a board or raise MissingReferenceError."""
        board = self.workspace.get_board(board_id)
        if board is None:
            raise MissingReferenceError(f"Unknown board: {board_id}")
        return board

    def require_definition(self, definition_id: str) -> TaskDefinition:
        """Get a task definition or raise MissingReferenceError."""
        definition = self.workspace.get_definition(definition_id)
        if definition is None:
            raise MissingReferenceError(f"Unknown task definition: {definition_id}")
        return definition

    def require_cycle(self, cycle_id: str) -> MonthlyCycle:
        """Get a cycle or raise MissingReferenceError."""
        cycle = self.workspace.get_cycle(cycle_id)
        if cycle is None:
            raise MissingReferenceError(f"Unknown cycle: {cycle_id}")
        return cycle

    def require_execution(self, execution_id: str) -> TaskExecution:
        """Get an execution or raise MissingReferenceError."""
        execution = self.workspace.get_execution(execution_id)
        if execution is None:
            raise MissingReferenceError(f"Unknown execution: {execution_id}")
        return execution

    def current_cycle(self, board_id: str) -> MonthlyCycle | None:
        """Get the board's current cycle, if it has one."""
        board = self.require_board(board_id)
        if not board.current_cycle_id:
            return None
        return self.workspace.get_cycle(board.current_cycle_id)

    def board_definitions(self, board: Board) -> list[TaskDefinition]:
        """Get a board's definitions in workspace order."""
        board_ids = set(board.task_definition_ids)
        return [d for d in self.workspace.definitions if d.id in board_ids]

    # ----------------------------------------------------------------- boards

    def create_board(
        self,
        name: str,
        description: str | None = None,
        board_type: BoardType = BoardType.RECURRING,
        *,
        now: datetime | None = None,
    ) -> Board:
        """Create an empty board; recurring boards start with this month's cycle."""
        now = _now(now)
        board = Board(
            id=self.id_factory(),
            name=name,
            description=description,
            type=board_type,
            created_at=now,
            updated_at=now,
        )
        self.workspace.boards.append(board)
        logger.changes(f"Created board '{board.id}' ({name})")

        if board_type == BoardType.RECURRING:
            year, month = current_year_month(now.date())
            self.create_cycle(board.id, year, month, now=now)

        return board

    # ----------------------------------------------------------------- cycles

    def create_cycle(
        self, board_id: str, year: int, month: int, *, now: datetime | None = None
    ) -> MonthlyCycle:
        """Add a cycle for the given month and make it the board's current one."""
        now = _now(now)
        board = self.require_board(board_id)
        cycle = create_cycle(board.id, year, month, now=now, id_factory=self.id_factory)
        self.workspace.cycles.append(cycle)
        board.current_cycle_id = cycle.id
        board.updated_at = now
        logger.changes(f"Created cycle {format_cycle_name(cycle)} for board '{board.id}'")
        return cycle

    def complete_cycle(self, cycle_id: str, *, now: datetime | None = None) -> MonthlyCycle:
        """Mark a cycle completed."""
        cycle = self.require_cycle(cycle_id)
        cycle.status = CycleStatus.COMPLETED
        cycle.completed_at = _now(now)
        return cycle

    def check_monthly_reset(
        self, today: date | None = None, *, now: datetime | None = None
    ) -> list[MonthlyCycle]:
        """Roll recurring boards whose cycle has ended over to today's month.

        The expired cycle is completed, a new one is created and filled with
        fresh executions for the board's definitions.

        Returns:
            The cycles created, one per board that rolled over
        """
        now = _now(now)
        today = today or now.date()
        year, month = current_year_month(today)
        created: list[MonthlyCycle] = []

        for board in self.workspace.boards:
            if board.type != BoardType.RECURRING:
                continue

            previous = (
                self.workspace.get_cycle(board.current_cycle_id)
                if board.current_cycle_id
                else None
            )
            if not should_create_new_cycle(previous, today):
                logger.checks(f"Board '{board.id}' cycle is still open")
                continue

            if previous:
                self.complete_cycle(previous.id, now=now)

            cycle = self.create_cycle(board.id, year, month, now=now)
            executions = create_executions_for_cycle(
                board,
                cycle,
                self.workspace.definitions,
                now=now,
                config=self.config,
                id_factory=self.id_factory,
            )
            self.workspace.executions.extend(executions)
            logger.changes(f"  {len(executions)} execution(s) created for board '{board.id}'")
            created.append(cycle)

        return created

    # --------------------------------------------------------------- schedule

    def recalculate_board_schedule(
        self, board_id: str, cycle_id: str | None = None, *, now: datetime | None = None
    ) -> list[TaskExecution]:
        """Recompute dates of a board's executions in one cycle (default: current).

        Returns:
            The recalculated executions, in topological order
        """
        board = self.require_board(board_id)
        effective_cycle_id = cycle_id or board.current_cycle_id
        if not effective_cycle_id:
            return []
        cycle = self.require_cycle(effective_cycle_id)

        executions = self.workspace.executions_for(board.id, cycle.id)
        updated = recalculate_schedule(
            self.board_definitions(board),
            executions,
            cycle.start_date,
            now=_now(now),
            config=self.config,
        )
        self._merge_executions(updated)
        logger.changes(
            f"Rescheduled {len(updated)} execution(s) of board '{board.id}' "
            f"in {format_cycle_name(cycle)}"
        )
        return updated

    def _merge_executions(self, updated: list[TaskExecution]) -> None:
        by_id = {e.id: e for e in updated}
        self.workspace.executions = [by_id.get(e.id, e) for e in self.workspace.executions]

    # ------------------------------------------------------ board membership

    def add_task_to_board(
        self, board_id: str, definition_id: str, *, now: datetime | None = None
    ) -> None:
        """Add a definition to a board and schedule it in the current cycle."""
        now = _now(now)
        board = self.require_board(board_id)
        definition = self.require_definition(definition_id)
        if definition.id in board.task_definition_ids:
            return

        validate_dependencies([*self.board_definitions(board), definition])
        board.task_definition_ids.append(definition.id)
        board.updated_at = now

        cycle = self.current_cycle(board.id)
        if cycle is None:
            return

        existing = self.workspace.executions_for(board.id, cycle.id)
        self.workspace.executions.append(
            TaskExecution(
                id=self.id_factory(),
                task_definition_id=definition.id,
                board_id=board.id,
                cycle_id=cycle.id,
                start_date=cycle.start_date,
                end_date=calculate_end_date(cycle.start_date, definition.duration_days),
                order=len(existing),
                created_at=now,
                updated_at=now,
            )
        )
        self.recalculate_board_schedule(board.id, cycle.id, now=now)

    def remove_task_from_board(
        self, board_id: str, definition_id: str, *, now: datetime | None = None
    ) -> None:
        """Remove a definition from a board along with its executions there."""
        board = self.require_board(board_id)
        board.task_definition_ids = [i for i in board.task_definition_ids if i != definition_id]
        board.updated_at = _now(now)
        self.workspace.executions = [
            e
            for e in self.workspace.executions
            if not (e.board_id == board.id and e.task_definition_id == definition_id)
        ]

    # ------------------------------------------------------------ definitions

    def update_task_definition(
        self, definition_id: str, *, now: datetime | None = None, **changes: Any
    ) -> TaskDefinition:
        """Edit a definition, rescheduling every board that holds it.

        Dependency edits are validated before anything changes.

        Raises:
            ValidationError: For unknown fields, negative durations or self references
            MissingReferenceError: For dependencies on unknown definitions
            CircularDependencyError: If the edit would close a loop
        """
        now = _now(now)
        current = self.require_definition(definition_id)

        unknown = set(changes) - EDITABLE_DEFINITION_FIELDS
        if unknown:
            raise ValidationError(f"Cannot edit task definition field(s): {sorted(unknown)}")
        if "duration_days" in changes:
            duration = changes["duration_days"]
            if isinstance(duration, bool) or not isinstance(duration, int) or duration < 0:
                raise ValidationError(
                    f"duration_days must be a non-negative integer, got {duration!r}"
                )
        if "priority" in changes:
            changes["priority"] = Priority(changes["priority"])
        if "dependencies" in changes:
            changes["dependencies"] = list(changes["dependencies"])
            self._check_dependency_ids(definition_id, changes["dependencies"])

        candidate = replace(current, updated_at=now, **changes)
        candidates = [candidate if d.id == definition_id else d for d in self.workspace.definitions]
        validate_dependencies(candidates)
        self.workspace.definitions = candidates

        if "dependencies" in changes or "duration_days" in changes:
            for board in self.workspace.boards:
                if definition_id in board.task_definition_ids:
                    self.recalculate_board_schedule(board.id, now=now)

        return candidate

    def _check_dependency_ids(self, definition_id: str, dependencies: list[str]) -> None:
        for dep_id in dependencies:
            if dep_id == definition_id:
                raise ValidationError(f"Task definition '{definition_id}' cannot depend on itself")
            if self.workspace.get_definition(dep_id) is None:
                raise MissingReferenceError(
                    f"Task definition '{definition_id}' depends on unknown definition: {dep_id}"
                )

    def delete_task_definition(self, definition_id: str) -> None:
        """Delete a definition and everything that points at it.

        It is dropped from boards and from other definitions' dependencies,
        and its executions are deleted.
        """
        self.require_definition(definition_id)
        self.workspace.definitions = [
            d for d in self.workspace.definitions if d.id != definition_id
        ]
        for board in self.workspace.boards:
            board.task_definition_ids = [
                i for i in board.task_definition_ids if i != definition_id
            ]
        for definition in self.workspace.definitions:
            definition.dependencies = [i for i in definition.dependencies if i != definition_id]
        self.workspace.executions = [
            e for e in self.workspace.executions if e.task_definition_id != definition_id
        ]
        logger.changes(f"Deleted task definition '{definition_id}'")

    # ------------------------------------------------------------- executions

    def update_execution_status(
        self,
        execution_id: str,
        status: TaskStatus | str,
        progress: int | None = None,
        *,
        now: datetime | None = None,
    ) -> TaskExecution:
        """Move an execution to a new status.

        Completing sets progress to 100 and stamps the actual end; starting a
        not-started execution stamps the actual start once.
        """
        now = _now(now)
        execution = self.require_execution(execution_id)
        new_status = TaskStatus(status)

        if progress is not None and not 0 <= progress <= 100:  # noqa: PLR2004
            raise ValidationError(f"Progress must be between 0 and 100, got {progress}")

        updated = replace(
            execution,
            status=new_status,
            progress=execution.progress if progress is None else progress,
            updated_at=now,
        )
        if new_status == TaskStatus.COMPLETED and execution.status != TaskStatus.COMPLETED:
            updated.actual_end_date = now
            updated.progress = 100
        if (
            new_status == TaskStatus.IN_PROGRESS
            and execution.status == TaskStatus.NOT_STARTED
            and execution.actual_start_date is None
        ):
            updated.actual_start_date = now

        self._merge_executions([updated])
        return updated

    # ---------------------------------------------------------------- reports

    def board_stats(
        self, board_id: str, cycle_id: str | None = None, today: date | None = None
    ) -> CycleStats:
        """Summarize a board's executions in one cycle (default: current)."""
        board = self.require_board(board_id)
        effective_cycle_id = cycle_id or board.current_cycle_id
        executions = (
            self.workspace.executions_for(board.id, effective_cycle_id)
            if effective_cycle_id
            else []
        )
        return calculate_cycle_stats(executions, today)

    def legacy_tasks(self, board_id: str) -> list[LegacyTask]:
        """Flatten the current cycle's executions into legacy task cards."""
        board = self.require_board(board_id)
        if not board.current_cycle_id:
            return []
        tasks: list[LegacyTask] = []
        for execution in self.workspace.executions_for(board.id, board.current_cycle_id):
            definition = self.workspace.get_definition(execution.task_definition_id)
            if definition:
                tasks.append(execution_to_legacy_task(execution, definition))
        return tasks
