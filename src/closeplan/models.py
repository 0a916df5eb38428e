"""Data models for closeplan."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any


class TaskStatus(str, Enum):
    """Lifecycle of a task execution within a cycle."""

    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"

    @classmethod
    def from_column(cls, column_id: str) -> TaskStatus:
        """Map a board column id onto a status.

        Older boards used free-form column ids; "review" counts as work in
        progress and unknown columns fall back to not started.
        """
        if column_id in ("in-progress", "review"):
            return cls.IN_PROGRESS
        if column_id in ("done", "completed"):
            return cls.COMPLETED
        return cls.NOT_STARTED


class Priority(str, Enum):
    """Descriptive priority of a task definition."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class BoardType(str, Enum):
    """Whether a board is re-instantiated every month."""

    RECURRING = "recurring"
    PROJECT = "project"


class CycleStatus(str, Enum):
    """Status of a monthly cycle."""

    ACTIVE = "active"
    COMPLETED = "completed"


def _default_str_list() -> list[str]:
    return []


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    # Accept full timestamps as well as plain dates
    return datetime.fromisoformat(str(value)).date()


def _format_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass
class TaskDefinition:
    """Reusable template for a recurring closing task."""

    id: str
    name: str
    duration_days: int = 1
    dependencies: list[str] = field(default_factory=_default_str_list)
    description: str | None = None
    priority: Priority = Priority.MEDIUM
    assignee: str | None = None
    is_recurring: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskDefinition:
        """Build a definition from its serialized form."""
        return cls(
            id=str(data["id"]),
            name=data["name"],
            duration_days=int(data.get("duration_days", 1)),
            dependencies=[str(dep) for dep in data.get("dependencies") or []],
            description=data.get("description"),
            priority=Priority(data.get("priority") or Priority.MEDIUM.value),
            assignee=data.get("assignee"),
            is_recurring=bool(data.get("is_recurring", True)),
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for YAML serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "duration_days": self.duration_days,
            "dependencies": list(self.dependencies),
            "priority": self.priority.value,
            "assignee": self.assignee,
            "is_recurring": self.is_recurring,
            "created_at": _format_datetime(self.created_at),
            "updated_at": _format_datetime(self.updated_at),
        }


@dataclass
class MonthlyCycle:
    """One monthly instantiation period of a board.

    ``end_date`` is the first day of the following month and is exclusive.
    """

    id: str
    board_id: str
    year: int
    month: int
    start_date: date
    end_date: date
    status: CycleStatus = CycleStatus.ACTIVE
    created_at: datetime | None = None
    completed_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MonthlyCycle:
        """Build a cycle from its serialized form."""
        return cls(
            id=str(data["id"]),
            board_id=str(data["board_id"]),
            year=int(data["year"]),
            month=int(data["month"]),
            start_date=_parse_date(data["start_date"]),
            end_date=_parse_date(data["end_date"]),
            status=CycleStatus(data.get("status") or CycleStatus.ACTIVE.value),
            created_at=_parse_datetime(data.get("created_at")),
            completed_at=_parse_datetime(data.get("completed_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for YAML serialization."""
        return {
            "id": self.id,
            "board_id": self.board_id,
            "year": self.year,
            "month": self.month,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "status": self.status.value,
            "created_at": _format_datetime(self.created_at),
            "completed_at": _format_datetime(self.completed_at),
        }


@dataclass
class TaskExecution:
    """Concrete occurrence of a task definition within one cycle.

    Start and end dates are derived from the dependency graph and are
    recomputed rather than edited.
    """

    id: str
    task_definition_id: str
    board_id: str
    cycle_id: str | None
    start_date: date
    end_date: date
    status: TaskStatus = TaskStatus.NOT_STARTED
    progress: int = 0
    order: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    actual_start_date: datetime | None = None
    actual_end_date: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskExecution:
        """Build an execution from its serialized form."""
        status = data.get("status") or TaskStatus.NOT_STARTED.value
        cycle_id = data.get("cycle_id")
        return cls(
            id=str(data["id"]),
            task_definition_id=str(data["task_definition_id"]),
            board_id=str(data["board_id"]),
            cycle_id=str(cycle_id) if cycle_id is not None else None,
            start_date=_parse_date(data["start_date"]),
            end_date=_parse_date(data["end_date"]),
            status=TaskStatus.from_column(str(status)),
            progress=int(data.get("progress", 0)),
            order=int(data.get("order", 0)),
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
            actual_start_date=_parse_datetime(data.get("actual_start_date")),
            actual_end_date=_parse_datetime(data.get("actual_end_date")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for YAML serialization."""
        return {
            "id": self.id,
            "task_definition_id": self.task_definition_id,
            "board_id": self.board_id,
            "cycle_id": self.cycle_id,
            "status": self.status.value,
            "progress": self.progress,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "order": self.order,
            "created_at": _format_datetime(self.created_at),
            "updated_at": _format_datetime(self.updated_at),
            "actual_start_date": _format_datetime(self.actual_start_date),
            "actual_end_date": _format_datetime(self.actual_end_date),
        }


@dataclass
class Board:
    """A named checklist grouping a subset of task definitions."""

    id: str
    name: str
    description: str | None = None
    type: BoardType = BoardType.RECURRING
    task_definition_ids: list[str] = field(default_factory=_default_str_list)
    current_cycle_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Board:
        """Build a board from its serialized form."""
        current_cycle_id = data.get("current_cycle_id")
        return cls(
            id=str(data["id"]),
            name=data["name"],
            description=data.get("description"),
            type=BoardType(data.get("type") or BoardType.RECURRING.value),
            task_definition_ids=[str(i) for i in data.get("task_definition_ids") or []],
            current_cycle_id=str(current_cycle_id) if current_cycle_id is not None else None,
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for YAML serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.type.value,
            "task_definition_ids": list(self.task_definition_ids),
            "current_cycle_id": self.current_cycle_id,
            "created_at": _format_datetime(self.created_at),
            "updated_at": _format_datetime(self.updated_at),
        }


def _default_definitions() -> list[TaskDefinition]:
    return []


def _default_boards() -> list[Board]:
    return []


def _default_cycles() -> list[MonthlyCycle]:
    return []


def _default_executions() -> list[TaskExecution]:
    return []


@dataclass
class Workspace:
    """All closing-process records loaded from one workspace file."""

    definitions: list[TaskDefinition] = field(default_factory=_default_definitions)
    boards: list[Board] = field(default_factory=_default_boards)
    cycles: list[MonthlyCycle] = field(default_factory=_default_cycles)
    executions: list[TaskExecution] = field(default_factory=_default_executions)

    def get_definition(self, definition_id: str) -> TaskDefinition | None:
        """Get a task definition by its ID."""
        for definition in self.definitions:
            if definition.id == definition_id:
                return definition
        return None

    def get_board(self, board_id: str) -> Board | None:
        """Get a board by its ID."""
        for board in self.boards:
            if board.id == board_id:
                return board
        return None

    def get_cycle(self, cycle_id: str) -> MonthlyCycle | None:
        """Get a monthly cycle by its ID."""
        for cycle in self.cycles:
            if cycle.id == cycle_id:
                return cycle
        return None

    def get_execution(self, execution_id: str) -> TaskExecution | None:
        """Get a task execution by its ID."""
        for execution in self.executions:
            if execution.id == execution_id:
                return execution
        return None

    def cycles_for(self, board_id: str) -> list[MonthlyCycle]:
        """Get all cycles of a board, oldest first."""
        return [c for c in self.cycles if c.board_id == board_id]

    def executions_for(self, board_id: str, cycle_id: str | None = None) -> list[TaskExecution]:
        """Get a board's executions, optionally restricted to one cycle."""
        return [
            e
            for e in self.executions
            if e.board_id == board_id and (cycle_id is None or e.cycle_id == cycle_id)
        ]
