"""Flattened task view for board components that predate definitions and cycles."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

from .models import TaskDefinition, TaskExecution


def _default_str_list() -> list[str]:
    return []


@dataclass
class LegacyTask:
    """One card as older boards expect it: a definition merged with its execution."""

    id: str
    board_id: str
    column_id: str
    title: str
    progress: int
    priority: str
    order: int
    task_definition_id: str
    status: str
    duration_days: int
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    assignee: str | None = None
    dependencies: list[str] = field(default_factory=_default_str_list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


def execution_to_legacy_task(execution: TaskExecution, definition: TaskDefinition) -> LegacyTask:
    """Merge an execution with its definition; the status doubles as the column id."""
    return LegacyTask(
        id=execution.id,
        board_id=execution.board_id,
        column_id=execution.status.value,
        title=definition.name,
        description=definition.description,
        start_date=execution.start_date,
        end_date=execution.end_date,
        progress=execution.progress,
        priority=definition.priority.value,
        assignee=definition.assignee,
        dependencies=list(definition.dependencies),
        order=execution.order,
        created_at=execution.created_at,
        updated_at=execution.updated_at,
        task_definition_id=definition.id,
        status=execution.status.value,
        duration_days=definition.duration_days,
    )
