"""Pydantic schemas for workspace YAML validation."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from .models import BoardType, CycleStatus, Priority


def _coerce_calendar_date(v: Any) -> Any:
    """Truncate timestamps to their calendar day."""
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, str) and "T" in v:
        return datetime.fromisoformat(v.strip()).date()
    return v


def _ensure_id_list(v: Any) -> list[str]:
    if v is None:
        return []
    if isinstance(v, list):
        return [str(item) for item in v]  # type: ignore[misc]
    return [str(v)]


class TaskDefinitionSchema(BaseModel):
    """Schema for a task definition."""

    id: str
    name: str
    description: str | None = None
    duration_days: int = Field(default=1, ge=0)
    dependencies: list[str] = Field(default_factory=list)
    priority: Priority = Priority.MEDIUM
    assignee: str | None = None
    is_recurring: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("dependencies", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> list[str]:
        """Ensure value is a list of ids."""
        return _ensure_id_list(v)


class BoardSchema(BaseModel):
    """Schema for a board."""

    id: str
    name: str
    description: str | None = None
    type: BoardType = BoardType.RECURRING
    task_definition_ids: list[str] = Field(default_factory=list)
    current_cycle_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("task_definition_ids", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> list[str]:
        """Ensure value is a list of ids."""
        return _ensure_id_list(v)


class MonthlyCycleSchema(BaseModel):
    """Schema for a monthly cycle."""

    id: str
    board_id: str
    year: int
    month: int = Field(ge=1, le=12)
    start_date: date
    end_date: date
    status: CycleStatus = CycleStatus.ACTIVE
    created_at: datetime | None = None
    completed_at: datetime | None = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def coerce_date(cls, v: Any) -> Any:
        """Accept full timestamps for calendar dates."""
        return _coerce_calendar_date(v)


class TaskExecutionSchema(BaseModel):
    """Schema for a task execution."""

    id: str
    task_definition_id: str
    board_id: str
    cycle_id: str | None = None
    status: str = "not-started"  # Board column ids are mapped onto statuses
    progress: int = Field(default=0, ge=0, le=100)
    start_date: date
    end_date: date
    order: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    actual_start_date: datetime | None = None
    actual_end_date: datetime | None = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def coerce_date(cls, v: Any) -> Any:
        """Accept full timestamps for calendar dates."""
        return _coerce_calendar_date(v)


class WorkspaceSchema(BaseModel):
    """Schema for the entire workspace file."""

    version: int
    definitions: list[TaskDefinitionSchema] = Field(default_factory=list)
    boards: list[BoardSchema] = Field(default_factory=list)
    cycles: list[MonthlyCycleSchema] = Field(default_factory=list)
    executions: list[TaskExecutionSchema] = Field(default_factory=list)
