"""Aggregate statistics over a cycle's executions."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

from closeplan.models import TaskExecution, TaskStatus


@dataclass
class CycleStats:
    """Progress summary of one cycle."""

    total: int
    completed: int
    in_progress: int
    not_started: int
    overdue: int
    average_progress: int
    completion_rate: int  # Percentage 0-100


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values."""
    return math.floor(value + 0.5)


def calculate_cycle_stats(
    executions: Sequence[TaskExecution], today: date | None = None
) -> CycleStats:
    """Count executions by status and summarize progress.

    An execution is overdue when it is not completed and its end date is
    before ``today``.
    """
    today = today or date.today()  # noqa: DTZ011
    total = len(executions)
    completed = sum(1 for e in executions if e.status == TaskStatus.COMPLETED)
    in_progress = sum(1 for e in executions if e.status == TaskStatus.IN_PROGRESS)
    not_started = sum(1 for e in executions if e.status == TaskStatus.NOT_STARTED)
    # A task due today is still on time; it becomes overdue the day after its end date
    overdue = sum(
        1 for e in executions if e.status != TaskStatus.COMPLETED and e.end_date < today
    )

    if total == 0:
        return CycleStats(0, 0, 0, 0, 0, 0, 0)

    return CycleStats(
        total=total,
        completed=completed,
        in_progress=in_progress,
        not_started=not_started,
        overdue=overdue,
        average_progress=round_half_up(sum(e.progress for e in executions) / total),
        completion_rate=round_half_up(completed / total * 100),
    )
