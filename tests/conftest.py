"""Pytest configuration and fixtures for closeplan tests."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from closeplan.logger import reset_logger
from closeplan.models import Board, MonthlyCycle, TaskDefinition, TaskExecution, TaskStatus

NOW = datetime(2025, 3, 1, 9, 0)


@pytest.fixture(autouse=True)
def clean_logger() -> None:
    """Silence the logger between tests."""
    reset_logger()


def defn(definition_id: str, duration: int = 1, *dependencies: str) -> TaskDefinition:
    """Create a TaskDefinition with the given duration and dependencies.

    Example:
        defn("taxes", 3, "bank", "journal")
    """
    return TaskDefinition(
        id=definition_id,
        name=definition_id.replace("-", " ").title(),
        duration_days=duration,
        dependencies=list(dependencies),
    )


def execution_for(  # noqa: PLR0913 - mirrors TaskExecution fields used in tests
    definition_id: str,
    start: date,
    end: date,
    *,
    execution_id: str | None = None,
    status: TaskStatus = TaskStatus.NOT_STARTED,
    progress: int = 0,
    board_id: str = "board",
    cycle_id: str = "cycle",
) -> TaskExecution:
    """Create a TaskExecution for a definition with fixed dates."""
    return TaskExecution(
        id=execution_id or f"exec-{definition_id}",
        task_definition_id=definition_id,
        board_id=board_id,
        cycle_id=cycle_id,
        start_date=start,
        end_date=end,
        status=status,
        progress=progress,
        created_at=NOW,
        updated_at=NOW,
    )


def make_board(*definition_ids: str, board_id: str = "board") -> Board:
    """Create a recurring board holding the given definitions."""
    return Board(id=board_id, name="Monthly closing", task_definition_ids=list(definition_ids))


def march_cycle(board_id: str = "board") -> MonthlyCycle:
    """The March 2025 cycle of a board."""
    return MonthlyCycle(
        id="cycle",
        board_id=board_id,
        year=2025,
        month=3,
        start_date=date(2025, 3, 1),
        end_date=date(2025, 4, 1),
    )


def sequential_ids(prefix: str = "id"):  # noqa: ANN201 - test helper
    """Deterministic id factory: id-1, id-2, ..."""
    counter = iter(range(1, 1_000_000))
    return lambda: f"{prefix}-{next(counter)}"
