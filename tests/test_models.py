"""Tests for data models and the legacy task adapter."""

from datetime import date, datetime

import pytest

from closeplan.legacy import execution_to_legacy_task
from closeplan.models import (
    Board,
    BoardType,
    MonthlyCycle,
    Priority,
    TaskDefinition,
    TaskExecution,
    TaskStatus,
    Workspace,
)
from tests.conftest import NOW, defn, execution_for


class TestTaskStatus:
    """Test column id mapping."""

    @pytest.mark.parametrize(
        ("column_id", "expected"),
        [
            ("todo", TaskStatus.NOT_STARTED),
            ("not-started", TaskStatus.NOT_STARTED),
            ("in-progress", TaskStatus.IN_PROGRESS),
            ("review", TaskStatus.IN_PROGRESS),
            ("done", TaskStatus.COMPLETED),
            ("completed", TaskStatus.COMPLETED),
            ("somewhere-else", TaskStatus.NOT_STARTED),
        ],
    )
    def test_from_column(self, column_id: str, expected: TaskStatus) -> None:
        """Board columns map onto the three statuses."""
        assert TaskStatus.from_column(column_id) == expected


class TestSerialization:
    """Test dictionary conversion used by the workspace file."""

    def test_definition_defaults(self) -> None:
        """Optional fields fall back to defaults."""
        definition = TaskDefinition.from_dict({"id": "a", "name": "A"})

        assert definition.duration_days == 1
        assert definition.dependencies == []
        assert definition.priority == Priority.MEDIUM
        assert definition.is_recurring

    def test_execution_accepts_timestamps_for_dates(self) -> None:
        """ISO timestamps are reduced to calendar days."""
        execution = TaskExecution.from_dict(
            {
                "id": "e",
                "task_definition_id": "a",
                "board_id": "b",
                "cycle_id": "c",
                "status": "done",
                "start_date": "2025-03-01T00:00:00",
                "end_date": "2025-03-03T00:00:00",
            }
        )

        assert execution.start_date == date(2025, 3, 1)
        assert execution.end_date == date(2025, 3, 3)
        assert execution.status == TaskStatus.COMPLETED

    def test_execution_to_dict(self) -> None:
        """Dates and enums serialize as strings."""
        data = execution_for("a", date(2025, 3, 1), date(2025, 3, 2)).to_dict()

        assert data["start_date"] == "2025-03-01"
        assert data["status"] == "not-started"
        assert data["created_at"] == NOW.isoformat()
        assert data["actual_end_date"] is None

    def test_board_and_cycle_round_trip(self) -> None:
        """Boards and cycles survive to_dict/from_dict."""
        board = Board(
            id="b",
            name="Board",
            type=BoardType.PROJECT,
            task_definition_ids=["a"],
            created_at=NOW,
        )
        cycle = MonthlyCycle(
            id="c",
            board_id="b",
            year=2025,
            month=3,
            start_date=date(2025, 3, 1),
            end_date=date(2025, 4, 1),
            completed_at=datetime(2025, 4, 1, 8, 0),
        )

        assert Board.from_dict(board.to_dict()) == board
        assert MonthlyCycle.from_dict(cycle.to_dict()) == cycle


class TestWorkspace:
    """Test workspace lookups."""

    def test_executions_for_filters_board_and_cycle(self) -> None:
        """Executions are filtered by board and optionally cycle."""
        workspace = Workspace(
            executions=[
                execution_for("a", date(2025, 3, 1), date(2025, 3, 1), cycle_id="march"),
                execution_for("a", date(2025, 4, 1), date(2025, 4, 1), execution_id="x",
                              cycle_id="april"),
                execution_for("a", date(2025, 3, 1), date(2025, 3, 1), execution_id="y",
                              board_id="other"),
            ]
        )  # fmt: skip

        assert len(workspace.executions_for("board")) == 2
        assert [e.id for e in workspace.executions_for("board", "april")] == ["x"]

    def test_lookups_return_none_when_missing(self) -> None:
        """Unknown ids give None."""
        workspace = Workspace(definitions=[defn("a")])
        assert workspace.get_definition("a") is not None
        assert workspace.get_definition("b") is None
        assert workspace.get_board("b") is None
        assert workspace.get_cycle("c") is None
        assert workspace.get_execution("e") is None


class TestLegacyTask:
    """Test the legacy card adapter."""

    def test_flattens_execution_and_definition(self) -> None:
        """Definition text and execution state are merged into one card."""
        definition = TaskDefinition(
            id="taxes",
            name="Compute taxes",
            description="Book the period's taxes",
            duration_days=3,
            dependencies=["bank"],
            priority=Priority.URGENT,
            assignee="ana",
        )
        execution = execution_for(
            "taxes",
            date(2025, 3, 5),
            date(2025, 3, 7),
            status=TaskStatus.IN_PROGRESS,
            progress=30,
        )

        task = execution_to_legacy_task(execution, definition)

        assert task.id == execution.id
        assert task.column_id == "in-progress"
        assert task.status == "in-progress"
        assert task.title == "Compute taxes"
        assert task.description == "Book the period's taxes"
        assert task.priority == "urgent"
        assert task.assignee == "ana"
        assert task.dependencies == ["bank"]
        assert task.duration_days == 3
        assert task.progress == 30
        assert task.start_date == date(2025, 3, 5)
        assert task.task_definition_id == "taxes"
