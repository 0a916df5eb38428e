"""Workspace loading with referential validation."""

from __future__ import annotations

from pathlib import Path

from .exceptions import MissingReferenceError, ValidationError
from .models import Workspace
from .scheduling.graph import validate_dependencies
from .store import read_workspace


def load_workspace(path: Path | str) -> Workspace:
    """Load a workspace file and validate it.

    This is the main entry point for reading workspaces. It handles:
    1. YAML parsing and schema validation
    2. Reference integrity between records
    3. Self references and circular dependencies
    """
    workspace = read_workspace(path)
    validate_workspace(workspace)
    return workspace


def validate_workspace(workspace: Workspace) -> None:  # noqa: PLR0912 - one branch per reference kind
    """Validate references between records and the dependency graph."""
    definition_ids = _unique_ids("task definition", [d.id for d in workspace.definitions])
    board_ids = _unique_ids("board", [b.id for b in workspace.boards])
    cycle_ids = _unique_ids("cycle", [c.id for c in workspace.cycles])
    _unique_ids("execution", [e.id for e in workspace.executions])

    for definition in workspace.definitions:
        for dep_id in definition.dependencies:
            if dep_id == definition.id:
                raise ValidationError(f"Task definition '{definition.id}' depends on itself")
            if dep_id not in definition_ids:
                raise MissingReferenceError(
                    f"Task definition '{definition.id}' depends on unknown definition: {dep_id}"
                )

    for board in workspace.boards:
        for definition_id in board.task_definition_ids:
            if definition_id not in definition_ids:
                raise MissingReferenceError(
                    f"Board '{board.id}' lists unknown task definition: {definition_id}"
                )
        if board.current_cycle_id and board.current_cycle_id not in cycle_ids:
            raise MissingReferenceError(
                f"Board '{board.id}' points to unknown cycle: {board.current_cycle_id}"
            )

    for cycle in workspace.cycles:
        if cycle.board_id not in board_ids:
            raise MissingReferenceError(
                f"Cycle '{cycle.id}' belongs to unknown board: {cycle.board_id}"
            )

    for execution in workspace.executions:
        if execution.task_definition_id not in definition_ids:
            raise MissingReferenceError(
                f"Execution '{execution.id}' references unknown task definition: "
                f"{execution.task_definition_id}"
            )
        if execution.board_id not in board_ids:
            raise MissingReferenceError(
                f"Execution '{execution.id}' references unknown board: {execution.board_id}"
            )
        if execution.cycle_id and execution.cycle_id not in cycle_ids:
            raise MissingReferenceError(
                f"Execution '{execution.id}' references unknown cycle: {execution.cycle_id}"
            )

    validate_dependencies(workspace.definitions)


def _unique_ids(kind: str, ids: list[str]) -> set[str]:
    seen: set[str] = set()
    for record_id in ids:
        if record_id in seen:
            raise ValidationError(f"Duplicate {kind} id: {record_id}")
        seen.add(record_id)
    return seen
