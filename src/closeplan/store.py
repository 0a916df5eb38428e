"""Workspace file reading and writing.

A workspace file holds every closing-process record (definitions, boards,
cycles and executions) as YAML.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ParseError, ValidationError
from .models import Board, MonthlyCycle, TaskDefinition, TaskExecution, Workspace
from .schemas import WorkspaceSchema

WORKSPACE_VERSION = 1


def parse_workspace(data: dict[str, Any]) -> Workspace:
    """Build a Workspace from already-loaded YAML data.

    Raises:
        ParseError: If the version is missing or unsupported
        ValidationError: If the records do not match the schema
    """
    version = data.get("version")
    if version is None:
        raise ParseError("Workspace file missing 'version' field")
    if version != WORKSPACE_VERSION:
        raise ParseError(
            f"Unsupported workspace version {version}, expected {WORKSPACE_VERSION}"
        )

    try:
        schema = WorkspaceSchema(**data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid workspace structure: {e}") from e

    return Workspace(
        definitions=[TaskDefinition.from_dict(d.model_dump()) for d in schema.definitions],
        boards=[Board.from_dict(b.model_dump()) for b in schema.boards],
        cycles=[MonthlyCycle.from_dict(c.model_dump()) for c in schema.cycles],
        executions=[TaskExecution.from_dict(e.model_dump()) for e in schema.executions],
    )


def read_workspace(path: Path | str) -> Workspace:
    """Read a workspace file without referential validation.

    Raises:
        ParseError: If the file is missing, is not YAML, or has no mapping root
        ValidationError: If the records do not match the schema
    """
    path = Path(path)
    if not path.exists():
        raise ParseError(f"File not found: {path}")

    try:
        with path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ParseError(f"Failed to parse YAML: {e}") from e

    if not isinstance(data, dict):
        raise ParseError("YAML must contain a dictionary at the root level")

    return parse_workspace(data)  # type: ignore[arg-type]


def workspace_to_dict(workspace: Workspace) -> dict[str, Any]:
    """Convert a workspace to plain data for YAML output."""
    return {
        "version": WORKSPACE_VERSION,
        "definitions": [d.to_dict() for d in workspace.definitions],
        "boards": [b.to_dict() for b in workspace.boards],
        "cycles": [c.to_dict() for c in workspace.cycles],
        "executions": [e.to_dict() for e in workspace.executions],
    }


def write_workspace(path: Path | str, workspace: Workspace) -> None:
    """Write a workspace file."""
    with Path(path).open("w", encoding="utf-8") as f:
        yaml.safe_dump(
            workspace_to_dict(workspace),
            f,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
