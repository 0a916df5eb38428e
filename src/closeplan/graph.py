"""Dependency graph export in DOT format."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .models import TaskStatus

if TYPE_CHECKING:
    from .models import Board, TaskDefinition, TaskExecution, Workspace

STATUS_COLORS = {
    TaskStatus.NOT_STARTED: "lightgray",
    TaskStatus.IN_PROGRESS: "lightblue",
    TaskStatus.COMPLETED: "lightgreen",
}


class DependencyGraphGenerator:
    """Generate a board's dependency graph in DOT format."""

    def __init__(self, workspace: Workspace):
        self.workspace = workspace

    def generate(self, board: Board, cycle_id: str | None = None) -> str:
        """Generate the digraph for a board.

        Edges point from a prerequisite to the task it unblocks. When a cycle
        is given, nodes are filled by the status of their execution in it.
        """
        board_ids = set(board.task_definition_ids)
        definitions = [d for d in self.workspace.definitions if d.id in board_ids]
        executions: dict[str, TaskExecution] = {}
        if cycle_id:
            executions = {
                e.task_definition_id: e
                for e in self.workspace.executions_for(board.id, cycle_id)
            }

        lines = [f'digraph "{self._escape_label(board.name)}" {{']
        lines.append("  rankdir=LR;")
        lines.append("  node [shape=box];")
        lines.append("")

        for definition in definitions:
            lines.append(f"  {self._format_node(definition, executions.get(definition.id))}")
        lines.append("")

        lines.append("  // Dependencies (unblocks direction)")
        for definition in definitions:
            for dep_id in definition.dependencies:
                if dep_id in board_ids:
                    lines.append(f'  "{dep_id}" -> "{definition.id}";')

        lines.append("}")
        return "\n".join(lines)

    def _escape_label(self, label: str) -> str:
        """Escape special characters in DOT labels."""
        return label.replace('"', '\\"').replace("\n", "\\n")

    def _format_node(self, definition: TaskDefinition, execution: TaskExecution | None) -> str:
        label = f"{definition.name}\n{definition.duration_days}d"
        if execution:
            label += f"\n{execution.start_date:%d/%m} - {execution.end_date:%d/%m}"
        attrs = [f'label="{self._escape_label(label)}"']
        if execution:
            attrs.append("style=filled")
            attrs.append(f'fillcolor="{STATUS_COLORS[execution.status]}"')
        return f'"{definition.id}" [{", ".join(attrs)}];'
