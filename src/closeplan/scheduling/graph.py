"""Dependency graph validation and topological ordering of task definitions.

Both traversals are depth-first with an explicit stack of
``(id, dependency iterator)`` frames, so long dependency chains do not hit
Python's recursion limit.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from closeplan.exceptions import CircularDependencyError
from closeplan.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence

    from closeplan.models import TaskDefinition

logger = get_logger()


def _known_dependencies(
    definition_id: str, definition_map: Mapping[str, TaskDefinition]
) -> Iterator[str]:
    dependencies = definition_map[definition_id].dependencies
    return (dep_id for dep_id in dependencies if dep_id in definition_map)


def detect_circular_dependencies(definitions: Sequence[TaskDefinition]) -> list[str] | None:
    """Find one dependency cycle among the given definitions.

    Depth-first search from every unvisited definition, in input order.
    Dependencies that name definitions outside the input are ignored.

    Returns:
        The ids forming the cycle, closed by repeating the first id
        (e.g. ``["a", "b", "a"]``), or None if the graph is acyclic.
    """
    definition_map = {d.id: d for d in definitions}
    visited: set[str] = set()
    path: list[str] = []
    on_path: dict[str, int] = {}  # id -> position in path
    stack: list[tuple[str, Iterator[str]]] = []

    def enter(definition_id: str) -> None:
        visited.add(definition_id)
        on_path[definition_id] = len(path)
        path.append(definition_id)
        stack.append((definition_id, _known_dependencies(definition_id, definition_map)))

    for definition in definitions:
        if definition.id in visited:
            continue

        enter(definition.id)
        while stack:
            current_id, dependencies = stack[-1]
            dep_id = next(dependencies, None)
            if dep_id is None:
                stack.pop()
                path.pop()
                del on_path[current_id]
                continue
            if dep_id in on_path:
                cycle = path[on_path[dep_id] :] + [dep_id]
                logger.debug(f"Cycle found starting at '{definition.id}': {cycle}")
                return cycle
            if dep_id not in visited:
                enter(dep_id)

    return None


def validate_dependencies(definitions: Sequence[TaskDefinition]) -> None:
    """Raise CircularDependencyError if the definitions contain a cycle."""
    cycle = detect_circular_dependencies(definitions)
    if cycle:
        raise CircularDependencyError(cycle)


def topological_sort(definitions: Sequence[TaskDefinition]) -> list[TaskDefinition]:
    """Order definitions so every dependency precedes its dependents.

    Post-order DFS over the input sequence, so definitions with no
    dependency relationship keep their relative input order. Dependencies
    outside the input are ignored; callers filter the working set first.

    Raises:
        CircularDependencyError: If a definition is reached again while its
            own dependencies are still being visited.
    """
    definition_map = {d.id: d for d in definitions}
    ordered: list[TaskDefinition] = []
    visited: set[str] = set()
    visiting: list[str] = []
    visiting_index: dict[str, int] = {}  # id -> position in visiting
    stack: list[tuple[str, Iterator[str]]] = []

    def enter(definition_id: str) -> None:
        visiting_index[definition_id] = len(visiting)
        visiting.append(definition_id)
        stack.append((definition_id, _known_dependencies(definition_id, definition_map)))

    for definition in definitions:
        if definition.id in visited:
            continue

        enter(definition.id)
        while stack:
            current_id, dependencies = stack[-1]
            dep_id = next(dependencies, None)
            if dep_id is None:
                stack.pop()
                visiting.pop()
                del visiting_index[current_id]
                visited.add(current_id)
                ordered.append(definition_map[current_id])
                continue
            if dep_id in visited:
                continue
            if dep_id in visiting_index:
                raise CircularDependencyError(visiting[visiting_index[dep_id] :] + [dep_id])
            enter(dep_id)

    return ordered
