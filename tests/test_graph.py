"""Tests for circular dependency detection and topological sorting."""

import pytest

from closeplan.exceptions import CircularDependencyError
from closeplan.scheduling.graph import (
    detect_circular_dependencies,
    topological_sort,
    validate_dependencies,
)
from tests.conftest import defn


def _position(ordered: list, definition_id: str) -> int:
    return [d.id for d in ordered].index(definition_id)


class TestDetectCircularDependencies:
    """Test the graph validator."""

    def test_acyclic_graph_has_no_cycle(self) -> None:
        """A diamond-shaped graph is acyclic."""
        definitions = [
            defn("a"),
            defn("b", 1, "a"),
            defn("c", 1, "a"),
            defn("d", 1, "b", "c"),
        ]
        assert detect_circular_dependencies(definitions) is None

    def test_empty_input(self) -> None:
        """No definitions means no cycle."""
        assert detect_circular_dependencies([]) is None

    def test_two_node_cycle(self) -> None:
        """A depends on B and B depends on A."""
        cycle = detect_circular_dependencies([defn("A", 1, "B"), defn("B", 1, "A")])

        assert cycle is not None
        assert "A" in cycle
        assert "B" in cycle
        assert cycle[0] == cycle[-1]

    def test_cycle_path_excludes_entry_nodes(self) -> None:
        """The reported cycle starts where the loop closes, not at the DFS root."""
        definitions = [
            defn("root", 1, "x"),
            defn("x", 1, "y"),
            defn("y", 1, "z"),
            defn("z", 1, "x"),
        ]
        assert detect_circular_dependencies(definitions) == ["x", "y", "z", "x"]

    def test_self_reference_is_a_cycle(self) -> None:
        """A definition depending on itself is reported."""
        assert detect_circular_dependencies([defn("a", 1, "a")]) == ["a", "a"]

    def test_unknown_dependencies_are_ignored(self) -> None:
        """Dependencies outside the input do not count as edges."""
        assert detect_circular_dependencies([defn("a", 1, "elsewhere")]) is None

    def test_validate_dependencies_raises_with_cycle(self) -> None:
        """validate_dependencies names the offending ids."""
        with pytest.raises(CircularDependencyError, match="A -> B -> A") as exc_info:
            validate_dependencies([defn("A", 1, "B"), defn("B", 1, "A")])
        assert exc_info.value.cycle == ["A", "B", "A"]


class TestTopologicalSort:
    """Test the topological sorter."""

    def test_dependencies_precede_dependents(self) -> None:
        """Every dependency present in the input comes earlier."""
        definitions = [
            defn("close", 2, "balance"),
            defn("balance", 2, "taxes"),
            defn("taxes", 3, "bank", "journal"),
            defn("journal", 4),
            defn("bank", 3),
        ]
        ordered = topological_sort(definitions)

        assert sorted(d.id for d in ordered) == sorted(d.id for d in definitions)
        for definition in ordered:
            for dep_id in definition.dependencies:
                assert _position(ordered, dep_id) < _position(ordered, definition.id)

    def test_independent_definitions_keep_input_order(self) -> None:
        """Ties preserve relative input order."""
        ordered = topological_sort([defn("c"), defn("a"), defn("b")])
        assert [d.id for d in ordered] == ["c", "a", "b"]

    def test_dependency_pulled_before_dependent(self) -> None:
        """A dependency listed later in the input is emitted first."""
        ordered = topological_sort([defn("x"), defn("late", 1, "early"), defn("early")])
        assert [d.id for d in ordered] == ["x", "early", "late"]

    def test_dependencies_outside_input_are_ignored(self) -> None:
        """Definitions filtered out of the working set do not appear."""
        ordered = topological_sort([defn("b", 1, "a")])
        assert [d.id for d in ordered] == ["b"]

    def test_does_not_mutate_input(self) -> None:
        """The input sequence is left untouched."""
        definitions = [defn("b", 1, "a"), defn("a")]
        topological_sort(definitions)
        assert [d.id for d in definitions] == ["b", "a"]

    def test_cycle_raises_instead_of_dropping_tasks(self) -> None:
        """A cycle is reported rather than silently truncating the order."""
        definitions = [defn("ok"), defn("A", 1, "B"), defn("B", 1, "A")]
        with pytest.raises(CircularDependencyError) as exc_info:
            topological_sort(definitions)
        assert set(exc_info.value.cycle) == {"A", "B"}


class TestLongChains:
    """Test graphs deeper than the interpreter's recursion limit."""

    CHAIN_LENGTH = 5000

    def _chain(self) -> list:
        """t0 <- t1 <- ... <- t4999, listed dependents first."""
        definitions = [defn("t0")]
        definitions += [defn(f"t{i}", 1, f"t{i - 1}") for i in range(1, self.CHAIN_LENGTH)]
        return list(reversed(definitions))

    def test_long_chain_has_no_cycle(self) -> None:
        """A long acyclic chain is reported as acyclic."""
        assert detect_circular_dependencies(self._chain()) is None

    def test_long_chain_sorts_dependencies_first(self) -> None:
        """The whole chain comes out in dependency order."""
        ordered = topological_sort(self._chain())
        assert [d.id for d in ordered] == [f"t{i}" for i in range(self.CHAIN_LENGTH)]

    def test_cycle_closing_a_long_chain(self) -> None:
        """A loop back to the head of a long chain is found and closed."""
        definitions = self._chain()
        definitions[-1] = defn("t0", 1, f"t{self.CHAIN_LENGTH - 1}")

        cycle = detect_circular_dependencies(definitions)

        assert cycle is not None
        assert len(cycle) == self.CHAIN_LENGTH + 1
        assert cycle[0] == cycle[-1]
        with pytest.raises(CircularDependencyError):
            topological_sort(definitions)
