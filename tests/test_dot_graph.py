"""Tests for DOT dependency graph export."""

from closeplan.graph import DependencyGraphGenerator
from closeplan.loader import load_workspace


def test_board_graph_with_statuses() -> None:
    """Nodes carry schedule dates and status colors; edges point to dependents."""
    workspace = load_workspace("examples/workspace.yaml")
    board = workspace.get_board("monthly")
    assert board is not None

    dot = DependencyGraphGenerator(workspace).generate(board, board.current_cycle_id)

    assert dot.startswith('digraph "Monthly closing" {')
    assert dot.endswith("}")
    assert '"bank-reconciliation" -> "taxes";' in dot
    assert '"journal-review" -> "taxes";' in dot
    assert '"trial-balance" -> "close-income";' in dot
    assert 'fillcolor="lightgreen"' in dot
    assert 'fillcolor="lightblue"' in dot
    assert "05/03 - 07/03" in dot


def test_graph_without_cycle_has_no_fill() -> None:
    """Without a cycle only the definitions are drawn."""
    workspace = load_workspace("examples/workspace.yaml")
    board = workspace.get_board("monthly")
    assert board is not None

    dot = DependencyGraphGenerator(workspace).generate(board)

    assert "fillcolor" not in dot
    assert "Compute taxes\\n3d" in dot


def test_edges_outside_board_are_omitted() -> None:
    """Only dependencies between board members are drawn."""
    workspace = load_workspace("examples/workspace.yaml")
    board = workspace.get_board("monthly")
    assert board is not None
    board.task_definition_ids = ["taxes", "trial-balance"]

    dot = DependencyGraphGenerator(workspace).generate(board)

    assert '"taxes" -> "trial-balance";' in dot
    assert "bank-reconciliation" not in dot
