from __future__ import annotations

from backend.app.contracts import NodeKind, ResultRow
from backend.app.ui.service import GraphProjector, project_graph


def _row(entity_id, entity_label=None, category_id=None, category_label=None, cross_ref_id=None):
    return ResultRow(
        entity_id=entity_id,
        entity_label=entity_label,
        cross_ref_id=cross_ref_id,
        category_id=category_id,
        category_label=category_label,
    )


SCENARIO_A = [
    _row("E1", "ProtA", "C1", "Metabolism"),
    _row("E1", "ProtA", "C2", "Signaling"),
]


def test_shared_entity_yields_one_node() -> None:
    view = project_graph(SCENARIO_A)

    assert [node.id for node in view.nodes] == ["E1", "C1", "C2"]
    assert [node.kind for node in view.nodes] == [NodeKind.ENTITY, NodeKind.CATEGORY, NodeKind.CATEGORY]
    assert [(edge.source, edge.target) for edge in view.edges] == [("E1", "C1"), ("E1", "C2")]
    assert view.node_count == 3
    assert view.edge_count == 2


def test_node_ids_are_unique_and_first_label_wins() -> None:
    view = project_graph(
        [
            _row("E1", "ProtA", "C1", "Metabolism"),
            _row("E1", "Renamed", "C1", "Other label"),
            _row("E2", None, "C1", None),
        ]
    )
    index = view.node_index()
    assert len(index) == len(view.nodes) == 3
    assert index["E1"].label == "ProtA"
    assert index["C1"].label == "Metabolism"
    assert index["E2"].label == "E2"


def test_repeated_rows_add_edges_not_nodes() -> None:
    rows = [_row("E1", "ProtA", "C1", "Metabolism")] * 3
    view = project_graph(rows)
    assert view.node_count == 2
    assert view.edge_count == 3
    assert len({edge.id for edge in view.edges}) == 3


def test_rows_without_category_add_entity_only() -> None:
    view = project_graph([_row("E1", "ProtA", cross_ref_id="P12345")])
    assert [node.id for node in view.nodes] == ["E1"]
    assert view.nodes[0].cross_ref_id == "P12345"
    assert view.edges == []


def test_every_edge_endpoint_is_a_node() -> None:
    rows = SCENARIO_A + [_row("E2", "ProtB", "C2", "Signaling"), _row("E3", "ProtC")]
    view = project_graph(rows)
    ids = {node.id for node in view.nodes}
    assert all(edge.source in ids and edge.target in ids for edge in view.edges)


def test_projection_is_deterministic() -> None:
    first = GraphProjector().project(SCENARIO_A)
    second = GraphProjector().project(list(SCENARIO_A))
    assert first == second


def test_empty_rows_project_to_empty_graph() -> None:
    view = project_graph([])
    assert view.node_count == 0
    assert view.edge_count == 0
