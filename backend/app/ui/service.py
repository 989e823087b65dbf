"""Project result rows into the node/edge graph used by the graph view."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from backend.app.contracts import NodeKind, ResultRow

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class GraphNode:
    """Node payload handed to the force-directed layout."""

    id: str
    label: str
    kind: NodeKind
    cross_ref_id: Optional[str] = None


@dataclass(frozen=True)
class GraphEdge:
    """Edge from an entity node to one of its category nodes."""

    id: str
    source: str
    target: str


@dataclass(frozen=True)
class GraphView:
    """Container for a projected graph including summary counts."""

    nodes: List[GraphNode]
    edges: List[GraphEdge]

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def node_index(self) -> Dict[str, GraphNode]:
        """Return nodes keyed by id."""

        return {node.id: node for node in self.nodes}


class GraphProjector:
    """Build a deduplicated node set and one edge per linked row.

    Nodes are keyed by id and the first label seen for an id wins. Edges are
    not deduplicated: repeated rows add visual weight, not extra nodes.
    """

    def project(self, rows: Sequence[ResultRow]) -> GraphView:
        """Project rows into a graph view.

        Args:
            rows: Normalised result rows in endpoint order.

        Returns:
            GraphView: Nodes in first-seen order and edges in row order.
        """

        node_map: Dict[str, GraphNode] = {}
        edges: List[GraphEdge] = []
        for row in rows:
            entity_id = row.entity_id
            category_id = row.category_id
            if entity_id and entity_id not in node_map:
                node_map[entity_id] = self._entity_from_row(row)
            if category_id and category_id not in node_map:
                node_map[category_id] = self._category_from_row(row)
            if entity_id and category_id:
                edges.append(self._edge_from_row(row, len(edges)))
        view = GraphView(nodes=list(node_map.values()), edges=edges)
        LOGGER.debug(
            "Projected %d rows into %d nodes and %d edges",
            len(rows),
            view.node_count,
            view.edge_count,
        )
        return view

    @staticmethod
    def _entity_from_row(row: ResultRow) -> GraphNode:
        return GraphNode(
            id=row.entity_id,
            label=row.display_entity_label,
            kind=NodeKind.ENTITY,
            cross_ref_id=row.cross_ref_id,
        )

    @staticmethod
    def _category_from_row(row: ResultRow) -> GraphNode:
        category_id = str(row.category_id)
        return GraphNode(
            id=category_id,
            label=row.display_category_label or category_id,
            kind=NodeKind.CATEGORY,
        )

    @staticmethod
    def _edge_from_row(row: ResultRow, position: int) -> GraphEdge:
        return GraphEdge(
            id=f"{row.entity_id}->{row.category_id}:{position}",
            source=row.entity_id,
            target=str(row.category_id),
        )


def project_graph(rows: Sequence[ResultRow]) -> GraphView:
    """Project rows with a default :class:`GraphProjector`."""

    return GraphProjector().project(rows)


__all__ = ["GraphEdge", "GraphNode", "GraphProjector", "GraphView", "project_graph"]
