"""Search-driven emphasis and label visibility for graph nodes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Set

from backend.app.contracts import NodeKind, SearchContext, SearchMode
from backend.app.ui.service import GraphNode, GraphView


@dataclass(frozen=True)
class NodeHighlight:
    """Emphasis and default label visibility for one node."""

    emphasized: bool
    label_visible: bool


@dataclass(frozen=True)
class HighlightMap:
    """Per-node highlight flags keyed by node id."""

    by_node: Dict[str, NodeHighlight]

    def emphasis(self) -> Dict[str, bool]:
        return {node_id: flags.emphasized for node_id, flags in self.by_node.items()}

    def label_visibility(self) -> Dict[str, bool]:
        return {node_id: flags.label_visible for node_id, flags in self.by_node.items()}

    def __getitem__(self, node_id: str) -> NodeHighlight:
        return self.by_node[node_id]


def _contains(value: Optional[str], needle: str) -> bool:
    return bool(value) and needle in str(value).lower()


def _node_matches(node: GraphNode, needle: str) -> bool:
    return _contains(node.label, needle) or _contains(node.id, needle)


def _baseline(node: GraphNode) -> NodeHighlight:
    return NodeHighlight(emphasized=False, label_visible=node.kind is NodeKind.CATEGORY)


def _resolve_category_search(view: GraphView, needle: str) -> Dict[str, NodeHighlight]:
    nodes = view.node_index()
    matching_categories: Set[str] = {
        node.id
        for node in view.nodes
        if node.kind is NodeKind.CATEGORY and _contains(node.label, needle)
    }
    connected_entities: Set[str] = {
        edge.source for edge in view.edges if edge.target in matching_categories
    }
    resolved: Dict[str, NodeHighlight] = {}
    for node_id, node in nodes.items():
        if node.kind is NodeKind.CATEGORY:
            resolved[node_id] = NodeHighlight(
                emphasized=node_id in matching_categories,
                label_visible=True,
            )
        else:
            resolved[node_id] = NodeHighlight(
                emphasized=node_id in connected_entities,
                label_visible=_node_matches(node, needle),
            )
    return resolved


def _resolve_entity_search(view: GraphView, needle: str) -> Dict[str, NodeHighlight]:
    matching_entities: Set[str] = {
        node.id
        for node in view.nodes
        if node.kind is NodeKind.ENTITY and _node_matches(node, needle)
    }
    connected_categories: Set[str] = {
        edge.target for edge in view.edges if edge.source in matching_entities
    }
    resolved: Dict[str, NodeHighlight] = {}
    for node in view.nodes:
        if node.kind is NodeKind.ENTITY and node.id in matching_entities:
            # Matched entities only reveal their label; emphasis goes to their categories.
            resolved[node.id] = NodeHighlight(emphasized=False, label_visible=True)
        elif node.kind is NodeKind.CATEGORY and node.id in connected_categories:
            resolved[node.id] = NodeHighlight(emphasized=True, label_visible=True)
        else:
            resolved[node.id] = _baseline(node)
    return resolved


def resolve_highlights(view: GraphView, context: Optional[SearchContext]) -> HighlightMap:
    """Compute emphasis and default label visibility for every node.

    Without a search, category labels show and entity labels wait for hover.
    A category search emphasises the matching categories and the entities
    linked to them, and keeps every category label visible. An entity search
    (by name or by cross-reference id) matches entities on label or id and
    emphasises only the categories linked to them; the matched entities show
    their labels but keep the baseline fill. Edges are never affected.

    Args:
        view: Projected graph.
        context: Active search, or ``None`` after a reset.

    Returns:
        HighlightMap: Fresh flags for every node in ``view``.
    """

    if context is None:
        return HighlightMap(by_node={node.id: _baseline(node) for node in view.nodes})
    needle = context.needle
    if context.mode is SearchMode.BY_CATEGORY:
        return HighlightMap(by_node=_resolve_category_search(view, needle))
    if context.mode.is_entity_search:
        return HighlightMap(by_node=_resolve_entity_search(view, needle))
    raise ValueError(f"Unsupported search mode: {context.mode!r}")


__all__ = ["HighlightMap", "NodeHighlight", "resolve_highlights"]
