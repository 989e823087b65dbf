"""UI support utilities: graph projection, aggregation, highlighting and organ regions."""

from .aggregation import CategoryCount, aggregate_categories, category_members, sizing_domain
from .highlight import HighlightMap, NodeHighlight, resolve_highlights
from .organs import ORGAN_REGIONS, OrganCache, OrganKey, OrganRegion
from .service import GraphEdge, GraphNode, GraphProjector, GraphView, project_graph

__all__ = [
    "ORGAN_REGIONS",
    "CategoryCount",
    "GraphEdge",
    "GraphNode",
    "GraphProjector",
    "GraphView",
    "HighlightMap",
    "NodeHighlight",
    "OrganCache",
    "OrganKey",
    "OrganRegion",
    "aggregate_categories",
    "category_members",
    "project_graph",
    "resolve_highlights",
    "sizing_domain",
]
