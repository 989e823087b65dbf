"""Payloads handed to the table, graph, bubble and human body renderers."""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from backend.app.config import UIConfig
from backend.app.contracts import DisplayMode, NodeKind, ResultRow, SearchContext
from backend.app.orchestration.controller import ExplorerState, ExplorerStatus, OrganDetail
from backend.app.ui.aggregation import aggregate_categories, member_preview, sizing_domain
from backend.app.ui.highlight import resolve_highlights
from backend.app.ui.organs import ORGAN_REGIONS, OrganRegion
from backend.app.ui.service import GraphNode, project_graph

NO_RESULTS_MESSAGE = "No results found."
NO_ORGAN_RESULTS_MESSAGE = "No proteins found."
UNNAMED_ORGAN_ROW_LABEL = "Unnamed"
TABLE_COLUMNS = ["Protein", "UniProt", "Process URL", "Process Name"]

_STATUS_MESSAGES: Dict[ExplorerStatus, Optional[str]] = {
    ExplorerStatus.IDLE: "Run a query to load results.",
    ExplorerStatus.LOADING: "Loading…",
    ExplorerStatus.READY: None,
    ExplorerStatus.EMPTY: NO_RESULTS_MESSAGE,
}


class SearchSummary(BaseModel):
    """Active search echoed back to the client."""

    mode: str
    term: str


class ViewPayload(BaseModel):
    """Fields shared by every view payload."""

    display: DisplayMode
    status: ExplorerStatus
    message: Optional[str] = None
    search: Optional[SearchSummary] = None
    row_count: int = 0


class TableRowPayload(BaseModel):
    """One table row; absent values render as empty cells."""

    protein: str = ""
    uniprot: str = ""
    process_url: str = ""
    process_name: str = ""


class TableViewPayload(ViewPayload):
    """Tabular rendering of the current rows."""

    columns: List[str] = Field(default_factory=lambda: list(TABLE_COLUMNS))
    rows: List[TableRowPayload] = Field(default_factory=list)


class GraphNodePayload(BaseModel):
    """Node description for the force-directed layout."""

    id: str
    label: str
    kind: NodeKind
    emphasized: bool
    label_visible: bool
    fill: str
    radius: float
    cross_ref_id: Optional[str] = None


class GraphEdgePayload(BaseModel):
    """Edge between an entity node and a category node."""

    id: str
    source: str
    target: str


class GraphViewPayload(ViewPayload):
    """Graph consumed by the force-directed renderer."""

    nodes: List[GraphNodePayload] = Field(default_factory=list)
    edges: List[GraphEdgePayload] = Field(default_factory=list)
    emphasis: Dict[str, bool] = Field(default_factory=dict)
    label_visibility: Dict[str, bool] = Field(default_factory=dict)
    node_count: int = 0
    edge_count: int = 0
    link_distance: float
    charge_strength: float


class BubbleEntryPayload(BaseModel):
    """One packed bubble and the members previewed on hover."""

    label: str
    count: int
    preview: List[str] = Field(default_factory=list)
    remaining: int = 0


class BubbleViewPayload(ViewPayload):
    """Category counts consumed by the packing layout."""

    entries: List[BubbleEntryPayload] = Field(default_factory=list)
    domain: Tuple[int, int] = (0, 0)
    padding: float
    min_font_px: int


class OrganRegionPayload(BaseModel):
    """Clickable organ overlay."""

    id: str
    label: str
    x_pct: float
    y_pct: float
    r_pct: float


class HumanViewPayload(ViewPayload):
    """Body diagram with its fixed organ regions."""

    regions: List[OrganRegionPayload] = Field(default_factory=list)


class OrganRowPayload(BaseModel):
    """Row shown in an organ detail panel."""

    protein: str
    uniprot: str = ""


class OrganDetailPayload(BaseModel):
    """Detail panel for one organ."""

    organ_id: str
    label: str
    status: ExplorerStatus
    message: Optional[str] = None
    cached: bool = False
    row_count: int = 0
    rows: List[OrganRowPayload] = Field(default_factory=list)


def table_rows(rows: Sequence[ResultRow]) -> List[TableRowPayload]:
    """Return table rows for ``rows`` in order."""

    return [
        TableRowPayload(
            protein=row.entity_label or "",
            uniprot=row.cross_ref_id or "",
            process_url=row.category_id or "",
            process_name=row.category_label or "",
        )
        for row in rows
    ]


def region_payloads(regions: Sequence[OrganRegion] = ORGAN_REGIONS) -> List[OrganRegionPayload]:
    """Return the organ overlays in display order."""

    return [
        OrganRegionPayload(
            id=region.key.value,
            label=region.label,
            x_pct=region.x_pct,
            y_pct=region.y_pct,
            r_pct=region.r_pct,
        )
        for region in regions
    ]


def organ_detail_payload(detail: OrganDetail) -> OrganDetailPayload:
    """Return the detail panel for a loaded organ."""

    rows = [
        OrganRowPayload(
            protein=row.entity_label or UNNAMED_ORGAN_ROW_LABEL,
            uniprot=row.cross_ref_id or "",
        )
        for row in detail.rows
    ]
    return OrganDetailPayload(
        organ_id=detail.region.key.value,
        label=detail.region.label,
        status=ExplorerStatus.READY if rows else ExplorerStatus.EMPTY,
        message=None if rows else NO_ORGAN_RESULTS_MESSAGE,
        cached=detail.cached,
        row_count=len(rows),
        rows=rows,
    )


def _envelope(display: DisplayMode, state: ExplorerState) -> Dict[str, object]:
    if state.status is ExplorerStatus.ERROR:
        message = state.error or "Error loading data"
    else:
        message = _STATUS_MESSAGES[state.status]
    search = _search_summary(state.context)
    return {
        "display": display,
        "status": state.status,
        "message": message,
        "search": search,
        "row_count": state.row_count,
    }


def _search_summary(context: Optional[SearchContext]) -> Optional[SearchSummary]:
    if context is None:
        return None
    return SearchSummary(mode=context.mode.value, term=context.term)


def _node_fill(node: GraphNode, emphasized: bool, searching: bool, ui: UIConfig) -> str:
    graph = ui.graph
    if searching:
        return graph.emphasized_color if emphasized else graph.baseline_color
    return graph.entity_color if node.kind is NodeKind.ENTITY else graph.category_color


def build_table_view(state: ExplorerState, ui: UIConfig) -> TableViewPayload:
    return TableViewPayload(**_envelope(DisplayMode.TABLE, state), rows=table_rows(state.rows))


def build_graph_view(state: ExplorerState, ui: UIConfig) -> GraphViewPayload:
    """Project, highlight and colour the current rows for the graph renderer."""

    view = project_graph(state.rows)
    highlights = resolve_highlights(view, state.context)
    searching = state.context is not None
    nodes = []
    for node in view.nodes:
        flags = highlights[node.id]
        nodes.append(
            GraphNodePayload(
                id=node.id,
                label=node.label,
                kind=node.kind,
                emphasized=flags.emphasized,
                label_visible=flags.label_visible,
                fill=_node_fill(node, flags.emphasized, searching, ui),
                cross_ref_id=node.cross_ref_id,
                radius=(
                    ui.graph.entity_radius
                    if node.kind is NodeKind.ENTITY
                    else ui.graph.category_radius
                ),
            )
        )
    edges = [GraphEdgePayload(id=edge.id, source=edge.source, target=edge.target) for edge in view.edges]
    return GraphViewPayload(
        **_envelope(DisplayMode.GRAPH, state),
        nodes=nodes,
        edges=edges,
        emphasis=highlights.emphasis(),
        label_visibility=highlights.label_visibility(),
        node_count=view.node_count,
        edge_count=view.edge_count,
        link_distance=ui.graph.link_distance,
        charge_strength=ui.graph.charge_strength,
    )


def build_bubble_view(state: ExplorerState, ui: UIConfig) -> BubbleViewPayload:
    counts = aggregate_categories(state.rows)
    entries = []
    for entry in counts:
        preview = member_preview(state.rows, entry.label, limit=ui.bubble.preview_limit)
        entries.append(
            BubbleEntryPayload(
                label=entry.label,
                count=entry.count,
                preview=preview.labels,
                remaining=preview.remaining,
            )
        )
    return BubbleViewPayload(
        **_envelope(DisplayMode.BUBBLE, state),
        entries=entries,
        domain=sizing_domain(counts),
        padding=ui.bubble.padding,
        min_font_px=ui.bubble.min_font_px,
    )


def build_human_view(state: ExplorerState, ui: UIConfig) -> HumanViewPayload:
    return HumanViewPayload(**_envelope(DisplayMode.HUMAN, state), regions=region_payloads())


_BUILDERS: Dict[DisplayMode, Callable[[ExplorerState, UIConfig], ViewPayload]] = {
    DisplayMode.TABLE: build_table_view,
    DisplayMode.GRAPH: build_graph_view,
    DisplayMode.BUBBLE: build_bubble_view,
    DisplayMode.HUMAN: build_human_view,
}


def build_view(display: DisplayMode | str, state: ExplorerState, ui: UIConfig) -> ViewPayload:
    """Return the payload for ``display`` built from ``state``.

    Raises:
        ValueError: If ``display`` is not a recognised display mode.
    """

    return _BUILDERS[DisplayMode(display)](state, ui)


__all__ = [
    "NO_ORGAN_RESULTS_MESSAGE",
    "NO_RESULTS_MESSAGE",
    "UNNAMED_ORGAN_ROW_LABEL",
    "TABLE_COLUMNS",
    "BubbleViewPayload",
    "GraphViewPayload",
    "HumanViewPayload",
    "OrganDetailPayload",
    "TableViewPayload",
    "ViewPayload",
    "build_view",
    "organ_detail_payload",
    "region_payloads",
    "table_rows",
]
