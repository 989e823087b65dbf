"""FastAPI application factory for the protein explorer backend."""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from backend.app.config import AppConfig, load_config
from backend.app.contracts import DisplayMode, InvalidSearchInput, SearchMode
from backend.app.orchestration import (
    ExplorerController,
    ExplorerState,
    StaleResponseError,
    UnknownOrganError,
)
from backend.app.orchestration.controller import BindingsTransport
from backend.app.query import SparqlTransport, TransportError
from backend.app.ui.views import (
    TableRowPayload,
    build_view,
    organ_detail_payload,
    region_payloads,
    table_rows,
)

LOGGER = logging.getLogger(__name__)

SEARCH_MODE_LABELS: Dict[SearchMode, str] = {
    SearchMode.BY_ENTITY_NAME: "Search by Protein Name",
    SearchMode.BY_CROSS_REF_ID: "Search by UniProt ID",
    SearchMode.BY_CATEGORY: "Search by Biological Process",
}


class SearchRequest(BaseModel):
    """Search submitted from the explorer UI."""

    term: str = Field("", description="Protein name, UniProt ID or biological process text")
    mode: SearchMode = Field(SearchMode.BY_ENTITY_NAME, description="Which field the term is matched against")


class CategoryDetailResponse(BaseModel):
    """Rows behind one bubble of the packing chart."""

    label: str
    row_count: int
    message: Optional[str] = None
    rows: List[TableRowPayload] = Field(default_factory=list)


class UISettingsResponse(BaseModel):
    """UI configuration defaults served to the frontend."""

    title: str
    endpoint: str
    default_display_mode: str
    display_modes: List[str]
    search_modes: List[Dict[str, str]]
    graph: Dict[str, object]
    bubble: Dict[str, object]


def create_app(
    config: AppConfig | None = None,
    transport: Optional[BindingsTransport] = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        config: Optional pre-loaded configuration. If omitted, the default
            configuration defined in config.yaml is used.
        transport: Optional query transport. When omitted an HTTP transport
            for the configured endpoint is created and closed on shutdown.

    Returns:
        FastAPI: Configured FastAPI application.
    """

    resolved_config = config or load_config()
    app = FastAPI(title=f"{resolved_config.app.name} API", version=resolved_config.app.version)
    app.state.app_config = resolved_config

    allowed_origins = resolved_config.ui.allowed_origins
    if allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_credentials=False,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )

    owned_transport: Optional[SparqlTransport] = None
    if transport is None:
        owned_transport = SparqlTransport(resolved_config.endpoint)
        transport = owned_transport
    app.state.controller = ExplorerController(transport)

    @app.get("/health", tags=["system"], summary="Service health probe")
    def health() -> dict[str, str]:
        """Return service health information."""

        return {"status": "ok", "version": resolved_config.app.version}

    @app.get("/api/ui/settings", tags=["ui"], summary="UI configuration defaults")
    def ui_settings() -> UISettingsResponse:
        """Return UI defaults sourced from the configuration file."""

        ui = resolved_config.ui
        return UISettingsResponse(
            title=resolved_config.app.name,
            endpoint=resolved_config.endpoint.url,
            default_display_mode=ui.default_display_mode,
            display_modes=[mode.value for mode in DisplayMode],
            search_modes=[
                {"value": mode.value, "label": SEARCH_MODE_LABELS[mode]} for mode in SearchMode
            ],
            graph=ui.graph.model_dump(),
            bubble=ui.bubble.model_dump(),
        )

    @app.post(
        "/api/explore/reset",
        tags=["explore"],
        summary="Run the unfiltered default query",
        description="Clears the active search and replaces the current rows.",
    )
    async def reset(
        display: Optional[DisplayMode] = Query(None, description="Display mode to render"),
    ) -> dict[str, object]:
        """Load the default result set and render it."""

        controller = _require_controller(app)
        try:
            state = await controller.run_default()
        except StaleResponseError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        except TransportError as exc:
            raise HTTPException(status_code=502, detail=_transport_detail(exc)) from exc
        return _render(app, display, state)

    @app.post("/api/explore/search", tags=["explore"], summary="Search proteins")
    async def search(
        payload: SearchRequest,
        display: Optional[DisplayMode] = Query(None, description="Display mode to render"),
    ) -> dict[str, object]:
        """Run a search and render the new rows with search-aware highlighting."""

        controller = _require_controller(app)
        try:
            state = await controller.search(payload.term, payload.mode)
        except InvalidSearchInput as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except StaleResponseError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        except TransportError as exc:
            raise HTTPException(status_code=502, detail=_transport_detail(exc)) from exc
        return _render(app, display, state)

    @app.get("/api/explore/view", tags=["explore"], summary="Render the current rows")
    def current_view(
        display: Optional[DisplayMode] = Query(None, description="Display mode to render"),
    ) -> dict[str, object]:
        """Render the current state without querying the endpoint."""

        controller = _require_controller(app)
        return _render(app, display, controller.state)

    @app.get(
        "/api/explore/categories/{label}",
        tags=["explore"],
        summary="List the rows behind one bubble",
    )
    def category_detail(label: str) -> CategoryDetailResponse:
        """Return the current rows grouped under a category label."""

        controller = _require_controller(app)
        rows = controller.category_detail(label)
        return CategoryDetailResponse(
            label=label,
            row_count=len(rows),
            message=None if rows else f'No proteins found for "{label}".',
            rows=table_rows(rows),
        )

    @app.get("/api/organs", tags=["organs"], summary="List body diagram regions")
    def organs() -> dict[str, object]:
        """Return the fixed organ overlays for the human body view."""

        return {"regions": [region.model_dump() for region in region_payloads()]}

    @app.get("/api/organs/{organ_id}", tags=["organs"], summary="Load proteins for one organ")
    async def organ_detail(organ_id: str) -> dict[str, object]:
        """Return the organ detail panel, fetching rows on first use only."""

        controller = _require_controller(app)
        try:
            detail = await controller.organ_detail(organ_id)
        except UnknownOrganError as exc:
            raise HTTPException(status_code=404, detail=f"Unknown organ: {organ_id}") from exc
        except TransportError as exc:
            LOGGER.warning("Failed to load organ %s: %s", organ_id, exc)
            raise HTTPException(status_code=502, detail=_transport_detail(exc)) from exc
        return organ_detail_payload(detail).model_dump(mode="json")

    @app.on_event("shutdown")
    async def _shutdown() -> None:  # pragma: no cover - network resource cleanup
        if owned_transport is not None:
            try:
                await owned_transport.aclose()
            except Exception:  # noqa: BLE001 - shutdown must not raise
                LOGGER.exception("Failed to close SPARQL transport")

    return app


def _require_controller(app: FastAPI) -> ExplorerController:
    controller = getattr(app.state, "controller", None)
    if controller is None:
        raise HTTPException(status_code=503, detail="Explorer controller unavailable")
    return controller


def _render(app: FastAPI, display: Optional[DisplayMode], state: ExplorerState) -> dict[str, object]:
    config: AppConfig = app.state.app_config
    mode = display or DisplayMode(config.ui.default_display_mode)
    view = build_view(mode, state, config.ui)
    return view.model_dump(mode="json")


def _transport_detail(exc: TransportError) -> str:
    if exc.status_code is not None:
        return f"SPARQL endpoint error (status {exc.status_code})"
    return f"SPARQL endpoint unreachable: {exc}"


__all__ = ["create_app"]
