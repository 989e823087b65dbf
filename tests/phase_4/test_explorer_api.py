from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi.testclient import TestClient

from backend.app.config import load_config
from backend.app.main import create_app
from backend.app.query.transport import TransportError


def _cell(value: str) -> Dict[str, str]:
    return {"value": value}


SEARCH_BINDINGS = [
    {
        "item": _cell("E1"),
        "itemLabel": _cell("ProtA"),
        "uniprotid": _cell("P1"),
        "biological_process": _cell("C1"),
        "biological_processLabel": _cell("Metabolism"),
    },
    {
        "item": _cell("E2"),
        "itemLabel": _cell("ProtB"),
        "biological_process": _cell("C2"),
        "biological_processLabel": _cell("Signaling"),
    },
]


class StubTransport:
    def __init__(self, bindings: Optional[List[Dict[str, Any]]] = None) -> None:
        self.bindings = bindings if bindings is not None else list(SEARCH_BINDINGS)
        self.error: Optional[TransportError] = None
        self.queries: List[str] = []

    async def fetch_bindings(self, query: str) -> List[Dict[str, Any]]:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return list(self.bindings)


def _client(transport: StubTransport) -> TestClient:
    return TestClient(create_app(config=load_config(), transport=transport))


def test_health_and_settings() -> None:
    client = _client(StubTransport())

    health = client.get("/health")
    assert health.status_code == 200
    assert health.json() == {"status": "ok", "version": "1.0.0"}

    settings = client.get("/api/ui/settings").json()
    assert settings["title"] == "Protein Explorer"
    assert settings["display_modes"] == ["table", "graph", "bubble", "human"]
    assert [mode["value"] for mode in settings["search_modes"]] == ["name", "uniprot", "process"]
    assert settings["graph"]["charge_strength"] == -2000


def test_view_before_any_query_is_idle() -> None:
    body = _client(StubTransport()).get("/api/explore/view").json()
    assert body["status"] == "idle"
    assert body["display"] == "table"
    assert body["rows"] == []


def test_reset_runs_default_query_and_renders_table() -> None:
    transport = StubTransport()
    client = _client(transport)

    response = client.post("/api/explore/reset")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ready"
    assert body["search"] is None
    assert body["row_count"] == 2
    assert body["rows"][1] == {"protein": "ProtB", "uniprot": "", "process_url": "C2", "process_name": "Signaling"}
    assert len(transport.queries) == 1


def test_search_renders_graph_with_highlights() -> None:
    client = _client(StubTransport())

    response = client.post(
        "/api/explore/search",
        params={"display": "graph"},
        json={"term": "metabo", "mode": "process"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["search"] == {"mode": "process", "term": "metabo"}
    assert body["emphasis"] == {"E1": True, "C1": True, "E2": False, "C2": False}
    assert body["label_visibility"]["C2"] is True
    assert body["node_count"] == 4


def test_current_view_switches_display_without_refetch() -> None:
    transport = StubTransport()
    client = _client(transport)
    client.post("/api/explore/reset")

    bubble = client.get("/api/explore/view", params={"display": "bubble"}).json()

    assert [entry["label"] for entry in bubble["entries"]] == ["Metabolism", "Signaling"]
    assert bubble["domain"] == [1, 1]
    assert len(transport.queries) == 1


def test_blank_search_is_rejected_without_query() -> None:
    transport = StubTransport()
    client = _client(transport)

    response = client.post("/api/explore/search", json={"term": "  ", "mode": "name"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Please enter a protein name or ID!"
    assert transport.queries == []


def test_unknown_search_mode_is_unprocessable() -> None:
    response = _client(StubTransport()).post("/api/explore/search", json={"term": "x", "mode": "organism"})
    assert response.status_code == 422


def test_endpoint_failure_maps_to_bad_gateway() -> None:
    transport = StubTransport()
    transport.error = TransportError("Endpoint returned 503", status_code=503)
    client = _client(transport)

    response = client.post("/api/explore/search", json={"term": "insulin", "mode": "name"})

    assert response.status_code == 502
    assert response.json()["detail"] == "SPARQL endpoint error (status 503)"
    view = client.get("/api/explore/view").json()
    assert view["status"] == "error"


def test_empty_results_render_message() -> None:
    client = _client(StubTransport(bindings=[]))
    body = client.post("/api/explore/search", json={"term": "zzz", "mode": "uniprot"}).json()
    assert body["status"] == "empty"
    assert body["message"] == "No results found."


def test_category_detail_lists_members() -> None:
    client = _client(StubTransport())
    client.post("/api/explore/reset")

    detail = client.get("/api/explore/categories/Signaling").json()
    missing = client.get("/api/explore/categories/Apoptosis").json()

    assert detail["row_count"] == 1
    assert detail["rows"][0]["protein"] == "ProtB"
    assert missing["row_count"] == 0
    assert missing["message"] == 'No proteins found for "Apoptosis".'


def test_organ_endpoints_cache_rows() -> None:
    transport = StubTransport(
        bindings=[{"protein": _cell("E9"), "proteinLabel": _cell("Cardiac protein"), "uniprotID": _cell("P9")}]
    )
    client = _client(transport)

    regions = client.get("/api/organs").json()["regions"]
    first = client.get("/api/organs/heart").json()
    second = client.get("/api/organs/heart").json()

    assert [region["id"] for region in regions] == ["brain", "heart"]
    assert first["cached"] is False
    assert second["cached"] is True
    assert first["rows"] == [{"protein": "Cardiac protein", "uniprot": "P9"}]
    assert len(transport.queries) == 1


def test_unknown_organ_is_not_found() -> None:
    response = _client(StubTransport()).get("/api/organs/spleen")
    assert response.status_code == 404


def test_organ_failure_maps_to_bad_gateway() -> None:
    transport = StubTransport()
    transport.error = TransportError("Request to x failed: refused")
    response = _client(transport).get("/api/organs/brain")
    assert response.status_code == 502
    assert response.json()["detail"].startswith("SPARQL endpoint unreachable")
