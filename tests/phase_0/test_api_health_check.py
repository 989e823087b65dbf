"""Tests for the SPARQL endpoint health probe."""
from __future__ import annotations

import httpx

from backend.app.utils.api_health import PROBE_QUERY, EndpointHealthResult, check_endpoint_health

ENDPOINT = "https://sparql.example.org/sparql"


def test_check_endpoint_health_success() -> None:
    """A boolean ASK result should yield a successful result with payload."""

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/sparql"
        assert request.url.params["query"] == PROBE_QUERY
        assert request.headers["Accept"] == "application/sparql-results+json"
        return httpx.Response(200, json={"head": {}, "boolean": True})

    client = httpx.Client(transport=httpx.MockTransport(handler))

    result = check_endpoint_health(ENDPOINT, client=client)

    client.close()

    assert result == EndpointHealthResult(
        ok=True,
        status_code=200,
        detail="Endpoint health check succeeded",
        latency_ms=result.latency_ms,
        payload={"head": {}, "boolean": True},
    )
    assert result.latency_ms is not None


def test_check_endpoint_health_failure_status() -> None:
    """A non-200 response should be treated as a failure."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="service unavailable")

    client = httpx.Client(transport=httpx.MockTransport(handler))

    result = check_endpoint_health(ENDPOINT, client=client)

    client.close()

    assert not result.ok
    assert result.status_code == 503
    assert result.detail == "Endpoint returned 503"


def test_check_endpoint_health_rejects_payload_without_boolean() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"results": {"bindings": []}})

    client = httpx.Client(transport=httpx.MockTransport(handler))

    result = check_endpoint_health(ENDPOINT, client=client)

    client.close()

    assert not result.ok
    assert result.payload == {"results": {"bindings": []}}


def test_check_endpoint_health_rejects_non_json() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>maintenance</html>")

    client = httpx.Client(transport=httpx.MockTransport(handler))

    result = check_endpoint_health(ENDPOINT, client=client)

    client.close()

    assert not result.ok
    assert result.payload is None
    assert "non-JSON" in result.detail


def test_check_endpoint_health_network_error() -> None:
    """Network errors should yield a failure with explanatory detail."""

    class ErrorTransport(httpx.BaseTransport):
        def handle_request(self, request: httpx.Request) -> httpx.Response:  # type: ignore[override]
            raise httpx.ConnectError("connection refused", request=request)

    client = httpx.Client(transport=ErrorTransport())

    result = check_endpoint_health(ENDPOINT, client=client)

    client.close()

    assert not result.ok
    assert result.status_code is None
    assert "connection refused" in result.detail
