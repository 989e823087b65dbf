"""Helpers for verifying that the SPARQL endpoint answers queries."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

PROBE_QUERY = "ASK { ?s ?p ?o }"
SPARQL_JSON = "application/sparql-results+json"


@dataclass(frozen=True)
class EndpointHealthResult:
    """Structured information about an endpoint probe result."""

    ok: bool
    status_code: Optional[int]
    detail: str
    latency_ms: Optional[float]
    payload: Optional[dict[str, Any]]


def check_endpoint_health(
    endpoint_url: str,
    *,
    timeout: float = 10.0,
    user_agent: str = "protein-explorer-health/1.0",
    client: Optional[httpx.Client] = None,
) -> EndpointHealthResult:
    """Send a trivial ``ASK`` query and return a structured result.

    Args:
        endpoint_url: SPARQL endpoint URL (e.g. ``"https://query.wikidata.org/sparql"``).
        timeout: Request timeout in seconds when creating an internal client.
        user_agent: ``User-Agent`` header sent with the probe.
        client: Optional pre-configured ``httpx.Client`` (useful for testing).

    Returns:
        EndpointHealthResult: Whether the endpoint answered with a SPARQL JSON
            boolean result, plus context about failures.
    """

    should_close = client is None
    session = client or httpx.Client(timeout=timeout)
    start_time = time.monotonic()
    headers = {"Accept": SPARQL_JSON, "User-Agent": user_agent}

    try:
        response = session.get(endpoint_url, params={"query": PROBE_QUERY}, headers=headers)
        latency_ms = (time.monotonic() - start_time) * 1000
        if response.status_code == httpx.codes.OK:
            try:
                payload = response.json()
            except ValueError:
                logger.warning("Endpoint returned non-JSON payload", extra={"url": endpoint_url})
                return EndpointHealthResult(
                    ok=False,
                    status_code=response.status_code,
                    detail="Endpoint returned a non-JSON payload",
                    latency_ms=latency_ms,
                    payload=None,
                )
            if not isinstance(payload, dict) or "boolean" not in payload:
                logger.warning("Endpoint payload lacks an ASK result", extra={"url": endpoint_url})
                return EndpointHealthResult(
                    ok=False,
                    status_code=response.status_code,
                    detail="Endpoint payload lacks an ASK result",
                    latency_ms=latency_ms,
                    payload=payload if isinstance(payload, dict) else None,
                )
            logger.info(
                "Endpoint health check succeeded",
                extra={"url": endpoint_url, "status_code": response.status_code, "latency_ms": latency_ms},
            )
            return EndpointHealthResult(
                ok=True,
                status_code=response.status_code,
                detail="Endpoint health check succeeded",
                latency_ms=latency_ms,
                payload=payload,
            )

        logger.warning(
            "Endpoint health check failed with status",
            extra={
                "url": endpoint_url,
                "status_code": response.status_code,
                "latency_ms": latency_ms,
                "response_text": response.text,
            },
        )
        return EndpointHealthResult(
            ok=False,
            status_code=response.status_code,
            detail=f"Endpoint returned {response.status_code}",
            latency_ms=latency_ms,
            payload=None,
        )
    except httpx.HTTPError as exc:  # pragma: no cover - network failures are environment dependent
        latency_ms = (time.monotonic() - start_time) * 1000
        logger.error(
            "Endpoint health check request raised an error",
            extra={"url": endpoint_url, "latency_ms": latency_ms, "error": str(exc)},
        )
        return EndpointHealthResult(
            ok=False,
            status_code=None,
            detail=f"Request to {endpoint_url} failed: {exc}",
            latency_ms=latency_ms,
            payload=None,
        )
    finally:
        if should_close:
            session.close()


__all__ = ["EndpointHealthResult", "check_endpoint_health"]
