"""HTTP transport for submitting SPARQL queries to the configured endpoint."""
from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, Dict, List, Mapping, Optional

import httpx

from backend.app.config import EndpointConfig
from backend.app.contracts import ExplorerError

LOGGER = logging.getLogger(__name__)


class TransportError(ExplorerError):
    """Raised when the endpoint cannot be reached or answers with a failure status."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SparqlTransport:
    """Submit queries over HTTP GET and return the raw result bindings.

    The transport never retries; callers decide how to surface a failure.
    """

    def __init__(
        self,
        config: EndpointConfig,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._config = config
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=config.timeout_seconds)

    @property
    def endpoint_url(self) -> str:
        return self._config.url

    async def fetch_bindings(self, query: str) -> List[Dict[str, Any]]:
        """Run a query and return its bindings.

        Args:
            query: Complete SPARQL query text.

        Returns:
            List[Dict[str, Any]]: Raw bindings; empty when the response carries
                no results or has an unexpected shape.

        Raises:
            TransportError: On connection failures or non-success statuses.
        """

        url = self._config.url
        headers = {"Accept": self._config.accept, "User-Agent": self._config.user_agent}
        start_time = perf_counter()
        try:
            response = await self._client.get(url, params={"query": query}, headers=headers)
        except httpx.HTTPError as exc:
            LOGGER.error(
                "SPARQL request raised an error",
                extra={"url": url, "error": str(exc)},
            )
            raise TransportError(f"Request to {url} failed: {exc}") from exc
        latency_ms = (perf_counter() - start_time) * 1000

        if not response.is_success:
            LOGGER.warning(
                "SPARQL endpoint returned failure status",
                extra={"url": url, "status_code": response.status_code, "latency_ms": latency_ms},
            )
            raise TransportError(
                f"Endpoint returned {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError:
            LOGGER.warning("SPARQL endpoint returned non-JSON payload", extra={"url": url})
            return []
        bindings = _extract_bindings(payload)
        LOGGER.info(
            "SPARQL query returned %d bindings in %.1fms",
            len(bindings),
            latency_ms,
        )
        return bindings

    async def aclose(self) -> None:
        """Close the underlying client when the transport created it."""

        if self._owns_client:
            await self._client.aclose()


def _extract_bindings(payload: object) -> List[Dict[str, Any]]:
    if not isinstance(payload, Mapping):
        LOGGER.warning("SPARQL payload is not a mapping: %s", type(payload).__name__)
        return []
    results = payload.get("results")
    if not isinstance(results, Mapping):
        LOGGER.warning("SPARQL payload is missing the results section")
        return []
    bindings = results.get("bindings")
    if not isinstance(bindings, list):
        LOGGER.warning("SPARQL payload is missing the bindings list")
        return []
    return [dict(binding) for binding in bindings if isinstance(binding, Mapping)]


__all__ = ["SparqlTransport", "TransportError"]
