"""Explorer controller owning the current result state."""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from time import perf_counter
from typing import Any, Dict, List, Optional, Sequence, Tuple

from typing_extensions import Protocol

from backend.app.contracts import ExplorerError, ResultRow, SearchContext, SearchMode
from backend.app.query.builder import DEFAULT_QUERY, build_search_query
from backend.app.query.normalizer import normalize_bindings
from backend.app.query.transport import TransportError
from backend.app.ui.aggregation import category_members
from backend.app.ui.organs import OrganCache, OrganKey, OrganRegion, find_region

LOGGER = logging.getLogger(__name__)


class BindingsTransport(Protocol):
    """Protocol describing the transport used to run queries."""

    async def fetch_bindings(self, query: str) -> List[Dict[str, Any]]:
        """Return raw bindings for ``query``."""


class ExplorerStatus(str, Enum):
    """Lifecycle of the current result set."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    EMPTY = "empty"
    ERROR = "error"


class StaleResponseError(ExplorerError):
    """Raised when a response arrives after a newer request was dispatched."""

    def __init__(self, sequence: int, latest: int) -> None:
        super().__init__(f"Response {sequence} superseded by request {latest}")
        self.sequence = sequence
        self.latest = latest


class UnknownOrganError(ExplorerError, KeyError):
    """Raised when an organ key has no registered region."""


@dataclass(frozen=True)
class ExplorerState:
    """Snapshot of the rows and search context currently on display."""

    rows: Tuple[ResultRow, ...] = ()
    context: Optional[SearchContext] = None
    status: ExplorerStatus = ExplorerStatus.IDLE
    error: Optional[str] = None
    sequence: int = 0

    @property
    def row_count(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class OrganDetail:
    """Rows loaded for one anatomical region."""

    region: OrganRegion
    rows: List[ResultRow]
    cached: bool


class ExplorerController:
    """Run searches and keep the latest result set.

    Every dispatch takes a monotonically increasing sequence number. Responses
    older than the latest dispatched request are discarded so a slow earlier
    search never overwrites a fresher one.
    """

    def __init__(
        self,
        transport: BindingsTransport,
        *,
        organ_cache: Optional[OrganCache] = None,
    ) -> None:
        self._transport = transport
        self._organ_cache = organ_cache if organ_cache is not None else OrganCache()
        self._state = ExplorerState()
        self._latest_dispatched = 0

    @property
    def state(self) -> ExplorerState:
        return self._state

    @property
    def organ_cache(self) -> OrganCache:
        return self._organ_cache

    @property
    def latest_dispatched(self) -> int:
        return self._latest_dispatched

    async def run_default(self) -> ExplorerState:
        """Run the unfiltered query and clear any active search."""

        return await self._dispatch(DEFAULT_QUERY, context=None)

    async def search(self, term: Optional[str], mode: SearchMode | str) -> ExplorerState:
        """Validate the term, run the matching search and return the new state.

        Raises:
            InvalidSearchInput: If the term is blank; nothing is sent.
            TransportError: If the endpoint request fails.
            StaleResponseError: If a newer request was dispatched meanwhile.
        """

        context = SearchContext.create(term, mode)
        return await self._dispatch(build_search_query(context), context=context)

    async def fetch_rows(self, query: str) -> List[ResultRow]:
        """Run ``query`` and normalise its bindings without touching the state."""

        bindings = await self._transport.fetch_bindings(query)
        return normalize_bindings(bindings)

    async def organ_detail(self, key: OrganKey | str) -> OrganDetail:
        """Return the rows for one organ, served from the cache after first use.

        Failures are local to the call and leave the main result state as is.
        """

        region = find_region(key)
        if region is None:
            raise UnknownOrganError(str(key))
        cached = region.key in self._organ_cache
        rows = await self._organ_cache.get_or_fetch(region, self.fetch_rows)
        return OrganDetail(region=region, rows=rows, cached=cached)

    def category_detail(self, label: str) -> List[ResultRow]:
        """Return the current rows grouped under one bubble label."""

        return category_members(self._state.rows, label)

    async def _dispatch(self, query: str, *, context: Optional[SearchContext]) -> ExplorerState:
        self._latest_dispatched += 1
        sequence = self._latest_dispatched
        self._state = replace(self._state, status=ExplorerStatus.LOADING, error=None)
        start_time = perf_counter()
        try:
            rows = await self.fetch_rows(query)
        except TransportError as exc:
            if self._is_stale(sequence):
                LOGGER.info("Ignoring failure of superseded query %d: %s", sequence, exc)
                raise StaleResponseError(sequence, self._latest_dispatched) from exc
            LOGGER.warning("Query %d failed: %s", sequence, exc)
            self._state = replace(
                self._state,
                status=ExplorerStatus.ERROR,
                error=str(exc),
                sequence=sequence,
            )
            raise
        if self._is_stale(sequence):
            LOGGER.info(
                "Discarding response %d; request %d is newer",
                sequence,
                self._latest_dispatched,
            )
            raise StaleResponseError(sequence, self._latest_dispatched)
        self._state = self._state_from_rows(rows, context, sequence)
        LOGGER.info(
            "Query %d applied in %.2fs (rows=%d, mode=%s)",
            sequence,
            perf_counter() - start_time,
            len(rows),
            context.mode.value if context else "default",
        )
        return self._state

    def _is_stale(self, sequence: int) -> bool:
        return sequence < self._latest_dispatched

    @staticmethod
    def _state_from_rows(
        rows: Sequence[ResultRow],
        context: Optional[SearchContext],
        sequence: int,
    ) -> ExplorerState:
        status = ExplorerStatus.READY if rows else ExplorerStatus.EMPTY
        return ExplorerState(rows=tuple(rows), context=context, status=status, sequence=sequence)


__all__ = [
    "BindingsTransport",
    "ExplorerController",
    "ExplorerState",
    "ExplorerStatus",
    "OrganDetail",
    "StaleResponseError",
    "UnknownOrganError",
]
