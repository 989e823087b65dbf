"""Anatomical regions for the human body view and their row cache."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from backend.app.contracts import ResultRow
from backend.app.query.builder import BRAIN_QUERY, HEART_QUERY

LOGGER = logging.getLogger(__name__)


class OrganKey(str, Enum):
    """Fixed organ identifiers accepted by the human body view."""

    BRAIN = "brain"
    HEART = "heart"


@dataclass(frozen=True)
class OrganRegion:
    """Clickable overlay drawn on the body diagram.

    Placement is expressed as fractions of the diagram width/height; the radius
    is a fraction of the smaller side.
    """

    key: OrganKey
    label: str
    x_pct: float
    y_pct: float
    r_pct: float
    query: str


ORGAN_REGIONS: Tuple[OrganRegion, ...] = (
    OrganRegion(OrganKey.BRAIN, "Brain", x_pct=0.50, y_pct=0.07, r_pct=0.03, query=BRAIN_QUERY),
    OrganRegion(OrganKey.HEART, "Heart", x_pct=0.50, y_pct=0.44, r_pct=0.025, query=HEART_QUERY),
)


def find_region(key: OrganKey | str) -> Optional[OrganRegion]:
    """Return the region registered for ``key``, if any."""

    try:
        organ_key = OrganKey(key)
    except ValueError:
        return None
    for region in ORGAN_REGIONS:
        if region.key is organ_key:
            return region
    return None


RowFetcher = Callable[[str], Awaitable[List[ResultRow]]]


class OrganCache:
    """Session-long memo of organ rows keyed by :class:`OrganKey`.

    Entries are written once after a successful fetch and are never evicted or
    invalidated; the dataset is read-only from the explorer's point of view.
    There is no in-flight marker, so two concurrent lookups for the same
    uncached key both fetch and the later write wins with identical rows.
    """

    def __init__(self) -> None:
        self._entries: Dict[OrganKey, Tuple[ResultRow, ...]] = {}

    def get(self, key: OrganKey) -> Optional[List[ResultRow]]:
        """Return cached rows for ``key`` or ``None`` when not fetched yet."""

        rows = self._entries.get(key)
        return list(rows) if rows is not None else None

    def store(self, key: OrganKey, rows: Sequence[ResultRow]) -> None:
        """Record the rows fetched for ``key``."""

        self._entries[key] = tuple(rows)

    async def get_or_fetch(self, region: OrganRegion, fetch: RowFetcher) -> List[ResultRow]:
        """Return cached rows for ``region``, fetching them on first use.

        Failures propagate to the caller and leave the cache untouched.
        """

        cached = self.get(region.key)
        if cached is not None:
            LOGGER.debug("Organ cache hit for %s", region.key.value)
            return cached
        LOGGER.info("Loading organ rows for %s", region.key.value)
        rows = await fetch(region.query)
        self.store(region.key, rows)
        return list(rows)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[OrganKey]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["ORGAN_REGIONS", "OrganCache", "OrganKey", "OrganRegion", "find_region"]
