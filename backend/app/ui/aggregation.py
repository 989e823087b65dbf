"""Category aggregation for the bubble (packing) view."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from backend.app.contracts import ResultRow

UNNAMED_ENTITY_LABEL = "Unnamed protein"


@dataclass(frozen=True)
class CategoryCount:
    """Number of rows carrying one category label."""

    label: str
    count: int


@dataclass(frozen=True)
class MemberPreview:
    """Short list of entity labels shown when hovering a bubble."""

    labels: List[str]
    remaining: int

    @property
    def total(self) -> int:
        return len(self.labels) + self.remaining


def aggregate_categories(rows: Sequence[ResultRow]) -> List[CategoryCount]:
    """Count rows per category label in first-occurrence order.

    Rows without a category fall under the ``"Unknown"`` sentinel. No sort is
    applied; the packing layout places bubbles by size itself.
    """

    counts: Dict[str, int] = {}
    for row in rows:
        label = row.aggregation_label
        counts[label] = counts.get(label, 0) + 1
    return [CategoryCount(label=label, count=count) for label, count in counts.items()]


def sizing_domain(counts: Sequence[CategoryCount]) -> Tuple[int, int]:
    """Return the ``(min, max)`` count domain used for colour and size scaling."""

    if not counts:
        return (0, 0)
    values = [entry.count for entry in counts]
    return (min(values), max(values))


def category_members(rows: Sequence[ResultRow], label: str) -> List[ResultRow]:
    """Return the rows grouped under ``label`` by :func:`aggregate_categories`."""

    return [row for row in rows if row.aggregation_label == label]


def member_preview(rows: Sequence[ResultRow], label: str, *, limit: int) -> MemberPreview:
    """Return the first ``limit`` entity labels under ``label`` and how many remain."""

    members = category_members(rows, label)
    labels = [row.entity_label or UNNAMED_ENTITY_LABEL for row in members[:limit]]
    return MemberPreview(labels=labels, remaining=max(len(members) - limit, 0))


__all__ = [
    "UNNAMED_ENTITY_LABEL",
    "CategoryCount",
    "MemberPreview",
    "aggregate_categories",
    "category_members",
    "member_preview",
    "sizing_domain",
]
