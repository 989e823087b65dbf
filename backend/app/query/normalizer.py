"""Normalise heterogeneous SPARQL bindings into uniform result rows."""
from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Sequence, Tuple

from backend.app.contracts import ResultRow

LOGGER = logging.getLogger(__name__)

# Search queries bind ?item/?uniprotid/?biological_process; organ queries bind
# ?protein/?uniprotID/?biologicalProcess.
ENTITY_ID_KEYS: Tuple[str, ...] = ("item", "protein")
ENTITY_LABEL_KEYS: Tuple[str, ...] = ("itemLabel", "proteinLabel")
CROSS_REF_KEYS: Tuple[str, ...] = ("uniprotid", "uniprotID")
CATEGORY_ID_KEYS: Tuple[str, ...] = ("biological_process", "biologicalProcess")
CATEGORY_LABEL_KEYS: Tuple[str, ...] = ("biological_processLabel", "biologicalProcessLabel")


def binding_value(binding: Mapping[str, object], keys: Sequence[str]) -> Optional[str]:
    """Return the first non-empty ``value`` bound under any of ``keys``.

    Args:
        binding: One binding mapping variable names to ``{"value": ...}`` objects.
        keys: Variable names to try, in priority order.

    Returns:
        Optional[str]: The bound value, or ``None`` when every key is absent.
    """

    for key in keys:
        cell = binding.get(key)
        if not isinstance(cell, Mapping):
            continue
        value = cell.get("value")
        if isinstance(value, str) and value:
            return value
    return None


def normalize_binding(binding: Mapping[str, object]) -> Optional[ResultRow]:
    """Convert one binding into a row, or ``None`` when it has no entity id."""

    entity_id = binding_value(binding, ENTITY_ID_KEYS)
    if entity_id is None:
        return None
    return ResultRow(
        entity_id=entity_id,
        entity_label=binding_value(binding, ENTITY_LABEL_KEYS),
        cross_ref_id=binding_value(binding, CROSS_REF_KEYS),
        category_id=binding_value(binding, CATEGORY_ID_KEYS),
        category_label=binding_value(binding, CATEGORY_LABEL_KEYS),
    )


def normalize_bindings(bindings: Sequence[object]) -> List[ResultRow]:
    """Normalise a bindings list, dropping only rows without an entity id."""

    rows: List[ResultRow] = []
    dropped = 0
    for binding in bindings:
        if not isinstance(binding, Mapping):
            dropped += 1
            continue
        row = normalize_binding(binding)
        if row is None:
            dropped += 1
            continue
        rows.append(row)
    if dropped:
        LOGGER.debug("Dropped %d bindings without an entity id", dropped)
    return rows


__all__ = ["binding_value", "normalize_binding", "normalize_bindings"]
