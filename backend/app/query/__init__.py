"""Query construction, transport and normalisation for the SPARQL endpoint."""

from backend.app.query.builder import (
    BRAIN_QUERY,
    DEFAULT_QUERY,
    HEART_QUERY,
    build_organ_query,
    build_search_query,
    escape_for_sparql,
)
from backend.app.query.normalizer import normalize_binding, normalize_bindings
from backend.app.query.transport import SparqlTransport, TransportError

__all__ = [
    "BRAIN_QUERY",
    "DEFAULT_QUERY",
    "HEART_QUERY",
    "SparqlTransport",
    "TransportError",
    "build_organ_query",
    "build_search_query",
    "escape_for_sparql",
    "normalize_binding",
    "normalize_bindings",
]
