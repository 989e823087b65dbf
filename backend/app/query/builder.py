"""SPARQL query construction for protein searches against Wikidata."""
from __future__ import annotations

from typing import Final

from backend.app.contracts import SearchContext, SearchMode

DEFAULT_LIMIT: Final[int] = 1000
ENTITY_NAME_LIMIT: Final[int] = 200
CROSS_REF_LIMIT: Final[int] = 50
CATEGORY_LIMIT: Final[int] = 200
ORGAN_LIMIT: Final[int] = 1000

# Wikidata identifiers: protein (Q8054) found in Homo sapiens (Q15978631),
# UniProt protein ID (P352), biological process (P682), anatomical location (P927).
_PROTEIN_CLASS = "wd:Q8054"
_HUMAN_TAXON = "wd:Q15978631"

ANATOMY_BRAIN: Final[str] = "wd:Q1073"
ANATOMY_HEART: Final[str] = "wd:Q1072"


def escape_for_sparql(term: str | None) -> str:
    """Escape user input so it can be embedded in a double-quoted SPARQL literal.

    Backslashes are doubled first so the escapes added for quotes survive, and
    newlines collapse to a single space.

    Args:
        term: Raw user input.

    Returns:
        str: Escaped term, or an empty string when ``term`` is falsy.
    """

    if not term:
        return ""
    return term.replace("\\", "\\\\").replace('"', '\\"').replace("\n", " ")


DEFAULT_QUERY: Final[str] = f"""
SELECT ?item ?uniprotid ?biological_process ?biological_processLabel ?itemLabel WHERE {{
  ?item wdt:P352 ?uniprotid;
        wdt:P703 {_HUMAN_TAXON}.
  SERVICE wikibase:label {{ bd:serviceParam wikibase:language "en". }}
  OPTIONAL {{ ?item wdt:P682 ?biological_process. }}
  ?item wdt:P31 {_PROTEIN_CLASS}.
}}
LIMIT {DEFAULT_LIMIT}
"""


def build_organ_query(anatomical_location: str) -> str:
    """Return the static query for proteins whose processes sit within an organ.

    The biological process must be a transitive descendant of the anatomical
    location under "part of" (``wdt:P927*``).

    Args:
        anatomical_location: Prefixed Wikidata item, e.g. ``wd:Q1073``.

    Returns:
        str: Complete SPARQL query.
    """

    return f"""
SELECT ?protein ?proteinLabel ?uniprotID ?biologicalProcess ?biologicalProcessLabel WHERE {{
  ?protein wdt:P31 {_PROTEIN_CLASS};
           wdt:P703 {_HUMAN_TAXON};
           wdt:P352 ?uniprotID;
           wdt:P682 ?biologicalProcess.
  ?biologicalProcess (wdt:P927*) {anatomical_location}.
  SERVICE wikibase:label {{ bd:serviceParam wikibase:language "en". }}
}}
LIMIT {ORGAN_LIMIT}
"""


BRAIN_QUERY: Final[str] = build_organ_query(ANATOMY_BRAIN)
HEART_QUERY: Final[str] = build_organ_query(ANATOMY_HEART)


def _entity_name_query(name: str) -> str:
    return f"""
SELECT ?item ?uniprotid ?biological_process ?biological_processLabel ?itemLabel WHERE {{
  ?item wdt:P31 {_PROTEIN_CLASS};
        wdt:P703 {_HUMAN_TAXON}.
  OPTIONAL {{ ?item wdt:P352 ?uniprotid. }}
  OPTIONAL {{ ?item wdt:P682 ?biological_process. }}
  ?item rdfs:label ?itemLabel .
  FILTER(LANG(?itemLabel) = "en")
  FILTER(CONTAINS(LCASE(STR(?itemLabel)), LCASE("{name}")))
  OPTIONAL {{
    ?biological_process rdfs:label ?biological_processLabel .
    FILTER(LANG(?biological_processLabel) = "en")
  }}
}}
LIMIT {ENTITY_NAME_LIMIT}
"""


def _cross_ref_query(accession: str) -> str:
    return f"""
SELECT ?item ?uniprotid ?biological_process ?biological_processLabel ?itemLabel WHERE {{
  ?item wdt:P352 "{accession}";
        wdt:P703 {_HUMAN_TAXON}.
  OPTIONAL {{ ?item wdt:P352 ?uniprotid. }}
  OPTIONAL {{ ?item wdt:P682 ?biological_process. }}
  SERVICE wikibase:label {{ bd:serviceParam wikibase:language "en". }}
}}
LIMIT {CROSS_REF_LIMIT}
"""


def _category_query(process: str) -> str:
    return f"""
SELECT ?item ?uniprotid ?biological_process ?biological_processLabel ?itemLabel WHERE {{
  ?item wdt:P31 {_PROTEIN_CLASS};
        wdt:P703 {_HUMAN_TAXON};
        wdt:P682 ?biological_process.
  OPTIONAL {{ ?item wdt:P352 ?uniprotid. }}
  ?biological_process rdfs:label ?biological_processLabel .
  FILTER(LANG(?biological_processLabel) = "en")
  FILTER(CONTAINS(LCASE(STR(?biological_processLabel)), LCASE("{process}")))
  SERVICE wikibase:label {{ bd:serviceParam wikibase:language "en". }}
}}
LIMIT {CATEGORY_LIMIT}
"""


def build_search_query(context: SearchContext) -> str:
    """Return the SPARQL query for a validated search context.

    Args:
        context: Search mode and raw term.

    Returns:
        str: Complete SPARQL query with the term escaped.

    Raises:
        ValueError: If the mode is not a supported search mode.
    """

    escaped = escape_for_sparql(context.term)
    if context.mode is SearchMode.BY_ENTITY_NAME:
        return _entity_name_query(escaped)
    if context.mode is SearchMode.BY_CROSS_REF_ID:
        return _cross_ref_query(escaped)
    if context.mode is SearchMode.BY_CATEGORY:
        return _category_query(escaped)
    raise ValueError(f"Unsupported search mode: {context.mode!r}")


__all__ = [
    "ANATOMY_BRAIN",
    "ANATOMY_HEART",
    "BRAIN_QUERY",
    "CATEGORY_LIMIT",
    "CROSS_REF_LIMIT",
    "DEFAULT_LIMIT",
    "DEFAULT_QUERY",
    "ENTITY_NAME_LIMIT",
    "HEART_QUERY",
    "ORGAN_LIMIT",
    "build_organ_query",
    "build_search_query",
    "escape_for_sparql",
]
