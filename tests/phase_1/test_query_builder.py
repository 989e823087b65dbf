from __future__ import annotations

import pytest

from backend.app.contracts import InvalidSearchInput, SearchContext, SearchMode
from backend.app.query.builder import (
    ANATOMY_BRAIN,
    ANATOMY_HEART,
    BRAIN_QUERY,
    CATEGORY_LIMIT,
    CROSS_REF_LIMIT,
    DEFAULT_LIMIT,
    DEFAULT_QUERY,
    ENTITY_NAME_LIMIT,
    HEART_QUERY,
    build_search_query,
    escape_for_sparql,
)


def test_escape_doubles_backslashes_before_quotes() -> None:
    assert escape_for_sparql('He"llo\\') == 'He\\"llo\\\\'


def test_escape_collapses_newlines_and_handles_empty() -> None:
    assert escape_for_sparql("line one\nline two") == "line one line two"
    assert escape_for_sparql("") == ""
    assert escape_for_sparql(None) == ""


def test_escaped_term_keeps_literal_well_formed() -> None:
    context = SearchContext.create('He"llo\\', SearchMode.BY_ENTITY_NAME)
    query = build_search_query(context)
    assert 'LCASE("He\\"llo\\\\")' in query
    # Every quote inside the literal is escaped, so quotes stay balanced.
    unescaped_quotes = query.replace('\\\\', "").replace('\\"', "").count('"')
    assert unescaped_quotes % 2 == 0


def test_entity_name_query_filters_on_label() -> None:
    query = build_search_query(SearchContext.create("  Insulin ", "name"))
    assert 'CONTAINS(LCASE(STR(?itemLabel)), LCASE("Insulin"))' in query
    assert "wdt:P31 wd:Q8054" in query
    assert "wdt:P703 wd:Q15978631" in query
    assert f"LIMIT {ENTITY_NAME_LIMIT}" in query


def test_cross_ref_query_matches_exact_accession() -> None:
    query = build_search_query(SearchContext.create("P01308", SearchMode.BY_CROSS_REF_ID))
    assert '?item wdt:P352 "P01308"' in query
    assert f"LIMIT {CROSS_REF_LIMIT}" in query


def test_category_query_filters_on_process_label() -> None:
    query = build_search_query(SearchContext.create("apoptosis", SearchMode.BY_CATEGORY))
    assert 'CONTAINS(LCASE(STR(?biological_processLabel)), LCASE("apoptosis"))' in query
    assert "wdt:P682 ?biological_process" in query
    assert f"LIMIT {CATEGORY_LIMIT}" in query


def test_default_query_binds_search_variables() -> None:
    for variable in ("?item", "?uniprotid", "?biological_process", "?biological_processLabel", "?itemLabel"):
        assert variable in DEFAULT_QUERY
    assert f"LIMIT {DEFAULT_LIMIT}" in DEFAULT_QUERY


def test_organ_queries_follow_part_of_chain() -> None:
    assert f"(wdt:P927*) {ANATOMY_BRAIN}" in BRAIN_QUERY
    assert f"(wdt:P927*) {ANATOMY_HEART}" in HEART_QUERY
    assert "?proteinLabel" in BRAIN_QUERY


def test_blank_term_is_rejected_before_building() -> None:
    with pytest.raises(InvalidSearchInput) as excinfo:
        SearchContext.create("   ", SearchMode.BY_ENTITY_NAME)
    assert str(excinfo.value) == "Please enter a protein name or ID!"


def test_unknown_mode_is_rejected() -> None:
    with pytest.raises(ValueError):
        SearchContext.create("insulin", "organism")
