from __future__ import annotations

import importlib.util
from pathlib import Path
from typing import Any, Dict, List

import pytest

SCRIPT_PATH = Path(__file__).resolve().parents[2] / "scripts" / "explore.py"


def _load_module():
    module_spec = importlib.util.spec_from_file_location("explore_cli", SCRIPT_PATH)
    assert module_spec is not None and module_spec.loader is not None
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


class FakeTransport:
    instances: List["FakeTransport"] = []

    def __init__(self, config) -> None:
        self.closed = False
        self.queries: List[str] = []
        FakeTransport.instances.append(self)

    async def fetch_bindings(self, query: str) -> List[Dict[str, Any]]:
        self.queries.append(query)
        return [
            {
                "item": {"value": "E1"},
                "itemLabel": {"value": "ProtA"},
                "uniprotid": {"value": "P1"},
                "biological_process": {"value": "C1"},
                "biological_processLabel": {"value": "Metabolism"},
            }
        ]

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture()
def explore(monkeypatch):
    module = _load_module()
    FakeTransport.instances = []
    monkeypatch.setattr(module, "SparqlTransport", FakeTransport)
    return module


def test_table_output(explore, capsys) -> None:
    assert explore.main(["prot", "--mode", "name"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "Protein\tUniProt\tProcess URL\tProcess Name"
    assert out[1] == "ProtA\tP1\tC1\tMetabolism"
    assert FakeTransport.instances[0].closed is True


def test_bubble_output_without_term_runs_default_query(explore, capsys) -> None:
    assert explore.main(["--display", "bubble"]) == 0
    out = capsys.readouterr().out
    assert "categories=1" in out
    assert "Metabolism" in out
    assert "LIMIT 1000" in FakeTransport.instances[0].queries[0]


def test_blank_term_exits_with_usage_error(explore, capsys) -> None:
    assert explore.main(["   "]) == 2
    assert "Please enter a protein name or ID!" in capsys.readouterr().err
    assert FakeTransport.instances[0].queries == []
