#!/usr/bin/env python3
"""Run a protein search against the configured endpoint and print a summary."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from backend.app.config import ConfigError, load_config
from backend.app.contracts import DisplayMode, InvalidSearchInput, SearchMode
from backend.app.orchestration import ExplorerController, ExplorerState
from backend.app.query import SparqlTransport, TransportError
from backend.app.ui.views import BubbleViewPayload, GraphViewPayload, TableViewPayload, build_view

LOGGER = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments for the explorer CLI.

    Returns:
        argparse.Namespace: Parsed command line arguments.
    """
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "term",
        nargs="?",
        default=None,
        help="Search term; omit to run the unfiltered default query",
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in SearchMode],
        default=SearchMode.BY_ENTITY_NAME.value,
        help="Search mode (default: name)",
    )
    parser.add_argument(
        "--display",
        choices=[DisplayMode.TABLE.value, DisplayMode.GRAPH.value, DisplayMode.BUBBLE.value],
        default=DisplayMode.TABLE.value,
        help="Summary to print (default: table)",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Maximum number of lines to print (default: 20)",
    )
    return parser.parse_args(argv)


async def _run(term: Optional[str], mode: str) -> ExplorerState:
    config = load_config()
    transport = SparqlTransport(config.endpoint)
    try:
        controller = ExplorerController(transport)
        if term is None:
            return await controller.run_default()
        return await controller.search(term, mode)
    finally:
        await transport.aclose()


def _print_table(view: TableViewPayload, limit: int) -> None:
    print("\t".join(view.columns))
    for row in view.rows[:limit]:
        print("\t".join([row.protein, row.uniprot, row.process_url, row.process_name]))


def _print_graph(view: GraphViewPayload, limit: int) -> None:
    print(f"nodes={view.node_count} edges={view.edge_count}")
    emphasized = [node for node in view.nodes if node.emphasized]
    for node in (emphasized or view.nodes)[:limit]:
        marker = "*" if node.emphasized else " "
        print(f"{marker} [{node.kind.value}] {node.label}")


def _print_bubbles(view: BubbleViewPayload, limit: int) -> None:
    print(f"categories={len(view.entries)} domain={list(view.domain)}")
    for entry in sorted(view.entries, key=lambda item: item.count, reverse=True)[:limit]:
        print(f"{entry.count:>5}  {entry.label}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the explorer CLI.

    Returns:
        int: Exit status code where ``0`` indicates success.
    """
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    args = parse_args(argv)

    try:
        state = asyncio.run(_run(args.term, args.mode))
    except ConfigError as exc:
        print("Unable to load configuration:", exc, file=sys.stderr)
        return 2
    except InvalidSearchInput as exc:
        print(str(exc), file=sys.stderr)
        return 2
    except TransportError as exc:
        print("Query failed:", exc, file=sys.stderr)
        return 1

    view = build_view(args.display, state, load_config().ui)
    if view.message:
        print(view.message)
        return 0
    if isinstance(view, TableViewPayload):
        _print_table(view, args.limit)
    elif isinstance(view, GraphViewPayload):
        _print_graph(view, args.limit)
    elif isinstance(view, BubbleViewPayload):
        _print_bubbles(view, args.limit)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
