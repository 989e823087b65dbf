#!/usr/bin/env python3
"""CLI utility to verify that the configured SPARQL endpoint is reachable."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from backend.app.config import ConfigError, load_config
from backend.app.utils.api_health import check_endpoint_health


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for the health check utility.

    Returns:
        argparse.Namespace: Parsed command line arguments.
    """
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "endpoint_url",
        nargs="?",
        default=None,
        help="SPARQL endpoint URL (default: endpoint.url from config.yaml)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=10.0,
        help="Request timeout in seconds (default: 10.0)",
    )
    return parser.parse_args()


def _resolve_endpoint(explicit: Optional[str]) -> tuple[str, str]:
    config = load_config()
    return explicit or config.endpoint.url, config.endpoint.user_agent


def main() -> int:
    """Entry point for the CLI health check utility.

    Returns:
        int: Exit status code where ``0`` indicates success.
    """
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    args = parse_args()

    try:
        endpoint_url, user_agent = _resolve_endpoint(args.endpoint_url)
    except ConfigError as exc:
        print("Unable to load configuration:", exc, file=sys.stderr)
        return 2

    result = check_endpoint_health(endpoint_url, timeout=args.timeout, user_agent=user_agent)

    if result.ok:
        print(
            "Endpoint health check succeeded",
            f"status={result.status_code}",
            f"latency_ms={result.latency_ms:.2f}" if result.latency_ms is not None else "latency_ms=unknown",
            f"payload={result.payload}",
        )
        return 0

    print("Endpoint health check failed:", result.detail, file=sys.stderr)
    if result.status_code is not None:
        print(f"Status code: {result.status_code}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
