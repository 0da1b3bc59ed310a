"""
Command-line runner.

Usage:
    agentbroker --goal "Is VIRTUAL token safe?" --category "token safety" \\
        --max-price 0.05 --param symbol=VIRTUAL --param chain=base

Environment:
    LITE_AGENT_API_KEY  - marketplace API key (required)
    ACP_API_URL         - job API base URL (optional)
    SEARCH_URL          - search API base URL (optional)
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from agentbroker.exceptions import ConfigurationError
from agentbroker.logging import configure_logging
from agentbroker.orchestrator import Orchestrator


def parse_params(pairs: list[str]) -> dict[str, str]:
    """Turn ``key=value`` strings into a dict."""
    params: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"expected key=value, got {pair!r}")
        params[key] = value
    return params


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agentbroker",
        description="Broker one request across a crew of marketplace agents.",
    )
    parser.add_argument("--goal", required=True, help="free-text goal")
    parser.add_argument("--category", required=True, help="agent search category")
    parser.add_argument("--max-price", type=float, default=None, help="crew price ceiling")
    parser.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="extra buyer field passed to agents (repeatable)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log HTTP traffic")
    return parser


async def run(request: dict[str, Any]) -> dict[str, Any]:
    async with Orchestrator.from_env() as broker:
        response = await broker.execute(request)
    return response.to_dict()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        params = parse_params(args.param)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))

    configure_logging(
        level=logging.INFO,
        http_level=logging.DEBUG if args.verbose else logging.WARNING,
    )

    request: dict[str, Any] = {**params, "goal": args.goal, "category": args.category}
    if args.max_price is not None:
        request["max_price"] = args.max_price

    try:
        result = asyncio.run(run(request))
    except ConfigurationError as e:
        print(f"error: {e.message}", file=sys.stderr)
        return 2

    print(json.dumps(result, indent=2, default=str))
    return 1 if "error" in result else 0


if __name__ == "__main__":
    sys.exit(main())
