"""Command-line entrypoint: ``python -m src [--stdio]``."""

import argparse
import asyncio

from src.main import build_registry, main as serve_http
from src.mcp.transport_stdio import serve_stdio
from src.utils.logging import get_logger, setup_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="python -m src",
        description="Run the MCP server over HTTP (default) or stdio.",
    )
    parser.add_argument(
        "--stdio",
        action="store_true",
        help="serve newline-delimited JSON-RPC on stdin/stdout instead of HTTP",
    )
    return parser.parse_args(argv)


def run(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    if not args.stdio:
        serve_http()
        return

    setup_logging()
    registry = build_registry()
    try:
        asyncio.run(serve_stdio(registry))
    except KeyboardInterrupt:
        get_logger("stdio").info("Interrupted")


if __name__ == "__main__":
    run()
