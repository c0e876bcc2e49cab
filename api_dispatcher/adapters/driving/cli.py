"""Command-line interface."""

import argparse
from collections.abc import Sequence
from typing import Any

from api_dispatcher.adapters.driven.config.settings import parse_addr

__all__ = ["build_parser", "parse_args", "settings_overrides", "USAGE"]

USAGE = "Usage: api-dispatcher --config=<batch-file> or api-dispatcher --serve"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="api-dispatcher",
        description="Dispatch a batch of HTTP requests concurrently and report every outcome.",
    )
    parser.add_argument(
        "--config",
        dest="batch_file",
        default=None,
        help="Path of the JSON batch file to dispatch once (env: DISPATCHER_BATCH_FILE).",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Run as a server accepting batches as POST bodies.",
    )
    parser.add_argument(
        "--addr",
        default=None,
        help="Server listen address HOST:PORT, e.g. ':8080' (env: DISPATCHER_HOST/PORT).",
    )
    parser.add_argument(
        "--max-concurrency",
        type=int,
        default=None,
        help="Maximum requests in flight at once (default: unbounded).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-request timeout in seconds (default: 30).",
    )
    parser.add_argument("--log-level", default=None, help="Application log level.")
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def settings_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Map parsed flags onto Settings field names.

    Raises:
        ValueError: If --addr is malformed.
    """
    overrides: dict[str, Any] = {
        "batch_file_path": args.batch_file,
        "max_concurrency": args.max_concurrency,
        "request_timeout_sec": args.timeout,
        "log_level": args.log_level,
    }
    if args.addr:
        overrides["host"], overrides["port"] = parse_addr(args.addr)
    return overrides
