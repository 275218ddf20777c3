"""Command line interface for walking a directory tree."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from treescan.cancellation import CancellationToken
from treescan.config import OUTPUT_FORMATS, initialize_environment
from treescan.constants import (
    EXIT_INTERRUPTED,
    EXIT_IO_ERROR,
    EXIT_OK,
    EXIT_SIGNAL_BASE,
    REASON_QUIESCENCE,
)
from treescan.errors import WalkError
from treescan.logging_setup import configure_logging
from treescan.pipeline import run_walk
from treescan.signals import handle_signals

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the command line interface."""
    p = argparse.ArgumentParser(
        prog="treescan",
        description="Walk a directory tree with a pool of threads and record "
                    "the metadata of every entry.",
    )
    p.add_argument("root", type=Path, help="Directory to walk")
    p.add_argument("output", type=Path, help="File the records are written to")
    p.add_argument(
        "--workers", type=int, default=None,
        help="Worker threads (default: $TREESCAN_WORKERS or 8)",
    )
    p.add_argument(
        "--queue-size", type=int, default=None,
        help="Capacity of the shared work queue (default: $TREESCAN_QUEUE_SIZE or 1000)",
    )
    p.add_argument(
        "--format", dest="output_format", choices=OUTPUT_FORMATS, default=None,
        help="Output format (default: $TREESCAN_FORMAT or text)",
    )
    p.add_argument(
        "--max-path-length", type=int, default=None,
        help="Skip entries whose path is longer than this (default: 4096)",
    )
    p.add_argument(
        "--status-interval", type=float, default=None,
        help="Seconds between progress logs; 0 disables (default: 0)",
    )
    p.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ERROR). Defaults to $LOG_LEVEL or INFO.",
    )
    return p


def main(argv: Sequence[str] | None = None) -> int:
    """Run a walk from command line arguments and return the exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if not args.root.is_dir():
        parser.error(f"not a directory: {args.root}")

    try:
        config = initialize_environment(
            args.root,
            args.output,
            workers=args.workers,
            queue_size=args.queue_size,
            output_format=args.output_format,
            max_path_length=args.max_path_length,
            status_interval=args.status_interval,
        )
    except ValueError as exc:
        parser.error(str(exc))

    token = CancellationToken()
    try:
        with handle_signals(token) as received:
            run_walk(config, token=token)
    except OSError as exc:
        logger.error("Cannot write %s: %s", config.output, exc)
        return EXIT_IO_ERROR
    except WalkError as exc:
        logger.error("%s: %s", exc, exc.__cause__)
        return EXIT_IO_ERROR

    if token.reason != REASON_QUIESCENCE:
        logger.warning("Interrupted (%s); output is incomplete", token.reason)
        if received:
            return EXIT_SIGNAL_BASE + received[0]
        return EXIT_INTERRUPTED
    return EXIT_OK


def run() -> None:
    """Console-script entry point."""
    sys.exit(main())
