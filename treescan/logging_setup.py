from __future__ import annotations

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(threadName)s %(name)s:%(lineno)d | %(message)s"


def configure_logging(level: str | None = None) -> None:
    """
    Configure root logging once, on stderr so it never mixes with a report
    written to stdout. Level can be given explicitly or taken from the
    LOG_LEVEL env var (default INFO).
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    resolved = getattr(logging, level.upper(), None)
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logging.basicConfig(
        level=resolved,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )
    logging.getLogger().setLevel(resolved)
