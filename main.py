"""Entry point for running a directory walk via the CLI."""

from __future__ import annotations

import sys

from treescan.cli import main as cli_main

if __name__ == "__main__":
    sys.exit(cli_main())
