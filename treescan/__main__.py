from __future__ import annotations

from treescan.cli import run

run()
