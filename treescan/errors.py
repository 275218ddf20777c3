from __future__ import annotations


class WalkError(RuntimeError):
    """A run was aborted by a fatal failure (sink write, thread start)."""
