from __future__ import annotations

from .entries import inspect_entry, iter_children

__all__ = [
    "inspect_entry",
    "iter_children",
]
