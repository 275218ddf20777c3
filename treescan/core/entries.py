"""Filesystem helpers used by scan workers."""

from __future__ import annotations

import os
from typing import Iterator

from treescan.models import EntryKind, EntryRecord


def inspect_entry(path: str) -> EntryRecord:
    """Return the metadata of ``path`` without following symlinks.

    Raises ``OSError`` if the attributes cannot be read.
    """
    st = os.lstat(path)
    return EntryRecord(
        path=path,
        size=st.st_size,
        kind=EntryKind.from_mode(st.st_mode),
        permissions=st.st_mode & 0o777,
        mtime=st.st_mtime,
    )


def iter_children(directory: str) -> Iterator[str]:
    """Yield the paths of the direct children of ``directory``.

    ``.`` and ``..`` are never yielded. Raises ``OSError`` if the directory
    cannot be opened or read.
    """
    with os.scandir(directory) as it:
        for entry in it:
            yield entry.path
