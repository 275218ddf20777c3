from __future__ import annotations

import stat
from dataclasses import dataclass
from enum import Enum


class EntryKind(str, Enum):
    DIRECTORY = "Directory"
    REGULAR_FILE = "Regular File"
    SYMBOLIC_LINK = "Symbolic Link"
    OTHER = "Other"

    @classmethod
    def from_mode(cls, mode: int) -> "EntryKind":
        if stat.S_ISDIR(mode):
            return cls.DIRECTORY
        if stat.S_ISREG(mode):
            return cls.REGULAR_FILE
        if stat.S_ISLNK(mode):
            return cls.SYMBOLIC_LINK
        return cls.OTHER


class EnqueueResult(Enum):
    """Outcome of :meth:`BoundedWorkQueue.enqueue`."""

    QUEUED = "queued"
    CANCELLED = "cancelled"
    # every worker is blocked producing; the caller keeps the item
    OVERFLOW = "overflow"


@dataclass(frozen=True)
class EntryRecord:
    path: str
    size: int
    kind: EntryKind
    permissions: int
    mtime: float

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "size": self.size,
            "type": self.kind.value,
            "permissions": format(self.permissions, "o"),
            "mtime": self.mtime,
        }
