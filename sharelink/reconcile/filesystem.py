"""Filesystem access for the reconciler.

The reconciler never touches ``os``/``pathlib`` directly; it goes through a
``Filesystem`` so each decision branch can be exercised against an in-memory
tree.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Iterator, Protocol


class EntryKind(Enum):
    """What currently occupies a path. Symlinks are never followed."""

    ABSENT = "absent"
    SYMLINK = "symlink"
    DIRECTORY = "directory"
    OTHER = "other"


class Filesystem(Protocol):
    def classify(self, path: Path) -> EntryKind: ...

    def is_dir(self, path: Path) -> bool: ...

    def iter_dir(self, path: Path) -> Iterator[Path]: ...

    def readlink(self, path: Path) -> Path: ...

    def rename(self, src: Path, dst: Path) -> None: ...

    def symlink(self, link: Path, target: Path) -> None: ...

    def make_parents(self, path: Path) -> None: ...


class LocalFilesystem:
    """The real filesystem."""

    def classify(self, path: Path) -> EntryKind:
        # is_symlink() uses lstat, so dangling links still count as links
        if path.is_symlink():
            return EntryKind.SYMLINK
        if not path.exists():
            return EntryKind.ABSENT
        if path.is_dir():
            return EntryKind.DIRECTORY
        return EntryKind.OTHER

    def is_dir(self, path: Path) -> bool:
        return path.is_dir()

    def iter_dir(self, path: Path) -> Iterator[Path]:
        with os.scandir(path) as entries:
            for entry in entries:
                yield Path(entry.path)

    def readlink(self, path: Path) -> Path:
        return Path(os.readlink(path))

    def rename(self, src: Path, dst: Path) -> None:
        src.rename(dst)

    def symlink(self, link: Path, target: Path) -> None:
        link.symlink_to(target, target_is_directory=True)

    def make_parents(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
