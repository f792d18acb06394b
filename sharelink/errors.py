"""Errors raised while reconciling consumer links.

Only ``ConfigurationError`` is fatal. Everything else is caught per target
by the reconciler and turned into a ``Skipped`` outcome.
"""

from __future__ import annotations

from pathlib import Path


class SharelinkError(Exception):
    """Base class for all sharelink errors."""


class ConfigurationError(SharelinkError):
    """The shared directory is unusable or the configuration is malformed."""


class BackupCollisionError(SharelinkError):
    """A ``.backup`` path already occupies the spot a backup needs."""

    def __init__(self, path: Path, backup: Path):
        self.path = path
        self.backup = backup
        super().__init__(f"backup path already exists: {backup}")


class UnexpectedPathType(SharelinkError):
    """The target path is occupied by something that is neither a directory nor a symlink."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__("unexpected file type")


class HostNotInstalled(SharelinkError):
    """The parent of a versioned family is missing; the consumer tool is not installed."""

    def __init__(self, parent: Path):
        self.parent = parent
        super().__init__("host directory not present")
