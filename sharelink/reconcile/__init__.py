"""Reconciliation — turn consumer paths into links to the shared directory.

This package provides:
- Filesystem classification (absent, symlink, directory, other)
- The link reconciler with its backup-on-conflict policy
- Versioned family expansion
"""

from sharelink.reconcile.filesystem import EntryKind, LocalFilesystem
from sharelink.reconcile.reconciler import LinkReconciler, backup_path_for

__all__ = ["EntryKind", "LinkReconciler", "LocalFilesystem", "backup_path_for"]
