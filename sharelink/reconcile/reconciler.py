"""Link reconciler — point every consumer target at the shared directory.

For each path the reconciler classifies what is there and acts on it:

1. Nothing: create the symlink.
2. A symlink: leave it alone, whatever it points to.
3. A real directory: move it to ``<path>.backup``, then create the symlink.
4. Anything else: leave it alone and report it.

Real content is never deleted. Versioned families (one directory per
installed plugin version) are expanded into one simple target per version
directory, each reconciled independently.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator

from sharelink.errors import (
    BackupCollisionError,
    ConfigurationError,
    HostNotInstalled,
    UnexpectedPathType,
)
from sharelink.models.targets import (
    ConsumerTarget,
    OutcomeKind,
    ReconciliationOutcome,
    RunReport,
    TargetKind,
)
from sharelink.reconcile.filesystem import EntryKind, Filesystem, LocalFilesystem

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".backup"


def backup_path_for(path: Path) -> Path:
    return path.with_name(path.name + BACKUP_SUFFIX)


class LinkReconciler:
    """Reconciles consumer targets against one shared directory.

    With ``dry_run`` set, outcomes are computed exactly as in a real run but
    nothing is renamed, linked or created.
    """

    def __init__(
        self,
        shared_dir: str | Path,
        fs: Filesystem | None = None,
        dry_run: bool = False,
    ):
        # Symlinks store this text verbatim; a relative one would dangle
        self.shared_dir = Path(shared_dir).absolute()
        self.fs = fs or LocalFilesystem()
        self.dry_run = dry_run
        self._shared_checked = False

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def check_shared_dir(self) -> None:
        """Raise ``ConfigurationError`` unless the shared directory is usable."""
        if not self.fs.is_dir(self.shared_dir):
            raise ConfigurationError(
                f"Shared directory not found or not a directory: {self.shared_dir}"
            )
        self._shared_checked = True

    def run(self, targets: Iterable[ConsumerTarget]) -> RunReport:
        """Reconcile every target, simple targets first, and collect the outcomes.

        Raises:
            ConfigurationError: before any target is touched, if the shared
                directory is missing.
        """
        self.check_shared_dir()
        report = RunReport(shared_dir=self.shared_dir, dry_run=self.dry_run)

        ordered = sorted(targets, key=lambda t: t.kind != TargetKind.SIMPLE)
        for target in ordered:
            if target.kind == TargetKind.VERSIONED:
                for outcome in self.reconcile_family(target):
                    report.add(outcome)
            else:
                report.add(self.reconcile(target, create_parents=True))

        logger.debug("Run finished: %s", report.summary())
        return report

    def reconcile(
        self, target: ConsumerTarget, create_parents: bool = False
    ) -> ReconciliationOutcome:
        """Make ``target.path`` a symlink to the shared directory.

        Recoverable problems are reported as a ``SKIPPED`` outcome; only a
        missing shared directory raises.
        """
        if not self._shared_checked:
            self.check_shared_dir()

        try:
            return self._ensure_link(target, create_parents)
        except (BackupCollisionError, UnexpectedPathType) as e:
            logger.warning("Skipping %s: %s", target.path, e)
            return ReconciliationOutcome(OutcomeKind.SKIPPED, target, reason=str(e))
        except OSError as e:
            logger.error("Could not reconcile %s: %s", target.path, e)
            return ReconciliationOutcome(
                OutcomeKind.SKIPPED, target, reason=e.strerror or str(e)
            )

    def reconcile_family(self, target: ConsumerTarget) -> list[ReconciliationOutcome]:
        """Reconcile every version directory under a versioned target."""
        try:
            children = self.discover_versioned_children(target.path)
        except HostNotInstalled as e:
            logger.info("%s not installed: %s missing", target.label, target.path)
            return [
                ReconciliationOutcome(
                    OutcomeKind.SKIPPED, target, reason=str(e), host_missing=True
                )
            ]

        return [self.reconcile(target.child(child)) for child in children]

    def discover_versioned_children(self, parent: Path) -> Iterator[Path]:
        """Yield the version directories directly under ``parent``.

        Raises:
            HostNotInstalled: if ``parent`` does not exist. Raised eagerly,
                before iteration starts.
        """
        if not self.fs.is_dir(parent):
            raise HostNotInstalled(parent)
        return self._iter_version_dirs(parent)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _iter_version_dirs(self, parent: Path) -> Iterator[Path]:
        for child in self.fs.iter_dir(parent):
            name = child.name
            if name.startswith(".") or name.endswith(BACKUP_SUFFIX):
                continue
            # Follows symlinks: an already-linked version dir is still a version dir
            if self.fs.is_dir(child):
                yield child

    def _ensure_link(
        self, target: ConsumerTarget, create_parents: bool
    ) -> ReconciliationOutcome:
        path = target.path
        kind = self.fs.classify(path)
        logger.debug("%s is %s", path, kind.value)

        if kind == EntryKind.SYMLINK:
            self._warn_if_stale(path)
            return ReconciliationOutcome(OutcomeKind.ALREADY_LINKED, target)

        if kind == EntryKind.ABSENT:
            if create_parents and not self.dry_run:
                self.fs.make_parents(path)
            self._link(path)
            return ReconciliationOutcome(
                OutcomeKind.CREATED, target, planned=self.dry_run
            )

        if kind == EntryKind.DIRECTORY:
            backup = backup_path_for(path)
            if self.fs.classify(backup) != EntryKind.ABSENT:
                raise BackupCollisionError(path, backup)
            if not self.dry_run:
                logger.info("Backing up %s to %s", path, backup)
                self.fs.rename(path, backup)
            try:
                self._link(path)
            except OSError as e:
                # The backup already happened; say where the content went
                reason = f"backed up to {backup} but link failed: {e.strerror or e}"
                logger.error("%s: %s", path, reason)
                return ReconciliationOutcome(
                    OutcomeKind.SKIPPED, target, reason=reason, backup=backup
                )
            return ReconciliationOutcome(
                OutcomeKind.BACKED_UP_AND_CREATED, target, backup=backup,
                planned=self.dry_run,
            )

        raise UnexpectedPathType(path)

    def _link(self, path: Path) -> None:
        if self.dry_run:
            return
        logger.info("Linking %s -> %s", path, self.shared_dir)
        self.fs.symlink(path, self.shared_dir)

    def _warn_if_stale(self, path: Path) -> None:
        # Existing links are trusted; a different destination is only reported
        try:
            dest = self.fs.readlink(path)
        except OSError:
            return
        resolved = os.path.normpath(path.parent / dest)
        if resolved != os.path.normpath(self.shared_dir):
            logger.warning(
                "%s points to %s, not %s; leaving it untouched",
                path, dest, self.shared_dir,
            )
