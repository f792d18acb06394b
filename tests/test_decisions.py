"""Tests for each reconciliation branch against an in-memory filesystem."""

from pathlib import Path

from sharelink.models.targets import ConsumerTarget, OutcomeKind, TargetKind
from sharelink.reconcile.filesystem import EntryKind
from sharelink.reconcile.reconciler import LinkReconciler

SHARED = Path("/home/u/.superpowers")


class MemoryFilesystem:
    """Paths mapped to entry kinds, with every mutating call recorded."""

    def __init__(self, entries: dict[str, EntryKind], links: dict[str, str] | None = None):
        self.entries = {Path(p): k for p, k in entries.items()}
        self.links = {Path(p): Path(d) for p, d in (links or {}).items()}
        self.calls: list[tuple] = []
        self.fail_symlink: OSError | None = None

    def classify(self, path):
        return self.entries.get(path, EntryKind.ABSENT)

    def is_dir(self, path):
        kind = self.classify(path)
        if kind == EntryKind.SYMLINK:
            return self.classify(self.links[path]) == EntryKind.DIRECTORY
        return kind == EntryKind.DIRECTORY

    def iter_dir(self, path):
        for p in list(self.entries):
            if p.parent == path:
                yield p

    def readlink(self, path):
        return self.links[path]

    def rename(self, src, dst):
        self.calls.append(("rename", src, dst))
        self.entries[dst] = self.entries.pop(src)

    def symlink(self, link, target):
        self.calls.append(("symlink", link, target))
        if self.fail_symlink:
            raise self.fail_symlink
        self.entries[link] = EntryKind.SYMLINK
        self.links[link] = target

    def make_parents(self, path):
        self.calls.append(("mkdir", path.parent))


def _target(path: str) -> ConsumerTarget:
    return ConsumerTarget(label="T", path=Path(path), kind=TargetKind.SIMPLE)


def test_absent_branch():
    fs = MemoryFilesystem({str(SHARED): EntryKind.DIRECTORY})
    outcome = LinkReconciler(SHARED, fs=fs).reconcile(_target("/c/link"))

    assert outcome.kind == OutcomeKind.CREATED
    assert fs.calls == [("symlink", Path("/c/link"), SHARED)]


def test_symlink_branch_never_mutates():
    fs = MemoryFilesystem(
        {str(SHARED): EntryKind.DIRECTORY, "/c/link": EntryKind.SYMLINK},
        links={"/c/link": "/somewhere/else"},
    )
    outcome = LinkReconciler(SHARED, fs=fs).reconcile(_target("/c/link"))

    assert outcome.kind == OutcomeKind.ALREADY_LINKED
    assert fs.calls == []


def test_directory_branch_backs_up_before_linking():
    fs = MemoryFilesystem({str(SHARED): EntryKind.DIRECTORY, "/c/link": EntryKind.DIRECTORY})
    outcome = LinkReconciler(SHARED, fs=fs).reconcile(_target("/c/link"))

    assert outcome.kind == OutcomeKind.BACKED_UP_AND_CREATED
    assert fs.calls == [
        ("rename", Path("/c/link"), Path("/c/link.backup")),
        ("symlink", Path("/c/link"), SHARED),
    ]


def test_directory_branch_with_collision():
    fs = MemoryFilesystem({
        str(SHARED): EntryKind.DIRECTORY,
        "/c/link": EntryKind.DIRECTORY,
        "/c/link.backup": EntryKind.OTHER,
    })
    outcome = LinkReconciler(SHARED, fs=fs).reconcile(_target("/c/link"))

    assert outcome.kind == OutcomeKind.SKIPPED
    assert fs.calls == []


def test_other_branch():
    fs = MemoryFilesystem({str(SHARED): EntryKind.DIRECTORY, "/c/link": EntryKind.OTHER})
    outcome = LinkReconciler(SHARED, fs=fs).reconcile(_target("/c/link"))

    assert outcome.kind == OutcomeKind.SKIPPED
    assert outcome.reason == "unexpected file type"
    assert fs.calls == []


def test_permission_error_becomes_skip():
    fs = MemoryFilesystem({str(SHARED): EntryKind.DIRECTORY})
    fs.fail_symlink = PermissionError(13, "Permission denied")

    outcome = LinkReconciler(SHARED, fs=fs).reconcile(_target("/c/link"))

    assert outcome.kind == OutcomeKind.SKIPPED
    assert outcome.reason == "Permission denied"


def test_link_failure_after_backup_names_the_backup():
    fs = MemoryFilesystem({str(SHARED): EntryKind.DIRECTORY, "/c/link": EntryKind.DIRECTORY})
    fs.fail_symlink = PermissionError(13, "Permission denied")

    outcome = LinkReconciler(SHARED, fs=fs).reconcile(_target("/c/link"))

    assert outcome.kind == OutcomeKind.SKIPPED
    assert outcome.backup == Path("/c/link.backup")
    assert "backed up to /c/link.backup" in outcome.reason
    assert fs.classify(Path("/c/link.backup")) == EntryKind.DIRECTORY


def test_run_creates_parents_only_for_simple_targets():
    fs = MemoryFilesystem({
        str(SHARED): EntryKind.DIRECTORY,
        "/cache": EntryKind.DIRECTORY,
        "/cache/1.0": EntryKind.DIRECTORY,
    })
    targets = [
        ConsumerTarget(label="G", path=Path("/g/sp")),
        ConsumerTarget(label="C", path=Path("/cache"), kind=TargetKind.VERSIONED),
    ]

    LinkReconciler(SHARED, fs=fs).run(targets)

    assert fs.calls == [
        ("mkdir", Path("/g")),
        ("symlink", Path("/g/sp"), SHARED),
        ("rename", Path("/cache/1.0"), Path("/cache/1.0.backup")),
        ("symlink", Path("/cache/1.0"), SHARED),
    ]


def test_dry_run_issues_no_calls():
    fs = MemoryFilesystem({
        str(SHARED): EntryKind.DIRECTORY,
        "/c/dir": EntryKind.DIRECTORY,
    })
    targets = [_target("/c/dir"), _target("/c/new")]

    report = LinkReconciler(SHARED, fs=fs, dry_run=True).run(targets)

    assert [o.kind for o in report.outcomes] == [
        OutcomeKind.BACKED_UP_AND_CREATED,
        OutcomeKind.CREATED,
    ]
    assert fs.calls == []
