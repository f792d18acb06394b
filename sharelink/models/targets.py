"""Consumer targets and reconciliation outcomes.

These are plain value objects. Targets are resolved once per run from
configuration; outcomes live only as long as the run's report.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class TargetKind(Enum):
    """How a consumer target is laid out on disk."""

    SIMPLE = "simple"  # The path itself becomes the link
    VERSIONED = "versioned"  # Every direct subdirectory becomes a link


class OutcomeKind(Enum):
    ALREADY_LINKED = "already_linked"
    CREATED = "created"
    BACKED_UP_AND_CREATED = "backed_up_and_created"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ConsumerTarget:
    """A path belonging to a consumer tool that should point at the shared directory."""

    label: str
    path: Path
    kind: TargetKind = TargetKind.SIMPLE
    install_hint: str = ""

    def child(self, path: Path) -> ConsumerTarget:
        """Return a simple target for one version directory of this family."""
        return ConsumerTarget(label=self.label, path=path, kind=TargetKind.SIMPLE)


@dataclass
class ReconciliationOutcome:
    """Result of reconciling a single path."""

    kind: OutcomeKind
    target: ConsumerTarget
    reason: str = ""
    backup: Path | None = None
    planned: bool = False  # Computed by a dry run; nothing was changed
    host_missing: bool = False  # The whole versioned family is absent

    @property
    def path(self) -> Path:
        return self.target.path

    @property
    def mutated(self) -> bool:
        return self.kind in (OutcomeKind.CREATED, OutcomeKind.BACKED_UP_AND_CREATED)

    def describe(self) -> str:
        """One human-readable status line, without markup."""
        where = f"{self.target.label}: {self.path}"
        if self.kind == OutcomeKind.ALREADY_LINKED:
            return f"{where} already linked"
        verb = "would be" if self.planned else ""
        if self.kind == OutcomeKind.CREATED:
            return f"{where} {verb or 'now'} linked"
        if self.kind == OutcomeKind.BACKED_UP_AND_CREATED:
            return f"{where} {verb or 'was'} backed up to {self.backup} and linked"
        return f"{where} skipped ({self.reason})"


@dataclass
class RunReport:
    """Every outcome produced by one reconciliation run."""

    shared_dir: Path
    outcomes: list[ReconciliationOutcome] = field(default_factory=list)
    dry_run: bool = False

    def add(self, outcome: ReconciliationOutcome) -> ReconciliationOutcome:
        self.outcomes.append(outcome)
        return outcome

    def count(self, kind: OutcomeKind) -> int:
        return sum(1 for o in self.outcomes if o.kind == kind)

    @property
    def mutated(self) -> bool:
        return any(o.mutated for o in self.outcomes)

    def summary(self) -> str:
        parts = [
            f"{self.count(OutcomeKind.ALREADY_LINKED)} already linked",
            f"{self.count(OutcomeKind.CREATED)} created",
            f"{self.count(OutcomeKind.BACKED_UP_AND_CREATED)} backed up",
            f"{self.count(OutcomeKind.SKIPPED)} skipped",
        ]
        prefix = "Would apply" if self.dry_run else "Done"
        return f"{prefix}: " + ", ".join(parts)
