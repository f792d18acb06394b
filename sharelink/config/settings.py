"""Settings — where the shared directory lives and which consumers link to it.

Without a configuration file the built-in layout is used: ``~/.superpowers``
shared by Gemini (a single link) and the Claude Code plugin cache (one link
per installed plugin version).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from sharelink.errors import ConfigurationError
from sharelink.models.targets import ConsumerTarget, TargetKind

DEFAULT_CONFIG_PATH = Path(".config") / "sharelink" / "config.yaml"

DEFAULT_SHARED_DIR = "~/.superpowers"

DEFAULT_TARGETS = [
    {
        "label": "Gemini",
        "kind": "simple",
        "path": "~/.gemini/superpowers",
    },
    {
        "label": "Claude Code",
        "kind": "versioned",
        "path": "~/.claude/plugins/cache/superpowers-marketplace/superpowers",
        "install_hint": "Install the superpowers plugin first: /plugin superpowers",
    },
]


@dataclass
class UpstreamSettings:
    """Remotes named in the follow-up instructions. Never used to run git."""

    remote: str = "upstream"
    branch: str = "main"
    push_remote: str = "origin"

    def commands(self, shared_dir: Path, home: Path) -> list[str]:
        return [
            f"cd {display_path(shared_dir, home)}",
            f"git pull {self.remote} {self.branch}",
            f"git push {self.push_remote} {self.branch}",
        ]


@dataclass
class Settings:
    shared_dir: Path
    targets: list[ConsumerTarget] = field(default_factory=list)
    upstream: UpstreamSettings = field(default_factory=UpstreamSettings)
    home: Path = field(default_factory=Path.home)
    source: Path | None = None  # Config file the settings came from, if any


def expand(raw: str, home: Path) -> Path:
    """Expand a leading ``~`` against ``home`` rather than the process environment.

    Relative paths are taken relative to ``home`` too, so link destinations
    are always absolute.
    """
    if raw == "~":
        return home
    if raw.startswith("~/"):
        return home / raw[2:]
    path = Path(raw)
    if not path.is_absolute():
        return home / path
    return path


def display_path(path: Path, home: Path) -> str:
    """Render ``path`` with ``~`` in place of ``home`` where possible."""
    try:
        return "~/" + str(path.relative_to(home))
    except ValueError:
        return str(path)


def default_settings(home: Path | None = None) -> Settings:
    home = home or Path.home()
    return _build(
        {"shared_dir": DEFAULT_SHARED_DIR, "targets": DEFAULT_TARGETS}, home, None
    )


def load_settings(path: str | Path | None = None, home: Path | None = None) -> Settings:
    """Load settings from a YAML file, falling back to the built-in layout.

    When ``path`` is not given, ``~/.config/sharelink/config.yaml`` is read if
    it exists. An explicitly given path must exist.

    Raises:
        ConfigurationError: if the file is unreadable or malformed.
    """
    home = home or Path.home()

    if path is None:
        candidate = home / DEFAULT_CONFIG_PATH
        if not candidate.is_file():
            return default_settings(home)
        path = candidate

    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config {path} must be a mapping")

    return _build(data, home, path)


def _build(data: dict, home: Path, source: Path | None) -> Settings:
    shared_dir = expand(str(data.get("shared_dir", DEFAULT_SHARED_DIR)), home)

    raw_targets = data.get("targets", DEFAULT_TARGETS)
    if not isinstance(raw_targets, list):
        raise ConfigurationError("'targets' must be a list")

    targets = []
    for i, target_data in enumerate(raw_targets):
        if not isinstance(target_data, dict) or "path" not in target_data:
            raise ConfigurationError(f"Target #{i + 1} needs at least a 'path'")
        kind_value = target_data.get("kind", "simple")
        try:
            kind = TargetKind(kind_value)
        except ValueError:
            raise ConfigurationError(
                f"Target #{i + 1} has unknown kind {kind_value!r} "
                f"(expected 'simple' or 'versioned')"
            )
        path = expand(str(target_data["path"]), home)
        targets.append(
            ConsumerTarget(
                label=str(target_data.get("label", path.name)),
                path=path,
                kind=kind,
                install_hint=target_data.get("install_hint", ""),
            )
        )

    upstream_data = data.get("upstream") or {}
    if not isinstance(upstream_data, dict):
        raise ConfigurationError("'upstream' must be a mapping")
    upstream = UpstreamSettings(
        remote=upstream_data.get("remote", "upstream"),
        branch=upstream_data.get("branch", "main"),
        push_remote=upstream_data.get("push_remote", "origin"),
    )

    return Settings(
        shared_dir=shared_dir,
        targets=targets,
        upstream=upstream,
        home=home,
        source=source,
    )
