"""Version lookups.

Answers the two questions the planner asks about every dependency edge:
what is the dependency's latest published release, and what version does
the consumer currently pin? Lookups never raise. A failure becomes an
``Unreachable`` or ``NotConfigured`` value so one broken repository cannot
abort a scan of the others.
"""

from __future__ import annotations

from typing import Protocol

from .config import WorkspaceConfig
from .manifest import required_version
from .models import Lookup, NotConfigured, Resolved, Unreachable
from .shell import capture


class VersionSource(Protocol):
    def latest_version(self, repo: str) -> Lookup: ...

    def current_version(self, consumer: str, dependency: str) -> Lookup: ...


class VersionOracle:
    """Looks up versions through the GitHub CLI and local go.mod files."""

    def __init__(self, config: WorkspaceConfig) -> None:
        self.config = config

    def latest_version(self, repo: str) -> Lookup:
        """Latest release tag of ``repo`` on GitHub."""
        slug = f"{self.config.org}/{repo}"
        try:
            result = capture(
                "gh",
                "release",
                "list",
                "--repo",
                slug,
                "--limit",
                "1",
                "--json",
                "tagName",
                "-q",
                ".[0].tagName",
            )
        except OSError as exc:
            return Unreachable(reason=f"gh release list failed: {exc}")

        if result.returncode != 0:
            detail = result.stderr.strip() or f"exit code {result.returncode}"
            return Unreachable(reason=f"gh release list --repo {slug}: {detail}")

        tag = result.stdout.strip()
        if not tag:
            return NotConfigured(reason=f"no releases published for {slug}")
        return Resolved(version=tag)

    def current_version(self, consumer: str, dependency: str) -> Lookup:
        """Version of ``dependency`` pinned in ``consumer``'s go.mod."""
        repo_path = self.config.repo_path(consumer)
        if not repo_path.is_dir():
            return NotConfigured(reason=f"repo not found locally: {repo_path}")

        manifest = self.config.manifest_path(consumer)
        if not manifest.is_file():
            return NotConfigured(
                reason=f"{self.config.manifest} not found in {consumer}"
            )

        module = self.config.module_path(dependency)
        try:
            version = required_version(manifest, module)
        except (OSError, UnicodeDecodeError) as exc:
            return Unreachable(reason=f"cannot read {manifest}: {exc}")

        if version is None:
            return NotConfigured(reason=f"{consumer} does not require {module}")
        return Resolved(version=version)
