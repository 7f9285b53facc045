"""Shared test fixtures."""

from __future__ import annotations

import subprocess
from collections.abc import Callable
from pathlib import Path

import pytest

from depsync.config import WorkspaceConfig
from depsync.models import Lookup, NotConfigured, Resolved
from depsync.registry import Registry

GO_MOD = """\
module github.com/livetemplate/{name}

go 1.22

require (
{requires})
"""


def write_checkout(
    root: Path, name: str, requires: dict[str, str] | None = None
) -> Path:
    """Create a fake checkout with a go.mod requiring the given modules."""
    repo = root / name
    repo.mkdir(parents=True, exist_ok=True)
    lines = "".join(
        f"\t{module} {version}\n" for module, version in (requires or {}).items()
    )
    (repo / "go.mod").write_text(GO_MOD.format(name=name, requires=lines))
    return repo


class FakeOracle:
    """Version source backed by plain dictionaries.

    Args:
        latest: Map of repository → latest release tag.
        current: Map of (consumer, dependency) → pinned version.
    """

    def __init__(
        self,
        latest: dict[str, str],
        current: dict[tuple[str, str], str],
    ) -> None:
        self.latest = latest
        self.current = current
        self.latest_calls: list[str] = []

    def latest_version(self, repo: str) -> Lookup:
        self.latest_calls.append(repo)
        if repo in self.latest:
            return Resolved(version=self.latest[repo])
        return NotConfigured(reason=f"no releases for {repo}")

    def current_version(self, consumer: str, dependency: str) -> Lookup:
        version = self.current.get((consumer, dependency))
        if version is None:
            return NotConfigured(reason=f"{consumer} does not pin {dependency}")
        return Resolved(version=version)


class FakeShell:
    """Stands in for shell.capture: records commands, answers from rules.

    Rules match on a command prefix; the most recently added matching rule
    wins. Unmatched commands succeed with empty output.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, ...]] = []
        self.cwds: list[Path | None] = []
        self._rules: list[tuple] = []

    def respond(
        self,
        *prefix: str,
        returncode: int = 0,
        stdout: str | Callable[[], str] = "",
        stderr: str = "",
        effect: Callable[[tuple[str, ...], Path | None], None] | None = None,
    ) -> None:
        self._rules.append((prefix, returncode, stdout, stderr, effect))

    def __call__(
        self, *args: str, cwd: Path | None = None
    ) -> subprocess.CompletedProcess[str]:
        self.calls.append(args)
        self.cwds.append(cwd)
        for prefix, returncode, stdout, stderr, effect in reversed(self._rules):
            if args[: len(prefix)] == prefix:
                if effect is not None:
                    effect(args, cwd)
                out = stdout() if callable(stdout) else stdout
                return subprocess.CompletedProcess(args, returncode, out, stderr)
        return subprocess.CompletedProcess(args, 0, "", "")

    def ran(self, *prefix: str) -> bool:
        return any(call[: len(prefix)] == prefix for call in self.calls)


MUTATING_COMMANDS = [
    ("git", "checkout"),
    ("git", "branch"),
    ("git", "add"),
    ("git", "commit"),
    ("git", "push"),
    ("git", "reset"),
    ("go", "get"),
    ("go", "mod"),
    ("gh", "pr"),
]


@pytest.fixture
def fake_shell() -> FakeShell:
    return FakeShell()


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceConfig:
    """A workspace with checkouts of the default livetemplate repositories."""
    config = WorkspaceConfig(root=tmp_path)
    for repo in config.repositories:
        write_checkout(
            tmp_path,
            repo.name,
            {config.module_path(dep): "v0.1.0" for dep in repo.deps},
        )
    return config


@pytest.fixture
def registry(workspace: WorkspaceConfig) -> Registry:
    return Registry.from_config(workspace)
