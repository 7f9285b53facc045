"""Local development workspace.

Writes a go.work file at the workspace root that points the Go toolchain
at every local checkout, so changes in one repository are picked up by its
consumers without touching any go.mod. ``--clean`` removes it again.
"""

from __future__ import annotations

import re

import click

from .config import WorkspaceConfig
from .registry import Registry
from .shell import action, capture, fatal, info, run, step, warn

WORKSPACE_FILE = "go.work"
MIN_GO_VERSION = (1, 18)

_GO_VERSION = re.compile(r"\bgo(\d+)\.(\d+)")
_SKIPPED_DIRS = {"vendor", "testdata", "node_modules"}


def go_version() -> tuple[int, int] | None:
    """(major, minor) of the installed Go toolchain, or None if unknown."""
    try:
        result = capture("go", "version")
    except OSError:
        return None
    if result.returncode != 0:
        return None
    match = _GO_VERSION.search(result.stdout)
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def find_modules(
    config: WorkspaceConfig, registry: Registry
) -> tuple[list[str], list[str]]:
    """Locate the Go modules inside each registered checkout.

    A checkout contributes its own module and any nested modules, such as
    one per example. Vendored, test-data and hidden directories are skipped.

    Returns:
        (module directories relative to the root, repositories with none)
    """
    found: list[str] = []
    missing: list[str] = []

    for repo in registry.all_repositories():
        repo_path = config.repo_path(repo)
        if not repo_path.is_dir():
            missing.append(repo)
            continue

        modules = []
        for manifest in sorted(repo_path.rglob(config.manifest)):
            parts = manifest.relative_to(repo_path).parts[:-1]
            if any(p.startswith(".") or p in _SKIPPED_DIRS for p in parts):
                continue
            modules.append(manifest.parent.relative_to(config.root).as_posix())

        if modules:
            found.extend(modules)
        else:
            missing.append(repo)

    return found, missing


def remove_workspace(config: WorkspaceConfig) -> bool:
    """Delete go.work. Returns False if there was none."""
    path = config.root / WORKSPACE_FILE
    if not path.is_file():
        return False
    path.unlink()
    return True


def _go_work(config: WorkspaceConfig, *args: str) -> None:
    result = run("go", "work", *args, cwd=config.root, check=False)
    if result.returncode != 0:
        fatal(f"go work {' '.join(args)} failed (exit code {result.returncode})")


def setup_workspace(
    config: WorkspaceConfig, registry: Registry, *, clean: bool = False
) -> list[str]:
    """Create (or with ``clean``, remove) the go.work file.

    An existing go.work is replaced. Repositories without a checkout are
    reported and left out.

    Returns:
        Module directories added to the workspace; empty when cleaning.

    Raises:
        SystemExit: If Go is older than 1.18, no checkout holds a module,
                    or a ``go work`` command fails.
    """
    step("Go workspace")

    version = go_version()
    if version is None:
        fatal("Could not determine the Go version (is go installed?)")
    if version < MIN_GO_VERSION:
        fatal(
            "Go 1.18+ required for workspace support"
            f" (found {version[0]}.{version[1]})"
        )

    if clean:
        if remove_workspace(config):
            info("Workspace removed")
            click.echo("All repositories now use published versions.")
        else:
            click.echo("No workspace file found.")
        return []

    found, missing = find_modules(config, registry)
    if not found:
        clones = "\n".join(
            f"  git clone git@github.com:{config.org}/{repo}.git"
            for repo in registry.all_repositories()
        )
        fatal(f"No repositories found under {config.root}. Clone them:\n{clones}")

    for module in found:
        info(module)
    for repo in missing:
        warn(f"{repo}: not found (skipped)")

    if remove_workspace(config):
        warn(f"Replacing existing {WORKSPACE_FILE}")

    action(f"Creating {WORKSPACE_FILE}...")
    _go_work(config, "init")
    for module in found:
        _go_work(config, "use", f"./{module}")

    info("Go workspace created")
    click.echo("To go back to published versions: depsync workspace --clean")
    return found
