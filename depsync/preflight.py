"""Pre-flight checks run before any release.

Each check runs across every repository before the results are judged, so
a single run surfaces every missing checkout, dirty working copy, and
failing test suite at once.
"""

from __future__ import annotations

from collections.abc import Sequence

from .config import WorkspaceConfig
from .models import PreflightReport
from .shell import action, capture, error, info, run, step


def check_repo_exists(config: WorkspaceConfig, repo: str) -> bool:
    """A checkout exists and contains a module manifest."""
    return config.repo_path(repo).is_dir() and config.manifest_path(repo).is_file()


def check_repo_clean(config: WorkspaceConfig, repo: str) -> bool:
    """The working copy has no uncommitted changes.

    A working copy whose status cannot be read counts as dirty.
    """
    result = capture("git", "status", "--porcelain", cwd=config.repo_path(repo))
    return result.returncode == 0 and not result.stdout.strip()


def run_tests(config: WorkspaceConfig, repo: str) -> bool:
    """Run the repository's Go test suite, streaming its output."""
    action(f"Testing {repo}...")
    result = run(
        "go",
        "test",
        "./...",
        f"-timeout={config.test_timeout}",
        cwd=config.repo_path(repo),
        check=False,
    )
    return result.returncode == 0


def run_preflight(
    config: WorkspaceConfig, repositories: Sequence[str]
) -> PreflightReport:
    """Check that every repository exists, is clean, and passes its tests.

    Cleanliness and tests are only checked for repositories that exist.

    Returns:
        PreflightReport listing every violation found.
    """
    step("Pre-flight checks")

    action("Checking repos exist...")
    missing: list[str] = []
    for repo in repositories:
        if check_repo_exists(config, repo):
            info(f"{repo}: found")
        else:
            error(f"{repo}: not found at {config.repo_path(repo)}")
            missing.append(repo)

    present = [repo for repo in repositories if repo not in missing]

    action("Checking repos are clean...")
    dirty: list[str] = []
    for repo in present:
        if check_repo_clean(config, repo):
            info(f"{repo}: clean")
        else:
            error(f"{repo}: has uncommitted changes")
            dirty.append(repo)

    action("Running tests across all repos...")
    failing: list[str] = []
    for repo in present:
        if run_tests(config, repo):
            info(f"{repo}: tests passed")
        else:
            error(f"{repo}: tests failed")
            failing.append(repo)

    return PreflightReport(
        missing=tuple(missing), dirty=tuple(dirty), failing=tuple(failing)
    )
