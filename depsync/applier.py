"""Apply planned dependency updates to a repository and open a pull request.

For one repository: branch off the up-to-date base branch, bump each
lagging dependency with ``go get``, reconcile with ``go mod tidy``, commit,
push, and open a pull request. Any failure between the first change to the
working copy and the pull request puts the copy back the way it was found
(prior branch checked out, temporary branch deleted) and reports a FAILED
result instead of raising, so the caller can move on to the next
repository. Once the pull request exists, the result reflects it even if
switching back to the prior branch fails.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from pathlib import Path

from .config import WorkspaceConfig
from .models import ApplyResult, ApplyStatus, UpdateEdge
from .shell import action, capture, info, warn


class StepFailed(Exception):
    """A git/go/gh step failed; the message is shown to the operator."""


def branch_name(config: WorkspaceConfig, today: date | None = None) -> str:
    """Dependency-update branch for today, e.g. "deps/update-2025-01-31"."""
    return f"{config.branch_prefix}-{(today or date.today()):%Y-%m-%d}"


def pr_title(config: WorkspaceConfig) -> str:
    return f"chore(deps): update {config.org} dependencies"


def update_lines(edges: Sequence[UpdateEdge]) -> list[str]:
    return [f"- **{e.dependency}**: `{e.current}` -> `{e.latest}`" for e in edges]


def _must(*args: str, cwd: Path) -> str:
    """Run a command, returning stdout or raising StepFailed on failure."""
    try:
        result = capture(*args, cwd=cwd)
    except OSError as exc:
        raise StepFailed(f"`{' '.join(args)}` could not run: {exc}") from exc
    if result.returncode != 0:
        detail = result.stderr.strip() or result.stdout.strip()
        raise StepFailed(f"`{' '.join(args)}` failed: {detail}")
    return result.stdout.strip()


def _base_branch(config: WorkspaceConfig, cwd: Path) -> str:
    """First configured base branch that exists locally."""
    for candidate in config.base_branches:
        ref = f"refs/heads/{candidate}"
        found = capture("git", "show-ref", "--verify", "--quiet", ref, cwd=cwd)
        if found.returncode == 0:
            return candidate
    raise StepFailed(
        f"none of the base branches exist: {', '.join(config.base_branches)}"
    )


def _restore(cwd: Path, prior: str, branch: str | None) -> None:
    """Discard changes, return to ``prior``, and delete ``branch`` if given."""
    capture("git", "reset", "--hard", "--quiet", cwd=cwd)
    if capture("git", "checkout", prior, cwd=cwd).returncode != 0:
        warn(f"Could not switch {cwd} back to {prior}; check it by hand")
        return
    if branch and branch != prior:
        capture("git", "branch", "-D", branch, cwd=cwd)


def apply_updates(
    config: WorkspaceConfig,
    repo: str,
    edges: Sequence[UpdateEdge],
    *,
    today: date | None = None,
) -> ApplyResult:
    """Bump ``repo``'s pins to the planned versions and open a pull request.

    Edges are applied in the order given. A dirty working copy is left
    alone (SKIPPED). When the bumps produce no net change after tidying,
    the temporary branch is removed (NO_CHANGES). A pull request that
    already exists for the branch is reported as EXISTING.

    Returns:
        ApplyResult describing what happened; never raises for tool failures.
    """
    path = config.repo_path(repo)
    branch = branch_name(config, today)
    action(f"Updating {repo}...")

    try:
        if _must("git", "status", "--porcelain", cwd=path):
            warn(f"{repo} has uncommitted changes, skipping")
            return ApplyResult(
                repo=repo, status=ApplyStatus.SKIPPED, reason="uncommitted changes"
            )
        prior = _must("git", "rev-parse", "--abbrev-ref", "HEAD", cwd=path)
        base = _base_branch(config, path)
    except StepFailed as exc:
        warn(f"{repo}: {exc}")
        return ApplyResult(repo=repo, status=ApplyStatus.FAILED, reason=str(exc))

    created: str | None = None
    try:
        if prior != base:
            _must("git", "checkout", base, cwd=path)
        _must("git", "fetch", "origin", cwd=path)
        _must("git", "pull", "--ff-only", cwd=path)

        if capture("git", "checkout", "-b", branch, cwd=path).returncode == 0:
            created = branch
        else:
            # Branch might already exist from an earlier run today
            _must("git", "checkout", branch, cwd=path)

        for edge in edges:
            module = config.module_path(edge.dependency)
            action(f"  Updating {edge.dependency}: {edge.current} -> {edge.latest}")
            _must("go", "get", f"{module}@{edge.latest}", cwd=path)

        action("  Running go mod tidy")
        _must("go", "mod", "tidy", cwd=path)

        if not _must("git", "status", "--porcelain", cwd=path):
            warn(f"{repo}: No changes after update (already up to date?)")
            _restore(path, prior, created)
            return ApplyResult(repo=repo, status=ApplyStatus.NO_CHANGES, branch=branch)

        staged = [config.manifest]
        if (path / config.lockfile).exists():
            staged.append(config.lockfile)
        _must("git", "add", *staged, cwd=path)

        title = pr_title(config)
        lines = update_lines(edges)
        commit_body = "\n".join(["## Dependency Updates", "", *lines])
        _must(
            "git",
            "commit",
            "-m",
            title,
            "-m",
            commit_body,
            "-m",
            "Generated by depsync sync",
            cwd=path,
        )
        _must("git", "push", "-u", "origin", branch, cwd=path)

        pr_body = "\n".join(
            [
                "## Dependency Updates",
                "",
                *lines,
                "",
                "---",
                "",
                "Generated by `depsync sync`",
            ]
        )
        pr = capture(
            "gh",
            "pr",
            "create",
            "--title",
            title,
            "--body",
            pr_body,
            "--head",
            branch,
            "--base",
            base,
            cwd=path,
        )
        if pr.returncode != 0 and "already exists" not in pr.stderr:
            raise StepFailed(f"gh pr create failed: {pr.stderr.strip()}")
    except StepFailed as exc:
        warn(f"{repo}: {exc}")
        _restore(path, prior, created)
        return ApplyResult(
            repo=repo, status=ApplyStatus.FAILED, branch=branch, reason=str(exc)
        )

    # Past this point the pull request exists; leaving the branch only warns
    if capture("git", "checkout", prior, cwd=path).returncode != 0:
        warn(f"Could not switch {path} back to {prior}; check it by hand")

    if pr.returncode != 0:
        warn(f"{repo}: a pull request for {branch} already exists")
        return ApplyResult(repo=repo, status=ApplyStatus.EXISTING, branch=branch)

    info(f"Created PR for {repo}")
    return ApplyResult(repo=repo, status=ApplyStatus.CREATED, branch=branch)
