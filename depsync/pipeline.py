"""Release pipeline: preflight → (release tier → sync deps → gate) per tier.

This module orchestrates a release of every managed repository:
1. Run pre-flight checks (checkouts present, clean, tests passing)
2. Show the release plan, tier by tier, and ask to proceed
3. Release each releasable repository of the current tier
4. Open dependency-update PRs so downstream repositories pick up the
   versions just published
5. Wait for a human to merge those PRs before building the next tier

Tiers are derived from the dependency graph, so a repository is always
released after everything it depends on. Dry-run mode runs every read-only
step and each repository's release script in its own ``--dry-run`` mode,
but creates no branches, commits, pushes, or pull requests.
"""

from __future__ import annotations

from datetime import date

import click

from .config import WorkspaceConfig
from .graph import derive_tiers
from .models import Resolved, ReleaseRun, SyncResult
from .oracle import VersionOracle, VersionSource
from .preflight import run_preflight
from .registry import Registry
from .shell import action, fatal, info, run, step, warn
from .sync import Confirm, sync_dependencies
from .versions import strip_v


def read_version_file(config: WorkspaceConfig, repo: str) -> str:
    """Contents of the repository's VERSION file, or "unknown"."""
    path = config.repo_path(repo) / "VERSION"
    if not path.is_file():
        return "unknown"
    return path.read_text().strip()


def show_release_plan(
    config: WorkspaceConfig, registry: Registry, tiers: list[list[str]]
) -> None:
    """Print the release order with each repository's current version."""
    step("Release plan")
    click.echo("The following repos will be released in order:")

    position = 1
    for index, tier in enumerate(tiers, start=1):
        click.echo(f"\n  Tier {index}")
        for repo in tier:
            if registry.get(repo).releasable:
                version = strip_v(read_version_file(config, repo))
                click.echo(f"  {position}. {repo:<15} v{version:<10} -> (new version)")
            else:
                click.echo(f"  {position}. {repo:<15} (dependency update only)")
            position += 1

    click.echo()
    click.echo("Between each tier, dependency update PRs will be created.")


def release_repo(config: WorkspaceConfig, repo: str, *, dry_run: bool) -> bool:
    """Run a repository's own release script.

    A repository without a release script is skipped with a warning. In
    dry-run mode the script is run with ``--dry-run`` and a failure is only
    a warning; otherwise a failure aborts the whole run.

    Returns:
        True if the script was run, False if it was missing.
    """
    repo_path = config.repo_path(repo)
    script = repo_path / config.release_script

    if not script.is_file():
        warn(f"{repo}: no {config.release_script} found, skipping")
        return False

    if dry_run:
        action(f"{repo}: Would run ./{config.release_script} --dry-run")
        result = run(str(script), "--dry-run", cwd=repo_path, check=False)
        if result.returncode != 0:
            warn(f"{repo}: release dry-run exited with code {result.returncode}")
        return True

    action(f"{repo}: Running release...")
    result = run(str(script), cwd=repo_path, check=False)
    if result.returncode != 0:
        fatal(f"{repo}: release failed (exit code {result.returncode})")
    return True


def wait_for_merge(gate: Confirm, *, dry_run: bool) -> bool:
    """Block until a human confirms the dependency PRs are merged.

    Returns:
        True to continue with the next tier, False to stop.
    """
    if dry_run:
        action("(dry-run: would wait for PR merge)")
        return True

    click.echo()
    click.secho(
        "Please review and merge the dependency update PRs before continuing.",
        fg="yellow",
    )
    return gate("PRs merged? Continue with the next tier?")


def print_summary(
    config: WorkspaceConfig, registry: Registry, oracle: VersionSource
) -> None:
    click.echo(f"\n{'=' * 40}")
    info("All releases complete!")
    click.echo("\nReleased repos:")
    for repo in registry.releasable():
        latest = oracle.latest_version(repo)
        version = latest.version if isinstance(latest, Resolved) else "(check GitHub)"
        click.echo(f"  - {config.org}/{repo}@{version}")
    click.echo("\nNext steps:")
    click.echo("  - Verify releases on GitHub")
    click.echo("  - Merge any remaining dependency update PRs")
    click.echo("  - Update documentation if needed")


def run_release(
    config: WorkspaceConfig,
    registry: Registry,
    *,
    dry_run: bool = False,
    confirm: Confirm,
    gate: Confirm | None = None,
    oracle: VersionSource | None = None,
    today: date | None = None,
) -> ReleaseRun:
    """Execute the full tiered release.

    Args:
        config: Workspace settings.
        registry: Managed repositories and their dependencies.
        dry_run: If True, run read-only steps only.
        confirm: Asked before starting and before opening dependency PRs.
        gate: Asked between tiers once PRs are open; defaults to ``confirm``.
        oracle: Version source; defaults to GitHub and go.mod lookups.
        today: Date used in dependency branch names.

    Raises:
        SystemExit: If pre-flight checks fail or a release script fails.
    """
    gate = gate or confirm
    oracle = oracle or VersionOracle(config)
    tiers = derive_tiers(registry)
    frozen_tiers = tuple(tuple(tier) for tier in tiers)

    preflight = run_preflight(config, registry.all_repositories())
    if not preflight.ok:
        fatal(
            "Pre-flight checks failed:\n"
            + "\n".join(f"  - {problem}" for problem in preflight.problems())
        )
    info("All pre-flight checks passed")

    show_release_plan(config, registry, tiers)

    if dry_run:
        click.echo()
        click.secho("(dry-run: no changes will be made)", fg="yellow")
    elif not confirm("Proceed with release?"):
        warn("Release cancelled")
        return ReleaseRun(
            dry_run=dry_run, tiers=frozen_tiers, preflight=preflight, stopped=True
        )

    label = " (DRY RUN)" if dry_run else ""
    released: list[str] = []
    syncs: list[SyncResult] = []

    for index, tier in enumerate(tiers, start=1):
        releasable = [repo for repo in tier if registry.get(repo).releasable]
        if releasable:
            step(f"Tier {index}: release {', '.join(releasable)}{label}")
            for repo in releasable:
                if release_repo(config, repo, dry_run=dry_run):
                    released.append(repo)

        step(f"Tier {index}: dependency updates{label}")
        syncs.append(
            sync_dependencies(
                config,
                registry,
                dry_run=dry_run,
                confirm=confirm,
                oracle=oracle,
                today=today,
            )
        )

        # Only wait if the next tier has something to build
        following = tiers[index] if index < len(tiers) else []
        if any(registry.get(repo).releasable for repo in following):
            if not wait_for_merge(gate, dry_run=dry_run):
                warn(f"Release stopped before tier {index + 1}")
                return ReleaseRun(
                    dry_run=dry_run,
                    tiers=frozen_tiers,
                    preflight=preflight,
                    released=tuple(released),
                    syncs=tuple(syncs),
                    stopped=True,
                )

    if dry_run:
        click.echo(f"\n{'=' * 40}")
        info("Dry run complete - no changes made")
    else:
        print_summary(config, registry, oracle)

    return ReleaseRun(
        dry_run=dry_run,
        tiers=frozen_tiers,
        preflight=preflight,
        released=tuple(released),
        syncs=tuple(syncs),
    )
