"""Dependency sync: plan the updates, confirm, and open one PR per repository."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date

import click

from .applier import apply_updates
from .config import WorkspaceConfig
from .models import ApplyStatus, SyncResult
from .oracle import VersionOracle, VersionSource
from .plan import build_plan, show_plan
from .registry import Registry
from .shell import action, error, info, warn

# Asked before anything is mutated; returns True to proceed.
Confirm = Callable[[str], bool]


def sync_dependencies(
    config: WorkspaceConfig,
    registry: Registry,
    *,
    dry_run: bool,
    confirm: Confirm,
    oracle: VersionSource | None = None,
    today: date | None = None,
) -> SyncResult:
    """Bring every consumer's pins up to its dependencies' latest releases.

    Builds and prints the update plan. In dry-run mode, or when nothing is
    pending, stops there. Otherwise asks ``confirm`` once and applies each
    repository's updates in plan order. A repository whose update fails is
    reported and skipped; the remaining repositories are still processed.

    Args:
        config: Workspace settings.
        registry: Managed repositories and their dependencies.
        dry_run: If True, make no changes at all.
        confirm: Confirmation capability (e.g. a terminal prompt).
        oracle: Version source; defaults to querying GitHub and go.mod files.
        today: Date used in branch names; defaults to today.
    """
    action("Analyzing dependencies...")
    plan = build_plan(registry, oracle or VersionOracle(config))
    show_plan(plan, dry_run=dry_run)

    if plan.is_empty:
        return SyncResult(plan=plan)

    if dry_run:
        click.echo()
        click.secho("(dry-run: no changes made)", fg="yellow")
        return SyncResult(plan=plan)

    click.echo()
    if not confirm("Create PRs for updates?"):
        warn("Cancelled")
        return SyncResult(plan=plan, cancelled=True)

    results = []
    for repo, edges in plan.updates.items():
        result = apply_updates(config, repo, edges, today=today)
        if result.status is ApplyStatus.FAILED:
            error(f"Failed to create PR for {repo}")
        results.append(result)

    click.echo()
    info("Sync complete!")
    return SyncResult(plan=plan, results=tuple(results))
