"""Update planning: find every pinned dependency that lags its latest release."""

from __future__ import annotations

import click

from .models import Lookup, Resolved, UpdateEdge, UpdatePlan
from .oracle import VersionSource
from .registry import Registry
from .shell import info
from .versions import describe_version, needs_update


def build_plan(registry: Registry, oracle: VersionSource) -> UpdatePlan:
    """Check every (consumer, direct dependency) edge in the registry.

    An edge is skipped when either its current pin or the dependency's
    latest release cannot be resolved. Otherwise it is planned when
    needs_update() says the pin lags. Each dependency's latest release is
    looked up once per call.

    Returns:
        UpdatePlan with edges grouped by consumer, in registry order.
    """
    updates: dict[str, list[UpdateEdge]] = {}
    latest_cache: dict[str, Lookup] = {}
    checked = 0
    skipped = 0

    for consumer in registry.all_repositories():
        for dep in registry.dependencies_of(consumer):
            checked += 1
            if dep not in latest_cache:
                latest_cache[dep] = oracle.latest_version(dep)
            latest = latest_cache[dep]
            current = oracle.current_version(consumer, dep)

            if not isinstance(current, Resolved) or not isinstance(latest, Resolved):
                skipped += 1
                continue

            if needs_update(current.version, latest.version):
                updates.setdefault(consumer, []).append(
                    UpdateEdge(
                        consumer=consumer,
                        dependency=dep,
                        current=current.version,
                        latest=latest.version,
                    )
                )

    return UpdatePlan(
        updates={repo: tuple(edges) for repo, edges in updates.items()},
        edges_checked=checked,
        edges_skipped=skipped,
    )


def show_plan(plan: UpdatePlan, *, dry_run: bool = False) -> None:
    """Print the plan as a table of pending updates."""
    label = " (DRY RUN)" if dry_run else ""
    click.echo()
    click.secho(f"Dependency Update Plan{label}:", fg="cyan")
    click.echo()

    if plan.edges_skipped:
        click.echo(
            f"  ({plan.edges_skipped} of {plan.edges_checked} dependencies skipped:"
            " version could not be resolved)"
        )

    if plan.is_empty:
        info("All dependencies are up to date!")
        return

    row = "{:<12} {:<14} {:<34} {:<12}"
    click.echo(row.format("Repo", "Dependency", "Current", "Latest"))
    click.echo(row.format("----", "----------", "-------", "------"))
    for edge in plan.edges():
        click.echo(
            row.format(
                edge.consumer,
                edge.dependency,
                describe_version(edge.current),
                describe_version(edge.latest),
            )
        )

    click.echo()
    repos = click.style(" ".join(plan.repositories), fg="green")
    click.echo(f"Repos needing PRs: {repos}")
