"""Dependency graph utilities.

Provides topological ordering and tier layering for the release sequence.
Repositories must be released in dependency order so that when repository A
depends on repository B, B's release is published before A is built.
"""

from __future__ import annotations

from .registry import Registry


class CyclicDependency(RuntimeError):
    """Raised when the declared dependencies form a cycle."""


def topo_sort(registry: Registry) -> list[str]:
    """Topologically sort repositories by their declared dependencies.

    Uses Kahn's algorithm to produce an order where dependencies come
    before dependents. Ties keep registry declaration order, so output
    is deterministic.

    Returns:
        List of repository names, dependencies first.

    Raises:
        CyclicDependency: If a dependency cycle is detected.

    Example:
        If A depends on B, and B depends on C:
        topo_sort({A, B, C}) → [C, B, A]
    """
    names = registry.all_repositories()
    # Count incoming edges (dependencies) for each repository
    in_degree = {n: 0 for n in names}
    # Track reverse dependencies (who depends on each repository)
    reverse_deps: dict[str, list[str]] = {n: [] for n in names}

    for name in names:
        for dep in registry.dependencies_of(name):
            in_degree[name] += 1
            reverse_deps[dep].append(name)

    queue = [n for n in names if in_degree[n] == 0]
    order: list[str] = []

    while queue:
        node = queue.pop(0)
        order.append(node)
        for dependent in reverse_deps[node]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                queue.append(dependent)

    # If we didn't process every repository, there must be a cycle
    if len(order) != len(names):
        remaining = [n for n in names if n not in order]
        raise CyclicDependency(
            f"Dependency cycle detected involving: {', '.join(remaining)}"
        )

    return order


def derive_tiers(registry: Registry) -> list[list[str]]:
    """Partition repositories into release tiers.

    A repository with no dependencies is in tier 0; any other repository
    sits one tier above its highest dependency. Every dependency therefore
    lands in a strictly earlier tier than its consumers. Within a tier,
    repositories keep registry declaration order.

    Raises:
        CyclicDependency: If a dependency cycle is detected.

    Example:
        components → livetemplate, tinkerdown → components:
        [[livetemplate], [components], [tinkerdown]]
    """
    layer: dict[str, int] = {}
    for name in topo_sort(registry):
        deps = registry.dependencies_of(name)
        layer[name] = 1 + max(layer[d] for d in deps) if deps else 0

    depth = max(layer.values(), default=-1) + 1
    names = registry.all_repositories()
    return [[n for n in names if layer[n] == tier] for tier in range(depth)]
