"""Data models for depsync.

These Pydantic models are the values threaded through a run: the repository
declarations, the outcome of each version lookup, the update plan, and the
results of preflight checks and applied updates. All of them are frozen;
a run builds new values instead of mutating shared state.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Repository(BaseModel):
    """A managed repository and its direct upstream dependencies.

    Attributes:
        name: Repository name, also the checkout directory and module suffix.
        deps: Names of managed repositories this one depends on directly.
        releasable: Whether the repository publishes releases of its own.
                    Non-releasable repositories only receive dependency bumps.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    deps: tuple[str, ...] = ()
    releasable: bool = True


class Resolved(BaseModel):
    """A version lookup that produced a version string."""

    model_config = ConfigDict(frozen=True)

    version: str


class Unreachable(BaseModel):
    """A version lookup whose source could not be queried (network, auth, I/O)."""

    model_config = ConfigDict(frozen=True)

    reason: str


class NotConfigured(BaseModel):
    """A version lookup with nothing to find (no release, no checkout, no pin)."""

    model_config = ConfigDict(frozen=True)

    reason: str


Lookup = Resolved | Unreachable | NotConfigured


class UpdateEdge(BaseModel):
    """A consumer's pin on a dependency that lags the dependency's latest release."""

    model_config = ConfigDict(frozen=True)

    consumer: str
    dependency: str
    current: str
    latest: str


class UpdatePlan(BaseModel):
    """Pending dependency updates grouped by consuming repository.

    Attributes:
        updates: Map of consumer name → its updates, in the order they
                 were planned (and will be applied).
        edges_checked: Number of dependency edges examined.
        edges_skipped: Edges skipped because a version could not be resolved.
    """

    model_config = ConfigDict(frozen=True)

    updates: dict[str, tuple[UpdateEdge, ...]] = Field(default_factory=dict)
    edges_checked: int = 0
    edges_skipped: int = 0

    @property
    def repositories(self) -> list[str]:
        return list(self.updates)

    @property
    def update_count(self) -> int:
        return sum(len(edges) for edges in self.updates.values())

    @property
    def is_empty(self) -> bool:
        return not self.updates

    def edges(self) -> list[UpdateEdge]:
        return [edge for edges in self.updates.values() for edge in edges]


class PreflightReport(BaseModel):
    """Every precondition violation found across the checked repositories."""

    model_config = ConfigDict(frozen=True)

    missing: tuple[str, ...] = ()
    dirty: tuple[str, ...] = ()
    failing: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not (self.missing or self.dirty or self.failing)

    def problems(self) -> list[str]:
        """Human-readable lines, one per violation."""
        lines = [f"{repo}: not found (clone it first)" for repo in self.missing]
        lines += [f"{repo}: has uncommitted changes" for repo in self.dirty]
        lines += [f"{repo}: tests failed" for repo in self.failing]
        return lines


class ApplyStatus(str, Enum):
    CREATED = "created"
    EXISTING = "existing"
    NO_CHANGES = "no-changes"
    SKIPPED = "skipped"
    FAILED = "failed"


class ApplyResult(BaseModel):
    """Outcome of applying one repository's planned updates."""

    model_config = ConfigDict(frozen=True)

    repo: str
    status: ApplyStatus
    branch: str | None = None
    reason: str = ""


class SyncResult(BaseModel):
    """Outcome of one dependency sync pass.

    Attributes:
        plan: The plan computed for this pass.
        results: One entry per repository the applier was run for. Empty in
                 dry-run mode, when nothing was pending, or when cancelled.
        cancelled: True when the operator declined to create pull requests.
    """

    model_config = ConfigDict(frozen=True)

    plan: UpdatePlan
    results: tuple[ApplyResult, ...] = ()
    cancelled: bool = False


class ReleaseRun(BaseModel):
    """Record of one release orchestration run, returned to the caller."""

    model_config = ConfigDict(frozen=True)

    dry_run: bool
    tiers: tuple[tuple[str, ...], ...]
    preflight: PreflightReport
    released: tuple[str, ...] = ()
    syncs: tuple[SyncResult, ...] = ()
    stopped: bool = False
