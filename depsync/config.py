"""Workspace configuration.

A workspace is a directory holding sibling checkouts of every managed
repository. Its layout and the dependency graph between the repositories
can be described in an optional ``depsync.toml`` at the workspace root:

    org = "livetemplate"
    test_timeout = "300s"

    [[repositories]]
    name = "livetemplate"

    [[repositories]]
    name = "components"
    deps = ["livetemplate"]

Without that file the built-in livetemplate ecosystem is used. The file is
read with tomlkit.
"""

from __future__ import annotations

from pathlib import Path

import tomlkit
from pydantic import BaseModel, Field, ValidationError
from tomlkit.exceptions import TOMLKitError

from .models import Repository

CONFIG_FILE = "depsync.toml"

DEFAULT_REPOSITORIES: tuple[Repository, ...] = (
    Repository(name="livetemplate"),
    Repository(name="components", deps=("livetemplate",)),
    Repository(name="lvt", deps=("livetemplate",)),
    Repository(name="tinkerdown", deps=("livetemplate", "components")),
    Repository(
        name="examples",
        deps=("livetemplate", "components", "lvt"),
        releasable=False,
    ),
)


class ConfigError(ValueError):
    """Raised when depsync.toml cannot be parsed or holds invalid values."""


class WorkspaceConfig(BaseModel):
    """Settings for one workspace of sibling repository checkouts.

    Attributes:
        root: Directory containing one checkout per managed repository.
        org: Code-hosting organisation that owns the repositories.
        module_prefix: Module path prefix; defaults to github.com/<org>.
        manifest: Module manifest file inside each checkout.
        lockfile: Checksum file staged alongside the manifest when present.
        release_script: Per-repository release procedure, relative to the checkout.
        test_timeout: Value passed to ``go test -timeout``.
        base_branches: Candidate base branches, in order of preference.
        branch_prefix: Prefix of dependency-update branch names.
        repositories: Managed repositories in declaration order.
    """

    root: Path
    org: str = "livetemplate"
    module_prefix: str | None = None
    manifest: str = "go.mod"
    lockfile: str = "go.sum"
    release_script: str = "scripts/release.sh"
    test_timeout: str = "120s"
    base_branches: list[str] = Field(default_factory=lambda: ["main", "master"])
    branch_prefix: str = "deps/update"
    repositories: list[Repository] = Field(
        default_factory=lambda: list(DEFAULT_REPOSITORIES)
    )

    def repo_path(self, name: str) -> Path:
        return self.root / name

    def manifest_path(self, name: str) -> Path:
        return self.repo_path(name) / self.manifest

    def module_path(self, name: str) -> str:
        """Module path other repositories use to require ``name``."""
        prefix = self.module_prefix or f"github.com/{self.org}"
        return f"{prefix.rstrip('/')}/{name}"


def load_config(root: Path) -> WorkspaceConfig:
    """Load the workspace configuration rooted at ``root``.

    Reads ``depsync.toml`` when present; keys that are not settings are
    ignored. Falls back to the built-in defaults otherwise.

    Raises:
        ConfigError: If the file is not valid TOML or a value is invalid.
    """
    path = root / CONFIG_FILE
    if not path.exists():
        return WorkspaceConfig(root=root)

    try:
        data = tomlkit.parse(path.read_text()).unwrap()
    except TOMLKitError as exc:
        raise ConfigError(f"{path}: {exc}") from exc

    settings = {
        key: value
        for key, value in data.items()
        if key in WorkspaceConfig.model_fields and key != "root"
    }
    try:
        return WorkspaceConfig(root=root, **settings)
    except ValidationError as exc:
        raise ConfigError(f"{path}: {exc}") from exc
