"""Repository registry.

Static declaration of every managed repository and its direct upstream
dependencies, validated once when a run starts.
"""

from __future__ import annotations

from collections.abc import Iterable

from .config import WorkspaceConfig
from .models import Repository


class UnknownRepository(KeyError):
    """Raised when a repository name is not declared in the registry."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown repository: {self.name}"


class Registry:
    """Ordered, immutable set of managed repositories.

    Raises:
        UnknownRepository: If a repository depends on an undeclared name.
        ValueError: If a repository is declared twice.
    """

    def __init__(self, repositories: Iterable[Repository]) -> None:
        self._repos: dict[str, Repository] = {}
        for repo in repositories:
            if repo.name in self._repos:
                raise ValueError(f"Repository declared twice: {repo.name}")
            self._repos[repo.name] = repo

        for repo in self._repos.values():
            for dep in repo.deps:
                if dep not in self._repos:
                    raise UnknownRepository(dep)

    @classmethod
    def from_config(cls, config: WorkspaceConfig) -> Registry:
        return cls(config.repositories)

    def __contains__(self, name: object) -> bool:
        return name in self._repos

    def __len__(self) -> int:
        return len(self._repos)

    def get(self, name: str) -> Repository:
        try:
            return self._repos[name]
        except KeyError:
            raise UnknownRepository(name) from None

    def dependencies_of(self, name: str) -> list[str]:
        return list(self.get(name).deps)

    def all_repositories(self) -> list[str]:
        """Repository names in declaration order."""
        return list(self._repos)

    def releasable(self) -> list[str]:
        return [name for name, repo in self._repos.items() if repo.releasable]
