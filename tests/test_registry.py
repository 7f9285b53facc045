"""Tests for depsync.registry."""

from __future__ import annotations

import pytest

from depsync.config import DEFAULT_REPOSITORIES
from depsync.models import Repository
from depsync.registry import Registry, UnknownRepository


class TestRegistry:
    @pytest.fixture
    def registry(self) -> Registry:
        return Registry(DEFAULT_REPOSITORIES)

    def test_all_repositories_in_declaration_order(self, registry: Registry) -> None:
        assert registry.all_repositories() == [
            "livetemplate",
            "components",
            "lvt",
            "tinkerdown",
            "examples",
        ]

    def test_dependencies_of(self, registry: Registry) -> None:
        assert registry.dependencies_of("tinkerdown") == ["livetemplate", "components"]
        assert registry.dependencies_of("livetemplate") == []

    def test_releasable_excludes_examples(self, registry: Registry) -> None:
        assert "examples" not in registry.releasable()
        assert "lvt" in registry.releasable()

    def test_unknown_repository_lookup(self, registry: Registry) -> None:
        with pytest.raises(UnknownRepository) as excinfo:
            registry.dependencies_of("nope")
        assert excinfo.value.name == "nope"
        assert "nope" in str(excinfo.value)

    def test_unknown_repository_is_a_key_error(self, registry: Registry) -> None:
        with pytest.raises(KeyError):
            registry.get("nope")

    def test_undeclared_dependency_rejected(self) -> None:
        with pytest.raises(UnknownRepository, match="ghost"):
            Registry([Repository(name="a", deps=("ghost",))])

    def test_duplicate_declaration_rejected(self) -> None:
        with pytest.raises(ValueError, match="twice"):
            Registry([Repository(name="a"), Repository(name="a")])

    def test_contains_and_len(self, registry: Registry) -> None:
        assert "lvt" in registry
        assert "nope" not in registry
        assert len(registry) == 5
