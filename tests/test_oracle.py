"""Tests for depsync.oracle."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

from conftest import write_checkout

from depsync.config import WorkspaceConfig
from depsync.models import NotConfigured, Resolved, Unreachable
from depsync.oracle import VersionOracle


def _completed(returncode: int = 0, stdout: str = "", stderr: str = ""):
    return subprocess.CompletedProcess(["gh"], returncode, stdout, stderr)


class TestLatestVersion:
    @patch("depsync.oracle.capture")
    def test_returns_latest_tag(self, mock_capture: MagicMock, tmp_path: Path) -> None:
        """The single tag listed by gh is the latest release."""
        mock_capture.return_value = _completed(stdout="v1.4.2\n")

        result = VersionOracle(WorkspaceConfig(root=tmp_path)).latest_version("lvt")

        assert result == Resolved(version="v1.4.2")
        args = mock_capture.call_args[0]
        assert args[:3] == ("gh", "release", "list")
        assert "livetemplate/lvt" in args
        assert args[args.index("--limit") + 1] == "1"

    @patch("depsync.oracle.capture")
    def test_no_releases_is_not_configured(
        self, mock_capture: MagicMock, tmp_path: Path
    ) -> None:
        mock_capture.return_value = _completed(stdout="")

        result = VersionOracle(WorkspaceConfig(root=tmp_path)).latest_version("lvt")

        assert isinstance(result, NotConfigured)

    @patch("depsync.oracle.capture")
    def test_gh_failure_is_unreachable(
        self, mock_capture: MagicMock, tmp_path: Path
    ) -> None:
        """Network or auth errors are swallowed into a value."""
        mock_capture.return_value = _completed(returncode=1, stderr="HTTP 401")

        result = VersionOracle(WorkspaceConfig(root=tmp_path)).latest_version("lvt")

        assert isinstance(result, Unreachable)
        assert "HTTP 401" in result.reason

    @patch("depsync.oracle.capture")
    def test_missing_gh_is_unreachable(
        self, mock_capture: MagicMock, tmp_path: Path
    ) -> None:
        mock_capture.side_effect = FileNotFoundError("gh")

        result = VersionOracle(WorkspaceConfig(root=tmp_path)).latest_version("lvt")

        assert isinstance(result, Unreachable)

    @patch("depsync.oracle.capture")
    def test_uses_configured_org(self, mock_capture: MagicMock, tmp_path: Path) -> None:
        mock_capture.return_value = _completed(stdout="v2.0.0")

        VersionOracle(WorkspaceConfig(root=tmp_path, org="acme")).latest_version("core")

        assert "acme/core" in mock_capture.call_args[0]


class TestCurrentVersion:
    def test_reads_pin_from_go_mod(self, tmp_path: Path) -> None:
        write_checkout(
            tmp_path, "lvt", {"github.com/livetemplate/livetemplate": "v0.3.1"}
        )
        oracle = VersionOracle(WorkspaceConfig(root=tmp_path))

        assert oracle.current_version("lvt", "livetemplate") == Resolved(
            version="v0.3.1"
        )

    def test_missing_checkout(self, tmp_path: Path) -> None:
        oracle = VersionOracle(WorkspaceConfig(root=tmp_path))

        result = oracle.current_version("lvt", "livetemplate")

        assert isinstance(result, NotConfigured)
        assert "not found locally" in result.reason

    def test_missing_manifest(self, tmp_path: Path) -> None:
        (tmp_path / "lvt").mkdir()
        oracle = VersionOracle(WorkspaceConfig(root=tmp_path))

        result = oracle.current_version("lvt", "livetemplate")

        assert isinstance(result, NotConfigured)
        assert "go.mod" in result.reason

    def test_dependency_not_pinned(self, tmp_path: Path) -> None:
        write_checkout(tmp_path, "lvt", {})
        oracle = VersionOracle(WorkspaceConfig(root=tmp_path))

        assert isinstance(oracle.current_version("lvt", "livetemplate"), NotConfigured)

    def test_unreadable_manifest(self, tmp_path: Path) -> None:
        repo = tmp_path / "lvt"
        repo.mkdir()
        (repo / "go.mod").write_bytes(b"\xff\xfe\x00bad")
        oracle = VersionOracle(WorkspaceConfig(root=tmp_path))

        assert isinstance(oracle.current_version("lvt", "livetemplate"), Unreachable)
