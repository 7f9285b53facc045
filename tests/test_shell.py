"""Tests for depsync.shell."""

from __future__ import annotations

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from depsync.shell import check_prerequisites, fatal

TOOLS = {"git": "git", "gh": "gh (GitHub CLI)", "go": "go"}


class TestCheckPrerequisites:
    @patch("depsync.shell.capture")
    @patch("depsync.shell.shutil.which", return_value="/usr/bin/tool")
    def test_all_present(self, mock_which: MagicMock, mock_capture: MagicMock) -> None:
        mock_capture.return_value = subprocess.CompletedProcess([], 0)

        check_prerequisites(TOOLS)

        mock_capture.assert_called_once_with("gh", "auth", "status")

    @patch("depsync.shell.capture")
    @patch("depsync.shell.shutil.which")
    def test_lists_every_missing_tool(
        self,
        mock_which: MagicMock,
        mock_capture: MagicMock,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        mock_which.side_effect = lambda tool: None if tool != "git" else "/usr/bin/git"

        with pytest.raises(SystemExit) as exc_info:
            check_prerequisites(TOOLS)

        assert exc_info.value.code == 1
        assert "Missing required tools: gh (GitHub CLI), go" in capsys.readouterr().err
        mock_capture.assert_not_called()

    @patch("depsync.shell.capture")
    @patch("depsync.shell.shutil.which", return_value="/usr/bin/tool")
    def test_gh_not_authenticated(
        self,
        mock_which: MagicMock,
        mock_capture: MagicMock,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        mock_capture.return_value = subprocess.CompletedProcess([], 1)

        with pytest.raises(SystemExit):
            check_prerequisites(TOOLS)

        assert "gh auth login" in capsys.readouterr().err


def test_fatal_exits_1(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        fatal("something broke")
    assert exc_info.value.code == 1
    assert "something broke" in capsys.readouterr().err
