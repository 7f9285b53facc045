"""Shell, git, and terminal output utilities.

Provides simple wrappers around subprocess calls for the external tools
depsync drives (git, gh, go), plus the output helpers used to report
progress, warnings, and fatal errors.
"""

from __future__ import annotations

import shutil
import subprocess
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import NoReturn

import click


def capture(*args: str, cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
    """Run a command, capturing output, without raising on non-zero exit.

    Used where the caller needs both the exit code and the error text,
    e.g. to tell "pull request already exists" apart from a real failure.
    """
    return subprocess.run(args, cwd=cwd, capture_output=True, text=True, check=False)


def run(
    *args: str, cwd: Path | None = None, check: bool = True
) -> subprocess.CompletedProcess[bytes]:
    """Run an arbitrary shell command.

    Unlike capture(), this doesn't capture output - it streams directly to
    the terminal so users can see test and release progress.

    Args:
        *args: Command and arguments (e.g., "go", "test", "./...").
        cwd: Working directory for the command.
        check: If True (default), raise on non-zero exit.

    Returns:
        CompletedProcess with returncode for checking success.
    """
    return subprocess.run(args, cwd=cwd, check=check)


def check_prerequisites(tools: Mapping[str, str]) -> None:
    """Verify required tools are installed and the GitHub CLI is logged in.

    Args:
        tools: Map of executable name → human-readable label for the error.

    Raises:
        SystemExit: If any tool is missing or gh is not authenticated.
    """
    missing = [label for tool, label in tools.items() if shutil.which(tool) is None]
    if missing:
        fatal(f"Missing required tools: {', '.join(missing)}")

    if "gh" in tools and capture("gh", "auth", "status").returncode != 0:
        fatal("GitHub CLI not authenticated. Run 'gh auth login' first")


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate major phases of the release run in terminal output.
    """
    rule = "─" * 60
    click.echo(f"\n{rule}\n{click.style(msg, fg='cyan', bold=True)}\n{rule}")


def info(msg: str) -> None:
    click.echo(f"{click.style('✓', fg='green')} {msg}")


def action(msg: str) -> None:
    click.echo(f"{click.style('▸', fg='blue')} {msg}")


def warn(msg: str) -> None:
    click.echo(f"{click.style('⚠', fg='yellow')} {msg}")


def error(msg: str) -> None:
    click.echo(f"{click.style('✗', fg='red')} {msg}", err=True)


def fatal(msg: str) -> NoReturn:
    """Print an error message and exit with code 1.

    Use for unrecoverable errors that should halt the run.
    """
    click.echo(f"{click.style('ERROR:', fg='red', bold=True)} {msg}", err=True)
    sys.exit(1)
