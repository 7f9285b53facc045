"""CLI entry point for depsync."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from depsync.config import ConfigError, WorkspaceConfig, load_config
from depsync.graph import CyclicDependency, derive_tiers
from depsync.pipeline import run_release
from depsync.registry import Registry, UnknownRepository
from depsync.shell import check_prerequisites
from depsync.sync import sync_dependencies
from depsync.workspace import setup_workspace

REQUIRED_TOOLS = {"git": "git", "gh": "gh (GitHub CLI)", "go": "go"}


def _load(workspace: Path) -> tuple[WorkspaceConfig, Registry]:
    """Load and validate the workspace, turning domain errors into CLI errors."""
    try:
        config = load_config(workspace.resolve())
        registry = Registry.from_config(config)
        derive_tiers(registry)
    except (ConfigError, UnknownRepository, CyclicDependency, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc
    return config, registry


def _confirm(prompt: str) -> bool:
    """Proceed only on "y" or "Y"; any other answer, or none, declines."""
    answer = click.prompt(
        f"{prompt} [y/N]", default="", show_default=False, prompt_suffix=": "
    )
    return answer in ("y", "Y")


def _gate(prompt: str) -> bool:
    return click.confirm(prompt, default=True)


def _banner(title: str, dry_run: bool) -> None:
    suffix = " (DRY RUN)" if dry_run else ""
    click.echo()
    click.secho(f"{title}{suffix}", fg="cyan", bold=True)
    click.echo("=" * 40)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option()
@click.option(
    "-C",
    "--workspace",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Directory holding the repository checkouts.",
)
@click.pass_context
def cli(ctx: click.Context, workspace: Path) -> None:
    """Sync dependencies and release livetemplate repos in dependency order."""
    ctx.obj = workspace


@cli.command()
@click.option(
    "--dry-run", is_flag=True, help="Show what would be done without making changes."
)
@click.pass_obj
def sync(workspace: Path, dry_run: bool) -> None:
    """Open PRs bumping dependencies to their latest releases."""
    config, registry = _load(workspace)
    _banner("Sync Dependencies", dry_run)
    check_prerequisites(REQUIRED_TOOLS)
    sync_dependencies(config, registry, dry_run=dry_run, confirm=_confirm)


@cli.command()
@click.option(
    "--dry-run", is_flag=True, help="Show what would be done without making changes."
)
@click.pass_obj
def release(workspace: Path, dry_run: bool) -> None:
    """Release every repo tier by tier, syncing dependencies in between."""
    config, registry = _load(workspace)
    _banner("Full Release", dry_run)
    check_prerequisites(REQUIRED_TOOLS)
    run_release(config, registry, dry_run=dry_run, confirm=_confirm, gate=_gate)


@cli.command("workspace")
@click.option("--clean", is_flag=True, help="Remove go.work instead of creating it.")
@click.pass_obj
def workspace_cmd(root: Path, clean: bool) -> None:
    """Point Go at the local checkouts with a go.work file."""
    config, registry = _load(root)
    _banner("Go Workspace", False)
    check_prerequisites({"go": "go"})
    setup_workspace(config, registry, clean=clean)


def main(argv: list[str] | None = None) -> None:
    """Console script entry point.

    Runs the click group outside standalone mode so usage errors (such as
    an unknown option) exit with status 1 like every other failure.
    """
    try:
        code = cli.main(args=argv, prog_name="depsync", standalone_mode=False)
    except click.exceptions.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(1)
    except click.ClickException as exc:
        exc.show()
        sys.exit(1)
    sys.exit(code if isinstance(code, int) else 0)
