"""CLI entry point for monover."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from monover import git
from monover.config import CONFIG_FILENAME, load_config
from monover.engine import VersionEngine
from monover.errors import GitErrorCode, MonoverError, git_error
from monover.output import render_json_output
from monover.versions import RELEASE_TYPES

log = logging.getLogger(__name__)

STARTER_CONFIG = {
    "preset": "conventional-commits",
    "versionPrefix": "v",
    "packageSpecificTags": False,
    "synced": False,
    "baseBranch": "main",
    "branchPattern": ["feature:minor", "fix:patch"],
    "packages": [],
    "skip": [],
    "commitMessage": "chore(release): ${packageName} ${version}",
    "updateChangelog": False,
    "changelogFormat": "keep-a-changelog",
}


def _setup_logging(verbose: bool, json_output: bool) -> None:
    if json_output:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format="%(message)s", force=True)


def _split_targets(value: str | None) -> list[str]:
    return [t.strip() for t in (value or "").split(",") if t.strip()]


@click.group()
@click.version_option(package_name="monover")
def cli() -> None:
    """Semantic versioning for monorepos: bump manifests, tag and commit."""


@cli.command()
@click.option(
    "-c", "--config", "config_path",
    type=click.Path(dir_okay=False),
    help=f"Path to the config file (default: {CONFIG_FILENAME} or [tool.monover]).",
)
@click.option("-d", "--dry-run", is_flag=True, help="Calculate versions without writing anything.")
@click.option(
    "-b", "--bump",
    type=click.Choice(RELEASE_TYPES),
    help="Force a release type instead of inferring it.",
)
@click.option(
    "-p", "--prerelease",
    is_flag=False,
    flag_value="rc",
    default=None,
    metavar="[ID]",
    help="Create a prerelease with this identifier (default: rc).",
)
@click.option("-s", "--synced", is_flag=True, help="Give every package the same version.")
@click.option("-j", "--json", "json_output", is_flag=True, help="Print a JSON summary only.")
@click.option("-t", "--target", help="Comma-separated package names to release.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def version(
    config_path: str | None,
    dry_run: bool,
    bump: str | None,
    prerelease: str | None,
    synced: bool,
    json_output: bool,
    target: str | None,
    verbose: bool,
) -> None:
    """Calculate the next versions and release them."""
    _setup_logging(verbose, json_output)
    root = Path.cwd()

    try:
        config = load_config(config_path, root=root)
        overrides: dict[str, object] = {}
        if dry_run:
            overrides["dry_run"] = True
        if bump:
            overrides["type"] = bump
        if prerelease is not None:
            overrides["prerelease_identifier"] = prerelease
        if synced:
            overrides["synced"] = True
        config = config.model_copy(update=overrides)

        if not git.is_git_repository(root):
            raise git_error(GitErrorCode.NOT_GIT_REPO, str(root))

        if config.dry_run:
            log.info("Dry run: no files, tags or commits will be written")
        result = VersionEngine(config, root=root).run(_split_targets(target))
    except MonoverError as exc:
        raise click.ClickException(exc.message) from exc

    if json_output:
        click.echo(render_json_output(result, config.dry_run, root))
        return

    if not result.updated_packages:
        click.echo("No packages required a version update.")
        return
    for unit in result.updated_packages:
        click.echo(f"  {unit.package} → {unit.next_version}")
    if result.tags:
        click.echo(f"Tags: {', '.join(result.tags)}")
    if result.commit_message:
        click.echo(f'Commit: "{result.commit_message}"')


@cli.command()
def init() -> None:
    """Write a starter version.config.json into the current repository."""
    root = Path.cwd()

    if not (root / ".git").exists():
        raise click.ClickException("Not a git repository. Run from the repo root.")

    dest = root / CONFIG_FILENAME
    if dest.exists():
        raise click.ClickException(f"{CONFIG_FILENAME} already exists, not overwriting.")

    dest.write_text(json.dumps(STARTER_CONFIG, indent=2) + "\n")

    click.echo(f"✓ Wrote {CONFIG_FILENAME}")
    click.echo()
    click.echo("Next steps:")
    click.echo("  1. Adjust packages, skip and branchPattern to your repository")
    click.echo("  2. Preview the next release:")
    click.echo("       monover version --dry-run")
