"""Release orchestration.

``ReleaseOrchestrator`` holds the state of one run (configuration and the
discovered workspace) and provides the steps every strategy is built from:

    filter → resolve → write (manifests, changelog, then tag) → commit

Tag failures are logged per package and never abort the batch. A failed
commit propagates; manifests already written and tags already created are
left in place.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from . import changelog, git
from .calculator import VersionOptions, calculate_version
from .config import VersionConfig
from .errors import GitError, VersionErrorCode, version_error
from .filtering import filter_packages, filter_packages_by_patterns
from .formatting import (
    format_commit_message,
    format_release_message,
    format_tag,
    has_placeholders,
)
from .manifests import find_manifests, read_manifest_version, write_manifest_version
from .models import Package, ReleaseResult, ReleaseUnit, VersionDecision, Workspace
from .tags import resolve_latest_tag
from .workspace import discover_workspace

log = logging.getLogger(__name__)


class ReleaseOrchestrator:
    """Runs the release steps for one configuration.

    Args:
        config: Run configuration.
        root: Repository root. Defaults to the current directory.
    """

    def __init__(self, config: VersionConfig, *, root: Path | None = None) -> None:
        self.config = config
        self.root = root or Path.cwd()
        self._workspace: Workspace | None = None

    @property
    def dry_run(self) -> bool:
        return self.config.dry_run

    @property
    def workspace(self) -> Workspace:
        """The discovered workspace, computed on first access."""
        if self._workspace is None:
            try:
                self._workspace = discover_workspace(self.root)
            except (OSError, ValueError) as exc:
                raise version_error(VersionErrorCode.WORKSPACE_ERROR, str(exc)) from exc
        return self._workspace

    @property
    def packages(self) -> list[Package]:
        """Workspace packages restricted by the configured patterns."""
        workspace = self.workspace
        return filter_packages_by_patterns(
            workspace.packages, self.config.packages, workspace.root
        )

    def filter_packages(self, targets: Sequence[str] = ()) -> list[Package]:
        return filter_packages(self.packages, self.config.skip, targets)

    def resolve_package(self, package: Package) -> VersionDecision:
        """Calculate the next version of one package.

        The package's own tag is preferred, then its manifest version, then
        the latest global tag.
        """
        cfg = self.config
        tag = resolve_latest_tag(
            package.name,
            cfg.version_prefix,
            package_specific_tags=cfg.package_specific_tags,
            tag_template=cfg.package_tag_template,
        )
        manifest = read_manifest_version(package.directory)
        if tag is None and manifest is None:
            tag = resolve_latest_tag(None, cfg.version_prefix)

        decision = calculate_version(
            cfg,
            VersionOptions(
                name=package.name,
                path=package.directory,
                latest_tag=tag,
                manifest=manifest,
            ),
        )
        if decision.is_bump:
            current = decision.source.version if decision.source else "-"
            log.info("%s: %s → %s", package.name, current, decision.next_version)
        else:
            log.info("%s: no version bump (%s)", package.name, decision.reason)
        return decision

    def tag_name(self, version: str, package_name: str | None = None) -> str:
        cfg = self.config
        return format_tag(
            version,
            cfg.version_prefix,
            package_name,
            tag_template=cfg.tag_template,
            package_tag_template=cfg.package_tag_template,
        )

    def write_manifests(self, directory: Path, version: str) -> list[Path]:
        """Set ``version`` in every versioned manifest of ``directory``."""
        cargo = self.config.cargo
        paths = find_manifests(directory, cargo_enabled=cargo.enabled, cargo_paths=cargo.paths)
        if not paths:
            log.warning("No versioned manifest found in %s", directory)
        for path in paths:
            if self.dry_run:
                log.info("[DRY RUN] Would update %s to version %s", path, version)
            else:
                write_manifest_version(path, version)
        return paths

    def write_changelog(
        self, name: str, directory: Path, version: str, since: str | None = None
    ) -> Path:
        """Add the release section for ``version`` to the package changelog.

        Commits are read from ``since`` onwards, restricted to ``directory``.
        """
        commits = changelog.collect_commits(since, directory)
        return changelog.update_changelog(
            directory,
            version,
            commits,
            self.config.changelog_format,
            package_name=name,
            dry_run=self.dry_run,
        )

    def create_tag(self, result: ReleaseResult, tag: str, message: str = "") -> bool:
        """Create ``tag`` and record it in ``result``.

        Returns:
            False when git refused the tag. The failure is logged and the
            run continues.
        """
        if tag in result.tags:
            return True
        if self.dry_run:
            log.info("[DRY RUN] Would create tag: %s", tag)
            result.tags.append(tag)
            return True
        try:
            git.create_tag(tag, message or tag)
        except GitError as exc:
            log.error("Failed to create tag %s: %s", tag, exc.message)
            return False
        log.info("Created tag: %s", tag)
        result.tags.append(tag)
        return True

    def write_package(
        self,
        result: ReleaseResult,
        name: str,
        directory: Path,
        version: str,
        tag: str | None = None,
        since: str | None = None,
    ) -> ReleaseUnit:
        """Update a package's manifests and changelog, then tag it.

        The ReleaseUnit is appended to ``result`` before tagging, so a
        package whose tag fails is still reported as updated.
        """
        unit = ReleaseUnit(
            package=name,
            next_version=version,
            manifest_paths=self.write_manifests(directory, version),
        )
        if self.config.update_changelog:
            unit.changelog_path = self.write_changelog(name, directory, version, since)
        result.updated_packages.append(unit)
        if tag and self.create_tag(result, tag, f"chore(release): {name} {version}"):
            unit.tag_name = tag
        return unit

    def commit_message(self, result: ReleaseResult) -> str:
        versions = {u.package: u.next_version for u in result.updated_packages}
        template = self.config.commit_message
        if template and not has_placeholders(template):
            return template
        if template and len(versions) == 1:
            name, version = next(iter(versions.items()))
            return format_commit_message(template, version, name)
        return format_release_message(versions)

    def commit(self, result: ReleaseResult) -> None:
        """Stage every touched manifest and changelog and create one commit.

        Raises:
            GitError: If staging or committing fails. Nothing is rolled back.
        """
        if not result.updated_packages:
            return
        message = self.commit_message(result)
        result.commit_message = message
        paths = result.staged_paths

        if self.dry_run:
            log.info("[DRY RUN] Would stage: %s", ", ".join(str(p) for p in paths))
            log.info('[DRY RUN] Would commit with message: "%s"', message)
            return
        if not paths:
            log.info("No manifest files changed, nothing to commit")
            return

        git.stage_files(paths)
        git.commit(message, self.config.skip_hooks)
        log.info('Committed: "%s"', message)
