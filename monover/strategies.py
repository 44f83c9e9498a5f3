"""Versioning strategies.

Each strategy decides the working set of a run and whether its packages
share one version, then drives the orchestrator steps:

- ``SyncedStrategy``: one version for the root manifest and every package
- ``SingleStrategy``: exactly one configured package
- ``IndependentStrategy``: every package computes its own version
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Literal, Union

from .calculator import VersionOptions, calculate_version
from .config import VersionConfig
from .errors import VersionErrorCode, version_error
from .filtering import matches_pattern
from .manifests import read_manifest_version
from .models import ManifestVersion, Package, ReleaseResult
from .orchestrator import ReleaseOrchestrator
from .shell import step
from .tags import resolve_latest_tag
from .versions import clean_version, compare_versions, parse_version

log = logging.getLogger(__name__)

StrategyName = Literal["synced", "single", "independent"]

_GLOB_CHARS = frozenset("*?[")


def _highest_member_manifest(packages: Sequence[Package]) -> ManifestVersion | None:
    """Manifest of the member with the highest version, for roots that
    carry no version of their own."""
    versioned = [p for p in packages if clean_version(p.manifest_version)]
    if not versioned:
        return None
    highest = max(versioned, key=lambda p: parse_version(p.manifest_version or ""))
    log.info(
        "Root manifest has no version, using %s %s as the current version",
        highest.name,
        highest.manifest_version,
    )
    return read_manifest_version(highest.directory)


def _check_not_lower(version: str, packages: Sequence[Package]) -> None:
    """Refuse a synced version that would move a package backwards.

    Raises:
        VersionError: VERSION_CALCULATION_ERROR naming the packages that
            are already ahead of ``version``.
    """
    ahead = [
        f"{p.name} {p.manifest_version}"
        for p in packages
        if p.manifest_version
        and clean_version(p.manifest_version)
        and compare_versions(version, p.manifest_version) < 0
    ]
    if ahead:
        raise version_error(
            VersionErrorCode.VERSION_CALCULATION_ERROR,
            f"synced version {version} is lower than {', '.join(ahead)}",
        )


class SyncedStrategy:
    """All packages move to the same version, computed from global tags
    and the root manifest."""

    name: StrategyName = "synced"

    def apply(
        self, orchestrator: ReleaseOrchestrator, targets: Sequence[str] = ()
    ) -> ReleaseResult:
        cfg = orchestrator.config
        workspace = orchestrator.workspace
        result = ReleaseResult()

        step("Calculating synced version")
        root_package = workspace.root_package
        manifest = read_manifest_version(workspace.root) or _highest_member_manifest(
            workspace.packages
        )
        decision = calculate_version(
            cfg,
            VersionOptions(
                latest_tag=resolve_latest_tag(None, cfg.version_prefix),
                manifest=manifest,
            ),
        )
        if not decision.is_bump or decision.next_version is None:
            log.info("No version change needed")
            return result
        version = decision.next_version

        packages = orchestrator.filter_packages(targets)
        _check_not_lower(version, packages)
        member_dirs = {p.directory for p in workspace.packages}

        step(f"Updating packages to {version}")
        if (
            root_package is not None
            and root_package.manifest_version
            and root_package.directory not in member_dirs
        ):
            orchestrator.write_package(
                result, root_package.name, workspace.root, version, since=decision.since_ref
            )
        for pkg in packages:
            tag = orchestrator.tag_name(version, pkg.name) if cfg.package_specific_tags else None
            orchestrator.write_package(
                result, pkg.name, pkg.directory, version, tag, since=decision.since_ref
            )

        if not result.updated_packages:
            log.warning("No packages were updated")
            return result

        if not cfg.package_specific_tags:
            global_tag = orchestrator.tag_name(version)
            if orchestrator.create_tag(result, global_tag, f"chore(release): {version}"):
                for unit in result.updated_packages:
                    unit.tag_name = global_tag

        step("Committing")
        orchestrator.commit(result)
        return result


class SingleStrategy:
    """Release exactly one package named in the configuration."""

    name: StrategyName = "single"

    def select(self, orchestrator: ReleaseOrchestrator) -> Package:
        """Find the configured package.

        Raises:
            VersionError: INVALID_CONFIG unless exactly one package is
                configured or when the name is ambiguous; PACKAGE_NOT_FOUND
                when nothing matches.
        """
        configured = orchestrator.config.packages
        if len(configured) != 1:
            raise version_error(
                VersionErrorCode.INVALID_CONFIG, "Single mode requires exactly one package name"
            )
        wanted = configured[0]
        workspace = orchestrator.workspace
        matches = [p for p in workspace.packages if p.name == wanted]
        if not matches:
            matches = [p for p in workspace.packages if matches_pattern(p, wanted, workspace.root)]
        if not matches:
            raise version_error(VersionErrorCode.PACKAGE_NOT_FOUND, wanted)
        if len(matches) > 1:
            raise version_error(
                VersionErrorCode.INVALID_CONFIG,
                f"{wanted} matches several packages: {', '.join(p.name for p in matches)}",
            )
        return matches[0]

    def apply(
        self, orchestrator: ReleaseOrchestrator, targets: Sequence[str] = ()
    ) -> ReleaseResult:
        pkg = self.select(orchestrator)
        result = ReleaseResult()
        if pkg.name in orchestrator.config.skip:
            log.info("Package %s is skipped", pkg.name)
            return result
        if targets and pkg.name not in targets:
            log.info(
                "Targets %s do not include %s, nothing to release in single mode",
                ", ".join(targets),
                pkg.name,
            )
            return result

        step(f"Calculating version for {pkg.name}")
        decision = orchestrator.resolve_package(pkg)
        if not decision.is_bump or decision.next_version is None:
            log.info("No version change needed for %s", pkg.name)
            return result

        version = decision.next_version
        scoped = orchestrator.config.package_specific_tags
        tag = orchestrator.tag_name(version, pkg.name if scoped else None)
        orchestrator.write_package(
            result, pkg.name, pkg.directory, version, tag, since=decision.since_ref
        )

        step("Committing")
        orchestrator.commit(result)
        return result


class IndependentStrategy:
    """Each package is resolved, written and tagged on its own; one commit
    covers them all."""

    name: StrategyName = "independent"

    def apply(
        self, orchestrator: ReleaseOrchestrator, targets: Sequence[str] = ()
    ) -> ReleaseResult:
        result = ReleaseResult()
        if targets:
            log.info("Processing targeted packages: %s", ", ".join(targets))
        else:
            log.info("No targets specified, processing all non-skipped packages")

        packages = orchestrator.filter_packages(targets)
        if not packages:
            return result

        step("Calculating versions")
        for pkg in packages:
            decision = orchestrator.resolve_package(pkg)
            if not decision.is_bump or decision.next_version is None:
                continue
            version = decision.next_version
            orchestrator.write_package(
                result,
                pkg.name,
                pkg.directory,
                version,
                orchestrator.tag_name(version, pkg.name),
                since=decision.since_ref,
            )

        if not result.updated_packages:
            log.info("No packages required a version update.")
            return result

        log.info(
            "Updated %d package(s): %s",
            len(result.updated_packages),
            ", ".join(u.package for u in result.updated_packages),
        )
        step("Committing")
        orchestrator.commit(result)
        return result


Strategy = Union[SyncedStrategy, SingleStrategy, IndependentStrategy]

STRATEGIES: dict[StrategyName, type[Strategy]] = {
    "synced": SyncedStrategy,
    "single": SingleStrategy,
    "independent": IndependentStrategy,
}


def create_strategy(config: VersionConfig) -> Strategy:
    """Pick the strategy implied by the configuration.

    Synced when ``synced`` is set, single when exactly one plain package
    name is configured, independent otherwise.
    """
    if config.synced:
        return SyncedStrategy()
    if len(config.packages) == 1 and not _GLOB_CHARS & set(config.packages[0]):
        return SingleStrategy()
    return IndependentStrategy()
