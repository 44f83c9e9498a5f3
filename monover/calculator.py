"""Next version calculation.

The release type comes from the first signal that applies:

1. an explicit type (``--bump`` or ``type`` in the config)
2. the branch name matched against ``branchPattern`` entries
3. conventional commits since the latest release

and is then applied to the current version chosen by
``sources.get_best_version_source``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from pathlib import Path

from pydantic import BaseModel

from . import commits, git
from .config import VersionConfig
from .errors import (
    GitError,
    MonoverError,
    NoTagsFoundError,
    VersionErrorCode,
    version_error,
)
from .models import ManifestVersion, ResolvedTag, VersionDecision, VersionSource
from .sources import get_best_version_source
from .versions import RELEASE_TYPES, ReleaseType, bump_version, normalize_prerelease_identifier

log = logging.getLogger(__name__)


class VersionOptions(BaseModel):
    """Per-package inputs to a calculation.

    Attributes:
        name: Package name, None for a repository-wide calculation.
        path: Directory whose commits count towards the release.
        latest_tag: Latest tag for this scope.
        manifest: Version read from the package manifest.
        type: Explicit release type overriding every other signal.
        prerelease_identifier: Overrides the configured identifier.
    """

    name: str | None = None
    path: Path | None = None
    latest_tag: ResolvedTag | None = None
    manifest: ManifestVersion | None = None
    type: ReleaseType | None = None
    prerelease_identifier: str | None = None


def parse_branch_patterns(entries: Sequence[str]) -> list[tuple[str, ReleaseType]]:
    """Parse ``pattern:releaseType`` entries, skipping invalid ones."""
    parsed: list[tuple[str, ReleaseType]] = []
    for entry in entries:
        pattern, sep, release_type = entry.rpartition(":")
        if not sep or not pattern:
            log.warning('Invalid branch pattern "%s" - missing colon. Skipping.', entry)
            continue
        if release_type not in RELEASE_TYPES:
            log.warning('Invalid release type "%s" in branch pattern "%s". Skipping.', release_type, entry)
            continue
        try:
            re.compile(pattern)
        except re.error as exc:
            log.warning('Invalid branch pattern "%s": %s. Skipping.', entry, exc)
            continue
        parsed.append((pattern, release_type))  # type: ignore[arg-type]
    return parsed


def match_branch_pattern(branch: str, entries: Sequence[str]) -> ReleaseType | None:
    """Return the release type of the first pattern found in ``branch``."""
    for pattern, release_type in parse_branch_patterns(entries):
        if re.search(pattern, branch):
            log.debug("Using branch pattern %s for version type %s", pattern, release_type)
            return release_type
    return None


def _active_branch(config: VersionConfig) -> str | None:
    names = [pattern for pattern, _ in parse_branch_patterns(config.branch_pattern)]
    merged = git.last_merged_branch(names, config.base_branch)
    if merged:
        log.debug("Using last merged branch %s", merged)
        return merged
    try:
        return git.current_branch()
    except GitError as exc:
        log.warning("Could not determine the current branch: %s", exc.message)
        return None


def _bump(
    source: VersionSource,
    release_type: ReleaseType,
    identifier: str | None,
    reason: str,
    since: str | None = None,
) -> VersionDecision:
    try:
        next_version = bump_version(source.version, release_type, identifier)
    except ValueError as exc:
        raise version_error(VersionErrorCode.VERSION_CALCULATION_ERROR, str(exc)) from exc
    log.debug("Applying %s bump to %s (%s): %s", release_type, source.version, reason, next_version)
    return VersionDecision.bump(
        next_version, release_type=release_type, source=source, reason=reason, since_ref=since
    )


def _first_release(config: VersionConfig, source: VersionSource, label: str) -> VersionDecision:
    if config.initial_version is None:
        raise version_error(VersionErrorCode.NO_VERSION_SOURCE, label)
    log.info("No previous release found for %s, using initial version %s", label, config.initial_version)
    return VersionDecision.bump(config.initial_version, source=source, reason="first release")


def calculate_version(config: VersionConfig, options: VersionOptions) -> VersionDecision:
    """Compute the next version for one package or the whole repository.

    Args:
        config: Run configuration.
        options: Package inputs (tag, manifest, explicit type).

    Returns:
        A bump decision, or ``VersionDecision.none`` when nothing warrants
        a release.

    Raises:
        VersionError: If no version source exists or the bump fails.
        MonoverError: Unexpected failures of the commit analysis.
    """
    label = options.name or "project"
    tag = options.latest_tag
    reachable = True
    if tag is not None and tag.cleaned_version:
        reachable = git.verify_tag(tag.raw_tag)

    manifest = options.manifest
    source = get_best_version_source(
        tag,
        manifest.version if manifest else None,
        manifest_type=manifest.manifest_type if manifest else "manifest",
        tag_reachable=reachable,
        initial_version=config.initial_version,
        mismatch_strategy=config.mismatch_strategy,
    )
    if source.origin == "initial":
        return _first_release(config, source, label)

    identifier = normalize_prerelease_identifier(
        options.prerelease_identifier
        if options.prerelease_identifier is not None
        else config.prerelease_identifier
    )

    ref = tag.raw_tag if tag is not None and tag.cleaned_version and reachable else None
    release_type = options.type or config.type
    if release_type:
        return _bump(source, release_type, identifier, "explicit release type", ref)

    if config.branch_pattern and config.version_strategy != "commitMessage":
        branch = _active_branch(config)
        release_type = match_branch_pattern(branch, config.branch_pattern) if branch else None
        if release_type:
            return _bump(source, release_type, identifier, f"branch {branch}", ref)
        if config.default_release_type:
            log.debug("No branch pattern matched %s, using default release type", branch)
            return _bump(source, config.default_release_type, identifier, "default release type", ref)
        log.info("No matching pattern for branch %s", branch)
        if config.version_strategy == "branchPattern":
            return VersionDecision.none("no matching pattern", source)

    if ref is None:
        try:
            ref = git.describe_latest_tag()
        except NoTagsFoundError:
            log.debug("No reachable tags, analysing the full history of %s", label)

    if git.count_commits_since(ref, options.path) == 0:
        log.info(
            "No new commits found for %s since %s, skipping version bump",
            label,
            ref or "the first commit",
        )
        return VersionDecision.none("no new commits", source)

    try:
        release_type = commits.recommend_bump(config.preset, ref, options.path)
    except NoTagsFoundError:
        return _first_release(config, source, label)
    except MonoverError:
        log.error("Failed to calculate version for %s", label)
        raise

    if release_type is None:
        log.info(
            "No relevant commits found for %s since %s, skipping version bump",
            label,
            ref or "the first commit",
        )
        return VersionDecision.none("no relevant commits", source)

    return _bump(source, release_type, identifier, "conventional commits", ref)
