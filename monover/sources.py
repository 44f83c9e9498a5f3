"""Selection of the authoritative current version.

A package's current version can come from its latest git tag or from its
manifest. The two usually agree; when they don't, the higher one is used
and the disagreement is explained in the log. Nothing here touches git or
the filesystem.
"""

from __future__ import annotations

import logging

from .config import MismatchStrategy
from .errors import VersionErrorCode, version_error
from .models import ResolvedTag, VersionMismatch, VersionSource, VersionSourceReason
from .versions import clean_version, parse_version

log = logging.getLogger(__name__)


def _manifest_ahead_message(manifest_type: str, manifest: str, tag: str, raw_tag: str) -> str:
    return f"""Version mismatch detected!
• {manifest_type} version: {manifest}
• Latest git tag version: {tag} (from {raw_tag})
• Package version is AHEAD of git tags

This usually happens when:
• A version was released but the tag wasn't pushed to the remote repository
• The {manifest_type} was manually updated without creating a corresponding tag
• You're running in CI and the latest tag isn't available yet

To fix this mismatch:
• Push missing tags: git push origin --tags
• Or create the missing tag for {manifest}"""


def _tag_ahead_message(manifest_type: str, manifest: str, tag: str, raw_tag: str) -> str:
    return f"""Version mismatch detected!
• {manifest_type} version: {manifest}
• Latest git tag version: {tag} (from {raw_tag})
• Git tag version is AHEAD of package version

This usually happens when:
• A release was tagged but the {manifest_type} wasn't updated
• You're on an older branch that hasn't been updated with the latest version
• You pulled tags but not the commits that update the package version

To fix this mismatch:
• Update {manifest_type}: set version to {tag} or higher
• Or check out the commit that corresponds to the tag"""


def mismatch_severity(tag_version: str, manifest_version: str) -> str:
    """Classify a tag/manifest disagreement.

    "major" when the major or minor components differ, or when a stable
    tag faces a prerelease manifest of the same release (a release that
    was reverted to a prerelease). "minor" otherwise.
    """
    tag = parse_version(tag_version)
    manifest = parse_version(manifest_version)
    if (tag.major, tag.minor) != (manifest.major, manifest.minor):
        return "major"
    same_release = tag.finalize_version() == manifest.finalize_version()
    if same_release and tag.prerelease is None and manifest.prerelease is not None:
        return "major"
    return "minor"


def get_best_version_source(
    latest_tag: ResolvedTag | None,
    manifest_version: str | None,
    *,
    manifest_type: str = "manifest",
    tag_reachable: bool = True,
    initial_version: str | None = "0.1.0",
    mismatch_strategy: MismatchStrategy = "warn",
) -> VersionSource:
    """Decide which version a calculation should start from.

    Args:
        latest_tag: Latest tag for the scope, if any.
        manifest_version: Version declared by the package manifest, if any.
        manifest_type: Manifest file name used in log messages.
        tag_reachable: False when the tag exists by name but does not
            resolve to a commit in this checkout; the tag is then ignored.
        initial_version: Version used when neither source is available.
        mismatch_strategy: How to treat a tag/manifest disagreement.

    Returns:
        The chosen VersionSource with the reason for the choice.

    Raises:
        VersionError: NO_VERSION_SOURCE when nothing is available and no
            initial version is configured; VERSION_MISMATCH when the
            sources disagree and the strategy is "error".
    """
    manifest = clean_version(manifest_version)
    if manifest_version and manifest is None:
        log.warning("Ignoring invalid %s version %r", manifest_type, manifest_version)

    tag = latest_tag.cleaned_version if latest_tag else None
    no_tag_reason = VersionSourceReason.NO_GIT_TAG
    if tag and not tag_reachable:
        log.warning(
            "Tag %s is not reachable from the current checkout, ignoring it",
            latest_tag.raw_tag if latest_tag else tag,
        )
        tag = None
        no_tag_reason = VersionSourceReason.GIT_TAG_UNREACHABLE

    if tag is None:
        if manifest is not None:
            return VersionSource(origin="manifest", version=manifest, reason=no_tag_reason)
        if initial_version is None:
            raise version_error(VersionErrorCode.NO_VERSION_SOURCE)
        log.info("No git tag or %s version found, starting at %s", manifest_type, initial_version)
        return VersionSource(
            origin="initial",
            version=initial_version,
            reason=VersionSourceReason.NO_VERSION_AVAILABLE,
        )

    if manifest is None:
        return VersionSource(
            origin="git-tag", version=tag, reason=VersionSourceReason.NO_MANIFEST_VERSION
        )

    order = parse_version(manifest).compare(parse_version(tag))
    if order == 0:
        return VersionSource(origin="git-tag", version=tag, reason=VersionSourceReason.VERSIONS_EQUAL)

    raw_tag = latest_tag.raw_tag if latest_tag else tag
    if order > 0:
        message = _manifest_ahead_message(manifest_type, manifest, tag, raw_tag)
    else:
        message = _tag_ahead_message(manifest_type, manifest, tag, raw_tag)
    mismatch = VersionMismatch(severity=mismatch_severity(tag, manifest), message=message)

    if mismatch_strategy == "error":
        raise version_error(
            VersionErrorCode.VERSION_MISMATCH,
            f"{manifest_type} has {manifest}, latest tag {raw_tag} has {tag}",
        )
    if mismatch_strategy == "prefer-git":
        return VersionSource(
            origin="git-tag", version=tag, reason=VersionSourceReason.PREFER_GIT, mismatch=mismatch
        )
    if mismatch_strategy == "prefer-package":
        return VersionSource(
            origin="manifest",
            version=manifest,
            reason=VersionSourceReason.PREFER_MANIFEST,
            mismatch=mismatch,
        )

    higher = manifest if order > 0 else tag
    if mismatch_strategy == "warn":
        log.warning("%s\n\nUsing %s as the base for calculation.", message, higher)
    if order > 0:
        return VersionSource(
            origin="manifest",
            version=manifest,
            reason=VersionSourceReason.MANIFEST_NEWER,
            mismatch=mismatch,
        )
    return VersionSource(
        origin="git-tag", version=tag, reason=VersionSourceReason.GIT_TAG_NEWER, mismatch=mismatch
    )
