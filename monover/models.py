"""Data models for monover.

These Pydantic models represent the core data structures used throughout
version resolution and the release run. They are created fresh for each
run and never persisted; persistence happens through manifests and tags.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ManifestType = Literal["package.json", "Cargo.toml", "pyproject.toml"]
VersionOrigin = Literal["git-tag", "manifest", "initial"]


class Package(BaseModel):
    """A single package in the workspace.

    Attributes:
        name: Package name from its manifest. This is the package identity.
        directory: Absolute path to the package directory.
        manifest_version: Version recorded in the package manifest, if any.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    directory: Path
    manifest_version: str | None = None


class Workspace(BaseModel):
    """All packages discovered in a repository.

    Attributes:
        root: Repository root directory.
        packages: Workspace member packages in discovery order.
        root_package: The root manifest's package, when the root carries a
            versioned manifest of its own. Used by synced releases.
    """

    root: Path
    packages: list[Package] = Field(default_factory=list)
    root_package: Package | None = None


class ManifestVersion(BaseModel):
    """A version read from a manifest file."""

    version: str
    manifest_path: Path
    manifest_type: ManifestType


class ResolvedTag(BaseModel):
    """A git tag selected as the latest release for a scope.

    Attributes:
        raw_tag: Tag name exactly as it exists in git.
        cleaned_version: Semver string extracted from the tag, or None if
            the tag does not contain a valid version.
        package_scope: Package the tag belongs to, or None for global tags.
    """

    model_config = ConfigDict(frozen=True)

    raw_tag: str
    cleaned_version: str | None = None
    package_scope: str | None = None


class VersionSourceReason(str, Enum):
    NO_GIT_TAG = "No git tag provided"
    GIT_TAG_UNREACHABLE = "Git tag unreachable"
    NO_MANIFEST_VERSION = "Git tag exists, no package version to compare"
    MANIFEST_NEWER = "Package version is newer"
    GIT_TAG_NEWER = "Git tag is newer"
    VERSIONS_EQUAL = "Versions equal, using git tag"
    PREFER_GIT = "Using git tag per strategy"
    PREFER_MANIFEST = "Using package version per strategy"
    NO_VERSION_AVAILABLE = "No git tag or package version available"


class VersionMismatch(BaseModel):
    """Describes a disagreement between the manifest and the latest tag.

    Attributes:
        severity: "major" when the major or minor component differs or a
            stable tag faces a prerelease manifest of the same release,
            "minor" otherwise.
        message: Human readable explanation including likely causes.
    """

    severity: Literal["major", "minor"]
    message: str


class VersionSource(BaseModel):
    """The authoritative current version used for a calculation."""

    origin: VersionOrigin
    version: str
    reason: VersionSourceReason
    mismatch: VersionMismatch | None = None


class VersionDecision(BaseModel):
    """Outcome of a version calculation.

    ``next_version`` is None when no bump is warranted. That state is
    terminal for the package in the current run.

    ``since_ref`` is the tag the release is measured from, None when the
    whole history counts.
    """

    next_version: str | None = None
    release_type: str | None = None
    source: VersionSource | None = None
    reason: str = ""
    since_ref: str | None = None

    @property
    def is_bump(self) -> bool:
        return self.next_version is not None

    @classmethod
    def none(cls, reason: str, source: VersionSource | None = None) -> VersionDecision:
        return cls(reason=reason, source=source)

    @classmethod
    def bump(
        cls,
        next_version: str,
        *,
        release_type: str | None = None,
        source: VersionSource | None = None,
        reason: str = "",
        since_ref: str | None = None,
    ) -> VersionDecision:
        return cls(
            next_version=next_version,
            release_type=release_type,
            source=source,
            reason=reason,
            since_ref=since_ref,
        )


class ReleaseUnit(BaseModel):
    """One package's outcome in a release run."""

    package: str
    next_version: str
    tag_name: str | None = None
    manifest_paths: list[Path] = Field(default_factory=list)
    changelog_path: Path | None = None


class ReleaseResult(BaseModel):
    """Summary of a release run.

    Built incrementally while the run proceeds, so callers can report
    partial success when some steps were skipped after caught errors.
    """

    updated_packages: list[ReleaseUnit] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    commit_message: str | None = None

    @property
    def manifest_paths(self) -> list[Path]:
        """Every touched manifest path, de-duplicated, in write order."""
        seen: dict[Path, None] = {}
        for unit in self.updated_packages:
            for path in unit.manifest_paths:
                seen.setdefault(path, None)
        return list(seen)

    @property
    def staged_paths(self) -> list[Path]:
        """Manifests followed by the changelogs written in this run."""
        changelogs = [u.changelog_path for u in self.updated_packages if u.changelog_path]
        return self.manifest_paths + [p for p in changelogs if p not in self.manifest_paths]
