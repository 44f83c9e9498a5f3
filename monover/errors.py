"""Error types raised by monover.

Every error carries a machine-readable ``code`` and an optional list of
suggestions shown to the user. ``NoTagsFoundError`` is the distinct
"repository has no tags yet" outcome of the tag primitives; callers branch
on the exception type rather than on message text.
"""

from __future__ import annotations

import logging
from enum import Enum

log = logging.getLogger(__name__)


class VersionErrorCode(str, Enum):
    CONFIG_REQUIRED = "CONFIG_REQUIRED"
    PACKAGES_NOT_FOUND = "PACKAGES_NOT_FOUND"
    WORKSPACE_ERROR = "WORKSPACE_ERROR"
    INVALID_CONFIG = "INVALID_CONFIG"
    PACKAGE_NOT_FOUND = "PACKAGE_NOT_FOUND"
    VERSION_CALCULATION_ERROR = "VERSION_CALCULATION_ERROR"
    NO_VERSION_SOURCE = "NO_VERSION_SOURCE"
    VERSION_MISMATCH = "VERSION_MISMATCH"
    MANIFEST_ERROR = "MANIFEST_ERROR"


class GitErrorCode(str, Enum):
    NOT_GIT_REPO = "NOT_GIT_REPO"
    GIT_ERROR = "GIT_ERROR"
    TAG_ALREADY_EXISTS = "TAG_ALREADY_EXISTS"
    NO_FILES = "NO_FILES"
    NO_COMMIT_MESSAGE = "NO_COMMIT_MESSAGE"
    NO_TAGS = "NO_TAGS"


class MonoverError(Exception):
    """Base class for all monover errors."""

    def __init__(
        self, message: str, code: str, suggestions: list[str] | None = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.suggestions = list(suggestions or [])

    def log_error(self) -> None:
        """Log the message followed by numbered suggestions."""
        log.error(self.message)
        if self.suggestions:
            log.info("Suggested solutions:")
            for i, suggestion in enumerate(self.suggestions, start=1):
                log.info("%d. %s", i, suggestion)


class VersionError(MonoverError):
    """Raised when a version cannot be resolved or applied."""


class GitError(MonoverError):
    """Raised when a git operation fails."""


class NoTagsFoundError(GitError):
    """The repository has no tags to resolve against."""

    def __init__(self, details: str | None = None) -> None:
        message = _GIT_MESSAGES[GitErrorCode.NO_TAGS]
        if details:
            message = f"{message}: {details}"
        super().__init__(message, GitErrorCode.NO_TAGS.value)


_VERSION_MESSAGES: dict[VersionErrorCode, str] = {
    VersionErrorCode.CONFIG_REQUIRED: "Configuration is required",
    VersionErrorCode.PACKAGES_NOT_FOUND: "Failed to get packages information",
    VersionErrorCode.WORKSPACE_ERROR: "Failed to get workspace packages",
    VersionErrorCode.INVALID_CONFIG: "Invalid configuration",
    VersionErrorCode.PACKAGE_NOT_FOUND: "Package not found",
    VersionErrorCode.VERSION_CALCULATION_ERROR: "Failed to calculate version",
    VersionErrorCode.NO_VERSION_SOURCE: "No version source available",
    VersionErrorCode.VERSION_MISMATCH: "Manifest version and git tag disagree",
    VersionErrorCode.MANIFEST_ERROR: "Failed to update manifest",
}

_VERSION_SUGGESTIONS: dict[VersionErrorCode, list[str]] = {
    VersionErrorCode.NO_VERSION_SOURCE: [
        "Create an initial tag, e.g. git tag v0.1.0",
        "Add a version field to the package manifest",
        "Set initialVersion in the configuration",
    ],
    VersionErrorCode.VERSION_MISMATCH: [
        "Push missing tags: git push origin --tags",
        "Update the manifest version to match the latest tag",
        "Set mismatchStrategy to 'warn' to continue with the higher version",
    ],
}

_GIT_MESSAGES: dict[GitErrorCode, str] = {
    GitErrorCode.NOT_GIT_REPO: "Not a git repository",
    GitErrorCode.GIT_ERROR: "Git operation failed",
    GitErrorCode.TAG_ALREADY_EXISTS: "Git tag already exists",
    GitErrorCode.NO_FILES: "No files specified for commit",
    GitErrorCode.NO_COMMIT_MESSAGE: "Commit message is required",
    GitErrorCode.NO_TAGS: "No tags found in the repository",
}

_GIT_SUGGESTIONS: dict[GitErrorCode, list[str]] = {
    GitErrorCode.NOT_GIT_REPO: [
        "Initialize git repository with: git init",
        "Ensure you are in the correct directory",
    ],
    GitErrorCode.TAG_ALREADY_EXISTS: [
        "Delete the existing tag: git tag -d <tag-name>",
        "Use a different version by incrementing manually",
        "Check if this version was already released",
    ],
}


def version_error(code: VersionErrorCode, details: str | None = None) -> VersionError:
    """Build a VersionError with the standard message for ``code``."""
    message = _VERSION_MESSAGES[code]
    if details:
        message = f"{message}: {details}"
    return VersionError(message, code.value, _VERSION_SUGGESTIONS.get(code))


def git_error(code: GitErrorCode, details: str | None = None) -> GitError:
    """Build a GitError with the standard message for ``code``."""
    if code is GitErrorCode.NO_TAGS:
        return NoTagsFoundError(details)
    message = _GIT_MESSAGES[code]
    if details:
        message = f"{message}: {details}"
    return GitError(message, code.value, _GIT_SUGGESTIONS.get(code))
