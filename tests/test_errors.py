"""Tests for monover.errors."""

from __future__ import annotations

import pytest

from monover.errors import (
    GitError,
    GitErrorCode,
    NoTagsFoundError,
    VersionErrorCode,
    git_error,
    version_error,
)


class TestErrorFactories:
    """Tests for version_error() and git_error()."""

    def test_version_error_message_and_suggestions(self) -> None:
        exc = version_error(VersionErrorCode.NO_VERSION_SOURCE, "pkg-a")

        assert exc.code == "NO_VERSION_SOURCE"
        assert exc.message == "No version source available: pkg-a"
        assert exc.suggestions

    def test_git_error_without_details(self) -> None:
        exc = git_error(GitErrorCode.NO_FILES)

        assert isinstance(exc, GitError)
        assert str(exc) == "No files specified for commit"
        assert exc.suggestions == []

    def test_no_tags_is_its_own_type(self) -> None:
        exc = git_error(GitErrorCode.NO_TAGS)

        assert isinstance(exc, NoTagsFoundError)
        assert exc.code == "NO_TAGS"


class TestLogError:
    """Tests for MonoverError.log_error()."""

    def test_numbered_suggestions(self, caplog: pytest.LogCaptureFixture) -> None:
        exc = git_error(GitErrorCode.TAG_ALREADY_EXISTS, "v1.0.0")

        with caplog.at_level("INFO"):
            exc.log_error()

        assert caplog.messages[0] == "Git tag already exists: v1.0.0"
        assert caplog.messages[1] == "Suggested solutions:"
        assert caplog.messages[2].startswith("1. Delete the existing tag")
