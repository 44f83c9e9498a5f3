"""Tests for monover.sources."""

from __future__ import annotations

import logging

import pytest

from monover.errors import VersionError
from monover.models import ResolvedTag, VersionSourceReason
from monover.sources import get_best_version_source, mismatch_severity


def _tag(version: str, raw: str | None = None) -> ResolvedTag:
    return ResolvedTag(raw_tag=raw or f"v{version}", cleaned_version=version)


class TestGetBestVersionSource:
    """Tests for get_best_version_source()."""

    def test_no_tag_uses_manifest(self) -> None:
        source = get_best_version_source(None, "0.0.0")

        assert source.origin == "manifest"
        assert source.version == "0.0.0"
        assert source.reason is VersionSourceReason.NO_GIT_TAG

    def test_nothing_uses_initial_version(self) -> None:
        source = get_best_version_source(None, None, initial_version="0.0.1")

        assert source.origin == "initial"
        assert source.version == "0.0.1"
        assert source.reason is VersionSourceReason.NO_VERSION_AVAILABLE

    def test_nothing_and_no_initial_version_is_fatal(self) -> None:
        with pytest.raises(VersionError) as exc_info:
            get_best_version_source(None, None, initial_version=None)

        assert exc_info.value.code == "NO_VERSION_SOURCE"

    def test_tag_without_manifest(self) -> None:
        source = get_best_version_source(_tag("1.0.0"), None)

        assert source.origin == "git-tag"
        assert source.version == "1.0.0"
        assert source.reason is VersionSourceReason.NO_MANIFEST_VERSION

    def test_equal_versions_use_tag_without_warning(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="monover.sources"):
            source = get_best_version_source(_tag("1.0.0"), "1.0.0")

        assert source.origin == "git-tag"
        assert source.reason is VersionSourceReason.VERSIONS_EQUAL
        assert source.mismatch is None
        assert caplog.text == ""

    def test_manifest_ahead(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="monover.sources"):
            source = get_best_version_source(
                _tag("1.0.0"), "1.1.0", manifest_type="package.json"
            )

        assert source.origin == "manifest"
        assert source.version == "1.1.0"
        assert source.reason is VersionSourceReason.MANIFEST_NEWER
        assert source.mismatch is not None
        assert "AHEAD of git tags" in caplog.text
        assert "git push origin --tags" in caplog.text

    def test_tag_ahead(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="monover.sources"):
            source = get_best_version_source(_tag("2.0.0"), "1.0.0")

        assert source.origin == "git-tag"
        assert source.version == "2.0.0"
        assert source.reason is VersionSourceReason.GIT_TAG_NEWER
        assert "Git tag version is AHEAD" in caplog.text

    def test_unreachable_tag_is_ignored(self) -> None:
        source = get_best_version_source(_tag("2.0.0"), "1.0.0", tag_reachable=False)

        assert source.origin == "manifest"
        assert source.version == "1.0.0"
        assert source.reason is VersionSourceReason.GIT_TAG_UNREACHABLE

    def test_tag_with_unparseable_version_counts_as_missing(self) -> None:
        tag = ResolvedTag(raw_tag="release-candidate")

        source = get_best_version_source(tag, "1.0.0")

        assert source.origin == "manifest"

    def test_invalid_manifest_version_is_ignored(self) -> None:
        source = get_best_version_source(_tag("1.0.0"), "not.a.version")

        assert source.origin == "git-tag"
        assert source.reason is VersionSourceReason.NO_MANIFEST_VERSION


class TestMismatchStrategies:
    """Tests for the mismatch_strategy option."""

    def test_ignore_chooses_higher_silently(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="monover.sources"):
            source = get_best_version_source(
                _tag("1.0.0"), "1.2.0", mismatch_strategy="ignore"
            )

        assert source.version == "1.2.0"
        assert caplog.text == ""

    def test_error_raises(self) -> None:
        with pytest.raises(VersionError) as exc_info:
            get_best_version_source(_tag("1.0.0"), "1.2.0", mismatch_strategy="error")

        assert exc_info.value.code == "VERSION_MISMATCH"
        assert exc_info.value.suggestions

    def test_prefer_git(self) -> None:
        source = get_best_version_source(
            _tag("1.0.0"), "1.2.0", mismatch_strategy="prefer-git"
        )

        assert source.origin == "git-tag"
        assert source.version == "1.0.0"
        assert source.reason is VersionSourceReason.PREFER_GIT

    def test_prefer_package(self) -> None:
        source = get_best_version_source(
            _tag("2.0.0"), "1.2.0", mismatch_strategy="prefer-package"
        )

        assert source.origin == "manifest"
        assert source.version == "1.2.0"
        assert source.reason is VersionSourceReason.PREFER_MANIFEST

    def test_equal_versions_ignore_strategy(self) -> None:
        source = get_best_version_source(
            _tag("1.0.0"), "1.0.0", mismatch_strategy="error"
        )

        assert source.reason is VersionSourceReason.VERSIONS_EQUAL


class TestMismatchSeverity:
    """Tests for mismatch_severity()."""

    @pytest.mark.parametrize(
        ("tag", "manifest", "expected"),
        [
            ("1.0.0", "2.0.0", "major"),
            ("1.0.0", "1.1.0", "major"),
            ("1.0.0", "1.0.3", "minor"),
            ("1.0.0", "1.0.0-rc.1", "major"),
            ("1.0.0-rc.1", "1.0.0-rc.2", "minor"),
        ],
    )
    def test_severity(self, tag: str, manifest: str, expected: str) -> None:
        assert mismatch_severity(tag, manifest) == expected
