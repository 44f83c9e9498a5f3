"""Tests for monover.versions."""

from __future__ import annotations

import pytest

from monover.versions import (
    bump_version,
    clean_version,
    compare_versions,
    is_greater,
    is_prerelease,
    normalize_prerelease_identifier,
    parse_version,
)


class TestCleanVersion:
    """Tests for clean_version()."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("1.2.3", "1.2.3"),
            ("v1.2.3", "1.2.3"),
            (" =1.2.3-rc.1 ", "1.2.3-rc.1"),
            ("1.2.3+build.5", "1.2.3"),
        ],
    )
    def test_valid(self, raw: str, expected: str) -> None:
        assert clean_version(raw) == expected

    @pytest.mark.parametrize("raw", ["1.2", "pkg@1.2.3", "latest", "", None])
    def test_invalid_returns_none(self, raw: str | None) -> None:
        assert clean_version(raw) is None


class TestParseVersion:
    """Tests for parse_version()."""

    def test_pads_incomplete_versions(self) -> None:
        assert str(parse_version("1")) == "1.0.0"
        assert str(parse_version("1.2")) == "1.2.0"

    def test_keeps_prerelease(self) -> None:
        assert str(parse_version("v1.2.3-rc.1")) == "1.2.3-rc.1"

    def test_invalid_raises(self) -> None:
        with pytest.raises(ValueError):
            parse_version("not-a-version")


class TestComparisons:
    """Tests for compare_versions(), is_greater() and is_prerelease()."""

    def test_release_sorts_above_prerelease(self) -> None:
        assert is_greater("1.0.0", "1.0.0-rc.9")
        assert compare_versions("1.0.0-rc.1", "1.0.0") == -1

    def test_equal(self) -> None:
        assert compare_versions("v1.2.3", "1.2.3") == 0

    def test_is_prerelease(self) -> None:
        assert is_prerelease("1.0.0-next.0")
        assert not is_prerelease("1.0.0")


class TestNormalizePrereleaseIdentifier:
    """Tests for normalize_prerelease_identifier()."""

    def test_flag_means_rc(self) -> None:
        assert normalize_prerelease_identifier(True) == "rc"

    @pytest.mark.parametrize("value", [None, "", "  ", False])
    def test_empty_means_none(self, value: str | bool | None) -> None:
        assert normalize_prerelease_identifier(value) is None

    def test_keeps_identifier(self) -> None:
        assert normalize_prerelease_identifier("next") == "next"


class TestBumpVersion:
    """Tests for bump_version()."""

    @pytest.mark.parametrize(
        ("current", "release_type", "expected"),
        [
            ("1.2.3", "major", "2.0.0"),
            ("1.2.3", "minor", "1.3.0"),
            ("1.2.3", "patch", "1.2.4"),
            ("0.0.0", "minor", "0.1.0"),
            ("1.2.3", "premajor", "2.0.0-0"),
            ("1.2.3", "prerelease", "1.2.4-0"),
        ],
    )
    def test_plain_bumps(self, current: str, release_type: str, expected: str) -> None:
        assert bump_version(current, release_type) == expected

    @pytest.mark.parametrize(
        ("current", "release_type", "expected"),
        [
            ("1.2.3-rc.4", "patch", "1.2.3"),
            ("1.3.0-rc.1", "minor", "1.3.0"),
            ("1.3.0-rc.1", "patch", "1.3.0"),
            ("2.0.0-alpha.3", "major", "2.0.0"),
            ("1.0.0-beta.1", "major", "1.0.0"),
            ("1.2.3-rc.4", "minor", "1.3.0"),
            ("1.2.0-rc.1", "major", "2.0.0"),
            ("1.0.0-beta.1", "minor", "1.0.0"),
            ("1.0.0-next.0", "major", "2.0.0"),
        ],
    )
    def test_plain_bump_of_prerelease_drops_suffix(
        self, current: str, release_type: str, expected: str
    ) -> None:
        """A prerelease on the requested boundary is promoted, anything
        else is bumped; the result is always stable."""
        result = bump_version(current, release_type)
        assert result == expected
        assert not is_prerelease(result)

    def test_plain_bump_with_identifier_starts_prerelease(self) -> None:
        assert bump_version("1.3.0", "major", "next") == "2.0.0-next.0"
        assert bump_version("1.3.0", "patch", "rc") == "1.3.1-rc.0"

    def test_pre_bumps_with_identifier(self) -> None:
        assert bump_version("1.2.3", "preminor", "beta") == "1.3.0-beta.0"
        assert bump_version("1.2.3", "prepatch", "alpha") == "1.2.4-alpha.0"

    def test_prerelease_increments_counter(self) -> None:
        assert bump_version("2.0.0-next.0", "prerelease") == "2.0.0-next.1"
        assert bump_version("2.0.0-next.0", "prerelease", "next") == "2.0.0-next.1"

    def test_prerelease_of_stable_starts_next_patch(self) -> None:
        assert bump_version("1.0.0", "prerelease", "beta") == "1.0.1-beta.0"

    def test_prerelease_switches_identifier_upwards(self) -> None:
        assert bump_version("1.0.0-alpha.3", "prerelease", "beta") == "1.0.0-beta.0"

    def test_prerelease_switch_never_goes_backwards(self) -> None:
        result = bump_version("1.0.0-rc.1", "prerelease", "alpha")
        assert result == "1.0.1-alpha.0"
        assert is_greater(result, "1.0.0-rc.1")

    def test_prerelease_without_number_gets_counter(self) -> None:
        assert bump_version("1.0.0-beta", "prerelease") == "1.0.0-beta.0"

    def test_build_metadata_is_dropped(self) -> None:
        assert bump_version("1.2.3+build.1", "patch") == "1.2.4"

    def test_unknown_release_type(self) -> None:
        with pytest.raises(ValueError, match="Unknown release type"):
            bump_version("1.0.0", "huge")

    @pytest.mark.parametrize(
        "current", ["0.0.1", "1.2.3", "1.0.0-next.0", "3.4.5-beta.2", "10.0.0-rc"]
    )
    @pytest.mark.parametrize("release_type", ["major", "minor", "patch"])
    def test_bump_is_always_greater(self, current: str, release_type: str) -> None:
        assert is_greater(bump_version(current, release_type), current)
