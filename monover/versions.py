"""Version parsing and bumping utilities.

Handles conversion between version strings and semver objects, with
special handling for tag-style strings ("v1.2.3") and incomplete version
strings ("1.0" → "1.0.0"). All ordering is semver ordering, so a release
always sorts above its prereleases ("1.0.0" > "1.0.0-rc.1").
"""

from __future__ import annotations

import re
from typing import Literal, get_args

import semver

ReleaseType = Literal[
    "major", "minor", "patch", "premajor", "preminor", "prepatch", "prerelease"
]

RELEASE_TYPES: tuple[str, ...] = get_args(ReleaseType)
STANDARD_BUMP_TYPES: tuple[str, ...] = ("major", "minor", "patch")
NEXT_IDENTIFIER = "next"


def clean_version(raw: str | None) -> str | None:
    """Reduce a tag-like string to a canonical semver string.

    Strips surrounding whitespace, a leading "=" or "v" and any build
    metadata. Returns None when what remains is not valid semver.

    Examples:
        "v1.2.3" → "1.2.3"
        " =1.2.3-rc.1 " → "1.2.3-rc.1"
        "1.2.3+build.5" → "1.2.3"
        "1.2" → None
    """
    if raw is None:
        return None
    candidate = raw.strip().lstrip("=v").strip()
    if not semver.Version.is_valid(candidate):
        return None
    return str(semver.Version.parse(candidate).replace(build=None))


def parse_version(version_str: str) -> semver.Version:
    """Parse a version string into a semver.Version object.

    Handles incomplete versions by padding with zeros:
    - "1" → "1.0.0"
    - "1.2" → "1.2.0"
    - "v1.2.3-rc.1" → "1.2.3-rc.1"

    Raises:
        ValueError: If the string is not a version.
    """
    cleaned = version_str.strip().lstrip("=v")
    return semver.Version.parse(cleaned, optional_minor_and_patch=True)


def is_prerelease(version: str) -> bool:
    return parse_version(version).prerelease is not None


def compare_versions(a: str, b: str) -> int:
    """Return -1, 0 or 1 comparing ``a`` to ``b`` under semver ordering."""
    return parse_version(a).compare(parse_version(b))


def is_greater(a: str, b: str) -> bool:
    return compare_versions(a, b) > 0


def normalize_prerelease_identifier(identifier: str | bool | None) -> str | None:
    """Normalize a user supplied prerelease identifier.

    An empty string means "no identifier"; a bare flag (True) means "rc".
    """
    if identifier is True:
        return "rc"
    if not identifier:
        return None
    return str(identifier).strip() or None


def _first_prerelease(identifier: str | None) -> str:
    return f"{identifier}.0" if identifier else "0"


def _next_prerelease(version: semver.Version, identifier: str | None) -> semver.Version:
    current = version.prerelease
    if current is None:
        return version.bump_patch().replace(prerelease=_first_prerelease(identifier))
    if identifier and current.split(".")[0] != identifier:
        switched = version.replace(prerelease=_first_prerelease(identifier))
        # "1.0.0-rc.1" → "alpha" would sort lower; move to the next patch instead
        if switched.compare(version) > 0:
            return switched
        return version.bump_patch().replace(prerelease=_first_prerelease(identifier))
    if not re.search(r"\d", current):
        return version.replace(prerelease=f"{current}.0", build=None)
    return version.bump_prerelease()


def _on_boundary(version: semver.Version, release_type: str) -> bool:
    if release_type == "major":
        if version.finalize_version() == semver.Version(1, 0, 0) and (
            str(version.prerelease).split(".")[0] == NEXT_IDENTIFIER
        ):
            return False
        return version.minor == 0 and version.patch == 0
    if release_type == "minor":
        return version.patch == 0
    return True


def _bump_release(version: semver.Version, release_type: str) -> semver.Version:
    if version.prerelease is not None and _on_boundary(version, release_type):
        return version.finalize_version()
    if release_type == "major":
        return version.bump_major()
    if release_type == "minor":
        return version.bump_minor()
    return version.bump_patch()


def bump_version(
    current: str,
    release_type: ReleaseType | str,
    prerelease_identifier: str | None = None,
) -> str:
    """Increment ``current`` by ``release_type`` and return it as a string.

    A plain major/minor/patch bump of a prerelease that already sits on
    that release boundary (X.0.0-* for major, X.Y.0-* for minor, any
    prerelease for patch) promotes it to the stable release; otherwise the
    triplet is bumped and the prerelease dropped. A `next` preview of 1.0.0
    is treated as pointing past 1.0.0, so a major bump lands on 2.0.0. When
    an identifier is supplied alongside a plain bump, the first prerelease
    of the bumped version is produced.

    Examples:
        ("1.2.3", "minor") → "1.3.0"
        ("2.0.0-alpha.3", "major") → "2.0.0"
        ("1.2.3-rc.4", "minor") → "1.3.0"
        ("1.0.0-next.0", "major") → "2.0.0"
        ("1.3.0", "major", "next") → "2.0.0-next.0"
        ("2.0.0-next.0", "prerelease") → "2.0.0-next.1"
        ("1.0.0", "prerelease", "beta") → "1.0.1-beta.0"

    Raises:
        ValueError: If the version or the release type is invalid.
    """
    if release_type not in RELEASE_TYPES:
        raise ValueError(f"Unknown release type: {release_type}")

    version = parse_version(current).replace(build=None)
    identifier = normalize_prerelease_identifier(prerelease_identifier)

    if release_type in STANDARD_BUMP_TYPES and identifier:
        release_type = f"pre{release_type}"

    if release_type in STANDARD_BUMP_TYPES:
        bumped = _bump_release(version, release_type)
    elif release_type == "premajor":
        bumped = version.bump_major().replace(prerelease=_first_prerelease(identifier))
    elif release_type == "preminor":
        bumped = version.bump_minor().replace(prerelease=_first_prerelease(identifier))
    elif release_type == "prepatch":
        bumped = version.bump_patch().replace(prerelease=_first_prerelease(identifier))
    else:
        bumped = _next_prerelease(version, identifier)

    return str(bumped)
