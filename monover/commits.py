"""Conventional commit analysis.

Only the parts needed to recommend a release type are implemented: the
header ``type(scope)!: subject`` and the ``BREAKING CHANGE`` footer.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel

from . import git
from .errors import VersionErrorCode, version_error
from .versions import ReleaseType

log = logging.getLogger(__name__)

PRESETS = ("angular", "conventional-commits", "conventionalcommits")

MINOR_TYPES = frozenset({"feat"})
PATCH_TYPES = frozenset({"fix", "perf", "revert"})

_HEADER = re.compile(
    r"^(?P<type>[A-Za-z]+)(?:\((?P<scope>[^()\r\n]*)\))?(?P<breaking>!)?: (?P<subject>.+)$"
)
_BREAKING_FOOTER = re.compile(r"^BREAKING[ -]CHANGE: ", re.MULTILINE)


class ConventionalCommit(BaseModel):
    type: str
    scope: str | None = None
    subject: str
    breaking_marker: bool = False
    breaking_footer: bool = False

    @property
    def breaking(self) -> bool:
        return self.breaking_marker or self.breaking_footer

    @property
    def is_release(self) -> bool:
        return self.type == "chore" and self.scope == "release"


def parse_commit(message: str) -> ConventionalCommit | None:
    """Parse a full commit message.

    Returns None when the header does not follow the convention.
    """
    header, _, body = message.strip().partition("\n")
    match = _HEADER.match(header.strip())
    if not match:
        return None
    return ConventionalCommit(
        type=match.group("type").lower(),
        scope=match.group("scope") or None,
        subject=match.group("subject").strip(),
        breaking_marker=match.group("breaking") is not None,
        breaking_footer=bool(_BREAKING_FOOTER.search(body)),
    )


def release_type_for(commits: Iterable[ConventionalCommit], preset: str) -> ReleaseType | None:
    """Highest release type implied by ``commits``."""
    level = 0
    for commit in commits:
        if commit.is_release:
            continue
        # angular only recognises the footer
        breaking = commit.breaking_footer if preset == "angular" else commit.breaking
        if breaking:
            return "major"
        if commit.type in MINOR_TYPES:
            level = max(level, 2)
        elif commit.type in PATCH_TYPES:
            level = max(level, 1)
    return {2: "minor", 1: "patch"}.get(level)


def recommend_bump(
    preset: str, since_ref: str | None, path: Path | str | None = None
) -> ReleaseType | None:
    """Recommend a release type from the commits since ``since_ref``.

    Args:
        preset: Commit convention preset.
        since_ref: Tag or revision to analyse from; None analyses the
            whole history.
        path: Restrict to commits touching this path.

    Returns:
        "major", "minor" or "patch", or None when no commit warrants a
        release.

    Raises:
        VersionError: INVALID_CONFIG for an unknown preset.
        GitError: If the commit history cannot be read.
    """
    if preset not in PRESETS:
        raise version_error(VersionErrorCode.INVALID_CONFIG, f"Unknown preset: {preset}")

    messages = git.commit_messages_since(since_ref, path)
    parsed = [c for c in (parse_commit(m) for m in messages) if c is not None]
    log.debug(
        "Analysed %d commits (%d conventional) since %s",
        len(messages),
        len(parsed),
        since_ref or "the first commit",
    )
    return release_type_for(parsed, preset)
