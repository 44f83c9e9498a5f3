"""CHANGELOG.md updates.

Every released package gets a new section built from the conventional
commits since its previous release. Two layouts are supported:

``keep-a-changelog``
    ``## [1.2.0] - 2024-05-01`` followed by Added / Changed / Deprecated /
    Removed / Fixed / Security lists.

``angular``
    ``## [1.2.0] (pkg) (2024-05-01)`` followed by Features, Bug Fixes,
    Performance Improvements and BREAKING CHANGES, grouped by scope.

New sections go above the newest released section, below an
``## [Unreleased]`` heading when the file has one.
"""

from __future__ import annotations

import datetime
import logging
import re
from collections.abc import Sequence
from pathlib import Path

from . import git
from .commits import ConventionalCommit, parse_commit
from .config import ChangelogFormat

log = logging.getLogger(__name__)

CHANGELOG_FILENAME = "CHANGELOG.md"

KEEP_A_CHANGELOG_HEADER = (
    "# Changelog\n"
    "\n"
    "All notable changes to this project will be documented in this file.\n"
    "\n"
    "The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.0.0/),\n"
    "and this project adheres to [Semantic Versioning](https://semver.org/spec/v2.0.0.html).\n"
    "\n"
)
ANGULAR_HEADER = "# Changelog\n\n"

KEEP_A_CHANGELOG_SECTIONS = ("Added", "Changed", "Deprecated", "Removed", "Fixed", "Security")
_SECTION_BY_TYPE = {
    "feat": "Added",
    "feature": "Added",
    "fix": "Fixed",
    "revert": "Removed",
    "deprecate": "Deprecated",
    "security": "Security",
}
_IGNORED_TYPES = frozenset({"test"})

ANGULAR_SECTIONS = (
    ("Features", frozenset({"feat", "feature"})),
    ("Bug Fixes", frozenset({"fix"})),
    ("Performance Improvements", frozenset({"perf"})),
)

_RELEASED_HEADING = re.compile(r"^## \[(?!Unreleased\])", re.MULTILINE | re.IGNORECASE)


def collect_commits(since: str | None, path: Path | None = None) -> list[ConventionalCommit]:
    """Conventional commits touching ``path`` since ``since``.

    Non-conventional messages and release commits are dropped.
    """
    parsed = (parse_commit(message) for message in git.commit_messages_since(since, path))
    return [c for c in parsed if c is not None and not c.is_release]


def _entry_text(commit: ConventionalCommit) -> str:
    text = f"**{commit.scope}**: {commit.subject}" if commit.scope else commit.subject
    return f"**BREAKING** {text}" if commit.breaking else text


def _keep_a_changelog_section(commit: ConventionalCommit) -> str | None:
    if commit.type in _IGNORED_TYPES:
        return None
    if commit.type == "chore" and "deprecat" in commit.subject.lower():
        return "Deprecated"
    return _SECTION_BY_TYPE.get(commit.type, "Changed")


def format_keep_a_changelog(
    version: str, date: str, commits: Sequence[ConventionalCommit]
) -> str:
    sections: dict[str, list[str]] = {name: [] for name in KEEP_A_CHANGELOG_SECTIONS}
    for commit in commits:
        section = _keep_a_changelog_section(commit)
        if section:
            sections[section].append(f"- {_entry_text(commit)}")

    parts = [f"## [{version}] - {date}"]
    parts.extend(f"### {name}\n\n" + "\n".join(lines) for name, lines in sections.items() if lines)
    return "\n\n".join(parts)


def _angular_lines(commits: Sequence[ConventionalCommit]) -> list[str]:
    by_scope: dict[str, list[str]] = {}
    for commit in commits:
        by_scope.setdefault(commit.scope or "", []).append(commit.subject)

    lines: list[str] = []
    for scope, subjects in by_scope.items():
        if scope:
            lines.append(f"* **{scope}:**")
            lines.extend(f"  * {subject}" for subject in subjects)
        else:
            lines.extend(f"* {subject}" for subject in subjects)
    return lines


def format_angular(
    version: str,
    date: str,
    commits: Sequence[ConventionalCommit],
    package_name: str | None = None,
) -> str:
    heading = f"## [{version}]"
    if package_name:
        heading += f" ({package_name})"
    parts = [f"{heading} ({date})"]

    for title, types in ANGULAR_SECTIONS:
        group = [c for c in commits if c.type in types]
        if group:
            parts.append(f"### {title}\n\n" + "\n".join(_angular_lines(group)))
    breaking = [c for c in commits if c.breaking]
    if breaking:
        parts.append("### BREAKING CHANGES\n\n" + "\n".join(_angular_lines(breaking)))
    return "\n\n".join(parts)


def format_section(
    fmt: ChangelogFormat,
    version: str,
    date: str,
    commits: Sequence[ConventionalCommit],
    package_name: str | None = None,
) -> str:
    """Render one release section, without trailing newline."""
    if fmt == "angular":
        return format_angular(version, date, commits, package_name)
    return format_keep_a_changelog(version, date, commits)


def insert_section(content: str, section: str, fmt: ChangelogFormat) -> str:
    """Place ``section`` above the newest released section of ``content``.

    Empty content starts from the header of ``fmt``.
    """
    if not content.strip():
        content = ANGULAR_HEADER if fmt == "angular" else KEEP_A_CHANGELOG_HEADER
    match = _RELEASED_HEADING.search(content)
    if match:
        return f"{content[: match.start()]}{section}\n\n{content[match.start():]}"
    return f"{content.rstrip()}\n\n{section}\n"


def update_changelog(
    directory: Path,
    version: str,
    commits: Sequence[ConventionalCommit],
    fmt: ChangelogFormat = "keep-a-changelog",
    *,
    package_name: str | None = None,
    dry_run: bool = False,
    today: datetime.date | None = None,
) -> Path:
    """Add a section for ``version`` to ``directory``/CHANGELOG.md.

    A release without any changelog-worthy commit still gets a section
    with a single "Update version" entry.

    Args:
        directory: Package directory holding the changelog.
        version: Version being released.
        commits: Commits that make up the release.
        fmt: Changelog layout.
        package_name: Shown in angular headings.
        dry_run: Log instead of writing.
        today: Release date, defaults to the current date.

    Returns:
        Path of the changelog, whether or not it was written.
    """
    path = directory / CHANGELOG_FILENAME
    if not commits:
        commits = [ConventionalCommit(type="chore", subject=f"Update version to {version}")]
    date = (today or datetime.date.today()).isoformat()
    section = format_section(fmt, version, date, commits, package_name)

    if dry_run:
        log.info("[DRY RUN] Would update changelog %s for %s", path, version)
        return path

    content = path.read_text(encoding="utf-8") if path.exists() else ""
    path.write_text(insert_section(content, section, fmt), encoding="utf-8")
    log.info("Updated changelog at %s", path)
    return path
