"""Git primitives used during version resolution and release.

Each function runs one git command through ``shell.git`` and translates
failures into ``GitError``. This is the only module that looks at git's
error output: "the repository has no tags" surfaces as ``NoTagsFoundError``
so callers can treat it as an expected empty result.
"""

from __future__ import annotations

import logging
import re
import subprocess
from collections.abc import Sequence
from pathlib import Path

from .errors import GitError, GitErrorCode, git_error
from .shell import git

log = logging.getLogger(__name__)

# A tag is "semver shaped" when it ends with MAJOR.MINOR.PATCH[-pre][+build]
SEMVER_TAIL = re.compile(
    r"(?:0|[1-9]\d*)\.(?:0|[1-9]\d*)\.(?:0|[1-9]\d*)"
    r"(?:-[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)

_NO_TAGS_MARKERS = ("No names found", "No tags can describe")


def _run(*args: str, cwd: Path | None = None) -> str:
    try:
        return git(*args, cwd=cwd)
    except subprocess.CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()
        if any(marker in stderr for marker in _NO_TAGS_MARKERS):
            raise git_error(GitErrorCode.NO_TAGS, stderr) from exc
        if "already exists" in stderr:
            raise git_error(GitErrorCode.TAG_ALREADY_EXISTS, stderr) from exc
        if "not a git repository" in stderr.lower():
            raise git_error(GitErrorCode.NOT_GIT_REPO, stderr) from exc
        raise git_error(GitErrorCode.GIT_ERROR, stderr or str(exc)) from exc
    except FileNotFoundError as exc:
        raise git_error(GitErrorCode.GIT_ERROR, "git executable not found") from exc


def is_git_repository(directory: Path) -> bool:
    try:
        return _run("rev-parse", "--is-inside-work-tree", cwd=directory) == "true"
    except GitError:
        return False


def list_semver_tags(prefix: str | None = None) -> list[str]:
    """List semver-shaped tags, newest first.

    Args:
        prefix: When given, only tags starting with this prefix are kept.

    Returns:
        Tag names in chronological order (most recently created first).
        Empty when tags exist but none is semver shaped.

    Raises:
        NoTagsFoundError: If the repository has no tags at all.
        GitError: If git fails.
    """
    output = _run("tag", "--list", "--sort=-creatordate")
    tags = [t.strip() for t in output.splitlines() if t.strip()]
    if not tags:
        raise git_error(GitErrorCode.NO_TAGS)
    return [
        t
        for t in tags
        if SEMVER_TAIL.search(t) and (not prefix or t.startswith(prefix))
    ]


def describe_latest_tag() -> str:
    """Return the nearest tag reachable from HEAD.

    Raises:
        NoTagsFoundError: If no tag is reachable.
    """
    return _run("describe", "--tags", "--abbrev=0")


def verify_tag(tag: str) -> bool:
    """Check that ``tag`` exists and resolves to a commit."""
    if not tag.strip():
        return False
    try:
        _run("rev-parse", "--verify", "--quiet", f"refs/tags/{tag}^{{commit}}")
    except GitError as exc:
        log.debug("Tag %s could not be verified: %s", tag, exc)
        return False
    return True


def count_commits_since(ref: str | None, path: Path | str | None = None) -> int:
    """Count commits on HEAD since ``ref`` touching ``path``.

    With ``ref`` None the whole history of HEAD is counted. Any failure
    counts as zero commits.
    """
    args = ["rev-list", "--count", "HEAD"]
    if ref:
        args.append(f"^{ref}")
    if path:
        args.extend(["--", str(path)])
    try:
        return int(_run(*args) or 0)
    except (GitError, ValueError) as exc:
        log.warning("Failed to get number of commits since last tag: %s", exc)
        return 0


def commit_messages_since(ref: str | None, path: Path | str | None = None) -> list[str]:
    """Return full commit messages on HEAD since ``ref``, newest first."""
    revision = f"{ref}..HEAD" if ref else "HEAD"
    args = ["log", revision, "--format=%B%x1e"]
    if path:
        args.extend(["--", str(path)])
    output = _run(*args)
    return [m.strip() for m in output.split("\x1e") if m.strip()]


def current_branch() -> str:
    return _run("rev-parse", "--abbrev-ref", "HEAD")


def last_merged_branch(patterns: Sequence[str], base_branch: str) -> str | None:
    """Find the most recently committed branch merged into ``base_branch``
    whose name starts with one of ``patterns`` followed by a slash.

    Returns None when nothing matches or git fails.
    """
    if not patterns:
        return None
    try:
        output = _run(
            "for-each-ref",
            "--sort=-committerdate",
            "--format=%(refname:short)",
            "refs/heads",
            "--merged",
            base_branch,
        )
    except GitError as exc:
        log.warning("Error while getting the last branch name: %s", exc)
        return None

    alternatives = "|".join(re.escape(p) for p in patterns)
    matcher = re.compile(rf"(?:{alternatives})/.*", re.IGNORECASE)
    for line in output.splitlines():
        match = matcher.search(line.strip())
        if match:
            return match.group(0)
    return None


def create_tag(tag: str, message: str = "") -> None:
    """Create an annotated tag on HEAD."""
    _run("tag", "-a", "-m", message or tag, tag)


def stage_files(paths: Sequence[Path | str]) -> None:
    if not paths:
        raise git_error(GitErrorCode.NO_FILES)
    _run("add", *(str(p) for p in paths))


def commit(message: str, skip_hooks: bool = False) -> None:
    if not message:
        raise git_error(GitErrorCode.NO_COMMIT_MESSAGE)
    args = ["commit", "-m", message]
    if skip_hooks:
        args.append("--no-verify")
    _run(*args)
