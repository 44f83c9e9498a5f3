"""Tests for monover.git."""

from __future__ import annotations

import subprocess
from collections.abc import Iterator
from unittest.mock import MagicMock, patch

import pytest

from monover import git
from monover.errors import GitError, NoTagsFoundError


def _failure(stderr: str) -> subprocess.CalledProcessError:
    return subprocess.CalledProcessError(128, ["git"], output="", stderr=stderr)


@pytest.fixture
def mock_shell() -> Iterator[MagicMock]:
    with patch("monover.git.git") as shell:
        yield shell


class TestErrorMapping:
    """Tests for the translation of git failures."""

    def test_no_tags(self, mock_shell: MagicMock) -> None:
        mock_shell.side_effect = _failure("fatal: No names found, cannot describe anything.")

        with pytest.raises(NoTagsFoundError):
            git.describe_latest_tag()

    def test_tag_exists(self, mock_shell: MagicMock) -> None:
        mock_shell.side_effect = _failure("fatal: tag 'v1.0.0' already exists")

        with pytest.raises(GitError) as exc_info:
            git.create_tag("v1.0.0")

        assert exc_info.value.code == "TAG_ALREADY_EXISTS"

    def test_not_a_repository(self, mock_shell: MagicMock) -> None:
        mock_shell.side_effect = _failure("fatal: not a git repository (or any of the parent directories)")

        with pytest.raises(GitError) as exc_info:
            git.current_branch()

        assert exc_info.value.code == "NOT_GIT_REPO"

    def test_other_failure(self, mock_shell: MagicMock) -> None:
        mock_shell.side_effect = _failure("fatal: unable to write index.lock")

        with pytest.raises(GitError) as exc_info:
            git.current_branch()

        assert exc_info.value.code == "GIT_ERROR"
        assert "index.lock" in exc_info.value.message

    def test_missing_executable(self, mock_shell: MagicMock) -> None:
        mock_shell.side_effect = FileNotFoundError("git")

        with pytest.raises(GitError) as exc_info:
            git.current_branch()

        assert exc_info.value.code == "GIT_ERROR"


class TestListSemverTags:
    """Tests for list_semver_tags()."""

    def test_filters_non_semver(self, mock_shell: MagicMock) -> None:
        mock_shell.return_value = "v1.2.0\nnightly\npkg@v1.0.0-rc.1\nv1.2\n"

        assert git.list_semver_tags() == ["v1.2.0", "pkg@v1.0.0-rc.1"]

    def test_prefix(self, mock_shell: MagicMock) -> None:
        mock_shell.return_value = "v1.2.0\nrelease-2.0.0"

        assert git.list_semver_tags("release-") == ["release-2.0.0"]

    def test_no_tags_at_all(self, mock_shell: MagicMock) -> None:
        mock_shell.return_value = ""

        with pytest.raises(NoTagsFoundError):
            git.list_semver_tags()


class TestCommitQueries:
    """Tests for count_commits_since() and commit_messages_since()."""

    def test_count_since_ref(self, mock_shell: MagicMock) -> None:
        mock_shell.return_value = "3"

        assert git.count_commits_since("v1.0.0", "packages/a") == 3
        mock_shell.assert_called_once_with(
            "rev-list", "--count", "HEAD", "^v1.0.0", "--", "packages/a", cwd=None
        )

    def test_count_failure_is_zero(
        self, mock_shell: MagicMock, caplog: pytest.LogCaptureFixture
    ) -> None:
        mock_shell.side_effect = _failure("fatal: bad revision")

        assert git.count_commits_since("v9.9.9") == 0
        assert "Failed to get number of commits" in caplog.text

    def test_messages_are_split(self, mock_shell: MagicMock) -> None:
        mock_shell.return_value = "feat: b\n\nbody\n\x1e\nfix: a\n\x1e"

        assert git.commit_messages_since(None) == ["feat: b\n\nbody", "fix: a"]
        assert mock_shell.call_args.args[:2] == ("log", "HEAD")

    def test_messages_since_ref(self, mock_shell: MagicMock) -> None:
        mock_shell.return_value = ""

        assert git.commit_messages_since("v1.0.0") == []
        assert mock_shell.call_args.args[1] == "v1.0.0..HEAD"


class TestBranches:
    """Tests for last_merged_branch()."""

    def test_most_recent_match(self, mock_shell: MagicMock) -> None:
        mock_shell.return_value = "main\nFeature/login\nfix/typo"

        assert git.last_merged_branch(["feature", "fix"], "main") == "Feature/login"

    def test_no_match(self, mock_shell: MagicMock) -> None:
        mock_shell.return_value = "main\ndevelop"

        assert git.last_merged_branch(["feature"], "main") is None

    def test_no_patterns(self, mock_shell: MagicMock) -> None:
        assert git.last_merged_branch([], "main") is None
        mock_shell.assert_not_called()

    def test_git_failure(self, mock_shell: MagicMock) -> None:
        mock_shell.side_effect = _failure("fatal: malformed object name main")

        assert git.last_merged_branch(["feature"], "main") is None


class TestWrites:
    """Tests for verify_tag(), stage_files() and commit()."""

    def test_verify_tag(self, mock_shell: MagicMock) -> None:
        mock_shell.return_value = "abc123"
        assert git.verify_tag("v1.0.0")

        mock_shell.side_effect = _failure("")
        assert not git.verify_tag("v2.0.0")
        assert not git.verify_tag("  ")

    def test_stage_requires_files(self, mock_shell: MagicMock) -> None:
        with pytest.raises(GitError) as exc_info:
            git.stage_files([])

        assert exc_info.value.code == "NO_FILES"

    def test_commit_requires_message(self, mock_shell: MagicMock) -> None:
        with pytest.raises(GitError) as exc_info:
            git.commit("")

        assert exc_info.value.code == "NO_COMMIT_MESSAGE"

    def test_commit_skip_hooks(self, mock_shell: MagicMock) -> None:
        git.commit("chore(release): a 1.0.0", skip_hooks=True)

        mock_shell.assert_called_once_with(
            "commit", "-m", "chore(release): a 1.0.0", "--no-verify", cwd=None
        )

    def test_annotated_tag(self, mock_shell: MagicMock) -> None:
        git.create_tag("v1.0.0", "release 1.0.0")

        mock_shell.assert_called_once_with(
            "tag", "-a", "-m", "release 1.0.0", "v1.0.0", cwd=None
        )
