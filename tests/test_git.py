"""Tests for the subprocess git adapter with a recording runner."""

from pathlib import Path

import pytest
from fakes import FakeGitRunner

from devops_daily.adapters.vcs.subprocess_git import SubprocessGit, run_git
from devops_daily.domain.errors import GitError


def git(runner: FakeGitRunner) -> SubprocessGit:
    return SubprocessGit(cwd=Path("/repo"), runner=runner)


class TestCreateBranch:
    def test_creates_missing_branch(self) -> None:
        runner = FakeGitRunner({"show-ref": (1, "", "")})
        git(runner).create_branch("news-2025-w46")
        assert runner.commands == [
            ["git", "show-ref", "--verify", "--quiet", "refs/heads/news-2025-w46"],
            ["git", "checkout", "-b", "news-2025-w46"],
        ]

    def test_checks_out_existing_branch(self) -> None:
        runner = FakeGitRunner()
        git(runner).create_branch("news-2025-w46")
        assert runner.commands[-1] == ["git", "checkout", "news-2025-w46"]


def test_commit_and_push() -> None:
    runner = FakeGitRunner()
    git(runner).commit_and_push(Path("content/news/2025/week-46.md"), "Add digest", "news-2025-w46")
    assert runner.commands == [
        ["git", "add", "--", "content/news/2025/week-46.md"],
        ["git", "commit", "-m", "Add digest"],
        ["git", "push", "--set-upstream", "origin", "news-2025-w46"],
    ]


def test_failure_raises_git_error_with_stderr() -> None:
    runner = FakeGitRunner({"commit": (1, "", "nothing to commit")})
    with pytest.raises(GitError, match="Failed to commit \\(exit 1\\): nothing to commit"):
        git(runner).commit("msg")


def test_missing_git_binary() -> None:
    def boom(cmd, **kwargs):
        raise FileNotFoundError("git")

    with pytest.raises(GitError, match="Failed to list"):
        run_git(["status"], cwd=Path("."), operation_context="list", runner=boom)


class TestStatus:
    def test_current_branch(self) -> None:
        assert git(FakeGitRunner({"rev-parse": (0, "main\n", "")})).current_branch() == "main"
        assert git(FakeGitRunner({"rev-parse": (128, "", "not a repo")})).current_branch() == "unknown"

    def test_is_clean(self) -> None:
        assert git(FakeGitRunner()).is_clean()
        assert not git(FakeGitRunner({"status": (0, " M file.md\n", "")})).is_clean()
